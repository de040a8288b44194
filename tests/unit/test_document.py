"""Tests for domain records."""

import pytest
from hypothesis import given, strategies as st

from roadmap_ai.core.document import (
    CareerProfile,
    ErrorKind,
    ExperienceLevel,
    Generated,
    GenerationError,
    GenerationRequest,
    InvalidInputError,
    KnowledgeDocument,
    ScoredDocument,
)


class TestKnowledgeDocument:
    def test_create_document(self) -> None:
        doc = KnowledgeDocument(title="SQL", content="Joins and indexes")
        assert doc.category == "general"
        assert doc.difficulty == "beginner"
        assert doc.doc_id  # UUID generated

    def test_empty_title_raises(self) -> None:
        with pytest.raises(ValueError, match="title cannot be empty"):
            KnowledgeDocument(title="  ", content="body")

    def test_embedding_text_truncates_body_only(self) -> None:
        doc = KnowledgeDocument(
            title="Title", content="x" * 50, category="cat", tags=("a", "b")
        )
        text = doc.embedding_text(char_limit=10)
        assert text == "Title cat " + "x" * 10 + " a b"

    def test_from_dict_defaults(self) -> None:
        doc = KnowledgeDocument.from_dict({"title": "Docker", "tags": "not-a-list"})
        assert doc.content == ""
        assert doc.category == "general"
        assert doc.tags == ()

    def test_from_dict_keeps_id(self) -> None:
        doc = KnowledgeDocument.from_dict(
            {"id": "doc-7", "title": "Docker", "references": ["https://docs.docker.com"]}
        )
        assert doc.doc_id == "doc-7"
        assert doc.references == ("https://docs.docker.com",)

    @given(st.text(min_size=1, max_size=100).filter(lambda x: x.strip()))
    def test_valid_title_accepted(self, title: str) -> None:
        doc = KnowledgeDocument(title=title, content="body")
        assert doc.title == title


class TestScoredDocument:
    def test_score_out_of_range_raises(self) -> None:
        doc = KnowledgeDocument(title="T", content="c")
        with pytest.raises(ValueError, match="between -1 and 1"):
            ScoredDocument(document=doc, score=1.5)

    @given(st.floats(min_value=-1.0, max_value=1.0))
    def test_valid_scores(self, score: float) -> None:
        doc = KnowledgeDocument(title="T", content="c")
        assert ScoredDocument(document=doc, score=score).score == score


class TestGenerationRequest:
    def test_empty_topic_raises(self) -> None:
        with pytest.raises(InvalidInputError, match="topic cannot be empty"):
            GenerationRequest(topic="")

    def test_optional_fields(self) -> None:
        request = GenerationRequest(
            topic="DevOps", experience_level=ExperienceLevel.ADVANCED, context="moving from QA"
        )
        assert request.documents == ()
        assert request.experience_level == ExperienceLevel.ADVANCED


class TestCareerProfile:
    def test_topic_combines_title_and_field(self) -> None:
        profile = CareerProfile(career_title="Data Engineer", career_field="Fintech")
        assert profile.topic == "Data Engineer in Fintech"

    def test_topic_without_field(self) -> None:
        profile = CareerProfile(career_title="Data Engineer", career_field="")
        assert profile.topic == "Data Engineer"

    def test_defaults(self) -> None:
        profile = CareerProfile(career_title="Designer", career_field="Games")
        assert profile.timeframe == "3-6 months"
        assert profile.learning_focus == "balanced"
        assert "mentorship" in profile.preferred_resources


class TestEnvelopes:
    def test_generated_defaults(self) -> None:
        generated = Generated(value="text")
        assert generated.degraded is False
        assert generated.attempts == 1
        assert generated.notes == ()

    def test_generation_error_str(self) -> None:
        error = GenerationError(
            message="Failed to generate quiz",
            detail="upstream_empty: empty response",
            kind=ErrorKind.UPSTREAM_EMPTY,
            attempts=3,
        )
        assert str(error) == "Failed to generate quiz: upstream_empty: empty response"
