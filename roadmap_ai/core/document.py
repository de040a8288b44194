"""Domain records for the roadmap generation pipeline.

Defines the data structures flowing through retrieval (knowledge
documents and their scores), generation requests, and the envelopes the
pipeline hands back to callers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, Optional, TypeVar
from uuid import uuid4

T = TypeVar("T")


class InvalidInputError(ValueError):
    """Caller-supplied input was rejected before any generation ran."""



class ExperienceLevel(str, Enum):
    """Target learner level for a generated roadmap."""

    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"
    EXPERT = "expert"


@dataclass(frozen=True, slots=True)
class KnowledgeDocument:
    """A curated knowledge-base entry used to ground generation prompts."""

    title: str
    content: str
    category: str = "general"
    tags: tuple[str, ...] = ()
    difficulty: str = "beginner"
    references: tuple[str, ...] = ()
    doc_id: str = field(default_factory=lambda: str(uuid4()))

    def __post_init__(self) -> None:
        if not self.title.strip():
            raise InvalidInputError("Knowledge document title cannot be empty")

    def embedding_text(self, char_limit: int) -> str:
        """Text embedded for similarity search; only the body is truncated."""
        parts = [self.title, self.category, self.content[:char_limit], " ".join(self.tags)]
        return " ".join(part for part in parts if part)

    @classmethod
    def from_dict(cls, data: dict) -> KnowledgeDocument:
        """Build a document from a loosely-typed record (missing fields default)."""
        tags = data.get("tags")
        references = data.get("references")
        kwargs = {
            "title": str(data.get("title") or ""),
            "content": str(data.get("content") or ""),
            "category": str(data.get("category") or "general"),
            "tags": tuple(str(t) for t in tags) if isinstance(tags, list) else (),
            "difficulty": str(data.get("difficulty") or "beginner"),
            "references": (
                tuple(str(r) for r in references) if isinstance(references, list) else ()
            ),
        }
        if data.get("id"):
            kwargs["doc_id"] = str(data["id"])
        return cls(**kwargs)  # type: ignore[arg-type]


@dataclass(frozen=True, slots=True)
class ScoredDocument:
    """A knowledge document paired with its cosine similarity to a query."""

    document: KnowledgeDocument
    score: float

    def __post_init__(self) -> None:
        # small tolerance for float error on (anti)parallel vectors
        if not -1.0 - 1e-6 <= self.score <= 1.0 + 1e-6:
            raise ValueError(f"Score must be between -1 and 1, got {self.score}")


@dataclass(frozen=True, slots=True)
class GenerationRequest:
    """What to generate: a topic plus optional grounding hints."""

    topic: str
    experience_level: Optional[ExperienceLevel] = None
    context: Optional[str] = None
    documents: tuple[KnowledgeDocument, ...] = ()

    def __post_init__(self) -> None:
        if not self.topic.strip():
            raise InvalidInputError("Generation topic cannot be empty")


@dataclass(frozen=True, slots=True)
class CareerProfile:
    """User-supplied career goals for full roadmap generation."""

    career_title: str
    career_field: str
    experience_level: ExperienceLevel = ExperienceLevel.BEGINNER
    career_description: str = ""
    timeframe: str = "3-6 months"
    learning_focus: str = "balanced"
    current_skills: str = ""
    preferred_resources: tuple[str, ...] = (
        "videos",
        "projects",
        "communities",
        "tutorials",
        "mentorship",
    )

    def __post_init__(self) -> None:
        if not self.career_title.strip():
            raise InvalidInputError("Career title cannot be empty")

    @property
    def topic(self) -> str:
        if self.career_field.strip():
            return f"{self.career_title} in {self.career_field}"
        return self.career_title


class ErrorKind(str, Enum):
    """Why a generation call failed."""

    UPSTREAM_EMPTY = "upstream_empty"
    UPSTREAM_PARSE = "upstream_parse"
    UPSTREAM_UNAVAILABLE = "upstream_unavailable"
    STRUCTURAL_VIOLATION = "structural_violation"


@dataclass(frozen=True, slots=True)
class GenerationError:
    """A failure surfaced to the caller after all attempts were used."""

    message: str
    detail: str
    kind: ErrorKind
    attempts: int = 0

    def __str__(self) -> str:
        return f"{self.message}: {self.detail}"


@dataclass(frozen=True, slots=True)
class Generated(Generic[T]):
    """A generated artifact plus whether it was produced by degradation.

    ``degraded`` is True when any part of ``value`` comes from placeholder
    padding or a fallback template rather than the model; ``notes`` says
    which parts.
    """

    value: T
    degraded: bool = False
    attempts: int = 1
    notes: tuple[str, ...] = ()
