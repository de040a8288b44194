"""Shared test doubles and fixtures."""

from __future__ import annotations

import json
from typing import Any, Optional, Union

import pytest

from roadmap_ai.core.config import MockConfig, RoadmapConfig
from roadmap_ai.core.document import KnowledgeDocument
from roadmap_ai.core.embeddings import EmbeddingProvider, MockEmbeddingProvider
from roadmap_ai.core.llm import CompletionRequest, LLMProvider
from roadmap_ai.core.pipeline import RoadmapPipeline
from roadmap_ai.core.result import Err, Ok, Result
from roadmap_ai.retrieval.knowledge import KnowledgeBase

Scripted = Union[str, dict, list, Exception]


class ScriptedLLMProvider(LLMProvider):
    """Replays a fixed list of responses and records every request.

    Dicts and lists are sent as JSON text; an Exception instance is
    reported as a provider error. The last response repeats once the
    script runs out.
    """

    name = "scripted"

    def __init__(self, responses: list[Scripted]) -> None:
        self._responses = list(responses)
        self.requests: list[CompletionRequest] = []

    @property
    def calls(self) -> int:
        return len(self.requests)

    async def complete(self, request: CompletionRequest) -> Result[str, str]:
        self.requests.append(request)
        index = min(len(self.requests), len(self._responses)) - 1
        response = self._responses[index]
        if isinstance(response, Exception):
            return Err(str(response))
        if isinstance(response, (dict, list)):
            return Ok(json.dumps(response))
        return Ok(response)


class CountingEmbeddingProvider(MockEmbeddingProvider):
    """Mock embeddings that count batch and query calls."""

    def __init__(self, dimensions: int = 64) -> None:
        super().__init__(dimensions=dimensions)
        self.batch_calls = 0
        self.embedded_texts: list[str] = []
        self.query_calls = 0

    async def embed_texts(self, texts: list[str]) -> Result[list[list[float]], str]:
        self.batch_calls += 1
        self.embedded_texts.extend(texts)
        return await super().embed_texts(texts)

    async def embed_query(self, query: str) -> Result[list[float], str]:
        self.query_calls += 1
        return await super().embed_query(query)


class FailingEmbeddingProvider(EmbeddingProvider):
    """Embedding provider whose every call fails."""

    def __init__(self, raise_error: bool = False) -> None:
        self._raise = raise_error

    @property
    def dimensions(self) -> int:
        return 8

    async def embed_texts(self, texts: list[str]) -> Result[list[list[float]], str]:
        if self._raise:
            raise RuntimeError("connection reset")
        return Err("rate limited")

    async def embed_query(self, query: str) -> Result[list[float], str]:
        if self._raise:
            raise RuntimeError("connection reset")
        return Err("rate limited")


def structure_payload(
    sections: int = 4, subtasks: int = 3, title: Optional[str] = "Data Engineer"
) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "requiredSkills": ["SQL", "Python"],
        "sections": [
            {
                "title": f"Stage {i + 1}",
                "progress": 0,
                "subtasks": [
                    {"title": f"Task {i + 1}.{j + 1}", "completed": False, "id": f"{i}-{j}"}
                    for j in range(subtasks)
                ],
            }
            for i in range(sections)
        ],
    }
    if title is not None:
        payload["title"] = title
    return payload


def detail_payload(**overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "description": "## Window functions\n\n" + "Window functions compute values over rows. " * 5,
        "resources": [
            {
                "title": f"Resource {i}",
                "url": f"https://example.org/{i}",
                "type": "article",
                "description": f"Reading {i}",
            }
            for i in range(5)
        ],
        "practicalExercises": ["Rank rows", "Compute running totals", "Find gaps"],
        "validationCriteria": ["Explains frames", "Uses PARTITION BY", "Reads query plans"],
        "prerequisites": ["Basic SQL"],
    }
    payload.update(overrides)
    return payload


def path_payload(lessons: int = 3, exercises: int = 2, questions: int = 5) -> dict[str, Any]:
    return {
        "title": "Mastering Window Functions",
        "description": "## Why windows matter\n\nRanking and running totals without self-joins.",
        "lessons": [
            {
                "title": f"Lesson {i}",
                "content": f"Lesson {i} body. " * 10,
                "sublessons": [
                    {"title": f"Part {i}.{j}", "content": "Details"} for j in range(1, 4)
                ],
            }
            for i in range(1, lessons + 1)
        ],
        "exercises": [
            {"title": f"Exercise {i}", "description": "Rank rows", "solution": "Use RANK()"}
            for i in range(1, exercises + 1)
        ],
        "test": {
            "title": "Window Test",
            "description": "Check yourself",
            "questions": [
                {
                    "question": f"Question {i}?",
                    "options": ["A. one", "B. two", "C. three", "D. four"],
                    "correctAnswer": "B. two",
                    "explanation": "Because",
                }
                for i in range(1, questions + 1)
            ],
        },
        "realWorldApplications": "Leaderboards and sessionization.",
    }


def quiz_payload(count: int = 15) -> dict[str, Any]:
    return {
        "questions": [
            {
                "question": f"Question {i}?",
                "options": ["alpha", "beta", "gamma", "delta"],
                "correctAnswerIndex": i % 4,
                "difficulty": ("easy", "medium", "hard")[i % 3],
                "timeLimit": (30, 45, 60)[i % 3],
            }
            for i in range(count)
        ]
    }


@pytest.fixture
def mock_config() -> RoadmapConfig:
    return MockConfig.with_overrides(embedding_dimensions=64, shuffle_quiz_options=False)


@pytest.fixture
def sample_documents() -> list[KnowledgeDocument]:
    return [
        KnowledgeDocument(
            title="SQL Fundamentals",
            content="Relational databases, joins and window functions for analytics.",
            category="data",
            tags=("sql", "databases"),
            doc_id="sql",
        ),
        KnowledgeDocument(
            title="Python Basics",
            content="Variables, functions, modules and packaging in Python.",
            category="programming",
            tags=("python",),
            doc_id="python",
        ),
        KnowledgeDocument(
            title="Kubernetes Operations",
            content="Pods, deployments and services for running containers.",
            category="devops",
            tags=("containers", "kubernetes"),
            doc_id="k8s",
        ),
    ]


@pytest.fixture
def knowledge_base(sample_documents: list[KnowledgeDocument]) -> KnowledgeBase:
    return KnowledgeBase(sample_documents)


def make_pipeline(
    config: RoadmapConfig,
    responses: list[Scripted],
    knowledge_base: Optional[KnowledgeBase] = None,
    embedding_provider: Optional[EmbeddingProvider] = None,
) -> tuple[RoadmapPipeline, ScriptedLLMProvider]:
    llm = ScriptedLLMProvider(responses)
    pipeline = RoadmapPipeline(
        config,
        embedding_provider=embedding_provider or CountingEmbeddingProvider(),
        llm_provider=llm,
        knowledge_base=knowledge_base if knowledge_base is not None else KnowledgeBase(),
    )
    return pipeline, llm
