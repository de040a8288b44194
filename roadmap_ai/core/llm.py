"""LLM providers with dependency injection for mock mode.

Supports:
- OpenAI chat completions via langchain-openai (production)
- Mock LLM (demo/testing - returns deterministic, well-formed content)

Providers perform exactly one completion per call. Retrying belongs to
the generation layer.
"""

from __future__ import annotations

import hashlib
import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from roadmap_ai.core.config import RoadmapConfig, RunMode
from roadmap_ai.core.result import Err, Ok, Result


class GenerationTask(str, Enum):
    """The kind of content a completion request asks for."""

    ROADMAP_STRUCTURE = "roadmap_structure"
    SUBTASK_DETAIL = "subtask_detail"
    SECTION_TUTORIAL = "section_tutorial"
    QUIZ = "quiz"
    ROADMAP_DESCRIPTION = "roadmap_description"
    SECTION_DESCRIPTION = "section_description"
    SUBTASK_SUMMARY = "subtask_summary"
    FULL_ROADMAP = "full_roadmap"
    LEARNING_PATH = "learning_path"
    TUTOR_CHAT = "tutor_chat"


@dataclass(frozen=True, slots=True)
class CompletionRequest:
    """A single system/user prompt pair sent to the model."""

    system_prompt: str
    user_prompt: str
    task: GenerationTask
    subject: str = ""
    json_mode: bool = False
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    metadata: dict[str, str | int] = field(default_factory=dict)


class LLMProvider(ABC):
    """Abstract LLM provider interface."""

    name: str = "base"

    @abstractmethod
    async def complete(self, request: CompletionRequest) -> Result[str, str]:
        """Return the raw text of one completion."""
        ...


class MockLLMProvider(LLMProvider):
    """Deterministic mock LLM for testing and demos.

    Produces content that satisfies the structural rules of each task so
    the whole pipeline can run without API keys.
    """

    name = "mock"

    SECTION_THEMES = ["Foundations", "Core Tooling", "Applied Projects", "Professional Practice"]
    SUBTASK_THEMES = ["Key Concepts", "Hands-on Practice", "Common Pitfalls", "Review"]

    async def complete(self, request: CompletionRequest) -> Result[str, str]:
        subject = request.subject or "the topic"
        try:
            if request.task == GenerationTask.ROADMAP_STRUCTURE:
                return Ok(json.dumps(self._structure(subject)))
            if request.task == GenerationTask.SUBTASK_DETAIL:
                return Ok(json.dumps(self._subtask_detail(subject)))
            if request.task == GenerationTask.QUIZ:
                count = int(request.metadata.get("question_count", 15))
                return Ok(json.dumps(self._quiz(subject, count)))
            if request.task == GenerationTask.FULL_ROADMAP:
                return Ok(json.dumps(self._full_roadmap(subject)))
            if request.task == GenerationTask.LEARNING_PATH:
                return Ok(json.dumps(self._learning_path(subject)))
            return Ok(self._markdown(request.task, subject))
        except Exception as e:
            return Err(f"Mock generation failed: {e}")

    def _structure(self, subject: str) -> dict[str, Any]:
        return {
            "title": subject,
            "requiredSkills": ["Problem solving", "Communication", f"{subject} basics"],
            "sections": [
                {
                    "title": f"{subject} {theme}",
                    "progress": 0,
                    "subtasks": [
                        {"title": f"{theme}: {sub}", "completed": False, "id": f"{i}-{j}"}
                        for j, sub in enumerate(self.SUBTASK_THEMES[:3], start=1)
                    ],
                }
                for i, theme in enumerate(self.SECTION_THEMES, start=1)
            ],
        }

    def _subtask_detail(self, subject: str) -> dict[str, Any]:
        return {
            "description": (
                f"# {subject}\n\n"
                f"## Overview\n\nThis module explains {subject} from first principles "
                "and connects it to day-to-day professional work.\n\n"
                "## Key Concepts\n\n- Core vocabulary\n- Typical workflows\n- Trade-offs\n"
            ),
            "resources": [
                {
                    "title": f"{subject} resource {i}",
                    "url": f"https://example.com/{i}",
                    "type": kind,
                    "description": f"A {kind} covering {subject}",
                }
                for i, kind in enumerate(["article", "video", "course", "book", "tool"], start=1)
            ],
            "practicalExercises": [
                f"Build a small project using {subject}",
                f"Write a short guide that explains {subject}",
                f"Review an existing codebase for {subject} patterns",
            ],
            "validationCriteria": [
                f"Explain {subject} to a peer",
                f"Apply {subject} in a realistic scenario",
                f"Diagnose common {subject} mistakes",
            ],
            "prerequisites": ["Basic programming knowledge"],
        }

    def _quiz(self, subject: str, count: int) -> dict[str, Any]:
        seed = int(hashlib.md5(subject.encode()).hexdigest()[:4], 16)
        questions = []
        for i in range(count):
            difficulty, limit = ("easy", 30) if i % 3 == 0 else ("medium", 45)
            if i % 5 == 4:
                difficulty, limit = "hard", 60
            questions.append(
                {
                    "question": f"Question {i + 1} about {subject}?",
                    "options": [f"Option {letter}" for letter in "ABCD"],
                    "correctAnswerIndex": (seed + i) % 4,
                    "difficulty": difficulty,
                    "timeLimit": limit,
                }
            )
        return {"questions": questions}

    def _full_roadmap(self, subject: str) -> dict[str, Any]:
        detail = self._subtask_detail(subject)
        return {
            "title": subject,
            "description": f"A structured path to becoming productive in {subject}.",
            "requiredSkills": ["Problem solving", "Communication"],
            "sections": [
                {
                    "title": f"{subject} {theme}",
                    "description": f"{theme} for {subject}.",
                    "progress": 0,
                    "subtasks": [
                        {
                            "title": f"{theme}: {sub}",
                            "description": detail["description"],
                            "completed": False,
                            "prerequisites": detail["prerequisites"],
                            "resources": detail["resources"],
                            "practicalExercises": detail["practicalExercises"],
                            "validationCriteria": detail["validationCriteria"],
                        }
                        for sub in self.SUBTASK_THEMES[:3]
                    ],
                }
                for theme in self.SECTION_THEMES
            ],
        }

    def _learning_path(self, subject: str) -> dict[str, Any]:
        return {
            "title": f"Learning Path: {subject}",
            "description": f"# {subject}\n\nA guided path from first principles to confident use.",
            "lessons": [
                {
                    "title": f"{theme} of {subject}",
                    "content": f"## {theme}\n\nWhat {subject} looks like at this stage.",
                    "sublessons": [
                        {"title": f"{theme}: {sub}", "content": f"{sub} for {subject}."}
                        for sub in self.SUBTASK_THEMES[:2]
                    ],
                }
                for theme in self.SECTION_THEMES[:3]
            ],
            "exercises": [
                {
                    "title": f"Exercise {i}: {subject}",
                    "description": f"Apply {subject} to a small problem.",
                    "solution": f"A worked solution using {subject}.",
                }
                for i in range(1, 3)
            ],
            "test": {
                "title": f"{subject} Test",
                "description": f"Check your understanding of {subject}.",
                "questions": [
                    {
                        "question": f"Question {i} about {subject}?",
                        "options": [f"{letter}. Option {letter}" for letter in "ABCD"],
                        "correctAnswer": "A. Option A",
                        "explanation": "Option A is correct.",
                    }
                    for i in range(1, 6)
                ],
            },
            "realWorldApplications": f"Teams use {subject} in production systems.",
        }

    def _markdown(self, task: GenerationTask, subject: str) -> str:
        if task in (GenerationTask.SECTION_DESCRIPTION, GenerationTask.SUBTASK_SUMMARY):
            return f"Learn the essentials of {subject} through focused, practical work."
        if task == GenerationTask.TUTOR_CHAT:
            return f"Here is a short explanation of {subject} with an example."
        return (
            f"# {subject}\n\n"
            "## Introduction\n\nA mock tutorial generated for testing.\n\n"
            "## Summary\n\nReview the key points and move on to the next section.\n"
        )


class OpenAILLMProvider(LLMProvider):
    """OpenAI chat-completions provider for production use."""

    name = "openai"

    def __init__(self, config: RoadmapConfig) -> None:
        self._config = config

    async def complete(self, request: CompletionRequest) -> Result[str, str]:
        try:
            from langchain_openai import ChatOpenAI

            llm: Any = ChatOpenAI(
                model=self._config.llm_model,
                temperature=(
                    request.temperature
                    if request.temperature is not None
                    else self._config.llm_temperature
                ),
                max_tokens=request.max_tokens or self._config.llm_max_tokens,
                timeout=self._config.llm_timeout_seconds,
                openai_api_key=self._config.openai_api_key,
            )
            if request.json_mode:
                llm = llm.bind(response_format={"type": "json_object"})

            response = await llm.ainvoke(
                [("system", request.system_prompt), ("human", request.user_prompt)]
            )
            return Ok(str(response.content or ""))
        except ImportError:
            return Err("langchain-openai not installed")
        except Exception as e:
            return Err(f"OpenAI completion failed: {e}")


def create_llm_provider(config: RoadmapConfig) -> LLMProvider:
    """Factory function to create the appropriate LLM provider."""
    if config.mode in (RunMode.MOCK, RunMode.HYBRID):
        return MockLLMProvider()
    return OpenAILLMProvider(config)
