"""Roadmap generation pipeline orchestrating retrieval, generation and repair.

The pipeline is the primary entry point for the system. For every
operation it:
1. Retrieves grounding documents from the knowledge corpus (best effort)
2. Builds the task's prompts and calls the model through the retry loop
3. Validates the output, then repairs or falls back when the model fails

All external dependencies are injected, enabling mock mode
for demos and testing without API keys.
"""

from __future__ import annotations

import logging
import random
from typing import Any, Callable, Optional, Sequence, TypeVar

from roadmap_ai.core.config import RoadmapConfig
from roadmap_ai.core.document import (
    CareerProfile,
    ExperienceLevel,
    Generated,
    GenerationError,
    GenerationRequest,
    InvalidInputError,
    KnowledgeDocument,
    ScoredDocument,
)
from roadmap_ai.core.embeddings import EmbeddingProvider, create_embedding_provider
from roadmap_ai.core.llm import GenerationTask, LLMProvider, create_llm_provider
from roadmap_ai.core.result import Err, Ok, Result
from roadmap_ai.generation import fallbacks, prompts
from roadmap_ai.generation.client import StructuredGenerationClient
from roadmap_ai.generation.retry import (
    AttemptResult,
    Completed,
    Exhausted,
    ParseFailure,
    Success,
    ValidationFailure,
    with_retries,
)
from roadmap_ai.generation.schemas import (
    FullRoadmap,
    LearningPath,
    Quiz,
    QuizQuestion,
    RoadmapStructure,
    SubtaskDetail,
    SubtaskOutline,
)
from roadmap_ai.generation.validation import (
    PayloadKind,
    Violation,
    normalize_full_roadmap,
    normalize_quiz,
    normalize_structure,
    pad_learning_path,
    pad_subtask_detail,
    repair,
    validate,
)
from roadmap_ai.retrieval.knowledge import KnowledgeBase
from roadmap_ai.retrieval.similarity import SimilarityRetriever

logger = logging.getLogger(__name__)

T = TypeVar("T")

GenerationResult = Result[Generated[T], GenerationError]


def _require(value: str, name: str) -> str:
    if not value or not value.strip():
        raise InvalidInputError(f"{name} cannot be empty")
    return value.strip()


class RoadmapPipeline:
    """Career roadmap generation with pluggable providers.

    Usage:
        config = RoadmapConfig(mode=RunMode.MOCK)
        pipeline = RoadmapPipeline(config)

        result = await pipeline.generate_structure("Data Engineer")
        if result.is_ok():
            roadmap = result.unwrap().value
    """

    def __init__(
        self,
        config: Optional[RoadmapConfig] = None,
        embedding_provider: Optional[EmbeddingProvider] = None,
        llm_provider: Optional[LLMProvider] = None,
        knowledge_base: Optional[KnowledgeBase] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._config = config or RoadmapConfig()

        # Dependency injection with sensible defaults
        self._embeddings = embedding_provider or create_embedding_provider(self._config)
        self._llm = llm_provider or create_llm_provider(self._config)

        self._client = StructuredGenerationClient(self._llm)
        self._retriever = SimilarityRetriever(
            self._embeddings, char_limit=self._config.embedding_char_limit
        )
        self._knowledge = (
            knowledge_base if knowledge_base is not None else self._load_knowledge_base()
        )
        self._rng = rng or random.Random()

    def _load_knowledge_base(self) -> KnowledgeBase:
        path = self._config.knowledge_base_path
        if not path:
            return KnowledgeBase()
        result = KnowledgeBase.from_json_file(path)
        if result.is_err():
            logger.warning("Starting with an empty knowledge base: %s", result.error)  # type: ignore[union-attr]
            return KnowledgeBase()
        return result.unwrap()

    @property
    def config(self) -> RoadmapConfig:
        return self._config

    @property
    def knowledge_base(self) -> KnowledgeBase:
        return self._knowledge

    @property
    def document_count(self) -> int:
        """Return the number of documents in the knowledge corpus."""
        return len(self._knowledge)

    @property
    def cached_embedding_count(self) -> int:
        return self._retriever.store.count

    @property
    def provider_name(self) -> str:
        return self._client.provider_name

    # ------------------------------------------------------------------
    # Knowledge corpus
    # ------------------------------------------------------------------

    async def search_knowledge(self, query: str, k: Optional[int] = None) -> list[ScoredDocument]:
        """Rank the corpus against ``query``; never fails, returns [] instead."""
        top_k = k if k is not None else self._config.top_k
        return await self._retriever.retrieve(query, self._knowledge.documents, top_k)

    def add_knowledge(self, document: KnowledgeDocument) -> None:
        """Insert or replace a document; a replaced version's cached embedding is dropped."""
        replacing = self._knowledge.get(document.doc_id) is not None
        self._knowledge.add(document)
        if replacing:
            self._retriever.store.prune(self._knowledge.documents)


    def remove_knowledge(self, doc_id: str) -> bool:
        """Remove a document and drop its cached embedding."""
        removed = self._knowledge.remove(doc_id)
        if removed:
            self._retriever.store.prune(self._knowledge.documents)
        return removed

    # ------------------------------------------------------------------
    # Generation operations
    # ------------------------------------------------------------------

    async def generate_structure(
        self,
        request: str | GenerationRequest,
        *,
        use_retrieval: bool = True,
        fallback: Optional[bool] = None,
    ) -> GenerationResult[RoadmapStructure]:
        """Generate a roadmap outline: 4-6 sections of 3-6 subtask stubs.

        Args:
            request: A topic string or a full ``GenerationRequest``.
            use_retrieval: Ground the prompt with documents from the corpus.
            fallback: Override ``enable_fallbacks`` for this call.

        Returns:
            Result with the structure (possibly the fallback template,
            flagged degraded) or a GenerationError.
        """
        if isinstance(request, str):
            request = GenerationRequest(topic=request)
        topic = request.topic.strip()

        documents = list(request.documents)
        if use_retrieval:
            seen = {doc.doc_id for doc in documents}
            for scored in await self.search_knowledge(topic):
                if scored.document.doc_id not in seen:
                    documents.append(scored.document)
                    seen.add(scored.document.doc_id)

        logger.info(
            "Generating roadmap structure for %r (%d grounding documents)", topic, len(documents)
        )
        prompt = prompts.roadmap_structure_prompt(
            topic, request.experience_level, request.context, documents
        )
        outcome = await self._retry_json(
            prompt,
            task=GenerationTask.ROADMAP_STRUCTURE,
            subject=topic,
            label="roadmap structure",
            convert=lambda payload: validate(payload, PayloadKind.ROADMAP_STRUCTURE).and_then(
                lambda valid: normalize_structure(valid, topic)
            ),
        )
        if outcome.is_ok():
            return Ok(self._generated(outcome.unwrap()))

        exhausted = outcome.unwrap_err()
        if not self._fallbacks_enabled(fallback):
            return Err(exhausted.to_error("Failed to generate roadmap structure"))

        payload, notes = repair(None, PayloadKind.ROADMAP_STRUCTURE, topic=topic)
        logger.warning(
            "Using fallback roadmap for %r after %d attempts: %s",
            topic, exhausted.attempts, exhausted.reason,
        )
        return Ok(Generated(
            value=RoadmapStructure.model_validate(payload),
            degraded=True,
            attempts=exhausted.attempts,
            notes=notes + (exhausted.reason,),
        ))

    async def generate_subtask_detail(
        self,
        roadmap_title: str,
        section_title: str,
        subtask_title: str,
        *,
        fallback: Optional[bool] = None,
    ) -> GenerationResult[SubtaskDetail]:
        """Enrich one subtask with a description, resources, exercises and criteria.

        Only unusable responses are retried. A parsed payload that falls
        short of the content minimums is padded field by field instead.
        """
        roadmap_title = _require(roadmap_title, "Roadmap title")
        section_title = _require(section_title, "Section title")
        subtask_title = _require(subtask_title, "Subtask title")

        logger.info("Generating details for subtask %r in %r", subtask_title, section_title)
        prompt = prompts.subtask_detail_prompt(roadmap_title, section_title, subtask_title)
        outcome = await self._retry_json(
            prompt,
            task=GenerationTask.SUBTASK_DETAIL,
            subject=subtask_title,
            label="subtask detail",
            convert=Ok,
        )

        if outcome.is_ok():
            completed = outcome.unwrap()
            detail, padded = pad_subtask_detail(completed.payload, subtask_title, section_title)
            if padded:
                logger.warning("Padded %s for subtask %r", ", ".join(padded), subtask_title)
            return Ok(Generated(
                value=detail,
                degraded=bool(padded),
                attempts=completed.attempts,
                notes=tuple(f"padded {name}" for name in padded),
            ))

        exhausted = outcome.unwrap_err()
        if not self._fallbacks_enabled(fallback):
            return Err(exhausted.to_error("Failed to generate subtask details"))

        detail, padded = pad_subtask_detail(None, subtask_title, section_title)
        logger.warning(
            "Using placeholder details for subtask %r after %d attempts: %s",
            subtask_title, exhausted.attempts, exhausted.reason,
        )
        return Ok(Generated(
            value=detail,
            degraded=True,
            attempts=exhausted.attempts,
            notes=("placeholder subtask detail", exhausted.reason),
        ))

    async def generate_section_tutorial(
        self,
        roadmap_title: str,
        section_title: str,
        description: Optional[str] = None,
        subtasks: Optional[Sequence[SubtaskOutline]] = None,
    ) -> GenerationResult[str]:
        """Write a markdown tutorial covering a section and its subtasks."""
        roadmap_title = _require(roadmap_title, "Roadmap title")
        section_title = _require(section_title, "Section title")

        logger.info("Generating tutorial for section %r of %r", section_title, roadmap_title)
        prompt = prompts.section_tutorial_prompt(
            roadmap_title, section_title, description, subtasks or ()
        )
        outcome = await self._retry_text(
            prompt,
            task=GenerationTask.SECTION_TUTORIAL,
            subject=section_title,
            label="section tutorial",
        )
        if outcome.is_err():
            return Err(outcome.unwrap_err().to_error("Failed to generate tutorial"))
        return Ok(self._generated(outcome.unwrap()))

    async def generate_quiz(
        self,
        title: str,
        description: Optional[str] = None,
        question_count: Optional[int] = None,
    ) -> GenerationResult[Quiz]:
        """Generate multiple-choice questions with a mixed difficulty spread.

        Returns at most ``question_count`` questions. When option
        shuffling is enabled each question's options are reordered with
        probability 0.5, keeping ``correctAnswerIndex`` on the same answer.
        """
        title = _require(title, "Quiz title")
        count = question_count if question_count is not None else self._config.quiz_question_count
        if count < 1:
            raise InvalidInputError(f"Question count must be positive, got {count}")

        logger.info("Generating %d-question quiz about %r", count, title)
        prompt = prompts.quiz_prompt(title, description, count)
        outcome = await self._retry_json(
            prompt,
            task=GenerationTask.QUIZ,
            subject=title,
            label="quiz",
            metadata={"question_count": count},
            convert=lambda payload: validate(payload, PayloadKind.QUIZ).and_then(
                lambda valid: normalize_quiz(valid, count)
            ),
        )
        if outcome.is_err():
            return Err(outcome.unwrap_err().to_error("Failed to generate quiz"))

        completed = outcome.unwrap()
        quiz = completed.payload
        if len(quiz.questions) < count:
            logger.info("Quiz about %r has %d of %d questions", title, len(quiz.questions), count)
        if self._config.shuffle_quiz_options:
            quiz = Quiz(questions=[self._shuffle_options(q) for q in quiz.questions])
        return Ok(Generated(value=quiz, attempts=completed.attempts))

    def _shuffle_options(self, question: QuizQuestion) -> QuizQuestion:
        if self._rng.random() >= 0.5:
            return question
        order = list(range(len(question.options)))
        self._rng.shuffle(order)
        return question.model_copy(update={
            "options": [question.options[i] for i in order],
            "correct_answer_index": order.index(question.correct_answer_index),
        })

    async def generate_roadmap_description(
        self,
        title: str,
        experience_level: Optional[ExperienceLevel] = None,
        *,
        fallback: Optional[bool] = None,
    ) -> GenerationResult[str]:
        title = _require(title, "Roadmap title")
        return await self._text_with_fallback(
            prompts.roadmap_description_prompt(title, experience_level),
            task=GenerationTask.ROADMAP_DESCRIPTION,
            subject=title,
            label="roadmap description",
            fallback_text=lambda: fallbacks.fallback_roadmap_description(title),
            fallback=fallback,
        )

    async def generate_section_description(
        self,
        roadmap_title: str,
        section_title: str,
        experience_level: Optional[ExperienceLevel] = None,
        *,
        fallback: Optional[bool] = None,
    ) -> GenerationResult[str]:
        roadmap_title = _require(roadmap_title, "Roadmap title")
        section_title = _require(section_title, "Section title")
        return await self._text_with_fallback(
            prompts.section_description_prompt(roadmap_title, section_title, experience_level),
            task=GenerationTask.SECTION_DESCRIPTION,
            subject=section_title,
            label="section description",
            fallback_text=lambda: fallbacks.fallback_section_description(
                roadmap_title, section_title
            ),
            fallback=fallback,
        )

    async def generate_subtask_summary(
        self,
        roadmap_title: str,
        section_title: str,
        subtask_title: str,
        *,
        fallback: Optional[bool] = None,
    ) -> GenerationResult[str]:
        """One or two sentences describing a subtask, for roadmap listings."""
        roadmap_title = _require(roadmap_title, "Roadmap title")
        section_title = _require(section_title, "Section title")
        subtask_title = _require(subtask_title, "Subtask title")
        return await self._text_with_fallback(
            prompts.subtask_summary_prompt(roadmap_title, section_title, subtask_title),
            task=GenerationTask.SUBTASK_SUMMARY,
            subject=subtask_title,
            label="subtask summary",
            fallback_text=lambda: fallbacks.fallback_subtask_summary(roadmap_title, subtask_title),
            fallback=fallback,
        )

    async def generate_full_roadmap(self, profile: CareerProfile) -> GenerationResult[FullRoadmap]:
        """Generate a complete roadmap with subtask content from a career profile.

        Grounding uses the corpus topic filter (first three matches)
        rather than embedding search.
        """
        topic = profile.topic
        documents = self._knowledge.filter_by_topic(topic)[:3]

        logger.info("Generating full roadmap for %r (%d grounding documents)", topic, len(documents))
        prompt = prompts.full_roadmap_prompt(profile, documents)
        outcome = await self._retry_json(
            prompt,
            task=GenerationTask.FULL_ROADMAP,
            subject=topic,
            label="full roadmap",
            convert=lambda payload: validate(payload, PayloadKind.FULL_ROADMAP).and_then(
                lambda valid: normalize_full_roadmap(
                    valid, profile.career_title, profile.career_description
                )
            ),
        )
        if outcome.is_err():
            return Err(outcome.unwrap_err().to_error("Failed to generate a valid roadmap"))
        return Ok(self._generated(outcome.unwrap()))

    async def generate_learning_path(
        self,
        roadmap_title: str,
        subtask_title: str,
        *,
        section_title: str = "",
        subtask_description: Optional[str] = None,
        path_description: Optional[str] = None,
        experience_level: Optional[ExperienceLevel] = None,
    ) -> GenerationResult[LearningPath]:
        """Build a lesson-by-lesson learning path for one subtask.

        Like subtask details, only unusable responses are retried; a
        parsed path short on lessons, exercises or test questions is
        padded and flagged degraded. There is no fallback path when every
        attempt fails.
        """
        roadmap_title = _require(roadmap_title, "Roadmap title")
        subtask_title = _require(subtask_title, "Subtask title")
        section_title = section_title.strip()
        level = experience_level or ExperienceLevel.BEGINNER

        logger.info("Generating learning path for subtask %r of %r", subtask_title, roadmap_title)
        prompt = prompts.learning_path_prompt(
            roadmap_title,
            section_title,
            subtask_title,
            level,
            subtask_description,
            path_description,
        )
        outcome = await self._retry_json(
            prompt,
            task=GenerationTask.LEARNING_PATH,
            subject=subtask_title,
            label="learning path",
            convert=Ok,
        )
        if outcome.is_err():
            return Err(outcome.unwrap_err().to_error(
                "Failed to generate path content after multiple attempts"
            ))

        completed = outcome.unwrap()
        path, padded = pad_learning_path(
            completed.payload, subtask_title, section_title, roadmap_title, level.value
        )
        if padded:
            logger.warning("Padded %s for learning path %r", ", ".join(padded), subtask_title)
        return Ok(Generated(
            value=path,
            degraded=bool(padded),
            attempts=completed.attempts,
            notes=tuple(f"padded {name}" for name in padded),
        ))

    async def answer_question(
        self, prompt: str, title: str, description: Optional[str] = None
    ) -> GenerationResult[str]:
        """Answer a learner's question in the context of a roadmap topic."""
        prompt = _require(prompt, "Prompt")
        title = _require(title, "Topic title")
        outcome = await self._retry_text(
            prompts.tutor_chat_prompt(prompt, title, description),
            task=GenerationTask.TUTOR_CHAT,
            subject=title,
            label="tutor chat",
        )
        if outcome.is_err():
            return Err(outcome.unwrap_err().to_error("Failed to get a response"))
        return Ok(self._generated(outcome.unwrap()))

    # ------------------------------------------------------------------
    # Attempt plumbing
    # ------------------------------------------------------------------

    def _fallbacks_enabled(self, fallback: Optional[bool]) -> bool:
        return self._config.enable_fallbacks if fallback is None else fallback

    @staticmethod
    def _generated(completed: Completed[T]) -> Generated[T]:
        return Generated(value=completed.payload, attempts=completed.attempts)

    async def _retry_json(
        self,
        prompt: prompts.PromptSpec,
        *,
        task: GenerationTask,
        subject: str,
        label: str,
        convert: Callable[[dict[str, Any]], Result[T, Violation]],
        metadata: Optional[dict[str, str | int]] = None,
    ) -> Result[Completed[T], Exhausted]:
        async def attempt() -> AttemptResult[T]:
            parsed = await self._client.generate_json(
                prompt.system,
                prompt.user,
                task=task,
                subject=subject,
                temperature=prompt.temperature,
                max_tokens=prompt.max_tokens,
                metadata=metadata,
            )
            if parsed.is_err():
                error = parsed.unwrap_err()
                return ParseFailure(raw_text=error.raw_text, error=error.message, kind=error.kind)

            converted = convert(parsed.unwrap())
            if converted.is_err():
                return ValidationFailure(payload=parsed.unwrap(), violation=converted.unwrap_err())
            return Success(converted.unwrap())

        return await with_retries(attempt, self._config.max_attempts, label=label)

    async def _retry_text(
        self,
        prompt: prompts.PromptSpec,
        *,
        task: GenerationTask,
        subject: str,
        label: str,
    ) -> Result[Completed[str], Exhausted]:
        async def attempt() -> AttemptResult[str]:
            result = await self._client.generate_text(
                prompt.system,
                prompt.user,
                task=task,
                subject=subject,
                temperature=prompt.temperature,
                max_tokens=prompt.max_tokens,
            )
            if result.is_err():
                error = result.unwrap_err()
                return ParseFailure(raw_text=error.raw_text, error=error.message, kind=error.kind)
            return Success(result.unwrap())

        return await with_retries(attempt, self._config.max_attempts, label=label)

    async def _text_with_fallback(
        self,
        prompt: prompts.PromptSpec,
        *,
        task: GenerationTask,
        subject: str,
        label: str,
        fallback_text: Callable[[], str],
        fallback: Optional[bool],
    ) -> GenerationResult[str]:
        logger.info("Generating %s for %r", label, subject)
        outcome = await self._retry_text(prompt, task=task, subject=subject, label=label)
        if outcome.is_ok():
            return Ok(self._generated(outcome.unwrap()))

        exhausted = outcome.unwrap_err()
        if not self._fallbacks_enabled(fallback):
            return Err(exhausted.to_error(f"Failed to generate {label}"))

        logger.warning("Using fallback %s for %r: %s", label, subject, exhausted.reason)
        return Ok(Generated(
            value=fallback_text(),
            degraded=True,
            attempts=exhausted.attempts,
            notes=(f"fallback {label}", exhausted.reason),
        ))
