"""FastAPI REST API for the roadmap generation pipeline.

Provides async endpoints for roadmap structure, subtask details,
tutorials, quizzes, descriptions, learning paths, tutor chat and
knowledge search.
Supports both production and mock modes.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from roadmap_ai import __version__
from roadmap_ai.core.config import RoadmapConfig, configure_logging
from roadmap_ai.core.document import (
    CareerProfile,
    ExperienceLevel,
    Generated,
    GenerationError,
    GenerationRequest,
    InvalidInputError,
)
from roadmap_ai.core.pipeline import RoadmapPipeline
from roadmap_ai.core.result import Result
from roadmap_ai.generation.schemas import SubtaskOutline


# --- Request/Response Models ---


class CamelModel(BaseModel):
    """Request body accepting camelCase keys (or field names)."""

    model_config = ConfigDict(populate_by_name=True)


class StructureRequest(CamelModel):
    career_title: str = Field(..., min_length=1, alias="careerTitle")
    experience_level: Optional[ExperienceLevel] = Field(default=None, alias="experienceLevel")
    context: Optional[str] = None


class SubtaskRequest(CamelModel):
    roadmap_title: str = Field(..., min_length=1, alias="roadmapTitle")
    section_title: str = Field(..., min_length=1, alias="sectionTitle")
    subtask_title: str = Field(..., min_length=1, alias="subtaskTitle")


class SubtaskInput(CamelModel):
    title: str = Field(..., min_length=1)
    description: str = ""


class TutorialRequest(CamelModel):
    roadmap_title: str = Field(..., min_length=1, alias="roadmapTitle")
    section_title: str = Field(..., min_length=1, alias="sectionTitle")
    section_description: Optional[str] = Field(default=None, alias="sectionDescription")
    subtasks: list[SubtaskInput] = Field(..., min_length=1)


class QuizRequest(CamelModel):
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    number_of_questions: int = Field(default=15, ge=1, le=50, alias="numberOfQuestions")


class DescriptionRequest(CamelModel):
    title: str = Field(..., min_length=1)
    experience_level: Optional[ExperienceLevel] = Field(default=None, alias="experienceLevel")


class SectionDescriptionRequest(CamelModel):
    roadmap_title: str = Field(..., min_length=1, alias="roadmapTitle")
    section_title: str = Field(..., min_length=1, alias="sectionTitle")
    experience_level: Optional[ExperienceLevel] = Field(default=None, alias="experienceLevel")


class CareerProfileRequest(CamelModel):
    career_title: str = Field(..., min_length=1, alias="careerTitle")
    career_field: str = Field(default="", alias="careerField")
    experience_level: ExperienceLevel = Field(
        default=ExperienceLevel.BEGINNER, alias="experienceLevel"
    )
    career_description: str = Field(default="", alias="careerDescription")
    timeframe: Optional[str] = None
    learning_focus: Optional[str] = Field(default=None, alias="learningFocus")
    current_skills: Optional[str] = Field(default=None, alias="currentSkills")
    preferred_resources: Optional[list[str]] = Field(default=None, alias="preferredResources")

    def to_profile(self) -> CareerProfile:
        optional: dict[str, Any] = {}
        if self.timeframe:
            optional["timeframe"] = self.timeframe
        if self.learning_focus:
            optional["learning_focus"] = self.learning_focus
        if self.current_skills:
            optional["current_skills"] = self.current_skills
        if self.preferred_resources:
            optional["preferred_resources"] = tuple(self.preferred_resources)
        return CareerProfile(
            career_title=self.career_title,
            career_field=self.career_field,
            experience_level=self.experience_level,
            career_description=self.career_description,
            **optional,
        )


class LearningPathRequest(CamelModel):
    roadmap_title: str = Field(..., min_length=1, alias="roadmapTitle")
    subtask_title: str = Field(..., min_length=1, alias="subtaskTitle")
    section_title: str = Field(default="", alias="sectionTitle")
    subtask_description: Optional[str] = Field(default=None, alias="subtaskDescription")
    path_description: Optional[str] = Field(default=None, alias="pathDescription")
    experience_level: Optional[ExperienceLevel] = Field(default=None, alias="experienceLevel")


class ChatContext(CamelModel):
    title: str = Field(..., min_length=1)
    description: Optional[str] = None


class ChatRequest(CamelModel):
    prompt: str = Field(..., min_length=1)
    context: ChatContext


class SearchRequest(CamelModel):
    query: str = Field(..., min_length=1)
    top_k: Optional[int] = Field(default=None, ge=1, le=20, alias="topK")


class ArtifactResponse(BaseModel):
    """A generated artifact and whether fallback content was used."""

    data: dict[str, Any]
    degraded: bool = False
    notes: list[str] = Field(default_factory=list)


class TutorialResponse(BaseModel):
    content: str
    success: bool = True


class QuizResponse(BaseModel):
    questions: list[dict[str, Any]]


class ChatResponse(BaseModel):
    message: str


class SearchResult(BaseModel):
    id: str
    title: str
    category: str
    score: float


class SearchResponse(BaseModel):
    results: list[SearchResult]


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    mode: str
    knowledge_documents: int
    version: str = __version__


class GenerationFailed(Exception):
    """Raised by handlers when an operation returns a GenerationError."""

    def __init__(self, error: GenerationError) -> None:
        super().__init__(str(error))
        self.error = error


def _unwrap(result: Result[Generated[Any], GenerationError]) -> Generated[Any]:
    if result.is_err():
        raise GenerationFailed(result.unwrap_err())
    return result.unwrap()


def _artifact(generated: Generated[Any], data: dict[str, Any]) -> ArtifactResponse:
    return ArtifactResponse(data=data, degraded=generated.degraded, notes=list(generated.notes))


# --- Application ---

_pipeline: Optional[RoadmapPipeline] = None


def get_pipeline() -> RoadmapPipeline:
    """Get or create the global pipeline instance."""
    global _pipeline
    if _pipeline is None:
        config = RoadmapConfig()
        _pipeline = RoadmapPipeline(config)
    return _pipeline


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    pipeline = get_pipeline()
    configure_logging(pipeline.config.log_level)
    yield


def create_app(
    config: Optional[RoadmapConfig] = None,
    pipeline: Optional[RoadmapPipeline] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        config: Optional RoadmapConfig. Defaults to environment-based config.
        pipeline: Optional pre-built pipeline (takes precedence over config).
    """
    app = FastAPI(
        title="Roadmap AI",
        description="Career roadmap generation with retrieval grounding and validated output",
        version=__version__,
        lifespan=lifespan,
    )

    global _pipeline
    if pipeline is not None:
        _pipeline = pipeline
    elif config is not None:
        _pipeline = RoadmapPipeline(config)

    @app.exception_handler(GenerationFailed)
    async def generation_failed(request: Request, exc: GenerationFailed) -> JSONResponse:
        return JSONResponse(
            status_code=500,
            content={"error": exc.error.message, "details": exc.error.detail},
        )

    @app.exception_handler(InvalidInputError)
    async def invalid_input(request: Request, exc: InvalidInputError) -> JSONResponse:
        return JSONResponse(status_code=422, content={"error": "Invalid request", "details": str(exc)})

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        """Health check endpoint."""
        pipeline = get_pipeline()
        return HealthResponse(
            status="healthy",
            mode=pipeline.config.mode.value,
            knowledge_documents=pipeline.document_count,
        )

    @app.post("/roadmap/structure", response_model=ArtifactResponse)
    async def roadmap_structure(request: StructureRequest) -> ArtifactResponse:
        """Generate the section/subtask outline of a roadmap."""
        generated = _unwrap(await get_pipeline().generate_structure(
            GenerationRequest(
                topic=request.career_title,
                experience_level=request.experience_level,
                context=request.context,
            )
        ))
        return _artifact(generated, generated.value.to_payload())

    @app.post("/roadmap/subtask-details", response_model=ArtifactResponse)
    async def subtask_details(request: SubtaskRequest) -> ArtifactResponse:
        generated = _unwrap(await get_pipeline().generate_subtask_detail(
            request.roadmap_title, request.section_title, request.subtask_title
        ))
        return _artifact(generated, generated.value.to_payload())

    @app.post("/roadmap/section-tutorial", response_model=TutorialResponse)
    async def section_tutorial(request: TutorialRequest) -> TutorialResponse:
        generated = _unwrap(await get_pipeline().generate_section_tutorial(
            request.roadmap_title,
            request.section_title,
            request.section_description,
            [SubtaskOutline(title=s.title, description=s.description) for s in request.subtasks],
        ))
        return TutorialResponse(content=generated.value)

    @app.post("/quiz/generate", response_model=QuizResponse)
    async def generate_quiz(request: QuizRequest) -> QuizResponse:
        generated = _unwrap(await get_pipeline().generate_quiz(
            request.title, request.description, request.number_of_questions
        ))
        return QuizResponse(questions=[q.to_payload() for q in generated.value.questions])

    @app.post("/roadmap/description", response_model=ArtifactResponse)
    async def roadmap_description(request: DescriptionRequest) -> ArtifactResponse:
        generated = _unwrap(await get_pipeline().generate_roadmap_description(
            request.title, request.experience_level
        ))
        return _artifact(generated, {"description": generated.value})

    @app.post("/roadmap/section-description", response_model=ArtifactResponse)
    async def section_description(request: SectionDescriptionRequest) -> ArtifactResponse:
        generated = _unwrap(await get_pipeline().generate_section_description(
            request.roadmap_title, request.section_title, request.experience_level
        ))
        return _artifact(generated, {"description": generated.value})

    @app.post("/roadmap/subtask-short-description", response_model=ArtifactResponse)
    async def subtask_short_description(request: SubtaskRequest) -> ArtifactResponse:
        generated = _unwrap(await get_pipeline().generate_subtask_summary(
            request.roadmap_title, request.section_title, request.subtask_title
        ))
        return _artifact(generated, {"description": generated.value})

    @app.post("/roadmap/generate", response_model=ArtifactResponse)
    async def generate_roadmap(request: CareerProfileRequest) -> ArtifactResponse:
        """Generate a complete roadmap from a career profile."""
        generated = _unwrap(await get_pipeline().generate_full_roadmap(request.to_profile()))
        return _artifact(generated, generated.value.to_payload())

    @app.post("/roadmap/path", response_model=ArtifactResponse)
    async def learning_path(request: LearningPathRequest) -> ArtifactResponse:
        """Generate a lesson-by-lesson learning path for one subtask."""
        generated = _unwrap(await get_pipeline().generate_learning_path(
            request.roadmap_title,
            request.subtask_title,
            section_title=request.section_title,
            subtask_description=request.subtask_description,
            path_description=request.path_description,
            experience_level=request.experience_level,
        ))
        return _artifact(generated, generated.value.to_payload())

    @app.post("/chat", response_model=ChatResponse)
    async def chat(request: ChatRequest) -> ChatResponse:
        generated = _unwrap(await get_pipeline().answer_question(
            request.prompt, request.context.title, request.context.description
        ))
        return ChatResponse(message=generated.value)

    @app.post("/knowledge/search", response_model=SearchResponse)
    async def search_knowledge(request: SearchRequest) -> SearchResponse:
        results = await get_pipeline().search_knowledge(request.query, k=request.top_k)
        return SearchResponse(results=[
            SearchResult(
                id=scored.document.doc_id,
                title=scored.document.title,
                category=scored.document.category,
                score=scored.score,
            )
            for scored in results
        ])

    return app


# Default app instance for uvicorn
app = create_app()
