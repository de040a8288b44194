"""Core module - configuration, domain records and the result type."""

from roadmap_ai.core.config import MockConfig, RoadmapConfig
from roadmap_ai.core.document import (
    CareerProfile,
    ExperienceLevel,
    Generated,
    GenerationError,
    GenerationRequest,
    KnowledgeDocument,
)
from roadmap_ai.core.result import Err, Ok, Result

__all__ = [
    "RoadmapConfig",
    "MockConfig",
    "CareerProfile",
    "ExperienceLevel",
    "Generated",
    "GenerationError",
    "GenerationRequest",
    "KnowledgeDocument",
    "Result",
    "Ok",
    "Err",
]
