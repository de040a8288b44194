"""Structured generation: prompts, parsing, validation, retries and fallbacks."""

from roadmap_ai.generation.client import StructuredGenerationClient
from roadmap_ai.generation.retry import with_retries
from roadmap_ai.generation.validation import PayloadKind, repair, validate

__all__ = ["StructuredGenerationClient", "with_retries", "PayloadKind", "repair", "validate"]
