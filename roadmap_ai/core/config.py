"""Configuration management for the roadmap generation pipeline.

Supports three modes:
- Production: Real LLM and embedding APIs
- Mock: Deterministic fake responses for demos and testing
- Hybrid: Real embeddings with mock LLM (cost-effective testing)
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class RunMode(str, Enum):
    """Pipeline execution mode."""

    PRODUCTION = "production"
    MOCK = "mock"
    HYBRID = "hybrid"


class RoadmapConfig(BaseSettings):
    """Main pipeline configuration.

    All settings can be overridden via environment variables with the ROADMAP_ prefix.
    Example: ROADMAP_MODE=production, ROADMAP_OPENAI_API_KEY=sk-...
    """

    model_config = {"env_prefix": "ROADMAP_"}

    # Core mode
    mode: RunMode = Field(default=RunMode.MOCK, description="Pipeline execution mode")

    # LLM settings
    openai_api_key: Optional[str] = Field(default=None, description="OpenAI API key")
    llm_model: str = Field(default="gpt-4-turbo", description="LLM model name")
    llm_temperature: float = Field(default=0.7, description="Default LLM temperature")
    llm_max_tokens: int = Field(default=4096, description="Default max tokens per completion")
    llm_timeout_seconds: float = Field(default=60.0, description="Per-request LLM timeout")

    # Embedding settings
    embedding_model: str = Field(
        default="text-embedding-3-small", description="Embedding model name"
    )
    embedding_dimensions: int = Field(default=1536, description="Embedding vector dimensions")
    embedding_char_limit: int = Field(
        default=8000, description="Max characters of a document body sent for embedding"
    )

    # Retrieval settings
    top_k: int = Field(default=5, description="Number of knowledge documents to retrieve")
    knowledge_base_path: Optional[str] = Field(
        default=None, description="JSON file holding the knowledge corpus"
    )

    # Generation settings
    max_attempts: int = Field(default=3, ge=1, description="Attempts per generation call")
    enable_fallbacks: bool = Field(
        default=True,
        description="Substitute fallback content when an operation exhausts its attempts",
    )
    quiz_question_count: int = Field(default=15, ge=1, description="Default quiz length")
    shuffle_quiz_options: bool = Field(
        default=True, description="Randomly reorder quiz options after generation"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Root log level")

    # API settings
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=8000, description="API port")


class MockConfig:
    """Configuration presets for mock/demo mode.

    Returns deterministic responses without requiring any API keys.
    Useful for testing, demos, and CI/CD pipelines.
    """

    @staticmethod
    def default() -> RoadmapConfig:
        """Create a default mock configuration."""
        return RoadmapConfig(mode=RunMode.MOCK)

    @staticmethod
    def with_overrides(**kwargs: object) -> RoadmapConfig:
        """Create mock config with specific overrides."""
        defaults = {"mode": RunMode.MOCK}
        defaults.update(kwargs)
        return RoadmapConfig(**defaults)  # type: ignore[arg-type]


def configure_logging(level: str = "INFO") -> None:
    """Install a basic root handler; a no-op if one is already configured."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
