"""Career roadmap generation: retrieval-grounded prompts, validation and fallbacks."""

__version__ = "0.1.0"
