"""Basic roadmap generation example.

Demonstrates the outline-then-enrich workflow using mock mode.
No API keys required.

Usage:
    python examples/basic_pipeline.py
"""

import asyncio

from roadmap_ai.core.config import RoadmapConfig, RunMode
from roadmap_ai.core.document import ExperienceLevel, GenerationRequest, KnowledgeDocument
from roadmap_ai.core.pipeline import RoadmapPipeline
from roadmap_ai.retrieval.knowledge import KnowledgeBase


async def main() -> None:
    # 1. Configure pipeline in mock mode (no API keys needed)
    config = RoadmapConfig(mode=RunMode.MOCK, top_k=2)

    # 2. Seed a small knowledge corpus for grounding
    knowledge = KnowledgeBase([
        KnowledgeDocument(
            title="Container Fundamentals",
            content=(
                "Docker containers package applications with their dependencies "
                "for consistent deployment across environments. A Dockerfile "
                "defines the build steps, and docker-compose orchestrates "
                "multi-container applications."
            ),
            category="devops",
            tags=("docker", "containers"),
        ),
        KnowledgeDocument(
            title="Continuous Delivery",
            content=(
                "Pipelines build, test and release every change. Teams start with "
                "automated tests, then add staged environments and rollbacks."
            ),
            category="devops",
            tags=("ci", "cd"),
        ),
    ])
    pipeline = RoadmapPipeline(config, knowledge_base=knowledge)

    # 3. Generate the outline
    request = GenerationRequest(topic="DevOps Engineer", experience_level=ExperienceLevel.BEGINNER)
    structure_result = await pipeline.generate_structure(request)
    if structure_result.is_err():
        print(f"Structure failed: {structure_result.unwrap_err()}")
        return

    structure = structure_result.unwrap().value
    print(f"{structure.title}: {len(structure.sections)} sections")

    # 4. Enrich the first subtask of each section
    for section in structure.sections:
        subtask = section.subtasks[0]
        result = await pipeline.generate_subtask_detail(structure.title, section.title, subtask.title)
        if result.is_ok():
            detail = result.unwrap()
            print(f"\n{section.title} / {subtask.title}")
            print(f"   {detail.value.description[:120]}...")
            print(f"   {len(detail.value.resources)} resources, degraded: {detail.degraded}")
        else:
            print(f"\n{section.title} / {subtask.title}")
            print(f"   Error: {result.unwrap_err()}")


if __name__ == "__main__":
    asyncio.run(main())
