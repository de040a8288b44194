"""CLI interface for the roadmap generation pipeline.

Provides command-line access to pipeline operations:
- demo: Generate a roadmap, one subtask's details and a quiz with sample data
- structure: Generate a roadmap outline for a topic
- details: Enrich one subtask
- tutorial: Write a section tutorial
- quiz: Generate a quiz
- path: Generate a learning path for a subtask
- search: Search the knowledge corpus
- serve: Start the FastAPI server
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Any, Coroutine, Optional

from roadmap_ai.core.config import RoadmapConfig, RunMode, configure_logging
from roadmap_ai.core.document import (
    Generated,
    GenerationError,
    InvalidInputError,
    KnowledgeDocument,
)
from roadmap_ai.core.pipeline import RoadmapPipeline
from roadmap_ai.core.result import Result
from roadmap_ai.generation.schemas import SubtaskOutline
from roadmap_ai.retrieval.knowledge import KnowledgeBase


SAMPLE_DOCUMENTS = [
    KnowledgeDocument(
        title="Python for Data Engineering",
        content=(
            "Data engineers use Python to build extraction and transformation jobs. "
            "Core skills include working with pandas DataFrames, writing idempotent "
            "batch jobs, packaging code for schedulers such as Airflow, and testing "
            "transformations with small fixture datasets."
        ),
        category="data-engineering",
        tags=("python", "etl", "airflow"),
        difficulty="beginner",
        references=("https://airflow.apache.org/docs/",),
        doc_id="python-data-engineering",
    ),
    KnowledgeDocument(
        title="SQL and Data Modeling",
        content=(
            "Relational modeling underpins analytics work. Learners should practice "
            "normalization, star schemas, window functions and query plans, then move "
            "on to incremental models in a warehouse."
        ),
        category="data-engineering",
        tags=("sql", "modeling", "warehouse"),
        difficulty="intermediate",
        references=("https://www.postgresql.org/docs/current/tutorial-window.html",),
        doc_id="sql-data-modeling",
    ),
    KnowledgeDocument(
        title="Frontend Foundations",
        content=(
            "Frontend developers start with semantic HTML, modern CSS layout with flexbox "
            "and grid, and JavaScript fundamentals before adopting a component framework "
            "such as React."
        ),
        category="web-development",
        tags=("html", "css", "javascript", "react"),
        difficulty="beginner",
        references=("https://developer.mozilla.org/en-US/docs/Learn",),
        doc_id="frontend-foundations",
    ),
    KnowledgeDocument(
        title="Cloud Infrastructure Basics",
        content=(
            "Cloud engineers provision compute, storage and networking with infrastructure "
            "as code. Terraform modules, IAM least privilege and cost monitoring are "
            "recurring themes in production environments."
        ),
        category="devops",
        tags=("cloud", "terraform", "iam"),
        difficulty="intermediate",
        references=("https://developer.hashicorp.com/terraform/tutorials",),
        doc_id="cloud-infrastructure-basics",
    ),
    KnowledgeDocument(
        title="Machine Learning Workflow",
        content=(
            "A practical machine learning workflow covers problem framing, feature "
            "engineering, model selection with cross-validation, evaluation against a "
            "baseline, and monitoring for drift after deployment."
        ),
        category="machine-learning",
        tags=("ml", "scikit-learn", "evaluation"),
        difficulty="intermediate",
        references=("https://scikit-learn.org/stable/user_guide.html",),
        doc_id="machine-learning-workflow",
    ),
]


def main(argv: Optional[list[str]] = None) -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Roadmap AI - career roadmap generation with validated model output"
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Demo command
    demo_parser = subparsers.add_parser("demo", help="Run a complete demo")
    demo_parser.add_argument("--topic", default="Data Engineer", help="Topic to demo")

    # Structure command
    structure_parser = subparsers.add_parser("structure", help="Generate a roadmap outline")
    structure_parser.add_argument("topic", help="Career or subject to plan for")
    structure_parser.add_argument("--no-retrieval", action="store_true", help="Skip grounding")

    # Details command
    details_parser = subparsers.add_parser("details", help="Generate details for a subtask")
    details_parser.add_argument("roadmap", help="Roadmap title")
    details_parser.add_argument("section", help="Section title")
    details_parser.add_argument("subtask", help="Subtask title")

    # Tutorial command
    tutorial_parser = subparsers.add_parser("tutorial", help="Generate a section tutorial")
    tutorial_parser.add_argument("roadmap", help="Roadmap title")
    tutorial_parser.add_argument("section", help="Section title")
    tutorial_parser.add_argument("--description", default=None, help="Section description")
    tutorial_parser.add_argument(
        "--subtask", action="append", default=[], help="Subtask title (repeatable)"
    )

    # Quiz command
    quiz_parser = subparsers.add_parser("quiz", help="Generate a quiz")
    quiz_parser.add_argument("title", help="Quiz topic")
    quiz_parser.add_argument("--description", default=None, help="Topic description")
    quiz_parser.add_argument("--count", type=int, default=None, help="Number of questions")

    # Path command
    path_parser = subparsers.add_parser("path", help="Generate a learning path for a subtask")
    path_parser.add_argument("roadmap", help="Roadmap title")
    path_parser.add_argument("subtask", help="Subtask title")
    path_parser.add_argument("--section", default="", help="Section title")
    path_parser.add_argument("--description", default=None, help="Desired focus of the path")

    # Search command
    search_parser = subparsers.add_parser("search", help="Search the knowledge corpus")
    search_parser.add_argument("query", help="Search query")
    search_parser.add_argument("--top-k", type=int, default=5, help="Number of documents")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Start API server")
    serve_parser.add_argument("--host", default="0.0.0.0", help="Host")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port")

    args = parser.parse_args(argv)

    if args.command == "demo":
        run_demo(args.topic)
    elif args.command == "structure":
        run_structure(args.topic, use_retrieval=not args.no_retrieval)
    elif args.command == "details":
        run_details(args.roadmap, args.section, args.subtask)
    elif args.command == "tutorial":
        run_tutorial(args.roadmap, args.section, args.description, args.subtask)
    elif args.command == "quiz":
        run_quiz(args.title, args.description, args.count)
    elif args.command == "path":
        run_path(args.roadmap, args.subtask, args.section, args.description)
    elif args.command == "search":
        run_search(args.query, args.top_k)
    elif args.command == "serve":
        run_serve(args.host, args.port)
    else:
        parser.print_help()
        sys.exit(1)


def build_pipeline(config: Optional[RoadmapConfig] = None) -> RoadmapPipeline:
    """Pipeline for CLI commands; falls back to the sample corpus when none is configured."""
    config = config or RoadmapConfig()
    configure_logging(config.log_level)
    knowledge = None if config.knowledge_base_path else KnowledgeBase(SAMPLE_DOCUMENTS)
    return RoadmapPipeline(config, knowledge_base=knowledge)


def _run(coro: Coroutine[Any, Any, Result[Generated[Any], GenerationError]]) -> Generated[Any]:
    try:
        result = asyncio.run(coro)
    except InvalidInputError as e:
        print(f"ERROR: {e}")
        sys.exit(1)
    if result.is_err():
        print(f"ERROR: {result.unwrap_err()}")
        sys.exit(1)
    return result.unwrap()


def _print_artifact(generated: Generated[Any], data: Any) -> None:
    print(json.dumps({
        "data": data,
        "degraded": generated.degraded,
        "attempts": generated.attempts,
        "notes": list(generated.notes),
    }, indent=2))


def run_demo(topic: str) -> None:
    """Run a complete demo with sample data."""
    print("=" * 60)
    print("Roadmap AI - Demo Mode")
    print("=" * 60)
    print()

    pipeline = build_pipeline(RoadmapConfig(mode=RunMode.MOCK))

    print(f'[1/3] Generating roadmap structure for "{topic}"...')
    structure = _run(pipeline.generate_structure(topic)).value
    for section in structure.sections:
        print(f"      {section.title}")
        for subtask in section.subtasks:
            print(f"        - {subtask.title}")
    print()

    section = structure.sections[0]
    subtask = section.subtasks[0]
    print(f'[2/3] Generating details for "{subtask.title}"...')
    detail = _run(pipeline.generate_subtask_detail(structure.title, section.title, subtask.title))
    print(f"      {len(detail.value.resources)} resources, "
          f"{len(detail.value.practical_exercises)} exercises "
          f"(degraded: {detail.degraded})")
    print()

    print(f'[3/3] Generating a quiz about "{section.title}"...')
    quiz = _run(pipeline.generate_quiz(section.title, question_count=5)).value
    for i, question in enumerate(quiz.questions, 1):
        print(f"  [{i}] ({question.difficulty.value}, {question.time_limit}s) {question.question}")
    print("=" * 60)

    # JSON output for programmatic use
    print("JSON output:")
    print(json.dumps(structure.to_payload(), indent=2))


def run_structure(topic: str, use_retrieval: bool = True) -> None:
    pipeline = build_pipeline()
    generated = _run(pipeline.generate_structure(topic, use_retrieval=use_retrieval))
    _print_artifact(generated, generated.value.to_payload())


def run_details(roadmap: str, section: str, subtask: str) -> None:
    pipeline = build_pipeline()
    generated = _run(pipeline.generate_subtask_detail(roadmap, section, subtask))
    _print_artifact(generated, generated.value.to_payload())


def run_tutorial(
    roadmap: str, section: str, description: Optional[str], subtasks: list[str]
) -> None:
    pipeline = build_pipeline()
    outlines = [SubtaskOutline(title=title) for title in subtasks]
    generated = _run(pipeline.generate_section_tutorial(roadmap, section, description, outlines))
    print(generated.value)


def run_quiz(title: str, description: Optional[str], count: Optional[int]) -> None:
    pipeline = build_pipeline()
    generated = _run(pipeline.generate_quiz(title, description, count))
    _print_artifact(generated, [q.to_payload() for q in generated.value.questions])


def run_path(roadmap: str, subtask: str, section: str, description: Optional[str]) -> None:
    pipeline = build_pipeline()
    generated = _run(pipeline.generate_learning_path(
        roadmap, subtask, section_title=section, path_description=description
    ))
    _print_artifact(generated, generated.value.to_payload())


def run_search(query: str, top_k: int) -> None:
    """Search the knowledge corpus."""
    pipeline = build_pipeline()
    results = asyncio.run(pipeline.search_knowledge(query, k=top_k))
    print(json.dumps({
        "query": query,
        "results": [
            {
                "id": scored.document.doc_id,
                "title": scored.document.title,
                "category": scored.document.category,
                "score": round(scored.score, 4),
            }
            for scored in results
        ],
    }, indent=2))


def run_serve(host: str, port: int) -> None:
    """Start the FastAPI server."""
    import uvicorn
    uvicorn.run("roadmap_ai.api.app:app", host=host, port=port, reload=True)


if __name__ == "__main__":
    main()
