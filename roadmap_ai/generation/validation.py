"""Structural validation and repair of model output.

``validate`` reports the first invariant a payload breaks, naming it
precisely so a log line says what the model got wrong. ``normalize_*``
turns an accepted payload into its typed artifact, filling the defaults
the model is allowed to omit. ``repair`` is the end-of-the-road path:
placeholder padding for subtask details and learning paths, the fallback
template for a roadmap structure.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from pydantic import ValidationError

from roadmap_ai.core.result import Err, Ok, Result
from roadmap_ai.generation import fallbacks
from roadmap_ai.generation.schemas import (
    FullRoadmap,
    LearningPath,
    Quiz,
    RoadmapStructure,
    SubtaskDetail,
)

MIN_SECTIONS = 4
MAX_SECTIONS = 6
MIN_SUBTASKS = 3
MAX_SUBTASKS = 6
MIN_DESCRIPTION_CHARS = 100
MIN_RESOURCES = 5
MIN_EXERCISES = 3
MIN_CRITERIA = 3
QUIZ_OPTION_COUNT = 4
MIN_LESSONS = 3
MIN_PATH_EXERCISES = 2
MIN_TEST_QUESTIONS = 5
QUIZ_DIFFICULTIES = ("easy", "medium", "hard")


class PayloadKind(str, Enum):
    ROADMAP_STRUCTURE = "roadmap_structure"
    SUBTASK_DETAIL = "subtask_detail"
    QUIZ = "quiz"
    FULL_ROADMAP = "full_roadmap"
    LEARNING_PATH = "learning_path"


class Invariant(str, Enum):
    MISSING_FIELD = "missing_field"
    SECTION_COUNT = "section_count"
    SUBTASKS_PER_SECTION = "subtasks_per_section"
    DESCRIPTION_LENGTH = "description_length"
    RESOURCE_COUNT = "resource_count"
    EXERCISE_COUNT = "exercise_count"
    CRITERIA_COUNT = "criteria_count"
    QUESTION_COUNT = "question_count"
    QUESTION_SHAPE = "question_shape"
    LESSON_COUNT = "lesson_count"
    TEST_QUESTION_COUNT = "test_question_count"


@dataclass(frozen=True, slots=True)
class Violation:
    """The specific invariant a payload broke."""

    invariant: Invariant
    message: str

    def __str__(self) -> str:
        return f"{self.invariant.value}: {self.message}"


def validate(payload: Any, kind: PayloadKind) -> Result[dict[str, Any], Violation]:
    """Accept ``payload`` or name the first invariant it violates."""
    if not isinstance(payload, dict):
        return Err(Violation(Invariant.MISSING_FIELD, "payload is not a JSON object"))

    if kind in (PayloadKind.ROADMAP_STRUCTURE, PayloadKind.FULL_ROADMAP):
        violation = _section_violation(payload)
    elif kind == PayloadKind.SUBTASK_DETAIL:
        found = subtask_detail_violations(payload)
        violation = found[0] if found else None
    elif kind == PayloadKind.LEARNING_PATH:
        found = learning_path_violations(payload)
        violation = found[0] if found else None
    else:
        violation = _quiz_violation(payload)

    if violation is not None:
        return Err(violation)
    return Ok(payload)


def _section_violation(payload: dict[str, Any]) -> Optional[Violation]:
    sections = payload.get("sections")
    if not isinstance(sections, list):
        return Violation(Invariant.MISSING_FIELD, "sections is missing or not a list")

    if not MIN_SECTIONS <= len(sections) <= MAX_SECTIONS:
        return Violation(
            Invariant.SECTION_COUNT,
            f"model returned {len(sections)} sections "
            f"(expected {MIN_SECTIONS} to {MAX_SECTIONS})",
        )

    for index, section in enumerate(sections):
        if not isinstance(section, dict):
            return Violation(Invariant.MISSING_FIELD, f"section {index} is not an object")
        subtasks = section.get("subtasks")
        label = f"section {index} ({section.get('title') or 'untitled'})"
        if not isinstance(subtasks, list):
            return Violation(Invariant.MISSING_FIELD, f"{label} has no subtasks list")
        if len(subtasks) < MIN_SUBTASKS:
            return Violation(
                Invariant.SUBTASKS_PER_SECTION,
                f"{label} has {len(subtasks)} subtasks (minimum {MIN_SUBTASKS})",
            )
    return None


def subtask_detail_violations(payload: dict[str, Any]) -> list[Violation]:
    """Every subtask-detail invariant the payload breaks, in field order."""
    found: list[Violation] = []

    description = payload.get("description")
    if not isinstance(description, str) or len(description) < MIN_DESCRIPTION_CHARS:
        length = len(description) if isinstance(description, str) else 0
        found.append(Violation(
            Invariant.DESCRIPTION_LENGTH,
            f"description has {length} characters (minimum {MIN_DESCRIPTION_CHARS})",
        ))

    checks = (
        ("resources", MIN_RESOURCES, Invariant.RESOURCE_COUNT),
        ("practicalExercises", MIN_EXERCISES, Invariant.EXERCISE_COUNT),
        ("validationCriteria", MIN_CRITERIA, Invariant.CRITERIA_COUNT),
    )
    for field_name, minimum, invariant in checks:
        items = payload.get(field_name)
        count = len(items) if isinstance(items, list) else 0
        if count < minimum:
            found.append(Violation(invariant, f"{field_name} has {count} items (minimum {minimum})"))

    return found


def _quiz_violation(payload: dict[str, Any]) -> Optional[Violation]:
    questions = payload.get("questions")
    if not isinstance(questions, list):
        return Violation(Invariant.MISSING_FIELD, "questions is missing or not a list")
    if not questions:
        return Violation(Invariant.QUESTION_COUNT, "model returned no questions")

    for index, question in enumerate(questions):
        problem = _question_problem(question)
        if problem:
            return Violation(Invariant.QUESTION_SHAPE, f"question {index}: {problem}")
    return None


def _question_problem(question: Any) -> Optional[str]:
    if not isinstance(question, dict):
        return "not an object"
    if not isinstance(question.get("question"), str) or not question["question"].strip():
        return "missing question text"

    options = question.get("options")
    if not isinstance(options, list) or len(options) != QUIZ_OPTION_COUNT:
        return f"expected exactly {QUIZ_OPTION_COUNT} options"

    index = question.get("correctAnswerIndex")
    if isinstance(index, bool) or not isinstance(index, int):
        return "correctAnswerIndex is not an integer"
    if not 0 <= index < QUIZ_OPTION_COUNT:
        return f"correctAnswerIndex {index} out of range"

    if question.get("difficulty") not in QUIZ_DIFFICULTIES:
        return f"unknown difficulty {question.get('difficulty')!r}"

    limit = question.get("timeLimit")
    if isinstance(limit, bool) or not isinstance(limit, (int, float)) or limit <= 0:
        return "timeLimit must be a positive number"
    return None


def learning_path_violations(payload: dict[str, Any]) -> list[Violation]:
    """Every learning-path minimum the payload misses: lessons, exercises, test questions."""
    found: list[Violation] = []

    lessons = payload.get("lessons")
    count = len(lessons) if isinstance(lessons, list) else 0
    if count < MIN_LESSONS:
        found.append(Violation(
            Invariant.LESSON_COUNT, f"lessons has {count} items (minimum {MIN_LESSONS})"
        ))

    exercises = payload.get("exercises")
    count = len(exercises) if isinstance(exercises, list) else 0
    if count < MIN_PATH_EXERCISES:
        found.append(Violation(
            Invariant.EXERCISE_COUNT, f"exercises has {count} items (minimum {MIN_PATH_EXERCISES})"
        ))

    test = payload.get("test")
    questions = test.get("questions") if isinstance(test, dict) else None
    count = len(questions) if isinstance(questions, list) else 0
    if count < MIN_TEST_QUESTIONS:
        found.append(Violation(
            Invariant.TEST_QUESTION_COUNT,
            f"test has {count} questions (minimum {MIN_TEST_QUESTIONS})",
        ))

    return found


def _schema_violation(error: ValidationError) -> Violation:
    first = error.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    return Violation(Invariant.MISSING_FIELD, f"{location}: {first.get('msg', 'invalid value')}")


def _string_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value if item is not None]


def _subtask_title(subtask: Any) -> str:
    if isinstance(subtask, str):
        return subtask
    if isinstance(subtask, dict):
        return str(subtask.get("title") or "Subtask")
    return "Subtask"


def normalize_structure(payload: dict[str, Any], topic: str) -> Result[RoadmapStructure, Violation]:
    """Shape a validated structure payload; subtasks beyond the maximum are dropped."""
    sections = []
    for section in payload["sections"]:
        subtasks = []
        for subtask in section["subtasks"][:MAX_SUBTASKS]:
            subtask_id = subtask.get("id") if isinstance(subtask, dict) else None
            subtasks.append({
                "title": _subtask_title(subtask),
                "completed": False,
                "id": str(subtask_id or ""),
            })
        sections.append({
            "title": str(section.get("title") or "Section"),
            "progress": 0,
            "subtasks": subtasks,
        })

    try:
        return Ok(RoadmapStructure.model_validate({
            "title": str(payload.get("title") or topic),
            "requiredSkills": _string_list(payload.get("requiredSkills")),
            "sections": sections,
        }))
    except ValidationError as e:
        return Err(_schema_violation(e))


def normalize_full_roadmap(
    payload: dict[str, Any], title: str, description: str = ""
) -> Result[FullRoadmap, Violation]:
    sections = []
    for section in payload["sections"]:
        subtasks = []
        for subtask in section["subtasks"]:
            data = subtask if isinstance(subtask, dict) else {}
            resources = data.get("resources") if isinstance(data.get("resources"), list) else []
            subtasks.append({
                "title": _subtask_title(subtask),
                "description": str(data.get("description") or ""),
                "completed": bool(data.get("completed", False)),
                "prerequisites": _string_list(data.get("prerequisites")),
                "resources": [_complete_resource(r) for r in resources],
                "practicalExercises": _string_list(data.get("practicalExercises")),
                "validationCriteria": _string_list(data.get("validationCriteria")),
            })
        sections.append({
            "title": str(section.get("title") or "Section"),
            "description": str(section.get("description") or ""),
            "progress": 0,
            "subtasks": subtasks,
        })

    try:
        return Ok(FullRoadmap.model_validate({
            "title": str(payload.get("title") or title),
            "description": str(payload.get("description") or description),
            "requiredSkills": _string_list(payload.get("requiredSkills")),
            "sections": sections,
        }))
    except ValidationError as e:
        return Err(_schema_violation(e))


def normalize_quiz(payload: dict[str, Any], question_count: int) -> Result[Quiz, Violation]:
    """Shape a validated quiz, keeping at most ``question_count`` questions."""
    questions = [
        {
            "question": q["question"].strip(),
            "options": [str(option) for option in q["options"]],
            "correctAnswerIndex": q["correctAnswerIndex"],
            "difficulty": q["difficulty"],
            "timeLimit": int(q["timeLimit"]),
        }
        for q in payload["questions"][:question_count]
    ]
    try:
        return Ok(Quiz.model_validate({"questions": questions}))
    except ValidationError as e:
        return Err(_schema_violation(e))


def _complete_resource(resource: Any) -> dict[str, str]:
    data = resource if isinstance(resource, dict) else {}
    return {
        key: str(data.get(key) or default)
        for key, default in fallbacks.DEFAULT_RESOURCE.items()
    }


def pad_subtask_detail(
    payload: Optional[dict[str, Any]],
    subtask_title: str,
    section_title: str,
) -> tuple[SubtaskDetail, tuple[str, ...]]:
    """Replace each deficient field with placeholder content.

    A ``None`` payload means generation failed outright; everything is
    placeholder in that case. Returns the detail and the names of the
    padded fields.
    """
    data = payload or {}
    padded: list[str] = []

    description = data.get("description")
    if not isinstance(description, str) or len(description) < MIN_DESCRIPTION_CHARS:
        description = fallbacks.placeholder_description(
            subtask_title, section_title, failed=payload is None
        )
        padded.append("description")

    resources = data.get("resources")
    if not isinstance(resources, list) or len(resources) < MIN_RESOURCES:
        resources = fallbacks.placeholder_resources()
        padded.append("resources")
    else:
        resources = [_complete_resource(r) for r in resources]

    exercises = _string_list(data.get("practicalExercises"))
    if len(exercises) < MIN_EXERCISES:
        exercises = fallbacks.placeholder_exercises(subtask_title)
        padded.append("practicalExercises")

    criteria = _string_list(data.get("validationCriteria"))
    if len(criteria) < MIN_CRITERIA:
        criteria = fallbacks.placeholder_criteria(subtask_title)
        padded.append("validationCriteria")

    detail = SubtaskDetail.model_validate({
        "description": description,
        "resources": resources,
        "practicalExercises": exercises,
        "validationCriteria": criteria,
        "prerequisites": _string_list(data.get("prerequisites")),
    })
    return detail, tuple(padded)


def _complete_lesson(lesson: Any, number: int) -> dict[str, Any]:
    data = lesson if isinstance(lesson, dict) else {}
    sublessons = data.get("sublessons") if isinstance(data.get("sublessons"), list) else []
    return {
        "title": str(data.get("title") or f"Lesson {number}"),
        "content": str(data.get("content") or ""),
        "sublessons": [
            {
                "title": str(sub.get("title") or f"Sublesson {number}.{i}"),
                "content": str(sub.get("content") or ""),
            }
            for i, sub in enumerate(sublessons, start=1)
            if isinstance(sub, dict)
        ],
    }


def _complete_exercise(exercise: Any, number: int) -> dict[str, str]:
    data = exercise if isinstance(exercise, dict) else {"description": exercise}
    return {
        "title": str(data.get("title") or f"Exercise {number}"),
        "description": str(data.get("description") or ""),
        "solution": str(data.get("solution") or ""),
    }


def _complete_test_question(question: dict[str, Any]) -> dict[str, Any]:
    return {
        "question": str(question.get("question") or ""),
        "options": _string_list(question.get("options")),
        "correctAnswer": str(question.get("correctAnswer") or ""),
        "explanation": str(question.get("explanation") or ""),
    }


def pad_learning_path(
    payload: Optional[dict[str, Any]],
    subtask_title: str,
    section_title: str,
    roadmap_title: str,
    experience_level: str = "beginner",
) -> tuple[LearningPath, tuple[str, ...]]:
    """Bring a learning path up to its minimums, field by field.

    Lessons are extended rather than replaced when the model wrote at
    least one: the first lesson serves as the template for the rest.
    Exercises and the test are replaced wholesale when short. Returns the
    path and the names of the padded fields.
    """
    data = payload or {}
    padded: list[str] = []

    lessons = data.get("lessons")
    if not isinstance(lessons, list):
        lessons = fallbacks.introductory_lessons(subtask_title, roadmap_title)
        padded.append("lessons")
    else:
        lessons = [_complete_lesson(lesson, i) for i, lesson in enumerate(lessons, start=1)]
        if not lessons:
            lessons = fallbacks.core_concept_lessons(subtask_title, MIN_LESSONS)
            padded.append("lessons")
        elif len(lessons) < MIN_LESSONS:
            template = lessons[0]
            while len(lessons) < MIN_LESSONS:
                lessons.append(
                    fallbacks.extended_lesson(len(lessons) + 1, subtask_title, template)
                )
            padded.append("lessons")

    exercises = data.get("exercises")
    if not isinstance(exercises, list) or len(exercises) < MIN_PATH_EXERCISES:
        exercises = fallbacks.path_exercises(subtask_title)
        padded.append("exercises")
    else:
        exercises = [_complete_exercise(e, i) for i, e in enumerate(exercises, start=1)]

    test = data.get("test") if isinstance(data.get("test"), dict) else {}
    questions = test.get("questions") if isinstance(test.get("questions"), list) else []
    questions = [q for q in questions if isinstance(q, dict)]
    if len(questions) < MIN_TEST_QUESTIONS:
        test = fallbacks.standard_path_test(subtask_title, section_title or roadmap_title)
        padded.append("test")
    else:
        test = {
            "title": str(test.get("title") or f"{subtask_title} Assessment"),
            "description": str(test.get("description") or ""),
            "questions": [_complete_test_question(q) for q in questions],
        }

    path = LearningPath.model_validate({
        "title": str(data.get("title") or subtask_title),
        "description": str(data.get("description") or f"Learning path for {subtask_title}"),
        "lessons": lessons,
        "exercises": exercises,
        "test": test,
        "realWorldApplications": str(
            data.get("realWorldApplications")
            or f"Applications of {subtask_title} in real-world scenarios"
        ),
        "metadata": {
            "subtaskTitle": subtask_title,
            "sectionTitle": section_title,
            "roadmapTitle": roadmap_title,
            "experienceLevel": experience_level,
        },
    })
    return path, tuple(padded)


def repair(
    payload: Optional[dict[str, Any]],
    kind: PayloadKind,
    *,
    topic: str = "",
    section_title: str = "",
    subtask_title: str = "",
) -> tuple[dict[str, Any], tuple[str, ...]]:
    """Produce a structurally valid payload of ``kind`` no matter what came in.

    Returns the payload and notes describing what was substituted.
    """
    if kind == PayloadKind.SUBTASK_DETAIL:
        detail, padded = pad_subtask_detail(payload, subtask_title, section_title)
        return detail.to_payload(), tuple(f"padded {name}" for name in padded)
    if kind == PayloadKind.ROADMAP_STRUCTURE:
        return fallbacks.fallback_roadmap(topic), ("fallback roadmap template",)
    if kind == PayloadKind.LEARNING_PATH:
        path, padded = pad_learning_path(payload, subtask_title, section_title, topic)
        return path.to_payload(), tuple(f"padded {name}" for name in padded)
    raise ValueError(f"No repair defined for {kind.value}")
