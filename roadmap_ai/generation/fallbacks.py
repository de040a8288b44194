"""Fallback and placeholder content substituted when generation degrades.

Everything here is deterministic. Builders return fresh objects so
callers can mutate what they receive without touching the templates.
"""

from __future__ import annotations

from typing import Any, NamedTuple


class FallbackSubtask(NamedTuple):
    title: str
    id: str = ""


class FallbackSection(NamedTuple):
    title: str
    subtasks: tuple[FallbackSubtask, ...]


FALLBACK_ROADMAP_SECTIONS: tuple[FallbackSection, ...] = (
    FallbackSection(
        "Foundation",
        (
            FallbackSubtask("Basics", "1"),
            FallbackSubtask("Core Concepts", "2"),
            FallbackSubtask("Fundamentals", "3"),
        ),
    ),
    FallbackSection(
        "Intermediate",
        (
            FallbackSubtask("Advanced Techniques", "4"),
            FallbackSubtask("Best Practices", "5"),
            FallbackSubtask("Common Patterns", "6"),
        ),
    ),
    FallbackSection(
        "Advanced",
        (
            FallbackSubtask("Expert Skills", "7"),
            FallbackSubtask("Optimization", "8"),
            FallbackSubtask("Mastery", "9"),
        ),
    ),
    FallbackSection(
        "Specialization",
        (
            FallbackSubtask("Niche Skills"),
            FallbackSubtask("Industry Applications"),
            FallbackSubtask("Specialized Tools"),
        ),
    ),
)

# (title, url, type, description)
PLACEHOLDER_RESOURCES: tuple[tuple[str, str, str, str], ...] = (
    ("Official Documentation", "https://example.com/docs", "documentation",
     "Official documentation for this subject"),
    ("Beginner Tutorial", "https://example.com/tutorial", "article",
     "Step-by-step tutorial for beginners"),
    ("Video Course", "https://example.com/course", "video",
     "Comprehensive video course"),
    ("Practice Exercises", "https://example.com/exercises", "exercise",
     "Interactive exercises to practice"),
    ("Community Forum", "https://example.com/forum", "community",
     "Community forum for questions and answers"),
)

DEFAULT_RESOURCE = {
    "title": "Resource",
    "url": "https://example.com",
    "type": "article",
    "description": "Resource description",
}


def fallback_roadmap(topic: str) -> dict[str, Any]:
    """The topic-agnostic four-section roadmap, titled with the requested topic."""
    return {
        "title": topic,
        "requiredSkills": [],
        "sections": [
            {
                "title": section.title,
                "progress": 0,
                "subtasks": [
                    {"title": sub.title, "completed": False, "id": sub.id}
                    for sub in section.subtasks
                ],
            }
            for section in FALLBACK_ROADMAP_SECTIONS
        ],
    }


def placeholder_resources() -> list[dict[str, str]]:
    return [
        {"title": title, "url": url, "type": kind, "description": description}
        for title, url, kind, description in PLACEHOLDER_RESOURCES
    ]


def placeholder_description(subtask_title: str, section_title: str, failed: bool = False) -> str:
    if failed:
        reason = "could not be created due to an error. Please try again later."
    else:
        reason = "did not meet the minimum requirements. Please check back later for detailed content."
    return (
        f"# {subtask_title}\n\n"
        f'This is a placeholder description for the subtask "{subtask_title}" '
        f'in the section "{section_title}". The AI-generated content {reason}'
    )


def placeholder_exercises(subtask_title: str) -> list[str]:
    return [
        f"Build a simple project that demonstrates your understanding of {subtask_title}",
        f"Create a tutorial explaining the key concepts of {subtask_title}",
        f"Solve 3 practice problems related to {subtask_title}",
    ]


def placeholder_criteria(subtask_title: str) -> list[str]:
    return [
        f"Can explain the core concepts of {subtask_title} clearly",
        f"Can implement solutions using {subtask_title} techniques",
        f"Can troubleshoot common issues related to {subtask_title}",
    ]


def fallback_roadmap_description(title: str) -> str:
    return (
        f"# {title}\n\n"
        f"This comprehensive roadmap will guide you through mastering {title}. "
        "Follow these steps carefully to build your skills from the ground up.\n\n"
        "## What You'll Learn\n\n"
        "- Core fundamentals and theory\n"
        "- Practical techniques and best practices\n"
        "- Advanced concepts for real-world applications\n"
        "- Tips from industry experts\n\n"
        "## Prerequisites\n\n"
        "Basic understanding of the subject is helpful but not required. "
        "A growth mindset and dedication will take you far!"
    )


def fallback_section_description(roadmap_title: str, section_title: str) -> str:
    return (
        f'This "{section_title}" section covers the essential concepts needed to progress '
        f"in your {roadmap_title} learning journey. You will gain fundamental knowledge and "
        "practical skills that will enable you to move on to the next stages of the roadmap. "
        "Successfully completing this section will provide you with a solid foundation for "
        "exploring more advanced topics within the roadmap."
    )


def fallback_subtask_summary(roadmap_title: str, subtask_title: str) -> str:
    return (
        f"Learn key concepts and practical applications of {subtask_title} "
        f"to enhance your {roadmap_title} skills."
    )


# Lesson plan used when the model returns no lessons list at all.
# (lesson title, lesson content, ((sublesson title, sublesson content), ...))
INTRODUCTORY_LESSONS: tuple[tuple[str, str, tuple[tuple[str, str], ...]], ...] = (
    (
        "Introduction to {subtask}",
        "This lesson provides a comprehensive overview of {subtask} and its importance in {roadmap}.",
        (
            ("Getting Started with {subtask}",
             "This sublesson covers the fundamental concepts and tools needed to begin working with {subtask}."),
            ("Core Principles of {subtask}",
             "This sublesson explains the core principles and best practices of {subtask}."),
        ),
    ),
    (
        "Intermediate {subtask} Concepts",
        "This lesson explores more advanced concepts of {subtask} with detailed explanations and examples.",
        (
            ("Advanced Techniques in {subtask}",
             "This sublesson covers advanced techniques and methods used in {subtask}."),
            ("Problem Solving with {subtask}",
             "This sublesson provides practical problem-solving approaches using {subtask}."),
        ),
    ),
    (
        "Mastering {subtask}",
        "This lesson focuses on achieving mastery in {subtask} through comprehensive study and practice.",
        (
            ("Expert-level {subtask} Applications",
             "This sublesson demonstrates expert-level applications of {subtask} in professional settings."),
            ("Future Trends in {subtask}",
             "This sublesson explores emerging trends and future developments in {subtask}."),
        ),
    ),
)

# (question, options, index of the correct option, explanation)
STANDARD_TEST_QUESTIONS: tuple[tuple[str, tuple[str, ...], int, str], ...] = (
    (
        "What is the main purpose of {subtask}?",
        ("A. To optimize computational processes", "B. To simplify complex data structures",
         "C. To enhance user interface design", "D. To improve system security"),
        0,
        "{subtask} primarily serves to optimize computational processes by streamlining "
        "algorithms and improving efficiency.",
    ),
    (
        "Which of the following is NOT a key component of {subtask}?",
        ("A. Data validation", "B. Error handling", "C. Marketing strategy", "D. System integration"),
        2,
        "Marketing strategy is not a technical component of {subtask}, which focuses on "
        "technical implementation rather than business aspects.",
    ),
    (
        "What is the best practice when implementing {subtask}?",
        ("A. Ignoring edge cases", "B. Following established patterns",
         "C. Avoiding documentation", "D. Using deprecated methods"),
        1,
        "Following established patterns ensures reliability, maintainability, and adherence "
        "to industry standards when implementing {subtask}.",
    ),
    (
        "How does {subtask} relate to {section}?",
        ("A. They are completely unrelated", "B. {subtask} is a prerequisite for {section}",
         "C. {subtask} is a component of {section}", "D. {section} replaces {subtask}"),
        2,
        "{subtask} is an integral component of {section}, providing essential functionality "
        "within the broader domain.",
    ),
    (
        "Which tool is most commonly used for {subtask}?",
        ("A. Specialized development environments", "B. General-purpose text editors",
         "C. Graphic design software", "D. Document management systems"),
        0,
        "Specialized development environments provide the necessary features and capabilities "
        "to efficiently work with {subtask}.",
    ),
)


def introductory_lessons(subtask_title: str, roadmap_title: str) -> list[dict[str, Any]]:
    names = {"subtask": subtask_title, "roadmap": roadmap_title}
    return [
        {
            "title": title.format(**names),
            "content": content.format(**names),
            "sublessons": [
                {"title": sub_title.format(**names), "content": sub_content.format(**names)}
                for sub_title, sub_content in sublessons
            ],
        }
        for title, content, sublessons in INTRODUCTORY_LESSONS
    ]


def core_concept_lessons(subtask_title: str, count: int = 3) -> list[dict[str, Any]]:
    """Numbered lessons for a path whose model output had an empty lessons list."""
    return [
        {
            "title": f"Lesson {i}: {subtask_title} Core Concepts",
            "content": (
                f"This lesson covers the essential concepts of {subtask_title} "
                "with detailed explanations and examples."
            ),
            "sublessons": [
                {
                    "title": f"Sublesson {i}.1: Understanding {subtask_title} Basics",
                    "content": (
                        "This sublesson provides a comprehensive introduction to the basics "
                        f"of {subtask_title}."
                    ),
                },
                {
                    "title": f"Sublesson {i}.2: Practical Application of {subtask_title}",
                    "content": (
                        f"This sublesson demonstrates how to apply {subtask_title} concepts "
                        "in real-world scenarios."
                    ),
                },
            ],
        }
        for i in range(1, count + 1)
    ]


def extended_lesson(number: int, subtask_title: str, template: dict[str, Any]) -> dict[str, Any]:
    """A follow-up lesson modelled on ``template``, the first lesson the model wrote."""
    excerpt = str(template.get("content") or "")[:100]
    sublesson_count = min(3, len(template.get("sublessons") or []))
    return {
        "title": f"Extended Lesson {number}: Additional {subtask_title} Concepts",
        "content": (
            "This lesson expands on the concepts covered earlier and provides additional "
            f"knowledge about {subtask_title}.\n\n"
            f"{excerpt}... (continued with more specific content for {subtask_title})"
        ),
        "sublessons": [
            {
                "title": f"Extended Sublesson {i}: Additional {subtask_title} Topic",
                "content": (
                    f"This sublesson covers additional aspects of {subtask_title} "
                    "with practical examples and explanations."
                ),
            }
            for i in range(1, sublesson_count + 1)
        ],
    }


def path_exercises(subtask_title: str) -> list[dict[str, str]]:
    return [
        {
            "title": f"Practice Exercise 1: Basic {subtask_title} Implementation",
            "description": (
                f"In this exercise, you will implement a basic solution using {subtask_title} "
                "concepts. Follow the steps outlined below to complete the exercise."
            ),
            "solution": (
                "Here is a step-by-step solution to the exercise, demonstrating how to "
                f"implement {subtask_title} correctly."
            ),
        },
        {
            "title": f"Practice Exercise 2: Advanced {subtask_title} Application",
            "description": (
                f"This exercise challenges you to apply advanced {subtask_title} concepts "
                "to solve a complex problem."
            ),
            "solution": (
                f"This solution demonstrates how to efficiently apply {subtask_title} "
                "principles to solve the given problem."
            ),
        },
    ]


def standard_path_test(subtask_title: str, section_title: str) -> dict[str, Any]:
    names = {"subtask": subtask_title, "section": section_title}
    questions = []
    for question, options, correct, explanation in STANDARD_TEST_QUESTIONS:
        filled = [option.format(**names) for option in options]
        questions.append({
            "question": question.format(**names),
            "options": filled,
            "correctAnswer": filled[correct],
            "explanation": explanation.format(**names),
        })
    return {
        "title": f"Comprehensive {subtask_title} Assessment",
        "description": (
            f"This test evaluates your understanding of {subtask_title} concepts and "
            "applications covered in this learning path."
        ),
        "questions": questions,
    }
