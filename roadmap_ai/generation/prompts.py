"""Prompt builders for every generation task.

Each builder returns a ``PromptSpec``: the system and user messages plus
the sampling settings that task is tuned for.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import NamedTuple, Optional, Sequence

from roadmap_ai.core.document import CareerProfile, ExperienceLevel, KnowledgeDocument
from roadmap_ai.generation.schemas import SubtaskOutline


@dataclass(frozen=True, slots=True)
class PromptSpec:
    system: str
    user: str
    temperature: float = 0.7
    max_tokens: Optional[int] = None


class DifficultyMix(NamedTuple):
    easy: int
    medium: int
    hard: int


TIME_LIMITS = {"easy": 30, "medium": 45, "hard": 60}


def difficulty_mix(count: int) -> DifficultyMix:
    """Split ``count`` questions roughly 1/3 easy, 1/5 hard, rest medium.

    Fifteen questions give 5 easy, 7 medium and 3 hard.
    """
    if count < 1:
        raise ValueError(f"Question count must be positive, got {count}")
    easy = round(count / 3)
    hard = max(1, round(count * 0.2)) if count > 1 else 0
    medium = max(0, count - easy - hard)
    return DifficultyMix(easy=easy, medium=medium, hard=hard)


def _level(experience_level: Optional[ExperienceLevel]) -> str:
    return (experience_level or ExperienceLevel.BEGINNER).value


def format_knowledge_context(documents: Sequence[KnowledgeDocument]) -> str:
    """Render grounding documents as a context block; empty when there are none."""
    if not documents:
        return ""

    lines = [
        "Here is relevant information from our knowledge base to help you "
        "create an accurate roadmap:",
        "",
    ]
    for index, doc in enumerate(documents, start=1):
        lines.append(
            f'Document {index} - "{doc.title}" '
            f"(Category: {doc.category}, Difficulty: {doc.difficulty}):"
        )
        lines.append(doc.content)
        lines.append("")

    lines.append("Additional context from knowledge base:")
    for doc in documents:
        if doc.tags:
            lines.append(f'Tags for "{doc.title}": {", ".join(doc.tags)}')
        if doc.references:
            lines.append(f'References for "{doc.title}":')
            lines.extend(doc.references)
    return "\n".join(lines)


def format_knowledge_excerpt(documents: Sequence[KnowledgeDocument], limit: int = 3) -> str:
    return "\n\n".join(
        f"Doc {index}: {doc.title}\n{doc.content}"
        for index, doc in enumerate(documents[:limit], start=1)
    )


STRUCTURE_SYSTEM = """You are an expert roadmap architect. Generate a career roadmap JSON with 4-6 sections and 3-6 subtasks per section.
Each subtask must only include a title and "completed": false.

NO markdown, NO descriptions, NO resources. Only clean JSON that follows this structure exactly:
{
  "title": "Career Title",
  "requiredSkills": [],
  "sections": [
    {
      "title": "Section Title",
      "progress": 0,
      "subtasks": [
        { "title": "Subtask Title", "completed": false, "id": "id" }
      ]
    }
  ]
}

When generating the roadmap:
1. Structure the roadmap logically, progressing from foundational to advanced topics
2. Align recommendations with current best practices in the field
3. Ensure skills, technologies, and tools mentioned are relevant and up-to-date
4. Avoid generating false or misleading information"""


def roadmap_structure_prompt(
    topic: str,
    experience_level: Optional[ExperienceLevel] = None,
    context: Optional[str] = None,
    documents: Sequence[KnowledgeDocument] = (),
) -> PromptSpec:
    system = STRUCTURE_SYSTEM
    knowledge = format_knowledge_context(documents)
    if knowledge:
        system += (
            "\n\nUse the following information from our knowledge base to ensure "
            f"your roadmap is accurate and comprehensive:\n\n{knowledge}"
        )

    user = (
        f'Based on the topic "{topic}", generate a career roadmap JSON with 4-6 sections '
        'and 3-6 subtasks per section. Each subtask must only include a title and "completed": false.'
    )
    if experience_level is not None:
        user += f"\n\nTarget experience level: {experience_level.value}."
    if context:
        user += f"\n\nAdditional context from the learner: {context}"

    return PromptSpec(system=system, user=user, temperature=0.5, max_tokens=2048)


def subtask_detail_prompt(roadmap_title: str, section_title: str, subtask_title: str) -> PromptSpec:
    system = f"""You are an expert educational content creator. Generate detailed information for the subtask "{subtask_title}"
which is part of the section "{section_title}" in the "{roadmap_title}" career roadmap.

Your response must be a JSON object with the following structure:
{{
  "description": "Detailed markdown description (minimum 200 words)",
  "resources": [
    {{
      "title": "Resource Title",
      "url": "https://example.com",
      "type": "video|article|course|book|tool",
      "description": "Brief description of this resource"
    }}
  ],
  "practicalExercises": ["Exercise 1 description"],
  "validationCriteria": ["Criterion 1"],
  "prerequisites": ["Prerequisite 1"]
}}

Include at least 5 resources, at least 3 practical exercises and at least 3 validation criteria.
Ensure the description is comprehensive, detailed, and formatted in markdown with proper headings, bullet points, and emphasis where appropriate.
The resources must be real, accurate URLs to quality learning materials. Include a diverse mix of resource types.
The practical exercises should be challenging but achievable, with clear objectives.
The validation criteria should help the user assess their mastery of the subtask."""

    user = (
        f'Generate detailed information for the subtask "{subtask_title}" which is part of '
        f'the section "{section_title}" in the "{roadmap_title}" career roadmap.'
    )
    return PromptSpec(system=system, user=user, temperature=0.7, max_tokens=4096)


TUTORIAL_SYSTEM = """You are an expert educational content creator specializing in creating comprehensive, well-structured tutorials.
Your task is to create a complete markdown tutorial for a specific section of a learning roadmap.

The tutorial should:
1. Start with a clear introduction to the topic
2. Be comprehensive and cover all important aspects of the subject
3. Include code examples where relevant
4. Be structured with proper headings (h1, h2, h3)
5. Include practical tips and best practices
6. Be written in an engaging, clear style
7. End with a summary and next steps
8. Be formatted in proper markdown with syntax highlighting for code blocks

The output should ONLY be the markdown content, properly formatted and ready to display."""


def section_tutorial_prompt(
    roadmap_title: str,
    section_title: str,
    description: Optional[str] = None,
    subtasks: Sequence[SubtaskOutline] = (),
) -> PromptSpec:
    user = (
        f'Please create a comprehensive tutorial for the section "{section_title}" '
        f'in the roadmap "{roadmap_title}".'
    )
    if description:
        user += f"\n\nSection description: {description}"
    if subtasks:
        user += "\n\nThis section includes the following subtasks that should be covered in the tutorial:"
        for index, subtask in enumerate(subtasks, start=1):
            line = f"\n{index}. {subtask.title}"
            if subtask.description:
                line += f" - {subtask.description}"
            user += line
    user += "\n\nPlease provide a complete, well-structured markdown tutorial that covers all these aspects in depth."

    return PromptSpec(system=TUTORIAL_SYSTEM, user=user, temperature=0.7, max_tokens=4000)


def quiz_prompt(title: str, description: Optional[str], question_count: int) -> PromptSpec:
    mix = difficulty_mix(question_count)
    about = f'"{title}"'
    if description:
        about += f' with the following detailed description: "{description}"'

    system = f"""You are an expert tutor and quiz creator. Your task is to create a quiz about {about}.

Generate {question_count} questions about this topic with the following distribution:
- {mix.easy} easy questions ({TIME_LIMITS["easy"]} seconds to answer)
- {mix.medium} medium questions ({TIME_LIMITS["medium"]} seconds to answer)
- {mix.hard} hard questions ({TIME_LIMITS["hard"]} seconds to answer)

For each question:
1. Provide the question text
2. Provide 4 possible answers (one correct, three incorrect but plausible)
3. Indicate which answer is correct (by index 0-3)
4. Specify the difficulty level (easy, medium, or hard)

The questions should test understanding, not just memorization.
IMPORTANT: Vary the position of the correct answer. Don't always put it at the same index.

Return the result as valid JSON with this exact structure:
{{
  "questions": [
    {{
      "question": "Question text here?",
      "options": ["Option A", "Option B", "Option C", "Option D"],
      "correctAnswerIndex": 0,
      "difficulty": "easy",
      "timeLimit": 30
    }}
  ]
}}"""

    user = f"Generate a quiz about {title}"
    if description:
        user += f" based on this description: {description}"
    user += (
        ". Make sure to vary the position of the correct answer (correctAnswerIndex) "
        "for each question! Don't always use index 0."
    )
    return PromptSpec(system=system, user=user, temperature=0.7)


ROADMAP_DESCRIPTION_SYSTEM = """You are an expert in creating educational roadmap descriptions.
Your task is to create a detailed markdown description for a learning roadmap.

The description must:
1. Start with an H1 heading with the roadmap title
2. Provide a clear, motivational introduction
3. Explain why this subject is important to learn
4. Include a "What You'll Learn" section with bullet points
5. Include a "Prerequisites" section (if applicable)
6. Be approximately 300-500 words in total, in English

The output should be just the markdown content, properly formatted and ready for display."""


def roadmap_description_prompt(
    title: str, experience_level: Optional[ExperienceLevel] = None
) -> PromptSpec:
    user = (
        f'Please create a comprehensive description for a roadmap about "{title}" '
        f"for {_level(experience_level)} level."
    )
    return PromptSpec(system=ROADMAP_DESCRIPTION_SYSTEM, user=user, max_tokens=1000)


def section_description_prompt(
    roadmap_title: str,
    section_title: str,
    experience_level: Optional[ExperienceLevel] = None,
) -> PromptSpec:
    system = f"""You are an expert in creating educational section descriptions for learning roadmaps.
Your task is to create a short and useful description for a section of a learning roadmap.

The description must:
1. Clearly explain the purpose of the "{section_title}" section in the context of the "{roadmap_title}" roadmap
2. Provide a concise summary of what this section will cover
3. Mention the importance of this section in the overall learning process
4. Be approximately 100-200 words, in English
5. NOT include headings or complex markdown formatting

The output should be a concise paragraph, clear and informative about the section."""

    user = (
        f'Please create a concise description for the "{section_title}" section of the '
        f'"{roadmap_title}" roadmap for {_level(experience_level)} level.'
    )
    return PromptSpec(system=system, user=user, max_tokens=300)


def subtask_summary_prompt(roadmap_title: str, section_title: str, subtask_title: str) -> PromptSpec:
    system = f"""You are an expert educational content creator.
Generate a concise, one-paragraph description (1-2 sentences) for the subtask "{subtask_title}"
which is part of the section "{section_title}" in the "{roadmap_title}" roadmap.

The description should:
1. Be brief but informative (maximum 200 characters)
2. Explain what the learner will accomplish in this subtask
3. Avoid complex technical jargon and markdown formatting

The output should be just a single, concise paragraph."""

    user = (
        f'Please create a short, concise description for the "{subtask_title}" subtask which is '
        f'part of the "{section_title}" section in the "{roadmap_title}" roadmap.'
    )
    return PromptSpec(system=system, user=user, max_tokens=150)


FULL_ROADMAP_SYSTEM = """You are an AI that generates structured career roadmaps in JSON.
Requirements:
- 4 to 6 sections (custom titles)
- Each section must have 3+ subtasks
- Each subtask includes title, markdown description (200+ words), prerequisites, 5+ resources, exercises, validation
- Use proper markdown in descriptions
- Return ONLY valid JSON object, nothing else."""


def full_roadmap_prompt(
    profile: CareerProfile, documents: Sequence[KnowledgeDocument] = ()
) -> PromptSpec:
    preferences = [
        f"Experience level: {profile.experience_level.value}.",
        f"Learning timeframe: {profile.timeframe}.",
        f"Learning approach: {profile.learning_focus}.",
    ]
    if profile.current_skills:
        preferences.append(f"Current skills: {profile.current_skills}")
    preferences.append(f"Preferred resources: {', '.join(profile.preferred_resources)}.")

    user = (
        f'Create a {profile.experience_level.value} roadmap for "{profile.topic}".\n'
        f"User goals: {profile.career_description or 'not specified'}\n\n"
        + "\n".join(preferences)
    )
    excerpt = format_knowledge_excerpt(documents)
    if excerpt:
        user += f"\n\nUse ONLY this knowledge:\n{excerpt}"

    return PromptSpec(system=FULL_ROADMAP_SYSTEM, user=user, temperature=0.7, max_tokens=4096)


def tutor_chat_prompt(prompt: str, title: str, description: Optional[str] = None) -> PromptSpec:
    system = f"You are an expert programming tutor helping with {title}. "
    if description:
        system += f"This topic covers: {description}. "
    system += "Provide clear, concise, and practical answers. Include code examples when relevant."
    return PromptSpec(system=system, user=prompt, temperature=0.7, max_tokens=1000)


LEARNING_PATH_FORMAT = """{
  "title": "Clear, specific title for the path",
  "description": "Detailed markdown description of the path, its importance, and what the learner will learn",
  "lessons": [
    {
      "title": "Main Lesson Title",
      "content": "Detailed lesson content with concepts, examples, and explanations in markdown",
      "sublessons": [
        { "title": "Sublesson Title", "content": "Detailed sublesson content with examples in markdown" }
      ]
    }
  ],
  "exercises": [
    {
      "title": "Exercise Title",
      "description": "Exercise description with specific requirements and steps",
      "solution": "Detailed solution with explanations"
    }
  ],
  "test": {
    "title": "Comprehensive Test",
    "description": "This test will verify your understanding of all concepts covered in this path.",
    "questions": [
      {
        "question": "Specific, technical question related to the path?",
        "options": ["A. Option A", "B. Option B", "C. Option C", "D. Option D"],
        "correctAnswer": "A. Option A",
        "explanation": "Why this answer is correct and the others are not"
      }
    ]
  },
  "realWorldApplications": "How this knowledge is applied in real-world scenarios, with examples"
}"""


def learning_path_prompt(
    roadmap_title: str,
    section_title: str,
    subtask_title: str,
    experience_level: Optional[ExperienceLevel] = None,
    subtask_description: Optional[str] = None,
    path_description: Optional[str] = None,
) -> PromptSpec:
    placement = f'the subtask "{subtask_title}"'
    if section_title:
        placement += f' which is part of the section "{section_title}"'
    placement += f' in the career roadmap "{roadmap_title}"'

    system = f"""You are an expert educational content creator with deep knowledge in all technical fields.
Generate a detailed and comprehensive learning path for {placement}.

The learner's experience level is: {_level(experience_level)}."""
    if subtask_description:
        system += f"\n\nAdditional context about the subtask: {subtask_description}"
    if path_description:
        system += f"\n\nLearner's description of the desired path: {path_description}"
    system += f"""

Requirements:
1. Cover everything the learner needs for this subtask, from basic to advanced concepts.
2. Include 5-8 main lessons, each with 3-5 sublessons, with examples and code snippets where relevant.
3. Include 3-5 practical exercises with detailed descriptions and solutions.
4. Include a test with at least 10 questions, each with 4 options and an explanation.
5. Include a section on real-world applications of the knowledge.
6. Use markdown formatting in every text field: headers, lists, code blocks, emphasis.

Your response MUST be valid JSON in exactly this format:
{LEARNING_PATH_FORMAT}"""

    user = (
        f"Please generate a detailed learning path for {placement}.\n\n"
        f"Experience level: {_level(experience_level)}"
    )
    if subtask_description:
        user += f"\n\nAdditional context: {subtask_description}"
    if path_description:
        user += f"\n\nPath description requested by the learner: {path_description}"
    user += "\n\nPlease provide your response in valid JSON format."

    return PromptSpec(system=system, user=user, temperature=1.0, max_tokens=4096)
