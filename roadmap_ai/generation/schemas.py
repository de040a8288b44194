"""Typed shapes of the artifacts the model is asked to produce.

Field aliases follow the camelCase JSON the prompts request and the web
client stores, so ``model_dump(by_alias=True)`` round-trips with the
model output.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ArtifactModel(BaseModel):
    """Base for generated artifacts: accepts field names or camelCase aliases."""

    model_config = ConfigDict(populate_by_name=True)

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class SubtaskStub(ArtifactModel):
    title: str
    completed: bool = False
    id: str = ""


class Section(ArtifactModel):
    title: str
    progress: float = 0.0
    subtasks: list[SubtaskStub]


class RoadmapStructure(ArtifactModel):
    """Title, required skills, and 4–6 sections of 3–6 subtask stubs."""

    title: str
    required_skills: list[str] = Field(default_factory=list, alias="requiredSkills")
    sections: list[Section]


class Resource(ArtifactModel):
    title: str
    url: str
    type: str
    description: str


class SubtaskDetail(ArtifactModel):
    """On-demand enrichment for one subtask."""

    description: str
    resources: list[Resource]
    practical_exercises: list[str] = Field(alias="practicalExercises")
    validation_criteria: list[str] = Field(alias="validationCriteria")
    prerequisites: list[str] = Field(default_factory=list)


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class QuizQuestion(ArtifactModel):
    question: str
    options: list[str]
    correct_answer_index: int = Field(alias="correctAnswerIndex")
    difficulty: Difficulty
    time_limit: int = Field(alias="timeLimit")


class Quiz(ArtifactModel):
    questions: list[QuizQuestion]


class SubtaskOutline(ArtifactModel):
    """A subtask as listed in a tutorial prompt."""

    title: str
    description: str = ""


class RoadmapSubtask(ArtifactModel):
    title: str
    description: str = ""
    completed: bool = False
    prerequisites: list[str] = Field(default_factory=list)
    resources: list[Resource] = Field(default_factory=list)
    practical_exercises: list[str] = Field(default_factory=list, alias="practicalExercises")
    validation_criteria: list[str] = Field(default_factory=list, alias="validationCriteria")


class RoadmapSection(ArtifactModel):
    title: str
    description: str = ""
    progress: float = 0.0
    subtasks: list[RoadmapSubtask]


class FullRoadmap(ArtifactModel):
    """A complete roadmap with subtask content, generated from a career profile."""

    title: str
    description: str = ""
    required_skills: list[str] = Field(default_factory=list, alias="requiredSkills")
    sections: list[RoadmapSection]


class Sublesson(ArtifactModel):
    title: str
    content: str


class Lesson(ArtifactModel):
    title: str
    content: str
    sublessons: list[Sublesson] = Field(default_factory=list)


class PathExercise(ArtifactModel):
    title: str
    description: str
    solution: str = ""


class PathTestQuestion(ArtifactModel):
    question: str
    options: list[str]
    correct_answer: str = Field(alias="correctAnswer")
    explanation: str = ""


class PathTest(ArtifactModel):
    title: str
    description: str = ""
    questions: list[PathTestQuestion]


class PathMetadata(ArtifactModel):
    subtask_title: str = Field(alias="subtaskTitle")
    section_title: str = Field(default="", alias="sectionTitle")
    roadmap_title: str = Field(alias="roadmapTitle")
    experience_level: str = Field(default="beginner", alias="experienceLevel")


class LearningPath(ArtifactModel):
    """Lessons, exercises and a closing test that take a learner through one subtask."""

    title: str
    description: str
    lessons: list[Lesson]
    exercises: list[PathExercise]
    test: PathTest
    real_world_applications: str = Field(alias="realWorldApplications")
    metadata: PathMetadata
