"""Core domain models for the learning catalog."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum


class LessonKind(str, Enum):
    """How a lesson is presented."""

    CONTENT = "lesson"
    QUIZ = "quiz"


class Rarity(str, Enum):
    """Achievement rarity tier."""

    COMMON = "common"
    UNCOMMON = "uncommon"
    RARE = "rare"
    EPIC = "epic"
    LEGENDARY = "legendary"


@dataclass(frozen=True)
class GlossaryTerm:
    """One glossary entry."""

    term: str
    definition: str
    category: str
    related_terms: tuple[str, ...]


@dataclass(frozen=True)
class Section:
    """Titled block of lesson text."""

    title: str
    body: str


@dataclass(frozen=True)
class QuizQuestion:
    """Multiple-choice question with one correct option."""

    id: int
    prompt: str
    options: tuple[str, ...]
    correct_option_index: int
    explanation: str


@dataclass(frozen=True)
class Lesson:
    """Content lesson or quiz owned by a module."""

    id: str
    title: str
    duration_label: str
    kind: LessonKind
    overview: str
    sections: tuple[Section, ...]
    questions: tuple[QuizQuestion, ...]
    key_takeaways: tuple[str, ...]


@dataclass(frozen=True)
class Module:
    """Top-level learning module."""

    id: str
    title: str
    description: str
    order: int
    estimated_hours: int
    lessons: tuple[Lesson, ...]


@dataclass(frozen=True)
class Exercise:
    """Guided practical exercise."""

    id: str
    title: str
    description: str
    module_title: str
    difficulty: str
    estimated_time: str
    exercise_type: str
    skills: tuple[str, ...]


@dataclass(frozen=True)
class AchievementDefinition:
    """Static achievement; unlock state is derived from progress."""

    id: str
    title: str
    description: str
    category: str
    points: int
    rarity: Rarity
    target: int
    rule: str
    module_id: str | None = None


@dataclass(frozen=True)
class Catalog:
    """All static content, loaded once and passed explicitly."""

    glossary: tuple[GlossaryTerm, ...]
    modules: Mapping[str, Module]
    exercises: tuple[Exercise, ...]
    achievements: tuple[AchievementDefinition, ...]

    def lesson(self, module_id: str, lesson_id: str) -> Lesson:
        """Return one lesson, raising KeyError when either id is unknown."""
        module = self.modules[module_id]
        for lesson in module.lessons:
            if lesson.id == lesson_id:
                return lesson
        raise KeyError(lesson_id)
