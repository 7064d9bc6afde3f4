"""Application service for catalog browsing, search, and session progress."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import date

from . import achievements as achievement_rules
from .content_loader import load_catalog
from .glossary import find_term
from .models import Catalog, Exercise, GlossaryTerm, Lesson, Module
from .progress import ProgressTracker, is_lesson_locked, module_percent
from .quiz import QuizResult, grade_quiz
from .search import (
    DEFAULT_WEIGHTS,
    GlossaryResult,
    LessonResult,
    ModuleResult,
    RelevanceWeights,
    SearchResult,
    filter_by_category,
    search,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ShowTerm:
    """Navigate to the term detail view."""

    term: GlossaryTerm


@dataclass(frozen=True)
class ShowModule:
    """Navigate to a module's lesson list."""

    module: Module


@dataclass(frozen=True)
class ShowLesson:
    """Navigate to one lesson within its module."""

    module: Module
    lesson: Lesson


NavigationTarget = ShowTerm | ShowModule | ShowLesson


@dataclass(frozen=True)
class LessonStatus:
    """Per-lesson state within a module view."""

    lesson: Lesson
    completed: bool
    locked: bool


@dataclass(frozen=True)
class ModuleProgression:
    """Module completion summary with lesson breakdown."""

    module_id: str
    module_title: str
    completed_lessons: int
    total_lessons: int
    percent: float
    lessons: tuple[LessonStatus, ...]


@dataclass(frozen=True)
class Dashboard:
    """Overall progress across all modules."""

    completed_lessons: int
    total_lessons: int
    percent: float
    modules: tuple[ModuleProgression, ...]


class LearnService:
    """Coordinates the catalog with one learner's session progress."""

    def __init__(self, catalog: Catalog | None = None, clock: Callable[[], date] = date.today) -> None:
        """Initialize with an explicit catalog, or the bundled one."""
        self.catalog = catalog if catalog is not None else load_catalog()
        self.progress = ProgressTracker()
        self._clock = clock

    @property
    def modules(self) -> Mapping[str, Module]:
        return self.catalog.modules

    def search(
        self, query: str, category: str | None = None, weights: RelevanceWeights = DEFAULT_WEIGHTS
    ) -> list[SearchResult]:
        """Score the catalog for a query and apply an optional category facet."""
        results = search(query, self.catalog, weights)
        return filter_by_category(results, category)

    def select_result(self, result: SearchResult) -> NavigationTarget:
        """Translate a chosen search result into a navigation target."""
        if isinstance(result, GlossaryResult):
            target: NavigationTarget = ShowTerm(term=result.term)
        elif isinstance(result, ModuleResult):
            target = ShowModule(module=result.module)
        elif isinstance(result, LessonResult):
            target = ShowLesson(module=result.module, lesson=result.lesson)
        else:
            raise TypeError(f"Unsupported search result: {type(result).__name__}")
        logger.debug("Search selection %r -> %s", result.title, type(target).__name__)
        return target

    def get_module(self, module_id: str) -> Module | None:
        """Get module by id."""
        return self.catalog.modules.get(module_id)

    def get_term(self, name: str) -> GlossaryTerm:
        """Get glossary term by exact name."""
        term = find_term(self.catalog.glossary, name)
        if term is None:
            raise KeyError(name)
        return term

    def view_term(self, name: str) -> GlossaryTerm:
        """Look up a term and count it as viewed."""
        term = self.get_term(name)
        self.progress.record_term_view(term.term)
        return term

    def _unlocked_lesson(self, module_id: str, lesson_id: str) -> Lesson:
        """Return a lesson, raising ValueError while its predecessor is incomplete."""
        lesson = self.catalog.lesson(module_id, lesson_id)
        module = self.catalog.modules[module_id]
        if is_lesson_locked(module, module.lessons.index(lesson), self.progress.completed_lesson_ids(module_id)):
            raise ValueError(f"Lesson '{lesson_id}' is locked until the previous lesson is complete.")
        return lesson

    def complete_lesson(self, module_id: str, lesson_id: str) -> bool:
        """Mark a lesson complete; return False if it already was.

        Raises KeyError for unknown ids and ValueError for a locked lesson.
        """
        lesson = self._unlocked_lesson(module_id, lesson_id)
        added = self.progress.mark_lesson_completed(module_id, lesson.id)
        self.progress.record_activity(self._clock())
        if added:
            logger.debug("Completed lesson %s/%s", module_id, lesson_id)
        return added

    def submit_quiz(self, module_id: str, lesson_id: str, answers: Mapping[int, int]) -> QuizResult:
        """Grade a quiz attempt and complete the quiz lesson."""
        lesson = self._unlocked_lesson(module_id, lesson_id)
        result = grade_quiz(lesson, answers)
        if result.perfect:
            self.progress.record_perfect_quiz(lesson.id)
        self.complete_lesson(module_id, lesson_id)
        return result

    def get_exercise(self, exercise_id: str) -> Exercise:
        for exercise in self.catalog.exercises:
            if exercise.id == exercise_id:
                return exercise
        raise KeyError(exercise_id)

    def complete_exercise(self, exercise_id: str) -> bool:
        """Mark an exercise complete; return False if it already was."""
        exercise = self.get_exercise(exercise_id)
        self.progress.record_activity(self._clock())
        return self.progress.mark_exercise_completed(exercise.id)

    def module_progression(self, module_id: str) -> ModuleProgression:
        """Return completion and lock state for each lesson of a module."""
        module = self.catalog.modules[module_id]
        completed = set(self.progress.completed_lesson_ids(module_id))
        rows = tuple(
            LessonStatus(
                lesson=lesson,
                completed=lesson.id in completed,
                locked=is_lesson_locked(module, index, completed),
            )
            for index, lesson in enumerate(module.lessons)
        )
        return ModuleProgression(
            module_id=module.id,
            module_title=module.title,
            completed_lessons=len([row for row in rows if row.completed]),
            total_lessons=len(rows),
            percent=module_percent(module, completed),
            lessons=rows,
        )

    def dashboard(self) -> Dashboard:
        """Return overall and per-module progress."""
        modules = tuple(self.module_progression(module_id) for module_id in self.catalog.modules)
        total = sum(item.total_lessons for item in modules)
        done = sum(item.completed_lessons for item in modules)
        percent = 100.0 * done / total if total else 0.0
        return Dashboard(completed_lessons=done, total_lessons=total, percent=percent, modules=modules)

    def achievements(self) -> list[achievement_rules.EvaluatedAchievement]:
        """Evaluate every achievement against current progress."""
        state = self.progress.snapshot(self._clock())
        return achievement_rules.evaluate(state, self.catalog.achievements, self.catalog.modules)
