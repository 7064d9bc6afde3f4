"""Session-scoped learner progress.

Progress lives only as long as the running process. Lesson completion is
keyed by module id and lesson id; the catalog loader guarantees lesson ids
are globally unique.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, timedelta
from types import MappingProxyType

from .models import Module


@dataclass(frozen=True)
class ProgressState:
    """Immutable snapshot handed to read-only projections."""

    completed_lessons: Mapping[str, frozenset[str]]
    perfect_quizzes: frozenset[str]
    completed_exercises: frozenset[str]
    viewed_terms: frozenset[str]
    streak_days: int

    def completed_in(self, module_id: str) -> frozenset[str]:
        """Return completed lesson ids for one module."""
        return self.completed_lessons.get(module_id, frozenset())

    @property
    def total_completed_lessons(self) -> int:
        return sum(len(ids) for ids in self.completed_lessons.values())


class ProgressTracker:
    """Mutable in-memory progress for one learner."""

    def __init__(self) -> None:
        """Initialize empty progress."""
        self._completed_lessons: dict[str, list[str]] = {}
        self._perfect_quizzes: set[str] = set()
        self._completed_exercises: set[str] = set()
        self._viewed_terms: set[str] = set()
        self._activity_days: set[date] = set()

    def mark_lesson_completed(self, module_id: str, lesson_id: str) -> bool:
        """Record lesson completion; return False if it was already recorded."""
        completed = self._completed_lessons.setdefault(module_id, [])
        if lesson_id in completed:
            return False
        completed.append(lesson_id)
        return True

    def completed_lesson_ids(self, module_id: str) -> list[str]:
        """Return completed lesson ids in completion order."""
        return list(self._completed_lessons.get(module_id, []))

    def is_lesson_completed(self, module_id: str, lesson_id: str) -> bool:
        return lesson_id in self._completed_lessons.get(module_id, [])

    def record_perfect_quiz(self, lesson_id: str) -> None:
        self._perfect_quizzes.add(lesson_id)

    def mark_exercise_completed(self, exercise_id: str) -> bool:
        """Record exercise completion; return False if already recorded."""
        if exercise_id in self._completed_exercises:
            return False
        self._completed_exercises.add(exercise_id)
        return True

    def is_exercise_completed(self, exercise_id: str) -> bool:
        return exercise_id in self._completed_exercises

    def record_term_view(self, term: str) -> None:
        self._viewed_terms.add(term)

    def record_activity(self, day: date) -> None:
        """Mark a calendar day as one with learning activity."""
        self._activity_days.add(day)

    def streak_days(self, today: date) -> int:
        """Count consecutive active days ending today, or yesterday if today is idle."""
        cursor = today if today in self._activity_days else today - timedelta(days=1)
        streak = 0
        while cursor in self._activity_days:
            streak += 1
            cursor -= timedelta(days=1)
        return streak

    def snapshot(self, today: date) -> ProgressState:
        """Return an immutable view of current progress."""
        return ProgressState(
            completed_lessons=MappingProxyType({key: frozenset(ids) for key, ids in self._completed_lessons.items()}),
            perfect_quizzes=frozenset(self._perfect_quizzes),
            completed_exercises=frozenset(self._completed_exercises),
            viewed_terms=frozenset(self._viewed_terms),
            streak_days=self.streak_days(today),
        )


def module_percent(module: Module, completed_ids: frozenset[str] | set[str] | list[str]) -> float:
    """Return completed share of a module's lessons as a percentage."""
    total = len(module.lessons)
    if total == 0:
        return 0.0
    done = len([lesson for lesson in module.lessons if lesson.id in completed_ids])
    return 100.0 * done / total


def is_lesson_locked(module: Module, index: int, completed_ids: frozenset[str] | set[str] | list[str]) -> bool:
    """A lesson after the first is locked until its predecessor is complete."""
    if index <= 0:
        return False
    return module.lessons[index - 1].id not in completed_ids
