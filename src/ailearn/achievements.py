"""Achievement evaluation as a pure projection over progress."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass

from .models import AchievementDefinition, LessonKind, Module
from .progress import ProgressState

ALL_CATEGORIES = "All"

ACHIEVEMENT_RULES = frozenset(
    {
        "lessons_completed",
        "module_lessons_completed",
        "modules_completed",
        "perfect_quizzes",
        "exercises_completed",
        "terms_viewed",
        "streak_days",
    }
)


@dataclass(frozen=True)
class EvaluatedAchievement:
    """Achievement with progress derived for one learner."""

    definition: AchievementDefinition
    progress: int
    unlocked: bool

    @property
    def percent(self) -> float:
        return 100.0 * self.progress / self.definition.target


@dataclass(frozen=True)
class AchievementSummary:
    """Headline numbers for the achievements view."""

    unlocked_count: int
    total_count: int
    points_earned: int
    completion_percent: int


def _raw_progress(
    definition: AchievementDefinition, state: ProgressState, modules: Mapping[str, Module]
) -> int:
    """Return the uncapped metric an achievement rule counts."""
    rule = definition.rule
    if rule == "lessons_completed":
        return state.total_completed_lessons
    if rule == "module_lessons_completed":
        module = modules.get(definition.module_id or "")
        if module is None:
            return 0
        completed = state.completed_in(module.id)
        return len([lesson for lesson in module.lessons if lesson.id in completed])
    if rule == "modules_completed":
        return len(
            [
                module
                for module in modules.values()
                if module.lessons and all(lesson.id in state.completed_in(module.id) for lesson in module.lessons)
            ]
        )
    if rule == "perfect_quizzes":
        return len(state.perfect_quizzes)
    if rule == "exercises_completed":
        return len(state.completed_exercises)
    if rule == "terms_viewed":
        return len(state.viewed_terms)
    if rule == "streak_days":
        return state.streak_days
    raise ValueError(f"Unknown achievement rule: {rule}")


def attainable_maximum(
    definition: AchievementDefinition,
    modules: Mapping[str, Module],
    term_count: int,
    exercise_count: int,
) -> int | None:
    """Return the most progress the catalog allows for a rule, or None when unbounded."""
    rule = definition.rule
    if rule == "lessons_completed":
        return sum(len(module.lessons) for module in modules.values())
    if rule == "module_lessons_completed":
        module = modules.get(definition.module_id or "")
        return len(module.lessons) if module is not None else 0
    if rule == "modules_completed":
        return len([module for module in modules.values() if module.lessons])
    if rule == "perfect_quizzes":
        return len(
            [lesson for module in modules.values() for lesson in module.lessons if lesson.kind is LessonKind.QUIZ]
        )
    if rule == "exercises_completed":
        return exercise_count
    if rule == "terms_viewed":
        return term_count
    if rule == "streak_days":
        return None
    raise ValueError(f"Unknown achievement rule: {rule}")


def evaluate(
    state: ProgressState,
    achievements: Iterable[AchievementDefinition],
    modules: Mapping[str, Module],
) -> list[EvaluatedAchievement]:
    """Derive progress and unlock state for every achievement, in catalog order."""
    evaluated: list[EvaluatedAchievement] = []
    for definition in achievements:
        raw = _raw_progress(definition, state, modules)
        evaluated.append(
            EvaluatedAchievement(
                definition=definition,
                progress=min(raw, definition.target),
                unlocked=raw >= definition.target,
            )
        )
    return evaluated


def summarize(evaluated: Sequence[EvaluatedAchievement]) -> AchievementSummary:
    """Return unlocked count, points earned, and rounded completion rate."""
    unlocked = [item for item in evaluated if item.unlocked]
    total = len(evaluated)
    percent = round(100 * len(unlocked) / total) if total else 0
    return AchievementSummary(
        unlocked_count=len(unlocked),
        total_count=total,
        points_earned=sum(item.definition.points for item in unlocked),
        completion_percent=percent,
    )


def achievement_categories(achievements: Iterable[AchievementDefinition]) -> list[str]:
    categories = [ALL_CATEGORIES]
    for definition in achievements:
        if definition.category not in categories:
            categories.append(definition.category)
    return categories


def filter_achievements(evaluated: Iterable[EvaluatedAchievement], category: str) -> list[EvaluatedAchievement]:
    if category == ALL_CATEGORIES:
        return list(evaluated)
    return [item for item in evaluated if item.definition.category == category]
