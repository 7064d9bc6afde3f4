from datetime import date

import pytest

from ailearn.models import Lesson, LessonKind, Module
from ailearn.progress import ProgressTracker, is_lesson_locked, module_percent


def _module(*lesson_ids: str) -> Module:
    lessons = tuple(
        Lesson(
            id=lesson_id,
            title=lesson_id,
            duration_label="",
            kind=LessonKind.CONTENT,
            overview="",
            sections=(),
            questions=(),
            key_takeaways=(),
        )
        for lesson_id in lesson_ids
    )
    return Module(id="m", title="M", description="", order=0, estimated_hours=0, lessons=lessons)


def test_lesson_completion_is_idempotent() -> None:
    tracker = ProgressTracker()
    assert tracker.mark_lesson_completed("m", "l1") is True
    assert tracker.mark_lesson_completed("m", "l1") is False
    assert tracker.completed_lesson_ids("m") == ["l1"]
    assert tracker.is_lesson_completed("m", "l1") is True
    assert tracker.is_lesson_completed("other", "l1") is False


def test_snapshot_is_detached_from_tracker() -> None:
    tracker = ProgressTracker()
    tracker.mark_lesson_completed("m", "l1")
    tracker.record_term_view("AI")
    state = tracker.snapshot(date(2026, 1, 1))
    tracker.mark_lesson_completed("m", "l2")
    tracker.record_term_view("ML")
    assert state.completed_in("m") == frozenset({"l1"})
    assert state.completed_in("missing") == frozenset()
    assert state.total_completed_lessons == 1
    assert state.viewed_terms == frozenset({"AI"})


def test_snapshot_lessons_are_read_only() -> None:
    tracker = ProgressTracker()
    tracker.mark_lesson_completed("m", "l1")
    state = tracker.snapshot(date(2026, 1, 1))
    with pytest.raises(TypeError):
        state.completed_lessons["m"] = frozenset()  # type: ignore[index]


def test_streak_counts_consecutive_days() -> None:
    tracker = ProgressTracker()
    for day in (1, 2, 3, 5, 6):
        tracker.record_activity(date(2026, 3, day))
    assert tracker.streak_days(date(2026, 3, 6)) == 2
    assert tracker.streak_days(date(2026, 3, 7)) == 2
    assert tracker.streak_days(date(2026, 3, 8)) == 0
    assert tracker.streak_days(date(2026, 3, 3)) == 3


def test_exercise_completion() -> None:
    tracker = ProgressTracker()
    assert tracker.mark_exercise_completed("e1") is True
    assert tracker.mark_exercise_completed("e1") is False
    assert tracker.is_exercise_completed("e1") is True


def test_module_percent_and_locking() -> None:
    module = _module("a", "b", "c", "d")
    assert module_percent(module, {"a"}) == 25.0
    assert module_percent(module, {"a", "zzz"}) == 25.0
    assert module_percent(_module(), set()) == 0.0
    assert is_lesson_locked(module, 0, set()) is False
    assert is_lesson_locked(module, 1, set()) is True
    assert is_lesson_locked(module, 1, {"a"}) is False
    assert is_lesson_locked(module, 2, {"a"}) is True
