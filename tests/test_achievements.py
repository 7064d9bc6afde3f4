from datetime import date

import pytest

from ailearn.achievements import (
    achievement_categories,
    attainable_maximum,
    evaluate,
    filter_achievements,
    summarize,
)
from ailearn.content_loader import load_catalog
from ailearn.models import AchievementDefinition, Rarity
from ailearn.progress import ProgressTracker


def _by_id(evaluated):
    return {item.definition.id: item for item in evaluated}


def test_fresh_progress_unlocks_nothing() -> None:
    catalog = load_catalog()
    state = ProgressTracker().snapshot(date(2026, 1, 1))
    evaluated = evaluate(state, catalog.achievements, catalog.modules)
    assert [item.definition.id for item in evaluated] == [item.id for item in catalog.achievements]
    assert not any(item.unlocked for item in evaluated)
    summary = summarize(evaluated)
    assert summary.unlocked_count == 0
    assert summary.points_earned == 0
    assert summary.completion_percent == 0


def test_module_and_lesson_rules() -> None:
    catalog = load_catalog()
    tracker = ProgressTracker()
    for lesson in catalog.modules["fundamentals"].lessons:
        tracker.mark_lesson_completed("fundamentals", lesson.id)
    tracker.mark_lesson_completed("algorithms", "ml-introduction")

    evaluated = _by_id(evaluate(tracker.snapshot(date(2026, 1, 1)), catalog.achievements, catalog.modules))
    assert evaluated["first_lesson"].unlocked is True
    assert evaluated["first_lesson"].progress == 1
    assert evaluated["fundamentals_master"].unlocked is True
    assert evaluated["fundamentals_master"].percent == 100.0
    assert evaluated["ml_expert"].unlocked is True
    assert evaluated["ai_scholar"].progress == 2
    assert evaluated["ai_scholar"].unlocked is True

    summary = summarize(list(evaluated.values()))
    assert summary.unlocked_count == 4
    assert summary.points_earned == 335
    assert summary.completion_percent == 50


def test_partially_completed_module_does_not_count_as_completed() -> None:
    catalog = load_catalog()
    tracker = ProgressTracker()
    tracker.mark_lesson_completed("fundamentals", "intro-to-ai")
    tracker.mark_lesson_completed("algorithms", "ml-introduction")

    evaluated = _by_id(evaluate(tracker.snapshot(date(2026, 1, 1)), catalog.achievements, catalog.modules))
    assert evaluated["ai_scholar"].progress == 1
    assert evaluated["ai_scholar"].definition.target == 2
    assert evaluated["ai_scholar"].unlocked is False


def test_activity_rules() -> None:
    catalog = load_catalog()
    tracker = ProgressTracker()
    tracker.record_perfect_quiz("fundamentals-quiz")
    for index in range(3):
        tracker.mark_exercise_completed(f"e{index}")
    for term in catalog.glossary:
        tracker.record_term_view(term.term)
    for day in range(1, 8):
        tracker.record_activity(date(2026, 2, day))

    evaluated = _by_id(evaluate(tracker.snapshot(date(2026, 2, 7)), catalog.achievements, catalog.modules))
    assert evaluated["quiz_ace"].unlocked is True
    assert evaluated["coding_ninja"].progress == 3
    assert evaluated["coding_ninja"].unlocked is False
    assert evaluated["knowledge_seeker"].progress == 10
    assert evaluated["knowledge_seeker"].unlocked is True
    assert evaluated["streak_warrior"].unlocked is True


def test_unknown_rule_raises() -> None:
    definition = AchievementDefinition(
        id="x", title="X", description="", category="C", points=1, rarity=Rarity.COMMON, target=1, rule="nope"
    )
    state = ProgressTracker().snapshot(date(2026, 1, 1))
    with pytest.raises(ValueError, match="Unknown achievement rule"):
        evaluate(state, [definition], {})


def test_categories_and_filter() -> None:
    catalog = load_catalog()
    categories = achievement_categories(catalog.achievements)
    assert categories[:3] == ["All", "Learning", "Modules"]
    evaluated = evaluate(ProgressTracker().snapshot(date(2026, 1, 1)), catalog.achievements, catalog.modules)
    modules_only = filter_achievements(evaluated, "Modules")
    assert [item.definition.id for item in modules_only] == ["fundamentals_master", "ml_expert"]
    assert filter_achievements(evaluated, "All") == evaluated


def test_bundled_targets_are_reachable() -> None:
    catalog = load_catalog()
    for definition in catalog.achievements:
        ceiling = attainable_maximum(definition, catalog.modules, len(catalog.glossary), len(catalog.exercises))
        assert ceiling is None or definition.target <= ceiling, definition.id


def test_module_targets_follow_lesson_count() -> None:
    catalog = load_catalog()
    targets = {item.id: item.target for item in catalog.achievements}
    assert targets["fundamentals_master"] == len(catalog.modules["fundamentals"].lessons)
    assert targets["ml_expert"] == len(catalog.modules["algorithms"].lessons)
    assert targets["ai_scholar"] == len(catalog.modules)
