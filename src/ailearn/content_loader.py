"""Load the declarative learning catalog from bundled JSON resources."""

from __future__ import annotations

import json
import logging
from dataclasses import replace
from importlib import resources
from importlib.resources.abc import Traversable
from pathlib import Path
from types import MappingProxyType
from typing import Any

from .achievements import ACHIEVEMENT_RULES, attainable_maximum
from .models import (
    AchievementDefinition,
    Catalog,
    Exercise,
    GlossaryTerm,
    Lesson,
    LessonKind,
    Module,
    QuizQuestion,
    Rarity,
    Section,
)

CONTENT_PACKAGE = "ailearn.content"

logger = logging.getLogger(__name__)


def _strings(raw: Any) -> tuple[str, ...]:
    """Coerce an optional JSON list into a tuple of non-empty strings."""
    if not raw:
        return ()
    return tuple(str(item).strip() for item in raw if str(item).strip())


def _question_from_dict(lesson_id: str, raw: dict[str, Any]) -> QuizQuestion:
    """Build a quiz question from raw JSON content."""
    options = tuple(str(option) for option in raw.get("options", []))
    correct = int(raw["correct"])
    if not 0 <= correct < len(options):
        raise ValueError(
            f"Question {raw.get('id', '<unknown>')} in lesson '{lesson_id}' has correct index {correct} "
            f"outside its {len(options)} options."
        )
    return QuizQuestion(
        id=int(raw["id"]),
        prompt=str(raw["question"]),
        options=options,
        correct_option_index=correct,
        explanation=str(raw.get("explanation", "")),
    )


def _lesson_from_dict(raw: dict[str, Any]) -> Lesson:
    """Build a lesson from raw JSON content."""
    lesson_id = str(raw["id"])
    kind = LessonKind(str(raw.get("type", LessonKind.CONTENT.value)))
    content = raw.get("content") or {}
    sections = tuple(
        Section(title=str(item["title"]), body=str(item.get("content", "")))
        for item in content.get("sections", [])
    )
    questions = tuple(_question_from_dict(lesson_id, item) for item in raw.get("questions", []))

    seen_question_ids: set[int] = set()
    for question in questions:
        if question.id in seen_question_ids:
            raise ValueError(f"Duplicate question id {question.id} in lesson '{lesson_id}'.")
        seen_question_ids.add(question.id)
    if kind is LessonKind.QUIZ and not questions:
        raise ValueError(f"Quiz lesson '{lesson_id}' has no questions.")

    return Lesson(
        id=lesson_id,
        title=str(raw["title"]),
        duration_label=str(raw.get("duration", "")),
        kind=kind,
        overview=str(content.get("overview") or ""),
        sections=sections,
        questions=questions,
        key_takeaways=_strings(content.get("keyTakeaways")),
    )


def _module_from_dict(raw: dict[str, Any]) -> Module:
    """Build a module from raw JSON content."""
    return Module(
        id=str(raw["id"]),
        title=str(raw["title"]),
        description=str(raw.get("description", "")),
        order=int(raw.get("order", 0)),
        estimated_hours=int(raw.get("estimatedHours", 0)),
        lessons=tuple(_lesson_from_dict(lesson) for lesson in raw.get("lessons", [])),
    )


def _term_from_dict(raw: dict[str, Any]) -> GlossaryTerm:
    """Build a glossary term from raw JSON content."""
    return GlossaryTerm(
        term=str(raw["term"]),
        definition=str(raw.get("definition", "")),
        category=str(raw.get("category", "")),
        related_terms=_strings(raw.get("relatedTerms")),
    )


def _exercise_from_dict(raw: dict[str, Any]) -> Exercise:
    """Build an exercise from raw JSON content."""
    return Exercise(
        id=str(raw["id"]),
        title=str(raw["title"]),
        description=str(raw.get("description", "")),
        module_title=str(raw.get("module", "")),
        difficulty=str(raw.get("difficulty", "")),
        estimated_time=str(raw.get("estimatedTime", "")),
        exercise_type=str(raw.get("type", "")),
        skills=_strings(raw.get("skills")),
    )


def _achievement_from_dict(raw: dict[str, Any]) -> AchievementDefinition:
    """Build an achievement definition from raw JSON content."""
    achievement_id = str(raw["id"])
    rule = str(raw["rule"])
    if rule not in ACHIEVEMENT_RULES:
        raise ValueError(f"Achievement '{achievement_id}' has unknown rule '{rule}'.")
    module_id = raw.get("module")
    return AchievementDefinition(
        id=achievement_id,
        title=str(raw["title"]),
        description=str(raw.get("description", "")),
        category=str(raw.get("category", "")),
        points=int(raw.get("points", 0)),
        rarity=Rarity(str(raw.get("rarity", Rarity.COMMON.value))),
        target=int(raw.get("maxProgress", 0)),
        rule=rule,
        module_id=str(module_id) if module_id is not None else None,
    )


def _read_json(entry: Traversable) -> Any:
    return json.loads(entry.read_text(encoding="utf-8-sig"))


def _read_list(root: Traversable, name: str) -> list[dict[str, Any]]:
    """Read an optional top-level JSON list file."""
    entry = root.joinpath(name)
    if not entry.is_file():
        return []
    raw = _read_json(entry)
    if not isinstance(raw, list):
        raise ValueError(f"{name} must contain a JSON list.")
    return raw


def _load_from_root(root: Traversable) -> Catalog:
    """Load and validate a catalog laid out as modules/*.json plus list files."""
    modules_root = root.joinpath("modules")
    module_list: list[Module] = []
    if modules_root.is_dir():
        entries = [entry for entry in modules_root.iterdir() if entry.name.endswith(".json")]
        entries.sort(key=lambda entry: entry.name)
        module_list = [_module_from_dict(_read_json(entry)) for entry in entries]
    module_list.sort(key=lambda item: item.order)

    modules: dict[str, Module] = {}
    for module in module_list:
        if module.id in modules:
            raise ValueError(f"Duplicate module id: {module.id}")
        modules[module.id] = module

    glossary = tuple(_term_from_dict(item) for item in _read_list(root, "glossary.json"))
    exercises = tuple(_exercise_from_dict(item) for item in _read_list(root, "exercises.json"))
    achievements = tuple(_achievement_from_dict(item) for item in _read_list(root, "achievements.json"))

    _validate_unique_lesson_ids(modules)
    _validate_unique_terms(glossary)
    _validate_unique_exercise_ids(exercises)
    _validate_achievements(achievements, modules)
    achievements = _resolve_achievement_targets(achievements, modules, len(glossary), len(exercises))
    _log_dangling_related_terms(glossary)

    logger.debug(
        "Loaded catalog: %d modules, %d glossary terms, %d exercises, %d achievements",
        len(modules),
        len(glossary),
        len(exercises),
        len(achievements),
    )
    return Catalog(
        glossary=glossary,
        modules=MappingProxyType(modules),
        exercises=exercises,
        achievements=achievements,
    )


def load_catalog() -> Catalog:
    """Load the bundled catalog."""
    return _load_from_root(resources.files(CONTENT_PACKAGE))


def load_catalog_from_dir(path: Path) -> Catalog:
    """Load a catalog from a directory for tests/tools."""
    if not path.is_dir():
        raise ValueError(f"Content directory not found: {path}")
    return _load_from_root(path)


def _validate_unique_lesson_ids(modules: dict[str, Module]) -> None:
    """Validate that lesson IDs are globally unique across all modules.

    Progress is keyed by lesson id alone, so a reused id would let completion
    in one module count towards another.
    """
    seen: dict[str, str] = {}
    for module in modules.values():
        for lesson in module.lessons:
            previous = seen.get(lesson.id)
            if previous is not None:
                raise ValueError(f"Duplicate lesson id: {lesson.id} (in {previous} and {module.id})")
            seen[lesson.id] = module.id


def _validate_unique_terms(glossary: tuple[GlossaryTerm, ...]) -> None:
    seen: set[str] = set()
    for term in glossary:
        if term.term in seen:
            raise ValueError(f"Duplicate glossary term: {term.term}")
        seen.add(term.term)


def _validate_unique_exercise_ids(exercises: tuple[Exercise, ...]) -> None:
    seen: set[str] = set()
    for exercise in exercises:
        if exercise.id in seen:
            raise ValueError(f"Duplicate exercise id: {exercise.id}")
        seen.add(exercise.id)


def _validate_achievements(achievements: tuple[AchievementDefinition, ...], modules: dict[str, Module]) -> None:
    """Validate achievement ids and module references."""
    seen: set[str] = set()
    for achievement in achievements:
        if achievement.id in seen:
            raise ValueError(f"Duplicate achievement id: {achievement.id}")
        seen.add(achievement.id)
        if achievement.rule == "module_lessons_completed":
            if achievement.module_id is None:
                raise ValueError(f"Achievement '{achievement.id}' needs a module.")
            if achievement.module_id not in modules:
                raise ValueError(f"Achievement '{achievement.id}' references unknown module '{achievement.module_id}'.")


def _resolve_achievement_targets(
    achievements: tuple[AchievementDefinition, ...],
    modules: dict[str, Module],
    term_count: int,
    exercise_count: int,
) -> tuple[AchievementDefinition, ...]:
    """Fill omitted targets from the catalog and reject targets it cannot reach.

    An achievement without `maxProgress` counts everything the catalog offers
    for its rule, so "complete all lessons" stays correct as content grows.
    """
    resolved: list[AchievementDefinition] = []
    for achievement in achievements:
        ceiling = attainable_maximum(achievement, modules, term_count, exercise_count)
        target = achievement.target or (ceiling or 0)
        if target < 1:
            raise ValueError(f"Achievement '{achievement.id}' must have a positive target.")
        if ceiling is not None and target > ceiling:
            raise ValueError(
                f"Achievement '{achievement.id}' needs {target} but the catalog only offers {ceiling}."
            )
        resolved.append(achievement if target == achievement.target else replace(achievement, target=target))
    return tuple(resolved)


def _log_dangling_related_terms(glossary: tuple[GlossaryTerm, ...]) -> None:
    """Log related-term references with no matching entry; they are not errors."""
    known = {term.term for term in glossary}
    for term in glossary:
        missing = [name for name in term.related_terms if name not in known]
        if missing:
            logger.debug("Glossary term %r has unresolved related terms: %s", term.term, ", ".join(missing))
