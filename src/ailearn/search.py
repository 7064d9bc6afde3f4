"""Relevance-ranked search over glossary terms, modules, and lessons."""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import Enum

from .models import Catalog, GlossaryTerm, Lesson, Module

MIN_QUERY_LENGTH = 2
MAX_DISPLAY_RESULTS = 10
ALL_CATEGORIES = "All"
MODULE_CATEGORY = "Learning Module"
LESSON_FALLBACK_DESCRIPTION = "Lesson content"


class ResultKind(str, Enum):
    """Types of searchable records."""

    GLOSSARY = "glossary"
    MODULE = "module"
    LESSON = "lesson"


@dataclass(frozen=True)
class RelevanceWeights:
    """Additive score components for one query/record pair."""

    exact_title: int = 100
    title_substring: int = 50
    body_substring: int = 25
    title_word: int = 30
    body_word: int = 15


DEFAULT_WEIGHTS = RelevanceWeights()


@dataclass(frozen=True)
class GlossaryResult:
    """Search hit on a glossary term."""

    title: str
    description: str
    category: str
    relevance_score: int
    term: GlossaryTerm
    kind: ResultKind = ResultKind.GLOSSARY


@dataclass(frozen=True)
class ModuleResult:
    """Search hit on a module."""

    title: str
    description: str
    category: str
    relevance_score: int
    module: Module
    kind: ResultKind = ResultKind.MODULE


@dataclass(frozen=True)
class LessonResult:
    """Search hit on a lesson, with the module that owns it."""

    title: str
    description: str
    category: str
    relevance_score: int
    lesson: Lesson
    module: Module
    kind: ResultKind = ResultKind.LESSON


SearchResult = GlossaryResult | ModuleResult | LessonResult


def score(query: str, title: str, body: str, weights: RelevanceWeights = DEFAULT_WEIGHTS) -> int:
    """Return the additive relevance of a lowercased query against one record."""
    title_lower = title.lower()
    body_lower = body.lower()
    total = 0

    if title_lower == query:
        total += weights.exact_title
    elif query in title_lower:
        total += weights.title_substring

    if query in body_lower:
        total += weights.body_substring

    word = re.compile(rf"\b{re.escape(query)}\b", re.IGNORECASE)
    if word.search(title):
        total += weights.title_word
    if word.search(body):
        total += weights.body_word
    return total


def search(query: str, catalog: Catalog, weights: RelevanceWeights = DEFAULT_WEIGHTS) -> list[SearchResult]:
    """Return every matching record, best first.

    Records are scanned glossary first, then each module followed by its
    lessons. The sort is stable, so equal scores keep that scan order. The
    list is not truncated; see ``top_results`` for the display cap.
    """
    if not query or len(query) < MIN_QUERY_LENGTH:
        return []

    needle = query.lower()
    results: list[SearchResult] = []

    for term in catalog.glossary:
        if (
            needle in term.term.lower()
            or needle in term.definition.lower()
            or needle in term.category.lower()
        ):
            results.append(
                GlossaryResult(
                    title=term.term,
                    description=term.definition,
                    category=term.category,
                    relevance_score=score(needle, term.term, term.definition, weights),
                    term=term,
                )
            )

    for module in catalog.modules.values():
        if needle in module.title.lower() or needle in module.description.lower():
            results.append(
                ModuleResult(
                    title=module.title,
                    description=module.description,
                    category=MODULE_CATEGORY,
                    relevance_score=score(needle, module.title, module.description, weights),
                    module=module,
                )
            )
        for lesson in module.lessons:
            if needle in lesson.title.lower() or needle in lesson.overview.lower():
                results.append(
                    LessonResult(
                        title=lesson.title,
                        description=lesson.overview or LESSON_FALLBACK_DESCRIPTION,
                        category=module.title,
                        relevance_score=score(needle, lesson.title, lesson.overview, weights),
                        lesson=lesson,
                        module=module,
                    )
                )

    results.sort(key=lambda item: item.relevance_score, reverse=True)
    return results


def filter_by_category(results: Sequence[SearchResult], category: str | None) -> list[SearchResult]:
    """Keep results in the given category (or of the given kind) without re-scoring."""
    if category is None or category == ALL_CATEGORIES:
        return list(results)
    return [item for item in results if item.category == category or item.kind.value == category]


def result_categories(results: Iterable[SearchResult]) -> list[str]:
    """Return facet values in first-seen order, led by the catch-all."""
    categories = [ALL_CATEGORIES]
    for item in results:
        if item.category not in categories:
            categories.append(item.category)
    return categories


def category_counts(results: Iterable[SearchResult]) -> dict[str, int]:
    """Count results per category."""
    counts: dict[str, int] = {}
    for item in results:
        counts[item.category] = counts.get(item.category, 0) + 1
    return counts


def top_results(results: Sequence[SearchResult], limit: int = MAX_DISPLAY_RESULTS) -> list[SearchResult]:
    """Return the slice a caller should display."""
    return list(results[: max(limit, 0)])


class LatestQueryGate:
    """Deliver results only for the most recently submitted query.

    Evaluations may finish out of order when run off the interaction thread;
    a result for a superseded query is dropped.
    """

    def __init__(self) -> None:
        self._latest_ticket = 0
        self._latest_query = ""
        self._current: list[SearchResult] = []

    def submit(self, query: str) -> int:
        """Register a new query and return its ticket."""
        self._latest_ticket += 1
        self._latest_query = query
        return self._latest_ticket

    def deliver(self, ticket: int, results: list[SearchResult]) -> bool:
        """Accept results for ``ticket`` if it is still the latest submission."""
        if ticket != self._latest_ticket:
            return False
        self._current = results
        return True

    @property
    def query(self) -> str:
        return self._latest_query

    @property
    def current(self) -> list[SearchResult]:
        return list(self._current)
