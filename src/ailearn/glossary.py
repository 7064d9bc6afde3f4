"""Glossary browsing helpers."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from .models import GlossaryTerm

ALL_CATEGORIES = "All"


def filter_terms(terms: Iterable[GlossaryTerm], query: str = "", category: str = ALL_CATEGORIES) -> list[GlossaryTerm]:
    """Return terms whose name or definition contains ``query`` within ``category``."""
    needle = query.lower()
    return [
        term
        for term in terms
        if (needle in term.term.lower() or needle in term.definition.lower())
        and (category == ALL_CATEGORIES or term.category == category)
    ]


def glossary_categories(terms: Iterable[GlossaryTerm]) -> list[str]:
    """Return category facet values in first-seen order."""
    categories = [ALL_CATEGORIES]
    for term in terms:
        if term.category not in categories:
            categories.append(term.category)
    return categories


def group_by_letter(terms: Iterable[GlossaryTerm]) -> dict[str, list[GlossaryTerm]]:
    """Group terms by uppercase first letter; letters and terms are sorted."""
    groups: dict[str, list[GlossaryTerm]] = {}
    for term in terms:
        if not term.term:
            continue
        groups.setdefault(term.term[0].upper(), []).append(term)
    return {
        letter: sorted(groups[letter], key=lambda item: item.term.lower())
        for letter in sorted(groups)
    }


def find_term(terms: Iterable[GlossaryTerm], name: str) -> GlossaryTerm | None:
    """Exact lookup by display name."""
    for term in terms:
        if term.term == name:
            return term
    return None


def resolve_related(term: GlossaryTerm, terms: Sequence[GlossaryTerm]) -> list[GlossaryTerm]:
    """Return related entries that exist, in declared order."""
    by_name = {item.term: item for item in terms}
    return [by_name[name] for name in term.related_terms if name in by_name]
