"""AI learning catalog with glossary, lessons, quizzes, and content search."""

from __future__ import annotations

import tomllib
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

__all__ = ["__version__"]


def _source_tree_version() -> str | None:
    """Read [project].version when running from a source checkout."""
    for base in Path(__file__).resolve().parents:
        pyproject = base / "pyproject.toml"
        if pyproject.is_file():
            with pyproject.open("rb") as handle:
                project = tomllib.load(handle).get("project", {})
            if project.get("name") == "ailearn":
                return str(project.get("version"))
    return None


__version__ = _source_tree_version() or ""
if not __version__:
    try:
        __version__ = version("ailearn")
    except PackageNotFoundError:
        __version__ = "0+unknown"
