from __future__ import annotations

import json
import shutil
import sys
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any
from uuid import uuid4

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


def _tmp_path_fixture() -> Iterator[Path]:
    """Provide per-test temporary directory path inside the workspace.

    Overrides pytest's builtin ``tmp_path`` so temporary content trees live
    under ``.tmp_pytest/`` in the project working directory.
    """
    base = ROOT / ".tmp_pytest"
    base.mkdir(parents=True, exist_ok=True)
    path = base / str(uuid4())
    path.mkdir(parents=True, exist_ok=False)
    try:
        yield path
    finally:
        shutil.rmtree(path, ignore_errors=True)
        try:
            next(base.iterdir())
        except StopIteration:
            base.rmdir()
        except FileNotFoundError:
            pass


tmp_path = pytest.fixture(name="tmp_path")(_tmp_path_fixture)


ContentWriter = Callable[..., Path]


@pytest.fixture
def write_content(tmp_path: Path) -> ContentWriter:
    """Write a content tree (modules/*.json plus list files) and return its root."""

    def write(
        modules: list[dict[str, Any]] | None = None,
        glossary: list[dict[str, Any]] | None = None,
        exercises: list[dict[str, Any]] | None = None,
        achievements: list[dict[str, Any]] | None = None,
    ) -> Path:
        root = tmp_path / "content"
        (root / "modules").mkdir(parents=True, exist_ok=True)
        for index, module in enumerate(modules or []):
            (root / "modules" / f"{index:02d}-{module['id']}.json").write_text(json.dumps(module), encoding="utf-8")
        if glossary is not None:
            (root / "glossary.json").write_text(json.dumps(glossary), encoding="utf-8")
        if exercises is not None:
            (root / "exercises.json").write_text(json.dumps(exercises), encoding="utf-8")
        if achievements is not None:
            (root / "achievements.json").write_text(json.dumps(achievements), encoding="utf-8")
        return root

    return write
