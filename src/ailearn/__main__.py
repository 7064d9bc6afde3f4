"""Module entrypoint for `python -m ailearn`."""

from __future__ import annotations

from .main import main_entry


def main() -> None:
    """Run the learning shell CLI."""
    main_entry()


if __name__ == "__main__":  # pragma: no cover
    main()
