"""CLI entrypoint for the AI learning shell."""

from __future__ import annotations

import argparse
import logging
from collections.abc import Callable, Sequence
from pathlib import Path

from .achievements import achievement_categories, filter_achievements, summarize
from .content_loader import load_catalog, load_catalog_from_dir
from .exercises import ALL, DIFFICULTIES, EXERCISE_TYPES, filter_exercises, walkthrough_steps
from .glossary import filter_terms, glossary_categories, group_by_letter, resolve_related
from .models import Exercise, GlossaryTerm, Lesson, LessonKind, Module
from .search import (
    MAX_DISPLAY_RESULTS,
    MIN_QUERY_LENGTH,
    SearchResult,
    filter_by_category,
    result_categories,
    top_results,
)
from .service import LearnService, ShowLesson, ShowModule, ShowTerm

InputFn = Callable[[str], str]
PrintFn = Callable[[str], None]
MENU_QUIT_COMMANDS = {"q"}
MENU_BACK_COMMANDS = {"b"}
FLOW_EXIT_COMMANDS = {":b", ":q", ":back", ":quit"}

logger = logging.getLogger(__name__)


class QuitApp(Exception):
    """Signal immediate app exit from nested menu flows."""


def _service(content_dir: Path | None = None) -> LearnService:
    """Create app service from bundled or directory content."""
    catalog = load_catalog_from_dir(content_dir) if content_dir is not None else load_catalog()
    return LearnService(catalog=catalog)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="ailearn", description="AI learning hub in the terminal")
    parser.add_argument("--content-dir", type=Path, default=None, help="load content from this directory")
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    commands = parser.add_subparsers(dest="command")
    commands.add_parser("play", help="interactive menu shell (default)")
    search_parser = commands.add_parser("search", help="search terms, modules, and lessons")
    search_parser.add_argument("query")
    search_parser.add_argument("--category", default=None, help="only show results in this category")
    search_parser.add_argument("--limit", type=int, default=MAX_DISPLAY_RESULTS)
    glossary_parser = commands.add_parser("glossary", help="list glossary terms or show one")
    glossary_parser.add_argument("term", nargs="?", default=None)
    return parser


def run(argv: list[str] | None = None, input_fn: InputFn = input, print_fn: PrintFn = print) -> int:
    """Run the CLI application."""
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        service = _service(args.content_dir)
    except ValueError as exc:
        print_fn(f"Could not load content: {exc}")
        return 1
    logger.debug("Running command %s", args.command or "play")

    if args.command == "search":
        return search_command(service, args.query, args.category, args.limit, print_fn)
    if args.command == "glossary":
        return glossary_command(service, args.term, print_fn)
    return play_shell(service, input_fn, print_fn)


def search_command(
    service: LearnService, query: str, category: str | None, limit: int, print_fn: PrintFn
) -> int:
    """Print ranked search results once."""
    if len(query) < MIN_QUERY_LENGTH:
        print_fn(f"Query must be at least {MIN_QUERY_LENGTH} characters.")
        return 2
    results = service.search(query, category)
    if not results:
        print_fn("No results found.")
        return 0
    shown = top_results(results, limit)
    _print_results(shown, print_fn)
    if len(shown) < len(results):
        print_fn(f"Showing first {len(shown)} of {len(results)} results")
    return 0


def glossary_command(service: LearnService, term_name: str | None, print_fn: PrintFn) -> int:
    """Print the glossary index or one term."""
    if term_name is None:
        for letter, terms in group_by_letter(service.catalog.glossary).items():
            print_fn(f"\n{letter}")
            for term in terms:
                print_fn(f"  {term.term} [{term.category}]")
        return 0
    try:
        term = service.view_term(term_name)
    except KeyError:
        print_fn(f"Unknown term: {term_name}")
        return 1
    _print_term(service, term, print_fn)
    return 0


def play_shell(service: LearnService, input_fn: InputFn = input, print_fn: PrintFn = print) -> int:
    """Run persistent menu-driven shell."""
    try:
        while True:
            dashboard = service.dashboard()
            print_fn("\n=== AI Learning Hub ===")
            print_fn(
                f"Progress: {dashboard.completed_lessons}/{dashboard.total_lessons} lessons ({dashboard.percent:.0f}%)"
            )
            print_fn("1) Modules")
            print_fn("2) Glossary")
            print_fn("3) Exercises")
            print_fn("4) Achievements")
            print_fn("5) Search")
            print_fn("q) Quit")
            choice = input_fn("Choose: ").strip().lower()

            if choice == "1":
                _modules_flow(service, input_fn, print_fn)
            elif choice == "2":
                _glossary_flow(service, input_fn, print_fn)
            elif choice == "3":
                _exercises_flow(service, input_fn, print_fn)
            elif choice == "4":
                _achievements_flow(service, input_fn, print_fn)
            elif choice == "5":
                _search_flow(service, input_fn, print_fn)
            elif choice in MENU_QUIT_COMMANDS:
                return 0
            else:
                print_fn("Invalid choice.")
    except QuitApp:
        return 0


def _pick(choice: str, count: int) -> int | None:
    """Return a zero-based index for a 1-based menu choice, or None."""
    if not choice.isdigit():
        return None
    index = int(choice) - 1
    if 0 <= index < count:
        return index
    return None


def _menu_exit(choice: str) -> bool:
    """Handle back/quit; return True when the caller should return."""
    if choice in MENU_QUIT_COMMANDS:
        raise QuitApp()
    return choice in MENU_BACK_COMMANDS


def _modules_flow(service: LearnService, input_fn: InputFn, print_fn: PrintFn) -> None:
    """List modules with completion and open one."""
    modules = list(service.modules.values())
    while True:
        print_fn("\n=== Modules ===")
        for idx, module in enumerate(modules, start=1):
            progression = service.module_progression(module.id)
            print_fn(
                f"{idx}) {module.title} - {progression.completed_lessons}/{progression.total_lessons} lessons "
                f"({progression.percent:.0f}%)"
            )
        print_fn("b) Back")
        print_fn("q) Quit")
        choice = input_fn("Choose module: ").strip().lower()
        if _menu_exit(choice):
            return
        index = _pick(choice, len(modules))
        if index is None:
            print_fn("Invalid choice.")
            continue
        _module_flow(service, modules[index], input_fn, print_fn)


def _module_flow(service: LearnService, module: Module, input_fn: InputFn, print_fn: PrintFn) -> None:
    """Show a module's lessons and open unlocked ones."""
    while True:
        progression = service.module_progression(module.id)
        print_fn(f"\n=== {module.title} ===")
        print_fn(module.description)
        print_fn(f"Estimated time: {module.estimated_hours}h | Progress: {progression.percent:.0f}%")
        for idx, row in enumerate(progression.lessons, start=1):
            status = "done" if row.completed else ("locked" if row.locked else "open")
            print_fn(f"{idx}) [{status:<6}] {row.lesson.title} ({row.lesson.duration_label}, {row.lesson.kind.value})")
        print_fn("b) Back")
        print_fn("q) Quit")
        choice = input_fn("Choose lesson: ").strip().lower()
        if _menu_exit(choice):
            return
        index = _pick(choice, len(progression.lessons))
        if index is None:
            print_fn("Invalid choice.")
            continue
        row = progression.lessons[index]
        if row.locked:
            print_fn("Complete the previous lesson first.")
            continue
        _lesson_flow(service, module, row.lesson, input_fn, print_fn)


def _lesson_flow(service: LearnService, module: Module, lesson: Lesson, input_fn: InputFn, print_fn: PrintFn) -> None:
    """Open a lesson as either reading content or a quiz."""
    if lesson.kind is LessonKind.QUIZ:
        _quiz_flow(service, module, lesson, input_fn, print_fn)
        return

    print_fn(f"\n=== {lesson.title} ===")
    if lesson.overview:
        print_fn(lesson.overview)
    total = len(lesson.sections)
    for idx, section in enumerate(lesson.sections, start=1):
        print_fn(f"\n--- Section {idx}/{total}: {section.title} ---")
        print_fn(section.body)
        reply = input_fn("Enter to continue (:b to leave): ").strip().lower()
        if reply in FLOW_EXIT_COMMANDS:
            print_fn("Leaving lesson.")
            return

    if lesson.key_takeaways:
        print_fn("\nKey takeaways:")
        for takeaway in lesson.key_takeaways:
            print_fn(f"- {takeaway}")
    if service.complete_lesson(module.id, lesson.id):
        print_fn("Lesson completed.")
    else:
        print_fn("Lesson already completed.")


def _quiz_flow(service: LearnService, module: Module, lesson: Lesson, input_fn: InputFn, print_fn: PrintFn) -> None:
    """Ask each question, then grade and explain."""
    print_fn(f"\n=== {lesson.title} ===")
    answers: dict[int, int] = {}
    total = len(lesson.questions)
    for number, question in enumerate(lesson.questions, start=1):
        print_fn(f"\nQuestion {number} of {total}: {question.prompt}")
        for idx, option in enumerate(question.options, start=1):
            print_fn(f"  {idx}) {option}")
        while True:
            reply = input_fn("Answer: ").strip().lower()
            if reply in FLOW_EXIT_COMMANDS:
                print_fn("Quiz abandoned.")
                return
            index = _pick(reply, len(question.options))
            if index is not None:
                answers[question.id] = index
                break
            print_fn("Invalid choice.")

    result = service.submit_quiz(module.id, lesson.id, answers)
    print_fn(f"\nYou scored {result.score} out of {result.total} ({result.percent}%)")
    for outcome in result.outcomes:
        mark = "correct" if outcome.correct else "wrong"
        print_fn(f"- {outcome.question.prompt} [{mark}]")
        if not outcome.correct:
            print_fn(f"  Answer: {outcome.question.options[outcome.question.correct_option_index]}")
        if outcome.question.explanation:
            print_fn(f"  {outcome.question.explanation}")


def _print_term(service: LearnService, term: GlossaryTerm, print_fn: PrintFn) -> list[GlossaryTerm]:
    """Print a term detail view and return its resolvable related terms."""
    print_fn(f"\n=== {term.term} ===")
    print_fn(f"Category: {term.category}")
    print_fn(term.definition)
    related = resolve_related(term, service.catalog.glossary)
    if related:
        print_fn("Related terms:")
        for idx, item in enumerate(related, start=1):
            print_fn(f"{idx}) {item.term}")
    return related


def _term_flow(service: LearnService, term: GlossaryTerm, input_fn: InputFn, print_fn: PrintFn) -> None:
    """Show a term and follow related-term links."""
    current = service.view_term(term.term)
    while True:
        related = _print_term(service, current, print_fn)
        print_fn("b) Back")
        print_fn("q) Quit")
        choice = input_fn("Choose related term: ").strip().lower()
        if _menu_exit(choice):
            return
        index = _pick(choice, len(related))
        if index is None:
            print_fn("Invalid choice.")
            continue
        current = service.view_term(related[index].term)


def _glossary_flow(service: LearnService, input_fn: InputFn, print_fn: PrintFn) -> None:
    """Browse glossary with text and category filters."""
    query = ""
    category = "All"
    categories = glossary_categories(service.catalog.glossary)
    while True:
        terms = filter_terms(service.catalog.glossary, query, category)
        ordered = [term for group in group_by_letter(terms).values() for term in group]
        print_fn("\n=== Glossary ===")
        print_fn(f"Filter: '{query}' | Category: {category} | {len(ordered)} terms")
        for idx, term in enumerate(ordered, start=1):
            print_fn(f"{idx}) {term.term} [{term.category}]")
        print_fn("s) Search text")
        print_fn("c) Category")
        print_fn("b) Back")
        print_fn("q) Quit")
        choice = input_fn("Choose term: ").strip().lower()
        if _menu_exit(choice):
            return
        if choice == "s":
            query = input_fn("Filter text: ").strip()
            continue
        if choice == "c":
            for idx, name in enumerate(categories, start=1):
                print_fn(f"{idx}) {name}")
            index = _pick(input_fn("Category: ").strip(), len(categories))
            if index is None:
                print_fn("Invalid choice.")
            else:
                category = categories[index]
            continue
        index = _pick(choice, len(ordered))
        if index is None:
            print_fn("Invalid choice.")
            continue
        _term_flow(service, ordered[index], input_fn, print_fn)


def _exercises_flow(service: LearnService, input_fn: InputFn, print_fn: PrintFn) -> None:
    """Browse exercises by difficulty and type and run walkthroughs."""
    difficulty = ALL
    exercise_type = ALL
    while True:
        exercises = filter_exercises(service.catalog.exercises, difficulty, exercise_type)
        done = len([item for item in service.catalog.exercises if service.progress.is_exercise_completed(item.id)])
        print_fn("\n=== Exercises ===")
        print_fn(f"Completed {done}/{len(service.catalog.exercises)} | Difficulty: {difficulty} | Type: {exercise_type}")
        for idx, exercise in enumerate(exercises, start=1):
            mark = "x" if service.progress.is_exercise_completed(exercise.id) else " "
            print_fn(
                f"{idx}) [{mark}] {exercise.title} - {exercise.difficulty}, {exercise.exercise_type}, "
                f"{exercise.estimated_time}"
            )
        print_fn("d) Difficulty")
        print_fn("t) Type")
        print_fn("b) Back")
        print_fn("q) Quit")
        choice = input_fn("Choose exercise: ").strip().lower()
        if _menu_exit(choice):
            return
        if choice in {"d", "t"}:
            options = [ALL, *(DIFFICULTIES if choice == "d" else EXERCISE_TYPES)]
            for idx, name in enumerate(options, start=1):
                print_fn(f"{idx}) {name}")
            index = _pick(input_fn("Filter: ").strip(), len(options))
            if index is None:
                print_fn("Invalid choice.")
            elif choice == "d":
                difficulty = options[index]
            else:
                exercise_type = options[index]
            continue
        index = _pick(choice, len(exercises))
        if index is None:
            print_fn("Invalid choice.")
            continue
        _walkthrough_flow(service, exercises[index], input_fn, print_fn)


def _walkthrough_flow(service: LearnService, exercise: Exercise, input_fn: InputFn, print_fn: PrintFn) -> None:
    """Step through an exercise and mark it complete at the end."""
    print_fn(f"\n=== {exercise.title} ===")
    print_fn(exercise.description)
    if exercise.skills:
        print_fn(f"Skills: {', '.join(exercise.skills)}")
    steps = walkthrough_steps(exercise)
    for idx, step in enumerate(steps, start=1):
        print_fn(f"\nStep {idx} of {len(steps)}: {step.title}")
        print_fn(step.content)
        reply = input_fn("Enter to continue (:b to leave): ").strip().lower()
        if reply in FLOW_EXIT_COMMANDS:
            print_fn("Leaving exercise.")
            return
    service.complete_exercise(exercise.id)
    print_fn("Exercise completed.")


def _achievements_flow(service: LearnService, input_fn: InputFn, print_fn: PrintFn) -> None:
    """Show achievement summary and per-category progress."""
    category = "All"
    categories = achievement_categories(service.catalog.achievements)
    while True:
        evaluated = service.achievements()
        summary = summarize(evaluated)
        print_fn("\n=== Achievements ===")
        print_fn(
            f"Unlocked: {summary.unlocked_count}/{summary.total_count} | Points: {summary.points_earned} | "
            f"Completion: {summary.completion_percent}%"
        )
        for item in filter_achievements(evaluated, category):
            definition = item.definition
            mark = "x" if item.unlocked else " "
            print_fn(
                f"[{mark}] {definition.title} ({definition.rarity.value}, {definition.points} pts) "
                f"{item.progress}/{definition.target} - {definition.description}"
            )
        print_fn("c) Category")
        print_fn("b) Back")
        print_fn("q) Quit")
        choice = input_fn("Choose: ").strip().lower()
        if _menu_exit(choice):
            return
        if choice == "c":
            for idx, name in enumerate(categories, start=1):
                print_fn(f"{idx}) {name}")
            index = _pick(input_fn("Category: ").strip(), len(categories))
            if index is None:
                print_fn("Invalid choice.")
            else:
                category = categories[index]
            continue
        print_fn("Invalid choice.")


def _print_results(results: Sequence[SearchResult], print_fn: PrintFn) -> None:
    for idx, result in enumerate(results, start=1):
        print_fn(f"{idx}) [{result.kind.value}] {result.title} - {result.category} ({result.relevance_score})")
        print_fn(f"   {result.description}")


def _search_flow(service: LearnService, input_fn: InputFn, print_fn: PrintFn) -> None:
    """Search, filter by category, and open the chosen result."""
    query = input_fn("Search: ").strip()
    if len(query) < MIN_QUERY_LENGTH:
        print_fn("Start typing to search lessons, terms, and concepts...")
        return
    results = service.search(query)
    if not results:
        print_fn("No results found. Try different keywords or check your spelling.")
        return

    category = "All"
    categories = result_categories(results)
    while True:
        filtered = filter_by_category(results, category)
        shown = top_results(filtered)
        print_fn(f"\n{len(filtered)} results for \"{query}\" | Category: {category}")
        _print_results(shown, print_fn)
        if len(filtered) > len(shown):
            print_fn(f"Showing first {len(shown)} of {len(filtered)} results")
        print_fn("c) Category")
        print_fn("b) Back")
        print_fn("q) Quit")
        choice = input_fn("Choose result: ").strip().lower()
        if _menu_exit(choice):
            return
        if choice == "c":
            for idx, name in enumerate(categories, start=1):
                print_fn(f"{idx}) {name}")
            index = _pick(input_fn("Category: ").strip(), len(categories))
            if index is None:
                print_fn("Invalid choice.")
            else:
                category = categories[index]
            continue
        index = _pick(choice, len(shown))
        if index is None:
            print_fn("Invalid choice.")
            continue
        _open_result(service, shown[index], input_fn, print_fn)
        return


def _open_result(service: LearnService, result: SearchResult, input_fn: InputFn, print_fn: PrintFn) -> None:
    """Navigate to the view a search result points at."""
    target = service.select_result(result)
    if isinstance(target, ShowTerm):
        _term_flow(service, target.term, input_fn, print_fn)
    elif isinstance(target, ShowModule):
        _module_flow(service, target.module, input_fn, print_fn)
    elif isinstance(target, ShowLesson):
        progression = service.module_progression(target.module.id)
        row = next(item for item in progression.lessons if item.lesson.id == target.lesson.id)
        if row.locked:
            print_fn("Complete the previous lesson first.")
            _module_flow(service, target.module, input_fn, print_fn)
        else:
            _lesson_flow(service, target.module, target.lesson, input_fn, print_fn)


def main_entry() -> None:
    """Console script entrypoint."""
    raise SystemExit(run())


if __name__ == "__main__":  # pragma: no cover
    main_entry()
