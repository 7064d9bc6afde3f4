"""Exercise catalog filtering and walkthrough steps."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from .models import Exercise

ALL = "All"
DIFFICULTIES = ("Beginner", "Intermediate", "Advanced")
EXERCISE_TYPES = ("Interactive Demo", "Hands-on Coding", "Project")


@dataclass(frozen=True)
class ExerciseStep:
    """One stage of a guided exercise."""

    title: str
    content: str
    step_type: str


def filter_exercises(
    exercises: Iterable[Exercise], difficulty: str = ALL, exercise_type: str = ALL
) -> list[Exercise]:
    """Keep exercises matching both facets; ``All`` disables a facet."""
    return [
        exercise
        for exercise in exercises
        if (difficulty == ALL or exercise.difficulty == difficulty)
        and (exercise_type == ALL or exercise.exercise_type == exercise_type)
    ]


def difficulty_counts(exercises: Iterable[Exercise]) -> dict[str, int]:
    """Count exercises per known difficulty."""
    counts = {difficulty: 0 for difficulty in DIFFICULTIES}
    for exercise in exercises:
        if exercise.difficulty in counts:
            counts[exercise.difficulty] += 1
    return counts


def walkthrough_steps(exercise: Exercise) -> tuple[ExerciseStep, ...]:
    """Return the ordered guided steps for an exercise."""
    return (
        ExerciseStep(
            "Introduction",
            f"Welcome to the {exercise.title} exercise! In this hands-on session, you'll learn by doing.",
            "info",
        ),
        ExerciseStep("Setup", "Let's set up the environment and understand the problem we're solving.", "setup"),
        ExerciseStep("Implementation", "Now it's time to write some code! Follow the instructions below.", "code"),
        ExerciseStep("Testing", "Test your implementation and see the results.", "test"),
        ExerciseStep("Conclusion", "Great job! You've completed the exercise. Let's review what you learned.", "summary"),
    )
