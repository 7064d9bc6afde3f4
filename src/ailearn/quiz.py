"""Quiz grading."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from .models import Lesson, LessonKind, QuizQuestion


@dataclass(frozen=True)
class QuestionOutcome:
    """Learner's answer to one question."""

    question: QuizQuestion
    selected: int | None
    correct: bool


@dataclass(frozen=True)
class QuizResult:
    """Graded quiz attempt."""

    lesson_id: str
    score: int
    total: int
    outcomes: tuple[QuestionOutcome, ...]

    @property
    def percent(self) -> int:
        if self.total == 0:
            return 0
        return round(100 * self.score / self.total)

    @property
    def perfect(self) -> bool:
        return self.total > 0 and self.score == self.total


def grade_quiz(lesson: Lesson, answers: Mapping[int, int]) -> QuizResult:
    """Grade selected option indexes keyed by question id; unanswered is wrong."""
    if lesson.kind is not LessonKind.QUIZ:
        raise ValueError(f"Lesson '{lesson.id}' is not a quiz.")
    outcomes = []
    for question in lesson.questions:
        selected = answers.get(question.id)
        outcomes.append(
            QuestionOutcome(
                question=question,
                selected=selected,
                correct=selected == question.correct_option_index,
            )
        )
    return QuizResult(
        lesson_id=lesson.id,
        score=len([outcome for outcome in outcomes if outcome.correct]),
        total=len(outcomes),
        outcomes=tuple(outcomes),
    )
