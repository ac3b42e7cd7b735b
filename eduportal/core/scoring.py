"""Scoring of submitted answers against a quiz's answer key."""

from __future__ import annotations

from collections.abc import Mapping

from eduportal.constants.quiz_constants import MAX_SCORE, PASSING_SCORE
from eduportal.core.errors import InvalidQuiz
from eduportal.core.models import Quiz


def count_correct(quiz: Quiz, answers: Mapping[str, str]) -> int:
    """Count questions whose submitted answer matches the key exactly.

    Answers for unknown question ids are ignored and unanswered questions
    count as wrong. The comparison is case-sensitive and untrimmed.
    """
    return sum(
        1
        for question in quiz.questions
        if question.id in answers and answers[question.id] == question.correct_answer
    )


def score_answers(quiz: Quiz, answers: Mapping[str, str]) -> int:
    """Return the percentage of correct answers, rounded half-up to an int."""
    total = len(quiz.questions)
    if total == 0:
        raise InvalidQuiz(f"Quiz '{quiz.id}' has no questions to score.")
    correct = count_correct(quiz, answers)
    # Integer form of floor(correct / total * 100 + 0.5)
    return (2 * MAX_SCORE * correct + total) // (2 * total)


def is_passing(score: int) -> bool:
    return score >= PASSING_SCORE
