"""Service for managing the collection of quizzes and their answer keys."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import replace
from datetime import datetime, timezone
import logging
from typing import Any

from eduportal.core.errors import NotFound, ValidationError
from eduportal.core.models import Question, Quiz, QuizDraft

logger = logging.getLogger(__name__)

_UPDATABLE_FIELDS = frozenset({"title", "questions", "created_by"})


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class QuizRepository:
    """Stores quizzes in insertion order and enforces their invariants on write."""

    def __init__(self, clock: Callable[[], datetime] = _utc_now) -> None:
        self._quizzes: dict[str, Quiz] = {}
        self._quiz_counter: int = 0
        self._clock = clock

    def create(self, draft: QuizDraft) -> Quiz:
        """Validate a draft, issue an id and timestamp, and store it."""
        title = self._validate_title(draft.title)
        questions = self._prepare_questions(draft.questions)
        quiz = Quiz(
            id=self._next_quiz_id(),
            title=title,
            questions=questions,
            created_by=draft.created_by,
            created_at=self._clock(),
        )
        self._quizzes[quiz.id] = quiz
        logger.info("Created quiz %s (%d questions) for author %s", quiz.id, len(questions), quiz.created_by)
        return quiz

    def get(self, quiz_id: str) -> Quiz:
        quiz = self._quizzes.get(quiz_id)
        if quiz is None:
            raise NotFound("Quiz", quiz_id)
        return quiz

    def list(self) -> list[Quiz]:
        """Return all quizzes in the order they were created."""
        return list(self._quizzes.values())

    def list_by_author(self, author_id: str) -> list[Quiz]:
        return [quiz for quiz in self._quizzes.values() if quiz.created_by == author_id]

    def update(self, quiz_id: str, changes: Mapping[str, Any]) -> Quiz:
        """Shallow-merge the given fields into a stored quiz.

        The id and creation timestamp never change. The stored quiz is only
        replaced once the merged result passes validation.
        """
        current = self.get(quiz_id)
        unknown = set(changes) - _UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(f"Cannot update quiz field(s): {', '.join(sorted(unknown))}.")

        title = current.title
        if "title" in changes:
            title = self._validate_title(changes["title"])
        questions = current.questions
        if "questions" in changes:
            questions = self._prepare_questions(changes["questions"])
        created_by = changes.get("created_by", current.created_by)

        updated = replace(current, title=title, questions=questions, created_by=created_by)
        self._quizzes[quiz_id] = updated
        logger.info("Updated quiz %s (%s)", quiz_id, ", ".join(sorted(changes)) or "no changes")
        return updated

    def delete(self, quiz_id: str) -> None:
        """Remove a quiz. Submissions referencing it are left untouched."""
        if quiz_id not in self._quizzes:
            raise NotFound("Quiz", quiz_id)
        del self._quizzes[quiz_id]
        logger.info("Deleted quiz %s", quiz_id)

    def load_quizzes(self, quizzes: Iterable[Quiz]) -> None:
        """Store already-issued quizzes as they are, e.g. demo content."""
        for quiz in quizzes:
            self._validate_title(quiz.title)
            self._prepare_questions(quiz.questions)
            self._quizzes[quiz.id] = quiz
            if quiz.id.isdigit():
                self._quiz_counter = max(self._quiz_counter, int(quiz.id))

    def _next_quiz_id(self) -> str:
        self._quiz_counter += 1
        while str(self._quiz_counter) in self._quizzes:
            self._quiz_counter += 1
        return str(self._quiz_counter)

    @staticmethod
    def _validate_title(title: str) -> str:
        if not isinstance(title, str) or not title.strip():
            raise ValidationError("Quiz title must not be empty.")
        return title

    def _prepare_questions(self, questions: Iterable[Question]) -> tuple[Question, ...]:
        """Validate every question and fill in missing question ids."""
        questions = list(questions)
        if not questions:
            raise ValidationError("Quiz must contain at least one question.")

        taken: set[str] = set()
        for question in questions:
            if question.id is None:
                continue
            if question.id in taken:
                raise ValidationError(f"Duplicate question id '{question.id}'.")
            taken.add(question.id)

        prepared: list[Question] = []
        next_id = 0
        for position, question in enumerate(questions, start=1):
            self._validate_question(question, position)
            if question.id is None:
                next_id += 1
                while str(next_id) in taken:
                    next_id += 1
                taken.add(str(next_id))
                question = replace(question, id=str(next_id))
            prepared.append(replace(question, options=tuple(question.options)))
        return tuple(prepared)

    @staticmethod
    def _validate_question(question: Question, position: int) -> None:
        if not question.question_text or not question.question_text.strip():
            raise ValidationError(f"Question {position} text must not be empty.")
        if not question.options:
            raise ValidationError(f"Question {position} must have at least one option.")
        if not question.correct_answer:
            raise ValidationError(f"Question {position} is missing a correct answer.")
        if question.correct_answer not in question.options:
            raise ValidationError(
                f"Question {position} correct answer must match one of its options exactly."
            )
