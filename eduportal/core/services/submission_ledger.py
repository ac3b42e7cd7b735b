"""Append-only ledger of quiz submissions."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import replace
from datetime import datetime, timezone
import logging
from types import MappingProxyType

from eduportal.core.models import Quiz, Submission
from eduportal.core.scoring import score_answers

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SubmissionLedger:
    """Records every attempt; nothing is ever overwritten, deduplicated or removed."""

    def __init__(self, clock: Callable[[], datetime] = _utc_now) -> None:
        self._submissions: list[Submission] = []
        self._clock = clock

    def __len__(self) -> int:
        return len(self._submissions)

    def append(self, quiz: Quiz, student_id: str, answers: Mapping[str, str]) -> Submission:
        """Score the answers against the quiz and record a new submission."""
        score = score_answers(quiz, answers)
        submission = Submission(
            quiz_id=quiz.id,
            student_id=student_id,
            answers=MappingProxyType(dict(answers)),
            score=score,
            submitted_at=self._clock(),
        )
        self._submissions.append(submission)
        logger.info("Recorded submission for quiz %s by student %s: %d%%", quiz.id, student_id, score)
        return submission

    def load_submissions(self, submissions: Iterable[Submission]) -> None:
        """Append historical submissions as they are, without rescoring."""
        for submission in submissions:
            self._submissions.append(
                replace(submission, answers=MappingProxyType(dict(submission.answers)))
            )

    def list_all(self) -> list[Submission]:
        return list(self._submissions)

    def list_by_student(self, student_id: str) -> list[Submission]:
        return [s for s in self._submissions if s.student_id == student_id]

    def list_by_quiz(self, quiz_id: str) -> list[Submission]:
        return [s for s in self._submissions if s.quiz_id == quiz_id]

    def list_by_quizzes(self, quiz_ids: Iterable[str]) -> list[Submission]:
        wanted = set(quiz_ids)
        return [s for s in self._submissions if s.quiz_id in wanted]

    def latest_for(self, student_id: str, quiz_id: str) -> Submission | None:
        """Return the most recent attempt by timestamp; later entries win ties."""
        latest: Submission | None = None
        for submission in self._submissions:
            if submission.student_id != student_id or submission.quiz_id != quiz_id:
                continue
            if latest is None or submission.submitted_at >= latest.submitted_at:
                latest = submission
        return latest
