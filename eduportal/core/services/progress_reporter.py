"""Read-side statistics derived from the ledger and the quiz repository."""

from __future__ import annotations

from collections.abc import Sequence

from eduportal.constants.quiz_constants import NOT_ATTEMPTED
from eduportal.core.models import AuthorSummary, QuizSummary, StudentSummary, Submission
from eduportal.core.scoring import is_passing
from eduportal.core.services.quiz_repository import QuizRepository
from eduportal.core.services.submission_ledger import SubmissionLedger


def _mean_score(submissions: Sequence[Submission]) -> float:
    # An empty set averages to 0 rather than failing.
    if not submissions:
        return 0.0
    return sum(s.score for s in submissions) / len(submissions)


def _round_half_up(value: float) -> int:
    return int(value + 0.5)


class ProgressReporter:
    """Computes dashboard statistics fresh on every call."""

    def __init__(self, repository: QuizRepository, ledger: SubmissionLedger) -> None:
        self._repository = repository
        self._ledger = ledger

    @staticmethod
    def passed(score: int) -> bool:
        return is_passing(score)

    def completion_count(self, student_id: str) -> int:
        return len(self._ledger.list_by_student(student_id))

    def average_score_for_student(self, student_id: str) -> float:
        return _mean_score(self._ledger.list_by_student(student_id))

    def average_score_for_quiz(self, quiz_id: str) -> float:
        return _mean_score(self._ledger.list_by_quiz(quiz_id))

    def quiz_status(self, student_id: str, quiz_id: str) -> int | str:
        """Return the latest score for the pair, or ``NOT_ATTEMPTED``."""
        latest = self._ledger.latest_for(student_id, quiz_id)
        if latest is None:
            return NOT_ATTEMPTED
        return latest.score

    def student_summary(self, student_id: str) -> StudentSummary:
        submissions = self._ledger.list_by_student(student_id)
        return StudentSummary(
            student_id=student_id,
            completed_quizzes=len(submissions),
            average_score=_round_half_up(_mean_score(submissions)),
            passed_quizzes=sum(1 for s in submissions if is_passing(s.score)),
        )

    def quiz_summary(self, quiz_id: str) -> QuizSummary:
        """Summarize attempts on a quiz; works for deleted quizzes too."""
        submissions = self._ledger.list_by_quiz(quiz_id)
        return QuizSummary(
            quiz_id=quiz_id,
            attempts=len(submissions),
            distinct_students=len({s.student_id for s in submissions}),
            average_score=_round_half_up(_mean_score(submissions)),
            passed_attempts=sum(1 for s in submissions if is_passing(s.score)),
        )

    def author_summary(self, author_id: str) -> AuthorSummary:
        quiz_ids = tuple(quiz.id for quiz in self._repository.list_by_author(author_id))
        submissions = self._ledger.list_by_quizzes(quiz_ids)
        return AuthorSummary(
            author_id=author_id,
            quiz_count=len(quiz_ids),
            submission_count=len(submissions),
            average_score=_round_half_up(_mean_score(submissions)),
            quiz_ids=quiz_ids,
        )
