"""Business logic for the portal, shared by the API layer and tests."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from datetime import datetime, timezone
import logging
from threading import Lock
from typing import Any

from eduportal.core import demo_data
from eduportal.core.models import (
    AuthorSummary,
    Quiz,
    QuizDraft,
    QuizSummary,
    Role,
    StudentSummary,
    Submission,
    User,
    Video,
)
from eduportal.core.services.progress_reporter import ProgressReporter
from eduportal.core.services.quiz_repository import QuizRepository
from eduportal.core.services.submission_ledger import SubmissionLedger
from eduportal.core.services.user_directory import UserDirectory
from eduportal.core.services.video_library import VideoLibrary

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class PortalManager:
    """Facade for portal services: Quizzes, Ledger, Reporter, Users and Videos.

    Each collection has its own lock. Operations spanning quizzes and
    submissions always take the quiz lock first.
    """

    def __init__(self, clock: Callable[[], datetime] = _utc_now) -> None:
        self._quiz_lock = Lock()
        self._submission_lock = Lock()
        self._user_lock = Lock()
        self._video_lock = Lock()

        # Services
        self._quizzes = QuizRepository(clock=clock)
        self._ledger = SubmissionLedger(clock=clock)
        self._reporter = ProgressReporter(self._quizzes, self._ledger)
        self._users = UserDirectory()
        self._videos = VideoLibrary(clock=clock)
        self._demo_loaded: bool = False

    def seed_demo_data(self) -> None:
        """Load the demo roster, quizzes, videos and submissions once."""
        with self._quiz_lock, self._submission_lock, self._user_lock, self._video_lock:
            if self._demo_loaded:
                logger.info("Demo data already loaded; skipping")
                return
            self._demo_loaded = True
            self._users.load_users(demo_data.demo_users())
            self._quizzes.load_quizzes(demo_data.demo_quizzes())
            self._videos.load_videos(demo_data.demo_videos())
            self._ledger.load_submissions(demo_data.demo_submissions())
        logger.info("Loaded demo data")

    # --- Quiz Repository Delegation ---

    def create_quiz(self, draft: QuizDraft) -> Quiz:
        with self._quiz_lock:
            return self._quizzes.create(draft)

    def get_quiz(self, quiz_id: str) -> Quiz:
        with self._quiz_lock:
            return self._quizzes.get(quiz_id)

    def list_quizzes(self) -> list[Quiz]:
        with self._quiz_lock:
            return self._quizzes.list()

    def list_quizzes_by_author(self, author_id: str) -> list[Quiz]:
        with self._quiz_lock:
            return self._quizzes.list_by_author(author_id)

    def update_quiz(self, quiz_id: str, changes: Mapping[str, Any]) -> Quiz:
        with self._quiz_lock:
            return self._quizzes.update(quiz_id, changes)

    def delete_quiz(self, quiz_id: str) -> None:
        with self._quiz_lock:
            self._quizzes.delete(quiz_id)

    # --- Submission Ledger Delegation ---

    def submit(self, quiz_id: str, student_id: str, answers: Mapping[str, str]) -> Submission:
        """Score the answers and append them to the ledger."""
        with self._quiz_lock:
            quiz = self._quizzes.get(quiz_id)
            with self._submission_lock:
                return self._ledger.append(quiz, student_id, answers)

    def ledger_size(self) -> int:
        with self._submission_lock:
            return len(self._ledger)

    def list_submissions(self) -> list[Submission]:
        with self._submission_lock:
            return self._ledger.list_all()

    def list_submissions_by_student(self, student_id: str) -> list[Submission]:
        with self._submission_lock:
            return self._ledger.list_by_student(student_id)

    def list_submissions_by_quiz(self, quiz_id: str) -> list[Submission]:
        with self._submission_lock:
            return self._ledger.list_by_quiz(quiz_id)

    def list_submissions_for_author(self, author_id: str) -> list[Submission]:
        with self._quiz_lock:
            quiz_ids = [quiz.id for quiz in self._quizzes.list_by_author(author_id)]
            with self._submission_lock:
                return self._ledger.list_by_quizzes(quiz_ids)

    # --- Reporter Delegation ---

    @staticmethod
    def passed(score: int) -> bool:
        return ProgressReporter.passed(score)

    def completion_count(self, student_id: str) -> int:
        with self._submission_lock:
            return self._reporter.completion_count(student_id)

    def average_score_for_student(self, student_id: str) -> float:
        with self._submission_lock:
            return self._reporter.average_score_for_student(student_id)

    def average_score_for_quiz(self, quiz_id: str) -> float:
        with self._submission_lock:
            return self._reporter.average_score_for_quiz(quiz_id)

    def quiz_status(self, student_id: str, quiz_id: str) -> int | str:
        with self._submission_lock:
            return self._reporter.quiz_status(student_id, quiz_id)

    def student_summary(self, student_id: str) -> StudentSummary:
        with self._submission_lock:
            return self._reporter.student_summary(student_id)

    def quiz_summary(self, quiz_id: str) -> QuizSummary:
        with self._submission_lock:
            return self._reporter.quiz_summary(quiz_id)

    def author_summary(self, author_id: str) -> AuthorSummary:
        with self._quiz_lock, self._submission_lock:
            return self._reporter.author_summary(author_id)

    # --- User Directory Delegation ---

    def create_user(
        self,
        username: str,
        role: Role | str,
        email: str | None = None,
        name: str | None = None,
        course: str | None = None,
    ) -> User:
        with self._user_lock:
            return self._users.create(username, role, email=email, name=name, course=course)

    def get_user(self, user_id: str) -> User:
        with self._user_lock:
            return self._users.get(user_id)

    def find_user(self, user_id: str) -> User | None:
        with self._user_lock:
            return self._users.find(user_id)

    def list_users(self) -> list[User]:
        with self._user_lock:
            return self._users.list()

    def list_users_by_role(self, role: Role | str) -> list[User]:
        with self._user_lock:
            return self._users.list_by_role(role)

    def count_users_by_role(self) -> dict[Role, int]:
        with self._user_lock:
            return self._users.count_by_role()

    def update_user(self, user_id: str, changes: Mapping[str, Any]) -> User:
        with self._user_lock:
            return self._users.update(user_id, changes)

    def delete_user(self, user_id: str) -> None:
        with self._user_lock:
            self._users.delete(user_id)

    # --- Video Library Delegation ---

    def create_video(self, title: str, video_url: str, created_by: str) -> Video:
        with self._video_lock:
            return self._videos.create(title, video_url, created_by)

    def get_video(self, video_id: str) -> Video:
        with self._video_lock:
            return self._videos.get(video_id)

    def list_videos(self) -> list[Video]:
        with self._video_lock:
            return self._videos.list()

    def list_videos_by_author(self, author_id: str) -> list[Video]:
        with self._video_lock:
            return self._videos.list_by_author(author_id)

    def update_video(self, video_id: str, changes: Mapping[str, Any]) -> Video:
        with self._video_lock:
            return self._videos.update(video_id, changes)

    def delete_video(self, video_id: str) -> None:
        with self._video_lock:
            self._videos.delete(video_id)
