"""Domain models for the learning portal."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class Role(str, Enum):
    """Closed set of roles a portal user can hold."""

    ADMIN = "admin"
    TEACHER = "teacher"
    STUDENT = "student"


@dataclass(frozen=True, slots=True)
class Question:
    """Multiple-choice question; the correct answer is one of the option strings."""

    question_text: str
    options: tuple[str, ...]
    correct_answer: str
    id: str | None = None  # Assigned by the repository when left empty


@dataclass(frozen=True, slots=True)
class QuizDraft:
    """Quiz contents as supplied by an author, before an id is issued."""

    title: str
    questions: tuple[Question, ...]
    created_by: str


@dataclass(frozen=True, slots=True)
class Quiz:
    """Stored quiz. Question order is the display order."""

    id: str
    title: str
    questions: tuple[Question, ...]
    created_by: str
    created_at: datetime

    def question_ids(self) -> list[str]:
        return [question.id for question in self.questions]


@dataclass(frozen=True, slots=True)
class Submission:
    """One student's attempt at one quiz. Never changed after it is recorded."""

    quiz_id: str
    student_id: str
    answers: Mapping[str, str]  # Read-only view, see SubmissionLedger
    score: int
    submitted_at: datetime


@dataclass(frozen=True, slots=True)
class User:
    """Portal user as known to the directory."""

    id: str
    username: str
    role: Role
    email: str | None = None
    name: str | None = None
    course: str | None = None


@dataclass(frozen=True, slots=True)
class Video:
    """Instructional video record. The url is stored exactly as given."""

    id: str
    title: str
    video_url: str
    created_by: str
    created_at: datetime


@dataclass(frozen=True, slots=True)
class StudentSummary:
    """Snapshot of a student's progress for the student dashboard."""

    student_id: str
    completed_quizzes: int
    average_score: int
    passed_quizzes: int


@dataclass(frozen=True, slots=True)
class QuizSummary:
    """Snapshot of how a quiz has been answered so far."""

    quiz_id: str
    attempts: int
    distinct_students: int
    average_score: int
    passed_attempts: int


@dataclass(frozen=True, slots=True)
class AuthorSummary:
    """Snapshot of the submissions received by one author's quizzes."""

    author_id: str
    quiz_count: int
    submission_count: int
    average_score: int
    quiz_ids: tuple[str, ...] = ()
