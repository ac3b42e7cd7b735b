"""Demo roster and content loaded into a fresh portal."""

from __future__ import annotations

from datetime import datetime, timezone

from eduportal.core.models import Question, Quiz, Role, Submission, User, Video


def _day(day: int) -> datetime:
    return datetime(2024, 1, day, tzinfo=timezone.utc)


def demo_users() -> list[User]:
    return [
        User(id="1", username="admin", role=Role.ADMIN, email="admin@eduportal.com", name="Admin User"),
        User(id="2", username="teacher1", role=Role.TEACHER, email="teacher1@eduportal.com", name="John Teacher"),
        User(
            id="3",
            username="student1",
            role=Role.STUDENT,
            email="student1@eduportal.com",
            name="Jane Student",
            course="Computer Science",
        ),
        User(
            id="4",
            username="student2",
            role=Role.STUDENT,
            email="student2@eduportal.com",
            name="Bob Student",
            course="Mathematics",
        ),
    ]


def demo_quizzes() -> list[Quiz]:
    return [
        Quiz(
            id="1",
            title="JavaScript Basics",
            created_by="2",
            created_at=_day(1),
            questions=(
                Question(
                    id="1",
                    question_text="What is the correct way to declare a variable in JavaScript?",
                    options=("var x = 5;", "variable x = 5;", "declare x = 5;", "x := 5;"),
                    correct_answer="var x = 5;",
                ),
                Question(
                    id="2",
                    question_text="Which method is used to add an element to the end of an array?",
                    options=("push()", "add()", "append()", "insert()"),
                    correct_answer="push()",
                ),
            ),
        ),
        Quiz(
            id="2",
            title="React Fundamentals",
            created_by="2",
            created_at=_day(2),
            questions=(
                Question(
                    id="3",
                    question_text="What is a React component?",
                    options=(
                        "A function that returns JSX",
                        "A JavaScript object",
                        "A CSS class",
                        "An HTML element",
                    ),
                    correct_answer="A function that returns JSX",
                ),
            ),
        ),
    ]


def demo_videos() -> list[Video]:
    return [
        Video(
            id="1",
            title="Introduction to Programming",
            video_url="https://www.youtube.com/embed/dQw4w9WgXcQ",
            created_by="2",
            created_at=_day(1),
        ),
        Video(
            id="2",
            title="JavaScript Tutorial",
            video_url="https://www.youtube.com/embed/dQw4w9WgXcQ",
            created_by="2",
            created_at=_day(2),
        ),
    ]


def demo_submissions() -> list[Submission]:
    return [
        Submission(
            quiz_id="1",
            student_id="3",
            answers={"1": "var x = 5;", "2": "push()"},
            score=100,
            submitted_at=_day(3),
        ),
    ]
