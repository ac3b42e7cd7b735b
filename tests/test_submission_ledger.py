from datetime import datetime, timezone

import pytest

from eduportal.core.errors import NotFound
from eduportal.core.models import Submission
from eduportal.core.services.quiz_repository import QuizRepository
from eduportal.core.services.submission_ledger import SubmissionLedger


def test_append_scores_and_records(clock, two_question_draft):
    quiz = QuizRepository(clock=clock).create(two_question_draft)
    ledger = SubmissionLedger(clock=clock)

    submission = ledger.append(quiz, "3", {"1": "A", "2": "X"})

    assert submission.score == 50
    assert submission.quiz_id == quiz.id
    assert submission.student_id == "3"
    assert ledger.list_all() == [submission]


def test_identical_appends_are_not_deduplicated(two_question_draft):
    quiz = QuizRepository().create(two_question_draft)
    ledger = SubmissionLedger()
    for expected_size in range(1, 4):
        ledger.append(quiz, "3", {"1": "A"})
        assert len(ledger) == expected_size


def test_answers_are_copied(two_question_draft):
    quiz = QuizRepository().create(two_question_draft)
    answers = {"1": "A"}
    submission = SubmissionLedger().append(quiz, "3", answers)
    answers["2"] = "Y"
    assert submission.answers == {"1": "A"}


def test_filters_keep_insertion_order(two_question_draft):
    repository = QuizRepository()
    first = repository.create(two_question_draft)
    second = repository.create(two_question_draft)
    ledger = SubmissionLedger()
    a = ledger.append(first, "3", {})
    b = ledger.append(second, "4", {})
    c = ledger.append(first, "4", {"1": "A", "2": "Y"})

    assert ledger.list_by_quiz(first.id) == [a, c]
    assert ledger.list_by_student("4") == [b, c]
    assert ledger.list_by_quizzes([second.id]) == [b]


def test_latest_for_prefers_later_entry_on_tied_timestamps(clock, two_question_draft):
    quiz = QuizRepository().create(two_question_draft)
    clock.frozen = True
    ledger = SubmissionLedger(clock=clock)
    ledger.append(quiz, "3", {"1": "A", "2": "Y"})
    later = ledger.append(quiz, "3", {})
    assert ledger.latest_for("3", quiz.id) is later
    assert ledger.latest_for("4", quiz.id) is None


def test_manager_submit_unknown_quiz(manager):
    with pytest.raises(NotFound):
        manager.submit("missing", "3", {})
    assert manager.ledger_size() == 0


def test_recorded_answers_cannot_be_changed(manager, two_question_draft):
    quiz = manager.create_quiz(two_question_draft)
    manager.submit(quiz.id, "3", {"1": "A", "2": "X"})

    stored = manager.list_submissions()[0]
    with pytest.raises(TypeError):
        stored.answers["2"] = "Y"
    assert manager.list_submissions()[0].answers == {"1": "A", "2": "X"}
    assert manager.list_submissions()[0].score == 50


def test_loaded_answers_are_read_only():
    original = {"1": "A"}
    ledger = SubmissionLedger()
    ledger.load_submissions(
        [
            Submission(
                quiz_id="1",
                student_id="3",
                answers=original,
                score=100,
                submitted_at=datetime(2024, 5, 1, tzinfo=timezone.utc),
            )
        ]
    )
    original["2"] = "Y"
    loaded = ledger.list_all()[0]
    assert loaded.answers == {"1": "A"}
    with pytest.raises(TypeError):
        loaded.answers["2"] = "Y"


def test_latest_for_uses_timestamp_not_ledger_order():
    newer = Submission(
        quiz_id="1",
        student_id="3",
        answers={},
        score=90,
        submitted_at=datetime(2024, 5, 2, tzinfo=timezone.utc),
    )
    older = Submission(
        quiz_id="1",
        student_id="3",
        answers={},
        score=10,
        submitted_at=datetime(2024, 5, 1, tzinfo=timezone.utc),
    )
    ledger = SubmissionLedger()
    ledger.load_submissions([newer, older])

    assert ledger.latest_for("3", "1").score == 90
