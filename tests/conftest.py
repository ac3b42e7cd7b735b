"""Shared fixtures for the portal tests."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from eduportal.core.models import Question, QuizDraft
from eduportal.core.portal_manager import PortalManager


class FakeClock:
    """Clock that moves forward one minute per reading unless frozen."""

    def __init__(self) -> None:
        self.now = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)
        self.frozen = False

    def __call__(self) -> datetime:
        current = self.now
        if not self.frozen:
            self.now += timedelta(minutes=1)
        return current


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def manager(clock: FakeClock) -> PortalManager:
    return PortalManager(clock=clock)


@pytest.fixture
def two_question_draft() -> QuizDraft:
    return QuizDraft(
        title="Letters",
        questions=(
            Question(id="1", question_text="First letter?", options=("A", "B"), correct_answer="A"),
            Question(id="2", question_text="Last letter?", options=("X", "Y"), correct_answer="Y"),
        ),
        created_by="2",
    )
