"""Exceptions raised by the portal core."""

from __future__ import annotations


class PortalError(Exception):
    """Base class for every error the core surfaces to its callers."""


class ValidationError(PortalError):
    """Raised when a quiz, user or video fails validation on create/update."""


class NotFound(PortalError):
    """Raised when an operation references an id that is not stored."""

    def __init__(self, kind: str, item_id: str) -> None:
        super().__init__(f"{kind} '{item_id}' not found.")
        self.kind = kind
        self.item_id = item_id


class InvalidQuiz(PortalError):
    """Raised when a quiz without questions is handed to the scorer."""
