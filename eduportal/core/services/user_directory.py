"""Service for managing the portal's user roster."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Mapping
from dataclasses import replace
import logging
from typing import Any

from eduportal.core.errors import NotFound, ValidationError
from eduportal.core.models import Role, User

logger = logging.getLogger(__name__)

_UPDATABLE_FIELDS = frozenset({"username", "role", "email", "name", "course"})


class UserDirectory:
    """Roster of users keyed by id; also resolves callers for the API layer."""

    def __init__(self) -> None:
        self._users: dict[str, User] = {}
        self._user_counter: int = 0

    def create(
        self,
        username: str,
        role: Role | str,
        email: str | None = None,
        name: str | None = None,
        course: str | None = None,
    ) -> User:
        cleaned = self._validate_username(username)
        user = User(
            id=self._next_user_id(),
            username=cleaned,
            role=self._coerce_role(role),
            email=email,
            name=name,
            course=course,
        )
        self._users[user.id] = user
        logger.info("Created %s user %s (%s)", user.role.value, user.id, user.username)
        return user

    def get(self, user_id: str) -> User:
        user = self._users.get(user_id)
        if user is None:
            raise NotFound("User", user_id)
        return user

    def find(self, user_id: str) -> User | None:
        return self._users.get(user_id)

    def list(self) -> list[User]:
        return list(self._users.values())

    def list_by_role(self, role: Role | str) -> list[User]:
        wanted = self._coerce_role(role)
        return [user for user in self._users.values() if user.role is wanted]

    def count_by_role(self) -> dict[Role, int]:
        counts = Counter(user.role for user in self._users.values())
        return {role: counts.get(role, 0) for role in Role}

    def update(self, user_id: str, changes: Mapping[str, Any]) -> User:
        current = self.get(user_id)
        unknown = set(changes) - _UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(f"Cannot update user field(s): {', '.join(sorted(unknown))}.")

        values = dict(changes)
        if "username" in values:
            values["username"] = self._validate_username(values["username"], ignore_id=user_id)
        if "role" in values:
            values["role"] = self._coerce_role(values["role"])
        updated = replace(current, **values)
        self._users[user_id] = updated
        logger.info("Updated user %s (%s)", user_id, ", ".join(sorted(changes)) or "no changes")
        return updated

    def delete(self, user_id: str) -> None:
        if user_id not in self._users:
            raise NotFound("User", user_id)
        del self._users[user_id]
        logger.info("Deleted user %s", user_id)

    def load_users(self, users: Iterable[User]) -> None:
        for user in users:
            self._users[user.id] = user
            if user.id.isdigit():
                self._user_counter = max(self._user_counter, int(user.id))

    def _next_user_id(self) -> str:
        self._user_counter += 1
        while str(self._user_counter) in self._users:
            self._user_counter += 1
        return str(self._user_counter)

    def _validate_username(self, username: str, ignore_id: str | None = None) -> str:
        cleaned = (username or "").strip()
        if not cleaned:
            raise ValidationError("Username must not be empty.")
        for user in self._users.values():
            if user.username == cleaned and user.id != ignore_id:
                raise ValidationError(f"Username '{cleaned}' is already taken.")
        return cleaned

    @staticmethod
    def _coerce_role(role: Role | str) -> Role:
        try:
            return Role(role)
        except ValueError as exc:
            raise ValidationError(f"Unknown role '{role}'.") from exc
