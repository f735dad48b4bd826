from __future__ import annotations

from dataclasses import dataclass
from typing import Dict

from app.rwlock import ReadWriteLock


@dataclass(frozen=True)
class User:
    name: str


class InvalidUserError(ValueError):
    pass


class UserNotFoundError(KeyError):
    def __init__(self, user_id: int):
        super().__init__(user_id)
        self.user_id = user_id

    def __str__(self) -> str:
        return "user not found"


class InMemoryUserStore:
    """Thread-safe in-memory user table keyed by integer id.

    Storage semantics:
    - Stored only in the API process memory (cleared on restart).
    - Ids come from a counter that only ever grows, so a deleted id is never
      handed out again.
    - ``get`` takes the lock shared; ``insert`` and ``delete`` take it exclusive.
    """

    def __init__(self):
        self._lock = ReadWriteLock()
        self._users: Dict[int, User] = {}
        self._last_id = 0

    def insert(self, user: User) -> int:
        if not user.name:
            raise InvalidUserError("name is required")
        with self._lock.write_locked():
            self._last_id += 1
            user_id = self._last_id
            self._users[user_id] = user
            return user_id

    def get(self, user_id: int) -> User:
        with self._lock.read_locked():
            user = self._users.get(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    def delete(self, user_id: int) -> None:
        with self._lock.write_locked():
            if user_id not in self._users:
                raise UserNotFoundError(user_id)
            del self._users[user_id]

    def count(self) -> int:
        with self._lock.read_locked():
            return len(self._users)

    def __len__(self) -> int:
        return self.count()

    def __contains__(self, user_id: object) -> bool:
        with self._lock.read_locked():
            return user_id in self._users
