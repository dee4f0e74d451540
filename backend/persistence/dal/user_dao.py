"""Abstract interface for user persistence."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from persistence.dal.models import User


class UserDAO(ABC):
    """Abstract interface for user persistence.

    Lookups return None for an unknown username.
    """

    @abstractmethod
    def create_user(
        self,
        username: str,
        password: str,
        email: str,
        profile: dict[str, Any] | None = None,
    ) -> User: ...

    @abstractmethod
    def get_user(self, username: str) -> User | None: ...

    @abstractmethod
    def update_user(self, user: User) -> bool: ...

    @abstractmethod
    def delete_user(self, username: str) -> None: ...

    @abstractmethod
    def clear(self) -> None: ...
