"""Abstract interface for auth token persistence."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from persistence.dal.models import AuthData


class AuthDAO(ABC):
    """Abstract interface for auth token persistence.

    Tokens carry no expiry; a token is valid until it is deleted.
    """

    @abstractmethod
    def create_auth(self, username: str, metadata: dict[str, Any] | None = None) -> AuthData: ...

    @abstractmethod
    def get_auth(self, auth_token: str) -> AuthData | None: ...

    @abstractmethod
    def delete_auth(self, auth_token: str) -> None: ...

    @abstractmethod
    def delete_user_auths(self, username: str) -> int: ...

    @abstractmethod
    def clear(self) -> None: ...
