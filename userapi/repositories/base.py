"""Credential store contract consumed by the user service."""

from typing import Any, Protocol

from userapi.models.user import User


class RecordNotFoundError(Exception):
    """The requested user record does not exist. Distinct from any other store failure."""


class StoreError(Exception):
    """Store failure other than not-found (connection, constraint, query)."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        self.message = message
        self.cause = cause
        super().__init__(message)


class DuplicateRecordError(StoreError):
    """A unique constraint (username) rejected the write."""


class UserStore(Protocol):
    """
    Narrow CRUD capability over user records.

    Lookups raise RecordNotFoundError when nothing matches; every other
    failure surfaces as StoreError.
    """

    def create(self, user: User) -> User: ...

    def find_by_field(self, field: str, value: Any) -> User: ...

    def find_by_id(self, user_id: int) -> User: ...

    def list_all(self) -> list[User]: ...

    def save(self, user: User) -> User: ...

    def delete(self, user: User) -> None: ...

    def distinct_values(self, field: str) -> list[Any]: ...
