"""Error taxonomy shared by the auth guard, user service and HTTP boundary.

Each error carries the HTTP status the boundary answers with; the service
raises them and never decides on status codes itself.
"""

from http import HTTPStatus
from typing import Any


class AppError(Exception):
    """Base class for errors that are reported to the client as {"error": message}."""

    status_code: int = HTTPStatus.INTERNAL_SERVER_ERROR
    code: str = "internal_error"

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        self.message = message
        self.cause = cause
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.message}


class ValidationError(AppError):
    """Malformed or incomplete input, rejected before the service is invoked."""

    status_code = HTTPStatus.BAD_REQUEST
    code = "validation_error"

    def __init__(
        self,
        message: str,
        details: list[Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.details = details or []
        super().__init__(message, cause)

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        if self.details:
            payload["details"] = self.details
        return payload


class InvalidCredentialsError(AppError):
    """
    Login failure. Unknown username and wrong password share this class and
    its message; ``reason`` keeps the internal cause for logging only.
    """

    status_code = HTTPStatus.UNAUTHORIZED
    code = "invalid_credentials"

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__("Invalid credentials")


class UnauthenticatedError(AppError):
    """Missing, invalid or expired token on a protected route."""

    status_code = HTTPStatus.UNAUTHORIZED
    code = "unauthenticated"


class NotFoundError(AppError):
    """Id-addressed user record is absent."""

    status_code = HTTPStatus.NOT_FOUND
    code = "not_found"


class PersistenceError(AppError):
    """Any store failure other than not-found; carries the store's message."""

    status_code = HTTPStatus.INTERNAL_SERVER_ERROR
    code = "persistence_error"


class UsernameTakenError(PersistenceError):
    """The store rejected a new record because the username already exists."""

    code = "username_taken"
