"""Pydantic request/response schemas."""

from userapi.schemas.auth import LoginRequest, SessionClaims, TokenResponse
from userapi.schemas.health import HealthResponse
from userapi.schemas.user import (
    CountriesResponse,
    MessageResponse,
    SignUpRequest,
    UserOut,
    UserResponse,
    UsersListResponse,
    UserUpdateRequest,
)

__all__ = [
    "CountriesResponse",
    "HealthResponse",
    "LoginRequest",
    "MessageResponse",
    "SessionClaims",
    "SignUpRequest",
    "TokenResponse",
    "UserOut",
    "UserResponse",
    "UsersListResponse",
    "UserUpdateRequest",
]
