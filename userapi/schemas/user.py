"""Request/response schemas for user signup and the /users endpoints."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

USERNAME_MAX_LEN = 255
# Measured in UTF-8 bytes, the most bcrypt will read.
PASSWORD_MAX_BYTES = 72
COUNTRY_MAX_LEN = 255


def _require_text(value: str) -> str:
    """Reject whitespace-only values; min_length alone lets "   " through."""
    if not value.strip():
        raise ValueError("must be non-empty")
    return value


def _check_password_bytes(value: str) -> str:
    if len(value.encode("utf-8")) > PASSWORD_MAX_BYTES:
        raise ValueError(f"must be at most {PASSWORD_MAX_BYTES} bytes when UTF-8 encoded")
    return value


class SignUpRequest(BaseModel):
    """New user candidate. All three fields are required and non-empty."""

    model_config = {"extra": "ignore"}

    username: str = Field(..., min_length=1, max_length=USERNAME_MAX_LEN)
    password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_BYTES)
    country: str = Field(..., min_length=1, max_length=COUNTRY_MAX_LEN)

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str) -> str:
        # Stored verbatim and matched exactly at login, so no silent trimming.
        _require_text(v)
        if v != v.strip():
            raise ValueError("must not start or end with whitespace")
        return v

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return _check_password_bytes(v)

    @field_validator("country")
    @classmethod
    def validate_country(cls, v: str) -> str:
        return _require_text(v).strip()


class UserUpdateRequest(BaseModel):
    """
    Patch for PUT /users/{id}. Only password and country are applied; any
    other key (username, id) is accepted in the body and ignored.
    """

    model_config = {"extra": "ignore"}

    password: str | None = Field(default=None, min_length=1, max_length=PASSWORD_MAX_BYTES)
    country: str | None = Field(default=None, min_length=1, max_length=COUNTRY_MAX_LEN)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return _check_password_bytes(v)

    @field_validator("country")
    @classmethod
    def validate_country(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return _require_text(v).strip()


class UserOut(BaseModel):
    """Public view of a user record (never includes the password credential)."""

    id: int
    username: str
    country: str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    class Config:
        from_attributes = True


class UserResponse(BaseModel):
    data: UserOut


class UsersListResponse(BaseModel):
    data: list[UserOut]


class MessageResponse(BaseModel):
    """Confirmation payload, e.g. after DELETE /users/{id}."""

    data: str


class CountriesResponse(BaseModel):
    """Distinct countries across all users."""

    data: list[str]
