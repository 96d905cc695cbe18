"""Request/response schemas for login and session claims."""

from datetime import datetime

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    """Credentials for login. Only presence is checked; the service decides validity."""

    username: str = Field(..., description="Username")
    password: str = Field(..., description="Password")


class TokenResponse(BaseModel):
    """Signed session token returned after successful login."""

    token: str = Field(..., description="Signed session token; send it verbatim in the auth header")


class SessionClaims(BaseModel):
    """Identity carried by a verified token. Never persisted."""

    model_config = {"frozen": True}

    username: str
    expires_at: datetime
