"""Signup/login routes, the auth guard dependency and service providers."""

import logging
from functools import lru_cache
from typing import Annotated

from fastapi import APIRouter, Depends, Request
from fastapi.security import APIKeyHeader
from sqlalchemy.orm import Session

from userapi.core.config import get_settings, settings
from userapi.core.database import get_db
from userapi.core.errors import UnauthenticatedError
from userapi.core.security import InvalidTokenError, TokenCodec, build_token_codec
from userapi.repositories.base import UserStore
from userapi.repositories.sqlalchemy_user_store import SqlAlchemyUserStore
from userapi.schemas.auth import LoginRequest, TokenResponse
from userapi.schemas.user import SignUpRequest, UserOut, UserResponse
from userapi.services.user_service import UserService

logger = logging.getLogger(__name__)
router = APIRouter()

# The whole header value is the token; no "Bearer " scheme is expected or stripped.
token_header = APIKeyHeader(
    name=settings.AUTH_HEADER,
    auto_error=False,
    description="Raw signed session token returned by POST /login",
)


@lru_cache
def get_token_codec() -> TokenCodec:
    """Process-wide codec built once from settings."""
    return build_token_codec(get_settings())


def get_user_store(db: Annotated[Session, Depends(get_db)]) -> UserStore:
    return SqlAlchemyUserStore(db)


def get_user_service(
    store: Annotated[UserStore, Depends(get_user_store)],
    codec: Annotated[TokenCodec, Depends(get_token_codec)],
) -> UserService:
    return UserService(store, codec, bcrypt_rounds=get_settings().BCRYPT_ROUNDS)


def get_current_username(
    request: Request,
    token: Annotated[str | None, Depends(token_header)],
    codec: Annotated[TokenCodec, Depends(get_token_codec)],
) -> str:
    """
    Auth guard: verify the token from the auth header and expose its username
    as ``request.state.username``. Raises UnauthenticatedError (401) when the
    header is missing or the token is invalid or expired; the route handler
    never runs in that case.
    """
    if not token:
        logger.info("Rejected request without token", extra={"path": request.url.path})
        raise UnauthenticatedError("Request does not contain an access token")
    try:
        claims = codec.verify(token)
    except InvalidTokenError as e:
        logger.info(
            "Rejected token: %s", e.message, extra={"path": request.url.path}
        )
        raise UnauthenticatedError("Invalid token") from e
    request.state.username = claims.username
    return claims.username


@router.post("/signup", response_model=UserResponse)
def signup(
    body: SignUpRequest,
    service: Annotated[UserService, Depends(get_user_service)],
) -> UserResponse:
    """Create a user with a username, password and country."""
    user = service.sign_up(body)
    return UserResponse(data=UserOut.model_validate(user))


@router.post("/login", response_model=TokenResponse)
def login(
    body: LoginRequest,
    service: Annotated[UserService, Depends(get_user_service)],
) -> TokenResponse:
    """
    Authenticate with username and password; returns a signed session token.
    Send the token verbatim in the auth header (default: Authorization).
    """
    return TokenResponse(token=service.login(body.username, body.password))
