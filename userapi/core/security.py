"""Password hashing and the session token codec (mint/verify signed JWTs)."""

from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any

import bcrypt
import jwt

from userapi.core.config import HMAC_ALGORITHMS
from userapi.schemas.auth import SessionClaims

if TYPE_CHECKING:
    from userapi.core.config import Settings

# Bcrypt only looks at the first 72 bytes of its input; longer passwords are refused, never truncated.
BCRYPT_MAX_BYTES = 72


class InvalidTokenError(Exception):
    """Token is unparseable, uses a non-HMAC algorithm, has a bad signature or lacks claims."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        self.message = message
        self.cause = cause
        super().__init__(message)


class TokenExpiredError(InvalidTokenError):
    """Token signature is valid but its expiration instant has passed."""


class TokenSigningError(Exception):
    """Raised when a token cannot be signed (bad key material or claims)."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        self.message = message
        self.cause = cause
        super().__init__(message)


def hash_password(plain_password: str, rounds: int) -> str:
    """Hash a plain-text password for storage. Do not store plain passwords."""
    pw_bytes = plain_password.encode("utf-8")
    if len(pw_bytes) > BCRYPT_MAX_BYTES:
        raise ValueError(f"Password exceeds {BCRYPT_MAX_BYTES} bytes")
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(plain_password: str, hashed: str) -> bool:
    """Verify a plain password against a stored hash (constant-time compare inside bcrypt)."""
    pw_bytes = plain_password.encode("utf-8")
    # No stored hash can come from an over-long password.
    if len(pw_bytes) > BCRYPT_MAX_BYTES:
        return False
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


def _utcnow() -> datetime:
    return datetime.now(UTC)


class TokenCodec:
    """
    Stateless minting and verification of session tokens.

    The secret is handed in at construction; every token signed under one
    secret becomes invalid once the process starts with a different one.
    ``now`` is only used when minting, so a clock set in the past yields
    tokens that are already expired.
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        expire_minutes: int = 5,
        now: Callable[[], datetime] = _utcnow,
    ) -> None:
        if not secret:
            raise ValueError("Token secret must be non-empty")
        if algorithm not in HMAC_ALGORITHMS:
            raise ValueError(f"Unsupported token algorithm: {algorithm}")
        self._secret = secret
        self.algorithm = algorithm
        self.validity = timedelta(minutes=expire_minutes)
        self._now = now

    def mint(self, username: str) -> str:
        """Create a token carrying ``username`` that expires after the validity window."""
        issued_at = self._now()
        payload: dict[str, Any] = {
            "username": username,
            "exp": issued_at + self.validity,
            "iat": issued_at,
        }
        try:
            return jwt.encode(payload, self._secret, algorithm=self.algorithm)
        except (jwt.PyJWTError, TypeError, ValueError) as e:
            raise TokenSigningError("Error generating token", e) from e

    def verify(self, token: str) -> SessionClaims:
        """
        Check algorithm family, signature and expiry; return the claims.

        The header's ``alg`` is checked before any signature work so a token
        re-signed under another scheme is rejected outright.
        """
        try:
            header = jwt.get_unverified_header(token)
        except jwt.PyJWTError as e:
            raise InvalidTokenError("Token could not be parsed", e) from e

        alg = header.get("alg")
        if alg not in HMAC_ALGORITHMS:
            raise InvalidTokenError(f"Unexpected signing method: {alg}")

        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=list(HMAC_ALGORITHMS),
                options={"require": ["exp", "username"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise TokenExpiredError("Token has expired", e) from e
        except jwt.PyJWTError as e:
            raise InvalidTokenError("Invalid token", e) from e

        username = payload["username"]
        if not isinstance(username, str) or not username:
            raise InvalidTokenError("Invalid token payload")
        return SessionClaims(
            username=username,
            expires_at=datetime.fromtimestamp(payload["exp"], UTC),
        )


def build_token_codec(settings: "Settings") -> TokenCodec:
    """Construct the process-wide codec from validated settings."""
    return TokenCodec(
        secret=settings.JWT_SECRET.get_secret_value(),
        algorithm=settings.JWT_ALGORITHM,
        expire_minutes=settings.JWT_EXPIRE_MINUTES,
    )
