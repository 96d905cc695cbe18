"""User service: signup, login and id-addressed CRUD over the credential store."""

import logging
from functools import lru_cache

from userapi.core.config import get_settings
from userapi.core.errors import (
    AppError,
    InvalidCredentialsError,
    NotFoundError,
    PersistenceError,
    UsernameTakenError,
)
from userapi.core.security import (
    TokenCodec,
    TokenSigningError,
    hash_password,
    verify_password,
)
from userapi.models.user import User
from userapi.repositories.base import (
    DuplicateRecordError,
    RecordNotFoundError,
    StoreError,
    UserStore,
)
from userapi.schemas.user import SignUpRequest, UserUpdateRequest

logger = logging.getLogger(__name__)


@lru_cache(maxsize=4)
def _placeholder_hash(rounds: int) -> str:
    return hash_password("placeholder-password", rounds=rounds)


class UserService:
    """
    Orchestrates the credential store and token codec.

    Failures are raised as userapi.core.errors types and never retried.
    Input constraints (non-empty fields, lengths) are enforced by the request
    schemas before any method here is called.
    """

    def __init__(
        self,
        store: UserStore,
        codec: TokenCodec,
        bcrypt_rounds: int | None = None,
    ) -> None:
        self.store = store
        self.codec = codec
        if bcrypt_rounds is None:
            bcrypt_rounds = get_settings().BCRYPT_ROUNDS
        self.bcrypt_rounds = bcrypt_rounds

    def sign_up(self, candidate: SignUpRequest) -> User:
        """Create a user; the password is stored as a bcrypt hash."""
        user = User(
            username=candidate.username,
            password_hash=hash_password(candidate.password, rounds=self.bcrypt_rounds),
            country=candidate.country,
        )
        try:
            created = self.store.create(user)
        except DuplicateRecordError as e:
            raise UsernameTakenError(
                f"Username {candidate.username!r} is already taken", e
            ) from e
        except StoreError as e:
            raise PersistenceError(e.message, e) from e
        logger.info("User signed up", extra={"user_id": created.id})
        return created

    def login(self, username: str, password: str) -> str:
        """
        Check credentials and return a freshly minted token.

        Unknown username and wrong password raise the same error class with the
        same message; only the log line tells them apart.
        """
        try:
            user = self.store.find_by_field("username", username)
        except RecordNotFoundError as e:
            # Unknown usernames pay the same bcrypt cost as a wrong password.
            verify_password(password, _placeholder_hash(self.bcrypt_rounds))
            logger.info("Login rejected", extra={"reason": "username"})
            raise InvalidCredentialsError("username") from e
        except StoreError as e:
            raise PersistenceError(e.message, e) from e

        if not verify_password(password, user.password_hash):
            logger.info("Login rejected", extra={"reason": "password"})
            raise InvalidCredentialsError("password")

        try:
            token = self.codec.mint(user.username)
        except TokenSigningError as e:
            logger.error("Token signing failed: %s", e.cause)
            raise AppError(e.message, e) from e
        logger.info("User logged in", extra={"user_id": user.id})
        return token

    def get_users(self) -> list[User]:
        try:
            return self.store.list_all()
        except StoreError as e:
            raise PersistenceError(e.message, e) from e

    def get_user(self, user_id: int) -> User:
        return self._resolve(user_id)

    def update_user(self, user_id: int, patch: UserUpdateRequest) -> User:
        """
        Copy password and country from the patch onto the stored record and
        save it. Username and id are never touched; unset patch fields keep
        their stored value. Concurrent updates are last-write-wins.
        """
        existing = self._resolve(user_id)
        if patch.password is not None:
            existing.password_hash = hash_password(patch.password, rounds=self.bcrypt_rounds)
        if patch.country is not None:
            existing.country = patch.country
        try:
            saved = self.store.save(existing)
        except StoreError as e:
            raise PersistenceError(e.message, e) from e
        logger.info("User updated", extra={"user_id": user_id})
        return saved

    def delete_user(self, user_id: int) -> None:
        existing = self._resolve(user_id)
        try:
            self.store.delete(existing)
        except StoreError as e:
            raise PersistenceError(e.message, e) from e
        logger.info("User deleted", extra={"user_id": user_id})

    def get_countries(self) -> list[str]:
        """Distinct countries across all users."""
        try:
            return self.store.distinct_values("country")
        except StoreError as e:
            raise PersistenceError(e.message, e) from e

    def _resolve(self, user_id: int) -> User:
        """Shared id lookup: absent record is NotFoundError, anything else PersistenceError."""
        try:
            return self.store.find_by_id(user_id)
        except RecordNotFoundError as e:
            raise NotFoundError(f"User with ID {user_id} not found") from e
        except StoreError as e:
            raise PersistenceError(e.message, e) from e
