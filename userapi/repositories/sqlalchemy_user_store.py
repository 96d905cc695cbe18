"""UserStore adapter backed by a SQLAlchemy session (PostgreSQL in production)."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from userapi.models.user import User
from userapi.repositories.base import DuplicateRecordError, RecordNotFoundError, StoreError

logger = logging.getLogger(__name__)

# Columns that may be used for lookups and distinct listings.
QUERYABLE_FIELDS = frozenset({"id", "username", "country"})

# PostgreSQL SQLSTATE for unique_violation.
UNIQUE_VIOLATION = "23505"


def _column(field: str) -> Any:
    if field not in QUERYABLE_FIELDS:
        raise ValueError(f"Unsupported user field: {field!r}")
    return getattr(User, field)


class SqlAlchemyUserStore:
    """One instance per request session; commits after every write."""

    def __init__(self, session: Session) -> None:
        self.session = session

    @contextmanager
    def _translate_errors(self, action: str) -> Iterator[None]:
        try:
            yield
        except IntegrityError as e:
            self.session.rollback()
            message = str(e.orig) if e.orig is not None else str(e)
            if getattr(e.orig, "pgcode", None) == UNIQUE_VIOLATION:
                logger.info("User store %s rejected duplicate: %s", action, message)
                raise DuplicateRecordError(message, e) from e
            logger.error("User store %s failed: %s", action, message)
            raise StoreError(message, e) from e
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error("User store %s failed: %s", action, e)
            raise StoreError(str(e), e) from e

    def create(self, user: User) -> User:
        with self._translate_errors("create"):
            self.session.add(user)
            self.session.commit()
            self.session.refresh(user)
        return user

    def find_by_field(self, field: str, value: Any) -> User:
        column = _column(field)
        with self._translate_errors("lookup"):
            user = self.session.query(User).filter(column == value).first()
        if user is None:
            raise RecordNotFoundError(f"No user with {field}={value!r}")
        return user

    def find_by_id(self, user_id: int) -> User:
        return self.find_by_field("id", user_id)

    def list_all(self) -> list[User]:
        with self._translate_errors("list"):
            return self.session.query(User).order_by(User.id).all()

    def save(self, user: User) -> User:
        with self._translate_errors("save"):
            self.session.add(user)
            self.session.commit()
            self.session.refresh(user)
        return user

    def delete(self, user: User) -> None:
        with self._translate_errors("delete"):
            self.session.delete(user)
            self.session.commit()

    def distinct_values(self, field: str) -> list[Any]:
        column = _column(field)
        with self._translate_errors("distinct"):
            rows = self.session.query(column).distinct().order_by(column).all()
        return [row[0] for row in rows]
