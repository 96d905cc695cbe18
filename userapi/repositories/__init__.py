"""Credential store contract and its adapters."""

from userapi.repositories.base import (
    DuplicateRecordError,
    RecordNotFoundError,
    StoreError,
    UserStore,
)
from userapi.repositories.sqlalchemy_user_store import SqlAlchemyUserStore

__all__ = [
    "DuplicateRecordError",
    "RecordNotFoundError",
    "SqlAlchemyUserStore",
    "StoreError",
    "UserStore",
]
