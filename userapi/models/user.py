"""ORM model for user records (signup, login and the /users endpoints)."""

from sqlalchemy import Column, DateTime, Integer, String, func

from userapi.models.base import Base


class User(Base):
    """
    User account. ``id`` and ``username`` never change after creation;
    only ``password_hash`` and ``country`` are updated in place.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    country = Column(String(255), nullable=False)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    def __repr__(self) -> str:
        return f"User(id={self.id!r}, username={self.username!r})"
