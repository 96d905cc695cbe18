"""
Create a user from the command line. Run from project root:
  python -m userapi.scripts.create_user USERNAME PASSWORD COUNTRY
Example:
  python -m userapi.scripts.create_user rrm 'a-strong-password' india
"""
import argparse
import logging
import sys

from pydantic import ValidationError as SchemaValidationError

from userapi.core.config import get_settings
from userapi.core.database import SessionLocal
from userapi.core.errors import PersistenceError
from userapi.core.security import build_token_codec
from userapi.repositories.sqlalchemy_user_store import SqlAlchemyUserStore
from userapi.schemas.user import SignUpRequest
from userapi.services.user_service import UserService


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a user without going through POST /signup.")
    parser.add_argument("username", help="Username (1-255 chars, unique)")
    parser.add_argument("password", help="Password (1-72 bytes UTF-8)")
    parser.add_argument("country", help="Country (1-255 chars)")
    args = parser.parse_args(argv)

    settings = get_settings()
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%SZ",
    )

    try:
        candidate = SignUpRequest(
            username=args.username,
            password=args.password,
            country=args.country,
        )
    except SchemaValidationError as e:
        print(f"Invalid input: {e}", file=sys.stderr)
        return 1

    db = SessionLocal()
    try:
        service = UserService(
            SqlAlchemyUserStore(db),
            build_token_codec(settings),
            bcrypt_rounds=settings.BCRYPT_ROUNDS,
        )
        user = service.sign_up(candidate)
        print(f"Created user '{user.username}' with id {user.id}.")
        return 0
    except PersistenceError as e:
        print(f"Could not create user: {e.message}", file=sys.stderr)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
