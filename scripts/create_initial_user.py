"""Utility script to create an initial user in the database."""

from __future__ import annotations

import argparse
from getpass import getpass

from sqlalchemy.exc import SQLAlchemyError

from app.application.use_cases.users import create_user
from app.domain.entities import ADMIN_ROLE_ALIAS, MEMBER_ROLE_ALIAS
from app.infrastructure.database import SessionLocal, initialize_database
from app.infrastructure.repositories import RoleRepository


def parse_args() -> argparse.Namespace:
    """Parse command line arguments for user creation."""

    parser = argparse.ArgumentParser(
        description="Seed the roles and create an initial user for the community API.",
    )
    parser.add_argument("--name", default="Administrator", help="Display name of the user")
    parser.add_argument(
        "--email", default="admin@example.com", help="Login email of the user"
    )
    parser.add_argument(
        "--role",
        default=ADMIN_ROLE_ALIAS,
        choices=[ADMIN_ROLE_ALIAS, MEMBER_ROLE_ALIAS],
        help="Role assigned to the user (default: admin)",
    )
    parser.add_argument(
        "--password",
        default=None,
        help="Password of the user. Prompted interactively when omitted.",
    )
    return parser.parse_args()


def main() -> None:
    """Create a user using the provided command line arguments."""

    args = parse_args()

    password = args.password or getpass("Password for the new user: ")
    if not password:
        raise SystemExit("No valid password was provided.")

    initialize_database()

    session = SessionLocal()
    try:
        roles = RoleRepository(session)
        roles.ensure(ADMIN_ROLE_ALIAS, "Administrator")
        roles.ensure(MEMBER_ROLE_ALIAS, "Member")
        user = create_user(
            session,
            name=args.name,
            email=args.email,
            password=password,
            role_alias=args.role,
        )
    except ValueError as exc:
        session.rollback()
        raise SystemExit(f"Could not create the user: {exc}") from exc
    except SQLAlchemyError as exc:
        session.rollback()
        raise SystemExit(f"Database error while saving the user: {exc}") from exc
    else:
        print(
            "User created:\n"
            f"  ID: {user.id}\n"
            f"  Name: {user.name}\n"
            f"  Email: {user.email}\n"
            f"  Role: {user.role.alias}"
        )
    finally:
        session.close()


if __name__ == "__main__":
    main()
