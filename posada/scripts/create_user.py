"""
Create a user (e.g. the first admin). Run from project root:
  python -m posada.scripts.create_user USERNAME PASSWORD FULL_NAME EMAIL [role]
Example:
  python -m posada.scripts.create_user admin s3cretpw "Site Admin" admin@example.com admin
"""
import argparse
import re
import sys

from dotenv import load_dotenv

from posada.core.config import ConfigError, get_config
from posada.core.database import create_db_engine, create_session_factory
from posada.core.errors import NoRowError, UniqueViolationError
from posada.core.security import PASSWORD_MIN_LEN, PasswordTooLongError, hash_password
from posada.models import ROLE_ADMIN, ROLE_CUSTOMER, ROLE_ROOT
from posada.services.store import CreateUserParams, SQLStore


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a Posada user (no registration UI).")
    parser.add_argument("username", help="Username (letters and digits only)")
    parser.add_argument("password", help=f"Password (letters and digits, at least {PASSWORD_MIN_LEN})")
    parser.add_argument("full_name", help="Full name")
    parser.add_argument("email", help="Email address")
    parser.add_argument(
        "role",
        nargs="?",
        default=ROLE_CUSTOMER,
        choices=[ROLE_CUSTOMER, ROLE_ADMIN, ROLE_ROOT],
    )
    args = parser.parse_args(argv)

    username = args.username.strip()
    if not re.fullmatch(r"[A-Za-z0-9]+", username):
        print("Username must be alphanumeric.", file=sys.stderr)
        return 1
    if len(args.password) < PASSWORD_MIN_LEN:
        print(f"Password must be at least {PASSWORD_MIN_LEN} characters.", file=sys.stderr)
        return 1
    if not re.fullmatch(r"[A-Za-z0-9]+", args.password):
        # Login only accepts alphanumeric passwords.
        print("Password must be alphanumeric.", file=sys.stderr)
        return 1
    try:
        hashed_password = hash_password(args.password)
    except PasswordTooLongError as e:
        print(str(e), file=sys.stderr)
        return 1

    load_dotenv()
    try:
        config = get_config()
    except ConfigError as e:
        print(e.message, file=sys.stderr)
        return 1

    db = create_session_factory(create_db_engine(config.db_source))()
    try:
        store = SQLStore(db)
        try:
            role = store.get_role_by_name(args.role)
        except NoRowError:
            print(f"Role '{args.role}' does not exist; run migrations first.", file=sys.stderr)
            return 1
        try:
            store.create_user(
                CreateUserParams(
                    username=username,
                    hashed_password=hashed_password,
                    full_name=args.full_name,
                    email=args.email,
                    role_id=role.internal_id,
                )
            )
        except UniqueViolationError:
            print(f"User '{username}' already exists.", file=sys.stderr)
            return 1
        print(f"Created user '{username}' with role '{args.role}'.")
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
