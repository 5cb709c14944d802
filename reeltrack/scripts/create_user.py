"""
Create a user (e.g. the first admin). Run from project root:
  python -m reeltrack.scripts.create_user USERNAME EMAIL PASSWORD [role]
Example:
  python -m reeltrack.scripts.create_user admin admin@example.com your-secure-password ADMIN
"""
import argparse
import sys

from email_validator import EmailNotValidError, validate_email

from reeltrack.core.config import get_settings
from reeltrack.core.database import SessionLocal
from reeltrack.core.errors import ConflictError, StoreUnavailableError
from reeltrack.core.security import (
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    USERNAME_MAX_LEN,
    USERNAME_MIN_LEN,
    PasswordHasher,
)
from reeltrack.models import UserRole
from reeltrack.services.session_store import SessionStore
from reeltrack.services.user_store import UserStore
from reeltrack.services.users import UserService


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a ReelTrack user directly in the database.")
    parser.add_argument("username", help=f"Username ({USERNAME_MIN_LEN}-{USERNAME_MAX_LEN} chars)")
    parser.add_argument("email", help="Login email (unique)")
    parser.add_argument("password", help=f"Password ({PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} chars)")
    parser.add_argument(
        "role",
        nargs="?",
        default=UserRole.USER.value,
        type=str.upper,
        choices=[role.value for role in UserRole],
    )
    args = parser.parse_args(argv)

    username = args.username.strip()
    if not (USERNAME_MIN_LEN <= len(username) <= USERNAME_MAX_LEN):
        print("Invalid username length.", file=sys.stderr)
        return 1
    if not (PASSWORD_MIN_LEN <= len(args.password) <= PASSWORD_MAX_LEN):
        print(f"Password must be {PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} characters.", file=sys.stderr)
        return 1
    try:
        email = validate_email(args.email.strip(), check_deliverability=False).normalized.lower()
    except EmailNotValidError as e:
        print(str(e), file=sys.stderr)
        return 1

    db = SessionLocal()
    try:
        service = UserService(
            UserStore(db),
            SessionStore(db),
            PasswordHasher(rounds=get_settings().BCRYPT_ROUNDS),
        )
        user = service.create_user(username, email, args.password, UserRole(args.role))
        print(f"Created user '{username}' (id={user.id}) with role '{args.role}'.")
        return 0
    except ConflictError:
        print(f"A user with username '{username}' or email '{email}' already exists.", file=sys.stderr)
        return 1
    except StoreUnavailableError as e:
        print(e.message, file=sys.stderr)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
