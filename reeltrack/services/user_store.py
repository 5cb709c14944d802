"""User store: keyed CRUD over the users table plus ban/unban."""

from sqlalchemy import delete, func, select, update
from sqlalchemy.orm import Session

from reeltrack.core.database import translate_store_errors
from reeltrack.models import User, UserRole

DUPLICATE_USER_MESSAGE = "A user with this username or email already exists."


class UserStore:
    """User rows behind a SQLAlchemy session. Uniqueness is enforced by the database."""

    def __init__(self, db: Session) -> None:
        self._db = db

    def create(
        self,
        username: str,
        email: str,
        password_hash: str,
        role: UserRole = UserRole.USER,
        is_banned: bool = False,
    ) -> User:
        user = User(
            username=username,
            email=email,
            password_hash=password_hash,
            role=role,
            is_banned=is_banned,
        )
        with translate_store_errors(self._db, DUPLICATE_USER_MESSAGE):
            self._db.add(user)
            self._db.commit()
            self._db.refresh(user)
        return user

    def find_by_id(self, user_id: int) -> User | None:
        with translate_store_errors(self._db):
            return self._db.execute(select(User).where(User.id == user_id)).scalar_one_or_none()

    def find_by_email(self, email: str) -> User | None:
        with translate_store_errors(self._db):
            return self._db.execute(select(User).where(User.email == email)).scalar_one_or_none()

    def find_all(self) -> list[User]:
        with translate_store_errors(self._db):
            return list(self._db.execute(select(User).order_by(User.id)).scalars().all())

    def update(
        self,
        user_id: int,
        *,
        username: str,
        email: str,
        role: UserRole,
        is_banned: bool,
        password_hash: str | None = None,
    ) -> User | None:
        """
        Replace the mutable fields of a user. The password hash changes only when
        one is given. Returns None when the user does not exist.
        """
        values: dict[str, object] = {
            "username": username,
            "email": email,
            "role": role,
            "is_banned": is_banned,
            "updated_at": func.now(),
        }
        if password_hash is not None:
            values["password_hash"] = password_hash
        with translate_store_errors(self._db, DUPLICATE_USER_MESSAGE):
            result = self._db.execute(
                update(User)
                .where(User.id == user_id)
                .values(**values)
                .execution_options(synchronize_session=False)
            )
            self._db.commit()
        if not result.rowcount:
            return None
        return self.find_by_id(user_id)

    def delete(self, user_id: int) -> bool:
        with translate_store_errors(self._db):
            result = self._db.execute(
                delete(User)
                .where(User.id == user_id)
                .execution_options(synchronize_session=False)
            )
            self._db.commit()
            return bool(result.rowcount)

    def ban(self, user_id: int) -> bool:
        return self._set_banned(user_id, True)

    def unban(self, user_id: int) -> bool:
        return self._set_banned(user_id, False)

    def _set_banned(self, user_id: int, banned: bool) -> bool:
        with translate_store_errors(self._db):
            result = self._db.execute(
                update(User)
                .where(User.id == user_id)
                .values(is_banned=banned, updated_at=func.now())
                .execution_options(synchronize_session=False)
            )
            self._db.commit()
            return bool(result.rowcount)
