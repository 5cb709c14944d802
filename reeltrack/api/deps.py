"""FastAPI dependency providers: explicit wiring of stores, services and the current user."""

from collections.abc import Callable
from functools import lru_cache
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from reeltrack.core.config import get_settings
from reeltrack.core.database import get_db
from reeltrack.core.security import PasswordHasher, TokenIssuer
from reeltrack.models import User, UserRole
from reeltrack.services.auth import AuthFailure, AuthService
from reeltrack.services.session_store import SessionStore
from reeltrack.services.user_store import UserStore
from reeltrack.services.users import UserService

security = HTTPBearer(auto_error=False)


@lru_cache
def get_password_hasher() -> PasswordHasher:
    return PasswordHasher(rounds=get_settings().BCRYPT_ROUNDS)


@lru_cache
def get_token_issuer() -> TokenIssuer:
    return TokenIssuer(get_settings().token_config())


def get_user_store(db: Annotated[Session, Depends(get_db)]) -> UserStore:
    return UserStore(db)


def get_session_store(db: Annotated[Session, Depends(get_db)]) -> SessionStore:
    return SessionStore(db)


def get_auth_service(
    users: Annotated[UserStore, Depends(get_user_store)],
    sessions: Annotated[SessionStore, Depends(get_session_store)],
    hasher: Annotated[PasswordHasher, Depends(get_password_hasher)],
    issuer: Annotated[TokenIssuer, Depends(get_token_issuer)],
) -> AuthService:
    return AuthService(users, sessions, hasher, issuer)


def get_user_service(
    users: Annotated[UserStore, Depends(get_user_store)],
    sessions: Annotated[SessionStore, Depends(get_session_store)],
    hasher: Annotated[PasswordHasher, Depends(get_password_hasher)],
) -> UserService:
    return UserService(users, sessions, hasher)


def get_bearer_token(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> str:
    """Dependency: extract the raw Bearer token. Raises 401 if the header is missing."""
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return credentials.credentials


def get_current_user(
    token: Annotated[str, Depends(get_bearer_token)],
    auth: Annotated[AuthService, Depends(get_auth_service)],
) -> User:
    """Dependency: require a live, unrevoked access token of a non-banned user."""
    result = auth.validate_token(token)
    if isinstance(result, AuthFailure):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return result


def require_roles(*roles: UserRole) -> Callable[[User], User]:
    """Build a dependency that admits only users whose role is in roles (403 otherwise)."""
    allowed = frozenset(roles)
    label = " or ".join(role.value.capitalize() for role in roles)

    def dependency(current_user: Annotated[User, Depends(get_current_user)]) -> User:
        if current_user.role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied. {label} role required.",
            )
        return current_user

    return dependency


require_admin = require_roles(UserRole.ADMIN)
require_staff = require_roles(UserRole.ADMIN, UserRole.MODERATOR)


def is_staff(user: User) -> bool:
    return user.role in (UserRole.ADMIN, UserRole.MODERATOR)
