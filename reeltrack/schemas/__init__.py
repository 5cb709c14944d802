"""Pydantic request/response schemas."""

from reeltrack.schemas.auth import (
    LoginRequest,
    LoginResponse,
    RefreshTokenRequest,
    RegisterRequest,
    TokenResponse,
)
from reeltrack.schemas.common import MessageResponse
from reeltrack.schemas.health import HealthResponse
from reeltrack.schemas.users import (
    CreateUserRequest,
    UpdateUserRequest,
    UserResponse,
)

__all__ = [
    "CreateUserRequest",
    "HealthResponse",
    "LoginRequest",
    "LoginResponse",
    "MessageResponse",
    "RefreshTokenRequest",
    "RegisterRequest",
    "TokenResponse",
    "UpdateUserRequest",
    "UserResponse",
]
