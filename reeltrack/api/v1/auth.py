"""Auth endpoints: register, login, refresh, logout, logout-all and me."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from reeltrack.api.deps import (
    get_auth_service,
    get_bearer_token,
    get_current_user,
    get_user_service,
)
from reeltrack.models import User, UserRole
from reeltrack.schemas.auth import (
    LoginRequest,
    LoginResponse,
    RefreshTokenRequest,
    RegisterRequest,
    TokenResponse,
)
from reeltrack.schemas.common import MessageResponse
from reeltrack.schemas.users import UserResponse
from reeltrack.services.auth import AuthError, AuthFailure, AuthService
from reeltrack.services.users import UserService

router = APIRouter()


def _raise_for_failure(failure: AuthFailure) -> None:
    """Map an orchestrator failure onto the HTTP error a caller is allowed to see."""
    if failure.error is AuthError.BANNED:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="User is banned")
    if failure.error is AuthError.INVALID_CREDENTIALS:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )
    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or expired token",
        headers={"WWW-Authenticate": "Bearer"},
    )


@router.post("/register", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
def register(
    body: RegisterRequest,
    users: Annotated[UserService, Depends(get_user_service)],
) -> MessageResponse:
    """Create a USER account. Duplicate username or email returns 409."""
    user = users.create_user(
        username=body.username,
        email=body.email,
        password=body.password,
        role=UserRole.USER,
    )
    return MessageResponse(message="User registered successfully", id=user.id)


@router.post("/login", response_model=LoginResponse)
def login(
    body: LoginRequest,
    auth: Annotated[AuthService, Depends(get_auth_service)],
) -> LoginResponse:
    """
    Authenticate with email and password; returns an access+refresh pair.
    Include the access token in the Authorization header as: Bearer <access_token>
    """
    result = auth.login(body.email, body.password)
    if isinstance(result, AuthFailure):
        _raise_for_failure(result)
    return LoginResponse(
        access_token=result.tokens.access_token,
        refresh_token=result.tokens.refresh_token,
        expires_in=result.tokens.expires_in,
        user=UserResponse.model_validate(result.user),
    )


@router.post("/refresh", response_model=TokenResponse)
def refresh(
    body: RefreshTokenRequest,
    auth: Annotated[AuthService, Depends(get_auth_service)],
) -> TokenResponse:
    """Rotate a refresh token. The old access and refresh tokens stop working."""
    result = auth.refresh_token(body.refresh_token)
    if isinstance(result, AuthFailure):
        _raise_for_failure(result)
    return TokenResponse(
        access_token=result.access_token,
        refresh_token=result.refresh_token,
        expires_in=result.expires_in,
    )


@router.post("/logout", response_model=MessageResponse)
def logout(
    token: Annotated[str, Depends(get_bearer_token)],
    auth: Annotated[AuthService, Depends(get_auth_service)],
) -> MessageResponse:
    """Revoke the presented access token. Succeeds even if the token is unknown."""
    auth.logout(token)
    return MessageResponse(message="Logged out successfully")


@router.post("/logout-all", response_model=MessageResponse)
def logout_all(
    current_user: Annotated[User, Depends(get_current_user)],
    auth: Annotated[AuthService, Depends(get_auth_service)],
) -> MessageResponse:
    """Revoke every session of the authenticated user."""
    revoked = auth.logout_all_devices(current_user.id)
    return MessageResponse(message=f"Logged out from all devices ({revoked} sessions revoked)")


@router.get("/me", response_model=UserResponse)
def me(current_user: Annotated[User, Depends(get_current_user)]) -> UserResponse:
    return UserResponse.model_validate(current_user)
