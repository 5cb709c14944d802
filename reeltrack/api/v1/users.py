"""User resource endpoints, gated by bearer authentication and role checks."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from reeltrack.api.deps import (
    get_current_user,
    get_user_service,
    is_staff,
    require_admin,
    require_staff,
)
from reeltrack.models import User, UserRole
from reeltrack.schemas.common import MessageResponse
from reeltrack.schemas.users import CreateUserRequest, UpdateUserRequest, UserResponse
from reeltrack.services.users import UserService

router = APIRouter()


# users.id is a 32-bit INTEGER column.
MAX_USER_ID = 2**31 - 1


def _parse_user_id(raw: str) -> int:
    try:
        user_id = int(raw)
    except ValueError:
        user_id = 0
    if not 1 <= user_id <= MAX_USER_ID:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid user ID")
    return user_id


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")


@router.get("", response_model=list[UserResponse])
def list_users(
    _staff: Annotated[User, Depends(require_staff)],
    users: Annotated[UserService, Depends(get_user_service)],
) -> list[UserResponse]:
    """List all users (admin or moderator)."""
    return [UserResponse.model_validate(u) for u in users.list_users()]


@router.get("/{user_id}", response_model=UserResponse)
def get_user(
    user_id: str,
    current_user: Annotated[User, Depends(get_current_user)],
    users: Annotated[UserService, Depends(get_user_service)],
) -> UserResponse:
    """Users may read their own profile; admins and moderators may read any."""
    target_id = _parse_user_id(user_id)
    if target_id != current_user.id and not is_staff(current_user):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied. You can only view your own profile.",
        )
    user = users.get_user(target_id)
    if user is None:
        raise _not_found()
    return UserResponse.model_validate(user)


@router.post("", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
def create_user(
    body: CreateUserRequest,
    _admin: Annotated[User, Depends(require_admin)],
    users: Annotated[UserService, Depends(get_user_service)],
) -> MessageResponse:
    """Create a user with any role (admin only)."""
    user = users.create_user(
        username=body.username,
        email=body.email,
        password=body.password,
        role=body.role,
    )
    return MessageResponse(message="User created successfully", id=user.id)


@router.put("/{user_id}", response_model=UserResponse)
def update_user(
    user_id: str,
    body: UpdateUserRequest,
    current_user: Annotated[User, Depends(get_current_user)],
    users: Annotated[UserService, Depends(get_user_service)],
) -> UserResponse:
    """
    Replace a user's profile. Users may update only themselves; admins anyone.
    Only admins can change role or ban status; for others those fields are kept.
    """
    target_id = _parse_user_id(user_id)
    caller_is_admin = current_user.role is UserRole.ADMIN
    if target_id != current_user.id and not caller_is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied. You can only update your own profile.",
        )
    existing = users.get_user(target_id)
    if existing is None:
        raise _not_found()

    updated = users.update_user(
        target_id,
        username=body.username,
        email=body.email,
        role=body.role if caller_is_admin else existing.role,
        is_banned=body.is_banned if caller_is_admin else existing.is_banned,
        password=body.password,
    )
    if updated is None:
        raise _not_found()
    return UserResponse.model_validate(updated)


@router.delete("/{user_id}", response_model=MessageResponse)
def delete_user(
    user_id: str,
    _admin: Annotated[User, Depends(require_admin)],
    users: Annotated[UserService, Depends(get_user_service)],
) -> MessageResponse:
    """Delete a user and revoke all of their sessions (admin only)."""
    if not users.delete_user(_parse_user_id(user_id)):
        raise _not_found()
    return MessageResponse(message="User deleted successfully")


@router.post("/{user_id}/ban", response_model=MessageResponse)
def ban_user(
    user_id: str,
    _staff: Annotated[User, Depends(require_staff)],
    users: Annotated[UserService, Depends(get_user_service)],
) -> MessageResponse:
    """Ban a user (admin or moderator). Their tokens stop validating immediately."""
    if not users.ban_user(_parse_user_id(user_id)):
        raise _not_found()
    return MessageResponse(message="User banned successfully")


@router.post("/{user_id}/unban", response_model=MessageResponse)
def unban_user(
    user_id: str,
    _staff: Annotated[User, Depends(require_staff)],
    users: Annotated[UserService, Depends(get_user_service)],
) -> MessageResponse:
    if not users.unban_user(_parse_user_id(user_id)):
        raise _not_found()
    return MessageResponse(message="User unbanned successfully")
