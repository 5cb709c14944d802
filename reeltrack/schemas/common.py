"""Shared request/response pieces."""

from pydantic import BaseModel, Field


def lower_email(v: str) -> str:
    """Lower-case an address already checked by EmailStr; emails are matched case-insensitively."""
    return v.lower()


class MessageResponse(BaseModel):
    """Generic acknowledgement; id is set when a resource was created."""

    message: str = Field(..., description="Human-readable result")
    id: int | None = Field(default=None, description="Id of the created resource")
