"""Pydantic schemas for health check responses."""

from typing import Literal

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Liveness plus the state of the session/user database."""

    status: Literal["ok"] = Field(default="ok", description="Service status")
    service: str = Field(default="reeltrack-auth", description="Service name")
    environment: str = Field(description="Current app environment (dev or prod)")
    database: Literal["connected", "disconnected"] | None = Field(
        default=None,
        description="Whether the user/session database answered a trivial query",
    )
