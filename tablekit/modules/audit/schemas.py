"""Request audit schemas."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class RequestLogCreate(BaseModel):
    """Record request payload."""

    url_path: str = Field(min_length=1, max_length=2048)
    method: str | None = Field(default=None, max_length=16)
    request: dict = Field(default_factory=dict)


class RequestLogError(BaseModel):
    """Attach failure details to a recorded request."""

    status_code: int = Field(ge=100, le=599)
    error: str


class RequestLogRead(BaseModel):
    """Request log response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    url_path: str
    method: str | None
    request: dict
    status_code: int | None
    error: str | None
    created_at: datetime
    updated_at: datetime
