"""Request audit ORM models."""

from __future__ import annotations

from sqlalchemy import Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from tablekit.core.database import Base, RecordMixin


class RequestLog(RecordMixin, Base):
    """Incoming API request, with error details once the request fails."""

    __tablename__ = "request_logs"

    url_path: Mapped[str] = mapped_column(String(2048), nullable=False, index=True)
    method: Mapped[str | None] = mapped_column(String(16), nullable=True)
    request: Mapped[dict] = mapped_column(JSONB, default=dict, nullable=False)
    status_code: Mapped[int | None] = mapped_column(Integer, nullable=True, index=True)
    error: Mapped[str | None] = mapped_column(Text, nullable=True)
