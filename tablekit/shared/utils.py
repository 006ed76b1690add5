"""Shared utility functions."""

from __future__ import annotations

from datetime import UTC, datetime


def utc_now() -> datetime:
    """Return aware UTC datetime."""
    return datetime.now(UTC)
