"""Lenient converters for values arriving in API JSON."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional


def to_float(value: Any, default: float = 0.0) -> float:
    if value in (None, ""):
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def to_int(value: Any, default: int = 0) -> int:
    if value in (None, ""):
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def to_str(value: Any) -> str:
    return "" if value is None else str(value)


def to_datetime(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp; a trailing Z is read as UTC."""
    if not value:
        return None
    text = str(value)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def record_id(data: dict) -> str:
    return to_str(data.get("_id") or data.get("id"))
