"""Utility helpers for the meetup spot finder."""

from __future__ import annotations

from datetime import datetime
from typing import Optional


def mask_secret(value: Optional[str], visible: int = 4) -> str:
    if not value:
        return "unset"
    if len(value) <= visible * 2:
        return "*" * len(value)
    return f"{value[:visible]}...{value[-visible:]}"


def time_of_day_bucket(now: Optional[datetime] = None) -> str:
    """Map a wall-clock time onto morning / afternoon / evening."""
    hour = (now or datetime.now()).hour
    if hour < 12:
        return "morning"
    if hour < 18:
        return "afternoon"
    return "evening"
