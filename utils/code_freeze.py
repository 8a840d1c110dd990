#!/usr/bin/env python3
"""Code freeze date arithmetic.

Releases ship on the second Tuesday of the month; code freeze happens a fixed
number of days earlier.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

from configs.config import Config

DAYS_BETWEEN_CODE_FREEZE_AND_RELEASE = Config.DAYS_BETWEEN_CODE_FREEZE_AND_RELEASE

TUESDAY = 1


def get_today(override: Optional[str] = "now") -> datetime:
    """Return the current UTC time, or the parsed ``override``.

    Accepts ISO 8601 dates and datetimes; naive values are taken as UTC.

    Raises:
        ValueError: If ``override`` is not a valid ISO 8601 value
    """
    if not override or override == "now":
        return datetime.now(timezone.utc)
    text = override.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as e:
        raise ValueError(f"Invalid time override {override!r}; expected an ISO 8601 date") from e
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def get_future_date(today: datetime, days: int = DAYS_BETWEEN_CODE_FREEZE_AND_RELEASE) -> datetime:
    return today + timedelta(days=days)


def is_second_tuesday(day: datetime) -> bool:
    return day.weekday() == TUESDAY and 8 <= day.day <= 14


def is_today_code_freeze_day(override: Optional[str] = "now") -> bool:
    """True when the release day (second Tuesday) is exactly the freeze gap away."""
    return is_second_tuesday(get_future_date(get_today(override)))
