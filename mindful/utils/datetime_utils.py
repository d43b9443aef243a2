from datetime import datetime
from typing import Tuple

import pytz

DEFAULT_TZ = pytz.utc


def now_in(tz=None) -> datetime:
    return datetime.now(tz or DEFAULT_TZ)


def parse_time_of_day(value: str) -> Tuple[int, int]:
    """'HH:MM' -> (hour, minute); raises ValueError on bad input"""
    parts = value.split(':')
    if len(parts) != 2:
        raise ValueError(f"Bad time of day: {value!r}")
    hour, minute = int(parts[0]), int(parts[1])
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        raise ValueError(f"Time of day out of range: {value!r}")
    return hour, minute


def format_duration(seconds: float) -> str:
    """Timer display, MM:SS"""
    seconds = max(0, int(seconds))
    return f"{seconds // 60:02d}:{seconds % 60:02d}"
