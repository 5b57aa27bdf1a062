from datetime import datetime
from typing import Any, Optional


def parse_timestamp(value: Any) -> Optional[int]:
    """
    Converts a Moodle epoch value (int, float or numeric string) to int seconds.
    Returns None for NULL, empty or non-numeric values.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return int(value)
    text = str(value).strip()
    if not text:
        return None
    try:
        return int(float(text))
    except ValueError:
        return None


def format_human_time(value: Any, fmt: str) -> str:
    """
    Formats epoch seconds as a local date-time string.
    Data absence degrades to an empty string, it never raises.
    """
    ts = parse_timestamp(value)
    if ts is None:
        return ""
    try:
        return datetime.fromtimestamp(ts).strftime(fmt)
    except (OverflowError, OSError, ValueError):
        return ""
