from __future__ import annotations
import math
import re
from datetime import datetime, timezone
from typing import Any, Optional

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")

def parse_leading_int(value: Any) -> Optional[int]:
    """Integer prefix of a stringified number ("30", "30.5", "45min" -> 30, 30, 45); None if there is none."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    match = _LEADING_INT.match(str(value))
    return int(match.group(1)) if match else None

def stringify_number(value: Any) -> str:
    """Index form of a numeric field; falsy values become "0"."""
    if not value:
        return "0"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)

def format_timestamp(moment: datetime) -> str:
    """UTC ISO-8601 with millisecond precision and a Z suffix."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")

def parse_timestamp(value: Any) -> Optional[datetime]:
    if not value or not isinstance(value, str):
        return None
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        moment = datetime.fromisoformat(text)
    except ValueError:
        return None
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment
