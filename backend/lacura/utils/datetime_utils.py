"""
Datetime helpers shared by the calendar gateway, the availability
calculator and the booking endpoints. Everything is normalised to aware
UTC datetimes.
"""

import re
from datetime import datetime, timezone

# Graph returns up to 7 fractional digits ("2024-11-04T14:00:00.0000000")
_FRACTION_RE = re.compile(r"\.(\d{6})\d+")


def parse_iso_datetime(value: str) -> datetime:
    """
    Parse an ISO-8601 string into an aware UTC datetime.

    Accepts a trailing `Z`, explicit offsets, naive values (taken as UTC)
    and plain dates. Raises ValueError for anything else.
    """
    if not value or not isinstance(value, str):
        raise ValueError(f"Invalid datetime: {value!r}")

    text = value.strip().replace("Z", "+00:00").replace("z", "+00:00")
    text = _FRACTION_RE.sub(r".\1", text)
    dt = datetime.fromisoformat(text)
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def format_iso_z(dt: datetime) -> str:
    """`2024-11-04T14:00:00Z`"""
    return to_utc(dt).strftime("%Y-%m-%dT%H:%M:%SZ")


def format_graph_datetime(dt: datetime) -> str:
    """Graph expects a naive local time paired with an explicit timeZone field."""
    return to_utc(dt).strftime("%Y-%m-%dT%H:%M:%S")


def format_iso_ms(dt: datetime) -> str:
    """`2024-11-04T14:00:00.000Z`, the shape browsers produce with toISOString()."""
    return to_utc(dt).isoformat(timespec="milliseconds").replace("+00:00", "Z")
