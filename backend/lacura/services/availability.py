"""
Availability calculation for 30-minute sessions.

Slots are generated by stepping from the window start in fixed 30-minute
increments. Each candidate is kept only if it starts on a weekday, inside
business hours (09:00-18:00 UTC) and overlaps no busy interval. Nothing in
here touches the network; the calendar gateway supplies the busy intervals.
"""

import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Iterable, List, Optional, Tuple

from lacura.schemas.booking import BusyInterval
from lacura.utils.datetime_utils import to_utc

SLOT_DURATION = timedelta(minutes=30)
BUSINESS_START_HOUR = 9
BUSINESS_END_HOUR = 18
DEFAULT_WINDOW_DAYS = 7

# Sunday first, matching the order relative-date keywords are checked in
WEEKDAY_NAMES = ["sunday", "monday", "tuesday", "wednesday", "thursday", "friday", "saturday"]

_TIME_MENTION_RE = re.compile(r"\d+\s*(am|pm)", re.IGNORECASE)


def is_business_slot(slot_start: datetime) -> bool:
    slot_start = to_utc(slot_start)
    if slot_start.weekday() >= 5:
        return False
    return BUSINESS_START_HOUR <= slot_start.hour < BUSINESS_END_HOUR


def overlaps(slot_start: datetime, slot_end: datetime, busy: BusyInterval) -> bool:
    return slot_start < to_utc(busy.end) and slot_end > to_utc(busy.start)


def calculate_available_slots(
    start: datetime,
    end: datetime,
    busy: Iterable[BusyInterval],
) -> List[datetime]:
    """Ordered slot starts within [start, end) that are bookable."""
    start = to_utc(start)
    end = to_utc(end)
    busy = list(busy)

    slots: List[datetime] = []
    current = start
    while current < end:
        slot_end = current + SLOT_DURATION
        if is_business_slot(current) and not any(overlaps(current, slot_end, b) for b in busy):
            slots.append(current)
        current = slot_end
    return slots


def _day_bounds(day: date) -> Tuple[datetime, datetime]:
    start = datetime.combine(day, time.min, tzinfo=timezone.utc)
    end = datetime.combine(day, time(23, 59, 59, 999000), tzinfo=timezone.utc)
    return start, end


def default_window(now: datetime) -> Tuple[datetime, datetime]:
    """Today 00:00 through the end of the seventh day after today."""
    today = to_utc(now).date()
    start, _ = _day_bounds(today)
    _, end = _day_bounds(today + timedelta(days=DEFAULT_WINDOW_DAYS))
    return start, end


@dataclass
class RelativeDate:
    date: Optional[date]
    has_time: bool


def parse_relative_date(text: str, today: date) -> RelativeDate:
    """
    Picks out `tomorrow`, `next week` or a weekday name (first match wins).
    A weekday always means its next occurrence, never today.
    """
    lower = text.lower()
    target: Optional[date] = None

    if "tomorrow" in lower:
        target = today + timedelta(days=1)
    elif "next week" in lower:
        target = today + timedelta(days=7)
    else:
        current_day = (today.weekday() + 1) % 7
        for day_index, name in enumerate(WEEKDAY_NAMES):
            if name in lower:
                days_to_add = (day_index - current_day + 7) % 7
                if days_to_add == 0:
                    days_to_add = 7
                target = today + timedelta(days=days_to_add)
                break

    has_time = bool(
        "morning" in lower
        or "afternoon" in lower
        or "evening" in lower
        or "am" in lower
        or "pm" in lower
        or _TIME_MENTION_RE.search(lower)
    )
    return RelativeDate(date=target, has_time=has_time)


def window_for_text(text: str, now: datetime) -> Tuple[datetime, datetime, RelativeDate]:
    """Returns (start, end, parsed mention); the whole mentioned day, else the default window."""
    relative = parse_relative_date(text, to_utc(now).date())
    if relative.date:
        start, end = _day_bounds(relative.date)
    else:
        start, end = default_window(now)
    return start, end, relative


def _format_time_12h(dt: datetime) -> str:
    hour = dt.hour % 12 or 12
    suffix = "AM" if dt.hour < 12 else "PM"
    return f"{hour}:{dt.minute:02d} {suffix}"


def format_available_slots(slots: List[datetime]) -> str:
    if not slots:
        return "I don't see any available slots in that time range. Would you like me to check a different date or time?"

    by_date: dict = {}
    for slot in slots:
        slot = to_utc(slot)
        date_key = f"{slot.strftime('%A, %B')} {slot.day}"
        by_date.setdefault(date_key, []).append(_format_time_12h(slot))

    formatted = "I found these available 30-minute slots:\n\n"
    for date_key, times in by_date.items():
        formatted += f"**{date_key}:**\n"
        for t in times:
            formatted += f"  • {t}\n"
        formatted += "\n"

    formatted += "Which time works best for you? Just let me know the date and time you prefer."
    return formatted
