"""
Timezone-aware date/time helpers for the organization timezone.

Every comparison between appointment wall-clock times and "now" goes through
this module. Civil values carry no tzinfo; they are projected into the IANA
zone (America/Denver by default, DST-aware) only when an instant is needed.
"""

from __future__ import annotations

import re
from datetime import date, datetime, timedelta
from enum import Enum
from zoneinfo import ZoneInfo

from safespace.application.exceptions import ParseError
from safespace.domain.entities.civil_datetime import CivilDateTime

ORG_TIMEZONE_NAME = "America/Denver"
ORG_TIMEZONE = ZoneInfo(ORG_TIMEZONE_NAME)
UTC = ZoneInfo("UTC")

_DATE_PATTERN = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})(?:[T ].*)?$")
_TIME_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2})(?:\.\d+)?)?\s*([ap]m)?$", re.IGNORECASE)


class Ordering(str, Enum):
    before = "before"
    same = "same"
    after = "after"


def now_in_org_timezone(timezone: ZoneInfo | None = None, now: datetime | None = None) -> CivilDateTime:
    """Project the current instant (or an injected aware `now`) into the organization timezone, truncated to the minute."""
    tz = timezone or ORG_TIMEZONE
    current = now.astimezone(tz) if now is not None else datetime.now(tz)
    return CivilDateTime(current.year, current.month, current.day, current.hour, current.minute)


def compare(a: CivilDateTime, b: CivilDateTime) -> Ordering:
    key_a = a.sort_key()
    key_b = b.sort_key()
    if key_a < key_b:
        return Ordering.before
    if key_a > key_b:
        return Ordering.after
    return Ordering.same


def is_same_calendar_day(a: CivilDateTime, b: CivilDateTime) -> bool:
    return (a.year, a.month, a.day) == (b.year, b.month, b.day)


def parse_date(text: str) -> CivilDateTime:
    """Parse `YYYY-MM-DD` (a trailing ISO time part is ignored) into a date-only civil value."""
    match = _DATE_PATTERN.match((text or "").strip())
    if not match:
        raise ParseError(f"Invalid date: {text!r}")
    year, month, day = (int(g) for g in match.groups())
    try:
        date(year, month, day)
    except ValueError as e:
        raise ParseError(f"Invalid date: {text!r}") from e
    return CivilDateTime(year, month, day)


def parse_time_of_day(text: str) -> tuple[int, int]:
    """Parse `HH:MM`, `HH:MM:SS` or `h:MM AM/PM`. Returns (hour, minute)."""
    match = _TIME_PATTERN.match((text or "").strip())
    if not match:
        raise ParseError(f"Invalid time: {text!r}")

    hour = int(match.group(1))
    minute = int(match.group(2))
    second = int(match.group(3)) if match.group(3) else 0
    am_pm = match.group(4).lower() if match.group(4) else None

    if am_pm:
        if not 1 <= hour <= 12:
            raise ParseError(f"Invalid time: {text!r}")
        if am_pm == "pm" and hour != 12:
            hour += 12
        elif am_pm == "am" and hour == 12:
            hour = 0

    if not (0 <= hour <= 23 and 0 <= minute <= 59 and 0 <= second <= 59):
        raise ParseError(f"Invalid time: {text!r}")
    return (hour, minute)


def parse_civil(date_text: str, time_text: str | None = None) -> CivilDateTime:
    civil = parse_date(date_text)
    if time_text is None or not time_text.strip():
        return civil
    hour, minute = parse_time_of_day(time_text)
    return civil.with_time(hour, minute)


def normalize_time_string(text: str) -> str:
    """Normalize a backend time to `HH:MM`; unparseable text is returned stripped so it still fails later."""
    try:
        return format_time_24h(parse_time_of_day(text))
    except ParseError:
        return (text or "").strip()


def format_time_24h(time_of_day: tuple[int, int]) -> str:
    hour, minute = time_of_day
    return f"{hour:02d}:{minute:02d}"


def format_time_hhmmss(time_of_day: tuple[int, int]) -> str:
    return f"{format_time_24h(time_of_day)}:00"


def format_time_12h(time_of_day: tuple[int, int]) -> str:
    hour, minute = time_of_day
    suffix = "PM" if hour >= 12 else "AM"
    display_hour = hour % 12 or 12
    return f"{display_hour}:{minute:02d} {suffix}"


def format_display_date(civil: CivilDateTime) -> str:
    """e.g. 'Monday, December 1, 2025'."""
    d = civil.to_date()
    return f"{d:%A}, {d:%B} {d.day}, {d.year}"


def add_days(civil: CivilDateTime, days: int) -> CivilDateTime:
    shifted = civil.to_date() + timedelta(days=days)
    return CivilDateTime.from_date(shifted, civil.hour, civil.minute)


def to_instant(civil: CivilDateTime, timezone: ZoneInfo | None = None) -> datetime:
    hour, minute = civil.time_of_day()
    return datetime(civil.year, civil.month, civil.day, hour, minute, tzinfo=timezone or ORG_TIMEZONE)


def minutes_between(start: CivilDateTime, end: CivilDateTime, timezone: ZoneInfo | None = None) -> float:
    """Elapsed real minutes from `start` to `end`, accounting for DST transitions."""
    delta = to_instant(end, timezone).astimezone(UTC) - to_instant(start, timezone).astimezone(UTC)
    return delta.total_seconds() / 60
