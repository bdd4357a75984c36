from __future__ import annotations

from safespace.application.utils.time_window import add_days, compare, Ordering
from safespace.domain.entities.civil_datetime import CivilDateTime
from safespace.domain.entities.slot_window import SlotWindow

BOOKING_WINDOW_DAYS = 14
# Shared same-day boundary: today stops being offerable at this time.
BOOKING_CUTOFF = (16, 30)
SLOT_DAY_START = (9, 0)
SLOT_DAY_END = (16, 30)
SLOT_INTERVAL_MINUTES = 30


def is_after_cutoff(now: CivilDateTime, cutoff: tuple[int, int] = BOOKING_CUTOFF) -> bool:
    """True at or after the cutoff (16:30:00 itself counts as after)."""
    return now.time_of_day() >= cutoff


def compute_offerable_dates(
    now: CivilDateTime,
    days: int = BOOKING_WINDOW_DAYS,
    cutoff: tuple[int, int] = BOOKING_CUTOFF,
) -> list[CivilDateTime]:
    start = now.date_only()
    if is_after_cutoff(now, cutoff):
        start = add_days(start, 1)
    return [add_days(start, offset) for offset in range(days)]


def compute_offerable_times(
    start: tuple[int, int] = SLOT_DAY_START,
    end: tuple[int, int] = SLOT_DAY_END,
    step_minutes: int = SLOT_INTERVAL_MINUTES,
) -> list[tuple[int, int]]:
    """Daily slot template, inclusive of both ends. Interpreted in the organization timezone."""
    if step_minutes <= 0:
        raise ValueError("step_minutes must be positive")
    slots: list[tuple[int, int]] = []
    current = start[0] * 60 + start[1]
    last = end[0] * 60 + end[1]
    while current <= last:
        slots.append(divmod(current, 60))
        current += step_minutes
    return slots


def is_time_selectable(date: CivilDateTime, time: tuple[int, int], now: CivilDateTime) -> bool:
    day_order = compare(date.date_only(), now.date_only())
    if day_order == Ordering.before:
        return False
    if day_order == Ordering.after:
        return True
    return time >= now.time_of_day()


def compute_slot_window(
    now: CivilDateTime,
    days: int = BOOKING_WINDOW_DAYS,
    cutoff: tuple[int, int] = BOOKING_CUTOFF,
    start: tuple[int, int] = SLOT_DAY_START,
    end: tuple[int, int] = SLOT_DAY_END,
    step_minutes: int = SLOT_INTERVAL_MINUTES,
) -> SlotWindow:
    return SlotWindow(
        offerable_dates=tuple(compute_offerable_dates(now, days, cutoff)),
        offerable_times=tuple(compute_offerable_times(start, end, step_minutes)),
        computed_for=now,
    )


def selectable_times(window: SlotWindow, date: CivilDateTime, now: CivilDateTime) -> list[tuple[int, int]]:
    return [t for t in window.offerable_times if is_time_selectable(date, t, now)]
