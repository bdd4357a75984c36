"""
Single source of truth for mapping raw appointment records to UI buckets.

Dashboard counts, the appointment list and the next-session picker all go
through `classify`, so they never disagree. Malformed records fail closed
(Past), never open (Upcoming).
"""

from __future__ import annotations

from safespace.application.exceptions import ParseError
from safespace.application.utils.time_window import compare, minutes_between, Ordering, parse_civil
from safespace.domain.entities.appointment import (
    Appointment,
    RawAppointmentStatus,
    SessionType,
    UiAppointmentStatus,
)
from safespace.domain.entities.civil_datetime import CivilDateTime

ACTIVE_STATUSES = frozenset({RawAppointmentStatus.scheduled.value, RawAppointmentStatus.confirmed.value})
TERMINAL_PAST_STATUSES = frozenset({RawAppointmentStatus.completed.value, RawAppointmentStatus.no_show.value})

JOIN_WINDOW_BEFORE_MINUTES = 15
JOIN_WINDOW_AFTER_MINUTES = 60


def classify(raw_status: str, date: str, time: str | None, now: CivilDateTime) -> UiAppointmentStatus:
    status = (raw_status or "").strip().lower()
    if status == RawAppointmentStatus.cancelled.value:
        return UiAppointmentStatus.cancelled
    if status in TERMINAL_PAST_STATUSES:
        return UiAppointmentStatus.past
    if status not in ACTIVE_STATUSES:
        return UiAppointmentStatus.past

    try:
        occurs = parse_civil(date, time)
    except ParseError:
        return UiAppointmentStatus.past

    if compare(occurs, now) != Ordering.before:
        return UiAppointmentStatus.upcoming
    return UiAppointmentStatus.past


def classify_appointment(appointment: Appointment, now: CivilDateTime) -> UiAppointmentStatus:
    return classify(appointment.raw_status, appointment.date, appointment.time, now)


def occurs_at(appointment: Appointment) -> CivilDateTime | None:
    try:
        return parse_civil(appointment.date, appointment.time)
    except ParseError:
        return None


def is_countable_as_upcoming(appointment: Appointment, now: CivilDateTime) -> bool:
    return classify_appointment(appointment, now) == UiAppointmentStatus.upcoming


def is_countable_as_completed(appointment: Appointment, now: CivilDateTime) -> bool:
    return classify_appointment(appointment, now) == UiAppointmentStatus.past


def can_reschedule(appointment: Appointment, now: CivilDateTime) -> bool:
    return appointment.raw_status in ACTIVE_STATUSES and is_countable_as_upcoming(appointment, now)


def can_cancel(appointment: Appointment, now: CivilDateTime) -> bool:
    return can_reschedule(appointment, now)


def can_join_session(appointment: Appointment, now: CivilDateTime) -> bool:
    """Video sessions that are confirmed can be joined from 15 minutes before start until an hour after."""
    if appointment.type != SessionType.video.value:
        return False
    if appointment.raw_status != RawAppointmentStatus.confirmed.value:
        return False
    start = occurs_at(appointment)
    if start is None:
        return False
    minutes_until = minutes_between(now, start)
    return -JOIN_WINDOW_AFTER_MINUTES <= minutes_until <= JOIN_WINDOW_BEFORE_MINUTES
