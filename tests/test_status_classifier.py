"""
Tests for raw status -> UI bucket classification.
"""

from __future__ import annotations

import pytest

from safespace.application.utils.status_classifier import (
    can_cancel,
    can_join_session,
    can_reschedule,
    classify,
    classify_appointment,
    is_countable_as_completed,
    is_countable_as_upcoming,
)
from safespace.domain.entities.appointment import Appointment, UiAppointmentStatus
from safespace.domain.entities.civil_datetime import CivilDateTime

NOW = CivilDateTime(2025, 11, 23, 12, 0)


def test_cancelled_is_terminal_even_in_future():
    """Cancelled wins over a future date."""
    assert classify("cancelled", "2099-01-01", "10:00", NOW) == UiAppointmentStatus.cancelled


@pytest.mark.parametrize("status", ["completed", "no_show"])
def test_completed_and_no_show_are_past_even_in_future(status):
    """Terminal statuses are Past regardless of date."""
    assert classify(status, "2099-01-01", "10:00", NOW) == UiAppointmentStatus.past


@pytest.mark.parametrize("status", ["scheduled", "confirmed"])
def test_active_statuses_follow_date(status):
    """Scheduled and confirmed follow the appointment time."""
    assert classify(status, "2025-12-01", "10:00", NOW) == UiAppointmentStatus.upcoming
    assert classify(status, "2025-11-22", "10:00", NOW) == UiAppointmentStatus.past


def test_same_instant_is_upcoming():
    """An appointment at exactly now is still upcoming."""
    assert classify("scheduled", "2025-11-23", "12:00", NOW) == UiAppointmentStatus.upcoming
    assert classify("scheduled", "2025-11-23", "11:59", NOW) == UiAppointmentStatus.past


def test_twelve_hour_time_is_compared_correctly():
    """12h times compare by clock time, not as strings."""
    assert classify("scheduled", "2025-11-23", "1:00 PM", NOW) == UiAppointmentStatus.upcoming
    assert classify("scheduled", "2025-11-23", "11:30 AM", NOW) == UiAppointmentStatus.past


@pytest.mark.parametrize(
    "date,time",
    [("", "10:00"), ("not-a-date", "10:00"), ("2099-01-01", "ten o'clock"), ("2099-02-30", "10:00")],
)
def test_malformed_records_fail_closed(date, time):
    """Unparseable dates or times classify as Past."""
    assert classify("scheduled", date, time, NOW) == UiAppointmentStatus.past


def test_unknown_status_fails_closed():
    """Unrecognized statuses classify as Past."""
    assert classify("pending_review", "2099-01-01", "10:00", NOW) == UiAppointmentStatus.past


def test_status_is_case_insensitive():
    """Status matching ignores case."""
    assert classify("Cancelled", "2099-01-01", "10:00", NOW) == UiAppointmentStatus.cancelled


def test_countable_wrappers():
    """Cancelled is neither upcoming nor completed."""
    upcoming = Appointment(id="1", date="2025-12-01", time="10:00", raw_status="confirmed")
    completed = Appointment(id="2", date="2099-01-01", time="10:00", raw_status="completed")
    cancelled = Appointment(id="3", date="2025-11-01", time="10:00", raw_status="cancelled")

    assert is_countable_as_upcoming(upcoming, NOW)
    assert not is_countable_as_completed(upcoming, NOW)
    assert is_countable_as_completed(completed, NOW)
    assert not is_countable_as_completed(cancelled, NOW)
    assert classify_appointment(cancelled, NOW) == UiAppointmentStatus.cancelled


def test_reschedule_and_cancel_only_for_active_upcoming():
    """Only active appointments that have not started can be moved or cancelled."""
    upcoming = Appointment(id="1", date="2025-12-01", time="10:00", raw_status="scheduled")
    lapsed = Appointment(id="2", date="2025-11-01", time="10:00", raw_status="scheduled")
    completed = Appointment(id="3", date="2099-01-01", time="10:00", raw_status="completed")

    assert can_reschedule(upcoming, NOW) and can_cancel(upcoming, NOW)
    assert not can_reschedule(lapsed, NOW)
    assert not can_cancel(completed, NOW)


def test_join_window_for_confirmed_video():
    """Confirmed video sessions open 15 minutes early and close an hour after start."""
    def appointment(time: str, **kwargs) -> Appointment:
        fields = {"id": "1", "date": "2025-11-23", "time": time, "type": "video", "raw_status": "confirmed"}
        fields.update(kwargs)
        return Appointment(**fields)

    now = CivilDateTime(2025, 11, 23, 10, 0)
    assert can_join_session(appointment("10:15"), now)
    assert not can_join_session(appointment("10:16"), now)
    assert can_join_session(appointment("09:00"), now)
    assert not can_join_session(appointment("08:59"), now)
    assert not can_join_session(appointment("10:05", type="phone"), now)
    assert not can_join_session(appointment("10:05", raw_status="scheduled"), now)
    assert not can_join_session(appointment("whenever"), now)


def test_mixed_case_status_is_normalized_on_the_record():
    """Raw statuses are lowercased once, so every rule sees the same value."""
    upcoming = Appointment(id="1", date="2025-12-01", time="10:00", raw_status=" Scheduled ")

    assert upcoming.raw_status == "scheduled"
    assert can_reschedule(upcoming, NOW)
    assert can_cancel(upcoming, NOW)
