"""
Tests for the booking wizard flow and submission.
"""

from __future__ import annotations

import asyncio
from zoneinfo import ZoneInfo

import pytest

from safespace.application.exceptions import InvalidSelection, SubmissionFailure
from safespace.application.ports.booking import BookingRequest, BookingSubmissionPort
from safespace.application.use_cases.booking import (
    DEFAULT_BOOKING_NOTE,
    PAST_SLOT_MESSAGE,
    SUBMISSION_ERROR_MESSAGE,
    UNAVAILABLE_SLOT_MESSAGE,
    BookingUseCase,
)
from safespace.domain.entities.appointment import Appointment
from safespace.application.use_cases.booking_draft import DraftStatus
from safespace.domain.entities.civil_datetime import CivilDateTime
from safespace.infrastructure.backend.memory_backend import MemoryAppointmentsBackend

TZ = ZoneInfo("America/Denver")
NOW = CivilDateTime(2025, 11, 23, 15, 45)


class FlakySubmissions(BookingSubmissionPort):
    def __init__(self, failures: int = 1) -> None:
        self.failures = failures
        self.calls: list[BookingRequest] = []
        self.on_submit = None

    async def submit_booking(self, request: BookingRequest) -> str:
        self.calls.append(request)
        if self.on_submit:
            self.on_submit()
        if self.failures > 0:
            self.failures -= 1
            raise SubmissionFailure("503 Service Unavailable")
        return "apt_1"

    async def reschedule_booking(self, appointment_id: str, request: BookingRequest) -> str:
        return await self.submit_booking(request)

    async def cancel_booking(self, appointment_id: str, user_id: str, reason: str | None = None) -> None:
        raise SubmissionFailure("not supported")


def _filled_session(uc: BookingUseCase, **kwargs):
    session = uc.open_session(now=NOW, **kwargs)
    uc.select_date(session, "2025-11-24")
    uc.select_time(session, "10:00", now=NOW)
    uc.proceed(session)
    return session


def test_open_session_computes_window_for_now():
    """A new session carries the window computed for the sampled now."""
    uc = BookingUseCase(submissions=MemoryAppointmentsBackend(), timezone=TZ)
    session = uc.open_session(now=NOW)

    assert session.active
    assert session.draft.status == DraftStatus.empty
    assert session.window.offerable_dates[0] == CivilDateTime(2025, 11, 23)
    assert len(session.window.offerable_times) == 16
    assert uc.available_times(session, CivilDateTime(2025, 11, 23), now=NOW) == [(16, 0), (16, 30)]


def test_select_date_outside_window_is_rejected():
    """Dates past the 14-day window cannot be chosen."""
    uc = BookingUseCase(submissions=MemoryAppointmentsBackend(), timezone=TZ)
    session = uc.open_session(now=NOW)

    with pytest.raises(InvalidSelection):
        uc.select_date(session, "2025-12-25")
    assert session.draft.selected_date is None


def test_confirm_books_and_closes_session():
    """A successful booking is stored and closes the wizard session."""
    backend = MemoryAppointmentsBackend()
    uc = BookingUseCase(submissions=backend, timezone=TZ)
    session = _filled_session(uc, support_worker_id="7", support_worker_name="Eric Young")

    result = asyncio.run(uc.confirm(session, "user_1", now=NOW))

    assert result.action == "booked"
    assert result.appointment_id == "mock_appointment_1"
    assert not session.active
    stored = backend.appointments_for("user_1")
    assert stored[0].date == "2025-11-24"
    assert stored[0].time == "10:00"
    assert stored[0].type == "video"
    assert stored[0].support_worker_name == "Eric Young"


def test_confirm_sends_wire_format():
    """The request uses HH:MM:SS times, the backend type and the default note."""
    submissions = FlakySubmissions(failures=0)
    uc = BookingUseCase(submissions=submissions, timezone=TZ)
    session = _filled_session(uc)

    asyncio.run(uc.confirm(session, "user_1", now=NOW))

    request = submissions.calls[0]
    assert request.appointment_time == "10:00:00"
    assert request.session_type == "video"
    assert request.notes == DEFAULT_BOOKING_NOTE


def test_confirm_failure_preserves_draft_for_retry():
    """A failed submission keeps the draft so the user can retry."""
    submissions = FlakySubmissions(failures=1)
    uc = BookingUseCase(submissions=submissions, timezone=TZ)
    session = _filled_session(uc)

    failed = asyncio.run(uc.confirm(session, "user_1", now=NOW))
    assert failed.action == "failed"
    assert failed.message == SUBMISSION_ERROR_MESSAGE
    assert failed.draft is session.draft
    assert session.active
    assert session.draft.selected_time == (10, 0)

    retried = asyncio.run(uc.confirm(session, "user_1", now=NOW))
    assert retried.action == "booked"
    assert len(submissions.calls) == 2


def test_confirm_rejects_slot_that_has_passed():
    """A same-day slot that passed while confirming is not submitted."""
    submissions = FlakySubmissions(failures=0)
    uc = BookingUseCase(submissions=submissions, timezone=TZ)
    session = uc.open_session(now=NOW)
    uc.select_date(session, "2025-11-23")
    uc.select_time(session, "16:00", now=NOW)

    result = asyncio.run(uc.confirm(session, "user_1", now=CivilDateTime(2025, 11, 23, 16, 5)))

    assert result.action == "invalid"
    assert result.message == PAST_SLOT_MESSAGE
    assert submissions.calls == []


def test_confirm_incomplete_draft_is_invalid():
    """A draft without a time cannot be confirmed."""
    uc = BookingUseCase(submissions=FlakySubmissions(failures=0), timezone=TZ)
    session = uc.open_session(now=NOW)
    uc.select_date(session, "2025-11-24")

    assert asyncio.run(uc.confirm(session, "user_1", now=NOW)).action == "invalid"


def test_result_after_screen_closed_is_ignored():
    """A result arriving after the screen closed is dropped."""
    submissions = FlakySubmissions(failures=0)
    uc = BookingUseCase(submissions=submissions, timezone=TZ)
    session = _filled_session(uc)
    submissions.on_submit = lambda: uc.cancel(session)

    result = asyncio.run(uc.confirm(session, "user_1", now=NOW))

    assert result.action == "ignored"


def test_confirm_on_closed_session_does_not_submit():
    """Confirming from a closed screen never reaches the backend."""
    submissions = FlakySubmissions(failures=0)
    uc = BookingUseCase(submissions=submissions, timezone=TZ)
    session = _filled_session(uc)
    uc.cancel(session)

    assert asyncio.run(uc.confirm(session, "user_1", now=NOW)).action == "ignored"
    assert submissions.calls == []


def test_reschedule_flow_through_navigation_params():
    """Rescheduling survives the hop through navigation params."""
    backend = MemoryAppointmentsBackend()
    backend.add_appointment("user_1", Appointment(id="abc123", date="2025-11-25", time="09:00"))
    uc = BookingUseCase(submissions=backend, timezone=TZ)

    wizard = uc.open_session(rescheduling_of="abc123", now=NOW)
    uc.select_date(wizard, "2025-11-28")
    uc.select_time(wizard, "2:30 PM", now=NOW)
    params = uc.proceed(wizard)
    assert params["reschedule"] == "1"
    assert params["appointmentId"] == "abc123"

    confirmation = uc.restore_session(params, now=NOW)
    result = asyncio.run(uc.confirm(confirmation, "user_1", now=NOW))

    assert result.action == "rescheduled"
    assert result.appointment_id == "abc123"
    moved = backend.appointments_for("user_1")[0]
    assert (moved.date, moved.time) == ("2025-11-28", "14:30")


def test_reschedule_of_unknown_appointment_fails_without_losing_draft():
    """An unknown appointment id fails but keeps the draft."""
    uc = BookingUseCase(submissions=MemoryAppointmentsBackend(), timezone=TZ)
    session = _filled_session(uc, rescheduling_of="missing")

    result = asyncio.run(uc.confirm(session, "user_1", now=NOW))

    assert result.action == "failed"
    assert result.draft.rescheduling_of == "missing"


def test_select_time_off_grid_is_rejected():
    """Times that are not on the 30-minute grid cannot be chosen."""
    uc = BookingUseCase(submissions=FlakySubmissions(failures=0), timezone=TZ)
    session = uc.open_session(now=NOW)
    uc.select_date(session, "2025-11-24")

    with pytest.raises(InvalidSelection):
        uc.select_time(session, "03:17", now=NOW)
    with pytest.raises(InvalidSelection):
        uc.select_time(session, "17:00", now=NOW)
    assert session.draft.selected_time is None


def test_confirm_rejects_restored_date_outside_window():
    """Params restored with a far-future date are not booked."""
    backend = MemoryAppointmentsBackend()
    uc = BookingUseCase(submissions=backend, timezone=TZ)
    session = uc.restore_session({"selectedDate": "2099-06-01", "selectedTime": "10:00"}, now=NOW)

    result = asyncio.run(uc.confirm(session, "user_1", now=NOW))

    assert result.action == "invalid"
    assert result.message == UNAVAILABLE_SLOT_MESSAGE
    assert session.active
    assert backend.appointments_for("user_1") == []


def test_confirm_rejects_restored_off_grid_time():
    """Params restored with an off-grid time are not booked."""
    submissions = FlakySubmissions(failures=0)
    uc = BookingUseCase(submissions=submissions, timezone=TZ)
    session = uc.restore_session({"selectedDate": "2025-11-24", "selectedTime": "03:17"}, now=NOW)

    result = asyncio.run(uc.confirm(session, "user_1", now=NOW))

    assert result.action == "invalid"
    assert submissions.calls == []


def test_confirm_rejects_today_at_cutoff():
    """At 16:30 today leaves the window, so the 16:30 slot cannot be booked."""
    backend = MemoryAppointmentsBackend()
    uc = BookingUseCase(submissions=backend, timezone=TZ)
    at_cutoff = CivilDateTime(2025, 11, 23, 16, 30)
    session = uc.restore_session({"selectedDate": "2025-11-23", "selectedTime": "16:30"}, now=at_cutoff)

    result = asyncio.run(uc.confirm(session, "user_1", now=at_cutoff))

    assert result.action == "invalid"
    assert result.message == UNAVAILABLE_SLOT_MESSAGE
    assert session.window.offerable_dates[0] == CivilDateTime(2025, 11, 24)
    assert backend.appointments_for("user_1") == []
