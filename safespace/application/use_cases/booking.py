from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Mapping
from zoneinfo import ZoneInfo

from safespace.application.exceptions import InvalidSelection, SubmissionFailure
from safespace.application.ports.booking import BookingRequest, BookingSubmissionPort
from safespace.application.utils.slot_generator import (
    BOOKING_CUTOFF,
    BOOKING_WINDOW_DAYS,
    SLOT_DAY_END,
    SLOT_DAY_START,
    SLOT_INTERVAL_MINUTES,
    compute_slot_window,
    is_time_selectable,
    selectable_times,
)
from safespace.application.utils.time_window import (
    format_display_date,
    format_time_12h,
    format_time_hhmmss,
    now_in_org_timezone,
    parse_date,
    parse_time_of_day,
)
from safespace.application.use_cases.booking_draft import NOTES_MAX_LENGTH, BookingDraft
from safespace.domain.entities.civil_datetime import CivilDateTime
from safespace.domain.entities.screen_session import ScreenSession
from safespace.domain.entities.slot_window import SlotWindow

DEFAULT_BOOKING_NOTE = "Booked via mobile app"
SUBMISSION_ERROR_MESSAGE = "Unable to book your appointment. Please try again."
RESCHEDULE_ERROR_MESSAGE = "Unable to reschedule appointment. Please try again."
PAST_SLOT_MESSAGE = "That time has already passed. Please choose another time."
UNAVAILABLE_SLOT_MESSAGE = "That time is not available. Please choose another time."


@dataclass
class BookingSession(ScreenSession):
    draft: BookingDraft = field(default_factory=BookingDraft)
    window: SlotWindow | None = None


@dataclass(frozen=True)
class BookingResult:
    action: str  # "booked", "rescheduled", "invalid", "failed", "ignored"
    message: str | None
    appointment_id: str | None = None
    draft: BookingDraft | None = None


class BookingUseCase:
    def __init__(
        self,
        submissions: BookingSubmissionPort,
        timezone: ZoneInfo,
        window_days: int = BOOKING_WINDOW_DAYS,
        cutoff: tuple[int, int] = BOOKING_CUTOFF,
        day_start: tuple[int, int] = SLOT_DAY_START,
        day_end: tuple[int, int] = SLOT_DAY_END,
        interval_minutes: int = SLOT_INTERVAL_MINUTES,
        notes_max_length: int = NOTES_MAX_LENGTH,
    ) -> None:
        self._submissions = submissions
        self._timezone = timezone
        self._window_days = window_days
        self._cutoff = cutoff
        self._day_start = day_start
        self._day_end = day_end
        self._interval_minutes = interval_minutes
        self._notes_max_length = notes_max_length
        self._logger = logging.getLogger(__name__)

    def now(self) -> CivilDateTime:
        return now_in_org_timezone(self._timezone)

    def compute_window(self, now: CivilDateTime | None = None) -> SlotWindow:
        return compute_slot_window(
            now or self.now(),
            days=self._window_days,
            cutoff=self._cutoff,
            start=self._day_start,
            end=self._day_end,
            step_minutes=self._interval_minutes,
        )

    def open_session(
        self,
        rescheduling_of: str | None = None,
        support_worker_id: str | None = None,
        support_worker_name: str | None = None,
        now: CivilDateTime | None = None,
    ) -> BookingSession:
        draft = BookingDraft(
            rescheduling_of=rescheduling_of,
            support_worker_id=support_worker_id,
            support_worker_name=support_worker_name,
            notes_max_length=self._notes_max_length,
        )
        return BookingSession(draft=draft, window=self.compute_window(now))

    def restore_session(self, params: Mapping[str, str], now: CivilDateTime | None = None) -> BookingSession:
        """Rebuild the wizard session on the confirmation screen from navigation params."""
        draft = BookingDraft.from_navigation_params(params, notes_max_length=self._notes_max_length)
        return BookingSession(draft=draft, window=self.compute_window(now))

    def refresh_window(self, session: BookingSession, now: CivilDateTime | None = None) -> SlotWindow:
        session.window = self.compute_window(now)
        return session.window

    def available_times(
        self,
        session: BookingSession,
        date: CivilDateTime,
        now: CivilDateTime | None = None,
    ) -> list[tuple[int, int]]:
        current = now or self.now()
        window = session.window or self.refresh_window(session, current)
        return selectable_times(window, date, current)

    def select_date(self, session: BookingSession, value: CivilDateTime | str) -> None:
        selected = parse_date(value) if isinstance(value, str) else value.date_only()
        window = session.window or self.refresh_window(session)
        if selected not in window.offerable_dates:
            raise InvalidSelection(f"{format_display_date(selected)} is outside the booking window")
        session.draft.set_selected_date(selected)

    def select_time(
        self,
        session: BookingSession,
        value: tuple[int, int] | str,
        now: CivilDateTime | None = None,
    ) -> None:
        current = now or self.now()
        selected = parse_time_of_day(value) if isinstance(value, str) else value
        window = session.window or self.refresh_window(session, current)
        if selected not in window.offerable_times:
            raise InvalidSelection(f"{format_time_12h(selected)} is not a bookable time")
        session.draft.set_selected_time(selected, current)

    def proceed(self, session: BookingSession) -> dict[str, str]:
        return session.draft.proceed_to_confirmation()

    def cancel(self, session: BookingSession) -> None:
        session.close()

    async def confirm(
        self,
        session: BookingSession,
        user_id: str,
        now: CivilDateTime | None = None,
    ) -> BookingResult:
        """
        Submit the draft exactly once. On failure the draft stays on the session so the
        user can retry; on success the session is closed.
        """
        if not session.active:
            return BookingResult(action="ignored", message=None)

        draft = session.draft
        if not draft.can_proceed_to_confirmation():
            return BookingResult(action="invalid", message="Choose a date and time to continue", draft=draft)

        current = now or self.now()
        if not is_time_selectable(draft.selected_date, draft.selected_time, current):
            self._logger.info("Booking rejected for past slot", extra={"user_id": user_id, "reason": "past_slot"})
            return BookingResult(action="invalid", message=PAST_SLOT_MESSAGE, draft=draft)

        window = self.refresh_window(session, current)
        if draft.selected_date not in window.offerable_dates or draft.selected_time not in window.offerable_times:
            self._logger.info(
                "Booking rejected for slot outside the window",
                extra={"user_id": user_id, "reason": "outside_window"},
            )
            return BookingResult(action="invalid", message=UNAVAILABLE_SLOT_MESSAGE, draft=draft)

        request = self._build_request(draft, user_id)
        try:
            if draft.is_reschedule:
                appointment_id = await self._submissions.reschedule_booking(draft.rescheduling_of, request)
                action = "rescheduled"
            else:
                appointment_id = await self._submissions.submit_booking(request)
                action = "booked"
        except SubmissionFailure as e:
            if not session.active:
                return BookingResult(action="ignored", message=None)
            self._logger.error(
                "Error submitting booking",
                extra={"user_id": user_id, "appointment_id": draft.rescheduling_of, "error": str(e)},
            )
            message = RESCHEDULE_ERROR_MESSAGE if draft.is_reschedule else SUBMISSION_ERROR_MESSAGE
            return BookingResult(action="failed", message=message, draft=draft)

        if not session.active:
            self._logger.info("Dropping booking result for closed screen", extra={"appointment_id": appointment_id})
            return BookingResult(action="ignored", message=None)

        session.close()
        self._logger.info("Booking submitted", extra={"user_id": user_id, "appointment_id": appointment_id, "action": action})
        return BookingResult(action=action, message=None, appointment_id=appointment_id)

    def _build_request(self, draft: BookingDraft, user_id: str) -> BookingRequest:
        return BookingRequest(
            user_id=user_id,
            appointment_date=draft.selected_date.iso_date(),
            appointment_time=format_time_hhmmss(draft.selected_time),
            session_type=draft.effective_session_type.value,
            notes=draft.notes or DEFAULT_BOOKING_NOTE,
            support_worker_id=draft.support_worker_id,
            support_worker_name=draft.support_worker_name,
        )
