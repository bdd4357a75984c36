from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Mapping

from safespace.application.exceptions import InvalidSelection
from safespace.application.utils.session_types import (
    DEFAULT_SESSION_TYPE,
    normalize_session_type,
    session_type_label,
)
from safespace.application.utils.slot_generator import is_time_selectable
from safespace.application.utils.time_window import (
    format_display_date,
    format_time_12h,
    format_time_24h,
    parse_date,
    parse_time_of_day,
)
from safespace.domain.entities.appointment import SessionType
from safespace.domain.entities.civil_datetime import CivilDateTime

NOTES_MAX_LENGTH = 500

logger = logging.getLogger(__name__)


class DraftStatus(str, Enum):
    empty = "empty"
    type_chosen = "type_chosen"
    date_chosen = "date_chosen"
    time_chosen = "time_chosen"
    ready_to_confirm = "ready_to_confirm"


@dataclass
class BookingDraft:
    """
    In-progress selections for one booking-wizard session.

    Overwriting an earlier field cascades resets forward: a new date always
    clears the chosen time. Rejected selections leave the draft untouched.
    """

    session_type: SessionType | None = None
    selected_date: CivilDateTime | None = None
    selected_time: tuple[int, int] | None = None  # (hour, minute)
    notes: str = ""
    rescheduling_of: str | None = None  # original appointment id
    support_worker_id: str | None = None
    support_worker_name: str | None = None
    status: DraftStatus = DraftStatus.empty
    notes_max_length: int = NOTES_MAX_LENGTH

    @property
    def is_reschedule(self) -> bool:
        return bool(self.rescheduling_of)

    @property
    def effective_session_type(self) -> SessionType:
        return self.session_type or DEFAULT_SESSION_TYPE

    def set_session_type(self, value: str | SessionType) -> None:
        self.session_type = normalize_session_type(value)
        if self.status == DraftStatus.empty:
            self.status = DraftStatus.type_chosen

    def set_selected_date(self, value: CivilDateTime | str) -> None:
        selected = parse_date(value) if isinstance(value, str) else value.date_only()
        self.selected_date = selected
        self.selected_time = None
        self.status = DraftStatus.date_chosen

    def set_selected_time(self, value: tuple[int, int] | str, now: CivilDateTime) -> None:
        if self.selected_date is None:
            logger.info("Time rejected before date", extra={"reason": "no_date"})
            raise InvalidSelection("Choose a date before choosing a time")

        selected = parse_time_of_day(value) if isinstance(value, str) else value
        if not is_time_selectable(self.selected_date, selected, now):
            logger.info(
                "Time rejected as no longer available",
                extra={"reason": "past_slot", "time": format_time_24h(selected)},
            )
            raise InvalidSelection(f"{format_time_12h(selected)} is no longer available")

        self.selected_time = selected
        self.status = DraftStatus.time_chosen

    def set_notes(self, text: str) -> None:
        if len(text) > self.notes_max_length:
            raise InvalidSelection(f"Notes must be at most {self.notes_max_length} characters")
        self.notes = text

    def set_support_worker(self, worker_id: str | None, worker_name: str | None = None) -> None:
        self.support_worker_id = worker_id
        self.support_worker_name = worker_name

    def can_proceed_to_confirmation(self) -> bool:
        return self.selected_date is not None and self.selected_time is not None

    def proceed_to_confirmation(self) -> dict[str, str]:
        if not self.can_proceed_to_confirmation():
            raise InvalidSelection("Choose a date and time to continue")
        self.status = DraftStatus.ready_to_confirm
        return self.to_navigation_params()

    def to_navigation_params(self) -> dict[str, str]:
        session_type = self.effective_session_type
        params: dict[str, str] = {
            "sessionType": session_type.value,
            "selectedType": session_type_label(session_type),
            "notes": self.notes,
        }
        if self.selected_date is not None:
            params["selectedDate"] = self.selected_date.iso_date()
            params["selectedDateDisplay"] = format_display_date(self.selected_date)
        if self.selected_time is not None:
            params["selectedTime"] = format_time_24h(self.selected_time)
            params["selectedTimeDisplay"] = format_time_12h(self.selected_time)
        if self.support_worker_id:
            params["supportWorkerId"] = self.support_worker_id
        if self.support_worker_name:
            params["supportWorkerName"] = self.support_worker_name
        if self.rescheduling_of:
            params["reschedule"] = "1"
            params["appointmentId"] = self.rescheduling_of
        return params

    @classmethod
    def from_navigation_params(cls, params: Mapping[str, str], notes_max_length: int = NOTES_MAX_LENGTH) -> BookingDraft:
        """
        Rebuild a draft from navigation params on the confirmation screen.
        Selectability is not re-checked here; the caller does that against a fresh "now".
        Raises ParseError on a malformed date or time.
        """
        reschedule_flag = str(params.get("reschedule", "")).strip().lower()
        appointment_id = params.get("appointmentId") or None
        draft = cls(
            rescheduling_of=appointment_id if reschedule_flag in ("1", "true") else None,
            support_worker_id=params.get("supportWorkerId") or None,
            support_worker_name=params.get("supportWorkerName") or None,
            notes_max_length=notes_max_length,
        )

        raw_type = params.get("sessionType") or params.get("selectedType")
        if raw_type:
            draft.session_type = normalize_session_type(raw_type)
            draft.status = DraftStatus.type_chosen

        if params.get("selectedDate"):
            draft.selected_date = parse_date(params["selectedDate"])
            draft.status = DraftStatus.date_chosen
            if params.get("selectedTime"):
                draft.selected_time = parse_time_of_day(params["selectedTime"])
                draft.status = DraftStatus.ready_to_confirm

        draft.set_notes(params.get("notes") or "")
        return draft
