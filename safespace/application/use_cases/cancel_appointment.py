from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from zoneinfo import ZoneInfo

from safespace.application.exceptions import DataFetchFailure, SubmissionFailure
from safespace.application.ports.appointments import AppointmentQueryPort
from safespace.application.ports.booking import BookingSubmissionPort
from safespace.application.use_cases.aggregate_appointments import merge_records
from safespace.application.utils.status_classifier import can_cancel
from safespace.application.utils.time_window import now_in_org_timezone
from safespace.domain.entities.civil_datetime import CivilDateTime

DEFAULT_CANCELLATION_REASON = "Cancelled by user"
CANCEL_ERROR_MESSAGE = "Unable to cancel appointment. Please try again."
NOT_CANCELLABLE_MESSAGE = "This appointment can no longer be cancelled."
NOT_FOUND_MESSAGE = "Appointment not found."


@dataclass(frozen=True)
class CancelResult:
    action: str  # "cancelled", "not_found", "not_allowed", "failed"
    message: str | None
    appointment_id: str | None = None


class CancelAppointmentUseCase:
    def __init__(
        self,
        queries: AppointmentQueryPort,
        submissions: BookingSubmissionPort,
        timezone: ZoneInfo,
    ) -> None:
        self._queries = queries
        self._submissions = submissions
        self._timezone = timezone
        self._logger = logging.getLogger(__name__)

    async def execute(
        self,
        user_id: str,
        appointment_id: str,
        reason: str | None = None,
        now: CivilDateTime | None = None,
    ) -> CancelResult:
        """
        Cancel one of the user's appointments. Only scheduled or confirmed
        appointments that have not started yet can be cancelled.
        """
        current = now or now_in_org_timezone(self._timezone)
        try:
            upcoming, past = await asyncio.gather(
                self._queries.fetch_upcoming(user_id),
                self._queries.fetch_past(user_id),
            )
        except DataFetchFailure as e:
            self._logger.error(
                "Error loading appointment for cancellation",
                extra={"user_id": user_id, "appointment_id": appointment_id, "error": str(e)},
            )
            return CancelResult(action="failed", message=CANCEL_ERROR_MESSAGE, appointment_id=appointment_id)

        record = next((r for r in merge_records(upcoming, past) if r.id == appointment_id), None)
        if record is None:
            return CancelResult(action="not_found", message=NOT_FOUND_MESSAGE, appointment_id=appointment_id)

        if not can_cancel(record, current):
            self._logger.info(
                "Cancellation rejected",
                extra={"user_id": user_id, "appointment_id": appointment_id, "reason": record.raw_status},
            )
            return CancelResult(action="not_allowed", message=NOT_CANCELLABLE_MESSAGE, appointment_id=appointment_id)

        try:
            await self._submissions.cancel_booking(appointment_id, user_id, reason or DEFAULT_CANCELLATION_REASON)
        except SubmissionFailure as e:
            self._logger.error(
                "Error cancelling appointment",
                extra={"user_id": user_id, "appointment_id": appointment_id, "error": str(e)},
            )
            return CancelResult(action="failed", message=CANCEL_ERROR_MESSAGE, appointment_id=appointment_id)

        self._logger.info(
            "Appointment cancelled",
            extra={"user_id": user_id, "appointment_id": appointment_id, "action": "cancelled"},
        )
        return CancelResult(action="cancelled", message=None, appointment_id=appointment_id)
