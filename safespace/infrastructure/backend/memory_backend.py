from __future__ import annotations

import logging
from dataclasses import replace

from safespace.application.exceptions import SubmissionFailure
from safespace.application.ports.appointments import AppointmentQueryPort
from safespace.application.ports.booking import BookingRequest, BookingSubmissionPort
from safespace.application.utils.status_classifier import ACTIVE_STATUSES
from safespace.application.utils.time_window import normalize_time_string
from safespace.domain.entities.appointment import Appointment, RawAppointmentStatus


class MemoryAppointmentsBackend(AppointmentQueryPort, BookingSubmissionPort):
    """In-process backend for local development and tests. Starts empty."""

    def __init__(self) -> None:
        self._appointments: dict[str, list[Appointment]] = {}
        self._workers: dict[str, str] = {}
        self._counter = 0
        self._logger = logging.getLogger(__name__)

    def add_appointment(self, user_id: str, appointment: Appointment) -> None:
        self._appointments.setdefault(user_id, []).append(appointment)

    def add_worker(self, worker_id: str, name: str) -> None:
        self._workers[worker_id] = name

    def appointments_for(self, user_id: str) -> list[Appointment]:
        return list(self._appointments.get(user_id, []))

    async def fetch_upcoming(self, user_id: str) -> list[Appointment]:
        return [a for a in self._appointments.get(user_id, []) if a.raw_status in ACTIVE_STATUSES]

    async def fetch_past(self, user_id: str) -> list[Appointment]:
        return [a for a in self._appointments.get(user_id, []) if a.raw_status not in ACTIVE_STATUSES]

    async def lookup_worker_name(self, worker_id: str) -> str | None:
        return self._workers.get(worker_id)

    async def submit_booking(self, request: BookingRequest) -> str:
        self._counter += 1
        appointment_id = f"mock_appointment_{self._counter}"
        self.add_appointment(
            request.user_id,
            Appointment(
                id=appointment_id,
                date=request.appointment_date,
                time=normalize_time_string(request.appointment_time),
                type=request.session_type,
                raw_status=RawAppointmentStatus.scheduled.value,
                support_worker_name=request.support_worker_name,
                support_worker_id=request.support_worker_id,
            ),
        )
        self._logger.info("Mock appointment created", extra={"appointment_id": appointment_id, "user_id": request.user_id})
        return appointment_id

    async def reschedule_booking(self, appointment_id: str, request: BookingRequest) -> str:
        records = self._appointments.get(request.user_id, [])
        for index, record in enumerate(records):
            if record.id == appointment_id:
                records[index] = replace(
                    record,
                    date=request.appointment_date,
                    time=normalize_time_string(request.appointment_time),
                    type=request.session_type,
                )
                self._logger.info("Mock appointment rescheduled", extra={"appointment_id": appointment_id})
                return appointment_id
        raise SubmissionFailure(f"Appointment {appointment_id} not found")

    async def cancel_booking(self, appointment_id: str, user_id: str, reason: str | None = None) -> None:
        records = self._appointments.get(user_id, [])
        for index, record in enumerate(records):
            if record.id == appointment_id:
                records[index] = replace(record, raw_status=RawAppointmentStatus.cancelled.value)
                self._logger.info(
                    "Mock appointment cancelled",
                    extra={"appointment_id": appointment_id, "user_id": user_id, "reason": reason},
                )
                return
        raise SubmissionFailure(f"Appointment {appointment_id} not found")
