from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class BookingRequest:
    user_id: str
    appointment_date: str  # YYYY-MM-DD
    appointment_time: str  # HH:MM:SS
    session_type: str
    notes: str
    support_worker_id: str | None = None
    support_worker_name: str | None = None


class BookingSubmissionPort(ABC):
    @abstractmethod
    async def submit_booking(self, request: BookingRequest) -> str:
        """Create an appointment. Returns the appointment id. Raises SubmissionFailure."""
        raise NotImplementedError

    @abstractmethod
    async def reschedule_booking(self, appointment_id: str, request: BookingRequest) -> str:
        """Move an existing appointment to the requested date/time. Raises SubmissionFailure."""
        raise NotImplementedError

    @abstractmethod
    async def cancel_booking(self, appointment_id: str, user_id: str, reason: str | None = None) -> None:
        """Mark an appointment cancelled. Raises SubmissionFailure."""
        raise NotImplementedError
