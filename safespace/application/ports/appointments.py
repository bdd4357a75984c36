from __future__ import annotations

from abc import ABC, abstractmethod

from safespace.domain.entities.appointment import Appointment


class AppointmentQueryPort(ABC):
    @abstractmethod
    async def fetch_upcoming(self, user_id: str) -> list[Appointment]:
        """Fetch the user's appointments the backend considers upcoming. Raises DataFetchFailure."""
        raise NotImplementedError

    @abstractmethod
    async def fetch_past(self, user_id: str) -> list[Appointment]:
        """Fetch the user's appointments the backend considers past. Raises DataFetchFailure."""
        raise NotImplementedError

    @abstractmethod
    async def lookup_worker_name(self, worker_id: str) -> str | None:
        """Resolve a support worker's display name. Returns None if unknown."""
        raise NotImplementedError
