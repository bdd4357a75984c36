from __future__ import annotations

from dataclasses import dataclass

from safespace.domain.entities.appointment import Appointment


@dataclass(frozen=True)
class AppointmentSummary:
    upcoming_count: int = 0
    completed_count: int = 0
    next_session: Appointment | None = None
    error: str | None = None  # user-visible, non-fatal notice
