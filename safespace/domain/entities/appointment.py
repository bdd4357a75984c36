from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum


class RawAppointmentStatus(str, Enum):
    scheduled = "scheduled"
    confirmed = "confirmed"
    completed = "completed"
    cancelled = "cancelled"
    no_show = "no_show"


class UiAppointmentStatus(str, Enum):
    upcoming = "Upcoming"
    past = "Past"
    cancelled = "Cancelled"


class SessionType(str, Enum):
    video = "video"
    phone = "phone"
    in_person = "in_person"


@dataclass(frozen=True)
class Appointment:
    id: str | None
    date: str  # YYYY-MM-DD
    time: str  # HH:MM once normalized, raw text if it could not be parsed
    type: str = SessionType.video.value
    raw_status: str = RawAppointmentStatus.scheduled.value
    support_worker_name: str | None = None
    support_worker_id: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "raw_status", (self.raw_status or "").strip().lower())

    def with_worker_name(self, name: str) -> Appointment:
        return replace(self, support_worker_name=name)
