from __future__ import annotations

from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class CivilDateTime:
    """Calendar date plus optional time-of-day in the organization timezone.

    Carries no tzinfo: the organization timezone is implied. A missing hour or
    minute compares as 00:00.
    """

    year: int
    month: int
    day: int
    hour: int | None = None
    minute: int | None = None

    @classmethod
    def from_date(cls, value: date, hour: int | None = None, minute: int | None = None) -> CivilDateTime:
        return cls(value.year, value.month, value.day, hour, minute)

    @property
    def has_time(self) -> bool:
        return self.hour is not None

    def to_date(self) -> date:
        return date(self.year, self.month, self.day)

    def date_only(self) -> CivilDateTime:
        return CivilDateTime(self.year, self.month, self.day)

    def with_time(self, hour: int, minute: int) -> CivilDateTime:
        return CivilDateTime(self.year, self.month, self.day, hour, minute)

    def sort_key(self) -> tuple[int, int, int, int, int]:
        return (self.year, self.month, self.day, self.hour or 0, self.minute or 0)

    def time_of_day(self) -> tuple[int, int]:
        return (self.hour or 0, self.minute or 0)

    def iso_date(self) -> str:
        return f"{self.year:04d}-{self.month:02d}-{self.day:02d}"
