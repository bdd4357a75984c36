from __future__ import annotations

from dataclasses import dataclass

from safespace.domain.entities.civil_datetime import CivilDateTime


@dataclass(frozen=True)
class SlotWindow:
    offerable_dates: tuple[CivilDateTime, ...]
    offerable_times: tuple[tuple[int, int], ...]  # (hour, minute), org timezone
    computed_for: CivilDateTime
