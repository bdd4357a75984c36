from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Iterable
from zoneinfo import ZoneInfo

from safespace.application.exceptions import DataFetchFailure
from safespace.application.ports.appointments import AppointmentQueryPort
from safespace.application.utils.status_classifier import (
    can_cancel,
    can_join_session,
    can_reschedule,
    classify_appointment,
    is_countable_as_completed,
    is_countable_as_upcoming,
    occurs_at,
)
from safespace.application.utils.time_window import now_in_org_timezone
from safespace.domain.entities.appointment import Appointment, RawAppointmentStatus, UiAppointmentStatus
from safespace.domain.entities.appointment_summary import AppointmentSummary
from safespace.domain.entities.civil_datetime import CivilDateTime
from safespace.domain.entities.screen_session import ScreenSession

WORKER_NAME_PLACEHOLDER = "Support Worker"
FETCH_ERROR_MESSAGE = "Unable to load your appointments right now. Please try again."


@dataclass(frozen=True)
class AppointmentListItem:
    appointment: Appointment
    status: UiAppointmentStatus
    can_cancel: bool = False
    can_reschedule: bool = False
    can_join: bool = False


def merge_records(upcoming: Iterable[Appointment], past: Iterable[Appointment]) -> list[Appointment]:
    """Union of both sets, de-duplicated by id. First occurrence wins, upcoming set first."""
    merged: list[Appointment] = []
    seen: set[str] = set()
    for record in (*upcoming, *past):
        if record.id is not None:
            if record.id in seen:
                continue
            seen.add(record.id)
        merged.append(record)
    return merged


def classify_records(
    records: Iterable[Appointment], now: CivilDateTime
) -> list[tuple[Appointment, UiAppointmentStatus]]:
    return [(record, classify_appointment(record, now)) for record in records]


def count_upcoming(records: Iterable[Appointment], now: CivilDateTime) -> int:
    return sum(1 for record in records if is_countable_as_upcoming(record, now))


def count_completed(records: Iterable[Appointment], now: CivilDateTime) -> int:
    # Cancelled is re-checked on raw status as well as by the classifier.
    return sum(
        1
        for record in records
        if is_countable_as_completed(record, now) and record.raw_status != RawAppointmentStatus.cancelled.value
    )


def needs_worker_lookup(record: Appointment) -> bool:
    return not record.support_worker_name and bool(record.support_worker_id)


def pick_next_session(
    records: Iterable[Appointment],
    now: CivilDateTime,
    placeholder: str = WORKER_NAME_PLACEHOLDER,
) -> Appointment | None:
    upcoming = [record for record in records if is_countable_as_upcoming(record, now)]
    if not upcoming:
        return None
    # sorted() is stable: equal start times keep their input order.
    soonest = sorted(upcoming, key=lambda record: occurs_at(record).sort_key())[0]
    if not soonest.support_worker_name:
        return soonest.with_worker_name(placeholder)
    return soonest


class LoadAppointmentSummaryUseCase:
    def __init__(
        self,
        queries: AppointmentQueryPort,
        timezone: ZoneInfo,
        placeholder: str = WORKER_NAME_PLACEHOLDER,
    ) -> None:
        self._queries = queries
        self._timezone = timezone
        self._placeholder = placeholder
        self._logger = logging.getLogger(__name__)

    async def execute(
        self,
        user_id: str,
        session: ScreenSession | None = None,
        now: CivilDateTime | None = None,
    ) -> AppointmentSummary | None:
        """
        Load both record sets concurrently, enrich missing worker names, then compute
        dashboard counts and the next session. Returns None when the owning screen
        closed before the results arrived.
        """
        current = now or now_in_org_timezone(self._timezone)
        try:
            records = await self._load_records(user_id)
        except DataFetchFailure as e:
            if session is not None and not session.active:
                return None
            self._logger.warning("Appointment summary unavailable", extra={"user_id": user_id, "error": str(e)})
            return AppointmentSummary(error=FETCH_ERROR_MESSAGE)

        if session is not None and not session.active:
            self._logger.info("Dropping summary for closed screen", extra={"user_id": user_id})
            return None

        return AppointmentSummary(
            upcoming_count=count_upcoming(records, current),
            completed_count=count_completed(records, current),
            next_session=pick_next_session(records, current, self._placeholder),
        )

    async def list_appointments(
        self,
        user_id: str,
        now: CivilDateTime | None = None,
    ) -> list[AppointmentListItem]:
        """Classified records for the list screen, with the actions each one allows. Raises DataFetchFailure."""
        current = now or now_in_org_timezone(self._timezone)
        records = await self._load_records(user_id)
        return [
            AppointmentListItem(
                appointment=record if record.support_worker_name else record.with_worker_name(self._placeholder),
                status=status,
                can_cancel=can_cancel(record, current),
                can_reschedule=can_reschedule(record, current),
                can_join=can_join_session(record, current),
            )
            for record, status in classify_records(records, current)
        ]

    async def _load_records(self, user_id: str) -> list[Appointment]:
        upcoming, past = await asyncio.gather(
            self._queries.fetch_upcoming(user_id),
            self._queries.fetch_past(user_id),
        )
        records = merge_records(upcoming, past)
        return await self._enrich_worker_names(records)

    async def _enrich_worker_names(self, records: list[Appointment]) -> list[Appointment]:
        worker_ids = sorted(
            {record.support_worker_id for record in records if needs_worker_lookup(record)}
        )
        if not worker_ids:
            return records

        results = await asyncio.gather(
            *(self._queries.lookup_worker_name(worker_id) for worker_id in worker_ids),
            return_exceptions=True,
        )
        names: dict[str, str] = {}
        for worker_id, result in zip(worker_ids, results):
            if isinstance(result, DataFetchFailure):
                self._logger.warning("Worker name lookup failed", extra={"worker_id": worker_id, "error": str(result)})
                continue
            if isinstance(result, BaseException):
                raise result
            if result:
                names[worker_id] = result

        return [
            record.with_worker_name(names[record.support_worker_id])
            if needs_worker_lookup(record) and record.support_worker_id in names
            else record
            for record in records
        ]
