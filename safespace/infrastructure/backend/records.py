from __future__ import annotations

from typing import Any

from safespace.application.utils.session_types import normalize_session_type
from safespace.application.utils.time_window import normalize_time_string
from safespace.domain.entities.appointment import Appointment


def parse_appointment_record(record: dict[str, Any]) -> Appointment:
    """
    Build an Appointment from a backend payload.
    Accepts current (appointmentDate, appointmentTime, appointmentType, supportWorkerName)
    and legacy (date, time, type, supportWorker) field names.
    """
    raw_id = record.get("id", record.get("_id"))
    worker_id = record.get("supportWorkerId")
    worker_name = str(record.get("supportWorkerName") or record.get("supportWorker") or "").strip()
    raw_type = record.get("appointmentType") or record.get("type")
    return Appointment(
        id=str(raw_id) if raw_id is not None else None,
        date=str(record.get("appointmentDate") or record.get("date") or "").strip(),
        time=normalize_time_string(str(record.get("appointmentTime") or record.get("time") or "")),
        type=normalize_session_type(raw_type).value,
        raw_status=str(record.get("status") or "").strip().lower(),
        support_worker_name=worker_name or None,
        support_worker_id=str(worker_id) if worker_id not in (None, "") else None,
    )


def parse_appointment_records(payload: Any) -> list[Appointment]:
    """Parse an `{"appointments": [...]}` payload (or a bare list), skipping non-dict entries."""
    items = payload.get("appointments", []) if isinstance(payload, dict) else payload
    if not isinstance(items, list):
        return []
    return [parse_appointment_record(item) for item in items if isinstance(item, dict)]
