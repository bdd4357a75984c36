import logging
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from safespace.application.ports.appointments import AppointmentQueryPort
from safespace.application.ports.booking import BookingSubmissionPort
from safespace.application.use_cases.aggregate_appointments import LoadAppointmentSummaryUseCase
from safespace.application.use_cases.booking import BookingUseCase
from safespace.application.use_cases.cancel_appointment import CancelAppointmentUseCase
from safespace.application.utils.time_window import ORG_TIMEZONE, parse_time_of_day
from safespace.core.config import settings
from safespace.infrastructure.backend.http_backend import HttpAppointmentsBackend
from safespace.infrastructure.backend.memory_backend import MemoryAppointmentsBackend

_backend: MemoryAppointmentsBackend | HttpAppointmentsBackend | None = None


def get_timezone() -> ZoneInfo:
    try:
        return ZoneInfo(settings.ORG_TIMEZONE)
    except (ZoneInfoNotFoundError, ValueError) as e:
        logger = logging.getLogger(__name__)
        logger.warning("Unknown ORG_TIMEZONE, using default", extra={"error": str(e)})
        return ORG_TIMEZONE


def get_backend() -> MemoryAppointmentsBackend | HttpAppointmentsBackend:
    global _backend
    if _backend is None:
        if settings.BACKEND_PROVIDER.lower() == "http":
            _backend = HttpAppointmentsBackend()
        else:
            _backend = MemoryAppointmentsBackend()
    return _backend


def get_query_port() -> AppointmentQueryPort:
    return get_backend()


def get_submission_port() -> BookingSubmissionPort:
    return get_backend()


def get_booking_use_case() -> BookingUseCase:
    return BookingUseCase(
        submissions=get_submission_port(),
        timezone=get_timezone(),
        window_days=settings.BOOKING_WINDOW_DAYS,
        cutoff=parse_time_of_day(settings.BOOKING_CUTOFF),
        day_start=parse_time_of_day(settings.SLOT_DAY_START),
        day_end=parse_time_of_day(settings.SLOT_DAY_END),
        interval_minutes=settings.SLOT_INTERVAL_MINUTES,
        notes_max_length=settings.NOTES_MAX_LENGTH,
    )


def get_summary_use_case() -> LoadAppointmentSummaryUseCase:
    return LoadAppointmentSummaryUseCase(
        queries=get_query_port(),
        timezone=get_timezone(),
        placeholder=settings.WORKER_NAME_PLACEHOLDER,
    )


def get_cancel_use_case() -> CancelAppointmentUseCase:
    return CancelAppointmentUseCase(
        queries=get_query_port(),
        submissions=get_submission_port(),
        timezone=get_timezone(),
    )


async def close_backend() -> None:
    global _backend
    backend, _backend = _backend, None
    if isinstance(backend, HttpAppointmentsBackend):
        await backend.aclose()
