from fastapi import APIRouter, Depends, HTTPException

from safespace.api.v1.schemas import (
    AppointmentSchema,
    CancelRequestSchema,
    CancelResponseSchema,
    SummarySchema,
)
from safespace.application.exceptions import DataFetchFailure
from safespace.application.use_cases.aggregate_appointments import (
    AppointmentListItem,
    LoadAppointmentSummaryUseCase,
)
from safespace.application.use_cases.cancel_appointment import CancelAppointmentUseCase
from safespace.domain.entities.appointment import Appointment, UiAppointmentStatus
from safespace.wiring.dependencies import get_cancel_use_case, get_summary_use_case

router = APIRouter()

_CANCEL_ERROR_STATUS = {"not_found": 404, "not_allowed": 409, "failed": 502}


def _to_schema(appointment: Appointment, status: UiAppointmentStatus | None = None) -> AppointmentSchema:
    return AppointmentSchema(
        id=appointment.id,
        date=appointment.date,
        time=appointment.time,
        type=appointment.type,
        raw_status=appointment.raw_status,
        support_worker_name=appointment.support_worker_name,
        support_worker_id=appointment.support_worker_id,
        status=status,
    )


def _item_to_schema(item: AppointmentListItem) -> AppointmentSchema:
    schema = _to_schema(item.appointment, item.status)
    schema.can_cancel = item.can_cancel
    schema.can_reschedule = item.can_reschedule
    schema.can_join = item.can_join
    return schema


@router.get("/summary", response_model=SummarySchema)
async def get_summary(
    user_id: str,
    uc: LoadAppointmentSummaryUseCase = Depends(get_summary_use_case),
):
    summary = await uc.execute(user_id)
    return SummarySchema(
        upcoming_count=summary.upcoming_count,
        completed_count=summary.completed_count,
        next_session=(
            _to_schema(summary.next_session, UiAppointmentStatus.upcoming)
            if summary.next_session else None
        ),
        error=summary.error,
    )


@router.get("", response_model=list[AppointmentSchema])
async def list_appointments(
    user_id: str,
    uc: LoadAppointmentSummaryUseCase = Depends(get_summary_use_case),
):
    try:
        items = await uc.list_appointments(user_id)
    except DataFetchFailure as e:
        raise HTTPException(status_code=502, detail=str(e))
    return [_item_to_schema(item) for item in items]


@router.post("/{appointment_id}/cancel", response_model=CancelResponseSchema)
async def cancel_appointment(
    appointment_id: str,
    req: CancelRequestSchema,
    uc: CancelAppointmentUseCase = Depends(get_cancel_use_case),
):
    result = await uc.execute(req.user_id, appointment_id, reason=req.reason)
    if result.action in _CANCEL_ERROR_STATUS:
        raise HTTPException(status_code=_CANCEL_ERROR_STATUS[result.action], detail=result.message)
    return CancelResponseSchema(action=result.action, appointment_id=appointment_id)
