from fastapi import APIRouter, Depends, HTTPException

from safespace.api.v1.schemas import (
    ConfirmRequestSchema,
    ConfirmResponseSchema,
    DateOptionSchema,
    DraftRequestSchema,
    DraftResponseSchema,
    SlotWindowSchema,
    TimeOptionSchema,
)
from safespace.application.exceptions import InvalidSelection, ParseError
from safespace.application.use_cases.booking import BookingUseCase
from safespace.application.utils.slot_generator import is_time_selectable
from safespace.application.utils.time_window import (
    format_display_date,
    format_time_12h,
    format_time_24h,
    parse_date,
)
from safespace.wiring.dependencies import get_booking_use_case

router = APIRouter()


@router.get("/slots", response_model=SlotWindowSchema)
def get_slots(
    date: str | None = None,
    uc: BookingUseCase = Depends(get_booking_use_case),
):
    now = uc.now()
    window = uc.compute_window(now)
    try:
        selected = parse_date(date) if date else None
    except ParseError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return SlotWindowSchema(
        now=f"{now.iso_date()}T{format_time_24h(now.time_of_day())}",
        dates=[DateOptionSchema(date=d.iso_date(), display=format_display_date(d)) for d in window.offerable_dates],
        times=[
            TimeOptionSchema(
                time=format_time_24h(t),
                display=format_time_12h(t),
                available=is_time_selectable(selected, t, now) if selected else True,
            )
            for t in window.offerable_times
        ],
    )


@router.post("/draft", response_model=DraftResponseSchema)
def build_draft(
    req: DraftRequestSchema,
    uc: BookingUseCase = Depends(get_booking_use_case),
):
    session = uc.open_session(
        rescheduling_of=req.reschedule_appointment_id,
        support_worker_id=req.support_worker_id,
        support_worker_name=req.support_worker_name,
    )
    try:
        if req.session_type:
            session.draft.set_session_type(req.session_type)
        if req.selected_date:
            uc.select_date(session, req.selected_date)
        if req.selected_time:
            uc.select_time(session, req.selected_time)
        session.draft.set_notes(req.notes)
        params = uc.proceed(session) if session.draft.can_proceed_to_confirmation() else session.draft.to_navigation_params()
    except (InvalidSelection, ParseError) as e:
        raise HTTPException(status_code=400, detail=str(e))

    return DraftResponseSchema(
        status=session.draft.status.value,
        can_proceed=session.draft.can_proceed_to_confirmation(),
        params=params,
    )


@router.post("/confirm", response_model=ConfirmResponseSchema)
async def confirm_booking(
    req: ConfirmRequestSchema,
    uc: BookingUseCase = Depends(get_booking_use_case),
):
    try:
        session = uc.restore_session(req.params)
    except (InvalidSelection, ParseError) as e:
        raise HTTPException(status_code=400, detail=str(e))

    result = await uc.confirm(session, req.user_id)
    if result.action == "invalid":
        raise HTTPException(status_code=400, detail=result.message)
    if result.action == "failed":
        raise HTTPException(
            status_code=502,
            detail={"message": result.message, "params": result.draft.to_navigation_params()},
        )
    return ConfirmResponseSchema(action=result.action, appointment_id=result.appointment_id, message=result.message)
