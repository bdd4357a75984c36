from pydantic import BaseModel, Field

from safespace.domain.entities.appointment import UiAppointmentStatus


class DateOptionSchema(BaseModel):
    date: str
    display: str


class TimeOptionSchema(BaseModel):
    time: str
    display: str
    available: bool = True


class SlotWindowSchema(BaseModel):
    now: str
    dates: list[DateOptionSchema]
    times: list[TimeOptionSchema]


class DraftRequestSchema(BaseModel):
    session_type: str | None = None
    selected_date: str | None = None
    selected_time: str | None = None
    notes: str = ""
    reschedule_appointment_id: str | None = None
    support_worker_id: str | None = None
    support_worker_name: str | None = None


class DraftResponseSchema(BaseModel):
    status: str
    can_proceed: bool
    params: dict[str, str]


class ConfirmRequestSchema(BaseModel):
    user_id: str = Field(min_length=1)
    params: dict[str, str]


class ConfirmResponseSchema(BaseModel):
    action: str
    appointment_id: str | None = None
    message: str | None = None


class AppointmentSchema(BaseModel):
    id: str | None
    date: str
    time: str
    type: str
    raw_status: str
    support_worker_name: str | None = None
    support_worker_id: str | None = None
    status: UiAppointmentStatus | None = None
    # Only set on list rows.
    can_cancel: bool | None = None
    can_reschedule: bool | None = None
    can_join: bool | None = None


class SummarySchema(BaseModel):
    upcoming_count: int
    completed_count: int
    next_session: AppointmentSchema | None = None
    error: str | None = None


class CancelRequestSchema(BaseModel):
    user_id: str
    reason: str | None = Field(default=None, max_length=500)


class CancelResponseSchema(BaseModel):
    action: str
    appointment_id: str
