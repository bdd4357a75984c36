from __future__ import annotations

from safespace.domain.entities.appointment import SessionType

DEFAULT_SESSION_TYPE = SessionType.video

SESSION_TYPE_ALIASES = {
    "video": SessionType.video,
    "video call": SessionType.video,
    "phone": SessionType.phone,
    "phone call": SessionType.phone,
    "in_person": SessionType.in_person,
    "in-person": SessionType.in_person,
    "in person": SessionType.in_person,
}

SESSION_TYPE_LABELS = {
    SessionType.video: "Video Call",
    SessionType.phone: "Phone Call",
    SessionType.in_person: "In Person",
}


def normalize_session_type(value: str | SessionType | None, default: SessionType = DEFAULT_SESSION_TYPE) -> SessionType:
    """Map UI labels and backend values to a SessionType; anything unrecognized falls back to `default`."""
    if isinstance(value, SessionType):
        return value
    normalized = (value or "").strip().lower()
    return SESSION_TYPE_ALIASES.get(normalized, default)


def session_type_label(value: SessionType) -> str:
    return SESSION_TYPE_LABELS[value]
