class SchedulingError(RuntimeError):
    """Base class for booking and scheduling failures."""
    pass


class ParseError(SchedulingError, ValueError):
    """Raised when a date or time string cannot be parsed into a civil date/time."""
    pass


class InvalidSelection(SchedulingError, ValueError):
    """Raised when a booking draft rejects a selection (time before date, past slot, oversize notes)."""
    pass


class DataFetchFailure(SchedulingError):
    """Raised when the appointment query layer fails (network errors, bad payloads)."""
    pass


class SubmissionFailure(SchedulingError):
    """Raised when the booking mutation layer fails to create or reschedule an appointment."""
    pass
