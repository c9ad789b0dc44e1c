"""
Errors raised by the scheduling core.

Conflicts are not errors: they are returned as data by the detector and the
recurrence expander.
"""


class SchedulingError(Exception):
    """Base class for malformed scheduling input."""


class InvalidSlotError(SchedulingError):
    """Malformed time range or weekday on a slot or candidate."""

    def __init__(self, message: str, field: str = None):
        super().__init__(message)
        self.message = message
        self.field = field

    def to_dict(self) -> dict:
        return {"field": self.field, "message": self.message}


class InvalidRecurrenceError(SchedulingError):
    """Malformed recurrence descriptor."""

    def __init__(self, message: str, field: str = "recurrence"):
        super().__init__(message)
        self.message = message
        self.field = field

    def to_dict(self) -> dict:
        return {"field": self.field, "message": self.message}
