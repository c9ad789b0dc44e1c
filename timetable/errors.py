"""
Application errors raised by the services and turned into JSON responses by
the handlers registered in ``main.py``.
"""

from typing import List


class ScheduleError(Exception):
    status_code = 500

    def __init__(self, message: str, status_code: int = None, extras: dict = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.extras = extras or {}

    def to_dict(self) -> dict:
        return {"detail": self.message, **self.extras}


class NotFoundError(ScheduleError):
    status_code = 404

    def __init__(self, resource: str = "Resource"):
        super().__init__(f"{resource} not found")


class PermissionDeniedError(ScheduleError):
    status_code = 403


class SchedulingConflictError(ScheduleError):
    """A scheduling request collided with existing slots."""
    status_code = 400

    def __init__(self, message: str, conflicts: List[dict] = None, occurrences: List[dict] = None):
        extras = {"conflicts": conflicts or []}
        if occurrences is not None:
            extras["occurrences"] = occurrences
        super().__init__(message, extras=extras)
