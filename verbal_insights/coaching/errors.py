"""
Error taxonomy for the coaching session.

Every error carries the title and description shown to the user.
"""
from typing import Optional, Sequence, Tuple


class CoachingError(Exception):
    """Base class for errors surfaced to the user."""

    def __init__(self, title: str, description: str = ""):
        super().__init__(f"{title}: {description}" if description else title)
        self.title = title
        self.description = description


class CaptureError(CoachingError):
    """Microphone or speech recognition failure."""

    def __init__(self, title: str, description: str = "",
                 code: Optional[str] = None, permission_denied: bool = False):
        super().__init__(title, description)
        self.code = code
        self.permission_denied = permission_denied


class ServiceError(CoachingError):
    """Any failure of an external model operation."""

    def __init__(self, operation: str, title: str, description: str = ""):
        super().__init__(title, description)
        self.operation = operation


class SessionValidationError(CoachingError):
    """Required input is missing; raised before any request is issued."""

    def __init__(self, missing_fields: Sequence[str], title: Optional[str] = None):
        self.missing_fields: Tuple[str, ...] = tuple(missing_fields)
        description = f"Missing required field(s): {', '.join(self.missing_fields)}."
        super().__init__(title or "Cannot analyze yet", description)


class SessionStateError(CoachingError):
    """The requested transition is not allowed in the current state."""


class SessionBusyError(SessionStateError):
    """Another task is still running."""
