"""
Error types raised by the booking, schedule and status services.
Routes translate them into JSON responses.
"""

from typing import Dict, Optional


class ValidationFailed(ValueError):
    """Input was rejected before anything was written"""

    def __init__(self, message: str, details: Optional[Dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class InvalidDuration(ValidationFailed):
    """Session duration outside the rate table"""

    def __init__(self, duration):
        super().__init__(
            f"Unsupported session duration: {duration!r}",
            {'duration': ['Must be one of 0.5, 1, 1.5 or 2 hours']}
        )
        self.duration = duration


class InvalidStatusCode(ValidationFailed):
    """Unknown session-day status code"""

    def __init__(self, code):
        super().__init__(
            f"Unknown session status code: {code!r}",
            {'status': ['Must be one of C, A, P, T, S, AT, AS, N']}
        )
        self.code = code


class RecordNotFound(LookupError):
    """A booking, teacher or student id has no record"""

    def __init__(self, kind: str, record_id):
        super().__init__(f"{kind.capitalize()} not found")
        self.kind = kind
        self.record_id = record_id
        self.message = f"{kind.capitalize()} not found"
