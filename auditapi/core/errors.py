"""Error taxonomy for the audit service.

Every error carries the label and status code the HTTP layer answers with,
so handlers only need ``to_dict()``.
"""

from typing import Optional


class AuditError(Exception):
    """Base class for all audit service errors."""

    status_code = 500
    error = "Internal server error"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict:
        return {"error": self.error, "message": self.message}


class ValidationError(AuditError):
    """Malformed input. Never retried."""

    status_code = 400
    error = "Validation Error"


class EngineError(AuditError):
    """Transient engine failure: launch, navigation, timeout or missing data."""

    error = "Audit Error"


class AuditFailed(EngineError):
    """Raised once every attempt for a device has failed."""

    def __init__(self, device: str, attempts: int, last_error: Optional[BaseException]):
        self.device = device
        self.attempts = attempts
        self.last_error = last_error
        reason = _error_text(last_error)
        super().__init__(f"{device} audit failed after {attempts} attempts: {reason}")


class OrchestrationError(AuditError):
    """Internal invariant violated, e.g. the gate released while free."""


def _error_text(exc: Optional[BaseException]) -> str:
    if exc is None:
        return "unknown error"
    if isinstance(exc, AuditError):
        return exc.message
    return str(exc) or type(exc).__name__
