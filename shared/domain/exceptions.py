"""
Domain Error Taxonomy

Every failure the booking core reports to its callers is one of these
types. Each carries a stable ``code`` and a structured ``detail`` mapping
that the API layer renders verbatim, so clients can show precise messages
(conflicting hours, offending field) without parsing text.
"""

from typing import Any, Dict, Iterable, Optional


class DomainError(Exception):
    """Base class for expected, typed failures of domain operations."""

    code = "domain_error"
    default_message = "The request could not be processed."

    def __init__(self, message: Optional[str] = None, **detail: Any):
        self.message = message or self.default_message
        self.detail: Dict[str, Any] = detail
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.code, "message": self.message, **self.detail}


class ValidationError(DomainError):
    """Malformed or out-of-range input. Caller-fixable, never retried."""

    code = "validation_error"
    default_message = "Invalid input."

    def __init__(self, message: Optional[str] = None, *, field: Optional[str] = None, **detail: Any):
        if field is not None:
            detail["field"] = field
        super().__init__(message, **detail)
        self.field = field


class SlotConflict(DomainError):
    """Requested hours are already held by a non-cancelled booking."""

    code = "slot_conflict"
    default_message = "Some of the selected slots are no longer available."

    def __init__(self, conflicts: Iterable[int], message: Optional[str] = None):
        self.conflicts = sorted(set(conflicts))
        super().__init__(message, conflicts=self.conflicts)


class InvalidTransition(DomainError):
    """Illegal lifecycle move, e.g. approving a cancelled booking."""

    code = "invalid_transition"

    def __init__(self, current: str, target: str, message: Optional[str] = None):
        self.current = current
        self.target = target
        message = message or f"Cannot move booking from '{current}' to '{target}'."
        super().__init__(message, current_status=current, target_status=target)


class NotFound(DomainError):
    code = "not_found"
    default_message = "Booking not found."


class StaleState(DomainError):
    """The record changed since it was read; the write was not applied."""

    code = "stale_state"
    default_message = "The booking was modified by someone else. Reload and try again."


class StoreUnavailable(DomainError):
    """Transient storage failure. Internal detail is never exposed."""

    code = "store_unavailable"
    default_message = "The service is temporarily unavailable. Please try again later."
