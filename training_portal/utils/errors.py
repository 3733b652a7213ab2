# utils/errors.py
"""
Error codes, exceptions and the result type shared by the store and services.

Store and service mutations never raise for expected failures; they return an
OperationResult and the caller decides what to do with its own state.
"""

from typing import Any, Dict, List, NamedTuple, Optional


class RegistrationError:
    """Error codes carried by failed operation results."""
    VALIDATION_ERROR = 'validation_error'
    INVALID_TRANSITION = 'invalid_transition'
    ATTENDANCE_NOT_ALLOWED = 'attendance_not_allowed'
    NOT_FOUND = 'not_found'
    STORE_ERROR = 'store_error'
    REGISTRATION_CLOSED = 'registration_closed'
    EXTERNAL_REGISTRATION = 'external_registration'
    CONFIRMATION_REQUIRED = 'confirmation_required'
    FORBIDDEN = 'forbidden'


class OperationResult(NamedTuple):
    success: bool
    data: Any = None
    error: Optional[str] = None
    error_code: Optional[str] = None
    details: Optional[Dict[str, Any]] = None

    @classmethod
    def ok(cls, data=None):
        return cls(True, data)

    @classmethod
    def fail(cls, error, error_code=RegistrationError.STORE_ERROR, details=None):
        return cls(False, None, error, error_code, details)


class ValidationError(ValueError):
    """Pre-flight form validation failure."""

    def __init__(self, message, field_errors: Optional[Dict[str, List[str]]] = None):
        super().__init__(message)
        self.message = message
        self.field_errors = field_errors or {}


class InvalidTransitionError(ValueError):
    """Enrollment status change not permitted by the transition graph."""

    def __init__(self, message, current_status, attempted_status, allowed):
        super().__init__(message)
        self.message = message
        self.current_status = current_status
        self.attempted_status = attempted_status
        self.allowed = list(allowed)


class AttendanceNotAllowedError(ValueError):
    """Attendance cannot be finalized for this enrollment yet."""

    def __init__(self, message, enrollment_status, attendance_status):
        super().__init__(message)
        self.message = message
        self.enrollment_status = enrollment_status
        self.attendance_status = attendance_status


class StoreUnavailableError(Exception):
    """The portal collections could not be loaded from the database."""

    def __init__(self, message):
        super().__init__(message)
        self.message = message
