# services/enrollment_rules.py
"""
Enrollment status transition and attendance eligibility rules.

Pure functions only: nothing here touches the database or the request.
"""

from datetime import date

from training_portal.models.registration import EnrollmentStatus, AttendanceStatus
from training_portal.models.training import TrainingStatus
from training_portal.utils.errors import InvalidTransitionError, AttendanceNotAllowedError


TRANSITIONS = {
    EnrollmentStatus.REGISTERED: (
        EnrollmentStatus.PENDING_APPROVAL,
        EnrollmentStatus.CONFIRMED,
        EnrollmentStatus.WAITLISTED,
        EnrollmentStatus.ON_HOLD,
        EnrollmentStatus.CANCELLED,
    ),
    EnrollmentStatus.PENDING_APPROVAL: (
        EnrollmentStatus.HR_APPROVAL,
        EnrollmentStatus.CONFIRMED,
        EnrollmentStatus.ON_HOLD,
        EnrollmentStatus.CANCELLED,
    ),
    EnrollmentStatus.HR_APPROVAL: (
        EnrollmentStatus.CONFIRMED,
        EnrollmentStatus.ON_HOLD,
        EnrollmentStatus.CANCELLED,
    ),
    EnrollmentStatus.WAITLISTED: (
        EnrollmentStatus.CONFIRMED,
        EnrollmentStatus.ON_HOLD,
        EnrollmentStatus.CANCELLED,
    ),
    EnrollmentStatus.ON_HOLD: (
        EnrollmentStatus.CONFIRMED,
        EnrollmentStatus.CANCELLED,
    ),
    EnrollmentStatus.CONFIRMED: (
        EnrollmentStatus.CANCELLED,
    ),
    EnrollmentStatus.CANCELLED: (),
}

STATUSES_REQUIRING_CONFIRMATION = (EnrollmentStatus.CANCELLED, EnrollmentStatus.ON_HOLD)

ENROLLMENT_STATUS_LABELS = {
    EnrollmentStatus.REGISTERED: 'Registered',
    EnrollmentStatus.PENDING_APPROVAL: 'Pending Approval',
    EnrollmentStatus.HR_APPROVAL: 'HR Approval',
    EnrollmentStatus.CONFIRMED: 'Confirmed',
    EnrollmentStatus.CANCELLED: 'Cancelled',
    EnrollmentStatus.ON_HOLD: 'On Hold',
    EnrollmentStatus.WAITLISTED: 'Waitlisted',
}

ATTENDANCE_STATUS_LABELS = {
    AttendanceStatus.PENDING: 'Pending',
    AttendanceStatus.ATTENDED: 'Attended',
    AttendanceStatus.NO_SHOW: 'No Show',
}


def _check_tables():
    """Fail at import time if a status constant is missing from a lookup table."""
    for name, table, statuses in (
            ('TRANSITIONS', TRANSITIONS, EnrollmentStatus.ALL),
            ('ENROLLMENT_STATUS_LABELS', ENROLLMENT_STATUS_LABELS, EnrollmentStatus.ALL),
            ('ATTENDANCE_STATUS_LABELS', ATTENDANCE_STATUS_LABELS, AttendanceStatus.ALL),
    ):
        if set(table) != set(statuses):
            missing = sorted(set(statuses) - set(table))
            extra = sorted(set(table) - set(statuses))
            raise RuntimeError(f"{name} out of sync with status constants (missing={missing}, extra={extra})")


_check_tables()


def _require_enrollment_status(status):
    if status not in TRANSITIONS:
        raise ValueError(f"Unknown enrollment status: {status!r}")


def _require_attendance_status(status):
    if status not in ATTENDANCE_STATUS_LABELS:
        raise ValueError(f"Unknown attendance status: {status!r}")


def enrollment_status_label(status):
    _require_enrollment_status(status)
    return ENROLLMENT_STATUS_LABELS[status]


def attendance_status_label(status):
    _require_attendance_status(status)
    return ATTENDANCE_STATUS_LABELS[status]


# ---------------------------------------------------------------------------
# Status transitions
# ---------------------------------------------------------------------------

def allowed_next(current_status):
    """Statuses reachable in one step from current_status, in table order."""
    _require_enrollment_status(current_status)
    return list(TRANSITIONS[current_status])


def is_valid_transition(current_status, new_status):
    _require_enrollment_status(current_status)
    _require_enrollment_status(new_status)
    if current_status == new_status:
        return True
    return new_status in TRANSITIONS[current_status]


def transition_error_message(current_status, attempted_status):
    current_label = enrollment_status_label(current_status)
    attempted_label = enrollment_status_label(attempted_status)
    allowed = allowed_next(current_status)

    if not allowed:
        return f'Cannot change status from "{current_label}" - this is a terminal state.'

    allowed_labels = ', '.join(ENROLLMENT_STATUS_LABELS[status] for status in allowed)
    return f'Cannot transition from "{current_label}" to "{attempted_label}". Allowed: {allowed_labels}'


def ensure_transition(current_status, new_status):
    """Raise InvalidTransitionError unless current_status -> new_status is allowed."""
    if not is_valid_transition(current_status, new_status):
        raise InvalidTransitionError(
            transition_error_message(current_status, new_status),
            current_status=current_status,
            attempted_status=new_status,
            allowed=allowed_next(current_status),
        )


def requires_confirmation(action):
    return action in STATUSES_REQUIRING_CONFIRMATION


def append_reason_to_notes(notes, status, reason, today=None):
    """
    Append a date-stamped reason line to the notes.

    Returns the notes unchanged when the reason is blank.
    """
    if not reason or not reason.strip():
        return notes

    stamp = (today or date.today()).strftime('%Y-%m-%d')
    line = f"[{stamp}] {enrollment_status_label(status)}: {reason.strip()}"
    return f"{notes}\n{line}" if notes else line


# ---------------------------------------------------------------------------
# Attendance eligibility
# ---------------------------------------------------------------------------

def _attendance_unlocked(enrollment_status, training=None):
    is_confirmed = enrollment_status == EnrollmentStatus.CONFIRMED
    is_training_completed = bool(training) and training.get('status') == TrainingStatus.COMPLETED
    return is_confirmed or is_training_completed


def can_mark_attendance(enrollment_status, attendance_status, training=None):
    """
    Pending is always allowed. Attended/no-show need a confirmed enrollment
    or a completed training.
    """
    _require_enrollment_status(enrollment_status)
    _require_attendance_status(attendance_status)

    if attendance_status == AttendanceStatus.PENDING:
        return True
    return _attendance_unlocked(enrollment_status, training)


def allowed_attendance(enrollment_status, training=None):
    _require_enrollment_status(enrollment_status)
    if _attendance_unlocked(enrollment_status, training):
        return list(AttendanceStatus.ALL)
    return [AttendanceStatus.PENDING]


def attendance_error_message(enrollment_status):
    return (
        'Cannot mark attendance as Attended or No Show. Enrollment must be "Confirmed" '
        f'or the training must be "Completed". Current status: {enrollment_status_label(enrollment_status)}'
    )


def ensure_attendance(enrollment_status, attendance_status, training=None):
    if not can_mark_attendance(enrollment_status, attendance_status, training):
        raise AttendanceNotAllowedError(
            attendance_error_message(enrollment_status),
            enrollment_status=enrollment_status,
            attendance_status=attendance_status,
        )
