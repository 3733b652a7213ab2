# models/registration.py
from datetime import datetime

from sqlalchemy import Index, event

from training_portal.extensions import db
from .base import BaseModel
from .training import Training


class EnrollmentStatus:
    """Enrollment status constants."""
    REGISTERED = 'registered'
    PENDING_APPROVAL = 'pending_approval'
    HR_APPROVAL = 'hr_approval'
    CONFIRMED = 'confirmed'
    CANCELLED = 'cancelled'
    ON_HOLD = 'on_hold'
    WAITLISTED = 'waitlisted'

    ALL = (REGISTERED, PENDING_APPROVAL, HR_APPROVAL, CONFIRMED, CANCELLED, ON_HOLD, WAITLISTED)


class AttendanceStatus:
    """Attendance status constants."""
    PENDING = 'pending'
    ATTENDED = 'attended'
    NO_SHOW = 'no_show'

    ALL = (PENDING, ATTENDED, NO_SHOW)


class Registration(BaseModel):
    """A participant's enrollment in one training."""

    __tablename__ = 'registrations'

    # No foreign key constraint: deleting a training does not cascade here
    training_id = db.Column(db.String(36), nullable=False)
    user_id = db.Column(db.String(36), nullable=True)

    participant_name = db.Column(db.String(200), nullable=False)
    participant_email = db.Column(db.String(255), nullable=False)
    participant_phone = db.Column(db.String(30), nullable=True)

    registered_at = db.Column(db.DateTime, default=datetime.now, nullable=False)
    status = db.Column(db.String(20), default=EnrollmentStatus.REGISTERED, nullable=False)
    attendance_status = db.Column(db.String(20), default=AttendanceStatus.PENDING, nullable=False)
    notes = db.Column(db.Text, nullable=True)
    notified_at = db.Column(db.DateTime, nullable=True)

    __table_args__ = (
        Index('idx_registration_training', 'training_id'),
        Index('idx_registration_status', 'status'),
        Index('idx_registration_attendance', 'attendance_status'),
        Index('idx_registration_registered_at', 'registered_at'),
        Index('idx_registration_email', 'participant_email'),
        Index('idx_registration_training_status', 'training_id', 'status'),
    )

    def __repr__(self):
        return f'<Registration {self.participant_email} -> {self.training_id} ({self.status})>'


@event.listens_for(Registration, 'after_insert')
def decrement_available_slots(mapper, connection, target):
    """Take one slot from the parent training, never going below zero."""
    trainings = Training.__table__
    connection.execute(
        trainings.update()
        .where(trainings.c.id == target.training_id)
        .where(trainings.c.available_slots > 0)
        .values(available_slots=trainings.c.available_slots - 1)
    )
