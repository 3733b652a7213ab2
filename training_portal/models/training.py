# models/training.py
from datetime import datetime

from sqlalchemy import Index

from training_portal.extensions import db
from .base import BaseModel


class TrainingStatus:
    """Training status constants. Admins may set any value; there is no graph."""
    SCHEDULED = 'Scheduled'
    RESCHEDULED = 'Rescheduled'
    CANCELLED = 'Cancelled'
    IN_PROGRESS = 'In Progress'
    ON_HOLD = 'On Hold'
    COMPLETED = 'Completed'

    ALL = (SCHEDULED, RESCHEDULED, CANCELLED, IN_PROGRESS, ON_HOLD, COMPLETED)

    # Statuses under which self-registration is refused
    CLOSED = (COMPLETED, CANCELLED, ON_HOLD)


class RegistrationMethod:
    INTERNAL = 'internal'
    EXTERNAL = 'external'

    ALL = (INTERNAL, EXTERNAL)


class TargetAudience:
    GENERAL = 'General'
    SPECIALIST_AND_BELOW = 'Specialist and Below'
    SENIOR_SPECIALIST_AND_ABOVE = 'Senior Specialist and Above'
    MANAGERS_AND_ABOVE = 'Managers and Above'
    DIRECTORS_AND_ABOVE = 'Directors and Above'

    ALL = (GENERAL, SPECIALIST_AND_BELOW, SENIOR_SPECIALIST_AND_ABOVE,
           MANAGERS_AND_ABOVE, DIRECTORS_AND_ABOVE)


class Training(BaseModel):
    __tablename__ = 'trainings'

    name = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=False, default='')
    short_description = db.Column(db.String(300), nullable=True)
    # Plain string column: deleting a category leaves the reference dangling
    category_id = db.Column(db.String(36), nullable=True, index=True)

    # Schedule
    date = db.Column(db.DateTime, nullable=False)
    end_date = db.Column(db.DateTime, nullable=True)
    time_from = db.Column(db.String(5), nullable=True)  # HH:MM, 24-hour
    time_to = db.Column(db.String(5), nullable=True)
    duration = db.Column(db.String(100), nullable=True)  # free text, e.g. "Half day"
    status = db.Column(db.String(20), nullable=False, default=TrainingStatus.SCHEDULED)

    # Capacity
    available_slots = db.Column(db.Integer, nullable=False, default=20)
    max_registrations = db.Column(db.Integer, nullable=False, default=20)
    is_registration_open = db.Column(db.Boolean, nullable=False, default=True)

    # Registration channel
    registration_method = db.Column(db.String(20), nullable=False, default=RegistrationMethod.INTERNAL)
    external_link = db.Column(db.String(2048), nullable=True)

    # Presentation
    hero_image = db.Column(db.String(2048), nullable=True)
    is_featured = db.Column(db.Boolean, nullable=False, default=False)
    is_recommended = db.Column(db.Boolean, nullable=False, default=False)
    display_order = db.Column(db.Integer, nullable=True)
    location = db.Column(db.String(200), nullable=True)
    speakers = db.Column(db.String(500), nullable=True)
    target_audience = db.Column(db.String(50), nullable=True)

    attachments = db.relationship('TrainingAttachment', back_populates='training',
                                  cascade='all, delete-orphan', order_by='TrainingAttachment.uploaded_at')

    __table_args__ = (
        Index('idx_training_date', 'date'),
        Index('idx_training_status_date', 'status', 'date'),
        Index('idx_training_featured', 'is_featured', 'display_order'),
    )

    def to_record(self):
        result = super().to_record()
        result['attachments'] = [attachment.to_record() for attachment in self.attachments]
        return result

    def to_dict(self):
        result = super().to_dict()
        result['attachments'] = [attachment.to_dict() for attachment in self.attachments]
        return result

    def __repr__(self):
        return f'<Training {self.name} {self.status}>'


class TrainingAttachment(BaseModel):
    """Opaque file reference; the portal never reads the file itself."""

    __tablename__ = 'training_attachments'

    training_id = db.Column(db.String(36), db.ForeignKey('trainings.id'), nullable=False, index=True)
    name = db.Column(db.String(255), nullable=False)
    file_url = db.Column(db.String(2048), nullable=False)
    file_path = db.Column(db.String(512), nullable=True)
    file_type = db.Column(db.String(100), nullable=True)
    uploaded_at = db.Column(db.DateTime, default=datetime.now, nullable=False)

    training = db.relationship('Training', back_populates='attachments')

    def __repr__(self):
        return f'<TrainingAttachment {self.name}>'
