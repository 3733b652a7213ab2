# models/training_update.py
from datetime import datetime

from training_portal.extensions import db
from .base import BaseModel


class TrainingUpdateType:
    TRAINING_ADDED = 'training_added'
    TRAINING_REMOVED = 'training_removed'
    TRAINING_MODIFIED = 'training_modified'
    STATUS_CHANGED = 'status_changed'
    CAPACITY_LOW = 'capacity_low'
    CAPACITY_FULL = 'capacity_full'

    ALL = (TRAINING_ADDED, TRAINING_REMOVED, TRAINING_MODIFIED,
           STATUS_CHANGED, CAPACITY_LOW, CAPACITY_FULL)


class TrainingUpdate(BaseModel):
    """Append-only activity feed entry written after admin training mutations."""

    __tablename__ = 'training_updates'

    type = db.Column(db.String(30), nullable=False)
    # No foreign key: entries outlive the training they describe
    training_id = db.Column(db.String(36), nullable=True, index=True)
    training_name = db.Column(db.String(200), nullable=False)
    message = db.Column(db.String(500), nullable=False)
    timestamp = db.Column(db.DateTime, default=datetime.now, nullable=False, index=True)
    previous_value = db.Column(db.String(200), nullable=True)
    new_value = db.Column(db.String(200), nullable=True)

    def __repr__(self):
        return f'<TrainingUpdate {self.type} {self.training_name}>'
