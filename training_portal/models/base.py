# models/base.py
from datetime import datetime
import uuid

from training_portal.extensions import db


class BaseModel(db.Model):
    """Base model class with common functionality."""

    __abstract__ = True

    # Columns that callers may never overwrite through from_dict
    PROTECTED_FIELDS = ('id', 'created_at', 'updated_at')

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    created_at = db.Column(db.DateTime, default=datetime.now, nullable=False, index=True)
    updated_at = db.Column(db.DateTime, default=datetime.now, onupdate=datetime.now, nullable=False)

    def to_record(self):
        """Convert model instance to a plain dictionary, keeping native values."""
        return {column.name: getattr(self, column.name) for column in self.__table__.columns}

    def to_dict(self):
        """Convert model instance to a JSON-ready dictionary."""
        result = {}
        for key, value in self.to_record().items():
            if isinstance(value, datetime):
                result[key] = value.isoformat()
            else:
                result[key] = value
        return result

    def from_dict(self, data):
        """Update model instance from dictionary."""
        for field, value in data.items():
            if field in self.__table__.columns and field not in self.PROTECTED_FIELDS:
                setattr(self, field, value)
