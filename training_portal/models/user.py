# models/user.py
from flask_login import UserMixin
from werkzeug.security import generate_password_hash, check_password_hash
from sqlalchemy import Index

from training_portal.extensions import db
from .base import BaseModel


class RoleType:
    """Define role types as constants."""
    ADMIN = 'admin'
    USER = 'user'

    ALL = (ADMIN, USER)


class User(UserMixin, BaseModel):
    """Portal user. The role column is the only authorization input."""

    __tablename__ = 'users'

    email = db.Column(db.String(255), nullable=False)
    name = db.Column(db.String(200), nullable=True)
    role = db.Column(db.String(20), default=RoleType.USER, nullable=False)
    password_hash = db.Column(db.String(255), nullable=True)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    last_login = db.Column(db.DateTime, nullable=True)

    __table_args__ = (
        Index('uq_users_email', 'email', unique=True),
        Index('idx_users_role', 'role'),
    )

    def set_password(self, password):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        if not self.password_hash:
            return False
        return check_password_hash(self.password_hash, password)

    @property
    def is_admin(self):
        return self.role == RoleType.ADMIN

    def identity(self):
        """Identity view handed to services: {id, email, name, role}."""
        return {
            'id': self.id,
            'email': self.email,
            'name': self.name,
            'role': self.role,
        }

    def to_dict(self):
        result = super().to_dict()
        result.pop('password_hash', None)
        return result

    def __repr__(self):
        return f'<User {self.email} ({self.role})>'
