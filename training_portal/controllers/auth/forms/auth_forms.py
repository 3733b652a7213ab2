# forms/auth_forms.py
"""
WTForms forms for authentication and admin user management.
Validated from JSON payloads through validate_payload.
"""

from wtforms import Form, StringField, PasswordField, BooleanField
from wtforms.validators import DataRequired, Email, Length, AnyOf

from training_portal.models.user import RoleType


class LoginForm(Form):
    """User login form with email and password."""

    email = StringField(
        'Email',
        validators=[
            DataRequired(message='Email is required'),
            Email(message='Please enter a valid email address'),
            Length(max=255, message='Email is too long')
        ]
    )

    password = PasswordField(
        'Password',
        validators=[
            DataRequired(message='Password is required'),
            Length(min=1, max=255, message='Password is too long')
        ]
    )

    remember_me = BooleanField('Remember me', default=False)


class RoleForm(Form):
    """Admin form to change a user's role."""

    role = StringField(
        'Role',
        validators=[
            DataRequired(message='Role is required'),
            AnyOf(RoleType.ALL, message='Role must be admin or user')
        ]
    )
