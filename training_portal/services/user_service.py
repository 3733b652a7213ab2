# services/user_service.py
"""
User provisioning, authentication and role management.
"""

import logging
from datetime import datetime

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from training_portal.extensions import db
from training_portal.models.user import User, RoleType


class UserService:
    """Service class for portal user accounts."""

    @staticmethod
    def find_by_email(email):
        if not email:
            return None
        return User.query.filter(func.lower(User.email) == email.strip().lower()).first()

    @staticmethod
    def provision_user(email, name=None, password=None):
        """
        Ensure a user exists for email.

        New users get the default 'user' role. An existing user is returned
        untouched so manually assigned roles survive every sign-in.

        Returns:
            tuple: (user: User, created: bool)
        """
        logger = logging.getLogger('user_service')

        user = UserService.find_by_email(email)
        if user:
            return user, False

        try:
            user = User(email=email.strip().lower(), name=name, role=RoleType.USER)
            if password:
                user.set_password(password)
            db.session.add(user)
            db.session.commit()
            logger.info(f"Provisioned user {user.email} with role '{user.role}'")
            return user, True
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Failed to provision user {email}: {str(e)}")
            raise

    @staticmethod
    def authenticate_user(email, password):
        """
        Returns:
            tuple: (success: bool, user: User|None, message: str)
        """
        logger = logging.getLogger('user_service')

        user = UserService.find_by_email(email)
        if not user or not user.is_active:
            logger.warning(f"Login attempt for unknown or inactive account: {email}")
            return False, None, "Invalid email or password"

        if not user.check_password(password):
            logger.warning(f"Failed login attempt for user: {user.email}")
            return False, None, "Invalid email or password"

        user.last_login = datetime.now()
        db.session.commit()
        logger.info(f"User logged in: {user.email}")
        return True, user, "Login successful"

    @staticmethod
    def list_users():
        return User.query.order_by(User.email).all()

    @staticmethod
    def set_role(user_id, role, performed_by=None):
        """
        Change a user's role.

        Returns:
            tuple: (success: bool, user: User|None, message: str)
        """
        logger = logging.getLogger('user_service')

        if role not in RoleType.ALL:
            return False, None, f"Invalid role: {role}"

        user = db.session.get(User, user_id)
        if not user:
            return False, None, "User not found"

        if performed_by is not None and performed_by.id == user.id and role != RoleType.ADMIN:
            return False, None, "You cannot remove your own admin role"

        try:
            previous_role = user.role
            user.role = role
            db.session.commit()
            logger.info(f"Role of {user.email} changed from '{previous_role}' to '{role}'"
                        f"{f' by {performed_by.email}' if performed_by else ''}")
            return True, user, "Role updated"
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Failed to change role of {user_id}: {str(e)}")
            return False, None, str(e)

    @staticmethod
    def create_admin(email, name, password):
        """Create an admin account, or promote the existing user with that email."""
        user, created = UserService.provision_user(email, name, password)
        user.role = RoleType.ADMIN
        if not created and password:
            user.set_password(password)
        db.session.commit()
        return user, created
