# controllers/auth.py
"""
Authentication routes: JSON login, logout, current user and CSRF token.
"""

from flask import jsonify, current_app
from flask_login import login_user, login_required, logout_user, current_user
from flask_wtf.csrf import generate_csrf

from .forms.auth_forms import LoginForm
from training_portal.controllers.helpers import get_payload
from training_portal.services.user_service import UserService
from training_portal.utils.errors import ValidationError
from training_portal.utils.validation import validate_payload

from . import auth_bp


@auth_bp.route('/login', methods=['POST'])
def login():
    """User login route."""
    try:
        data = validate_payload(LoginForm, get_payload())
    except ValidationError as e:
        return jsonify({'success': False, 'error': e.message, 'details': e.field_errors}), 400

    success, user, message = UserService.authenticate_user(data['email'], data['password'])
    if not success:
        return jsonify({'success': False, 'error': message}), 401

    login_user(user, remember=bool(data.get('remember_me')))
    current_app.logger.info(f"User {user.email} logged in")
    return jsonify({'success': True, 'user': user.identity()})


@auth_bp.route('/logout', methods=['POST'])
@login_required
def logout():
    """User logout route."""
    email = current_user.email
    logout_user()
    current_app.logger.info(f"User {email} logged out")
    return jsonify({'success': True})


@auth_bp.route('/me', methods=['GET'])
def me():
    """Current login status."""
    if current_user.is_authenticated:
        return jsonify({
            'authenticated': True,
            'user': current_user.identity(),
            'is_admin': current_user.is_admin
        })
    return jsonify({'authenticated': False})


@auth_bp.route('/csrf-token', methods=['GET'])
def csrf_token():
    return jsonify({'csrf_token': generate_csrf()})
