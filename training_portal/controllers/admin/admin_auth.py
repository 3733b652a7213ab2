# controllers/admin/admin_auth.py
"""
Admin user management: list users and change roles.
"""

from flask import jsonify, current_app
from flask_login import current_user

from training_portal.controllers.auth.forms.auth_forms import RoleForm
from training_portal.controllers.helpers import get_payload
from training_portal.services.user_service import UserService
from training_portal.utils.auth import admin_required
from training_portal.utils.errors import ValidationError
from training_portal.utils.validation import validate_payload

from . import admin_bp


@admin_bp.route('/users', methods=['GET'])
@admin_required
def list_users():
    users = UserService.list_users()
    return jsonify({'users': [user.to_dict() for user in users]})


@admin_bp.route('/users/<user_id>/role', methods=['PUT'])
@admin_required
def change_user_role(user_id):
    try:
        data = validate_payload(RoleForm, get_payload())
    except ValidationError as e:
        return jsonify({'success': False, 'error': e.message}), 400

    success, user, message = UserService.set_role(user_id, data['role'], performed_by=current_user)
    if not success:
        status = 404 if message == 'User not found' else 400
        return jsonify({'success': False, 'error': message}), status

    current_app.logger.info(f"{current_user.email} set role of {user.email} to {user.role}")
    return jsonify({'success': True, 'user': user.to_dict()})
