# controllers/helpers.py
"""Request-scoped state and JSON response helpers shared by the blueprints."""

from datetime import date, datetime

from flask import g, jsonify, current_app, request

from training_portal.services.training_state import TrainingState
from training_portal.utils.errors import RegistrationError, StoreUnavailableError

STATUS_BY_ERROR_CODE = {
    RegistrationError.VALIDATION_ERROR: 400,
    RegistrationError.INVALID_TRANSITION: 400,
    RegistrationError.ATTENDANCE_NOT_ALLOWED: 400,
    RegistrationError.REGISTRATION_CLOSED: 400,
    RegistrationError.EXTERNAL_REGISTRATION: 400,
    RegistrationError.FORBIDDEN: 403,
    RegistrationError.NOT_FOUND: 404,
    RegistrationError.CONFIRMATION_REQUIRED: 409,
    RegistrationError.STORE_ERROR: 500,
}


def get_training_state():
    """
    One loaded TrainingState per request.

    Raises:
        StoreUnavailableError: if any collection fails to load
    """
    if 'training_state' not in g:
        state = TrainingState(
            feed_limit=current_app.config.get('ACTIVITY_FEED_LIMIT', 50),
            recommended_limit=current_app.config.get('RECOMMENDED_TRAININGS_LIMIT', 4)
        )
        if not state.load():
            raise StoreUnavailableError(state.load_error or 'Failed to load training data')
        g.training_state = state
    return g.training_state


def serialize(value):
    """Make records JSON-ready: datetimes become ISO strings."""
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, dict):
        return {key: serialize(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [serialize(item) for item in value]
    return value


def get_payload():
    return request.get_json(silent=True) or {}


def parse_bool(value):
    if isinstance(value, bool):
        return value
    return str(value).lower() in ('1', 'true', 'yes', 'on')


def result_response(result, success_status=200):
    if result.success:
        return jsonify({'success': True, 'data': serialize(result.data)}), success_status

    body = {'success': False, 'error': result.error, 'error_code': result.error_code}
    if result.details:
        body['details'] = serialize(result.details)
    return jsonify(body), STATUS_BY_ERROR_CODE.get(result.error_code, 400)
