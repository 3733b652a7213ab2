# services/registration_service.py
"""
Single-enrollment operations: add, self-register, status, attendance, edit, delete.

Every handler returns an OperationResult. Rule violations and validation
failures come back as failed results with an error code; the state is left
untouched when a write fails.
"""

import logging
from datetime import datetime

from flask import current_app

from training_portal.models.registration import EnrollmentStatus, AttendanceStatus
from training_portal.models.training import RegistrationMethod
from training_portal.services import enrollment_rules
from training_portal.services.training_service import record_capacity_change
from training_portal.utils.capacity import can_register
from training_portal.utils.errors import (
    OperationResult, RegistrationError, ValidationError, InvalidTransitionError, AttendanceNotAllowedError
)
from training_portal.utils.validation import RegistrationForm, validate_payload

logger = logging.getLogger('registration_service')

EDITABLE_FIELDS = ('participant_name', 'participant_email', 'participant_phone', 'notes')


def policy_enabled(key, override=None):
    """Resolve an enforcement switch: explicit argument first, then app config."""
    if override is not None:
        return override
    return current_app.config.get(key, True)


def validation_failure(error):
    return OperationResult.fail(error.message, RegistrationError.VALIDATION_ERROR,
                                {'fields': error.field_errors})


def _new_registration(training_id, cleaned, user_id=None):
    return {
        'training_id': training_id,
        'user_id': user_id,
        'participant_name': cleaned['participant_name'],
        'participant_email': cleaned['participant_email'],
        'participant_phone': cleaned.get('participant_phone'),
        'notes': cleaned.get('notes') or None,
        'status': EnrollmentStatus.REGISTERED,
        'attendance_status': AttendanceStatus.PENDING,
        'registered_at': datetime.now(),
    }


def _create_and_refresh(state, data):
    before = state.get_training_by_id(data['training_id'])
    result = state.add_registration(data)
    if not result.success:
        logger.error(f"Failed to add registration for {data['participant_email']}: {result.error}")
        return result

    logger.info(f"Registration added: {data['participant_email']} -> {data['training_id']}")
    # The insert consumed a slot in the store; reload so counts are authoritative
    state.refresh()
    record_capacity_change(state, before, state.get_training_by_id(data['training_id']))
    return result


def add_participant(state, payload):
    """Admin-side enrollment of a participant into any existing training."""
    payload = payload or {}
    try:
        cleaned = validate_payload(RegistrationForm, payload)
    except ValidationError as e:
        return validation_failure(e)

    training_id = payload.get('training_id')
    if not training_id:
        return OperationResult.fail('Please select a training', RegistrationError.VALIDATION_ERROR)
    if state.get_training_by_id(training_id) is None:
        return OperationResult.fail('Training not found', RegistrationError.NOT_FOUND)

    return _create_and_refresh(state, _new_registration(training_id, cleaned, payload.get('user_id')))


def self_register(state, training_id, payload, user=None):
    """Participant-side registration, gated on the training accepting registrations."""
    payload = dict(payload or {})
    if user is not None:
        payload.setdefault('participant_name', user.name)
        payload.setdefault('participant_email', user.email)

    training = state.get_training_by_id(training_id)
    if training is None:
        return OperationResult.fail('Training not found', RegistrationError.NOT_FOUND)

    if training.get('registration_method') == RegistrationMethod.EXTERNAL:
        return OperationResult.fail(
            'This training uses external registration',
            RegistrationError.EXTERNAL_REGISTRATION,
            {'external_link': training.get('external_link')}
        )

    if not can_register(training):
        return OperationResult.fail('Registration is closed for this training',
                                    RegistrationError.REGISTRATION_CLOSED)

    try:
        cleaned = validate_payload(RegistrationForm, payload)
    except ValidationError as e:
        return validation_failure(e)

    user_id = user.id if user is not None else None
    return _create_and_refresh(state, _new_registration(training_id, cleaned, user_id))


def change_status(state, registration_id, new_status, confirmed=False, reason=None, enforce=None):
    if new_status not in EnrollmentStatus.ALL:
        return OperationResult.fail(f"Unknown enrollment status: {new_status}",
                                    RegistrationError.VALIDATION_ERROR)

    registration = state.get_registration_by_id(registration_id)
    if registration is None:
        return OperationResult.fail('Registration not found', RegistrationError.NOT_FOUND)

    if policy_enabled('ENFORCE_STATUS_TRANSITIONS', enforce):
        try:
            enrollment_rules.ensure_transition(registration['status'], new_status)
        except InvalidTransitionError as e:
            return OperationResult.fail(e.message, RegistrationError.INVALID_TRANSITION,
                                        {'allowed': e.allowed})

    if enrollment_rules.requires_confirmation(new_status) and not confirmed:
        label = enrollment_rules.enrollment_status_label(new_status)
        return OperationResult.fail(
            f'Changing status to "{label}" requires confirmation',
            RegistrationError.CONFIRMATION_REQUIRED,
            {'status': new_status}
        )

    notes = enrollment_rules.append_reason_to_notes(registration.get('notes'), new_status, reason)
    result = state.update_registration(registration_id, {'status': new_status, 'notes': notes})
    if result.success:
        logger.info(f"Registration {registration_id} status: {registration['status']} -> {new_status}")
    else:
        logger.error(f"Failed to change status of registration {registration_id}: {result.error}")
    return result


def change_attendance(state, registration_id, attendance_status, enforce=None):
    if attendance_status not in AttendanceStatus.ALL:
        return OperationResult.fail(f"Unknown attendance status: {attendance_status}",
                                    RegistrationError.VALIDATION_ERROR)

    registration = state.get_registration_by_id(registration_id)
    if registration is None:
        return OperationResult.fail('Registration not found', RegistrationError.NOT_FOUND)

    if policy_enabled('ENFORCE_ATTENDANCE_ELIGIBILITY', enforce):
        training = state.get_training_by_id(registration['training_id'])
        try:
            enrollment_rules.ensure_attendance(registration['status'], attendance_status, training)
        except AttendanceNotAllowedError as e:
            return OperationResult.fail(e.message, RegistrationError.ATTENDANCE_NOT_ALLOWED)

    result = state.update_registration(registration_id, {'attendance_status': attendance_status})
    if result.success:
        logger.info(f"Registration {registration_id} attendance: {attendance_status}")
    return result


def update_details(state, registration_id, payload):
    """Edit participant contact details and notes."""
    registration = state.get_registration_by_id(registration_id)
    if registration is None:
        return OperationResult.fail('Registration not found', RegistrationError.NOT_FOUND)

    changes = {key: value for key, value in (payload or {}).items() if key in EDITABLE_FIELDS}
    if not changes:
        return OperationResult.ok(registration)

    merged = {key: registration.get(key) for key in EDITABLE_FIELDS}
    merged.update(changes)
    try:
        cleaned = validate_payload(RegistrationForm, merged)
    except ValidationError as e:
        return validation_failure(e)

    data = {key: cleaned.get(key) for key in changes}
    return state.update_registration(registration_id, data)


def delete_registration(state, registration_id):
    if state.get_registration_by_id(registration_id) is None:
        return OperationResult.fail('Registration not found', RegistrationError.NOT_FOUND)

    result = state.delete_registration(registration_id)
    if result.success:
        logger.info(f"Registration {registration_id} deleted")
    return result
