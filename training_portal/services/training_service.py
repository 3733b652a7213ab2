# services/training_service.py
"""
Training create/update/delete with auto-close and activity feed entries.
"""

import logging

from training_portal.models.training_update import TrainingUpdateType
from training_portal.utils.capacity import apply_auto_close, capacity_level, CapacityLevel
from training_portal.utils.errors import OperationResult, RegistrationError, ValidationError
from training_portal.utils.validation import TrainingForm, validate_payload

logger = logging.getLogger('training_service')

CAPACITY_UPDATE_TYPES = {
    CapacityLevel.LOW: TrainingUpdateType.CAPACITY_LOW,
    CapacityLevel.FULL: TrainingUpdateType.CAPACITY_FULL,
}


def record_activity(state, update_type, training, message, previous_value=None, new_value=None):
    """Add a feed entry. A failed entry is logged and never fails the caller."""
    result = state.add_training_update({
        'type': update_type,
        'training_id': training['id'],
        'training_name': training['name'],
        'message': message,
        'previous_value': previous_value,
        'new_value': new_value,
    })
    if not result.success:
        logger.warning(f"Failed to record {update_type} for training {training['id']}: {result.error}")
    return result


def record_capacity_change(state, before, after):
    """Add a capacity_low/capacity_full entry when the capacity level worsened into one of them."""
    if after is None:
        return None

    previous_level = capacity_level(before) if before else CapacityLevel.OK
    new_level = capacity_level(after)
    if new_level == previous_level or new_level not in CAPACITY_UPDATE_TYPES:
        return None

    if new_level == CapacityLevel.FULL:
        message = 'Training is fully booked'
    else:
        message = f"Only {after.get('available_slots')} slots left"
    return record_activity(state, CAPACITY_UPDATE_TYPES[new_level], after, message,
                           previous_value=previous_level, new_value=new_level)


def _validate_attachments(attachments):
    if not isinstance(attachments, list):
        raise ValidationError('Attachments must be a list')
    for attachment in attachments:
        if not isinstance(attachment, dict) or not attachment.get('name') or not attachment.get('file_url'):
            raise ValidationError('Each attachment needs a name and a file URL')
    return attachments


def save_training(state, payload, training_id=None):
    """Create a training, or update training_id when given."""
    payload = payload or {}
    existing = None
    if training_id:
        existing = state.get_training_by_id(training_id)
        if existing is None:
            return OperationResult.fail('Training not found', RegistrationError.NOT_FOUND)

    merged = dict(existing or {})
    merged.update(payload)

    try:
        data = validate_payload(TrainingForm, merged)
        if 'attachments' in payload:
            data['attachments'] = _validate_attachments(payload['attachments'])
    except ValidationError as e:
        return OperationResult.fail(e.message, RegistrationError.VALIDATION_ERROR,
                                    {'fields': e.field_errors})

    data = apply_auto_close(data)

    if existing is None:
        result = state.add_training(data)
        if not result.success:
            logger.error(f"Failed to create training {data.get('name')}: {result.error}")
            return result
        logger.info(f"Training created: {result.data['name']} ({result.data['id']})")
        record_activity(state, TrainingUpdateType.TRAINING_ADDED, result.data, 'New training added')
    else:
        result = state.update_training(training_id, data)
        if not result.success:
            logger.error(f"Failed to update training {training_id}: {result.error}")
            return result
        logger.info(f"Training updated: {result.data['name']} ({training_id})")
        if existing['status'] != result.data['status']:
            record_activity(state, TrainingUpdateType.STATUS_CHANGED, result.data, 'Status changed',
                            previous_value=existing['status'], new_value=result.data['status'])
        else:
            record_activity(state, TrainingUpdateType.TRAINING_MODIFIED, result.data, 'Training details updated')

    record_capacity_change(state, existing, result.data)
    return result


def delete_training(state, training_id, cascade=False):
    """
    Remove a training. Its registrations are kept unless cascade is set,
    in which case they are deleted first.
    """
    training = state.get_training_by_id(training_id)
    if training is None:
        return OperationResult.fail('Training not found', RegistrationError.NOT_FOUND)

    if cascade:
        for registration in state.get_registrations_by_training_id(training_id):
            removed = state.delete_registration(registration['id'])
            if not removed.success:
                logger.error(f"Cascade delete stopped at registration {registration['id']}: {removed.error}")
                return removed

    result = state.delete_training(training_id)
    if not result.success:
        logger.error(f"Failed to delete training {training_id}: {result.error}")
        return result

    logger.info(f"Training deleted: {training['name']} ({training_id}), cascade={cascade}")
    record_activity(state, TrainingUpdateType.TRAINING_REMOVED, training, 'Training removed')
    return result


def sync_registration_flags(state, dry_run=False):
    """
    Apply the auto-close rule to every stored training.

    Returns the trainings that were (or, on a dry run, would be) closed.
    """
    affected = []
    for training in list(state.trainings):
        closed = apply_auto_close(training)
        if closed['is_registration_open'] == training['is_registration_open']:
            continue
        affected.append(training)
        if dry_run:
            continue
        result = state.update_training(training['id'], {'is_registration_open': False})
        if not result.success:
            logger.error(f"Failed to close registration for {training['id']}: {result.error}")
    return affected
