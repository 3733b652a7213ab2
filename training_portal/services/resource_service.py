# services/resource_service.py
import logging

from training_portal.utils.errors import OperationResult, RegistrationError, ValidationError
from training_portal.utils.validation import ResourceForm, validate_payload

logger = logging.getLogger('resource_service')


def save_resource(state, payload, resource_id=None):
    payload = payload or {}
    existing = None
    if resource_id:
        existing = state.get_resource_by_id(resource_id)
        if existing is None:
            return OperationResult.fail('Resource not found', RegistrationError.NOT_FOUND)

    merged = dict(existing or {})
    merged.update(payload or {})
    try:
        data = validate_payload(ResourceForm, merged)
    except ValidationError as e:
        return OperationResult.fail(e.message, RegistrationError.VALIDATION_ERROR, {'fields': e.field_errors})

    # Clearing a link or file reference must reach the store as None
    for key in ('file_url', 'file_path', 'external_link'):
        if key in payload and not payload[key]:
            data[key] = None

    if existing is None:
        result = state.add_resource(data)
    else:
        result = state.update_resource(resource_id, data)

    if result.success:
        logger.info(f"Resource saved: {result.data['title']} ({result.data['id']})")
    return result


def delete_resource(state, resource_id):
    if state.get_resource_by_id(resource_id) is None:
        return OperationResult.fail('Resource not found', RegistrationError.NOT_FOUND)

    result = state.delete_resource(resource_id)
    if result.success:
        logger.info(f"Resource deleted: {resource_id}")
    return result
