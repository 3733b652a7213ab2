# services/category_service.py
import logging

from training_portal.utils.errors import OperationResult, RegistrationError, ValidationError
from training_portal.utils.validation import CategoryForm, validate_payload

logger = logging.getLogger('category_service')


def save_category(state, payload, category_id=None):
    existing = None
    if category_id:
        existing = state.get_category_by_id(category_id)
        if existing is None:
            return OperationResult.fail('Category not found', RegistrationError.NOT_FOUND)

    merged = dict(existing or {})
    merged.update(payload or {})
    try:
        data = validate_payload(CategoryForm, merged)
    except ValidationError as e:
        return OperationResult.fail(e.message, RegistrationError.VALIDATION_ERROR, {'fields': e.field_errors})

    if existing is None:
        result = state.add_category(data)
    else:
        result = state.update_category(category_id, data)

    if result.success:
        logger.info(f"Category saved: {result.data['name']} ({result.data['id']})")
    return result


def delete_category(state, category_id):
    """Trainings keep their (now dangling) category reference."""
    if state.get_category_by_id(category_id) is None:
        return OperationResult.fail('Category not found', RegistrationError.NOT_FOUND)

    result = state.delete_category(category_id)
    if result.success:
        logger.info(f"Category deleted: {category_id}")
    return result
