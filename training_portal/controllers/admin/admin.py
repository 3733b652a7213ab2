# controllers/admin/admin.py
"""
Admin catalogue routes: categories, trainings, resources, activity feed,
dashboard figures and the support page editor.
"""

from flask import jsonify, request, current_app
from flask_login import current_user

from training_portal.controllers.helpers import (
    get_training_state, get_payload, parse_bool, result_response, serialize
)
from training_portal.services import category_service, resource_service, training_service
from training_portal.services.page_service import PageService, create_default_block, BLOCK_TYPES
from training_portal.services.projection import project_trainings, training_kpis, enrollment_kpis
from training_portal.utils.auth import admin_required
from training_portal.utils.capacity import capacity_summary, capacity_info

from . import admin_bp


@admin_bp.route('/dashboard', methods=['GET'])
@admin_required
def dashboard():
    """Headline figures for the admin overview."""
    state = get_training_state()
    return jsonify({
        'trainings': training_kpis(state.trainings),
        'capacity': capacity_summary(state.trainings),
        'enrollments': enrollment_kpis(state.registrations),
    })


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------

@admin_bp.route('/categories', methods=['GET'])
@admin_required
def list_categories():
    state = get_training_state()
    return jsonify({'categories': serialize(state.categories)})


@admin_bp.route('/categories', methods=['POST'])
@admin_required
def create_category():
    result = category_service.save_category(get_training_state(), get_payload())
    return result_response(result, success_status=201)


@admin_bp.route('/categories/<category_id>', methods=['PUT'])
@admin_required
def update_category(category_id):
    result = category_service.save_category(get_training_state(), get_payload(), category_id)
    return result_response(result)


@admin_bp.route('/categories/<category_id>', methods=['DELETE'])
@admin_required
def delete_category(category_id):
    result = category_service.delete_category(get_training_state(), category_id)
    return result_response(result)


# ---------------------------------------------------------------------------
# Trainings
# ---------------------------------------------------------------------------

@admin_bp.route('/trainings', methods=['GET'])
@admin_required
def list_trainings():
    """Admin training list with search, filters and sorting."""
    state = get_training_state()
    try:
        trainings = project_trainings(
            state.trainings,
            search=request.args.get('search'),
            category_id=request.args.get('category_id', 'all'),
            status=request.args.get('status', 'all'),
            sort_field=request.args.get('sort', 'date'),
            sort_direction=request.args.get('direction', 'desc')
        )
    except ValueError as e:
        return jsonify({'error': str(e)}), 400

    items = []
    for training in trainings:
        item = dict(training)
        item['capacity'] = capacity_info(training)
        items.append(item)

    return jsonify({
        'trainings': serialize(items),
        'kpis': training_kpis(state.trainings),
    })


@admin_bp.route('/trainings', methods=['POST'])
@admin_required
def create_training():
    result = training_service.save_training(get_training_state(), get_payload())
    return result_response(result, success_status=201)


@admin_bp.route('/trainings/<training_id>', methods=['GET'])
@admin_required
def get_training(training_id):
    state = get_training_state()
    training = state.get_training_by_id(training_id)
    if training is None:
        return jsonify({'error': 'Training not found'}), 404

    item = dict(training)
    item['capacity'] = capacity_info(training)
    item['registrations'] = state.get_registrations_by_training_id(training_id)
    return jsonify({'training': serialize(item)})


@admin_bp.route('/trainings/<training_id>', methods=['PUT'])
@admin_required
def update_training(training_id):
    result = training_service.save_training(get_training_state(), get_payload(), training_id)
    return result_response(result)


@admin_bp.route('/trainings/<training_id>', methods=['DELETE'])
@admin_required
def delete_training(training_id):
    cascade = parse_bool(request.args.get('cascade', False))
    result = training_service.delete_training(get_training_state(), training_id, cascade=cascade)
    if result.success:
        current_app.logger.info(f"Training {training_id} deleted by {current_user.email}")
    return result_response(result)


# ---------------------------------------------------------------------------
# Resources
# ---------------------------------------------------------------------------

@admin_bp.route('/resources', methods=['GET'])
@admin_required
def list_resources():
    state = get_training_state()
    return jsonify({'resources': serialize(state.resources)})


@admin_bp.route('/resources', methods=['POST'])
@admin_required
def create_resource():
    result = resource_service.save_resource(get_training_state(), get_payload())
    return result_response(result, success_status=201)


@admin_bp.route('/resources/<resource_id>', methods=['PUT'])
@admin_required
def update_resource(resource_id):
    result = resource_service.save_resource(get_training_state(), get_payload(), resource_id)
    return result_response(result)


@admin_bp.route('/resources/<resource_id>', methods=['DELETE'])
@admin_required
def delete_resource(resource_id):
    result = resource_service.delete_resource(get_training_state(), resource_id)
    return result_response(result)


@admin_bp.route('/updates', methods=['GET'])
@admin_required
def training_updates():
    state = get_training_state()
    return jsonify({'updates': serialize(state.training_updates)})


# ---------------------------------------------------------------------------
# Support page editor
# ---------------------------------------------------------------------------

@admin_bp.route('/pages/<slug>', methods=['GET'])
@admin_required
def get_page(slug):
    page = PageService.get_page(slug)
    if page is None:
        return jsonify({'error': 'Page not found'}), 404
    return jsonify({'page': page})


@admin_bp.route('/pages/<slug>', methods=['PUT'])
@admin_required
def save_page(slug):
    payload = get_payload()
    result = PageService.save_page(slug, payload.get('blocks', []), publish=parse_bool(payload.get('publish', False)))
    return result_response(result)


@admin_bp.route('/pages/<slug>/versions', methods=['GET'])
@admin_required
def list_page_versions(slug):
    page = PageService.get_page(slug)
    if page is None:
        return jsonify({'error': 'Page not found'}), 404
    return jsonify({'versions': PageService.list_versions(page['id'])})


@admin_bp.route('/pages/<slug>/versions/<version_id>/restore', methods=['POST'])
@admin_required
def restore_page_version(slug, version_id):
    result = PageService.restore_version(slug, version_id)
    return result_response(result)


@admin_bp.route('/pages/blocks/<block_type>', methods=['GET'])
@admin_required
def default_block(block_type):
    if block_type not in BLOCK_TYPES:
        return jsonify({'error': f'Unknown block type: {block_type}'}), 400
    return jsonify({'block': create_default_block(block_type)})
