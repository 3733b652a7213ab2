# controllers/api.py
"""
Participant-facing JSON API. Every route requires a signed-in user.
"""

from flask import jsonify, request, current_app
from flask_login import login_required, current_user

from training_portal.controllers.helpers import (
    get_training_state, get_payload, result_response, serialize
)
from training_portal.services import registration_service
from training_portal.services.page_service import PageService
from training_portal.utils.capacity import capacity_info
from training_portal.utils.dates import format_time_range

from . import api_bp


def _training_view(training):
    view = dict(training)
    view['capacity'] = capacity_info(training)
    view['time_range'] = format_time_range(training.get('time_from'), training.get('time_to'),
                                           training.get('duration'))
    return view


@api_bp.route('/categories', methods=['GET'])
@login_required
def list_categories():
    state = get_training_state()
    return jsonify({'categories': serialize(state.categories)})


@api_bp.route('/trainings', methods=['GET'])
@login_required
def list_trainings():
    state = get_training_state()
    trainings = state.trainings

    category_id = request.args.get('category_id')
    if category_id and category_id != 'all':
        trainings = [t for t in trainings if t.get('category_id') == category_id]

    return jsonify({'trainings': serialize([_training_view(t) for t in trainings])})


@api_bp.route('/trainings/featured', methods=['GET'])
@login_required
def featured_trainings():
    state = get_training_state()
    return jsonify({'trainings': serialize([_training_view(t) for t in state.get_featured_trainings()])})


@api_bp.route('/trainings/recommended', methods=['GET'])
@login_required
def recommended_trainings():
    state = get_training_state()
    return jsonify({'trainings': serialize([_training_view(t) for t in state.get_recommended_trainings()])})


@api_bp.route('/trainings/<training_id>', methods=['GET'])
@login_required
def training_detail(training_id):
    state = get_training_state()
    training = state.get_training_by_id(training_id)
    if training is None:
        return jsonify({'error': 'Training not found'}), 404

    view = _training_view(training)
    view['category'] = state.get_category_by_id(training.get('category_id'))
    return jsonify({'training': serialize(view)})


@api_bp.route('/trainings/<training_id>/register', methods=['POST'])
@login_required
def register_for_training(training_id):
    state = get_training_state()
    result = registration_service.self_register(state, training_id, get_payload(), user=current_user)
    if result.success:
        current_app.logger.info(f"{current_user.email} registered for training {training_id}")
    return result_response(result, success_status=201)


@api_bp.route('/my-registrations', methods=['GET'])
@login_required
def my_registrations():
    state = get_training_state()
    email = (current_user.email or '').lower()
    registrations = [
        r for r in state.registrations
        if r.get('user_id') == current_user.id or (r.get('participant_email') or '').lower() == email
    ]
    return jsonify({'registrations': serialize(registrations)})


@api_bp.route('/resources', methods=['GET'])
@login_required
def list_resources():
    state = get_training_state()
    return jsonify({'resources': serialize(state.resources)})


@api_bp.route('/updates', methods=['GET'])
@login_required
def training_updates():
    state = get_training_state()
    limit = current_app.config.get('ACTIVITY_FEED_LIMIT', 50)
    return jsonify({'updates': serialize(state.training_updates[:limit])})


@api_bp.route('/support', methods=['GET'])
@login_required
def support_page():
    """Published support content; admins also see drafts."""
    page = PageService.get_page(current_app.config.get('SUPPORT_PAGE_SLUG', 'support'))
    if page is None or (not page['is_published'] and not current_user.is_admin):
        return jsonify({'error': 'Page not found'}), 404
    return jsonify({'page': page})
