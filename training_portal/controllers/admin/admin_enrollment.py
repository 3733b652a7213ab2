# controllers/admin/admin_enrollment.py
"""
Admin enrollment management: list with filters and KPIs, single-item edits,
bulk actions and export.
"""

from io import BytesIO

from flask import jsonify, request, current_app, send_file
from flask_login import current_user

from training_portal.controllers.helpers import (
    get_training_state, get_payload, parse_bool, result_response, serialize
)
from training_portal.services import enrollment_rules, registration_service
from training_portal.services.bulk_service import BulkActionCoordinator
from training_portal.services.projection import RegistrationFilters, project_registrations, enrollment_kpis
from training_portal.utils.auth import admin_required
from training_portal.utils.export_data import prepare_enrollment_export_rows, render_export

from . import admin_bp


@admin_bp.route('/enrollments', methods=['GET'])
@admin_required
def list_enrollments():
    state = get_training_state()
    filters = RegistrationFilters.from_args(request.args)
    try:
        registrations = project_registrations(
            state.registrations, filters, state.trainings,
            sort_field=request.args.get('sort', 'registered_at'),
            sort_direction=request.args.get('direction', 'desc')
        )
    except ValueError as e:
        return jsonify({'error': str(e)}), 400

    return jsonify({
        'enrollments': serialize(registrations),
        'kpis': enrollment_kpis(state.registrations, filters.training_id),
        'count': len(registrations),
    })


@admin_bp.route('/enrollments', methods=['POST'])
@admin_required
def add_enrollment():
    result = registration_service.add_participant(get_training_state(), get_payload())
    if result.success:
        current_app.logger.info(f"Participant {result.data['participant_email']} added by {current_user.email}")
    return result_response(result, success_status=201)


@admin_bp.route('/enrollments/<registration_id>', methods=['GET'])
@admin_required
def get_enrollment(registration_id):
    """Enrollment detail with the statuses the admin may pick next."""
    state = get_training_state()
    registration = state.get_registration_by_id(registration_id)
    if registration is None:
        return jsonify({'error': 'Registration not found'}), 404

    training = state.get_training_by_id(registration['training_id'])
    return jsonify({
        'enrollment': serialize(registration),
        'training': serialize(training),
        'allowed_statuses': enrollment_rules.allowed_next(registration['status']),
        'allowed_attendance': enrollment_rules.allowed_attendance(registration['status'], training),
    })


@admin_bp.route('/enrollments/<registration_id>', methods=['PUT'])
@admin_required
def update_enrollment(registration_id):
    result = registration_service.update_details(get_training_state(), registration_id, get_payload())
    return result_response(result)


@admin_bp.route('/enrollments/<registration_id>/status', methods=['POST'])
@admin_required
def change_enrollment_status(registration_id):
    payload = get_payload()
    result = registration_service.change_status(
        get_training_state(),
        registration_id,
        payload.get('status'),
        confirmed=parse_bool(payload.get('confirmed', False)),
        reason=payload.get('reason')
    )
    return result_response(result)


@admin_bp.route('/enrollments/<registration_id>/attendance', methods=['POST'])
@admin_required
def change_enrollment_attendance(registration_id):
    payload = get_payload()
    result = registration_service.change_attendance(
        get_training_state(), registration_id, payload.get('attendance_status')
    )
    return result_response(result)


@admin_bp.route('/enrollments/<registration_id>', methods=['DELETE'])
@admin_required
def delete_enrollment(registration_id):
    if not parse_bool(request.args.get('confirmed', False)):
        return jsonify({
            'success': False,
            'error': 'Deleting an enrollment requires confirmation',
            'error_code': 'confirmation_required'
        }), 409

    result = registration_service.delete_registration(get_training_state(), registration_id)
    return result_response(result)


@admin_bp.route('/enrollments/bulk', methods=['POST'])
@admin_required
def bulk_enrollment_action():
    """
    Apply one action to many enrollments.

    Body: {action, ids, confirmed, reason}. Destructive actions without
    confirmation return 409 and write nothing.
    """
    payload = get_payload()
    ids = payload.get('ids') or []
    if not isinstance(ids, list) or not ids:
        return jsonify({'success': False, 'error': 'Please select enrollments first'}), 400
    if not all(isinstance(registration_id, str) for registration_id in ids):
        return jsonify({'success': False, 'error': 'Enrollment ids must be strings'}), 400

    coordinator = BulkActionCoordinator(get_training_state())
    coordinator.select(ids)
    try:
        result = coordinator.apply(
            payload.get('action'),
            confirmed=parse_bool(payload.get('confirmed', False)),
            reason=payload.get('reason')
        )
    except ValueError as e:
        return jsonify({'success': False, 'error': str(e)}), 400

    if result.requires_confirmation:
        return jsonify({'success': False, 'error_code': 'confirmation_required', **result.to_dict()}), 409

    current_app.logger.info(
        f"Bulk {payload.get('action')} by {current_user.email}: {result.success_count}/{result.requested}"
    )
    return jsonify({'success': True, 'message': f"{result.success_count} enrollment(s) updated",
                    **result.to_dict()})


@admin_bp.route('/enrollments/export', methods=['GET'])
@admin_required
def export_enrollments():
    """
    Download enrollments as CSV or Excel.

    The current filters apply unless all=true.
    """
    state = get_training_state()
    fmt = request.args.get('format', 'xlsx')

    registrations = state.registrations
    if not parse_bool(request.args.get('all', False)):
        try:
            registrations = project_registrations(
                state.registrations, RegistrationFilters.from_args(request.args), state.trainings,
                sort_field=request.args.get('sort', 'registered_at'),
                sort_direction=request.args.get('direction', 'desc')
            )
        except ValueError as e:
            return jsonify({'error': str(e)}), 400

    rows = prepare_enrollment_export_rows(registrations, state.trainings, state.categories)
    try:
        content, filename, mimetype = render_export(rows, fmt)
    except ValueError as e:
        return jsonify({'error': str(e)}), 400

    current_app.logger.info(f"Exported {len(rows)} enrollments as {fmt}")
    return send_file(BytesIO(content), mimetype=mimetype, as_attachment=True, download_name=filename)
