from training_portal.models import EnrollmentStatus, AttendanceStatus, TrainingStatus, TrainingUpdateType
from training_portal.services import registration_service
from training_portal.utils.errors import RegistrationError


def _participant(**overrides):
    payload = {'participant_name': 'Sam Carter', 'participant_email': 'sam@example.com'}
    payload.update(overrides)
    return payload


class TestAddParticipant:

    def test_adds_and_consumes_a_slot(self, state, make_training):
        training = make_training(available_slots=5, max_registrations=5)

        result = registration_service.add_participant(state, _participant(training_id=training['id']))

        assert result.success
        assert result.data['status'] == EnrollmentStatus.REGISTERED
        assert result.data['attendance_status'] == AttendanceStatus.PENDING
        assert state.get_training_by_id(training['id'])['available_slots'] == 4
        assert len(state.get_registrations_by_training_id(training['id'])) == 1

    def test_training_is_required(self, state):
        result = registration_service.add_participant(state, _participant())

        assert result.error == 'Please select a training'
        assert result.error_code == RegistrationError.VALIDATION_ERROR

    def test_unknown_training(self, state):
        result = registration_service.add_participant(state, _participant(training_id='missing'))

        assert result.error == 'Training not found'
        assert result.error_code == RegistrationError.NOT_FOUND

    def test_invalid_details(self, state, make_training):
        training = make_training()
        result = registration_service.add_participant(
            state, _participant(training_id=training['id'], participant_email='sam-at-example')
        )

        assert result.error == 'Invalid email address'
        assert state.registrations == []

    def test_admin_may_add_to_a_closed_training(self, state, make_training):
        training = make_training(is_registration_open=False)

        assert registration_service.add_participant(state, _participant(training_id=training['id'])).success


class TestSelfRegister:

    def test_uses_the_signed_in_user(self, state, make_training, regular_user):
        training = make_training()

        result = registration_service.self_register(state, training['id'], {}, user=regular_user)

        assert result.success
        assert result.data['participant_email'] == regular_user.email
        assert result.data['participant_name'] == regular_user.name
        assert result.data['user_id'] == regular_user.id

    def test_external_training_returns_link(self, state, make_training):
        training = make_training(registration_method='external', external_link='https://events.example.com/x')

        result = registration_service.self_register(state, training['id'], _participant())

        assert result.error_code == RegistrationError.EXTERNAL_REGISTRATION
        assert result.details == {'external_link': 'https://events.example.com/x'}

    def test_closed_flag(self, state, make_training):
        training = make_training(is_registration_open=False)

        result = registration_service.self_register(state, training['id'], _participant())

        assert result.error_code == RegistrationError.REGISTRATION_CLOSED

    def test_finished_training(self, state, make_training):
        training = make_training(status=TrainingStatus.COMPLETED)

        result = registration_service.self_register(state, training['id'], _participant())

        assert result.error_code == RegistrationError.REGISTRATION_CLOSED

    def test_unknown_training(self, state):
        assert registration_service.self_register(state, 'missing', _participant()).error_code == \
            RegistrationError.NOT_FOUND


class TestCapacityFeed:

    def test_last_slot_records_capacity_full(self, state, make_training):
        training = make_training(available_slots=1, max_registrations=1)

        registration_service.add_participant(state, _participant(training_id=training['id']))

        latest = state.training_updates[0]
        assert latest['type'] == TrainingUpdateType.CAPACITY_FULL
        assert latest['message'] == 'Training is fully booked'
        assert latest['training_id'] == training['id']

    def test_low_capacity_entry(self, state, make_training):
        training = make_training(available_slots=2, max_registrations=10)

        registration_service.add_participant(state, _participant(training_id=training['id']))

        latest = state.training_updates[0]
        assert latest['type'] == TrainingUpdateType.CAPACITY_LOW
        assert latest['message'] == 'Only 1 slots left'

    def test_no_entry_while_capacity_is_fine(self, state, make_training):
        training = make_training(available_slots=10, max_registrations=10)

        registration_service.add_participant(state, _participant(training_id=training['id']))

        assert state.training_updates == []


class TestChangeStatus:

    def test_forward_transition(self, state, make_training, make_registration):
        registration = make_registration(make_training())

        result = registration_service.change_status(state, registration['id'], EnrollmentStatus.CONFIRMED)

        assert result.success
        assert state.get_registration_by_id(registration['id'])['status'] == EnrollmentStatus.CONFIRMED

    def test_backward_transition_is_rejected(self, state, make_training, make_registration):
        registration = make_registration(make_training(), status=EnrollmentStatus.CONFIRMED)

        result = registration_service.change_status(state, registration['id'], EnrollmentStatus.REGISTERED)

        assert result.error_code == RegistrationError.INVALID_TRANSITION
        assert result.details == {'allowed': ['cancelled']}
        assert state.get_registration_by_id(registration['id'])['status'] == EnrollmentStatus.CONFIRMED

    def test_enforcement_can_be_disabled(self, app, state, make_training, make_registration):
        registration = make_registration(make_training(), status=EnrollmentStatus.CONFIRMED)

        assert registration_service.change_status(state, registration['id'], EnrollmentStatus.REGISTERED,
                                                  enforce=False).success

        app.config['ENFORCE_STATUS_TRANSITIONS'] = False
        assert registration_service.change_status(state, registration['id'], EnrollmentStatus.HR_APPROVAL).success

    def test_cancel_requires_confirmation(self, state, make_training, make_registration):
        registration = make_registration(make_training())

        result = registration_service.change_status(state, registration['id'], EnrollmentStatus.CANCELLED)

        assert result.error_code == RegistrationError.CONFIRMATION_REQUIRED
        assert result.error == 'Changing status to "Cancelled" requires confirmation'
        assert state.get_registration_by_id(registration['id'])['status'] == EnrollmentStatus.REGISTERED

    def test_confirmed_cancel_appends_reason(self, state, make_training, make_registration):
        registration = make_registration(make_training(), notes='VIP')

        result = registration_service.change_status(state, registration['id'], EnrollmentStatus.CANCELLED,
                                                    confirmed=True, reason='Schedule conflict')

        assert result.success
        notes = result.data['notes']
        assert notes.startswith('VIP\n[')
        assert notes.endswith('] Cancelled: Schedule conflict')

    def test_unknown_status(self, state, make_training, make_registration):
        registration = make_registration(make_training())

        result = registration_service.change_status(state, registration['id'], 'archived')

        assert result.error_code == RegistrationError.VALIDATION_ERROR

    def test_missing_registration(self, state):
        assert registration_service.change_status(state, 'missing', EnrollmentStatus.CONFIRMED).error_code == \
            RegistrationError.NOT_FOUND


class TestChangeAttendance:

    def test_requires_confirmed_enrollment(self, state, make_training, make_registration):
        registration = make_registration(make_training())

        result = registration_service.change_attendance(state, registration['id'], AttendanceStatus.ATTENDED)

        assert result.error_code == RegistrationError.ATTENDANCE_NOT_ALLOWED

    def test_confirmed_enrollment(self, state, make_training, make_registration):
        registration = make_registration(make_training(), status=EnrollmentStatus.CONFIRMED)

        result = registration_service.change_attendance(state, registration['id'], AttendanceStatus.NO_SHOW)

        assert result.success
        assert result.data['attendance_status'] == AttendanceStatus.NO_SHOW

    def test_completed_training(self, state, make_training, make_registration):
        registration = make_registration(make_training(status=TrainingStatus.COMPLETED))

        assert registration_service.change_attendance(state, registration['id'], AttendanceStatus.ATTENDED).success

    def test_enforcement_can_be_disabled(self, state, make_training, make_registration):
        registration = make_registration(make_training())

        assert registration_service.change_attendance(state, registration['id'], AttendanceStatus.ATTENDED,
                                                      enforce=False).success


class TestUpdateAndDelete:

    def test_update_contact_details(self, state, make_training, make_registration):
        registration = make_registration(make_training())

        result = registration_service.update_details(state, registration['id'], {
            'participant_phone': '+1 555 0100',
            'status': EnrollmentStatus.CONFIRMED,
        })

        assert result.success
        assert result.data['participant_phone'] == '+1 555 0100'
        assert result.data['status'] == EnrollmentStatus.REGISTERED

    def test_invalid_edit_is_rejected(self, state, make_training, make_registration):
        registration = make_registration(make_training())

        result = registration_service.update_details(state, registration['id'], {'participant_email': 'nope'})

        assert result.error_code == RegistrationError.VALIDATION_ERROR
        assert state.get_registration_by_id(registration['id'])['participant_email'] == 'jane@example.com'

    def test_delete(self, state, make_training, make_registration):
        registration = make_registration(make_training())

        assert registration_service.delete_registration(state, registration['id']).success
        assert state.get_registration_by_id(registration['id']) is None
        assert registration_service.delete_registration(state, registration['id']).error_code == \
            RegistrationError.NOT_FOUND
