from training_portal.models import EnrollmentStatus, Registration
from training_portal.services.page_service import PageService
from training_portal.services.store import ModelStore
from training_portal.utils.errors import OperationResult, RegistrationError


def _training_json(category_id, **overrides):
    payload = {
        'name': 'Presentation Skills',
        'description': 'Structure and delivery',
        'category_id': category_id,
        'date': '2030-06-01T09:00:00',
        'time_from': '13:00',
        'time_to': '16:30',
        'available_slots': 8,
        'max_registrations': 8,
        'is_registration_open': True,
    }
    payload.update(overrides)
    return payload


class TestAccess:

    def test_health(self, client):
        response = client.get('/health')

        assert response.status_code == 200
        assert response.get_json()['status'] == 'ok'

    def test_database_health(self, client):
        assert client.get('/health/database').get_json()['status'] == 'healthy'

    def test_api_requires_login(self, client):
        response = client.get('/api/trainings')

        assert response.status_code == 401
        assert response.get_json() == {'error': 'Authentication required'}

    def test_admin_requires_login(self, client):
        assert client.get('/admin/enrollments').status_code == 401

    def test_admin_requires_admin_role(self, user_client):
        response = user_client.get('/admin/enrollments')

        assert response.status_code == 403
        assert response.get_json() == {'error': 'Admin access required'}

    def test_bad_password(self, client, regular_user):
        response = client.post('/auth/login', json={'email': regular_user.email, 'password': 'nope'})

        assert response.status_code == 401
        assert response.get_json()['error'] == 'Invalid email or password'

    def test_login_validation(self, client):
        response = client.post('/auth/login', json={'email': 'not-an-email', 'password': 'x'})

        assert response.status_code == 400

    def test_me_and_logout(self, user_client):
        me = user_client.get('/auth/me').get_json()
        assert me['authenticated'] is True
        assert me['is_admin'] is False

        assert user_client.post('/auth/logout').status_code == 200
        assert user_client.get('/auth/me').get_json() == {'authenticated': False}

    def test_unknown_route(self, client):
        assert client.get('/nowhere').status_code == 404


class TestAdminCatalogue:

    def test_create_and_list_training(self, admin_client):
        category = admin_client.post('/admin/categories', json={'name': 'Soft Skills', 'color': '#336699'})
        assert category.status_code == 201
        category_id = category.get_json()['data']['id']

        response = admin_client.post('/admin/trainings', json=_training_json(category_id))

        assert response.status_code == 201
        training = response.get_json()['data']
        assert training['date'] == '2030-06-01T09:00:00'

        listed = admin_client.get('/admin/trainings').get_json()
        assert [t['name'] for t in listed['trainings']] == ['Presentation Skills']
        assert listed['trainings'][0]['capacity']['fill_rate'] == 0

        updates = admin_client.get('/admin/updates').get_json()['updates']
        assert updates[0]['type'] == 'training_added'

    def test_invalid_training(self, admin_client):
        response = admin_client.post('/admin/trainings', json=_training_json('cat', available_slots=9))

        assert response.status_code == 400
        body = response.get_json()
        assert body['error'] == 'Available slots cannot exceed max registrations'
        assert body['error_code'] == 'validation_error'

    def test_bad_sort_field(self, admin_client):
        assert admin_client.get('/admin/trainings?sort=colour').status_code == 400

    def test_delete_missing_training(self, admin_client):
        assert admin_client.delete('/admin/trainings/missing').status_code == 404

    def test_dashboard(self, admin_client, make_training):
        make_training(available_slots=5, max_registrations=10)

        body = admin_client.get('/admin/dashboard').get_json()

        assert body['capacity']['fill_rate'] == 50
        assert body['trainings']['total'] == 1


class TestParticipantApi:

    def test_register_for_training(self, user_client, make_training, regular_user):
        training = make_training()

        response = user_client.post(f"/api/trainings/{training['id']}/register", json={})

        assert response.status_code == 201
        mine = user_client.get('/api/my-registrations').get_json()['registrations']
        assert [r['training_id'] for r in mine] == [training['id']]

        detail = user_client.get(f"/api/trainings/{training['id']}").get_json()['training']
        assert detail['available_slots'] == 9
        assert detail['time_range'] == '9:00 AM - 12:00 PM'

    def test_closed_training(self, user_client, make_training):
        training = make_training(is_registration_open=False)

        response = user_client.post(f"/api/trainings/{training['id']}/register", json={})

        assert response.status_code == 400
        assert response.get_json()['error_code'] == 'registration_closed'

    def test_support_page_hidden_until_published(self, user_client, app):
        assert user_client.get('/api/support').status_code == 404

        PageService.save_page('support', [], publish=True)

        assert user_client.get('/api/support').status_code == 200


class TestAdminEnrollments:

    def test_list_with_filters(self, admin_client, make_training, make_registration):
        training = make_training()
        make_registration(training)
        make_registration(training, participant_email='ola@example.com', participant_name='Ola Nordmann',
                          status=EnrollmentStatus.CONFIRMED)

        body = admin_client.get('/admin/enrollments?status=confirmed').get_json()

        assert body['count'] == 1
        assert body['enrollments'][0]['participant_email'] == 'ola@example.com'
        assert body['kpis']['total'] == 2

    def test_detail_lists_next_statuses(self, admin_client, make_training, make_registration):
        registration = make_registration(make_training(), status=EnrollmentStatus.ON_HOLD)

        body = admin_client.get(f"/admin/enrollments/{registration['id']}").get_json()

        assert body['allowed_statuses'] == ['confirmed', 'cancelled']
        assert body['allowed_attendance'] == ['pending']

    def test_invalid_status_change(self, admin_client, make_training, make_registration):
        registration = make_registration(make_training(), status=EnrollmentStatus.CONFIRMED)

        response = admin_client.post(f"/admin/enrollments/{registration['id']}/status",
                                     json={'status': 'registered'})

        assert response.status_code == 400
        assert response.get_json()['error_code'] == 'invalid_transition'

    def test_cancel_needs_confirmation(self, admin_client, make_training, make_registration):
        registration = make_registration(make_training())
        url = f"/admin/enrollments/{registration['id']}/status"

        assert admin_client.post(url, json={'status': 'cancelled'}).status_code == 409

        response = admin_client.post(url, json={'status': 'cancelled', 'confirmed': True, 'reason': 'Left company'})
        assert response.status_code == 200
        assert response.get_json()['data']['status'] == 'cancelled'

    def test_delete_needs_confirmation(self, admin_client, make_training, make_registration):
        registration = make_registration(make_training())
        url = f"/admin/enrollments/{registration['id']}"

        assert admin_client.delete(url).status_code == 409
        assert admin_client.delete(f"{url}?confirmed=true").status_code == 200
        assert admin_client.get(url).status_code == 404

    def test_bulk(self, admin_client, make_training, make_registration):
        training = make_training()
        ids = [
            make_registration(training)['id'],
            make_registration(training, participant_email='kim@example.com')['id'],
        ]

        pending = admin_client.post('/admin/enrollments/bulk', json={'action': 'delete', 'ids': ids})
        assert pending.status_code == 409
        assert pending.get_json()['requires_confirmation'] is True

        response = admin_client.post('/admin/enrollments/bulk', json={'action': 'confirmed', 'ids': ids})
        body = response.get_json()
        assert response.status_code == 200
        assert body['success_count'] == 2
        assert body['skipped'] == 0

    def test_bulk_needs_ids(self, admin_client):
        assert admin_client.post('/admin/enrollments/bulk', json={'action': 'confirmed'}).status_code == 400

    def test_bulk_unknown_action(self, admin_client):
        response = admin_client.post('/admin/enrollments/bulk', json={'action': 'archive', 'ids': ['x']})
        assert response.status_code == 400

    def test_bulk_rejects_non_string_ids(self, admin_client):
        response = admin_client.post('/admin/enrollments/bulk', json={'action': 'confirmed', 'ids': [{'a': 1}]})

        assert response.status_code == 400
        assert response.get_json()['error'] == 'Enrollment ids must be strings'

    def test_csv_export(self, admin_client, make_training, make_registration):
        make_registration(make_training())

        response = admin_client.get('/admin/enrollments/export?format=csv')

        assert response.status_code == 200
        assert response.mimetype == 'text/csv'
        assert 'attachment' in response.headers['Content-Disposition']
        assert 'jane@example.com' in response.get_data(as_text=True)

    def test_export_without_data(self, admin_client):
        response = admin_client.get('/admin/enrollments/export?format=csv')

        assert response.status_code == 400
        assert response.get_json()['error'] == 'No data to export'


class TestAdminUsers:

    def test_change_role(self, admin_client, regular_user):
        response = admin_client.put(f'/admin/users/{regular_user.id}/role', json={'role': 'admin'})

        assert response.status_code == 200
        assert response.get_json()['user']['role'] == 'admin'

    def test_invalid_role(self, admin_client, regular_user):
        response = admin_client.put(f'/admin/users/{regular_user.id}/role', json={'role': 'owner'})

        assert response.status_code == 400

    def test_list_users_hides_password_hash(self, admin_client):
        users = admin_client.get('/admin/users').get_json()['users']

        assert users[0]['email'] == 'admin@example.com'
        assert 'password_hash' not in users[0]


class TestStoreFailure:

    @staticmethod
    def _fail_registrations(monkeypatch):
        original_list = ModelStore.list

        def failing_list(self):
            if self.model is Registration:
                return OperationResult.fail('database is locked', RegistrationError.STORE_ERROR)
            return original_list(self)

        monkeypatch.setattr(ModelStore, 'list', failing_list)

    def test_list_reports_the_store_error(self, admin_client, monkeypatch):
        self._fail_registrations(monkeypatch)

        for url in ('/admin/enrollments', '/admin/trainings'):
            response = admin_client.get(url)

            assert response.status_code == 500
            assert response.get_json() == {
                'success': False, 'error': 'database is locked', 'error_code': 'store_error'
            }

    def test_bulk_does_not_report_success(self, admin_client, monkeypatch):
        self._fail_registrations(monkeypatch)

        response = admin_client.post('/admin/enrollments/bulk', json={'action': 'confirmed', 'ids': ['x']})

        assert response.status_code == 500
        assert response.get_json()['error_code'] == 'store_error'

    def test_participant_api_reports_the_store_error(self, user_client, monkeypatch):
        self._fail_registrations(monkeypatch)

        response = user_client.get('/api/trainings')

        assert response.status_code == 500
        assert response.get_json()['error'] == 'database is locked'
