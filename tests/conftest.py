from datetime import datetime

import pytest

from training_portal import create_app
from training_portal.extensions import db as _db
from training_portal.models import User, RoleType, TrainingStatus, EnrollmentStatus, AttendanceStatus
from training_portal.services.training_state import TrainingState

ADMIN_PASSWORD = 'Admin-pass-1'
USER_PASSWORD = 'User-pass-1'


@pytest.fixture()
def app():
    app = create_app('testing')
    with app.app_context():
        _db.create_all()
        yield app
        _db.session.remove()
        _db.drop_all()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def state(app):
    state = TrainingState()
    state.load()
    return state


@pytest.fixture()
def make_category(state):
    def _make(name='Leadership', color='#1a2b3c'):
        result = state.add_category({'name': name, 'color': color})
        assert result.success, result.error
        return result.data
    return _make


@pytest.fixture()
def make_training(state, make_category):
    def _make(**overrides):
        data = {
            'name': 'Effective Communication',
            'description': 'Speaking and writing with clarity',
            'category_id': overrides.pop('category_id', None) or make_category()['id'],
            'date': datetime(2030, 1, 15, 9, 0),
            'time_from': '09:00',
            'time_to': '12:00',
            'status': TrainingStatus.SCHEDULED,
            'available_slots': 10,
            'max_registrations': 10,
            'is_registration_open': True,
        }
        data.update(overrides)
        result = state.add_training(data)
        assert result.success, result.error
        return result.data
    return _make


@pytest.fixture()
def make_registration(state):
    def _make(training, **overrides):
        data = {
            'training_id': training['id'],
            'participant_name': 'Jane Doe',
            'participant_email': 'jane@example.com',
            'status': EnrollmentStatus.REGISTERED,
            'attendance_status': AttendanceStatus.PENDING,
            'registered_at': datetime(2029, 12, 1, 10, 30),
        }
        data.update(overrides)
        result = state.add_registration(data)
        assert result.success, result.error
        return result.data
    return _make


def _create_user(email, name, role, password):
    user = User(email=email, name=name, role=role)
    user.set_password(password)
    _db.session.add(user)
    _db.session.commit()
    return user


@pytest.fixture()
def admin_user(app):
    return _create_user('admin@example.com', 'Ada Admin', RoleType.ADMIN, ADMIN_PASSWORD)


@pytest.fixture()
def regular_user(app):
    return _create_user('user@example.com', 'Uma User', RoleType.USER, USER_PASSWORD)


def _login(client, email, password):
    response = client.post('/auth/login', json={'email': email, 'password': password})
    assert response.status_code == 200, response.get_json()
    return client


@pytest.fixture()
def admin_client(client, admin_user):
    return _login(client, admin_user.email, ADMIN_PASSWORD)


@pytest.fixture()
def user_client(client, regular_user):
    return _login(client, regular_user.email, USER_PASSWORD)
