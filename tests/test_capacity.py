from training_portal.models import TrainingStatus
from training_portal.utils.capacity import (
    enrolled_count, fill_rate, apply_auto_close, can_register, capacity_level, capacity_summary,
    capacity_info, CapacityLevel
)


def _training(**overrides):
    training = {
        'status': TrainingStatus.SCHEDULED,
        'available_slots': 5,
        'max_registrations': 10,
        'is_registration_open': True,
    }
    training.update(overrides)
    return training


def test_enrolled_count():
    assert enrolled_count(20, 5) == 15
    assert enrolled_count(10, 10) == 0


def test_fill_rate_rounds_half_up():
    assert fill_rate(20, 5) == 75
    assert fill_rate(3, 2) == 33
    assert fill_rate(8, 7) == 13
    assert fill_rate(10, 0) == 100


def test_fill_rate_with_zero_capacity():
    assert fill_rate(0, 0) == 0
    assert fill_rate(None, None) == 0


def test_auto_close_when_no_slots_left():
    training = _training(available_slots=0)
    closed = apply_auto_close(training)

    assert closed['is_registration_open'] is False
    assert training['is_registration_open'] is True


def test_auto_close_never_reopens():
    assert apply_auto_close(_training(is_registration_open=False))['is_registration_open'] is False
    assert apply_auto_close(_training())['is_registration_open'] is True


def test_can_register():
    assert can_register(_training())
    assert not can_register(_training(available_slots=0))
    assert not can_register(_training(is_registration_open=False))
    assert not can_register(None)
    for status in (TrainingStatus.COMPLETED, TrainingStatus.CANCELLED, TrainingStatus.ON_HOLD):
        assert not can_register(_training(status=status))
    for status in (TrainingStatus.RESCHEDULED, TrainingStatus.IN_PROGRESS):
        assert can_register(_training(status=status))


def test_capacity_level():
    assert capacity_level(_training(available_slots=0)) == CapacityLevel.FULL
    assert capacity_level(_training(available_slots=1)) == CapacityLevel.LOW
    assert capacity_level(_training(available_slots=5)) == CapacityLevel.OK


def test_capacity_summary():
    summary = capacity_summary([
        _training(available_slots=5, max_registrations=10),
        _training(available_slots=0, max_registrations=10, is_registration_open=False),
    ])

    assert summary['total_capacity'] == 20
    assert summary['total_enrolled'] == 15
    assert summary['fill_rate'] == 75
    assert summary['open_for_registration'] == 1


def test_capacity_summary_of_nothing():
    assert capacity_summary([])['fill_rate'] == 0


def test_capacity_info():
    info = capacity_info(_training(available_slots=2, max_registrations=8))
    assert info['enrolled'] == 6
    assert info['fill_rate'] == 75
    assert info['level'] == CapacityLevel.OK
    assert info['can_register'] is True
