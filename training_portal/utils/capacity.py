# utils/capacity.py
"""Slot accounting for trainings. Inputs are plain training records (dicts)."""

from training_portal.models.training import TrainingStatus


class CapacityLevel:
    OK = 'ok'
    LOW = 'low'
    FULL = 'full'


LOW_CAPACITY_THRESHOLD = 90


def enrolled_count(max_registrations, available_slots):
    return (max_registrations or 0) - (available_slots or 0)


def fill_rate(max_registrations, available_slots):
    """Percentage of capacity consumed, rounded half up. Zero capacity reads as 0%."""
    if not max_registrations or max_registrations <= 0:
        return 0
    ratio = enrolled_count(max_registrations, available_slots) / max_registrations * 100
    # int(x + 0.5) matches Math.round for the non-negative values seen here
    return int(ratio + 0.5) if ratio >= 0 else -int(-ratio + 0.5)


def apply_auto_close(training_data):
    """
    Close registration when no slots remain.

    One-directional: a closed training is never reopened here.
    """
    result = dict(training_data)
    slots = result.get('available_slots')
    if slots is not None and slots <= 0:
        result['is_registration_open'] = False
    return result


def can_register(training):
    """Whether a participant may self-register for this training right now."""
    if not training:
        return False
    is_open = training.get('is_registration_open')
    if is_open is None:
        is_open = True
    return (
        is_open
        and training.get('status') not in TrainingStatus.CLOSED
        and (training.get('available_slots') or 0) > 0
    )


def capacity_level(training):
    if (training.get('available_slots') or 0) <= 0:
        return CapacityLevel.FULL
    if fill_rate(training.get('max_registrations'), training.get('available_slots')) >= LOW_CAPACITY_THRESHOLD:
        return CapacityLevel.LOW
    return CapacityLevel.OK


def capacity_info(training):
    max_registrations = training.get('max_registrations') or 0
    available_slots = training.get('available_slots') or 0
    return {
        'enrolled': enrolled_count(max_registrations, available_slots),
        'capacity': max_registrations,
        'available_slots': available_slots,
        'fill_rate': fill_rate(max_registrations, available_slots),
        'level': capacity_level(training),
        'can_register': can_register(training),
    }


def capacity_summary(trainings):
    total_capacity = sum(t.get('max_registrations') or 0 for t in trainings)
    total_enrolled = sum(
        enrolled_count(t.get('max_registrations'), t.get('available_slots')) for t in trainings
    )
    return {
        'total_capacity': total_capacity,
        'total_enrolled': total_enrolled,
        'fill_rate': fill_rate(total_capacity, total_capacity - total_enrolled),
        'open_for_registration': sum(1 for t in trainings if t.get('is_registration_open')),
    }
