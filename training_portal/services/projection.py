# services/projection.py
"""
Read-only projections over the state collections: filtering, sorting and KPIs
for the admin enrollment and training lists.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from training_portal.models.registration import EnrollmentStatus, AttendanceStatus
from training_portal.models.training import TrainingStatus
from training_portal.utils.dates import to_datetime

ALL = 'all'

REGISTRATION_SORT_FIELDS = ('participant_name', 'registered_at', 'status', 'attendance_status')
TRAINING_SORT_FIELDS = ('name', 'date', 'status', 'available_slots')
SORT_DIRECTIONS = ('asc', 'desc')


def _is_set(value):
    return bool(value) and value != ALL


@dataclass
class RegistrationFilters:
    search: Optional[str] = None
    status: Optional[str] = ALL
    attendance: Optional[str] = ALL
    training_id: Optional[str] = ALL
    category_id: Optional[str] = ALL

    @classmethod
    def from_args(cls, args):
        """Build filters from request query arguments."""
        return cls(
            search=args.get('search'),
            status=args.get('status', ALL),
            attendance=args.get('attendance', ALL),
            training_id=args.get('training_id', ALL),
            category_id=args.get('category_id', ALL),
        )


def filter_registrations(registrations, filters, trainings):
    result = list(registrations)

    if filters.search:
        needle = filters.search.lower()
        result = [
            r for r in result
            if needle in (r.get('participant_name') or '').lower()
            or needle in (r.get('participant_email') or '').lower()
        ]

    if _is_set(filters.status):
        result = [r for r in result if r.get('status') == filters.status]

    if _is_set(filters.attendance):
        result = [r for r in result if r.get('attendance_status') == filters.attendance]

    if _is_set(filters.training_id):
        result = [r for r in result if r.get('training_id') == filters.training_id]

    if _is_set(filters.category_id):
        training_ids = {t['id'] for t in trainings if t.get('category_id') == filters.category_id}
        result = [r for r in result if r.get('training_id') in training_ids]

    return result


def _text_key(value):
    return (value or '').casefold()


def _date_key(value):
    return to_datetime(value) or datetime.min


REGISTRATION_SORT_KEYS = {
    'participant_name': lambda r: _text_key(r.get('participant_name')),
    'registered_at': lambda r: _date_key(r.get('registered_at')),
    'status': lambda r: _text_key(r.get('status')),
    'attendance_status': lambda r: _text_key(r.get('attendance_status')),
}

TRAINING_SORT_KEYS = {
    'name': lambda t: _text_key(t.get('name')),
    'date': lambda t: _date_key(t.get('date')),
    'status': lambda t: _text_key(t.get('status')),
    'available_slots': lambda t: t.get('available_slots') or 0,
}


def _sorted(items, keys, field, direction):
    if field not in keys:
        raise ValueError(f"Unsupported sort field: {field}")
    if direction not in SORT_DIRECTIONS:
        raise ValueError(f"Unsupported sort direction: {direction}")
    # sorted() stays stable with reverse=True, so ties keep their input order
    return sorted(items, key=keys[field], reverse=direction == 'desc')


def sort_registrations(registrations, field='registered_at', direction='desc'):
    return _sorted(registrations, REGISTRATION_SORT_KEYS, field, direction)


def project_registrations(registrations, filters, trainings, sort_field='registered_at', sort_direction='desc'):
    return sort_registrations(filter_registrations(registrations, filters, trainings), sort_field, sort_direction)


def enrollment_kpis(registrations, training_id=None):
    """Status and attendance counts, optionally scoped to one training."""
    target = registrations
    if _is_set(training_id):
        target = [r for r in registrations if r.get('training_id') == training_id]

    kpis = {'total': len(target)}
    for status in EnrollmentStatus.ALL:
        kpis[status] = sum(1 for r in target if r.get('status') == status)
    for attendance in (AttendanceStatus.ATTENDED, AttendanceStatus.NO_SHOW):
        kpis[attendance] = sum(1 for r in target if r.get('attendance_status') == attendance)
    return kpis


def project_trainings(trainings, search=None, category_id=ALL, status=ALL,
                      sort_field='date', sort_direction='desc'):
    result = list(trainings)

    if search:
        needle = search.lower()
        result = [
            t for t in result
            if any(needle in (t.get(key) or '').lower()
                   for key in ('name', 'description', 'speakers', 'location'))
        ]

    if _is_set(category_id):
        result = [t for t in result if t.get('category_id') == category_id]

    if _is_set(status):
        result = [t for t in result if t.get('status') == status]

    return _sorted(result, TRAINING_SORT_KEYS, sort_field, sort_direction)


def training_kpis(trainings):
    return {
        'total': len(trainings),
        'featured': sum(1 for t in trainings if t.get('is_featured')),
        'recommended': sum(1 for t in trainings if t.get('is_recommended')),
        'open': sum(1 for t in trainings if t.get('is_registration_open')),
        'scheduled': sum(1 for t in trainings if t.get('status') == TrainingStatus.SCHEDULED),
    }
