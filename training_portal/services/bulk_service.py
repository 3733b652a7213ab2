# services/bulk_service.py
"""Bulk actions over a selection of enrollments."""

import logging
from datetime import datetime
from typing import NamedTuple

from training_portal.models.registration import EnrollmentStatus, AttendanceStatus
from training_portal.services import enrollment_rules
from training_portal.services.registration_service import policy_enabled

logger = logging.getLogger('bulk_service')


class BulkAction:
    NOTIFY = 'notify'
    DELETE = 'delete'

    ALL = EnrollmentStatus.ALL + AttendanceStatus.ALL + (NOTIFY, DELETE)

    # Actions that must be explicitly confirmed before anything is written
    DESTRUCTIVE = (DELETE, EnrollmentStatus.CANCELLED, EnrollmentStatus.ON_HOLD)


class BulkResult(NamedTuple):
    success_count: int
    requested: int
    skipped: int
    requires_confirmation: bool = False

    def to_dict(self):
        return self._asdict()


class BulkActionCoordinator:
    """
    Applies one action to many enrollments, one store write per item.

    Items that are missing, violate the rules or fail to save are skipped;
    a single failure never aborts the batch.
    """

    def __init__(self, state, enforce_transitions=None, enforce_attendance=None):
        self.state = state
        self.enforce_transitions = policy_enabled('ENFORCE_STATUS_TRANSITIONS', enforce_transitions)
        self.enforce_attendance = policy_enabled('ENFORCE_ATTENDANCE_ELIGIBILITY', enforce_attendance)
        self._selected = {}

    @property
    def selected_ids(self):
        return list(self._selected)

    def select(self, ids):
        for registration_id in ids:
            self._selected[registration_id] = True

    def deselect(self, ids):
        for registration_id in ids:
            self._selected.pop(registration_id, None)

    def clear_selection(self):
        self._selected.clear()

    def apply(self, action, ids=None, confirmed=False, reason=None):
        if action not in BulkAction.ALL:
            raise ValueError(f"Unknown bulk action: {action}")

        target_ids = list(dict.fromkeys(ids)) if ids is not None else self.selected_ids
        if not target_ids:
            return BulkResult(0, 0, 0)

        if action in BulkAction.DESTRUCTIVE and not confirmed:
            # Nothing written; the selection stays for the confirmed retry
            return BulkResult(0, len(target_ids), 0, requires_confirmation=True)

        success_count = 0
        for registration_id in target_ids:
            registration = self.state.get_registration_by_id(registration_id)
            if registration is None:
                continue

            result = self._apply_one(action, registration, reason)
            if result is None:
                continue
            if result.success:
                success_count += 1
            else:
                logger.warning(f"Bulk {action} failed for registration {registration_id}: {result.error}")

        self.clear_selection()
        skipped = len(target_ids) - success_count
        logger.info(f"Bulk {action}: {success_count} updated, {skipped} skipped")
        return BulkResult(success_count, len(target_ids), skipped)

    def _apply_one(self, action, registration, reason):
        """Write one item. Returns None when the item is skipped by a rule."""
        registration_id = registration['id']

        if action == BulkAction.DELETE:
            return self.state.delete_registration(registration_id)

        if action == BulkAction.NOTIFY:
            return self.state.update_registration(registration_id, {'notified_at': datetime.now()})

        if action in EnrollmentStatus.ALL:
            if self.enforce_transitions and \
                    not enrollment_rules.is_valid_transition(registration['status'], action):
                return None
            notes = enrollment_rules.append_reason_to_notes(registration.get('notes'), action, reason)
            return self.state.update_registration(registration_id, {'status': action, 'notes': notes})

        training = self.state.get_training_by_id(registration['training_id'])
        if self.enforce_attendance and \
                not enrollment_rules.can_mark_attendance(registration['status'], action, training):
            return None
        return self.state.update_registration(registration_id, {'attendance_status': action})
