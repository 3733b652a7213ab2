# services/training_state.py
"""
In-memory view of the portal collections for one request.

Mutations go through the store first; the local collection changes only when
the store reports success, so a failed write leaves the state untouched.
"""

import logging

from training_portal.services.store import Store
from training_portal.utils.errors import OperationResult

logger = logging.getLogger('training_state')

COLLECTIONS = ('categories', 'trainings', 'registrations', 'resources', 'training_updates')


class TrainingState:
    """Categories, trainings, registrations, resources and the activity feed."""

    def __init__(self, store=None, feed_limit=50, recommended_limit=4):
        self.store = store or Store(feed_limit=feed_limit)
        self.feed_limit = feed_limit
        self.recommended_limit = recommended_limit
        self.is_loaded = False
        self.load_error = None
        self._clear()

    def _clear(self):
        self.categories = []
        self.trainings = []
        self.registrations = []
        self.resources = []
        self.training_updates = []

    def load(self):
        """Fetch every collection. Any failure leaves all collections empty."""
        loaded = {}
        for name in COLLECTIONS:
            result = getattr(self.store, name).list()
            if not result.success:
                logger.error(f"Failed to load {name}: {result.error}")
                self._clear()
                self.is_loaded = False
                self.load_error = result.error
                return False
            loaded[name] = result.data

        for name, records in loaded.items():
            setattr(self, name, records)
        self.is_loaded = True
        self.load_error = None
        return True

    def refresh(self):
        return self.load()

    # ------------------------------------------------------------------
    # Generic merge helpers
    # ------------------------------------------------------------------

    def _add(self, name, data) -> OperationResult:
        result = getattr(self.store, name).create(data)
        if result.success:
            getattr(self, name).append(result.data)
        return result

    def _update(self, name, record_id, data) -> OperationResult:
        result = getattr(self.store, name).update(record_id, data)
        if result.success:
            setattr(self, name, [
                result.data if item['id'] == record_id else item for item in getattr(self, name)
            ])
        return result

    def _delete(self, name, record_id) -> OperationResult:
        result = getattr(self.store, name).delete(record_id)
        if result.success:
            setattr(self, name, [item for item in getattr(self, name) if item['id'] != record_id])
        return result

    # Categories
    def add_category(self, data):
        return self._add('categories', data)

    def update_category(self, category_id, data):
        return self._update('categories', category_id, data)

    def delete_category(self, category_id):
        return self._delete('categories', category_id)

    # Trainings
    def add_training(self, data):
        return self._add('trainings', data)

    def update_training(self, training_id, data):
        return self._update('trainings', training_id, data)

    def delete_training(self, training_id):
        return self._delete('trainings', training_id)

    # Registrations
    def add_registration(self, data):
        return self._add('registrations', data)

    def update_registration(self, registration_id, data):
        return self._update('registrations', registration_id, data)

    def delete_registration(self, registration_id):
        return self._delete('registrations', registration_id)

    # Resources
    def add_resource(self, data):
        return self._add('resources', data)

    def update_resource(self, resource_id, data):
        return self._update('resources', resource_id, data)

    def delete_resource(self, resource_id):
        return self._delete('resources', resource_id)

    def add_training_update(self, data):
        """Record an activity entry; the feed keeps only the newest entries."""
        result = self.store.training_updates.create(data)
        if result.success:
            self.training_updates = [result.data] + self.training_updates[:self.feed_limit - 1]
        return result

    # ------------------------------------------------------------------
    # Getters
    # ------------------------------------------------------------------

    @staticmethod
    def _find(items, record_id):
        return next((item for item in items if item['id'] == record_id), None)

    def get_category_by_id(self, category_id):
        return self._find(self.categories, category_id)

    def get_training_by_id(self, training_id):
        return self._find(self.trainings, training_id)

    def get_registration_by_id(self, registration_id):
        return self._find(self.registrations, registration_id)

    def get_resource_by_id(self, resource_id):
        return self._find(self.resources, resource_id)

    def get_registrations_by_training_id(self, training_id):
        return [r for r in self.registrations if r['training_id'] == training_id]

    def get_featured_trainings(self):
        featured = [t for t in self.trainings if t.get('is_featured')]
        return sorted(featured, key=lambda t: t.get('display_order') or 0)

    def get_recommended_trainings(self):
        return [t for t in self.trainings if t.get('is_recommended')][:self.recommended_limit]
