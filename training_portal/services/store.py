# services/store.py
"""
Persistence boundary for the portal collections.

Every operation returns an OperationResult; database errors are rolled back,
logged and reported, never raised to the caller.
"""

import logging
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError

from training_portal.extensions import db
from training_portal.models import (
    Category, Training, TrainingAttachment, Registration, Resource, TrainingUpdate
)
from training_portal.utils.errors import OperationResult, RegistrationError

logger = logging.getLogger('store')


class ModelStore:
    """list/get/create/update/delete for one model, returning plain records."""

    def __init__(self, model, order_by=None, limit=None):
        self.model = model
        self.order_by = order_by
        self.limit = limit
        self.name = model.__tablename__

    def _query(self):
        query = self.model.query
        if self.order_by is not None:
            query = query.order_by(self.order_by)
        if self.limit:
            query = query.limit(self.limit)
        return query

    def _apply(self, instance, data):
        instance.from_dict(data)

    def _not_found(self, record_id):
        return OperationResult.fail(
            f"{self.model.__name__} {record_id} not found", RegistrationError.NOT_FOUND
        )

    def _store_error(self, action, error):
        db.session.rollback()
        logger.error(f"Failed to {action} {self.name}: {str(error)}")
        return OperationResult.fail(str(error), RegistrationError.STORE_ERROR)

    def list(self):
        try:
            return OperationResult.ok([item.to_record() for item in self._query().all()])
        except SQLAlchemyError as e:
            return self._store_error('list', e)

    def get(self, record_id):
        try:
            instance = db.session.get(self.model, record_id)
            if instance is None:
                return self._not_found(record_id)
            return OperationResult.ok(instance.to_record())
        except SQLAlchemyError as e:
            return self._store_error('fetch', e)

    def create(self, data):
        try:
            instance = self.model()
            self._apply(instance, data)
            db.session.add(instance)
            db.session.commit()
            logger.debug(f"Created {self.name} {instance.id}")
            return OperationResult.ok(instance.to_record())
        except SQLAlchemyError as e:
            return self._store_error('create', e)

    def update(self, record_id, data):
        try:
            instance = db.session.get(self.model, record_id)
            if instance is None:
                return self._not_found(record_id)
            self._apply(instance, data)
            db.session.commit()
            logger.debug(f"Updated {self.name} {record_id}")
            return OperationResult.ok(instance.to_record())
        except SQLAlchemyError as e:
            return self._store_error('update', e)

    def delete(self, record_id):
        try:
            instance = db.session.get(self.model, record_id)
            if instance is None:
                return self._not_found(record_id)
            db.session.delete(instance)
            db.session.commit()
            logger.debug(f"Deleted {self.name} {record_id}")
            return OperationResult.ok(record_id)
        except SQLAlchemyError as e:
            return self._store_error('delete', e)


class TrainingStore(ModelStore):
    """Trainings carry their attachment list, replaced wholesale on every write."""

    def _apply(self, instance, data):
        data = dict(data)
        attachments = data.pop('attachments', None)
        instance.from_dict(data)
        if attachments is not None:
            instance.attachments = [self._build_attachment(item) for item in attachments]

    @staticmethod
    def _build_attachment(item):
        uploaded_at = item.get('uploaded_at')
        if isinstance(uploaded_at, str):
            uploaded_at = datetime.fromisoformat(uploaded_at)
        return TrainingAttachment(
            name=item['name'],
            file_url=item['file_url'],
            file_path=item.get('file_path'),
            file_type=item.get('file_type'),
            uploaded_at=uploaded_at or datetime.now()
        )


class Store:
    """The collections the portal reads and writes."""

    def __init__(self, feed_limit=50):
        self.categories = ModelStore(Category, order_by=Category.name)
        self.trainings = TrainingStore(Training, order_by=Training.date)
        self.registrations = ModelStore(Registration, order_by=Registration.registered_at.desc())
        self.resources = ModelStore(Resource, order_by=Resource.title)
        self.training_updates = ModelStore(TrainingUpdate, order_by=TrainingUpdate.timestamp.desc(),
                                           limit=feed_limit)
