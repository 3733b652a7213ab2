# services/page_service.py
"""
Support page content: block trees with a version snapshot before every save.
"""

import logging
import time
import uuid
from copy import deepcopy
from datetime import datetime

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from training_portal.extensions import db
from training_portal.models.page import PageContent, PageVersion
from training_portal.utils.errors import OperationResult, RegistrationError, ValidationError

logger = logging.getLogger('page_service')

BLOCK_TYPES = ('heading', 'paragraph', 'row', 'link', 'divider', 'spacer', 'icon-card')


def generate_block_id():
    return f"block-{int(time.time() * 1000)}-{uuid.uuid4().hex[:6]}"


def create_default_block(block_type):
    """Editor defaults for a freshly inserted block. Unknown types get an empty paragraph."""
    block_id = generate_block_id()

    if block_type == 'heading':
        return {'id': block_id, 'type': 'heading', 'level': 2, 'content': 'New Heading', 'align': 'left'}
    if block_type == 'paragraph':
        return {'id': block_id, 'type': 'paragraph', 'content': 'Enter your text here...', 'align': 'left'}
    if block_type == 'link':
        return {'id': block_id, 'type': 'link', 'text': 'Click here', 'url': '#', 'style': 'button',
                'align': 'left'}
    if block_type == 'row':
        return {
            'id': block_id,
            'type': 'row',
            'columns': [
                {'id': generate_block_id(), 'blocks': []},
                {'id': generate_block_id(), 'blocks': []},
            ],
            'gap': 'md',
        }
    if block_type == 'divider':
        return {'id': block_id, 'type': 'divider'}
    if block_type == 'spacer':
        return {'id': block_id, 'type': 'spacer', 'height': 'md'}
    if block_type == 'icon-card':
        return {
            'id': block_id,
            'type': 'icon-card',
            'icon': 'HelpCircle',
            'title': 'Card Title',
            'description': 'Card description goes here...',
        }
    return {'id': block_id, 'type': 'paragraph', 'content': '', 'align': 'left'}


def validate_blocks(blocks, path='blocks'):
    """Structural check only: every block is a dict with an id and a known type."""
    if not isinstance(blocks, list):
        raise ValidationError(f"{path} must be a list")

    for index, block in enumerate(blocks):
        where = f"{path}[{index}]"
        if not isinstance(block, dict):
            raise ValidationError(f"{where} must be an object")
        if not block.get('id'):
            raise ValidationError(f"{where} is missing an id")
        if block.get('type') not in BLOCK_TYPES:
            raise ValidationError(f"{where} has unknown type {block.get('type')!r}")

        if block['type'] == 'row':
            columns = block.get('columns')
            if not isinstance(columns, list):
                raise ValidationError(f"{where}.columns must be a list")
            for col_index, column in enumerate(columns):
                if not isinstance(column, dict) or not column.get('id'):
                    raise ValidationError(f"{where}.columns[{col_index}] is missing an id")
                validate_blocks(column.get('blocks', []), f"{where}.columns[{col_index}].blocks")
    return blocks


class PageService:
    """Service class for CMS page content and version history."""

    @staticmethod
    def _page_dict(page):
        result = page.to_dict()
        result['blocks'] = page.blocks or []
        return result

    @staticmethod
    def get_page(slug):
        page = PageContent.query.filter_by(page_slug=slug).first()
        return PageService._page_dict(page) if page else None

    @staticmethod
    def _next_version_number(page_id):
        latest = PageVersion.query.filter_by(page_id=page_id) \
            .order_by(PageVersion.version_number.desc()).first()
        return (latest.version_number if latest else 0) + 1

    @staticmethod
    def save_page(slug, blocks, publish=False):
        """
        Save a page's blocks, creating the page on first save.

        The current blocks of an existing page are snapshotted as a new
        version before they are replaced.
        """
        try:
            validate_blocks(blocks)
        except ValidationError as e:
            return OperationResult.fail(e.message, RegistrationError.VALIDATION_ERROR)

        try:
            page = PageContent.query.filter_by(page_slug=slug).first()
            now = datetime.now()

            if page is not None:
                db.session.add(PageVersion(
                    page_id=page.id,
                    version_number=PageService._next_version_number(page.id),
                    blocks=deepcopy(page.blocks or []),
                    notes=f"Auto-save before {'publish' if publish else 'save'}"
                ))
                page.blocks = deepcopy(blocks)
                page.updated_at = now
                if publish:
                    page.is_published = True
                    page.published_at = now
            else:
                page = PageContent(
                    page_slug=slug,
                    title=slug[:1].upper() + slug[1:],
                    blocks=deepcopy(blocks),
                    is_published=publish,
                    published_at=now if publish else None
                )
                db.session.add(page)

            db.session.commit()
            logger.info(f"Page '{slug}' saved (publish={publish})")
            return OperationResult.ok(PageService._page_dict(page))

        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Failed to save page '{slug}': {str(e)}")
            return OperationResult.fail(str(e), RegistrationError.STORE_ERROR)

    @staticmethod
    def list_versions(page_id, limit=None):
        limit = limit or current_app.config.get('PAGE_VERSION_LIMIT', 50)
        versions = PageVersion.query.filter_by(page_id=page_id) \
            .order_by(PageVersion.version_number.desc()).limit(limit).all()
        return [version.to_dict() for version in versions]

    @staticmethod
    def restore_version(slug, version_id):
        """Write an old version's blocks back as an unpublished save."""
        page = PageContent.query.filter_by(page_slug=slug).first()
        if page is None:
            return OperationResult.fail('Page not found', RegistrationError.NOT_FOUND)

        version = db.session.get(PageVersion, version_id)
        if version is None or version.page_id != page.id:
            return OperationResult.fail('Version not found', RegistrationError.NOT_FOUND)

        logger.info(f"Restoring page '{slug}' to version {version.version_number}")
        return PageService.save_page(slug, deepcopy(version.blocks or []), publish=False)
