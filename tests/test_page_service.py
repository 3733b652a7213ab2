import pytest

from training_portal.services.page_service import (
    PageService, BLOCK_TYPES, create_default_block, generate_block_id, validate_blocks
)
from training_portal.utils.errors import RegistrationError, ValidationError


def _heading(text='Need help?'):
    return {'id': generate_block_id(), 'type': 'heading', 'level': 2, 'content': text, 'align': 'left'}


class TestBlocks:

    def test_default_block_for_every_type(self):
        for block_type in BLOCK_TYPES:
            block = create_default_block(block_type)
            assert block['type'] == block_type
            assert block['id'].startswith('block-')

    def test_unknown_type_falls_back_to_paragraph(self):
        block = create_default_block('carousel')
        assert block['type'] == 'paragraph'
        assert block['content'] == ''

    def test_row_has_two_empty_columns(self):
        row = create_default_block('row')
        assert len(row['columns']) == 2
        assert all(column['blocks'] == [] for column in row['columns'])

    def test_ids_are_unique(self):
        assert len({generate_block_id() for _ in range(50)}) == 50

    def test_nested_blocks_are_validated(self):
        row = create_default_block('row')
        row['columns'][0]['blocks'].append({'id': 'x', 'type': 'video'})

        with pytest.raises(ValidationError) as exc:
            validate_blocks([row])

        assert 'columns[0].blocks[0]' in exc.value.message

    def test_blocks_must_be_a_list(self):
        with pytest.raises(ValidationError):
            validate_blocks({'type': 'heading'})


class TestPageService:

    def test_first_save_creates_page(self, app):
        result = PageService.save_page('support', [_heading()])

        assert result.success
        assert result.data['title'] == 'Support'
        assert result.data['is_published'] is False
        assert PageService.list_versions(result.data['id']) == []

    def test_each_save_snapshots_previous_blocks(self, app):
        first = PageService.save_page('support', [_heading('v1')]).data
        PageService.save_page('support', [_heading('v2')])
        PageService.save_page('support', [_heading('v3')], publish=True)

        versions = PageService.list_versions(first['id'])

        assert [v['version_number'] for v in versions] == [2, 1]
        assert versions[0]['blocks'][0]['content'] == 'v2'
        assert versions[0]['notes'] == 'Auto-save before publish'
        assert versions[1]['notes'] == 'Auto-save before save'

        page = PageService.get_page('support')
        assert page['blocks'][0]['content'] == 'v3'
        assert page['is_published'] is True
        assert page['published_at'] is not None

    def test_invalid_blocks_are_rejected(self, app):
        result = PageService.save_page('support', [{'type': 'heading'}])

        assert result.error_code == RegistrationError.VALIDATION_ERROR
        assert PageService.get_page('support') is None

    def test_restore_version(self, app):
        page = PageService.save_page('support', [_heading('original')]).data
        PageService.save_page('support', [_heading('edited')])
        version = PageService.list_versions(page['id'])[0]

        result = PageService.restore_version('support', version['id'])

        assert result.success
        assert result.data['blocks'][0]['content'] == 'original'
        # Restoring is itself a save, so the edited blocks are kept as a version
        assert len(PageService.list_versions(page['id'])) == 2

    def test_restore_unknown_version(self, app):
        PageService.save_page('support', [])

        assert PageService.restore_version('support', 'missing').error_code == RegistrationError.NOT_FOUND
        assert PageService.restore_version('faq', 'missing').error_code == RegistrationError.NOT_FOUND

    def test_version_listing_limit(self, app):
        page = PageService.save_page('support', []).data
        for i in range(4):
            PageService.save_page('support', [_heading(str(i))])

        assert len(PageService.list_versions(page['id'], limit=2)) == 2
