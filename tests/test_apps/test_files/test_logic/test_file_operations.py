"""Tests for file operations business logic."""

import re

import pytest
from django.core.exceptions import ValidationError
from django.core.files.uploadedfile import SimpleUploadedFile

from server.apps.files.exceptions import LabelGenerationError
from server.apps.files.logic.file_operations import (
    delete_file,
    file_name_exists,
    get_file_tags,
    list_files,
    normalize_tags,
    search_project_files,
    update_file,
    upload_file,
)
from server.apps.files.models import File, Section, Tag

_FOLDER = '[0-9a-f]{32}'


@pytest.mark.django_db
class TestUploadFile:
    """Tests for upload_file."""

    def test_upload_layout(self, stored_file, app_root):
        """Test payload and label share an opaque file folder."""
        pattern = f'uploads/{"a" * 32}/{"b" * 32}/({_FOLDER})/diagram.png'
        match = re.fullmatch(pattern, stored_file.path_file.name)

        assert match
        assert match.group(1) == stored_file.folder_name
        assert stored_file.path_pdf.name == (
            f'uploads/{"a" * 32}/{"b" * 32}/{stored_file.folder_name}/diagram_qr.pdf'
        )
        payload = app_root / stored_file.path_file.name
        assert payload.read_bytes() == b'fake png bytes'
        label = app_root / stored_file.path_pdf.name
        assert label.read_bytes().startswith(b'%PDF')

    def test_upload_sets_download_url_and_tags(self, stored_file):
        """Test the label URL points at the file id and tags are stored."""
        assert stored_file.url_qr_code == (
            f'http://files.test/api/uploadFile/download-file/{stored_file.id}'
        )
        assert stored_file.tag_names() == ['infra', 'v1']

    def test_upload_by_names(self, section):
        """Test the section can be addressed by project and section name."""
        file_instance = upload_file(
            'notes',
            SimpleUploadedFile('notes.txt', b'n'),
            project_name='Server',
            section_name='Rack1',
        )

        assert file_instance.section == section

    def test_upload_unknown_section(self, db):
        """Test uploading into a missing section fails without rows."""
        with pytest.raises(Section.DoesNotExist):
            upload_file(
                'x',
                SimpleUploadedFile('x.txt', b'x'),
                project_name='Nope',
                section_name='Nope',
            )

        assert File.objects.count() == 0

    def test_upload_requires_name_and_payload(self, section, uploaded_file):
        """Test blank names and missing payloads are rejected."""
        with pytest.raises(ValidationError):
            upload_file('  ', uploaded_file, section_id=section.id)
        with pytest.raises(ValidationError):
            upload_file('diagram', None, section_id=section.id)

    def test_same_display_name_in_two_sections(
        self,
        section,
        project,
        uploaded_file,
    ):
        """Test identical names in different sections never collide."""
        other = Section.objects.create(
            project=project,
            section_name='Rack2',
            folder_name='d' * 32,
        )
        first = upload_file('diagram', uploaded_file, section_id=section.id)
        second = upload_file(
            'diagram',
            SimpleUploadedFile('diagram.png', b'other'),
            section_id=other.id,
        )

        assert first.path_file.name != second.path_file.name
        assert first.folder_name != second.folder_name

    def test_upload_rolls_back_payload_on_db_failure(
        self, section, uploaded_file, app_root, monkeypatch,
    ):
        """Test a failed insert removes the written payload."""
        def failing_create(**kwargs):
            raise RuntimeError('insert failed')

        monkeypatch.setattr(File.objects, 'create', failing_create)

        with pytest.raises(RuntimeError):
            upload_file('diagram', uploaded_file, section_id=section.id)

        section_dir = app_root / 'uploads' / ('a' * 32) / ('b' * 32)
        assert list(section_dir.iterdir()) == []

    def test_label_failure_keeps_row(self, section, uploaded_file, monkeypatch):
        """Test a rendering failure keeps the row without a label."""
        def failing_render(*args, **kwargs):
            raise LabelGenerationError('boom')

        monkeypatch.setattr(
            'server.apps.files.logic.label_operations.render_label',
            failing_render,
        )

        with pytest.raises(LabelGenerationError):
            upload_file('diagram', uploaded_file, section_id=section.id)

        file_instance = File.objects.get()
        assert file_instance.url_qr_code is None
        assert not file_instance.path_pdf


@pytest.mark.django_db
class TestUpdateFile:
    """Tests for update_file."""

    def test_rename_rewrites_label_only(self, stored_file, app_root):
        """Test renaming keeps folder, payload, tags and URL."""
        old_pdf = stored_file.path_pdf.name

        updated = update_file(stored_file.id, display_name='topology')

        assert updated.folder_name == stored_file.folder_name
        assert updated.path_file.name == stored_file.path_file.name
        assert updated.url_qr_code == stored_file.url_qr_code
        assert updated.tag_names() == ['infra', 'v1']
        assert updated.path_pdf.name.endswith('/topology_qr.pdf')
        assert (app_root / updated.path_pdf.name).exists()
        assert not (app_root / old_pdf).exists()

    def test_replace_content(self, stored_file, app_root):
        """Test new content replaces the old payload in the same folder."""
        updated = update_file(
            stored_file.id,
            new_content=SimpleUploadedFile('diagram-v2.png', b'v2'),
        )

        assert updated.path_file.name.endswith(
            f'{stored_file.folder_name}/diagram-v2.png',
        )
        assert (app_root / updated.path_file.name).read_bytes() == b'v2'
        assert not (app_root / stored_file.path_file.name).exists()

    def test_replace_tags(self, stored_file):
        """Test tags are replaced by the given list."""
        update_file(stored_file.id, tags=['infra', 'v2'])

        assert get_file_tags(stored_file.id) == ['infra', 'v2']

    def test_blank_name_rejected(self, stored_file):
        """Test an update cannot blank the display name."""
        with pytest.raises(ValidationError):
            update_file(stored_file.id, display_name=' ')

    def test_missing_file(self, db):
        """Test updating a missing file."""
        with pytest.raises(File.DoesNotExist):
            update_file(99999, display_name='x')


@pytest.mark.django_db
class TestDeleteFile:
    """Tests for delete_file."""

    def test_delete_removes_row_and_folder(self, stored_file, app_root):
        """Test payload, label, folder and tags disappear."""
        file_dir = (app_root / stored_file.path_file.name).parent

        delete_file(stored_file.id)

        assert not File.objects.filter(id=stored_file.id).exists()
        assert not Tag.objects.exists()
        assert not file_dir.exists()
        assert file_dir.parent.is_dir()

    def test_delete_with_missing_payload(self, stored_file, app_root):
        """Test a payload already gone does not block the delete."""
        (app_root / stored_file.path_file.name).unlink()

        delete_file(stored_file.id)

        assert not File.objects.filter(id=stored_file.id).exists()

    def test_delete_not_found(self, db):
        """Test deleting non-existent file."""
        with pytest.raises(File.DoesNotExist):
            delete_file(99999)


@pytest.mark.django_db
class TestQueries:
    """Tests for listing and search."""

    def test_list_files_with_sizes(self, stored_file, section, app_root):
        """Test listings report on-disk sizes, 0 when missing."""
        listings = list_files(section.id)

        assert [listing.size for listing in listings] == [len(b'fake png bytes')]

        (app_root / stored_file.path_file.name).unlink()
        assert list_files(section.id)[0].size == 0

    def test_file_name_exists(self, stored_file, section):
        """Test name checks are scoped to the section."""
        assert file_name_exists(section.id, 'diagram')
        assert not file_name_exists(section.id, 'other')

    @pytest.mark.parametrize('term', ['DIAG', 'rack', 'infra'])
    def test_search_matches_name_section_and_tag(self, stored_file, project, term):
        """Test search looks at file, section and tag names."""
        results = list(search_project_files(project.id, term))

        assert results == [stored_file]

    def test_search_without_match(self, stored_file, project):
        """Test unrelated terms find nothing."""
        assert not search_project_files(project.id, 'zzz').exists()


def test_normalize_tags():
    """Test tags are stripped and deduplicated."""
    assert normalize_tags(['infra', ' v1 ', '', 'v1']) == ['infra', 'v1']
    assert normalize_tags(None) == []


def test_normalize_tags_splits_only_strings():
    """Test a comma string is split but list elements are kept whole."""
    assert normalize_tags('a, b,,a') == ['a', 'b']
    assert normalize_tags(['a,b', 'c']) == ['a,b', 'c']
