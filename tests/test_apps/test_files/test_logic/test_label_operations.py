"""Tests for label generation business logic."""

import fitz
import pytest

from server.apps.files.exceptions import (
    LabelGenerationError,
    StorageOperationError,
)
from server.apps.files.infrastructure.storage import FileStorage
from server.apps.files.logic.file_operations import update_file
from server.apps.files.logic.label_operations import (
    regenerate_file_label,
    regenerate_labels,
    write_label,
)
from server.apps.files.models import File


@pytest.mark.django_db
class TestWriteLabel:
    """Tests for write_label."""

    def test_label_reflects_current_names(self, stored_file, app_root):
        """Test the label text follows the current display names."""
        section = stored_file.section
        section.section_name = 'Rack9'
        section.save()

        write_label(stored_file)

        with fitz.open(str(app_root / stored_file.path_pdf.name)) as document:
            text = document[0].get_text()
        assert 'Server / Rack9 / diagram' in text
        assert stored_file.url_qr_code in text

    def test_stored_url_is_reused(self, stored_file, settings):
        """Test a changed base URL does not alter existing labels."""
        settings.SERVER_BASE_URL = 'http://elsewhere.test'

        write_label(stored_file)

        assert File.objects.get(id=stored_file.id).url_qr_code.startswith(
            'http://files.test/',
        )

    def test_single_label_per_folder(self, stored_file, app_root):
        """Test rewriting leaves exactly one PDF in the file folder."""
        write_label(stored_file)
        write_label(stored_file)

        file_dir = (app_root / stored_file.path_file.name).parent
        assert sorted(path.name for path in file_dir.iterdir()) == [
            'diagram.png',
            'diagram_qr.pdf',
        ]

    def test_render_failure_keeps_previous_label(
        self, stored_file, app_root, monkeypatch,
    ):
        """Test nothing is written when rendering fails."""
        def failing_render(*args, **kwargs):
            raise LabelGenerationError('boom')

        monkeypatch.setattr(
            'server.apps.files.logic.label_operations.render_label',
            failing_render,
        )

        with pytest.raises(LabelGenerationError):
            write_label(stored_file)

        assert (app_root / stored_file.path_pdf.name).exists()

    def test_failed_save_keeps_reachable_label(
        self, stored_file, app_root, monkeypatch,
    ):
        """Test a label write failure never strands path_pdf."""
        original_save = FileStorage.save

        def failing_save(storage, name, content, max_length=None):
            if '_qr.pdf' in name:
                raise OSError('No space left on device')
            return original_save(storage, name, content, max_length)

        monkeypatch.setattr(FileStorage, 'save', failing_save)

        with pytest.raises(OSError):
            update_file(stored_file.id, display_name='renamed')

        row = File.objects.get(id=stored_file.id)
        assert row.name == 'renamed'
        assert row.path_pdf.name == stored_file.path_pdf.name
        assert (app_root / row.path_pdf.name).exists()

    def test_failed_swap_leaves_no_temporary_file(
        self, stored_file, app_root, monkeypatch,
    ):
        """Test the temporary PDF is removed when the rename fails."""
        def failing_replace(storage, source, destination):
            raise StorageOperationError('replace', destination)

        monkeypatch.setattr(FileStorage, 'replace_file', failing_replace)
        label = app_root / stored_file.path_pdf.name
        previous = label.read_bytes()

        with pytest.raises(StorageOperationError):
            write_label(stored_file)

        assert label.read_bytes() == previous
        assert sorted(path.name for path in label.parent.iterdir()) == [
            'diagram.png',
            'diagram_qr.pdf',
        ]

    def test_rename_removes_previous_label(self, stored_file, app_root):
        """Test a new display name leaves only the new label behind."""
        old_label = app_root / stored_file.path_pdf.name
        stored_file.name = 'renamed'
        stored_file.save()

        write_label(stored_file)

        assert not old_label.exists()
        assert stored_file.path_pdf.name.endswith('/renamed_qr.pdf')
        assert (app_root / stored_file.path_pdf.name).exists()


@pytest.mark.django_db
def test_regenerate_file_label_not_found():
    """Test regenerating the label of a missing file."""
    with pytest.raises(File.DoesNotExist):
        regenerate_file_label(99999)


@pytest.mark.django_db
def test_regenerate_labels_counts_failures(stored_file):
    """Test one failing file is counted, not raised."""
    broken = File.objects.select_related('section__project').get(id=stored_file.id)
    broken.folder_name = '..'

    succeeded, failed = regenerate_labels([stored_file, broken])

    assert (succeeded, failed) == (1, 1)
