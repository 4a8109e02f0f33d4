"""Tests for zip exports."""

import zipfile
from io import BytesIO

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile

from server.apps.files.logic.export_operations import (
    ExportKind,
    build_file_folder_archive,
    export_project,
    export_section,
)
from server.apps.files.logic.file_operations import upload_file
from server.apps.files.models import File, Section


def _names(archive):
    with zipfile.ZipFile(BytesIO(archive)) as zip_file:
        return sorted(zip_file.namelist())


@pytest.mark.django_db
class TestExports:
    """Tests for section and project exports."""

    def test_section_files_use_display_names(self, stored_file, section):
        """Test originals are grouped by file display name."""
        archive = export_section(section, ExportKind.FILES)

        assert _names(archive) == ['diagram/diagram.png']

    def test_section_labels(self, stored_file, section):
        """Test labels are exported flat."""
        archive = export_section(section, ExportKind.LABELS)

        assert _names(archive) == ['diagram_qr.pdf']

    def test_project_export_prefixes_sections(self, stored_file, project):
        """Test project exports group entries by section name."""
        other = Section.objects.create(
            project=project,
            section_name='Rack2',
            folder_name='d' * 32,
        )
        upload_file(
            'diagram',
            SimpleUploadedFile('diagram.png', b'other'),
            section_id=other.id,
        )

        files_archive = export_project(project, ExportKind.FILES)
        labels_archive = export_project(project, ExportKind.LABELS)

        assert _names(files_archive) == [
            'Rack1/diagram/diagram.png',
            'Rack2/diagram/diagram.png',
        ]
        assert _names(labels_archive) == [
            'Rack1/diagram_qr.pdf',
            'Rack2/diagram_qr.pdf',
        ]

    def test_missing_payload_is_skipped(self, stored_file, section, app_root):
        """Test files missing on disk are left out."""
        (app_root / stored_file.path_file.name).unlink()

        assert _names(export_section(section, ExportKind.FILES)) == []

    def test_empty_section(self, section):
        """Test exporting a section without files."""
        with pytest.raises(File.DoesNotExist):
            export_section(section, ExportKind.FILES)

    def test_file_folder_archive(self, stored_file):
        """Test the file folder archive holds payload and label."""
        archive = build_file_folder_archive(stored_file)

        assert _names(archive) == ['diagram.png', 'diagram_qr.pdf']
