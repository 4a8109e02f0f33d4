"""Fixtures for files app tests."""

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile

from server.apps.files.logic.file_operations import upload_file


@pytest.fixture
def stored_file(section, uploaded_file):
    """Upload diagram.png into Server/Rack1 with two tags.

    Returns:
        File instance with its label.
    """
    return upload_file(
        'diagram',
        uploaded_file,
        section_id=section.id,
        tags=['infra', 'v1'],
    )


@pytest.fixture
def legacy_file(legacy_section):
    """Upload a file into the legacy section.

    Returns:
        File instance stored under uploads/Legacy/Shelf/.
    """
    return upload_file(
        'manual',
        SimpleUploadedFile('manual.txt', b'read me'),
        section_id=legacy_section.id,
        tags=['docs'],
    )
