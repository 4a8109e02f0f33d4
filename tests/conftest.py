"""Shared fixtures: storage rooted in a temporary directory, domain rows."""

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile

from server.apps.files.infrastructure.path_mapper import PathMapper
from server.apps.files.models import Project, Section

TEST_BASE_URL = 'http://files.test'


@pytest.fixture(autouse=True)
def app_root(settings, tmp_path):
    """Point APP_ROOT and the default storage at a temporary directory.

    Returns:
        Temporary application root.
    """
    settings.APP_ROOT = str(tmp_path)
    settings.STORAGES = {
        **settings.STORAGES,
        'default': {
            'BACKEND': 'server.apps.files.infrastructure.storage.FileStorage',
            'OPTIONS': {'location': str(tmp_path)},
        },
    }
    settings.SERVER_BASE_URL = TEST_BASE_URL
    return tmp_path


@pytest.fixture
def mapper(app_root):
    """Path mapper rooted at the temporary application root.

    Returns:
        PathMapper instance.
    """
    return PathMapper.from_settings()


@pytest.fixture
def project(db):
    """Create a project with an opaque folder.

    Returns:
        Project instance.
    """
    return Project.objects.create(
        project_name='Server',
        folder_name='a' * 32,
    )


@pytest.fixture
def section(project):
    """Create a section with an opaque folder.

    Returns:
        Section instance.
    """
    return Section.objects.create(
        project=project,
        section_name='Rack1',
        folder_name='b' * 32,
    )


@pytest.fixture
def legacy_project(db):
    """Create a project whose directory is named after its display name.

    Returns:
        Project instance without folder_name.
    """
    return Project.objects.create(project_name='Legacy')


@pytest.fixture
def legacy_section(legacy_project):
    """Create a legacy section in the legacy project.

    Returns:
        Section instance without folder_name.
    """
    return Section.objects.create(
        project=legacy_project,
        section_name='Shelf',
    )


@pytest.fixture
def uploaded_file():
    """Sample upload payload.

    Returns:
        SimpleUploadedFile named diagram.png.
    """
    return SimpleUploadedFile(
        'diagram.png',
        b'fake png bytes',
        content_type='image/png',
    )
