"""Fixtures for api app tests."""

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile


@pytest.fixture
def uploaded(client, section):
    """Upload diagram.png with tags through the API.

    Returns:
        JSON body of the created file.
    """
    response = client.post(
        '/api/uploadFile/upload',
        {
            'file': SimpleUploadedFile('diagram.png', b'fake png bytes'),
            'fileName': 'diagram',
            'sectionId': section.id,
            'tags': ['infra', 'v1'],
        },
    )
    assert response.status_code == 201
    return response.json()['file']
