"""Django storage configuration for the local uploads tree.

Every DB-stored path (``path_file``, ``path_pdf``, ``project_image``) is a
forward-slash path relative to ``APP_ROOT``, so the default storage is
rooted there and uploads live below ``APP_ROOT/UPLOADS_DIR_NAME``.
"""

from typing import Any, Final

from server.settings.components import BASE_DIR, config

APP_ROOT = config('APP_ROOT', default='') or str(BASE_DIR)

UPLOADS_DIR_NAME = config('UPLOADS_DIR_NAME', default='uploads')

PROJECT_IMAGE_DIR_NAME = config('PROJECT_IMAGE_DIR_NAME', default='project_img')

STORAGES: Final[dict[str, dict[str, Any]]] = {
    'default': {
        'BACKEND': 'server.apps.files.infrastructure.storage.FileStorage',
        'OPTIONS': {
            'location': APP_ROOT,
        },
    },
    'staticfiles': {
        'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage',
    },
}
