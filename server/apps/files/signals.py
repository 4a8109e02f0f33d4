"""Signal handlers for files app."""

import logging
from pathlib import PurePosixPath

from django.db.models.signals import post_delete
from django.dispatch import receiver

from server.apps.files.infrastructure.storage import get_storage
from server.apps.files.models import File

logger = logging.getLogger(__name__)


@receiver(post_delete, sender=File)
def delete_file_artifacts(
    sender: type[File],
    instance: File,
    **kwargs: object,
) -> None:
    """Delete payload, label and file folder when a File row is deleted.

    Runs for direct deletes as well as cascades from sections and
    projects. The file folder is removed only once it is empty.

    Args:
        sender: The File model class.
        instance: The File instance being deleted.
        **kwargs: Additional signal arguments.
    """
    storage = get_storage()
    stored_names = [
        name
        for name in (instance.path_file.name, instance.path_pdf.name)
        if name
    ]

    for storage_name in stored_names:
        try:
            storage.delete_if_exists(storage_name)
        except Exception:
            # DB delete already succeeded, the file stays orphaned
            logger.exception(
                'Failed to delete file from storage (orphaned): %s',
                storage_name,
            )

    if not stored_names:
        return

    file_folder = str(PurePosixPath(stored_names[0]).parent)
    try:
        storage.remove_dir_if_empty(file_folder)
    except OSError:
        logger.exception('Failed to remove file folder: %s', file_folder)
