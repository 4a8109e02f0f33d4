"""Custom storage backend for the local uploads tree."""

import logging
import os
import shutil
from typing import Any, final, override

from django.core.files.storage import FileSystemStorage, storages

from server.apps.files.exceptions import StorageOperationError

logger = logging.getLogger(__name__)


@final
class FileStorage(FileSystemStorage):
    """Filesystem storage rooted at the application root.

    Names handled here are the DB-stored relative paths
    (``uploads/p/s/f/file.ext``). Extends FileSystemStorage with:
    - Transaction rollback support for failed DB operations
    - Enhanced error logging
    - Directory operations used by renames and cascading deletes
    """

    @override
    def save(  # noqa: WPS211
        self,
        name: str,
        content: Any,
        max_length: int | None = None,
    ) -> str:
        """Save file to disk with error handling and logging.

        Args:
            name: Relative path for the file.
            content: File content (file-like object).
            max_length: Optional maximum length for the filename.

        Returns:
            Actual relative path used (may differ from name if conflicts).

        Raises:
            Exception: If writing fails.
        """
        try:
            logger.info('Saving file to storage: %s', name)
            saved_name = super().save(name, content, max_length)
            logger.info('Successfully saved file: %s', saved_name)
        except Exception:
            logger.exception('Failed to save file to storage: %s', name)
            raise
        else:
            return saved_name

    @override
    def delete(self, name: str) -> None:
        """Delete file from disk with error handling and logging.

        Args:
            name: Relative path of file to delete.

        Raises:
            Exception: If the delete fails (a missing file is not a failure).
        """
        try:
            logger.info('Deleting file from storage: %s', name)
            super().delete(name)
            logger.info('Successfully deleted file: %s', name)
        except Exception:
            logger.exception('Failed to delete file from storage: %s', name)
            raise

    def rollback_upload(self, name: str) -> None:
        """Delete saved file for DB transaction rollback.

        This is a best-effort operation - if deletion fails, the error
        is logged but not raised, as the DB rollback has already occurred.

        Args:
            name: Relative path of file to delete.
        """
        try:
            logger.warning('Rolling back upload, deleting file: %s', name)
            self.delete(name)
            logger.info('Successfully rolled back file upload: %s', name)
        except Exception:
            # The file stays on disk but not in database
            logger.exception(
                'Failed to rollback upload, orphaned file: %s',
                name,
            )

    def delete_if_exists(self, name: str) -> bool:
        """Delete a file, logging instead of failing when it is missing.

        Args:
            name: Relative path of file to delete.

        Returns:
            True if a file was deleted, False if it did not exist.
        """
        if not name:
            return False
        if not self.exists(name):
            logger.warning(
                'File not found in storage (already deleted?): %s',
                name,
            )
            return False
        self.delete(name)
        return True

    def remove_dir_if_empty(self, name: str) -> bool:
        """Remove a directory only when it has no entries left.

        Args:
            name: Relative path of the directory.

        Returns:
            True if the directory was removed.
        """
        directory = self.path(name)
        if not os.path.isdir(directory) or os.listdir(directory):
            return False
        os.rmdir(directory)
        logger.info('Removed empty directory: %s', name)
        return True

    def remove_tree(self, name: str) -> bool:
        """Recursively remove a directory.

        Args:
            name: Relative path of the directory.

        Returns:
            True if removed, False if it did not exist.

        Raises:
            OSError: If removal fails.
        """
        directory = self.path(name)
        if not os.path.isdir(directory):
            logger.warning('Directory not found in storage: %s', name)
            return False
        shutil.rmtree(directory)
        logger.info('Removed directory tree: %s', name)
        return True

    def move_tree(self, source: str, destination: str) -> None:
        """Move a directory (with everything below it) to a new path.

        Uses the platform rename where possible, falling back to a
        recursive copy and delete across devices.

        Args:
            source: Relative path of the existing directory.
            destination: Relative path it should end up at.

        Raises:
            StorageOperationError: If the destination is taken or the
                move fails.
        """
        source_path = self.path(source)
        destination_path = self.path(destination)
        if os.path.exists(destination_path):
            raise StorageOperationError(
                'move (destination exists)',
                destination,
            )

        try:
            logger.info('Moving directory: %s -> %s', source, destination)
            os.makedirs(os.path.dirname(destination_path), exist_ok=True)
            shutil.move(source_path, destination_path)
        except OSError as error:
            logger.exception('Move failed: %s -> %s', source, destination)
            raise StorageOperationError('move', source) from error
        logger.info('Moved directory: %s -> %s', source, destination)

    def replace_file(self, source: str, destination: str) -> None:
        """Atomically put a stored file at a new name.

        An existing file at ``destination`` is overwritten in one step, so
        readers see either the old or the new content.

        Args:
            source: Relative path of the file to move.
            destination: Relative path it should end up at.

        Raises:
            StorageOperationError: If the rename fails.
        """
        try:
            os.replace(self.path(source), self.path(destination))
        except OSError as error:
            logger.exception('Replace failed: %s -> %s', source, destination)
            raise StorageOperationError('replace', destination) from error
        logger.info('Replaced file: %s -> %s', source, destination)


def get_storage() -> FileStorage:
    """Get the configured default storage backend.

    Returns:
        FileStorage instance rooted at ``APP_ROOT``.
    """
    return storages['default']  # type: ignore[return-value]
