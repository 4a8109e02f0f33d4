"""Directory moves and path rewrites shared by project and section renames.

Only legacy rows (directory named after the display name) need this: a
rename of an opaque-folder row never touches the filesystem.
"""

import logging
from pathlib import Path

from django.db.models import QuerySet

from server.apps.files.infrastructure.path_mapper import PathMapper
from server.apps.files.infrastructure.storage import FileStorage
from server.apps.files.models import File

logger = logging.getLogger(__name__)


def move_legacy_directory(
    storage: FileStorage,
    mapper: PathMapper,
    old_dir: Path,
    new_dir: Path,
) -> bool:
    """Move a legacy directory to its new display-name path.

    Args:
        storage: Storage backend.
        mapper: Path mapper the directories were resolved with.
        old_dir: Current absolute directory.
        new_dir: Target absolute directory.

    Returns:
        True if the directory was moved, False if it did not exist.

    Raises:
        StorageOperationError: If the target exists or the move fails.
    """
    old_name = mapper.to_db_relative(old_dir)
    new_name = mapper.to_db_relative(new_dir)
    if not old_dir.is_dir():
        logger.warning(
            'Legacy directory missing, nothing to move: %s',
            old_name,
        )
        return False
    storage.move_tree(old_name, new_name)
    return True


def restore_legacy_directory(
    storage: FileStorage,
    mapper: PathMapper,
    old_dir: Path,
    new_dir: Path,
) -> None:
    """Move a directory back after the DB update failed (best effort)."""
    try:
        storage.move_tree(
            mapper.to_db_relative(new_dir),
            mapper.to_db_relative(old_dir),
        )
    except Exception:
        logger.exception(
            'Failed to move directory back, DB and disk disagree: %s',
            new_dir,
        )


def rewrite_file_paths(
    files: QuerySet[File],
    old_prefix: str,
    new_prefix: str,
) -> int:
    """Rewrite stored payload and label paths from one prefix to another.

    Must run inside the transaction that renames the owning row.

    Args:
        files: Files below the renamed directory.
        old_prefix: DB directory prefix ending with '/'.
        new_prefix: Replacement prefix ending with '/'.

    Returns:
        Number of rewritten rows.
    """
    changed = []
    for file_instance in files:
        new_path_file = PathMapper.replace_prefix(
            file_instance.path_file.name, old_prefix, new_prefix,
        )
        new_path_pdf = PathMapper.replace_prefix(
            file_instance.path_pdf.name, old_prefix, new_prefix,
        )
        if (new_path_file, new_path_pdf) == (
            file_instance.path_file.name,
            file_instance.path_pdf.name,
        ):
            continue
        file_instance.path_file.name = new_path_file
        file_instance.path_pdf.name = new_path_pdf
        changed.append(file_instance)

    File.objects.bulk_update(changed, ['path_file', 'path_pdf'])
    logger.info(
        'Rewrote %d file paths: %s -> %s',
        len(changed),
        old_prefix,
        new_prefix,
    )
    return len(changed)
