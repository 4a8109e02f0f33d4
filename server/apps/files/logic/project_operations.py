"""Business logic for project operations."""

import logging

from django.core.exceptions import ValidationError
from django.core.files.uploadedfile import UploadedFile
from django.db import IntegrityError, transaction
from django.db.models import QuerySet

from server.apps.files.exceptions import NameConflictError
from server.apps.files.infrastructure.naming import (
    generate_folder_name,
    generate_image_filename,
)
from server.apps.files.infrastructure.path_mapper import PathMapper
from server.apps.files.infrastructure.storage import FileStorage, get_storage
from server.apps.files.logic.cascade_operations import (
    move_legacy_directory,
    restore_legacy_directory,
    rewrite_file_paths,
)
from server.apps.files.logic.label_operations import regenerate_labels
from server.apps.files.models import File, Project

logger = logging.getLogger(__name__)


def create_project(name: str, image: UploadedFile | None = None) -> Project:
    """Create a project with its directory and optional thumbnail.

    Transaction safety: the thumbnail is stored first; if the insert fails
    it is deleted again (rollback).

    Args:
        name: Project display name.
        image: Optional thumbnail.

    Returns:
        Created Project instance.

    Raises:
        ValidationError: If the name is blank.
        NameConflictError: If a project with this name exists.
    """
    name = (name or '').strip()
    if not name:
        raise ValidationError('Project name is required')
    if Project.objects.filter(project_name=name).exists():
        raise NameConflictError(f'Project {name!r} already exists')

    mapper = PathMapper.from_settings()
    storage = get_storage()
    image_name = _save_project_image(storage, mapper, image) if image else ''

    try:
        with transaction.atomic():
            project = Project.objects.create(
                project_name=name,
                folder_name=generate_folder_name(),
                project_image=image_name,
            )
            mapper.project_dir(project, create=True)
    except IntegrityError as error:
        if image_name:
            storage.rollback_upload(image_name)
        raise NameConflictError(f'Project {name!r} already exists') from error
    except Exception:
        logger.exception('Failed to create project: %s', name)
        if image_name:
            storage.rollback_upload(image_name)
        raise

    logger.info('Project created: %s (ID: %d)', name, project.id)
    return project


def list_projects() -> QuerySet[Project]:
    """List all projects ordered by id."""
    return Project.objects.all()


def get_project(project_id: int) -> Project:
    """Get a project.

    Raises:
        Project.DoesNotExist: If project not found.
    """
    return Project.objects.get(id=project_id)


def update_project(
    project_id: int,
    new_name: str | None = None,
    image: UploadedFile | None = None,
) -> Project:
    """Rename a project and/or replace its thumbnail.

    Args:
        project_id: ID of the project.
        new_name: New display name, unchanged when None.
        image: New thumbnail, unchanged when None.

    Returns:
        Updated Project instance.

    Raises:
        Project.DoesNotExist: If project not found.
        ValidationError: If the new name is blank.
        NameConflictError: If another project has the new name.
        StorageOperationError: If a legacy directory cannot be moved.
    """
    if new_name is not None:
        project = rename_project(project_id, new_name)
    else:
        project = get_project(project_id)

    if image is not None:
        project = _replace_project_image(project_id, image)
    return project


def rename_project(project_id: int, new_name: str) -> Project:
    """Rename a project and refresh the labels of all its files.

    Opaque-folder projects only change the name column. Legacy projects
    have their directory moved before the DB update and every file path
    below it rewritten in the same transaction; the move is undone when
    the DB update fails. Labels are regenerated afterwards, best effort,
    keeping each file's download URL.

    Args:
        project_id: ID of the project.
        new_name: New display name.

    Returns:
        Updated project (unchanged if the name is the same).

    Raises:
        Project.DoesNotExist: If project not found.
        ValidationError: If the name is blank.
        NameConflictError: If another project has this name.
        StorageOperationError: If the legacy directory cannot be moved.
    """
    new_name = (new_name or '').strip()
    if not new_name:
        raise ValidationError('Project name is required')

    mapper = PathMapper.from_settings()
    storage = get_storage()
    moved_dirs = None

    try:
        with transaction.atomic():
            project = Project.objects.select_for_update().get(id=project_id)
            if project.project_name == new_name:
                return project

            if Project.objects.filter(project_name=new_name).exclude(
                id=project.id,
            ).exists():
                raise NameConflictError(f'Project {new_name!r} already exists')

            old_name = project.project_name
            if project.is_legacy:
                old_dir = mapper.project_dir(project)
                new_dir = mapper.project_dir(new_name)
                if move_legacy_directory(storage, mapper, old_dir, new_dir):
                    moved_dirs = (old_dir, new_dir)

            project.project_name = new_name
            project.save(update_fields=['project_name', 'updated_at'])

            if project.is_legacy:
                rewrite_file_paths(
                    File.objects.filter(section__project=project),
                    mapper.to_db_dir(old_dir),
                    mapper.to_db_dir(new_dir),
                )
    except Exception:
        if moved_dirs is not None:
            restore_legacy_directory(storage, mapper, *moved_dirs)
        raise

    logger.info(
        'Project renamed: %s -> %s (ID: %d)',
        old_name,
        new_name,
        project_id,
    )
    regenerate_labels(
        File.objects.filter(section__project_id=project_id).select_related(
            'section__project',
        ),
    )
    return project


def delete_project(project_id: int) -> None:
    """Delete a project with everything below it.

    Transaction safety: Delete DB rows first (cascade to sections, files
    and tags; per-file artifacts removed by the post_delete signal), then
    remove the thumbnail and the project directory, best effort.

    Args:
        project_id: ID of the project.

    Raises:
        Project.DoesNotExist: If project not found.
    """
    project = get_project(project_id)
    mapper = PathMapper.from_settings()
    storage = get_storage()
    image_name = project.project_image.name
    try:
        project_dir = mapper.to_db_relative(mapper.project_dir(project))
    except ValidationError:
        logger.warning(
            'Project has no removable directory: %s',
            project.project_name,
        )
        project_dir = ''

    try:
        with transaction.atomic():
            project.delete()
            logger.info('Project deleted from database: ID=%d', project_id)
    except Exception:
        logger.exception('Failed to delete project: ID=%d', project_id)
        raise

    try:
        if image_name:
            storage.delete_if_exists(image_name)
        if project_dir:
            storage.remove_tree(project_dir)
    except OSError:
        logger.exception('Failed to remove project files: %s', project_dir)


def _save_project_image(
    storage: FileStorage,
    mapper: PathMapper,
    image: UploadedFile,
) -> str:
    image_dir = mapper.project_image_dir(create=True)
    return storage.save(
        mapper.to_db_relative(image_dir / generate_image_filename(image.name)),
        image,
    )


def _replace_project_image(project_id: int, image: UploadedFile) -> Project:
    mapper = PathMapper.from_settings()
    storage = get_storage()

    # Step 1: Store new thumbnail
    new_image_name = _save_project_image(storage, mapper, image)

    # Step 2: Point the row at it
    try:
        with transaction.atomic():
            project = Project.objects.select_for_update().get(id=project_id)
            old_image_name = project.project_image.name
            project.project_image.name = new_image_name
            project.save(update_fields=['project_image', 'updated_at'])
    except Exception:
        logger.exception('DB update failed, rolling back thumbnail')
        storage.rollback_upload(new_image_name)
        raise

    # Step 3: Delete old thumbnail (best effort)
    if old_image_name:
        try:
            storage.delete_if_exists(old_image_name)
        except OSError:
            logger.exception(
                'Failed to delete old thumbnail: %s',
                old_image_name,
            )

    logger.info('Project thumbnail replaced: ID=%d', project_id)
    return project
