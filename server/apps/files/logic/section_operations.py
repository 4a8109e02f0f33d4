"""Business logic for section operations."""

import logging
from collections.abc import Iterable

from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import QuerySet

from server.apps.files.exceptions import NameConflictError
from server.apps.files.infrastructure.naming import generate_folder_name
from server.apps.files.infrastructure.path_mapper import PathMapper
from server.apps.files.infrastructure.storage import get_storage
from server.apps.files.logic.cascade_operations import (
    move_legacy_directory,
    restore_legacy_directory,
    rewrite_file_paths,
)
from server.apps.files.logic.label_operations import regenerate_labels
from server.apps.files.models import File, Project, Section

logger = logging.getLogger(__name__)


def add_sections(project_id: int, names: Iterable[str]) -> list[Section]:
    """Create several sections in a project at once.

    All names are checked before anything is created, so either every
    section is created or none.

    Args:
        project_id: ID of the owning project.
        names: Section display names, blank entries are skipped.

    Returns:
        Created sections in request order.

    Raises:
        Project.DoesNotExist: If project not found.
        ValidationError: If no usable name is given.
        NameConflictError: If a name exists in the project or repeats in
            the request; ``errors`` maps each rejected name to the reason.
    """
    project = Project.objects.get(id=project_id)
    cleaned = [name.strip() for name in names if name and name.strip()]
    if not cleaned:
        raise ValidationError('At least one section name is required')

    existing = set(
        project.sections.filter(section_name__in=cleaned).values_list(
            'section_name', flat=True,
        ),
    )
    errors: dict[str, str] = {}
    seen: set[str] = set()
    for name in cleaned:
        if name in existing:
            errors[name] = 'Section already exists in this project'
        elif name in seen:
            errors[name] = 'Section name repeated in request'
        seen.add(name)
    if errors:
        raise NameConflictError('Some section names are already taken', errors)

    mapper = PathMapper.from_settings()
    with transaction.atomic():
        sections = []
        for name in cleaned:
            section = Section.objects.create(
                project=project,
                section_name=name,
                folder_name=generate_folder_name(),
            )
            mapper.section_dir(project, section, create=True)
            sections.append(section)

    logger.info(
        'Created %d sections in project %s (ID: %d)',
        len(sections),
        project.project_name,
        project.id,
    )
    return sections


def list_sections(project_id: int) -> QuerySet[Section]:
    """List sections of a project ordered by id.

    Raises:
        Project.DoesNotExist: If project not found.
    """
    project = Project.objects.get(id=project_id)
    return project.sections.select_related('project')


def get_section(section_id: int) -> Section:
    """Get a section with its project loaded.

    Raises:
        Section.DoesNotExist: If section not found.
    """
    return Section.objects.select_related('project').get(id=section_id)


def rename_section(section_id: int, new_name: str) -> Section:
    """Rename a section and refresh the labels of its files.

    Opaque-folder sections only change the name column. Legacy sections
    have their directory moved before the DB update and every file path
    below it rewritten in the same transaction; the move is undone when
    the DB update fails. Labels are regenerated afterwards, best effort,
    keeping each file's download URL.

    Args:
        section_id: ID of the section.
        new_name: New display name.

    Returns:
        Updated section (unchanged if the name is the same).

    Raises:
        Section.DoesNotExist: If section not found.
        ValidationError: If the name is blank.
        NameConflictError: If the project already has a section so named.
        StorageOperationError: If the legacy directory cannot be moved.
    """
    new_name = (new_name or '').strip()
    if not new_name:
        raise ValidationError('Section name is required')

    mapper = PathMapper.from_settings()
    storage = get_storage()
    moved_dirs = None

    try:
        with transaction.atomic():
            section = (
                Section.objects.select_for_update()
                .select_related('project')
                .get(id=section_id)
            )
            if section.section_name == new_name:
                return section

            if Section.objects.filter(
                project_id=section.project_id,
                section_name=new_name,
            ).exclude(id=section.id).exists():
                raise NameConflictError(
                    f'Section {new_name!r} already exists in this project',
                )

            old_name = section.section_name
            if section.is_legacy:
                old_dir = mapper.section_dir(section.project, section)
                new_dir = mapper.section_dir(section.project, new_name)
                if move_legacy_directory(storage, mapper, old_dir, new_dir):
                    moved_dirs = (old_dir, new_dir)

            section.section_name = new_name
            section.save(update_fields=['section_name', 'updated_at'])

            if section.is_legacy:
                rewrite_file_paths(
                    File.objects.filter(section=section),
                    mapper.to_db_dir(old_dir),
                    mapper.to_db_dir(new_dir),
                )
    except Exception:
        if moved_dirs is not None:
            restore_legacy_directory(storage, mapper, *moved_dirs)
        raise

    logger.info(
        'Section renamed: %s -> %s (ID: %d)',
        old_name,
        new_name,
        section_id,
    )
    regenerate_labels(
        File.objects.filter(section_id=section_id).select_related(
            'section__project',
        ),
    )
    return section


def delete_section(section_id: int) -> None:
    """Delete a section, its files and its directory.

    Transaction safety: Delete DB rows first (cascade to files and tags,
    per-file artifacts removed by the post_delete signal), then remove the
    section directory. The project directory is kept.

    Args:
        section_id: ID of the section.

    Raises:
        Section.DoesNotExist: If section not found.
    """
    section = get_section(section_id)
    mapper = PathMapper.from_settings()
    section_dir = mapper.to_db_relative(
        mapper.section_dir(section.project, section),
    )

    try:
        with transaction.atomic():
            section.delete()
            logger.info('Section deleted from database: ID=%d', section_id)
    except Exception:
        logger.exception('Failed to delete section: ID=%d', section_id)
        raise

    try:
        get_storage().remove_tree(section_dir)
    except OSError:
        logger.exception('Failed to remove section directory: %s', section_dir)
