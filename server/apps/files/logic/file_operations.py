"""Business logic for file operations."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import PurePath
from typing import Final

from django.core.exceptions import ValidationError
from django.core.files.uploadedfile import UploadedFile
from django.db import transaction
from django.db.models import Q, QuerySet

from server.apps.files.infrastructure.download_urls import build_download_url
from server.apps.files.infrastructure.naming import generate_folder_name
from server.apps.files.infrastructure.path_mapper import PathMapper
from server.apps.files.infrastructure.storage import get_storage
from server.apps.files.logic.label_operations import write_label
from server.apps.files.models import File, Project, Section, Tag

logger = logging.getLogger(__name__)

_TAG_SEPARATOR: Final = ','
_FALLBACK_FILENAME: Final = 'upload'


@dataclass(frozen=True, slots=True)
class FileListing:
    """File row together with its on-disk size."""

    file: File
    size: int


def normalize_tags(raw_tags: Iterable[str] | str | None) -> list[str]:
    """Normalize client-supplied tags.

    A single string is split on commas; list elements are kept whole,
    so a tag may itself contain a comma. Blank entries are dropped,
    duplicates removed keeping first order.

    Args:
        raw_tags: Tags as sent by the client.

    Returns:
        Ordered list of unique, stripped tag names.
    """
    if raw_tags is None:
        return []
    if isinstance(raw_tags, str):
        raw_tags = raw_tags.split(_TAG_SEPARATOR)

    tags: list[str] = []
    for raw_tag in raw_tags:
        tag = str(raw_tag).strip()
        if tag and tag not in tags:
            tags.append(tag)
    return tags


def resolve_section(
    section_id: int | str | None = None,
    project_name: str | None = None,
    section_name: str | None = None,
) -> Section:
    """Find the target section of an upload.

    Args:
        section_id: Section primary key, preferred when given.
        project_name: Project display name, used with section_name.
        section_name: Section display name, used with project_name.

    Returns:
        Section with its project loaded.

    Raises:
        ValidationError: If neither an id nor both names are given.
        Section.DoesNotExist: If no such section exists.
    """
    sections = Section.objects.select_related('project')
    if section_id not in {None, ''}:
        return sections.get(id=section_id)
    if project_name and section_name:
        return sections.get(
            project__project_name=project_name,
            section_name=section_name,
        )
    raise ValidationError(
        'Either sectionId or projectName and sectionName are required',
    )


def upload_file(
    display_name: str,
    uploaded: UploadedFile | None,
    *,
    section_id: int | str | None = None,
    project_name: str | None = None,
    section_name: str | None = None,
    tags: Iterable[str] | str | None = None,
) -> File:
    """Store an upload in a fresh file folder and generate its label.

    Transaction safety: the payload is written first, then the row and its
    tags are inserted in one transaction. If the insert fails, the payload
    is deleted again (rollback). The label is generated after commit: a
    label failure keeps the row (with a null ``url_qr_code``) so the label
    can be regenerated later.

    Args:
        display_name: Display name of the file.
        uploaded: Uploaded payload.
        section_id: Target section id.
        project_name: Target project name, used when section_id is empty.
        section_name: Target section name, used when section_id is empty.
        tags: Optional tags.

    Returns:
        Created File instance with its label.

    Raises:
        ValidationError: If the name or payload is missing.
        Section.DoesNotExist: If the target section does not exist.
        LabelGenerationError: If the row was created but the label failed.
    """
    display_name = (display_name or '').strip()
    if not display_name:
        raise ValidationError('File name is required')
    if uploaded is None:
        raise ValidationError('File is required')

    section = resolve_section(section_id, project_name, section_name)
    tag_names = normalize_tags(tags)

    mapper = PathMapper.from_settings()
    storage = get_storage()
    folder_name = generate_folder_name()
    file_dir = mapper.resolve_file_dir(section.project, section, folder_name)
    storage_path = mapper.to_db_relative(
        file_dir / _original_filename(uploaded),
    )

    # Step 1: Write payload first
    saved_name = storage.save(storage_path, uploaded)

    # Step 2: Create database records (in transaction)
    try:
        with transaction.atomic():
            file_instance = File.objects.create(
                section=section,
                name=display_name,
                folder_name=folder_name,
                path_file=saved_name,
            )
            Tag.objects.bulk_create(
                Tag(file=file_instance, tag_name=tag_name)
                for tag_name in tag_names
            )
    except Exception:
        logger.exception(
            'Database transaction failed, rolling back upload: %s',
            saved_name,
        )
        storage.rollback_upload(saved_name)
        storage.remove_dir_if_empty(mapper.to_db_relative(file_dir))
        raise

    logger.info(
        'File record created: %s (ID: %d)',
        saved_name,
        file_instance.id,
    )

    # Step 3: Label, the row survives a failure here
    return write_label(file_instance, url=build_download_url(file_instance.id))


def update_file(
    file_id: int,
    display_name: str | None = None,
    new_content: UploadedFile | None = None,
    tags: Iterable[str] | str | None = None,
) -> File:
    """Rename a file, replace its payload and/or its tags.

    The file folder never changes. New content is written into the same
    folder before the row is updated; the old payload is deleted only
    after a successful DB update. The label is always regenerated, reusing
    the stored download URL.

    Args:
        file_id: ID of file to update.
        display_name: New display name, unchanged when None.
        new_content: New payload, unchanged when None.
        tags: New full tag list, unchanged when None.

    Returns:
        Updated File instance.

    Raises:
        File.DoesNotExist: If file not found.
        ValidationError: If the new display name is blank.
        LabelGenerationError: If the label cannot be regenerated.
    """
    file_instance = File.objects.select_related('section__project').get(
        id=file_id,
    )
    if display_name is not None:
        display_name = display_name.strip()
        if not display_name:
            raise ValidationError('File name cannot be empty')

    storage = get_storage()
    old_storage_path = file_instance.path_file.name
    new_storage_path = None

    # Step 1: Write new content next to the old one
    if new_content is not None:
        mapper = PathMapper.from_settings()
        file_dir = mapper.resolve_file_dir(
            file_instance.section.project,
            file_instance.section,
            file_instance.folder_name,
        )
        new_storage_path = storage.save(
            mapper.to_db_relative(file_dir / _original_filename(new_content)),
            new_content,
        )

    # Step 2: Update database record atomically
    try:
        with transaction.atomic():
            locked = File.objects.select_for_update().get(id=file_id)
            update_fields = ['updated_at']
            if display_name is not None:
                locked.name = display_name
                update_fields.append('name')
            if new_storage_path is not None:
                locked.path_file.name = new_storage_path
                update_fields.append('path_file')
            locked.save(update_fields=update_fields)
            if tags is not None:
                _replace_tags(locked, normalize_tags(tags))
    except Exception:
        logger.exception('DB update failed for file ID: %d', file_id)
        if new_storage_path is not None:
            storage.rollback_upload(new_storage_path)
        raise

    # Step 3: Delete old content (best effort)
    if new_storage_path is not None and new_storage_path != old_storage_path:
        try:
            storage.delete(old_storage_path)
        except OSError:
            logger.exception(
                'Failed to delete old content: %s',
                old_storage_path,
            )

    file_instance = get_file(file_id)
    logger.info('File updated: %s (ID: %d)', file_instance.name, file_id)
    return write_label(file_instance)


def delete_file(file_id: int) -> None:
    """Delete file from database and storage.

    Transaction safety: Delete DB record first. The original, the label
    and the then empty file folder are removed by the post_delete signal
    handler in signals.py.

    Args:
        file_id: ID of file to delete.

    Raises:
        File.DoesNotExist: If file doesn't exist.
    """
    try:
        file_instance = File.objects.get(id=file_id)
    except File.DoesNotExist:
        logger.exception('File not found: ID=%d', file_id)
        raise

    logger.info(
        'Deleting file: ID=%d, path=%s, label=%s',
        file_id,
        file_instance.path_file.name,
        file_instance.path_pdf.name,
    )

    try:
        with transaction.atomic():
            file_instance.delete()
            logger.info('File record deleted from database: ID=%d', file_id)
    except Exception:
        logger.exception('Failed to delete file from database: ID=%d', file_id)
        raise


def get_file(file_id: int) -> File:
    """Get a file with its section and project loaded.

    Raises:
        File.DoesNotExist: If file not found.
    """
    return File.objects.select_related('section__project').get(id=file_id)


def get_file_tags(file_id: int) -> list[str]:
    """Get tag names of a file.

    Raises:
        File.DoesNotExist: If file not found.
    """
    return File.objects.get(id=file_id).tag_names()


def list_files(section_id: int) -> list[FileListing]:
    """List files of a section with their on-disk sizes.

    A missing payload is reported with size 0.

    Args:
        section_id: ID of the section.

    Returns:
        Listings ordered by id.

    Raises:
        Section.DoesNotExist: If section not found.
    """
    section = Section.objects.get(id=section_id)
    storage = get_storage()

    listings = []
    for file_instance in section.files.prefetch_related('tags'):
        try:
            size = storage.size(file_instance.path_file.name)
        except OSError:
            logger.warning(
                'Payload missing for file ID %d: %s',
                file_instance.id,
                file_instance.path_file.name,
            )
            size = 0
        listings.append(FileListing(file=file_instance, size=size))
    return listings


def file_name_exists(section_id: int | str, name: str) -> bool:
    """Check whether a section already has a file with this display name."""
    return File.objects.filter(
        section_id=section_id,
        name=(name or '').strip(),
    ).exists()


def search_project_files(project_id: int, term: str) -> QuerySet[File]:
    """Search a project's files by file, section or tag name.

    Matching is case-insensitive substring matching.

    Args:
        project_id: ID of the project.
        term: Search term, empty returns every file of the project.

    Returns:
        Distinct files ordered by id.

    Raises:
        Project.DoesNotExist: If project not found.
    """
    project = Project.objects.get(id=project_id)
    files = File.objects.filter(section__project=project).select_related(
        'section__project',
    )

    term = (term or '').strip()
    if term:
        files = files.filter(
            Q(name__icontains=term)
            | Q(section__section_name__icontains=term)
            | Q(tags__tag_name__icontains=term),
        )

    return files.distinct().order_by('id')


def _replace_tags(file_instance: File, tag_names: list[str]) -> None:
    current = set(file_instance.tags.values_list('tag_name', flat=True))
    wanted = set(tag_names)

    removed = current - wanted
    if removed:
        file_instance.tags.filter(tag_name__in=removed).delete()
    Tag.objects.bulk_create(
        Tag(file=file_instance, tag_name=tag_name)
        for tag_name in tag_names
        if tag_name not in current
    )
    logger.debug(
        'Tags updated for file ID %d: +%d -%d',
        file_instance.id,
        len(wanted - current),
        len(removed),
    )


def _original_filename(uploaded: UploadedFile) -> str:
    filename = PurePath((uploaded.name or '').replace('\\', '/')).name
    if filename in {'', '.', '..'}:
        return _FALLBACK_FILENAME
    return filename
