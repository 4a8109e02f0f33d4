"""Business logic for zip exports of originals and labels."""

import enum
import logging
from collections.abc import Iterator

from django.db.models import QuerySet

from server.apps.files.infrastructure.archives import (
    ArchiveEntry,
    build_archive,
    entry_segment,
    folder_entries,
    join_entry,
)
from server.apps.files.infrastructure.path_mapper import PathMapper
from server.apps.files.models import File, Project, Section

logger = logging.getLogger(__name__)


class ExportKind(enum.StrEnum):
    """What an export contains."""

    FILES = 'files'
    LABELS = 'labels'


def build_file_folder_archive(file_instance: File) -> bytes:
    """Zip everything in a file's folder (payload and label).

    Args:
        file_instance: File with ``section.project`` loaded.

    Returns:
        Zip archive bytes.
    """
    mapper = PathMapper.from_settings()
    file_dir = mapper.resolve_file_dir(
        file_instance.section.project,
        file_instance.section,
        file_instance.folder_name,
        create=False,
    )
    logger.info('Exporting file folder: ID=%d', file_instance.id)
    return build_archive(folder_entries(file_dir))


def export_section(section: Section, kind: ExportKind) -> bytes:
    """Zip the originals or labels of a section.

    Entries are ``<file name>/<original>`` for originals and
    ``<label filename>`` for labels.

    Args:
        section: Section to export.
        kind: Originals or labels.

    Returns:
        Zip archive bytes.

    Raises:
        File.DoesNotExist: If the section has nothing to export.
    """
    files = _exportable(File.objects.filter(section=section), kind)
    if not files:
        raise File.DoesNotExist(f'No {kind} found for this section')

    logger.info(
        'Exporting %s of section %s (ID: %d)',
        kind,
        section.section_name,
        section.id,
    )
    return build_archive(_entries(files, kind, with_section=False))


def export_project(project: Project, kind: ExportKind) -> bytes:
    """Zip the originals or labels of a whole project.

    Entries are prefixed with the section name:
    ``<section>/<file name>/<original>`` or ``<section>/<label filename>``.

    Args:
        project: Project to export.
        kind: Originals or labels.

    Returns:
        Zip archive bytes.

    Raises:
        File.DoesNotExist: If the project has nothing to export.
    """
    files = _exportable(File.objects.filter(section__project=project), kind)
    if not files:
        raise File.DoesNotExist(f'No {kind} found for this project')

    logger.info(
        'Exporting %s of project %s (ID: %d)',
        kind,
        project.project_name,
        project.id,
    )
    return build_archive(_entries(files, kind, with_section=True))


def _exportable(files: QuerySet[File], kind: ExportKind) -> list[File]:
    if kind == ExportKind.LABELS:
        files = files.exclude(path_pdf='')
    return list(files.select_related('section').order_by('id'))


def _entries(
    files: list[File],
    kind: ExportKind,
    *,
    with_section: bool,
) -> Iterator[ArchiveEntry]:
    mapper = PathMapper.from_settings()
    for file_instance in files:
        prefix = ''
        if with_section:
            prefix = entry_segment(file_instance.section.section_name)
        if kind == ExportKind.LABELS:
            stored = file_instance.path_pdf.name
            entry_name = join_entry(
                prefix,
                mapper.label_filename(file_instance.name),
            )
        else:
            stored = file_instance.path_file.name
            entry_name = join_entry(
                prefix,
                entry_segment(file_instance.name),
                file_instance.get_filename(),
            )
        yield (entry_name, mapper.to_absolute(stored))
