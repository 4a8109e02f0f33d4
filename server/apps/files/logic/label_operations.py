"""Business logic for QR label generation."""

import logging
from collections.abc import Iterable
from typing import Final

from django.core.files.base import ContentFile
from django.db import transaction

from server.apps.files.infrastructure.download_urls import build_download_url
from server.apps.files.infrastructure.labels import render_label
from server.apps.files.infrastructure.path_mapper import PathMapper
from server.apps.files.infrastructure.storage import get_storage
from server.apps.files.models import File

logger = logging.getLogger(__name__)

_TEMP_SUFFIX: Final = '.tmp'


def write_label(file_instance: File, url: str | None = None) -> File:
    """Render a file's label and store it next to the payload.

    The PDF is rendered in memory first, so a rendering failure leaves the
    previous label and the row untouched. The new PDF is written under a
    temporary name and renamed onto ``<name>_qr.pdf``; only then is the row
    updated and a label left under a previous display name removed. A
    failed write therefore never leaves ``path_pdf`` pointing at a deleted
    file.

    Args:
        file_instance: File with ``section.project`` loaded.
        url: Download URL to encode. Defaults to the stored
            ``url_qr_code``, computed from the id only when missing.

    Returns:
        Updated File instance.

    Raises:
        LabelGenerationError: If the QR code or PDF cannot be rendered.
        OSError: If the label cannot be written.
    """
    section = file_instance.section
    project = section.project
    file_url = url or file_instance.url_qr_code or build_download_url(
        file_instance.id,
    )

    pdf_bytes = render_label(
        file_url,
        file_instance.name,
        project.project_name,
        section.section_name,
        file_instance.tag_names(),
    )

    mapper = PathMapper.from_settings()
    storage = get_storage()
    file_dir = mapper.resolve_file_dir(
        project,
        section,
        file_instance.folder_name,
    )
    label_path = mapper.to_db_relative(
        file_dir / mapper.label_filename(file_instance.name),
    )

    old_label_path = file_instance.path_pdf.name

    # Step 1: Write the new PDF beside the old one, then swap it in
    temp_name = storage.save(
        f'{label_path}{_TEMP_SUFFIX}',
        ContentFile(pdf_bytes),
    )
    try:
        storage.replace_file(temp_name, label_path)
    except Exception:
        storage.rollback_upload(temp_name)
        raise

    # Step 2: Point the row at it
    try:
        with transaction.atomic():
            file_instance.path_pdf.name = label_path
            file_instance.url_qr_code = file_url
            file_instance.save(
                update_fields=['path_pdf', 'url_qr_code', 'updated_at'],
            )
    except Exception:
        logger.exception('DB update failed for label: %s', label_path)
        if old_label_path != label_path:
            storage.rollback_upload(label_path)
        file_instance.path_pdf.name = old_label_path
        raise

    # Step 3: Drop the label stored under the previous display name
    if old_label_path and old_label_path != label_path:
        try:
            storage.delete_if_exists(old_label_path)
        except OSError:
            logger.exception('Failed to delete old label: %s', old_label_path)

    logger.info(
        'Label written: %s (file ID: %d)',
        label_path,
        file_instance.id,
    )
    return file_instance


def regenerate_file_label(file_id: int) -> File:
    """Re-render the label of a single file.

    Args:
        file_id: ID of the file.

    Returns:
        Updated File instance.

    Raises:
        File.DoesNotExist: If file not found.
        LabelGenerationError: If rendering fails.
    """
    file_instance = File.objects.select_related('section__project').get(
        id=file_id,
    )
    return write_label(file_instance)


def regenerate_labels(files: Iterable[File]) -> tuple[int, int]:
    """Re-render labels for many files, best effort.

    A failure on one file is logged and counted, never raised, so one bad
    row cannot stop a rename cascade.

    Args:
        files: Files with ``section.project`` loaded.

    Returns:
        Tuple of (succeeded, failed) counts.
    """
    succeeded = 0
    failed = 0
    for file_instance in files:
        try:
            write_label(file_instance)
        except Exception:
            logger.exception(
                'Failed to regenerate label for file ID: %d',
                file_instance.id,
            )
            failed += 1
        else:
            succeeded += 1

    if succeeded or failed:
        logger.info(
            'Regenerated %d labels, %d failed',
            succeeded,
            failed,
        )
    return succeeded, failed
