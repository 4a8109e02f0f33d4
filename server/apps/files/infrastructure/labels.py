"""QR code and label PDF rendering.

A label is a single US-Letter page with the file's display name, a
``project / section / file`` breadcrumb, optional tags, a QR code pointing
at the permanent download URL, and that URL in plain text.
"""

import logging
from collections.abc import Sequence
from io import BytesIO
from typing import Final

import fitz
import qrcode
from qrcode.constants import ERROR_CORRECT_H
from qrcode.image.pil import PilImage

from server.apps.files.exceptions import LabelGenerationError

logger = logging.getLogger(__name__)

# US Letter in points
PAGE_WIDTH: Final = 612
PAGE_HEIGHT: Final = 792

TITLE_FONT: Final = 'hebo'  # Helvetica-Bold
BODY_FONT: Final = 'helv'  # Helvetica
TITLE_FONT_SIZE: Final = 48
BREADCRUMB_FONT_SIZE: Final = 20
TAGS_FONT_SIZE: Final = 20
URL_FONT_SIZE: Final = 12

TITLE_TOP: Final = 50
BREADCRUMB_OFFSET: Final = 100  # below the title
TAGS_OFFSET: Final = 70  # below the breadcrumb
QR_SIZE: Final = 250
URL_OFFSET: Final = 70  # below the QR block

_QR_BOX_SIZE: Final = 10
_QR_BORDER: Final = 4


def build_qr_png(data: str) -> bytes:
    """Encode data as a QR code PNG with high error correction.

    Args:
        data: Payload to encode (the download URL).

    Returns:
        PNG image bytes.

    Raises:
        LabelGenerationError: If the payload cannot be encoded.
    """
    qr_code = qrcode.QRCode(
        error_correction=ERROR_CORRECT_H,
        box_size=_QR_BOX_SIZE,
        border=_QR_BORDER,
        image_factory=PilImage,
    )
    try:
        qr_code.add_data(data)
        qr_code.make(fit=True)
        image = qr_code.make_image(fill_color='black', back_color='white')
    except Exception as error:
        logger.exception('Failed to encode QR code for: %s', data)
        raise LabelGenerationError(f'QR encoding failed: {error}') from error

    buffer = BytesIO()
    image.save(buffer, format='PNG')
    return buffer.getvalue()


def render_label(
    file_url: str,
    display_name: str,
    project_name: str,
    section_name: str,
    tags: Sequence[str] = (),
) -> bytes:
    """Render a label PDF in memory.

    Args:
        file_url: Permanent download URL, encoded in the QR code.
        display_name: File display name (title).
        project_name: Project display name (breadcrumb).
        section_name: Section display name (breadcrumb).
        tags: Tag names, printed comma-joined when present.

    Returns:
        PDF document bytes.

    Raises:
        LabelGenerationError: If the QR code or the page cannot be built.
    """
    qr_png = build_qr_png(file_url)

    try:
        with fitz.open() as document:
            page = document.new_page(width=PAGE_WIDTH, height=PAGE_HEIGHT)

            _insert_centered(
                page, display_name, TITLE_TOP, TITLE_FONT, TITLE_FONT_SIZE,
            )

            breadcrumb_top = TITLE_TOP + BREADCRUMB_OFFSET
            breadcrumb = f'{project_name} / {section_name} / {display_name}'
            _insert_centered(
                page,
                breadcrumb,
                breadcrumb_top,
                BODY_FONT,
                BREADCRUMB_FONT_SIZE,
            )

            if tags:
                _insert_centered(
                    page,
                    ', '.join(tags),
                    breadcrumb_top + TAGS_OFFSET,
                    BODY_FONT,
                    TAGS_FONT_SIZE,
                )

            qr_left = (PAGE_WIDTH - QR_SIZE) / 2
            qr_top = (PAGE_HEIGHT - QR_SIZE) / 2
            page.insert_image(
                fitz.Rect(qr_left, qr_top, qr_left + QR_SIZE, qr_top + QR_SIZE),
                stream=qr_png,
            )

            _insert_centered(
                page,
                file_url,
                qr_top + QR_SIZE + URL_OFFSET,
                BODY_FONT,
                URL_FONT_SIZE,
            )

            return document.tobytes(garbage=3, deflate=True)
    except Exception as error:
        logger.exception('Failed to render label for: %s', display_name)
        raise LabelGenerationError(
            f'Label rendering failed: {error}',
        ) from error


def _insert_centered(
    page: fitz.Page,
    text: str,
    top: float,
    fontname: str,
    fontsize: float,
) -> None:
    # insert_text positions the baseline, not the top of the line
    width = fitz.get_text_length(text, fontname=fontname, fontsize=fontsize)
    left = max((PAGE_WIDTH - width) / 2, 0)
    page.insert_text(
        (left, top + fontsize),
        text,
        fontname=fontname,
        fontsize=fontsize,
    )
