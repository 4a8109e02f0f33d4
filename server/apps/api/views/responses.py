"""Response helpers shared by the views."""

from django.http import HttpResponse
from django.utils.http import content_disposition_header

from server.apps.files.infrastructure.archives import entry_segment


def zip_response(archive: bytes, filename: str) -> HttpResponse:
    """Send zip bytes as an attachment.

    Args:
        archive: Zip archive bytes.
        filename: Download name, made filesystem-safe.

    Returns:
        Attachment response.
    """
    response = HttpResponse(archive, content_type='application/zip')
    response['Content-Disposition'] = content_disposition_header(
        as_attachment=True,
        filename=entry_segment(filename),
    )
    return response
