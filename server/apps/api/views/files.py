"""File endpoints, including the permanent download target of QR codes."""

import logging
from http import HTTPStatus

from django.core.exceptions import ValidationError
from django.http import FileResponse, HttpRequest, HttpResponse, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import (
    require_GET,
    require_http_methods,
    require_POST,
)

from server.apps.api.errors import json_errors
from server.apps.api.payloads import parse_payload
from server.apps.api.serializers import serialize_file
from server.apps.api.views.responses import zip_response
from server.apps.files.infrastructure.storage import get_storage
from server.apps.files.logic import (
    export_operations,
    file_operations,
    label_operations,
)
from server.apps.files.models import File

logger = logging.getLogger(__name__)


@csrf_exempt
@require_POST
@json_errors
def upload(request: HttpRequest) -> HttpResponse:
    """Upload a file with its display name, target section and tags.

    The section is given as ``sectionId`` or as ``projectName`` plus
    ``sectionName``.
    """
    payload = parse_payload(request)
    file_instance = file_operations.upload_file(
        payload.get('fileName', ''),
        payload.file('file'),
        section_id=payload.get_id('sectionId'),
        project_name=payload.get('projectName'),
        section_name=payload.get('sectionName'),
        tags=payload.get_values('tags'),
    )
    return JsonResponse(
        {'message': 'File uploaded', 'file': serialize_file(file_instance)},
        status=HTTPStatus.CREATED,
    )


@csrf_exempt
@require_http_methods(['GET', 'PUT', 'DELETE'])
@json_errors
def file_detail(request: HttpRequest, file_id: int) -> HttpResponse:
    """Get, update (``fileName``, ``file``, ``tags``) or delete a file."""
    if request.method == 'GET':
        file_instance = file_operations.get_file(file_id)
        return JsonResponse(serialize_file(file_instance))

    if request.method == 'DELETE':
        file_operations.delete_file(file_id)
        return JsonResponse({'message': 'File deleted'})

    payload = parse_payload(request)
    file_instance = file_operations.update_file(
        file_id,
        display_name=payload.get('fileName'),
        new_content=payload.file('file'),
        tags=payload.get_values('tags') if 'tags' in payload else None,
    )
    return JsonResponse(
        {'message': 'File updated', 'file': serialize_file(file_instance)},
    )


@require_GET
@json_errors
def file_tags(request: HttpRequest, file_id: int) -> HttpResponse:
    """List the tag names of a file."""
    return JsonResponse(
        {'tags': file_operations.get_file_tags(file_id)},
    )


@csrf_exempt
@require_POST
@json_errors
def file_label(request: HttpRequest, file_id: int) -> HttpResponse:
    """Regenerate the label of a file."""
    file_instance = label_operations.regenerate_file_label(file_id)
    return JsonResponse(
        {'message': 'Label regenerated', 'file': serialize_file(file_instance)},
    )


@require_GET
@json_errors
def check_file_name(request: HttpRequest) -> HttpResponse:
    """Tell whether a section already has a file with this display name."""
    file_name = request.GET.get('fileName', '')
    section_id = request.GET.get('sectionId', '')
    if not file_name or not section_id.isdigit():
        raise ValidationError('fileName and a numeric sectionId are required')
    return JsonResponse(
        {
            'exists': file_operations.file_name_exists(
                int(section_id),
                file_name,
            ),
        },
    )


@require_GET
@json_errors
def download_file(request: HttpRequest, file_id: int) -> HttpResponse:
    """Send the original payload (the URL encoded in every QR code)."""
    file_instance = File.objects.get(id=file_id)
    storage = get_storage()
    stored_name = file_instance.path_file.name
    if not storage.exists(stored_name):
        logger.warning('Payload missing for download: %s', stored_name)
        raise File.DoesNotExist('File not found on disk')

    logger.info('Serving download: %s (ID: %d)', stored_name, file_id)
    return FileResponse(
        storage.open(stored_name, 'rb'),
        as_attachment=True,
        filename=file_instance.get_filename(),
    )


@require_GET
@json_errors
def download_file_folder(request: HttpRequest, file_id: int) -> HttpResponse:
    """Send the whole file folder (payload and label) as ``<name>.zip``."""
    file_instance = file_operations.get_file(file_id)
    archive = export_operations.build_file_folder_archive(file_instance)
    return zip_response(archive, f'{file_instance.name}.zip')
