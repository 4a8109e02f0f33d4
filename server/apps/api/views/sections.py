"""Section endpoints."""

from http import HTTPStatus

from django.core.exceptions import ValidationError
from django.http import HttpRequest, HttpResponse, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import (
    require_GET,
    require_http_methods,
    require_POST,
)

from server.apps.api.errors import json_errors
from server.apps.api.payloads import parse_payload
from server.apps.api.serializers import serialize_file, serialize_section
from server.apps.api.views.responses import zip_response
from server.apps.files.logic import (
    export_operations,
    file_operations,
    section_operations,
)


@csrf_exempt
@require_POST
@json_errors
def add_sections(request: HttpRequest) -> HttpResponse:
    """Create sections in a project (``projectId``, ``sectionNames``)."""
    payload = parse_payload(request)
    project_id = payload.get_id('projectId')
    if project_id is None:
        raise ValidationError('projectId is required')

    sections = section_operations.add_sections(
        project_id,
        payload.getlist('sectionNames'),
    )
    return JsonResponse(
        {
            'message': 'Sections added',
            'sections': [serialize_section(section) for section in sections],
        },
        status=HTTPStatus.CREATED,
    )


@csrf_exempt
@require_http_methods(['GET', 'PUT', 'DELETE'])
@json_errors
def section_detail(request: HttpRequest, section_id: int) -> HttpResponse:
    """Get, rename (``section_name``) or delete a section."""
    if request.method == 'GET':
        section = section_operations.get_section(section_id)
        return JsonResponse(serialize_section(section))

    if request.method == 'DELETE':
        section_operations.delete_section(section_id)
        return JsonResponse({'message': 'Section deleted'})

    payload = parse_payload(request)
    section = section_operations.rename_section(
        section_id,
        payload.get('section_name') or payload.get('sectionName', ''),
    )
    return JsonResponse(
        {'message': 'Section updated', 'section': serialize_section(section)},
    )


@require_GET
@json_errors
def section_files(request: HttpRequest, section_id: int) -> HttpResponse:
    """List the files of a section with their sizes."""
    listings = file_operations.list_files(section_id)
    return JsonResponse(
        [serialize_file(listing.file, listing.size) for listing in listings],
        safe=False,
    )


@require_GET
@json_errors
def export_section_files(request: HttpRequest, section_id: int) -> HttpResponse:
    """Download the originals of a section as a zip."""
    section = section_operations.get_section(section_id)
    archive = export_operations.export_section(
        section,
        export_operations.ExportKind.FILES,
    )
    return zip_response(archive, f'{section.section_name}.zip')


@require_GET
@json_errors
def export_section_labels(
    request: HttpRequest,
    section_id: int,
) -> HttpResponse:
    """Download the labels of a section as a zip."""
    section = section_operations.get_section(section_id)
    archive = export_operations.export_section(
        section,
        export_operations.ExportKind.LABELS,
    )
    return zip_response(archive, f'{section.section_name}_qr.zip')
