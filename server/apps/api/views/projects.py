"""Project endpoints."""

from http import HTTPStatus

from django.http import HttpRequest, HttpResponse, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_http_methods

from server.apps.api.errors import json_errors
from server.apps.api.payloads import parse_payload
from server.apps.api.serializers import (
    serialize_file,
    serialize_project,
    serialize_section,
)
from server.apps.api.views.responses import zip_response
from server.apps.files.logic import (
    export_operations,
    file_operations,
    project_operations,
    section_operations,
)


@csrf_exempt
@require_http_methods(['GET', 'POST'])
@json_errors
def project_collection(request: HttpRequest) -> HttpResponse:
    """List projects or create one (``projectName``, ``projectImage``)."""
    if request.method == 'GET':
        projects = project_operations.list_projects()
        return JsonResponse(
            [serialize_project(project) for project in projects],
            safe=False,
        )

    payload = parse_payload(request)
    project = project_operations.create_project(
        payload.get('projectName', ''),
        image=payload.file('projectImage'),
    )
    return JsonResponse(
        {'message': 'Project created', 'project': serialize_project(project)},
        status=HTTPStatus.CREATED,
    )


@csrf_exempt
@require_http_methods(['GET', 'PUT', 'DELETE'])
@json_errors
def project_detail(request: HttpRequest, project_id: int) -> HttpResponse:
    """Get, rename (and re-image) or delete a project."""
    if request.method == 'GET':
        project = project_operations.get_project(project_id)
        return JsonResponse(serialize_project(project))

    if request.method == 'DELETE':
        project_operations.delete_project(project_id)
        return JsonResponse({'message': 'Project deleted'})

    payload = parse_payload(request)
    project = project_operations.update_project(
        project_id,
        new_name=payload.get('projectName'),
        image=payload.file('projectImage'),
    )
    return JsonResponse(
        {'message': 'Project updated', 'project': serialize_project(project)},
    )


@require_GET
@json_errors
def project_sections(request: HttpRequest, project_id: int) -> HttpResponse:
    """List the sections of a project."""
    sections = section_operations.list_sections(project_id)
    return JsonResponse(
        [serialize_section(section) for section in sections],
        safe=False,
    )


@require_GET
@json_errors
def project_search(request: HttpRequest, project_id: int) -> HttpResponse:
    """Search files of a project by file, section or tag name (``term``)."""
    files = file_operations.search_project_files(
        project_id,
        request.GET.get('term', ''),
    ).prefetch_related('tags')
    return JsonResponse(
        [
            serialize_file(file_instance, with_location=True)
            for file_instance in files
        ],
        safe=False,
    )


@require_GET
@json_errors
def export_project_files(
    request: HttpRequest,
    project_id: int,
) -> HttpResponse:
    """Download every original of a project as a zip."""
    project = project_operations.get_project(project_id)
    archive = export_operations.export_project(
        project,
        export_operations.ExportKind.FILES,
    )
    return zip_response(archive, f'{project.project_name}_files.zip')


@require_GET
@json_errors
def export_project_labels(
    request: HttpRequest,
    project_id: int,
) -> HttpResponse:
    """Download every label of a project as a zip."""
    project = project_operations.get_project(project_id)
    archive = export_operations.export_project(
        project,
        export_operations.ExportKind.LABELS,
    )
    return zip_response(archive, f'{project.project_name}_qr.zip')
