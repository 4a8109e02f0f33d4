"""JSON representations of domain rows."""

from typing import Any

from server.apps.files.models import File, Project, Section


def serialize_project(project: Project) -> dict[str, Any]:
    """Serialize a project."""
    return {
        'id': project.id,
        'project_name': project.project_name,
        'project_image': project.project_image.name or None,
        'created_at': project.created_at,
        'updated_at': project.updated_at,
    }


def serialize_section(section: Section) -> dict[str, Any]:
    """Serialize a section."""
    return {
        'id': section.id,
        'project_id': section.project_id,
        'section_name': section.section_name,
        'created_at': section.created_at,
        'updated_at': section.updated_at,
    }


def serialize_file(
    file_instance: File,
    size: int | None = None,
    *,
    with_location: bool = False,
) -> dict[str, Any]:
    """Serialize a file with its tags.

    Args:
        file_instance: File to serialize.
        size: On-disk size, included when known.
        with_location: Include section and project names (search results).

    Returns:
        JSON-ready dictionary.
    """
    data: dict[str, Any] = {
        'id': file_instance.id,
        'section_id': file_instance.section_id,
        'name': file_instance.name,
        'filename': file_instance.get_filename(),
        'path_file': file_instance.path_file.name,
        'path_pdf': file_instance.path_pdf.name or None,
        'url_qr_code': file_instance.url_qr_code,
        'tags': [tag.tag_name for tag in file_instance.tags.all()],
        'created_at': file_instance.created_at,
        'updated_at': file_instance.updated_at,
    }
    if size is not None:
        data['size'] = size
    if with_location:
        data['section_name'] = file_instance.section.section_name
        data['project_name'] = file_instance.section.project.project_name
    return data
