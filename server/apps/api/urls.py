"""URL configuration of the api app."""

from django.urls import path

from server.apps.api.views import files, projects, sections

app_name = 'api'

urlpatterns = [
    # Projects
    path('projects', projects.project_collection, name='projects'),
    path(
        'projects/export-project-files/<int:project_id>',
        projects.export_project_files,
        name='export-project-files',
    ),
    path(
        'projects/export-project-qr/<int:project_id>',
        projects.export_project_labels,
        name='export-project-qr',
    ),
    path(
        'projects/<int:project_id>',
        projects.project_detail,
        name='project-detail',
    ),
    path(
        'projects/<int:project_id>/sections',
        projects.project_sections,
        name='project-sections',
    ),
    path(
        'projects/<int:project_id>/search',
        projects.project_search,
        name='project-search',
    ),
    # Sections
    path('sections/addsections', sections.add_sections, name='add-sections'),
    path(
        'sections/export/<int:section_id>',
        sections.export_section_files,
        name='export-section',
    ),
    path(
        'sections/export-qr/<int:section_id>',
        sections.export_section_labels,
        name='export-section-qr',
    ),
    path(
        'sections/<int:section_id>',
        sections.section_detail,
        name='section-detail',
    ),
    path(
        'sections/<int:section_id>/files',
        sections.section_files,
        name='section-files',
    ),
    # Files
    path('uploadFile/upload', files.upload, name='upload'),
    path(
        'uploadFile/checkFileName',
        files.check_file_name,
        name='check-file-name',
    ),
    path(
        'uploadFile/download-file/<int:file_id>',
        files.download_file,
        name='download-file',
    ),
    path(
        'uploadFile/download/<int:file_id>',
        files.download_file_folder,
        name='download-file-folder',
    ),
    path(
        'uploadFile/files/<int:file_id>',
        files.file_detail,
        name='file-detail',
    ),
    path(
        'uploadFile/files/<int:file_id>/tags',
        files.file_tags,
        name='file-tags',
    ),
    path(
        'uploadFile/files/<int:file_id>/label',
        files.file_label,
        name='file-label',
    ),
]
