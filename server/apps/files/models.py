"""Database models for files app."""

from pathlib import PurePosixPath
from typing import ClassVar, Final, final, override

from django.db import models

# Constants for field max lengths
_NAME_MAX_LENGTH: Final = 255
_FOLDER_NAME_MAX_LENGTH: Final = 64  # opaque ids are 32 hex chars
_PATH_MAX_LENGTH: Final = 500
_URL_MAX_LENGTH: Final = 500
_TAG_NAME_MAX_LENGTH: Final = 255


@final
class Project(models.Model):
    """Top-level container of sections.

    Files of a project live under ``uploads/{folder}/...`` where the folder
    is the opaque ``folder_name``. Rows created before opaque folders were
    introduced have an empty ``folder_name`` and use ``project_name`` as
    their directory instead.
    """

    project_name = models.CharField(
        max_length=_NAME_MAX_LENGTH,
        unique=True,
    )

    folder_name = models.CharField(
        max_length=_FOLDER_NAME_MAX_LENGTH,
        blank=True,
        default='',
        help_text='Opaque directory name, empty for legacy rows',
    )

    # upload_to='' means we control the full path
    project_image = models.FileField(
        upload_to='',
        max_length=_PATH_MAX_LENGTH,
        blank=True,
        default='',
        help_text='Path relative to app root: uploads/project_img/file.png',
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        """Model metadata."""

        verbose_name = 'Project'  # type: ignore[mutable-override]
        verbose_name_plural = 'Projects'  # type: ignore[mutable-override]
        ordering: ClassVar[list[str]] = ['id']

    @override
    def __str__(self) -> str:
        """String representation."""
        return self.project_name

    @property
    def effective_folder(self) -> str:
        """Directory segment of this project (folder id, else name)."""
        return self.folder_name or self.project_name

    @property
    def is_legacy(self) -> bool:
        """Whether the directory is named after the display name."""
        return not self.folder_name


@final
class Section(models.Model):
    """Named group of files inside a project."""

    project = models.ForeignKey(
        Project,
        on_delete=models.CASCADE,
        related_name='sections',
        db_index=True,
    )

    section_name = models.CharField(
        max_length=_NAME_MAX_LENGTH,
    )

    folder_name = models.CharField(
        max_length=_FOLDER_NAME_MAX_LENGTH,
        blank=True,
        default='',
        help_text='Opaque directory name, empty for legacy rows',
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        """Model metadata."""

        verbose_name = 'Section'  # type: ignore[mutable-override]
        verbose_name_plural = 'Sections'  # type: ignore[mutable-override]
        ordering: ClassVar[list[str]] = ['id']

        constraints: ClassVar[list[models.BaseConstraint]] = [
            # Section names are unique within their project
            models.UniqueConstraint(
                fields=['project', 'section_name'],
                name='sections_project_name_unique',
            ),
        ]

    @override
    def __str__(self) -> str:
        """String representation."""
        return f'{self.project_id}:{self.section_name}'

    @property
    def effective_folder(self) -> str:
        """Directory segment of this section (folder id, else name)."""
        return self.folder_name or self.section_name

    @property
    def is_legacy(self) -> bool:
        """Whether the directory is named after the display name."""
        return not self.folder_name


@final
class File(models.Model):
    """Uploaded file with its generated QR label.

    Assets live in their own opaque folder:
    ``uploads/{project}/{section}/{folder_name}/{original filename}``
    next to ``{name}_qr.pdf``. ``folder_name`` never changes, so renames
    only rewrite the label, never the payload.
    """

    section = models.ForeignKey(
        Section,
        on_delete=models.CASCADE,
        related_name='files',
        db_index=True,
    )

    # Display name, shown on the label
    name = models.CharField(
        max_length=_NAME_MAX_LENGTH,
    )

    folder_name = models.CharField(
        max_length=_FOLDER_NAME_MAX_LENGTH,
        help_text='Opaque directory holding the payload and its label',
    )

    path_file = models.FileField(
        upload_to='',
        max_length=_PATH_MAX_LENGTH,
        help_text='Path relative to app root: uploads/p/s/f/original.ext',
    )

    path_pdf = models.FileField(
        upload_to='',
        max_length=_PATH_MAX_LENGTH,
        blank=True,
        default='',
        help_text='Label PDF, empty until generated',
    )

    # Permanent download URL encoded in the QR code
    url_qr_code = models.CharField(
        max_length=_URL_MAX_LENGTH,
        null=True,
        blank=True,
        default=None,
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        """Model metadata."""

        verbose_name = 'File'  # type: ignore[mutable-override]
        verbose_name_plural = 'Files'  # type: ignore[mutable-override]
        ordering: ClassVar[list[str]] = ['id']

        indexes: ClassVar[list[models.Index]] = [
            models.Index(
                fields=['section', 'name'],
                name='files_section_name_idx',
            ),
        ]

    @override
    def __str__(self) -> str:
        """String representation."""
        return f'{self.section_id}:{self.name}'

    def get_filename(self) -> str:
        """Extract stored filename from path_file.

        Example: 'uploads/p/s/f/diagram.png' -> 'diagram.png'

        Returns:
            Filename without path.
        """
        return PurePosixPath(self.path_file.name).name

    def tag_names(self) -> list[str]:
        """Tag names in insertion order."""
        return list(
            self.tags.order_by('id').values_list('tag_name', flat=True),
        )


@final
class Tag(models.Model):
    """Free-form label attached to a single file."""

    file = models.ForeignKey(
        File,
        on_delete=models.CASCADE,
        related_name='tags',
        db_index=True,
    )

    tag_name = models.CharField(
        max_length=_TAG_NAME_MAX_LENGTH,
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        """Model metadata."""

        verbose_name = 'Tag'  # type: ignore[mutable-override]
        verbose_name_plural = 'Tags'  # type: ignore[mutable-override]
        ordering: ClassVar[list[str]] = ['id']

        constraints: ClassVar[list[models.BaseConstraint]] = [
            models.UniqueConstraint(
                fields=['file', 'tag_name'],
                name='tags_file_name_unique',
            ),
        ]

    @override
    def __str__(self) -> str:
        """String representation."""
        return f'{self.file_id}:{self.tag_name}'
