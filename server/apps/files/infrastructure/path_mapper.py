"""Path translation between domain rows and the uploads tree.

On disk a file lives at
``{app_root}/uploads/{project}/{section}/{file folder}/{filename}``.
Each segment is the row's opaque ``folder_name`` or, for legacy rows
created before opaque folders, its display name.

The database stores paths relative to the application root with forward
slashes (``uploads/ab12/cd34/ef56/diagram.png``) whatever the host OS.
"""

from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING, Final, final

from django.conf import settings
from django.core.exceptions import ValidationError

if TYPE_CHECKING:
    from server.apps.files.models import Project, Section

# Character used to split DB-stored paths
_PATH_SEPARATOR: Final = '/'

_FORBIDDEN_SEGMENTS: Final = frozenset(('', '.', '..'))
_FORBIDDEN_CHARACTERS: Final = ('/', '\\', '\x00')

_LABEL_SUFFIX: Final = '_qr.pdf'


@final
class PathMapper:
    """Resolves storage locations for projects, sections and files.

    Project and section arguments may be model instances or raw names.
    Instances contribute their effective folder (opaque id when present,
    else display name); raw names are used verbatim, which is how legacy
    callers address directories.
    """

    def __init__(
        self,
        app_root: Path | str,
        uploads_dir: str = 'uploads',
        project_image_dir: str = 'project_img',
    ) -> None:
        """Initialize path mapper.

        Args:
            app_root: Directory DB-stored paths are relative to.
            uploads_dir: Name of the uploads directory under app_root.
            project_image_dir: Name of the thumbnails directory in uploads.
        """
        self._app_root = Path(app_root).resolve()
        self._uploads_dir = uploads_dir
        self._project_image_dir = project_image_dir

    @classmethod
    def from_settings(cls) -> 'PathMapper':
        """Build a mapper from ``APP_ROOT`` and related settings."""
        return cls(
            settings.APP_ROOT,
            uploads_dir=settings.UPLOADS_DIR_NAME,
            project_image_dir=settings.PROJECT_IMAGE_DIR_NAME,
        )

    @property
    def app_root(self) -> Path:
        """Get the application root."""
        return self._app_root

    @property
    def uploads_root(self) -> Path:
        """Get the absolute uploads directory."""
        return self._app_root / self._uploads_dir

    @staticmethod
    def effective_segment(folder_name: str | None, name: str) -> str:
        """Pick the directory segment for a row.

        Args:
            folder_name: Opaque folder id, empty or None for legacy rows.
            name: Display name used as fallback.

        Returns:
            Validated directory segment.

        Raises:
            ValidationError: If the resulting segment is unsafe.
        """
        segment = folder_name or name
        _validate_segment(segment)
        return segment

    def project_dir(
        self,
        project: 'Project | str',
        *,
        create: bool = False,
    ) -> Path:
        """Get the absolute directory of a project.

        Args:
            project: Project instance or raw directory name.
            create: Create the directory (recursively) if missing.

        Returns:
            Absolute directory path.

        Raises:
            ValidationError: If the name is unsafe or is the thumbnails
                directory.
        """
        segment = _segment_of(project)
        if segment == self._project_image_dir:
            raise ValidationError(f'Reserved directory name: {segment!r}')
        directory = self.uploads_root / segment
        return _ensure(directory, create=create)

    def section_dir(
        self,
        project: 'Project | str',
        section: 'Section | str',
        *,
        create: bool = False,
    ) -> Path:
        """Get the absolute directory of a section.

        Args:
            project: Owning project instance or raw directory name.
            section: Section instance or raw directory name.
            create: Create the directory (recursively) if missing.

        Returns:
            Absolute directory path.
        """
        directory = self.project_dir(project) / _segment_of(section)
        return _ensure(directory, create=create)

    def resolve_file_dir(
        self,
        project: 'Project | str',
        section: 'Section | str',
        file_folder: str,
        *,
        create: bool = True,
    ) -> Path:
        """Get the absolute directory holding a file's assets.

        Args:
            project: Owning project instance or raw directory name.
            section: Owning section instance or raw directory name.
            file_folder: Opaque folder name of the file.
            create: Create missing directories (default True, idempotent).

        Returns:
            Absolute directory path.
        """
        _validate_segment(file_folder)
        directory = self.section_dir(project, section) / file_folder
        return _ensure(directory, create=create)

    def project_image_dir(self, *, create: bool = False) -> Path:
        """Get the absolute directory of project thumbnails."""
        return _ensure(
            self.uploads_root / self._project_image_dir,
            create=create,
        )

    def to_db_relative(self, abs_path: Path | str) -> str:
        """Convert an absolute path to its DB-stored form.

        Args:
            abs_path: Absolute path below the application root.

        Returns:
            Forward-slash path relative to the application root.

        Raises:
            ValidationError: If the path is outside the application root.
        """
        resolved = Path(abs_path).resolve()
        try:
            relative = resolved.relative_to(self._app_root)
        except ValueError as error:
            raise ValidationError(
                f'Path {abs_path} is outside of {self._app_root}',
            ) from error
        return relative.as_posix()

    def to_absolute(self, db_path: str) -> Path:
        """Convert a DB-stored path to an absolute path.

        Accepts both separators so rows written on any host resolve.

        Args:
            db_path: Path relative to the application root.

        Returns:
            Absolute path.

        Raises:
            ValidationError: If the path is empty, absolute or escapes.
        """
        normalized = PurePosixPath(db_path.replace('\\', _PATH_SEPARATOR))
        if not db_path or normalized.is_absolute() or '..' in normalized.parts:
            raise ValidationError(f'Invalid stored path: {db_path!r}')
        return self._app_root.joinpath(*normalized.parts)

    def to_db_dir(self, abs_dir: Path | str) -> str:
        """Convert an absolute directory to a DB prefix ending in '/'."""
        return self.to_db_relative(abs_dir).rstrip(_PATH_SEPARATOR) + '/'

    @staticmethod
    def join_db(*parts: str) -> str:
        """Join DB path components with forward slashes."""
        return _PATH_SEPARATOR.join(
            part.strip(_PATH_SEPARATOR) for part in parts if part
        )

    @staticmethod
    def replace_prefix(db_path: str, old_prefix: str, new_prefix: str) -> str:
        """Move a DB-stored path from one directory prefix to another.

        Paths outside old_prefix are returned unchanged.

        Args:
            db_path: Stored path (e.g., uploads/Old/f/a.png).
            old_prefix: Directory prefix ending with '/'.
            new_prefix: Replacement prefix ending with '/'.

        Returns:
            Rewritten path (e.g., uploads/New/f/a.png).
        """
        if db_path.startswith(old_prefix):
            return new_prefix + db_path[len(old_prefix):]
        return db_path

    @staticmethod
    def label_filename(display_name: str) -> str:
        """Get the label PDF filename for a display name.

        Example: 'diagram' -> 'diagram_qr.pdf'

        Args:
            display_name: File display name.

        Returns:
            Filename safe to use inside the file folder.
        """
        safe_name = display_name.strip()
        for character in _FORBIDDEN_CHARACTERS:
            safe_name = safe_name.replace(character, '_')
        if safe_name in _FORBIDDEN_SEGMENTS:
            safe_name = 'label'
        return f'{safe_name}{_LABEL_SUFFIX}'


def _segment_of(entity: 'Project | Section | str') -> str:
    if isinstance(entity, str):
        _validate_segment(entity)
        return entity
    segment = entity.effective_folder
    _validate_segment(segment)
    return segment


def _validate_segment(segment: str) -> None:
    if segment in _FORBIDDEN_SEGMENTS or any(
        character in segment for character in _FORBIDDEN_CHARACTERS
    ):
        raise ValidationError(f'Invalid directory name: {segment!r}')


def _ensure(directory: Path, *, create: bool) -> Path:
    if create:
        directory.mkdir(parents=True, exist_ok=True)
    return directory
