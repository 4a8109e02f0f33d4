"""Zip archives of stored files and labels.

Archives are built in memory; entry names come from display names so the
downloaded tree reads ``Rack1/diagram/diagram.png`` rather than opaque ids.
"""

import logging
import zipfile
from collections.abc import Iterable, Iterator
from io import BytesIO
from pathlib import Path, PurePosixPath
from typing import Final

logger = logging.getLogger(__name__)

ArchiveEntry = tuple[str, Path]

_UNSAFE_ENTRY_CHARACTERS: Final = ('/', '\\', '\x00')
_FALLBACK_SEGMENT: Final = '_'


def build_archive(entries: Iterable[ArchiveEntry]) -> bytes:
    """Zip files on disk under the given entry names.

    Missing sources are skipped with a warning. Duplicate entry names get
    a `` (n)`` suffix before the extension.

    Args:
        entries: Pairs of (entry name, absolute source path).

    Returns:
        Zip archive bytes (possibly an empty archive).
    """
    buffer = BytesIO()
    used_names: set[str] = set()
    written = 0

    compression = zipfile.ZIP_DEFLATED
    with zipfile.ZipFile(buffer, 'w', compression=compression) as archive:
        for entry_name, source in entries:
            if not source.is_file():
                logger.warning('Skipping missing file in archive: %s', source)
                continue
            archive.write(source, unique_entry_name(entry_name, used_names))
            written += 1

    logger.info('Built archive with %d entries', written)
    return buffer.getvalue()


def folder_entries(directory: Path, prefix: str = '') -> Iterator[ArchiveEntry]:
    """List every file below a directory as archive entries.

    Args:
        directory: Absolute directory to walk.
        prefix: Entry name prefix (e.g., 'diagram').

    Yields:
        Pairs of (entry name, absolute source path), sorted by path.
    """
    if not directory.is_dir():
        logger.warning('Directory not found for archive: %s', directory)
        return
    for source in sorted(directory.rglob('*')):
        if source.is_file():
            relative = source.relative_to(directory).as_posix()
            yield (join_entry(prefix, relative), source)


def entry_segment(name: str) -> str:
    """Make a display name usable as a single zip path segment."""
    segment = name.strip()
    for character in _UNSAFE_ENTRY_CHARACTERS:
        segment = segment.replace(character, '_')
    if segment in {'', '.', '..'}:
        return _FALLBACK_SEGMENT
    return segment


def join_entry(*parts: str) -> str:
    """Join entry name parts with forward slashes, skipping empty ones."""
    return '/'.join(part for part in parts if part)


def unique_entry_name(entry_name: str, used_names: set[str]) -> str:
    """Suffix an entry name until it is not in used_names.

    Example: 'Rack1/diagram.png' -> 'Rack1/diagram (1).png'

    Args:
        entry_name: Desired entry name.
        used_names: Names already written, updated in place.

    Returns:
        Entry name not used before.
    """
    candidate = entry_name
    path = PurePosixPath(entry_name)
    counter = 1
    while candidate in used_names:
        candidate = str(path.with_name(f'{path.stem} ({counter}){path.suffix}'))
        counter += 1
    used_names.add(candidate)
    return candidate
