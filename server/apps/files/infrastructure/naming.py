"""Opaque directory and file names.

Storage directories are named with random tokens instead of user-visible
names so that renaming a project, section or file never moves a payload.
"""

import secrets
from pathlib import PurePath
from typing import Final

# 16 random bytes -> 32 hex chars (128 bits)
_FOLDER_TOKEN_BYTES: Final = 16
_MAX_EXTENSION_LENGTH: Final = 10


def generate_folder_name() -> str:
    """Generate an opaque, filesystem-safe folder name.

    Uses the ``secrets`` CSPRNG. The collision probability in a 128-bit
    space is negligible, so no existence check is made.

    Returns:
        Lowercase hex string of 32 characters.
    """
    return secrets.token_hex(_FOLDER_TOKEN_BYTES)


def generate_image_filename(original_name: str) -> str:
    """Generate a unique filename for a project thumbnail.

    Keeps the original extension (lowercase) when it looks sane.

    Args:
        original_name: Client-supplied filename (e.g., 'Logo.PNG').

    Returns:
        Random name with extension (e.g., '3f2a...9c.png').
    """
    extension = PurePath(original_name or '').suffix.lower()
    if len(extension) > _MAX_EXTENSION_LENGTH or not extension[1:].isalnum():
        extension = ''
    return f'{generate_folder_name()}{extension}'
