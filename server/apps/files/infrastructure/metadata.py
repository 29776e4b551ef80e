"""Metadata and storage key helpers for files."""

import mimetypes
import re
import secrets
import string
import time
from typing import Final

_TOKEN_ALPHABET: Final = string.ascii_lowercase + string.digits
_TOKEN_LENGTH: Final = 13
_UNSAFE_KEY_CHARS: Final = re.compile('[^a-zA-Z0-9]')
_DEFAULT_MIME_TYPE: Final = 'application/octet-stream'


def detect_mime_type(filename: str) -> str:
    """Guess MIME type from filename extension.

    Args:
        filename: Filename with extension.

    Returns:
        MIME type string (e.g., 'image/jpeg', 'application/pdf').
        Returns 'application/octet-stream' if type cannot be determined.
    """
    mime_type, _ = mimetypes.guess_type(filename)
    if mime_type is None:
        return _DEFAULT_MIME_TYPE
    return mime_type


def get_file_extension(filename: str) -> str:
    """Get extension from the last dot to the end of the name.

    Example: 'archive.tar.gz' -> '.gz', 'README' -> ''

    Args:
        filename: Original filename.

    Returns:
        Extension including the dot, or empty string if there is no dot.
    """
    dot_index = filename.rfind('.')
    if dot_index == -1:
        return ''
    return filename[dot_index:]


def sanitize_base_name(filename: str) -> str:
    """Make the part before the extension safe for a storage key.

    Example: 'My Document.pdf' -> 'my_document'

    Args:
        filename: Original filename.

    Returns:
        Lower-cased base name with every non-alphanumeric character
        replaced by an underscore.
    """
    dot_index = filename.rfind('.')
    base_name = filename if dot_index == -1 else filename[:dot_index]
    return _UNSAFE_KEY_CHARS.sub('_', base_name).lower()


def generate_token() -> str:
    """Random suffix telling apart uploads made in the same millisecond."""
    return ''.join(
        secrets.choice(_TOKEN_ALPHABET) for _ in range(_TOKEN_LENGTH)
    )


def derive_key(
    original_name: str,
    owner_id: object,
    folder_id: object | None = None,
) -> str:
    """Build a unique storage key for a new upload.

    Example:
        ('My Document.pdf', 'user123', 'folder456') ->
        'users/user123/folders/folder456/my_document_1718000000000_k3j9x0a1b2c3d.pdf'

    Args:
        original_name: Filename as uploaded.
        owner_id: Owner's user ID.
        folder_id: Target folder ID, None for the user's root.

    Returns:
        Storage key for the object.
    """
    folder_path = f'folders/{folder_id}/' if folder_id else 'root/'
    timestamp_ms = time.time_ns() // 1_000_000

    return 'users/{owner}/{folder}{name}_{timestamp}_{token}{extension}'.format(
        owner=owner_id,
        folder=folder_path,
        name=sanitize_base_name(original_name),
        timestamp=timestamp_ms,
        token=generate_token(),
        extension=get_file_extension(original_name),
    )
