"""Database models for files app."""

import uuid
from typing import ClassVar, Final, final

from django.conf import settings
from django.db import models
from typing_extensions import override

# Constants for field max lengths
_NAME_MAX_LENGTH: Final = 255
_COLOR_MAX_LENGTH: Final = 32
_MIME_TYPE_MAX_LENGTH: Final = 255
_EXTENSION_MAX_LENGTH: Final = 32
_STORAGE_KEY_MAX_LENGTH: Final = 1024
_STORAGE_URL_MAX_LENGTH: Final = 2048


@final
class Folder(models.Model):
    """Node of a user's folder tree.

    A folder without parent sits at the user's root. Deleting a folder
    cascades to every descendant folder and to the files inside them.
    """

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
    )

    name = models.CharField(max_length=_NAME_MAX_LENGTH)

    description = models.TextField(null=True, blank=True)

    color = models.CharField(
        max_length=_COLOR_MAX_LENGTH,
        null=True,
        blank=True,
        help_text='Color code for UI display (e.g., #3B82F6)',
    )

    # Owner relationship
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='folders',
        db_index=True,
    )

    parent = models.ForeignKey(
        'self',
        on_delete=models.CASCADE,
        related_name='children',
        null=True,
        blank=True,
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        """Model metadata."""

        verbose_name = 'Folder'  # type: ignore[mutable-override]
        verbose_name_plural = 'Folders'  # type: ignore[mutable-override]
        ordering: ClassVar[list[str]] = ['name']

        indexes: ClassVar[list[models.Index]] = [
            # Optimize root folder listing
            models.Index(
                fields=['user', 'parent'],
                name='folders_user_parent_idx',
            ),
        ]

    @override
    def __str__(self) -> str:
        """String representation."""
        return f'{self.user_id}:{self.name}'

    @property
    def is_root(self) -> bool:
        """Whether the folder sits at the top of the tree."""
        return self.parent_id is None


@final
class File(models.Model):
    """Metadata of a file whose content lives in object storage.

    ``storage_key`` follows the pattern
    users/{user_id}/(root|folders/{folder_id})/{name}_{ms}_{token}{ext}
    and is fixed at upload; moving a file only changes ``folder``.
    """

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
    )

    name = models.CharField(max_length=_NAME_MAX_LENGTH)

    original_name = models.CharField(
        max_length=_NAME_MAX_LENGTH,
        help_text='Filename as uploaded',
    )

    description = models.TextField(null=True, blank=True)

    mime_type = models.CharField(max_length=_MIME_TYPE_MAX_LENGTH)

    size = models.BigIntegerField(help_text='File size in bytes')

    storage_url = models.URLField(max_length=_STORAGE_URL_MAX_LENGTH)

    storage_key = models.CharField(
        max_length=_STORAGE_KEY_MAX_LENGTH,
        db_index=True,
        help_text='Object key in the storage bucket',
    )

    extension = models.CharField(
        max_length=_EXTENSION_MAX_LENGTH,
        null=True,
        blank=True,
        help_text='Extension with leading dot (e.g., .pdf)',
    )

    metadata = models.JSONField(
        null=True,
        blank=True,
        help_text='Arbitrary client supplied data',
    )

    # Owner relationship
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='files',
        db_index=True,
    )

    folder = models.ForeignKey(
        Folder,
        on_delete=models.CASCADE,
        related_name='files',
        null=True,
        blank=True,
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        """Model metadata."""

        verbose_name = 'File'  # type: ignore[mutable-override]
        verbose_name_plural = 'Files'  # type: ignore[mutable-override]
        ordering: ClassVar[list[str]] = ['-created_at']

        indexes: ClassVar[list[models.Index]] = [
            # Optimize folder and root listing queries
            models.Index(
                fields=['user', 'folder'],
                name='files_user_folder_idx',
            ),
        ]

    @override
    def __str__(self) -> str:
        """String representation."""
        return f'{self.user_id}:{self.name}'
