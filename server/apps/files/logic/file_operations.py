"""Business logic for file operations.

Transaction safety: content is written to storage before the record is
created, and the record is deleted even when removing its content
fails. A stored object without record is recoverable (see the
cleanup_orphaned_objects command); a record without content is not.
"""

import logging
from typing import TYPE_CHECKING, Any, Final, final

from django.core.exceptions import PermissionDenied, ValidationError
from django.db.models import QuerySet

from server.apps.files.exceptions import StorageError
from server.apps.files.infrastructure.metadata import (
    derive_key,
    get_file_extension,
)
from server.apps.files.logic.folder_operations import (
    get_owned_folder,
    is_owned_by,
)
from server.apps.files.models import File, Folder

if TYPE_CHECKING:
    from server.apps.files.infrastructure.storage import FileStorage

logger = logging.getLogger(__name__)

_UPDATABLE_FIELDS: Final = frozenset(('name', 'description', 'folder_id'))
_ROOT_FOLDER_TAG: Final = 'root'


def get_owned_file(file_id: Any, owner_id: Any) -> File:
    """Fetch a file record and check it belongs to the owner.

    Args:
        file_id: File ID.
        owner_id: Requesting user ID.

    Returns:
        File instance.

    Raises:
        File.DoesNotExist: If the file does not exist.
        PermissionDenied: If the file belongs to another user.
    """
    file_instance = File.objects.filter(id=file_id).first()
    if file_instance is None:
        raise File.DoesNotExist('File not found')
    if not is_owned_by(file_instance, owner_id):
        logger.warning('File access denied: ID=%s', file_id)
        raise PermissionDenied('File does not belong to user')
    return file_instance


@final
class FileManager:
    """Places files in folders and keeps records in step with storage."""

    def __init__(self, storage: 'FileStorage') -> None:
        """Initialize the manager.

        Args:
            storage: Object storage holding file content.
        """
        self._storage = storage

    def validate_placement(
        self,
        folder_id: Any,
        owner_id: Any,
    ) -> Folder | None:
        """Check a file may be placed in a folder.

        Args:
            folder_id: Target folder ID, None for the root.
            owner_id: Owner of the file.

        Returns:
            Target Folder, or None for the root.

        Raises:
            ValidationError: If the folder does not exist.
            PermissionDenied: If the folder belongs to another user.
        """
        if not folder_id:
            return None

        folder = Folder.objects.filter(id=folder_id).first()
        if folder is None:
            raise ValidationError('Folder not found')
        if not is_owned_by(folder, owner_id):
            raise PermissionDenied('Folder does not belong to user')
        return folder

    def upload_file(  # noqa: WPS211
        self,
        content: bytes,
        original_name: str,
        mime_type: str,
        owner_id: Any,
        folder_id: Any = None,
        description: str | None = None,
    ) -> File:
        """Store uploaded content and create its record.

        Args:
            content: Raw file bytes.
            original_name: Filename as uploaded.
            mime_type: Content type reported by the client.
            owner_id: Owner's user ID.
            folder_id: Target folder ID, None for the root.
            description: Optional description.

        Returns:
            Created File instance.

        Raises:
            ValidationError: If the target folder does not exist.
            PermissionDenied: If the target folder belongs to another user.
            StorageError: If writing to storage fails; no record is made.
        """
        self.validate_placement(folder_id, owner_id)

        storage_key = derive_key(original_name, owner_id, folder_id)

        # Step 1: Upload to storage first
        storage_url = self._storage.put(
            storage_key,
            content,
            mime_type,
            metadata={
                'originalName': original_name,
                'userId': str(owner_id),
                'folderId': str(folder_id) if folder_id else _ROOT_FOLDER_TAG,
            },
        )

        # Step 2: Create database record
        try:
            file_instance = File.objects.create(
                name=original_name,
                original_name=original_name,
                description=description or None,
                mime_type=mime_type,
                size=len(content),
                storage_url=storage_url,
                storage_key=storage_key,
                extension=get_file_extension(original_name) or None,
                metadata=None,
                user_id=owner_id,
                folder_id=folder_id or None,
            )
        except Exception:
            # Rollback: the object would have no record pointing at it
            logger.exception(
                'Database insert failed, rolling back storage upload: %s',
                storage_key,
            )
            self._delete_object(storage_key)
            raise

        logger.info(
            'File uploaded: ID=%s, key=%s, size=%d',
            file_instance.id,
            storage_key,
            file_instance.size,
        )
        return file_instance

    def create(  # noqa: WPS211
        self,
        name: str,
        original_name: str,
        mime_type: str,
        size: int,
        storage_url: str,
        storage_key: str,
        owner_id: Any,
        folder_id: Any = None,
        description: str | None = None,
        extension: str | None = None,
        metadata: Any = None,
    ) -> File:
        """Create a record for content that is already stored.

        Args:
            name: Display name.
            original_name: Filename as uploaded.
            mime_type: Content type.
            size: Size in bytes.
            storage_url: URL of the stored object.
            storage_key: Key of the stored object.
            owner_id: Owner's user ID.
            folder_id: Target folder ID, None for the root.
            description: Optional description.
            extension: Optional extension with leading dot.
            metadata: Optional JSON-serializable data.

        Returns:
            Created File instance.

        Raises:
            ValidationError: If the target folder does not exist.
            PermissionDenied: If the target folder belongs to another user.
        """
        self.validate_placement(folder_id, owner_id)

        file_instance = File.objects.create(
            name=name,
            original_name=original_name,
            description=description,
            mime_type=mime_type,
            size=size,
            storage_url=storage_url,
            storage_key=storage_key,
            extension=extension,
            metadata=metadata,
            user_id=owner_id,
            folder_id=folder_id or None,
        )
        logger.info('File record created: ID=%s', file_instance.id)
        return file_instance

    def find_all(self, owner_id: Any) -> QuerySet[File]:
        """List every file of the owner."""
        return File.objects.filter(user_id=owner_id).select_related('folder')

    def find_root_files(self, owner_id: Any) -> QuerySet[File]:
        """List the owner's files that are not in any folder."""
        return self.find_all(owner_id).filter(folder__isnull=True)

    def find_by_folder(self, folder_id: Any, owner_id: Any) -> QuerySet[File]:
        """List files directly inside a folder.

        Args:
            folder_id: Folder ID.
            owner_id: Requesting user ID.

        Returns:
            QuerySet of File objects in the folder.

        Raises:
            Folder.DoesNotExist: If the folder does not exist.
            PermissionDenied: If the folder belongs to another user.
        """
        folder = get_owned_folder(folder_id, owner_id)
        return File.objects.filter(folder=folder).select_related('folder')

    def find_by_id(self, file_id: Any, owner_id: Any) -> File:
        """Get one file record of the owner."""
        return get_owned_file(file_id, owner_id)

    def update(
        self,
        file_id: Any,
        patch: dict[str, Any],
        owner_id: Any,
    ) -> File:
        """Rename, describe or move a file.

        A ``folder_id`` of None in the patch moves the file to the root.
        The storage key never changes.

        Args:
            file_id: File ID.
            patch: Fields to change (name, description, folder_id).
            owner_id: Requesting user ID.

        Returns:
            Updated File instance.

        Raises:
            File.DoesNotExist: If the file does not exist.
            PermissionDenied: If the file or target folder belongs to
                another user.
            ValidationError: If the target folder does not exist.
        """
        file_instance = get_owned_file(file_id, owner_id)

        if patch.get('folder_id') is not None:
            self.validate_placement(patch['folder_id'], owner_id)

        changed = [field for field in patch if field in _UPDATABLE_FIELDS]
        for field in changed:
            setattr(file_instance, field, patch[field])

        file_instance.save()
        logger.info('File updated: ID=%s, fields=%s', file_instance.id, changed)
        return file_instance

    def move_to_folder(
        self,
        file_id: Any,
        folder_id: Any,
        owner_id: Any,
    ) -> File:
        """Move a file into a folder, or to the root when folder_id is None.

        Args:
            file_id: File ID.
            folder_id: Target folder ID or None.
            owner_id: Requesting user ID.

        Returns:
            Updated File instance.

        Raises:
            File.DoesNotExist: If the file does not exist.
            PermissionDenied: If the file or target folder belongs to
                another user.
            ValidationError: If the target folder does not exist.
        """
        file_instance = get_owned_file(file_id, owner_id)
        self.validate_placement(folder_id, owner_id)

        file_instance.folder_id = folder_id or None
        file_instance.save(update_fields=['folder', 'updated_at'])
        logger.info(
            'File moved: ID=%s -> folder %s',
            file_instance.id,
            folder_id or _ROOT_FOLDER_TAG,
        )
        return file_instance

    def delete(self, file_id: Any, owner_id: Any) -> None:
        """Delete a file's stored content and its record.

        Content deletion is best effort: a storage failure is logged and
        the record is deleted anyway.

        Args:
            file_id: File ID.
            owner_id: Requesting user ID.

        Raises:
            File.DoesNotExist: If the file does not exist.
            PermissionDenied: If the file belongs to another user.
        """
        file_instance = get_owned_file(file_id, owner_id)

        self._delete_object(file_instance.storage_key)

        file_instance.delete()
        logger.info('File record deleted: ID=%s', file_id)

    def generate_download_url(self, file_id: Any, owner_id: Any) -> str:
        """Get a time-limited download URL for a file.

        Args:
            file_id: File ID.
            owner_id: Requesting user ID.

        Returns:
            Presigned URL.

        Raises:
            File.DoesNotExist: If the file does not exist.
            PermissionDenied: If the file belongs to another user.
            StorageError: If the URL cannot be signed.
        """
        file_instance = get_owned_file(file_id, owner_id)
        return self._storage.presign_download(file_instance.storage_key)

    def _delete_object(self, storage_key: str) -> None:
        try:
            self._storage.delete(storage_key)
        except StorageError:
            # Log but don't raise - the object is orphaned, not lost
            logger.warning('Orphaned object left in storage: %s', storage_key)
