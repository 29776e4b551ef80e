"""Business logic for the folder tree.

Every operation is scoped to an owner: folders of other users are
reported as forbidden, never silently skipped. Concurrent requests on
the same folder are not locked; the last write wins.
"""

import logging
from functools import partial
from typing import TYPE_CHECKING, Any, Final, final

from django.core.exceptions import PermissionDenied, ValidationError
from django.db import transaction
from django.db.models import QuerySet

from server.apps.files.exceptions import (
    FolderHierarchyCorruptedError,
    StorageError,
)
from server.apps.files.models import File, Folder

if TYPE_CHECKING:
    from server.apps.files.infrastructure.storage import FileStorage

logger = logging.getLogger(__name__)

# Most levels a folder tree may have; longer stored chains are corrupted data
MAX_FOLDER_DEPTH: Final = 256

_UPDATABLE_FIELDS: Final = frozenset(('name', 'description', 'color', 'parent_id'))
_TOO_DEEP: Final = 'Folder tree is too deep'


def is_owned_by(instance: File | Folder, owner_id: Any) -> bool:
    """Check whether a folder or file belongs to the given user.

    Args:
        instance: Folder or File record.
        owner_id: User ID (UUID or its string form).

    Returns:
        True if the record is owned by ``owner_id``.
    """
    return str(instance.user_id) == str(owner_id)


def get_owned_folder(
    folder_id: Any,
    owner_id: Any,
    queryset: QuerySet[Folder] | None = None,
) -> Folder:
    """Fetch a folder and check it belongs to the owner.

    Args:
        folder_id: Folder ID.
        owner_id: Requesting user ID.
        queryset: Optional base queryset (e.g. with prefetches).

    Returns:
        Folder instance.

    Raises:
        Folder.DoesNotExist: If the folder does not exist.
        PermissionDenied: If the folder belongs to another user.
    """
    source = Folder.objects.all() if queryset is None else queryset
    folder = source.filter(id=folder_id).first()
    if folder is None:
        raise Folder.DoesNotExist('Folder not found')
    if not is_owned_by(folder, owner_id):
        logger.warning('Folder access denied: ID=%s', folder_id)
        raise PermissionDenied('Folder does not belong to user')
    return folder


def _get_parent_folder(parent_id: Any, owner_id: Any) -> Folder:
    parent = Folder.objects.filter(id=parent_id).first()
    if parent is None:
        raise Folder.DoesNotExist('Parent folder not found')
    if not is_owned_by(parent, owner_id):
        raise PermissionDenied('Parent folder does not belong to user')
    return parent


@final
class FolderManager:
    """Maintains the structural rules of a user's folder tree.

    - A parent always belongs to the same user as its child
    - No folder is its own ancestor
    - No tree is deeper than MAX_FOLDER_DEPTH levels
    - Deleting a folder removes its whole subtree, files included
    """

    def __init__(self, storage: 'FileStorage') -> None:
        """Initialize the manager.

        Args:
            storage: Object storage holding the content of files, used to
                clean up blobs of deleted subtrees.
        """
        self._storage = storage

    def create(
        self,
        name: str,
        owner_id: Any,
        description: str | None = None,
        color: str | None = None,
        parent_id: Any = None,
    ) -> Folder:
        """Create a folder, at the root or under a parent.

        Args:
            name: Folder name.
            owner_id: Owner's user ID.
            description: Optional description.
            color: Optional display color.
            parent_id: Optional parent folder ID.

        Returns:
            Created Folder instance.

        Raises:
            Folder.DoesNotExist: If the parent does not exist.
            PermissionDenied: If the parent belongs to another user.
            ValidationError: If the folder would sit deeper than
                MAX_FOLDER_DEPTH.
        """
        if parent_id:
            parent = _get_parent_folder(parent_id, owner_id)
            if len(self._ancestor_chain(parent)) >= MAX_FOLDER_DEPTH:
                raise ValidationError(_TOO_DEEP)

        folder = Folder.objects.create(
            name=name,
            description=description,
            color=color,
            parent_id=parent_id or None,
            user_id=owner_id,
        )
        logger.info('Folder created: ID=%s, parent=%s', folder.id, parent_id)
        return folder

    def update(
        self,
        folder_id: Any,
        patch: dict[str, Any],
        owner_id: Any,
    ) -> Folder:
        """Rename, describe, recolor or reparent a folder.

        A ``parent_id`` of None in the patch moves the folder to the root.

        Args:
            folder_id: Folder ID.
            patch: Fields to change (name, description, color, parent_id).
            owner_id: Requesting user ID.

        Returns:
            Updated Folder instance.

        Raises:
            Folder.DoesNotExist: If the folder or new parent does not exist.
            PermissionDenied: If either belongs to another user.
            ValidationError: If the move would make the folder its own
                parent or ancestor, or push its subtree deeper than
                MAX_FOLDER_DEPTH.
            FolderHierarchyCorruptedError: If the stored ancestor chain
                loops or exceeds MAX_FOLDER_DEPTH.
        """
        folder = get_owned_folder(folder_id, owner_id)

        new_parent_id = patch.get('parent_id')
        if new_parent_id is not None:
            if str(new_parent_id) == str(folder.id):
                raise ValidationError('Folder cannot be its own parent')

            new_parent = _get_parent_folder(new_parent_id, owner_id)
            chain = self._ancestor_chain(new_parent)
            if folder.id in chain:
                raise ValidationError('Cannot create circular reference')

            subtree_height = len(self._subtree_levels(folder))
            if len(chain) + subtree_height > MAX_FOLDER_DEPTH:
                raise ValidationError(_TOO_DEEP)

        changed = [field for field in patch if field in _UPDATABLE_FIELDS]
        for field in changed:
            setattr(folder, field, patch[field])

        folder.save()
        logger.info('Folder updated: ID=%s, fields=%s', folder.id, changed)
        return folder

    def delete(self, folder_id: Any, owner_id: Any) -> None:
        """Delete a folder with all descendant folders and files.

        The records are removed in one transaction. Stored objects of the
        removed files are deleted after commit, on a best-effort basis.

        Args:
            folder_id: Folder ID.
            owner_id: Requesting user ID.

        Raises:
            Folder.DoesNotExist: If the folder does not exist.
            PermissionDenied: If the folder belongs to another user.
        """
        folder = get_owned_folder(folder_id, owner_id)

        with transaction.atomic():
            subtree_ids = [
                subtree_id
                for level in self._subtree_levels(folder)
                for subtree_id in level
            ]
            storage_keys = list(
                File.objects.filter(
                    folder_id__in=subtree_ids,
                ).values_list('storage_key', flat=True),
            )
            # Descendant folders and files go with it (on_delete=CASCADE)
            folder.delete()
            transaction.on_commit(partial(self._purge_objects, storage_keys))

        logger.info(
            'Folder deleted: ID=%s (%d folders, %d files)',
            folder_id,
            len(subtree_ids),
            len(storage_keys),
        )

    def find_by_id(self, folder_id: Any, owner_id: Any) -> Folder:
        """Get a folder with its direct children and files.

        Args:
            folder_id: Folder ID.
            owner_id: Requesting user ID.

        Returns:
            Folder with ``children`` and ``files`` prefetched.

        Raises:
            Folder.DoesNotExist: If the folder does not exist.
            PermissionDenied: If the folder belongs to another user.
        """
        return get_owned_folder(
            folder_id,
            owner_id,
            Folder.objects.prefetch_related('children', 'files'),
        )

    def find_all(self, owner_id: Any) -> QuerySet[Folder]:
        """List every folder of the owner.

        Args:
            owner_id: Owner's user ID.

        Returns:
            QuerySet with ``children`` and ``files`` prefetched.
        """
        return Folder.objects.filter(
            user_id=owner_id,
        ).prefetch_related('children__files', 'files')

    def find_root_folders(self, owner_id: Any) -> QuerySet[Folder]:
        """List the owner's folders that have no parent.

        Args:
            owner_id: Owner's user ID.

        Returns:
            QuerySet with ``children`` and ``files`` prefetched.
        """
        return self.find_all(owner_id).filter(parent__isnull=True)

    def _ancestor_chain(self, start: Folder) -> list[Any]:
        """Collect IDs from ``start`` up to its root, ``start`` first.

        The length of the chain is the depth of ``start``, a root folder
        having depth 1.

        Args:
            start: Folder to walk up from.

        Returns:
            Folder IDs along the parent links.

        Raises:
            FolderHierarchyCorruptedError: If the chain revisits a folder
                or is longer than MAX_FOLDER_DEPTH.
        """
        chain: list[Any] = []
        visited: set[Any] = set()
        current: Folder | None = start

        while current is not None:
            if current.id in visited or len(chain) >= MAX_FOLDER_DEPTH:
                raise FolderHierarchyCorruptedError(current.id, len(chain))
            visited.add(current.id)
            chain.append(current.id)

            if current.parent_id is None:
                break
            # A dangling parent link ends the chain like a root does
            current = Folder.objects.filter(
                id=current.parent_id,
            ).only('id', 'parent_id').first()

        return chain

    def _subtree_levels(self, folder: Folder) -> list[list[Any]]:
        """Collect IDs of a folder and its descendants, level by level.

        Args:
            folder: Subtree root.

        Returns:
            One list of folder IDs per level, ``[[folder.id], ...]``.

        Raises:
            FolderHierarchyCorruptedError: If the subtree has more than
                MAX_FOLDER_DEPTH levels.
        """
        levels = [[folder.id]]
        seen = {folder.id}

        while True:
            children = Folder.objects.filter(
                parent_id__in=levels[-1],
            ).values_list('id', flat=True)
            frontier = [child for child in children if child not in seen]
            if not frontier:
                return levels
            if len(levels) >= MAX_FOLDER_DEPTH:
                raise FolderHierarchyCorruptedError(folder.id, len(levels))
            seen.update(frontier)
            levels.append(frontier)

    def _purge_objects(self, storage_keys: list[str]) -> None:
        """Delete stored objects of removed files, best effort.

        Args:
            storage_keys: Keys of objects to delete.
        """
        for storage_key in storage_keys:
            try:
                self._storage.delete(storage_key)
            except StorageError:
                # Records are gone already; the object stays orphaned
                # until cleanup_orphaned_objects runs
                logger.warning('Orphaned object left in storage: %s', storage_key)
