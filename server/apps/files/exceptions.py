"""Exceptions for files app."""


class StorageError(Exception):
    """Raised when the object storage rejects or fails an operation."""

    def __init__(self, operation: str, key: str) -> None:
        """Initialize StorageError.

        Args:
            operation: Failed operation (e.g. 'upload', 'delete').
            key: Storage key the operation targeted.
        """
        self.operation = operation
        self.key = key
        super().__init__(f'Failed to {operation} file')


class FolderHierarchyCorruptedError(Exception):
    """Raised when parent links form a loop or exceed the depth limit.

    Application checks prevent cycles, so hitting this means the stored
    data was modified around them.
    """

    def __init__(self, folder_id: object, steps: int) -> None:
        """Initialize FolderHierarchyCorruptedError.

        Args:
            folder_id: Folder where the walk stopped.
            steps: Number of parent links followed before stopping.
        """
        self.folder_id = folder_id
        self.steps = steps
        super().__init__(
            f'Folder hierarchy is corrupted near {folder_id} '
            f'(stopped after {steps} steps)',
        )
