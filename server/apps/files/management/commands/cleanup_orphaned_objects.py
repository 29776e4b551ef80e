"""Management command to delete stored objects that no file record uses."""

import logging
from collections.abc import Iterator
from itertools import islice
from typing import Any, Final

from django.core.management.base import BaseCommand

from server.apps.files.exceptions import StorageError
from server.apps.files.infrastructure.storage import FileStorage, build_storage
from server.apps.files.models import File

_KEY_PREFIX: Final = 'users/'
_DEFAULT_BATCH_SIZE: Final = 1000
# Keys checked against the database per query
_LOOKUP_CHUNK_SIZE: Final = 500

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    """Remove objects left behind by failed or best-effort deletes.

    Objects are only considered when their key is under ``users/`` and
    no File record points at it. Uploads that are still in flight may
    look orphaned, so run this outside of busy hours.
    """

    help = 'Delete storage objects not referenced by any file record'

    def add_arguments(self, parser: Any) -> None:
        """Add command line arguments.

        Args:
            parser: Argument parser.
        """
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show what would be deleted without deleting',
        )
        parser.add_argument(
            '--batch-size',
            type=int,
            default=_DEFAULT_BATCH_SIZE,
            help=f'Max objects to delete (default: {_DEFAULT_BATCH_SIZE})',
        )

    def handle(self, *args: Any, **options: Any) -> None:
        """Execute the cleanup command.

        Args:
            args: Positional arguments (unused).
            options: Command options.
        """
        dry_run = options['dry_run']
        batch_size = options['batch_size']

        storage = build_storage()
        self.stdout.write(
            f'Looking for up to {batch_size} orphaned objects '
            f'under {_KEY_PREFIX}',
        )

        orphaned = islice(self._orphaned_keys(storage), batch_size)

        count = 0
        failed = 0

        for key in orphaned:
            if dry_run:
                self.stdout.write(f'Would delete: {key}')
                count += 1
                continue

            try:
                storage.delete(key)
            except StorageError as exc:
                self.stderr.write(f'Failed to delete {key}: {exc}')
                failed += 1
                continue

            count += 1
            logger.info('Deleted orphaned object: %s', key)

        if dry_run:
            self.stdout.write(
                self.style.SUCCESS(f'Would delete {count} orphaned objects'),
            )
        else:
            self.stdout.write(
                self.style.SUCCESS(
                    f'Deleted {count} orphaned objects, {failed} failed',
                ),
            )

    def _orphaned_keys(self, storage: FileStorage) -> Iterator[str]:
        """Yield stored keys that no File record references.

        Keys are listed lazily and checked against the database in
        chunks, so referenced objects never use up the batch.

        Args:
            storage: Storage to list.

        Yields:
            Unreferenced storage keys, in listing order.
        """
        keys = storage.list_keys(_KEY_PREFIX)
        chunk = list(islice(keys, _LOOKUP_CHUNK_SIZE))
        while chunk:
            referenced = set(
                File.objects.filter(
                    storage_key__in=chunk,
                ).values_list('storage_key', flat=True),
            )
            yield from (key for key in chunk if key not in referenced)
            chunk = list(islice(keys, _LOOKUP_CHUNK_SIZE))
