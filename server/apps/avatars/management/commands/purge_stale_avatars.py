"""Management command to delete avatar objects no record points to."""

import logging
from datetime import timedelta
from typing import Any, Final

from django.core.management.base import BaseCommand
from django.utils import timezone

from server.apps.avatars.exceptions import StorageDeleteError
from server.apps.avatars.logic.avatar_operations import get_avatar_uploader
from server.apps.avatars.models import Avatar

# Objects this fresh may belong to an upload whose record is not committed yet
_DEFAULT_MIN_AGE_MINUTES: Final = 60

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    """Delete stored avatars left behind by failed stale-avatar cleanup."""

    help = 'Delete avatar objects that no avatar record references'

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
            '--min-age-minutes',
            type=int,
            default=_DEFAULT_MIN_AGE_MINUTES,
            help=(
                'Keep objects modified more recently than this '
                f'(default: {_DEFAULT_MIN_AGE_MINUTES})'
            ),
        )

    def handle(self, *args: Any, **options: Any) -> None:
        """Execute the purge command.

        Args:
            args: Positional arguments (unused).
            options: Command options.
        """
        dry_run = options['dry_run']
        min_age_minutes = options['min_age_minutes']
        uploader = get_avatar_uploader()
        prefix = uploader.avatar_settings.prefix

        cutoff = timezone.now() - timedelta(minutes=min_age_minutes)
        self.stdout.write(
            f'Looking for avatar objects modified before {cutoff} '
            f'(older than {min_age_minutes} minutes)',
        )

        # Listed before the records are read, so an object written after
        # this point is never a candidate
        candidates = [
            name
            for name in uploader.storage.list_names()
            if name.startswith(prefix)
        ]
        referenced = {
            uploader.physical_name(avatar.as_row())
            for avatar in Avatar.objects.exclude(avatar='')
        }
        stale_names = [
            name
            for name in candidates
            if name not in referenced
            and uploader.storage.get_modified_time(name) <= cutoff
        ]

        self.stdout.write(
            f'Found {len(stale_names)} unreferenced avatar objects',
        )

        count = 0
        failed = 0
        for name in stale_names:
            if dry_run:
                self.stdout.write(f'Would delete: {name}')
                count += 1
                continue

            try:
                uploader.storage.delete(name)
            except StorageDeleteError as exc:
                self.stderr.write(f'Failed to delete {name}: {exc}')
                failed += 1
                continue
            logger.info('Purged stale avatar object: %s', name)
            count += 1

        if dry_run:
            self.stdout.write(
                self.style.SUCCESS(f'Would purge {count} avatar objects'),
            )
        else:
            self.stdout.write(
                self.style.SUCCESS(
                    f'Purged {count} avatar objects, {failed} failed',
                ),
            )
