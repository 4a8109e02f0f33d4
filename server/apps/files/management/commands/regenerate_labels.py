"""Management command to regenerate QR labels."""

import logging
from typing import Any

from django.core.management.base import BaseCommand
from django.db.models import Q

from server.apps.files.logic.label_operations import regenerate_labels
from server.apps.files.models import File

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    """Re-render label PDFs, keeping each file's download URL."""

    help = 'Regenerate QR label PDFs (e.g., for files left without one)'

    def add_arguments(self, parser: Any) -> None:
        """Add command line arguments.

        Args:
            parser: Argument parser.
        """
        parser.add_argument(
            '--project',
            type=int,
            default=None,
            help='Only files of this project ID',
        )
        parser.add_argument(
            '--missing-only',
            action='store_true',
            help='Only files without a label',
        )
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show what would be regenerated without writing',
        )

    def handle(self, *args: Any, **options: Any) -> None:
        """Execute the regeneration command.

        Args:
            args: Positional arguments (unused).
            options: Command options.
        """
        files = File.objects.select_related('section__project').order_by('id')
        if options['project'] is not None:
            files = files.filter(section__project_id=options['project'])
        if options['missing_only']:
            files = files.filter(
                Q(url_qr_code__isnull=True) | Q(path_pdf=''),
            )

        if options['dry_run']:
            for file_instance in files:
                self.stdout.write(
                    f'Would regenerate: {file_instance.name} '
                    f'(ID: {file_instance.id}, '
                    f'section: {file_instance.section.section_name})',
                )
            self.stdout.write(
                self.style.SUCCESS(f'Would regenerate {files.count()} labels'),
            )
            return

        succeeded, failed = regenerate_labels(files)
        logger.info(
            'Label regeneration finished: %d ok, %d failed',
            succeeded,
            failed,
        )

        message = f'Regenerated {succeeded} labels, {failed} failed'
        if failed:
            self.stderr.write(message)
        else:
            self.stdout.write(self.style.SUCCESS(message))
