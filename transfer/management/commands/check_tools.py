"""
Django management command to check the external tools a migration needs.

Usage:
    ./manage.py check_tools
    ./manage.py check_tools --mode adaptive
"""

import shutil

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from transfer.service.constants import ENCODING_MODES
from transfer.service.preflight import check_tools, required_tools


class Command(BaseCommand):
    help = 'Check that ffmpeg (and ffprobe for adaptive mode) are installed'

    def add_arguments(self, parser):
        parser.add_argument(
            '--mode',
            type=str,
            choices=ENCODING_MODES,
            help='Encoding mode (default: OVPMIGRATE_ENCODING_MODE)',
        )

    def handle(self, *args, **options):
        mode = options['mode'] or settings.OVPMIGRATE_ENCODING_MODE
        self.stdout.write(f'Encoding mode: {mode}')

        for tool in required_tools(mode):
            location = shutil.which(tool)
            if location:
                self.stdout.write(self.style.SUCCESS(f'Found {tool}: {location}'))
            else:
                self.stdout.write(self.style.ERROR(f'{tool}: not found'))

        missing = check_tools(mode)
        if missing:
            raise CommandError(
                f"Missing required tools: {', '.join(missing)}", returncode=1
            )
        self.stdout.write(self.style.SUCCESS('All required tools are available.'))
