"""
Django management command for migrating Kaltura entries.

Downloads the configured Kaltura entries and re-encodes them for Vimeo.
This is a thin CLI wrapper around transfer.service.pipeline.

Usage:
    ./manage.py migrate_entries
    ./manage.py migrate_entries --entry Episode_01=1_abcdef12 --mode fixed
    ./manage.py migrate_entries --entries-file entries.json --dry-run --json
"""

import json
from datetime import datetime

from django.core.exceptions import ImproperlyConfigured
from django.core.management.base import BaseCommand, CommandError

from transfer.service.config import load_config, parse_entry_arg
from transfer.service.constants import ENCODING_MODES
from transfer.service.pipeline import run_batch
from transfer.service.preflight import (
    SetupError,
    check_tools,
    ensure_output_dirs,
    prepare_static_image,
)
from transfer.service.runlog import RunLog
from transfer.service.session import AuthError, acquire_session


class Command(BaseCommand):
    help = 'Download Kaltura entries and re-encode them for Vimeo'

    def add_arguments(self, parser):
        parser.add_argument(
            '--entry',
            action='append',
            default=[],
            metavar='NAME=ENTRY_ID',
            help='Entry to migrate (repeatable). Replaces the configured entries.',
        )
        parser.add_argument(
            '--entries-file', type=str, help='JSON file mapping local names to entry ids'
        )
        parser.add_argument(
            '--mode',
            type=str,
            choices=ENCODING_MODES,
            help='Encoding mode (default: OVPMIGRATE_ENCODING_MODE)',
        )
        parser.add_argument('--output-base', type=str, help='Directory holding the output root')
        parser.add_argument('--output-root', type=str, help='Name of the output root directory')
        parser.add_argument('--static-image', type=str, help='Still image for composition mode')
        parser.add_argument(
            '--flavor-params-id',
            type=str,
            help='Preferred flavor params id (empty string disables the preference)',
        )
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Resolve flavors without downloading or transcoding',
        )
        parser.add_argument('--verbose', action='store_true', help='Echo every log line')
        parser.add_argument('--json', action='store_true', help='Output the summary as JSON')

    def _fail(self, message, log=None):
        if log:
            log.error(message)
        else:
            self.stderr.write(self.style.ERROR(message))
        raise CommandError(message, returncode=1)

    def handle(self, *args, **options):
        started_at = datetime.now()
        output_json = options['json']

        entries = None
        if options['entry']:
            try:
                entries = dict(parse_entry_arg(arg) for arg in options['entry'])
            except ValueError as e:
                self._fail(str(e))

        try:
            config = load_config(
                entries=entries,
                entries_file=options['entries_file'],
                encoding_mode=options['mode'],
                output_base=options['output_base'],
                output_root_dir=options['output_root'],
                static_image_path=options['static_image'],
                preferred_flavor_params_id=options['flavor_params_id'],
            )
        except ImproperlyConfigured as e:
            self._fail(f'Configuration error: {e}')

        try:
            ensure_output_dirs(config)
        except SetupError as e:
            self._fail(str(e))

        log = RunLog(
            log_path=config.log_path(started_at),
            stream=self.stderr if output_json else self.stdout,
            echo_info=options['verbose'],
        )
        log('Starting Cross-OVP Content Processing Pipeline.')
        log(f'Encoding mode: {config.encoding_mode}')

        missing = check_tools(config.encoding_mode)
        if missing:
            self._fail(
                f"Required tools not found on PATH: {', '.join(missing)}. Please install them.",
                log,
            )

        if not config.partner_id or not config.secret:
            self._fail('OVPMIGRATE_PARTNER_ID and OVPMIGRATE_SECRET must be configured.', log)

        if not config.entries:
            log.warn('No entries configured, nothing to do.')

        image_path = None
        if config.is_composition and not options['dry_run']:
            try:
                image_path = prepare_static_image(config, logger=log)
            except SetupError as e:
                self._fail(f'{e}. Aborting.', log)

        try:
            token = acquire_session(
                config.partner_id,
                config.secret,
                config.service_url,
                session_type=config.session_type,
                timeout=config.http_timeout,
                logger=log,
            )
        except AuthError as e:
            self._fail(
                f'Failed to get Kaltura session token. Reason: {e}. '
                'Please check your partner id and secret.',
                log,
            )

        def report(outcome):
            if outcome.failed:
                log.warn(f"Skipping '{outcome.local_name}': {outcome.reason}")
            else:
                log(f"'{outcome.local_name}': {outcome.status} {outcome.reason}".rstrip())

        result = run_batch(
            config,
            token,
            image_path=image_path,
            dry_run=options['dry_run'],
            logger=log,
            on_outcome=report,
        )

        log('Cross-OVP Content Processing Pipeline finished.')
        log(f'Check {log.log_path} for detailed execution logs.')

        if output_json:
            summary = result.to_dict()
            summary['log_path'] = str(log.log_path)
            summary['dry_run'] = options['dry_run']
            self.stdout.write(json.dumps(summary, indent=2))
        else:
            self.stdout.write(
                self.style.SUCCESS(
                    f'Done: {result.succeeded} succeeded, {result.skipped} skipped, '
                    f'{result.failed} failed'
                )
            )
            self.stdout.write(f'  Log: {log.log_path}')
