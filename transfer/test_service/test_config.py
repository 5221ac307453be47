"""
Tests for service/config.py
"""

import json
import tempfile
from datetime import datetime
from pathlib import Path

from django.core.exceptions import ImproperlyConfigured
from django.test import SimpleTestCase, override_settings

from transfer.service.config import (
    MigrationConfig,
    load_config,
    parse_entries,
    parse_entry_arg,
    read_entries_file,
)


class ParseEntriesTest(SimpleTestCase):
    """Tests for entry mapping parsing"""

    def test_parse_entries_from_json(self):
        entries = parse_entries('{"Ep1": "1_abc", "Ep2": "1_def"}')
        self.assertEqual(entries, {'Ep1': '1_abc', 'Ep2': '1_def'})

    def test_parse_entries_from_dict(self):
        self.assertEqual(parse_entries({' Ep1 ': ' 1_abc '}), {'Ep1': '1_abc'})

    def test_parse_entries_empty(self):
        self.assertEqual(parse_entries(''), {})
        self.assertEqual(parse_entries(None), {})

    def test_parse_entries_invalid_json(self):
        with self.assertRaises(ImproperlyConfigured):
            parse_entries('{not json')

    def test_parse_entries_rejects_list(self):
        with self.assertRaises(ImproperlyConfigured):
            parse_entries('["1_abc"]')

    def test_parse_entries_rejects_non_string_id(self):
        with self.assertRaises(ImproperlyConfigured):
            parse_entries({'Ep1': 12})

    def test_read_entries_file(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            path = Path(temp_dir) / 'entries.json'
            path.write_text(json.dumps({'Ep1': '1_abc'}))
            self.assertEqual(read_entries_file(path), {'Ep1': '1_abc'})

    def test_read_entries_file_missing(self):
        with self.assertRaises(ImproperlyConfigured):
            read_entries_file('/nonexistent/entries.json')

    def test_parse_entry_arg(self):
        self.assertEqual(parse_entry_arg('Ep1=1_abc'), ('Ep1', '1_abc'))

    def test_parse_entry_arg_invalid(self):
        for bad in ['Ep1', '=1_abc', 'Ep1=']:
            with self.assertRaises(ValueError):
                parse_entry_arg(bad)


@override_settings(
    OVPMIGRATE_PARTNER_ID='12345',
    OVPMIGRATE_SECRET='s3cret',
    OVPMIGRATE_ENTRIES='{"Ep1": "1_abc"}',
    OVPMIGRATE_ENTRIES_FILE='',
    OVPMIGRATE_OUTPUT_BASE='/tmp/ovp',
    OVPMIGRATE_OUTPUT_ROOT_DIR='Out',
    OVPMIGRATE_ENCODING_MODE='adaptive',
    OVPMIGRATE_STATIC_IMAGE_PATH='',
    OVPMIGRATE_PREFERRED_FLAVOR_PARAMS_ID='100',
)
class LoadConfigTest(SimpleTestCase):
    """Tests for building MigrationConfig from settings"""

    def test_load_config_from_settings(self):
        config = load_config()
        self.assertEqual(config.partner_id, '12345')
        self.assertEqual(config.secret, 's3cret')
        self.assertEqual(dict(config.entries), {'Ep1': '1_abc'})
        self.assertEqual(config.output_root, Path('/tmp/ovp/Out'))
        self.assertEqual(config.encoding_mode, 'adaptive')
        self.assertEqual(config.preferred_flavor_params_id, '100')
        self.assertIsNone(config.static_image_path)

    def test_overrides_win(self):
        config = load_config(
            entries={'Other': '1_zzz'},
            encoding_mode='composition',
            output_base='/data',
            output_root_dir='Run',
            static_image_path='/img/logo.png',
            preferred_flavor_params_id='',
        )
        self.assertEqual(dict(config.entries), {'Other': '1_zzz'})
        self.assertEqual(config.encoding_mode, 'composition')
        self.assertEqual(config.output_root, Path('/data/Run'))
        self.assertEqual(config.static_image_path, Path('/img/logo.png'))
        self.assertIsNone(config.preferred_flavor_params_id)

    def test_entries_file_override(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            path = Path(temp_dir) / 'entries.json'
            path.write_text('{"FromFile": "1_fff"}')
            config = load_config(entries_file=str(path))
        self.assertEqual(dict(config.entries), {'FromFile': '1_fff'})

    def test_unknown_mode(self):
        with self.assertRaises(ImproperlyConfigured):
            load_config(encoding_mode='turbo')

    def test_config_is_immutable(self):
        config = load_config()
        with self.assertRaises(Exception):
            config.secret = 'other'
        with self.assertRaises(TypeError):
            config.entries['Ep2'] = '1_def'


class MigrationConfigPathsTest(SimpleTestCase):
    """Tests for derived file paths"""

    def _config(self, mode='fixed'):
        return MigrationConfig(
            partner_id='1', secret='x', entries={}, output_root='/out', encoding_mode=mode
        )

    def test_original_path(self):
        self.assertEqual(
            self._config().original_path('Ep1'), Path('/out/Originals/Ep1_original.mp4')
        )

    def test_original_path_composition(self):
        self.assertEqual(
            self._config('composition').original_path('Ep1'),
            Path('/out/Originals/Ep1_original_audio.mp4'),
        )

    def test_output_path(self):
        self.assertEqual(
            self._config().output_path('Ep1'), Path('/out/Vimeo_Optimised/Ep1_Vimeo.mp4')
        )

    def test_log_path(self):
        path = self._config().log_path(datetime(2024, 3, 5, 14, 7, 9))
        self.assertEqual(path, Path('/out/migration_log_20240305_140709.log'))
