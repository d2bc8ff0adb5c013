"""
Unit tests for reltag.config module
"""
import unittest
import tempfile
import os
import shutil
import json
import logging
from pathlib import Path
from unittest.mock import patch

import yaml

from reltag.config import (
    load_config,
    save_config,
    get_config_path,
    get_default_config,
    merge_configs,
    apply_env_overrides,
    configure_logging,
    logger,
)
from reltag.exit_codes import ConfigError


class TestConfigManagement(unittest.TestCase):
    """Test configuration management functionality"""

    def setUp(self):
        """Set up test environment"""
        self.temp_dir = tempfile.mkdtemp()
        self.env = patch.dict(os.environ, {'HOME': self.temp_dir})
        self.env.start()
        for key in [k for k in os.environ if k.startswith('RELTAG_')]:
            del os.environ[key]
        self.config_dir = Path(self.temp_dir) / '.reltag'

    def tearDown(self):
        """Clean up test environment"""
        self.env.stop()
        shutil.rmtree(self.temp_dir)

    def write_config(self, name, text):
        self.config_dir.mkdir(exist_ok=True)
        path = self.config_dir / name
        path.write_text(text)
        return path

    def test_get_default_config(self):
        """Test default configuration structure"""
        config = get_default_config()

        self.assertEqual(config['versioning']['default_branch'], 'main')
        self.assertEqual(config['versioning']['qualifier_scheme'], 'branch-qualified')
        self.assertEqual(config['versioning']['default_branch_dist_tags'], ['next'])
        self.assertEqual(config['git']['remote'], 'origin')
        self.assertFalse(config['git']['use_remote_tags'])
        self.assertEqual(config['retry']['retries'], 5)
        self.assertIn('level', config['logging'])
        self.assertIn('format', config['logging'])

    def test_load_config_no_file(self):
        """Test loading config when no file exists"""
        self.assertEqual(load_config(), get_default_config())

    def test_load_json_config(self):
        """Test that a JSON file is merged over the defaults"""
        self.write_config('config.json', json.dumps({'versioning': {'default_branch': 'trunk'}}))

        config = load_config()

        self.assertEqual(config['versioning']['default_branch'], 'trunk')
        self.assertEqual(config['versioning']['fallback_version'], '0.1.0')

    def test_load_toml_config(self):
        """Test loading a TOML config file"""
        self.write_config('config.toml', '[retry]\nretries = 2\n')
        self.assertEqual(load_config()['retry']['retries'], 2)

    def test_load_yaml_config(self):
        """Test loading a YAML config file"""
        self.write_config('config.yaml', yaml.safe_dump({'versioning': {'qualifier_scheme': 'simple'}}))
        self.assertEqual(load_config()['versioning']['qualifier_scheme'], 'simple')

    def test_config_env_var_path(self):
        """Test RELTAG_CONFIG pointing at a file elsewhere"""
        path = Path(self.temp_dir) / 'custom.json'
        path.write_text(json.dumps({'git': {'remote': 'upstream'}}))

        with patch.dict(os.environ, {'RELTAG_CONFIG': str(path)}):
            self.assertEqual(get_config_path(), path)
            self.assertEqual(load_config()['git']['remote'], 'upstream')

    def test_invalid_json(self):
        """Test that a broken file raises ConfigError"""
        self.write_config('config.json', '{not json')
        with self.assertRaises(ConfigError):
            load_config()

    def test_non_mapping_config(self):
        """Test that a file holding a list is rejected"""
        self.write_config('config.json', '[1, 2]')
        with self.assertRaises(ConfigError):
            load_config()

    def test_unknown_scheme_rejected(self):
        """Test validation of the qualifier scheme"""
        self.write_config('config.json', json.dumps({'versioning': {'qualifier_scheme': 'fancy'}}))
        with self.assertRaises(ConfigError):
            load_config()

    def test_bad_retry_delays_rejected(self):
        """Test validation of the retry window"""
        self.write_config('config.json', json.dumps({'retry': {'min_delay_seconds': 5, 'max_delay_seconds': 1}}))
        with self.assertRaises(ConfigError):
            load_config()

    def test_negative_retries_rejected(self):
        self.write_config('config.json', json.dumps({'retry': {'retries': -1}}))
        with self.assertRaises(ConfigError):
            load_config()

    def test_save_config(self):
        """Test saving configuration to the default path"""
        config = get_default_config()
        config['git']['remote'] = 'upstream'

        path = save_config(config)

        self.assertEqual(path, self.config_dir / 'config.json')
        self.assertEqual(json.loads(path.read_text())['git']['remote'], 'upstream')

    def test_save_config_keeps_format(self):
        """Test that an existing TOML file is rewritten as TOML"""
        self.write_config('config.toml', '[retry]\nretries = 2\n')
        config = load_config()
        config['retry']['retries'] = 3

        path = save_config(config)

        self.assertEqual(path.suffix, '.toml')
        self.assertEqual(load_config()['retry']['retries'], 3)


class TestMergeConfigs(unittest.TestCase):
    """Test recursive config merging"""

    def test_nested_merge(self):
        base = {'a': {'x': 1, 'y': 2}, 'b': 1}
        merged = merge_configs(base, {'a': {'y': 3}, 'c': 4})
        self.assertEqual(merged, {'a': {'x': 1, 'y': 3}, 'b': 1, 'c': 4})

    def test_base_not_mutated(self):
        base = {'a': {'x': 1}}
        merge_configs(base, {'a': {'x': 2}})
        self.assertEqual(base, {'a': {'x': 1}})

    def test_non_dict_replaces(self):
        merged = merge_configs({'a': {'x': 1}}, {'a': 'flat'})
        self.assertEqual(merged, {'a': 'flat'})


class TestEnvOverrides(unittest.TestCase):
    """Test RELTAG_* environment overrides"""

    def override(self, **env):
        with patch.dict(os.environ, env, clear=True):
            return apply_env_overrides(get_default_config())

    def test_string_value(self):
        config = self.override(RELTAG_VERSIONING_DEFAULT_BRANCH='master')
        self.assertEqual(config['versioning']['default_branch'], 'master')

    def test_version_string_stays_string(self):
        config = self.override(RELTAG_VERSIONING_FALLBACK_VERSION='1.0')
        self.assertEqual(config['versioning']['fallback_version'], '1.0')

    def test_int_value(self):
        config = self.override(RELTAG_RETRY_RETRIES='3')
        self.assertEqual(config['retry']['retries'], 3)

    def test_float_value(self):
        config = self.override(RELTAG_RETRY_MAX_DELAY_SECONDS='4.5')
        self.assertEqual(config['retry']['max_delay_seconds'], 4.5)

    def test_bool_value(self):
        config = self.override(RELTAG_GIT_USE_REMOTE_TAGS='true')
        self.assertIs(config['git']['use_remote_tags'], True)

    def test_list_value(self):
        config = self.override(RELTAG_VERSIONING_DEFAULT_BRANCH_DIST_TAGS='next, canary')
        self.assertEqual(config['versioning']['default_branch_dist_tags'], ['next', 'canary'])

    def test_unknown_key_ignored(self):
        config = self.override(RELTAG_NOPE_THING='x', RELTAG_HOME='/atm/home')
        self.assertEqual(config, get_default_config())


class TestConfigureLogging(unittest.TestCase):
    """Test logging configuration"""

    def tearDown(self):
        logger.setLevel(logging.INFO)

    def test_verbose(self):
        configure_logging(verbose=True)
        self.assertEqual(logger.level, logging.DEBUG)

    def test_level_from_config(self):
        config = get_default_config()
        config['logging']['level'] = 'warning'
        configure_logging(config)
        self.assertEqual(logger.level, logging.WARNING)


if __name__ == '__main__':
    unittest.main()
