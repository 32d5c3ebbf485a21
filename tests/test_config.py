"""Tests for configuration functions in core/config.py

NOTE: These are READ-ONLY tests. File access is mocked, so no config file
is read or written.
"""

import json
import logging
import os
from pathlib import Path
from unittest.mock import mock_open, patch

import pytest

from core.config import (
    CONFIG_DIR,
    CONFIG_FILE,
    Settings,
    load_config,
    load_settings,
    save_config,
)


class TestConstants:
    """Test that constants are properly defined."""

    def test_config_file_path(self):
        assert isinstance(CONFIG_FILE, Path)
        assert CONFIG_FILE.name == 'config.json'
        assert CONFIG_FILE.parent == CONFIG_DIR

    def test_settings_defaults(self):
        settings = Settings()
        assert settings.poll_interval == 1.0
        assert settings.pairing_timeout == 30.0
        assert settings.pairing_retry_interval == 1.0
        assert settings.request_timeout == 5.0
        assert settings.app_id == 'hue_gateway#bridge'
        assert settings.discovery_url == 'https://discovery.meethue.com/'


class TestLoadConfig:
    @patch('core.config.CONFIG_FILE')
    def test_missing_file(self, mock_file):
        mock_file.exists.return_value = False
        assert load_config() == {'usernames': []}

    @patch('core.config.CONFIG_FILE')
    def test_existing_file(self, mock_file):
        mock_file.exists.return_value = True
        data = {'usernames': [{'id': 'abc', 'username': 'user'}]}
        with patch('builtins.open', mock_open(read_data=json.dumps(data))):
            assert load_config() == data


class TestSaveConfig:
    @patch('core.config.os.chmod')
    @patch('core.config.CONFIG_FILE')
    def test_writes_json_with_private_permissions(self, mock_file, mock_chmod):
        config = {'usernames': [{'id': 'abc', 'username': 'user'}]}
        m = mock_open()
        with patch('builtins.open', m):
            save_config(config)

        mock_file.parent.mkdir.assert_called_once_with(parents=True, exist_ok=True)
        m.assert_called_once_with(mock_file, 'w')
        written = ''.join(call.args[0] for call in m().write.call_args_list)
        assert json.loads(written) == config
        mock_chmod.assert_called_once_with(mock_file, 0o600)


class TestLoadSettings:
    @patch.dict(os.environ, {}, clear=True)
    def test_defaults(self):
        assert load_settings({}) == Settings()

    @patch.dict(os.environ, {'HUE_POLL_INTERVAL': '2.5', 'HUE_APP_ID': 'my_app#pi',
                             'HUE_PAIRING_TIMEOUT': '60'}, clear=True)
    def test_environment_overrides(self):
        settings = load_settings({})
        assert settings.poll_interval == 2.5
        assert settings.app_id == 'my_app#pi'
        assert settings.pairing_timeout == 60.0

    @patch.dict(os.environ, {}, clear=True)
    def test_file_settings(self):
        settings = load_settings({'settings': {'poll_interval': 3, 'request_timeout': '10'}})
        assert settings.poll_interval == 3.0
        assert settings.request_timeout == 10.0

    @patch.dict(os.environ, {'HUE_POLL_INTERVAL': '0.5'}, clear=True)
    def test_environment_beats_file(self):
        settings = load_settings({'settings': {'poll_interval': 3}})
        assert settings.poll_interval == 0.5

    @pytest.mark.parametrize('value', ['fast', '-1', '0'])
    def test_invalid_values_ignored(self, value, caplog):
        with patch.dict(os.environ, {'HUE_POLL_INTERVAL': value}, clear=True):
            with caplog.at_level(logging.WARNING, logger='core.config'):
                settings = load_settings({})
        assert settings.poll_interval == 1.0
        assert 'poll_interval' in caplog.text

    @patch.dict(os.environ, {}, clear=True)
    def test_unknown_and_empty_settings_ignored(self):
        settings = load_settings({'settings': {'colour': 'blue', 'app_id': ''}})
        assert settings == Settings()

    @patch.dict(os.environ, {}, clear=True)
    @patch('core.config.load_config', side_effect=json.JSONDecodeError('bad', '', 0))
    def test_unreadable_config_file(self, mock_load):
        assert load_settings() == Settings()
