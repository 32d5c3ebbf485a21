"""Tests for pairing responses and the credential store in core/auth.py

NOTE: load_config/save_config are mocked; no files are touched.
"""

import json
from unittest.mock import patch

import pytest

from core.auth import (
    JsonCredentialStore,
    find_username,
    parse_pairing_response,
    set_username,
)


class TestParsePairingResponse:
    def test_success(self):
        assert parse_pairing_response([{'success': {'username': 'abc123'}}]) == 'abc123'

    def test_link_button_not_pressed(self):
        data = [{'error': {'type': 101, 'address': '/', 'description': 'link button not pressed'}}]
        assert parse_pairing_response(data) is None

    def test_other_error(self):
        data = [{'error': {'type': 7, 'address': '/devicetype', 'description': 'invalid value'}}]
        assert parse_pairing_response(data) is None

    @pytest.mark.parametrize('data', [
        [],
        None,
        {'success': {'username': 'abc'}},
        ['success'],
        [{'success': {}}],
        [{'success': 'abc'}],
        [{'success': {'username': ''}}],
    ])
    def test_malformed(self, data):
        assert parse_pairing_response(data) is None


class TestUsernames:
    def test_find(self):
        config = {'usernames': [{'id': 'aaa', 'username': 'one'}, {'id': 'bbb', 'username': 'two'}]}
        assert find_username(config, 'bbb') == 'two'
        assert find_username(config, 'ccc') is None

    def test_find_in_empty_config(self):
        assert find_username({}, 'aaa') is None

    def test_set_replaces_existing(self):
        config = {'usernames': [{'id': 'aaa', 'username': 'old'}, {'id': 'bbb', 'username': 'two'}],
                  'settings': {'poll_interval': 2}}
        result = set_username(config, 'aaa', 'new')
        assert result['usernames'] == [{'id': 'bbb', 'username': 'two'},
                                       {'id': 'aaa', 'username': 'new'}]
        assert result['settings'] == {'poll_interval': 2}

    def test_set_on_empty_config(self):
        assert set_username({}, 'aaa', 'new') == {'usernames': [{'id': 'aaa', 'username': 'new'}]}


class TestJsonCredentialStore:
    @pytest.mark.asyncio
    async def test_load(self):
        config = {'usernames': [{'id': 'aaa', 'username': 'one'}]}
        with patch('core.auth.load_config', return_value=config):
            store = JsonCredentialStore()
            assert await store.load('aaa') == 'one'
            assert await store.load('bbb') is None

    @pytest.mark.asyncio
    async def test_save(self):
        config = {'usernames': [{'id': 'aaa', 'username': 'old'}]}
        with patch('core.auth.load_config', return_value=config), \
                patch('core.auth.save_config') as mock_save:
            await JsonCredentialStore().save('aaa', 'new')

        mock_save.assert_called_once_with({'usernames': [{'id': 'aaa', 'username': 'new'}]})

    @pytest.mark.asyncio
    async def test_save_over_corrupt_config(self):
        with patch('core.auth.load_config', side_effect=json.JSONDecodeError('bad', '', 0)), \
                patch('core.auth.save_config') as mock_save:
            await JsonCredentialStore().save('aaa', 'new')

        mock_save.assert_called_once_with({'usernames': [{'id': 'aaa', 'username': 'new'}]})

    @pytest.mark.asyncio
    async def test_load_errors_propagate(self):
        """The session decides what a failing store means."""
        with patch('core.auth.load_config', side_effect=OSError('permission denied')):
            with pytest.raises(OSError):
                await JsonCredentialStore().load('aaa')
