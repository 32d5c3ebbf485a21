"""
Authentication module for Hue Bridge.

Handles link button pairing responses and the per-bridge username store
kept in the local config file.
"""

import asyncio
import json
import logging

from core.config import CONFIG_FILE, load_config, save_config

_LOGGER = logging.getLogger(__name__)

# Bridge error type returned while the link button has not been pressed
LINK_BUTTON_NOT_PRESSED = 101


def parse_pairing_response(data) -> str | None:
    """Extract the username from a POST /api pairing response.

    The bridge answers with a one-element list holding either
    {"success": {"username": ...}} or {"error": {...}}.

    Args:
        data: Decoded JSON response body

    Returns:
        Username if pairing succeeded, None for any other response
    """
    if not isinstance(data, list) or len(data) == 0 or not isinstance(data[0], dict):
        _LOGGER.debug("Unexpected pairing response: %r", data)
        return None

    entry = data[0]
    if 'success' in entry:
        success = entry['success']
        username = success.get('username') if isinstance(success, dict) else None
        if isinstance(username, str) and username:
            return username
        _LOGGER.debug("Pairing success entry without username: %r", entry)
        return None

    error = entry.get('error')
    if isinstance(error, dict):
        if error.get('type') == LINK_BUTTON_NOT_PRESSED:
            _LOGGER.debug("Link button not pressed")
        else:
            _LOGGER.debug("Pairing rejected: %s", error.get('description', 'Unknown error'))
    return None


def find_username(config: dict, bridge_id: str) -> str | None:
    """Look up the saved username for a bridge in a loaded config dict."""
    for entry in config.get('usernames', []):
        if isinstance(entry, dict) and entry.get('id') == bridge_id:
            username = entry.get('username')
            if isinstance(username, str) and username:
                return username
    return None


def set_username(config: dict, bridge_id: str, username: str) -> dict:
    """Record a username in a config dict, replacing any previous one for the bridge."""
    entries = [entry for entry in config.get('usernames', [])
               if not (isinstance(entry, dict) and entry.get('id') == bridge_id)]
    entries.append({'id': bridge_id, 'username': username})
    config['usernames'] = entries
    return config


class JsonCredentialStore:
    """Credential store backed by the JSON config file.

    File access runs in a worker thread so the event loop never blocks on
    disk I/O.
    """

    def _load(self, bridge_id: str) -> str | None:
        return find_username(load_config(), bridge_id)

    def _save(self, bridge_id: str, username: str):
        try:
            config = load_config()
        except (json.JSONDecodeError, IOError) as e:
            # A corrupt file would otherwise block pairing forever
            _LOGGER.warning("Replacing unreadable config %s: %s", CONFIG_FILE, e)
            config = {}
        save_config(set_username(config, bridge_id, username))

    async def load(self, bridge_id: str) -> str | None:
        return await asyncio.to_thread(self._load, bridge_id)

    async def save(self, bridge_id: str, username: str) -> None:
        await asyncio.to_thread(self._save, bridge_id, username)
        _LOGGER.info("Saved username for bridge %s to %s", bridge_id, CONFIG_FILE)
