"""Configuration management.

This module handles:
- Loading/saving the JSON configuration file (bridge usernames, settings)
- Runtime settings with environment variable overrides
"""

import json
import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path

_LOGGER = logging.getLogger(__name__)

# Configuration file paths
CONFIG_DIR = Path(os.getenv('HUE_GATEWAY_HOME', Path.home() / '.hue_gateway'))
CONFIG_FILE = CONFIG_DIR / 'config.json'

DISCOVERY_URL = 'https://discovery.meethue.com/'

# Environment variable -> Settings field
ENV_OVERRIDES = {
    'HUE_POLL_INTERVAL': 'poll_interval',
    'HUE_PAIRING_TIMEOUT': 'pairing_timeout',
    'HUE_PAIRING_RETRY_INTERVAL': 'pairing_retry_interval',
    'HUE_REQUEST_TIMEOUT': 'request_timeout',
    'HUE_APP_ID': 'app_id',
    'HUE_DISCOVERY_URL': 'discovery_url',
}


@dataclass(frozen=True)
class Settings:
    """Runtime settings shared by every bridge session."""
    poll_interval: float = 1.0
    pairing_timeout: float = 30.0
    pairing_retry_interval: float = 1.0
    request_timeout: float = 5.0
    app_id: str = 'hue_gateway#bridge'
    discovery_url: str = DISCOVERY_URL


def load_config() -> dict:
    """Load configuration from the local file.

    Returns:
        Dict with 'usernames' and optionally 'settings' keys
    """
    if CONFIG_FILE.exists():
        with open(CONFIG_FILE, 'r') as f:
            return json.load(f)
    return {'usernames': []}


def save_config(config: dict):
    """Save configuration to file.

    Creates the config directory if it doesn't exist and restricts the file
    to the current user (it holds bridge usernames).

    Args:
        config: Configuration dict to save
    """
    CONFIG_FILE.parent.mkdir(parents=True, exist_ok=True)

    with open(CONFIG_FILE, 'w') as f:
        json.dump(config, f, indent=2)

    os.chmod(CONFIG_FILE, 0o600)


def _apply_overrides(settings: Settings, overrides: dict, source: str) -> Settings:
    types = {f.name: f.type for f in fields(Settings)}
    changes = {}
    for name, raw in overrides.items():
        if name not in types:
            _LOGGER.warning("Ignoring unknown setting %r from %s", name, source)
            continue
        try:
            changes[name] = str(raw) if types[name] in (str, 'str') else float(raw)
        except (TypeError, ValueError):
            _LOGGER.warning("Ignoring invalid value %r for %s from %s", raw, name, source)
            continue
        if changes[name] == '' or (isinstance(changes[name], float) and changes[name] <= 0):
            _LOGGER.warning("Ignoring invalid value %r for %s from %s", raw, name, source)
            del changes[name]
    return replace(settings, **changes)


def load_settings(config: dict | None = None) -> Settings:
    """Build settings from defaults, the config file, then environment.

    Args:
        config: Already-loaded configuration (loaded from disk if None)

    Returns:
        Settings instance
    """
    if config is None:
        try:
            config = load_config()
        except (json.JSONDecodeError, OSError) as e:
            _LOGGER.warning("Could not read %s: %s", CONFIG_FILE, e)
            config = {}

    settings = Settings()
    file_settings = config.get('settings')
    if isinstance(file_settings, dict):
        settings = _apply_overrides(settings, file_settings, str(CONFIG_FILE))

    env_settings = {field: os.environ[var] for var, field in ENV_OVERRIDES.items()
                    if var in os.environ}
    return _apply_overrides(settings, env_settings, 'environment')
