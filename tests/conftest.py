"""Pytest configuration and fixtures for Hue gateway tests."""

import copy
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest
import requests

BRIDGE_ID = '001788fffe123456'
BRIDGE_IP = '192.168.1.10'

LIGHTS = {
    '1': {
        'name': 'Lamp',
        'type': 'Dimmable light',
        'state': {'on': True, 'bri': 127, 'reachable': True},
    },
    '2': {
        'name': 'Desk',
        'type': 'Extended color light',
        'state': {
            'on': False, 'bri': 254, 'hue': 0, 'sat': 254,
            'xy': [0.6915, 0.3083], 'ct': 370, 'colormode': 'hs', 'reachable': True,
        },
    },
}

SENSORS = {
    '5': {
        'name': 'Hall motion',
        'type': 'ZLLPresence',
        'uniqueid': '00:17:88:01:02:03:04:05-02-0406',
        'state': {'presence': False, 'lastupdated': '2024-01-01T10:00:00'},
        'config': {'on': True, 'battery': 90, 'reachable': True},
        'capabilities': {'certified': True, 'primary': True},
    },
    '6': {
        'name': 'Hall light level',
        'type': 'ZLLLightLevel',
        'uniqueid': '00:17:88:01:02:03:04:05-02-0400',
        'state': {'lightlevel': 12000, 'dark': True, 'daylight': False},
        'config': {'on': True, 'battery': 90},
        'capabilities': {'certified': True, 'primary': False},
    },
    '7': {
        'name': 'Hall temperature',
        'type': 'ZLLTemperature',
        'uniqueid': '00:17:88:01:02:03:04:05-02-0402',
        'state': {'temperature': 2150},
        'config': {'on': True, 'battery': 90},
        'capabilities': {'certified': True, 'primary': False},
    },
    '8': {
        'name': 'Kitchen switch',
        'type': 'ZLLSwitch',
        'uniqueid': '00:17:88:01:09:09:09:09-02-fc00',
        'state': {'buttonevent': 1002, 'lastupdated': '2024-01-01T09:00:00'},
        'config': {'on': True, 'battery': 100},
        'capabilities': {'certified': True, 'primary': True},
    },
    '9': {
        'name': 'Daylight',
        'type': 'Daylight',
        'state': {'daylight': True},
        'capabilities': {'certified': True, 'primary': True},
    },
}


class RecordingHost:
    """Device host that records registrations and property changes."""

    def __init__(self):
        self.added = []
        self.values_when_added = {}
        self.changes = []

    def handle_device_added(self, device):
        self.added.append(device)
        self.values_when_added[device.id] = device.values()

    def notify_property_changed(self, device, prop):
        self.changes.append((device.id, prop.name, prop.value))

    def changes_for(self, name):
        return [value for _, prop_name, value in self.changes if prop_name == name]


@pytest.fixture
def project_root():
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def host():
    return RecordingHost()


@pytest.fixture
def sender():
    """Async state sender that reports every patch as accepted."""
    return AsyncMock(return_value=True)


@pytest.fixture
def lights():
    return copy.deepcopy(LIGHTS)


@pytest.fixture
def sensors():
    return copy.deepcopy(SENSORS)


@pytest.fixture
def make_response():
    """Factory for mocked requests.Response objects."""

    def _make(status_code=200, json_data=None, json_error=None):
        response = MagicMock()
        response.status_code = status_code
        if json_error is not None:
            response.json.side_effect = json_error
        else:
            response.json.return_value = json_data
        if status_code >= 400:
            response.raise_for_status.side_effect = requests.exceptions.HTTPError(
                f"{status_code} Error", response=response)
        return response

    return _make
