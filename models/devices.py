"""Devices built from Hue bridge light and sensor descriptions.

A device's kind is chosen once, when the reconciliation loop first sees its
native id, from the capabilities the bridge reports. Each kind is a fixed
set of properties; richer kinds add properties on top of the simpler ones.
"""

import logging
from enum import Enum
from typing import Any, Awaitable, Callable

from core.errors import UnknownPropertyError
from models.properties import (
    BatteryProperty,
    BrightnessProperty,
    ButtonProperty,
    ColourEncoding,
    ColourModeProperty,
    ColourProperty,
    ColourTemperatureProperty,
    DarkProperty,
    DaylightProperty,
    LastUpdatedProperty,
    LightLevelProperty,
    OnOffProperty,
    PresenceProperty,
    Property,
    TemperatureProperty,
)
from models.types import DeviceHost

_LOGGER = logging.getLogger(__name__)

# Sends a state patch for a native id, returns True if the bridge accepted it
StateSender = Callable[[str, dict], Awaitable[bool]]

KNOWN_LIGHT_TYPES = {
    'On/Off light',
    'On/Off plug-in unit',
    'Dimmable light',
    'Dimmable plug-in unit',
    'Color temperature light',
    'Color light',
    'Extended color light',
}

PRESENCE_SENSOR_TYPES = {'ZLLPresence', 'CLIPPresence'}
SWITCH_SENSOR_TYPES = {'ZLLSwitch'}
LIGHT_LEVEL_SENSOR_TYPES = {'ZLLLightLevel', 'CLIPLightLevel'}
TEMPERATURE_SENSOR_TYPES = {'ZLLTemperature', 'CLIPTemperature'}

# Hue dimmer switch: XYYY where X is the button, YYY the event
# (000 initial press, 001 hold, 002 short release, 003 long release)
HUE_DIMMER_SWITCH_BUTTONS = (
    ('buttonOn', 'On', frozenset({1000, 1001, 1002, 1003})),
    ('buttonBrighten', 'Dim up', frozenset({2000, 2001, 2002, 2003})),
    ('buttonDim', 'Dim down', frozenset({3000, 3001, 3002, 3003})),
    ('buttonOff', 'Off', frozenset({4000, 4001, 4002, 4003})),
)


class LightKind(str, Enum):
    ON_OFF = 'OnOff'
    DIMMABLE = 'Dimmable'
    COLOUR_TEMPERATURE = 'ColorTemperature'
    COLOUR = 'Color'


class SensorKind(str, Enum):
    PRESENCE = 'Presence'
    SWITCH = 'Switch'


def device_id_for(bridge_id: str, native_id: str) -> str:
    """Build the globally unique device id for a bridge-scoped native id.

    'lights/3' becomes 'philips-hue-<bridge>-3' and 'sensors/7' becomes
    'philips-hue-<bridge>-sensors-7'.
    """
    normalized = native_id.replace('lights/', '').replace('/', '-')
    return f"philips-hue-{bridge_id}-{normalized}"


def light_kind(description: Any) -> LightKind:
    """Pick the light kind from the fields the bridge reports in 'state'."""
    state = description.get('state') if isinstance(description, dict) else None
    if not isinstance(state, dict) or 'bri' not in state:
        return LightKind.ON_OFF
    if 'xy' in state:
        return LightKind.COLOUR
    if 'ct' in state:
        return LightKind.COLOUR_TEMPERATURE
    return LightKind.DIMMABLE


def sensor_kind(description: Any) -> SensorKind | None:
    """Pick the sensor kind from its type, or None if it is not supported."""
    sensor_type = description.get('type') if isinstance(description, dict) else None
    if sensor_type in PRESENCE_SENSOR_TYPES:
        return SensorKind.PRESENCE
    if sensor_type in SWITCH_SENSOR_TYPES:
        return SensorKind.SWITCH
    return None


def is_primary_sensor(description: Any) -> bool:
    """Only sensors flagged capabilities.primary == True stand on their own.

    The rest are readings of another device or have no device of their own.
    """
    return _section(description, 'capabilities').get('primary') is True


def _section(description: Any, key: str) -> dict:
    value = description.get(key) if isinstance(description, dict) else None
    return value if isinstance(value, dict) else {}


def _unique_prefix(description: Any) -> str | None:
    uniqueid = description.get('uniqueid') if isinstance(description, dict) else None
    if not isinstance(uniqueid, str) or not uniqueid:
        return None
    return uniqueid.split('-')[0]


class Device:
    """One light or sensor exposed to the host.

    Properties are kept in registration order. recently_updated is set when
    a write is sent so the next poll, which may still carry the old state,
    is skipped once.
    """

    def __init__(self, device_id: str, native_id: str, title: str,
                 kind: LightKind | SensorKind, host: DeviceHost | None = None,
                 sender: StateSender | None = None):
        self.id = device_id
        self.native_id = native_id
        self.title = title
        self.kind = kind
        self.types: list[str] = []
        self.properties: dict[str, Property] = {}
        self.recently_updated = False
        self._host = host
        self._sender = sender

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.id!r}, kind={self.kind.value})"

    def add_property(self, prop: Property) -> Property:
        self.properties[prop.name] = prop
        return prop

    def get_property(self, name: str) -> Property:
        try:
            return self.properties[name]
        except KeyError:
            raise UnknownPropertyError(self.id, name) from None

    def values(self) -> dict[str, Any]:
        return {name: prop.value for name, prop in self.properties.items()}

    def notify_property_changed(self, prop: Property) -> None:
        if self._host is not None:
            self._host.notify_property_changed(self, prop)

    def update(self, description: Any, siblings: dict | None = None) -> None:
        """Apply a bridge description to every property."""
        for prop in self.properties.values():
            prop.update(description)

    def build_patch(self, prop: Property, value: Any) -> dict:
        """Return the state patch for writing value to prop."""
        return prop.to_patch(value)

    async def handle_write(self, name: str, value: Any) -> Any:
        """Write a property: validate, cache, and send one patch to the bridge.

        Returns:
            The accepted (clamped/rounded) value

        Raises:
            UnknownPropertyError: If the device has no such property
            ReadOnlyPropertyError: If the property is read-only
            ValueError: If the value has the wrong type
        """
        prop = self.get_property(name)
        accepted = prop.set_value(value)
        patch = self.build_patch(prop, accepted)
        prop.set_cached_value_and_notify(accepted)

        if self._sender is None:
            _LOGGER.warning("No bridge connection for %s, dropping %s", self.id, patch)
            return accepted

        self.recently_updated = True
        await self._sender(self.native_id, patch)
        return accepted


class Light(Device):
    """A light of one of the LightKind shapes."""

    def __init__(self, device_id: str, native_id: str, description: dict,
                 host: DeviceHost | None = None, sender: StateSender | None = None):
        kind = light_kind(description)
        super().__init__(device_id, native_id, description.get('name') or native_id,
                         kind, host, sender)
        state = _section(description, 'state')

        self.types = ['OnOffSwitch', 'Light']
        self.on = self.add_property(OnOffProperty(self))
        self.level = None
        self.colour_temperature = None
        self.colour = None
        self.colour_mode = None

        if kind is LightKind.ON_OFF:
            return

        self.level = self.add_property(BrightnessProperty(self))

        if kind is LightKind.COLOUR_TEMPERATURE or (kind is LightKind.COLOUR and 'ct' in state):
            self.colour_temperature = self.add_property(ColourTemperatureProperty(self))
            self.types.append('ColorControl')

        if kind is LightKind.COLOUR:
            encoding = ColourEncoding.HSV if 'hue' in state else ColourEncoding.XY
            self.colour = self.add_property(ColourProperty(self, encoding))
            self.colour_mode = self.add_property(ColourModeProperty(self))
            if 'ColorControl' not in self.types:
                self.types.append('ColorControl')

    def build_patch(self, prop: Property, value: Any) -> dict:
        if prop is not self.on or value is not True:
            return prop.to_patch(value)

        # Turning on: resend the colour/brightness the host last asked for
        patch: dict = {}
        use_temperature = self.colour_mode is not None and self.colour_mode.value == 'temperature'
        if self.colour is not None and self.colour.value is not None and not use_temperature:
            patch.update(self.colour.to_patch(self.colour.value))
        elif self.colour_temperature is not None and self.colour_temperature.value is not None:
            patch.update(self.colour_temperature.to_patch(self.colour_temperature.value))
        if self.level is not None and self.level.value is not None:
            patch.update(self.level.to_patch(self.level.value))
        patch['on'] = True
        return patch


class PresenceSensor(Device):
    """Motion sensor, with the temperature and light level readings of the
    sibling sensors that belong to the same physical unit."""

    def __init__(self, device_id: str, native_id: str, description: dict,
                 sensors: dict, host: DeviceHost | None = None):
        super().__init__(device_id, native_id, description.get('name') or native_id,
                         SensorKind.PRESENCE, host)
        self.types = ['MotionSensor']
        self.presence = self.add_property(PresenceProperty(self))
        self.battery = None
        if 'battery' in _section(description, 'config'):
            self.battery = self.add_property(BatteryProperty(self))

        # sibling sensor id -> properties read from that sensor
        self.sub_properties: dict[str, list[Property]] = {}
        prefix = _unique_prefix(description)
        if prefix is None:
            return

        for sensor_id, sibling in sensors.items():
            if _unique_prefix(sibling) != prefix:
                continue
            sibling_type = sibling.get('type')
            if sibling_type in LIGHT_LEVEL_SENSOR_TYPES:
                props = [LightLevelProperty(self), DarkProperty(self), DaylightProperty(self)]
                if 'MultiLevelSensor' not in self.types:
                    self.types.append('MultiLevelSensor')
            elif sibling_type in TEMPERATURE_SENSOR_TYPES:
                props = [TemperatureProperty(self)]
                if 'TemperatureSensor' not in self.types:
                    self.types.append('TemperatureSensor')
            else:
                continue

            for prop in props:
                if prop.name in self.properties:
                    continue
                self.add_property(prop)
                self.sub_properties.setdefault(sensor_id, []).append(prop)
                _LOGGER.debug("Added %s from sensor %s to %s", prop.name, sensor_id, self.id)

    def update(self, description: Any, siblings: dict | None = None) -> None:
        self.presence.update(description)
        if self.battery is not None:
            self.battery.update(description)

        for sensor_id, props in self.sub_properties.items():
            sibling = (siblings or {}).get(sensor_id)
            if sibling is None:
                continue
            for prop in props:
                prop.update(sibling)


class Switch(Device):
    """Hue dimmer switch with four push buttons.

    A button is pressed when the last event code is one of its codes and
    the event's lastupdated timestamp has not been seen before.
    """

    def __init__(self, device_id: str, native_id: str, description: dict,
                 host: DeviceHost | None = None,
                 buttons=HUE_DIMMER_SWITCH_BUTTONS):
        super().__init__(device_id, native_id, description.get('name') or native_id,
                         SensorKind.SWITCH, host)
        self.types = ['PushButton']
        self.buttons = [self.add_property(ButtonProperty(self, name, label, codes))
                        for name, label, codes in buttons]
        self.last_updated_property = self.add_property(LastUpdatedProperty(self))
        self.battery = None
        if 'battery' in _section(description, 'config'):
            self.battery = self.add_property(BatteryProperty(self))

        # The event current at creation time already happened
        state = _section(description, 'state')
        self.last_updated = state.get('lastupdated')
        self.last_event = state.get('buttonevent')

    def update(self, description: Any, siblings: dict | None = None) -> None:
        state = description.get('state') if isinstance(description, dict) else None
        if not isinstance(state, dict):
            return

        event = state.get('buttonevent')
        last_updated = state.get('lastupdated')
        is_new = last_updated != self.last_updated
        self.last_event = event

        for button in self.buttons:
            button.set_cached_value_and_notify(is_new and button.has_code(event))

        self.last_updated = last_updated
        self.last_updated_property.update(description)
        if self.battery is not None:
            self.battery.update(description)


def create_light(bridge_id: str, light_id: str, description: dict,
                 host: DeviceHost | None = None, sender: StateSender | None = None) -> Light:
    native_id = f"lights/{light_id}"
    light_type = description.get('type')
    if light_type not in KNOWN_LIGHT_TYPES:
        _LOGGER.info("Unknown light type %r for %s, using %s shape",
                     light_type, native_id, light_kind(description).value)
    return Light(device_id_for(bridge_id, native_id), native_id, description, host, sender)


def create_sensor(bridge_id: str, sensor_id: str, description: dict, sensors: dict,
                  host: DeviceHost | None = None) -> Device | None:
    """Build the device for a sensor, or None if the sensor is not surfaced."""
    native_id = f"sensors/{sensor_id}"
    device_id = device_id_for(bridge_id, native_id)
    kind = sensor_kind(description)
    if kind is SensorKind.PRESENCE:
        return PresenceSensor(device_id, native_id, description, sensors, host)
    if kind is SensorKind.SWITCH:
        return Switch(device_id, native_id, description, host)
    return None
