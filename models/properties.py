"""Normalised properties of Hue lights and sensors.

Each property owns one cached value. update() reads that value out of a
bridge light/sensor description and must tolerate missing or malformed
fields. Writable properties also turn a requested value into a partial
bridge state patch via to_patch().
"""

import logging
from enum import Enum
from typing import TYPE_CHECKING, Any

from core.errors import ReadOnlyPropertyError
from models.colour import (
    bri_to_percent,
    hex_to_hsv,
    hex_to_xy_bri,
    hsv_to_hex,
    kelvin_to_mired,
    mired_to_kelvin,
    normalize_hex,
    percent_to_bri,
    round_half_up,
    xy_bri_to_hex,
)
from models.types import PropertyMetadata

if TYPE_CHECKING:
    from models.devices import Device

_LOGGER = logging.getLogger(__name__)

COLOUR_TEMPERATURE_MIN = 2203
COLOUR_TEMPERATURE_MAX = 6536


class PropertyKind(str, Enum):
    ON_OFF = 'on-off'
    LEVEL = 'level'
    COLOUR = 'color'
    COLOUR_TEMPERATURE = 'color-temperature'
    COLOUR_MODE = 'color-mode'
    SENSOR_READING = 'sensor-reading'
    BUTTON = 'button'
    META = 'meta'


class ColourEncoding(str, Enum):
    """How a colour light expects colour writes."""
    HSV = 'hsv'
    XY = 'xy'


def _state(description: Any) -> dict:
    """Return the 'state' dict of a description, or {} if there isn't one."""
    if isinstance(description, dict):
        state = description.get('state')
        if isinstance(state, dict):
            return state
    return {}


def _config(description: Any) -> dict:
    if isinstance(description, dict):
        config = description.get('config')
        if isinstance(config, dict):
            return config
    return {}


def _is_int(value: Any) -> bool:
    # bool is a subclass of int but never a valid reading
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class Property:
    """A named, typed value owned by exactly one device.

    Subclasses set the class attributes below and override update() and,
    for writable properties, to_patch().
    """

    kind: PropertyKind = PropertyKind.META
    value_type: str = 'string'
    read_only: bool = True
    minimum: float | None = None
    maximum: float | None = None
    semantic_type: str | None = None
    label: str = ''
    unit: str | None = None

    def __init__(self, device: 'Device', name: str, label: str | None = None):
        self.device = device
        self.name = name
        if label is not None:
            self.label = label
        self.value: Any = None

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r}, value={self.value!r})"

    def describe(self) -> PropertyMetadata:
        """Return the metadata a host registers this property with."""
        metadata: PropertyMetadata = {'label': self.label, 'type': self.value_type}
        if self.semantic_type:
            metadata['@type'] = self.semantic_type
        if self.unit:
            metadata['unit'] = self.unit
        if self.minimum is not None:
            metadata['minimum'] = self.minimum
        if self.maximum is not None:
            metadata['maximum'] = self.maximum
        if self.read_only:
            metadata['readOnly'] = True
        return metadata

    def coerce(self, value: Any) -> Any:
        """Check the type of a value and bring it inside declared bounds.

        Raises:
            ValueError: If the value has the wrong type
        """
        if self.value_type == 'boolean':
            if not isinstance(value, bool):
                raise ValueError(f"{self.name} expects a boolean, got {value!r}")
            return value

        if self.value_type in ('integer', 'number'):
            if not _is_number(value):
                raise ValueError(f"{self.name} expects a number, got {value!r}")
            if self.minimum is not None:
                value = max(self.minimum, value)
            if self.maximum is not None:
                value = min(self.maximum, value)
            if self.value_type == 'integer':
                value = round_half_up(value)
            return value

        if not isinstance(value, str):
            raise ValueError(f"{self.name} expects a string, got {value!r}")
        return value

    def set_cached_value(self, value: Any) -> bool:
        """Store a new value without notifying. Returns True if it changed."""
        if value == self.value:
            return False
        self.value = value
        return True

    def set_cached_value_and_notify(self, value: Any) -> bool:
        """Store a new value and notify the device's host if it changed."""
        changed = self.set_cached_value(value)
        if changed:
            self.device.notify_property_changed(self)
        return changed

    def set_value(self, requested: Any) -> Any:
        """Validate a write request and return the value that will be applied.

        Raises:
            ReadOnlyPropertyError: If the property cannot be written
            ValueError: If the value has the wrong type
        """
        if self.read_only:
            raise ReadOnlyPropertyError(self.name)
        return self.coerce(requested)

    def to_patch(self, value: Any) -> dict:
        """Translate a value into a bridge state patch."""
        raise ReadOnlyPropertyError(self.name)

    def update(self, description: Any) -> None:
        """Apply a bridge description. The base property has nothing to read."""


# Light properties

class OnOffProperty(Property):
    kind = PropertyKind.ON_OFF
    value_type = 'boolean'
    read_only = False
    semantic_type = 'OnOffProperty'
    label = 'On/Off'

    def __init__(self, device: 'Device'):
        super().__init__(device, 'on')

    def update(self, description: Any) -> None:
        on = _state(description).get('on')
        if isinstance(on, bool):
            self.set_cached_value_and_notify(on)

    def to_patch(self, value: bool) -> dict:
        return {'on': value}


class BrightnessProperty(Property):
    kind = PropertyKind.LEVEL
    value_type = 'integer'
    read_only = False
    minimum = 0
    maximum = 100
    semantic_type = 'BrightnessProperty'
    label = 'Brightness'
    unit = 'percent'

    def __init__(self, device: 'Device'):
        super().__init__(device, 'level')

    def update(self, description: Any) -> None:
        bri = _state(description).get('bri')
        if _is_number(bri):
            self.set_cached_value_and_notify(self.coerce(bri_to_percent(bri)))

    def to_patch(self, value: int) -> dict:
        return {'on': True, 'bri': percent_to_bri(value)}


class ColourProperty(Property):
    """Colour as a '#rrggbb' string.

    Reads whichever encoding the bridge says is active and writes in the
    encoding the light was created with.
    """

    kind = PropertyKind.COLOUR
    value_type = 'string'
    read_only = False
    semantic_type = 'ColorProperty'
    label = 'Color'

    def __init__(self, device: 'Device', encoding: ColourEncoding = ColourEncoding.HSV):
        super().__init__(device, 'color')
        self.encoding = ColourEncoding(encoding)

    def coerce(self, value: Any) -> str:
        return normalize_hex(super().coerce(value))

    def update(self, description: Any) -> None:
        state = _state(description)
        bri = state.get('bri')
        if not _is_number(bri):
            return

        xy = state.get('xy')
        has_xy = (isinstance(xy, (list, tuple)) and len(xy) == 2
                  and all(_is_number(c) for c in xy))
        has_hs = _is_number(state.get('hue')) and _is_number(state.get('sat'))

        if has_xy and (state.get('colormode') == 'xy' or not has_hs):
            colour = xy_bri_to_hex(xy[0], xy[1], bri)
        elif has_hs:
            colour = hsv_to_hex(state['hue'], state['sat'], bri)
        else:
            return

        self.set_cached_value_and_notify(colour)

    def to_patch(self, value: str) -> dict:
        if self.encoding is ColourEncoding.XY:
            return {'on': True, **hex_to_xy_bri(value)}
        return {'on': True, **hex_to_hsv(value)}


class ColourTemperatureProperty(Property):
    kind = PropertyKind.COLOUR_TEMPERATURE
    value_type = 'integer'
    read_only = False
    minimum = COLOUR_TEMPERATURE_MIN
    maximum = COLOUR_TEMPERATURE_MAX
    semantic_type = 'ColorTemperatureProperty'
    label = 'Color Temperature'
    unit = 'kelvin'

    def __init__(self, device: 'Device'):
        super().__init__(device, 'colorTemperature')

    def update(self, description: Any) -> None:
        ct = _state(description).get('ct')
        # ct 0 is reported by some lights that are not in ct mode
        if _is_number(ct) and ct > 0:
            self.set_cached_value_and_notify(self.coerce(mired_to_kelvin(ct)))

    def to_patch(self, value: int) -> dict:
        return {'on': True, 'ct': kelvin_to_mired(value)}


class ColourModeProperty(Property):
    kind = PropertyKind.COLOUR_MODE
    value_type = 'string'
    semantic_type = 'ColorModeProperty'
    label = 'Color Mode'
    modes = ('color', 'temperature')

    def __init__(self, device: 'Device'):
        super().__init__(device, 'colorMode')

    def describe(self) -> PropertyMetadata:
        metadata = super().describe()
        metadata['enum'] = list(self.modes)
        return metadata

    def update(self, description: Any) -> None:
        colormode = _state(description).get('colormode')
        if isinstance(colormode, str) and colormode:
            self.set_cached_value_and_notify('temperature' if colormode == 'ct' else 'color')


# Sensor properties

class _SensorStateProperty(Property):
    """Read-only property copied from one typed field of a sensor's state."""

    kind = PropertyKind.SENSOR_READING
    field: str = ''

    def read(self, raw: Any) -> Any:
        """Return the property value for a raw reading, or None to skip it."""
        return raw

    def update(self, description: Any) -> None:
        raw = _state(description).get(self.field)
        if raw is None:
            return
        value = self.read(raw)
        if value is not None:
            self.set_cached_value_and_notify(value)


class _BooleanReading(_SensorStateProperty):
    value_type = 'boolean'

    def read(self, raw: Any) -> bool | None:
        return raw if isinstance(raw, bool) else None


class PresenceProperty(_BooleanReading):
    field = 'presence'
    semantic_type = 'MotionProperty'
    label = 'Present'

    def __init__(self, device: 'Device'):
        super().__init__(device, 'on')


class DarkProperty(_BooleanReading):
    field = 'dark'
    semantic_type = 'BooleanProperty'
    label = 'Dark'

    def __init__(self, device: 'Device'):
        super().__init__(device, 'dark')


class DaylightProperty(_BooleanReading):
    field = 'daylight'
    semantic_type = 'BooleanProperty'
    label = 'Daylight'

    def __init__(self, device: 'Device'):
        super().__init__(device, 'daylight')


class TemperatureProperty(_SensorStateProperty):
    """Temperature in degrees Celsius; the bridge reports hundredths."""

    field = 'temperature'
    value_type = 'number'
    semantic_type = 'TemperatureProperty'
    label = 'Temperature'
    unit = 'degree celsius'

    def __init__(self, device: 'Device'):
        super().__init__(device, 'temperature')

    def describe(self) -> PropertyMetadata:
        metadata = super().describe()
        metadata['multipleOf'] = 0.1
        return metadata

    def read(self, raw: Any) -> float | None:
        return raw / 100 if _is_number(raw) else None


class LightLevelProperty(_SensorStateProperty):
    field = 'lightlevel'
    value_type = 'integer'
    semantic_type = 'LevelProperty'
    label = 'Light Level'

    def __init__(self, device: 'Device'):
        super().__init__(device, 'lightlevel')

    def read(self, raw: Any) -> int | None:
        return raw if _is_int(raw) else None


class LastUpdatedProperty(_SensorStateProperty):
    kind = PropertyKind.META
    field = 'lastupdated'
    label = 'Last Updated'

    def __init__(self, device: 'Device'):
        super().__init__(device, 'lastUpdated')

    def read(self, raw: Any) -> str | None:
        return raw if isinstance(raw, str) else None


class BatteryProperty(Property):
    kind = PropertyKind.SENSOR_READING
    value_type = 'integer'
    minimum = 0
    maximum = 100
    semantic_type = 'LevelProperty'
    label = 'Battery'
    unit = 'percent'

    def __init__(self, device: 'Device'):
        super().__init__(device, 'battery')

    def update(self, description: Any) -> None:
        battery = _config(description).get('battery')
        if _is_number(battery):
            self.set_cached_value_and_notify(self.coerce(battery))


class ButtonProperty(Property):
    """Pushed state of one physical button on a switch.

    codes is any container of button event codes, e.g. a set of the four
    codes a dimmer button emits, or range(1000, 1002) for a start/off pair.
    The owning switch decides when the button counts as pressed.
    """

    kind = PropertyKind.BUTTON
    value_type = 'boolean'
    semantic_type = 'PushedProperty'

    def __init__(self, device: 'Device', name: str, label: str, codes):
        super().__init__(device, name, label)
        self.codes = codes
        self.value = False

    def has_code(self, code: Any) -> bool:
        return _is_int(code) and code in self.codes
