"""Type definitions for Hue bridge payloads and collaborator interfaces.

This module provides TypedDict definitions for the v1 REST payloads the
bridge returns, plus the protocols the core expects from the host gateway
and the credential store.
"""

from typing import TYPE_CHECKING, Protocol, TypedDict

if TYPE_CHECKING:
    from models.devices import Device
    from models.properties import Property


class DiscoveredBridge(TypedDict, total=False):
    """Bridge information from N-UPnP discovery."""
    id: str
    internalipaddress: str
    port: int
    name: str | None


class LightState(TypedDict, total=False):
    """The 'state' object of a light description."""
    on: bool
    bri: int
    hue: int
    sat: int
    xy: list[float]
    ct: int
    colormode: str
    reachable: bool


class LightDescription(TypedDict, total=False):
    """One entry of GET /api/<username>/lights."""
    name: str
    type: str
    modelid: str
    uniqueid: str
    state: LightState


class SensorState(TypedDict, total=False):
    """The 'state' object of a sensor description."""
    presence: bool
    temperature: int
    lightlevel: int
    dark: bool
    daylight: bool
    buttonevent: int
    lastupdated: str


class SensorConfig(TypedDict, total=False):
    on: bool
    battery: int
    reachable: bool


class SensorCapabilities(TypedDict, total=False):
    certified: bool
    primary: bool


class SensorDescription(TypedDict, total=False):
    """One entry of GET /api/<username>/sensors."""
    name: str
    type: str
    modelid: str
    uniqueid: str
    state: SensorState
    config: SensorConfig
    capabilities: SensorCapabilities


class BridgeErrorEntry(TypedDict, total=False):
    type: int
    address: str
    description: str


# Metadata a host needs to register a property ('@type' is not an identifier)
PropertyMetadata = TypedDict('PropertyMetadata', {
    '@type': str,
    'label': str,
    'type': str,
    'unit': str,
    'minimum': float,
    'maximum': float,
    'readOnly': bool,
    'enum': list,
    'multipleOf': float,
}, total=False)


class DeviceHost(Protocol):
    """The host gateway's side of the device model."""

    def handle_device_added(self, device: 'Device') -> None:
        ...

    def notify_property_changed(self, device: 'Device', prop: 'Property') -> None:
        ...


class CredentialStore(Protocol):
    """Persistent bridge id to username mapping."""

    async def load(self, bridge_id: str) -> str | None:
        ...

    async def save(self, bridge_id: str, username: str) -> None:
        ...
