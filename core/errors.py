"""Exception types shared by the bridge session, devices and properties.

Transport failures (BridgeRequestError) are caught and logged by the
reconciliation loop and never reach the host. Property errors are raised
synchronously at the device boundary, before any request is made.
"""


class BridgeError(Exception):
    """Base class for errors talking to a Hue bridge."""


class BridgeRequestError(BridgeError):
    """A request to the bridge failed or returned something unreadable."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class PropertyError(Exception):
    """Base class for rejected property writes."""


class ReadOnlyPropertyError(PropertyError):
    """Raised when a write targets a read-only property."""

    def __init__(self, name: str):
        super().__init__(f"Property '{name}' is read-only")
        self.name = name


class UnknownPropertyError(PropertyError):
    """Raised when a write targets a property the device does not have."""

    def __init__(self, device_id: str, name: str):
        super().__init__(f"Device '{device_id}' has no property '{name}'")
        self.device_id = device_id
        self.name = name


class UnknownDeviceError(PropertyError):
    """Raised when a write targets a device id no bridge has reported."""

    def __init__(self, device_id: str):
        super().__init__(f"Unknown device '{device_id}'")
        self.device_id = device_id
