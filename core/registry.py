"""BridgeRegistry: bridge id to session and reconciliation loop.

Discovery collaborators report (bridge id, ip) pairs here. Ids are
lowercased and the first report for an id wins; later reports, even with a
different address, are ignored until the process restarts.
"""

import asyncio
import logging
from typing import Any

from core.config import Settings
from core.errors import UnknownDeviceError
from core.poller import ReconciliationLoop
from core.session import BridgeSession
from models.devices import Device
from models.types import CredentialStore, DeviceHost

_LOGGER = logging.getLogger(__name__)


class BridgeRegistry:
    """All bridges this process knows about."""

    def __init__(self, host: DeviceHost | None = None,
                 credentials: CredentialStore | None = None,
                 settings: Settings | None = None,
                 pair_unknown: bool = False):
        """Initialise BridgeRegistry.

        Args:
            host: Receives device registrations and property changes
            credentials: Shared username store for every session
            settings: Runtime settings shared by every session
            pair_unknown: Start pairing for bridges with no saved username
        """
        self.host = host
        self.credentials = credentials
        self.settings = settings or Settings()
        self.pair_unknown = pair_unknown
        self.sessions: dict[str, BridgeSession] = {}
        self.loops: dict[str, ReconciliationLoop] = {}
        self._tasks: dict[str, asyncio.Task] = {}

    def __len__(self) -> int:
        return len(self.sessions)

    def __contains__(self, bridge_id: str) -> bool:
        return bridge_id.lower() in self.sessions

    def get(self, bridge_id: str) -> BridgeSession | None:
        return self.sessions.get(bridge_id.lower())

    def register(self, bridge_id: str, bridge_ip: str) -> BridgeSession | None:
        """Create the session and loop for a newly reported bridge.

        Returns:
            The new session, or None if the id was already registered
        """
        bridge_id = bridge_id.lower()
        existing = self.sessions.get(bridge_id)
        if existing is not None:
            if existing.bridge_ip != bridge_ip:
                _LOGGER.debug("Ignoring new address %s for bridge %s (using %s)",
                              bridge_ip, bridge_id, existing.bridge_ip)
            return None

        session = BridgeSession(bridge_id, bridge_ip, self.credentials, self.settings)
        self.sessions[bridge_id] = session
        self.loops[bridge_id] = ReconciliationLoop(session, self.host)
        _LOGGER.info("Found bridge %s at %s", bridge_id, bridge_ip)
        return session

    def on_bridge_discovered(self, bridge_id: str, bridge_ip: str) -> BridgeSession | None:
        """Register a bridge and start it in the background.

        Must be called from a running event loop.
        """
        session = self.register(bridge_id, bridge_ip)
        if session is not None:
            self._tasks[session.bridge_id] = asyncio.create_task(self.start_session(session))
        return session

    async def start_session(self, session: BridgeSession):
        """Load the session's username, pair if asked to, then start polling."""
        username = await session.load_credentials()
        if username is None and self.pair_unknown:
            session.start_pairing()
        self.loops[session.bridge_id].start()

    def start_pairing(self, timeout: float | None = None) -> list[asyncio.Task]:
        """Start pairing every unpaired bridge."""
        tasks = [session.start_pairing(timeout) for session in self.sessions.values()]
        return [task for task in tasks if task is not None]

    def cancel_pairing(self):
        for session in self.sessions.values():
            session.cancel_pairing()

    def devices(self) -> list[Device]:
        return [device for session in self.sessions.values()
                for device in session.devices.values()]

    def find_device(self, device_id: str) -> Device | None:
        for device in self.devices():
            if device.id == device_id:
                return device
        return None

    async def set_property(self, device_id: str, name: str, value: Any) -> Any:
        """Route a host write to the device that owns the property.

        Returns:
            The accepted value

        Raises:
            UnknownDeviceError: If no bridge has reported the device
            UnknownPropertyError: If the device has no such property
            ReadOnlyPropertyError: If the property is read-only
            ValueError: If the value has the wrong type
        """
        device = self.find_device(device_id)
        if device is None:
            raise UnknownDeviceError(device_id)
        return await device.handle_write(name, value)

    async def close(self):
        """Stop every loop and pairing task."""
        for task in self._tasks.values():
            task.cancel()
        for loop in self.loops.values():
            await loop.stop()
        for session in self.sessions.values():
            session.close()
        await asyncio.gather(*self._tasks.values(), return_exceptions=True)
        self._tasks.clear()
