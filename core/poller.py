"""Reconciliation loop.

Polls one bridge's lights and sensors, creates a device the first time a
native id is seen and applies each later snapshot to the existing device.
A device with recently_updated set skips exactly one snapshot so a write
that was just sent is not overwritten by the bridge's pre-write state.
"""

import asyncio
import logging

from core.errors import BridgeError
from core.session import BridgeSession
from models.devices import (
    create_light,
    create_sensor,
    is_primary_sensor,
    sensor_kind,
)
from models.types import DeviceHost

_LOGGER = logging.getLogger(__name__)


def _collection(name: str, payload) -> dict:
    if isinstance(payload, dict):
        return payload
    # e.g. [{"error": {"type": 1, "description": "unauthorized user"}}]
    _LOGGER.warning("Ignoring unexpected %s payload: %r", name, payload)
    return {}


class ReconciliationLoop:
    """Keeps a session's devices in step with the bridge."""

    def __init__(self, session: BridgeSession, host: DeviceHost | None = None,
                 interval: float | None = None):
        self.session = session
        self.host = host
        self.interval = session.settings.poll_interval if interval is None else interval
        self._task: asyncio.Task | None = None
        # sensor native ids that are never surfaced
        self._ignored_sensors: set[str] = set()
        self._unsupported_types: set[str] = set()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> asyncio.Task:
        if not self.running:
            self._task = asyncio.create_task(self.run())
        return self._task

    async def stop(self):
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def run(self):
        """Poll forever. A failed poll is logged and the next one still runs."""
        while True:
            try:
                await self.poll_once()
            except Exception:
                _LOGGER.warning("Poll of bridge %s failed", self.session.bridge_id,
                                exc_info=True)
            await asyncio.sleep(self.interval)

    async def poll_once(self) -> bool:
        """Fetch lights and sensors once and reconcile them.

        A failed request for one collection is logged and the other
        collection is still reconciled.

        Returns:
            False if the session has no username and nothing was polled
        """
        if self.session.username is None:
            return False

        lights = await self._fetch('lights', self.session.get_lights)
        sensors = await self._fetch('sensors', self.session.get_sensors)
        self.reconcile(lights, sensors)
        return True

    async def _fetch(self, name: str, request):
        try:
            return await request()
        except BridgeError as e:
            _LOGGER.warning("Polling %s of bridge %s failed: %s", name, self.session.bridge_id, e)
            return None

    def reconcile(self, lights, sensors):
        """Apply one poll's light and sensor collections to the devices.

        A collection that could not be fetched (None) is left alone.
        """
        lights = {} if lights is None else _collection('lights', lights)
        sensors = {} if sensors is None else _collection('sensors', sensors)

        for light_id, description in lights.items():
            if not isinstance(description, dict):
                _LOGGER.debug("Skipping malformed light %s", light_id)
                continue
            self._apply(f"lights/{light_id}", light_id, description, sensors)

        for sensor_id, description in sensors.items():
            if not isinstance(description, dict):
                _LOGGER.debug("Skipping malformed sensor %s", sensor_id)
                continue
            self._apply(f"sensors/{sensor_id}", sensor_id, description, sensors)

    def _apply(self, native_id: str, entry_id: str, description: dict, sensors: dict):
        device = self.session.devices.get(native_id)

        if device is None:
            device = self._create(native_id, entry_id, description, sensors)
            if device is None:
                return
            self.session.add_device(device)
            if self.host is not None:
                self.host.handle_device_added(device)
            _LOGGER.info("Added %s %r (%s)", device.id, device.title, device.kind.value)
            device.update(description, sensors)
            return

        if device.recently_updated:
            device.recently_updated = False
            _LOGGER.debug("Skipping echo of recent write to %s", device.id)
            return

        device.update(description, sensors)

    def _create(self, native_id: str, entry_id: str, description: dict, sensors: dict):
        bridge_id = self.session.bridge_id

        if native_id.startswith('lights/'):
            return create_light(bridge_id, entry_id, description, self.host,
                                self.session.set_light_state)

        if native_id in self._ignored_sensors:
            return None

        if not is_primary_sensor(description):
            # Readings of another device, e.g. a motion sensor's temperature
            self._ignored_sensors.add(native_id)
            return None

        if sensor_kind(description) is None:
            sensor_type = str(description.get('type'))
            if sensor_type not in self._unsupported_types:
                self._unsupported_types.add(sensor_type)
                _LOGGER.info("Ignoring unsupported sensor %s of type %r", native_id, sensor_type)
            self._ignored_sensors.add(native_id)
            return None

        return create_sensor(bridge_id, entry_id, description, sensors, self.host)
