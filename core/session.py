"""BridgeSession class for one physical Hue bridge.

Owns the bridge's address and username, runs the link button pairing
protocol and makes the authenticated v1 REST calls the reconciliation loop
and device writes need. Blocking requests calls run in worker threads.
"""

import asyncio
import logging
import time
from enum import Enum

import requests

from core.auth import parse_pairing_response
from core.config import Settings
from core.errors import BridgeError, BridgeRequestError
from models.devices import Device
from models.types import CredentialStore

_LOGGER = logging.getLogger(__name__)


class PairingState(str, Enum):
    UNPAIRED = 'unpaired'
    PAIRING = 'pairing'
    PAIRED = 'paired'


class BridgeSession:
    """Connection to one Hue bridge via the local v1 API."""

    def __init__(self, bridge_id: str, bridge_ip: str,
                 credentials: CredentialStore | None = None,
                 settings: Settings | None = None,
                 http: requests.Session | None = None):
        """Initialise BridgeSession.

        Args:
            bridge_id: Lowercased bridge id
            bridge_ip: Bridge IP address
            credentials: Store to load/save the username (optional)
            settings: Runtime settings (defaults if not provided)
            http: requests session to use (a new one if not provided)
        """
        self.bridge_id = bridge_id
        self.bridge_ip = bridge_ip
        self.username: str | None = None
        self.pairing = False
        self.pairing_deadline: float | None = None
        self.devices: dict[str, Device] = {}
        self.settings = settings or Settings()
        self.http = http or requests.Session()
        self._credentials = credentials
        self._pairing_task: asyncio.Task | None = None

    def __repr__(self) -> str:
        return f"BridgeSession({self.bridge_id!r}, {self.bridge_ip!r}, {self.state.value})"

    @property
    def state(self) -> PairingState:
        if self.username is not None:
            return PairingState.PAIRED
        if self.pairing:
            return PairingState.PAIRING
        return PairingState.UNPAIRED

    @property
    def base_url(self) -> str:
        return f"http://{self.bridge_ip}/api"

    def _user_url(self) -> str:
        if self.username is None:
            raise BridgeError(f"Bridge {self.bridge_id} is not paired")
        return f"{self.base_url}/{self.username}"

    def _send(self, method: str, url: str, data: dict | None = None):
        """Make a blocking request. Returns None for 404."""
        timeout = self.settings.request_timeout
        try:
            if method == 'GET':
                response = self.http.get(url, timeout=timeout)
            elif method == 'PUT':
                response = self.http.put(url, json=data, timeout=timeout)
            elif method == 'POST':
                response = self.http.post(url, json=data, timeout=timeout)
            else:
                raise ValueError(f"Unsupported method {method}")

            if response.status_code == 404:
                return None
            response.raise_for_status()
            return response.json()
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            raise BridgeRequestError(f"{method} {url} failed: {e}", status) from e
        except requests.exceptions.RequestException as e:
            raise BridgeRequestError(f"{method} {url} failed: {e}") from e
        except ValueError as e:
            raise BridgeRequestError(f"Malformed response to {method} {url}: {e}") from e

    async def _request(self, method: str, url: str, data: dict | None = None):
        return await asyncio.to_thread(self._send, method, url, data)

    # Credentials and pairing

    async def load_credentials(self) -> str | None:
        """Load a saved username for this bridge from the credential store.

        A failing store is treated the same as having no saved username.
        """
        if self._credentials is None:
            return self.username
        try:
            username = await self._credentials.load(self.bridge_id)
        except Exception as e:
            _LOGGER.warning("Could not load username for bridge %s: %s", self.bridge_id, e)
            return self.username

        if username:
            self.username = username
            _LOGGER.debug("Loaded username for bridge %s", self.bridge_id)
        return self.username

    async def _save_credentials(self, username: str):
        if self._credentials is None:
            return
        try:
            await self._credentials.save(self.bridge_id, username)
        except Exception as e:
            _LOGGER.warning("Could not save username for bridge %s: %s", self.bridge_id, e)

    async def request_username(self) -> str | None:
        """Make one pairing attempt.

        Returns:
            The new username, or None if the bridge did not issue one
        """
        try:
            data = await self._request('POST', self.base_url, {'devicetype': self.settings.app_id})
        except BridgeRequestError as e:
            _LOGGER.debug("Pairing request to %s failed: %s", self.bridge_ip, e)
            return None
        return parse_pairing_response(data)

    def start_pairing(self, timeout: float | None = None) -> asyncio.Task | None:
        """Start (or extend) pairing for timeout seconds.

        Must be called from a running event loop.

        Returns:
            The pairing task, or None if the session is already paired
        """
        if self.username is not None:
            return None

        if timeout is None:
            timeout = self.settings.pairing_timeout
        self.pairing = True
        self.pairing_deadline = time.monotonic() + timeout

        if self._pairing_task is None or self._pairing_task.done():
            _LOGGER.info("Pairing with bridge %s for %ss, press the link button",
                         self.bridge_id, timeout)
            self._pairing_task = asyncio.create_task(self._pair_loop())
        return self._pairing_task

    def cancel_pairing(self):
        """Stop pairing. A request already in flight is not aborted; its result is ignored."""
        if self.pairing:
            _LOGGER.info("Pairing with bridge %s cancelled", self.bridge_id)
        self.pairing = False
        self.pairing_deadline = None

    def _pairing_active(self) -> bool:
        return (self.pairing and self.pairing_deadline is not None
                and time.monotonic() < self.pairing_deadline)

    async def _pair_loop(self):
        while self._pairing_active():
            username = await self.request_username()
            if not self.pairing:
                return
            if username:
                self.username = username
                self.pairing = False
                self.pairing_deadline = None
                _LOGGER.info("Paired with bridge %s", self.bridge_id)
                await self._save_credentials(username)
                return
            await asyncio.sleep(self.settings.pairing_retry_interval)

        if self.pairing:
            _LOGGER.info("Pairing with bridge %s timed out", self.bridge_id)
        self.pairing = False
        self.pairing_deadline = None

    async def wait_paired(self) -> bool:
        """Wait for the current pairing attempt to finish.

        Returns:
            True if the session holds a username
        """
        if self._pairing_task is not None:
            await self._pairing_task
        return self.username is not None

    # Bridge REST API

    async def get_config(self) -> dict:
        """Get the bridge's public configuration (no username needed)."""
        return await self._request('GET', f"{self.base_url}/config") or {}

    async def get_lights(self):
        """Get all lights. Bridges without a lights endpoint yield {}."""
        result = await self._request('GET', f"{self._user_url()}/lights")
        return {} if result is None else result

    async def get_sensors(self):
        """Get all sensors. Bridges without a sensors endpoint yield {}."""
        result = await self._request('GET', f"{self._user_url()}/sensors")
        return {} if result is None else result

    async def set_light_state(self, native_id: str, state: dict) -> bool:
        """Send a state patch to a light.

        Args:
            native_id: Native id, e.g. 'lights/3'
            state: Partial v1 state, e.g. {'on': True, 'bri': 127}

        Returns:
            True if the bridge accepted every field
        """
        try:
            result = await self._request('PUT', f"{self._user_url()}/{native_id}/state", state)
        except BridgeError as e:
            _LOGGER.warning("Failed to set state of %s on bridge %s: %s",
                            native_id, self.bridge_id, e)
            return False

        if result is None:
            _LOGGER.warning("Bridge %s has no %s", self.bridge_id, native_id)
            return False

        accepted = True
        for entry in result if isinstance(result, list) else []:
            error = entry.get('error') if isinstance(entry, dict) else None
            if isinstance(error, dict):
                _LOGGER.warning("Bridge %s rejected %s: %s", self.bridge_id,
                                error.get('address'), error.get('description'))
                accepted = False
        return accepted

    def add_device(self, device: Device) -> Device:
        self.devices[device.native_id] = device
        return device

    def close(self):
        self.cancel_pairing()
        if self._pairing_task is not None and not self._pairing_task.done():
            self._pairing_task.cancel()
        self.http.close()
