"""Bridge discovery.

Finds bridges via the Philips N-UPnP cloud endpoint or a known IP address
and feeds (bridge id, ip) pairs into a BridgeRegistry.
"""

import asyncio
import logging
from typing import TYPE_CHECKING

import requests

from core.config import DISCOVERY_URL
from models.types import DiscoveredBridge

if TYPE_CHECKING:
    from core.registry import BridgeRegistry

_LOGGER = logging.getLogger(__name__)


def discover_bridges(url: str = DISCOVERY_URL, timeout: float = 5) -> list[DiscoveredBridge]:
    """Discover Hue bridges on the network using N-UPnP.

    Uses the Philips discovery service to find bridges on the same network.

    Returns:
        List of bridge dicts with keys: id, internalipaddress (and port/name)
        Empty list if discovery fails or no bridges found
    """
    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
        bridges = response.json()
    except requests.exceptions.HTTPError as e:
        if e.response is not None and e.response.status_code == 429:
            _LOGGER.warning("Philips discovery service rate limit reached")
        else:
            _LOGGER.warning("Bridge discovery failed: %s", e)
        return []
    except requests.exceptions.RequestException as e:
        _LOGGER.warning("Bridge discovery failed: %s", e)
        return []
    except ValueError as e:
        _LOGGER.warning("Failed to parse discovery response: %s", e)
        return []

    if not isinstance(bridges, list):
        _LOGGER.warning("Unexpected discovery response: %r", bridges)
        return []

    valid = [b for b in bridges
             if isinstance(b, dict) and b.get('id') and b.get('internalipaddress')]

    # Sort by IP address for consistency
    return sorted(valid, key=lambda b: b.get('internalipaddress', ''))


def fetch_bridge_id(bridge_ip: str, timeout: float = 5) -> str | None:
    """Read a bridge's id from its unauthenticated /api/config endpoint.

    Returns:
        Lowercased bridge id, or None if the address is not a reachable bridge
    """
    try:
        response = requests.get(f"http://{bridge_ip}/api/config", timeout=timeout)
        response.raise_for_status()
        config = response.json()
    except requests.exceptions.RequestException as e:
        _LOGGER.warning("Could not reach bridge at %s: %s", bridge_ip, e)
        return None
    except ValueError as e:
        _LOGGER.warning("Failed to parse config from %s: %s", bridge_ip, e)
        return None

    bridge_id = config.get('bridgeid') if isinstance(config, dict) else None
    if not isinstance(bridge_id, str) or not bridge_id:
        _LOGGER.warning("No bridge id in config from %s", bridge_ip)
        return None
    return bridge_id.lower()


async def discover_cloud(registry: 'BridgeRegistry', start: bool = True) -> int:
    """Feed every bridge the cloud discovery endpoint knows into the registry.

    Args:
        registry: Registry to report bridges to
        start: Start each new session in the background (register only if False)

    Returns:
        Number of bridges reported
    """
    settings = registry.settings
    bridges = await asyncio.to_thread(discover_bridges, settings.discovery_url,
                                      settings.request_timeout)
    report = registry.on_bridge_discovered if start else registry.register
    for bridge in bridges:
        report(bridge['id'], bridge['internalipaddress'])
    return len(bridges)


async def discover_manual(registry: 'BridgeRegistry', bridge_ip: str,
                          start: bool = True) -> str | None:
    """Report a bridge at a known address to the registry.

    Returns:
        The bridge id, or None if nothing answered at that address
    """
    bridge_id = await asyncio.to_thread(fetch_bridge_id, bridge_ip,
                                        registry.settings.request_timeout)
    if bridge_id is not None:
        report = registry.on_bridge_discovered if start else registry.register
        report(bridge_id, bridge_ip)
    return bridge_id
