"""
Bridge commands: discovery and link button pairing.

Also holds the helpers the other command modules use to find bridges and
load their saved usernames.
"""

import asyncio

import click

from core.auth import JsonCredentialStore
from core.config import CONFIG_FILE, load_settings
from core.discovery import discover_bridges, discover_cloud, discover_manual
from core.registry import BridgeRegistry
from models.types import DeviceHost

ip_option = click.option('--ip', '-i', 'bridge_ip', default=None,
                         help='Bridge IP address (skips discovery)')


async def find_bridges(registry: BridgeRegistry, bridge_ip: str | None = None,
                       start: bool = False) -> int:
    """Report bridges to the registry from an explicit IP or cloud discovery.

    Returns:
        Number of bridges found
    """
    if bridge_ip:
        return 1 if await discover_manual(registry, bridge_ip, start=start) else 0
    return await discover_cloud(registry, start=start)


async def connect(bridge_ip: str | None = None, host: DeviceHost | None = None) -> BridgeRegistry:
    """Find bridges and load their saved usernames (no polling started)."""
    registry = BridgeRegistry(host=host, credentials=JsonCredentialStore(),
                              settings=load_settings())
    await find_bridges(registry, bridge_ip)
    for session in registry.sessions.values():
        await session.load_credentials()
    return registry


def echo_no_bridges(bridge_ip: str | None):
    if bridge_ip:
        click.secho(f"✗ No Hue bridge answered at {bridge_ip}", fg='red')
    else:
        click.secho("⚠ No bridges found via automatic discovery", fg='yellow')
        click.echo("Philips limits discovery requests; try again or use --ip.")
    click.echo()


@click.command(name='discover')
def discover_command():
    """List bridges found by the Philips discovery service.

    \b
    Example:
      hue-gateway discover
    """
    settings = load_settings()
    click.echo("Discovering Hue bridges...")
    bridges = discover_bridges(settings.discovery_url, settings.request_timeout)

    if not bridges:
        echo_no_bridges(None)
        return

    click.echo()
    click.secho(f"Found {len(bridges)} Hue bridge{'s' if len(bridges) > 1 else ''}:",
                fg='cyan', bold=True)
    for bridge in bridges:
        click.echo(f"  {click.style(bridge['id'].lower(), fg='green', bold=True)}"
                   f"  {bridge['internalipaddress']}")
    click.echo()


async def _pair(bridge_ip: str | None, timeout: float | None) -> BridgeRegistry:
    registry = await connect(bridge_ip)
    unpaired = [s for s in registry.sessions.values() if s.username is None]

    try:
        if unpaired:
            click.echo()
            click.secho("╔═══════════════════════════════════════════════════════╗", fg='yellow', bold=True)
            click.secho("║  Press the LINK BUTTON on your Hue Bridge             ║", fg='yellow', bold=True)
            click.secho("╚═══════════════════════════════════════════════════════╝", fg='yellow', bold=True)
            click.echo()
            click.echo(f"Waiting for button press... ({timeout or registry.settings.pairing_timeout:g}s)")

            registry.start_pairing(timeout)
            await asyncio.gather(*(session.wait_paired() for session in unpaired))
    finally:
        await registry.close()
    return registry


@click.command(name='pair')
@ip_option
@click.option('--timeout', '-t', type=click.FloatRange(min=1), default=None,
              help='Seconds to wait for the link button (default 30)')
def pair_command(bridge_ip: str | None, timeout: float | None):
    """Pair with Hue bridges and save the usernames.

    Press the link button on the bridge, then run this command (or run it
    first and press the button while it waits).

    \b
    Examples:
      hue-gateway pair
      hue-gateway pair --ip 192.168.1.10 --timeout 60
    """
    registry = asyncio.run(_pair(bridge_ip, timeout))

    if not registry.sessions:
        echo_no_bridges(bridge_ip)
        return

    for session in registry.sessions.values():
        if session.username:
            click.secho(f"✓ Paired with {session.bridge_id} ({session.bridge_ip})", fg='green')
        else:
            click.secho(f"✗ Link button not pressed on {session.bridge_id} ({session.bridge_ip})",
                        fg='red')
    click.echo(f"Usernames are saved in {CONFIG_FILE}")
    click.echo()
