"""
Control commands: list devices and write properties.

Both poll each paired bridge once so the device list reflects the bridge's
current state.
"""

import asyncio

import click

from commands.bridge import connect, echo_no_bridges, ip_option
from core.errors import PropertyError, UnknownDeviceError, UnknownPropertyError
from core.registry import BridgeRegistry
from models.utils import find_similar_strings, format_property_value, parse_property_value


async def _poll(registry: BridgeRegistry):
    """Poll each paired bridge once."""
    for bridge_id, session in registry.sessions.items():
        if session.username is None:
            click.secho(f"⚠ Bridge {bridge_id} is not paired, run 'pair' first", fg='yellow')
            continue
        await registry.loops[bridge_id].poll_once()


async def _snapshot(bridge_ip: str | None) -> BridgeRegistry:
    """Find bridges, poll each paired one once and close the connections."""
    registry = await connect(bridge_ip)
    try:
        await _poll(registry)
    finally:
        await registry.close()
    return registry


@click.command(name='devices')
@ip_option
def devices_command(bridge_ip: str | None):
    """List devices and their current property values.

    \b
    Examples:
      hue-gateway devices
      hue-gateway devices --ip 192.168.1.10
    """
    registry = asyncio.run(_snapshot(bridge_ip))
    if not registry.sessions:
        echo_no_bridges(bridge_ip)
        return

    for session in registry.sessions.values():
        click.echo()
        click.secho(f"Bridge {session.bridge_id} ({session.bridge_ip})", fg='cyan', bold=True)
        if not session.devices:
            click.echo("  (no devices)")
            continue

        for device in sorted(session.devices.values(), key=lambda d: d.title.lower()):
            click.echo(f"  {click.style(device.title, fg='green', bold=True)}  "
                       f"{click.style(device.id, dim=True)}  [{device.kind.value}]")
            for prop in device.properties.values():
                marker = '' if prop.read_only else click.style(' *', fg='yellow')
                click.echo(f"      {prop.name:<18} {format_property_value(prop.value)}{marker}")
    click.echo()
    click.echo(f"{click.style('*', fg='yellow')} writable with 'set'")


async def _set(bridge_ip: str | None, device_id: str, name: str, value):
    registry = await connect(bridge_ip)
    try:
        await _poll(registry)
        return await registry.set_property(device_id, name, value)
    except UnknownDeviceError:
        click.echo(f"Error: Device '{device_id}' not found.", err=True)
        suggestions = find_similar_strings(device_id, [d.id for d in registry.devices()], limit=3)
        if suggestions:
            click.secho("Did you mean one of these?", fg='yellow')
            for suggestion in suggestions:
                click.secho(f"  • {suggestion}", fg='green')
    except UnknownPropertyError as e:
        device = registry.find_device(device_id)
        click.echo(f"Error: {e}", err=True)
        click.echo(f"Properties: {', '.join(device.properties)}")
    except (PropertyError, ValueError) as e:
        click.echo(f"Error: {e}", err=True)
    finally:
        await registry.close()
    return None


@click.command(name='set')
@click.argument('device_id')
@click.argument('property_name')
@click.argument('value')
@ip_option
def set_command(device_id: str, property_name: str, value: str, bridge_ip: str | None):
    """Write a device property.

    VALUE is parsed as on/off/true/false, a number, or a string such as a
    '#rrggbb' colour. Numbers are clamped to the property's range.

    \b
    Examples:
      hue-gateway set philips-hue-001788fffe123456-1 on off
      hue-gateway set philips-hue-001788fffe123456-1 level 50
      hue-gateway set philips-hue-001788fffe123456-1 color '#ff0000'
    """
    accepted = asyncio.run(_set(bridge_ip, device_id, property_name,
                                parse_property_value(value)))
    if accepted is None:
        raise SystemExit(1)
    click.secho(f"✓ {device_id} {property_name} set to {format_property_value(accepted)}",
                fg='green')
