"""
Gateway command: poll bridges continuously and print what changes.
"""

import asyncio

import click

from commands.bridge import echo_no_bridges, find_bridges, ip_option
from core.auth import JsonCredentialStore
from core.config import load_settings
from core.registry import BridgeRegistry
from models.devices import Device, Switch
from models.properties import Property, PropertyKind
from models.utils import decode_button_event, format_property_value


class ConsoleHost:
    """Device host that prints registrations and property changes."""

    def __init__(self, echo=click.echo):
        self.echo = echo
        self.devices: dict[str, Device] = {}

    def handle_device_added(self, device: Device) -> None:
        self.devices[device.id] = device
        self.echo(click.style("+ ", fg='green', bold=True) +
                  click.style(device.title, bold=True) +
                  f"  {device.id} ({device.kind.value})")
        for prop in device.properties.values():
            access = 'r' if prop.read_only else 'rw'
            self.echo(f"    {prop.name:<18} {prop.describe()['type']:<8} {access}")

    def notify_property_changed(self, device: Device, prop: Property) -> None:
        if prop.kind is PropertyKind.BUTTON:
            if not prop.value:
                return
            event = None
            if isinstance(device, Switch):
                event = device.last_event
            self.echo(click.style("● ", fg='magenta') +
                      f"{device.title}: {prop.label} pressed ({decode_button_event(event)})")
            return

        self.echo(click.style("~ ", fg='cyan') +
                  f"{device.title}: {prop.name} = {format_property_value(prop.value)}")


async def _run(bridge_ip: str | None, pair: bool):
    host = ConsoleHost()
    registry = BridgeRegistry(host=host, credentials=JsonCredentialStore(),
                              settings=load_settings(), pair_unknown=pair)
    try:
        if not await find_bridges(registry, bridge_ip, start=True):
            echo_no_bridges(bridge_ip)
            return
        # Sessions and loops run as background tasks until interrupted
        await asyncio.Event().wait()
    finally:
        await registry.close()


@click.command(name='run')
@ip_option
@click.option('--pair', is_flag=True, help='Pair with bridges that have no saved username')
def run_command(bridge_ip: str | None, pair: bool):
    """Poll bridges and print device changes and button presses.

    \b
    Examples:
      hue-gateway run
      hue-gateway run --ip 192.168.1.10 --pair
    """
    click.echo("Polling bridges... (Press Ctrl+C to stop)\n")
    try:
        asyncio.run(_run(bridge_ip, pair))
    except KeyboardInterrupt:
        click.echo("\n\nStopped.")
