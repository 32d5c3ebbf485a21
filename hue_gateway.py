#!/usr/bin/env python3
"""
Hue Gateway CLI
Bridge Philips Hue lights and sensors to normalised device properties.
"""

import logging

import click

from commands.bridge import discover_command, pair_command
from commands.control import devices_command, set_command
from commands.run import run_command
from commands.setup import ColouredGroup, help_command


@click.group(
    cls=ColouredGroup,
    context_settings={
        'help_option_names': ['-h', '--help'],
        'max_content_width': 999  # Very wide to prevent wrapping on wide terminals
    }
)
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
@click.version_option(version='0.1.0', prog_name='Hue Gateway')
def cli(verbose: bool):
    """Hue Gateway CLI - Poll Philips Hue bridges and control their devices.

Pair once with 'pair' (press the bridge's link button), then use 'run' to
watch lights, motion sensors and dimmer switches, or 'set' to change them.

Use 'help' for a quick reference of all commands.
Use 'COMMAND -h' or 'COMMAND --help' for detailed help on a specific command."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )


cli.add_command(help_command)

# Register bridge commands
cli.add_command(discover_command)
cli.add_command(pair_command)

# Register device commands
cli.add_command(devices_command)
cli.add_command(set_command)
cli.add_command(run_command)


if __name__ == '__main__':
    cli()
