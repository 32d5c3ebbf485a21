"""
Help command and the custom Click group for the Hue gateway CLI.

Contains custom Click group class for coloured help output and typo suggestions.
"""

from dataclasses import dataclass

import click

from core.config import CONFIG_FILE
from models.utils import find_similar_strings


@dataclass(frozen=True)
class CommandSection:
    """Represents a section in the help command."""
    name: str
    icon: str
    commands: list[tuple[str, str]]


COMMAND_SECTIONS = [
    CommandSection(
        name="BRIDGES",
        icon="🌉",
        commands=[
            ("discover", "List bridges found by the Philips discovery service"),
            ("pair", "Pair with discovered bridges (press the link button)"),
            ("pair --ip <address>", "Pair with the bridge at an address"),
            ("pair --timeout <seconds>", "How long to wait for the link button"),
        ]
    ),
    CommandSection(
        name="DEVICES",
        icon="💡",
        commands=[
            ("devices", "Poll once and list devices with their properties"),
            ("set <device> <property> <value>", "Write a property, e.g. 'set <id> level 50'"),
        ]
    ),
    CommandSection(
        name="GATEWAY",
        icon="🎯",
        commands=[
            ("run", "Poll continuously and print changes and button presses"),
            ("run --pair", "Also pair with bridges that have no saved username"),
        ]
    ),
]


class ColouredGroup(click.Group):
    """Custom Group class that adds colour to help output and suggests similar commands."""

    def resolve_command(self, ctx, args):
        """Resolve command with suggestions for typos."""
        try:
            return super().resolve_command(ctx, args)
        except click.UsageError as e:
            if 'No such command' in str(e):
                cmd_name = args[0] if args else ''
                suggestions = self._get_suggestions(ctx, cmd_name)

                if suggestions:
                    error_msg = f"Error: No such command '{cmd_name}'.\n\n"
                    error_msg += click.style("Did you mean one of these?\n", fg='yellow')
                    for suggestion in suggestions:
                        error_msg += click.style(f"  • {suggestion}\n", fg='green')
                    raise click.UsageError(error_msg)
            raise

    def _get_suggestions(self, ctx, cmd_name, max_suggestions=3):
        """Get visible command names similar to cmd_name."""
        if not cmd_name:
            return []

        visible = []
        for command in self.list_commands(ctx):
            cmd_obj = self.get_command(ctx, command)
            if cmd_obj is not None and not cmd_obj.hidden:
                visible.append(command)
        return find_similar_strings(cmd_name, visible, limit=max_suggestions)

    def format_help(self, ctx, formatter):
        """Format help with colours."""
        self.format_usage(ctx, formatter)
        self.format_help_text(ctx, formatter)
        self.format_options(ctx, formatter)
        self.format_commands(ctx, formatter)

    def format_usage(self, ctx, formatter):
        formatter.write_paragraph()
        formatter.write_text(
            click.style('Usage: ', fg='cyan', bold=True) +
            click.style(f'{ctx.command_path} [OPTIONS] COMMAND [ARGS]...', fg='white')
        )

    def format_help_text(self, ctx, formatter):
        if self.help:
            formatter.write_paragraph()
            for line in self.help.split('\n'):
                if line.strip():
                    formatter.write_text(click.style(line, fg='white'))
                else:
                    formatter.write_paragraph()

    def format_options(self, ctx, formatter):
        opts = [rv for rv in (p.get_help_record(ctx) for p in self.get_params(ctx))
                if rv is not None]

        if opts:
            formatter.write_paragraph()
            formatter.write_text(click.style('Options:', fg='yellow', bold=True))
            with formatter.indentation():
                for opt_name, opt_help in opts:
                    formatter.write_text(
                        click.style(opt_name, fg='green') + '  ' +
                        click.style(opt_help, fg='white')
                    )

    def format_commands(self, ctx, formatter):
        commands = []
        for subcommand in self.list_commands(ctx):
            cmd = self.get_command(ctx, subcommand)
            if cmd is None or cmd.hidden:
                continue
            commands.append((subcommand, cmd.get_short_help_str(limit=500)))

        if commands:
            formatter.write_paragraph()
            formatter.write_text(click.style('Commands:', fg='yellow', bold=True))

            max_len = max(max(len(name) for name, _ in commands), 12)
            with formatter.indentation():
                for subcommand, help_text in commands:
                    formatter.write_text(
                        click.style(subcommand.ljust(max_len), fg='green') + '  ' +
                        click.style(help_text, fg='white', dim=True)
                    )


@click.command(name='help')
def help_command():
    """Display help and common commands."""
    click.secho("\n╔══════════════════════════════════════════════════════════╗", fg='cyan', bold=True)
    click.secho("║             Hue Gateway - Quick Reference                ║", fg='cyan', bold=True)
    click.secho("╚══════════════════════════════════════════════════════════╝", fg='cyan', bold=True)
    click.echo()

    for section in COMMAND_SECTIONS:
        click.secho(f"{section.icon} {section.name}", fg='yellow', bold=True)
        for cmd, desc in section.commands:
            click.echo("  ", nl=False)
            click.secho(cmd, fg='green', nl=False)
            click.echo(" " * max(2, 36 - len(cmd)) + desc)
        click.echo()

    click.secho("🔧 COMMON OPTIONS", fg='yellow', bold=True)
    for flag, desc in [("-i, --ip", "Bridge IP address (skips discovery)"),
                       ("-v, --verbose", "Debug logging")]:
        click.echo("  ", nl=False)
        click.secho(flag, fg='cyan', nl=False)
        click.echo(" " * (36 - len(flag)) + desc)
    click.echo()

    click.secho(f"Usernames are saved in {CONFIG_FILE}", fg='cyan')
    click.echo(f"For detailed help on any command: hue-gateway {click.style('<command> -h', fg='white', bold=True)}")
    click.echo()
