"""CLI command modules.

This package contains:
- bridge: Bridge commands (discover, pair)
- control: Device commands (devices, set)
- run: Long-running gateway (run)
- setup: Coloured command group and help command
"""
