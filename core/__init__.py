"""Core functionality for the Hue gateway.

This package contains:
- session: BridgeSession for REST access and link-button pairing
- poller: ReconciliationLoop that turns bridge snapshots into device updates
- registry: BridgeRegistry tracking one session per discovered bridge
- discovery: Cloud and manual bridge discovery
- auth: Pairing responses and the JSON credential store
- config: Configuration file and runtime settings
- errors: Exception hierarchy
"""
