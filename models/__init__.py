"""Data models and utility functions.

This package contains:
- devices: Light, sensor and switch devices built from bridge descriptions
- properties: Typed device properties for lights and sensors
- colour: Hue/sat/bri, xy and colour temperature conversions
- types: Bridge payload TypedDicts, property metadata and the host and credential store protocols
- utils: Utility functions (decode_button_event, value parsing, fuzzy matching)
"""
