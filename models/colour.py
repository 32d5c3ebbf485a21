"""Colour conversions between Hue bridge encodings and hex RGB.

The bridge reports colour either as hue/sat/bri (HSV scaled to 0-65535 and
0-254) or as CIE 1931 xy chromaticity plus brightness. Hosts work with
"#rrggbb" strings, brightness percentages and Kelvin.

All functions are pure. Conversions quantize to integers, so round trips are
only accurate to within a unit or so per channel.
"""

import colorsys
import math

HUE_MAX = 65535
SAT_MAX = 254
BRI_MAX = 254

# Wide RGB D65 conversion matrices published by Philips for Hue lights
XYZ_TO_RGB = (
    (1.656492, -0.354851, -0.255038),
    (-0.707196, 1.655397, 0.036152),
    (0.051713, -0.121364, 1.011530),
)
RGB_TO_XYZ = (
    (0.664511, 0.154324, 0.162028),
    (0.283881, 0.668433, 0.047685),
    (0.000088, 0.072310, 0.986039),
)


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up, e.g. 190.5 -> 191."""
    return math.floor(value + 0.5)


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def hex_to_rgb(hex_colour: str) -> tuple[int, int, int]:
    """Parse '#rrggbb' or '#rgb' (leading '#' optional) into an RGB tuple.

    Raises:
        ValueError: If the string is not a hex colour
    """
    if not isinstance(hex_colour, str):
        raise ValueError(f"Not a colour: {hex_colour!r}")

    digits = hex_colour.strip().lstrip('#')
    if len(digits) == 3:
        digits = ''.join(c * 2 for c in digits)
    if len(digits) != 6:
        raise ValueError(f"Not a colour: {hex_colour!r}")

    try:
        return (int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16))
    except ValueError:
        raise ValueError(f"Not a colour: {hex_colour!r}") from None


def rgb_to_hex(r: int, g: int, b: int) -> str:
    """Format 0-255 channel values as a lowercase '#rrggbb' string."""
    return '#{:02x}{:02x}{:02x}'.format(
        int(_clamp(r, 0, 255)), int(_clamp(g, 0, 255)), int(_clamp(b, 0, 255))
    )


def normalize_hex(hex_colour: str) -> str:
    """Return the canonical lowercase '#rrggbb' form of a hex colour."""
    return rgb_to_hex(*hex_to_rgb(hex_colour))


def hsv_to_hex(hue: int, sat: int, bri: int) -> str:
    """Convert bridge hue (0-65535), sat (0-254) and bri (0-254) to hex."""
    h = _clamp(hue, 0, HUE_MAX) / HUE_MAX
    s = _clamp(sat, 0, SAT_MAX) / SAT_MAX
    v = _clamp(bri, 0, BRI_MAX) / BRI_MAX

    r, g, b = colorsys.hsv_to_rgb(h, s, v)
    return rgb_to_hex(round_half_up(r * 255), round_half_up(g * 255), round_half_up(b * 255))


def hex_to_hsv(hex_colour: str) -> dict:
    """Convert a hex colour to bridge hue/sat/bri integers.

    Returns:
        Dict with 'hue' (0-65535), 'sat' (0-254) and 'bri' (0-254)
    """
    r, g, b = hex_to_rgb(hex_colour)
    h, s, v = colorsys.rgb_to_hsv(r / 255, g / 255, b / 255)
    return {
        'hue': round_half_up(h * HUE_MAX),
        'sat': round_half_up(s * SAT_MAX),
        'bri': round_half_up(v * BRI_MAX),
    }


def _gamma_compress(channel: float) -> float:
    if channel <= 0.0031308:
        return 12.92 * channel
    return 1.055 * channel ** (1 / 2.4) - 0.055


def _gamma_expand(channel: float) -> float:
    if channel <= 0.04045:
        return channel / 12.92
    return ((channel + 0.055) / 1.055) ** 2.4


def xy_bri_to_hex(x: float, y: float, bri: int) -> str:
    """Convert xy chromaticity and brightness (0-254) to hex.

    The result is normalised so the strongest channel is at full scale, then
    clamped, so out-of-gamut points map to the nearest displayable colour.
    y == 0 has no defined luminance ratio and yields black.
    """
    if y == 0:
        X = Y = Z = 0.0
    else:
        Y = _clamp(bri, 0, BRI_MAX) / BRI_MAX
        X = (Y / y) * x
        Z = (Y / y) * (1.0 - x - y)

    linear = [row[0] * X + row[1] * Y + row[2] * Z for row in XYZ_TO_RGB]
    r, g, b = (_gamma_compress(c) for c in linear)

    peak = max(r, g, b)
    if peak > 0:
        r, g, b = r / peak, g / peak, b / peak

    return rgb_to_hex(*(round_half_up(_clamp(c, 0.0, 1.0) * 255) for c in (r, g, b)))


def hex_to_xy_bri(hex_colour: str) -> dict:
    """Convert a hex colour to xy chromaticity and brightness.

    Returns:
        Dict with 'xy' ([x, y] rounded to 4 places) and 'bri' (0-254)
    """
    r, g, b = (_gamma_expand(c / 255) for c in hex_to_rgb(hex_colour))

    X, Y, Z = (row[0] * r + row[1] * g + row[2] * b for row in RGB_TO_XYZ)
    total = X + Y + Z
    if total == 0:
        return {'xy': [0.0, 0.0], 'bri': 0}

    return {
        'xy': [round(X / total, 4), round(Y / total, 4)],
        'bri': round_half_up(_clamp(Y, 0.0, 1.0) * BRI_MAX),
    }


def bri_to_percent(bri: int) -> int:
    """Convert bridge brightness (0-254) to a percentage."""
    return round_half_up(_clamp(bri, 0, BRI_MAX) / BRI_MAX * 100)


def percent_to_bri(percent: float) -> int:
    """Convert a brightness percentage to bridge brightness (0-254)."""
    return round_half_up(_clamp(percent, 0, 100) * BRI_MAX / 100)


def mired_to_kelvin(ct: int) -> int:
    """Convert a mired colour temperature to Kelvin."""
    return round_half_up(1e6 / ct)


def kelvin_to_mired(kelvin: int) -> int:
    """Convert a Kelvin colour temperature to mired."""
    return round_half_up(1e6 / kelvin)
