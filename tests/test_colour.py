"""Tests for colour conversions in models/colour.py

Round trips are lossy because every conversion quantizes to integers, so
they are asserted against tolerances rather than exact equality.
"""

import pytest

from models.colour import (
    bri_to_percent,
    hex_to_hsv,
    hex_to_rgb,
    hex_to_xy_bri,
    hsv_to_hex,
    kelvin_to_mired,
    mired_to_kelvin,
    normalize_hex,
    percent_to_bri,
    rgb_to_hex,
    round_half_up,
    xy_bri_to_hex,
)

HUE_UNITS_PER_DEGREE = 65535 / 360


class TestHexParsing:
    """Tests for hex_to_rgb, rgb_to_hex and normalize_hex."""

    def test_six_digit(self):
        assert hex_to_rgb('#ff8000') == (255, 128, 0)

    def test_without_hash_and_uppercase(self):
        assert hex_to_rgb('FF8000') == (255, 128, 0)

    def test_three_digit(self):
        assert hex_to_rgb('#abc') == (170, 187, 204)

    @pytest.mark.parametrize('bad', ['#12345', 'zzzzzz', 'red', '', 12, None])
    def test_invalid(self, bad):
        with pytest.raises(ValueError):
            hex_to_rgb(bad)

    def test_rgb_to_hex_is_lowercase(self):
        assert rgb_to_hex(255, 171, 0) == '#ffab00'

    def test_rgb_to_hex_clamps(self):
        assert rgb_to_hex(300, -5, 16) == '#ff0010'

    def test_normalize(self):
        assert normalize_hex('#F00') == '#ff0000'


class TestHsv:
    """Tests for hsv_to_hex and hex_to_hsv."""

    def test_pure_red(self):
        assert hsv_to_hex(0, 254, 254) == '#ff0000'
        assert hex_to_hsv('#FF0000') == {'hue': 0, 'sat': 254, 'bri': 254}

    def test_black(self):
        assert hsv_to_hex(12345, 200, 0) == '#000000'
        assert hex_to_hsv('#000000') == {'hue': 0, 'sat': 0, 'bri': 0}

    def test_white(self):
        assert hex_to_hsv('#ffffff') == {'hue': 0, 'sat': 0, 'bri': 254}

    def test_out_of_range_inputs_are_clamped(self):
        assert hsv_to_hex(0, 999, 999) == '#ff0000'

    @pytest.mark.parametrize('hue', range(0, 65535, 4096))
    def test_hue_round_trip(self, hue):
        """Saturated full-brightness colours keep their hue within one degree."""
        result = hex_to_hsv(hsv_to_hex(hue, 254, 254))
        assert abs(result['hue'] - hue) <= HUE_UNITS_PER_DEGREE
        assert abs(result['sat'] - 254) <= 1
        assert abs(result['bri'] - 254) <= 1

    @pytest.mark.parametrize('bri', range(1, 255, 11))
    def test_bri_round_trip(self, bri):
        result = hex_to_hsv(hsv_to_hex(0, 254, bri))
        assert abs(result['bri'] - bri) <= 1

    @pytest.mark.parametrize('sat', range(0, 255, 11))
    def test_sat_round_trip(self, sat):
        result = hex_to_hsv(hsv_to_hex(0, sat, 254))
        assert abs(result['sat'] - sat) <= 1
        assert abs(result['bri'] - 254) <= 1


class TestXy:
    """Tests for xy_bri_to_hex and hex_to_xy_bri."""

    def test_y_zero_is_black(self):
        assert xy_bri_to_hex(0.3, 0.0, 254) == '#000000'
        assert xy_bri_to_hex(0.0, 0.0, 0) == '#000000'

    def test_black_to_xy(self):
        assert hex_to_xy_bri('#000000') == {'xy': [0.0, 0.0], 'bri': 0}

    def test_result_is_hex(self):
        colour = xy_bri_to_hex(0.7, 0.29, 254)
        assert colour.startswith('#') and len(colour) == 7

    def test_out_of_gamut_is_clamped(self):
        """Points outside the gamut still produce a valid colour."""
        colour = xy_bri_to_hex(0.05, 0.9, 254)
        assert all(0 <= channel <= 255 for channel in hex_to_rgb(colour))

    def test_brightest_channel_is_full_scale(self):
        assert max(hex_to_rgb(xy_bri_to_hex(0.45, 0.41, 100))) == 255

    def test_xy_shape(self):
        result = hex_to_xy_bri('#ff0000')
        assert len(result['xy']) == 2
        assert 0 <= result['bri'] <= 254

    @pytest.mark.parametrize('x,y,bri', [
        (0.3127, 0.329, 254),
        (0.45, 0.41, 254),
        (0.3127, 0.329, 127),
    ])
    def test_chromaticity_round_trip(self, x, y, bri):
        result = hex_to_xy_bri(xy_bri_to_hex(x, y, bri))
        assert abs(result['xy'][0] - x) <= 0.02
        assert abs(result['xy'][1] - y) <= 0.02


class TestBrightness:
    """Tests for bri_to_percent and percent_to_bri."""

    def test_half(self):
        assert bri_to_percent(127) == 50
        assert percent_to_bri(50) == 127

    def test_halves_round_up(self):
        assert percent_to_bri(75) == 191
        assert percent_to_bri(25) == 64
        assert round_half_up(190.5) == 191
        assert round_half_up(0.49) == 0

    def test_bounds(self):
        assert bri_to_percent(0) == 0
        assert bri_to_percent(254) == 100
        assert bri_to_percent(300) == 100
        assert percent_to_bri(150) == 254
        assert percent_to_bri(-1) == 0

    def test_round_trip(self):
        for percent in range(0, 101):
            assert abs(bri_to_percent(percent_to_bri(percent)) - percent) <= 1


class TestColourTemperature:
    """Tests for mired_to_kelvin and kelvin_to_mired."""

    def test_known_values(self):
        assert mired_to_kelvin(153) == 6536
        assert mired_to_kelvin(500) == 2000
        assert kelvin_to_mired(2700) == 370
        assert kelvin_to_mired(3200) == 313
        assert mired_to_kelvin(320) == 3125

    def test_mired_round_trip_is_exact(self):
        for mired in range(153, 455):
            assert kelvin_to_mired(mired_to_kelvin(mired)) == mired

    def test_kelvin_round_trip_within_one_mired(self):
        """Kelvin survives a round trip to within one mired step."""
        for kelvin in range(2203, 6537):
            tolerance = kelvin * kelvin / 2e6 + 1
            assert abs(mired_to_kelvin(kelvin_to_mired(kelvin)) - kelvin) <= tolerance
