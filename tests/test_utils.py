"""Tests for utility functions in models/utils.py"""

import pytest

from models.utils import (
    decode_button_event,
    find_similar_strings,
    format_property_value,
    parse_property_value,
    similarity_score,
)


class TestDecodeButtonEvent:
    """Tests for decode_button_event function."""

    def test_on_button_short_release(self):
        """On button (1) short release (002)."""
        assert decode_button_event(1002) == "On (Short Release)"

    def test_dim_up_hold(self):
        """Dim Up button (2) hold (001)."""
        assert decode_button_event(2001) == "Dim Up (Hold)"

    def test_dim_down_initial_press(self):
        """Dim Down button (3) initial press (000)."""
        assert decode_button_event(3000) == "Dim Down (Initial Press)"

    def test_off_button_long_release(self):
        """Off button (4) long release (003)."""
        assert decode_button_event(4003) == "Off (Long Release)"

    def test_compact(self):
        assert decode_button_event(1002, compact=True) == "On SR"
        assert decode_button_event(4001, compact=True) == "Off H"

    def test_unknown_button(self):
        assert decode_button_event(7002) == "Button 7 (Short Release)"

    def test_unknown_event_code(self):
        """Unknown or invalid event codes."""
        assert decode_button_event(0) == "Unknown"
        assert decode_button_event(None) == "Unknown"
        assert decode_button_event(99) == "Unknown (99)"
        assert decode_button_event(34002) == "Unknown (34002)"


class TestParsePropertyValue:
    @pytest.mark.parametrize('text,expected', [
        ('on', True),
        ('TRUE', True),
        ('off', False),
        ('false', False),
        ('50', 50),
        ('-3', -3),
        ('2700.5', 2700.5),
        ('#FF0000', '#FF0000'),
        ('Warm white', 'Warm white'),
    ])
    def test_values(self, text, expected):
        result = parse_property_value(text)
        assert result == expected
        assert type(result) is type(expected)


class TestFormatPropertyValue:
    @pytest.mark.parametrize('value,expected', [
        (None, '-'),
        (True, 'on'),
        (False, 'off'),
        (21.5, '21.5'),
        (50, '50'),
        ('#ff0000', '#ff0000'),
    ])
    def test_values(self, value, expected):
        assert format_property_value(value) == expected


class TestSimilarity:
    """Tests for the fuzzy matching used for suggestions."""

    def test_exact(self):
        assert similarity_score('Devices', 'devices') == 100

    def test_prefix(self):
        assert similarity_score('dev', 'devices') == 80

    def test_substring(self):
        assert similarity_score('vice', 'devices') == 60

    def test_sequence(self):
        score = similarity_score('discvr', 'discover')
        assert 20 < score <= 50

    def test_no_match(self):
        assert similarity_score('xyz', 'pair') == 0

    def test_find_similar(self):
        candidates = ['discover', 'devices', 'pair', 'run', 'set']
        assert find_similar_strings('discovr', candidates)[0] == 'discover'
        assert find_similar_strings('qqq', candidates) == []

    def test_limit(self):
        assert len(find_similar_strings('d', ['da', 'db', 'dc', 'dd'], limit=2)) == 2
