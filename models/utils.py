"""Utility functions for the Hue gateway CLI.

This module contains helper functions used across the application:
- decode_button_event: Convert dimmer switch event codes to human-readable format
- parse_property_value: Turn a command line argument into a property value
- format_property_value: Render a property value for terminal output
- similarity_score: Canonical fuzzy string matching algorithm
- find_similar_strings: Find similar strings using fuzzy matching
"""

from typing import Any

BUTTON_NAMES = {
    '1': 'On',
    '2': 'Dim Up',
    '3': 'Dim Down',
    '4': 'Off',
}

EVENT_NAMES = {
    '000': 'Initial Press',
    '001': 'Hold',
    '002': 'Short Release',
    '003': 'Long Release',
}

EVENT_NAMES_COMPACT = {
    '000': 'IP',
    '001': 'H',
    '002': 'SR',
    '003': 'LR',
}


def decode_button_event(event_code: int | None, compact: bool = False) -> str:
    """Decode a Hue dimmer switch event code into human-readable format.

    Format: XYYY where X is button number, YYY is event type
    Button: 1=On, 2=Dim Up, 3=Dim Down, 4=Off
    Event: 000=Initial Press, 001=Hold, 002=Short Release, 003=Long Release

    Args:
        event_code: The numeric event code
        compact: If True, use abbreviated format (e.g., "On SR" instead of "On (Short Release)")
    """
    if not event_code:
        return "Unknown"

    event_str = str(event_code)
    if len(event_str) != 4:
        return f"Unknown ({event_code})"

    button = event_str[0]
    event = event_str[1:]

    button_name = BUTTON_NAMES.get(button, f"Button {button}")
    if compact:
        return f"{button_name} {EVENT_NAMES_COMPACT.get(event, event)}"
    return f"{button_name} ({EVENT_NAMES.get(event, event)})"


def parse_property_value(text: str) -> Any:
    """Parse a command line value: true/false/on/off, a number, or a string.

    Examples:
        'on' -> True, '50' -> 50, '2700.5' -> 2700.5, '#ff0000' -> '#ff0000'
    """
    lowered = text.strip().lower()
    if lowered in ('true', 'on', 'yes'):
        return True
    if lowered in ('false', 'off', 'no'):
        return False

    try:
        return int(lowered)
    except ValueError:
        pass
    try:
        return float(lowered)
    except ValueError:
        return text


def format_property_value(value: Any) -> str:
    """Render a property value for display ('-' when unknown)."""
    if value is None:
        return '-'
    if isinstance(value, bool):
        return 'on' if value else 'off'
    if isinstance(value, float):
        return f"{value:g}"
    return str(value)


def similarity_score(s1: str, s2: str) -> int:
    """Calculate similarity score between two strings.

    This is the canonical implementation used for fuzzy matching (command
    typo suggestions, device and property name suggestions).

    Args:
        s1: First string to compare
        s2: Second string to compare

    Returns:
        Similarity score:
        - 100: Exact match (case-insensitive)
        - 80: Prefix match
        - 60: Substring match
        - 0-50: Character sequence match (proportional to matching characters)
        - 0: No match
    """
    s1_lower = s1.lower()
    s2_lower = s2.lower()

    if s1_lower == s2_lower:
        return 100

    if s2_lower.startswith(s1_lower) or s1_lower.startswith(s2_lower):
        return 80

    if s1_lower in s2_lower or s2_lower in s1_lower:
        return 60

    # Count characters of s1 found in order in s2
    matches = 0
    j = 0
    for char in s1_lower:
        while j < len(s2_lower):
            j += 1
            if s2_lower[j - 1] == char:
                matches += 1
                break

    if matches > 0:
        score = int((matches / max(len(s1_lower), len(s2_lower))) * 50)
        return score if score > 20 else 0

    return 0


def find_similar_strings(target: str, candidates: list[str], limit: int = 5) -> list[str]:
    """Find similar strings using simple similarity scoring.

    Args:
        target: The string to match against
        candidates: List of candidate strings to search
        limit: Maximum number of results to return

    Returns:
        List of similar strings, sorted by similarity score (most similar first)
    """
    scored = [(candidate, similarity_score(target, candidate)) for candidate in candidates]
    filtered = [(c, s) for c, s in scored if s > 0]
    return [c for c, s in sorted(filtered, key=lambda x: x[1], reverse=True)[:limit]]
