"""
Minutes Transformer

Normalizes the minutes column of NBA box scores to decimal minutes.
"""

from typing import Any

from pipelines.transformers.averages import coerce_stat


def minutes_to_decimal(value: Any) -> float:
    """
    Convert a minutes value to decimal minutes.

    Accepts "MM:SS" clock strings (boxscore endpoints) and plain numbers
    (game log endpoints). Anything unparseable is 0.

    Examples:
        >>> minutes_to_decimal("34:30")
        34.5
        >>> minutes_to_decimal(28.25)
        28.25
    """
    if isinstance(value, str) and ":" in value:
        parts = value.split(":")
        if len(parts) != 2:
            return 0.0
        mins = coerce_stat(parts[0])
        secs = coerce_stat(parts[1])
        return float(int(mins)) + int(secs) / 60
    return float(coerce_stat(value))
