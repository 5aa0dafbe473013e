"""
Lenient parsing of numeric gazetteer values.

Gazetteer properties and relationship weights are stored as strings and
may be missing or malformed. These helpers never raise: anything that is
not a usable number maps to ``None``.
"""

import math
from typing import Any, Optional


def parse_weight(value: Any) -> Optional[float]:
    """Parse a relationship weight; ``None`` if missing, malformed or not finite."""
    if value is None or isinstance(value, bool):
        return None
    try:
        weight = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(weight):
        return None
    return weight


def parse_population(value: Any) -> Optional[int]:
    """Parse a population count.

    Accepts integers, floats and numeric strings (thousands
    separators ``,`` and ``_`` are ignored; fractions are truncated).
    Negative or otherwise unusable values give ``None``.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip().replace(",", "").replace("_", "")
        if not value:
            return None
    number = parse_weight(value)
    if number is None or number < 0:
        return None
    return int(number)
