"""
Shared utilities for the geoparser.
"""

from geoparser.utils.geo import haversine_km
from geoparser.utils.numbers import parse_population, parse_weight

__all__ = [
    "haversine_km",
    "parse_population",
    "parse_weight",
]
