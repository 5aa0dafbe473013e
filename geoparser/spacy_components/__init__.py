"""
spaCy components for the geoparser.

Import this module to register the ``geoparser_toponym_resolver``
factory with spaCy.
"""

from . import resolver

__all__ = [
    "resolver",
]
