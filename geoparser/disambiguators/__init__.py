"""Toponym resolution strategies."""

from . import admin_level, edge_sum, first, population  # noqa: F401
from . import population_distance, relationship_weight, seed_propagation  # noqa: F401
from .base import ALWAYS_SUCCEEDS, REQUIRES, Strategy, StrategyKind, resolve
from .chain import PRESETS, FallbackChain, build_chain

__all__ = [
    "ALWAYS_SUCCEEDS",
    "REQUIRES",
    "Strategy",
    "StrategyKind",
    "resolve",
    "PRESETS",
    "FallbackChain",
    "build_chain",
]
