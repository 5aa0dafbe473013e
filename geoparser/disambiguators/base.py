"""
Resolution strategy variant and dispatch.

A ``Strategy`` is a plain value (kind + options). Every kind maps to one
resolve function registered in ``geoparser.registry.strategies`` under
the kind's value; ``resolve`` dispatches to it. Resolve functions take
``(mention, context, **options)`` and return the winning candidate or
``None`` to abstain.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, Optional

from geoparser.context import ALTERNATES, DISPERSION, GRAPH, SEEDS, DocumentContext
from geoparser.registry import strategies
from geoparser.types import Mention, PlaceCandidate


class StrategyKind(str, Enum):
    FIRST_MATCH = "first_match"
    HIGHEST_POPULATION = "highest_population"
    HIGHEST_ADMIN_LEVEL = "highest_admin_level"
    EDGE_WEIGHT_SUM = "edge_weight_sum"
    RELATIONSHIP_WEIGHT = "relationship_weight"
    POPULATION_DISTANCE_WEIGHT = "population_distance_weight"
    NETWORK_SEED_PROPAGATION = "network_seed_propagation"


# Context features each kind reads
REQUIRES: Dict[StrategyKind, FrozenSet[str]] = {
    StrategyKind.FIRST_MATCH: frozenset(),
    StrategyKind.HIGHEST_POPULATION: frozenset(),
    StrategyKind.HIGHEST_ADMIN_LEVEL: frozenset(),
    StrategyKind.EDGE_WEIGHT_SUM: frozenset({GRAPH}),
    StrategyKind.RELATIONSHIP_WEIGHT: frozenset({GRAPH, ALTERNATES}),
    StrategyKind.POPULATION_DISTANCE_WEIGHT: frozenset({GRAPH, DISPERSION}),
    StrategyKind.NETWORK_SEED_PROPAGATION: frozenset({GRAPH, SEEDS}),
}

# Kinds that answer for every non-empty candidate list
ALWAYS_SUCCEEDS = frozenset(
    {
        StrategyKind.FIRST_MATCH,
        StrategyKind.HIGHEST_POPULATION,
        StrategyKind.HIGHEST_ADMIN_LEVEL,
    }
)


@dataclass(frozen=True)
class Strategy:
    """One configured resolution strategy."""

    kind: StrategyKind
    options: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Accept plain strings from configuration files
        object.__setattr__(self, "kind", StrategyKind(self.kind))

    @property
    def name(self) -> str:
        return self.kind.value

    @property
    def requires(self) -> FrozenSet[str]:
        return REQUIRES[self.kind]

    @property
    def always_succeeds(self) -> bool:
        return self.kind in ALWAYS_SUCCEEDS


def resolve(
    strategy: Strategy, mention: Mention, context: Optional[DocumentContext] = None
) -> Optional[PlaceCandidate]:
    """Run ``strategy`` for one mention; ``None`` means the strategy abstains."""
    if not mention.candidates:
        return None
    if context is None:
        context = DocumentContext()
    resolver = strategies.get(strategy.kind.value)
    return resolver(mention, context, **strategy.options)
