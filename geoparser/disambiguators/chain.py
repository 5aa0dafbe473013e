"""
Fallback chains of resolution strategies.

A chain tries its strategies in order and keeps the first answer. Every
chain ends with a strategy that always answers for a non-empty
candidate list, so a chain only returns ``None`` for mentions without
candidates.
"""

import inspect
import logging
from typing import Any, Dict, FrozenSet, List, Optional, Sequence, Tuple, Union

from geoparser.config import ComponentConfig, ResolverSettings
from geoparser.context import DocumentContext
from geoparser.registry import strategies
from geoparser.types import Mention, ResolvedLocation

from .base import Strategy, StrategyKind, resolve

logger = logging.getLogger(__name__)

# Named chains, one per strategy
PRESETS: Dict[str, Tuple[StrategyKind, ...]] = {
    "first_match": (StrategyKind.FIRST_MATCH,),
    "highest_population": (StrategyKind.HIGHEST_POPULATION,),
    "highest_admin_level": (StrategyKind.HIGHEST_ADMIN_LEVEL,),
    "edge_weight_sum": (StrategyKind.EDGE_WEIGHT_SUM, StrategyKind.HIGHEST_POPULATION),
    "relationship_weight": (
        StrategyKind.RELATIONSHIP_WEIGHT,
        StrategyKind.HIGHEST_POPULATION,
    ),
    "network_seed_propagation": (
        StrategyKind.NETWORK_SEED_PROPAGATION,
        StrategyKind.HIGHEST_POPULATION,
    ),
    "population_distance_weight": (
        StrategyKind.POPULATION_DISTANCE_WEIGHT,
        StrategyKind.FIRST_MATCH,
    ),
}


class FallbackChain:
    """Ordered strategies; the first one that does not abstain wins."""

    def __init__(self, links: Sequence[Strategy]):
        links = list(links)
        if not links or not links[-1].always_succeeds:
            links.append(Strategy(StrategyKind.FIRST_MATCH))
        self.links: Tuple[Strategy, ...] = tuple(links)

    @property
    def requires(self) -> FrozenSet[str]:
        """Context features needed by any link."""
        features: FrozenSet[str] = frozenset()
        for link in self.links:
            features = features | link.requires
        return features

    @property
    def names(self) -> List[str]:
        return [link.name for link in self.links]

    def resolve(
        self, mention: Mention, context: Optional[DocumentContext] = None
    ) -> Optional[ResolvedLocation]:
        if not mention.candidates:
            return None
        for link in self.links:
            place = resolve(link, mention, context)
            if place is not None:
                logger.debug(f"'{mention.text}' resolved to {place.place_id} by {link.name}")
                return ResolvedLocation.from_place(place, strategy=link.name)
        return None

    def __repr__(self) -> str:
        return f"FallbackChain({' -> '.join(self.names)})"


def build_chain(
    chain: Union[str, Sequence[ComponentConfig]],
    settings: ResolverSettings = ResolverSettings(),
) -> FallbackChain:
    """Build a chain from a preset name or from explicit ``ComponentConfig`` links.

    Raises ``ValueError`` for unknown presets, strategies or strategy
    options and when an admin-level link has no root type to work with.
    """
    if isinstance(chain, str):
        if chain not in PRESETS:
            raise ValueError(f"Unknown chain preset '{chain}', expected one of {sorted(PRESETS)}")
        links = [Strategy(kind) for kind in PRESETS[chain]]
    else:
        links = []
        for link in chain:
            try:
                kind = StrategyKind(link.name)
            except ValueError as exc:
                raise ValueError(f"Unknown strategy '{link.name}'") from exc
            _check_options(kind, link.params)
            links.append(Strategy(kind, dict(link.params)))

    for link in links:
        if (
            link.kind is StrategyKind.HIGHEST_ADMIN_LEVEL
            and not link.options.get("root_type")
            and not settings.admin_root_type
        ):
            raise ValueError("highest_admin_level needs a root_type or settings.admin_root_type")

    return FallbackChain(links)


def _check_options(kind: StrategyKind, options: Dict[str, Any]) -> None:
    signature = inspect.signature(strategies.get(kind.value))
    try:
        signature.bind(None, None, **options)
    except TypeError as exc:
        raise ValueError(f"Invalid options for strategy '{kind.value}': {exc}") from exc
