"""
Document-scoped resolution context.

A ``DocumentContext`` holds everything the graph-aware strategies derive
from one document: the candidate pool, the relationship weights among
the pooled places, the alternate-place map, the seed set and per-mention
dispersion values. It is built at the start of one ``disambiguate`` call
and dropped at its end; nothing in it is shared between documents.

All collections keep insertion order so that tie-breaks are reproducible.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, List, Optional, Sequence, Tuple

from geoparser.config import ResolverSettings
from geoparser.gazetteers.base import Gazetteer
from geoparser.types import Mention, PlaceCandidate
from geoparser.utils.geo import haversine_km
from geoparser.utils.numbers import parse_weight

logger = logging.getLogger(__name__)

# Context features a strategy may require
GRAPH = "graph"
ALTERNATES = "alternates"
SEEDS = "seeds"
DISPERSION = "dispersion"
FEATURES = frozenset({GRAPH, ALTERNATES, SEEDS, DISPERSION})

# Dispersion used when no other mention offers a coordinate to compare with
NEUTRAL_DISPERSION = 1.0


@dataclass(frozen=True)
class DocumentContext:
    """Per-document structures shared by all mentions of one resolution pass."""

    mentions: Tuple[Mention, ...] = ()
    pool: Tuple[str, ...] = ()
    candidates: Dict[str, PlaceCandidate] = field(default_factory=dict)
    # Both orientations of every edge are present
    weights: Dict[Tuple[str, str], float] = field(default_factory=dict)
    degrees: Dict[str, int] = field(default_factory=dict)
    alternates: Dict[str, str] = field(default_factory=dict)
    seeds: Tuple[str, ...] = ()
    # Aligned with ``mentions``: place id -> summed distance to other mentions
    dispersion: Tuple[Dict[str, float], ...] = ()
    settings: ResolverSettings = field(default_factory=ResolverSettings)

    def position(self, mention: Mention) -> Optional[int]:
        """Index of ``mention`` among the context mentions (by identity)."""
        for index, other in enumerate(self.mentions):
            if other is mention:
                return index
        return None

    def other_mentions(self, mention: Mention) -> List[Mention]:
        return [other for other in self.mentions if other is not mention]

    def weight(self, left: str, right: str) -> Optional[float]:
        """Relationship weight between two places, ``None`` if there is no edge."""
        return self.weights.get((left, right))

    def substitute(self, place_id: str) -> str:
        return self.alternates.get(place_id, place_id)

    def dispersion_of(self, mention: Mention, place_id: str) -> Optional[float]:
        index = self.position(mention)
        if index is None or index >= len(self.dispersion):
            return None
        return self.dispersion[index].get(place_id)


def eligible_mentions(mentions: Iterable[Mention]) -> Tuple[Mention, ...]:
    """Mentions that take part in resolution: LOCATION mentions with candidates."""
    return tuple(m for m in mentions if m.is_location and m.candidates)


def build_document_context(
    mentions: Sequence[Mention],
    gazetteer: Optional[Gazetteer] = None,
    settings: ResolverSettings = ResolverSettings(),
    features: FrozenSet[str] = frozenset(),
) -> DocumentContext:
    """Build the context for one document, fetching only the requested features.

    Raises ``GazetteerError`` if the gazetteer cannot be queried.
    """
    unknown = set(features) - FEATURES
    if unknown:
        raise ValueError(f"Unknown context features: {sorted(unknown)}")

    eligible = eligible_mentions(mentions)
    candidates: Dict[str, PlaceCandidate] = {}
    for mention in eligible:
        for candidate in mention.candidates:
            candidates.setdefault(candidate.place_id, candidate)
    pool = tuple(candidates)

    if not features or not pool or gazetteer is None:
        return DocumentContext(
            mentions=eligible, pool=pool, candidates=candidates, settings=settings
        )

    alternates: Dict[str, str] = {}
    if ALTERNATES in features:
        alternates = _alternate_places(gazetteer, pool, settings)

    graph_ids = list(dict.fromkeys([*pool, *alternates.values()]))
    weights = _symmetric_weights(
        gazetteer.edge_weights(graph_ids, settings.relationship_type)
    )

    degrees: Dict[str, int] = {}
    seeds: Tuple[str, ...] = ()
    if SEEDS in features:
        degrees = gazetteer.degrees(list(pool), settings.relationship_type)
        seeds = _seed_places(eligible, degrees)

    dispersion: Tuple[Dict[str, float], ...] = ()
    if DISPERSION in features:
        dispersion = _dispersion(eligible)

    logger.debug(
        f"Document context: {len(eligible)} mentions, {len(pool)} candidates, "
        f"{len(weights) // 2} edges, {len(alternates)} alternates, {len(seeds)} seeds"
    )
    return DocumentContext(
        mentions=eligible,
        pool=pool,
        candidates=candidates,
        weights=weights,
        degrees=degrees,
        alternates=alternates,
        seeds=seeds,
        dispersion=dispersion,
        settings=settings,
    )


def _symmetric_weights(raw: Dict[Tuple[str, str], object]) -> Dict[Tuple[str, str], float]:
    weights: Dict[Tuple[str, str], float] = {}
    for (left, right), value in raw.items():
        if left == right:
            continue
        weight = parse_weight(value)
        if weight is None:
            logger.debug(f"Ignoring unparsable weight {value!r} on edge {left}-{right}")
            continue
        for key in ((left, right), (right, left)):
            if key not in weights or weight > weights[key]:
                weights[key] = weight
    return weights


def _alternate_places(
    gazetteer: Gazetteer, pool: Tuple[str, ...], settings: ResolverSettings
) -> Dict[str, str]:
    """Map pooled places to their best-connected administrative ancestor.

    For every pooled place the ancestor chain is scanned for the place with
    the highest relationship degree that is not itself a candidate of the
    document. Places without such an ancestor keep no entry.
    """
    chains = gazetteer.ancestor_chains(list(pool), settings.hierarchy_type)
    in_pool = set(pool)
    ancestors = list(
        dict.fromkeys(
            ancestor
            for place_id in pool
            for ancestor in chains.get(place_id, [])
            if ancestor not in in_pool
        )
    )
    if not ancestors:
        return {}
    degrees = gazetteer.degrees(ancestors, settings.relationship_type)

    alternates: Dict[str, str] = {}
    for place_id in pool:
        best: Optional[str] = None
        best_degree = 0
        for ancestor in chains.get(place_id, []):
            if ancestor in in_pool:
                continue
            degree = degrees.get(ancestor, 0)
            if degree > best_degree:
                best, best_degree = ancestor, degree
        if best is not None and best != place_id:
            alternates[place_id] = best
    return alternates


def _seed_places(eligible: Tuple[Mention, ...], degrees: Dict[str, int]) -> Tuple[str, ...]:
    """Places that are the only relationship-bearing candidate of their mention."""
    seeds: List[str] = []
    for mention in eligible:
        connected = [c.place_id for c in mention.candidates if degrees.get(c.place_id, 0) > 0]
        if len(connected) == 1 and connected[0] not in seeds:
            seeds.append(connected[0])
    return tuple(seeds)


def _dispersion(eligible: Tuple[Mention, ...]) -> Tuple[Dict[str, float], ...]:
    result: List[Dict[str, float]] = []
    for index, mention in enumerate(eligible):
        others = [
            candidate.coordinate
            for other_index, other in enumerate(eligible)
            if other_index != index
            for candidate in other.candidates
            if candidate.coordinate is not None
        ]
        values: Dict[str, float] = {}
        for candidate in mention.candidates:
            if candidate.coordinate is None:
                continue
            if others:
                values[candidate.place_id] = sum(
                    haversine_km(candidate.coordinate, point) for point in others
                )
            else:
                values[candidate.place_id] = NEUTRAL_DISPERSION
        result.append(values)
    return tuple(result)
