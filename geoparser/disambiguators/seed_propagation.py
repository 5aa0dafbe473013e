from typing import Optional

from geoparser.context import DocumentContext
from geoparser.registry import strategies
from geoparser.types import Mention, PlaceCandidate


@strategies.register("network_seed_propagation")
def resolve_network_seed_propagation(
    mention: Mention, context: DocumentContext, min_weight: float = 0.0
) -> Optional[PlaceCandidate]:
    """Chooses the candidate most strongly tied to the document's seed places.

    Seeds are the candidates that are the only relationship-bearing
    reading of their mention. A mention holding a seed resolves to it;
    any other mention picks the candidate with the largest summed weight
    to all seeds, provided that sum exceeds ``min_weight``. Abstains
    without seeds or without a qualifying sum.
    """
    if not context.seeds:
        return None

    seeds = set(context.seeds)
    for candidate in mention.candidates:
        if candidate.place_id in seeds:
            return candidate

    best: Optional[PlaceCandidate] = None
    best_sum = min_weight
    for candidate in mention.candidates:
        total = 0.0
        for seed in context.seeds:
            weight = context.weight(candidate.place_id, seed)
            if weight is not None:
                total += weight
        if total > best_sum:
            best, best_sum = candidate, total
    return best
