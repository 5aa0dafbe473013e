from typing import Optional

from geoparser.context import DocumentContext
from geoparser.registry import strategies
from geoparser.types import Mention, PlaceCandidate


@strategies.register("edge_weight_sum")
def resolve_edge_weight_sum(mention: Mention, context: DocumentContext) -> Optional[PlaceCandidate]:
    """Chooses the candidate with the largest summed weight to the rest of the document.

    Each candidate is scored by adding its relationship weights to every
    pooled place that is not a candidate of the same mention. Abstains
    when no candidate has a positive sum.
    """
    own_ids = {candidate.place_id for candidate in mention.candidates}
    others = [place_id for place_id in context.pool if place_id not in own_ids]
    if not others:
        return None

    best: Optional[PlaceCandidate] = None
    best_sum = 0.0
    for candidate in mention.candidates:
        total = 0.0
        for other in others:
            weight = context.weight(candidate.place_id, other)
            if weight is not None:
                total += weight
        if total > best_sum:
            best, best_sum = candidate, total
    return best
