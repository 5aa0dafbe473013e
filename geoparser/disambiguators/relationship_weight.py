import logging
from typing import Optional

from geoparser.context import DocumentContext
from geoparser.registry import strategies
from geoparser.types import Mention, PlaceCandidate

logger = logging.getLogger(__name__)


@strategies.register("relationship_weight")
def resolve_relationship_weight(
    mention: Mention, context: DocumentContext, penalty: Optional[float] = None
) -> Optional[PlaceCandidate]:
    """Chooses the candidate on the strongest edge to another mention's candidate.

    Every candidate of the mention is paired with every pooled place that
    belongs to other mentions. Both sides are first replaced by their
    alternate place, if any, and an edge touching a replaced place only
    counts ``penalty`` times its weight. The candidate on the single
    heaviest edge wins; the first pair reaching the maximum is kept.
    Abstains when no pair is connected.
    """
    if penalty is None:
        penalty = context.settings.substitution_penalty

    own_ids = {candidate.place_id for candidate in mention.candidates}
    own_substitutes = {context.substitute(place_id) for place_id in own_ids}
    others = [
        place_id
        for place_id in context.pool
        if place_id not in own_ids and context.substitute(place_id) not in own_substitutes
    ]

    best: Optional[PlaceCandidate] = None
    best_weight: Optional[float] = None
    for candidate in mention.candidates:
        left = context.substitute(candidate.place_id)
        for other in others:
            right = context.substitute(other)
            weight = context.weight(left, right)
            if weight is None:
                continue
            if left != candidate.place_id or right != other:
                weight *= penalty
            if best_weight is None or weight > best_weight:
                best, best_weight = candidate, weight

    if best is not None:
        logger.debug(f"'{mention.text}' -> {best.place_id} (edge weight {best_weight})")
    return best
