"""
Population/distance/graph weighted resolution.

Every candidate gets a score ``dispersion * population_bonus * graph_bonus``
where lower is better:

- dispersion: summed great-circle distance (km) to the candidates of all
  other mentions of the document;
- population bonus: ``1 / population``;
- graph bonus: ``0.5 - w`` where ``w`` adds up, over the other mentions,
  the best relationship weight from the candidate into that mention's
  candidates. Candidates without any such edge get a neutral 1.0, and
  the bonus never drops below ``GRAPH_BONUS_FLOOR`` so that the score
  stays positive.

A candidate without coordinate or population cannot be scored and gets
``WORST_SCORE``.
"""

import sys
from typing import Optional

from geoparser.context import DocumentContext
from geoparser.registry import strategies
from geoparser.types import Mention, PlaceCandidate

WORST_SCORE = sys.float_info.max
GRAPH_BONUS_BASE = 0.5
GRAPH_BONUS_FLOOR = 1e-3
NEUTRAL_GRAPH_BONUS = 1.0


def population_bonus(population: Optional[int]) -> Optional[float]:
    if not population:
        return None
    return 1.0 / population


def graph_bonus(weight_sum: Optional[float]) -> float:
    if weight_sum is None:
        return NEUTRAL_GRAPH_BONUS
    return max(GRAPH_BONUS_BASE - weight_sum, GRAPH_BONUS_FLOOR)


def score(
    dispersion: Optional[float], population: Optional[int], weight_sum: Optional[float]
) -> float:
    bonus = population_bonus(population)
    if dispersion is None or bonus is None:
        return WORST_SCORE
    return dispersion * bonus * graph_bonus(weight_sum)


def best_bucket_weight_sum(
    candidate: PlaceCandidate, mention: Mention, context: DocumentContext
) -> Optional[float]:
    """Sum over other mentions of the best edge from ``candidate`` into each of them."""
    total = 0.0
    connected = False
    for other in context.other_mentions(mention):
        best: Optional[float] = None
        for other_candidate in other.candidates:
            weight = context.weight(candidate.place_id, other_candidate.place_id)
            if weight is not None and (best is None or weight > best):
                best = weight
        if best is not None:
            total += best
            connected = True
    return total if connected else None


@strategies.register("population_distance_weight")
def resolve_population_distance_weight(
    mention: Mention, context: DocumentContext
) -> Optional[PlaceCandidate]:
    """Chooses the most central, most populous and best connected candidate."""
    if not mention.candidates:
        return None

    best: Optional[PlaceCandidate] = None
    best_score = WORST_SCORE
    for candidate in mention.candidates:
        candidate_score = score(
            context.dispersion_of(mention, candidate.place_id),
            candidate.population,
            best_bucket_weight_sum(candidate, mention, context),
        )
        if candidate_score < best_score:
            best, best_score = candidate, candidate_score

    if best is None:
        # No candidate could be scored
        return mention.candidates[0]
    return best
