from typing import Optional, Sequence

from geoparser.context import DocumentContext
from geoparser.registry import strategies
from geoparser.types import Mention, PlaceCandidate


def place_with_highest_population(
    candidates: Sequence[PlaceCandidate],
) -> Optional[PlaceCandidate]:
    """Candidate with the strictly greatest population, first one on ties.

    Unknown populations count as 0, so a list without any population
    resolves to its first candidate.
    """
    best: Optional[PlaceCandidate] = None
    best_population = -1
    for candidate in candidates:
        population = candidate.population or 0
        if population > best_population:
            best, best_population = candidate, population
    return best


@strategies.register("highest_population")
def resolve_highest_population(
    mention: Mention, context: DocumentContext
) -> Optional[PlaceCandidate]:
    """Chooses the most populous candidate."""
    return place_with_highest_population(mention.candidates)
