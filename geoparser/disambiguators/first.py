from typing import Optional

from geoparser.context import DocumentContext
from geoparser.registry import strategies
from geoparser.types import Mention, PlaceCandidate


@strategies.register("first_match")
def resolve_first_match(mention: Mention, context: DocumentContext) -> Optional[PlaceCandidate]:
    """Returns the first candidate in the list."""
    if not mention.candidates:
        return None
    return mention.candidates[0]
