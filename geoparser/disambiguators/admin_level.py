from typing import Optional, Sequence

from geoparser.context import DocumentContext
from geoparser.registry import strategies
from geoparser.types import Mention, PlaceCandidate


def admin_level(candidate: PlaceCandidate, root_type: str) -> Optional[int]:
    """Number of hierarchy steps between ``root_type`` and the deepest type of the candidate.

    Returns 0 if the candidate's type is the root itself and ``None`` if
    none of its types descends from the root.
    """
    levels = [
        lineage.index(root_type) for lineage in candidate.type_lineages if root_type in lineage
    ]
    return max(levels) if levels else None


def place_with_highest_admin_level(
    candidates: Sequence[PlaceCandidate], root_type: Optional[str]
) -> Optional[PlaceCandidate]:
    if not candidates:
        return None
    best = candidates[0]
    best_level = -1  # below any applicable level
    if root_type is None:
        return best
    for candidate in candidates:
        level = admin_level(candidate, root_type)
        if level is not None and level > best_level:
            best, best_level = candidate, level
    return best


@strategies.register("highest_admin_level")
def resolve_highest_admin_level(
    mention: Mention, context: DocumentContext, root_type: Optional[str] = None
) -> Optional[PlaceCandidate]:
    """Chooses the candidate deepest below the administrative root type."""
    return place_with_highest_admin_level(
        mention.candidates, root_type or context.settings.admin_root_type
    )
