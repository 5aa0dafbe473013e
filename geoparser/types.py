from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

# Named-entity tag of mentions that are eligible for resolution
LOCATION = "LOCATION"

Coordinate = Tuple[float, float]


@dataclass(frozen=True)
class PlaceCandidate:
    """Gazetteer entry proposed as the referent of a mention.

    ``type_lineages`` holds one tuple per assigned place type, ordered
    from that type up to the root of its type hierarchy.
    """

    place_id: str
    name: Optional[str] = None
    population: Optional[int] = None
    coordinate: Optional[Coordinate] = None
    type_lineages: Tuple[Tuple[str, ...], ...] = ()


@dataclass
class Mention:
    """Span in the source text with its linked candidate places."""

    start: int
    end: int
    text: str
    label: Optional[str] = LOCATION
    linked_ids: List[str] = field(default_factory=list)
    candidates: List[PlaceCandidate] = field(default_factory=list)
    sentence: int = 0
    meta: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_location(self) -> bool:
        return self.label == LOCATION


@dataclass
class Document:
    """Single document item."""

    id: Optional[str]
    text: str
    mentions: List[Mention] = field(default_factory=list)
    meta: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ResolvedLocation:
    """Place chosen for a mention, with its representative coordinate."""

    place: PlaceCandidate
    coordinate: Optional[Coordinate] = None
    strategy: Optional[str] = None

    @classmethod
    def from_place(
        cls, place: PlaceCandidate, strategy: Optional[str] = None
    ) -> "ResolvedLocation":
        return cls(place=place, coordinate=place.coordinate, strategy=strategy)

    @property
    def place_id(self) -> str:
        return self.place.place_id
