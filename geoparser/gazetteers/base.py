from typing import Any, Dict, List, Optional, Protocol, Sequence, Tuple

from geoparser.types import Coordinate


class GazetteerError(Exception):
    """Raised when the gazetteer store cannot answer a query."""


class Gazetteer(Protocol):
    """Read-only accessor for gazetteer properties and the relationship graph.

    Batched methods take a sequence of place ids and answer for all of
    them in one round trip. Ids unknown to the gazetteer are answered
    with empty values rather than errors. Raw property values and edge
    weights are returned as stored; numeric parsing is left to callers.
    """

    def edge_weights(
        self, place_ids: Sequence[str], relationship_type: str
    ) -> Dict[Tuple[str, str], Any]:
        """Edges of ``relationship_type`` whose endpoints are both in ``place_ids``."""
        ...

    def degrees(self, place_ids: Sequence[str], relationship_type: str) -> Dict[str, int]:
        """Number of ``relationship_type`` edges touching each place."""
        ...

    def property(self, place_id: str, property_type: str) -> Optional[str]:
        ...

    def properties(
        self, place_ids: Sequence[str], property_type: str
    ) -> Dict[str, Optional[str]]:
        ...

    def ancestor_chain(self, place_id: str, hierarchy_type: str) -> List[str]:
        """Ancestors reached via ``hierarchy_type`` edges, nearest first."""
        ...

    def ancestor_chains(
        self, place_ids: Sequence[str], hierarchy_type: str
    ) -> Dict[str, List[str]]:
        ...

    def coordinate(self, place_id: str) -> Optional[Coordinate]:
        """Representative point of the place's first footprint."""
        ...

    def coordinates(self, place_ids: Sequence[str]) -> Dict[str, Optional[Coordinate]]:
        ...

    def place_types(self, place_ids: Sequence[str]) -> Dict[str, List[str]]:
        ...

    def type_lineage(self, type_name: str) -> List[str]:
        """``type_name`` followed by its parent types up to the hierarchy root."""
        ...

    def type_lineages(self, type_names: Sequence[str]) -> Dict[str, List[str]]:
        ...
