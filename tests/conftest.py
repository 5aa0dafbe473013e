"""Shared fixtures for geoparser tests."""

import json
import os
import tempfile
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

import pytest

from geoparser.gazetteers.base import GazetteerError
from geoparser.gazetteers.jsonl import clear_gazetteer_cache
from geoparser.types import Document, Mention, PlaceCandidate


# ---------------------------------------------------------------------------
# Sample data
# ---------------------------------------------------------------------------

SAMPLE_TYPES: Dict[str, Optional[str]] = {
    "administrative_division": None,
    "country": "administrative_division",
    "state": "country",
    "city": "state",
    "town": "state",
    "river": None,
}

SAMPLE_PLACES: Dict[str, Dict[str, Any]] = {
    "de": {
        "name": "Germany",
        "population": "83000000",
        "coordinate": (51.0, 10.0),
        "types": ["country"],
    },
    "us": {
        "name": "United States",
        "population": "331000000",
        "coordinate": (39.8, -98.6),
        "types": ["country"],
    },
    "nh": {
        "name": "New Hampshire",
        "population": "1377000",
        "coordinate": (43.7, -71.6),
        "types": ["state"],
        "parent": "us",
    },
    "ny": {
        "name": "New York",
        "population": "19450000",
        "coordinate": (42.9, -75.5),
        "types": ["state"],
        "parent": "us",
    },
    "berlin-de": {
        "name": "Berlin",
        "population": "3645000",
        "coordinate": (52.52, 13.405),
        "types": ["city"],
        "parent": "de",
    },
    "hamburg-de": {
        "name": "Hamburg",
        "population": "1841000",
        "coordinate": (53.55, 9.993),
        "types": ["city"],
        "parent": "de",
    },
    "berlin-nh": {
        "name": "Berlin",
        "population": "9425",
        "coordinate": (44.468, -71.185),
        "types": ["town"],
        "parent": "nh",
    },
    "hamburg-ny": {
        "name": "Hamburg",
        "population": "56936",
        "coordinate": (42.716, -78.829),
        "types": ["town"],
        "parent": "ny",
    },
}

# Co-occurrence edges; only the German cities are strongly related
SAMPLE_EDGES: Dict[Tuple[str, str], Any] = {
    ("berlin-de", "hamburg-de"): 0.9,
    ("berlin-nh", "nh"): 0.2,
}


# ---------------------------------------------------------------------------
# Mock classes
# ---------------------------------------------------------------------------


class MockGazetteer:
    """In-memory gazetteer implementing the Gazetteer protocol.

    Places carry ``name``, ``population``, ``coordinate``, ``types`` and
    an optional ``parent`` (the subdivision hierarchy). ``calls`` records
    every accessor call so tests can check batching.
    """

    def __init__(
        self,
        places: Optional[Dict[str, Dict[str, Any]]] = None,
        edges: Optional[Dict[Tuple[str, str], Any]] = None,
        type_parents: Optional[Dict[str, Optional[str]]] = None,
        relationship_type: str = "cooccurrence",
        fail: bool = False,
    ):
        self.places = places or {}
        self.edges = dict(edges or {})
        self.type_parents = type_parents or {}
        self.relationship_type = relationship_type
        self.fail = fail
        self.calls: List[str] = []

    def _record(self, name: str) -> None:
        self.calls.append(name)
        if self.fail:
            raise GazetteerError("store unavailable")

    def edge_weights(self, place_ids: Sequence[str], relationship_type: str):
        self._record("edge_weights")
        if relationship_type != self.relationship_type:
            return {}
        wanted = set(place_ids)
        return {
            key: weight
            for key, weight in self.edges.items()
            if key[0] in wanted and key[1] in wanted
        }

    def degrees(self, place_ids: Sequence[str], relationship_type: str):
        self._record("degrees")
        if relationship_type != self.relationship_type:
            return {place_id: 0 for place_id in place_ids}
        return {
            place_id: sum(1 for key in self.edges if place_id in key)
            for place_id in place_ids
        }

    def ancestor_chain(self, place_id: str, hierarchy_type: str) -> List[str]:
        chain: List[str] = []
        current = self.places.get(place_id, {}).get("parent")
        while current is not None and current not in chain:
            chain.append(current)
            current = self.places.get(current, {}).get("parent")
        return chain

    def ancestor_chains(self, place_ids: Sequence[str], hierarchy_type: str):
        self._record("ancestor_chains")
        return {place_id: self.ancestor_chain(place_id, hierarchy_type) for place_id in place_ids}

    def property(self, place_id: str, property_type: str) -> Optional[str]:
        value = self.places.get(place_id, {}).get(property_type)
        return None if value is None else str(value)

    def properties(self, place_ids: Sequence[str], property_type: str):
        self._record("properties")
        return {place_id: self.property(place_id, property_type) for place_id in place_ids}

    def coordinate(self, place_id: str):
        coordinate = self.places.get(place_id, {}).get("coordinate")
        return tuple(coordinate) if coordinate is not None else None

    def coordinates(self, place_ids: Sequence[str]):
        self._record("coordinates")
        return {place_id: self.coordinate(place_id) for place_id in place_ids}

    def place_types(self, place_ids: Sequence[str]):
        self._record("place_types")
        return {place_id: list(self.places.get(place_id, {}).get("types", [])) for place_id in place_ids}

    def type_lineage(self, type_name: str) -> List[str]:
        lineage = [type_name]
        current = self.type_parents.get(type_name)
        while current is not None and current not in lineage:
            lineage.append(current)
            current = self.type_parents.get(current)
        return lineage

    def type_lineages(self, type_names: Sequence[str]):
        self._record("type_lineages")
        return {type_name: self.type_lineage(type_name) for type_name in type_names}


# ---------------------------------------------------------------------------
# Mock fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_gazetteer() -> MockGazetteer:
    """Mock gazetteer populated with the sample places."""
    return MockGazetteer(SAMPLE_PLACES, SAMPLE_EDGES, SAMPLE_TYPES)


@pytest.fixture
def failing_gazetteer() -> MockGazetteer:
    """Mock gazetteer whose every query fails."""
    return MockGazetteer(SAMPLE_PLACES, SAMPLE_EDGES, SAMPLE_TYPES, fail=True)


@pytest.fixture
def berlin_hamburg_document() -> Document:
    """'Berlin and Hamburg.' with the American namesakes listed first."""
    return Document(
        id="doc-berlin-hamburg",
        text="Berlin and Hamburg.",
        mentions=[
            Mention(
                start=0,
                end=6,
                text="Berlin",
                linked_ids=["berlin-nh", "berlin-de"],
                meta={"gold_id": "berlin-de", "gold_coordinate": [52.52, 13.405]},
            ),
            Mention(
                start=11,
                end=18,
                text="Hamburg",
                linked_ids=["hamburg-ny", "hamburg-de"],
                meta={"gold_id": "hamburg-de", "gold_coordinate": [53.55, 9.993]},
            ),
        ],
    )


def make_candidate(place_id: str, **kwargs) -> PlaceCandidate:
    """PlaceCandidate with only the given attributes set."""
    return PlaceCandidate(place_id=place_id, **kwargs)


@pytest.fixture
def candidate_factory():
    return make_candidate


# ---------------------------------------------------------------------------
# Temporary file fixtures
# ---------------------------------------------------------------------------


def _gazetteer_lines() -> List[Dict[str, Any]]:
    lines: List[Dict[str, Any]] = [
        {"kind": "type", "id": type_name, "parent": parent}
        for type_name, parent in SAMPLE_TYPES.items()
    ]
    for place_id, data in SAMPLE_PLACES.items():
        relationships = [
            {"type": "cooccurrence", "target": right, "weight": weight}
            for (left, right), weight in SAMPLE_EDGES.items()
            if left == place_id
        ]
        if data.get("parent"):
            relationships.append({"type": "subdivision", "target": data["parent"]})
        lines.append(
            {
                "id": place_id,
                "name": data["name"],
                "population": data["population"],
                "types": data["types"],
                "footprints": [{"lat": data["coordinate"][0], "lon": data["coordinate"][1]}],
                "relationships": relationships,
            }
        )
    return lines


@pytest.fixture
def temp_gazetteer_file() -> Iterator[str]:
    """Temporary JSONL gazetteer with the sample places."""
    with tempfile.NamedTemporaryFile(mode="w", suffix=".jsonl", delete=False) as f:
        for line in _gazetteer_lines():
            f.write(json.dumps(line) + "\n")
        path = f.name
    yield path
    clear_gazetteer_cache()
    os.unlink(path)


@pytest.fixture
def sample_document_dicts() -> List[Dict[str, Any]]:
    return [
        {
            "id": "doc-1",
            "text": "Berlin and Hamburg.",
            "mentions": [
                {
                    "start": 0,
                    "end": 6,
                    "label": "LOCATION",
                    "candidates": ["berlin-nh", "berlin-de"],
                    "gold_id": "berlin-de",
                    "gold_coordinate": [52.52, 13.405],
                },
                {
                    "start": 11,
                    "end": 18,
                    "label": "LOCATION",
                    "candidates": ["hamburg-ny", "hamburg-de"],
                    "gold_id": "hamburg-de",
                    "gold_coordinate": [53.55, 9.993],
                },
            ],
        },
        {
            "id": "doc-2",
            "text": "Alice moved to Berlin.",
            "mentions": [
                {"start": 0, "end": 5, "label": "PERSON", "candidates": []},
                {
                    "start": 15,
                    "end": 21,
                    "candidates": ["berlin-nh", "berlin-de"],
                },
            ],
        },
    ]


@pytest.fixture
def temp_documents_file(sample_document_dicts: List[Dict[str, Any]]) -> Iterator[str]:
    """Temporary JSONL file with the sample documents."""
    with tempfile.NamedTemporaryFile(mode="w", suffix=".jsonl", delete=False) as f:
        for doc in sample_document_dicts:
            f.write(json.dumps(doc) + "\n")
        path = f.name
    yield path
    os.unlink(path)


@pytest.fixture
def temp_cache_dir() -> Iterator[str]:
    """Create a temporary cache directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield tmpdir


# ---------------------------------------------------------------------------
# Configuration fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def minimal_config_dict(temp_gazetteer_file: str) -> Dict:
    """Minimal config dict for pipeline testing."""
    return {
        "gazetteer": {
            "name": "jsonl",
            "params": {"path": temp_gazetteer_file},
        },
        "loader": {
            "name": "jsonl",
            "params": {},
        },
        "chain": "relationship_weight",
    }


@pytest.fixture
def temp_config_file(minimal_config_dict: Dict) -> Iterator[str]:
    """Temporary config JSON file for CLI testing."""
    with tempfile.NamedTemporaryFile(mode="w", suffix=".json", delete=False) as f:
        json.dump(minimal_config_dict, f)
        path = f.name
    yield path
    os.unlink(path)
