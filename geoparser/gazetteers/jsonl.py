import hashlib
import json
import logging
import os
import pickle
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from geoparser.registry import gazetteers
from geoparser.types import Coordinate

logger = logging.getLogger(__name__)


# ============================================================================
# In-Memory Gazetteer Cache
# ============================================================================

_gazetteer_cache: Dict[str, "JSONLGazetteer"] = {}  # identity_hash -> instance


def _compute_identity_hash(path: str) -> str:
    """Compute identity hash for a gazetteer file (path + mtime + size)."""
    stat = os.stat(path)
    raw = f"gazetteer:{path}:{stat.st_mtime}:{stat.st_size}".encode()
    return hashlib.sha256(raw).hexdigest()


def get_cached_gazetteer(path: str) -> Optional["JSONLGazetteer"]:
    """Get a gazetteer from the in-memory cache if it is still valid."""
    try:
        identity_hash = _compute_identity_hash(path)
    except OSError:
        return None
    cached = _gazetteer_cache.get(identity_hash)
    if cached is not None:
        logger.info(f"Reusing cached gazetteer from memory: {path}")
    return cached


def clear_gazetteer_cache() -> None:
    """Clear the in-memory gazetteer cache."""
    _gazetteer_cache.clear()
    logger.info("Gazetteer cache cleared")


@dataclass
class PlaceRecord:
    """Parsed gazetteer entry."""

    place_id: str
    types: List[str] = field(default_factory=list)
    footprints: List[Coordinate] = field(default_factory=list)
    properties: Dict[str, Any] = field(default_factory=dict)


def _parse_footprints(item: Dict[str, Any]) -> List[Coordinate]:
    footprints: List[Coordinate] = []
    raw = item.get("footprints")
    if raw is None and item.get("coordinate") is not None:
        raw = [item["coordinate"]]
    for entry in raw or []:
        try:
            if isinstance(entry, dict):
                footprints.append((float(entry["lat"]), float(entry["lon"])))
            else:
                lat, lon = entry
                footprints.append((float(lat), float(lon)))
        except (KeyError, TypeError, ValueError):
            logger.warning(f"Skipping malformed footprint {entry!r} of {item.get('id')}")
    return footprints


@gazetteers.register("jsonl")
class JSONLGazetteer:
    """
    Gazetteer loaded from a JSONL file.

    Each line is one JSON object of one of two kinds:

    - place (default): ``{"id", "name", "types", "footprints" | "coordinate",
      "properties", "relationships"}`` where relationships are
      ``{"type", "target", "weight"}`` entries pointing from this place to
      another one (``weight`` is optional);
    - type: ``{"kind": "type", "id", "parent"}`` describing the place type
      hierarchy.

    A top-level ``name`` or ``population`` is treated as a property.

    Memory management:
    - Gazetteers are cached in memory and reused while the file is unchanged
    - With ``cache_dir`` the parsed data is also pickled to disk
    """

    def __new__(cls, path: str, cache_dir: Optional[str] = None):
        cached = get_cached_gazetteer(path)
        if cached is not None:
            return cached
        return super().__new__(cls)

    def __init__(self, path: str, cache_dir: Optional[str] = None):
        # Skip initialization if we got a cached instance
        if getattr(self, "_initialized", False):
            return

        self.source_path = path
        self.places: Dict[str, PlaceRecord] = {}
        self.type_parents: Dict[str, Optional[str]] = {}
        # relationship type -> (left id, right id) -> raw weight
        self.edges: Dict[str, Dict[Tuple[str, str], Any]] = {}

        if not (cache_dir and self._load_from_cache(cache_dir)):
            self._parse_jsonl(path)
            if cache_dir:
                self._save_to_cache(cache_dir)

        self._build_indexes()
        self._initialized = True
        _gazetteer_cache[self.identity_hash] = self

    @property
    def identity_hash(self) -> str:
        """Content-based hash for cache invalidation (uses path + mtime + size)."""
        return _compute_identity_hash(self.source_path)

    def _cache_path(self, cache_dir: str) -> Path:
        cache_subdir = Path(cache_dir) / "gazetteer"
        cache_subdir.mkdir(parents=True, exist_ok=True)
        return cache_subdir / f"{self.identity_hash}.pkl"

    def _load_from_cache(self, cache_dir: str) -> bool:
        """Try to load parsed data from the disk cache. Returns True on success."""
        cache_file = self._cache_path(cache_dir)
        if not cache_file.exists():
            return False
        try:
            with cache_file.open("rb") as f:
                self.places, self.type_parents, self.edges = pickle.load(f)
        except (OSError, pickle.UnpicklingError, EOFError, ValueError):
            logger.warning("Gazetteer cache load failed, will rebuild from JSONL", exc_info=True)
            return False
        logger.info(f"Loaded {len(self.places)} places from cache ({cache_file.name})")
        return True

    def _save_to_cache(self, cache_dir: str) -> None:
        try:
            cache_file = self._cache_path(cache_dir)
            with cache_file.open("wb") as f:
                pickle.dump(
                    (self.places, self.type_parents, self.edges),
                    f,
                    protocol=pickle.HIGHEST_PROTOCOL,
                )
            logger.info(f"Saved gazetteer cache ({cache_file.name})")
        except OSError:
            logger.warning("Failed to save gazetteer cache", exc_info=True)

    def _parse_jsonl(self, path: str) -> None:
        with Path(path).open(encoding="utf-8") as f:
            for line_num, line in enumerate(f, start=1):
                line = line.strip()
                if not line:
                    continue
                item = json.loads(line)
                if item.get("kind") == "type":
                    self.type_parents[item["id"]] = item.get("parent")
                    continue
                place_id = item.get("id")
                if place_id is None:
                    logger.warning(f"Skipping place without id on line {line_num}")
                    continue
                place_id = str(place_id)
                properties = dict(item.get("properties") or {})
                for key in ("name", "population"):
                    if key in item and key not in properties:
                        properties[key] = item[key]
                self.places[place_id] = PlaceRecord(
                    place_id=place_id,
                    types=list(item.get("types") or []),
                    footprints=_parse_footprints(item),
                    properties=properties,
                )
                for rel in item.get("relationships") or []:
                    target = rel.get("target")
                    if rel.get("type") is None or target is None:
                        logger.warning(f"Skipping malformed relationship {rel!r} of {place_id}")
                        continue
                    self.edges.setdefault(rel["type"], {})[(place_id, str(target))] = rel.get("weight")
        logger.info(f"Loaded {len(self.places)} places from {path}")

    def _build_indexes(self) -> None:
        # relationship type -> place id -> incident edges, in file order
        self._incident: Dict[str, Dict[str, List[Tuple[str, str]]]] = {}
        # relationship type -> place id -> first target (parent link)
        self._parents: Dict[str, Dict[str, str]] = {}
        for rel_type, edges in self.edges.items():
            incident = self._incident.setdefault(rel_type, {})
            parents = self._parents.setdefault(rel_type, {})
            for left, right in edges:
                incident.setdefault(left, []).append((left, right))
                if right != left:
                    incident.setdefault(right, []).append((left, right))
                parents.setdefault(left, right)

    # ------------------------------------------------------------------
    # Relationship graph
    # ------------------------------------------------------------------

    def edge_weights(
        self, place_ids: Sequence[str], relationship_type: str
    ) -> Dict[Tuple[str, str], Any]:
        wanted = set(place_ids)
        edges = self.edges.get(relationship_type, {})
        incident = self._incident.get(relationship_type, {})
        result: Dict[Tuple[str, str], Any] = {}
        for place_id in place_ids:
            for key in incident.get(place_id, []):
                if key[0] in wanted and key[1] in wanted:
                    result[key] = edges[key]
        return result

    def degrees(self, place_ids: Sequence[str], relationship_type: str) -> Dict[str, int]:
        incident = self._incident.get(relationship_type, {})
        return {place_id: len(incident.get(place_id, [])) for place_id in place_ids}

    def ancestor_chain(self, place_id: str, hierarchy_type: str) -> List[str]:
        parents = self._parents.get(hierarchy_type, {})
        chain: List[str] = []
        seen = {place_id}
        current = parents.get(place_id)
        while current is not None and current not in seen:
            chain.append(current)
            seen.add(current)
            current = parents.get(current)
        return chain

    def ancestor_chains(
        self, place_ids: Sequence[str], hierarchy_type: str
    ) -> Dict[str, List[str]]:
        return {place_id: self.ancestor_chain(place_id, hierarchy_type) for place_id in place_ids}

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    def property(self, place_id: str, property_type: str) -> Optional[str]:
        record = self.places.get(place_id)
        if record is None:
            return None
        value = record.properties.get(property_type)
        return None if value is None else str(value)

    def properties(
        self, place_ids: Sequence[str], property_type: str
    ) -> Dict[str, Optional[str]]:
        return {place_id: self.property(place_id, property_type) for place_id in place_ids}

    def coordinate(self, place_id: str) -> Optional[Coordinate]:
        record = self.places.get(place_id)
        if record is None or not record.footprints:
            return None
        return record.footprints[0]

    def coordinates(self, place_ids: Sequence[str]) -> Dict[str, Optional[Coordinate]]:
        return {place_id: self.coordinate(place_id) for place_id in place_ids}

    def place_types(self, place_ids: Sequence[str]) -> Dict[str, List[str]]:
        result: Dict[str, List[str]] = {}
        for place_id in place_ids:
            record = self.places.get(place_id)
            result[place_id] = list(record.types) if record else []
        return result

    def type_lineage(self, type_name: str) -> List[str]:
        lineage = [type_name]
        current = self.type_parents.get(type_name)
        while current is not None and current not in lineage:
            lineage.append(current)
            current = self.type_parents.get(current)
        return lineage

    def type_lineages(self, type_names: Sequence[str]) -> Dict[str, List[str]]:
        return {type_name: self.type_lineage(type_name) for type_name in type_names}
