"""
Neo4j gazetteer backend.

Expected graph layout:

- ``(:Place {id, name, population, latitude, longitude, types})``
- weighted relationships between places, e.g. ``(:Place)-[:COOCCURRENCE {weight}]->(:Place)``
- hierarchy relationships pointing to the parent, e.g. ``(:Place)-[:SUBDIVISION]->(:Place)``
- ``(:PlaceType {name})-[:SUBTYPE_OF]->(:PlaceType)`` for the type hierarchy

Relationship type names from the resolver settings are upper-cased to
form the Cypher relationship type.
"""

import logging
import re
from typing import Any, Dict, List, Optional, Sequence, Tuple

from neo4j import GraphDatabase
from neo4j.exceptions import DriverError, Neo4jError

from geoparser.gazetteers.base import GazetteerError
from geoparser.registry import gazetteers
from geoparser.types import Coordinate

logger = logging.getLogger(__name__)

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
# Upper bound on hierarchy walks; administrative trees are shallow
MAX_HIERARCHY_DEPTH = 10


def _rel_type(name: str) -> str:
    """Cypher relationship type for a settings name; rejects anything unsafe to inline."""
    if not _IDENTIFIER.match(name):
        raise ValueError(f"Invalid relationship type name: {name!r}")
    return name.upper()


@gazetteers.register("neo4j")
class Neo4jGazetteer:
    """Gazetteer accessor backed by a Neo4j graph database.

    Every method issues a single Cypher query for all requested ids.
    Driver and query failures are raised as ``GazetteerError``.
    """

    def __init__(
        self,
        uri: str,
        user: str,
        password: str,
        database: Optional[str] = None,
    ):
        self.driver = GraphDatabase.driver(uri, auth=(user, password))
        self.database = database
        logger.info(f"Neo4j gazetteer connected: {uri}")

    def close(self) -> None:
        self.driver.close()

    def _run(self, query: str, **params: Any) -> List[Any]:
        try:
            with self.driver.session(database=self.database) as session:
                return list(session.run(query, params))
        except (Neo4jError, DriverError) as exc:
            logger.error(f"Neo4j query failed: {exc}")
            raise GazetteerError(f"Neo4j query failed: {exc}") from exc

    # ------------------------------------------------------------------
    # Relationship graph
    # ------------------------------------------------------------------

    def edge_weights(
        self, place_ids: Sequence[str], relationship_type: str
    ) -> Dict[Tuple[str, str], Any]:
        if not place_ids:
            return {}
        query = f"""
        MATCH (a:Place)-[r:{_rel_type(relationship_type)}]->(b:Place)
        WHERE a.id IN $ids AND b.id IN $ids
        RETURN a.id AS left, b.id AS right, r.weight AS weight
        ORDER BY left, right
        """
        records = self._run(query, ids=list(place_ids))
        return {(record["left"], record["right"]): record["weight"] for record in records}

    def degrees(self, place_ids: Sequence[str], relationship_type: str) -> Dict[str, int]:
        if not place_ids:
            return {}
        query = f"""
        UNWIND $ids AS pid
        OPTIONAL MATCH (p:Place {{id: pid}})-[r:{_rel_type(relationship_type)}]-()
        RETURN pid AS id, count(r) AS degree
        """
        records = self._run(query, ids=list(place_ids))
        result = {place_id: 0 for place_id in place_ids}
        for record in records:
            result[record["id"]] = record["degree"]
        return result

    def ancestor_chain(self, place_id: str, hierarchy_type: str) -> List[str]:
        return self.ancestor_chains([place_id], hierarchy_type).get(place_id, [])

    def ancestor_chains(
        self, place_ids: Sequence[str], hierarchy_type: str
    ) -> Dict[str, List[str]]:
        if not place_ids:
            return {}
        query = f"""
        UNWIND $ids AS pid
        MATCH (p:Place {{id: pid}})
        OPTIONAL MATCH path = (p)-[:{_rel_type(hierarchy_type)}*1..{MAX_HIERARCHY_DEPTH}]->(:Place)
        WITH pid, path ORDER BY length(path) DESC
        WITH pid, collect(path)[0] AS longest
        RETURN pid AS id,
               CASE WHEN longest IS NULL THEN [] ELSE [n IN tail(nodes(longest)) | n.id] END AS chain
        """
        records = self._run(query, ids=list(place_ids))
        result: Dict[str, List[str]] = {place_id: [] for place_id in place_ids}
        for record in records:
            chain: List[str] = []
            for ancestor in record["chain"] or []:
                # Stop at the first repeated node of a cyclic hierarchy
                if ancestor == record["id"] or ancestor in chain:
                    break
                chain.append(ancestor)
            result[record["id"]] = chain
        return result

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    def property(self, place_id: str, property_type: str) -> Optional[str]:
        return self.properties([place_id], property_type).get(place_id)

    def properties(
        self, place_ids: Sequence[str], property_type: str
    ) -> Dict[str, Optional[str]]:
        if not place_ids:
            return {}
        query = """
        MATCH (p:Place) WHERE p.id IN $ids
        RETURN p.id AS id, p[$name] AS value
        """
        records = self._run(query, ids=list(place_ids), name=property_type)
        result: Dict[str, Optional[str]] = {place_id: None for place_id in place_ids}
        for record in records:
            value = record["value"]
            result[record["id"]] = None if value is None else str(value)
        return result

    def coordinate(self, place_id: str) -> Optional[Coordinate]:
        return self.coordinates([place_id]).get(place_id)

    def coordinates(self, place_ids: Sequence[str]) -> Dict[str, Optional[Coordinate]]:
        if not place_ids:
            return {}
        query = """
        MATCH (p:Place) WHERE p.id IN $ids
        RETURN p.id AS id, p.latitude AS lat, p.longitude AS lon
        """
        records = self._run(query, ids=list(place_ids))
        result: Dict[str, Optional[Coordinate]] = {place_id: None for place_id in place_ids}
        for record in records:
            if record["lat"] is None or record["lon"] is None:
                continue
            try:
                result[record["id"]] = (float(record["lat"]), float(record["lon"]))
            except (TypeError, ValueError):
                logger.warning(f"Ignoring malformed coordinate of place {record['id']}")
        return result

    def place_types(self, place_ids: Sequence[str]) -> Dict[str, List[str]]:
        if not place_ids:
            return {}
        query = """
        MATCH (p:Place) WHERE p.id IN $ids
        RETURN p.id AS id, coalesce(p.types, []) AS types
        """
        records = self._run(query, ids=list(place_ids))
        result: Dict[str, List[str]] = {place_id: [] for place_id in place_ids}
        for record in records:
            result[record["id"]] = list(record["types"])
        return result

    def type_lineage(self, type_name: str) -> List[str]:
        return self.type_lineages([type_name]).get(type_name, [type_name])

    def type_lineages(self, type_names: Sequence[str]) -> Dict[str, List[str]]:
        if not type_names:
            return {}
        query = f"""
        UNWIND $names AS name
        OPTIONAL MATCH (t:PlaceType {{name: name}})
        OPTIONAL MATCH path = (t)-[:SUBTYPE_OF*1..{MAX_HIERARCHY_DEPTH}]->(:PlaceType)
        WITH name, path ORDER BY length(path) DESC
        WITH name, collect(path)[0] AS longest
        RETURN name, CASE WHEN longest IS NULL THEN [] ELSE [n IN nodes(longest) | n.name] END AS lineage
        """
        records = self._run(query, names=list(type_names))
        result: Dict[str, List[str]] = {name: [name] for name in type_names}
        for record in records:
            lineage: List[str] = []
            for name in record["lineage"] or []:
                if name in lineage:
                    break
                lineage.append(name)
            if lineage:
                result[record["name"]] = lineage
        return result
