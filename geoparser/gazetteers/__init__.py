"""Gazetteer accessors."""

from .base import Gazetteer, GazetteerError  # noqa: F401
from .jsonl import JSONLGazetteer  # noqa: F401
from .neo4j import Neo4jGazetteer  # noqa: F401
