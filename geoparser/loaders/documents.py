"""
Loaders for documents whose mentions already carry linked place ids.

Document shape::

    {"id": "doc-1", "text": "Berlin and Hamburg.",
     "mentions": [{"start": 0, "end": 6, "label": "LOCATION",
                   "candidates": ["berlin-de", "berlin-nh"], "sentence": 0,
                   "gold_id": "berlin-de", "gold_coordinate": [52.52, 13.40]}]}

``text`` of a mention defaults to the slice of the document text,
``label`` to ``LOCATION``. Candidates are ids or objects with an ``id``.
Gold annotations are kept in ``mention.meta``.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterator, List

from geoparser.registry import loaders
from geoparser.types import LOCATION, Document, Mention

logger = logging.getLogger(__name__)

_GOLD_KEYS = ("gold_id", "gold_coordinate")


def _candidate_id(entry: Any) -> str:
    if isinstance(entry, dict):
        return str(entry["id"])
    return str(entry)


def parse_mention(data: Dict[str, Any], text: str) -> Mention:
    start, end = int(data["start"]), int(data["end"])
    return Mention(
        start=start,
        end=end,
        text=data.get("text", text[start:end]),
        label=data.get("label", LOCATION),
        linked_ids=[_candidate_id(entry) for entry in data.get("candidates") or []],
        sentence=int(data.get("sentence", 0)),
        meta={key: data[key] for key in _GOLD_KEYS if data.get(key) is not None},
    )


def parse_document(data: Dict[str, Any], default_id: str, source: str, text_field: str) -> Document:
    text = data.get(text_field, "")
    mentions: List[Mention] = []
    for entry in data.get("mentions") or []:
        try:
            mentions.append(parse_mention(entry, text))
        except (KeyError, TypeError, ValueError):
            logger.warning(f"Skipping malformed mention {entry!r} in {default_id}")
    meta = {
        key: value for key, value in data.items() if key not in ("id", text_field, "mentions")
    }
    return Document(
        id=str(data.get("id") or default_id),
        text=text,
        mentions=mentions,
        meta={"source": source, **meta},
    )


@loaders.register("jsonl")
class JSONLLoader:
    """Loads JSONL where each line is one document."""

    def __init__(self, text_field: str = "text") -> None:
        self.text_field = text_field

    def load(self, path: str) -> Iterator[Document]:
        with Path(path).open(encoding="utf-8") as f:
            for i, line in enumerate(f):
                if not line.strip():
                    continue
                data = json.loads(line)
                yield parse_document(data, f"{Path(path).stem}-{i}", path, self.text_field)


@loaders.register("json")
class JSONLoader:
    """Loads a JSON array of documents (or a single document object)."""

    def __init__(self, text_field: str = "text") -> None:
        self.text_field = text_field

    def load(self, path: str) -> Iterator[Document]:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        if isinstance(data, dict):
            data = [data]
        for i, item in enumerate(data):
            yield parse_document(item, f"{Path(path).stem}-{i}", path, self.text_field)
