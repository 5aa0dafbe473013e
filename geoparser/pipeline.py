import json
import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional

# Ensure component registration by importing modules with registry decorators.
from geoparser import loaders as _loaders_pkg  # noqa: F401
from geoparser import gazetteers as _gazetteers_pkg  # noqa: F401
from geoparser import disambiguators as _disamb_pkg  # noqa: F401

from .config import PipelineConfig
from .gazetteers.base import GazetteerError
from .registry import gazetteers, loaders
from .resolver import ToponymResolver
from .types import Document, Mention, ResolvedLocation

logger = logging.getLogger(__name__)


def _entity_record(mention: Mention, location: Optional[ResolvedLocation]) -> Dict:
    record = {
        "text": mention.text,
        "start": mention.start,
        "end": mention.end,
        "label": mention.label,
        "sentence": mention.sentence,
        "place_id": location.place_id if location else None,
        "place_name": location.place.name if location else None,
        "coordinate": list(location.coordinate) if location and location.coordinate else None,
        "strategy": location.strategy if location else None,
        "candidates": [
            {
                "place_id": c.place_id,
                "name": c.name,
                "population": c.population,
            }
            for c in mention.candidates
        ],
    }
    record.update(mention.meta)
    return record


class GeoparsingPipeline:
    """Loads documents, resolves their toponyms and writes the results."""

    def __init__(self, config: PipelineConfig) -> None:
        self.config = config

        gazetteer_factory = gazetteers.get(config.gazetteer.name)
        self.gazetteer = gazetteer_factory(**config.gazetteer.params)

        loader_factory = loaders.get(config.loader.name)
        self.loader = loader_factory(**config.loader.params)

        self.resolver = ToponymResolver(self.gazetteer, config.chain, config.settings)
        self.failed_documents: List[Optional[str]] = []
        logger.info(
            f"Pipeline ready: gazetteer={config.gazetteer.name}, chain={self.resolver.chain!r}, "
            f"scope={config.scope}, workers={config.workers}"
        )

    def process_document(self, doc: Document) -> Dict:
        """Resolve one document. Raises ``GazetteerError`` if the gazetteer fails."""
        resolved = self.resolver.disambiguate_document(doc, self.config.scope)
        return {
            "id": doc.id,
            "text": doc.text,
            "entities": [
                _entity_record(mention, location)
                for mention, location in zip(doc.mentions, resolved)
            ],
            "meta": doc.meta,
        }

    def _safe_process(self, doc: Document) -> Optional[Dict]:
        try:
            return self.process_document(doc)
        except GazetteerError:
            logger.exception(f"Skipping document {doc.id}: gazetteer query failed")
            return None

    def _documents(self, paths: Iterable[str]) -> Iterator[Document]:
        for path in paths:
            yield from self.loader.load(path)

    def run(self, paths: Iterable[str], output_path: Optional[str] = None) -> List[Dict]:
        """Resolve every document in ``paths``; results keep the input order.

        Documents the gazetteer fails on are left out and their ids are
        recorded in ``failed_documents``.
        """
        results: List[Dict] = []
        self.failed_documents = []
        writer = None
        if output_path:
            writer = Path(output_path).open("w", encoding="utf-8")

        try:
            docs = list(self._documents(paths))
            if self.config.workers > 1:
                with ThreadPoolExecutor(max_workers=self.config.workers) as executor:
                    outputs = list(executor.map(self._safe_process, docs))
            else:
                outputs = [self._safe_process(doc) for doc in docs]

            for doc, result in zip(docs, outputs):
                if result is None:
                    self.failed_documents.append(doc.id)
                    continue
                if writer:
                    writer.write(json.dumps(result) + "\n")
                results.append(result)
        finally:
            if writer:
                writer.close()

        if self.failed_documents:
            logger.warning(f"{len(self.failed_documents)} document(s) skipped")
        logger.info(f"Resolved {len(results)} document(s)")
        return results
