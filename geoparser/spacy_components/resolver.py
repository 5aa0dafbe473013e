"""
spaCy toponym resolver component.

Resolves ``doc.ents`` with a location label to gazetteer places. The
candidate places of each entity must have been attached upstream as
``span._.candidates`` (place ids or ``PlaceCandidate`` values); the
chosen place is written to ``span._.resolved_location``.
"""

import logging
from typing import Any, Dict, List, Optional, Union

from spacy.language import Language
from spacy.tokens import Doc, Span

from geoparser.candidates import materialize_candidates
from geoparser.config import DEFAULT_CHAIN, ComponentConfig, ResolverSettings
from geoparser.gazetteers.base import Gazetteer, GazetteerError
from geoparser.resolver import ToponymResolver
from geoparser.types import LOCATION, Mention, PlaceCandidate
from geoparser.utils.extensions import (
    ensure_candidates_extension,
    ensure_resolved_location_extension,
)

logger = logging.getLogger(__name__)

DEFAULT_LOCATION_LABELS = ["GPE", "LOC", "FAC", LOCATION]


def _ensure_extensions():
    """Ensure required extensions are registered on Span."""
    ensure_candidates_extension()
    ensure_resolved_location_extension()


def _candidate_ref(candidate: Any) -> Union[str, PlaceCandidate]:
    if isinstance(candidate, PlaceCandidate):
        return candidate
    # Candidates produced by entity-linking components
    entity_id = getattr(candidate, "entity_id", None)
    if entity_id is not None:
        return str(entity_id)
    return str(candidate)


@Language.factory(
    "geoparser_toponym_resolver",
    default_config={
        "chain": DEFAULT_CHAIN,
        "location_labels": DEFAULT_LOCATION_LABELS,
        "settings": None,
    },
)
def create_toponym_resolver_component(
    nlp: Language,
    name: str,
    chain: Union[str, List[dict]],
    location_labels: List[str],
    settings: Optional[dict],
):
    """Factory for the toponym resolver component."""
    return ToponymResolverComponent(
        nlp=nlp,
        chain=chain,
        location_labels=location_labels,
        settings=settings,
    )


class ToponymResolverComponent:
    """
    Toponym resolver component for spaCy.

    Call ``initialize(gazetteer)`` before use. All location entities of a
    document are resolved together, so every mention informs the
    others; entities outside ``location_labels`` are left untouched.
    """

    def __init__(
        self,
        nlp: Language,
        chain: Union[str, List[dict]] = DEFAULT_CHAIN,
        location_labels: Optional[List[str]] = None,
        settings: Optional[dict] = None,
    ):
        self.nlp = nlp
        if isinstance(chain, str):
            self.chain = chain
        else:
            self.chain = [
                ComponentConfig(name=link["name"], params=link.get("params", {}))
                for link in chain
            ]
        self.location_labels = set(location_labels or DEFAULT_LOCATION_LABELS)
        self.settings = ResolverSettings.from_dict(settings)
        self.gazetteer: Optional[Gazetteer] = None
        self.resolver: Optional[ToponymResolver] = None

        _ensure_extensions()

    def initialize(self, gazetteer: Gazetteer):
        """Initialize the component with a gazetteer."""
        self.gazetteer = gazetteer
        self.resolver = ToponymResolver(gazetteer, self.chain, self.settings)
        logger.info(f"Toponym resolver initialized: {self.resolver.chain!r}")

    def _mentions(self, doc: Doc, entities: List[Span]) -> List[Mention]:
        sentence_starts: Dict[int, int] = {}
        if doc.has_annotation("SENT_START"):
            for index, sent in enumerate(doc.sents):
                sentence_starts[sent.start] = index

        refs = [[_candidate_ref(c) for c in getattr(ent._, "candidates", []) or []] for ent in entities]
        ids = [ref for ent_refs in refs for ref in ent_refs if isinstance(ref, str)]
        materialized = materialize_candidates(self.gazetteer, ids, self.settings) if ids else {}

        mentions: List[Mention] = []
        for ent, ent_refs in zip(entities, refs):
            candidates: List[PlaceCandidate] = []
            seen = set()
            for ref in ent_refs:
                candidate = ref if isinstance(ref, PlaceCandidate) else materialized[ref]
                if candidate.place_id not in seen:
                    seen.add(candidate.place_id)
                    candidates.append(candidate)
            mentions.append(
                Mention(
                    start=ent.start_char,
                    end=ent.end_char,
                    text=ent.text,
                    label=LOCATION if ent.label_ in self.location_labels else ent.label_,
                    candidates=candidates,
                    sentence=sentence_starts.get(ent.sent.start, 0) if sentence_starts else 0,
                )
            )
        return mentions

    def __call__(self, doc: Doc) -> Doc:
        """Resolve all location entities of the document."""
        if self.resolver is None:
            logger.warning("Toponym resolver not initialized - call initialize(gazetteer) first")
            return doc

        entities = list(doc.ents)
        if not entities:
            return doc

        try:
            mentions = self._mentions(doc, entities)
            resolved = self.resolver.disambiguate(mentions)
        except GazetteerError:
            logger.exception("Skipping document: gazetteer query failed")
            return doc

        for ent, location in zip(entities, resolved):
            if location is not None:
                ent._.resolved_location = location
        return doc
