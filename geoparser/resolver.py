"""
Document-level toponym resolution.

``ToponymResolver`` ties a gazetteer, a fallback chain and the resolver
settings together. For every document (or sentence) it builds one
``DocumentContext`` holding only the features the chain needs, then
runs the chain for each mention.
"""

import logging
from itertools import groupby
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple, Union

from geoparser.candidates import attach_candidates
from geoparser.config import DEFAULT_CHAIN, SCOPES, ComponentConfig, ResolverSettings
from geoparser.context import build_document_context, eligible_mentions
from geoparser.disambiguators import FallbackChain, build_chain
from geoparser.gazetteers.base import Gazetteer, GazetteerError
from geoparser.types import Document, Mention, ResolvedLocation

logger = logging.getLogger(__name__)


class ToponymResolver:
    """Resolves the location mentions of a document to gazetteer places.

    The resolver holds no per-call state and may be shared between
    threads as long as the gazetteer can.
    """

    def __init__(
        self,
        gazetteer: Optional[Gazetteer],
        chain: Union[str, Sequence[ComponentConfig], FallbackChain] = DEFAULT_CHAIN,
        settings: ResolverSettings = ResolverSettings(),
    ):
        self.gazetteer = gazetteer
        self.settings = settings
        if isinstance(chain, FallbackChain):
            self.chain = chain
        else:
            self.chain = build_chain(chain, settings)
        if self.chain.requires and gazetteer is None:
            logger.warning(f"{self.chain!r} runs without a gazetteer; graph strategies will abstain")

    def disambiguate(self, mentions: Sequence[Mention]) -> List[Optional[ResolvedLocation]]:
        """Resolve each mention; the output is parallel to ``mentions``.

        Mentions that are not locations or have no candidates map to
        ``None``. Raises ``GazetteerError`` if the gazetteer fails.
        """
        eligible = eligible_mentions(mentions)
        if not eligible:
            return [None] * len(mentions)

        context = build_document_context(
            eligible, self.gazetteer, self.settings, self.chain.requires
        )
        results: List[Optional[ResolvedLocation]] = []
        for mention in mentions:
            if mention.is_location and mention.candidates:
                results.append(self.chain.resolve(mention, context))
            else:
                results.append(None)
        return results

    def disambiguate_document(
        self, doc: Document, scope: str = "document"
    ) -> List[Optional[ResolvedLocation]]:
        """Attach candidates to the document's mentions and resolve them.

        With ``scope="sentence"`` every sentence is resolved on its own,
        so only mentions of the same sentence inform each other.
        """
        if scope not in SCOPES:
            raise ValueError(f"Unknown scope '{scope}', expected one of {SCOPES}")
        if self.gazetteer is not None:
            attach_candidates(self.gazetteer, doc.mentions, self.settings)

        if scope == "document":
            return self.disambiguate(doc.mentions)

        results: List[Optional[ResolvedLocation]] = [None] * len(doc.mentions)
        for _, group in _sentences(doc.mentions):
            positions = [index for index, _ in group]
            resolved = self.disambiguate([mention for _, mention in group])
            for index, location in zip(positions, resolved):
                results[index] = location
        return results

    def resolve_documents(
        self, docs: Iterable[Document], scope: str = "document"
    ) -> Iterator[Tuple[Document, List[Optional[ResolvedLocation]]]]:
        """Resolve documents one by one, skipping those the gazetteer fails on."""
        for doc in docs:
            try:
                resolved = self.disambiguate_document(doc, scope)
            except GazetteerError:
                logger.exception(f"Skipping document {doc.id}: gazetteer query failed")
                continue
            yield doc, resolved


def _sentences(mentions: Sequence[Mention]) -> Iterator[Tuple[int, List[Tuple[int, Mention]]]]:
    """Group mentions by sentence index, keeping document order inside each group."""
    indexed = sorted(enumerate(mentions), key=lambda item: (item[1].sentence, item[0]))
    for sentence, group in groupby(indexed, key=lambda item: item[1].sentence):
        yield sentence, list(group)
