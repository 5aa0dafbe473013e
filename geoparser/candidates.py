"""
Candidate materialization.

Turns the place ids attached by the linking stage into immutable
``PlaceCandidate`` values, querying the gazetteer once per data kind for
the whole id set.
"""

import logging
from typing import Dict, Iterable, List, Sequence, Tuple

from geoparser.config import ResolverSettings
from geoparser.gazetteers.base import Gazetteer
from geoparser.types import Mention, PlaceCandidate
from geoparser.utils.numbers import parse_population

logger = logging.getLogger(__name__)


def materialize_candidates(
    gazetteer: Gazetteer,
    place_ids: Iterable[str],
    settings: ResolverSettings = ResolverSettings(),
) -> Dict[str, PlaceCandidate]:
    """Build a ``PlaceCandidate`` for every distinct id, in first-seen order."""
    ids: List[str] = list(dict.fromkeys(str(place_id) for place_id in place_ids))
    if not ids:
        return {}

    populations = gazetteer.properties(ids, settings.population_property)
    names = gazetteer.properties(ids, settings.name_property)
    coordinates = gazetteer.coordinates(ids)
    types = gazetteer.place_types(ids)

    type_names = list(dict.fromkeys(t for place_types in types.values() for t in place_types))
    lineages: Dict[str, Tuple[str, ...]] = {}
    if type_names:
        lineages = {
            type_name: tuple(lineage)
            for type_name, lineage in gazetteer.type_lineages(type_names).items()
        }

    candidates: Dict[str, PlaceCandidate] = {}
    for place_id in ids:
        raw_population = populations.get(place_id)
        population = parse_population(raw_population)
        if raw_population is not None and population is None:
            logger.debug(f"Unparsable population {raw_population!r} for place {place_id}")
        candidates[place_id] = PlaceCandidate(
            place_id=place_id,
            name=names.get(place_id),
            population=population,
            coordinate=coordinates.get(place_id),
            type_lineages=tuple(lineages.get(t, (t,)) for t in types.get(place_id, [])),
        )
    return candidates


def attach_candidates(
    gazetteer: Gazetteer,
    mentions: Sequence[Mention],
    settings: ResolverSettings = ResolverSettings(),
) -> None:
    """Fill ``mention.candidates`` from ``mention.linked_ids`` for all mentions at once.

    Mentions without linked ids keep the candidates they already carry.
    """
    linked = [mention for mention in mentions if mention.linked_ids]
    all_ids = [place_id for mention in linked for place_id in mention.linked_ids]
    candidates = materialize_candidates(gazetteer, all_ids, settings)
    for mention in linked:
        own_ids = dict.fromkeys(str(place_id) for place_id in mention.linked_ids)
        mention.candidates = [candidates[place_id] for place_id in own_ids]
