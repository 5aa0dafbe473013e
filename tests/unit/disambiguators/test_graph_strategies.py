"""Unit tests for the relationship-graph strategies."""

import pytest

from geoparser.candidates import attach_candidates
from geoparser.config import ResolverSettings
from geoparser.context import build_document_context
from geoparser.disambiguators import Strategy, StrategyKind, resolve
from geoparser.types import Mention

from tests.conftest import MockGazetteer


def _document(gazetteer, *linked):
    mentions = [
        Mention(start=i * 10, end=i * 10 + 4, text=f"m{i}", linked_ids=list(ids))
        for i, ids in enumerate(linked)
    ]
    attach_candidates(gazetteer, mentions)
    return mentions


def _resolve(kind, gazetteer, mentions, index=0, settings=ResolverSettings(), **options):
    strategy = Strategy(kind, options)
    context = build_document_context(mentions, gazetteer, settings, strategy.requires)
    return resolve(strategy, mentions[index], context)


class TestRelationshipWeight:
    """Tests for the relationship_weight strategy."""

    def test_strongest_edge_wins(self):
        gazetteer = MockGazetteer(
            places={p: {} for p in "XYZ"},
            edges={("X", "Z"): 0.8, ("Y", "Z"): 0.3},
        )
        mentions = _document(gazetteer, ["X", "Y"], ["Z"])
        assert _resolve(StrategyKind.RELATIONSHIP_WEIGHT, gazetteer, mentions).place_id == "X"

    def test_edge_direction_does_not_matter(self):
        gazetteer = MockGazetteer(
            places={p: {} for p in "XYZ"},
            edges={("Z", "Y"): 0.8, ("X", "Z"): 0.3},
        )
        mentions = _document(gazetteer, ["X", "Y"], ["Z"])
        assert _resolve(StrategyKind.RELATIONSHIP_WEIGHT, gazetteer, mentions).place_id == "Y"

    def test_abstains_without_edges(self):
        gazetteer = MockGazetteer(places={p: {} for p in "XYZ"})
        mentions = _document(gazetteer, ["X", "Y"], ["Z"])
        assert _resolve(StrategyKind.RELATIONSHIP_WEIGHT, gazetteer, mentions) is None

    def test_abstains_for_single_mention(self):
        gazetteer = MockGazetteer(places={p: {} for p in "XY"}, edges={("X", "Y"): 1.0})
        mentions = _document(gazetteer, ["X", "Y"])
        assert _resolve(StrategyKind.RELATIONSHIP_WEIGHT, gazetteer, mentions) is None

    def test_substituted_edges_are_penalized(self):
        # X has no edge of its own; its parent P is related to Z
        gazetteer = MockGazetteer(
            places={"X": {"parent": "P"}, "Y": {}, "Z": {}, "P": {}},
            edges={("P", "Z"): 1.0, ("Y", "Z"): 0.005},
        )
        mentions = _document(gazetteer, ["X", "Y"], ["Z"])
        # 1.0 * 0.01 beats 0.005
        assert _resolve(StrategyKind.RELATIONSHIP_WEIGHT, gazetteer, mentions).place_id == "X"
        # 1.0 * 0.001 does not
        result = _resolve(StrategyKind.RELATIONSHIP_WEIGHT, gazetteer, mentions, penalty=0.001)
        assert result.place_id == "Y"

    def test_ties_go_to_first_candidate(self):
        gazetteer = MockGazetteer(
            places={p: {} for p in "XYZ"},
            edges={("X", "Z"): 0.5, ("Y", "Z"): 0.5},
        )
        mentions = _document(gazetteer, ["Y", "X"], ["Z"])
        assert _resolve(StrategyKind.RELATIONSHIP_WEIGHT, gazetteer, mentions).place_id == "Y"

    def test_own_candidates_are_not_counterparts(self):
        gazetteer = MockGazetteer(
            places={p: {} for p in "XYZ"},
            edges={("X", "Y"): 5.0, ("Y", "Z"): 0.1},
        )
        mentions = _document(gazetteer, ["X", "Y"], ["Z"])
        assert _resolve(StrategyKind.RELATIONSHIP_WEIGHT, gazetteer, mentions).place_id == "Y"

    def test_berlin_and_hamburg(self, mock_gazetteer):
        mentions = _document(
            mock_gazetteer, ["berlin-nh", "berlin-de"], ["hamburg-ny", "hamburg-de"]
        )
        assert _resolve(StrategyKind.RELATIONSHIP_WEIGHT, mock_gazetteer, mentions, 0).place_id == "berlin-de"
        assert _resolve(StrategyKind.RELATIONSHIP_WEIGHT, mock_gazetteer, mentions, 1).place_id == "hamburg-de"


class TestEdgeWeightSum:
    """Tests for the edge_weight_sum strategy."""

    def test_largest_sum_wins(self):
        gazetteer = MockGazetteer(
            places={p: {} for p in "XYZW"},
            edges={("X", "Z"): 0.5, ("X", "W"): 0.1, ("Y", "Z"): 0.4, ("Y", "W"): 0.4},
        )
        mentions = _document(gazetteer, ["X", "Y"], ["Z"], ["W"])
        assert _resolve(StrategyKind.EDGE_WEIGHT_SUM, gazetteer, mentions).place_id == "Y"

    def test_abstains_without_positive_sum(self):
        gazetteer = MockGazetteer(places={p: {} for p in "XYZ"}, edges={("X", "Z"): 0.0})
        mentions = _document(gazetteer, ["X", "Y"], ["Z"])
        assert _resolve(StrategyKind.EDGE_WEIGHT_SUM, gazetteer, mentions) is None


class TestNetworkSeedPropagation:
    """Tests for the network_seed_propagation strategy."""

    @pytest.fixture
    def gazetteer(self) -> MockGazetteer:
        # a1 is the only connected reading of the first mention, so it is a seed
        return MockGazetteer(
            places={p: {} for p in ("a1", "a2", "b1", "b2", "c1")},
            edges={("b1", "a1"): 0.2, ("b2", "a1"): 0.6},
        )

    def test_seed_mention_resolves_to_its_seed(self, gazetteer):
        mentions = _document(gazetteer, ["a2", "a1"], ["b1", "b2"])
        assert _resolve(StrategyKind.NETWORK_SEED_PROPAGATION, gazetteer, mentions, 0).place_id == "a1"

    def test_other_mentions_follow_the_seeds(self, gazetteer):
        mentions = _document(gazetteer, ["a2", "a1"], ["b1", "b2"])
        assert _resolve(StrategyKind.NETWORK_SEED_PROPAGATION, gazetteer, mentions, 1).place_id == "b2"

    def test_abstains_without_seeds(self, gazetteer):
        mentions = _document(gazetteer, ["b1", "b2"], ["c1"])
        assert _resolve(StrategyKind.NETWORK_SEED_PROPAGATION, gazetteer, mentions, 0) is None

    def test_abstains_below_min_weight(self, gazetteer):
        mentions = _document(gazetteer, ["a2", "a1"], ["b1", "b2"])
        result = _resolve(
            StrategyKind.NETWORK_SEED_PROPAGATION, gazetteer, mentions, 1, min_weight=1.0
        )
        assert result is None

    def test_abstains_when_unconnected_to_seeds(self, gazetteer):
        mentions = _document(gazetteer, ["a2", "a1"], ["c1"])
        assert _resolve(StrategyKind.NETWORK_SEED_PROPAGATION, gazetteer, mentions, 1) is None


class TestDeterminism:
    """Repeated resolution over the same context gives the same answer."""

    @pytest.mark.parametrize("kind", list(StrategyKind))
    def test_repeatable(self, kind, mock_gazetteer):
        mentions = _document(
            mock_gazetteer, ["berlin-nh", "berlin-de"], ["hamburg-ny", "hamburg-de"]
        )
        strategy = Strategy(kind)
        context = build_document_context(mentions, mock_gazetteer, features=strategy.requires)
        first = [resolve(strategy, m, context) for m in mentions]
        second = [resolve(strategy, m, context) for m in mentions]
        assert first == second
