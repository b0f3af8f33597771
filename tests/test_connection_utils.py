"""Tests for single-edge connection rules."""

import pytest

from kinship.core.connection_utils import SELF_RELATIONSHIP_ERROR, ConnectionUtils
from kinship.schemas.connection_schema import ConnectionCreate

from helpers import edge


@pytest.fixture
def utils():
    return ConnectionUtils()


class TestCanonicalDirection:
    @pytest.mark.parametrize(
        "relationship_type",
        ["sibling", "half_sibling", "step_sibling", "partner", "spouse"],
    )
    def test_bidirectional_is_order_independent(self, utils, relationship_type):
        forward = utils.get_canonical_direction("zed", "amy", relationship_type)
        backward = utils.get_canonical_direction("amy", "zed", relationship_type)
        assert forward == backward == ("amy", "zed")

    def test_directional_preserves_caller_direction(self, utils):
        assert utils.get_canonical_direction("zed", "amy", "parent") == ("zed", "amy")
        assert utils.get_canonical_direction("zed", "amy", "donor") == ("zed", "amy")


class TestEquivalence:
    def test_same_direction_is_equivalent(self, utils):
        assert utils.are_equivalent(edge("1", "a", "b", "parent"), edge("2", "a", "b", "parent"))

    def test_swapped_bidirectional_is_equivalent(self, utils):
        assert utils.are_equivalent(edge("1", "a", "b", "sibling"), edge("2", "b", "a", "sibling"))

    def test_swapped_directional_is_not_equivalent(self, utils):
        assert not utils.are_equivalent(edge("1", "a", "b", "parent"), edge("2", "b", "a", "parent"))

    def test_different_types_are_not_equivalent(self, utils):
        assert not utils.are_equivalent(edge("1", "a", "b", "sibling"), edge("2", "a", "b", "partner"))

    def test_reciprocal_pair(self, utils):
        assert utils.is_reciprocal_pair(edge("1", "a", "b", "parent"), edge("2", "b", "a", "child"))
        assert utils.is_reciprocal_pair(edge("1", "d", "c", "donor"), edge("2", "c", "d", "child"))
        assert not utils.is_reciprocal_pair(edge("1", "a", "b", "parent"), edge("2", "a", "b", "child"))


class TestDeduplicate:
    def test_sibling_pair_collapses_to_first_seen(self, utils):
        edges = [edge("1", "Z", "A", "sibling"), edge("2", "A", "Z", "sibling")]
        unique = utils.deduplicate(edges)
        assert [e.id for e in unique] == ["1"]

    def test_sibling_pair_after_canonicalization(self, utils):
        raw = [("Z", "A"), ("A", "Z")]
        canonical = []
        for index, (a, b) in enumerate(raw):
            from_id, to_id = utils.get_canonical_direction(a, b, "sibling")
            canonical.append(edge(str(index), from_id, to_id, "sibling"))

        unique = utils.deduplicate(canonical)
        assert len(unique) == 1
        assert unique[0].from_person_id == "A"

    def test_keeps_directional_reverse_edges(self, utils):
        edges = [edge("1", "a", "b", "parent"), edge("2", "b", "a", "parent")]
        assert len(utils.deduplicate(edges)) == 2

    def test_is_idempotent_and_order_preserving(self, utils):
        edges = [
            edge("1", "a", "b", "parent"),
            edge("2", "c", "a", "sibling"),
            edge("3", "a", "b", "parent"),
            edge("4", "a", "c", "sibling"),
            edge("5", "b", "c", "partner"),
        ]
        once = utils.deduplicate(edges)
        assert [e.id for e in once] == ["1", "2", "5"]
        assert utils.deduplicate(once) == once


class TestExists:
    def test_bidirectional_lookup_ignores_direction(self, utils):
        edges = [edge("1", "a", "b", "spouse")]
        assert utils.exists(edges, "b", "a", "spouse")
        assert not utils.exists(edges, "b", "a", "partner")

    def test_directional_lookup_respects_direction(self, utils):
        edges = [edge("1", "a", "b", "parent")]
        assert utils.exists(edges, "a", "b", "parent")
        assert not utils.exists(edges, "b", "a", "parent")


class TestValidate:
    def test_valid_input(self, utils):
        data = ConnectionCreate(from_person_id="p1", to_person_id="p2", relationship_type="parent")
        assert utils.validate(data) == []

    def test_self_relationship_is_the_only_error(self, utils):
        errors = utils.validate({"from_person_id": "x", "to_person_id": "x", "relationship_type": "parent"})
        assert errors == [SELF_RELATIONSHIP_ERROR]
        assert SELF_RELATIONSHIP_ERROR == "A person cannot have a relationship with themselves"

    def test_all_missing_fields_reported(self, utils):
        errors = utils.validate({"from_person_id": "", "to_person_id": "", "relationship_type": ""})
        assert errors == [
            "From person is required",
            "To person is required",
            "Relationship type is required",
        ]

    def test_unknown_type_and_self_both_reported(self, utils):
        errors = utils.validate(
            ConnectionCreate(from_person_id="p1", to_person_id="p1", relationship_type="cousin")
        )
        assert SELF_RELATIONSHIP_ERROR in errors
        assert "Invalid relationship type" in errors
        assert len(errors) == 2
