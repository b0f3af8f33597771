"""Tests for the relationship type registry."""

import pytest

from kinship.core.relationship_types import (
    DEFAULT_REGISTRY,
    RelationshipTypeConfig,
    RelationshipTypeRegistry,
)


class TestDefaultRegistry:
    """The built-in relationship table."""

    def test_all_types_in_stable_order(self):
        assert DEFAULT_REGISTRY.get_all_types() == [
            "parent",
            "child",
            "partner",
            "sibling",
            "half_sibling",
            "step_sibling",
            "spouse",
            "donor",
            "biological_parent",
            "social_parent",
            "other",
        ]

    def test_bidirectional_set(self):
        assert set(DEFAULT_REGISTRY.get_bidirectional_types()) == {
            "sibling", "half_sibling", "step_sibling", "partner", "spouse",
        }
        assert not DEFAULT_REGISTRY.is_bidirectional("parent")
        assert not DEFAULT_REGISTRY.is_bidirectional("donor")
        assert not DEFAULT_REGISTRY.is_bidirectional("other")

    def test_directional_types_complement_bidirectional(self):
        directional = set(DEFAULT_REGISTRY.get_directional_types())
        bidirectional = set(DEFAULT_REGISTRY.get_bidirectional_types())
        assert directional | bidirectional == set(DEFAULT_REGISTRY.get_all_types())
        assert not directional & bidirectional

    @pytest.mark.parametrize(
        "relationship_type, reciprocal",
        [
            ("parent", "child"),
            ("child", "parent"),
            ("sibling", "sibling"),
            ("partner", "partner"),
            ("spouse", "spouse"),
            ("donor", "child"),
            ("biological_parent", "child"),
            ("other", None),
        ],
    )
    def test_reciprocal_table(self, relationship_type, reciprocal):
        assert DEFAULT_REGISTRY.get_reciprocal_type(relationship_type) == reciprocal

    def test_parent_reciprocal_is_an_involution(self):
        reciprocal = DEFAULT_REGISTRY.get_reciprocal_type("parent")
        assert DEFAULT_REGISTRY.get_reciprocal_type(reciprocal) == "parent"

    def test_unknown_type_falls_back_to_other(self):
        config = DEFAULT_REGISTRY.get_config("great_aunt")
        assert config.value == "other"
        assert DEFAULT_REGISTRY.get_reciprocal_type("great_aunt") is None
        assert not DEFAULT_REGISTRY.is_bidirectional("great_aunt")
        assert not DEFAULT_REGISTRY.is_known("great_aunt")

    def test_display_metadata(self):
        assert DEFAULT_REGISTRY.get_label("half_sibling") == "Half Sibling"
        assert DEFAULT_REGISTRY.get_icon("donor") == "Dna"
        assert DEFAULT_REGISTRY.get_color("parent") == "hsl(var(--chart-1))"

    def test_selection_entries(self):
        entries = DEFAULT_REGISTRY.get_for_selection()
        assert len(entries) == len(DEFAULT_REGISTRY.get_all_types())
        assert entries[0] == {
            "value": "parent",
            "label": "Parent",
            "icon": "Users",
            "color": "hsl(var(--chart-1))",
        }


class TestCustomRegistry:
    """Alternate registries can be substituted."""

    def test_registry_requires_other(self):
        with pytest.raises(ValueError):
            RelationshipTypeRegistry(
                [RelationshipTypeConfig(value="parent", label="Parent", icon="Users", color="#000")]
            )

    def test_custom_bidirectional_type(self):
        registry = RelationshipTypeRegistry(
            [
                RelationshipTypeConfig(
                    value="cousin",
                    label="Cousin",
                    icon="Users",
                    color="#111",
                    is_bidirectional=True,
                    reciprocal_type="cousin",
                ),
                RelationshipTypeConfig(value="other", label="Other", icon="GitBranch", color="#222"),
            ]
        )
        assert registry.is_bidirectional("cousin")
        assert registry.get_all_types() == ["cousin", "other"]
        assert "parent" not in registry
