"""
Relationship type registry.

The registry is the single source of truth for which relationship types
exist, which of them are bidirectional, and what the reciprocal of each
type is. Every component takes a registry as an argument and falls back to
``DEFAULT_REGISTRY``, so tests can hand in an alternate table.
"""

from types import MappingProxyType
from typing import Iterable, Mapping, Optional

from pydantic import BaseModel


OTHER_TYPE = "other"


class RelationshipTypeConfig(BaseModel):
    value: str
    label: str
    icon: str
    color: str
    is_bidirectional: bool = False
    reciprocal_type: Optional[str] = None

    class Config:
        frozen = True


class RelationshipTypeRegistry:
    """
    Immutable lookup table of relationship type configurations.

    Unknown types resolve to the ``other`` configuration instead of raising.
    """

    def __init__(self, configs: Iterable[RelationshipTypeConfig]):
        table = {config.value: config for config in configs}
        if OTHER_TYPE not in table:
            raise ValueError("A relationship registry must define 'other'")
        self._configs: Mapping[str, RelationshipTypeConfig] = MappingProxyType(table)

    def __contains__(self, relationship_type: object) -> bool:
        return relationship_type in self._configs

    def is_known(self, relationship_type: Optional[str]) -> bool:
        return relationship_type in self._configs

    def get_all_types(self) -> list[str]:
        return list(self._configs)

    def get_config(self, relationship_type: Optional[str]) -> RelationshipTypeConfig:
        return self._configs.get(relationship_type, self._configs[OTHER_TYPE])

    def get_for_selection(self) -> list[dict]:
        return [
            {
                "value": config.value,
                "label": config.label,
                "icon": config.icon,
                "color": config.color,
            }
            for config in self._configs.values()
        ]

    def get_bidirectional_types(self) -> list[str]:
        return [c.value for c in self._configs.values() if c.is_bidirectional]

    def get_directional_types(self) -> list[str]:
        return [c.value for c in self._configs.values() if not c.is_bidirectional]

    def get_icon(self, relationship_type: Optional[str]) -> str:
        return self.get_config(relationship_type).icon

    def get_color(self, relationship_type: Optional[str]) -> str:
        return self.get_config(relationship_type).color

    def get_label(self, relationship_type: Optional[str]) -> str:
        return self.get_config(relationship_type).label

    def is_bidirectional(self, relationship_type: Optional[str]) -> bool:
        return self.get_config(relationship_type).is_bidirectional

    def get_reciprocal_type(self, relationship_type: Optional[str]) -> Optional[str]:
        if relationship_type not in self._configs:
            return None
        return self._configs[relationship_type].reciprocal_type


# --------------------------------------------------
# DEFAULT TABLE
# --------------------------------------------------
DEFAULT_RELATIONSHIP_TYPES = (
    RelationshipTypeConfig(
        value="parent",
        label="Parent",
        icon="Users",
        color="hsl(var(--chart-1))",
        reciprocal_type="child",
    ),
    RelationshipTypeConfig(
        value="child",
        label="Child",
        icon="Baby",
        color="hsl(var(--chart-2))",
        reciprocal_type="parent",
    ),
    RelationshipTypeConfig(
        value="partner",
        label="Partner",
        icon="Heart",
        color="hsl(var(--chart-3))",
        is_bidirectional=True,
        reciprocal_type="partner",
    ),
    RelationshipTypeConfig(
        value="sibling",
        label="Sibling",
        icon="Users",
        color="hsl(var(--chart-4))",
        is_bidirectional=True,
        reciprocal_type="sibling",
    ),
    RelationshipTypeConfig(
        value="half_sibling",
        label="Half Sibling",
        icon="Users",
        color="hsl(var(--chart-4))",
        is_bidirectional=True,
        reciprocal_type="half_sibling",
    ),
    RelationshipTypeConfig(
        value="step_sibling",
        label="Step Sibling",
        icon="Users",
        color="hsl(var(--chart-4))",
        is_bidirectional=True,
        reciprocal_type="step_sibling",
    ),
    RelationshipTypeConfig(
        value="spouse",
        label="Spouse",
        icon="Heart",
        color="hsl(var(--chart-3))",
        is_bidirectional=True,
        reciprocal_type="spouse",
    ),
    RelationshipTypeConfig(
        value="donor",
        label="Donor",
        icon="Dna",
        color="hsl(var(--chart-5))",
        reciprocal_type="child",
    ),
    RelationshipTypeConfig(
        value="biological_parent",
        label="Biological Parent",
        icon="Users",
        color="hsl(var(--chart-1))",
        reciprocal_type="child",
    ),
    RelationshipTypeConfig(
        value="social_parent",
        label="Social Parent",
        icon="Users",
        color="hsl(var(--chart-1))",
        reciprocal_type="child",
    ),
    RelationshipTypeConfig(
        value=OTHER_TYPE,
        label="Other",
        icon="GitBranch",
        color="hsl(var(--muted-foreground))",
    ),
)

DEFAULT_REGISTRY = RelationshipTypeRegistry(DEFAULT_RELATIONSHIP_TYPES)
