"""
Attribute tags carried in a connection's metadata.

The tag set is closed: pydantic rejects anything not listed here, which
keeps sibling classification and parentage filters exhaustive.
"""

from enum import Enum


class RelationshipAttribute(str, Enum):
    # biological
    BIOLOGICAL = "biological"
    ADOPTED = "adopted"
    STEP = "step"
    FOSTER = "foster"

    # legal
    LEGAL = "legal"
    INTENDED = "intended"

    # assisted reproduction
    IVF = "ivf"
    IUI = "iui"
    DONOR_CONCEIVED = "donor_conceived"

    # sibling
    FULL = "full"
    HALF = "half"
    DONOR_SIBLING = "donor_sibling"
    STEP_SIBLING = "step_sibling"

    # donor
    SPERM_DONOR = "sperm_donor"
    EGG_DONOR = "egg_donor"
    EMBRYO_DONOR = "embryo_donor"


ATTRIBUTE_CATEGORIES: dict[str, tuple[RelationshipAttribute, ...]] = {
    "biological": (
        RelationshipAttribute.BIOLOGICAL,
        RelationshipAttribute.ADOPTED,
        RelationshipAttribute.STEP,
        RelationshipAttribute.FOSTER,
    ),
    "legal": (
        RelationshipAttribute.LEGAL,
        RelationshipAttribute.INTENDED,
    ),
    "art": (
        RelationshipAttribute.IVF,
        RelationshipAttribute.IUI,
        RelationshipAttribute.DONOR_CONCEIVED,
    ),
    "sibling": (
        RelationshipAttribute.FULL,
        RelationshipAttribute.HALF,
        RelationshipAttribute.DONOR_SIBLING,
        RelationshipAttribute.STEP_SIBLING,
    ),
    "donor": (
        RelationshipAttribute.SPERM_DONOR,
        RelationshipAttribute.EGG_DONOR,
        RelationshipAttribute.EMBRYO_DONOR,
    ),
}

# Attributes that survive onto the reciprocal edge of any relationship
PRESERVED_ON_RECIPROCAL = frozenset(
    ATTRIBUTE_CATEGORIES["biological"]
    + ATTRIBUTE_CATEGORIES["legal"]
    + ATTRIBUTE_CATEGORIES["art"]
)

SIBLING_ATTRIBUTES = frozenset(ATTRIBUTE_CATEGORIES["sibling"])


def get_relevant_categories(relationship_type: str) -> list[str]:
    """Attribute categories a UI should offer for a relationship type."""
    base = ["biological", "legal"]

    if relationship_type == "sibling":
        return base + ["art", "sibling"]
    if relationship_type == "donor":
        return ["donor"]
    if relationship_type in ("parent", "child"):
        return base + ["art"]
    if relationship_type == "partner":
        return ["legal"]
    return base
