from pydantic import BaseModel, Field
from typing import Optional, List, Literal, Any

from kinship.schemas.person_schema import Person
from kinship.schemas.connection_schema import Connection


UnionType = Literal["marriage", "partnership", "donor_relationship", "other"]


class UnionProcessingConfig(BaseModel):
    # Minimum number of shared children before parents form a union
    min_shared_children: int = 1
    # Materialise union nodes for single parents too
    include_single_parents: bool = False
    # Part of the public contract; not consulted by union detection
    group_siblings: bool = True


class UnionNode(BaseModel):
    id: str
    parents: List[Person]
    union_type: UnionType
    confidence: Optional[float] = None


class EnhancedConnection(BaseModel):
    """
    An edge from either a person or a union node.

    Parent edges whose parent sits in a union are rerouted through the
    union; everything else passes through with its original fields.
    """

    id: str
    from_person_id: Optional[str] = None
    from_union_id: Optional[str] = None
    to_person_id: Optional[str] = None
    relationship_type: str
    original_connection_id: Optional[str] = None
    attributes: Optional[dict[str, Any]] = None


class FamilyUnit(BaseModel):
    id: str
    union: UnionNode
    children: List[Person]
    family_name: Optional[str] = None


class PotentialUnion(BaseModel):
    parents: List[Person]
    shared_children: List[Person]
    confidence: float
    suggested_type: UnionType


class SingleParent(BaseModel):
    parent: Person
    children: List[Person]


class SiblingGroup(BaseModel):
    siblings: List[Person]
    common_parents: List[Person]


class UnionAnalysis(BaseModel):
    potential_unions: List[PotentialUnion] = Field(default_factory=list)
    single_parents: List[SingleParent] = Field(default_factory=list)
    sibling_groups: List[SiblingGroup] = Field(default_factory=list)


class UnionProcessedData(BaseModel):
    persons: List[Person]
    unions: List[UnionNode]
    enhanced_connections: List[EnhancedConnection]
    family_units: List[FamilyUnit]
    original_connections: List[Connection]
