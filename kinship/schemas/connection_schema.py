from pydantic import BaseModel, Field
from typing import Optional, List, Literal
from datetime import datetime

from kinship.core.relationship_attributes import RelationshipAttribute


# --------------------------------------------------
# METADATA (closed attribute tags)
# --------------------------------------------------
class ConnectionMetadata(BaseModel):
    attributes: List[RelationshipAttribute] = Field(default_factory=list)

    def has(self, attribute: RelationshipAttribute) -> bool:
        return attribute in self.attributes


# --------------------------------------------------
# CONNECTION (stored edge)
# --------------------------------------------------
class Connection(BaseModel):
    id: str
    from_person_id: str
    to_person_id: str
    relationship_type: str
    family_tree_id: Optional[str] = None
    group_id: Optional[str] = None
    organization_id: Optional[str] = None
    notes: Optional[str] = None
    metadata: Optional[ConnectionMetadata] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

    def has_attribute(self, attribute: RelationshipAttribute) -> bool:
        return self.metadata is not None and self.metadata.has(attribute)


# --------------------------------------------------
# CREATE CONNECTION
# --------------------------------------------------
# Fields stay optional here so validation can report every missing one
class ConnectionCreate(BaseModel):
    from_person_id: Optional[str] = None
    to_person_id: Optional[str] = None
    relationship_type: Optional[str] = None
    family_tree_id: Optional[str] = None
    group_id: Optional[str] = None
    organization_id: Optional[str] = None
    notes: Optional[str] = None
    metadata: Optional[ConnectionMetadata] = None


# --------------------------------------------------
# UPDATE CONNECTION
# --------------------------------------------------
class ConnectionUpdatePayload(BaseModel):
    relationship_type: Optional[str] = None
    family_tree_id: Optional[str] = None
    group_id: Optional[str] = None
    organization_id: Optional[str] = None
    notes: Optional[str] = None
    metadata: Optional[ConnectionMetadata] = None


class ConnectionUpdate(ConnectionUpdatePayload):
    id: str


# Scope and annotation fields copied onto a reciprocal edge
SHARED_FIELDS = (
    "family_tree_id",
    "group_id",
    "organization_id",
    "notes",
    "metadata",
)


# --------------------------------------------------
# CONNECTION OUT (viewer-specific)
# --------------------------------------------------
class ConnectionWithDetails(Connection):
    direction: Literal["incoming", "outgoing"]
    other_person_id: str
    other_person_name: str = "Unknown"


# --------------------------------------------------
# SERVICE RESULTS
# --------------------------------------------------
class ReciprocalResult(BaseModel):
    main: Connection
    reciprocal: Optional[Connection] = None
    # Set when the best-effort reciprocal write failed
    reciprocal_error: Optional[str] = None


class CleanupResult(BaseModel):
    removed: int = 0
    errors: List[str] = Field(default_factory=list)


class DuplicateGroup(BaseModel):
    type: str
    person_a: str
    person_b: str
    count: int
    connection_ids: List[str]


class ConnectionAudit(BaseModel):
    total: int = 0
    by_type: dict[str, int] = Field(default_factory=dict)
    duplicates: List[DuplicateGroup] = Field(default_factory=list)


class ConnectionExistsOut(BaseModel):
    exists: bool
