import uuid

from sqlalchemy import (
    Column,
    String,
    Text,
    JSON,
    DateTime,
    ForeignKey,
    CheckConstraint,
    UniqueConstraint,
    Index,
)
from sqlalchemy.sql import func

from kinship.database import Base


class Connection(Base):
    __tablename__ = "connections"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))

    # ------------------------------------
    # Persons involved
    # ------------------------------------
    # Bidirectional types are stored with the smaller id here
    from_person_id = Column(
        String,
        ForeignKey("persons.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    to_person_id = Column(
        String,
        ForeignKey("persons.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    relationship_type = Column(String, nullable=False, index=True)

    # ------------------------------------
    # Scope
    # ------------------------------------
    family_tree_id = Column(String, nullable=True, index=True)
    group_id = Column(String, nullable=True)
    organization_id = Column(String, nullable=True)

    # ------------------------------------
    # Annotations
    # ------------------------------------
    notes = Column(Text, nullable=True)

    # "metadata" is reserved on declarative classes
    metadata_ = Column("metadata", JSON, nullable=True)

    # ------------------------------------
    # Timestamps
    # ------------------------------------
    created_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    __table_args__ = (
        CheckConstraint(
            "from_person_id != to_person_id",
            name="ck_connections_not_self",
        ),
        UniqueConstraint(
            "from_person_id",
            "to_person_id",
            "relationship_type",
            name="uq_connections_pair_type",
        ),
        Index(
            "ix_connections_tree_type",
            "family_tree_id",
            "relationship_type",
        ),
    )
