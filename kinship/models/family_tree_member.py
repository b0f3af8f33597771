import uuid

from sqlalchemy import Column, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func

from kinship.database import Base


class FamilyTreeMember(Base):
    __tablename__ = "family_tree_members"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))

    family_tree_id = Column(String, nullable=False, index=True)

    person_id = Column(
        String,
        ForeignKey("persons.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    created_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    __table_args__ = (
        UniqueConstraint(
            "family_tree_id",
            "person_id",
            name="uq_family_tree_members_person",
        ),
    )
