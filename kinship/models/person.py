import uuid

from sqlalchemy import Column, String, Boolean, DateTime
from sqlalchemy.sql import func

from kinship.database import Base


class Person(Base):
    __tablename__ = "persons"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))

    name = Column(String, nullable=False)

    # male / female / other (nullable = unknown)
    gender = Column(String, nullable=True)

    # Partial dates allowed: YYYY, YYYY-MM, YYYY-MM-DD
    date_of_birth = Column(String, nullable=True)
    date_of_death = Column(String, nullable=True)

    donor = Column(Boolean, default=False, nullable=False)
    is_self = Column(Boolean, default=False, nullable=False)

    # living | deceased
    status = Column(String, default="living", nullable=False)

    created_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
