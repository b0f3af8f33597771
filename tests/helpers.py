"""Builders for persons and connections used across the test suite."""

from kinship.schemas.connection_schema import Connection, ConnectionMetadata
from kinship.schemas.person_schema import Person


def person(person_id, name=None, **fields):
    return Person(id=person_id, name=name or person_id.title(), **fields)


def edge(edge_id, from_id, to_id, relationship_type, attributes=None, **fields):
    metadata = ConnectionMetadata(attributes=attributes) if attributes else None
    return Connection(
        id=edge_id,
        from_person_id=from_id,
        to_person_id=to_id,
        relationship_type=relationship_type,
        metadata=metadata,
        **fields,
    )
