"""
Single-edge and edge-pair rules for connections.

Canonical direction: for bidirectional types the lexicographically smaller
person id is always stored as ``from_person_id``, so one unordered pair maps
to one stored edge. Directional types keep the caller's direction.
"""

from typing import Any, Iterable, Mapping, Optional, Sequence, TypeVar

from kinship.core.relationship_types import (
    DEFAULT_REGISTRY,
    RelationshipTypeRegistry,
)
from kinship.schemas.connection_schema import Connection


EdgeT = TypeVar("EdgeT", bound=Connection)

SELF_RELATIONSHIP_ERROR = "A person cannot have a relationship with themselves"


def _field(data: Any, name: str) -> Any:
    if isinstance(data, Mapping):
        return data.get(name)
    return getattr(data, name, None)


class ConnectionUtils:
    def __init__(self, registry: RelationshipTypeRegistry = DEFAULT_REGISTRY):
        self.registry = registry

    # --------------------------------------------------
    # TYPE RULES
    # --------------------------------------------------
    def is_bidirectional(self, relationship_type: Optional[str]) -> bool:
        return self.registry.is_bidirectional(relationship_type)

    def get_reciprocal_type(self, relationship_type: Optional[str]) -> Optional[str]:
        return self.registry.get_reciprocal_type(relationship_type)

    def get_canonical_direction(
        self,
        person_a_id: str,
        person_b_id: str,
        relationship_type: Optional[str],
    ) -> tuple[str, str]:
        """Return ``(from_person_id, to_person_id)`` for storage."""
        if self.is_bidirectional(relationship_type):
            if person_b_id < person_a_id:
                return person_b_id, person_a_id
        return person_a_id, person_b_id

    # --------------------------------------------------
    # EDGE COMPARISON
    # --------------------------------------------------
    def edge_key(self, edge: Connection) -> str:
        if self.is_bidirectional(edge.relationship_type):
            low, high = sorted((edge.from_person_id, edge.to_person_id))
            return f"{edge.relationship_type}:{low}-{high}"
        return f"{edge.relationship_type}:{edge.from_person_id}-{edge.to_person_id}"

    def are_equivalent(self, first: Connection, second: Connection) -> bool:
        if first.relationship_type != second.relationship_type:
            return False

        if (
            first.from_person_id == second.from_person_id
            and first.to_person_id == second.to_person_id
        ):
            return True

        return (
            self.is_bidirectional(first.relationship_type)
            and first.from_person_id == second.to_person_id
            and first.to_person_id == second.from_person_id
        )

    def is_reciprocal_pair(self, first: Connection, second: Connection) -> bool:
        """
        True when ``second`` mirrors ``first`` with a reciprocal type, e.g.
        A->B parent and B->A child, or A->B donor and B->A child.
        """
        if (
            first.from_person_id != second.to_person_id
            or first.to_person_id != second.from_person_id
        ):
            return False

        return (
            self.get_reciprocal_type(first.relationship_type) == second.relationship_type
            or self.get_reciprocal_type(second.relationship_type) == first.relationship_type
        )

    def deduplicate(self, connections: Iterable[EdgeT]) -> list[EdgeT]:
        """Drop equivalent edges, keeping the first one seen."""
        unique: list[EdgeT] = []
        seen: set[str] = set()

        for connection in connections:
            key = self.edge_key(connection)
            if key in seen:
                continue
            seen.add(key)
            unique.append(connection)

        return unique

    def exists(
        self,
        connections: Sequence[Connection],
        from_person_id: str,
        to_person_id: str,
        relationship_type: str,
    ) -> bool:
        probe = Connection(
            id="",
            from_person_id=from_person_id,
            to_person_id=to_person_id,
            relationship_type=relationship_type,
        )
        return any(self.are_equivalent(conn, probe) for conn in connections)

    # --------------------------------------------------
    # VALIDATION
    # --------------------------------------------------
    def validate(self, data: Any) -> list[str]:
        """
        Check connection input.

        ``data`` may be a ``ConnectionCreate`` or a plain mapping. Every
        failing rule contributes one message; an empty list means valid.
        """
        errors: list[str] = []

        from_person_id = _field(data, "from_person_id")
        to_person_id = _field(data, "to_person_id")
        relationship_type = _field(data, "relationship_type")

        if not from_person_id:
            errors.append("From person is required")
        if not to_person_id:
            errors.append("To person is required")
        if not relationship_type:
            errors.append("Relationship type is required")

        if from_person_id and to_person_id and from_person_id == to_person_id:
            errors.append(SELF_RELATIONSHIP_ERROR)

        if relationship_type and not self.registry.is_known(relationship_type):
            errors.append("Invalid relationship type")

        return errors
