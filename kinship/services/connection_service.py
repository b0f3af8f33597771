"""
Connection CRUD with reciprocal edge maintenance.

Reciprocal writes are best effort. The primary write happens first for
create/update and last for delete; if the reciprocal step fails the
failure is logged and reported on ``ReciprocalResult.reciprocal_error``,
and the primary result stands. There are no retries.
"""

import logging
from collections import defaultdict
from typing import Any, Optional

from kinship.core.connection_utils import ConnectionUtils
from kinship.core.errors import (
    DuplicateConnectionError,
    KinshipError,
    NotFoundError,
    StoreError,
    ValidationError,
)
from kinship.schemas.connection_schema import (
    SHARED_FIELDS,
    CleanupResult,
    Connection,
    ConnectionAudit,
    ConnectionCreate,
    ConnectionUpdate,
    ConnectionWithDetails,
    DuplicateGroup,
    ReciprocalResult,
)
from kinship.stores.base import ConnectionStore

logger = logging.getLogger(__name__)


def _dump_fields(data: Any, fields, exclude_unset: bool = False) -> dict[str, Any]:
    dumped = data.model_dump(mode="json", exclude_unset=exclude_unset)
    return {field: dumped[field] for field in fields if field in dumped}


class ConnectionService:
    def __init__(self, store: ConnectionStore, utils: Optional[ConnectionUtils] = None):
        self.store = store
        self.utils = utils or ConnectionUtils()

    # ============================================================
    # CREATE
    # ============================================================

    def create_connection(self, data: ConnectionCreate) -> Connection:
        errors = self.utils.validate(data)
        if errors:
            raise ValidationError(errors)

        from_person_id, to_person_id = self.utils.get_canonical_direction(
            data.from_person_id,
            data.to_person_id,
            data.relationship_type,
        )

        record = data.model_dump(mode="json")
        record["from_person_id"] = from_person_id
        record["to_person_id"] = to_person_id

        try:
            return self.store.insert(record)
        except StoreError as exc:
            if exc.is_unique_violation:
                raise DuplicateConnectionError() from exc
            raise

    def _reciprocal_type_for(self, relationship_type: Optional[str]) -> Optional[str]:
        """Reciprocal type worth storing, or None for self-reciprocal/undefined."""
        reciprocal = self.utils.get_reciprocal_type(relationship_type)
        if not reciprocal or reciprocal == relationship_type:
            return None
        return reciprocal

    def create_connection_with_reciprocal(self, data: ConnectionCreate) -> ReciprocalResult:
        main = self.create_connection(data)

        reciprocal_type = self._reciprocal_type_for(data.relationship_type)
        if reciprocal_type is None:
            return ReciprocalResult(main=main)

        reciprocal_data = data.model_copy(
            update={
                "from_person_id": data.to_person_id,
                "to_person_id": data.from_person_id,
                "relationship_type": reciprocal_type,
            }
        )

        try:
            reciprocal = self.create_connection(reciprocal_data)
        except KinshipError as exc:
            logger.warning(
                "Created connection %s but its reciprocal %s edge failed: %s",
                main.id,
                reciprocal_type,
                exc,
            )
            return ReciprocalResult(main=main, reciprocal_error=str(exc))

        return ReciprocalResult(main=main, reciprocal=reciprocal)

    # ============================================================
    # READ
    # ============================================================

    def get_connections_for_person(self, person_id: str) -> list[ConnectionWithDetails]:
        outgoing = self.store.find(from_person_id=person_id)
        incoming = self.store.find(to_person_id=person_id)

        other_ids = [c.to_person_id for c in outgoing] + [c.from_person_id for c in incoming]
        names = self.store.get_person_names(sorted(set(other_ids)))

        detailed: list[ConnectionWithDetails] = []
        for conn in outgoing:
            detailed.append(
                ConnectionWithDetails(
                    **conn.model_dump(),
                    direction="outgoing",
                    other_person_id=conn.to_person_id,
                    other_person_name=names.get(conn.to_person_id) or "Unknown",
                )
            )
        for conn in incoming:
            detailed.append(
                ConnectionWithDetails(
                    **conn.model_dump(),
                    direction="incoming",
                    other_person_id=conn.from_person_id,
                    other_person_name=names.get(conn.from_person_id) or "Unknown",
                )
            )

        # Outgoing copies come first, so they win both passes
        unique = self.utils.deduplicate(detailed)
        result: list[ConnectionWithDetails] = []
        for conn in unique:
            if any(self.utils.is_reciprocal_pair(kept, conn) for kept in result):
                continue
            result.append(conn)

        return result

    def get_connections_for_family_tree(self, family_tree_id: str) -> list[Connection]:
        tagged = self.store.find(family_tree_id=family_tree_id)

        member_ids = self.store.get_tree_member_ids(family_tree_id)
        logger.info(
            "Family tree %s: %d members, %d tagged connections",
            family_tree_id,
            len(member_ids),
            len(tagged),
        )

        untagged = [
            conn
            for conn in self.store.find_between(member_ids)
            if conn.family_tree_id is None
        ]

        connections: list[Connection] = []
        seen_ids: set[str] = set()
        for conn in tagged + untagged:
            if conn.id in seen_ids:
                continue
            seen_ids.add(conn.id)
            connections.append(conn)

        return connections

    def get_all_connections(self) -> list[Connection]:
        return self.store.list_all()

    def connection_exists(
        self,
        from_person_id: str,
        to_person_id: str,
        relationship_type: str,
        scope_id: Optional[str] = None,
    ) -> bool:
        from_id, to_id = self.utils.get_canonical_direction(
            from_person_id, to_person_id, relationship_type
        )

        directions = [(from_id, to_id)]
        if self.utils.is_bidirectional(relationship_type):
            # Rows written before canonicalisation may be stored reversed
            directions.append((to_id, from_id))

        for candidate_from, candidate_to in directions:
            filters: dict[str, Any] = {
                "from_person_id": candidate_from,
                "to_person_id": candidate_to,
                "relationship_type": relationship_type,
            }
            if scope_id is not None:
                filters["family_tree_id"] = scope_id
            if self.store.find(**filters):
                return True

        return False

    # ============================================================
    # UPDATE
    # ============================================================

    def _validate_update(self, data: ConnectionUpdate) -> None:
        if "relationship_type" not in data.model_fields_set:
            return
        if not data.relationship_type:
            raise ValidationError(["Relationship type is required"])
        if not self.utils.registry.is_known(data.relationship_type):
            raise ValidationError(["Invalid relationship type"])

    def _conflicts(
        self,
        connection_id: str,
        from_person_id: str,
        to_person_id: str,
        relationship_type: str,
    ) -> bool:
        """True when another stored edge already holds this pair and type."""
        directions = [(from_person_id, to_person_id)]
        if self.utils.is_bidirectional(relationship_type):
            directions.append((to_person_id, from_person_id))

        return any(
            conn.id != connection_id
            for candidate_from, candidate_to in directions
            for conn in self.store.find(
                from_person_id=candidate_from,
                to_person_id=candidate_to,
                relationship_type=relationship_type,
            )
        )

    def update_connection(self, data: ConnectionUpdate) -> Connection:
        self._validate_update(data)
        changes = _dump_fields(
            data, ("relationship_type",) + SHARED_FIELDS, exclude_unset=True
        )

        if "relationship_type" in changes:
            existing = self.store.get(data.id)
            if existing is None:
                raise NotFoundError(f"Connection {data.id} not found")

            relationship_type = changes["relationship_type"]
            from_person_id, to_person_id = self.utils.get_canonical_direction(
                existing.from_person_id, existing.to_person_id, relationship_type
            )
            if self._conflicts(data.id, from_person_id, to_person_id, relationship_type):
                raise DuplicateConnectionError()
            if (from_person_id, to_person_id) != (existing.from_person_id, existing.to_person_id):
                changes["from_person_id"] = from_person_id
                changes["to_person_id"] = to_person_id

        try:
            return self.store.update(data.id, changes)
        except StoreError as exc:
            if exc.is_unique_violation:
                raise DuplicateConnectionError() from exc
            raise

    def _find_reciprocal(self, connection: Connection) -> Optional[Connection]:
        reciprocal_type = self._reciprocal_type_for(connection.relationship_type)
        if reciprocal_type is None:
            return None

        matches = self.store.find(
            from_person_id=connection.to_person_id,
            to_person_id=connection.from_person_id,
            relationship_type=reciprocal_type,
        )
        return matches[0] if matches else None

    def _sync_reciprocal(
        self,
        existing: Connection,
        main: Connection,
        data: ConnectionUpdate,
    ) -> Optional[Connection]:
        type_changed = "relationship_type" in data.model_fields_set
        reciprocal = self._find_reciprocal(existing)
        new_reciprocal_type = self._reciprocal_type_for(main.relationship_type)

        if reciprocal is None:
            if type_changed and new_reciprocal_type:
                created = ConnectionCreate(
                    **_dump_fields(main, SHARED_FIELDS),
                    from_person_id=main.to_person_id,
                    to_person_id=main.from_person_id,
                    relationship_type=new_reciprocal_type,
                )
                return self.create_connection(created)
            logger.info("No reciprocal found for connection %s; updated main only", main.id)
            return None

        if new_reciprocal_type is None:
            # The new type keeps no second edge
            self.store.delete(reciprocal.id)
            logger.info("Removed reciprocal %s of connection %s", reciprocal.id, main.id)
            return None

        changes = _dump_fields(data, SHARED_FIELDS, exclude_unset=True)
        changes["relationship_type"] = new_reciprocal_type
        return self.store.update(reciprocal.id, changes)

    def update_connection_with_reciprocal(self, data: ConnectionUpdate) -> ReciprocalResult:
        self._validate_update(data)

        existing = self.store.get(data.id)
        if existing is None:
            raise NotFoundError(f"Connection {data.id} not found")

        main = self.update_connection(data)

        try:
            reciprocal = self._sync_reciprocal(existing, main, data)
        except KinshipError as exc:
            logger.warning(
                "Updated connection %s but its reciprocal could not be synced: %s",
                main.id,
                exc,
            )
            return ReciprocalResult(main=main, reciprocal_error=str(exc))

        return ReciprocalResult(main=main, reciprocal=reciprocal)

    # ============================================================
    # DELETE
    # ============================================================

    def delete_connection(self, connection_id: str) -> None:
        self.store.delete(connection_id)

    def delete_connection_with_reciprocal(self, connection_id: str) -> Optional[str]:
        """
        Delete a connection, removing its reciprocal first.

        Returns the reciprocal sync error message, or None when the
        reciprocal was removed or never existed.
        """
        existing = self.store.get(connection_id)
        if existing is None:
            raise NotFoundError(f"Connection {connection_id} not found")

        reciprocal_error: Optional[str] = None
        try:
            reciprocal = self._find_reciprocal(existing)
            if reciprocal is not None:
                self.store.delete(reciprocal.id)
        except KinshipError as exc:
            logger.warning(
                "Could not delete reciprocal of connection %s: %s",
                connection_id,
                exc,
            )
            reciprocal_error = str(exc)

        self.store.delete(connection_id)
        return reciprocal_error

    # ============================================================
    # MAINTENANCE
    # ============================================================

    def _duplicate_groups(self, relationship_type: str) -> list[list[Connection]]:
        groups: dict[str, list[Connection]] = defaultdict(list)
        for conn in self.store.find(relationship_type=relationship_type):
            # Same key regardless of direction
            low, high = sorted((conn.from_person_id, conn.to_person_id))
            groups[f"{low}-{high}"].append(conn)
        return [group for group in groups.values() if len(group) > 1]

    def cleanup_duplicate_connections(self) -> CleanupResult:
        """
        Remove duplicate rows per relationship type, keeping the first of
        each group. Bidirectional duplicates are matched in either
        direction; directional ones only when stored the same way round.
        """
        result = CleanupResult()

        for relationship_type in self.utils.registry.get_all_types():
            try:
                groups = self._duplicate_groups(relationship_type)
            except StoreError as exc:
                result.errors.append(f"Error fetching {relationship_type} connections: {exc}")
                continue

            for group in groups:
                keeper = group[0]
                for conn in group[1:]:
                    if not self.utils.are_equivalent(keeper, conn):
                        continue
                    try:
                        self.store.delete(conn.id)
                        result.removed += 1
                    except KinshipError as exc:
                        result.errors.append(
                            f"Error deleting duplicate connection {conn.id}: {exc}"
                        )

        logger.info("Duplicate cleanup removed %d connections", result.removed)
        return result

    def audit_connections(self) -> ConnectionAudit:
        audit = ConnectionAudit()

        for relationship_type in self.utils.registry.get_all_types():
            connections = self.store.find(relationship_type=relationship_type)
            audit.by_type[relationship_type] = len(connections)
            audit.total += len(connections)

            for group in self._duplicate_groups(relationship_type):
                person_a, person_b = sorted(
                    (group[0].from_person_id, group[0].to_person_id)
                )
                audit.duplicates.append(
                    DuplicateGroup(
                        type=relationship_type,
                        person_a=person_a,
                        person_b=person_b,
                        count=len(group),
                        connection_ids=[conn.id for conn in group],
                    )
                )

        return audit
