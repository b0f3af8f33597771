import logging
from contextlib import contextmanager
from typing import Any, Optional, Sequence

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from kinship.core.errors import NotFoundError, StoreError, UNIQUE_VIOLATION
from kinship.models.connection import Connection as ConnectionRow
from kinship.models.family_tree_member import FamilyTreeMember
from kinship.models.person import Person as PersonRow
from kinship.schemas.connection_schema import Connection
from kinship.schemas.person_schema import Person

logger = logging.getLogger(__name__)


FILTERABLE_COLUMNS = {
    "id",
    "from_person_id",
    "to_person_id",
    "relationship_type",
    "family_tree_id",
    "group_id",
    "organization_id",
}


def _error_code(exc: IntegrityError) -> Optional[str]:
    # psycopg exposes the SQLSTATE; SQLite only has the message
    code = getattr(exc.orig, "pgcode", None) or getattr(exc.orig, "sqlstate", None)
    if code:
        return code
    if "UNIQUE constraint failed" in str(exc.orig):
        return UNIQUE_VIOLATION
    return None


def _to_schema(row: ConnectionRow) -> Connection:
    return Connection(
        id=row.id,
        from_person_id=row.from_person_id,
        to_person_id=row.to_person_id,
        relationship_type=row.relationship_type,
        family_tree_id=row.family_tree_id,
        group_id=row.group_id,
        organization_id=row.organization_id,
        notes=row.notes,
        metadata=row.metadata_,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _to_columns(record: dict[str, Any]) -> dict[str, Any]:
    columns = dict(record)
    if "metadata" in columns:
        columns["metadata_"] = columns.pop("metadata")
    return columns


class SqlAlchemyConnectionStore:
    """Connection store over a SQLAlchemy session (Postgres or SQLite)."""

    def __init__(self, db: Session):
        self.db = db

    # --------------------------------------------------
    # ERROR WRAPPING
    # --------------------------------------------------
    def _commit(self, action: str) -> None:
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise StoreError(f"Could not {action} connection: {exc.orig}", code=_error_code(exc)) from exc
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("Database error while trying to %s a connection: %s", action, exc)
            raise StoreError(f"Could not {action} connection: {exc}") from exc

    @contextmanager
    def _reading(self, what: str):
        try:
            yield
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("Database error while reading %s: %s", what, exc)
            raise StoreError(f"Could not read {what}: {exc}") from exc

    def _require(self, connection_id: str) -> ConnectionRow:
        with self._reading("connection"):
            row = self.db.query(ConnectionRow).filter(ConnectionRow.id == connection_id).first()
        if not row:
            raise NotFoundError(f"Connection {connection_id} not found")
        return row

    # --------------------------------------------------
    # WRITES
    # --------------------------------------------------
    def insert(self, record: dict[str, Any]) -> Connection:
        row = ConnectionRow(**_to_columns(record))
        self.db.add(row)
        self._commit("create")
        self.db.refresh(row)
        return _to_schema(row)

    def update(self, connection_id: str, changes: dict[str, Any]) -> Connection:
        row = self._require(connection_id)
        for column, value in _to_columns(changes).items():
            setattr(row, column, value)
        self._commit("update")
        self.db.refresh(row)
        return _to_schema(row)

    def delete(self, connection_id: str) -> None:
        row = self._require(connection_id)
        self.db.delete(row)
        self._commit("delete")

    # --------------------------------------------------
    # READS
    # --------------------------------------------------
    def get(self, connection_id: str) -> Optional[Connection]:
        with self._reading("connection"):
            row = self.db.query(ConnectionRow).filter(ConnectionRow.id == connection_id).first()
        return _to_schema(row) if row else None

    def find(self, **filters: Any) -> list[Connection]:
        unknown = set(filters) - FILTERABLE_COLUMNS
        if unknown:
            raise ValueError(f"Cannot filter connections by {sorted(unknown)}")

        with self._reading("connections"):
            rows = (
                self.db.query(ConnectionRow)
                .filter_by(**filters)
                .order_by(ConnectionRow.created_at, ConnectionRow.id)
                .all()
            )
        return [_to_schema(row) for row in rows]

    def find_between(self, person_ids: Sequence[str]) -> list[Connection]:
        if not person_ids:
            return []

        with self._reading("connections"):
            rows = (
                self.db.query(ConnectionRow)
                .filter(
                    ConnectionRow.from_person_id.in_(person_ids),
                    ConnectionRow.to_person_id.in_(person_ids),
                )
                .order_by(ConnectionRow.created_at, ConnectionRow.id)
                .all()
            )
        return [_to_schema(row) for row in rows]

    def list_all(self) -> list[Connection]:
        with self._reading("connections"):
            rows = (
                self.db.query(ConnectionRow)
                .order_by(ConnectionRow.created_at.desc(), ConnectionRow.id)
                .all()
            )
        return [_to_schema(row) for row in rows]

    def get_tree_member_ids(self, family_tree_id: str) -> list[str]:
        with self._reading("family tree members"):
            rows = (
                self.db.query(FamilyTreeMember.person_id)
                .filter(FamilyTreeMember.family_tree_id == family_tree_id)
                .all()
            )
        return [row.person_id for row in rows]

    def get_person_names(self, person_ids: Sequence[str]) -> dict[str, str]:
        if not person_ids:
            return {}

        with self._reading("person names"):
            rows = (
                self.db.query(PersonRow.id, PersonRow.name)
                .filter(PersonRow.id.in_(person_ids))
                .all()
            )
        return {row.id: row.name for row in rows}

    def get_tree_persons(self, family_tree_id: str) -> list[Person]:
        with self._reading("family tree persons"):
            rows = (
                self.db.query(PersonRow)
                .join(FamilyTreeMember, FamilyTreeMember.person_id == PersonRow.id)
                .filter(FamilyTreeMember.family_tree_id == family_tree_id)
                .order_by(PersonRow.created_at, PersonRow.id)
                .all()
            )
        return [Person.model_validate(row) for row in rows]
