import logging
from typing import Any, Optional, Sequence

import httpx
from postgrest.exceptions import APIError
from supabase import Client, create_client

from kinship.config import settings
from kinship.core.errors import NotFoundError, StoreError
from kinship.schemas.connection_schema import Connection
from kinship.schemas.person_schema import Person

logger = logging.getLogger(__name__)


CONNECTIONS = "connections"
PERSONS = "persons"
TREE_MEMBERS = "family_tree_members"

PERSON_COLUMNS = "id, name, gender, date_of_birth, date_of_death, donor, is_self, status"


def create_supabase_client() -> Client:
    if not settings.SUPABASE_URL or not settings.SUPABASE_KEY:
        raise ValueError("SUPABASE_URL and SUPABASE_KEY must be set to use the supabase store")
    return create_client(settings.SUPABASE_URL, settings.SUPABASE_KEY)


def _execute(query):
    try:
        return query.execute()
    except APIError as exc:
        logger.error("Supabase request failed (%s): %s", exc.code, exc.message)
        raise StoreError(exc.message or "Supabase request failed", code=exc.code) from exc
    except httpx.HTTPError as exc:
        logger.error("Supabase request could not be completed: %s", exc)
        raise StoreError(f"Supabase request failed: {exc}") from exc


def _apply_filters(query, filters: dict[str, Any]):
    for column, value in filters.items():
        if value is None:
            query = query.is_(column, "null")
        else:
            query = query.eq(column, value)
    return query


class SupabaseConnectionStore:
    """Connection store backed by Supabase (PostgREST) tables."""

    def __init__(self, client: Optional[Client] = None):
        self.client = client or create_supabase_client()

    def _connections(self):
        return self.client.table(CONNECTIONS)

    # --------------------------------------------------
    # WRITES
    # --------------------------------------------------
    def insert(self, record: dict[str, Any]) -> Connection:
        response = _execute(self._connections().insert(record))
        return Connection.model_validate(response.data[0])

    def update(self, connection_id: str, changes: dict[str, Any]) -> Connection:
        response = _execute(
            self._connections().update(changes).eq("id", connection_id)
        )
        if not response.data:
            raise NotFoundError(f"Connection {connection_id} not found")
        return Connection.model_validate(response.data[0])

    def delete(self, connection_id: str) -> None:
        response = _execute(self._connections().delete().eq("id", connection_id))
        if not response.data:
            raise NotFoundError(f"Connection {connection_id} not found")

    # --------------------------------------------------
    # READS
    # --------------------------------------------------
    def get(self, connection_id: str) -> Optional[Connection]:
        response = _execute(
            self._connections().select("*").eq("id", connection_id).limit(1)
        )
        if not response.data:
            return None
        return Connection.model_validate(response.data[0])

    def find(self, **filters: Any) -> list[Connection]:
        query = _apply_filters(self._connections().select("*"), filters)
        response = _execute(query.order("created_at"))
        return [Connection.model_validate(row) for row in response.data or []]

    def find_between(self, person_ids: Sequence[str]) -> list[Connection]:
        if not person_ids:
            return []

        ids = list(person_ids)
        response = _execute(
            self._connections()
            .select("*")
            .in_("from_person_id", ids)
            .in_("to_person_id", ids)
        )
        return [Connection.model_validate(row) for row in response.data or []]

    def list_all(self) -> list[Connection]:
        response = _execute(
            self._connections().select("*").order("created_at", desc=True)
        )
        return [Connection.model_validate(row) for row in response.data or []]

    def get_tree_member_ids(self, family_tree_id: str) -> list[str]:
        response = _execute(
            self.client.table(TREE_MEMBERS)
            .select("person_id")
            .eq("family_tree_id", family_tree_id)
        )
        return [row["person_id"] for row in response.data or []]

    def get_person_names(self, person_ids: Sequence[str]) -> dict[str, str]:
        if not person_ids:
            return {}

        response = _execute(
            self.client.table(PERSONS).select("id, name").in_("id", list(person_ids))
        )
        return {row["id"]: row["name"] for row in response.data or []}

    def get_tree_persons(self, family_tree_id: str) -> list[Person]:
        member_ids = self.get_tree_member_ids(family_tree_id)
        if not member_ids:
            return []

        response = _execute(
            self.client.table(PERSONS).select(PERSON_COLUMNS).in_("id", member_ids)
        )
        return [Person.model_validate(row) for row in response.data or []]
