"""
Persistence contract consumed by ConnectionService.

Stores raise ``StoreError`` for database failures (code ``23505`` for a
uniqueness violation) and ``NotFoundError`` when an update or delete target
is missing. Filters passed as ``None`` match NULL columns.
"""

from typing import Any, Optional, Protocol, Sequence

from kinship.schemas.connection_schema import Connection
from kinship.schemas.person_schema import Person


class ConnectionStore(Protocol):
    def insert(self, record: dict[str, Any]) -> Connection: ...

    def update(self, connection_id: str, changes: dict[str, Any]) -> Connection: ...

    def delete(self, connection_id: str) -> None: ...

    def get(self, connection_id: str) -> Optional[Connection]: ...

    def find(self, **filters: Any) -> list[Connection]: ...

    def find_between(self, person_ids: Sequence[str]) -> list[Connection]: ...

    def list_all(self) -> list[Connection]: ...

    def get_tree_member_ids(self, family_tree_id: str) -> list[str]: ...

    def get_person_names(self, person_ids: Sequence[str]) -> dict[str, str]: ...

    def get_tree_persons(self, family_tree_id: str) -> list[Person]: ...
