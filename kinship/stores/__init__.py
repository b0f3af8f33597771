from kinship.stores.base import ConnectionStore
from kinship.stores.sqlalchemy_store import SqlAlchemyConnectionStore
from kinship.stores.supabase_store import SupabaseConnectionStore

__all__ = [
    "ConnectionStore",
    "SqlAlchemyConnectionStore",
    "SupabaseConnectionStore",
]
