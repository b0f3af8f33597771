from fastapi import Depends, HTTPException
from sqlalchemy.orm import Session

from kinship.config import settings
from kinship.core.errors import (
    DuplicateConnectionError,
    KinshipError,
    NotFoundError,
    ValidationError,
)
from kinship.database import SessionLocal
from kinship.services.connection_service import ConnectionService
from kinship.stores.base import ConnectionStore
from kinship.stores.sqlalchemy_store import SqlAlchemyConnectionStore
from kinship.stores.supabase_store import SupabaseConnectionStore


# --------------------------------------------------
# DB dependency
# --------------------------------------------------
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_connection_store(db: Session = Depends(get_db)) -> ConnectionStore:
    if settings.STORE_BACKEND == "supabase":
        return SupabaseConnectionStore()
    return SqlAlchemyConnectionStore(db)


def get_connection_service(
    store: ConnectionStore = Depends(get_connection_store),
) -> ConnectionService:
    return ConnectionService(store)


# --------------------------------------------------
# Error translation
# --------------------------------------------------
def to_http_error(exc: KinshipError) -> HTTPException:
    if isinstance(exc, ValidationError):
        return HTTPException(status_code=422, detail=exc.messages)
    if isinstance(exc, DuplicateConnectionError):
        return HTTPException(status_code=409, detail=str(exc))
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=404, detail=str(exc))
    return HTTPException(status_code=502, detail=str(exc))
