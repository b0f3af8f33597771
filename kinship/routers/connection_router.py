from typing import Optional, List

from fastapi import APIRouter, Depends, HTTPException, Query

from kinship.core.errors import KinshipError
from kinship.core.relationship_types import DEFAULT_REGISTRY
from kinship.core.service_access import get_connection_service, to_http_error
from kinship.schemas.connection_schema import (
    CleanupResult,
    Connection,
    ConnectionAudit,
    ConnectionCreate,
    ConnectionExistsOut,
    ConnectionUpdate,
    ConnectionUpdatePayload,
    ConnectionWithDetails,
    ReciprocalResult,
)
from kinship.services.connection_service import ConnectionService


router = APIRouter(prefix="/connections", tags=["Connections"])


# --------------------------------------------------
# RELATIONSHIP TYPES
# --------------------------------------------------
@router.get("/types")
def list_relationship_types():
    return DEFAULT_REGISTRY.get_for_selection()


# --------------------------------------------------
# CREATE (with reciprocal)
# --------------------------------------------------
@router.post("", response_model=ReciprocalResult, status_code=201)
def create_connection(
    payload: ConnectionCreate,
    service: ConnectionService = Depends(get_connection_service),
):
    try:
        return service.create_connection_with_reciprocal(payload)
    except KinshipError as exc:
        raise to_http_error(exc)


# --------------------------------------------------
# LISTINGS
# --------------------------------------------------
@router.get("/all", response_model=List[Connection])
def list_all_connections(
    service: ConnectionService = Depends(get_connection_service),
):
    return service.get_all_connections()


@router.get("/person/{person_id}", response_model=List[ConnectionWithDetails])
def list_person_connections(
    person_id: str,
    service: ConnectionService = Depends(get_connection_service),
):
    return service.get_connections_for_person(person_id)


@router.get("/exists", response_model=ConnectionExistsOut)
def connection_exists(
    from_person_id: str = Query(...),
    to_person_id: str = Query(...),
    relationship_type: str = Query(...),
    scope_id: Optional[str] = Query(None),
    service: ConnectionService = Depends(get_connection_service),
):
    exists = service.connection_exists(
        from_person_id, to_person_id, relationship_type, scope_id
    )
    return {"exists": exists}


# --------------------------------------------------
# MAINTENANCE
# --------------------------------------------------
@router.get("/audit", response_model=ConnectionAudit)
def audit_connections(
    service: ConnectionService = Depends(get_connection_service),
):
    return service.audit_connections()


@router.post("/cleanup", response_model=CleanupResult)
def cleanup_connections(
    service: ConnectionService = Depends(get_connection_service),
):
    return service.cleanup_duplicate_connections()


# --------------------------------------------------
# UPDATE (with reciprocal)
# --------------------------------------------------
@router.patch("/{connection_id}", response_model=ReciprocalResult)
def update_connection(
    connection_id: str,
    payload: ConnectionUpdatePayload,
    service: ConnectionService = Depends(get_connection_service),
):
    if not payload.model_fields_set:
        raise HTTPException(400, "Nothing to update")

    data = ConnectionUpdate(id=connection_id, **payload.model_dump(exclude_unset=True))
    try:
        return service.update_connection_with_reciprocal(data)
    except KinshipError as exc:
        raise to_http_error(exc)


# --------------------------------------------------
# DELETE (with reciprocal)
# --------------------------------------------------
@router.delete("/{connection_id}")
def delete_connection(
    connection_id: str,
    service: ConnectionService = Depends(get_connection_service),
):
    try:
        reciprocal_error = service.delete_connection_with_reciprocal(connection_id)
    except KinshipError as exc:
        raise to_http_error(exc)

    return {
        "message": "Connection deleted",
        "reciprocal_error": reciprocal_error,
    }
