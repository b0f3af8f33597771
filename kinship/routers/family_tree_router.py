from typing import Optional, List

from fastapi import APIRouter, Depends, HTTPException, Query

from kinship.config import settings
from kinship.core.generation_utils import (
    calculate_generations,
    get_generation_stats,
    process_connections,
)
from kinship.core.relationship_hierarchy import RelationshipHierarchy
from kinship.core.service_access import get_connection_service
from kinship.core.union_processing import UnionProcessingService
from kinship.schemas.connection_schema import Connection
from kinship.schemas.graph_schema import (
    FamilyTreeStats,
    GraphConsistencyReport,
    TreeGenerationsOut,
)
from kinship.schemas.person_schema import Person
from kinship.schemas.union_schema import UnionProcessedData
from kinship.services.connection_service import ConnectionService
from kinship.services.graph_service import default_union_config


router = APIRouter(prefix="/family-trees", tags=["Family Tree"])


# ============================================================
# HELPERS
# ============================================================

def load_tree(service: ConnectionService, tree_id: str):
    """Persons of a tree plus the connections between them."""
    persons = service.store.get_tree_persons(tree_id)
    if not persons:
        raise HTTPException(404, "Tree not found or has no members")

    connections = service.get_connections_for_family_tree(tree_id)
    processed = process_connections(persons, connections)
    return persons, processed.valid_connections


# ============================================================
# ROUTES
# ============================================================

@router.get("/{tree_id}/connections", response_model=List[Connection])
def tree_connections(
    tree_id: str,
    service: ConnectionService = Depends(get_connection_service),
):
    return service.get_connections_for_family_tree(tree_id)


@router.get("/{tree_id}/generations", response_model=TreeGenerationsOut)
def tree_generations(
    tree_id: str,
    service: ConnectionService = Depends(get_connection_service),
):
    persons, connections = load_tree(service, tree_id)
    generations = calculate_generations(persons, connections)

    return {
        "generations": generations,
        "stats": get_generation_stats(generations),
    }


@router.get("/{tree_id}/unions", response_model=UnionProcessedData)
def tree_unions(
    tree_id: str,
    min_shared_children: Optional[int] = Query(None, ge=1),
    include_single_parents: Optional[bool] = Query(None),
    service: ConnectionService = Depends(get_connection_service),
):
    persons, connections = load_tree(service, tree_id)

    overrides = {}
    if min_shared_children is not None:
        overrides["min_shared_children"] = min_shared_children
    if include_single_parents is not None:
        overrides["include_single_parents"] = include_single_parents

    unions = UnionProcessingService(default_union_config(), **overrides)
    return unions.process_connections(persons, connections)


@router.get("/{tree_id}/consistency", response_model=GraphConsistencyReport)
def tree_consistency(
    tree_id: str,
    service: ConnectionService = Depends(get_connection_service),
):
    persons, connections = load_tree(service, tree_id)
    return RelationshipHierarchy(persons, connections).validate_relationship_consistency()


@router.get("/{tree_id}/stats", response_model=FamilyTreeStats)
def tree_stats(
    tree_id: str,
    service: ConnectionService = Depends(get_connection_service),
):
    persons, connections = load_tree(service, tree_id)
    return RelationshipHierarchy(persons, connections).get_family_tree_stats()


@router.get("/{tree_id}/persons/{person_id}/ancestors", response_model=List[Person])
def person_ancestors(
    tree_id: str,
    person_id: str,
    max_depth: int = Query(settings.MAX_TRAVERSAL_DEPTH, ge=1),
    service: ConnectionService = Depends(get_connection_service),
):
    persons, connections = load_tree(service, tree_id)
    hierarchy = RelationshipHierarchy(persons, connections)
    if hierarchy.get_person(person_id) is None:
        raise HTTPException(404, "Person is not a member of this tree")
    return hierarchy.get_ancestors(person_id, max_depth=max_depth)


@router.get("/{tree_id}/persons/{person_id}/descendants", response_model=List[Person])
def person_descendants(
    tree_id: str,
    person_id: str,
    max_depth: int = Query(settings.MAX_TRAVERSAL_DEPTH, ge=1),
    service: ConnectionService = Depends(get_connection_service),
):
    persons, connections = load_tree(service, tree_id)
    hierarchy = RelationshipHierarchy(persons, connections)
    if hierarchy.get_person(person_id) is None:
        raise HTTPException(404, "Person is not a member of this tree")
    return hierarchy.get_descendants(person_id, max_depth=max_depth)
