from typing import Optional, Sequence

from kinship.config import settings
from kinship.core.generation_utils import get_generation_stats, process_connections
from kinship.core.relationship_hierarchy import RelationshipHierarchy
from kinship.core.union_processing import UnionProcessingService
from kinship.schemas.connection_schema import Connection
from kinship.schemas.graph_schema import GraphAnalysisOut
from kinship.schemas.person_schema import Person
from kinship.schemas.union_schema import UnionProcessingConfig


def default_union_config() -> UnionProcessingConfig:
    return UnionProcessingConfig(
        min_shared_children=settings.UNION_MIN_SHARED_CHILDREN,
        include_single_parents=settings.UNION_INCLUDE_SINGLE_PARENTS,
    )


def analyze_graph(
    persons: Sequence[Person],
    connections: Sequence[Connection],
    union_config: Optional[UnionProcessingConfig] = None,
) -> GraphAnalysisOut:
    """Every derived view of one persons+connections snapshot."""
    processed = process_connections(persons, connections)
    valid = processed.valid_connections

    generations = processed.generation_map
    hierarchy = RelationshipHierarchy(persons, valid)
    unions = UnionProcessingService(union_config or default_union_config())

    return GraphAnalysisOut(
        generations=generations,
        generation_stats=get_generation_stats(generations),
        unions=unions.process_connections(persons, valid),
        consistency=hierarchy.validate_relationship_consistency(),
        stats=hierarchy.get_family_tree_stats(),
    )
