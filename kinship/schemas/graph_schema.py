from pydantic import BaseModel, Field
from typing import Optional, List

from kinship.schemas.person_schema import Person
from kinship.schemas.connection_schema import Connection
from kinship.schemas.union_schema import UnionProcessedData, UnionProcessingConfig


# --------------------------------------------------
# GENERATIONS
# --------------------------------------------------
class GenerationInfo(BaseModel):
    generation: int
    depth: int
    color: str
    is_donor: bool = False


class GenerationStats(BaseModel):
    donor_count: int = 0
    total_generations: int = 0
    # generation -> person count, donors excluded
    generation_counts: dict[int, int] = Field(default_factory=dict)
    min_generation: Optional[int] = None
    max_generation: Optional[int] = None


class TreeGenerationsOut(BaseModel):
    generations: dict[str, GenerationInfo]
    stats: GenerationStats


class PaletteEntry(BaseModel):
    generation: int
    color: str
    label: str
    is_donor: bool = False


class ProcessedConnections(BaseModel):
    valid_connections: List[Connection]
    generational_connections: List[Connection]
    generation_map: dict[str, GenerationInfo]
    nodes: List[Person]


# --------------------------------------------------
# CONSISTENCY / STATS
# --------------------------------------------------
class GraphConsistencyReport(BaseModel):
    is_valid: bool
    errors: List[str] = Field(default_factory=list)
    cycles: List[str] = Field(default_factory=list)
    age_inconsistencies: List[str] = Field(default_factory=list)
    duplicates: List[str] = Field(default_factory=list)


class FamilyTreeStats(BaseModel):
    total_persons: int
    total_connections: int
    generation_count: int
    root_persons: int
    leaf_persons: int
    average_connections_per_person: float


# --------------------------------------------------
# ANALYZE (caller-supplied graph)
# --------------------------------------------------
class GraphPayload(BaseModel):
    persons: List[Person]
    connections: List[Connection]
    union_config: Optional[UnionProcessingConfig] = None


class GraphAnalysisOut(BaseModel):
    generations: dict[str, GenerationInfo]
    generation_stats: GenerationStats
    unions: UnionProcessedData
    consistency: GraphConsistencyReport
    stats: FamilyTreeStats
