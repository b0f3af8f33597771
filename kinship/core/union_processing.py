"""
Union inference for family tree diagrams.

Co-parents of shared children are grouped into a union node so a diagram
can draw one connector per couple instead of one line per parent. Output is
rebuilt from scratch on every call; ids are derived from the input only, so
identical input always yields identical unions and edges.
"""

import logging
from typing import Optional, Sequence

from kinship.schemas.connection_schema import Connection
from kinship.schemas.person_schema import Person
from kinship.schemas.union_schema import (
    EnhancedConnection,
    FamilyUnit,
    PotentialUnion,
    SiblingGroup,
    SingleParent,
    UnionAnalysis,
    UnionNode,
    UnionProcessedData,
    UnionProcessingConfig,
    UnionType,
)

logger = logging.getLogger(__name__)


PARENT_TYPE = "parent"
PARENT_EQUIVALENT_TYPES = (
    "parent",
    "father",
    "mother",
    "biological_parent",
    "adoptive_parent",
)

COUPLE_TYPES = ("spouse", "partner", "married")
MARRIAGE_TYPES = ("spouse", "married", "husband", "wife")
PARTNERSHIP_TYPES = ("partner", "girlfriend", "boyfriend")

# Confidence heuristic, tunable
BASE_CONFIDENCE = 0.5
COUPLE_BONUS = 0.3
PER_CHILD_BONUS = 0.1
MAX_CHILD_BONUS = 0.2


class UnionProcessingService:
    def __init__(self, config: Optional[UnionProcessingConfig] = None, **overrides):
        base = config or UnionProcessingConfig()
        self.config = base.model_copy(update=overrides) if overrides else base

    def process_connections(
        self,
        persons: Sequence[Person],
        connections: Sequence[Connection],
    ) -> UnionProcessedData:
        analysis = self.analyze_connections(persons, connections)
        unions = self.create_union_nodes(analysis)
        enhanced = self.create_enhanced_connections(connections, unions, analysis)
        family_units = self.create_family_units(unions, persons, enhanced)

        logger.debug(
            "Processed %d connections into %d unions and %d family units",
            len(connections),
            len(unions),
            len(family_units),
        )

        return UnionProcessedData(
            persons=list(persons),
            unions=unions,
            enhanced_connections=enhanced,
            family_units=family_units,
            original_connections=list(connections),
        )

    # ============================================================
    # ANALYSIS
    # ============================================================

    def analyze_connections(
        self,
        persons: Sequence[Person],
        connections: Sequence[Connection],
    ) -> UnionAnalysis:
        parent_children: dict[str, list[str]] = {}
        child_parents: dict[str, list[str]] = {}

        for conn in connections:
            if conn.relationship_type != PARENT_TYPE:
                continue
            parent_id, child_id = conn.from_person_id, conn.to_person_id
            if not parent_id or not child_id:
                continue
            children = parent_children.setdefault(parent_id, [])
            if child_id not in children:
                children.append(child_id)
            parents = child_parents.setdefault(child_id, [])
            if parent_id not in parents:
                parents.append(parent_id)

        analysis = UnionAnalysis()
        grouped_parents: set[str] = set()
        seen_parent_sets: set[frozenset[str]] = set()

        # Potential unions: one per distinct set of co-parents
        for parent_ids in child_parents.values():
            if len(parent_ids) < 2:
                continue

            grouped_parents.update(parent_ids)
            parent_set = frozenset(parent_ids)
            if parent_set in seen_parent_sets:
                continue
            seen_parent_sets.add(parent_set)

            shared = self._find_shared_children(parent_ids, parent_children)
            if len(shared) < self.config.min_shared_children:
                continue

            parents = self._persons_in(persons, parent_set)
            shared_children = self._persons_in(persons, set(shared))
            analysis.potential_unions.append(
                PotentialUnion(
                    parents=parents,
                    shared_children=shared_children,
                    confidence=self.calculate_union_confidence(
                        parent_set, len(shared), connections
                    ),
                    suggested_type=self.suggest_union_type(parents, connections),
                )
            )

        # Single parents: not already grouped with a co-parent
        persons_by_id = {person.id: person for person in persons}
        for parent_id, child_ids in parent_children.items():
            if parent_id in grouped_parents:
                continue
            parent = persons_by_id.get(parent_id)
            children = self._persons_in(persons, set(child_ids))
            if parent and children:
                analysis.single_parents.append(
                    SingleParent(parent=parent, children=children)
                )

        # Sibling groups: informational only
        grouped_children: set[str] = set()
        for child_id, parent_ids in child_parents.items():
            if child_id in grouped_children:
                continue
            siblings = self._find_shared_children(parent_ids, parent_children)
            if len(siblings) > 1:
                analysis.sibling_groups.append(
                    SiblingGroup(
                        siblings=self._persons_in(persons, set(siblings)),
                        common_parents=self._persons_in(persons, set(parent_ids)),
                    )
                )
                grouped_children.update(siblings)

        return analysis

    @staticmethod
    def _persons_in(persons: Sequence[Person], ids: set[str] | frozenset[str]) -> list[Person]:
        return [person for person in persons if person.id in ids]

    @staticmethod
    def _find_shared_children(
        parent_ids: Sequence[str],
        parent_children: dict[str, list[str]],
    ) -> list[str]:
        if not parent_ids:
            return []

        shared = list(parent_children.get(parent_ids[0], []))
        for parent_id in parent_ids[1:]:
            theirs = set(parent_children.get(parent_id, []))
            shared = [child_id for child_id in shared if child_id in theirs]
        return shared

    @staticmethod
    def _between(conn: Connection, parent_ids: set[str] | frozenset[str]) -> bool:
        return (
            conn.from_person_id in parent_ids
            and conn.to_person_id in parent_ids
            and conn.from_person_id != conn.to_person_id
        )

    def calculate_union_confidence(
        self,
        parent_ids: set[str] | frozenset[str],
        shared_child_count: int,
        connections: Sequence[Connection],
    ) -> float:
        confidence = BASE_CONFIDENCE

        if any(
            conn.relationship_type in COUPLE_TYPES and self._between(conn, parent_ids)
            for conn in connections
        ):
            confidence += COUPLE_BONUS

        confidence += min(shared_child_count * PER_CHILD_BONUS, MAX_CHILD_BONUS)

        return min(round(confidence, 4), 1.0)

    def suggest_union_type(
        self,
        parents: Sequence[Person],
        connections: Sequence[Connection],
    ) -> UnionType:
        parent_ids = {parent.id for parent in parents}

        couple_types = {
            conn.relationship_type
            for conn in connections
            if self._between(conn, parent_ids)
        }
        if couple_types & set(MARRIAGE_TYPES):
            return "marriage"
        if couple_types & set(PARTNERSHIP_TYPES):
            return "partnership"

        touches_donor_edge = any(
            "donor" in conn.relationship_type
            and (conn.from_person_id in parent_ids or conn.to_person_id in parent_ids)
            for conn in connections
        )
        if touches_donor_edge or any(parent.donor for parent in parents):
            return "donor_relationship"

        return "other"

    # ============================================================
    # UNION NODES
    # ============================================================

    def create_union_nodes(self, analysis: UnionAnalysis) -> list[UnionNode]:
        unions: list[UnionNode] = []

        for index, potential in enumerate(analysis.potential_unions):
            parent_ids = sorted(parent.id for parent in potential.parents)
            unions.append(
                UnionNode(
                    id=f"union_{index}_{'_'.join(parent_ids)}",
                    parents=potential.parents,
                    union_type=potential.suggested_type,
                    confidence=potential.confidence,
                )
            )

        if self.config.include_single_parents:
            for index, single in enumerate(analysis.single_parents):
                unions.append(
                    UnionNode(
                        id=f"single_union_{index}_{single.parent.id}",
                        parents=[single.parent],
                        union_type="other",
                    )
                )

        return unions

    # ============================================================
    # ENHANCED CONNECTIONS
    # ============================================================

    def create_enhanced_connections(
        self,
        connections: Sequence[Connection],
        unions: Sequence[UnionNode],
        analysis: Optional[UnionAnalysis] = None,
    ) -> list[EnhancedConnection]:
        # A parent may sit in several unions (one per partner); prefer the
        # union whose shared children include the child being routed.
        unions_by_parent: dict[str, list[UnionNode]] = {}
        union_children: dict[str, set[str]] = {}

        for union in unions:
            for parent in union.parents:
                unions_by_parent.setdefault(parent.id, []).append(union)

        if analysis is not None:
            for union, potential in zip(unions, analysis.potential_unions):
                union_children[union.id] = {c.id for c in potential.shared_children}
            if self.config.include_single_parents:
                singles = unions[len(analysis.potential_unions):]
                for union, single in zip(singles, analysis.single_parents):
                    union_children[union.id] = {c.id for c in single.children}

        enhanced: list[EnhancedConnection] = []
        emitted_union_edges: set[str] = set()

        for conn in connections:
            candidates = unions_by_parent.get(conn.from_person_id)

            if conn.relationship_type in PARENT_EQUIVALENT_TYPES and candidates:
                child_id = conn.to_person_id
                union = next(
                    (u for u in candidates if child_id in union_children.get(u.id, ())),
                    candidates[0],
                )
                edge_id = f"{union.id}_to_{child_id}"
                if edge_id in emitted_union_edges:
                    continue
                emitted_union_edges.add(edge_id)
                enhanced.append(
                    EnhancedConnection(
                        id=edge_id,
                        from_union_id=union.id,
                        to_person_id=child_id,
                        relationship_type="child",
                        original_connection_id=conn.id,
                    )
                )
                continue

            enhanced.append(
                EnhancedConnection(
                    id=conn.id,
                    from_person_id=conn.from_person_id,
                    to_person_id=conn.to_person_id,
                    relationship_type=conn.relationship_type,
                    original_connection_id=conn.id,
                    attributes=conn.metadata.model_dump(mode="json") if conn.metadata else None,
                )
            )

        return enhanced

    # ============================================================
    # FAMILY UNITS
    # ============================================================

    def create_family_units(
        self,
        unions: Sequence[UnionNode],
        persons: Sequence[Person],
        enhanced: Sequence[EnhancedConnection],
    ) -> list[FamilyUnit]:
        persons_by_id = {person.id: person for person in persons}
        units: list[FamilyUnit] = []

        for index, union in enumerate(unions):
            children = [
                persons_by_id[edge.to_person_id]
                for edge in enhanced
                if edge.from_union_id == union.id
                and edge.relationship_type == "child"
                and edge.to_person_id in persons_by_id
            ]
            family_name = union.parents[0].surname if union.parents else None

            units.append(
                FamilyUnit(
                    id=f"family_unit_{index}_{union.id}",
                    union=union,
                    children=children,
                    family_name=family_name,
                )
            )

        return units


def process_connections_with_unions(
    persons: Sequence[Person],
    connections: Sequence[Connection],
    config: Optional[UnionProcessingConfig] = None,
) -> UnionProcessedData:
    return UnionProcessingService(config).process_connections(persons, connections)
