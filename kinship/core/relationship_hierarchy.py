"""
Traversals over a family graph of persons and typed connections.

Every walk is iterative with an explicit visited set, so malformed or
cyclic input cannot recurse without bound.
"""

from collections import defaultdict
from typing import Iterable, Mapping, Optional, Sequence

from kinship.core.relationship_attributes import (
    PRESERVED_ON_RECIPROCAL,
    SIBLING_ATTRIBUTES,
    RelationshipAttribute,
)
from kinship.core.relationship_types import (
    DEFAULT_REGISTRY,
    RelationshipTypeRegistry,
)
from kinship.schemas.connection_schema import Connection
from kinship.schemas.graph_schema import FamilyTreeStats, GraphConsistencyReport
from kinship.schemas.person_schema import Person


PARENT_TYPE = "parent"
DEFAULT_MAX_DEPTH = 10

# Types that may carry a step attribute and still mean "raises this child"
STEP_PARENT_CARRIERS = ("parent", "social_parent")

# Sibling types never indicate a step parent, even though one contains "step"
SIBLING_TYPES = ("sibling", "half_sibling", "step_sibling")

# Reciprocals for relationship words outside the stored vocabulary
EXTENDED_RECIPROCALS = {
    "gestational_carrier": "child",
    "surrogate": "child",
    "intended_parent": "child",
    "step_parent": "step_child",
    "step_child": "step_parent",
    "foster_parent": "foster_child",
    "foster_child": "foster_parent",
    "adoptive_parent": "adopted_child",
    "adopted_child": "adoptive_parent",
}


def longest_parent_depth(
    person_id: str,
    parents_of: Mapping[str, Sequence[str]],
    memo: dict[str, int],
) -> int:
    """
    Depth of ``person_id`` below its furthest root ancestor.

    A person with no parents has depth 0; otherwise 1 + the deepest parent.
    Results land in ``memo``. A parent still on the current walk (a cycle)
    counts as depth 0, which breaks the loop.
    """
    if person_id in memo:
        return memo[person_id]

    on_path: set[str] = set()
    stack: list[tuple[str, bool]] = [(person_id, False)]

    while stack:
        node, expanded = stack.pop()

        if expanded:
            on_path.discard(node)
            parents = parents_of.get(node, ())
            if parents:
                memo[node] = 1 + max(memo.get(parent, 0) for parent in parents)
            else:
                memo[node] = 0
            continue

        if node in memo or node in on_path:
            continue

        on_path.add(node)
        stack.append((node, True))
        for parent in parents_of.get(node, ()):
            if parent not in memo and parent not in on_path:
                stack.append((parent, False))

    return memo[person_id]


def _date_parts(value: str) -> tuple[int, ...]:
    return tuple(int(part) for part in value.split("-"))


def born_on_or_before(child_birth: str, parent_birth: str) -> bool:
    """Compare partial dates at the precision both of them carry."""
    child_parts = _date_parts(child_birth)
    parent_parts = _date_parts(parent_birth)
    shared = min(len(child_parts), len(parent_parts))
    return child_parts[:shared] <= parent_parts[:shared]


def get_reciprocal_relationship(
    relationship_type: str,
    registry: RelationshipTypeRegistry = DEFAULT_REGISTRY,
) -> str:
    """
    Reciprocal of a relationship word, falling back to the word itself.

    Unlike ``registry.get_reciprocal_type`` this also knows display-only
    words such as ``foster_parent`` and never returns None.
    """
    reciprocal = registry.get_reciprocal_type(relationship_type)
    if reciprocal:
        return reciprocal
    return EXTENDED_RECIPROCALS.get(relationship_type, relationship_type)


def get_reciprocal_attributes(
    relationship_type: str,
    attributes: Iterable[RelationshipAttribute],
) -> list[RelationshipAttribute]:
    """Attributes to copy onto the reciprocal edge."""
    attributes = list(attributes)
    preserved = [attr for attr in attributes if attr in PRESERVED_ON_RECIPROCAL]

    if relationship_type == "sibling":
        preserved += [attr for attr in attributes if attr in SIBLING_ATTRIBUTES]

    return preserved


class RelationshipHierarchy:
    def __init__(
        self,
        persons: Sequence[Person],
        connections: Sequence[Connection],
        registry: RelationshipTypeRegistry = DEFAULT_REGISTRY,
    ):
        self.persons = list(persons)
        self.connections = list(connections)
        self.registry = registry

        self._persons_by_id = {person.id: person for person in self.persons}
        self._incoming: dict[str, list[Connection]] = defaultdict(list)
        self._outgoing: dict[str, list[Connection]] = defaultdict(list)
        self._parents_of: dict[str, list[str]] = defaultdict(list)
        self._children_of: dict[str, list[str]] = defaultdict(list)

        for conn in self.connections:
            self._incoming[conn.to_person_id].append(conn)
            self._outgoing[conn.from_person_id].append(conn)
            if conn.relationship_type == PARENT_TYPE:
                self._parents_of[conn.to_person_id].append(conn.from_person_id)
                self._children_of[conn.from_person_id].append(conn.to_person_id)

        self._generation_memo: dict[str, int] = {}

    # ============================================================
    # HELPERS
    # ============================================================

    def _resolve(self, person_ids: Iterable[str]) -> list[Person]:
        """Look up persons, skipping unknown ids and repeats."""
        resolved: list[Person] = []
        seen: set[str] = set()
        for person_id in person_ids:
            if person_id in seen:
                continue
            seen.add(person_id)
            person = self._persons_by_id.get(person_id)
            if person is not None:
                resolved.append(person)
        return resolved

    def _step_parent_ids(self, person_id: str) -> set[str]:
        step_parents: set[str] = set()
        for conn in self._incoming.get(person_id, ()):
            rel = conn.relationship_type
            if rel in STEP_PARENT_CARRIERS and conn.has_attribute(RelationshipAttribute.STEP):
                step_parents.add(conn.from_person_id)
            elif "step" in rel and rel not in SIBLING_TYPES:
                step_parents.add(conn.from_person_id)
        return step_parents

    def _natural_parent_ids(self, person_id: str) -> set[str]:
        step_parents = self._step_parent_ids(person_id)
        return {
            parent_id
            for parent_id in self._parents_of.get(person_id, ())
            if parent_id not in step_parents
        }

    # ============================================================
    # DIRECT RELATIVES
    # ============================================================

    def get_parents(self, person_id: str) -> list[Person]:
        return self._resolve(self._parents_of.get(person_id, ()))

    def get_children(self, person_id: str) -> list[Person]:
        return self._resolve(self._children_of.get(person_id, ()))

    def get_siblings(self, person_id: str) -> list[Person]:
        sibling_ids = (
            child_id
            for parent_id in self._parents_of.get(person_id, ())
            for child_id in self._children_of.get(parent_id, ())
            if child_id != person_id
        )
        return self._resolve(sibling_ids)

    def get_sibling_type(self, person_a_id: str, person_b_id: str) -> str:
        """Classify two people as ``full``, ``half``, ``step`` or ``unknown`` siblings."""
        shared = self._natural_parent_ids(person_a_id) & self._natural_parent_ids(person_b_id)

        if len(shared) >= 2:
            return "full"
        if len(shared) == 1:
            return "half"

        if self._step_parent_ids(person_a_id) & self._step_parent_ids(person_b_id):
            return "step"

        return "unknown"

    def get_partners(self, person_id: str) -> list[Person]:
        partner_ids = []
        for conn in self._outgoing.get(person_id, []) + self._incoming.get(person_id, []):
            if conn.relationship_type not in ("partner", "spouse"):
                continue
            if conn.from_person_id == person_id:
                partner_ids.append(conn.to_person_id)
            else:
                partner_ids.append(conn.from_person_id)
        return self._resolve(partner_ids)

    def get_donors(self, person_id: str) -> list[Person]:
        return self._resolve(
            conn.from_person_id
            for conn in self._incoming.get(person_id, ())
            if conn.relationship_type == "donor"
        )

    def get_biological_parents(self, person_id: str) -> list[Person]:
        return self._resolve(
            conn.from_person_id
            for conn in self._incoming.get(person_id, ())
            if conn.relationship_type == PARENT_TYPE
            and conn.has_attribute(RelationshipAttribute.BIOLOGICAL)
        )

    def get_step_siblings(self, person_id: str) -> list[Person]:
        step_sibling_ids = (
            child_id
            for step_parent_id in sorted(self._step_parent_ids(person_id))
            for child_id in self._children_of.get(step_parent_id, ())
            if child_id != person_id
        )
        return self._resolve(step_sibling_ids)

    # ============================================================
    # GENERATIONS / CLOSURES
    # ============================================================

    def get_generation(self, person_id: str, base: int = 0) -> int:
        return base + longest_parent_depth(person_id, self._parents_of, self._generation_memo)

    def _collect(
        self,
        person_id: str,
        edges: Mapping[str, Sequence[str]],
        max_depth: int,
    ) -> list[Person]:
        collected: list[str] = []
        visited = {person_id}
        frontier = [person_id]

        for _ in range(max_depth):
            next_frontier = []
            for current in frontier:
                for relative in edges.get(current, ()):
                    if relative in visited:
                        continue
                    visited.add(relative)
                    collected.append(relative)
                    next_frontier.append(relative)
            if not next_frontier:
                break
            frontier = next_frontier

        return self._resolve(collected)

    def get_ancestors(self, person_id: str, max_depth: int = DEFAULT_MAX_DEPTH) -> list[Person]:
        """Ancestors up to ``max_depth`` generations away, nearest first."""
        return self._collect(person_id, self._parents_of, max_depth)

    def get_descendants(self, person_id: str, max_depth: int = DEFAULT_MAX_DEPTH) -> list[Person]:
        """Descendants up to ``max_depth`` generations away, nearest first."""
        return self._collect(person_id, self._children_of, max_depth)

    # ============================================================
    # VALIDATION
    # ============================================================

    def has_circular_relationship(self, person_id: str) -> bool:
        """
        True when a parent->child walk from ``person_id`` revisits a node on
        its own path. Shared ancestors reached by separate paths are fine.
        """
        on_path: set[str] = set()
        finished: set[str] = set()
        stack: list[tuple[str, bool]] = [(person_id, False)]

        while stack:
            node, expanded = stack.pop()

            if expanded:
                on_path.discard(node)
                finished.add(node)
                continue

            if node in finished:
                continue

            on_path.add(node)
            stack.append((node, True))
            for child_id in self._children_of.get(node, ()):
                if child_id in on_path:
                    return True
                if child_id not in finished:
                    stack.append((child_id, False))

        return False

    def find_age_inconsistencies(self) -> list[str]:
        problems: list[str] = []

        for conn in self.connections:
            if conn.relationship_type != PARENT_TYPE:
                continue

            parent = self._persons_by_id.get(conn.from_person_id)
            child = self._persons_by_id.get(conn.to_person_id)
            if not parent or not child:
                continue
            if not parent.date_of_birth or not child.date_of_birth:
                continue

            if born_on_or_before(child.date_of_birth, parent.date_of_birth):
                problems.append(
                    f"Age inconsistency: {child.name or child.id} "
                    f"({child.date_of_birth}) born on or before parent "
                    f"{parent.name or parent.id} ({parent.date_of_birth})"
                )

        return problems

    def validate_age_consistency(self) -> bool:
        return not self.find_age_inconsistencies()

    def find_duplicate_connections(self) -> list[str]:
        duplicates: list[str] = []
        seen: set[str] = set()

        for conn in self.connections:
            key = f"{conn.from_person_id}-{conn.to_person_id}-{conn.relationship_type}"
            if key in seen:
                duplicates.append(f"Duplicate connection detected: {key}")
            seen.add(key)

        return duplicates

    def validate_relationship_consistency(self) -> GraphConsistencyReport:
        cycles = [
            f"Circular relationship detected for person: {person.name or person.id}"
            for person in self.persons
            if self.has_circular_relationship(person.id)
        ]
        age_inconsistencies = self.find_age_inconsistencies()
        duplicates = self.find_duplicate_connections()

        errors = cycles + age_inconsistencies + duplicates

        return GraphConsistencyReport(
            is_valid=not errors,
            errors=errors,
            cycles=cycles,
            age_inconsistencies=age_inconsistencies,
            duplicates=duplicates,
        )

    # ============================================================
    # STATS
    # ============================================================

    def get_family_tree_stats(self) -> FamilyTreeStats:
        total_persons = len(self.persons)
        total_connections = len(self.connections)

        generations = {self.get_generation(person.id) for person in self.persons}
        roots = [p for p in self.persons if not self._parents_of.get(p.id)]
        leaves = [p for p in self.persons if not self._children_of.get(p.id)]

        average: float = 0.0
        if total_persons:
            average = total_connections / total_persons

        return FamilyTreeStats(
            total_persons=total_persons,
            total_connections=total_connections,
            generation_count=len(generations),
            root_persons=len(roots),
            leaf_persons=len(leaves),
            average_connections_per_person=average,
        )

    def get_person(self, person_id: str) -> Optional[Person]:
        return self._persons_by_id.get(person_id)
