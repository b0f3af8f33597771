"""
Generation assignment for family tree layout.

Generation 0 is the oldest generation; higher numbers are younger. Donors
sit at the generation of the recipient parent(s) of the child they donated
to, not one level above the child, and are drawn with ``DONOR_COLOR``.
"""

import logging
from collections import defaultdict
from typing import Sequence

from kinship.core.relationship_hierarchy import longest_parent_depth
from kinship.schemas.connection_schema import Connection
from kinship.schemas.graph_schema import (
    GenerationInfo,
    GenerationStats,
    PaletteEntry,
    ProcessedConnections,
)
from kinship.schemas.person_schema import Person

logger = logging.getLogger(__name__)


DONOR_TYPE = "donor"

# Edges that define the generation backbone
BACKBONE_TYPES = ("parent", "biological_parent")

GENERATIONAL_TYPES = ("parent", "child", "biological_parent", "social_parent")
SIBLING_TYPES = ("sibling", "half_sibling", "step_sibling")

GENERATION_COLORS = (
    "#8b5cf6",  # purple, generation 0
    "#3b82f6",  # blue
    "#10b981",  # green
    "#f59e0b",  # amber
    "#ef4444",  # red
    "#06b6d4",  # cyan
    "#84cc16",  # lime
    "#f97316",  # orange
    "#ec4899",  # pink
    "#6b7280",  # gray, generation 9+
)

DONOR_COLOR = "#9333ea"


def get_generation_color(generation: int) -> str:
    if generation < 0:
        return GENERATION_COLORS[0]
    if generation >= len(GENERATION_COLORS):
        return GENERATION_COLORS[-1]
    return GENERATION_COLORS[generation]


def get_donor_color() -> str:
    return DONOR_COLOR


def is_donor_connection(relationship_type: str) -> bool:
    return relationship_type == DONOR_TYPE


def is_generational_connection(relationship_type: str) -> bool:
    """Parent/child style edges. Donor edges are not generational."""
    return relationship_type in GENERATIONAL_TYPES


def is_sibling_connection(relationship_type: str) -> bool:
    return relationship_type in SIBLING_TYPES


def get_donor_connections(connections: Sequence[Connection]) -> list[Connection]:
    return [c for c in connections if is_donor_connection(c.relationship_type)]


def get_generational_connections(connections: Sequence[Connection]) -> list[Connection]:
    return [c for c in connections if is_generational_connection(c.relationship_type)]


def get_sibling_connections(connections: Sequence[Connection]) -> list[Connection]:
    return [c for c in connections if is_sibling_connection(c.relationship_type)]


def calculate_generations(
    persons: Sequence[Person],
    connections: Sequence[Connection],
) -> dict[str, GenerationInfo]:
    """
    Map every person id to its ``GenerationInfo``.

    Donor status is relational: only people on the giving side of a donor
    edge are flagged ``is_donor``. The ``Person.donor`` attribute is not
    consulted here.
    """
    parents_of: dict[str, list[str]] = defaultdict(list)
    donated_to: dict[str, list[str]] = defaultdict(list)

    for conn in connections:
        if conn.relationship_type in BACKBONE_TYPES:
            parents_of[conn.to_person_id].append(conn.from_person_id)
        elif is_donor_connection(conn.relationship_type):
            donated_to[conn.from_person_id].append(conn.to_person_id)

    # Donors are placed first from raw backbone depths; their placements then
    # seed the memo so a donor's own children sit below the placed donor.
    raw_memo: dict[str, int] = {}
    placements: dict[str, int] = {}
    for person in persons:
        if person.id not in donated_to:
            continue
        recipient_generations = [
            longest_parent_depth(parent_id, parents_of, raw_memo)
            for child_id in donated_to[person.id]
            for parent_id in parents_of.get(child_id, ())
            if parent_id != person.id
        ]
        placements[person.id] = min(recipient_generations, default=0)

    depth_memo: dict[str, int] = dict(placements)
    generation_map: dict[str, GenerationInfo] = {}

    for person in persons:
        if person.id in placements:
            generation = placements[person.id]
            generation_map[person.id] = GenerationInfo(
                generation=generation,
                depth=generation,
                color=DONOR_COLOR,
                is_donor=True,
            )
            continue

        generation = longest_parent_depth(person.id, parents_of, depth_memo)
        generation_map[person.id] = GenerationInfo(
            generation=generation,
            depth=generation,
            color=get_generation_color(generation),
            is_donor=False,
        )

    logger.debug(
        "Calculated generations for %d persons (%d donors)",
        len(generation_map),
        sum(1 for info in generation_map.values() if info.is_donor),
    )
    return generation_map


def get_generation_stats(generation_map: dict[str, GenerationInfo]) -> GenerationStats:
    donor_count = 0
    counts: dict[int, int] = {}

    for info in generation_map.values():
        if info.is_donor:
            donor_count += 1
            continue
        counts[info.generation] = counts.get(info.generation, 0) + 1

    return GenerationStats(
        donor_count=donor_count,
        total_generations=len(counts),
        generation_counts=dict(sorted(counts.items())),
        min_generation=min(counts) if counts else None,
        max_generation=max(counts) if counts else None,
    )


def get_generation_color_palette() -> list[PaletteEntry]:
    """Legend entries for every generation colour plus the donor colour."""
    palette = [
        PaletteEntry(generation=index, color=color, label=f"Generation {index}")
        for index, color in enumerate(GENERATION_COLORS)
    ]
    palette.append(
        PaletteEntry(generation=-1, color=DONOR_COLOR, label="Donor", is_donor=True)
    )
    return palette


def process_connections(
    persons: Sequence[Person],
    connections: Sequence[Connection],
) -> ProcessedConnections:
    """
    Standard preprocessing shared by every tree layout: keep only edges
    between known persons, then compute generations and the generational
    edge subset.
    """
    person_ids = {person.id for person in persons}
    valid = [
        c for c in connections
        if c.from_person_id in person_ids and c.to_person_id in person_ids
    ]

    dropped = len(connections) - len(valid)
    if dropped:
        logger.info("Ignoring %d connections to persons outside this tree", dropped)

    return ProcessedConnections(
        valid_connections=valid,
        generational_connections=get_generational_connections(valid),
        generation_map=calculate_generations(persons, valid),
        nodes=list(persons),
    )
