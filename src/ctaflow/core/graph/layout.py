"""Step placement.

Positions have no meaning to the engine; these helpers only decide where
new, position-less, or auto-arranged steps land on the canvas.
"""

from __future__ import annotations

import random
from collections import deque
from collections.abc import Sequence
from typing import Literal

from ctaflow.core.types import Position, Step, Transition

Direction = Literal["LR", "TB"]

NODE_WIDTH = 260
NODE_HEIGHT = 140
NODE_SEP = 50
RANK_SEP = 90
MARGIN = 20


def random_position(rng: random.Random | None = None) -> Position:
    """Initial position for a freshly added step."""
    rng = rng or random.Random()
    return Position(x=rng.random() * 400 + 100, y=rng.random() * 300 + 100)


def fallback_position(index: int) -> Position:
    """Deterministic grid position for a loaded step without coordinates.

    Example:
        >>> fallback_position(0)
        Position(x=120, y=150)
        >>> fallback_position(6)
        Position(x=840, y=210)
    """
    return Position(x=120 + index * 120, y=150 + (index % 5) * 60)


def rank_steps(steps: Sequence[Step], transitions: Sequence[Transition]) -> dict[str, int]:
    """Assign each step a layer.

    Roots (entry steps and steps nothing points at) sit in layer 0. Other
    steps go one layer below the step they are first reached from, walking
    breadth-first so cycles terminate. Steps only reachable through a
    cycle are seeded as roots.

    Args:
        steps: Steps to rank.
        transitions: Transitions between them. Edges to unknown ids are
            ignored.

    Returns:
        Mapping of step id to rank.
    """
    ids = [s.id for s in steps]
    known = set(ids)
    children: dict[str, list[str]] = {sid: [] for sid in ids}
    has_incoming: set[str] = set()
    for t in transitions:
        if t.source in known and t.target in known and t.source != t.target:
            children[t.source].append(t.target)
            has_incoming.add(t.target)

    roots = [s.id for s in steps if s.is_entry or s.id not in has_incoming]
    ranks: dict[str, int] = {}

    def walk(seeds: list[str]) -> None:
        queue = deque(seeds)
        for seed in seeds:
            ranks.setdefault(seed, 0)
        while queue:
            current = queue.popleft()
            for child in children[current]:
                if child in ranks:
                    continue
                ranks[child] = ranks[current] + 1
                queue.append(child)

    walk(roots)
    for sid in ids:
        if sid not in ranks:
            walk([sid])
    return ranks


def auto_layout(
    steps: Sequence[Step],
    transitions: Sequence[Transition],
    direction: Direction = "LR",
) -> dict[str, Position]:
    """Compute a layered layout.

    Args:
        steps: Steps to place.
        transitions: Transitions between them.
        direction: "LR" puts layers left to right, "TB" top to bottom.

    Returns:
        New top-left position for every step id.

    Raises:
        ValueError: If direction is not "LR" or "TB".
    """
    if direction not in ("LR", "TB"):
        raise ValueError(f"Unknown layout direction: {direction!r}")

    ranks = rank_steps(steps, transitions)
    slot_in_rank: dict[int, int] = {}
    positions: dict[str, Position] = {}

    for step in steps:
        rank = ranks[step.id]
        slot = slot_in_rank.get(rank, 0)
        slot_in_rank[rank] = slot + 1

        along = MARGIN + rank * ((NODE_WIDTH if direction == "LR" else NODE_HEIGHT) + RANK_SEP)
        across = MARGIN + slot * ((NODE_HEIGHT if direction == "LR" else NODE_WIDTH) + NODE_SEP)
        if direction == "LR":
            positions[step.id] = Position(x=along, y=across)
        else:
            positions[step.id] = Position(x=across, y=along)

    return positions
