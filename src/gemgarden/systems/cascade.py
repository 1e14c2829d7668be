"""Pure swap and cascade resolution over a Board.

``iter_resolution`` yields at every phase boundary so a presentation layer can
render intermediate frames; ``attempt_swap`` drains it in one go. Neither
touches run state: callers credit score, moves and collection counters from the
returned ``CascadeEvent`` records.
"""
from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Set, Tuple

from gemgarden.components.board import Board, Position
from gemgarden.constants import POINTS_PER_GEM
from gemgarden.errors import InvalidRequest
from gemgarden.systems.board_ops import (
    GravityMove,
    apply_gravity,
    clear_positions,
    ensure_playable,
    find_all_matches,
    is_adjacent,
    refill_empty_cells,
)

logger = logging.getLogger(__name__)


class Phase(Enum):
    MATCHED = "matched"
    REMOVED = "removed"
    GRAVITY = "gravity"
    REFILLED = "refilled"


@dataclass(slots=True)
class CascadeEvent:
    """Everything that happened to the board in one cascade step."""

    cascade_index: int
    matched_cells: List[Position]
    matched_kinds: Dict[int, int] = field(default_factory=dict)
    score_delta: int = 0
    cleared: List[Tuple[int, int, int]] = field(default_factory=list)
    gravity_shifts: List[GravityMove] = field(default_factory=list)
    refilled_cells: List[Position] = field(default_factory=list)


@dataclass(slots=True)
class SwapOutcome:
    src: Position
    dst: Position
    accepted: bool
    events: List[CascadeEvent] = field(default_factory=list)
    reshuffled: bool = False

    @property
    def rejected(self) -> bool:
        return not self.accepted

    @property
    def score_delta(self) -> int:
        return sum(event.score_delta for event in self.events)

    @property
    def cascade_depth(self) -> int:
        return len(self.events)


def score_for(match_count: int, cascade_index: int) -> int:
    return match_count * POINTS_PER_GEM * cascade_index


def validate_swap(board: Board, src: Position, dst: Position) -> None:
    if not board.in_bounds(src) or not board.in_bounds(dst):
        raise InvalidRequest(f"Swap {src} -> {dst} is outside the board")
    if not is_adjacent(src, dst):
        raise InvalidRequest(f"Swap {src} -> {dst} is not between adjacent cells")


def try_swap(board: Board, src: Position, dst: Position) -> Set[Position]:
    """Swap src/dst and return the resulting matches, reverting when there are none."""
    validate_swap(board, src, dst)
    board.swap(src, dst)
    matches = find_all_matches(board)
    if not matches:
        board.swap(src, dst)
    return matches


def iter_resolution(
    board: Board,
    matches: Set[Position],
    rng: random.Random | None = None,
) -> Iterator[Tuple[Phase, CascadeEvent]]:
    """Run the cascade loop, yielding after each phase of each step.

    The yielded event is filled in progressively; it is complete once its
    REFILLED phase has been yielded.
    """
    rng = rng if rng is not None else random.Random()
    depth = 0
    while matches:
        depth += 1
        positions = sorted(matches)
        kinds: Dict[int, int] = {}
        for pos in positions:
            kind = board.get(pos)
            kinds[kind] = kinds.get(kind, 0) + 1
        event = CascadeEvent(
            cascade_index=depth,
            matched_cells=positions,
            matched_kinds=kinds,
            score_delta=score_for(len(positions), depth),
        )
        yield Phase.MATCHED, event
        event.cleared = clear_positions(board, positions)
        yield Phase.REMOVED, event
        event.gravity_shifts = apply_gravity(board)
        yield Phase.GRAVITY, event
        event.refilled_cells = refill_empty_cells(board, rng)
        yield Phase.REFILLED, event
        logger.debug("Cascade step %d cleared %d gems for %d points", depth, len(positions), event.score_delta)
        matches = find_all_matches(board)


def resolve_cascade(board: Board, matches: Set[Position], rng: random.Random | None = None) -> List[CascadeEvent]:
    events: List[CascadeEvent] = []
    for phase, event in iter_resolution(board, matches, rng):
        if phase is Phase.REFILLED:
            events.append(event)
    return events


def attempt_swap(board: Board, src: Position, dst: Position, rng: random.Random | None = None) -> SwapOutcome:
    """Swap two adjacent cells and resolve every resulting cascade.

    A swap that forms no match is reverted and reported as rejected. Raises
    InvalidRequest for out-of-bounds or non-adjacent positions without touching
    the board.
    """
    rng = rng if rng is not None else random.Random()
    matches = try_swap(board, src, dst)
    if not matches:
        return SwapOutcome(src=src, dst=dst, accepted=False)
    events = resolve_cascade(board, matches, rng)
    reshuffled = ensure_playable(board, rng)
    return SwapOutcome(src=src, dst=dst, accepted=True, events=events, reshuffled=reshuffled)
