from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import List, Optional, Sequence, Set, Tuple

from gemgarden.components.board import EMPTY, Board, Position
from gemgarden.constants import MATCH_LENGTH, MAX_GENERATION_ATTEMPTS, MAX_SHUFFLE_ATTEMPTS

logger = logging.getLogger(__name__)

Swap = Tuple[Position, Position]


@dataclass(slots=True)
class GravityMove:
    source: Position
    target: Position
    kind: int


def _rng(rng: random.Random | None) -> random.Random:
    return rng if rng is not None else random.Random()


def is_adjacent(a: Position, b: Position) -> bool:
    ar, ac = a
    br, bc = b
    return (abs(ar - br) == 1 and ac == bc) or (abs(ac - bc) == 1 and ar == br)


def _completes_run(board: Board, row: int, col: int, kind: int) -> bool:
    """Return True if kind at (row, col) would finish a run with the two cells left or above.

    Only valid while filling row-major: cells right of and below (row, col) are
    not populated yet.
    """
    cells = board.cells
    if col >= 2 and cells[row][col - 1] == kind and cells[row][col - 2] == kind:
        return True
    if row >= 2 and cells[row - 1][col] == kind and cells[row - 2][col] == kind:
        return True
    return False


def generate_no_match_board(rows: int, cols: int, kind_count: int, rng: random.Random | None = None) -> Board:
    """Fill a fresh board row-major so that no initial run of three exists."""
    rng = _rng(rng)
    board = Board(rows=rows, cols=cols, kind_count=kind_count)
    for row in range(rows):
        for col in range(cols):
            kind = rng.randrange(kind_count)
            attempts = 1
            while attempts < MAX_GENERATION_ATTEMPTS and _completes_run(board, row, col, kind):
                kind = rng.randrange(kind_count)
                attempts += 1
            board.cells[row][col] = kind
    return board


def new_board(rows: int, cols: int, kind_count: int, rng: random.Random | None = None) -> Board:
    """Generate a match-free board that also offers at least one valid swap."""
    rng = _rng(rng)
    board = generate_no_match_board(rows, cols, kind_count, rng)
    # Small palettes can exhaust the per-cell draws and leave a run behind.
    if not _is_playable(board):
        shuffle_board(board, rng)
    return board


def _scan_line(values: Sequence[int]) -> List[int]:
    """Indexes of every cell belonging to a run of MATCH_LENGTH or more."""
    matched: List[int] = []
    length = len(values)
    index = 0
    while index <= length - MATCH_LENGTH:
        kind = values[index]
        if kind != EMPTY and all(values[index + k] == kind for k in range(1, MATCH_LENGTH)):
            end = index + MATCH_LENGTH - 1
            while end + 1 < length and values[end + 1] == kind:
                end += 1
            matched.extend(range(index, end + 1))
            index = end + 1
        else:
            index += 1
    return matched


def find_all_matches(board: Board) -> Set[Position]:
    """Detect every cell that sits in a horizontal or vertical run of length >= 3."""
    matches: Set[Position] = set()
    cells = board.cells
    # Horizontal runs
    for row in range(board.rows):
        for col in _scan_line(cells[row]):
            matches.add((row, col))
    # Vertical runs
    for col in range(board.cols):
        column = [cells[row][col] for row in range(board.rows)]
        for row in _scan_line(column):
            matches.add((row, col))
    return matches


def clear_positions(board: Board, positions: Sequence[Position]) -> List[Tuple[int, int, int]]:
    """Mark positions EMPTY and return (row, col, kind) for each cleared gem."""
    cleared: List[Tuple[int, int, int]] = []
    for pos in positions:
        kind = board.get(pos)
        if kind == EMPTY:
            continue
        cleared.append((pos[0], pos[1], kind))
        board.set(pos, EMPTY)
    return cleared


def apply_gravity(board: Board) -> List[GravityMove]:
    """Compact each column downward, preserving order; empties end up on top."""
    moves: List[GravityMove] = []
    cells = board.cells
    for col in range(board.cols):
        target_row = board.rows - 1
        for row in range(board.rows - 1, -1, -1):
            kind = cells[row][col]
            if kind == EMPTY:
                continue
            if row != target_row:
                cells[target_row][col] = kind
                cells[row][col] = EMPTY
                moves.append(GravityMove(source=(row, col), target=(target_row, col), kind=kind))
            target_row -= 1
    return moves


def refill_empty_cells(board: Board, rng: random.Random | None = None) -> List[Position]:
    """Give every EMPTY cell a fresh uniform kind. No match avoidance is applied."""
    rng = _rng(rng)
    spawned: List[Position] = []
    for row, col in board.positions():
        if board.cells[row][col] != EMPTY:
            continue
        board.cells[row][col] = rng.randrange(board.kind_count)
        spawned.append((row, col))
    return spawned


def _candidate_swaps(board: Board):
    # Right neighbour before bottom neighbour at each cell, row-major.
    for row, col in board.positions():
        if col + 1 < board.cols:
            yield (row, col), (row, col + 1)
        if row + 1 < board.rows:
            yield (row, col), (row + 1, col)


def swap_creates_match(board: Board, a: Position, b: Position) -> bool:
    """Tentatively swap a/b, run detection and swap back."""
    board.swap(a, b)
    try:
        return bool(find_all_matches(board))
    finally:
        board.swap(a, b)


def find_valid_move(board: Board) -> Optional[Swap]:
    """First swap (row-major, right before bottom) that produces a match."""
    for a, b in _candidate_swaps(board):
        if swap_creates_match(board, a, b):
            return a, b
    return None


def has_valid_move(board: Board) -> bool:
    return find_valid_move(board) is not None


def find_valid_swaps(board: Board) -> List[Swap]:
    """Enumerate adjacent swaps that would produce a match."""
    return [(a, b) for a, b in _candidate_swaps(board) if swap_creates_match(board, a, b)]


def is_deadlocked(board: Board) -> bool:
    return not has_valid_move(board)


def suggest_move(board: Board) -> Optional[Swap]:
    return find_valid_move(board)


def _is_playable(board: Board) -> bool:
    return not find_all_matches(board) and has_valid_move(board)


def shuffle_board(
    board: Board,
    rng: random.Random | None = None,
    *,
    max_attempts: int = MAX_SHUFFLE_ATTEMPTS,
) -> bool:
    """Permute the board until it has a valid move and no standing match.

    Falls back to regenerating the board when max_attempts permutations fail.
    Returns False if neither approach produced a playable board, which only
    happens for degenerate palettes (kind_count < 2) or tiny grids.
    """
    rng = _rng(rng)
    tokens = [kind for row in board.cells for kind in row]
    for _ in range(max_attempts):
        rng.shuffle(tokens)
        _write_row_major(board, tokens)
        if _is_playable(board):
            return True
    logger.debug("Shuffle exhausted %d attempts on %dx%d board; regenerating", max_attempts, board.rows, board.cols)
    for _ in range(max_attempts):
        fresh = generate_no_match_board(board.rows, board.cols, board.kind_count, rng)
        board.cells = fresh.cells
        if _is_playable(board):
            return True
    logger.warning(
        "Unable to produce a playable %dx%d board with %d gem kinds",
        board.rows, board.cols, board.kind_count,
    )
    return False


def ensure_playable(board: Board, rng: random.Random | None = None) -> bool:
    """Reshuffle a deadlocked board. Returns True if a reshuffle happened."""
    if has_valid_move(board):
        return False
    logger.debug("No valid moves left; reshuffling")
    shuffle_board(board, rng)
    return True


def _write_row_major(board: Board, tokens: Sequence[int]) -> None:
    index = 0
    for row in range(board.rows):
        for col in range(board.cols):
            board.cells[row][col] = tokens[index]
            index += 1
