from gemgarden.components.board import EMPTY, Board
from gemgarden.systems.board_ops import apply_gravity, clear_positions, refill_empty_cells
from tests.helpers import ScriptedRandom


def test_gravity_compacts_columns_preserving_order():
    board = Board.from_rows([
        [0, 2],
        [EMPTY, 3],
        [1, 2],
        [EMPTY, 3],
    ], kind_count=4)
    moves = apply_gravity(board)
    assert board.snapshot() == (
        (EMPTY, 2),
        (EMPTY, 3),
        (0, 2),
        (1, 3),
    )
    assert [(m.source, m.target, m.kind) for m in moves] == [
        ((2, 0), (3, 0), 1),
        ((0, 0), (2, 0), 0),
    ]


def test_gravity_on_full_board_is_noop():
    board = Board.from_rows([[0, 1], [1, 0]])
    assert apply_gravity(board) == []
    assert board.snapshot() == ((0, 1), (1, 0))


def test_cleared_row_drops_everything_above():
    board = Board.from_rows([
        [3, 1, 2],
        [2, 3, 1],
        [0, 0, 0],
    ], kind_count=4)
    cleared = clear_positions(board, [(2, 0), (2, 1), (2, 2)])
    assert cleared == [(2, 0, 0), (2, 1, 0), (2, 2, 0)]
    moves = apply_gravity(board)
    assert len(moves) == 6
    assert board.snapshot() == (
        (EMPTY, EMPTY, EMPTY),
        (3, 1, 2),
        (2, 3, 1),
    )


def test_clear_skips_already_empty_cells():
    board = Board.from_rows([[EMPTY, 1, 1]], kind_count=2)
    assert clear_positions(board, [(0, 0), (0, 1)]) == [(0, 1, 1)]
    assert board.snapshot() == ((EMPTY, EMPTY, 1),)


def test_refill_fills_empties_row_major():
    board = Board.from_rows([
        [EMPTY, EMPTY, 2],
        [EMPTY, 1, 2],
    ], kind_count=3)
    rng = ScriptedRandom()
    rng.script(0, 1, 2)
    spawned = refill_empty_cells(board, rng)
    assert spawned == [(0, 0), (0, 1), (1, 0)]
    assert board.snapshot() == ((0, 1, 2), (2, 1, 2))


def test_refill_leaves_no_empty_cells():
    board = Board(rows=4, cols=4, kind_count=5)
    refill_empty_cells(board, ScriptedRandom(3))
    assert all(0 <= kind < 5 for row in board.cells for kind in row)
