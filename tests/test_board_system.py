from gemgarden.components.game_state import GameMode, LevelStatus
from gemgarden.events.bus import (
    EventBus,
    EVENT_BOARD_SHUFFLED,
    EVENT_HINT_FOUND,
    EVENT_HINT_REQUEST,
    EVENT_LEVEL_STARTED,
    EVENT_TILE_CLICK,
    EVENT_TILE_DESELECTED,
    EVENT_TILE_SELECTED,
    EVENT_TILE_SWAP_REQUEST,
)
from gemgarden.systems.board import BoardSystem
from gemgarden.systems.board_ops import find_all_matches
from gemgarden.utils.game_state import get_board, get_or_create_game_state, get_or_create_resolution_state
from gemgarden.world import create_world
from tests.helpers import ScriptedRandom, install_board

HINT_ROWS = [
    [0, 1, 0],
    [2, 0, 2],
    [1, 2, 1],
]


def setup():
    bus = EventBus()
    world = create_world(rows=3, cols=3, kind_count=3, rng=ScriptedRandom(21))
    system = BoardSystem(world, bus)
    install_board(world, HINT_ROWS, kind_count=3)
    log: list[tuple[str, dict]] = []
    for name in (EVENT_TILE_SELECTED, EVENT_TILE_DESELECTED, EVENT_TILE_SWAP_REQUEST, EVENT_HINT_FOUND):
        bus.subscribe(name, lambda sender, _name=name, **payload: log.append((_name, payload)))
    return bus, world, system, log


def test_board_system_reuses_world_board():
    bus = EventBus()
    world = create_world(rows=5, cols=4, kind_count=4, rng=ScriptedRandom(2))
    existing = get_board(world)
    system = BoardSystem(world, bus)
    assert system.board is existing
    assert (system.rows, system.cols, system.kind_count) == (5, 4, 4)


def test_click_then_adjacent_click_requests_swap():
    bus, world, system, log = setup()
    bus.emit(EVENT_TILE_CLICK, row=0, col=1)
    bus.emit(EVENT_TILE_CLICK, row=1, col=1)
    assert log == [
        (EVENT_TILE_SELECTED, {'row': 0, 'col': 1}),
        (EVENT_TILE_SWAP_REQUEST, {'src': (0, 1), 'dst': (1, 1)}),
    ]
    assert system.selected is None


def test_clicking_selected_tile_deselects():
    bus, world, system, log = setup()
    bus.emit(EVENT_TILE_CLICK, row=2, col=2)
    bus.emit(EVENT_TILE_CLICK, row=2, col=2)
    assert log[-1] == (EVENT_TILE_DESELECTED, {'reason': 'same_tile', 'prev_row': 2, 'prev_col': 2})
    assert system.selected is None


def test_clicking_distant_tile_moves_selection():
    bus, world, system, log = setup()
    bus.emit(EVENT_TILE_CLICK, row=0, col=0)
    bus.emit(EVENT_TILE_CLICK, row=2, col=2)
    assert [name for name, _ in log] == [EVENT_TILE_SELECTED, EVENT_TILE_DESELECTED, EVENT_TILE_SELECTED]
    assert log[1][1]['reason'] == 'reselect'
    assert system.selected == (2, 2)


def test_out_of_bounds_click_is_ignored():
    bus, world, system, log = setup()
    bus.emit(EVENT_TILE_CLICK, row=3, col=0)
    bus.emit(EVENT_TILE_CLICK, row=0)
    assert log == []
    assert system.selected is None


def test_clicks_ignored_while_resolving():
    bus, world, system, log = setup()
    get_or_create_resolution_state(world).processing = True
    bus.emit(EVENT_TILE_CLICK, row=0, col=0)
    bus.emit(EVENT_HINT_REQUEST)
    assert log == []


def test_clicks_ignored_after_level_is_decided():
    bus, world, system, log = setup()
    state = get_or_create_game_state(world)
    state.mode = GameMode.LEVEL
    state.status = LevelStatus.FAILED
    bus.emit(EVENT_TILE_CLICK, row=0, col=0)
    assert log == []


def test_hint_request_reports_first_valid_move():
    bus, world, system, log = setup()
    bus.emit(EVENT_HINT_REQUEST)
    assert log == [(EVENT_HINT_FOUND, {'src': (0, 1), 'dst': (1, 1)})]


def test_level_start_deals_a_fresh_playable_board():
    bus, world, system, log = setup()
    shuffled = []
    bus.subscribe(EVENT_BOARD_SHUFFLED, lambda sender, **p: shuffled.append(p))
    bus.emit(EVENT_TILE_CLICK, row=0, col=0)

    bus.emit(EVENT_LEVEL_STARTED, level_id=1, moves=20)

    assert shuffled == [{'reason': 'new_board', 'resolved': True}]
    assert system.selected is None
    board = get_board(world)
    assert (board.rows, board.cols) == (3, 3)
    assert not find_all_matches(board)
