import random
from typing import Optional, Tuple

from esper import World

from gemgarden.components.board import Board
from gemgarden.components.game_state import GameMode, LevelStatus
from gemgarden.constants import GRID_COLS, GRID_ROWS, NUM_GEM_TYPES
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
from gemgarden.systems.board_ops import is_adjacent, new_board, suggest_move
from gemgarden.utils.game_state import get_or_create_game_state, get_or_create_resolution_state


class BoardSystem:
    """Owns the board entity and turns tile clicks into swap requests."""

    def __init__(
        self,
        world: World,
        event_bus: EventBus,
        rows: int = GRID_ROWS,
        cols: int = GRID_COLS,
        kind_count: int = NUM_GEM_TYPES,
        rng: Optional[random.Random] = None,
    ):
        self.world = world
        self.event_bus = event_bus
        candidate_rng = rng or getattr(world, "random", None)
        self.random = candidate_rng if isinstance(candidate_rng, random.Random) else random.Random()
        self.selected: Optional[Tuple[int, int]] = None
        existing = list(self.world.get_component(Board))
        if existing:
            # Reuse the board create_world generated; its shape wins over the arguments.
            self.board_entity, board = existing[0]
            rows, cols, kind_count = board.rows, board.cols, board.kind_count
        else:
            self.board_entity = self.world.create_entity(new_board(rows, cols, kind_count, self.random))
        self.rows = rows
        self.cols = cols
        self.kind_count = kind_count
        self.event_bus.subscribe(EVENT_TILE_CLICK, self.on_tile_click)
        self.event_bus.subscribe(EVENT_HINT_REQUEST, self.on_hint_request)
        self.event_bus.subscribe(EVENT_LEVEL_STARTED, self.on_level_started)

    @property
    def board(self) -> Board:
        return self.world.component_for_entity(self.board_entity, Board)

    def reset_board(self) -> Board:
        """Replace the board with a freshly generated one (new game / level start)."""
        self.selected = None
        fresh = new_board(self.rows, self.cols, self.kind_count, self.random)
        self.world.add_component(self.board_entity, fresh)
        self.event_bus.emit(EVENT_BOARD_SHUFFLED, reason='new_board', resolved=True)
        return fresh

    def on_level_started(self, sender, **kwargs):
        self.reset_board()

    def _input_blocked(self) -> bool:
        if get_or_create_resolution_state(self.world).processing:
            return True
        state = get_or_create_game_state(self.world)
        return state.mode == GameMode.LEVEL and state.status != LevelStatus.IN_PROGRESS

    def on_tile_click(self, sender, **kwargs):
        row = kwargs.get('row')
        col = kwargs.get('col')
        if row is None or col is None:
            return
        if self._input_blocked():
            return
        if not self.board.in_bounds((row, col)):
            return
        if self.selected is None:
            self.selected = (row, col)
            self.event_bus.emit(EVENT_TILE_SELECTED, row=row, col=col)
            return
        prev = self.selected
        if prev == (row, col):
            self.selected = None
            self.event_bus.emit(EVENT_TILE_DESELECTED, reason='same_tile', prev_row=prev[0], prev_col=prev[1])
            return
        if is_adjacent(prev, (row, col)):
            self.selected = None
            self.event_bus.emit(EVENT_TILE_SWAP_REQUEST, src=prev, dst=(row, col))
        else:
            # Change selection to new tile
            self.selected = (row, col)
            self.event_bus.emit(EVENT_TILE_DESELECTED, reason='reselect', prev_row=prev[0], prev_col=prev[1])
            self.event_bus.emit(EVENT_TILE_SELECTED, row=row, col=col)

    def on_hint_request(self, sender, **kwargs):
        if self._input_blocked():
            return
        move = suggest_move(self.board)
        if move is None:
            return
        src, dst = move
        self.event_bus.emit(EVENT_HINT_FOUND, src=src, dst=dst)
