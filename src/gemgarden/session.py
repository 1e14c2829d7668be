"""Headless wiring of the Gem Garden engine.

Sets up the ECS world, event bus and systems the way a front end would, and
exposes a small programmatic surface for driving a game.
"""
from __future__ import annotations

import random
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional

from gemgarden.components.board import Board, Position
from gemgarden.components.game_state import GameState
from gemgarden.components.run_state import RunState
from gemgarden.constants import GRID_COLS, GRID_ROWS, NUM_GEM_TYPES
from gemgarden.events.bus import EVENT_HINT_REQUEST, EVENT_PHASE_ADVANCE, EventBus
from gemgarden.factories.levels import LEVELS
from gemgarden.systems.board import BoardSystem
from gemgarden.systems.board_ops import suggest_move
from gemgarden.systems.cascade import SwapOutcome
from gemgarden.systems.level_system import LevelSystem
from gemgarden.systems.match_resolution import MatchResolutionSystem
from gemgarden.systems.progress_system import JsonProgressStore, ProgressStore, ProgressSystem
from gemgarden.utils.game_state import get_or_create_game_state, get_or_create_run_state
from gemgarden.world import create_world


class GemGardenSession:
    def __init__(
        self,
        *,
        rows: int = GRID_ROWS,
        cols: int = GRID_COLS,
        kind_count: int = NUM_GEM_TYPES,
        levels: Iterable[Mapping[str, Any]] = LEVELS,
        store: ProgressStore | None = None,
        save_path: Path | str | None = None,
        paced: bool = False,
        rng: random.Random | None = None,
    ):
        self.event_bus = EventBus()
        self.world = create_world(rows=rows, cols=cols, kind_count=kind_count, levels=levels, rng=rng)
        if store is None and save_path is not None:
            store = JsonProgressStore(save_path)

        # Progression systems
        self.progress_system = ProgressSystem(self.world, self.event_bus, store=store)
        self.level_system = LevelSystem(self.world, self.event_bus)

        # Board systems
        self.board_system = BoardSystem(self.world, self.event_bus)
        self.match_resolution_system = MatchResolutionSystem(self.world, self.event_bus, paced=paced)

    @property
    def board(self) -> Board:
        return self.board_system.board

    @property
    def run_state(self) -> RunState:
        return get_or_create_run_state(self.world)

    @property
    def game_state(self) -> GameState:
        return get_or_create_game_state(self.world)

    @property
    def busy(self) -> bool:
        return self.match_resolution_system.busy

    def swap(self, src: Position, dst: Position) -> Optional[SwapOutcome]:
        return self.match_resolution_system.request_swap(src, dst)

    def advance(self) -> None:
        """Resume a paced resolution cycle after the current phase was presented."""
        self.event_bus.emit(EVENT_PHASE_ADVANCE)

    def hint(self) -> Optional[tuple[Position, Position]]:
        if self.busy:
            return None
        return suggest_move(self.board)

    def request_hint(self) -> None:
        self.event_bus.emit(EVENT_HINT_REQUEST)

    def start_level(self, level_id: int, *, require_unlocked: bool = False):
        """Start a level; returns None while busy or when the level is still locked."""
        if self.busy:
            return None
        if require_unlocked and not self.progress_system.is_unlocked(level_id):
            return None
        return self.level_system.start_level(level_id)

    def start_free_play(self) -> bool:
        if self.busy:
            return False
        self.level_system.start_free_play()
        return True
