import random
from typing import Any, Iterable, Mapping

from esper import World

from gemgarden.components.game_state import GameMode, GameState, ResolutionState
from gemgarden.components.level import LevelTable
from gemgarden.components.progress import ProgressTracker
from gemgarden.components.run_state import RunState
from gemgarden.constants import GRID_COLS, GRID_ROWS, NUM_GEM_TYPES
from gemgarden.factories.levels import LEVELS, load_levels
from gemgarden.systems.board_ops import new_board


def create_world(
    *,
    rows: int = GRID_ROWS,
    cols: int = GRID_COLS,
    kind_count: int = NUM_GEM_TYPES,
    levels: Iterable[Mapping[str, Any]] = LEVELS,
    rng: random.Random | None = None,
) -> World:
    """Build an independent engine state: board, run state and level table.

    Every call returns a fresh World; nothing is shared between worlds, so
    tests and replays can run side by side. ``world.random`` is the shared
    generator systems fall back to when not given one.
    """
    world = World()
    setattr(world, "random", rng or random.Random())

    # Register the global game state resources.
    world.create_entity(
        GameState(mode=GameMode.FREE_PLAY),
        ResolutionState(),
        RunState(),
    )
    world.create_entity(ProgressTracker())
    world.create_entity(LevelTable(levels=load_levels(levels)))

    world.create_entity(new_board(rows, cols, kind_count, world.random))
    return world
