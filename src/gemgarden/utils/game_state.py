from __future__ import annotations

from typing import Type, TypeVar

from esper import World

from gemgarden.components.board import Board
from gemgarden.components.game_state import GameState, ResolutionState
from gemgarden.components.level import LevelTable
from gemgarden.components.progress import ProgressTracker
from gemgarden.components.run_state import RunState

T = TypeVar("T")


def _get_or_create(world: World, component_type: Type[T]) -> T:
    existing = list(world.get_component(component_type))
    if existing:
        return existing[0][1]
    component = component_type()
    world.create_entity(component)
    return component


def get_board(world: World) -> Board:
    for _, board in world.get_component(Board):
        return board
    raise RuntimeError("Board not found")


def get_board_entity(world: World) -> int:
    for entity, _ in world.get_component(Board):
        return entity
    raise RuntimeError("Board not found")


def get_level_table(world: World) -> LevelTable:
    for _, table in world.get_component(LevelTable):
        return table
    raise RuntimeError("LevelTable not found")


def get_or_create_run_state(world: World) -> RunState:
    """Return the shared RunState component, creating it if absent."""
    return _get_or_create(world, RunState)


def get_or_create_resolution_state(world: World) -> ResolutionState:
    return _get_or_create(world, ResolutionState)


def get_or_create_game_state(world: World) -> GameState:
    return _get_or_create(world, GameState)


def get_or_create_progress_tracker(world: World) -> ProgressTracker:
    return _get_or_create(world, ProgressTracker)
