"""Gem Garden: a match-3 board engine with levels, goals and star ratings."""
from gemgarden.components.board import EMPTY, Board
from gemgarden.components.game_state import LevelStatus
from gemgarden.components.level import LevelDefinition
from gemgarden.components.progress import ProgressRecord
from gemgarden.components.run_state import RunState
from gemgarden.errors import InvalidRequest
from gemgarden.systems.board_ops import find_all_matches, is_deadlocked, new_board, shuffle_board, suggest_move
from gemgarden.systems.cascade import CascadeEvent, SwapOutcome, attempt_swap
from gemgarden.systems.level_system import LevelOutcome, evaluate_level, star_rating

__all__ = [
    "EMPTY",
    "Board",
    "CascadeEvent",
    "InvalidRequest",
    "LevelDefinition",
    "LevelOutcome",
    "LevelStatus",
    "ProgressRecord",
    "RunState",
    "SwapOutcome",
    "attempt_swap",
    "evaluate_level",
    "find_all_matches",
    "is_deadlocked",
    "new_board",
    "shuffle_board",
    "star_rating",
    "suggest_move",
]
