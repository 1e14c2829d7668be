from __future__ import annotations

import random
from typing import Sequence

from esper import World

from gemgarden.components.board import Board
from gemgarden.utils.game_state import get_board_entity


class ScriptedRandom(random.Random):
    """Random whose randrange replays queued values before falling back to the seeded stream."""

    def __init__(self, seed: int = 0) -> None:
        super().__init__(seed)
        self._queued: list[int] = []

    def script(self, *values: int) -> None:
        self._queued.extend(values)

    def randrange(self, *args, **kwargs):
        if self._queued:
            return self._queued.pop(0)
        return super().randrange(*args, **kwargs)


def install_board(world: World, rows: Sequence[Sequence[int]], kind_count: int) -> Board:
    """Replace the world's board with a hand-built layout."""
    board = Board.from_rows(rows, kind_count=kind_count)
    world.add_component(get_board_entity(world), board)
    return board


# Two rows, three kinds: swapping (0,1) with (1,1) lines up kind 0 across row 0.
SINGLE_MATCH_ROWS = [
    [0, 1, 0],
    [2, 0, 2],
]
