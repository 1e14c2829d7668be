"""Game state resources describing the active mode and the resolution cycle."""
from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional


class GameMode(Enum):
    """High-level play modes."""
    FREE_PLAY = auto()
    LEVEL = auto()


class LevelStatus(Enum):
    IN_PROGRESS = auto()
    COMPLETE = auto()
    FAILED = auto()


@dataclass
class GameState:
    """Singleton component storing the active mode and level attempt."""
    mode: GameMode = GameMode.FREE_PLAY
    level_id: Optional[int] = None
    status: LevelStatus = LevelStatus.IN_PROGRESS
    stars: int = 0


@dataclass(slots=True)
class ResolutionState:
    """Tracks the swap/cascade cycle currently in flight.

    processing is the single busy flag: while it is set new swap requests are
    rejected outright.
    """

    processing: bool = False
    cascade_depth: int = 0
    swaps_resolved: int = 0
    reshuffles: int = 0
