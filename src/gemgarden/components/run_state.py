from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, Optional

if TYPE_CHECKING:
    from gemgarden.systems.cascade import CascadeEvent


@dataclass(slots=True)
class RunState:
    """Score, move budget and collection counters for one level attempt.

    moves_remaining is None in free play, where the move budget is unlimited.
    """
    score: int = 0
    moves_remaining: Optional[int] = None
    collected: Dict[int, int] = field(default_factory=dict)
    total_collected: int = 0

    def reset(self, moves: Optional[int] = None) -> None:
        self.score = 0
        self.moves_remaining = moves
        self.collected = {}
        self.total_collected = 0

    def consume_move(self) -> None:
        if self.moves_remaining is None:
            return
        if self.moves_remaining > 0:
            self.moves_remaining -= 1

    def record_cascade(self, event: "CascadeEvent") -> None:
        """Credit one cascade step's removed gems and score delta."""
        for kind, count in event.matched_kinds.items():
            if count <= 0:
                continue
            self.collected[kind] = self.collected.get(kind, 0) + count
            self.total_collected += count
        if event.score_delta > 0:
            self.score += event.score_delta

    def collected_of(self, kind: int) -> int:
        return self.collected.get(kind, 0)
