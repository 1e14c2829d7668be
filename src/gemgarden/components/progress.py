from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict


@dataclass(slots=True)
class ProgressRecord:
    """Best result recorded for one level; values only ever ratchet upward."""

    completed: bool = False
    stars: int = 0
    best_score: int = 0


@dataclass(slots=True)
class ProgressTracker:
    """Aggregated level progress that persists across game sessions."""

    records: Dict[int, ProgressRecord] = field(default_factory=dict)
