from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from gemgarden.constants import STAR_COUNT
from gemgarden.errors import InvalidRequest

# Literal goal keys for specific gem kinds, in evaluation order.
GEM_GOAL_KEYS = ("collectGem", "collectGem2", "collectGem3")
GOAL_KEYS = ("score",) + GEM_GOAL_KEYS + ("collectAny",)


@dataclass(frozen=True, slots=True)
class GemGoal:
    kind: int
    count: int
    # Goal key the clause was declared under, e.g. "collectGem2".
    key: str = GEM_GOAL_KEYS[0]


@dataclass(frozen=True, slots=True)
class LevelGoals:
    """Goal clauses of a level; absent clauses are None / empty."""

    score: Optional[int] = None
    gems: Tuple[GemGoal, ...] = ()
    any_gems: Optional[int] = None

    def is_empty(self) -> bool:
        return self.score is None and not self.gems and self.any_gems is None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "LevelGoals":
        unknown = set(data) - set(GOAL_KEYS)
        if unknown:
            raise ValueError(f"Unknown goal keys: {sorted(unknown)}")
        score = data.get("score")
        if score is not None:
            score = _positive_int(score, "goals.score")
        gems: List[GemGoal] = []
        for key in GEM_GOAL_KEYS:
            entry = data.get(key)
            if entry is None:
                continue
            if not isinstance(entry, Mapping) or "type" not in entry or "count" not in entry:
                raise ValueError(f"goals.{key} must be a mapping with 'type' and 'count'")
            kind = int(entry["type"])
            if kind < 0:
                raise ValueError(f"goals.{key}.type must be non-negative, got {kind}")
            gems.append(GemGoal(kind=kind, count=_positive_int(entry["count"], f"goals.{key}.count"), key=key))
        any_gems = data.get("collectAny")
        if any_gems is not None:
            any_gems = _positive_int(any_gems, "goals.collectAny")
        return cls(score=score, gems=tuple(gems), any_gems=any_gems)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {}
        if self.score is not None:
            payload["score"] = self.score
        for goal in self.gems:
            payload[goal.key] = {"type": goal.kind, "count": goal.count}
        if self.any_gems is not None:
            payload["collectAny"] = self.any_gems
        return payload


@dataclass(frozen=True, slots=True)
class LevelDefinition:
    """Static description of one level: move budget, goals and star thresholds."""

    id: int
    name: str
    description: str
    moves: int
    goals: LevelGoals
    star_thresholds: Tuple[int, int, int]

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "LevelDefinition":
        try:
            level_id = int(data["id"])
            moves = int(data["moves"])
            thresholds = tuple(int(value) for value in data["starThresholds"])
        except KeyError as exc:
            raise ValueError(f"Level definition missing field {exc.args[0]!r}") from exc
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Level definition has malformed id, moves or starThresholds: {exc}") from exc
        if level_id < 1:
            raise ValueError(f"Level id must be >= 1, got {level_id}")
        if moves <= 0:
            raise ValueError(f"Level {level_id}: moves must be positive, got {moves}")
        if len(thresholds) != STAR_COUNT:
            raise ValueError(f"Level {level_id}: expected {STAR_COUNT} star thresholds, got {len(thresholds)}")
        if any(later <= earlier for earlier, later in zip(thresholds, thresholds[1:])):
            raise ValueError(f"Level {level_id}: star thresholds must be strictly increasing, got {list(thresholds)}")
        return cls(
            id=level_id,
            name=str(data.get("name", f"Level {level_id}")),
            description=str(data.get("description", "")),
            moves=moves,
            goals=LevelGoals.from_dict(data.get("goals") or {}),
            star_thresholds=thresholds,  # type: ignore[arg-type]
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "moves": self.moves,
            "goals": self.goals.to_dict(),
            "starThresholds": list(self.star_thresholds),
        }


@dataclass(slots=True)
class LevelTable:
    """Singleton component holding the ordered, read-only level list."""

    levels: List[LevelDefinition] = field(default_factory=list)

    def get(self, level_id: int) -> LevelDefinition:
        for level in self.levels:
            if level.id == level_id:
                return level
        raise InvalidRequest(f"Unknown level id {level_id}")

    def ids(self) -> List[int]:
        return [level.id for level in self.levels]

    def next_id(self, level_id: int) -> Optional[int]:
        ids = self.ids()
        try:
            index = ids.index(level_id)
        except ValueError as exc:
            raise InvalidRequest(f"Unknown level id {level_id}") from exc
        if index + 1 < len(ids):
            return ids[index + 1]
        return None


def _positive_int(value: Any, label: str) -> int:
    number = int(value)
    if number <= 0:
        raise ValueError(f"{label} must be positive, got {number}")
    return number
