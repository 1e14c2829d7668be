from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from esper import World

from gemgarden.components.game_state import GameMode, LevelStatus
from gemgarden.components.level import LevelDefinition
from gemgarden.components.run_state import RunState
from gemgarden.errors import InvalidRequest
from gemgarden.events.bus import (
    EventBus,
    EVENT_LEVEL_COMPLETED,
    EVENT_LEVEL_FAILED,
    EVENT_LEVEL_STARTED,
    EVENT_MOVES_CHANGED,
    EVENT_SWAP_RESOLVED,
)
from gemgarden.utils.game_state import (
    get_level_table,
    get_or_create_game_state,
    get_or_create_resolution_state,
    get_or_create_run_state,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class LevelOutcome:
    status: LevelStatus
    stars: int = 0


def goals_satisfied(run_state: RunState, level: LevelDefinition) -> bool:
    """True when every goal clause present on the level holds."""
    goals = level.goals
    if goals.score is not None and run_state.score < goals.score:
        return False
    for goal in goals.gems:
        if run_state.collected_of(goal.kind) < goal.count:
            return False
    if goals.any_gems is not None and run_state.total_collected < goals.any_gems:
        return False
    return True


def star_rating(score: int, thresholds: Sequence[int]) -> int:
    stars = 0
    for threshold in thresholds:
        if score >= threshold:
            stars += 1
        else:
            break
    return stars


def evaluate_level(run_state: RunState, level: LevelDefinition) -> LevelOutcome:
    # Goals are checked before the move budget so the last move's cascades still count.
    if goals_satisfied(run_state, level):
        return LevelOutcome(LevelStatus.COMPLETE, star_rating(run_state.score, level.star_thresholds))
    if run_state.moves_remaining is not None and run_state.moves_remaining <= 0:
        return LevelOutcome(LevelStatus.FAILED)
    return LevelOutcome(LevelStatus.IN_PROGRESS)


class LevelSystem:
    """Starts level attempts and decides completion after each resolved swap."""

    def __init__(self, world: World, event_bus: EventBus) -> None:
        self.world = world
        self.event_bus = event_bus
        self.event_bus.subscribe(EVENT_SWAP_RESOLVED, self._on_swap_resolved)

    @property
    def current_level(self) -> Optional[LevelDefinition]:
        state = get_or_create_game_state(self.world)
        if state.mode != GameMode.LEVEL or state.level_id is None:
            return None
        return get_level_table(self.world).get(state.level_id)

    def _ensure_idle(self) -> None:
        # Level state only changes between resolution cycles.
        if get_or_create_resolution_state(self.world).processing:
            raise InvalidRequest("Cannot start a level while a swap is resolving")

    def start_level(self, level_id: int) -> LevelDefinition:
        self._ensure_idle()
        level = get_level_table(self.world).get(level_id)
        state = get_or_create_game_state(self.world)
        state.mode = GameMode.LEVEL
        state.level_id = level.id
        state.status = LevelStatus.IN_PROGRESS
        state.stars = 0
        run_state = get_or_create_run_state(self.world)
        run_state.reset(level.moves)
        logger.debug("Starting level %d (%s) with %d moves", level.id, level.name, level.moves)
        self.event_bus.emit(EVENT_LEVEL_STARTED, level_id=level.id, moves=level.moves)
        self.event_bus.emit(EVENT_MOVES_CHANGED, moves_remaining=run_state.moves_remaining)
        return level

    def start_free_play(self) -> None:
        self._ensure_idle()
        state = get_or_create_game_state(self.world)
        state.mode = GameMode.FREE_PLAY
        state.level_id = None
        state.status = LevelStatus.IN_PROGRESS
        state.stars = 0
        get_or_create_run_state(self.world).reset(None)
        self.event_bus.emit(EVENT_LEVEL_STARTED, level_id=None, moves=None)
        self.event_bus.emit(EVENT_MOVES_CHANGED, moves_remaining=None)

    def restart_level(self) -> Optional[LevelDefinition]:
        level = self.current_level
        if level is None:
            self.start_free_play()
            return None
        return self.start_level(level.id)

    def next_level_id(self) -> Optional[int]:
        level = self.current_level
        if level is None:
            return None
        return get_level_table(self.world).next_id(level.id)

    def evaluate(self) -> LevelOutcome:
        level = self.current_level
        if level is None:
            return LevelOutcome(LevelStatus.IN_PROGRESS)
        return evaluate_level(get_or_create_run_state(self.world), level)

    def _on_swap_resolved(self, sender, **payload) -> None:
        outcome = payload.get("outcome")
        if outcome is None or not outcome.accepted:
            return
        state = get_or_create_game_state(self.world)
        if state.mode != GameMode.LEVEL or state.status != LevelStatus.IN_PROGRESS:
            return
        result = self.evaluate()
        if result.status == LevelStatus.IN_PROGRESS:
            return
        run_state = get_or_create_run_state(self.world)
        state.status = result.status
        state.stars = result.stars
        if result.status == LevelStatus.COMPLETE:
            logger.debug("Level %s complete with %d stars", state.level_id, result.stars)
            self.event_bus.emit(EVENT_LEVEL_COMPLETED, level_id=state.level_id, stars=result.stars, score=run_state.score)
        else:
            logger.debug("Level %s failed at score %d", state.level_id, run_state.score)
            self.event_bus.emit(EVENT_LEVEL_FAILED, level_id=state.level_id, score=run_state.score)
