from __future__ import annotations

import logging
import random
from typing import Iterator, Optional, Tuple

from esper import World

from gemgarden.components.board import Position
from gemgarden.components.game_state import GameMode, LevelStatus
from gemgarden.errors import InvalidRequest
from gemgarden.events.bus import (
    EventBus,
    EVENT_BOARD_SHUFFLED,
    EVENT_CASCADE_COMPLETE,
    EVENT_CASCADE_STEP,
    EVENT_GRAVITY_APPLIED,
    EVENT_MATCH_CLEARED,
    EVENT_MATCH_FOUND,
    EVENT_MOVES_CHANGED,
    EVENT_PHASE_ADVANCE,
    EVENT_REFILL_COMPLETED,
    EVENT_SCORE_CHANGED,
    EVENT_SWAP_RESOLVED,
    EVENT_TILE_SWAP_INVALID,
    EVENT_TILE_SWAP_REQUEST,
    EVENT_TILE_SWAP_VALID,
)
from gemgarden.systems.board_ops import ensure_playable, is_deadlocked
from gemgarden.systems.cascade import CascadeEvent, Phase, SwapOutcome, iter_resolution, try_swap
from gemgarden.utils.game_state import (
    get_board,
    get_or_create_game_state,
    get_or_create_resolution_state,
    get_or_create_run_state,
)

logger = logging.getLogger(__name__)


class MatchResolutionSystem:
    """Drives swap -> match -> clear -> gravity -> refill cycles on the world's board.

    With ``paced=True`` the cycle stops after every phase and resumes when the
    presentation layer emits EVENT_PHASE_ADVANCE (typically once its animation
    for that phase is done). Otherwise each accepted swap resolves
    synchronously inside ``request_swap``.
    """

    def __init__(
        self,
        world: World,
        event_bus: EventBus,
        *,
        paced: bool = False,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.world = world
        self.event_bus = event_bus
        self.paced = paced
        candidate_rng = rng or getattr(world, "random", None)
        self.random = candidate_rng if isinstance(candidate_rng, random.Random) else random.Random()
        self._pending: Optional[Iterator[Tuple[Phase, CascadeEvent]]] = None
        self._outcome: Optional[SwapOutcome] = None
        self.event_bus.subscribe(EVENT_TILE_SWAP_REQUEST, self.on_swap_request)
        self.event_bus.subscribe(EVENT_PHASE_ADVANCE, self.on_phase_advance)

    @property
    def busy(self) -> bool:
        return get_or_create_resolution_state(self.world).processing

    def on_swap_request(self, sender, **kwargs):
        src = kwargs.get('src')
        dst = kwargs.get('dst')
        if not src or not dst:
            return
        self.request_swap(tuple(src), tuple(dst))

    def on_phase_advance(self, sender, **kwargs):
        if self._pending is None:
            return
        self._advance()

    def request_swap(self, src: Position, dst: Position) -> Optional[SwapOutcome]:
        """Attempt a swap; returns None when the request was refused outright.

        In paced mode the returned outcome keeps filling in until the cycle
        finishes; EVENT_SWAP_RESOLVED carries the final value.
        """
        state = get_or_create_resolution_state(self.world)
        if state.processing:
            self._reject(src, dst, 'busy')
            return None
        game_state = get_or_create_game_state(self.world)
        if game_state.mode == GameMode.LEVEL and game_state.status != LevelStatus.IN_PROGRESS:
            self._reject(src, dst, 'level_over')
            return None
        board = get_board(self.world)
        try:
            matches = try_swap(board, src, dst)
        except InvalidRequest as exc:
            both_inside = board.in_bounds(src) and board.in_bounds(dst)
            logger.debug("Refused swap request: %s", exc)
            self._reject(src, dst, 'not_adjacent' if both_inside else 'out_of_bounds')
            return None
        if not matches:
            outcome = SwapOutcome(src=src, dst=dst, accepted=False)
            self._reject(src, dst, 'no_match')
            self.event_bus.emit(EVENT_SWAP_RESOLVED, outcome=outcome)
            return outcome

        self.event_bus.emit(EVENT_TILE_SWAP_VALID, src=src, dst=dst)
        run_state = get_or_create_run_state(self.world)
        run_state.consume_move()
        self.event_bus.emit(EVENT_MOVES_CHANGED, moves_remaining=run_state.moves_remaining)

        state.processing = True
        state.cascade_depth = 0
        self._outcome = SwapOutcome(src=src, dst=dst, accepted=True)
        self._pending = iter_resolution(board, matches, self.random)
        outcome = self._outcome
        self._advance()
        return outcome

    def _reject(self, src, dst, reason: str) -> None:
        self.event_bus.emit(EVENT_TILE_SWAP_INVALID, src=src, dst=dst, reason=reason)

    def _advance(self) -> None:
        while self._pending is not None:
            try:
                phase, event = next(self._pending)
            except StopIteration:
                self._finish()
                return
            self._emit_phase(phase, event)
            if self.paced:
                return

    def _emit_phase(self, phase: Phase, event: CascadeEvent) -> None:
        depth = event.cascade_index
        if phase is Phase.MATCHED:
            get_or_create_resolution_state(self.world).cascade_depth = depth
            positions = list(event.matched_cells)
            self.event_bus.emit(EVENT_CASCADE_STEP, depth=depth, positions=positions)
            self.event_bus.emit(EVENT_MATCH_FOUND, positions=positions, size=len(positions), depth=depth)
        elif phase is Phase.REMOVED:
            run_state = get_or_create_run_state(self.world)
            run_state.record_cascade(event)
            self.event_bus.emit(EVENT_MATCH_CLEARED, positions=list(event.matched_cells), types=list(event.cleared), depth=depth)
            self.event_bus.emit(EVENT_SCORE_CHANGED, score=run_state.score, delta=event.score_delta, depth=depth)
        elif phase is Phase.GRAVITY:
            self.event_bus.emit(EVENT_GRAVITY_APPLIED, moves=list(event.gravity_shifts), depth=depth)
        elif phase is Phase.REFILLED:
            if self._outcome is not None:
                self._outcome.events.append(event)
            self.event_bus.emit(EVENT_REFILL_COMPLETED, new_tiles=list(event.refilled_cells), depth=depth)

    def _finish(self) -> None:
        self._pending = None
        outcome = self._outcome
        self._outcome = None
        state = get_or_create_resolution_state(self.world)
        board = get_board(self.world)
        reshuffled = ensure_playable(board, self.random)
        if reshuffled:
            state.reshuffles += 1
            self.event_bus.emit(EVENT_BOARD_SHUFFLED, reason='no_moves', resolved=not is_deadlocked(board))
        depth = state.cascade_depth
        state.processing = False
        state.swaps_resolved += 1
        self.event_bus.emit(EVENT_CASCADE_COMPLETE, depth=depth)
        if outcome is not None:
            outcome.reshuffled = reshuffled
            self.event_bus.emit(EVENT_SWAP_RESOLVED, outcome=outcome)
