from blinker import Signal
from typing import Dict

class EventBus:
    """Simple event bus leveraging blinker Signal objects."""
    def __init__(self):
        self._signals: Dict[str, Signal] = {}

    def subscribe(self, name: str, fn):
        sig = self._signals.setdefault(name, Signal(name))
        # Use weak=False to retain strong reference to bound methods so systems not kept in a variable still receive events.
        sig.connect(fn, weak=False)

    def unsubscribe(self, name: str, fn):
        sig = self._signals.get(name)
        if sig:
            sig.disconnect(fn)

    def emit(self, name: str, **payload):
        sig = self._signals.get(name)
        if sig:
            sig.send(self, **payload)


# ============================================================================
# INPUT & INTERACTION
# ============================================================================
EVENT_TILE_CLICK = "tile_click"            # payload: row, col
EVENT_HINT_REQUEST = "hint_request"        # payload: None
EVENT_HINT_FOUND = "hint_found"            # payload: src=(r,c), dst=(r,c)


# ============================================================================
# TILE & BOARD MECHANICS
# ============================================================================
EVENT_TILE_SELECTED = "tile_selected"              # payload: row, col
EVENT_TILE_DESELECTED = "tile_deselected"          # payload: reason=str, prev_row, prev_col
EVENT_TILE_SWAP_REQUEST = "tile_swap_request"      # payload: src=(r,c), dst=(r,c)
EVENT_TILE_SWAP_VALID = "tile_swap_valid"          # payload: src=(r,c), dst=(r,c)
EVENT_TILE_SWAP_INVALID = "tile_swap_invalid"      # payload: src=(r,c), dst=(r,c), reason=str
EVENT_MATCH_FOUND = "match_found"                  # payload: positions=[(r,c),...], size=int, depth=int
EVENT_MATCH_CLEARED = "match_cleared"              # payload: positions=[(r,c),...], types=[(r,c,kind),...], depth=int
EVENT_SCORE_CHANGED = "score_changed"              # payload: score=int, delta=int, depth=int
EVENT_GRAVITY_APPLIED = "gravity_applied"          # payload: moves=list[GravityMove], depth=int
EVENT_REFILL_COMPLETED = "refill_completed"        # payload: new_tiles=[(r,c),...], depth=int
EVENT_CASCADE_STEP = "cascade_step"                # payload: depth=int, positions=[(r,c),...]
EVENT_CASCADE_COMPLETE = "cascade_complete"        # payload: depth=int
EVENT_BOARD_SHUFFLED = "board_shuffled"            # payload: reason=str, resolved=bool
EVENT_SWAP_RESOLVED = "swap_resolved"              # payload: outcome=SwapOutcome


# ============================================================================
# PRESENTATION PACING
# ============================================================================
EVENT_PHASE_ADVANCE = "phase_advance"              # payload: None; boundary resumes a paced cycle


# ============================================================================
# LEVELS & PROGRESS
# ============================================================================
EVENT_MOVES_CHANGED = "moves_changed"              # payload: moves_remaining=int|None
EVENT_LEVEL_STARTED = "level_started"              # payload: level_id=int, moves=int
EVENT_LEVEL_COMPLETED = "level_completed"          # payload: level_id=int, stars=int, score=int
EVENT_LEVEL_FAILED = "level_failed"                # payload: level_id=int, score=int
EVENT_PROGRESS_SAVED = "progress_saved"            # payload: level_id=int, record=ProgressRecord
