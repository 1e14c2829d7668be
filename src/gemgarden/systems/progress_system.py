from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, Mapping, Optional, Protocol

from esper import World

from gemgarden.components.progress import ProgressRecord
from gemgarden.constants import DEFAULT_SAVE_PATH
from gemgarden.events.bus import EVENT_LEVEL_COMPLETED, EVENT_PROGRESS_SAVED, EventBus
from gemgarden.utils.game_state import get_or_create_progress_tracker

logger = logging.getLogger(__name__)


class ProgressStore(Protocol):
    """Persistence collaborator for per-level progress records."""

    def load(self) -> Dict[int, ProgressRecord]: ...

    def save(self, records: Mapping[int, ProgressRecord]) -> None: ...


class MemoryProgressStore:
    """Keeps progress in memory; useful for tests and throwaway sessions."""

    def __init__(self, records: Optional[Mapping[int, ProgressRecord]] = None) -> None:
        self.records: Dict[int, ProgressRecord] = dict(records or {})
        self.saves = 0

    def load(self) -> Dict[int, ProgressRecord]:
        return {
            level_id: ProgressRecord(record.completed, record.stars, record.best_score)
            for level_id, record in self.records.items()
        }

    def save(self, records: Mapping[int, ProgressRecord]) -> None:
        self.records = {
            level_id: ProgressRecord(record.completed, record.stars, record.best_score)
            for level_id, record in records.items()
        }
        self.saves += 1


class JsonProgressStore:
    """Stores progress as a JSON document on disk.

    A missing file loads as empty progress. Malformed content raises
    ValueError so the caller can decide how to recover.
    """

    def __init__(self, path: Path | str = DEFAULT_SAVE_PATH) -> None:
        self.path = Path(path)

    def load(self) -> Dict[int, ProgressRecord]:
        try:
            with self.path.open("r", encoding="utf-8") as handle:
                payload = json.load(handle)
        except FileNotFoundError:
            return {}
        levels = payload.get("levels", {}) if isinstance(payload, dict) else None
        if not isinstance(levels, dict):
            raise ValueError(f"Progress file {self.path} has no 'levels' mapping")
        records: Dict[int, ProgressRecord] = {}
        for key, entry in levels.items():
            if not isinstance(entry, dict):
                raise ValueError(f"Progress entry for level {key!r} is not an object")
            records[int(key)] = ProgressRecord(
                completed=bool(entry.get("completed", False)),
                stars=int(entry.get("stars", 0)),
                best_score=int(entry.get("best_score", 0)),
            )
        return records

    def save(self, records: Mapping[int, ProgressRecord]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", encoding="utf-8") as handle:
            json.dump({
                "levels": {
                    str(level_id): {
                        "completed": record.completed,
                        "stars": record.stars,
                        "best_score": record.best_score,
                    }
                    for level_id, record in sorted(records.items())
                },
            }, handle, indent=2)


def record_completion(records: Dict[int, ProgressRecord], level_id: int, stars: int, score: int) -> ProgressRecord:
    """Mark a level completed, raising stored stars / best score only when beaten."""
    record = records.get(level_id)
    if record is None:
        record = ProgressRecord()
        records[level_id] = record
    record.completed = True
    if stars > record.stars:
        record.stars = stars
    if score > record.best_score:
        record.best_score = score
    return record


def is_level_unlocked(records: Mapping[int, ProgressRecord], level_id: int) -> bool:
    if level_id <= 1:
        return True
    previous = records.get(level_id - 1)
    return previous is not None and previous.completed


class ProgressSystem:
    """Tracks and persists level progress across sessions."""

    def __init__(
        self,
        world: World,
        event_bus: EventBus,
        *,
        store: ProgressStore | None = None,
        load_existing: bool = True,
    ) -> None:
        self.world = world
        self.event_bus = event_bus
        self.store: ProgressStore = store if store is not None else JsonProgressStore()
        self.event_bus.subscribe(EVENT_LEVEL_COMPLETED, self._on_level_completed)
        if load_existing:
            self.load_progress()

    @property
    def records(self) -> Dict[int, ProgressRecord]:
        return get_or_create_progress_tracker(self.world).records

    def load_progress(self) -> None:
        tracker = get_or_create_progress_tracker(self.world)
        try:
            tracker.records = self.store.load()
        except (OSError, ValueError, TypeError) as exc:
            logger.warning("Could not load level progress, starting fresh: %s", exc)
            tracker.records = {}

    def save_progress(self) -> bool:
        try:
            self.store.save(self.records)
        except (OSError, ValueError, TypeError) as exc:
            logger.warning("Could not save level progress: %s", exc)
            return False
        return True

    def reset_progress(self) -> None:
        get_or_create_progress_tracker(self.world).records = {}
        self.save_progress()

    def is_unlocked(self, level_id: int) -> bool:
        return is_level_unlocked(self.records, level_id)

    def record_for(self, level_id: int) -> Optional[ProgressRecord]:
        return self.records.get(level_id)

    def _on_level_completed(self, sender, **payload) -> None:
        level_id = payload.get("level_id")
        if level_id is None:
            return
        record = record_completion(
            self.records,
            int(level_id),
            int(payload.get("stars", 0)),
            int(payload.get("score", 0)),
        )
        if self.save_progress():
            self.event_bus.emit(EVENT_PROGRESS_SAVED, level_id=level_id, record=record)
