"""Crash-recovery snapshots of the active workout tree."""
from __future__ import annotations

import logging
import time
from typing import Callable

from pydantic import BaseModel, ValidationError

from grnd.session.slots import PROGRESS_KEY, SlotStore
from grnd.session.tree import MuscleGroup, Tree

logger = logging.getLogger(__name__)


class SavedWorkoutProgress(BaseModel):
    muscle_groups: tuple[MuscleGroup, ...]
    elapsed_seconds: int
    last_saved: float


class SessionProgress:
    """Mirror of the live tree in the ``workoutProgress`` slot.

    The live tree stays the source of truth: a failed write is logged and
    forgotten, and an unreadable snapshot is discarded.
    """

    def __init__(self, slots: SlotStore, clock: Callable[[], float] = time.time):
        self.slots = slots
        self.clock = clock
        self.last_saved: float | None = None

    def save(self, tree: Tree, elapsed_seconds: int) -> None:
        try:
            snapshot = SavedWorkoutProgress(
                muscle_groups=tuple(tree),
                elapsed_seconds=int(elapsed_seconds),
                last_saved=self.clock(),
            )
            self.slots.set(PROGRESS_KEY, snapshot.model_dump_json())
            self.last_saved = snapshot.last_saved
        except Exception:
            logger.warning("failed to write workout progress snapshot", exc_info=True)

    def load(self) -> SavedWorkoutProgress | None:
        try:
            raw = self.slots.get(PROGRESS_KEY)
        except OSError:
            logger.warning("failed to read workout progress snapshot", exc_info=True)
            return None
        except UnicodeDecodeError:
            logger.error("discarding undecodable workout progress snapshot")
            self.clear()
            return None
        if raw is None:
            return None
        try:
            snapshot = SavedWorkoutProgress.model_validate_json(raw)
        except ValidationError:
            logger.error("discarding corrupt workout progress snapshot")
            self.clear()
            return None
        if not snapshot.muscle_groups:
            return None
        self.last_saved = snapshot.last_saved
        return snapshot

    def clear(self) -> None:
        try:
            self.slots.delete(PROGRESS_KEY)
        except OSError:
            logger.warning("failed to clear workout progress snapshot", exc_info=True)
        self.last_saved = None
