"""Lifecycle of one active workout session.

The controller is the only writer of the live tree. Each successful
mutation mirrors the tree to the recovery slot, and finishing hands the
pruned tree to the document store before the slots are cleared.
"""
from __future__ import annotations

import json
import logging
import math
import time
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, Mapping, Sequence

from pydantic import BaseModel, TypeAdapter

from grnd.catalog import label_for
from grnd.session import metrics
from grnd.session import tree as ops
from grnd.session.errors import (
    InvalidSessionState,
    SessionStorageError,
    SetupError,
    WorkoutStoreError,
)
from grnd.session.progress import SessionProgress
from grnd.session.slots import (
    SELECTED_EXERCISES_KEY,
    SETUP_KEY,
    SlotStore,
    clear_session_slots,
)
from grnd.session.store import WorkoutStore
from grnd.session.tree import SetType, ToggleOutcome, Tree

logger = logging.getLogger(__name__)

_SELECTED_EXERCISES = TypeAdapter(dict[str, list[str]])


class SessionState(str, Enum):
    uninitialized = "uninitialized"
    active = "active"
    completed = "completed"
    cancelled = "cancelled"


class WorkoutSetup(BaseModel):
    day: str
    muscle_groups: list[str]
    notes: str = ""
    timestamp: datetime
    start_time: float                     # epoch seconds when the session began
    name: str | None = None
    template_id: int | None = None


@dataclass(slots=True)
class CompletedWorkout:
    workout_id: int
    muscle_groups: Tree
    total_volume: float
    duration: int


class SessionController:
    def __init__(self, user_id: int, slots: SlotStore, *, clock: Callable[[], float] = time.time):
        self.user_id = user_id
        self.slots = slots
        self.clock = clock
        self.progress = SessionProgress(slots, clock)
        self.state = SessionState.uninitialized
        self.setup: WorkoutSetup | None = None
        self.tree: Tree = ()
        self.elapsed_seconds = 0
        self.recovered = False
        self._started_at = 0.0

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _require(self, *states: SessionState) -> None:
        if self.state not in states:
            raise InvalidSessionState(f"session is {self.state.value}")

    def _compute_elapsed(self) -> int:
        return max(0, math.floor(self.clock() - self._started_at))

    def _write_slot(self, key: str, value: str) -> None:
        try:
            self.slots.set(key, value)
        except OSError:
            logger.warning("failed to write slot %s", key, exc_info=True)

    def _apply(self, new_tree: Tree) -> Tree:
        if new_tree is not self.tree:
            self.tree = new_tree
            self.elapsed_seconds = self._compute_elapsed()
            self.progress.save(self.tree, self.elapsed_seconds)
        return self.tree

    @property
    def last_saved(self) -> float | None:
        return self.progress.last_saved

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self, setup: WorkoutSetup, selected_exercises: Mapping[str, Sequence[str]]) -> Tree:
        """Begin the session, resuming from a recovery snapshot when one exists."""
        self._require(SessionState.uninitialized)
        if not setup.muscle_groups:
            raise SetupError("setup has no muscle groups")
        missing = [g for g in setup.muscle_groups if not selected_exercises.get(g)]
        if missing:
            raise SetupError("pick exercises for every muscle group", missing_groups=missing)

        self._write_slot(SETUP_KEY, setup.model_dump_json())
        self._write_slot(SELECTED_EXERCISES_KEY,
                         json.dumps({k: list(v) for k, v in selected_exercises.items()}))

        self.setup = setup
        snapshot = self.progress.load()
        if snapshot is not None:
            # the snapshot always wins; the timer continues from its elapsed time
            self.tree = snapshot.muscle_groups
            self.elapsed_seconds = snapshot.elapsed_seconds
            self._started_at = self.clock() - snapshot.elapsed_seconds
            self.recovered = True
            logger.info("restored workout progress for user %s", self.user_id)
        else:
            self.tree = ops.build_tree(setup.muscle_groups, selected_exercises, label_for)
            self._started_at = setup.start_time
            self.elapsed_seconds = self._compute_elapsed()
            self.recovered = False
            self.progress.save(self.tree, self.elapsed_seconds)
        self.state = SessionState.active
        return self.tree

    @classmethod
    def resume(cls, user_id: int, slots: SlotStore, *,
               clock: Callable[[], float] = time.time) -> "SessionController | None":
        """Rebuild the active session from its slots after a restart."""
        controller = cls(user_id, slots, clock=clock)
        try:
            raw_setup = slots.get(SETUP_KEY)
            raw_selected = slots.get(SELECTED_EXERCISES_KEY)
            if raw_setup is None or raw_selected is None:
                return None
            setup = WorkoutSetup.model_validate_json(raw_setup)
            selected = _SELECTED_EXERCISES.validate_json(raw_selected)
            controller.start(setup, selected)
        except OSError:
            logger.warning("failed to read session slots for user %s", user_id, exc_info=True)
            return None
        except (ValueError, SetupError):
            # ValueError covers undecodable bytes and failed validation
            logger.error("discarding unusable session slots for user %s", user_id)
            clear_session_slots(slots)
            return None
        return controller

    def tick(self) -> int:
        self._require(SessionState.active)
        self.elapsed_seconds = self._compute_elapsed()
        self.progress.save(self.tree, self.elapsed_seconds)
        return self.elapsed_seconds

    def finish(self, store: WorkoutStore) -> CompletedWorkout:
        self._require(SessionState.active)
        pruned = ops.prune_unnamed(self.tree)
        duration = self._compute_elapsed()
        volume = metrics.total_volume(pruned)
        try:
            if self.setup.template_id is not None:
                workout_id = store.create_workout_from_template(self.user_id, self.setup.template_id)
                store.update_workout_record(workout_id, pruned)
            else:
                workout_id = store.create_workout_record(self.user_id, pruned, name=self.setup.name)
            store.complete_workout_record(workout_id, volume, duration)
        except WorkoutStoreError as e:
            logger.error("finishing workout for user %s failed: %s", self.user_id, e)
            raise SessionStorageError("failed to save workout, please try again") from e

        clear_session_slots(self.slots)
        self.progress.last_saved = None
        self.elapsed_seconds = duration
        self.state = SessionState.completed
        return CompletedWorkout(workout_id=workout_id, muscle_groups=pruned,
                                total_volume=volume, duration=duration)

    def cancel(self) -> None:
        self._require(SessionState.active)
        clear_session_slots(self.slots)
        self.progress.last_saved = None
        self.tree = ()
        self.state = SessionState.cancelled

    def save_as_template(self, store: WorkoutStore, name: str, *, include_weights: bool = False,
                         description: str | None = None, target_day: str | None = None) -> int:
        self._require(SessionState.active)
        pruned = ops.prune_unnamed(self.tree)
        try:
            workout_id = store.create_workout_record(self.user_id, pruned)
            return store.save_as_template_record(
                self.user_id, workout_id, name,
                description=description, target_day=target_day,
                include_weights=include_weights,
            )
        except WorkoutStoreError as e:
            logger.error("saving template for user %s failed: %s", self.user_id, e)
            raise SessionStorageError("failed to save workout template, please try again") from e

    # ------------------------------------------------------------------
    # Tree mutations
    # ------------------------------------------------------------------

    def add_exercise(self, group_id: str) -> Tree:
        self._require(SessionState.active)
        return self._apply(ops.add_exercise(self.tree, group_id))

    def remove_exercise(self, group_id: str, exercise_id: str) -> Tree:
        self._require(SessionState.active)
        return self._apply(ops.remove_exercise(self.tree, group_id, exercise_id))

    def remove_muscle_group(self, group_id: str) -> Tree:
        self._require(SessionState.active)
        return self._apply(ops.remove_muscle_group(self.tree, group_id))

    def update_exercise_name(self, group_id: str, exercise_id: str, name: str) -> Tree:
        self._require(SessionState.active)
        return self._apply(ops.update_exercise_name(self.tree, group_id, exercise_id, name))

    def update_exercise_notes(self, group_id: str, exercise_id: str, notes: str) -> Tree:
        self._require(SessionState.active)
        return self._apply(ops.update_exercise_notes(self.tree, group_id, exercise_id, notes))

    def add_set(self, group_id: str, exercise_id: str) -> Tree:
        self._require(SessionState.active)
        return self._apply(ops.add_set(self.tree, group_id, exercise_id))

    def remove_set(self, group_id: str, exercise_id: str, set_id: str) -> Tree:
        self._require(SessionState.active)
        return self._apply(ops.remove_set(self.tree, group_id, exercise_id, set_id))

    def update_set_field(self, group_id: str, exercise_id: str, set_id: str,
                         field: str, value: str) -> Tree:
        self._require(SessionState.active)
        return self._apply(ops.update_set_field(self.tree, group_id, exercise_id, set_id, field, value))

    def update_set_type(self, group_id: str, exercise_id: str, set_id: str, set_type: SetType) -> Tree:
        self._require(SessionState.active)
        return self._apply(ops.update_set_type(self.tree, group_id, exercise_id, set_id, set_type))

    def toggle_set_completion(self, group_id: str, exercise_id: str, set_id: str) -> ToggleOutcome:
        self._require(SessionState.active)
        new_tree, outcome = ops.toggle_set_completion(self.tree, group_id, exercise_id, set_id)
        if outcome == ToggleOutcome.ok:
            self._apply(new_tree)
        return outcome

    # ------------------------------------------------------------------
    # Metrics
    # ------------------------------------------------------------------

    @property
    def total_volume(self) -> float:
        return metrics.total_volume(self.tree)

    @property
    def total_reps(self) -> int:
        return metrics.total_reps(self.tree)

    @property
    def completion_percentage(self) -> int:
        return metrics.completion_percentage(self.tree)
