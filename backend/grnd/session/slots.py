"""Durable key-value slots for an in-progress workout.

One slot per concern (``workoutSetup``, ``selectedExercises``,
``workoutProgress``); a missing key means there is no active session.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)

SETUP_KEY = "workoutSetup"
SELECTED_EXERCISES_KEY = "selectedExercises"
PROGRESS_KEY = "workoutProgress"
SESSION_KEYS = (SETUP_KEY, SELECTED_EXERCISES_KEY, PROGRESS_KEY)


class SlotStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class MemorySlotStore:
    """Slots held in a dict; survives only as long as the process."""

    def __init__(self):
        self._values: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value

    def delete(self, key: str) -> None:
        self._values.pop(key, None)


class FileSlotStore:
    """One JSON file per key inside ``directory``."""

    def __init__(self, directory: Path | str):
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get(self, key: str) -> str | None:
        path = self._path(key)
        if not path.exists():
            return None
        text = path.read_text(encoding="utf-8").strip()
        return text or None

    def set(self, key: str, value: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        tmp = self._path(key).with_suffix(".tmp")
        tmp.write_text(value, encoding="utf-8")
        tmp.replace(self._path(key))

    def delete(self, key: str) -> None:
        try:
            self._path(key).unlink()
        except FileNotFoundError:
            pass


def clear_session_slots(slots: SlotStore) -> None:
    for key in SESSION_KEYS:
        try:
            slots.delete(key)
        except OSError:
            logger.warning("could not clear slot %s", key, exc_info=True)
