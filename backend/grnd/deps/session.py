# grnd/deps/session.py
import threading
from functools import lru_cache
from pathlib import Path

from fastapi import Depends, HTTPException, status
from sqlalchemy.orm import Session

from grnd.db import get_db
from grnd.deps.auth import get_current_user
from grnd.models import User
from grnd.repositories.workout_store import RepositoryWorkoutStore
from grnd.session.controller import SessionController
from grnd.session.registry import SessionRegistry
from grnd.session.slots import FileSlotStore, MemorySlotStore, SlotStore
from grnd.settings import get_settings

_memory_slots: dict[int, MemorySlotStore] = {}
_memory_lock = threading.Lock()

@lru_cache
def get_registry() -> SessionRegistry:
    return SessionRegistry()

def slots_for(user_id: int) -> SlotStore:
    s = get_settings()
    if s.SESSION_STORE == "memory":
        with _memory_lock:
            return _memory_slots.setdefault(user_id, MemorySlotStore())
    return FileSlotStore(Path(s.SESSION_DIR) / str(user_id))

def get_workout_store(db: Session = Depends(get_db)) -> RepositoryWorkoutStore:
    return RepositoryWorkoutStore(db)

def find_controller(current_user: User) -> SessionController | None:
    """Live controller, or one rebuilt from the user's slots after a restart."""
    registry = get_registry()
    controller = registry.get(current_user.id)
    if controller is None:
        controller = SessionController.resume(current_user.id, slots_for(current_user.id))
        if controller is not None:
            controller = registry.put_if_absent(controller)
    return controller

def get_controller(current_user: User = Depends(get_current_user)) -> SessionController:
    controller = find_controller(current_user)
    if controller is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="no active workout")
    return controller
