from __future__ import annotations

import threading

from grnd.session.controller import SessionController


class SessionRegistry:
    """Active session controllers keyed by user id."""

    def __init__(self):
        self._lock = threading.Lock()
        self._controllers: dict[int, SessionController] = {}
        self._start_locks: dict[int, threading.Lock] = {}

    def get(self, user_id: int) -> SessionController | None:
        with self._lock:
            return self._controllers.get(user_id)

    def put(self, controller: SessionController) -> None:
        with self._lock:
            self._controllers[controller.user_id] = controller

    def put_if_absent(self, controller: SessionController) -> SessionController:
        """Register ``controller`` unless the user already has one; return the registered one."""
        with self._lock:
            return self._controllers.setdefault(controller.user_id, controller)

    def starting(self, user_id: int) -> threading.Lock:
        """Per-user lock held while a session is looked up and started."""
        with self._lock:
            return self._start_locks.setdefault(user_id, threading.Lock())

    def discard(self, user_id: int) -> None:
        with self._lock:
            self._controllers.pop(user_id, None)
