"""Document-store boundary used when a session is finished or templated."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Protocol

from grnd.session.tree import Tree


class WorkoutStore(Protocol):
    """Workout and template records; failures raise ``WorkoutStoreError``."""

    def create_workout_record(self, user_id: int, muscle_groups: Tree,
                              name: str | None = None) -> int: ...

    def update_workout_record(self, workout_id: int, muscle_groups: Tree) -> None: ...

    def complete_workout_record(self, workout_id: int, total_volume: float | None,
                                duration: int) -> None: ...

    def create_workout_from_template(self, user_id: int, template_id: int) -> int: ...

    def save_as_template_record(self, user_id: int, source_workout_id: int, name: str, *,
                                description: str | None = None, target_day: str | None = None,
                                include_weights: bool = False) -> int: ...


def default_workout_name(now: datetime | None = None) -> str:
    now = now or datetime.now(timezone.utc)
    return f"Workout {now.date().isoformat()}"
