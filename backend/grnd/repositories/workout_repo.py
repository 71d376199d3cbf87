from __future__ import annotations
from typing import Optional

from pydantic import TypeAdapter
from sqlalchemy import select

from grnd.models import Workout
from grnd.repositories.base import BaseRepository, Page
from grnd.session.tree import MuscleGroup, Tree

_tree_adapter = TypeAdapter(tuple[MuscleGroup, ...])

class WorkoutRepository(BaseRepository[Workout]):
    model = Workout

    @staticmethod
    def tree_of(workout: Workout) -> Tree:
        return _tree_adapter.validate_python(workout.muscle_groups or [])

    # READS
    def list_recent(self, user_id: int, *, limit: int = 10, offset: int = 0) -> Page[Workout]:
        stmt = select(Workout).where(Workout.user_id == user_id).order_by(Workout.id.desc())
        return self.page_from_stmt(stmt, limit=limit, offset=offset)

    def last(self, user_id: int) -> Optional[Workout]:
        stmt = select(Workout).where(Workout.user_id == user_id).order_by(Workout.id.desc()).limit(1)
        return self.db.execute(stmt).scalar_one_or_none()

    def list_completed(self, user_id: int) -> list[Workout]:
        stmt = select(Workout).where(Workout.user_id == user_id, Workout.completed.is_(True))\
                              .order_by(Workout.date.asc(), Workout.id.asc())
        return list(self.db.execute(stmt).scalars().all())

    # WRITES
    def create(self, user_id: int, *, name: str, muscle_groups: list[dict],
               template_id: int | None = None) -> Workout:
        workout = Workout(user_id=user_id, name=name, muscle_groups=muscle_groups,
                          template_id=template_id, completed=False)
        return self.save(workout)

    def update_muscle_groups(self, workout_id: int, *, muscle_groups: list[dict]) -> Optional[Workout]:
        workout = self.get(workout_id)
        if not workout:
            return None
        workout.muscle_groups = muscle_groups
        return self.save(workout)

    def complete(self, workout_id: int, *, total_volume: float | None, duration: int | None) -> Optional[Workout]:
        workout = self.get(workout_id)
        if not workout:
            return None
        workout.completed = True
        workout.total_volume = total_volume
        workout.duration = duration if isinstance(duration, int) else 0
        return self.save(workout)
