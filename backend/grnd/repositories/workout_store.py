from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from grnd.repositories.template_repo import TemplateRepository
from grnd.repositories.workout_repo import WorkoutRepository
from grnd.session.errors import WorkoutStoreError
from grnd.session.store import default_workout_name
from grnd.session.tree import dump_tree, from_template_groups, to_template_groups

logger = logging.getLogger(__name__)


class RepositoryWorkoutStore:
    """WorkoutStore backed by the repositories of one DB session."""

    def __init__(self, db: Session):
        self.db = db
        self.workouts = WorkoutRepository(db)
        self.templates = TemplateRepository(db)

    def _fail(self, message: str, exc: Exception | None = None) -> WorkoutStoreError:
        if exc is not None:
            logger.error("%s", message, exc_info=exc)
            self.db.rollback()
        return WorkoutStoreError(message)

    def create_workout_record(self, user_id, muscle_groups, name=None):
        try:
            workout = self.workouts.create(
                user_id,
                name=name or default_workout_name(),
                muscle_groups=dump_tree(muscle_groups),
            )
        except SQLAlchemyError as e:
            raise self._fail("could not create workout", e) from e
        return workout.id

    def update_workout_record(self, workout_id, muscle_groups):
        try:
            workout = self.workouts.update_muscle_groups(workout_id, muscle_groups=dump_tree(muscle_groups))
        except SQLAlchemyError as e:
            raise self._fail("could not update workout", e) from e
        if workout is None:
            raise self._fail("workout not found")

    def complete_workout_record(self, workout_id, total_volume, duration):
        try:
            workout = self.workouts.complete(workout_id, total_volume=total_volume, duration=duration)
        except SQLAlchemyError as e:
            raise self._fail("could not complete workout", e) from e
        if workout is None:
            raise self._fail("workout not found")

    def create_workout_from_template(self, user_id, template_id):
        template = self.templates.get(template_id)
        if template is None:
            raise self._fail("template not found")
        if template.user_id != user_id:
            raise self._fail("unauthorized")
        tree = from_template_groups(TemplateRepository.groups_of(template))
        today = datetime.now(timezone.utc).date().isoformat()
        try:
            workout = self.workouts.create(
                user_id,
                name=template.name or f"Workout from template ({today})",
                muscle_groups=dump_tree(tree),
                template_id=template.id,
            )
        except SQLAlchemyError as e:
            raise self._fail("could not create workout from template", e) from e
        return workout.id

    def save_as_template_record(self, user_id, source_workout_id, name, *,
                                description=None, target_day=None, include_weights=False):
        workout = self.workouts.get(source_workout_id)
        if workout is None:
            raise self._fail("workout not found")
        if workout.user_id != user_id:
            raise self._fail("unauthorized")
        groups = to_template_groups(WorkoutRepository.tree_of(workout), include_weights)
        try:
            template = self.templates.create(
                user_id,
                name=name,
                description=description,
                target_day=target_day,
                muscle_groups=dump_tree(groups),
            )
        except SQLAlchemyError as e:
            raise self._fail("could not save template", e) from e
        return template.id
