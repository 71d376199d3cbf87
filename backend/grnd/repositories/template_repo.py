from __future__ import annotations
from typing import Optional

from pydantic import TypeAdapter
from sqlalchemy import select

from grnd.models import WorkoutTemplate
from grnd.repositories.base import BaseRepository
from grnd.session.tree import TemplateGroup

_groups_adapter = TypeAdapter(tuple[TemplateGroup, ...])

# fields a PATCH may touch; None means "leave as is"
UPDATABLE_FIELDS = ("name", "description", "target_day", "muscle_groups", "folder_id")

class TemplateRepository(BaseRepository[WorkoutTemplate]):
    model = WorkoutTemplate

    @staticmethod
    def groups_of(template: WorkoutTemplate) -> tuple[TemplateGroup, ...]:
        return _groups_adapter.validate_python(template.muscle_groups or [])

    # READS
    def list_by_user(self, user_id: int) -> list[WorkoutTemplate]:
        stmt = select(WorkoutTemplate).where(WorkoutTemplate.user_id == user_id)\
                                      .order_by(WorkoutTemplate.id.desc())
        return list(self.db.execute(stmt).scalars().all())

    def list_by_folder(self, user_id: int, folder_id: int) -> list[WorkoutTemplate]:
        stmt = select(WorkoutTemplate).where(
            WorkoutTemplate.user_id == user_id,
            WorkoutTemplate.folder_id == folder_id,
        ).order_by(WorkoutTemplate.id.desc())
        return list(self.db.execute(stmt).scalars().all())

    # WRITES
    def create(self, user_id: int, *, name: str, muscle_groups: list[dict],
               description: str | None = None, target_day: str | None = None,
               folder_id: int | None = None) -> WorkoutTemplate:
        template = WorkoutTemplate(
            user_id=user_id, name=name, description=description, target_day=target_day,
            muscle_groups=muscle_groups, folder_id=folder_id, pinned=False,
        )
        return self.save(template)

    def update(self, template_id: int, **fields) -> Optional[WorkoutTemplate]:
        template = self.get(template_id)
        if not template:
            return None
        for field in UPDATABLE_FIELDS:
            if fields.get(field) is not None:
                setattr(template, field, fields[field])
        return self.save(template)

    def set_pinned(self, template_id: int, *, pinned: bool) -> Optional[WorkoutTemplate]:
        template = self.get(template_id)
        if not template:
            return None
        template.pinned = pinned
        return self.save(template)

    def set_folder(self, template_id: int, *, folder_id: int | None) -> Optional[WorkoutTemplate]:
        template = self.get(template_id)
        if not template:
            return None
        template.folder_id = folder_id
        return self.save(template)

    def delete(self, template_id: int) -> bool:
        template = self.get(template_id)
        if not template:
            return False
        self.db.delete(template)
        self.db.commit()
        return True
