from __future__ import annotations
from typing import Optional

from sqlalchemy import select, update, delete

from grnd.models import Folder, WorkoutTemplate
from grnd.repositories.base import BaseRepository

class FolderRepository(BaseRepository[Folder]):
    model = Folder

    def list_by_user(self, user_id: int) -> list[Folder]:
        stmt = select(Folder).where(Folder.user_id == user_id).order_by(Folder.id.desc())
        return list(self.db.execute(stmt).scalars().all())

    def create(self, user_id: int, *, name: str) -> Folder:
        return self.save(Folder(user_id=user_id, name=name, pinned=False))

    def rename(self, folder_id: int, *, name: str) -> Optional[Folder]:
        folder = self.get(folder_id)
        if not folder:
            return None
        folder.name = name
        return self.save(folder)

    def set_pinned(self, folder_id: int, *, pinned: bool) -> Optional[Folder]:
        folder = self.get(folder_id)
        if not folder:
            return None
        folder.pinned = pinned
        return self.save(folder)

    def delete(self, folder_id: int, *, delete_templates: bool = False) -> bool:
        """Remove a folder; its templates are deleted or moved out of it."""
        folder = self.get(folder_id)
        if not folder:
            return False
        in_folder = WorkoutTemplate.folder_id == folder_id
        if delete_templates:
            self.db.execute(delete(WorkoutTemplate).where(in_folder))
        else:
            self.db.execute(update(WorkoutTemplate).where(in_folder).values(folder_id=None))
        self.db.delete(folder)
        self.db.commit()
        return True
