from typing import Annotated
from datetime import datetime
from pydantic import BaseModel, StringConstraints

FolderName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=120)]

class FolderCreate(BaseModel):
    name: FolderName

class FolderRename(BaseModel):
    name: FolderName

class FolderRead(BaseModel):
    id: int
    user_id: int
    name: str
    pinned: bool
    created_at: datetime | None = None

    model_config = {"from_attributes": True}
