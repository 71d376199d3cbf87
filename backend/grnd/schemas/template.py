from typing import Annotated
from datetime import datetime
from pydantic import BaseModel, StringConstraints

from grnd.session.tree import TemplateGroup

TemplateName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=200)]
DescriptionStr = Annotated[str, StringConstraints(strip_whitespace=True, max_length=1000)]
DayStr = Annotated[str, StringConstraints(strip_whitespace=True, max_length=20)]

class TemplateCreate(BaseModel):
    name: TemplateName
    description: DescriptionStr | None = None
    target_day: DayStr | None = None
    muscle_groups: list[TemplateGroup] = []
    folder_id: int | None = None

class TemplateUpdate(BaseModel):
    name: TemplateName | None = None
    description: DescriptionStr | None = None
    target_day: DayStr | None = None
    muscle_groups: list[TemplateGroup] | None = None

class TemplateFromWorkout(BaseModel):
    workout_id: int
    name: TemplateName
    description: DescriptionStr | None = None
    target_day: DayStr | None = None
    include_weights: bool = False

class PinUpdate(BaseModel):
    pinned: bool

class TemplateRead(BaseModel):
    id: int
    user_id: int
    folder_id: int | None = None
    name: str
    description: str | None = None
    target_day: str | None = None
    muscle_groups: list[TemplateGroup]
    pinned: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}
