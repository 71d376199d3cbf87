from typing import Annotated
from datetime import datetime
from pydantic import BaseModel, Field, StringConstraints

from grnd.analytics import BestSetRead
from grnd.session.tree import MuscleGroup

WorkoutName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=200)]

class WorkoutCreate(BaseModel):
    name: WorkoutName | None = None
    muscle_groups: list[MuscleGroup] = []

class WorkoutTreeUpdate(BaseModel):
    muscle_groups: list[MuscleGroup]

class WorkoutComplete(BaseModel):
    total_volume: float | None = Field(default=None, ge=0)
    duration: int | None = Field(default=None, ge=0)     # seconds

class WorkoutRead(BaseModel):
    id: int
    user_id: int
    template_id: int | None = None
    name: str
    date: datetime
    duration: int | None = None
    total_volume: float | None = None
    completed: bool
    muscle_groups: list[MuscleGroup]

    model_config = {"from_attributes": True}

class ExerciseSetCount(BaseModel):
    exercise: str
    completed_sets: int

class WorkoutSummary(BaseModel):
    id: int
    name: str
    total_volume: float
    total_reps: int
    duration: str                     # "1h 5m"
    best_sets: list[BestSetRead]
    completed_sets: list[ExerciseSetCount]
