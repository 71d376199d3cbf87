from typing import Annotated
from datetime import datetime
from pydantic import BaseModel, Field, StringConstraints

from grnd.session.tree import MuscleGroup, SetType

NotesStr = Annotated[str, StringConstraints(strip_whitespace=True, max_length=500)]
ExerciseName = Annotated[str, Field(max_length=200)]

class SessionStart(BaseModel):
    day: str
    muscle_groups: list[str]
    selected_exercises: dict[str, list[str]]
    notes: NotesStr = ""
    name: str | None = None

class ExerciseNameUpdate(BaseModel):
    name: ExerciseName

class ExerciseNotesUpdate(BaseModel):
    notes: Annotated[str, Field(max_length=2000)]

class SetFieldUpdate(BaseModel):
    weight: str | None = None
    reps: str | None = None

class SetTypeUpdate(BaseModel):
    type: SetType

class TemplateSave(BaseModel):
    name: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=200)]
    description: str | None = None
    target_day: str | None = None
    include_weights: bool = False

class SetDisplay(BaseModel):
    id: str
    label: str
    weight_hint: str
    reps_hint: str

class SessionRead(BaseModel):
    state: str
    day: str
    name: str | None = None
    notes: str = ""
    template_id: int | None = None
    started_at: datetime
    recovered: bool
    elapsed_seconds: int
    elapsed: str                         # "MM:SS" or "HH:MM:SS"
    last_saved: float | None = None
    total_volume: float
    total_reps: int
    completion_percentage: int
    muscle_groups: list[MuscleGroup]
    # per exercise id, the label and placeholder hints of each set
    set_display: dict[str, list[SetDisplay]]

class CompletedWorkoutRead(BaseModel):
    workout_id: int
    total_volume: float
    duration: int
    duration_display: str
    muscle_groups: list[MuscleGroup]

class TemplateSaved(BaseModel):
    template_id: int
