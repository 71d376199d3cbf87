from fastapi import APIRouter
from pydantic import BaseModel

from grnd.catalog import MUSCLE_GROUP_LABELS, exercises_for

router = APIRouter(prefix="/catalog", tags=["catalog"])

class MuscleGroupEntry(BaseModel):
    id: str
    label: str
    exercises: list[str]

@router.get("/muscle-groups", response_model=list[MuscleGroupEntry])
def list_muscle_groups():
    return [
        MuscleGroupEntry(id=group_id, label=label, exercises=exercises_for(group_id))
        for group_id, label in MUSCLE_GROUP_LABELS.items()
    ]
