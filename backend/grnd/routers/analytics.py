from __future__ import annotations
from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.orm import Session

from grnd import analytics
from grnd.db import get_db
from grnd.deps.auth import get_current_user
from grnd.models import User
from grnd.repositories.workout_repo import WorkoutRepository

router = APIRouter(prefix="/analytics", tags=["analytics"])

class AnalyticsOverview(BaseModel):
    workouts: int
    total_reps: int
    volume: list[analytics.VolumePoint]
    volume_trend: analytics.VolumeTrend
    muscle_groups: list[analytics.CountPoint]
    weekly: list[analytics.WeekPoint]
    exercise_progress: list[analytics.ExerciseProgress]
    best_sets: list[analytics.BestSetRead]

def _history(db: Session, user_id: int) -> list[analytics.HistoryEntry]:
    return [analytics.HistoryEntry.model_validate(w) for w in WorkoutRepository(db).list_completed(user_id)]

@router.get("", response_model=AnalyticsOverview)
def overview(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    entries = _history(db, current_user.id)
    volume = analytics.volume_series(entries)
    return AnalyticsOverview(
        workouts=len(entries),
        total_reps=analytics.total_reps(entries),
        volume=volume,
        volume_trend=analytics.volume_trend(volume),
        muscle_groups=analytics.muscle_group_frequency(entries),
        weekly=analytics.weekly_frequency(entries),
        exercise_progress=analytics.exercise_progress(entries),
        best_sets=analytics.best_sets(entries),
    )

@router.get("/history", response_model=list[analytics.HistoryEntry])
def history(
    sort: analytics.HistorySort = Query(analytics.HistorySort.date_newest),
    muscle_group: str | None = Query(None, max_length=120),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    entries = analytics.filter_history(_history(db, current_user.id), muscle_group)
    return analytics.sort_history(entries, sort)

@router.get("/history/muscle-groups", response_model=list[str])
def history_muscle_groups(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return analytics.muscle_group_names(_history(db, current_user.id))
