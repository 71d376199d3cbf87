from __future__ import annotations
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from grnd import analytics
from grnd.db import get_db
from grnd.deps.auth import get_current_user, owned_or_404
from grnd.models import User
from grnd.repositories.workout_repo import WorkoutRepository
from grnd.schemas.workout import (
    ExerciseSetCount, WorkoutComplete, WorkoutCreate, WorkoutRead, WorkoutSummary, WorkoutTreeUpdate,
)
from grnd.session import metrics
from grnd.session.store import default_workout_name
from grnd.session.tree import dump_tree

router = APIRouter(prefix="/workouts", tags=["workouts"])

@router.post("", response_model=WorkoutRead, status_code=status.HTTP_201_CREATED)
def create_workout(
    payload: WorkoutCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return WorkoutRepository(db).create(
        current_user.id,
        name=payload.name or default_workout_name(),
        muscle_groups=dump_tree(payload.muscle_groups),
    )

@router.get("", response_model=list[WorkoutRead])
def list_workouts(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    limit: int = Query(10, ge=1, le=200),
    offset: int = Query(0, ge=0),
):
    return WorkoutRepository(db).list_recent(current_user.id, limit=limit, offset=offset).items

@router.get("/last", response_model=WorkoutRead)
def last_workout(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    workout = WorkoutRepository(db).last(current_user.id)
    if not workout:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="no workouts yet")
    return workout

@router.get("/{workout_id}", response_model=WorkoutRead)
def get_workout(workout_id: int, db: Session = Depends(get_db),
                current_user: User = Depends(get_current_user)):
    return owned_or_404(WorkoutRepository(db).get(workout_id), current_user, "Workout")

@router.put("/{workout_id}/muscle-groups", response_model=WorkoutRead)
def update_workout_tree(
    workout_id: int,
    payload: WorkoutTreeUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    repo = WorkoutRepository(db)
    owned_or_404(repo.get(workout_id), current_user, "Workout")
    return repo.update_muscle_groups(workout_id, muscle_groups=dump_tree(payload.muscle_groups))

@router.post("/{workout_id}/complete", response_model=WorkoutRead)
def complete_workout(
    workout_id: int,
    payload: WorkoutComplete,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    repo = WorkoutRepository(db)
    owned_or_404(repo.get(workout_id), current_user, "Workout")
    return repo.complete(workout_id, total_volume=payload.total_volume, duration=payload.duration)

@router.get("/{workout_id}/summary", response_model=WorkoutSummary)
def workout_summary(workout_id: int, db: Session = Depends(get_db),
                    current_user: User = Depends(get_current_user)):
    workout = owned_or_404(WorkoutRepository(db).get(workout_id), current_user, "Workout")
    tree = WorkoutRepository.tree_of(workout)
    entry = analytics.HistoryEntry.model_validate(workout)
    return WorkoutSummary(
        id=workout.id,
        name=workout.name,
        total_volume=workout.total_volume if workout.total_volume is not None else metrics.total_volume(tree),
        total_reps=metrics.total_reps(tree),
        duration=metrics.format_duration(workout.duration),
        best_sets=analytics.best_sets([entry]),
        completed_sets=[
            ExerciseSetCount(exercise=name, completed_sets=count)
            for name, count in metrics.completed_sets_by_exercise(tree)
        ],
    )
