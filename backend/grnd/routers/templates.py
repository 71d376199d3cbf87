from __future__ import annotations
import time
from datetime import datetime, timezone
from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from grnd.db import get_db
from grnd.deps.auth import get_current_user, owned_or_404
from grnd.deps.session import get_workout_store
from grnd.models import User
from grnd.repositories.folder_repo import FolderRepository
from grnd.repositories.template_repo import TemplateRepository
from grnd.repositories.workout_repo import WorkoutRepository
from grnd.repositories.workout_store import RepositoryWorkoutStore
from grnd.routers.session import begin_session, session_read
from grnd.schemas.folder import FolderRead
from grnd.schemas.session import SessionRead
from grnd.schemas.template import PinUpdate, TemplateCreate, TemplateFromWorkout, TemplateRead, TemplateUpdate
from grnd.schemas.workout import WorkoutRead
from grnd.session.controller import WorkoutSetup
from grnd.session.errors import WorkoutStoreError
from grnd.session.tree import dump_tree

router = APIRouter(prefix="/templates", tags=["templates"])

def _owned_template(db: Session, template_id: int, current_user: User):
    return owned_or_404(TemplateRepository(db).get(template_id), current_user, "Template")

@router.get("", response_model=list[TemplateRead])
def list_templates(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return TemplateRepository(db).list_by_user(current_user.id)

@router.post("", response_model=TemplateRead, status_code=status.HTTP_201_CREATED)
def create_template(
    payload: TemplateCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if payload.folder_id is not None:
        owned_or_404(FolderRepository(db).get(payload.folder_id), current_user, "Folder")
    return TemplateRepository(db).create(
        current_user.id,
        name=payload.name,
        description=payload.description,
        target_day=payload.target_day,
        muscle_groups=dump_tree(payload.muscle_groups),
        folder_id=payload.folder_id,
    )

@router.post("/from-workout", response_model=TemplateRead, status_code=status.HTTP_201_CREATED)
def save_workout_as_template(
    payload: TemplateFromWorkout,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    store: RepositoryWorkoutStore = Depends(get_workout_store),
):
    try:
        template_id = store.save_as_template_record(
            current_user.id, payload.workout_id, payload.name,
            description=payload.description,
            target_day=payload.target_day,
            include_weights=payload.include_weights,
        )
    except WorkoutStoreError:
        # missing and foreign workouts look the same to the caller
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Workout not found")
    return TemplateRepository(db).get(template_id)

@router.get("/{template_id}", response_model=TemplateRead)
def get_template(template_id: int, db: Session = Depends(get_db),
                 current_user: User = Depends(get_current_user)):
    return _owned_template(db, template_id, current_user)

@router.patch("/{template_id}", response_model=TemplateRead)
def update_template(
    template_id: int,
    payload: TemplateUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    _owned_template(db, template_id, current_user)
    fields = payload.model_dump(exclude_none=True)
    if payload.muscle_groups is not None:
        fields["muscle_groups"] = dump_tree(payload.muscle_groups)
    return TemplateRepository(db).update(template_id, **fields)

@router.delete("/{template_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_template(template_id: int, db: Session = Depends(get_db),
                    current_user: User = Depends(get_current_user)):
    _owned_template(db, template_id, current_user)
    TemplateRepository(db).delete(template_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

@router.put("/{template_id}/pin", response_model=TemplateRead)
def pin_template(
    template_id: int,
    payload: PinUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    _owned_template(db, template_id, current_user)
    return TemplateRepository(db).set_pinned(template_id, pinned=payload.pinned)

@router.get("/{template_id}/folder", response_model=FolderRead | None)
def folder_of_template(template_id: int, db: Session = Depends(get_db),
                       current_user: User = Depends(get_current_user)):
    template = _owned_template(db, template_id, current_user)
    if template.folder_id is None:
        return None
    return FolderRepository(db).get(template.folder_id)

@router.post("/{template_id}/workouts", response_model=WorkoutRead, status_code=status.HTTP_201_CREATED)
def create_workout_from_template(
    template_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    store: RepositoryWorkoutStore = Depends(get_workout_store),
):
    _owned_template(db, template_id, current_user)
    try:
        workout_id = store.create_workout_from_template(current_user.id, template_id)
    except WorkoutStoreError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
    return WorkoutRepository(db).get(workout_id)

@router.post("/{template_id}/start", response_model=SessionRead, status_code=status.HTTP_201_CREATED)
def start_session_from_template(template_id: int, db: Session = Depends(get_db),
                                current_user: User = Depends(get_current_user)):
    """Begin an active workout whose groups and exercises come from the template."""
    template = _owned_template(db, template_id, current_user)
    groups = TemplateRepository.groups_of(template)
    now = time.time()
    started = datetime.fromtimestamp(now, tz=timezone.utc)
    setup = WorkoutSetup(
        day=template.target_day or started.strftime("%A").lower(),
        muscle_groups=[g.id for g in groups],
        notes=template.description or "",
        timestamp=started,
        start_time=now,
        name=template.name,
        template_id=template.id,
    )
    selected = {g.id: [e.name for e in g.exercises] for g in groups}
    return session_read(begin_session(current_user, setup, selected))
