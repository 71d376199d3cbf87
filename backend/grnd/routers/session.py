from __future__ import annotations
import logging
import time
from datetime import datetime, timezone
from fastapi import APIRouter, Depends, HTTPException, Response, status
from fastapi.responses import JSONResponse

from grnd.deps.auth import get_current_user
from grnd.deps.session import (
    find_controller, get_controller, get_registry, get_workout_store, slots_for,
)
from grnd.models import User
from grnd.repositories.workout_store import RepositoryWorkoutStore
from grnd.schemas.session import (
    CompletedWorkoutRead, ExerciseNameUpdate, ExerciseNotesUpdate, SessionRead, SessionStart,
    SetDisplay, SetFieldUpdate, SetTypeUpdate, TemplateSave, TemplateSaved,
)
from grnd.session import metrics
from grnd.session import tree as ops
from grnd.session.controller import SessionController, WorkoutSetup
from grnd.session.errors import InvalidSessionState, SessionStorageError, SetupError
from grnd.session.tree import ToggleOutcome

log = logging.getLogger("uvicorn")

router = APIRouter(prefix="/session", tags=["session"])

GROUP = "/groups/{group_id}"
EXERCISE = GROUP + "/exercises/{exercise_id}"
SET = EXERCISE + "/sets/{set_id}"


def session_read(controller: SessionController) -> SessionRead:
    setup = controller.setup
    display = {
        exercise.id: [
            SetDisplay(id=s.id, label=label, weight_hint=hint[0], reps_hint=hint[1])
            for s, label, hint in zip(
                exercise.sets,
                ops.set_labels(exercise.sets),
                (ops.placeholder_hint(exercise.sets, i) for i in range(len(exercise.sets))),
            )
        ]
        for group in controller.tree for exercise in group.exercises
    }
    return SessionRead(
        state=controller.state.value,
        day=setup.day,
        name=setup.name,
        notes=setup.notes,
        template_id=setup.template_id,
        started_at=datetime.fromtimestamp(setup.start_time, tz=timezone.utc),
        recovered=controller.recovered,
        elapsed_seconds=controller.elapsed_seconds,
        elapsed=metrics.format_elapsed(controller.elapsed_seconds),
        last_saved=controller.last_saved,
        total_volume=controller.total_volume,
        total_reps=controller.total_reps,
        completion_percentage=controller.completion_percentage,
        muscle_groups=list(controller.tree),
        set_display=display,
    )


def begin_session(current_user: User, setup: WorkoutSetup,
                  selected: dict[str, list[str]]) -> SessionController:
    """Start and register a controller; shared with starting from a template."""
    registry = get_registry()
    # two starts for one user must not both write the session slots
    with registry.starting(current_user.id):
        if find_controller(current_user) is not None:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="workout already in progress")
        controller = SessionController(current_user.id, slots_for(current_user.id))
        try:
            controller.start(setup, selected)
        except SetupError as e:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail={"message": str(e), "missing_groups": e.missing_groups},
            )
        if registry.put_if_absent(controller) is not controller:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="workout already in progress")
    log.info("user=%s started workout (%d groups, recovered=%s)",
             current_user.id, len(controller.tree), controller.recovered)
    return controller


def _require_node(controller: SessionController, group_id: str,
                  exercise_id: str | None = None, set_id: str | None = None) -> None:
    tree = controller.tree
    if set_id is not None:
        found = ops.find_set(tree, group_id, exercise_id, set_id)
    elif exercise_id is not None:
        found = ops.find_exercise(tree, group_id, exercise_id)
    else:
        found = ops.find_group(tree, group_id)
    if found is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="not found")


def _mutate(controller: SessionController, fn, *args) -> SessionRead:
    try:
        fn(*args)
    except InvalidSessionState as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    return session_read(controller)


# ------------------------------------------------------------------
# Lifecycle
# ------------------------------------------------------------------

@router.post("", response_model=SessionRead, status_code=status.HTTP_201_CREATED)
def start_session(payload: SessionStart, current_user: User = Depends(get_current_user)):
    now = time.time()
    setup = WorkoutSetup(
        day=payload.day,
        muscle_groups=payload.muscle_groups,
        notes=payload.notes,
        timestamp=datetime.fromtimestamp(now, tz=timezone.utc),
        start_time=now,
        name=payload.name,
    )
    return session_read(begin_session(current_user, setup, payload.selected_exercises))


@router.get("", response_model=SessionRead)
def current_session(controller: SessionController = Depends(get_controller)):
    return session_read(controller)


@router.post("/tick", response_model=SessionRead)
def tick(controller: SessionController = Depends(get_controller)):
    return _mutate(controller, controller.tick)


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
def cancel_session(controller: SessionController = Depends(get_controller)):
    try:
        controller.cancel()
    except InvalidSessionState as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    get_registry().discard(controller.user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/finish", response_model=CompletedWorkoutRead)
def finish_session(
    controller: SessionController = Depends(get_controller),
    store: RepositoryWorkoutStore = Depends(get_workout_store),
):
    try:
        done = controller.finish(store)
    except InvalidSessionState as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except SessionStorageError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
    get_registry().discard(controller.user_id)
    log.info("user=%s finished workout %s", controller.user_id, done.workout_id)
    return CompletedWorkoutRead(
        workout_id=done.workout_id,
        total_volume=done.total_volume,
        duration=done.duration,
        duration_display=metrics.format_duration(done.duration),
        muscle_groups=list(done.muscle_groups),
    )


@router.post("/template", response_model=TemplateSaved, status_code=status.HTTP_201_CREATED)
def save_session_as_template(
    payload: TemplateSave,
    controller: SessionController = Depends(get_controller),
    store: RepositoryWorkoutStore = Depends(get_workout_store),
):
    try:
        template_id = controller.save_as_template(
            store, payload.name,
            include_weights=payload.include_weights,
            description=payload.description,
            target_day=payload.target_day,
        )
    except SessionStorageError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
    return TemplateSaved(template_id=template_id)


# ------------------------------------------------------------------
# Tree edits
# ------------------------------------------------------------------

@router.delete(GROUP, response_model=SessionRead)
def remove_muscle_group(group_id: str, controller: SessionController = Depends(get_controller)):
    _require_node(controller, group_id)
    return _mutate(controller, controller.remove_muscle_group, group_id)


@router.post(GROUP + "/exercises", response_model=SessionRead, status_code=status.HTTP_201_CREATED)
def add_exercise(group_id: str, controller: SessionController = Depends(get_controller)):
    _require_node(controller, group_id)
    return _mutate(controller, controller.add_exercise, group_id)


@router.delete(EXERCISE, response_model=SessionRead)
def remove_exercise(group_id: str, exercise_id: str,
                    controller: SessionController = Depends(get_controller)):
    _require_node(controller, group_id, exercise_id)
    return _mutate(controller, controller.remove_exercise, group_id, exercise_id)


@router.put(EXERCISE + "/name", response_model=SessionRead)
def rename_exercise(group_id: str, exercise_id: str, payload: ExerciseNameUpdate,
                    controller: SessionController = Depends(get_controller)):
    _require_node(controller, group_id, exercise_id)
    return _mutate(controller, controller.update_exercise_name, group_id, exercise_id, payload.name)


@router.put(EXERCISE + "/notes", response_model=SessionRead)
def update_exercise_notes(group_id: str, exercise_id: str, payload: ExerciseNotesUpdate,
                          controller: SessionController = Depends(get_controller)):
    _require_node(controller, group_id, exercise_id)
    return _mutate(controller, controller.update_exercise_notes, group_id, exercise_id, payload.notes)


@router.post(EXERCISE + "/sets", response_model=SessionRead, status_code=status.HTTP_201_CREATED)
def add_set(group_id: str, exercise_id: str, controller: SessionController = Depends(get_controller)):
    _require_node(controller, group_id, exercise_id)
    return _mutate(controller, controller.add_set, group_id, exercise_id)


@router.delete(SET, response_model=SessionRead)
def remove_set(group_id: str, exercise_id: str, set_id: str,
               controller: SessionController = Depends(get_controller)):
    _require_node(controller, group_id, exercise_id, set_id)
    return _mutate(controller, controller.remove_set, group_id, exercise_id, set_id)


@router.patch(SET, response_model=SessionRead)
def update_set(group_id: str, exercise_id: str, set_id: str, payload: SetFieldUpdate,
               controller: SessionController = Depends(get_controller)):
    _require_node(controller, group_id, exercise_id, set_id)
    for field, value in payload.model_dump(exclude_none=True).items():
        _mutate(controller, controller.update_set_field, group_id, exercise_id, set_id, field, value)
    return session_read(controller)


@router.put(SET + "/type", response_model=SessionRead)
def update_set_type(group_id: str, exercise_id: str, set_id: str, payload: SetTypeUpdate,
                    controller: SessionController = Depends(get_controller)):
    _require_node(controller, group_id, exercise_id, set_id)
    return _mutate(controller, controller.update_set_type, group_id, exercise_id, set_id, payload.type)


@router.post(SET + "/toggle", response_model=SessionRead)
def toggle_set(group_id: str, exercise_id: str, set_id: str,
               controller: SessionController = Depends(get_controller)):
    try:
        outcome = controller.toggle_set_completion(group_id, exercise_id, set_id)
    except InvalidSessionState as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    if outcome == ToggleOutcome.not_found:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="not found")
    if outcome == ToggleOutcome.invalid_input:
        return JSONResponse(
            status_code=422,
            content={"detail": ToggleOutcome.invalid_input.value, "set_id": set_id},
        )
    return session_read(controller)
