"""The muscle-group → exercise → set tree of one workout.

Nodes are frozen pydantic models and every mutation returns a new tree.
Siblings that were not touched are reused as-is, and an operation whose
target does not exist hands back the very same tree object, so callers can
detect a no-op with ``new is old``.
"""
from __future__ import annotations

from enum import Enum
from typing import Callable, Iterable, Mapping, Sequence, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from grnd.session.ids import generate_id
from grnd.session.parsing import parse_float, parse_int


class SetType(str, Enum):
    normal = "normal"
    warmup = "warmup"
    drop = "drop"
    failure = "failure"


SET_TYPE_LETTERS = {SetType.warmup: "W", SetType.drop: "D", SetType.failure: "F"}
EDITABLE_SET_FIELDS = ("weight", "reps")


class ToggleOutcome(str, Enum):
    ok = "ok"
    invalid_input = "invalid-input"
    not_found = "not-found"


class WorkoutSet(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=generate_id)
    weight: str = ""
    reps: str = ""
    completed: bool = False
    type: SetType = SetType.normal


class Exercise(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=generate_id)
    name: str = ""
    notes: str = ""
    sets: tuple[WorkoutSet, ...] = Field(default_factory=lambda: (WorkoutSet(),))


class MuscleGroup(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    exercises: tuple[Exercise, ...] = ()


# Templates carry no completion state and may omit weights
class TemplateSet(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=generate_id)
    reps: str | None = None
    weight: str | None = None


class TemplateExercise(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=generate_id)
    name: str
    notes: str | None = None
    sets: tuple[TemplateSet, ...] = ()


class TemplateGroup(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    exercises: tuple[TemplateExercise, ...] = ()


Tree = tuple[MuscleGroup, ...]
N = TypeVar("N", bound=BaseModel)


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------

def _replace_in(items: Sequence[N], item_id: str, fn: Callable[[N], N]) -> Sequence[N]:
    changed = False
    out = []
    for item in items:
        if item.id == item_id:
            new = fn(item)
            changed = changed or new is not item
            out.append(new)
        else:
            out.append(item)
    return tuple(out) if changed else items


def _with(node: N, field: str, value) -> N:
    if value is getattr(node, field):
        return node
    return node.model_copy(update={field: value})


def _update_group(tree: Tree, group_id: str, fn: Callable[[MuscleGroup], MuscleGroup]) -> Tree:
    return _replace_in(tree, group_id, fn)


def _update_exercise(tree: Tree, group_id: str, exercise_id: str,
                     fn: Callable[[Exercise], Exercise]) -> Tree:
    return _update_group(
        tree, group_id,
        lambda g: _with(g, "exercises", _replace_in(g.exercises, exercise_id, fn)),
    )


def _update_set(tree: Tree, group_id: str, exercise_id: str, set_id: str,
                fn: Callable[[WorkoutSet], WorkoutSet]) -> Tree:
    return _update_exercise(
        tree, group_id, exercise_id,
        lambda e: _with(e, "sets", _replace_in(e.sets, set_id, fn)),
    )


def empty_set() -> WorkoutSet:
    return WorkoutSet()


def empty_exercise(name: str = "") -> Exercise:
    return Exercise(name=name, sets=(empty_set(),))


def is_named(exercise: Exercise) -> bool:
    return bool(exercise.name.strip())


def find_group(tree: Tree, group_id: str) -> MuscleGroup | None:
    return next((g for g in tree if g.id == group_id), None)


def find_exercise(tree: Tree, group_id: str, exercise_id: str) -> Exercise | None:
    group = find_group(tree, group_id)
    if group is None:
        return None
    return next((e for e in group.exercises if e.id == exercise_id), None)


def find_set(tree: Tree, group_id: str, exercise_id: str, set_id: str) -> WorkoutSet | None:
    exercise = find_exercise(tree, group_id, exercise_id)
    if exercise is None:
        return None
    return next((s for s in exercise.sets if s.id == set_id), None)


def is_set_valid(s: WorkoutSet) -> bool:
    """A set may be completed only when weight and reps are both numbers."""
    return parse_float(s.weight) is not None and parse_int(s.reps) is not None


# ------------------------------------------------------------------
# Construction
# ------------------------------------------------------------------

def build_tree(group_ids: Iterable[str], selected: Mapping[str, Sequence[str]],
               label_for: Callable[[str], str]) -> Tree:
    """Fresh tree for a new session; a group with no picks gets one blank exercise."""
    groups = []
    for group_id in group_ids:
        names = selected.get(group_id) or []
        exercises = tuple(empty_exercise(name) for name in names) or (empty_exercise(),)
        groups.append(MuscleGroup(id=group_id, name=label_for(group_id), exercises=exercises))
    return tuple(groups)


# ------------------------------------------------------------------
# Mutations
# ------------------------------------------------------------------

def add_muscle_group(tree: Tree, group_id: str, name: str | None = None) -> Tree:
    if find_group(tree, group_id) is not None:
        return tree
    group = MuscleGroup(id=group_id, name=name or group_id, exercises=(empty_exercise(),))
    return tuple(tree) + (group,)


def remove_muscle_group(tree: Tree, group_id: str) -> Tree:
    if find_group(tree, group_id) is None:
        return tree
    return tuple(g for g in tree if g.id != group_id)


def add_exercise(tree: Tree, group_id: str, name: str = "") -> Tree:
    return _update_group(
        tree, group_id,
        lambda g: g.model_copy(update={"exercises": g.exercises + (empty_exercise(name),)}),
    )


def remove_exercise(tree: Tree, group_id: str, exercise_id: str) -> Tree:
    if find_exercise(tree, group_id, exercise_id) is None:
        return tree
    return _update_group(
        tree, group_id,
        lambda g: g.model_copy(
            update={"exercises": tuple(e for e in g.exercises if e.id != exercise_id)}
        ),
    )


def update_exercise_name(tree: Tree, group_id: str, exercise_id: str, name: str) -> Tree:
    return _update_exercise(tree, group_id, exercise_id,
                            lambda e: e.model_copy(update={"name": name}))


def update_exercise_notes(tree: Tree, group_id: str, exercise_id: str, notes: str) -> Tree:
    return _update_exercise(tree, group_id, exercise_id,
                            lambda e: e.model_copy(update={"notes": notes}))


def add_set(tree: Tree, group_id: str, exercise_id: str) -> Tree:
    return _update_exercise(tree, group_id, exercise_id,
                            lambda e: e.model_copy(update={"sets": e.sets + (empty_set(),)}))


def remove_set(tree: Tree, group_id: str, exercise_id: str, set_id: str) -> Tree:
    exercise = find_exercise(tree, group_id, exercise_id)
    # an exercise keeps at least one set
    if exercise is None or len(exercise.sets) <= 1:
        return tree
    if not any(s.id == set_id for s in exercise.sets):
        return tree
    return _update_exercise(
        tree, group_id, exercise_id,
        lambda e: e.model_copy(update={"sets": tuple(s for s in e.sets if s.id != set_id)}),
    )


def update_set_field(tree: Tree, group_id: str, exercise_id: str, set_id: str,
                     field: str, value: str) -> Tree:
    if field not in EDITABLE_SET_FIELDS:
        raise ValueError(f"Unknown set field '{field}'")
    return _update_set(tree, group_id, exercise_id, set_id,
                       lambda s: s.model_copy(update={field: value}))


def update_set_type(tree: Tree, group_id: str, exercise_id: str, set_id: str,
                    set_type: SetType) -> Tree:
    set_type = SetType(set_type)
    return _update_set(tree, group_id, exercise_id, set_id,
                       lambda s: s.model_copy(update={"type": set_type}))


def toggle_set_completion(tree: Tree, group_id: str, exercise_id: str,
                          set_id: str) -> tuple[Tree, ToggleOutcome]:
    target = find_set(tree, group_id, exercise_id, set_id)
    if target is None:
        return tree, ToggleOutcome.not_found
    if not is_set_valid(target):
        return tree, ToggleOutcome.invalid_input
    new_tree = _update_set(tree, group_id, exercise_id, set_id,
                           lambda s: s.model_copy(update={"completed": not s.completed}))
    return new_tree, ToggleOutcome.ok


def prune_unnamed(tree: Tree) -> Tree:
    """Drop exercises with a blank name, then groups left with no exercises."""
    pruned = []
    for group in tree:
        named = tuple(e for e in group.exercises if is_named(e))
        if not named:
            continue
        if len(named) == len(group.exercises):
            pruned.append(group)
        else:
            pruned.append(group.model_copy(update={"exercises": named}))
    return tuple(pruned)


# ------------------------------------------------------------------
# Display
# ------------------------------------------------------------------

def set_label(sets: Sequence[WorkoutSet], index: int) -> str:
    """``W``/``D``/``F`` for special sets, otherwise the working-set ordinal.

    The count starts again at 1 on the set after a warmup or drop set.
    """
    current = sets[index]
    if current.type != SetType.normal:
        return SET_TYPE_LETTERS[current.type]
    number = 1
    for previous in sets[:index]:
        if previous.type in (SetType.warmup, SetType.drop):
            number = 1
        else:
            number += 1
    return str(number)


def set_labels(sets: Sequence[WorkoutSet]) -> list[str]:
    return [set_label(sets, i) for i in range(len(sets))]


def placeholder_hint(sets: Sequence[WorkoutSet], index: int) -> tuple[str, str]:
    """(weight, reps) hint for an input row, taken from the set above it."""
    previous = sets[index - 1] if index > 0 else None
    weight = previous.weight if previous and previous.weight else "0"
    reps = previous.reps if previous and previous.reps else "0"
    return weight, reps


# ------------------------------------------------------------------
# Templates
# ------------------------------------------------------------------

def to_template_groups(tree: Tree, include_weights: bool) -> tuple[TemplateGroup, ...]:
    return tuple(
        TemplateGroup(
            id=group.id,
            name=group.name,
            exercises=tuple(
                TemplateExercise(
                    id=exercise.id,
                    name=exercise.name,
                    notes=exercise.notes,
                    sets=tuple(
                        TemplateSet(
                            id=s.id,
                            weight=s.weight if include_weights else None,
                            reps=s.reps,
                        )
                        for s in exercise.sets
                    ),
                )
                for exercise in group.exercises
            ),
        )
        for group in tree
    )


def from_template_groups(groups: Iterable[TemplateGroup]) -> Tree:
    return tuple(
        MuscleGroup(
            id=group.id,
            name=group.name,
            exercises=tuple(
                Exercise(
                    id=exercise.id,
                    name=exercise.name,
                    notes=exercise.notes or "",
                    sets=tuple(
                        WorkoutSet(id=s.id, weight=s.weight or "", reps=s.reps or "")
                        for s in exercise.sets
                    ) or (empty_set(),),
                )
                for exercise in group.exercises
            ),
        )
        for group in groups
    )


def dump_tree(tree: Iterable[BaseModel]) -> list[dict]:
    """JSON-ready form used by the store and the progress snapshot."""
    return [node.model_dump(mode="json") for node in tree]
