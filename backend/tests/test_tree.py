import pytest

from grnd.catalog import label_for
from grnd.session import tree as ops
from grnd.session.ids import ID_ALPHABET, generate_id
from grnd.session.parsing import parse_float, parse_int, round_half_up
from grnd.session.tree import (
    Exercise, MuscleGroup, SetType, TemplateExercise, TemplateGroup, ToggleOutcome, WorkoutSet,
)


def sample_tree():
    return ops.build_tree(["chest", "back"], {"chest": ["Bench Press"], "back": ["Deadlift", "Pull-Up"]}, label_for)


def ids(tree):
    chest, back = tree
    return chest, chest.exercises[0], chest.exercises[0].sets[0], back


def test_generate_id_shape():
    value = generate_id()
    assert len(value) == 8
    assert set(value) <= set(ID_ALPHABET)


@pytest.mark.parametrize("raw,expected", [
    ("12kg", 12.0), ("10.5", 10.5), (" 7", 7.0), (".5", 0.5), ("-2", -2.0),
    ("", None), ("abc", None), ("kg12", None), (None, None), (60, 60.0), (True, None),
])
def test_parse_float_reads_leading_number(raw, expected):
    assert parse_float(raw) == expected


@pytest.mark.parametrize("raw,expected", [
    ("10.5", 10), ("8 reps", 8), ("", None), ("x", None), (12, 12), (3.9, 3),
])
def test_parse_int_reads_leading_integer(raw, expected):
    assert parse_int(raw) == expected


def test_round_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(0.5) == 1
    assert round_half_up(2.49) == 2


def test_build_tree_labels_groups_from_catalog():
    tree = ops.build_tree(["fullBody", "neck"], {"fullBody": ["Burpee"], "neck": ["Shrug"]}, label_for)
    assert [g.name for g in tree] == ["Full Body", "Neck"]
    burpee = tree[0].exercises[0]
    assert burpee.name == "Burpee"
    assert len(burpee.sets) == 1
    assert burpee.sets[0].completed is False and burpee.sets[0].type == SetType.normal


def test_add_exercise_keeps_untouched_siblings():
    tree = sample_tree()
    chest, _, _, back = ids(tree)
    new = ops.add_exercise(tree, "chest")
    assert new is not tree
    assert new[1] is back
    assert len(new[0].exercises) == 2
    added = new[0].exercises[-1]
    assert added.name == "" and len(added.sets) == 1
    assert new[0].exercises[0] is chest.exercises[0]


def test_missing_target_returns_same_tree():
    tree = sample_tree()
    _, ex, s, _ = ids(tree)
    assert ops.add_exercise(tree, "legs") is tree
    assert ops.add_set(tree, "chest", "nope") is tree
    assert ops.update_set_field(tree, "chest", ex.id, "nope", "reps", "5") is tree
    assert ops.remove_exercise(tree, "chest", "nope") is tree
    assert ops.remove_muscle_group(tree, "legs") is tree


def test_remove_set_keeps_the_last_one():
    tree = sample_tree()
    _, ex, s, _ = ids(tree)
    assert ops.remove_set(tree, "chest", ex.id, s.id) is tree

    two = ops.add_set(tree, "chest", ex.id)
    second = ops.find_exercise(two, "chest", ex.id).sets[1]
    one = ops.remove_set(two, "chest", ex.id, s.id)
    assert [x.id for x in ops.find_exercise(one, "chest", ex.id).sets] == [second.id]


def test_update_set_field_rejects_unknown_field():
    tree = sample_tree()
    _, ex, s, _ = ids(tree)
    with pytest.raises(ValueError):
        ops.update_set_field(tree, "chest", ex.id, s.id, "completed", "true")


def test_toggle_requires_numeric_weight_and_reps():
    tree = sample_tree()
    _, ex, s, _ = ids(tree)
    same, outcome = ops.toggle_set_completion(tree, "chest", ex.id, s.id)
    assert outcome == ToggleOutcome.invalid_input and same is tree

    tree = ops.update_set_field(tree, "chest", ex.id, s.id, "weight", "100")
    tree = ops.update_set_field(tree, "chest", ex.id, s.id, "reps", "abc")
    _, outcome = ops.toggle_set_completion(tree, "chest", ex.id, s.id)
    assert outcome == ToggleOutcome.invalid_input

    tree = ops.update_set_field(tree, "chest", ex.id, s.id, "reps", "10.5")
    done, outcome = ops.toggle_set_completion(tree, "chest", ex.id, s.id)
    assert outcome == ToggleOutcome.ok
    assert ops.find_set(done, "chest", ex.id, s.id).completed is True

    undone, outcome = ops.toggle_set_completion(done, "chest", ex.id, s.id)
    assert outcome == ToggleOutcome.ok
    assert ops.find_set(undone, "chest", ex.id, s.id).completed is False


def test_toggle_missing_set_reports_not_found():
    tree = sample_tree()
    same, outcome = ops.toggle_set_completion(tree, "chest", "x", "y")
    assert outcome == ToggleOutcome.not_found and same is tree


def test_update_set_type_and_notes():
    tree = sample_tree()
    _, ex, s, _ = ids(tree)
    tree = ops.update_set_type(tree, "chest", ex.id, s.id, "warmup")
    tree = ops.update_exercise_notes(tree, "chest", ex.id, "slow eccentric")
    exercise = ops.find_exercise(tree, "chest", ex.id)
    assert exercise.sets[0].type == SetType.warmup
    assert exercise.notes == "slow eccentric"


def test_add_muscle_group_is_idempotent():
    tree = sample_tree()
    assert ops.add_muscle_group(tree, "chest") is tree
    grown = ops.add_muscle_group(tree, "legs", "Legs")
    assert grown[-1].name == "Legs" and len(grown[-1].exercises) == 1


def test_prune_unnamed_drops_blank_exercises_then_empty_groups():
    tree = sample_tree()
    tree = ops.add_exercise(tree, "chest")                       # blank, pruned
    tree = ops.add_muscle_group(tree, "legs", "Legs")            # only a blank exercise
    back = tree[1]
    pruned = ops.prune_unnamed(tree)
    assert [g.id for g in pruned] == ["chest", "back"]
    assert [e.name for e in pruned[0].exercises] == ["Bench Press"]
    assert pruned[1] is back


def test_set_labels_restart_after_warmup_and_drop():
    types = ["normal", "normal", "warmup", "normal", "normal"]
    sets = [WorkoutSet(type=t) for t in types]
    assert ops.set_labels(sets) == ["1", "2", "W", "1", "2"]

    sets = [WorkoutSet(type=t) for t in ["warmup", "normal", "drop", "failure", "normal"]]
    assert ops.set_labels(sets) == ["W", "1", "D", "F", "2"]


def test_placeholder_hint_uses_previous_set():
    sets = [WorkoutSet(weight="80", reps="8"), WorkoutSet(), WorkoutSet(weight="", reps="6")]
    assert ops.placeholder_hint(sets, 0) == ("0", "0")
    assert ops.placeholder_hint(sets, 1) == ("80", "8")
    assert ops.placeholder_hint(sets, 2) == ("0", "0")


def test_template_conversion_strips_state_and_optionally_weights():
    tree = (MuscleGroup(id="legs", name="Legs", exercises=(
        Exercise(name="Squat", notes="", sets=(
            WorkoutSet(weight="140", reps="5", completed=True, type=SetType.failure),
        )),
    )),)
    without = ops.to_template_groups(tree, include_weights=False)
    assert without[0].exercises[0].sets[0].weight is None
    assert without[0].exercises[0].sets[0].reps == "5"
    with_weights = ops.to_template_groups(tree, include_weights=True)
    assert with_weights[0].exercises[0].sets[0].weight == "140"

    back = ops.from_template_groups(without)
    s = back[0].exercises[0].sets[0]
    assert (s.weight, s.reps, s.completed, s.type) == ("", "5", False, SetType.normal)


def test_template_exercise_without_sets_gets_one_empty_set():
    groups = (TemplateGroup(id="chest", name="Chest", exercises=(
        TemplateExercise(name="Fly", sets=()),
    )),)
    tree = ops.from_template_groups(groups)
    sets = tree[0].exercises[0].sets
    assert len(sets) == 1
    assert (sets[0].weight, sets[0].reps, sets[0].completed) == ("", "", False)


def test_whitespace_name_counts_as_unnamed():
    assert not ops.is_named(Exercise(name="   "))
    assert ops.is_named(Exercise(name=" Row "))
    tree = (MuscleGroup(id="back", name="Back", exercises=(Exercise(name="  "),)),)
    assert ops.prune_unnamed(tree) == ()
