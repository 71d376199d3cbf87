import json
from datetime import datetime, timezone

import pytest

from grnd.session import tree as ops
from grnd.session.controller import SessionController, SessionState, WorkoutSetup
from grnd.session.errors import InvalidSessionState, SessionStorageError, SetupError, WorkoutStoreError
from grnd.session.progress import SessionProgress
from grnd.session.slots import PROGRESS_KEY, SELECTED_EXERCISES_KEY, SETUP_KEY, FileSlotStore, MemorySlotStore
from grnd.session.tree import ToggleOutcome

T0 = 1_700_000_000.0


class FakeClock:
    def __init__(self, now=T0):
        self.now = now

    def __call__(self):
        return self.now


class FakeStore:
    """Records every call; ``fail_on`` names a method that raises."""

    def __init__(self, fail_on=None):
        self.fail_on = fail_on
        self.calls = []
        self.next_id = 100

    def _record(self, name, *args):
        self.calls.append((name, *args))
        if name == self.fail_on:
            raise WorkoutStoreError(f"{name} failed")

    def create_workout_record(self, user_id, muscle_groups, name=None):
        self._record("create_workout_record", user_id, muscle_groups, name)
        self.next_id += 1
        return self.next_id

    def update_workout_record(self, workout_id, muscle_groups):
        self._record("update_workout_record", workout_id, muscle_groups)

    def complete_workout_record(self, workout_id, total_volume, duration):
        self._record("complete_workout_record", workout_id, total_volume, duration)

    def create_workout_from_template(self, user_id, template_id):
        self._record("create_workout_from_template", user_id, template_id)
        self.next_id += 1
        return self.next_id

    def save_as_template_record(self, user_id, source_workout_id, name, *,
                                description=None, target_day=None, include_weights=False):
        self._record("save_as_template_record", user_id, source_workout_id, name, include_weights)
        return 7

    def names(self):
        return [c[0] for c in self.calls]


def make_setup(groups=("chest",), **kw):
    return WorkoutSetup(
        day="monday",
        muscle_groups=list(groups),
        timestamp=datetime.fromtimestamp(T0, tz=timezone.utc),
        start_time=T0,
        **kw,
    )


def started(selected=None, groups=("chest",), clock=None, slots=None, **kw):
    slots = slots or MemorySlotStore()
    clock = clock or FakeClock()
    c = SessionController(1, slots, clock=clock)
    c.start(make_setup(groups, **kw), selected or {"chest": ["Bench Press"]})
    return c


def first_set(c, group_index=0, exercise_index=0):
    group = c.tree[group_index]
    exercise = group.exercises[exercise_index]
    return group.id, exercise.id, exercise.sets[0].id


def log_set(c, gid, eid, sid, weight, reps):
    c.update_set_field(gid, eid, sid, "weight", weight)
    c.update_set_field(gid, eid, sid, "reps", reps)
    assert c.toggle_set_completion(gid, eid, sid) == ToggleOutcome.ok


def test_start_builds_tree_and_writes_slots():
    slots = MemorySlotStore()
    c = started(slots=slots)
    assert c.state == SessionState.active
    assert [g.name for g in c.tree] == ["Chest"]
    assert c.tree[0].exercises[0].name == "Bench Press"
    assert json.loads(slots.get(SELECTED_EXERCISES_KEY)) == {"chest": ["Bench Press"]}
    assert slots.get(SETUP_KEY) is not None
    assert slots.get(PROGRESS_KEY) is not None
    assert c.recovered is False


@pytest.mark.parametrize("groups,selected", [
    ((), {}),
    (("chest", "back"), {"chest": ["Bench Press"]}),
    (("chest",), {"chest": []}),
])
def test_start_refuses_incomplete_setup(groups, selected):
    slots = MemorySlotStore()
    c = SessionController(1, slots, clock=FakeClock())
    with pytest.raises(SetupError):
        c.start(make_setup(groups), selected)
    assert c.state == SessionState.uninitialized
    assert slots.get(SETUP_KEY) is None


def test_missing_groups_are_reported():
    c = SessionController(1, MemorySlotStore(), clock=FakeClock())
    with pytest.raises(SetupError) as exc:
        c.start(make_setup(("chest", "back")), {"chest": ["Bench Press"]})
    assert exc.value.missing_groups == ["back"]


def test_existing_snapshot_wins_and_elapsed_resumes():
    slots, clock = MemorySlotStore(), FakeClock()
    saved = ops.build_tree(["legs"], {"legs": ["Squat"]}, str.title)
    SessionProgress(slots, clock).save(saved, 300)

    clock.now = T0 + 5000
    c = started(slots=slots, clock=clock)
    assert c.tree == saved
    assert c.recovered is True
    assert c.elapsed_seconds == 300
    clock.now += 10
    assert c.tick() == 310


def test_elapsed_counts_from_start_time():
    clock = FakeClock(T0 + 61.9)
    c = started(clock=clock)
    assert c.elapsed_seconds == 61
    clock.now = T0 + 3600
    assert c.tick() == 3600


def test_mutations_save_snapshot_only_when_tree_changes():
    clock = FakeClock()
    c = started(clock=clock)
    gid, eid, sid = first_set(c)
    first_saved = c.last_saved

    clock.now += 5
    c.add_set(gid, "missing")
    assert c.last_saved == first_saved

    c.add_set(gid, eid)
    assert c.last_saved == clock.now
    snapshot = SessionProgress(c.slots).load()
    assert len(snapshot.muscle_groups[0].exercises[0].sets) == 2


def test_invalid_toggle_changes_nothing():
    clock = FakeClock()
    c = started(clock=clock)
    gid, eid, sid = first_set(c)
    before, saved = c.tree, c.last_saved
    clock.now += 5
    assert c.toggle_set_completion(gid, eid, sid) == ToggleOutcome.invalid_input
    assert c.tree is before
    assert c.last_saved == saved
    assert c.toggle_set_completion(gid, eid, "nope") == ToggleOutcome.not_found


def test_live_metrics():
    c = started(selected={"chest": ["Bench Press", "Fly"]})
    gid, eid, sid = first_set(c)
    log_set(c, gid, eid, sid, "100", "5")
    assert c.total_volume == 500
    assert c.total_reps == 5
    assert c.completion_percentage == 50


def test_finish_drops_unnamed_and_reports_volume():
    clock = FakeClock()
    c = started(selected={"chest": ["Bench Press"], "back": ["Row"]}, groups=("chest", "back"), clock=clock)
    gid, eid, sid = first_set(c)
    log_set(c, gid, eid, sid, "100", "10")
    c.add_exercise(gid)                          # left unnamed
    back = c.tree[1]
    c.update_exercise_name(back.id, back.exercises[0].id, "")

    clock.now = T0 + 1800
    store = FakeStore()
    done = c.finish(store)

    assert store.names() == ["create_workout_record", "complete_workout_record"]
    stored_tree = store.calls[0][2]
    assert [g.id for g in stored_tree] == ["chest"]
    assert [e.name for e in stored_tree[0].exercises] == ["Bench Press"]
    assert store.calls[1][1:] == (done.workout_id, 1000, 1800)
    assert done.total_volume == 1000 and done.duration == 1800
    assert c.state == SessionState.completed
    assert c.slots.get(SETUP_KEY) is None and c.slots.get(PROGRESS_KEY) is None


def test_finish_from_template_updates_then_completes():
    c = started(template_id=9, name="Push Day")
    store = FakeStore()
    c.finish(store)
    assert store.names() == [
        "create_workout_from_template", "update_workout_record", "complete_workout_record",
    ]
    assert store.calls[0][1:] == (1, 9)


@pytest.mark.parametrize("fail_on", ["create_workout_record", "complete_workout_record"])
def test_store_failure_keeps_session_active(fail_on):
    c = started()
    with pytest.raises(SessionStorageError):
        c.finish(FakeStore(fail_on=fail_on))
    assert c.state == SessionState.active
    assert c.slots.get(PROGRESS_KEY) is not None
    # retry succeeds
    c.finish(FakeStore())
    assert c.state == SessionState.completed


def test_cancel_clears_slots_and_is_terminal():
    c = started()
    c.cancel()
    assert c.state == SessionState.cancelled
    assert c.tree == ()
    assert c.slots.get(SELECTED_EXERCISES_KEY) is None
    with pytest.raises(InvalidSessionState):
        c.add_set("chest", "x")
    with pytest.raises(InvalidSessionState):
        c.finish(FakeStore())


def test_operations_before_start_are_rejected():
    c = SessionController(1, MemorySlotStore(), clock=FakeClock())
    with pytest.raises(InvalidSessionState):
        c.tick()


def test_save_as_template_keeps_session_active():
    c = started()
    store = FakeStore()
    template_id = c.save_as_template(store, "Chest Day", include_weights=True)
    assert template_id == 7
    assert store.names() == ["create_workout_record", "save_as_template_record"]
    assert store.calls[1][3:] == ("Chest Day", True)
    assert c.state == SessionState.active

    with pytest.raises(SessionStorageError):
        c.save_as_template(FakeStore(fail_on="save_as_template_record"), "x")


def test_resume_rebuilds_from_slots():
    slots, clock = MemorySlotStore(), FakeClock()
    c = started(slots=slots, clock=clock)
    gid, eid, sid = first_set(c)
    c.update_set_field(gid, eid, sid, "weight", "80")

    clock.now += 30
    again = SessionController.resume(1, slots, clock=clock)
    assert again.state == SessionState.active
    assert again.recovered is True
    assert ops.find_set(again.tree, gid, eid, sid).weight == "80"


def test_resume_without_slots_or_with_garbage():
    assert SessionController.resume(1, MemorySlotStore()) is None
    slots = MemorySlotStore()
    slots.set(SETUP_KEY, "{not json")
    slots.set(SELECTED_EXERCISES_KEY, "{}")
    assert SessionController.resume(1, slots) is None
    assert slots.get(SETUP_KEY) is None


def test_resume_discards_undecodable_slot_files(tmp_path):
    slots = FileSlotStore(tmp_path)
    started(slots=slots)
    (tmp_path / f"{SETUP_KEY}.json").write_bytes(b"\xff\xfe garbage \x80")

    assert SessionController.resume(1, slots) is None
    assert slots.get(SELECTED_EXERCISES_KEY) is None
    assert slots.get(PROGRESS_KEY) is None


@pytest.mark.parametrize("raw_selected", ['{"chest": 5}', '["Bench Press"]', '{"chest": [1, 2]}'])
def test_resume_discards_wrongly_shaped_selection(raw_selected):
    slots = MemorySlotStore()
    started(slots=slots)
    slots.set(SELECTED_EXERCISES_KEY, raw_selected)

    assert SessionController.resume(1, slots) is None
    assert slots.get(SETUP_KEY) is None and slots.get(PROGRESS_KEY) is None


def test_finish_volume_leaves_out_unnamed_exercises():
    c = started()
    gid, eid, sid = first_set(c)
    log_set(c, gid, eid, sid, "100", "10")
    c.add_exercise(gid)
    extra = c.tree[0].exercises[1]
    log_set(c, gid, extra.id, extra.sets[0].id, "50", "2")
    c.update_exercise_name(gid, extra.id, "   ")

    store = FakeStore()
    done = c.finish(store)
    assert done.total_volume == 1000
    assert store.calls[1][2] == 1000
    assert [e.name for e in done.muscle_groups[0].exercises] == ["Bench Press"]
