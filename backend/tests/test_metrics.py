from grnd.session import metrics
from grnd.session.tree import Exercise, MuscleGroup, WorkoutSet


def group(*exercises, gid="chest"):
    return MuscleGroup(id=gid, name=gid.title(), exercises=tuple(exercises))


def ex(name, *sets):
    return Exercise(name=name, sets=tuple(sets))


def done(weight, reps):
    return WorkoutSet(weight=weight, reps=reps, completed=True)


def test_total_volume_counts_completed_numeric_sets_only():
    tree = (
        group(ex("Bench", done("100", "5"), WorkoutSet(weight="100", reps="5"), done("abc", "5"))),
        group(ex("Row", done("60.5", "10"), done("", "10")), gid="back"),
    )
    assert metrics.total_volume(tree) == 500 + 605
    assert metrics.total_volume(tuple(reversed(tree))) == metrics.total_volume(tree)


def test_total_reps():
    tree = (group(ex("Bench", done("100", "5"), done("100", "x"), WorkoutSet(weight="1", reps="9"))),)
    assert metrics.total_reps(tree) == 5


def test_completion_percentage_ignores_unnamed_exercises():
    assert metrics.completion_percentage(()) == 0
    assert metrics.completion_percentage((group(ex("", done("1", "1"))),)) == 0
    tree = (group(ex("Bench", done("1", "1"), WorkoutSet()), ex("", done("1", "1"))),)
    assert metrics.completion_percentage(tree) == 50
    tree = (group(ex("Bench", done("1", "1"), WorkoutSet(), WorkoutSet(), WorkoutSet(), WorkoutSet(),
                     WorkoutSet(), WorkoutSet(), WorkoutSet())),)
    assert metrics.completion_percentage(tree) == 13          # 12.5 rounds up


def test_estimated_one_rep_max():
    assert metrics.estimated_one_rep_max(100, 1) == 100
    assert metrics.estimated_one_rep_max(100, 37) == 0
    assert metrics.estimated_one_rep_max("135", "10") == 180
    assert metrics.estimated_one_rep_max("abc", "5") == 0
    assert metrics.estimated_one_rep_max("100", "0") == 0


def test_best_sets_picks_highest_estimate_per_exercise():
    tree = (
        group(ex("Bench", done("100", "5"), done("110", "1"), WorkoutSet(weight="200", reps="5"))),
        group(ex("Bench", done("90", "10")), gid="arms"),
    )
    best = metrics.best_sets(tree)
    assert list(best) == ["Bench"]
    assert best["Bench"].one_rep_max == 120            # 90 x 10
    assert (best["Bench"].weight, best["Bench"].reps) == ("90", "10")


def test_completed_sets_by_exercise_merges_names():
    tree = (
        group(ex("Bench", done("1", "1"), WorkoutSet())),
        group(ex("Bench", done("1", "1")), ex("", done("1", "1")), gid="arms"),
    )
    assert metrics.completed_sets_by_exercise(tree) == [("Bench", 2)]


def test_format_elapsed_and_duration():
    assert metrics.format_elapsed(0) == "00:00"
    assert metrics.format_elapsed(65) == "01:05"
    assert metrics.format_elapsed(3725) == "01:02:05"
    assert metrics.format_duration(None) == "0m"
    assert metrics.format_duration(300) == "5m"
    assert metrics.format_duration(3900) == "1h 5m"


def test_whitespace_named_exercises_are_left_out_everywhere():
    tree = (group(ex("Bench", done("100", "5")), ex("   ", done("200", "1"), done("1", "1"))),)
    assert list(metrics.best_sets(tree)) == ["Bench"]
    assert metrics.completed_sets_by_exercise(tree) == [("Bench", 1)]
    assert metrics.completion_percentage(tree) == 100
