"""Built-in muscle groups and suggested exercises."""

MUSCLE_GROUP_LABELS: dict[str, str] = {
    "chest": "Chest",
    "back": "Back",
    "arms": "Arms",
    "legs": "Legs",
    "core": "Core",
    "shoulders": "Shoulders",
    "fullBody": "Full Body",
    "biceps": "Biceps",
    "triceps": "Triceps",
    "glutes": "Glutes",
    "abs": "Abs",
    "calves": "Calves",
}

# fine-grained groups share an exercise list with a broader one
MUSCLE_GROUP_TO_CATALOG_KEY: dict[str, str] = {
    "chest": "chest",
    "back": "back",
    "shoulders": "shoulders",
    "biceps": "arms",
    "triceps": "arms",
    "legs": "legs",
    "glutes": "legs",
    "abs": "core",
    "calves": "legs",
    "fullBody": "fullBody",
}

EXERCISE_CATALOG: dict[str, list[str]] = {
    "chest": [
        "Bench Press", "Incline Bench Press", "Decline Bench Press", "Dumbbell Fly",
        "Cable Crossover", "Chest Dip", "Push-Up", "Machine Chest Press", "Pec Deck",
        "Landmine Press",
    ],
    "back": [
        "Pull-Up", "Lat Pulldown", "Bent Over Row", "T-Bar Row", "Seated Cable Row",
        "Deadlift", "Single-Arm Dumbbell Row", "Face Pull", "Straight-Arm Pulldown",
        "Inverted Row",
    ],
    "shoulders": [
        "Overhead Press", "Lateral Raise", "Front Raise", "Reverse Fly", "Upright Row",
        "Arnold Press", "Face Pull", "Shrug", "Military Press", "Pike Push-Up",
    ],
    "arms": [
        "Bicep Curl", "Tricep Extension", "Hammer Curl", "Skull Crusher", "Preacher Curl",
        "Cable Pushdown", "Concentration Curl", "Dip", "Chin-Up", "Close-Grip Bench Press",
    ],
    "legs": [
        "Squat", "Deadlift", "Leg Press", "Lunge", "Leg Extension", "Leg Curl",
        "Calf Raise", "Romanian Deadlift", "Hip Thrust", "Bulgarian Split Squat",
    ],
    "core": [
        "Plank", "Crunch", "Russian Twist", "Leg Raise", "Mountain Climber", "Ab Rollout",
        "Hanging Leg Raise", "Side Plank", "Bicycle Crunch", "Dead Bug",
    ],
    "fullBody": [
        "Burpee", "Clean and Press", "Thruster", "Turkish Get-Up", "Kettlebell Swing",
        "Medicine Ball Slam", "Battle Rope", "Mountain Climber", "Jumping Jack", "Bear Crawl",
    ],
}


def label_for(group_id: str) -> str:
    """Display label; unknown ids are capitalised."""
    if group_id in MUSCLE_GROUP_LABELS:
        return MUSCLE_GROUP_LABELS[group_id]
    return group_id[:1].upper() + group_id[1:]


def exercises_for(group_id: str) -> list[str]:
    key = MUSCLE_GROUP_TO_CATALOG_KEY.get(group_id, group_id)
    return list(EXERCISE_CATALOG.get(key, []))
