"""Active workout session: the muscle-group tree, its metrics, crash
recovery and the lifecycle controller that hands finished workouts to the
document store."""
