"""Metrics derived from a workout tree.

The active session and the history/analytics views call the same functions,
so a workout shows the same numbers while it is logged and after it is
stored. Nothing here caches; every call recomputes from the tree.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from grnd.session.parsing import parse_float, parse_int, round_half_up
from grnd.session.tree import Exercise, MuscleGroup, WorkoutSet, is_named

BRZYCKI_REP_LIMIT = 37


def set_volume(s: WorkoutSet) -> float:
    if not (s.completed and s.weight and s.reps):
        return 0.0
    weight = parse_float(s.weight)
    reps = parse_int(s.reps)
    if weight is None or reps is None:
        return 0.0
    return weight * reps


def exercise_volume(exercise: Exercise) -> float:
    return sum(set_volume(s) for s in exercise.sets)


def total_volume(tree: Iterable[MuscleGroup]) -> float:
    """Σ weight × reps over completed sets with numeric weight and reps."""
    return sum(exercise_volume(e) for g in tree for e in g.exercises)


def total_reps(tree: Iterable[MuscleGroup]) -> int:
    return sum(
        parse_int(s.reps) or 0
        for g in tree for e in g.exercises for s in e.sets
        if s.completed
    )


def completion_percentage(tree: Iterable[MuscleGroup]) -> int:
    """Share of completed sets among exercises that have a name, 0-100."""
    total = completed = 0
    for group in tree:
        for exercise in group.exercises:
            if not is_named(exercise):
                continue
            total += len(exercise.sets)
            completed += sum(1 for s in exercise.sets if s.completed)
    if total == 0:
        return 0
    return round_half_up(completed / total * 100)


def estimated_one_rep_max(weight, reps) -> int:
    """Brzycki estimate, ``weight * 36 / (37 - reps)``; 0 means no estimate."""
    w = parse_float(weight)
    r = parse_int(reps)
    if w is None or r is None or r <= 0 or r >= BRZYCKI_REP_LIMIT:
        return 0
    return round_half_up(w * 36 / (BRZYCKI_REP_LIMIT - r))


@dataclass(slots=True)
class BestSet:
    weight: str
    reps: str
    one_rep_max: int


def best_sets(tree: Iterable[MuscleGroup]) -> dict[str, BestSet]:
    """Highest-e1RM completed set per exercise name."""
    best: dict[str, BestSet] = {}
    for group in tree:
        for exercise in group.exercises:
            if not is_named(exercise):
                continue
            top: BestSet | None = None
            for s in exercise.sets:
                if not (s.completed and s.weight and s.reps):
                    continue
                one_rm = estimated_one_rep_max(s.weight, s.reps)
                if one_rm > (top.one_rep_max if top else 0):
                    top = BestSet(weight=s.weight, reps=s.reps, one_rep_max=one_rm)
            if top is None:
                continue
            existing = best.get(exercise.name)
            if existing is None or top.one_rep_max > existing.one_rep_max:
                best[exercise.name] = top
    return best


def completed_sets_by_exercise(tree: Iterable[MuscleGroup]) -> list[tuple[str, int]]:
    counts: dict[str, int] = {}
    for group in tree:
        for exercise in group.exercises:
            if not is_named(exercise):
                continue
            done = sum(1 for s in exercise.sets if s.completed)
            counts[exercise.name] = counts.get(exercise.name, 0) + done
    return list(counts.items())


def format_elapsed(total_seconds: int) -> str:
    """``MM:SS``, or ``HH:MM:SS`` once past the hour."""
    hours, rest = divmod(int(total_seconds), 3600)
    minutes, seconds = divmod(rest, 60)
    if hours > 0:
        return f"{hours:02d}:{minutes:02d}:{seconds:02d}"
    return f"{minutes:02d}:{seconds:02d}"


def format_duration(seconds: int | None) -> str:
    if not seconds:
        return "0m"
    hours, rest = divmod(int(seconds), 3600)
    minutes = rest // 60
    return f"{hours}h {minutes}m" if hours > 0 else f"{minutes}m"
