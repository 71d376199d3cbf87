"""Progress analytics over stored workouts.

Every number is computed with ``grnd.session.metrics`` so the charts agree
with what the session screen showed while the workout was logged.
"""
from __future__ import annotations

from datetime import date, datetime, timedelta
from enum import Enum
from typing import Iterable, Sequence

from pydantic import BaseModel

from grnd.session import metrics
from grnd.session.tree import MuscleGroup, is_named

TOP_EXERCISES = 3


class HistoryEntry(BaseModel):
    id: int
    name: str
    date: datetime
    total_volume: float | None = None
    duration: int | None = None
    muscle_groups: tuple[MuscleGroup, ...] = ()

    model_config = {"from_attributes": True}


class HistorySort(str, Enum):
    date_newest = "date-newest"
    date_oldest = "date-oldest"
    volume_highest = "volume-highest"
    volume_lowest = "volume-lowest"
    duration_longest = "duration-longest"
    duration_shortest = "duration-shortest"


class VolumePoint(BaseModel):
    workout_id: int
    date: datetime
    volume: float


class CountPoint(BaseModel):
    name: str
    count: int


class WeekPoint(BaseModel):
    week_start: date
    count: int


class ExerciseVolumePoint(BaseModel):
    date: datetime
    volume: float


class ExerciseProgress(BaseModel):
    name: str
    data: list[ExerciseVolumePoint]


class VolumeTrend(BaseModel):
    percentage: float
    trending: str          # up, down or flat


class BestSetRead(BaseModel):
    exercise: str
    weight: str
    reps: str
    one_rep_max: int


def _chronological(entries: Iterable[HistoryEntry]) -> list[HistoryEntry]:
    return sorted(entries, key=lambda e: e.date)


def week_start(d: datetime) -> date:
    """The Sunday on or before ``d``."""
    day = d.date()
    return day - timedelta(days=(day.weekday() + 1) % 7)


def volume_series(entries: Iterable[HistoryEntry]) -> list[VolumePoint]:
    return [
        VolumePoint(workout_id=e.id, date=e.date, volume=e.total_volume or 0)
        for e in _chronological(entries)
    ]


def volume_trend(points: Sequence[VolumePoint]) -> VolumeTrend:
    """Change of the last workout's volume against the one before it."""
    if len(points) < 2 or points[-2].volume == 0:
        return VolumeTrend(percentage=0, trending="flat")
    previous, last = points[-2].volume, points[-1].volume
    change = (last - previous) / previous * 100
    return VolumeTrend(percentage=round(abs(change), 1), trending="up" if change >= 0 else "down")


def muscle_group_frequency(entries: Iterable[HistoryEntry]) -> list[CountPoint]:
    counts: dict[str, int] = {}
    for e in _chronological(entries):
        for group in e.muscle_groups:
            counts[group.name] = counts.get(group.name, 0) + 1
    return [CountPoint(name=name, count=count) for name, count in counts.items()]


def weekly_frequency(entries: Iterable[HistoryEntry]) -> list[WeekPoint]:
    weeks: dict[date, int] = {}
    for e in _chronological(entries):
        key = week_start(e.date)
        weeks[key] = weeks.get(key, 0) + 1
    return [WeekPoint(week_start=k, count=v) for k, v in weeks.items()]


def exercise_progress(entries: Iterable[HistoryEntry], top: int = TOP_EXERCISES) -> list[ExerciseProgress]:
    """Per-workout volume for the exercises logged most often."""
    progress: dict[str, list[ExerciseVolumePoint]] = {}
    for e in _chronological(entries):
        for group in e.muscle_groups:
            for exercise in group.exercises:
                if not is_named(exercise):
                    continue
                progress.setdefault(exercise.name, []).append(
                    ExerciseVolumePoint(date=e.date, volume=metrics.exercise_volume(exercise))
                )
    ranked = sorted(progress, key=lambda name: len(progress[name]), reverse=True)[:top]
    return [ExerciseProgress(name=name, data=progress[name]) for name in ranked]


def best_sets(entries: Iterable[HistoryEntry]) -> list[BestSetRead]:
    best: dict[str, metrics.BestSet] = {}
    for e in entries:
        for name, candidate in metrics.best_sets(e.muscle_groups).items():
            current = best.get(name)
            if current is None or candidate.one_rep_max > current.one_rep_max:
                best[name] = candidate
    return [
        BestSetRead(exercise=name, weight=b.weight, reps=b.reps, one_rep_max=b.one_rep_max)
        for name, b in best.items()
    ]


def total_reps(entries: Iterable[HistoryEntry]) -> int:
    return sum(metrics.total_reps(e.muscle_groups) for e in entries)


def muscle_group_names(entries: Iterable[HistoryEntry]) -> list[str]:
    return sorted({g.name for e in entries for g in e.muscle_groups if g.name})


def filter_history(entries: Iterable[HistoryEntry], muscle_group: str | None) -> list[HistoryEntry]:
    """Workouts that trained ``muscle_group`` (case-insensitive); None or "all" keeps everything."""
    if not muscle_group or muscle_group == "all":
        return list(entries)
    wanted = muscle_group.lower()
    return [e for e in entries if any(g.name.lower() == wanted for g in e.muscle_groups)]


_SORT_KEYS = {
    HistorySort.date_newest: (lambda e: e.date, True),
    HistorySort.date_oldest: (lambda e: e.date, False),
    HistorySort.volume_highest: (lambda e: e.total_volume or 0, True),
    HistorySort.volume_lowest: (lambda e: e.total_volume or 0, False),
    HistorySort.duration_longest: (lambda e: e.duration or 0, True),
    HistorySort.duration_shortest: (lambda e: e.duration or 0, False),
}


def sort_history(entries: Iterable[HistoryEntry],
                 sort_by: HistorySort = HistorySort.date_newest) -> list[HistoryEntry]:
    key, reverse = _SORT_KEYS[sort_by]
    return sorted(entries, key=key, reverse=reverse)
