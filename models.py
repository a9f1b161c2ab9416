"""Typed entities returned by the workout log store."""

from __future__ import annotations

import datetime
import uuid
from dataclasses import dataclass, field
from typing import Optional, Tuple, Union


@dataclass(frozen=True)
class Week:
    id: int
    week_number: int
    start_date: datetime.date
    end_date: datetime.date

    @classmethod
    def from_row(cls, row: tuple) -> "Week":
        wid, number, start, end = row
        return cls(
            id=wid,
            week_number=int(number),
            start_date=datetime.date.fromisoformat(start),
            end_date=datetime.date.fromisoformat(end),
        )


@dataclass(frozen=True)
class WorkoutDay:
    id: int
    uuid: uuid.UUID
    week_id: int
    name: str
    day_type: str

    @classmethod
    def from_row(cls, row: tuple) -> "WorkoutDay":
        did, day_uuid, week_id, name, day_type = row
        return cls(
            id=did,
            uuid=uuid.UUID(day_uuid),
            week_id=week_id,
            name=name or "",
            day_type=day_type or "",
        )


@dataclass(frozen=True)
class WorkoutSet:
    id: int
    workout_id: int
    weight: str
    sets: str
    reps: str

    @classmethod
    def from_row(cls, row: tuple) -> "WorkoutSet":
        sid, workout_id, weight, sets, reps = row
        return cls(sid, workout_id, weight or "", sets or "", reps or "")


@dataclass(frozen=True)
class ScalarWorkout:
    """Workout recorded with the legacy single weight/sets/reps fields."""

    id: int
    workout_day_id: int
    name: str
    notes: Optional[str] = None
    date: Optional[datetime.date] = None
    weight: Optional[str] = None
    sets: Optional[str] = None
    reps: Optional[str] = None


@dataclass(frozen=True)
class SetBasedWorkout:
    """Workout whose data lives in one or more WorkoutSet children."""

    id: int
    workout_day_id: int
    name: str
    notes: Optional[str] = None
    date: Optional[datetime.date] = None
    workout_sets: Tuple[WorkoutSet, ...] = field(default_factory=tuple)


Workout = Union[ScalarWorkout, SetBasedWorkout]


def workout_from_row(row: tuple, workout_sets: Tuple[WorkoutSet, ...] = ()) -> Workout:
    """Build the workout variant matching the stored shape of ``row``."""
    wid, day_id, name, notes, date, weight, sets, reps = row
    parsed_date = datetime.date.fromisoformat(date) if date else None
    if workout_sets:
        return SetBasedWorkout(
            id=wid,
            workout_day_id=day_id,
            name=name or "",
            notes=notes,
            date=parsed_date,
            workout_sets=tuple(workout_sets),
        )
    return ScalarWorkout(
        id=wid,
        workout_day_id=day_id,
        name=name or "",
        notes=notes,
        date=parsed_date,
        weight=weight,
        sets=sets,
        reps=reps,
    )


@dataclass(frozen=True)
class ExerciseNameEntry:
    id: int
    entry: str
