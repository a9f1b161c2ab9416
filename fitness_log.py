"""Workout log store.

:class:`FitnessLogStore` owns the Week -> WorkoutDay -> Workout -> WorkoutSet
graph and the exercise name registry. It is the single entry point used by
views: every method takes entities (or their ids) and returns typed entities
from :mod:`models`.

Storage failures are logged, appended to :attr:`FitnessLogStore.errors`,
handed to the optional ``on_error`` callback and re-raised as
:class:`StorageError`, so a failed write is never mistaken for a committed
one. Open the store with :func:`open_store` to get a recoverable result
instead of an exception.
"""

from __future__ import annotations

import datetime
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, List, Optional, Union

from algorithms import MathTools, sort_by_weekday, start_of_week, week_range
from db import (
    ExerciseNameRepository,
    SettingsRepository,
    WeekRepository,
    WorkoutDayRepository,
    WorkoutRepository,
    WorkoutSetRepository,
)
from exceptions import FitnessLogError, StorageError, ValidationError
from models import (
    ExerciseNameEntry,
    ScalarWorkout,
    SetBasedWorkout,
    Week,
    Workout,
    WorkoutDay,
    WorkoutSet,
    workout_from_row,
)
from settings_schema import MAX_SUGGESTIONS

logger = logging.getLogger(__name__)

DateLike = Union[datetime.date, str]


def _as_date(value: DateLike, label: str) -> datetime.date:
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    try:
        return datetime.date.fromisoformat(str(value))
    except ValueError as e:
        raise ValidationError(f"{label} must be an ISO date, got {value!r}") from e


def _id_of(entity) -> int:
    return entity if isinstance(entity, int) else entity.id


def _text(value) -> str:
    return "" if value is None else str(value).strip()


class FitnessLogStore:
    """Persist and query the workout log."""

    def __init__(
        self,
        db_path: str = "workout.db",
        yaml_path: str = "settings.yaml",
        on_error: Optional[Callable[[str, StorageError], None]] = None,
    ) -> None:
        self.db_path = db_path
        self.settings = SettingsRepository(db_path, yaml_path)
        self.weeks = WeekRepository(db_path)
        self.workout_days = WorkoutDayRepository(db_path)
        self.workouts = WorkoutRepository(db_path)
        self.workout_sets = WorkoutSetRepository(db_path)
        self.exercise_names = ExerciseNameRepository(db_path)
        self.errors: list[StorageError] = []
        self._on_error = on_error
        self._closed = False
        logger.info("Opened workout log %s", db_path)

    def __enter__(self) -> "FitnessLogStore":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            logger.info("Closed workout log %s", self.db_path)

    def _report(self, action: str, error: StorageError) -> None:
        logger.error("%s failed: %s", action, error, exc_info=error)
        self.errors.append(error)
        if self._on_error is not None:
            self._on_error(action, error)

    @contextmanager
    def _guard(self, action: str):
        if self._closed:
            error = StorageError("workout log is closed")
            self._report(action, error)
            raise error
        try:
            yield
        except StorageError as e:
            self._report(action, e)
            raise

    # Weeks

    def create_week(
        self, week_number: int, start_date: DateLike, end_date: DateLike
    ) -> Week:
        try:
            number = int(week_number)
        except (TypeError, ValueError) as e:
            raise ValidationError(f"week_number must be an integer, got {week_number!r}") from e
        start = _as_date(start_date, "start_date")
        end = _as_date(end_date, "end_date")
        if start > end:
            raise ValidationError("start_date must not be after end_date")
        with self._guard("create week"):
            wid = self.weeks.create(number, start.isoformat(), end.isoformat())
            return Week(wid, number, start, end)

    def create_week_for(self, day: DateLike, week_number: int) -> Week:
        """Create the Sunday-to-Saturday week containing ``day``."""
        start, end = week_range(start_of_week(_as_date(day, "day")))
        return self.create_week(week_number, start, end)

    def list_weeks(self) -> List[Week]:
        with self._guard("list weeks"):
            return [Week.from_row(r) for r in self.weeks.fetch_all_weeks()]

    def get_week(self, week_id: int) -> Week:
        with self._guard("get week"):
            return Week.from_row(self.weeks.fetch_detail(week_id))

    def find_week_containing(self, day: DateLike) -> Optional[Week]:
        iso = _as_date(day, "day").isoformat()
        with self._guard("find week"):
            row = self.weeks.find_containing(iso)
        return Week.from_row(row) if row else None

    def update_week_dates(
        self, week: Week | int, start_date: DateLike, end_date: DateLike
    ) -> Week:
        start = _as_date(start_date, "start_date")
        end = _as_date(end_date, "end_date")
        if start > end:
            raise ValidationError("start_date must not be after end_date")
        with self._guard("update week"):
            self.weeks.update_dates(_id_of(week), start.isoformat(), end.isoformat())
            return Week.from_row(self.weeks.fetch_detail(_id_of(week)))

    def delete_week(self, week: Week | int) -> None:
        with self._guard("delete week"):
            self.weeks.delete(_id_of(week))

    # Workout days

    def create_workout_day(
        self, week: Week | int, name: str, day_type: str = ""
    ) -> WorkoutDay:
        day_type = _text(day_type)
        with self._guard("create workout day"):
            if not day_type:
                day_type = self.settings.get_text("rest_day_label", "Rest")
            did = self.workout_days.add(_id_of(week), name, day_type)
            return WorkoutDay.from_row(self.workout_days.fetch_detail(did))

    def list_workout_days(self, week: Week | int) -> List[WorkoutDay]:
        with self._guard("list workout days"):
            rows = self.workout_days.fetch_for_week(_id_of(week))
        return [WorkoutDay.from_row(r) for r in rows]

    def list_workout_days_ordered_by_weekday(self, week: Week | int) -> List[WorkoutDay]:
        return sort_by_weekday(self.list_workout_days(week), key=lambda d: d.name)

    def rename_workout_day(self, day: WorkoutDay | int, name: str) -> WorkoutDay:
        with self._guard("rename workout day"):
            self.workout_days.update_name(_id_of(day), name)
            return WorkoutDay.from_row(self.workout_days.fetch_detail(_id_of(day)))

    def set_day_type(self, day: WorkoutDay | int, day_type: str) -> WorkoutDay:
        with self._guard("update workout day"):
            self.workout_days.update_day_type(_id_of(day), _text(day_type))
            return WorkoutDay.from_row(self.workout_days.fetch_detail(_id_of(day)))

    def delete_workout_day(self, day: WorkoutDay | int) -> None:
        with self._guard("delete workout day"):
            self.workout_days.remove(_id_of(day))

    # Workouts

    def _load_workout(self, row: tuple) -> Workout:
        sets = tuple(
            WorkoutSet.from_row(r) for r in self.workout_sets.fetch_for_workout(row[0])
        )
        return workout_from_row(row, sets)

    def create_workout(
        self,
        workout_day: WorkoutDay | int,
        name: str,
        notes: str | None = None,
        date: DateLike | None = None,
    ) -> Workout:
        iso = _as_date(date, "date").isoformat() if date is not None else None
        with self._guard("create workout"):
            wid = self.workouts.create(_id_of(workout_day), name, notes, iso)
            if _text(name):
                self.exercise_names.ensure(_text(name))
            return self._load_workout(self.workouts.fetch_detail(wid))

    def import_legacy_workout(
        self,
        workout_day: WorkoutDay | int,
        name: str,
        weight,
        sets,
        reps,
        notes: str | None = None,
        date: DateLike | None = None,
    ) -> ScalarWorkout:
        """Store a workout in the old single weight/sets/reps shape."""
        iso = _as_date(date, "date").isoformat() if date is not None else None
        with self._guard("import workout"):
            wid = self.workouts.create(
                _id_of(workout_day),
                name,
                notes,
                iso,
                weight=None if weight is None else _text(weight),
                sets=None if sets is None else _text(sets),
                reps=None if reps is None else _text(reps),
            )
            if _text(name):
                self.exercise_names.ensure(_text(name))
            return self._load_workout(self.workouts.fetch_detail(wid))

    def get_workout(self, workout_id: int) -> Workout:
        with self._guard("get workout"):
            return self._load_workout(self.workouts.fetch_detail(workout_id))

    def list_workouts(self, workout_day: WorkoutDay | int) -> List[Workout]:
        with self._guard("list workouts"):
            rows = self.workouts.fetch_for_day(_id_of(workout_day))
            return [self._load_workout(r) for r in rows]

    def workouts_named(self, name: str) -> List[Workout]:
        """Workouts named exactly ``name`` in the order they were logged."""
        with self._guard("list workouts"):
            return [self._load_workout(r) for r in self.workouts.fetch_by_name(name)]

    def update_workout(
        self, workout: Workout | int, name: str, notes: str | None = None
    ) -> Workout:
        with self._guard("update workout"):
            self.workouts.update(_id_of(workout), name, notes)
            if _text(name):
                self.exercise_names.ensure(_text(name))
            return self._load_workout(self.workouts.fetch_detail(_id_of(workout)))

    def delete_workout(self, workout: Workout | int) -> None:
        with self._guard("delete workout"):
            self.workouts.remove(_id_of(workout))

    def most_recent_workout(self, name: str) -> Optional[Workout]:
        """Return the last logged workout whose name contains ``name``.

        Matching ignores case. Recency is insertion order, not the workout date.
        """
        with self._guard("find workout"):
            row = self.workouts.latest_matching(name)
            return self._load_workout(row) if row else None

    # Sets

    def add_set(self, workout: Workout | int, weight, sets, reps) -> WorkoutSet:
        with self._guard("add set"):
            sid = self.workout_sets.add(
                _id_of(workout), _text(weight), _text(sets), _text(reps)
            )
            return WorkoutSet.from_row(self.workout_sets.fetch_detail(sid))

    def list_sets(self, workout: Workout | int) -> List[WorkoutSet]:
        with self._guard("list sets"):
            rows = self.workout_sets.fetch_for_workout(_id_of(workout))
        return [WorkoutSet.from_row(r) for r in rows]

    def update_set(self, workout_set: WorkoutSet | int, weight, sets, reps) -> WorkoutSet:
        with self._guard("update set"):
            self.workout_sets.update(
                _id_of(workout_set), _text(weight), _text(sets), _text(reps)
            )
            return WorkoutSet.from_row(self.workout_sets.fetch_detail(_id_of(workout_set)))

    def delete_set(self, workout_set: WorkoutSet | int) -> None:
        with self._guard("delete set"):
            self.workout_sets.remove(_id_of(workout_set))

    # Metrics

    @staticmethod
    def weight_of(workout: Workout) -> float:
        """Mean set weight, or the legacy weight for scalar workouts."""
        if isinstance(workout, SetBasedWorkout):
            return MathTools.mean(
                MathTools.parse_number(s.weight) for s in workout.workout_sets
            )
        if isinstance(workout, ScalarWorkout):
            return MathTools.parse_number(workout.weight)
        raise TypeError(f"unsupported workout type {type(workout).__name__}")

    @staticmethod
    def volume_of(workout: Workout) -> float:
        """Sum of sets x reps x weight over the workout's data."""
        if isinstance(workout, SetBasedWorkout):
            entries = [
                (
                    MathTools.parse_number(s.sets),
                    MathTools.parse_number(s.reps),
                    MathTools.parse_number(s.weight),
                )
                for s in workout.workout_sets
            ]
        elif isinstance(workout, ScalarWorkout):
            entries = [
                (
                    MathTools.parse_number(workout.sets),
                    MathTools.parse_number(workout.reps),
                    MathTools.parse_number(workout.weight),
                )
            ]
        else:
            raise TypeError(f"unsupported workout type {type(workout).__name__}")
        return MathTools.volume(entries)

    def compute_weight_metric(self, workout: Workout | int) -> float:
        return self.weight_of(self.get_workout(_id_of(workout)))

    def compute_volume_metric(self, workout: Workout | int) -> float:
        return self.volume_of(self.get_workout(_id_of(workout)))

    # Exercise name registry

    def record_exercise_name_if_new(self, name: str) -> bool:
        name = _text(name)
        if not name:
            return False
        with self._guard("record exercise name"):
            return self.exercise_names.ensure(name)

    def suggest_exercise_names(self, prefix: str) -> List[str]:
        with self._guard("suggest exercise names"):
            limit = min(
                self.settings.get_int("suggestion_limit", MAX_SUGGESTIONS), MAX_SUGGESTIONS
            )
            return self.exercise_names.search(prefix or "", limit)

    def list_exercise_names(self, search: str = "") -> List[ExerciseNameEntry]:
        """Registry entries sorted by name, filtered by a case-sensitive substring."""
        with self._guard("list exercise names"):
            rows = self.exercise_names.fetch_entries()
        entries = [ExerciseNameEntry(eid, entry) for eid, entry in rows]
        entries.sort(key=lambda e: e.entry)
        if search:
            entries = [e for e in entries if search in e.entry]
        return entries

    def unique_workout_names(self) -> List[str]:
        with self._guard("list exercise names"):
            return sorted(set(self.exercise_names.fetch_sorted()))

    def remove_exercise_name(self, entry: ExerciseNameEntry | str) -> None:
        text = entry.entry if isinstance(entry, ExerciseNameEntry) else entry
        with self._guard("remove exercise name"):
            self.exercise_names.remove(text)


@dataclass
class OpenResult:
    """Outcome of :func:`open_store`; exactly one of the fields is set."""

    store: Optional[FitnessLogStore] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.store is not None


def open_store(
    db_path: str = "workout.db",
    yaml_path: str = "settings.yaml",
    on_error: Optional[Callable[[str, StorageError], None]] = None,
) -> OpenResult:
    """Open the workout log without raising, so a caller can offer a retry."""
    try:
        store = FitnessLogStore(db_path, yaml_path, on_error=on_error)
    except (FitnessLogError, ValueError, OSError) as e:
        logger.exception("Could not open workout log %s", db_path)
        return OpenResult(error=e)
    return OpenResult(store=store)
