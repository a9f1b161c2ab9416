import os
import sys

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from fitness_log import FitnessLogStore
from migrate import migrate
from models import ScalarWorkout, SetBasedWorkout


def test_migrate_converts_scalar_workouts(tmp_path):
    db = str(tmp_path / "log.db")
    yaml_path = str(tmp_path / "settings.yaml")
    store = FitnessLogStore(db, yaml_path)
    week = store.create_week(1, "2025-01-19", "2025-01-25")
    day = store.create_workout_day(week, "Monday", "Legs")
    legacy = store.import_legacy_workout(day, "Back Squat", "140", "5", "5")
    empty = store.create_workout(day, "Plank")
    modern = store.create_workout(day, "Bench Press")
    store.add_set(modern, "100", "3", "10")
    before = (store.compute_weight_metric(legacy), store.compute_volume_metric(legacy))

    assert migrate(db) == 1

    converted = store.get_workout(legacy.id)
    assert isinstance(converted, SetBasedWorkout)
    assert [(s.weight, s.sets, s.reps) for s in converted.workout_sets] == [("140", "5", "5")]
    assert (store.compute_weight_metric(converted), store.compute_volume_metric(converted)) == before
    assert isinstance(store.get_workout(empty.id), ScalarWorkout)
    assert len(store.list_sets(modern)) == 1

    assert migrate(db) == 0
    assert len(store.list_sets(legacy)) == 1


def test_migrate_partial_fields(tmp_path):
    db = str(tmp_path / "log.db")
    store = FitnessLogStore(db, str(tmp_path / "settings.yaml"))
    week = store.create_week(1, "2025-01-19", "2025-01-25")
    day = store.create_workout_day(week, "Monday", "Legs")
    legacy = store.import_legacy_workout(day, "Lunge", "20", None, None)
    assert migrate(db) == 1
    assert [(s.weight, s.sets, s.reps) for s in store.list_sets(legacy)] == [("20", "", "")]
    assert store.compute_volume_metric(legacy) == 0


def test_migrate_keeps_legacy_fields_on_mixed_workouts(tmp_path):
    db = str(tmp_path / "log.db")
    store = FitnessLogStore(db, str(tmp_path / "settings.yaml"))
    week = store.create_week(1, "2025-01-19", "2025-01-25")
    day = store.create_workout_day(week, "Monday", "Legs")
    mixed = store.import_legacy_workout(day, "Back Squat", "140", "5", "5")
    store.add_set(mixed, "150", "3", "3")
    legacy = store.import_legacy_workout(day, "Lunge", "20", "3", "12")

    assert migrate(db) == 1

    assert store.workouts.fetch_detail(mixed.id)[5:] == ("140", "5", "5")
    assert store.workouts.fetch_detail(legacy.id)[5:] == (None, None, None)
