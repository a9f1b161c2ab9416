import os
import sys

import pytest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from fitness_log import FitnessLogStore
from stats_service import StatisticsService


@pytest.fixture
def service(tmp_path):
    store = FitnessLogStore(str(tmp_path / "log.db"), str(tmp_path / "settings.yaml"))
    week = store.create_week(1, "2025-01-19", "2025-01-25")
    day = store.create_workout_day(week, "Monday", "Push")
    first = store.create_workout(day, "Bench Press", date="2025-01-20")
    store.add_set(first, "100", "3", "10")
    store.add_set(first, "120", "2", "8")
    store.import_legacy_workout(day, "Bench Press", "105", "3", "8", date="2025-01-22")
    store.create_workout(day, "Incline Bench Press")
    return StatisticsService(store)


def test_weight_series(service):
    series = service.progress_series("Bench Press", "weight")
    assert [p["index"] for p in series] == [0, 1]
    assert [p["value"] for p in series] == [110.0, 105.0]
    assert series[0]["date"] == "2025-01-20"


def test_volume_series(service):
    series = service.progress_series("Bench Press", "volume")
    assert [p["value"] for p in series] == [3 * 10 * 100 + 2 * 8 * 120, 3 * 8 * 105]


def test_unknown_metric(service):
    with pytest.raises(ValueError):
        service.progress_series("Bench Press", "reps")


def test_chart_series_and_summary(service):
    charts = service.chart_series(["Bench Press", "Squat", "Bench Press"])
    assert list(charts) == ["Bench Press", "Squat"]
    assert charts["Squat"] == []
    summary = service.exercise_summary("Bench Press")
    assert summary["sessions"] == 2
    assert summary["max_weight"] == 110.0
    assert summary["latest_weight"] == 105.0
    assert summary["total_volume"] == 4920 + 2520
