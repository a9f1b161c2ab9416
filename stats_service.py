from __future__ import annotations

from typing import Dict, List

from fitness_log import FitnessLogStore
from models import Workout


class StatisticsService:
    """Compute per-exercise progress series for charts."""

    METRICS = ("weight", "volume")

    def __init__(self, store: FitnessLogStore) -> None:
        self.store = store

    def _value(self, workout: Workout, metric: str) -> float:
        if metric == "weight":
            return self.store.weight_of(workout)
        if metric == "volume":
            return self.store.volume_of(workout)
        raise ValueError(f"unknown metric {metric!r}; expected one of {self.METRICS}")

    def progress_series(self, exercise: str, metric: str = "weight") -> List[dict]:
        """Return one point per logged workout named ``exercise``.

        Points are ordered by insertion; ``index`` is the chart x-axis.
        """
        if metric not in self.METRICS:
            raise ValueError(f"unknown metric {metric!r}; expected one of {self.METRICS}")
        series: list[dict] = []
        for index, workout in enumerate(self.store.workouts_named(exercise)):
            series.append(
                {
                    "index": index,
                    "workout_id": workout.id,
                    "date": workout.date.isoformat() if workout.date else None,
                    "value": round(self._value(workout, metric), 1),
                }
            )
        return series

    def chart_series(
        self, exercises: List[str], metric: str = "weight"
    ) -> Dict[str, List[dict]]:
        """Series for each selected exercise, skipping duplicates."""
        result: dict[str, list[dict]] = {}
        for name in exercises:
            if name not in result:
                result[name] = self.progress_series(name, metric)
        return result

    def exercise_summary(self, exercise: str) -> dict:
        workouts = self.store.workouts_named(exercise)
        weights = [self.store.weight_of(w) for w in workouts]
        volumes = [self.store.volume_of(w) for w in workouts]
        return {
            "sessions": len(workouts),
            "max_weight": max(weights) if weights else 0.0,
            "latest_weight": weights[-1] if weights else 0.0,
            "total_volume": sum(volumes),
        }
