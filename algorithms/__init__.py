from .math_tools import MathTools
from .weekday import (
    WEEKDAYS,
    sort_by_weekday,
    start_of_week,
    week_range,
    weekday_index,
)

__all__ = [
    "MathTools",
    "WEEKDAYS",
    "sort_by_weekday",
    "start_of_week",
    "week_range",
    "weekday_index",
]
