import datetime
from typing import Callable, Iterable, List, Tuple, TypeVar

T = TypeVar("T")

WEEKDAYS: Tuple[str, ...] = (
    "Sunday",
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
)


def weekday_index(name: str) -> int:
    """Return the position of ``name`` in a Sunday-first week.

    Names outside :data:`WEEKDAYS` share index 0 with Sunday.
    """
    try:
        return WEEKDAYS.index(name)
    except ValueError:
        return 0


def sort_by_weekday(items: Iterable[T], key: Callable[[T], str]) -> List[T]:
    """Stable sort of ``items`` by the weekday name returned by ``key``."""
    return sorted(items, key=lambda item: weekday_index(key(item)))


def start_of_week(day: datetime.date) -> datetime.date:
    """Return the Sunday on or before ``day``."""
    return day - datetime.timedelta(days=(day.weekday() + 1) % 7)


def week_range(start: datetime.date) -> Tuple[datetime.date, datetime.date]:
    return start, start + datetime.timedelta(days=6)
