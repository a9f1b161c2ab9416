import math
import logging
from typing import Iterable, Tuple

import numpy as np

from exceptions import ParseError

logger = logging.getLogger(__name__)


class MathTools:
    """Provides the arithmetic behind workout weight and volume metrics."""

    @staticmethod
    def parse_number(text: object, strict: bool = False) -> float:
        """Return ``text`` as a float.

        Free-text fields that are empty, missing or not numeric yield ``0.0``
        unless ``strict`` is set, in which case :class:`ParseError` is raised.
        """
        if isinstance(text, (int, float)) and not isinstance(text, bool):
            value = float(text)
        else:
            try:
                value = float(str(text).strip()) if text is not None else math.nan
            except ValueError:
                value = math.nan
        if not math.isfinite(value):
            if strict:
                raise ParseError(text)
            if text not in (None, ""):
                logger.warning("Treating non-numeric value %r as 0", text)
            return 0.0
        return value

    @staticmethod
    def mean(values: Iterable[float]) -> float:
        """Return the arithmetic mean of ``values`` or 0 when empty."""
        data = list(values)
        if not data:
            return 0.0
        return float(np.mean(np.array(data, dtype=float)))

    @staticmethod
    def volume(entries: Iterable[Tuple[float, float, float]]) -> float:
        """Compute training volume as the sum of sets times reps times weight."""
        vol = 0.0
        for sets, reps, weight in entries:
            vol += sets * reps * weight
        return vol
