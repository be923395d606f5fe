"""
Miscellaneous helper utilities for Film Roulette.
"""

import math
import os
from datetime import datetime, timezone
from functools import lru_cache
from typing import Optional


@lru_cache(maxsize=1)
def get_project_root() -> str:
    """
    Get the project root directory path.

    Returns:
        Absolute path to the project root (parent of utils/).
    """
    return os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


def round_half_up(value: float, digits: int = 0) -> float:
    """
    Round with halves going up (2.45 -> 2.5, 12.5 -> 13).

    Python's round() rounds halves to even, which makes percentages
    like 12.5% come out as 12.

    Args:
        value: Number to round
        digits: Decimal places to keep

    Returns:
        Rounded value (int when digits is 0)
    """
    factor = 10 ** digits
    rounded = math.floor(value * factor + 0.5) / factor
    return int(rounded) if digits == 0 else rounded


def format_timestamp(timestamp: Optional[int]) -> str:
    """
    Convert a stored Unix timestamp to ISO-8601 (UTC).

    Rows written without a timestamp report the current time.
    """
    if timestamp is None:
        moment = datetime.now(timezone.utc)
    else:
        moment = datetime.fromtimestamp(timestamp, tz=timezone.utc)
    return moment.isoformat().replace('+00:00', 'Z')
