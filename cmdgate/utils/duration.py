"""
Duration Utilities
Parsing of "<quantity> <unit>" cooldown durations and remaining-time formatting
"""

import math
from datetime import timedelta
from typing import Dict, Union

from cmdgate.utils.errors import MalformedDurationError

Duration = Union[int, float, str]

# Seconds per unit
UNIT_SECONDS: Dict[str, int] = {
    "s": 1,
    "m": 60,
    "h": 60 * 60,
    "d": 60 * 60 * 24,
}

# Longest window a timedelta can hold
MAX_SECONDS = timedelta.max.total_seconds()

UNIT_HINT = f"Please use one of the following: {', '.join(UNIT_SECONDS)}"


def _invalid(duration: object) -> MalformedDurationError:
    return MalformedDurationError(
        duration,
        f'Duration "{duration}" is an invalid duration, e.g. "10 m" or "15 s". {UNIT_HINT}',
    )


class DurationUtils:
    """Utility class for cooldown durations."""

    @staticmethod
    def parse(duration: Duration) -> Union[int, float]:
        """
        Convert a cooldown duration to seconds.

        Numbers are taken as seconds and returned unchanged. Strings must look
        like "10 m", "15 s", "2 h" or "1 d" (unit is case-insensitive).

        Args:
            duration: Seconds, or a "<quantity> <unit>" string

        Returns:
            Duration in seconds

        Raises:
            MalformedDurationError: If the string can't be parsed or is too long
        """
        if isinstance(duration, (int, float)) and not isinstance(duration, bool):
            return duration

        if not isinstance(duration, str):
            raise _invalid(duration)

        split = duration.split(" ")

        if len(split) != 2:
            raise _invalid(duration)

        raw_quantity, unit = split[0], split[1].lower()

        if unit not in UNIT_SECONDS:
            raise MalformedDurationError(
                duration,
                f'Unknown duration type "{unit}" in "{duration}". {UNIT_HINT}',
            )

        try:
            quantity = float(raw_quantity)
        except ValueError:
            quantity = math.nan

        if not math.isfinite(quantity) or quantity <= 0:
            raise MalformedDurationError(
                duration,
                f'Invalid quantity of "{raw_quantity}" in "{duration}", it must be greater than 0. {UNIT_HINT}',
            )

        seconds = quantity * UNIT_SECONDS[unit]
        if seconds > MAX_SECONDS:
            raise MalformedDurationError(
                duration,
                f'Duration "{duration}" is too long. {UNIT_HINT}',
            )
        return int(seconds) if seconds.is_integer() else seconds

    @staticmethod
    def format_remaining(seconds: float) -> str:
        """
        Format remaining time as "1d 2h 3m 4s".

        Day, hour and minute fields are left out when zero; seconds are
        always present.

        Args:
            seconds: Remaining seconds

        Returns:
            Compact duration string
        """
        seconds = max(0.0, seconds)

        d = int(seconds // 86400)
        h = int((seconds % 86400) // 3600)
        m = int((seconds % 3600) // 60)
        s = int(seconds % 60)

        time = ""
        if d > 0:
            time += f"{d}d "
        if h > 0:
            time += f"{h}h "
        if m > 0:
            time += f"{m}m "
        time += f"{s}s"

        return time
