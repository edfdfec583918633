"""
Date string normalization for SQL

Turns loosely formatted user dates ("31/12/2023", "2023-12-31T10:00") into
the "YYYY-MM-DD" / "YYYY-MM-DD HH:MM:SS" shape SQL date columns accept.

The day-first detection is positional: it only recognizes input whose first
separator sits at index 1-3 and whose third part starts with a 4-digit year.
Existing callers depend on this exact behavior.
"""

import logging
from datetime import datetime
from typing import Callable, Optional

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

SQL_DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"
SQL_MIDNIGHT_FORMAT = "%Y-%m-%d 00:00:00"
SQL_DATETIME_LENGTH = 19  # len("YYYY-MM-DD HH:MM:SS")


class DateNormalizer:
    """Reformats date strings to SQL order, padding missing time parts."""

    def __init__(self, clock: Optional[Clock] = None):
        """
        Args:
            clock: Returns the reference "now" used to pad incomplete
                datetimes (defaults to datetime.now)
        """
        self.clock = clock or datetime.now

    def normalize(
        self,
        field: str,
        preset_now: bool = True,
        is_datetime: bool = False
    ) -> str:
        """
        Convert a date string to SQL format.

        Args:
            field: Date string, e.g. "31/12/2023", "31-12-2023 10:00" or
                "2023-12-31T10:00:00"
            preset_now: Pad an incomplete datetime from the current time
                (True) or from midnight (False)
            is_datetime: Treat the value as a datetime and return the full
                "YYYY-MM-DD HH:MM:SS" form

        Returns:
            "YYYY-MM-DD", or "YYYY-MM-DD HH:MM:SS" when is_datetime is set
        """
        value = field.replace("/", "-")
        if "T" in value:
            value = value.replace("T", " ")

        if is_datetime and len(value) < SQL_DATETIME_LENGTH:
            reference_format = SQL_DATETIME_FORMAT if preset_now else SQL_MIDNIGHT_FORMAT
            reference = self.clock().strftime(reference_format)
            value += reference[len(value):]

        # A separator at index 0 does not count as day-first
        if value.find("-", 0, 4) > 0:
            # Missing parts read as empty: "12-2023" becomes "-2023-12"
            parts = value.split("-") + ["", ""]

            year_part = parts[2]
            time_part = " " + year_part[4:].strip() if is_datetime else ""
            value = f"{year_part[:4]}-{parts[1]}-{parts[0]}{time_part}"

        normalized = value.strip()
        logger.debug(f"Normalized date {field!r} -> {normalized!r}")
        return normalized
