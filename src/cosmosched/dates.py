"""Calendar-day normalization.

Every date entering the engine passes through here. Inputs may be ``date`` or
``datetime`` objects, ISO strings, or the dotted locale form used by the
dashboard (``2025. 7. 5.``). Parsing is lenient: input that cannot be read
becomes today's date and a warning is logged, so a render pass never fails on
bad data. Callers that need to flag such values use ``DateNormalizer.parse``,
which reports whether the fallback was taken.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from enum import Enum

from .logger import get_logger

logger = get_logger()

LOCALE_DOTTED_PATTERN = re.compile(r"^(\d{4})\.\s*(\d{1,2})\.\s*(\d{1,2})\.?$")
ISO_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")

# Tried in order after the ISO forms
GENERIC_FORMATS = (
    "%Y/%m/%d",
    "%Y%m%d",
    "%d %b %Y",
    "%d %B %Y",
    "%b %d, %Y",
    "%B %d, %Y",
    "%m/%d/%Y",
)


class DateFrame(str, Enum):
    """Reference frame used to truncate a moment to a calendar day."""

    LOCAL = "local"
    UTC = "utc"


@dataclass(frozen=True)
class ParsedDay:
    """Result of lenient parsing."""

    day: date
    raw: object
    is_fallback: bool = False


def today(frame: DateFrame = DateFrame.LOCAL) -> date:
    """Get the current calendar day in the given frame."""
    if frame == DateFrame.UTC:
        return datetime.now(timezone.utc).date()
    return date.today()  # noqa: DTZ011


def add_days(day: date, days: int) -> date:
    """Shift a calendar day by a number of days."""
    return day + timedelta(days=days)


def inclusive_days(start: date, end: date) -> int:
    """Count days from start to end, both included."""
    return (end - start).days + 1


def day_window(start: date, count: int) -> list[date]:
    """Build a contiguous visible window of ``count`` days from ``start``."""
    return [start + timedelta(days=i) for i in range(max(count, 0))]


def format_day(day: date) -> str:
    """Format a calendar day as YYYY-MM-DD."""
    return day.isoformat()


class DateNormalizer:
    """Converts heterogeneous date inputs into calendar days for one frame."""

    def __init__(self, frame: DateFrame = DateFrame.LOCAL, today_override: date | None = None):
        """Initialize the normalizer.

        Args:
            frame: Frame used for aware datetimes and the fallback day
            today_override: Fixed "today" used for fallbacks (defaults to the real date)
        """
        self.frame = frame
        self.today_override = today_override

    def normalize(self, value: object) -> date:
        """Normalize any supported input to a calendar day (never raises)."""
        return self.parse(value).day

    def parse(self, value: object) -> ParsedDay:
        """Normalize input and report whether the today-fallback was used."""
        if isinstance(value, datetime):
            return ParsedDay(day=self._truncate(value), raw=value)
        if isinstance(value, date):
            return ParsedDay(day=value, raw=value)
        if isinstance(value, str):
            parsed = self._parse_string(value.strip())
            if parsed is not None:
                return ParsedDay(day=parsed, raw=value)

        fallback = self.today_override or today(self.frame)
        logger.warning(
            "Unparseable date %r, using %s instead", value, format_day(fallback)
        )
        return ParsedDay(day=fallback, raw=value, is_fallback=True)

    def _truncate(self, moment: datetime) -> date:
        """Truncate a datetime to a day, converting aware values into the frame."""
        if moment.tzinfo is None:
            return moment.date()
        if self.frame == DateFrame.UTC:
            return moment.astimezone(timezone.utc).date()
        return moment.astimezone().date()

    def _parse_string(self, text: str) -> date | None:
        if not text:
            return None

        # Dotted locale form: "2025. 7. 5." -> "2025-07-05"
        dotted = LOCALE_DOTTED_PATTERN.match(text)
        if dotted:
            year, month, day = dotted.groups()
            text = f"{year}-{int(month):02d}-{int(day):02d}"

        # Date only: read as UTC midnight, which is the same calendar day
        if ISO_DATE_PATTERN.match(text):
            try:
                return date.fromisoformat(text)
            except ValueError:
                return None

        # Date and time, with or without an offset
        try:
            return self._truncate(datetime.fromisoformat(text.replace("Z", "+00:00")))
        except ValueError:
            pass

        for fmt in GENERIC_FORMATS:
            try:
                return datetime.strptime(text, fmt).date()  # noqa: DTZ007
            except ValueError:
                continue

        return None
