"""Template-driven task date scheduling."""

from collections.abc import Sequence
from datetime import date, timedelta

from cosmosched.logger import get_logger
from cosmosched.models import DateRange, TaskTemplate

logger = get_logger()


def schedule_dates(templates: Sequence[TaskTemplate], anchor: date) -> list[DateRange]:
    """Compute a date range per template by walking a cursor from the anchor.

    Each template starts at the cursor and lasts ``duration_days`` (inclusive).
    The cursor moves to the day after a template's end only when the *next*
    template depends on the previous one; otherwise the next template starts
    on the same day, which lets independent tracks run in parallel.

    Args:
        templates: Ordered templates
        anchor: First possible day (usually the project start)

    Returns:
        One DateRange per template, index-aligned
    """
    ranges: list[DateRange] = []
    cursor = anchor

    for index, template in enumerate(templates):
        start = cursor
        end = cursor + timedelta(days=template.duration_days - 1)
        ranges.append(DateRange(start_date=start, end_date=end))

        if index < len(templates) - 1 and templates[index + 1].depends_on_previous:
            cursor = end + timedelta(days=1)

    return ranges


class TaskDateScheduler:
    """Schedules template sequences against an anchor date."""

    def schedule(self, templates: Sequence[TaskTemplate], anchor: date) -> list[DateRange]:
        """Schedule templates and log the resulting ranges."""
        ranges = schedule_dates(templates, anchor)
        for template, date_range in zip(templates, ranges, strict=True):
            logger.checks(
                "  %s: %s -> %s (%dd%s)",
                template.title,
                date_range.start_date,
                date_range.end_date,
                template.duration_days,
                ", after previous" if template.depends_on_previous else "",
            )
        return ranges
