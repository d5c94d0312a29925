"""Calendar ranges for schedule and progress views.

All ranges are half-open ``[start, end)`` and expressed in UTC. Naive datetimes
are read as UTC.
"""

from collections.abc import Iterator
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import StrEnum

SUNDAY = 6
DEFAULT_WEEK_START = SUNDAY
DAYS_PER_WEEK = 7
MONTHS_PER_YEAR = 12
TRAILING_DAY_DAYS = 1
TRAILING_WEEK_DAYS = 7
TRAILING_MONTH_DAYS = 30


class ViewType(StrEnum):
    """Granularity of a calendar view."""

    DAY = "day"
    WEEK = "week"
    MONTH = "month"


@dataclass(frozen=True)
class DateRange:
    """A half-open UTC range."""

    start: datetime
    end: datetime

    @property
    def days(self) -> int:
        """Number of whole days covered."""
        return (self.end - self.start).days

    def contains(self, moment: datetime) -> bool:
        """Return True when the moment falls inside the range."""
        return self.start <= to_utc(moment) < self.end

    def to_payload(self, view_type: ViewType | None = None) -> dict[str, object]:
        """Return the range as a JSON-friendly mapping."""
        return {
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "viewType": str(view_type) if view_type else None,
        }


def to_utc(moment: datetime) -> datetime:
    """Return an aware UTC datetime."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC)


def utc_midnight(moment: datetime) -> datetime:
    """Return UTC midnight of the moment's UTC day."""
    return to_utc(moment).replace(hour=0, minute=0, second=0, microsecond=0)


def day_key(moment: datetime) -> str:
    """Return the moment's UTC date as ``YYYY-MM-DD``."""
    return to_utc(moment).date().isoformat()


def iter_days(date_range: DateRange) -> Iterator[datetime]:
    """Yield one UTC midnight per whole day of the range.

    Counting starts on the start's UTC day, so a range that does not begin at
    midnight still yields exactly ``date_range.days`` values.
    """
    first = utc_midnight(date_range.start)
    for offset in range(date_range.days):
        yield first + timedelta(days=offset)


def calculate_range(
    view_type: ViewType | str,
    offset: int = 0,
    anchor: datetime | None = None,
    *,
    week_start: int = DEFAULT_WEEK_START,
) -> DateRange:
    """Return the calendar day, week or month around the anchor.

    ``offset`` moves the window by whole days, weeks or months. ``week_start``
    uses ``datetime.weekday()`` numbering (Monday is 0, Sunday is 6).
    """
    view = ViewType(view_type)
    midnight = utc_midnight(anchor if anchor is not None else datetime.now(tz=UTC))
    if view is ViewType.DAY:
        start = midnight + timedelta(days=offset)
        return DateRange(start=start, end=start + timedelta(days=1))
    if view is ViewType.WEEK:
        since_week_start = (midnight.weekday() - week_start) % DAYS_PER_WEEK
        start = midnight - timedelta(days=since_week_start) + timedelta(weeks=offset)
        return DateRange(start=start, end=start + timedelta(days=DAYS_PER_WEEK))
    start = _shift_months(midnight.replace(day=1), offset)
    return DateRange(start=start, end=_shift_months(start, 1))


def calculate_trailing_range(
    view_type: ViewType | str,
    offset: int = 0,
    anchor: datetime | None = None,
    *,
    week_days: int = TRAILING_WEEK_DAYS,
    month_days: int = TRAILING_MONTH_DAYS,
) -> DateRange:
    """Return the N-day window that ends with the anchor's day.

    N is one day, ``week_days`` or ``month_days``; ``offset`` moves the window
    by whole windows.
    """
    view = ViewType(view_type)
    length = {
        ViewType.DAY: TRAILING_DAY_DAYS,
        ViewType.WEEK: week_days,
        ViewType.MONTH: month_days,
    }[view]
    midnight = utc_midnight(anchor if anchor is not None else datetime.now(tz=UTC))
    end = midnight + timedelta(days=1 + offset * length)
    return DateRange(start=end - timedelta(days=length), end=end)


def _shift_months(first_of_month: datetime, months: int) -> datetime:
    index = first_of_month.year * MONTHS_PER_YEAR + first_of_month.month - 1 + months
    year, month_index = divmod(index, MONTHS_PER_YEAR)
    return first_of_month.replace(year=year, month=month_index + 1)


def utc_now() -> datetime:
    """Return the current aware UTC time."""
    return datetime.now(tz=UTC)
