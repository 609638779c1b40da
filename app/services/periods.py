# app/services/periods.py
"""
Period resolver.

Maps a symbolic time period (1D ... MAX) to a concrete calendar date
range ending today. "Today" is injectable so results are reproducible in
tests.

Rules:
    1D, 5D        -> subtract days
    1M, 6M        -> subtract calendar months
    1Y ... 10Y    -> subtract calendar years
    YTD           -> January 1 of the current year
    MAX           -> 20 years back (a policy bound, not "all history")

Usage:
    from app.services.periods import resolve_period

    date_range = resolve_period("YTD", today=date(2024, 7, 15))
    # DateRange(start=date(2024, 1, 1), end=date(2024, 7, 15))
"""

import enum
from dataclasses import dataclass
from datetime import date, timedelta

from app.services.constants import MAX_PERIOD_YEARS
from app.services.exceptions import InvalidPeriodError
from app.utils.date_utils import subtract_months, subtract_years


class TimePeriod(str, enum.Enum):
    ONE_DAY = "1D"
    FIVE_DAYS = "5D"
    ONE_MONTH = "1M"
    SIX_MONTHS = "6M"
    YEAR_TO_DATE = "YTD"
    ONE_YEAR = "1Y"
    THREE_YEARS = "3Y"
    FIVE_YEARS = "5Y"
    TEN_YEARS = "10Y"
    MAX = "MAX"


DEFAULT_PERIOD = TimePeriod.ONE_YEAR


@dataclass(frozen=True)
class DateRange:
    """
    Inclusive calendar date range.

    Attributes:
        start: First date (inclusive)
        end: Last date (inclusive)
    """

    start: date
    end: date

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise ValueError(f"start ({self.start}) cannot be after end ({self.end})")

    def contains(self, d: date) -> bool:
        return self.start <= d <= self.end


def parse_period(period: str | TimePeriod) -> TimePeriod:
    """
    Parse a period token.

    Tokens are case-sensitive: "ytd" is rejected rather than guessed.

    Raises:
        InvalidPeriodError: If the token is not one of the known periods
    """
    if isinstance(period, TimePeriod):
        return period
    try:
        return TimePeriod(period)
    except ValueError:
        raise InvalidPeriodError(
            str(period),
            valid_options=[p.value for p in TimePeriod],
        ) from None


def resolve_period(period: str | TimePeriod, today: date | None = None) -> DateRange:
    """
    Resolve a symbolic period to a concrete date range.

    Args:
        period: Period token (e.g. "1M", "YTD") or TimePeriod
        today: Reference date (defaults to date.today())

    Returns:
        DateRange ending on `today`

    Raises:
        InvalidPeriodError: If the token is not recognized
    """
    period = parse_period(period)
    end = today or date.today()

    if period == TimePeriod.ONE_DAY:
        start = end - timedelta(days=1)
    elif period == TimePeriod.FIVE_DAYS:
        start = end - timedelta(days=5)
    elif period == TimePeriod.ONE_MONTH:
        start = subtract_months(end, 1)
    elif period == TimePeriod.SIX_MONTHS:
        start = subtract_months(end, 6)
    elif period == TimePeriod.YEAR_TO_DATE:
        start = date(end.year, 1, 1)
    elif period == TimePeriod.ONE_YEAR:
        start = subtract_years(end, 1)
    elif period == TimePeriod.THREE_YEARS:
        start = subtract_years(end, 3)
    elif period == TimePeriod.FIVE_YEARS:
        start = subtract_years(end, 5)
    elif period == TimePeriod.TEN_YEARS:
        start = subtract_years(end, 10)
    else:
        start = subtract_years(end, MAX_PERIOD_YEARS)

    return DateRange(start=start, end=end)
