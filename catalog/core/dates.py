"""Date helpers shared by the rule and derivation functions.

Invariants:
    - Naive datetimes are interpreted as UTC (SQLite drops tzinfo on read)
    - years_before clamps Feb 29 to Feb 28 in non-leap target years
"""

from datetime import date, datetime, timezone


def as_utc(moment: datetime) -> datetime:
    """Return an aware UTC datetime for either a naive or aware input."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def years_before(moment: datetime, years: int) -> datetime:
    """Same calendar instant `years` years earlier."""
    try:
        return moment.replace(year=moment.year - years)
    except ValueError:
        return moment.replace(year=moment.year - years, day=28)


def utc_day_bounds(day: date) -> tuple[datetime, datetime]:
    """Half-open [start, end) UTC range covering one calendar day."""
    start = datetime(day.year, day.month, day.day, tzinfo=timezone.utc)
    end = datetime.fromordinal(day.toordinal() + 1).replace(tzinfo=timezone.utc)
    return start, end
