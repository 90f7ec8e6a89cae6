"""
Civil Time

Every report boundary ("today", "this week", "this month") is a
calendar concept in one fixed timezone, while stored timestamps are UTC
instants. CivilClock is the single place where the two meet:

- civil(instant)  UTC instant  -> calendar fields in the civil zone
- midnight(day)   civil date   -> UTC instant of that civil midnight

The offset is fixed (no DST). UTC+8 is the default.
"""

import calendar
from datetime import date, datetime, timedelta, timezone


DEFAULT_UTC_OFFSET_MINUTES = 480


class CivilClock:
    """
    Converts between UTC instants and civil calendar dates.

    Args:
        utc_offset_minutes: Offset of the civil zone, minutes east of UTC
    """

    def __init__(self, utc_offset_minutes: int = DEFAULT_UTC_OFFSET_MINUTES):
        self._offset_minutes = utc_offset_minutes
        self._tz = timezone(timedelta(minutes=utc_offset_minutes))

    @property
    def utc_offset_minutes(self) -> int:
        return self._offset_minutes

    @property
    def tzinfo(self) -> timezone:
        return self._tz

    def civil(self, instant: datetime) -> datetime:
        """
        Express an instant in the civil zone.

        Naive datetimes are taken to be UTC.
        """
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=timezone.utc)
        return instant.astimezone(self._tz)

    def today(self, now: datetime) -> date:
        """The civil date at instant `now`."""
        return self.civil(now).date()

    def midnight(self, day: date) -> datetime:
        """UTC instant at which civil date `day` begins."""
        local_midnight = datetime(day.year, day.month, day.day, tzinfo=self._tz)
        return local_midnight.astimezone(timezone.utc)

    @staticmethod
    def monday_of(day: date) -> date:
        """Most recent Monday at or before `day` (Sunday goes back 6 days)."""
        return day - timedelta(days=day.isoweekday() - 1)


def days_in_month(year: int, month: int) -> int:
    """Gregorian month length, leap years included."""
    return calendar.monthrange(year, month)[1]
