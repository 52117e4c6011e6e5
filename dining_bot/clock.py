"""
Wall-clock helpers for the daily schedule.
All times are in a fixed UTC offset (UTC-4 by default, all year) so the daily
run lands early in the morning whether or not daylight saving is in effect.
"""

from datetime import date, datetime, time, timedelta, timezone
from typing import Optional

from dining_bot.models import Weekday


class ScheduleClock:
    """Current time, weekday and time-until-next-run in a fixed offset"""

    def __init__(self, utc_offset_hours: int = -4, run_hour: int = 6, run_minute: int = 5):
        self.tz = timezone(timedelta(hours=utc_offset_hours))
        self.run_at = time(run_hour, run_minute)

    def now(self) -> datetime:
        return datetime.now(self.tz)

    def today(self) -> date:
        return self.now().date()

    def weekday(self, timestamp: Optional[datetime] = None) -> Weekday:
        if timestamp is None:
            timestamp = self.now()
        return Weekday(timestamp.weekday())

    def next_run(self, now: Optional[datetime] = None) -> datetime:
        """
        Next daily trigger instant.

        Today's run is still ahead only while `now` is strictly before the
        trigger time; at or after it, the next run is tomorrow. A clock reading
        exactly on the trigger is the run that is firing right now.
        """
        if now is None:
            now = self.now()
        now = now.astimezone(self.tz)
        target = datetime.combine(now.date(), self.run_at, tzinfo=self.tz)
        if now >= target:
            target = datetime.combine(now.date() + timedelta(days=1), self.run_at, tzinfo=self.tz)
        return target

    def duration_until_next_run(self, now: Optional[datetime] = None) -> timedelta:
        """Always strictly positive"""
        if now is None:
            now = self.now()
        return self.next_run(now) - now.astimezone(self.tz)
