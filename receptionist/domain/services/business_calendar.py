"""Business calendar: open/closed state and canonical callback dates.

Every date the agent is allowed to say is computed here, once, from an
explicit "now". Nothing in this module reads the clock or does I/O.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta

import pytz

from receptionist.settings import settings

MONDAY = 0
TUESDAY = 1
SATURDAY = 5
SUNDAY = 6


@dataclass(frozen=True)
class DayHours:
    """Opening window for one day, as whole hours on a 24h clock (close exclusive)."""

    open_hour: int
    close_hour: int


@dataclass(frozen=True)
class WeeklySchedule:
    """Fixed weekly schedule: one window for Mon-Fri, one for Saturday, one for Sunday.

    A day with None hours is fully closed.
    """

    weekday: DayHours | None = DayHours(8, 17)
    saturday: DayHours | None = DayHours(9, 15)
    sunday: DayHours | None = None

    def hours_for(self, day: date) -> DayHours | None:
        weekday = day.weekday()
        if weekday == SATURDAY:
            return self.saturday
        if weekday == SUNDAY:
            return self.sunday
        return self.weekday

    def describe(self) -> list[str]:
        """Human-readable schedule lines for the instruction text."""
        return [
            f"- Monday-Friday: {_describe_window(self.weekday)}",
            f"- Saturday: {_describe_window(self.saturday)}",
            f"- Sunday: {_describe_window(self.sunday)}",
        ]


DEFAULT_SCHEDULE = WeeklySchedule()


@dataclass
class UpcomingDates:
    """Canonical long-form dates, all strictly after "now"."""

    next_business_day: str
    next_monday: str
    next_tuesday: str
    tomorrow: str | None = None  # None when tomorrow is fully closed


@dataclass
class BusinessHoursSnapshot:
    """Derived business-hours state for one instant. Never persisted."""

    is_open: bool
    local_now: datetime
    current_date: str  # "October 19, 2026"
    current_day: str  # "Monday"
    current_time: str  # "9:05 AM"
    upcoming: UpcomingDates
    schedule_lines: list[str] = field(default_factory=list)
    next_open: str | None = None  # "Today at 8:00 AM" / "Monday at 8:00 AM"


def format_hour(hour: int) -> str:
    """Format a whole hour as "8:00 AM"."""
    suffix = "AM" if hour < 12 else "PM"
    display = hour % 12 or 12
    return f"{display}:00 {suffix}"


def format_long_date(day: date) -> str:
    """Format a date as "Tuesday, October 20"."""
    return f"{day.strftime('%A')}, {day.strftime('%B')} {day.day}"


def _describe_window(hours: DayHours | None) -> str:
    if hours is None:
        return "CLOSED"
    return f"{format_hour(hours.open_hour)} to {format_hour(hours.close_hour)}"


def _format_clock(moment: datetime) -> str:
    display = moment.hour % 12 or 12
    suffix = "AM" if moment.hour < 12 else "PM"
    return f"{display}:{moment.minute:02d} {suffix}"


def to_business_time(now: datetime, timezone_str: str | None = None) -> datetime:
    """Convert an instant to the business timezone. Naive datetimes are taken as UTC."""
    tz = pytz.timezone(timezone_str or settings.business_timezone)
    if now.tzinfo is None:
        now = pytz.utc.localize(now)
    return now.astimezone(tz)


def is_open_at(local_now: datetime, schedule: WeeklySchedule = DEFAULT_SCHEDULE) -> bool:
    """Direct schedule lookup for a business-local instant."""
    hours = schedule.hours_for(local_now.date())
    if hours is None:
        return False
    return hours.open_hour <= local_now.hour < hours.close_hour


def next_open_description(local_now: datetime, schedule: WeeklySchedule = DEFAULT_SCHEDULE) -> str | None:
    """Describe when the office next opens, or None if it has no open day at all."""
    today = local_now.date()
    hours = schedule.hours_for(today)
    if hours is not None and local_now.hour < hours.open_hour:
        return f"Today at {format_hour(hours.open_hour)}"

    for offset in range(1, 8):
        day = today + timedelta(days=offset)
        hours = schedule.hours_for(day)
        if hours is not None:
            return f"{day.strftime('%A')} at {format_hour(hours.open_hour)}"
    return None


def _next_weekday(today: date, target: int) -> date:
    # Always at least one day ahead, even when today is already the target weekday
    return today + timedelta(days=(target - today.weekday()) % 7 or 7)


def upcoming_dates(today: date, schedule: WeeklySchedule = DEFAULT_SCHEDULE) -> UpcomingDates:
    """Compute the candidate callback days relative to a business-local date."""
    tomorrow = today + timedelta(days=1)

    next_business_day = tomorrow
    for offset in range(1, 8):
        candidate = today + timedelta(days=offset)
        if schedule.hours_for(candidate) is not None:
            next_business_day = candidate
            break

    return UpcomingDates(
        tomorrow=format_long_date(tomorrow) if schedule.hours_for(tomorrow) is not None else None,
        next_business_day=format_long_date(next_business_day),
        next_monday=format_long_date(_next_weekday(today, MONDAY)),
        next_tuesday=format_long_date(_next_weekday(today, TUESDAY)),
    )


def get_business_hours_snapshot(
    now: datetime,
    schedule: WeeklySchedule = DEFAULT_SCHEDULE,
    timezone_str: str | None = None,
) -> BusinessHoursSnapshot:
    """Compute open/closed state and pre-computed dates for an instant.

    Args:
        now: The instant to evaluate (aware, or naive UTC)
        schedule: Weekly opening hours in the business timezone
        timezone_str: Override for the business timezone (defaults to settings)

    Returns:
        BusinessHoursSnapshot for that instant
    """
    local_now = to_business_time(now, timezone_str)
    is_open = is_open_at(local_now, schedule)

    return BusinessHoursSnapshot(
        is_open=is_open,
        local_now=local_now,
        current_date=f"{local_now.strftime('%B')} {local_now.day}, {local_now.year}",
        current_day=local_now.strftime("%A"),
        current_time=_format_clock(local_now),
        upcoming=upcoming_dates(local_now.date(), schedule),
        schedule_lines=schedule.describe(),
        next_open=None if is_open else next_open_description(local_now, schedule),
    )
