"""
Effective work-schedule resolution and check-in classification.

The schedule that applies to an employee on a given date comes from the first
tier that has something to say about it:

    1. a per-date override,
    2. the entry for that weekday in the employee's weekly template,
    3. the built-in default (Mon-Fri 09:00-17:00, weekend off).

Tiers are never merged. A check-in is late when it lands strictly after the
resolved start time plus the grace period; days off and days without a start
time never produce "late".
"""

import logging
import re
import uuid
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Literal, Protocol, Union

from timeclock.core.exceptions import InvalidScheduleFormat

logger = logging.getLogger(__name__)

DEFAULT_START_TIME = "09:00"
DEFAULT_END_TIME = "17:00"
GRACE_PERIOD = timedelta(minutes=15)

SATURDAY = 6
SUNDAY = 0

AttendanceStatus = Literal["on_time", "late"]

_HHMM_RE = re.compile(r"([01][0-9]|2[0-3]):([0-5][0-9])")


# ---------------------------------------------------------------------------
# Stored shapes (read from the schedule store)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class WeeklyDay:
    day_of_week: int
    start_time: str
    end_time: str
    is_day_off: bool


@dataclass(frozen=True)
class WeeklyTemplate:
    employee_id: uuid.UUID
    days: tuple[WeeklyDay, ...]

    def entry_for(self, weekday: int) -> WeeklyDay | None:
        for day in self.days:
            if day.day_of_week == weekday:
                return day
        return None


@dataclass(frozen=True)
class ScheduleOverride:
    employee_id: uuid.UUID
    day: date
    is_day_off: bool
    start_time: str | None = None
    end_time: str | None = None
    reason: str | None = None


class ScheduleReader(Protocol):
    async def get_override(self, employee_id: uuid.UUID, day: date) -> ScheduleOverride | None: ...

    async def get_weekly_template(self, employee_id: uuid.UUID) -> WeeklyTemplate | None: ...


# ---------------------------------------------------------------------------
# Resolved schedule variants
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class OverrideSchedule:
    is_day_off: bool
    start_time: str | None = None
    end_time: str | None = None
    reason: str | None = None
    source: Literal["override"] = "override"


@dataclass(frozen=True)
class WeeklySchedule:
    is_day_off: bool
    start_time: str
    end_time: str
    source: Literal["weekly"] = "weekly"


@dataclass(frozen=True)
class DefaultSchedule:
    is_day_off: bool
    start_time: str | None = None
    end_time: str | None = None
    source: Literal["default"] = "default"


ResolvedSchedule = Union[OverrideSchedule, WeeklySchedule, DefaultSchedule]


# ---------------------------------------------------------------------------
# Parsing helpers
# ---------------------------------------------------------------------------


def parse_hhmm(value: str) -> time:
    """Parse a strict ``HH:MM`` string (00-23 / 00-59)."""
    match = _HHMM_RE.fullmatch(value) if isinstance(value, str) else None
    if match is None:
        raise InvalidScheduleFormat(f"Invalid time {value!r}, expected HH:MM")
    return time(hour=int(match.group(1)), minute=int(match.group(2)))


def parse_day(value: date | str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError):
        raise InvalidScheduleFormat(f"Invalid date {value!r}, expected YYYY-MM-DD") from None


def day_of_week(day: date) -> int:
    """0=Sunday .. 6=Saturday."""
    return day.isoweekday() % 7


def default_schedule(
    day: date,
    start_time: str = DEFAULT_START_TIME,
    end_time: str = DEFAULT_END_TIME,
) -> DefaultSchedule:
    if day_of_week(day) in (SATURDAY, SUNDAY):
        return DefaultSchedule(is_day_off=True)
    return DefaultSchedule(is_day_off=False, start_time=start_time, end_time=end_time)


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------


async def resolve_schedule(
    store: ScheduleReader,
    employee_id: uuid.UUID,
    day: date | str,
    *,
    default_start: str = DEFAULT_START_TIME,
    default_end: str = DEFAULT_END_TIME,
) -> ResolvedSchedule:
    day = parse_day(day)

    override = await store.get_override(employee_id, day)
    if override is not None:
        return OverrideSchedule(
            is_day_off=override.is_day_off,
            start_time=override.start_time,
            end_time=override.end_time,
            reason=override.reason,
        )

    template = await store.get_weekly_template(employee_id)
    if template is not None:
        weekday = day_of_week(day)
        entry = template.entry_for(weekday)
        if entry is not None:
            return WeeklySchedule(
                is_day_off=entry.is_day_off,
                start_time=entry.start_time,
                end_time=entry.end_time,
            )
        logger.debug(
            "Weekly template of employee %s has no entry for weekday %d, using default",
            employee_id,
            weekday,
        )

    return default_schedule(day, default_start, default_end)


async def resolve_range(
    store: ScheduleReader,
    employee_id: uuid.UUID,
    date_from: date,
    date_to: date,
    *,
    default_start: str = DEFAULT_START_TIME,
    default_end: str = DEFAULT_END_TIME,
) -> list[tuple[date, ResolvedSchedule]]:
    """Resolve every day in [date_from, date_to], e.g. for a month calendar."""
    days: list[tuple[date, ResolvedSchedule]] = []
    cur = date_from
    while cur <= date_to:
        resolved = await resolve_schedule(
            store, employee_id, cur, default_start=default_start, default_end=default_end
        )
        days.append((cur, resolved))
        cur += timedelta(days=1)
    return days


def classify_check_in(
    schedule: ResolvedSchedule,
    check_in_at: datetime,
    grace: timedelta = GRACE_PERIOD,
) -> AttendanceStatus:
    """
    Classify a check-in against the resolved schedule.

    The scheduled start is built on check_in_at's calendar day in check_in_at's
    own timezone, so both sides of the comparison are the same kind of instant.
    """
    if schedule.is_day_off or not schedule.start_time:
        return "on_time"

    start = parse_hhmm(schedule.start_time)
    scheduled_start = datetime.combine(check_in_at.date(), start, tzinfo=check_in_at.tzinfo)

    if _as_instant(check_in_at) > _as_instant(scheduled_start) + grace:
        return "late"
    return "on_time"


def _as_instant(value: datetime) -> datetime:
    # Aware values are compared in UTC so DST offsets apply
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc)
