"""
Check-in / check-out recording.

A check-in is classified against the schedule resolved for its local calendar
date before it is written; if resolution or classification raises, nothing is
recorded. Check-outs are stored without a status. Both kinds of event are
flagged suspicious when they fall outside every office geofence or come from
a device the employee has no approval for.
"""

import logging
import uuid
from dataclasses import dataclass, field, replace
from datetime import date, datetime, time, timedelta
from typing import Literal, Protocol
from zoneinfo import ZoneInfo

from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from timeclock.core.config import settings
from timeclock.db import models
from timeclock.db.session import get_db
from timeclock.services.devices import DeviceStore, verify_device
from timeclock.services.offices import OfficeStore, check_geofence
from timeclock.services.schedule_resolver import (
    AttendanceStatus,
    ResolvedSchedule,
    ScheduleReader,
    classify_check_in,
    resolve_schedule,
)
from timeclock.services.schedule_store import wrap_store_errors

logger = logging.getLogger(__name__)

EventType = Literal["check_in", "check_out"]


@dataclass(frozen=True)
class AttendanceEvent:
    latitude: float
    longitude: float
    selfie_url: str
    address: str | None = None
    device_fingerprint_id: str | None = None
    is_suspicious: bool = False


@dataclass
class AttendanceEntry:
    employee_id: uuid.UUID
    event_type: EventType
    event: AttendanceEvent
    recorded_at: datetime
    status: AttendanceStatus | None = None
    id: int | None = field(default=None)


@dataclass(frozen=True)
class CheckInResult:
    entry: AttendanceEntry
    day: date
    schedule: ResolvedSchedule


@dataclass(frozen=True)
class ReportRow:
    entry: AttendanceEntry
    full_name: str
    email: str


class AttendanceStore(Protocol):
    async def add(self, entry: AttendanceEntry) -> AttendanceEntry: ...

    async def latest_for_employee(self, employee_id: uuid.UUID) -> AttendanceEntry | None: ...

    async def list_between(self, start: datetime, end: datetime) -> list[ReportRow]: ...


def attendance_timezone() -> ZoneInfo:
    return ZoneInfo(settings.ATTENDANCE_TIMEZONE)


def local_now() -> datetime:
    return datetime.now(attendance_timezone())


def _localize(now: datetime | None) -> datetime:
    if now is None:
        return local_now()
    if now.tzinfo is not None:
        return now.astimezone(attendance_timezone())
    return now


async def assess_event(
    offices: OfficeStore,
    devices: DeviceStore,
    employee_id: uuid.UUID,
    event: AttendanceEvent,
) -> AttendanceEvent:
    """
    Mark the event suspicious when it lies outside every office geofence or
    comes from a device that is not approved for the employee. A flag raised by
    the client is kept.
    """
    reasons: list[str] = []

    fence = check_geofence(await offices.list_all(), event.latitude, event.longitude)
    if not fence.inside:
        reasons.append(f"outside geofence ({fence.distance_m} m from {fence.office.name})")

    if event.device_fingerprint_id:
        device = await verify_device(devices, employee_id, event.device_fingerprint_id)
        if not device.is_approved:
            reasons.append("unknown device" if not device.is_known else "device not approved")

    if not reasons:
        return event

    logger.warning("Suspicious attendance event from employee %s: %s", employee_id, ", ".join(reasons))
    return replace(event, is_suspicious=True)


async def attendance_report(records: AttendanceStore, date_from: date, date_to: date) -> list[ReportRow]:
    """Every record between the two local calendar dates, inclusive."""
    tz = attendance_timezone()
    start = datetime.combine(date_from, time.min, tzinfo=tz)
    end = datetime.combine(date_to + timedelta(days=1), time.min, tzinfo=tz)
    return await records.list_between(start, end)


async def record_check_in(
    schedules: ScheduleReader,
    records: AttendanceStore,
    employee_id: uuid.UUID,
    event: AttendanceEvent,
    now: datetime | None = None,
) -> CheckInResult:
    now = _localize(now)

    schedule = await resolve_schedule(
        schedules,
        employee_id,
        now.date(),
        default_start=settings.DEFAULT_START_TIME,
        default_end=settings.DEFAULT_END_TIME,
    )
    status = classify_check_in(
        schedule, now, grace=timedelta(minutes=settings.GRACE_PERIOD_MINUTES)
    )

    entry = await records.add(
        AttendanceEntry(
            employee_id=employee_id,
            event_type="check_in",
            event=event,
            recorded_at=now,
            status=status,
        )
    )
    logger.info(
        "Check-in recorded: employee=%s source=%s status=%s suspicious=%s",
        employee_id,
        schedule.source,
        status,
        event.is_suspicious,
    )
    return CheckInResult(entry=entry, day=now.date(), schedule=schedule)


async def record_check_out(
    records: AttendanceStore,
    employee_id: uuid.UUID,
    event: AttendanceEvent,
    now: datetime | None = None,
) -> AttendanceEntry:
    entry = await records.add(
        AttendanceEntry(
            employee_id=employee_id,
            event_type="check_out",
            event=event,
            recorded_at=_localize(now),
        )
    )
    logger.info("Check-out recorded: employee=%s", employee_id)
    return entry


async def latest_record(records: AttendanceStore, employee_id: uuid.UUID) -> AttendanceEntry | None:
    return await records.latest_for_employee(employee_id)


def _to_entry(row: models.AttendanceRecord) -> AttendanceEntry:
    return AttendanceEntry(
        id=row.id,
        employee_id=row.employee_id,
        event_type=row.event_type,
        event=AttendanceEvent(
            latitude=row.latitude,
            longitude=row.longitude,
            selfie_url=row.selfie_url,
            address=row.address,
            device_fingerprint_id=row.device_fingerprint_id,
            is_suspicious=row.is_suspicious,
        ),
        recorded_at=row.recorded_at,
        status=row.status,
    )


class SqlAttendanceStore:
    def __init__(self, db: AsyncSession):
        self.db = db

    @wrap_store_errors
    async def add(self, entry: AttendanceEntry) -> AttendanceEntry:
        row = models.AttendanceRecord(
            employee_id=entry.employee_id,
            event_type=entry.event_type,
            latitude=entry.event.latitude,
            longitude=entry.event.longitude,
            address=entry.event.address,
            selfie_url=entry.event.selfie_url,
            device_fingerprint_id=entry.event.device_fingerprint_id,
            is_suspicious=entry.event.is_suspicious,
            recorded_at=entry.recorded_at,
            status=entry.status,
        )
        self.db.add(row)
        await self.db.commit()
        await self.db.refresh(row)
        return _to_entry(row)

    @wrap_store_errors
    async def latest_for_employee(self, employee_id: uuid.UUID) -> AttendanceEntry | None:
        result = await self.db.execute(
            select(models.AttendanceRecord)
            .where(models.AttendanceRecord.employee_id == employee_id)
            .order_by(models.AttendanceRecord.recorded_at.desc())
            .limit(1)
        )
        row = result.scalar_one_or_none()
        return _to_entry(row) if row is not None else None

    @wrap_store_errors
    async def list_between(self, start: datetime, end: datetime) -> list[ReportRow]:
        result = await self.db.execute(
            select(models.AttendanceRecord, models.User.full_name, models.User.email)
            .join(models.User, models.User.id == models.AttendanceRecord.employee_id)
            .where(
                models.AttendanceRecord.recorded_at >= start,
                models.AttendanceRecord.recorded_at < end,
            )
            .order_by(models.AttendanceRecord.recorded_at.asc(), models.AttendanceRecord.id.asc())
        )
        return [
            ReportRow(entry=_to_entry(row), full_name=full_name or "Unknown", email=email or "")
            for row, full_name, email in result.all()
        ]


async def get_attendance_store(db: AsyncSession = Depends(get_db)) -> SqlAttendanceStore:
    return SqlAttendanceStore(db)
