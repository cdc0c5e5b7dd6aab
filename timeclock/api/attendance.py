import logging
from datetime import date, timedelta

from fastapi import APIRouter, Depends, HTTPException, Query, status

from timeclock.core.middleware import Identity, get_current_identity, require_role
from timeclock.schemas.attendance import (
    AttendanceEventRequest,
    AttendanceRecordResponse,
    AttendanceReportRow,
    CheckInResponse,
)
from timeclock.schemas.schedule import ResolvedScheduleResponse
from timeclock.services.attendance import (
    AttendanceEntry,
    AttendanceEvent,
    AttendanceStore,
    assess_event,
    attendance_report,
    get_attendance_store,
    latest_record,
    local_now,
    record_check_in,
    record_check_out,
)
from timeclock.services.devices import DeviceStore, get_device_store
from timeclock.services.offices import OfficeStore, get_office_store
from timeclock.services.schedule_resolver import ScheduleReader
from timeclock.services.schedule_store import get_schedule_store

logger = logging.getLogger(__name__)

router = APIRouter()


def _to_event(body: AttendanceEventRequest) -> AttendanceEvent:
    return AttendanceEvent(
        latitude=body.latitude,
        longitude=body.longitude,
        selfie_url=body.selfie_url,
        address=body.address,
        device_fingerprint_id=body.device_fingerprint_id,
        is_suspicious=body.is_suspicious,
    )


def _record_fields(entry: AttendanceEntry) -> dict:
    return {
        "id": entry.id,
        "employee_id": entry.employee_id,
        "event_type": entry.event_type,
        "latitude": entry.event.latitude,
        "longitude": entry.event.longitude,
        "address": entry.event.address,
        "selfie_url": entry.event.selfie_url,
        "device_fingerprint_id": entry.event.device_fingerprint_id,
        "is_suspicious": entry.event.is_suspicious,
        "recorded_at": entry.recorded_at,
        "status": entry.status,
    }


def _to_response(entry: AttendanceEntry) -> AttendanceRecordResponse:
    return AttendanceRecordResponse(**_record_fields(entry))


@router.post(
    "/check-in",
    response_model=CheckInResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record a check-in classified against today's schedule",
)
async def check_in(
    body: AttendanceEventRequest,
    schedules: ScheduleReader = Depends(get_schedule_store),
    records: AttendanceStore = Depends(get_attendance_store),
    offices: OfficeStore = Depends(get_office_store),
    devices: DeviceStore = Depends(get_device_store),
    identity: Identity = Depends(get_current_identity),
) -> CheckInResponse:
    event = await assess_event(offices, devices, identity.employee_id, _to_event(body))
    result = await record_check_in(schedules, records, identity.employee_id, event)
    return CheckInResponse(
        record=_to_response(result.entry),
        schedule=ResolvedScheduleResponse.from_resolved(result.day, result.schedule),
    )


@router.post(
    "/check-out",
    response_model=AttendanceRecordResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record a check-out",
)
async def check_out(
    body: AttendanceEventRequest,
    records: AttendanceStore = Depends(get_attendance_store),
    offices: OfficeStore = Depends(get_office_store),
    devices: DeviceStore = Depends(get_device_store),
    identity: Identity = Depends(get_current_identity),
) -> AttendanceRecordResponse:
    event = await assess_event(offices, devices, identity.employee_id, _to_event(body))
    entry = await record_check_out(records, identity.employee_id, event)
    return _to_response(entry)


@router.get(
    "/today",
    response_model=AttendanceRecordResponse | None,
    summary="Latest attendance record of the current employee",
)
async def get_today_attendance(
    records: AttendanceStore = Depends(get_attendance_store),
    identity: Identity = Depends(get_current_identity),
) -> AttendanceRecordResponse | None:
    entry = await latest_record(records, identity.employee_id)
    if entry is None:
        return None
    return _to_response(entry)


@router.get(
    "/report",
    response_model=list[AttendanceReportRow],
    summary="Attendance records of all employees in a date range (admin only)",
)
async def get_attendance_report(
    date_from: date | None = Query(default=None, description="ISO date YYYY-MM-DD"),
    date_to: date | None = Query(default=None, description="ISO date YYYY-MM-DD"),
    records: AttendanceStore = Depends(get_attendance_store),
    _identity: Identity = Depends(require_role("admin")),
) -> list[AttendanceReportRow]:
    today = local_now().date()
    df = date_from or today - timedelta(days=30)
    dt = date_to or today
    if dt < df:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="date_to must be on or after date_from",
        )

    rows = await attendance_report(records, df, dt)
    return [
        AttendanceReportRow(**_record_fields(r.entry), full_name=r.full_name, email=r.email)
        for r in rows
    ]
