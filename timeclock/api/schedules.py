import uuid
from calendar import monthrange
from datetime import date, timedelta

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from timeclock.core.config import settings
from timeclock.core.middleware import (
    Identity,
    ensure_self_or_admin,
    get_current_identity,
    require_role,
)
from timeclock.schemas.schedule import (
    ResolvedScheduleResponse,
    ScheduleOverrideResponse,
    ScheduleOverrideUpsert,
    WeeklyDayOut,
    WeeklyTemplateOverview,
    WeeklyTemplateResponse,
    WeeklyTemplateUpdate,
)
from timeclock.services.attendance import local_now
from timeclock.services.schedule_resolver import (
    ScheduleOverride,
    WeeklyDay,
    WeeklyTemplate,
    resolve_range,
    resolve_schedule,
)
from timeclock.services.schedule_store import SqlScheduleStore, get_schedule_store

router = APIRouter()


def _template_response(template: WeeklyTemplate) -> WeeklyTemplateResponse:
    return WeeklyTemplateResponse.model_validate(template)


def _parse_date(val: str | None, default: date) -> date:
    if val is None:
        return default
    try:
        return date.fromisoformat(val)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Invalid date '{val}', expected YYYY-MM-DD",
        )


async def _resolve(store: SqlScheduleStore, employee_id: uuid.UUID, day: date) -> ResolvedScheduleResponse:
    schedule = await resolve_schedule(
        store,
        employee_id,
        day,
        default_start=settings.DEFAULT_START_TIME,
        default_end=settings.DEFAULT_END_TIME,
    )
    return ResolvedScheduleResponse.from_resolved(day, schedule)


@router.get(
    "/",
    response_model=list[WeeklyTemplateOverview],
    summary="List all weekly templates with employee details (admin only)",
)
async def list_templates(
    store: SqlScheduleStore = Depends(get_schedule_store),
    _identity: Identity = Depends(require_role("admin")),
) -> list[WeeklyTemplateOverview]:
    overviews = await store.list_weekly_templates()
    return [
        WeeklyTemplateOverview(
            employee_id=o.template.employee_id,
            days=[WeeklyDayOut.model_validate(d) for d in o.template.days],
            full_name=o.full_name,
            email=o.email,
        )
        for o in overviews
    ]


@router.get(
    "/me/effective",
    response_model=ResolvedScheduleResponse,
    summary="Effective schedule of the current employee for a date",
)
async def get_my_effective_schedule(
    date_: str | None = Query(default=None, alias="date", description="ISO date YYYY-MM-DD"),
    store: SqlScheduleStore = Depends(get_schedule_store),
    identity: Identity = Depends(get_current_identity),
) -> ResolvedScheduleResponse:
    day = _parse_date(date_, local_now().date())
    return await _resolve(store, identity.employee_id, day)


@router.get(
    "/{employee_id}",
    response_model=WeeklyTemplateResponse,
    summary="Weekly template of an employee",
)
async def get_template(
    employee_id: uuid.UUID,
    store: SqlScheduleStore = Depends(get_schedule_store),
    identity: Identity = Depends(get_current_identity),
) -> WeeklyTemplateResponse:
    ensure_self_or_admin(identity, employee_id)
    template = await store.get_weekly_template(employee_id)
    if template is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Weekly schedule not found",
        )
    return _template_response(template)


@router.put(
    "/{employee_id}",
    response_model=WeeklyTemplateResponse,
    summary="Create or replace an employee's weekly template (admin only)",
)
async def update_template(
    employee_id: uuid.UUID,
    body: WeeklyTemplateUpdate,
    store: SqlScheduleStore = Depends(get_schedule_store),
    _identity: Identity = Depends(require_role("admin")),
) -> WeeklyTemplateResponse:
    template = await store.upsert_weekly_template(
        employee_id,
        [
            WeeklyDay(
                day_of_week=d.day_of_week,
                start_time=d.start_time,
                end_time=d.end_time,
                is_day_off=d.is_day_off,
            )
            for d in body.days
        ],
    )
    return _template_response(template)


@router.get(
    "/{employee_id}/effective",
    response_model=ResolvedScheduleResponse,
    summary="Effective schedule of an employee for a date",
)
async def get_effective_schedule(
    employee_id: uuid.UUID,
    date_: str | None = Query(default=None, alias="date", description="ISO date YYYY-MM-DD"),
    store: SqlScheduleStore = Depends(get_schedule_store),
    identity: Identity = Depends(get_current_identity),
) -> ResolvedScheduleResponse:
    ensure_self_or_admin(identity, employee_id)
    day = _parse_date(date_, local_now().date())
    return await _resolve(store, employee_id, day)


@router.get(
    "/{employee_id}/calendar",
    response_model=list[ResolvedScheduleResponse],
    summary="Effective schedule for every day of a month",
)
async def get_schedule_calendar(
    employee_id: uuid.UUID,
    year: int | None = Query(default=None, ge=1970, le=9999),
    month: int | None = Query(default=None, ge=1, le=12),
    store: SqlScheduleStore = Depends(get_schedule_store),
    identity: Identity = Depends(get_current_identity),
) -> list[ResolvedScheduleResponse]:
    ensure_self_or_admin(identity, employee_id)
    today = local_now().date()
    y = year or today.year
    m = month or today.month
    _, last = monthrange(y, m)

    days = await resolve_range(
        store,
        employee_id,
        date(y, m, 1),
        date(y, m, last),
        default_start=settings.DEFAULT_START_TIME,
        default_end=settings.DEFAULT_END_TIME,
    )
    return [ResolvedScheduleResponse.from_resolved(day, schedule) for day, schedule in days]


@router.get(
    "/{employee_id}/overrides",
    response_model=list[ScheduleOverrideResponse],
    summary="Per-date overrides of an employee in a date range",
)
async def list_overrides(
    employee_id: uuid.UUID,
    date_from: str | None = Query(default=None, description="ISO date YYYY-MM-DD"),
    date_to: str | None = Query(default=None, description="ISO date YYYY-MM-DD"),
    store: SqlScheduleStore = Depends(get_schedule_store),
    identity: Identity = Depends(get_current_identity),
) -> list[ScheduleOverrideResponse]:
    ensure_self_or_admin(identity, employee_id)
    today = local_now().date()
    df = _parse_date(date_from, today - timedelta(days=30))
    dt = _parse_date(date_to, today + timedelta(days=30))
    overrides = await store.list_overrides(employee_id, df, dt)
    return [ScheduleOverrideResponse.model_validate(o) for o in overrides]


@router.put(
    "/{employee_id}/overrides/{day}",
    response_model=ScheduleOverrideResponse,
    summary="Set the schedule of an employee for one date (admin only)",
)
async def set_override(
    employee_id: uuid.UUID,
    day: date,
    body: ScheduleOverrideUpsert,
    store: SqlScheduleStore = Depends(get_schedule_store),
    _identity: Identity = Depends(require_role("admin")),
) -> ScheduleOverrideResponse:
    override = await store.upsert_override(
        ScheduleOverride(
            employee_id=employee_id,
            day=day,
            is_day_off=body.is_day_off,
            start_time=body.start_time,
            end_time=body.end_time,
            reason=body.reason,
        )
    )
    return ScheduleOverrideResponse.model_validate(override)


@router.delete(
    "/{employee_id}/overrides/{day}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove the override of an employee for one date (admin only)",
)
async def delete_override(
    employee_id: uuid.UUID,
    day: date,
    store: SqlScheduleStore = Depends(get_schedule_store),
    _identity: Identity = Depends(require_role("admin")),
) -> Response:
    if not await store.delete_override(employee_id, day):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Schedule override not found",
        )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
