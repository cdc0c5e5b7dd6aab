"""
SQL-backed schedule store.

Implements the two reads the resolver needs plus the administrative writes
behind the schedule management endpoints. Database failures are re-raised as
StoreUnavailable; no retries happen here.
"""

import functools
import logging
import uuid
from dataclasses import dataclass
from datetime import date
from typing import Any, Awaitable, Callable, Iterable, TypeVar

from fastapi import Depends
from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from timeclock.core.exceptions import EmployeeNotFound, StoreUnavailable
from timeclock.db import models
from timeclock.db.session import get_db
from timeclock.services.schedule_resolver import (
    ScheduleOverride,
    WeeklyDay,
    WeeklyTemplate,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class TemplateOverview:
    template: WeeklyTemplate
    full_name: str
    email: str


def wrap_store_errors(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
    @functools.wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> T:
        try:
            return await func(*args, **kwargs)
        except (SQLAlchemyError, OSError) as exc:
            logger.warning("Store operation %s failed: %s", func.__name__, exc)
            raise StoreUnavailable(f"Store unavailable during {func.__name__}") from exc

    return wrapper


def _to_template(row: models.WeeklyTemplate) -> WeeklyTemplate:
    return WeeklyTemplate(
        employee_id=row.employee_id,
        days=tuple(
            WeeklyDay(
                day_of_week=d.day_of_week,
                start_time=d.start_time,
                end_time=d.end_time,
                is_day_off=d.is_day_off,
            )
            for d in row.days
        ),
    )


def _to_override(row: models.ScheduleOverride) -> ScheduleOverride:
    return ScheduleOverride(
        employee_id=row.employee_id,
        day=row.day,
        is_day_off=row.is_day_off,
        start_time=row.start_time,
        end_time=row.end_time,
        reason=row.reason,
    )


async def ensure_employee_exists(db: AsyncSession, employee_id: uuid.UUID) -> None:
    if await db.get(models.User, employee_id) is None:
        raise EmployeeNotFound(f"Employee {employee_id} not found")


class SqlScheduleStore:
    def __init__(self, db: AsyncSession):
        self.db = db

    @wrap_store_errors
    async def get_override(self, employee_id: uuid.UUID, day: date) -> ScheduleOverride | None:
        result = await self.db.execute(
            select(models.ScheduleOverride).where(
                models.ScheduleOverride.employee_id == employee_id,
                models.ScheduleOverride.day == day,
            )
        )
        row = result.scalar_one_or_none()
        return _to_override(row) if row is not None else None

    @wrap_store_errors
    async def get_weekly_template(self, employee_id: uuid.UUID) -> WeeklyTemplate | None:
        result = await self.db.execute(
            select(models.WeeklyTemplate).where(models.WeeklyTemplate.employee_id == employee_id)
        )
        row = result.scalar_one_or_none()
        return _to_template(row) if row is not None else None

    @wrap_store_errors
    async def upsert_weekly_template(
        self, employee_id: uuid.UUID, days: Iterable[WeeklyDay]
    ) -> WeeklyTemplate:
        """Replace the employee's weekly days wholesale."""
        await ensure_employee_exists(self.db, employee_id)
        result = await self.db.execute(
            select(models.WeeklyTemplate).where(models.WeeklyTemplate.employee_id == employee_id)
        )
        row = result.scalar_one_or_none()
        if row is None:
            row = models.WeeklyTemplate(employee_id=employee_id)
            self.db.add(row)
        else:
            await self.db.execute(
                delete(models.WeeklyTemplateDay).where(
                    models.WeeklyTemplateDay.template_id == row.id
                )
            )
            await self.db.flush()
            await self.db.refresh(row, attribute_names=["days"])

        row.days = [
            models.WeeklyTemplateDay(
                day_of_week=d.day_of_week,
                start_time=d.start_time,
                end_time=d.end_time,
                is_day_off=d.is_day_off,
            )
            for d in sorted(days, key=lambda d: d.day_of_week)
        ]
        await self.db.commit()
        await self.db.refresh(row, attribute_names=["days"])
        return _to_template(row)

    @wrap_store_errors
    async def upsert_override(self, override: ScheduleOverride) -> ScheduleOverride:
        await ensure_employee_exists(self.db, override.employee_id)
        result = await self.db.execute(
            select(models.ScheduleOverride).where(
                models.ScheduleOverride.employee_id == override.employee_id,
                models.ScheduleOverride.day == override.day,
            )
        )
        row = result.scalar_one_or_none()
        if row is None:
            row = models.ScheduleOverride(employee_id=override.employee_id, day=override.day)
            self.db.add(row)

        row.start_time = override.start_time
        row.end_time = override.end_time
        row.is_day_off = override.is_day_off
        row.reason = override.reason

        await self.db.commit()
        await self.db.refresh(row)
        return _to_override(row)

    @wrap_store_errors
    async def delete_override(self, employee_id: uuid.UUID, day: date) -> bool:
        result = await self.db.execute(
            delete(models.ScheduleOverride).where(
                models.ScheduleOverride.employee_id == employee_id,
                models.ScheduleOverride.day == day,
            )
        )
        await self.db.commit()
        return result.rowcount > 0

    @wrap_store_errors
    async def list_overrides(
        self, employee_id: uuid.UUID, date_from: date, date_to: date
    ) -> list[ScheduleOverride]:
        result = await self.db.execute(
            select(models.ScheduleOverride)
            .where(
                models.ScheduleOverride.employee_id == employee_id,
                models.ScheduleOverride.day >= date_from,
                models.ScheduleOverride.day <= date_to,
            )
            .order_by(models.ScheduleOverride.day.asc())
        )
        return [_to_override(row) for row in result.scalars().all()]

    @wrap_store_errors
    async def list_weekly_templates(self) -> list[TemplateOverview]:
        result = await self.db.execute(
            select(models.WeeklyTemplate, models.User.full_name, models.User.email)
            .join(models.User, models.User.id == models.WeeklyTemplate.employee_id)
            .order_by(models.User.full_name)
        )
        return [
            TemplateOverview(
                template=_to_template(row),
                full_name=full_name or "Unknown",
                email=email or "",
            )
            for row, full_name, email in result.all()
        ]


async def get_schedule_store(db: AsyncSession = Depends(get_db)) -> SqlScheduleStore:
    return SqlScheduleStore(db)
