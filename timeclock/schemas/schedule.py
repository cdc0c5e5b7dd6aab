from datetime import date
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field, field_validator, model_validator

from timeclock.services.schedule_resolver import OverrideSchedule, ResolvedSchedule

HHMM_PATTERN = r"^([01][0-9]|2[0-3]):([0-5][0-9])$"


class WeeklyDayIn(BaseModel):
    day_of_week: int = Field(..., ge=0, le=6, description="0=Sunday .. 6=Saturday")
    start_time: str = Field(..., pattern=HHMM_PATTERN)
    end_time: str = Field(..., pattern=HHMM_PATTERN)
    is_day_off: bool = False


class WeeklyTemplateUpdate(BaseModel):
    days: list[WeeklyDayIn] = Field(..., max_length=7)

    @field_validator("days")
    @classmethod
    def unique_weekdays(cls, v: list[WeeklyDayIn]) -> list[WeeklyDayIn]:
        seen = [d.day_of_week for d in v]
        if len(seen) != len(set(seen)):
            raise ValueError("Each day_of_week may appear only once")
        return v


class WeeklyDayOut(BaseModel):
    day_of_week: int
    start_time: str
    end_time: str
    is_day_off: bool

    model_config = {"from_attributes": True}


class WeeklyTemplateResponse(BaseModel):
    employee_id: UUID
    days: list[WeeklyDayOut]

    model_config = {"from_attributes": True}


class WeeklyTemplateOverview(WeeklyTemplateResponse):
    full_name: str
    email: str


class ScheduleOverrideUpsert(BaseModel):
    start_time: str | None = Field(default=None, pattern=HHMM_PATTERN)
    end_time: str | None = Field(default=None, pattern=HHMM_PATTERN)
    is_day_off: bool
    reason: str | None = Field(default=None, max_length=500)

    @model_validator(mode="after")
    def times_paired(self) -> "ScheduleOverrideUpsert":
        if not self.is_day_off and (self.start_time is None) != (self.end_time is None):
            raise ValueError("start_time and end_time must be given together")
        return self


class ScheduleOverrideResponse(BaseModel):
    employee_id: UUID
    day: date
    start_time: str | None
    end_time: str | None
    is_day_off: bool
    reason: str | None

    model_config = {"from_attributes": True}


class ResolvedScheduleResponse(BaseModel):
    date: date
    source: Literal["override", "weekly", "default"]
    is_day_off: bool
    start_time: str | None = None
    end_time: str | None = None
    reason: str | None = None

    @classmethod
    def from_resolved(cls, day: date, schedule: ResolvedSchedule) -> "ResolvedScheduleResponse":
        reason = schedule.reason if isinstance(schedule, OverrideSchedule) else None
        # Times of a day off are not shown to callers
        return cls(
            date=day,
            source=schedule.source,
            is_day_off=schedule.is_day_off,
            start_time=None if schedule.is_day_off else schedule.start_time,
            end_time=None if schedule.is_day_off else schedule.end_time,
            reason=reason,
        )
