from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from timeclock.schemas.schedule import ResolvedScheduleResponse


class AttendanceEventRequest(BaseModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    address: str | None = Field(default=None, max_length=500)
    selfie_url: str = Field(..., max_length=1000)
    device_fingerprint_id: str | None = Field(default=None, max_length=255)
    is_suspicious: bool = False

    @field_validator("selfie_url")
    @classmethod
    def not_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Field must not be empty")
        return v.strip()


class AttendanceRecordResponse(BaseModel):
    id: int | None
    employee_id: UUID
    event_type: Literal["check_in", "check_out"]
    latitude: float
    longitude: float
    address: str | None
    selfie_url: str
    device_fingerprint_id: str | None
    is_suspicious: bool
    recorded_at: datetime
    status: Literal["on_time", "late"] | None


class CheckInResponse(BaseModel):
    record: AttendanceRecordResponse
    schedule: ResolvedScheduleResponse


class AttendanceReportRow(AttendanceRecordResponse):
    full_name: str
    email: str
