from datetime import date, datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field, field_validator, model_validator


class AbsenceRequestCreate(BaseModel):
    absence_type: Literal["sick", "annual", "personal", "unpaid", "other"]
    reason: str = Field(..., min_length=1, max_length=1000)
    start_date: date
    end_date: date
    document_url: str | None = Field(default=None, max_length=1000)

    @field_validator("reason")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("reason must not be blank")
        return v.strip()

    @model_validator(mode="after")
    def period_ordered(self) -> "AbsenceRequestCreate":
        if self.end_date < self.start_date:
            raise ValueError("end_date must be greater than or equal to start_date")
        return self


class AbsenceRequestResponse(BaseModel):
    id: int
    employee_id: UUID
    absence_type: str
    reason: str
    start_date: date
    end_date: date
    document_url: str | None
    status: Literal["pending", "approved", "rejected"]
    reviewed_by: UUID | None
    reviewed_at: datetime | None
    created_at: datetime | None

    model_config = {"from_attributes": True}


class PendingAbsenceResponse(AbsenceRequestResponse):
    full_name: str
    email: str
