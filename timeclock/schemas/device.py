from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class DeviceRegister(BaseModel):
    device_id: str = Field(..., min_length=1, max_length=255)
    browser_info: str | None = Field(default=None, max_length=500)
    os_info: str | None = Field(default=None, max_length=500)


class DeviceResponse(BaseModel):
    id: int
    employee_id: UUID
    device_id: str
    browser_info: str | None
    os_info: str | None
    ip_address: str | None
    is_approved: bool
    last_seen_at: datetime

    model_config = {"from_attributes": True}


class DeviceVerificationResponse(BaseModel):
    is_known: bool
    is_approved: bool

    model_config = {"from_attributes": True}
