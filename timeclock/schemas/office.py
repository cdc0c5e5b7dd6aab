from pydantic import BaseModel, Field


class OfficeLocationCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    radius_m: float = Field(default=100, gt=0, le=100_000, description="Check-in radius in metres")


class OfficeLocationUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)
    radius_m: float | None = Field(default=None, gt=0, le=100_000)


class OfficeLocationResponse(BaseModel):
    id: int
    name: str
    latitude: float
    longitude: float
    radius_m: float

    model_config = {"from_attributes": True}
