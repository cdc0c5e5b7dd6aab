"""
Office locations and the check-in geofence.
"""

import logging
from dataclasses import dataclass
from math import asin, cos, radians, sin, sqrt
from typing import Protocol

from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from timeclock.core.exceptions import OfficeLocationNotFound
from timeclock.db import models
from timeclock.db.session import get_db
from timeclock.services.schedule_store import wrap_store_errors

logger = logging.getLogger(__name__)

EARTH_RADIUS_M = 6371000.0


@dataclass(frozen=True)
class OfficeLocation:
    name: str
    latitude: float
    longitude: float
    radius_m: float
    id: int | None = None


@dataclass(frozen=True)
class GeofenceCheck:
    inside: bool
    office: OfficeLocation | None = None
    distance_m: float | None = None


class OfficeStore(Protocol):
    async def list_all(self) -> list[OfficeLocation]: ...

    async def get(self, office_id: int) -> OfficeLocation | None: ...

    async def add(self, office: OfficeLocation) -> OfficeLocation: ...

    async def update(self, office: OfficeLocation) -> OfficeLocation: ...

    async def delete(self, office_id: int) -> bool: ...


def distance_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in metres (haversine)."""
    lat1_rad = radians(lat1)
    lat2_rad = radians(lat2)
    delta_lat = lat2_rad - lat1_rad
    delta_lon = radians(lon2) - radians(lon1)

    a = sin(delta_lat / 2) ** 2 + cos(lat1_rad) * cos(lat2_rad) * sin(delta_lon / 2) ** 2
    return EARTH_RADIUS_M * 2 * asin(sqrt(a))


def check_geofence(offices: list[OfficeLocation], latitude: float, longitude: float) -> GeofenceCheck:
    """
    Locate the nearest office and whether the point lies within its radius.

    With no offices configured every point counts as inside.
    """
    if not offices:
        return GeofenceCheck(inside=True)

    nearest, nearest_distance = min(
        ((o, distance_m(o.latitude, o.longitude, latitude, longitude)) for o in offices),
        key=lambda pair: pair[1],
    )
    inside = any(
        distance_m(o.latitude, o.longitude, latitude, longitude) <= o.radius_m for o in offices
    )
    return GeofenceCheck(inside=inside, office=nearest, distance_m=round(nearest_distance, 2))


def _to_office(row: models.OfficeLocation) -> OfficeLocation:
    return OfficeLocation(
        id=row.id,
        name=row.name,
        latitude=row.latitude,
        longitude=row.longitude,
        radius_m=row.radius_m,
    )


class SqlOfficeStore:
    def __init__(self, db: AsyncSession):
        self.db = db

    @wrap_store_errors
    async def list_all(self) -> list[OfficeLocation]:
        result = await self.db.execute(
            select(models.OfficeLocation).order_by(models.OfficeLocation.name)
        )
        return [_to_office(row) for row in result.scalars().all()]

    @wrap_store_errors
    async def get(self, office_id: int) -> OfficeLocation | None:
        row = await self.db.get(models.OfficeLocation, office_id)
        return _to_office(row) if row is not None else None

    @wrap_store_errors
    async def add(self, office: OfficeLocation) -> OfficeLocation:
        row = models.OfficeLocation(
            name=office.name,
            latitude=office.latitude,
            longitude=office.longitude,
            radius_m=office.radius_m,
        )
        self.db.add(row)
        await self.db.commit()
        await self.db.refresh(row)
        logger.info("Office location created: id=%s name=%s", row.id, row.name)
        return _to_office(row)

    @wrap_store_errors
    async def update(self, office: OfficeLocation) -> OfficeLocation:
        row = await self.db.get(models.OfficeLocation, office.id)
        if row is None:
            raise OfficeLocationNotFound(f"Office location {office.id} not found")
        row.name = office.name
        row.latitude = office.latitude
        row.longitude = office.longitude
        row.radius_m = office.radius_m
        await self.db.commit()
        await self.db.refresh(row)
        return _to_office(row)

    @wrap_store_errors
    async def delete(self, office_id: int) -> bool:
        row = await self.db.get(models.OfficeLocation, office_id)
        if row is None:
            return False
        await self.db.delete(row)
        await self.db.commit()
        return True


async def get_office_store(db: AsyncSession = Depends(get_db)) -> SqlOfficeStore:
    return SqlOfficeStore(db)
