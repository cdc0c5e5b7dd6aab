"""
Device fingerprints registered by employees.

The first device an employee registers is approved automatically; later
devices wait for an admin. Registering a known device only refreshes its
last-seen time.
"""

import logging
import uuid
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Protocol

from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from timeclock.core.exceptions import DeviceNotFound
from timeclock.db import models
from timeclock.db.session import get_db
from timeclock.services.schedule_store import ensure_employee_exists, wrap_store_errors

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Device:
    employee_id: uuid.UUID
    device_id: str
    last_seen_at: datetime
    is_approved: bool = False
    browser_info: str | None = None
    os_info: str | None = None
    ip_address: str | None = None
    id: int | None = None


@dataclass(frozen=True)
class DeviceVerification:
    is_known: bool
    is_approved: bool


class DeviceStore(Protocol):
    async def find(self, employee_id: uuid.UUID, device_id: str) -> Device | None: ...

    async def list_for_employee(self, employee_id: uuid.UUID) -> list[Device]: ...

    async def add(self, device: Device) -> Device: ...

    async def save(self, device: Device) -> Device: ...

    async def get(self, device_pk: int) -> Device | None: ...


async def register_device(
    store: DeviceStore,
    employee_id: uuid.UUID,
    device_id: str,
    *,
    browser_info: str | None = None,
    os_info: str | None = None,
    ip_address: str | None = None,
    now: datetime | None = None,
) -> Device:
    now = now or datetime.now(timezone.utc)

    existing = await store.find(employee_id, device_id)
    if existing is not None:
        return await store.save(replace(existing, last_seen_at=now, ip_address=ip_address))

    first_device = not await store.list_for_employee(employee_id)
    device = await store.add(
        Device(
            employee_id=employee_id,
            device_id=device_id,
            browser_info=browser_info,
            os_info=os_info,
            ip_address=ip_address,
            is_approved=first_device,
            last_seen_at=now,
        )
    )
    logger.info(
        "Device registered: employee=%s device=%s approved=%s",
        employee_id,
        device_id,
        device.is_approved,
    )
    return device


async def verify_device(store: DeviceStore, employee_id: uuid.UUID, device_id: str) -> DeviceVerification:
    device = await store.find(employee_id, device_id)
    return DeviceVerification(
        is_known=device is not None,
        is_approved=device.is_approved if device is not None else False,
    )


async def approve_device(store: DeviceStore, device_pk: int) -> Device:
    device = await store.get(device_pk)
    if device is None:
        raise DeviceNotFound(f"Device {device_pk} not found")
    if device.is_approved:
        return device
    approved = await store.save(replace(device, is_approved=True))
    logger.info("Device %s approved for employee %s", device_pk, device.employee_id)
    return approved


def _to_device(row: models.DeviceFingerprint) -> Device:
    return Device(
        id=row.id,
        employee_id=row.employee_id,
        device_id=row.device_id,
        browser_info=row.browser_info,
        os_info=row.os_info,
        ip_address=row.ip_address,
        is_approved=row.is_approved,
        last_seen_at=row.last_seen_at,
    )


class SqlDeviceStore:
    def __init__(self, db: AsyncSession):
        self.db = db

    @wrap_store_errors
    async def find(self, employee_id: uuid.UUID, device_id: str) -> Device | None:
        result = await self.db.execute(
            select(models.DeviceFingerprint).where(
                models.DeviceFingerprint.employee_id == employee_id,
                models.DeviceFingerprint.device_id == device_id,
            )
        )
        row = result.scalar_one_or_none()
        return _to_device(row) if row is not None else None

    @wrap_store_errors
    async def get(self, device_pk: int) -> Device | None:
        row = await self.db.get(models.DeviceFingerprint, device_pk)
        return _to_device(row) if row is not None else None

    @wrap_store_errors
    async def list_for_employee(self, employee_id: uuid.UUID) -> list[Device]:
        result = await self.db.execute(
            select(models.DeviceFingerprint)
            .where(models.DeviceFingerprint.employee_id == employee_id)
            .order_by(models.DeviceFingerprint.last_seen_at.desc())
        )
        return [_to_device(row) for row in result.scalars().all()]

    @wrap_store_errors
    async def add(self, device: Device) -> Device:
        await ensure_employee_exists(self.db, device.employee_id)
        row = models.DeviceFingerprint(
            employee_id=device.employee_id,
            device_id=device.device_id,
            browser_info=device.browser_info,
            os_info=device.os_info,
            ip_address=device.ip_address,
            is_approved=device.is_approved,
            last_seen_at=device.last_seen_at,
        )
        self.db.add(row)
        await self.db.commit()
        await self.db.refresh(row)
        return _to_device(row)

    @wrap_store_errors
    async def save(self, device: Device) -> Device:
        row = await self.db.get(models.DeviceFingerprint, device.id)
        if row is None:
            raise DeviceNotFound(f"Device {device.id} not found")
        row.is_approved = device.is_approved
        row.last_seen_at = device.last_seen_at
        row.ip_address = device.ip_address
        await self.db.commit()
        await self.db.refresh(row)
        return _to_device(row)


async def get_device_store(db: AsyncSession = Depends(get_db)) -> SqlDeviceStore:
    return SqlDeviceStore(db)
