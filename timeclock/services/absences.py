"""
Absence requests and their admin review.

An employee submits a request for an inclusive date range; it starts out
pending and an admin either approves or rejects it exactly once. Approved
absences are informational and do not feed schedule resolution.
"""

import logging
import uuid
from dataclasses import dataclass, replace
from datetime import date, datetime, timezone
from typing import Literal, Protocol

from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from timeclock.core.exceptions import (
    AbsenceAlreadyReviewed,
    AbsenceRequestNotFound,
    InvalidAbsencePeriod,
)
from timeclock.db import models
from timeclock.db.session import get_db
from timeclock.services.schedule_store import ensure_employee_exists, wrap_store_errors

logger = logging.getLogger(__name__)

AbsenceStatus = Literal["pending", "approved", "rejected"]
AbsenceType = Literal["sick", "annual", "personal", "unpaid", "other"]
Decision = Literal["approved", "rejected"]


@dataclass(frozen=True)
class AbsenceRequest:
    employee_id: uuid.UUID
    absence_type: str
    reason: str
    start_date: date
    end_date: date
    document_url: str | None = None
    status: AbsenceStatus = "pending"
    reviewed_by: uuid.UUID | None = None
    reviewed_at: datetime | None = None
    created_at: datetime | None = None
    id: int | None = None


@dataclass(frozen=True)
class PendingAbsence:
    request: AbsenceRequest
    full_name: str
    email: str


class AbsenceStore(Protocol):
    async def add(self, request: AbsenceRequest) -> AbsenceRequest: ...

    async def get(self, request_id: int) -> AbsenceRequest | None: ...

    async def save_review(self, request: AbsenceRequest) -> AbsenceRequest: ...

    async def list_for_employee(self, employee_id: uuid.UUID) -> list[AbsenceRequest]: ...

    async def list_pending(self) -> list[PendingAbsence]: ...


async def submit_absence_request(
    store: AbsenceStore,
    employee_id: uuid.UUID,
    *,
    absence_type: str,
    reason: str,
    start_date: date,
    end_date: date,
    document_url: str | None = None,
) -> AbsenceRequest:
    if end_date < start_date:
        raise InvalidAbsencePeriod("end_date must be greater than or equal to start_date")

    saved = await store.add(
        AbsenceRequest(
            employee_id=employee_id,
            absence_type=absence_type,
            reason=reason,
            start_date=start_date,
            end_date=end_date,
            document_url=document_url,
        )
    )
    logger.info(
        "Absence request submitted: id=%s employee=%s %s..%s",
        saved.id,
        employee_id,
        start_date,
        end_date,
    )
    return saved


async def review_absence_request(
    store: AbsenceStore,
    request_id: int,
    reviewer_id: uuid.UUID,
    decision: Decision,
    now: datetime | None = None,
) -> AbsenceRequest:
    current = await store.get(request_id)
    if current is None:
        raise AbsenceRequestNotFound(f"Absence request {request_id} not found")
    if current.status != "pending":
        raise AbsenceAlreadyReviewed(f"Absence request {request_id} is already {current.status}")

    reviewed = await store.save_review(
        replace(
            current,
            status=decision,
            reviewed_by=reviewer_id,
            reviewed_at=now or datetime.now(timezone.utc),
        )
    )
    logger.info("Absence request %s %s by %s", request_id, decision, reviewer_id)
    return reviewed


def _to_request(row: models.AbsenceRequest) -> AbsenceRequest:
    return AbsenceRequest(
        id=row.id,
        employee_id=row.employee_id,
        absence_type=row.absence_type,
        reason=row.reason,
        start_date=row.start_date,
        end_date=row.end_date,
        document_url=row.document_url,
        status=row.status,
        reviewed_by=row.reviewed_by,
        reviewed_at=row.reviewed_at,
        created_at=row.created_at,
    )


class SqlAbsenceStore:
    def __init__(self, db: AsyncSession):
        self.db = db

    @wrap_store_errors
    async def add(self, request: AbsenceRequest) -> AbsenceRequest:
        await ensure_employee_exists(self.db, request.employee_id)
        row = models.AbsenceRequest(
            employee_id=request.employee_id,
            absence_type=request.absence_type,
            reason=request.reason,
            start_date=request.start_date,
            end_date=request.end_date,
            document_url=request.document_url,
            status=request.status,
        )
        self.db.add(row)
        await self.db.commit()
        await self.db.refresh(row)
        return _to_request(row)

    @wrap_store_errors
    async def get(self, request_id: int) -> AbsenceRequest | None:
        row = await self.db.get(models.AbsenceRequest, request_id)
        return _to_request(row) if row is not None else None

    @wrap_store_errors
    async def save_review(self, request: AbsenceRequest) -> AbsenceRequest:
        row = await self.db.get(models.AbsenceRequest, request.id)
        if row is None:
            raise AbsenceRequestNotFound(f"Absence request {request.id} not found")
        row.status = request.status
        row.reviewed_by = request.reviewed_by
        row.reviewed_at = request.reviewed_at
        await self.db.commit()
        await self.db.refresh(row)
        return _to_request(row)

    @wrap_store_errors
    async def list_for_employee(self, employee_id: uuid.UUID) -> list[AbsenceRequest]:
        result = await self.db.execute(
            select(models.AbsenceRequest)
            .where(models.AbsenceRequest.employee_id == employee_id)
            .order_by(models.AbsenceRequest.created_at.desc(), models.AbsenceRequest.id.desc())
        )
        return [_to_request(row) for row in result.scalars().all()]

    @wrap_store_errors
    async def list_pending(self) -> list[PendingAbsence]:
        result = await self.db.execute(
            select(models.AbsenceRequest, models.User.full_name, models.User.email)
            .join(models.User, models.User.id == models.AbsenceRequest.employee_id)
            .where(models.AbsenceRequest.status == "pending")
            .order_by(models.AbsenceRequest.start_date.asc(), models.AbsenceRequest.id.asc())
        )
        return [
            PendingAbsence(
                request=_to_request(row),
                full_name=full_name or "Unknown",
                email=email or "",
            )
            for row, full_name, email in result.all()
        ]


async def get_absence_store(db: AsyncSession = Depends(get_db)) -> SqlAbsenceStore:
    return SqlAbsenceStore(db)
