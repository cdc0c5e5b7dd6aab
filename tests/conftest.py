"""
conftest.py — shared fixtures for all tests.

Strategy:
- The SQL stores are swapped for in-memory stores through FastAPI
  dependency_overrides, so the suite runs without PostgreSQL.
- Identities are real bearer tokens issued with the same signing settings the
  app validates against.
- Each test gets fresh stores and a fresh HTTPX client.
"""

from __future__ import annotations

import uuid
from dataclasses import replace
from datetime import date, datetime, timedelta, timezone

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from timeclock.core.exceptions import StoreUnavailable
from timeclock.core.security import create_access_token
from timeclock.main import app
from timeclock.services.absences import AbsenceRequest, PendingAbsence, get_absence_store
from timeclock.services.attendance import AttendanceEntry, ReportRow, get_attendance_store
from timeclock.services.devices import Device, get_device_store
from timeclock.services.offices import OfficeLocation, get_office_store
from timeclock.services.schedule_resolver import (
    ScheduleOverride,
    WeeklyDay,
    WeeklyTemplate,
)
from timeclock.services.schedule_store import TemplateOverview, get_schedule_store


# ---------------------------------------------------------------------------
# In-memory stores
# ---------------------------------------------------------------------------


class InMemoryScheduleStore:
    def __init__(self) -> None:
        self.templates: dict[uuid.UUID, WeeklyTemplate] = {}
        self.overrides: dict[tuple[uuid.UUID, date], ScheduleOverride] = {}
        self.names: dict[uuid.UUID, tuple[str, str]] = {}
        self.reads = 0
        self.unavailable = False

    def _check(self) -> None:
        if self.unavailable:
            raise StoreUnavailable("Store unavailable during test")

    async def get_override(self, employee_id: uuid.UUID, day: date) -> ScheduleOverride | None:
        self._check()
        self.reads += 1
        return self.overrides.get((employee_id, day))

    async def get_weekly_template(self, employee_id: uuid.UUID) -> WeeklyTemplate | None:
        self._check()
        self.reads += 1
        return self.templates.get(employee_id)

    async def upsert_weekly_template(self, employee_id: uuid.UUID, days) -> WeeklyTemplate:
        self._check()
        template = WeeklyTemplate(
            employee_id=employee_id,
            days=tuple(sorted(days, key=lambda d: d.day_of_week)),
        )
        self.templates[employee_id] = template
        return template

    async def upsert_override(self, override: ScheduleOverride) -> ScheduleOverride:
        self._check()
        self.overrides[(override.employee_id, override.day)] = override
        return override

    async def delete_override(self, employee_id: uuid.UUID, day: date) -> bool:
        self._check()
        return self.overrides.pop((employee_id, day), None) is not None

    async def list_overrides(
        self, employee_id: uuid.UUID, date_from: date, date_to: date
    ) -> list[ScheduleOverride]:
        self._check()
        return sorted(
            (
                o
                for (eid, day), o in self.overrides.items()
                if eid == employee_id and date_from <= day <= date_to
            ),
            key=lambda o: o.day,
        )

    async def list_weekly_templates(self) -> list[TemplateOverview]:
        self._check()
        return [
            TemplateOverview(
                template=t,
                full_name=self.names.get(eid, ("Unknown", ""))[0],
                email=self.names.get(eid, ("Unknown", ""))[1],
            )
            for eid, t in self.templates.items()
        ]


class InMemoryAttendanceStore:
    def __init__(self) -> None:
        self.entries: list[AttendanceEntry] = []
        self.names: dict[uuid.UUID, tuple[str, str]] = {}

    async def add(self, entry: AttendanceEntry) -> AttendanceEntry:
        entry.id = len(self.entries) + 1
        self.entries.append(entry)
        return entry

    async def latest_for_employee(self, employee_id: uuid.UUID) -> AttendanceEntry | None:
        own = [e for e in self.entries if e.employee_id == employee_id]
        if not own:
            return None
        return max(own, key=lambda e: e.recorded_at)

    async def list_between(self, start: datetime, end: datetime) -> list[ReportRow]:
        return [
            ReportRow(
                entry=e,
                full_name=self.names.get(e.employee_id, ("Unknown", ""))[0],
                email=self.names.get(e.employee_id, ("Unknown", ""))[1],
            )
            for e in sorted(self.entries, key=lambda e: e.recorded_at)
            if start <= e.recorded_at < end
        ]


class InMemoryAbsenceStore:
    def __init__(self) -> None:
        self.requests: dict[int, AbsenceRequest] = {}
        self.names: dict[uuid.UUID, tuple[str, str]] = {}

    async def add(self, request: AbsenceRequest) -> AbsenceRequest:
        saved = replace(
            request,
            id=len(self.requests) + 1,
            created_at=datetime(2024, 6, 1, tzinfo=timezone.utc) + timedelta(minutes=len(self.requests)),
        )
        self.requests[saved.id] = saved
        return saved

    async def get(self, request_id: int) -> AbsenceRequest | None:
        return self.requests.get(request_id)

    async def save_review(self, request: AbsenceRequest) -> AbsenceRequest:
        self.requests[request.id] = request
        return request

    async def list_for_employee(self, employee_id: uuid.UUID) -> list[AbsenceRequest]:
        own = [r for r in self.requests.values() if r.employee_id == employee_id]
        return sorted(own, key=lambda r: r.id, reverse=True)

    async def list_pending(self) -> list[PendingAbsence]:
        return [
            PendingAbsence(
                request=r,
                full_name=self.names.get(r.employee_id, ("Unknown", ""))[0],
                email=self.names.get(r.employee_id, ("Unknown", ""))[1],
            )
            for r in sorted(self.requests.values(), key=lambda r: (r.start_date, r.id))
            if r.status == "pending"
        ]


class InMemoryOfficeStore:
    def __init__(self) -> None:
        self.offices: dict[int, OfficeLocation] = {}
        self._next_id = 1

    async def list_all(self) -> list[OfficeLocation]:
        return sorted(self.offices.values(), key=lambda o: o.name)

    async def get(self, office_id: int) -> OfficeLocation | None:
        return self.offices.get(office_id)

    async def add(self, office: OfficeLocation) -> OfficeLocation:
        saved = replace(office, id=self._next_id)
        self._next_id += 1
        self.offices[saved.id] = saved
        return saved

    async def update(self, office: OfficeLocation) -> OfficeLocation:
        self.offices[office.id] = office
        return office

    async def delete(self, office_id: int) -> bool:
        return self.offices.pop(office_id, None) is not None


class InMemoryDeviceStore:
    def __init__(self) -> None:
        self.devices: dict[int, Device] = {}

    async def find(self, employee_id: uuid.UUID, device_id: str) -> Device | None:
        for d in self.devices.values():
            if d.employee_id == employee_id and d.device_id == device_id:
                return d
        return None

    async def get(self, device_pk: int) -> Device | None:
        return self.devices.get(device_pk)

    async def list_for_employee(self, employee_id: uuid.UUID) -> list[Device]:
        own = [d for d in self.devices.values() if d.employee_id == employee_id]
        return sorted(own, key=lambda d: d.last_seen_at, reverse=True)

    async def add(self, device: Device) -> Device:
        saved = replace(device, id=len(self.devices) + 1)
        self.devices[saved.id] = saved
        return saved

    async def save(self, device: Device) -> Device:
        self.devices[device.id] = device
        return device


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def make_week(start: str = "09:00", end: str = "17:00", days_off=(0, 6)) -> list[WeeklyDay]:
    """A full seven-day template with the given weekdays off."""
    return [
        WeeklyDay(
            day_of_week=d,
            start_time=start,
            end_time=end,
            is_day_off=d in days_off,
        )
        for d in range(7)
    ]


def auth_headers(employee_id: uuid.UUID, role: str = "employee") -> dict:
    token = create_access_token({"sub": str(employee_id), "role": role})
    return {"Authorization": f"Bearer {token}"}


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def schedule_store() -> InMemoryScheduleStore:
    return InMemoryScheduleStore()


@pytest.fixture
def attendance_store() -> InMemoryAttendanceStore:
    return InMemoryAttendanceStore()


@pytest.fixture
def absence_store() -> InMemoryAbsenceStore:
    return InMemoryAbsenceStore()


@pytest.fixture
def office_store() -> InMemoryOfficeStore:
    return InMemoryOfficeStore()


@pytest.fixture
def device_store() -> InMemoryDeviceStore:
    return InMemoryDeviceStore()


@pytest_asyncio.fixture
async def client(
    schedule_store: InMemoryScheduleStore,
    attendance_store: InMemoryAttendanceStore,
    absence_store: InMemoryAbsenceStore,
    office_store: InMemoryOfficeStore,
    device_store: InMemoryDeviceStore,
) -> AsyncClient:
    """Fresh HTTPX async client per test with in-memory stores wired in."""
    app.dependency_overrides[get_schedule_store] = lambda: schedule_store
    app.dependency_overrides[get_attendance_store] = lambda: attendance_store
    app.dependency_overrides[get_absence_store] = lambda: absence_store
    app.dependency_overrides[get_office_store] = lambda: office_store
    app.dependency_overrides[get_device_store] = lambda: device_store
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def employee_id() -> uuid.UUID:
    return uuid.uuid4()


@pytest.fixture
def employee_headers(employee_id: uuid.UUID) -> dict:
    return auth_headers(employee_id, "employee")


@pytest.fixture
def admin_headers() -> dict:
    return auth_headers(uuid.uuid4(), "admin")
