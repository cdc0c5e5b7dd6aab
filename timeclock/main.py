import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from timeclock.api.absences import router as absences_router
from timeclock.api.attendance import router as attendance_router
from timeclock.api.devices import router as devices_router
from timeclock.api.offices import router as offices_router
from timeclock.api.schedules import router as schedules_router
from timeclock.core.config import get_cors_origins, settings
from timeclock.core.exceptions import TimeclockError, handle_timeclock_error
from timeclock.core.logging_utils import setup_logging
from timeclock.core.middleware import request_id_middleware

setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        "Starting Timeclock backend (timezone=%s, grace=%d min, default hours %s-%s)",
        settings.ATTENDANCE_TIMEZONE,
        settings.GRACE_PERIOD_MINUTES,
        settings.DEFAULT_START_TIME,
        settings.DEFAULT_END_TIME,
    )

    yield

    logger.info("Shutting down Timeclock backend.")


app = FastAPI(
    title="Timeclock API",
    description=(
        "Employee attendance: work schedules, overrides, classified check-ins, "
        "absence requests, office geofences and device fingerprints."
    ),
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.middleware("http")(request_id_middleware)
app.add_exception_handler(TimeclockError, handle_timeclock_error)

app.include_router(schedules_router, prefix="/api/schedules", tags=["Schedules"])
app.include_router(attendance_router, prefix="/api/attendance", tags=["Attendance"])
app.include_router(absences_router, prefix="/api/absences", tags=["Absences"])
app.include_router(offices_router, prefix="/api/offices", tags=["Offices"])
app.include_router(devices_router, prefix="/api/devices", tags=["Devices"])


@app.get("/health", tags=["System"])
async def health_check() -> dict:
    return {"status": "ok"}
