from fastapi import Request
from fastapi.responses import JSONResponse


class TimeclockError(Exception):
    """Base class for domain errors surfaced to API callers."""

    status_code: int = 500
    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidScheduleFormat(TimeclockError, ValueError):
    """A schedule time or date string is not in the expected HH:MM / YYYY-MM-DD form."""

    status_code = 422
    code = "INVALID_SCHEDULE_FORMAT"


class StoreUnavailable(TimeclockError):
    """The schedule or attendance store could not be read or written."""

    status_code = 503
    code = "STORE_UNAVAILABLE"


class EmployeeNotFound(TimeclockError):
    status_code = 404
    code = "EMPLOYEE_NOT_FOUND"


class AbsenceRequestNotFound(TimeclockError):
    status_code = 404
    code = "ABSENCE_REQUEST_NOT_FOUND"


class AbsenceAlreadyReviewed(TimeclockError):
    """Only pending absence requests can be approved or rejected."""

    status_code = 409
    code = "ABSENCE_ALREADY_REVIEWED"


class InvalidAbsencePeriod(TimeclockError):
    status_code = 422
    code = "INVALID_ABSENCE_PERIOD"


class OfficeLocationNotFound(TimeclockError):
    status_code = 404
    code = "OFFICE_LOCATION_NOT_FOUND"


class DeviceNotFound(TimeclockError):
    status_code = 404
    code = "DEVICE_NOT_FOUND"


def get_request_id(request: Request) -> str:
    request_id = getattr(request.state, "request_id", None)
    if request_id:
        return str(request_id)
    return "unknown"


def error_response(request: Request, *, status_code: int, code: str, message: str) -> JSONResponse:
    payload = {
        "error": {
            "code": code,
            "message": message,
            "request_id": get_request_id(request),
        }
    }
    return JSONResponse(status_code=status_code, content=payload)


async def handle_timeclock_error(request: Request, exc: TimeclockError) -> JSONResponse:
    return error_response(
        request,
        status_code=exc.status_code,
        code=exc.code,
        message=exc.message,
    )
