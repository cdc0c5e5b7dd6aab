from dataclasses import asdict

from fastapi import APIRouter, Depends, status

from timeclock.core.middleware import Identity, get_current_identity, require_role
from timeclock.schemas.absence import (
    AbsenceRequestCreate,
    AbsenceRequestResponse,
    PendingAbsenceResponse,
)
from timeclock.services.absences import (
    AbsenceStore,
    get_absence_store,
    review_absence_request,
    submit_absence_request,
)

router = APIRouter()


@router.post(
    "/",
    response_model=AbsenceRequestResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit an absence request for the current employee",
)
async def submit_request(
    body: AbsenceRequestCreate,
    store: AbsenceStore = Depends(get_absence_store),
    identity: Identity = Depends(get_current_identity),
) -> AbsenceRequestResponse:
    saved = await submit_absence_request(
        store,
        identity.employee_id,
        absence_type=body.absence_type,
        reason=body.reason,
        start_date=body.start_date,
        end_date=body.end_date,
        document_url=body.document_url,
    )
    return AbsenceRequestResponse.model_validate(saved)


@router.get(
    "/me",
    response_model=list[AbsenceRequestResponse],
    summary="Absence requests of the current employee, newest first",
)
async def list_my_requests(
    store: AbsenceStore = Depends(get_absence_store),
    identity: Identity = Depends(get_current_identity),
) -> list[AbsenceRequestResponse]:
    requests = await store.list_for_employee(identity.employee_id)
    return [AbsenceRequestResponse.model_validate(r) for r in requests]


@router.get(
    "/pending",
    response_model=list[PendingAbsenceResponse],
    summary="Pending absence requests with employee details (admin only)",
)
async def list_pending_requests(
    store: AbsenceStore = Depends(get_absence_store),
    _identity: Identity = Depends(require_role("admin")),
) -> list[PendingAbsenceResponse]:
    pending = await store.list_pending()
    return [
        PendingAbsenceResponse(**asdict(p.request), full_name=p.full_name, email=p.email)
        for p in pending
    ]


@router.post(
    "/{request_id}/approve",
    response_model=AbsenceRequestResponse,
    summary="Approve a pending absence request (admin only)",
)
async def approve_request(
    request_id: int,
    store: AbsenceStore = Depends(get_absence_store),
    identity: Identity = Depends(require_role("admin")),
) -> AbsenceRequestResponse:
    reviewed = await review_absence_request(store, request_id, identity.employee_id, "approved")
    return AbsenceRequestResponse.model_validate(reviewed)


@router.post(
    "/{request_id}/reject",
    response_model=AbsenceRequestResponse,
    summary="Reject a pending absence request (admin only)",
)
async def reject_request(
    request_id: int,
    store: AbsenceStore = Depends(get_absence_store),
    identity: Identity = Depends(require_role("admin")),
) -> AbsenceRequestResponse:
    reviewed = await review_absence_request(store, request_id, identity.employee_id, "rejected")
    return AbsenceRequestResponse.model_validate(reviewed)
