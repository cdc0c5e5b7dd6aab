import uuid

from fastapi import APIRouter, Depends, Query, Request

from timeclock.core.middleware import (
    Identity,
    ensure_self_or_admin,
    get_current_identity,
    require_role,
)
from timeclock.schemas.device import DeviceRegister, DeviceResponse, DeviceVerificationResponse
from timeclock.services.devices import (
    DeviceStore,
    approve_device,
    get_device_store,
    register_device,
    verify_device,
)

router = APIRouter()


@router.post(
    "/register",
    response_model=DeviceResponse,
    summary="Register the current device or refresh its last-seen time",
)
async def register(
    body: DeviceRegister,
    request: Request,
    store: DeviceStore = Depends(get_device_store),
    identity: Identity = Depends(get_current_identity),
) -> DeviceResponse:
    device = await register_device(
        store,
        identity.employee_id,
        body.device_id,
        browser_info=body.browser_info,
        os_info=body.os_info,
        ip_address=request.client.host if request.client else None,
    )
    return DeviceResponse.model_validate(device)


@router.get(
    "/verify",
    response_model=DeviceVerificationResponse,
    summary="Whether a device fingerprint is known and approved for the current employee",
)
async def verify(
    device_id: str = Query(..., min_length=1, max_length=255),
    store: DeviceStore = Depends(get_device_store),
    identity: Identity = Depends(get_current_identity),
) -> DeviceVerificationResponse:
    result = await verify_device(store, identity.employee_id, device_id)
    return DeviceVerificationResponse.model_validate(result)


@router.get(
    "/me",
    response_model=list[DeviceResponse],
    summary="Devices of the current employee",
)
async def list_my_devices(
    store: DeviceStore = Depends(get_device_store),
    identity: Identity = Depends(get_current_identity),
) -> list[DeviceResponse]:
    return [DeviceResponse.model_validate(d) for d in await store.list_for_employee(identity.employee_id)]


@router.get(
    "/employees/{employee_id}",
    response_model=list[DeviceResponse],
    summary="Devices of an employee",
)
async def list_employee_devices(
    employee_id: uuid.UUID,
    store: DeviceStore = Depends(get_device_store),
    identity: Identity = Depends(get_current_identity),
) -> list[DeviceResponse]:
    ensure_self_or_admin(identity, employee_id)
    return [DeviceResponse.model_validate(d) for d in await store.list_for_employee(employee_id)]


@router.post(
    "/{device_pk}/approve",
    response_model=DeviceResponse,
    summary="Approve a device (admin only)",
)
async def approve(
    device_pk: int,
    store: DeviceStore = Depends(get_device_store),
    _identity: Identity = Depends(require_role("admin")),
) -> DeviceResponse:
    return DeviceResponse.model_validate(await approve_device(store, device_pk))
