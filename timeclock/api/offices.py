from dataclasses import replace

from fastapi import APIRouter, Depends, HTTPException, Response, status

from timeclock.core.middleware import Identity, get_current_identity, require_role
from timeclock.schemas.office import (
    OfficeLocationCreate,
    OfficeLocationResponse,
    OfficeLocationUpdate,
)
from timeclock.services.offices import OfficeLocation, OfficeStore, get_office_store

router = APIRouter()


@router.get(
    "/",
    response_model=list[OfficeLocationResponse],
    summary="All office locations",
)
async def list_offices(
    store: OfficeStore = Depends(get_office_store),
    _identity: Identity = Depends(get_current_identity),
) -> list[OfficeLocationResponse]:
    return [OfficeLocationResponse.model_validate(o) for o in await store.list_all()]


@router.post(
    "/",
    response_model=OfficeLocationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create an office location (admin only)",
)
async def create_office(
    body: OfficeLocationCreate,
    store: OfficeStore = Depends(get_office_store),
    _identity: Identity = Depends(require_role("admin")),
) -> OfficeLocationResponse:
    office = await store.add(
        OfficeLocation(
            name=body.name,
            latitude=body.latitude,
            longitude=body.longitude,
            radius_m=body.radius_m,
        )
    )
    return OfficeLocationResponse.model_validate(office)


@router.patch(
    "/{office_id}",
    response_model=OfficeLocationResponse,
    summary="Update an office location (admin only)",
)
async def update_office(
    office_id: int,
    body: OfficeLocationUpdate,
    store: OfficeStore = Depends(get_office_store),
    _identity: Identity = Depends(require_role("admin")),
) -> OfficeLocationResponse:
    current = await store.get(office_id)
    if current is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Office location not found",
        )
    office = await store.update(replace(current, **body.model_dump(exclude_unset=True, exclude_none=True)))
    return OfficeLocationResponse.model_validate(office)


@router.delete(
    "/{office_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete an office location (admin only)",
)
async def delete_office(
    office_id: int,
    store: OfficeStore = Depends(get_office_store),
    _identity: Identity = Depends(require_role("admin")),
) -> Response:
    if not await store.delete(office_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Office location not found",
        )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
