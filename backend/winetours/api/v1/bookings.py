"""Booking endpoints."""

from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from winetours.api import deps
from winetours.api.rate_limit import DEFAULT_RATE_DEP
from winetours.schemas.booking import (
    BookingCreate,
    BookingRead,
    BookingStatusUpdate,
    SlotUnavailableRead,
)
from winetours.services import booking_service
from winetours.services.availability_service import AvailabilityRequest
from winetours.services.booking_service import SlotUnavailableError

router = APIRouter()


@router.post(
    "",
    response_model=BookingRead,
    status_code=status.HTTP_201_CREATED,
    summary="Book a tour",
    dependencies=[DEFAULT_RATE_DEP],
    responses={status.HTTP_409_CONFLICT: {"model": SlotUnavailableRead}},
)
async def create_booking(
    payload: BookingCreate,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
):
    """Re-check the slot under the day lock and create a pending booking."""
    request = AvailabilityRequest(
        tour_date=payload.date,
        duration_hours=payload.duration_hours,
        party_size=payload.party_size,
        start_time=payload.start_time,
        vehicle_type=payload.vehicle_type,
    )
    try:
        booking = await booking_service.create_booking(
            session,
            request=request,
            customer_name=payload.customer_name,
            customer_email=str(payload.customer_email) if payload.customer_email else None,
        )
    except SlotUnavailableError as exc:
        body = SlotUnavailableRead(reason=exc.reason, message=exc.message, cause=exc.cause)
        return JSONResponse(status_code=status.HTTP_409_CONFLICT, content=body.model_dump())
    return BookingRead.model_validate(booking)


@router.get("/{booking_id}", response_model=BookingRead, summary="Get booking")
async def get_booking(
    booking_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
) -> BookingRead:
    booking = await booking_service.get_booking(session, booking_id=booking_id)
    if booking is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Booking not found")
    return BookingRead.model_validate(booking)


@router.post(
    "/{booking_id}/status",
    response_model=BookingRead,
    summary="Change booking status",
)
async def update_booking_status(
    booking_id: uuid.UUID,
    payload: BookingStatusUpdate,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
) -> BookingRead:
    booking = await booking_service.get_booking(session, booking_id=booking_id)
    if booking is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Booking not found")
    try:
        updated = await booking_service.update_booking_status(
            session, booking=booking, status=payload.status
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return BookingRead.model_validate(updated)
