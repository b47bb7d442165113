"""Availability check and calendar endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from winetours.api import deps
from winetours.api.rate_limit import AVAILABILITY_RATE_DEP
from winetours.schemas.availability import (
    AvailabilityAvailableRead,
    AvailabilityCheckRequest,
    AvailabilityUnavailableRead,
    AvailableDatesRead,
)
from winetours.services import availability_service
from winetours.services.availability_service import AvailabilityRequest

router = APIRouter()


def to_availability_request(payload: AvailabilityCheckRequest) -> AvailabilityRequest:
    return AvailabilityRequest(
        tour_date=payload.date,
        duration_hours=payload.duration_hours,
        party_size=payload.party_size,
        start_time=payload.start_time,
        vehicle_type=payload.vehicle_type,
    )


@router.post(
    "/check",
    response_model=AvailabilityAvailableRead | AvailabilityUnavailableRead,
    summary="Check availability for a tour request",
    dependencies=[AVAILABILITY_RATE_DEP],
)
async def check_availability(
    payload: AvailabilityCheckRequest,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
) -> AvailabilityAvailableRead | AvailabilityUnavailableRead:
    """Return open times, a suggested vehicle and a quote, or the reason there are none."""
    result = await availability_service.check_availability(
        session, to_availability_request(payload)
    )
    body = result.to_dict()
    if result.available:
        return AvailabilityAvailableRead.model_validate(body)
    return AvailabilityUnavailableRead.model_validate(body)


@router.get(
    "/dates",
    response_model=AvailableDatesRead,
    summary="List bookable dates in a month",
    dependencies=[AVAILABILITY_RATE_DEP],
)
async def list_available_dates(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    year: Annotated[int, Query(ge=2000, le=2100)],
    month: Annotated[int, Query(ge=1, le=12)],
) -> AvailableDatesRead:
    dates = await availability_service.list_available_dates(
        session, year=year, month=month
    )
    return AvailableDatesRead(
        year=year, month=month, available_dates=dates, count=len(dates)
    )
