"""Tour pricing endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from winetours.api import deps
from winetours.api.rate_limit import DEFAULT_RATE_DEP
from winetours.core.config import get_settings
from winetours.schemas.pricing import PricingQuoteRead, PricingQuoteRequest
from winetours.services import pricing_service, vehicle_selection_service

router = APIRouter()


@router.post(
    "/quote",
    response_model=PricingQuoteRead,
    summary="Quote a tour without checking availability",
    dependencies=[DEFAULT_RATE_DEP],
)
async def quote_tour(
    payload: PricingQuoteRequest,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
) -> PricingQuoteRead:
    vehicle_type = vehicle_selection_service.resolve_vehicle_type(
        payload.vehicle_type, get_settings().default_vehicle_type
    )
    quote = await pricing_service.quote_tour(
        session,
        tour_date=payload.date,
        duration_hours=payload.duration_hours,
        vehicle_type=vehicle_type,
    )
    return PricingQuoteRead(
        base_price=quote.base_price,
        estimated_gratuity=quote.estimated_gratuity,
        taxes=quote.taxes,
        total=quote.total,
        deposit_required=quote.deposit_required,
        final_payment=quote.final_payment,
        is_weekend=quote.is_weekend,
        source=quote.source,
        rule_id=quote.rule_id,
        vehicle_type=vehicle_type,
    )
