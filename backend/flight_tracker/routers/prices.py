import logging
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from flight_tracker.config import settings
from flight_tracker.database import get_db
from flight_tracker.errors import FlightTrackerError
from flight_tracker.routers.http_errors import to_http_exception
from flight_tracker.schemas.price_check_schema import (
    OnDemandCheckResponse,
    PriceCheckResponse,
    PriceSummaryResponse,
)
from flight_tracker.services.flight_search_service import FlightSearchService
from flight_tracker.services.price_history_service import PriceHistoryService
from flight_tracker.services.travel_date_service import TravelDateService
from price_collector.providers import FlightProviderInterface, build_provider

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/prices",
    tags=["prices"]
)

# Built once; providers hold no per-request state
_provider = None


def get_flight_provider() -> FlightProviderInterface:
    global _provider
    if _provider is None:
        _provider = build_provider(settings)
    return _provider


def _require_target_date(db: Session, target_date_id: int) -> None:
    try:
        TravelDateService(db).get(target_date_id)
    except FlightTrackerError as e:
        raise to_http_exception(e)


@router.get("/{target_date_id}/latest", response_model=List[PriceCheckResponse])
def get_latest_prices(
    target_date_id: int,
    db: Session = Depends(get_db),
    provider: FlightProviderInterface = Depends(get_flight_provider),
):
    """Latest stored price per destination. Never calls the provider."""
    _require_target_date(db, target_date_id)
    return FlightSearchService(db, provider).get_latest_prices(target_date_id)


@router.get("/{target_date_id}/{destination_id}/history", response_model=List[PriceCheckResponse])
def get_price_history(
    target_date_id: int,
    destination_id: int,
    days_back: int = Query(30, ge=1, le=365),
    db: Session = Depends(get_db),
):
    _require_target_date(db, target_date_id)
    return PriceHistoryService(db).get_price_history(target_date_id, destination_id, days_back)


@router.get("/{target_date_id}/{destination_id}/summary", response_model=PriceSummaryResponse)
def get_price_summary(
    target_date_id: int,
    destination_id: int,
    days_back: int = Query(30, ge=1, le=365),
    db: Session = Depends(get_db),
):
    _require_target_date(db, target_date_id)
    history = PriceHistoryService(db)
    latest = history.get_latest(target_date_id, destination_id)
    lowest = history.get_lowest_price(target_date_id, destination_id, days_back)
    return PriceSummaryResponse(
        latest=PriceCheckResponse.model_validate(latest) if latest else None,
        lowest=PriceCheckResponse.model_validate(lowest) if lowest else None,
        average_price=history.get_average_price(target_date_id, destination_id, days_back),
        change_percent_24h=history.get_price_change(target_date_id, destination_id),
    )


@router.post("/{target_date_id}/check", response_model=OnDemandCheckResponse)
async def check_prices_on_demand(
    target_date_id: int,
    max_age_hours: float = Query(settings.cache_max_age_hours, ge=0),
    db: Session = Depends(get_db),
    provider: FlightProviderInterface = Depends(get_flight_provider),
):
    """
    Refresh prices for one date range. Prices checked within ``max_age_hours``
    are returned from the database instead of calling the provider again.
    """
    service = FlightSearchService(db, provider, request_delay_seconds=settings.request_delay_seconds)
    try:
        outcome = await service.check_date_range_on_demand(settings.origin_airport, target_date_id, max_age_hours)
    except FlightTrackerError as e:
        raise to_http_exception(e)

    return OnDemandCheckResponse(
        cached_count=outcome.cached_count,
        fetched_count=outcome.fetched_count,
        results=[PriceCheckResponse.model_validate(row) for row in outcome.results],
    )
