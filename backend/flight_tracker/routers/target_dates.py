from enum import Enum
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from flight_tracker.database import get_db
from flight_tracker.errors import FlightTrackerError
from flight_tracker.routers.http_errors import to_http_exception
from flight_tracker.schemas.target_date_schema import DestinationResponse, TargetDateRequest, TargetDateResponse
from flight_tracker.services.travel_date_service import TravelDateService

router = APIRouter(
    prefix="/target-dates",
    tags=["target-dates"]
)


class TargetDateStatus(str, Enum):
    active = "active"
    deleted = "deleted"
    all = "all"
    upcoming = "upcoming"


def get_travel_date_service(db: Session = Depends(get_db)) -> TravelDateService:
    return TravelDateService(db)


@router.get("", response_model=List[TargetDateResponse])
def list_target_dates(
    status: TargetDateStatus = Query(TargetDateStatus.active),
    service: TravelDateService = Depends(get_travel_date_service),
):
    if status == TargetDateStatus.deleted:
        return service.list_deleted()
    if status == TargetDateStatus.all:
        return service.list_all()
    if status == TargetDateStatus.upcoming:
        return service.list_upcoming()
    return service.list_active()


@router.get("/{target_date_id}", response_model=TargetDateResponse)
def get_target_date(target_date_id: int, service: TravelDateService = Depends(get_travel_date_service)):
    try:
        return service.get(target_date_id)
    except FlightTrackerError as e:
        raise to_http_exception(e)


@router.get("/{target_date_id}/destinations", response_model=List[DestinationResponse])
def get_target_date_destinations(target_date_id: int, service: TravelDateService = Depends(get_travel_date_service)):
    try:
        service.get(target_date_id)
    except FlightTrackerError as e:
        raise to_http_exception(e)
    return service.get_destinations(target_date_id)


@router.post("", response_model=TargetDateResponse, status_code=201)
def create_target_date(request: TargetDateRequest, service: TravelDateService = Depends(get_travel_date_service)):
    """Create a date range and associate it with the given destinations."""
    try:
        return service.create(request.name, request.outbound_date, request.return_date, request.destination_ids)
    except FlightTrackerError as e:
        raise to_http_exception(e)


@router.put("/{target_date_id}", response_model=TargetDateResponse)
def update_target_date(
    target_date_id: int,
    request: TargetDateRequest,
    service: TravelDateService = Depends(get_travel_date_service),
):
    """
    Replace name, dates and destinations of an active date range.
    Price history of destinations dropped from the set is discarded.
    """
    try:
        return service.update(
            target_date_id, request.name, request.outbound_date, request.return_date, request.destination_ids
        )
    except FlightTrackerError as e:
        raise to_http_exception(e)


@router.delete("/{target_date_id}", status_code=204)
def delete_target_date(target_date_id: int, service: TravelDateService = Depends(get_travel_date_service)):
    try:
        service.soft_delete(target_date_id)
    except FlightTrackerError as e:
        raise to_http_exception(e)


@router.post("/{target_date_id}/restore", response_model=TargetDateResponse)
def restore_target_date(target_date_id: int, service: TravelDateService = Depends(get_travel_date_service)):
    try:
        service.restore(target_date_id)
        return service.get(target_date_id)
    except FlightTrackerError as e:
        raise to_http_exception(e)
