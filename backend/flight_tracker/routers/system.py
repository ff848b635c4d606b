from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from sqlalchemy import func
from flight_tracker.config import settings
from flight_tracker.database import get_db
from flight_tracker.models.destination import Destination
from flight_tracker.models.price_check import PriceCheck
from flight_tracker.models.target_date import TargetDate

router = APIRouter(prefix="/system-health", tags=["System"])

@router.get("")
def get_system_health(db: Session = Depends(get_db)):
    active_target_dates = db.query(func.count(TargetDate.id)).filter(TargetDate.is_deleted == False).scalar() or 0
    deleted_target_dates = db.query(func.count(TargetDate.id)).filter(TargetDate.is_deleted == True).scalar() or 0
    total_destinations = db.query(func.count(Destination.id)).scalar() or 0
    total_price_checks = db.query(func.count(PriceCheck.id)).scalar() or 0
    last_check = db.query(func.max(PriceCheck.check_timestamp)).scalar()

    return {
        "origin_airport": settings.origin_airport,
        "flight_provider": settings.flight_provider_type,
        "active_target_dates": active_target_dates,
        "deleted_target_dates": deleted_target_dates,
        "total_destinations": total_destinations,
        "total_price_checks": total_price_checks,
        "last_check_timestamp": last_check.isoformat() if last_check else None
    }
