from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from flight_tracker.database import get_db
from flight_tracker.repositories.destination_repository import DestinationRepository
from flight_tracker.schemas.target_date_schema import DestinationResponse

router = APIRouter(
    prefix="/destinations",
    tags=["destinations"]
)


@router.get("", response_model=List[DestinationResponse])
def list_destinations(
    q: Optional[str] = Query(None, description="Airport code or name fragment"),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
):
    """All destinations, or up to ``limit`` matches when ``q`` is given."""
    repository = DestinationRepository(db)
    if q is None:
        return repository.get_all()
    return repository.search(q, max_results=limit)
