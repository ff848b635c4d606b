from pydantic import BaseModel, Field
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

class FlightOption(BaseModel):
    """A single priced flight option returned by a provider."""
    price: Decimal
    currency: str = Field(..., min_length=3, max_length=3)
    departure_time: datetime
    arrival_time: datetime
    airline: str
    stops: int = Field(0, ge=0)
    booking_url: Optional[str] = None

class FlightSearchResult(BaseModel):
    """
    Outcome of one provider search. Provider-side failures are reported as
    ``success=False`` with an ``error_message`` rather than raised.
    """
    success: bool
    error_message: Optional[str] = None
    flights: List[FlightOption] = []
    origin: Optional[str] = None
    destination: Optional[str] = None
    outbound_date: Optional[date] = None
    return_date: Optional[date] = None

    @classmethod
    def failure(cls, message: str, **route) -> "FlightSearchResult":
        return cls(success=False, error_message=message, **route)
