from pydantic import BaseModel, ConfigDict
from datetime import datetime, time
from decimal import Decimal
from typing import List, Optional

class PriceCheckResponse(BaseModel):
    id: int
    target_date_id: int
    destination_id: int
    check_timestamp: datetime
    price: Decimal
    currency: str
    departure_time: time
    arrival_time: time
    airline: str
    stops: int
    booking_url: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

class OnDemandCheckResponse(BaseModel):
    cached_count: int
    fetched_count: int
    results: List[PriceCheckResponse]

class PriceSummaryResponse(BaseModel):
    latest: Optional[PriceCheckResponse] = None
    lowest: Optional[PriceCheckResponse] = None
    average_price: Optional[Decimal] = None
    change_percent_24h: Optional[Decimal] = None
