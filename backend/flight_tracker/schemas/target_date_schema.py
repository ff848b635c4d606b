from pydantic import BaseModel, ConfigDict, Field
from datetime import date, datetime
from typing import List, Optional

class DestinationResponse(BaseModel):
    id: int
    airport_code: str
    name: str

    model_config = ConfigDict(from_attributes=True)

class TargetDateRequest(BaseModel):
    # Business rules (non-empty name, return after outbound) are enforced by TravelDateService
    name: str
    outbound_date: date
    return_date: date
    destination_ids: List[int] = Field(default_factory=list)

class TargetDateResponse(BaseModel):
    id: int
    name: str
    outbound_date: date
    return_date: date
    is_deleted: bool
    deleted_at: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
