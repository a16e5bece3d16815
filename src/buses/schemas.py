from pydantic import Field, validator
from typing import List, Optional

from src.schemas import CamelModel

# Bus Types
class BusTypeCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    seats: int = Field(..., gt=0, description="Number of seats every bus of this type carries")

    @validator('name')
    def strip_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('Name and valid seat count are required')
        return v

class BusTypeUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    seats: Optional[int] = None

    @validator('seats')
    def validate_seats(cls, v):
        if v is not None and v <= 0:
            raise ValueError('Invalid seat count')
        return v

# Buses
class SeatLayout(CamelModel):
    """Seat grid; empty strings mark aisles and gaps"""
    rows: int
    columns: int
    arrangement: List[List[str]]

class BusCreate(CamelModel):
    operator: str = Field(..., min_length=1, max_length=255)
    bus_type: str = Field(..., min_length=1)
    seat_layout: SeatLayout
    amenities: List[str] = Field(default_factory=list)
    rating: float = Field(..., ge=0, le=5)

class BusUpdate(CamelModel):
    operator: Optional[str] = Field(None, min_length=1, max_length=255)
    bus_type: Optional[str] = Field(None, min_length=1)
    seat_layout: Optional[SeatLayout] = None
    amenities: Optional[List[str]] = None
    rating: Optional[float] = Field(None, ge=0, le=5)
