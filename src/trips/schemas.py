from pydantic import Field, validator
from typing import Optional
from datetime import date

from src.schemas import CamelModel
from src.trips.validation import is_valid_time, is_valid_duration

def _check_time(v):
    if v is not None and not is_valid_time(v):
        raise ValueError('Invalid time format (use HH:MM)')
    return v

def _check_duration(v):
    if v is not None and not is_valid_duration(v):
        raise ValueError('Invalid duration format (use Xh Ym)')
    return v

def _check_price(v):
    if v is not None and v < 0:
        raise ValueError('Price must be non-negative')
    return v

class TripCreate(CamelModel):
    """Trip creation request"""
    bus_id: str = Field(..., min_length=1)
    from_location: str = Field(..., alias="from", min_length=1, max_length=255)
    to_location: str = Field(..., alias="to", min_length=1, max_length=255)
    trip_date: date = Field(..., alias="date")
    departure_time: str
    arrival_time: str
    duration: str
    price: float
    is_available: bool = True

    @validator('departure_time', 'arrival_time')
    def validate_times(cls, v):
        return _check_time(v)

    @validator('duration')
    def validate_duration(cls, v):
        return _check_duration(v)

    @validator('price')
    def validate_price(cls, v):
        return _check_price(v)

class TripUpdate(CamelModel):
    """Partial trip update; only supplied fields are validated and applied"""
    bus_id: Optional[str] = None
    from_location: Optional[str] = Field(None, alias="from", min_length=1, max_length=255)
    to_location: Optional[str] = Field(None, alias="to", min_length=1, max_length=255)
    trip_date: Optional[date] = Field(None, alias="date")
    departure_time: Optional[str] = None
    arrival_time: Optional[str] = None
    duration: Optional[str] = None
    price: Optional[float] = None
    is_available: Optional[bool] = None

    @validator('departure_time', 'arrival_time')
    def validate_times(cls, v):
        return _check_time(v)

    @validator('duration')
    def validate_duration(cls, v):
        return _check_duration(v)

    @validator('price')
    def validate_price(cls, v):
        return _check_price(v)
