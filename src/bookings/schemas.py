from pydantic import Field, validator
from typing import List, Optional
from enum import Enum
import re

from src.schemas import CamelModel, EMAIL_PATTERN, PHONE_PATTERN

class BookingStatus(str, Enum):
    """Booking status enumeration"""
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"

class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"

def check_email(v):
    if v is not None and not re.match(EMAIL_PATTERN, v):
        raise ValueError('Invalid email format')
    return v

def check_phone(v):
    if v is not None and not re.match(PHONE_PATTERN, v):
        raise ValueError('Invalid phone format')
    return v

def check_passengers(v):
    if v is not None and len(v) == 0:
        raise ValueError('Passengers must be a non-empty array')
    return v

class PassengerInput(CamelModel):
    """Passenger occupying one seat"""
    name: str = Field(..., min_length=1, max_length=255)
    seat: str = Field(..., min_length=1, max_length=10)
    age: int
    gender: str

    @validator('name', 'seat')
    def not_blank(cls, v):
        if not v.strip():
            raise ValueError('Each passenger must have name, seat, age, and gender')
        return v.strip()

    @validator('age')
    def validate_age(cls, v):
        if v < 1 or v > 120:
            raise ValueError('Passenger age must be between 1 and 120')
        return v

    @validator('gender')
    def validate_gender(cls, v):
        if v not in [g.value for g in Gender]:
            raise ValueError('Gender must be either male or female')
        return v

class BookingCreate(CamelModel):
    """Public booking request"""
    trip_id: str = Field(..., min_length=1)
    email: str
    phone: str
    passengers: List[PassengerInput]
    payment_reference: Optional[str] = None

    @validator('email')
    def validate_email(cls, v):
        return check_email(v)

    @validator('phone')
    def validate_phone(cls, v):
        return check_phone(v)

    @validator('passengers')
    def validate_passengers(cls, v):
        return check_passengers(v)

class BookingUpdate(CamelModel):
    """Admin partial update of a booking"""
    status: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    payment_reference: Optional[str] = None
    passengers: Optional[List[PassengerInput]] = None
    total_amount: Optional[float] = Field(None, ge=0)

    @validator('status')
    def validate_status(cls, v):
        if v is not None and v not in [s.value for s in BookingStatus]:
            raise ValueError('Invalid status. Must be confirmed, cancelled, or completed')
        return v

    @validator('email')
    def validate_email(cls, v):
        return check_email(v)

    @validator('phone')
    def validate_phone(cls, v):
        return check_phone(v)

    @validator('passengers')
    def validate_passengers(cls, v):
        return check_passengers(v)
