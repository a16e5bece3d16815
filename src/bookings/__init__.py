"""
Booking Ledger Module

This module owns the booking lifecycle and keeps the seat inventory in step
with it. It includes:

- Booking creation with seat reservation in one transaction
- Public lookup by booking reference or payment reference
- Admin listing, partial updates (status, contact details, passengers, total)
- Deletion with seat release

Key Components:
- booking_service.py: BookingService and the booking/passenger serializers
- router.py: FastAPI endpoints mounted under /bookings
- schemas.py: Pydantic models for booking and passenger input

Status lifecycle:
- confirmed -> cancelled (seats released)
- confirmed -> completed
- confirmed/cancelled -> deleted
"""

from .router import router
from .booking_service import BookingService, serialize_booking
from .schemas import BookingCreate, BookingUpdate, BookingStatus, PassengerInput

__all__ = [
    "router",
    "BookingService",
    "serialize_booking",
    "BookingCreate",
    "BookingUpdate",
    "BookingStatus",
    "PassengerInput"
]
