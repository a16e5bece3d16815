"""
Trip Catalog Module

Scheduled departures per bus, the public trip search and the schedule
overlap check run when trips are created or moved.

Key Components:
- validation.py: trip time windows (overnight aware) and TripValidator
- service.py: TripService CRUD/search and serialize_trip
- router.py: public /trips/search, /trips/public/{id} and admin /trips endpoints
- schemas.py: Pydantic request models with time/duration/price checks
"""

from .router import router
from .service import TripService, serialize_trip
from .validation import TripValidator, trip_interval, intervals_overlap

__all__ = [
    "router",
    "TripService",
    "serialize_trip",
    "TripValidator",
    "trip_interval",
    "intervals_overlap"
]
