import logging
from datetime import date, datetime, timezone
from sqlalchemy.orm import Session, joinedload
from typing import List, Optional, Tuple

from src.models import Trip, Bus, Booking, User
from src.trips.schemas import TripCreate, TripUpdate
from src.trips.validation import TripValidator
from src.buses.service import serialize_bus
from src.database import transaction
from src.exceptions import ConflictError

logger = logging.getLogger(__name__)

OVERLAP_MESSAGE = "Trip overlaps with an existing trip for this bus"

class TripService:
    """Trip catalog: admin CRUD plus the public search"""

    def __init__(self, db: Session):
        self.db = db
        self.validator = TripValidator(db)

    def _with_bus(self, query):
        return query.options(joinedload(Trip.bus).selectinload(Bus.seats))

    def get_trip(self, trip_id: str) -> Optional[Trip]:
        return self._with_bus(self.db.query(Trip)).filter(Trip.id == trip_id).first()

    def list_trips(
        self,
        from_location: Optional[str] = None,
        to_location: Optional[str] = None,
        trip_date: Optional[date] = None,
        limit: int = 10,
        offset: int = 0
    ) -> Tuple[List[Trip], int]:
        """Trips matching case-insensitive from/to substrings and an exact date, soonest first"""
        query = self.db.query(Trip)

        if from_location:
            query = query.filter(Trip.from_location.ilike(f"%{from_location}%"))
        if to_location:
            query = query.filter(Trip.to_location.ilike(f"%{to_location}%"))
        if trip_date:
            query = query.filter(Trip.date == trip_date)

        total = query.count()
        trips = self._with_bus(query).order_by(
            Trip.date.asc(), Trip.departure_time.asc()
        ).offset(offset).limit(limit).all()
        return trips, total

    def _check_not_in_past(self, trip_date: date):
        if trip_date < datetime.now(timezone.utc).date():
            raise ValueError("Trip date cannot be in the past")

    def create_trip(self, data: TripCreate, user: User) -> Trip:
        bus = self.db.query(Bus).filter(Bus.id == data.bus_id).first()
        if not bus:
            raise ValueError("Invalid bus ID")

        self._check_not_in_past(data.trip_date)

        if self.validator.find_overlapping_trip(bus.id, data.trip_date, data.departure_time, data.arrival_time):
            raise ConflictError(OVERLAP_MESSAGE)

        trip = Trip(
            bus_id=bus.id,
            from_location=data.from_location,
            to_location=data.to_location,
            date=data.trip_date,
            departure_time=data.departure_time,
            arrival_time=data.arrival_time,
            duration=data.duration,
            price=data.price,
            is_available=data.is_available,
            created_by=user.email,
            modified_by=user.email
        )
        with transaction(self.db):
            self.db.add(trip)

        logger.info("Trip %s created for bus %s on %s", trip.id, bus.id, trip.date)
        return self.get_trip(trip.id)

    def update_trip(self, trip_id: str, data: TripUpdate, user: User) -> Optional[Trip]:
        """
        Apply the supplied fields to a trip.

        The overlap check reruns whenever a field that moves the trip's
        window (bus, date, departure, arrival, duration) is supplied.
        """
        trip = self.get_trip(trip_id)
        if not trip:
            return None

        changes = data.dict(exclude_unset=True, exclude_none=True)

        if "bus_id" in changes:
            if not self.db.query(Bus).filter(Bus.id == changes["bus_id"]).first():
                raise ValueError("Invalid bus ID")
        if "trip_date" in changes:
            self._check_not_in_past(changes["trip_date"])

        schedule_fields = {"bus_id", "trip_date", "departure_time", "arrival_time", "duration"}
        if schedule_fields & changes.keys():
            overlapping = self.validator.find_overlapping_trip(
                changes.get("bus_id", trip.bus_id),
                changes.get("trip_date", trip.date),
                changes.get("departure_time", trip.departure_time),
                changes.get("arrival_time", trip.arrival_time),
                exclude_trip_id=trip.id
            )
            if overlapping:
                raise ConflictError(OVERLAP_MESSAGE)

        with transaction(self.db):
            if "trip_date" in changes:
                trip.date = changes.pop("trip_date")
            for field, value in changes.items():
                setattr(trip, field, value)
            trip.modified_by = user.email

        self.db.expire(trip)
        return self.get_trip(trip.id)

    def delete_trip(self, trip_id: str) -> bool:
        trip = self.db.query(Trip).filter(Trip.id == trip_id).first()
        if not trip:
            return False

        active_bookings = self.db.query(Booking).filter(
            Booking.trip_id == trip_id,
            Booking.status.in_(["confirmed", "completed"])
        ).count()
        if active_bookings > 0:
            raise ConflictError("Cannot delete trip with active bookings")

        with transaction(self.db):
            self.db.delete(trip)
        logger.info("Trip %s deleted", trip_id)
        return True

def serialize_trip(trip: Trip, include_bus: bool = True) -> dict:
    data = {
        "id": trip.id,
        "busId": trip.bus_id,
        "from": trip.from_location,
        "to": trip.to_location,
        "date": trip.date.isoformat(),
        "departureTime": trip.departure_time,
        "arrivalTime": trip.arrival_time,
        "duration": trip.duration,
        "price": trip.price,
        "isAvailable": trip.is_available,
        "createdAt": trip.created_at,
    }
    if include_bus:
        data["bus"] = serialize_bus(trip.bus)
    return data
