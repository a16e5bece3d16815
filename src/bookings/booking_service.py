import logging
import re
import uuid
from typing import Iterable, List, Optional, Tuple
from datetime import datetime, timezone
from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload, selectinload

from src.bookings.schemas import BookingCreate, BookingUpdate, BookingStatus, PassengerInput
from src.database import transaction
from src.exceptions import ConflictError
from src.models import Booking, Passenger, Seat, Trip, Bus, User
from src.schemas import EMAIL_PATTERN
from src.trips.service import serialize_trip

logger = logging.getLogger(__name__)

class BookingService:
    """
    Booking ledger.

    Every write that touches both seats and booking/passenger rows runs
    inside a single transaction, so a failure part way leaves seat flags
    and bookings exactly as they were.
    """

    def __init__(self, db: Session):
        self.db = db

    def _query(self):
        return self.db.query(Booking).options(
            selectinload(Booking.passengers),
            joinedload(Booking.trip).joinedload(Trip.bus).selectinload(Bus.seats)
        )

    def _generate_booking_reference(self) -> str:
        """TE followed by 8 uppercase hex characters, unique among bookings"""
        while True:
            reference = f"TE{uuid.uuid4().hex[:8].upper()}"
            if not self.db.query(Booking.reference).filter(Booking.reference == reference).first():
                return reference

    # Seat Inventory
    def _reserve_seats(self, bus_id: str, seat_numbers: Iterable[str]):
        """Flip seats to unavailable; fails if any of them was taken in the meantime"""
        seat_numbers = list(seat_numbers)
        if not seat_numbers:
            return
        reserved = self.db.query(Seat).filter(
            Seat.bus_id == bus_id,
            Seat.number.in_(seat_numbers),
            Seat.is_available.is_(True)
        ).update({Seat.is_available: False}, synchronize_session=False)
        if reserved != len(seat_numbers):
            raise ConflictError(f"Seats {', '.join(seat_numbers)} are not available")

    def _release_seats(self, bus_id: str, seat_numbers: Iterable[str]):
        seat_numbers = list(seat_numbers)
        if not seat_numbers:
            return
        self.db.query(Seat).filter(
            Seat.bus_id == bus_id,
            Seat.number.in_(seat_numbers)
        ).update({Seat.is_available: True}, synchronize_session=False)

    @staticmethod
    def _passenger_rows(passengers: List[PassengerInput]) -> List[Passenger]:
        return [
            Passenger(name=p.name, seat=p.seat, age=p.age, gender=p.gender)
            for p in passengers
        ]

    # Lookups
    def get_booking(self, reference: str) -> Optional[Booking]:
        return self._query().filter(Booking.reference == reference).first()

    def get_booking_by_payment_reference(self, payment_reference: str) -> Optional[Booking]:
        return self._query().filter(Booking.payment_reference == payment_reference).first()

    def find_booking(self, reference: str) -> Optional[Booking]:
        """Resolve a public lookup key: payment reference first, then booking reference"""
        return self.get_booking_by_payment_reference(reference) or self.get_booking(reference)

    def find_existing(self, reference: Optional[str] = None, payment_reference: Optional[str] = None) -> Optional[Booking]:
        """Booking matching either key against either column"""
        keys = [key for key in (reference, payment_reference) if key]
        if not keys:
            return None
        return self.db.query(Booking).filter(
            or_(Booking.reference.in_(keys), Booking.payment_reference.in_(keys))
        ).first()

    def list_bookings(
        self,
        email: Optional[str] = None,
        status: Optional[str] = None,
        limit: int = 10,
        offset: int = 0
    ) -> Tuple[List[Booking], int]:
        """Bookings filtered by exact email and status, newest first"""
        if email and not re.match(EMAIL_PATTERN, email):
            raise ValueError("Invalid email format")

        def apply_filters(query):
            if email:
                query = query.filter(Booking.email == email)
            if status:
                query = query.filter(Booking.status == status)
            return query

        total = apply_filters(self.db.query(Booking)).count()
        bookings = apply_filters(self._query()).order_by(Booking.created_at.desc()).offset(offset).limit(limit).all()
        return bookings, total

    # Lifecycle
    def create_booking(
        self,
        data: BookingCreate,
        reference: Optional[str] = None,
        created_by: Optional[str] = None
    ) -> Booking:
        """
        Create a confirmed booking and reserve its seats.

        `reference` is only supplied by the payment webhook, which reuses the
        booking reference the client generated before paying.
        """
        if data.payment_reference:
            if self.db.query(Booking).filter(Booking.payment_reference == data.payment_reference).first():
                logger.info("Booking already exists for payment reference %s", data.payment_reference)
                raise ConflictError("Payment reference already used")

        if reference and self.db.query(Booking).filter(Booking.reference == reference).first():
            raise ConflictError("Booking reference already exists")

        trip = self.db.query(Trip).options(
            joinedload(Trip.bus).selectinload(Bus.seats)
        ).filter(Trip.id == data.trip_id).first()
        if not trip or not trip.is_available:
            raise ValueError("Invalid or unavailable trip")

        seat_numbers = [p.seat for p in data.passengers]
        if len(set(seat_numbers)) != len(seat_numbers):
            raise ValueError("Duplicate seat numbers in booking")

        available = {seat.number for seat in trip.bus.seats if seat.is_available}
        for seat_number in seat_numbers:
            if seat_number not in available:
                raise ValueError(f"Seat {seat_number} is unavailable or invalid")

        booking = Booking(
            reference=reference or self._generate_booking_reference(),
            status=BookingStatus.CONFIRMED.value,
            trip_id=trip.id,
            bus_id=trip.bus_id,
            from_location=trip.from_location,
            to_location=trip.to_location,
            date=trip.date.isoformat(),
            time=trip.departure_time,
            operator=trip.bus.operator,
            email=data.email,
            phone=data.phone,
            total_amount=len(data.passengers) * trip.price,
            booking_date=datetime.now(timezone.utc).date().isoformat(),
            payment_reference=data.payment_reference,
            created_by=created_by or data.email,
            modified_by=created_by or data.email,
            passengers=self._passenger_rows(data.passengers)
        )

        with transaction(self.db):
            self.db.add(booking)
            self._reserve_seats(trip.bus_id, seat_numbers)

        logger.info("Booking %s created for trip %s (%d seats)", booking.reference, trip.id, len(seat_numbers))
        return self.get_booking(booking.reference)

    def update_booking(self, reference: str, data: BookingUpdate, user: User) -> Optional[Booking]:
        """
        Partially update a booking.

        Status may only leave `confirmed`; moving to `cancelled` releases every
        seat the booking holds. A new passenger list is diffed against the
        current one: dropped seats are released, added seats reserved.
        """
        booking = self.get_booking(reference)
        if not booking:
            return None

        changes = data.dict(exclude_unset=True, exclude_none=True)
        new_status = changes.get("status", booking.status)

        if new_status != booking.status and booking.status != BookingStatus.CONFIRMED.value:
            raise ConflictError(f"Cannot change status of a {booking.status} booking")

        if "payment_reference" in changes:
            taken = self.db.query(Booking).filter(
                Booking.payment_reference == changes["payment_reference"],
                Booking.reference != booking.reference
            ).first()
            if taken:
                raise ConflictError("Payment reference already used")

        current_seats = [p.seat for p in booking.passengers]
        seats_to_free: List[str] = []
        seats_to_reserve: List[str] = []

        if data.passengers is not None:
            if booking.status != BookingStatus.CONFIRMED.value or new_status != BookingStatus.CONFIRMED.value:
                raise ConflictError("Passengers can only be changed on a confirmed booking")

            new_seats = [p.seat for p in data.passengers]
            if len(set(new_seats)) != len(new_seats):
                raise ValueError("Duplicate seat numbers in booking")

            seats_to_free = [seat for seat in current_seats if seat not in new_seats]
            seats_to_reserve = [seat for seat in new_seats if seat not in current_seats]

            if seats_to_reserve:
                bus_seats = {seat.number: seat for seat in booking.trip.bus.seats}
                invalid = [seat for seat in seats_to_reserve if seat not in bus_seats]
                if invalid:
                    raise ValueError(f"Invalid seat numbers: {', '.join(invalid)}")
                taken = [seat for seat in seats_to_reserve if not bus_seats[seat].is_available]
                if taken:
                    raise ConflictError(f"Seats {', '.join(taken)} are not available")

        with transaction(self.db):
            if data.passengers is not None:
                self._release_seats(booking.bus_id, seats_to_free)
                self._reserve_seats(booking.bus_id, seats_to_reserve)
                booking.passengers = self._passenger_rows(data.passengers)
                if "total_amount" not in changes:
                    booking.total_amount = len(data.passengers) * booking.trip.price

            if new_status == BookingStatus.CANCELLED.value and booking.status != BookingStatus.CANCELLED.value:
                self._release_seats(booking.bus_id, current_seats)

            booking.status = new_status
            for field in ("email", "phone", "payment_reference", "total_amount"):
                if field in changes:
                    setattr(booking, field, changes[field])
            booking.modified_by = user.email

        logger.info("Booking %s updated by %s", reference, user.email)
        self.db.expire_all()
        return self.get_booking(reference)

    def delete_booking(self, reference: str) -> bool:
        """
        Delete a booking and give its seats back; completed bookings are kept.

        Seats are only released for a booking that still holds them. A cancelled
        booking gave its seats back when it was cancelled, and they may belong to
        a newer booking by now, so deleting it leaves the seat flags alone rather
        than releasing unconditionally.
        """
        booking = self.db.query(Booking).options(
            selectinload(Booking.passengers)
        ).filter(Booking.reference == reference).first()
        if not booking:
            return False

        if booking.status == BookingStatus.COMPLETED.value:
            raise ConflictError("Cannot delete completed booking")

        seat_numbers = [p.seat for p in booking.passengers]
        with transaction(self.db):
            # a cancelled booking released its seats already; they may be re-booked
            if booking.status != BookingStatus.CANCELLED.value:
                self._release_seats(booking.bus_id, seat_numbers)
            self.db.delete(booking)

        logger.info("Booking %s deleted", reference)
        return True

def serialize_passenger(passenger: Passenger) -> dict:
    return {
        "id": passenger.id,
        "name": passenger.name,
        "seat": passenger.seat,
        "age": passenger.age,
        "gender": passenger.gender,
    }

def serialize_booking(booking: Booking, include_trip: bool = True) -> dict:
    data = {
        "reference": booking.reference,
        "status": booking.status,
        "tripId": booking.trip_id,
        "busId": booking.bus_id,
        "from": booking.from_location,
        "to": booking.to_location,
        "date": booking.date,
        "time": booking.time,
        "operator": booking.operator,
        "passengers": [serialize_passenger(p) for p in booking.passengers],
        "email": booking.email,
        "phone": booking.phone,
        "totalAmount": booking.total_amount,
        "bookingDate": booking.booking_date,
        "paymentReference": booking.payment_reference,
        "createdAt": booking.created_at,
    }
    if include_trip:
        data["trip"] = serialize_trip(booking.trip)
    return data

def serialize_booking_summary(booking: Booking) -> dict:
    return {
        "reference": booking.reference,
        "paymentReference": booking.payment_reference,
        "email": booking.email,
        "phone": booking.phone,
        "status": booking.status,
    }
