import logging
from sqlalchemy.orm import Session, selectinload
from typing import List, Optional, Tuple

from src.models import Bus, BusType, Seat, Trip, Booking, User
from src.buses.schemas import BusTypeCreate, BusTypeUpdate, BusCreate, BusUpdate
from src.buses.layout import validate_seat_layout, layout_seat_numbers
from src.database import transaction
from src.exceptions import ConflictError

logger = logging.getLogger(__name__)

class BusTypeService:
    @staticmethod
    def get_bus_types(db: Session) -> List[BusType]:
        return db.query(BusType).order_by(BusType.created_at.desc()).all()

    @staticmethod
    def get_bus_type_by_id(db: Session, bus_type_id: str) -> Optional[BusType]:
        return db.query(BusType).filter(BusType.id == bus_type_id).first()

    @staticmethod
    def get_bus_type_by_name(db: Session, name: str) -> Optional[BusType]:
        return db.query(BusType).filter(BusType.name == name).first()

    @staticmethod
    def create_bus_type(db: Session, data: BusTypeCreate, user: User) -> BusType:
        if BusTypeService.get_bus_type_by_name(db, data.name):
            raise ConflictError("Bus type already exists")

        bus_type = BusType(
            name=data.name,
            seats=data.seats,
            created_by=user.email,
            modified_by=user.email
        )
        with transaction(db):
            db.add(bus_type)
        db.refresh(bus_type)
        return bus_type

    @staticmethod
    def update_bus_type(db: Session, bus_type_id: str, data: BusTypeUpdate, user: User) -> Optional[BusType]:
        """Update a bus type; a rename is applied to every bus referencing it"""
        bus_type = BusTypeService.get_bus_type_by_id(db, bus_type_id)
        if not bus_type:
            return None

        old_name = bus_type.name
        new_name = data.name.strip() if data.name else None
        if new_name and new_name != old_name:
            if BusTypeService.get_bus_type_by_name(db, new_name):
                raise ConflictError("Bus type name already exists")

        with transaction(db):
            if new_name and new_name != old_name:
                bus_type.name = new_name
                renamed = db.query(Bus).filter(Bus.bus_type == old_name).update(
                    {Bus.bus_type: new_name}, synchronize_session=False
                )
                if renamed:
                    logger.info("Renamed bus type %s to %s on %d buses", old_name, new_name, renamed)
            if data.seats is not None:
                bus_type.seats = data.seats
            bus_type.modified_by = user.email

        db.refresh(bus_type)
        return bus_type

    @staticmethod
    def delete_bus_type(db: Session, bus_type_id: str) -> bool:
        bus_type = BusTypeService.get_bus_type_by_id(db, bus_type_id)
        if not bus_type:
            return False

        in_use = db.query(Bus).filter(Bus.bus_type == bus_type.name).count()
        if in_use > 0:
            raise ConflictError("Cannot delete bus type that is being used by existing buses")

        with transaction(db):
            db.delete(bus_type)
        return True

class BusService:
    @staticmethod
    def get_bus_by_id(db: Session, bus_id: str) -> Optional[Bus]:
        return db.query(Bus).options(selectinload(Bus.seats)).filter(Bus.id == bus_id).first()

    @staticmethod
    def get_buses(
        db: Session,
        operator: Optional[str] = None,
        bus_type: Optional[str] = None,
        limit: int = 10,
        offset: int = 0
    ) -> Tuple[List[Bus], int]:
        """Get buses filtered by operator substring and exact bus type"""
        query = db.query(Bus)

        if operator:
            query = query.filter(Bus.operator.ilike(f"%{operator}%"))
        if bus_type:
            query = query.filter(Bus.bus_type == bus_type)

        total = query.count()
        buses = query.options(selectinload(Bus.seats)).order_by(
            Bus.created_at.desc()
        ).offset(offset).limit(limit).all()
        return buses, total

    @staticmethod
    def _require_bus_type(db: Session, name: str) -> BusType:
        bus_type = BusTypeService.get_bus_type_by_name(db, name)
        if not bus_type:
            raise ValueError("Invalid bus type")
        return bus_type

    @staticmethod
    def create_bus(db: Session, data: BusCreate, user: User) -> Bus:
        """Create a bus and one available seat per numbered cell of its layout"""
        bus_type = BusService._require_bus_type(db, data.bus_type)
        layout = data.seat_layout
        seat_numbers = validate_seat_layout(layout.rows, layout.columns, layout.arrangement, bus_type.seats)

        bus = Bus(
            operator=data.operator,
            bus_type=bus_type.name,
            seat_layout={"rows": layout.rows, "columns": layout.columns, "arrangement": layout.arrangement},
            amenities=list(data.amenities),
            rating=data.rating,
            created_by=user.email,
            modified_by=user.email,
            seats=[Seat(number=number, is_available=True) for number in seat_numbers]
        )
        with transaction(db):
            db.add(bus)
        db.refresh(bus)
        logger.info("Bus %s created with %d seats", bus.id, len(seat_numbers))
        return bus

    @staticmethod
    def has_open_bookings(db: Session, bus_id: str) -> bool:
        return db.query(Booking).filter(
            Booking.bus_id == bus_id,
            Booking.status != "cancelled"
        ).count() > 0

    @staticmethod
    def update_bus(db: Session, bus_id: str, data: BusUpdate, user: User) -> Optional[Bus]:
        """
        Partially update a bus.

        A new seat layout is checked against the effective bus type (the new one
        if supplied) and replaces every seat row; this is refused while the bus
        still has non-cancelled bookings, since their seats would vanish.
        """
        bus = BusService.get_bus_by_id(db, bus_id)
        if not bus:
            return None

        bus_type = None
        if data.bus_type:
            bus_type = BusService._require_bus_type(db, data.bus_type)

        seat_numbers = None
        if data.seat_layout is not None:
            effective_type = bus_type or BusService._require_bus_type(db, bus.bus_type)
            layout = data.seat_layout
            seat_numbers = validate_seat_layout(layout.rows, layout.columns, layout.arrangement, effective_type.seats)
            if BusService.has_open_bookings(db, bus.id):
                raise ConflictError("Cannot change seat layout of a bus with active bookings")
        elif bus_type is not None:
            current_seats = len(layout_seat_numbers(bus.seat_layout["arrangement"]))
            if current_seats != bus_type.seats:
                raise ValueError(f"Seat count ({current_seats}) does not match bus type ({bus_type.seats})")

        with transaction(db):
            if data.operator:
                bus.operator = data.operator
            if bus_type is not None:
                bus.bus_type = bus_type.name
            if data.amenities is not None:
                bus.amenities = list(data.amenities)
            if data.rating is not None:
                bus.rating = data.rating
            if seat_numbers is not None:
                layout = data.seat_layout
                bus.seat_layout = {"rows": layout.rows, "columns": layout.columns, "arrangement": layout.arrangement}
                # old rows must be gone before the (bus_id, number) pairs are reused
                bus.seats.clear()
                db.flush()
                bus.seats.extend(Seat(number=number, is_available=True) for number in seat_numbers)
            bus.modified_by = user.email

        db.refresh(bus)
        return bus

    @staticmethod
    def delete_bus(db: Session, bus_id: str) -> bool:
        bus = db.query(Bus).filter(Bus.id == bus_id).first()
        if not bus:
            return False

        active_trips = db.query(Trip).filter(Trip.bus_id == bus_id, Trip.is_available.is_(True)).count()
        active_bookings = db.query(Booking).filter(
            Booking.bus_id == bus_id,
            Booking.status.in_(["confirmed", "completed"])
        ).count()
        if active_trips > 0 or active_bookings > 0:
            raise ConflictError("Cannot delete bus with active trips or bookings")

        with transaction(db):
            db.delete(bus)
        logger.info("Bus %s deleted", bus_id)
        return True

def serialize_seat(seat: Seat) -> dict:
    return {
        "id": seat.id,
        "number": seat.number,
        "isAvailable": seat.is_available,
    }

def serialize_bus_type(bus_type: BusType) -> dict:
    return {
        "id": bus_type.id,
        "name": bus_type.name,
        "seats": bus_type.seats,
    }

def serialize_bus(bus: Bus) -> dict:
    return {
        "id": bus.id,
        "operator": bus.operator,
        "busType": bus.bus_type,
        "seatLayout": bus.seat_layout,
        "seats": [serialize_seat(seat) for seat in bus.seats],
        "amenities": bus.amenities or [],
        "rating": bus.rating,
    }
