import uuid

from sqlalchemy import Column, Integer, String, Boolean, DateTime, Date, Float, ForeignKey, JSON, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from src.database import Base

def generate_uuid() -> str:
    return str(uuid.uuid4())

# ================================
# Admin Users & Sessions
# ================================
class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password = Column(String(255), nullable=False)
    phone = Column(String(20), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_by = Column(String(255))
    modified_by = Column(String(255))
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    sessions = relationship("Session", back_populates="user", cascade="all, delete-orphan")

class Session(Base):
    __tablename__ = "sessions"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    token = Column(String(128), unique=True, nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    expires_at = Column(DateTime(timezone=True), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    user = relationship("User", back_populates="sessions")

# ================================
# Fleet: Bus Types, Buses, Seats
# ================================
class BusType(Base):
    __tablename__ = "bus_types"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(100), unique=True, nullable=False, index=True)
    seats = Column(Integer, nullable=False)
    created_by = Column(String(255))
    modified_by = Column(String(255))
    created_at = Column(DateTime(timezone=True), server_default=func.now())

class Bus(Base):
    __tablename__ = "buses"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    operator = Column(String(255), nullable=False, index=True)
    bus_type = Column(String(100), nullable=False, index=True)
    seat_layout = Column(JSON, nullable=False)
    amenities = Column(JSON, default=list)
    rating = Column(Float, default=0.0)
    created_by = Column(String(255))
    modified_by = Column(String(255))
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    seats = relationship("Seat", back_populates="bus", cascade="all, delete-orphan", order_by="Seat.number")
    trips = relationship("Trip", back_populates="bus", cascade="all, delete-orphan")

class Seat(Base):
    __tablename__ = "seats"
    __table_args__ = (UniqueConstraint("bus_id", "number", name="uq_seats_bus_number"),)

    id = Column(String(36), primary_key=True, default=generate_uuid)
    bus_id = Column(String(36), ForeignKey("buses.id", ondelete="CASCADE"), nullable=False, index=True)
    number = Column(String(10), nullable=False)
    is_available = Column(Boolean, default=True, nullable=False, index=True)

    # Relationships
    bus = relationship("Bus", back_populates="seats")

# ================================
# Trip Catalog
# ================================
class Trip(Base):
    __tablename__ = "trips"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    bus_id = Column(String(36), ForeignKey("buses.id", ondelete="CASCADE"), nullable=False, index=True)
    from_location = Column("from", String(255), nullable=False, index=True)
    to_location = Column("to", String(255), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    departure_time = Column(String(5), nullable=False)
    arrival_time = Column(String(5), nullable=False)
    duration = Column(String(20), nullable=False)
    price = Column(Float, nullable=False)
    is_available = Column(Boolean, default=True, nullable=False, index=True)
    created_by = Column(String(255))
    modified_by = Column(String(255))
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    bus = relationship("Bus", back_populates="trips")
    bookings = relationship("Booking", back_populates="trip", cascade="all, delete-orphan")

# ================================
# Booking Ledger
# ================================
class Booking(Base):
    __tablename__ = "bookings"

    reference = Column(String(20), primary_key=True)
    status = Column(String(20), default="confirmed", nullable=False, index=True)
    trip_id = Column(String(36), ForeignKey("trips.id", ondelete="CASCADE"), nullable=False, index=True)
    bus_id = Column(String(36), nullable=False, index=True)
    from_location = Column("from", String(255), nullable=False)
    to_location = Column("to", String(255), nullable=False)
    date = Column(String(10), nullable=False)
    time = Column(String(5), nullable=False)
    operator = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, index=True)
    phone = Column(String(20), nullable=False)
    total_amount = Column(Float, nullable=False)
    booking_date = Column(String(10), nullable=False)
    payment_reference = Column(String(100), unique=True, index=True)
    created_by = Column(String(255))
    modified_by = Column(String(255))
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    # Relationships
    trip = relationship("Trip", back_populates="bookings")
    passengers = relationship("Passenger", back_populates="booking", cascade="all, delete-orphan")

class Passenger(Base):
    __tablename__ = "passengers"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    booking_reference = Column(String(20), ForeignKey("bookings.reference", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    seat = Column(String(10), nullable=False)
    age = Column(Integer, nullable=False)
    gender = Column(String(10), nullable=False)

    # Relationships
    booking = relationship("Booking", back_populates="passengers")
