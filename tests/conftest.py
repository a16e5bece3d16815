import os
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/15")
os.environ.setdefault("PAYSTACK_SECRET_KEY", "sk_test_webhook_secret")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from src.auth.service import AuthService  # noqa: E402
from src.auth.utils import get_password_hash  # noqa: E402
from src.buses.layout import layout_seat_numbers  # noqa: E402
from src.cache import get_cache  # noqa: E402
from src.database import Base, get_db  # noqa: E402
from src.main import app as fastapi_app  # noqa: E402
from src.models import User, BusType, Bus, Seat, Trip  # noqa: E402

ADMIN_EMAIL = "admin@busline.com"
ADMIN_PASSWORD = "Admin123!"

# bcrypt is slow on purpose; hash once per session
ADMIN_PASSWORD_HASH = get_password_hash(ADMIN_PASSWORD)


class FakeRedis:
    """
    In-memory stand-in for the handful of redis-py calls the app makes.
    TTLs are recorded but never expire during a test.
    """

    def __init__(self):
        self.store: Dict[str, str] = {}
        self.ttls: Dict[str, int] = {}

    def get(self, key: str) -> Optional[str]:
        return self.store.get(key)

    def set(self, key: str, value: str, ex: Optional[int] = None, nx: bool = False):
        if nx and key in self.store:
            return None
        self.store[key] = value
        if ex is not None:
            self.ttls[key] = ex
        return True

    def setex(self, key: str, ttl: int, value: str):
        self.store[key] = value
        self.ttls[key] = ttl
        return True

    def ttl(self, key: str) -> int:
        return self.ttls.get(key, -1)

    def ping(self) -> bool:
        return True

    def close(self):
        pass


def future_date(days: int = 7):
    return datetime.now(timezone.utc).date() + timedelta(days=days)


def small_layout(rows: int = 2) -> dict:
    """Two seats either side of an aisle per row: 01A 01B _ 01C 01D"""
    arrangement = [
        [f"{row:02d}A", f"{row:02d}B", "", f"{row:02d}C", f"{row:02d}D"]
        for row in range(1, rows + 1)
    ]
    return {"rows": rows, "columns": 5, "arrangement": arrangement}


@pytest.fixture()
def db_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db(db_engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def fake_cache() -> FakeRedis:
    return FakeRedis()


@pytest.fixture()
def client(db_engine, fake_cache):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)

    def override_get_db():
        session = TestingSessionLocal()
        try:
            yield session
        finally:
            session.close()

    fastapi_app.dependency_overrides[get_db] = override_get_db
    fastapi_app.dependency_overrides[get_cache] = lambda: fake_cache
    try:
        yield TestClient(fastapi_app)
    finally:
        fastapi_app.dependency_overrides.clear()


@pytest.fixture()
def admin_user(db) -> User:
    user = User(
        first_name="Admin",
        last_name="User",
        email=ADMIN_EMAIL,
        password=ADMIN_PASSWORD_HASH,
        phone="+2348012345678",
        is_active=True,
        created_by="seed",
        modified_by="seed",
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture()
def admin_headers(db, admin_user) -> Dict[str, str]:
    session = AuthService.create_session(db, admin_user)
    return {"Authorization": f"Bearer {session.token}"}


@pytest.fixture()
def make_bus(db):
    """Create a bus type plus a bus whose seats match the given layout"""

    def _make(operator: str = "Kadzai Express", layout: Optional[dict] = None, type_name: Optional[str] = None) -> Bus:
        layout = layout or small_layout()
        seat_numbers = layout_seat_numbers(layout["arrangement"])
        type_name = type_name or f"{len(seat_numbers)} Seater"
        bus_type = db.query(BusType).filter(BusType.name == type_name).first()
        if bus_type is None:
            bus_type = BusType(name=type_name, seats=len(seat_numbers))
            db.add(bus_type)
        bus = Bus(
            operator=operator,
            bus_type=type_name,
            seat_layout=layout,
            amenities=["AC"],
            rating=4.0,
            seats=[Seat(number=number, is_available=True) for number in seat_numbers],
        )
        db.add(bus)
        db.commit()
        db.refresh(bus)
        return bus

    return _make


@pytest.fixture()
def make_trip(db):
    def _make(
        bus: Bus,
        departure: str = "08:00",
        arrival: str = "10:00",
        days_ahead: int = 7,
        price: float = 5000.0,
        origin: str = "Lagos",
        destination: str = "Ibadan",
        is_available: bool = True,
    ) -> Trip:
        trip = Trip(
            bus_id=bus.id,
            from_location=origin,
            to_location=destination,
            date=future_date(days_ahead),
            departure_time=departure,
            arrival_time=arrival,
            duration="2h 0m",
            price=price,
            is_available=is_available,
        )
        db.add(trip)
        db.commit()
        db.refresh(trip)
        return trip

    return _make


@pytest.fixture()
def unavailable_seats(db):
    """Sorted seat numbers currently marked unavailable on a bus"""

    def _unavailable(bus_id: str) -> List[str]:
        db.expire_all()
        seats = db.query(Seat).filter(Seat.bus_id == bus_id, Seat.is_available.is_(False)).all()
        return sorted(seat.number for seat in seats)

    return _unavailable
