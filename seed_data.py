#!/usr/bin/env python3

from datetime import datetime, timedelta, timezone

from sqlalchemy import text

from src.auth.utils import get_password_hash
from src.buses.layout import validate_seat_layout
from src.database import Base, SessionLocal, engine
from src.models import User, BusType, Bus, Seat, Trip

ADMIN_USERS = [
    {
        "first_name": "Admin",
        "last_name": "User",
        "email": "admin@busline.com",
        "password": "Admin123!",
        "phone": "+2348012345678",
    },
    {
        "first_name": "Jane",
        "last_name": "Doe",
        "email": "jane@busline.com",
        "password": "Demo1234!",
        "phone": "+2348098765432",
    },
]

BUS_TYPES = [
    {"name": "48 Seater", "seats": 48},
    {"name": "32 Seater", "seats": 32},
]

def build_arrangement(rows: int, seats_per_side: int = 2):
    """Rows of `seats_per_side` seats either side of an aisle, numbered 01A, 01B, ..."""
    letters = "ABCDEFGH"
    arrangement = []
    for row in range(1, rows + 1):
        left = [f"{row:02d}{letters[i]}" for i in range(seats_per_side)]
        right = [f"{row:02d}{letters[seats_per_side + i]}" for i in range(seats_per_side)]
        arrangement.append(left + [""] + right)
    return arrangement

def create_admin_users(db):
    print("🔧 Creating admin users...")
    created = 0
    for data in ADMIN_USERS:
        if db.query(User).filter(User.email == data["email"]).first():
            print(f"✅ {data['email']} already exists, skipping...")
            continue
        db.add(User(
            first_name=data["first_name"],
            last_name=data["last_name"],
            email=data["email"],
            password=get_password_hash(data["password"]),
            phone=data["phone"],
            is_active=True,
            created_by="seed",
            modified_by="seed"
        ))
        created += 1
    db.commit()
    print(f"✅ Created {created} admin users")

def create_bus_types(db):
    print("🚌 Creating bus types...")
    for data in BUS_TYPES:
        if not db.query(BusType).filter(BusType.name == data["name"]).first():
            db.add(BusType(name=data["name"], seats=data["seats"], created_by="seed", modified_by="seed"))
    db.commit()

def create_fleet_and_trips(db):
    print("🗓️  Creating a bus and its trips...")
    if db.query(Bus).filter(Bus.operator == "Kadzai Express").first():
        print("✅ Fleet already seeded, skipping...")
        return

    bus_type = db.query(BusType).filter(BusType.name == "32 Seater").first()
    arrangement = build_arrangement(8)
    seat_numbers = validate_seat_layout(8, 5, arrangement, bus_type.seats)

    bus = Bus(
        operator="Kadzai Express",
        bus_type=bus_type.name,
        seat_layout={"rows": 8, "columns": 5, "arrangement": arrangement},
        amenities=["AC", "WiFi", "USB Charging"],
        rating=4.5,
        created_by="seed",
        modified_by="seed",
        seats=[Seat(number=number, is_available=True) for number in seat_numbers]
    )
    db.add(bus)
    db.flush()

    today = datetime.now(timezone.utc).date()
    schedule = [
        ("Lagos", "Abuja", "06:00", "16:30", "10h 30m", 25000.0),
        ("Abuja", "Lagos", "18:00", "04:30", "10h 30m", 25000.0),
    ]
    for day in range(1, 4):
        # one bus, one direction per day, so the windows never overlap
        origin, destination, departure, arrival, duration, price = schedule[day % 2]
        db.add(Trip(
            bus_id=bus.id,
            from_location=origin,
            to_location=destination,
            date=today + timedelta(days=day),
            departure_time=departure,
            arrival_time=arrival,
            duration=duration,
            price=price,
            is_available=True,
            created_by="seed",
            modified_by="seed"
        ))
    db.commit()
    print(f"✅ Created bus {bus.id} with {len(seat_numbers)} seats and 3 trips")

def verify_database_connection():
    """Verify database connection"""
    print("🔌 Verifying database connection...")

    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1")).fetchone()
        print("✅ Database connection successful")
        return True
    except Exception as e:
        print(f"❌ Database connection failed: {e}")
        return False

def main():
    print("🚀 Seeding bus ticketing data...")
    print("=" * 50)

    if not verify_database_connection():
        print("❌ Aborting due to database connection issues")
        return False

    Base.metadata.create_all(bind=engine)
    db = SessionLocal()

    try:
        create_admin_users(db)
        create_bus_types(db)
        create_fleet_and_trips(db)

        print("=" * 50)
        print("✅ Seeding completed successfully!")
        print()
        print("🔑 Admin Login Credentials:")
        for data in ADMIN_USERS:
            print(f"   • {data['email']} / {data['password']}")
        print()
        print("🌐 API Documentation: http://localhost:8000/docs")
        return True

    except Exception as e:
        print(f"❌ Error during seeding: {e}")
        db.rollback()
        raise
    finally:
        db.close()

if __name__ == "__main__":
    main()
