from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import Optional
from datetime import date

from src.database import get_db
from src.auth.dependencies import verify_admin
from src.trips.schemas import TripCreate, TripUpdate
from src.trips.service import TripService, serialize_trip
from src.exceptions import ConflictError, internal_error
from src.models import User

router = APIRouter()

def _search(db: Session, from_location, to_location, trip_date, limit, offset) -> dict:
    trips, total = TripService(db).list_trips(
        from_location=from_location,
        to_location=to_location,
        trip_date=trip_date,
        limit=limit,
        offset=offset
    )
    return {
        "data": [serialize_trip(trip) for trip in trips],
        "total": total
    }

# Public Endpoints
@router.get("/search")
def search_trips(
    from_location: Optional[str] = Query(None, alias="from", description="Origin (substring, case-insensitive)"),
    to_location: Optional[str] = Query(None, alias="to", description="Destination (substring, case-insensitive)"),
    trip_date: Optional[date] = Query(None, alias="date", description="Travel date (YYYY-MM-DD)"),
    limit: int = Query(10, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db)
):
    """Search trips with their bus and seat availability"""
    return _search(db, from_location, to_location, trip_date, limit, offset)

@router.get("/public/{trip_id}")
def get_public_trip(trip_id: str, db: Session = Depends(get_db)):
    """Trip detail with the seat snapshot used for seat selection"""
    trip = TripService(db).get_trip(trip_id)
    if not trip:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Trip not found")
    return serialize_trip(trip)

# Admin Endpoints
@router.get("")
def list_trips(
    from_location: Optional[str] = Query(None, alias="from"),
    to_location: Optional[str] = Query(None, alias="to"),
    trip_date: Optional[date] = Query(None, alias="date"),
    limit: int = Query(10, ge=1, le=100, description="Number of trips to return"),
    offset: int = Query(0, ge=0, description="Number of trips to skip"),
    admin_user: User = Depends(verify_admin),
    db: Session = Depends(get_db)
):
    return _search(db, from_location, to_location, trip_date, limit, offset)

@router.post("", status_code=status.HTTP_201_CREATED)
def create_trip(
    data: TripCreate,
    admin_user: User = Depends(verify_admin),
    db: Session = Depends(get_db)
):
    """Schedule a trip; overlapping trips on the same bus are rejected"""
    try:
        trip = TripService(db).create_trip(data, admin_user)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception:
        raise internal_error("create trip")
    return serialize_trip(trip)

@router.get("/{trip_id}")
def get_trip(
    trip_id: str,
    admin_user: User = Depends(verify_admin),
    db: Session = Depends(get_db)
):
    trip = TripService(db).get_trip(trip_id)
    if not trip:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Trip not found")
    return serialize_trip(trip)

@router.patch("/{trip_id}")
def update_trip(
    trip_id: str,
    data: TripUpdate,
    admin_user: User = Depends(verify_admin),
    db: Session = Depends(get_db)
):
    try:
        trip = TripService(db).update_trip(trip_id, data, admin_user)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception:
        raise internal_error("update trip")

    if not trip:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Trip not found")
    return serialize_trip(trip)

@router.delete("/{trip_id}")
def delete_trip(
    trip_id: str,
    admin_user: User = Depends(verify_admin),
    db: Session = Depends(get_db)
):
    try:
        deleted = TripService(db).delete_trip(trip_id)
    except ConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except Exception:
        raise internal_error("delete trip")

    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Trip not found")
    return {"message": "Trip deleted"}
