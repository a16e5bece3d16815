from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import Optional

from src.database import get_db
from src.auth.dependencies import verify_admin
from src.bookings.schemas import BookingCreate, BookingUpdate
from src.bookings.booking_service import BookingService, serialize_booking, serialize_booking_summary
from src.exceptions import ConflictError, internal_error
from src.models import User

router = APIRouter()

@router.get("")
def list_bookings(
    email: Optional[str] = Query(None, description="Filter by contact e-mail"),
    booking_status: Optional[str] = Query(None, alias="status", description="Filter by booking status"),
    limit: int = Query(10, ge=1, le=100, description="Number of bookings to return"),
    offset: int = Query(0, ge=0, description="Number of bookings to skip"),
    admin_user: User = Depends(verify_admin),
    db: Session = Depends(get_db)
):
    """List bookings, newest first"""
    try:
        bookings, total = BookingService(db).list_bookings(
            email=email, status=booking_status, limit=limit, offset=offset
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return {
        "data": [serialize_booking(booking) for booking in bookings],
        "total": total
    }

@router.post("")
def create_booking(request: BookingCreate, db: Session = Depends(get_db)):
    """Book seats on a trip"""
    try:
        booking = BookingService(db).create_booking(request)
    except ValueError as e:
        # seat and payment-reference conflicts are reported as 400 here
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception:
        raise internal_error("create booking")

    return serialize_booking(booking)

@router.get("/check-payment")
def check_payment(
    reference: Optional[str] = Query(None, description="Booking or payment reference"),
    payment_reference: Optional[str] = Query(None, alias="paymentReference", description="Payment reference"),
    db: Session = Depends(get_db)
):
    """Tell whether a booking exists for either reference"""
    if not reference and not payment_reference:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Reference or paymentReference is required"
        )

    booking = BookingService(db).find_existing(reference=reference, payment_reference=payment_reference)
    return {
        "exists": booking is not None,
        "booking": serialize_booking_summary(booking) if booking else None
    }

@router.get("/{reference}")
def get_booking(reference: str, db: Session = Depends(get_db)):
    """Get a booking by payment reference or booking reference"""
    booking = BookingService(db).find_booking(reference)
    if not booking:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Booking not found"
        )
    return serialize_booking(booking)

@router.patch("/{reference}")
def update_booking(
    reference: str,
    request: BookingUpdate,
    admin_user: User = Depends(verify_admin),
    db: Session = Depends(get_db)
):
    """Update booking status, contact details, passengers or total"""
    try:
        booking = BookingService(db).update_booking(reference, request, admin_user)
    except ConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception:
        raise internal_error("update booking")

    if not booking:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Booking not found"
        )
    return serialize_booking(booking)

@router.delete("/{reference}")
def delete_booking(
    reference: str,
    admin_user: User = Depends(verify_admin),
    db: Session = Depends(get_db)
):
    """Delete a booking and release its seats"""
    try:
        deleted = BookingService(db).delete_booking(reference)
    except ConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except Exception:
        raise internal_error("delete booking")

    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Booking not found"
        )
    return {"message": "Booking deleted"}
