import hashlib
import hmac
import json
import logging
from typing import Optional

import redis
from pydantic import ValidationError
from sqlalchemy.orm import Session

from src.bookings.booking_service import BookingService
from src.bookings.schemas import BookingCreate
from src.config import settings
from src.payments.idempotency import WebhookIdempotencyGuard, dedup_keys
from src.payments.schemas import WebhookMetadata

logger = logging.getLogger(__name__)

HANDLED_EVENT = "charge.success"

class WebhookProcessingError(Exception):
    """A claimed delivery could not be turned into a booking"""

def compute_signature(secret_key: str, raw_body: bytes) -> str:
    return hmac.new(secret_key.encode(), raw_body, hashlib.sha512).hexdigest()

def verify_signature(secret_key: str, raw_body: bytes, signature: Optional[str]) -> bool:
    if not signature:
        return False
    return hmac.compare_digest(compute_signature(secret_key, raw_body), signature)

def _validation_summary(exc: ValidationError) -> str:
    first = exc.errors()[0]
    field = ".".join(str(part) for part in first.get("loc", ()))
    message = str(first.get("msg", "invalid"))
    if message.startswith("Value error, "):
        message = message[len("Value error, "):]
    return f"Invalid metadata ({field}): {message}" if field else f"Invalid metadata: {message}"

class PaystackWebhookService:
    """
    Turns signed charge.success deliveries into bookings, at most once.

    Order of work:
    1. signature check over the raw body
    2. ignore anything that is not a successful charge
    3. short-circuit deliveries whose dedup keys already exist
    4. claim the keys (before any further validation)
    5. validate metadata and amount
    6. reuse an existing booking for the same references
    7. create the booking
    A failure after step 4 leaves the claim in place.
    """

    def __init__(self, db: Session, cache: redis.Redis, secret_key: Optional[str] = None):
        self.db = db
        self.secret_key = secret_key or settings.PAYSTACK_SECRET_KEY
        self.guard = WebhookIdempotencyGuard(cache)
        self.booking_service = BookingService(db)

    def handle(self, raw_body: bytes, signature: Optional[str]) -> dict:
        if not signature:
            raise ValueError("Missing signature")
        if not verify_signature(self.secret_key, raw_body, signature):
            logger.warning("Rejected webhook with invalid signature")
            raise ValueError("Invalid signature")

        try:
            event = json.loads(raw_body)
        except ValueError:
            raise ValueError("Invalid JSON payload")
        if not isinstance(event, dict):
            raise ValueError("Invalid JSON payload")

        data = event.get("data") or {}
        if not isinstance(data, dict):
            raise ValueError("Invalid JSON payload")
        if event.get("event") != HANDLED_EVENT or data.get("status") != "success":
            logger.info("Webhook event not handled: %s (%s)", event.get("event"), data.get("status"))
            return {"message": "Event not handled"}

        gateway_reference = data.get("reference")
        if not gateway_reference:
            raise ValueError("Missing payment reference")
        raw_metadata = data.get("metadata") if isinstance(data.get("metadata"), dict) else {}
        booking_reference = raw_metadata.get("bookingReference")

        keys = dedup_keys(gateway_reference, booking_reference)
        duplicate = {
            "message": "Webhook already processed (duplicate prevention)",
            "bookingReference": booking_reference,
            "paystackReference": gateway_reference,
            "processed": True,
        }
        if self.guard.already_processed(keys):
            logger.info("Webhook already processed, keys: %s", keys)
            return duplicate
        if not self.guard.claim(keys, gateway_reference, booking_reference):
            return duplicate

        booking_data = self._booking_from_event(data, gateway_reference)

        existing = self.booking_service.find_existing(
            reference=booking_reference, payment_reference=gateway_reference
        )
        if existing:
            logger.info("Booking %s already exists for payment %s", existing.reference, gateway_reference)
            return {
                "message": "Booking already processed",
                "bookingReference": existing.reference,
            }

        try:
            booking = self.booking_service.create_booking(
                booking_data,
                reference=booking_reference,
                created_by=booking_data.email
            )
        except ValueError as e:
            logger.error("Failed to create booking %s from payment %s: %s", booking_reference, gateway_reference, e)
            raise WebhookProcessingError(f"Failed to create booking: {e}")

        logger.info("Booking %s created from payment %s", booking.reference, gateway_reference)
        return {
            "message": "Webhook processed successfully",
            "bookingReference": booking.reference,
        }

    def _booking_from_event(self, data: dict, gateway_reference: str) -> BookingCreate:
        """Validate metadata and amount, returning the booking request they describe"""
        if not isinstance(data.get("metadata"), dict):
            raise ValueError("No metadata")

        try:
            metadata = WebhookMetadata(**data["metadata"])
        except ValidationError as e:
            raise ValueError(_validation_summary(e))

        amount = data.get("amount")
        if isinstance(amount, bool) or not isinstance(amount, (int, float)):
            raise ValueError("Invalid amount")
        if metadata.total_amount != amount / 100:
            raise ValueError(f"Amount mismatch: expected {amount / 100}, got {metadata.total_amount}")

        return BookingCreate(
            trip_id=metadata.trip_id,
            email=metadata.customer.email,
            phone=metadata.customer.phone,
            passengers=metadata.passengers,
            payment_reference=gateway_reference
        )
