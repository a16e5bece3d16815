"""
Payments Module

Paystack integration for the booking flow:

- Transaction initialization and verification through an httpx client
- The signed payment webhook that creates bookings exactly once, guarded by
  short-lived Redis claims on the gateway and booking references

Key Components:
- paystack_client.py: PaystackClient (initialize/verify)
- idempotency.py: dedup key derivation and WebhookIdempotencyGuard
- webhook_service.py: PaystackWebhookService and signature helpers
- router.py: FastAPI endpoints mounted under /payments
"""

from .router import router
from .paystack_client import PaystackClient, PaystackError
from .idempotency import WebhookIdempotencyGuard, dedup_keys
from .webhook_service import PaystackWebhookService, compute_signature, verify_signature

__all__ = [
    "router",
    "PaystackClient",
    "PaystackError",
    "WebhookIdempotencyGuard",
    "dedup_keys",
    "PaystackWebhookService",
    "compute_signature",
    "verify_signature"
]
