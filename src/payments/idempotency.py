import json
import logging
from datetime import datetime, timezone
from typing import List, Optional

import redis

from src.config import settings

logger = logging.getLogger(__name__)

KEY_PREFIX = "webhook"

def dedup_keys(gateway_reference: str, booking_reference: Optional[str]) -> List[str]:
    """
    Cache keys identifying one payment delivery.

    The gateway key comes first; it is the one claimed atomically. Keys that
    depend on the booking reference are only derived when it is present.
    """
    keys = [f"{KEY_PREFIX}:paystack:{gateway_reference}"]
    if booking_reference:
        keys.append(f"{KEY_PREFIX}:booking:{booking_reference}")
        keys.append(f"{KEY_PREFIX}:combined:{gateway_reference}-{booking_reference}")
    return keys

class WebhookIdempotencyGuard:
    """Short-lived claims on payment deliveries, kept in Redis"""

    def __init__(self, cache: redis.Redis, ttl_seconds: Optional[int] = None):
        self.cache = cache
        self.ttl_seconds = ttl_seconds or settings.WEBHOOK_DEDUP_TTL_SECONDS

    def already_processed(self, keys: List[str]) -> bool:
        return any(self.cache.get(key) is not None for key in keys)

    def claim(self, keys: List[str], gateway_reference: str, booking_reference: Optional[str]) -> bool:
        """
        Mark a delivery as taken. Returns False when a concurrent delivery
        claimed the gateway key first. Claims are never released.
        """
        value = json.dumps({
            "processed": True,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "gatewayReference": gateway_reference,
            "bookingReference": booking_reference,
        })

        primary, secondary = keys[0], keys[1:]
        if not self.cache.set(primary, value, ex=self.ttl_seconds, nx=True):
            logger.info("Lost claim race for %s", primary)
            return False

        for key in secondary:
            self.cache.setex(key, self.ttl_seconds, value)
        logger.info("Claimed webhook keys %s", keys)
        return True
