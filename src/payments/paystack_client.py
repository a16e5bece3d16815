import logging
from typing import Optional
from urllib.parse import quote

import httpx

from src.config import settings

logger = logging.getLogger(__name__)

class PaystackError(Exception):
    """The gateway answered but refused the request"""

class PaystackClient:
    """Minimal synchronous client for the Paystack transaction API"""

    def __init__(
        self,
        secret_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None
    ):
        self.secret_key = secret_key or settings.PAYSTACK_SECRET_KEY
        self.base_url = (base_url or settings.PAYSTACK_BASE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.PAYSTACK_TIMEOUT_SECONDS
        self._transport = transport

    def _client(self) -> httpx.Client:
        return httpx.Client(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self._transport,
            headers={
                "Authorization": f"Bearer {self.secret_key}",
                "Content-Type": "application/json",
            },
        )

    @staticmethod
    def _payload(response: httpx.Response) -> dict:
        try:
            data = response.json()
        except ValueError:
            raise PaystackError(f"Unexpected gateway response ({response.status_code})")
        if not isinstance(data, dict):
            raise PaystackError(f"Unexpected gateway response ({response.status_code})")
        return data

    def initialize_transaction(self, email: str, amount: int, reference: str) -> dict:
        """Start a transaction; amount is in minor units (kobo)"""
        with self._client() as client:
            response = client.post(
                "/transaction/initialize",
                json={"email": email, "amount": amount, "reference": reference},
            )
        data = self._payload(response)

        if response.status_code >= 400 or not data.get("status"):
            logger.warning("Paystack initialization failed for %s: %s", reference, data.get("message"))
            raise PaystackError(data.get("message") or "Failed to initialize payment")

        return data.get("data") or {}

    def verify_transaction(self, reference: str) -> dict:
        """Fetch the gateway's view of a transaction; raises unless it succeeded"""
        with self._client() as client:
            response = client.get(f"/transaction/verify/{quote(reference, safe='')}")
        data = self._payload(response)

        if response.status_code >= 400 or not data.get("status"):
            logger.warning("Paystack verification failed for %s: %s", reference, data.get("message"))
            raise PaystackError(data.get("message") or "Payment verification failed")

        transaction = data.get("data") or {}
        if transaction.get("status") != "success":
            raise PaystackError(f"Payment status: {transaction.get('status')}")

        return transaction

def get_paystack_client() -> PaystackClient:
    """FastAPI dependency for the payment gateway client"""
    return PaystackClient()
