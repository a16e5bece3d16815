import logging
from datetime import datetime, timezone

import httpx
import redis
from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from src.cache import get_cache
from src.database import get_db
from src.exceptions import internal_error
from src.payments.paystack_client import PaystackClient, PaystackError, get_paystack_client
from src.payments.schemas import PaymentInitializeRequest, PaymentVerifyRequest
from src.payments.webhook_service import PaystackWebhookService, WebhookProcessingError

logger = logging.getLogger(__name__)

router = APIRouter()

SIGNATURE_HEADERS = ("x-signature", "x-paystack-signature")

@router.post("/initialize")
def initialize_payment(
    request: PaymentInitializeRequest,
    client: PaystackClient = Depends(get_paystack_client)
):
    """Start a gateway transaction and return its checkout URL"""
    try:
        data = client.initialize_transaction(request.email, request.amount, request.reference)
    except PaystackError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except httpx.HTTPError:
        raise internal_error("initialize payment")

    return {
        "status": True,
        "authorizationUrl": data.get("authorization_url"),
        "accessCode": data.get("access_code"),
        "reference": data.get("reference"),
    }

@router.post("/verify")
def verify_payment(
    request: PaymentVerifyRequest,
    client: PaystackClient = Depends(get_paystack_client)
):
    """Confirm with the gateway that a transaction succeeded"""
    try:
        transaction = client.verify_transaction(request.reference)
    except PaystackError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except httpx.HTTPError:
        raise internal_error("verify payment")

    return {
        "status": True,
        "data": {
            "reference": transaction.get("reference"),
            "amount": transaction.get("amount"),
            "status": transaction.get("status"),
            "paidAt": transaction.get("paid_at"),
            "createdAt": transaction.get("created_at"),
            "channel": transaction.get("channel"),
            "currency": transaction.get("currency"),
            "customer": transaction.get("customer"),
        }
    }

@router.get("/webhook")
def webhook_status():
    return {
        "message": "Webhook endpoint is working",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }

@router.post("/webhook")
async def payment_webhook(
    request: Request,
    db: Session = Depends(get_db),
    cache: redis.Redis = Depends(get_cache)
):
    """Gateway callback; signed with HMAC-SHA512 of the raw body"""
    raw_body = await request.body()
    signature = next(
        (request.headers[name] for name in SIGNATURE_HEADERS if request.headers.get(name)),
        None
    )

    try:
        # handle() does blocking database and redis I/O
        return await run_in_threadpool(PaystackWebhookService(db, cache).handle, raw_body, signature)
    except WebhookProcessingError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
    except ValueError as e:
        logger.warning("Webhook rejected: %s", e)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception:
        raise internal_error("process payment webhook")
