import json

import pytest

from src.models import Booking
from src.payments.idempotency import WebhookIdempotencyGuard, dedup_keys
from src.payments.webhook_service import compute_signature, verify_signature

API = "/api/v1"
SECRET = "sk_test_webhook_secret"


def _event(trip, reference="PSK_REF_1", booking_reference="TEABCDEF01", seats=("01A", "01B"),
           amount=None, event="charge.success", status="success"):
    passengers = [
        {"name": f"Passenger {seat}", "seat": seat, "age": 28, "gender": "male"}
        for seat in seats
    ]
    total = len(seats) * trip.price
    return {
        "event": event,
        "data": {
            "reference": reference,
            "status": status,
            "amount": int(total * 100) if amount is None else amount,
            "metadata": {
                "bookingReference": booking_reference,
                "tripId": trip.id,
                "totalAmount": total,
                "customer": {"email": "ada@example.com", "phone": "+2348011112222"},
                "passengers": passengers,
            },
        },
    }


def _post(client, payload, secret=SECRET, header="X-Paystack-Signature"):
    body = json.dumps(payload).encode()
    return client.post(
        f"{API}/payments/webhook",
        content=body,
        headers={header: compute_signature(secret, body), "Content-Type": "application/json"},
    )


@pytest.fixture()
def trip(make_bus, make_trip):
    return make_trip(make_bus(), price=5000)


# Signatures and keys

def test_signature_helpers():
    body = b'{"event":"charge.success"}'
    signature = compute_signature(SECRET, body)
    assert len(signature) == 128
    assert verify_signature(SECRET, body, signature)
    assert not verify_signature(SECRET, body + b" ", signature)
    assert not verify_signature(SECRET, body, None)


def test_dedup_keys():
    assert dedup_keys("PSK_1", "TE1") == [
        "webhook:paystack:PSK_1",
        "webhook:booking:TE1",
        "webhook:combined:PSK_1-TE1",
    ]
    assert dedup_keys("PSK_1", None) == ["webhook:paystack:PSK_1"]


def test_guard_claim_is_exclusive(fake_cache):
    guard = WebhookIdempotencyGuard(fake_cache, ttl_seconds=60)
    keys = dedup_keys("PSK_1", "TE1")

    assert not guard.already_processed(keys)
    assert guard.claim(keys, "PSK_1", "TE1") is True
    assert guard.already_processed(keys)
    assert guard.claim(keys, "PSK_1", "TE1") is False
    assert json.loads(fake_cache.get("webhook:booking:TE1"))["gatewayReference"] == "PSK_1"


# Endpoint

def test_webhook_health(client):
    r = client.get(f"{API}/payments/webhook")
    assert r.status_code == 200
    assert r.json()["message"] == "Webhook endpoint is working"


def test_invalid_signature_rejected(client, db, trip):
    r = _post(client, _event(trip), secret="sk_wrong")
    assert r.status_code == 400
    assert r.json()["error"]["message"] == "Invalid signature"
    assert db.query(Booking).count() == 0


def test_missing_signature_rejected(client, trip):
    r = client.post(f"{API}/payments/webhook", content=json.dumps(_event(trip)).encode())
    assert r.status_code == 400
    assert r.json()["error"]["message"] == "Missing signature"


def test_webhook_creates_booking_once(client, db, fake_cache, trip, unavailable_seats):
    payload = _event(trip)

    first = _post(client, payload)
    assert first.status_code == 200
    assert first.json() == {"message": "Webhook processed successfully", "bookingReference": "TEABCDEF01"}

    second = _post(client, payload, header="X-Signature")
    assert second.status_code == 200
    assert second.json()["message"] == "Webhook already processed (duplicate prevention)"
    assert second.json()["paystackReference"] == "PSK_REF_1"

    assert db.query(Booking).count() == 1
    booking = db.query(Booking).one()
    assert booking.reference == "TEABCDEF01"
    assert booking.payment_reference == "PSK_REF_1"
    assert booking.total_amount == 10000
    assert unavailable_seats(trip.bus_id) == ["01A", "01B"]

    for key in dedup_keys("PSK_REF_1", "TEABCDEF01"):
        assert fake_cache.ttl(key) == 86400
        assert json.loads(fake_cache.get(key))["processed"] is True


def test_unhandled_event_acknowledged(client, db, fake_cache, trip):
    r = _post(client, _event(trip, event="charge.failed", status="failed"))
    assert r.status_code == 200
    assert r.json() == {"message": "Event not handled"}
    assert fake_cache.store == {}
    assert db.query(Booking).count() == 0


def test_amount_mismatch_keeps_claim(client, db, trip):
    payload = _event(trip, amount=100)

    r = _post(client, payload)
    assert r.status_code == 400
    assert r.json()["error"]["message"] == "Amount mismatch: expected 1.0, got 10000.0"

    # the claim stays even though nothing was booked
    retry = _post(client, payload)
    assert retry.json()["message"] == "Webhook already processed (duplicate prevention)"
    assert db.query(Booking).count() == 0


def test_missing_metadata(client, trip):
    payload = _event(trip)
    payload["data"]["metadata"] = None
    r = _post(client, payload)
    assert r.status_code == 400
    assert r.json()["error"]["message"] == "No metadata"


def test_missing_gateway_reference_claims_nothing(client, fake_cache, trip):
    payload = _event(trip)
    del payload["data"]["reference"]
    r = _post(client, payload)
    assert r.status_code == 400
    assert r.json()["error"]["message"] == "Missing payment reference"
    assert fake_cache.store == {}


def test_existing_booking_is_reported(client, trip):
    created = client.post(f"{API}/bookings", json={
        "tripId": trip.id,
        "email": "ada@example.com",
        "phone": "+2348011112222",
        "passengers": [{"name": "Ada", "seat": "02A", "age": 30, "gender": "female"}],
        "paymentReference": "PSK_REF_9",
    }).json()

    r = _post(client, _event(trip, reference="PSK_REF_9", booking_reference="TE99999999"))
    assert r.status_code == 200
    assert r.json() == {"message": "Booking already processed", "bookingReference": created["reference"]}


def test_booking_failure_after_claim_is_server_error(client, db, trip):
    client.post(f"{API}/bookings", json={
        "tripId": trip.id,
        "email": "bola@example.com",
        "phone": "+2348011112222",
        "passengers": [{"name": "Bola", "seat": "01A", "age": 30, "gender": "female"}],
    })

    r = _post(client, _event(trip, reference="PSK_REF_2", booking_reference="TE22222222"))
    assert r.status_code == 500
    assert r.json()["error"]["message"] == "Failed to create booking: Seat 01A is unavailable or invalid"
    assert db.query(Booking).filter(Booking.reference == "TE22222222").first() is None


@pytest.mark.parametrize("data", ["oops", ["charge"], 42])
def test_non_object_data_rejected(client, fake_cache, data):
    r = _post(client, {"event": "charge.success", "data": data})
    assert r.status_code == 400
    assert r.json()["error"]["message"] == "Invalid JSON payload"
    assert fake_cache.store == {}


def test_webhook_handled_off_the_event_loop(client, db, trip, monkeypatch):
    import importlib
    payments_router = importlib.import_module("src.payments.router")

    offloaded = []
    real_run_in_threadpool = payments_router.run_in_threadpool

    async def recording_run_in_threadpool(func, *args, **kwargs):
        offloaded.append(func.__name__)
        return await real_run_in_threadpool(func, *args, **kwargs)

    monkeypatch.setattr(payments_router, "run_in_threadpool", recording_run_in_threadpool)

    r = _post(client, _event(trip, reference="PSK_REF_T", booking_reference="TE7777777A"))
    assert r.status_code == 200
    assert r.json()["bookingReference"] == "TE7777777A"
    assert offloaded == ["handle"]
    assert db.query(Booking).filter(Booking.reference == "TE7777777A").count() == 1
