import json

from models.confirmed_booking import ConfirmedBooking
from models.payment import Payment
from security.signatures import compute_hmac_sha256

from conftest import WEBHOOK_SECRET, customer_fields, signed


def _order(client, warehouse):
    resp = client.post("/api/public/payments/create-order", json=customer_fields(warehouse.id))
    return resp.get_json()["data"]["order_id"]


def _event(name, order_id, **entity):
    entity.setdefault("id", "pay_hook_001")
    entity.setdefault("method", "upi")
    entity["order_id"] = order_id
    return json.dumps({"event": name, "payload": {"payment": {"entity": entity}}}).encode("utf-8")


def _post(client, body, signature=None):
    sig = signature if signature is not None else compute_hmac_sha256(WEBHOOK_SECRET, body)
    return client.post(
        "/api/payments/webhook",
        data=body,
        headers={"X-Razorpay-Signature": sig, "Content-Type": "application/json"},
    )


def test_rejects_invalid_signature(client, warehouse):
    order_id = _order(client, warehouse)
    resp = _post(client, _event("payment.captured", order_id), signature="deadbeef")
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "Invalid signature"
    assert Payment.query.one().status == "created"


def test_rejects_missing_signature(client, warehouse):
    order_id = _order(client, warehouse)
    resp = _post(client, _event("payment.captured", order_id), signature="")
    assert resp.status_code == 400


def test_missing_secret_is_server_error(app, client, warehouse):
    order_id = _order(client, warehouse)
    app.config["RAZORPAY_WEBHOOK_SECRET"] = None
    resp = _post(client, _event("payment.captured", order_id))
    assert resp.status_code == 500
    assert resp.get_json()["message"] == "Webhook secret not configured"


def test_captured_confirms_booking(client, warehouse, mailer):
    order_id = _order(client, warehouse)
    resp = _post(client, _event("payment.captured", order_id))
    assert resp.status_code == 200
    assert resp.get_json()["data"]["event"] == "payment.captured"

    payment = Payment.query.one()
    assert payment.status == "paid"
    assert payment.razorpay_payment_id == "pay_hook_001"
    assert payment.payment_method == "upi"
    assert ConfirmedBooking.query.count() == 1
    assert len(mailer.sent) == 2


def test_duplicate_capture_is_idempotent(client, warehouse, mailer):
    order_id = _order(client, warehouse)
    body = _event("payment.captured", order_id)
    assert _post(client, body).status_code == 200
    assert _post(client, body).status_code == 200
    assert ConfirmedBooking.query.count() == 1
    assert len(mailer.sent) == 2


def test_capture_after_client_verify_keeps_single_booking(client, warehouse):
    order_id = _order(client, warehouse)
    client.post("/api/public/payments/verify", json=signed(order_id))
    assert _post(client, _event("payment.captured", order_id)).status_code == 200
    assert ConfirmedBooking.query.count() == 1


def test_failed_event_marks_pending_payment(client, warehouse):
    order_id = _order(client, warehouse)
    resp = _post(client, _event("payment.failed", order_id, error_description="Bank declined"))
    assert resp.status_code == 200
    payment = Payment.query.one()
    assert payment.status == "failed"
    assert payment.failure_reason == "Bank declined"


def test_failed_event_ignored_for_paid_payment(client, warehouse):
    order_id = _order(client, warehouse)
    client.post("/api/public/payments/verify", json=signed(order_id))
    assert _post(client, _event("payment.failed", order_id)).status_code == 200
    assert Payment.query.one().status == "paid"


def test_capture_for_failed_payment_is_only_logged(client, warehouse):
    order_id = _order(client, warehouse)
    _post(client, _event("payment.failed", order_id))
    assert _post(client, _event("payment.captured", order_id)).status_code == 200
    assert Payment.query.one().status == "failed"
    assert ConfirmedBooking.query.count() == 0


def test_unknown_event_and_order_are_acknowledged(client, warehouse):
    order_id = _order(client, warehouse)
    resp = _post(client, _event("order.paid", order_id))
    assert resp.status_code == 200
    assert resp.get_json()["data"]["event"] == "order.paid"

    assert _post(client, _event("payment.captured", "order_unknown")).status_code == 200
    assert Payment.query.one().status == "created"


def test_malformed_body(client, app):
    assert _post(client, b"not json").status_code == 400


def test_signed_non_object_payload(client, app):
    resp = _post(client, b"[]")
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "Invalid webhook payload"
