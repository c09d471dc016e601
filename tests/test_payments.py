import re

from sqlalchemy.exc import OperationalError

from models import db
from models.activity_log import ActivityLog
from models.booking_inquiry import BookingInquiry
from models.confirmed_booking import ConfirmedBooking
from models.email_outbox import EmailOutbox
from models.payment import Payment
from services import notifications
from utils.errors import PaymentGatewayError

from conftest import auth_headers, customer_fields, signed


def _create_order(client, warehouse_id, **overrides):
    return client.post("/api/public/payments/create-order", json=customer_fields(warehouse_id, **overrides))


def test_create_order_returns_checkout_details(client, warehouse):
    resp = _create_order(client, warehouse.id)
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["success"] is True

    data = body["data"]
    assert data["order_id"].startswith("order_test_")
    assert data["amount"] == 100000
    assert data["currency"] == "INR"
    assert data["key"] == "rzp_test_key"
    assert data["warehouse"]["id"] == warehouse.id
    assert data["booking_details"]["email"] == "asha@example.com"
    assert data["booking_details"]["warehouse_name"] == warehouse.name

    payment = db.session.get(Payment, data["payment_id"])
    assert payment.status == "created"
    assert payment.razorpay_order_id == data["order_id"]
    assert payment.guest_email == "asha@example.com"
    assert re.match(r"^booking_\d+_[0-9a-z]{9}$", payment.receipt)


def test_create_order_links_logged_in_user(client, warehouse, make_user):
    customer = make_user()
    resp = client.post(
        "/api/public/payments/create-order",
        json=customer_fields(warehouse.id),
        headers=auth_headers(customer),
    )
    assert resp.status_code == 200
    payment = db.session.get(Payment, resp.get_json()["data"]["payment_id"])
    assert payment.user_id == customer.id
    assert payment.guest_email is None


def test_create_order_receipts_are_unique(client, warehouse):
    for _ in range(5):
        assert _create_order(client, warehouse.id).status_code == 200
    receipts = [p.receipt for p in Payment.query.all()]
    assert len(set(receipts)) == 5


def test_create_order_requires_customer_fields(client, warehouse):
    resp = client.post("/api/public/payments/create-order", json={"warehouse_id": warehouse.id, "full_name": "X"})
    assert resp.status_code == 400
    body = resp.get_json()
    assert body["success"] is False
    assert "email" in body["errors"]["missing"]
    assert Payment.query.count() == 0


def test_create_order_rejects_unapproved_warehouse(client, make_warehouse):
    pending = make_warehouse(status="pending")
    resp = _create_order(client, pending.id)
    assert resp.status_code == 404
    assert resp.get_json()["message"] == "Warehouse not found or not available for booking"
    assert Payment.query.count() == 0


def test_create_order_unknown_warehouse(client, app):
    assert _create_order(client, 9999).status_code == 404
    assert Payment.query.count() == 0


def test_create_order_gateway_failure(client, warehouse, gateway, monkeypatch):
    def boom(*args, **kwargs):
        raise PaymentGatewayError("Failed to create booking order")

    monkeypatch.setattr(gateway, "create_order", boom)
    resp = _create_order(client, warehouse.id)
    assert resp.status_code == 500
    assert resp.get_json()["message"] == "Failed to create booking order"
    assert Payment.query.count() == 0


def test_verify_confirms_booking_and_notifies(client, warehouse, owner, mailer):
    order_id = _create_order(client, warehouse.id).get_json()["data"]["order_id"]

    resp = client.post("/api/public/payments/verify", json=signed(order_id))
    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert data["status"] == "confirmed"
    assert data["order_id"] == order_id
    assert data["payment_id"] == "pay_test_001"
    assert re.match(r"^WB\d+[A-Z0-9]{6}$", data["booking_number"])

    payment = Payment.query.filter_by(razorpay_order_id=order_id).one()
    assert payment.status == "paid"
    assert payment.payment_method == "card"
    assert payment.paid_at is not None

    booking = ConfirmedBooking.query.one()
    assert booking.booking_number == data["booking_number"]
    assert booking.payment_id == payment.id
    assert booking.owner_id == owner.id
    assert booking.amount_paid == 100000
    assert booking.email == "asha@example.com"

    recipients = sorted(m["to"] for m in mailer.sent)
    assert recipients == ["asha@example.com", "owner@example.com"]
    assert all(row.status == "sent" for row in EmailOutbox.query.all())
    assert ActivityLog.query.filter_by(action="PAYMENT_PAID").count() == 1


def test_verify_rejects_bad_signature(client, warehouse, mailer):
    order_id = _create_order(client, warehouse.id).get_json()["data"]["order_id"]
    payload = signed(order_id)
    sig = payload["razorpay_signature"]
    payload["razorpay_signature"] = ("0" if sig[0] != "0" else "1") + sig[1:]

    resp = client.post("/api/public/payments/verify", json=payload)
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "Payment verification failed"
    assert Payment.query.one().status == "created"
    assert ConfirmedBooking.query.count() == 0
    assert mailer.sent == []


def test_verify_rolls_back_on_database_error(client, warehouse, mailer, monkeypatch):
    order_id = _create_order(client, warehouse.id).get_json()["data"]["order_id"]

    def broken_template(booking, wh):
        raise OperationalError("INSERT INTO email_outbox", {}, Exception("disk I/O error"))

    monkeypatch.setattr(notifications, "booking_owner_email", broken_template)
    resp = client.post("/api/public/payments/verify", json=signed(order_id))
    assert resp.status_code == 500
    assert resp.get_json()["message"] == "Internal server error"

    assert Payment.query.one().status == "created"
    assert ConfirmedBooking.query.count() == 0
    assert EmailOutbox.query.count() == 0
    assert mailer.sent == []


def test_verify_requires_all_fields(client, warehouse):
    resp = client.post("/api/public/payments/verify", json={"razorpay_order_id": "order_x"})
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "Required fields are missing"


def test_verify_unknown_order(client, app):
    resp = client.post("/api/public/payments/verify", json=signed("order_missing"))
    assert resp.status_code == 404
    assert resp.get_json()["message"] == "Payment record not found"


def test_repeat_verify_returns_existing_booking(client, warehouse, mailer):
    order_id = _create_order(client, warehouse.id).get_json()["data"]["order_id"]
    first = client.post("/api/public/payments/verify", json=signed(order_id)).get_json()["data"]
    second = client.post("/api/public/payments/verify", json=signed(order_id))

    assert second.status_code == 200
    assert second.get_json()["data"]["booking_number"] == first["booking_number"]
    assert ConfirmedBooking.query.count() == 1
    assert len(mailer.sent) == 2


def test_verify_succeeds_when_email_transport_fails(client, warehouse, mailer):
    mailer.fail_with = OSError("smtp down")
    order_id = _create_order(client, warehouse.id).get_json()["data"]["order_id"]

    resp = client.post("/api/public/payments/verify", json=signed(order_id))
    assert resp.status_code == 200
    assert Payment.query.one().status == "paid"
    assert ConfirmedBooking.query.count() == 1

    rows = EmailOutbox.query.all()
    assert len(rows) == 2
    assert {row.status for row in rows} == {"failed"}
    assert all("smtp down" in row.error for row in rows)


def test_verify_after_failure_conflicts(client, warehouse):
    order_id = _create_order(client, warehouse.id).get_json()["data"]["order_id"]
    client.post("/api/public/payments/failure", json={"razorpay_order_id": order_id, "error_description": "Card declined"})

    resp = client.post("/api/public/payments/verify", json=signed(order_id))
    assert resp.status_code == 409
    assert Payment.query.one().status == "failed"
    assert ConfirmedBooking.query.count() == 0


def test_failure_marks_pending_payment(client, warehouse):
    order_id = _create_order(client, warehouse.id).get_json()["data"]["order_id"]
    resp = client.post(
        "/api/public/payments/failure",
        json={"razorpay_order_id": order_id, "razorpay_payment_id": "pay_x", "error_description": "Card declined"},
    )
    assert resp.status_code == 200
    payment = Payment.query.one()
    assert payment.status == "failed"
    assert payment.failure_reason == "Card declined"
    assert payment.razorpay_payment_id == "pay_x"


def test_failure_does_not_touch_paid_payment(client, warehouse):
    order_id = _create_order(client, warehouse.id).get_json()["data"]["order_id"]
    client.post("/api/public/payments/verify", json=signed(order_id))

    resp = client.post("/api/public/payments/failure", json={"razorpay_order_id": order_id})
    assert resp.status_code == 200
    assert Payment.query.one().status == "paid"


def test_failure_requires_order_id(client, app):
    assert client.post("/api/public/payments/failure", json={}).status_code == 400


def test_payment_status(client, warehouse):
    payment_id = _create_order(client, warehouse.id).get_json()["data"]["payment_id"]
    resp = client.get(f"/api/public/payments/{payment_id}/status")
    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert data["status"] == "created"
    assert data["amount"] == 100000
    assert data["warehouse"]["id"] == warehouse.id

    assert client.get("/api/public/payments/9999/status").status_code == 404


def test_booking_inquiry_cancels_abandoned_checkout(client, warehouse, mailer):
    payment_id = _create_order(client, warehouse.id).get_json()["data"]["payment_id"]

    resp = client.post("/api/public/bookings", json=customer_fields(warehouse.id, payment_id=payment_id))
    assert resp.status_code == 201
    data = resp.get_json()["data"]
    assert re.match(r"^INQ\d+[A-Z0-9]{4}$", data["reference"])

    payment = db.session.get(Payment, payment_id)
    assert payment.status == "cancelled"
    inquiry = BookingInquiry.query.one()
    assert inquiry.payment_id == payment_id
    assert inquiry.status == "pending"
    assert sorted(m["to"] for m in mailer.sent) == ["asha@example.com", "owner@example.com"]

    # a cancelled checkout can no longer be confirmed
    order_id = payment.razorpay_order_id
    assert client.post("/api/public/payments/verify", json=signed(order_id)).status_code == 409


def test_owner_sees_confirmed_bookings(client, warehouse, owner, make_user):
    order_id = _create_order(client, warehouse.id).get_json()["data"]["order_id"]
    client.post("/api/public/payments/verify", json=signed(order_id))

    resp = client.get("/api/payments/bookings", headers=auth_headers(owner))
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["pagination"]["total"] == 1
    assert body["data"][0]["warehouse"]["id"] == warehouse.id

    stranger = make_user()
    resp = client.get("/api/payments/bookings", headers=auth_headers(stranger))
    assert resp.get_json()["data"] == []
