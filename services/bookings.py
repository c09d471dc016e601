"""Paid booking flow: order creation, payment verification and confirmation."""
import json
import logging
import secrets
import string
import time
from datetime import datetime

from flask import current_app
from sqlalchemy.exc import IntegrityError

from models import db, atomic
from models.booking_inquiry import BookingInquiry
from models.confirmed_booking import ConfirmedBooking
from models.payment import Payment
from models.records import BookingIntent
from models.warehouse import Warehouse
from security.signatures import verify_payment_signature, verify_webhook_signature
from services import notifications
from utils.audit import log_event
from utils.errors import ConflictError, NotFoundError, ValidationError, VerificationError
from utils.validation import clean_str, is_valid_email, require_fields

logger = logging.getLogger(__name__)

BASE36 = string.digits + string.ascii_lowercase
UPPER_ALNUM = string.digits + string.ascii_uppercase

CUSTOMER_FIELDS = ("full_name", "email", "phone_number", "company_name")


def _now_ms() -> int:
    return int(time.time() * 1000)


def _random(alphabet, size) -> str:
    return "".join(secrets.choice(alphabet) for _ in range(size))


def generate_receipt() -> str:
    return f"booking_{_now_ms()}_{_random(BASE36, 9)}"


def generate_booking_number() -> str:
    return f"WB{_now_ms()}{_random(UPPER_ALNUM, 6)}"


def generate_inquiry_reference() -> str:
    return f"INQ{_now_ms()}{_random(UPPER_ALNUM, 4)}"


def _gateway():
    return current_app.extensions["payment_gateway"]


def _approved_warehouse(warehouse_id) -> Warehouse:
    try:
        warehouse_id = int(warehouse_id)
    except (TypeError, ValueError):
        raise NotFoundError("Warehouse not found or not available for booking")
    warehouse = Warehouse.query.filter_by(id=warehouse_id, approval_status="approved").first()
    if not warehouse:
        raise NotFoundError("Warehouse not found or not available for booking")
    return warehouse


def _intent_from(data: dict, warehouse: Warehouse) -> BookingIntent:
    require_fields(data, "warehouse_id", *CUSTOMER_FIELDS)
    email = clean_str(data.get("email")).lower()
    if not is_valid_email(email):
        raise ValidationError("Invalid email")
    return BookingIntent(
        full_name=clean_str(data.get("full_name")),
        email=email,
        phone_number=clean_str(data.get("phone_number")),
        company_name=clean_str(data.get("company_name")),
        preferred_contact_method=clean_str(data.get("preferred_contact_method")),
        preferred_contact_time=clean_str(data.get("preferred_contact_time")),
        preferred_start_date=clean_str(data.get("preferred_start_date")),
        message=clean_str(data.get("message")),
        warehouse_name=warehouse.name,
        warehouse_address=warehouse.address,
        warehouse_city=warehouse.city,
    )


def create_booking_order(data: dict, user=None) -> dict:
    require_fields(data, "warehouse_id", *CUSTOMER_FIELDS)
    warehouse = _approved_warehouse(data.get("warehouse_id"))
    intent = _intent_from(data, warehouse)

    cfg = current_app.config
    amount = cfg["BOOKING_AMOUNT"]
    currency = cfg["BOOKING_CURRENCY"]
    receipt = generate_receipt()

    gateway = _gateway()
    order = gateway.create_order(amount, currency, receipt, notes={
        "warehouse_id": str(warehouse.id),
        "warehouse_name": warehouse.name,
        "customer_name": intent.full_name,
        "customer_email": intent.email,
        "customer_phone": intent.phone_number,
        "company_name": intent.company_name,
    })

    payment = Payment(
        razorpay_order_id=order["id"],
        amount=amount,
        currency=currency,
        status="created",
        warehouse_id=warehouse.id,
        user_id=user.id if user else None,
        guest_name=None if user else intent.full_name,
        guest_email=None if user else intent.email,
        guest_phone=None if user else intent.phone_number,
        receipt=receipt,
    )
    payment.booking_intent = intent
    db.session.add(payment)
    db.session.commit()

    logger.info("Created order %s for warehouse %s (payment %s)", order["id"], warehouse.id, payment.id)
    return {
        "order_id": order["id"],
        "amount": amount,
        "currency": currency,
        "key": gateway.key_id,
        "payment_id": payment.id,
        "warehouse": warehouse.summary(),
        "booking_details": intent.to_dict(),
    }


def _existing_booking(payment: Payment):
    return ConfirmedBooking.query.filter_by(payment_id=payment.id).first()


def confirm_payment(payment: Payment, gateway_payment: dict, signature=None):
    """
    Mark ``payment`` paid and create its ConfirmedBooking in one transaction.

    Returns ``(booking, created)``. A payment that is already paid returns its
    existing booking with ``created`` False.
    """
    if payment.status == "paid":
        return _existing_booking(payment), False
    if payment.status != "created":
        raise ConflictError(f"Payment is already {payment.status}")

    warehouse = payment.warehouse
    intent = payment.booking_intent
    now = datetime.utcnow()
    outbox = []

    try:
        with atomic():
            payment.razorpay_payment_id = gateway_payment.get("id")
            if signature:
                payment.razorpay_signature = signature
            payment.status = "paid"
            payment.payment_method = gateway_payment.get("method")
            payment.gateway_response = gateway_payment
            payment.paid_at = now

            booking = ConfirmedBooking(
                booking_number=generate_booking_number(),
                full_name=intent.full_name,
                email=intent.email,
                phone_number=intent.phone_number,
                company_name=intent.company_name,
                preferred_contact_method=intent.preferred_contact_method,
                preferred_contact_time=intent.preferred_contact_time,
                preferred_start_date=intent.preferred_start_date,
                message=intent.message,
                amount_paid=payment.amount,
                payment_date=now,
                warehouse_id=payment.warehouse_id,
                owner_id=warehouse.owner_id,
                payment_id=payment.id,
                user_id=payment.user_id,
                booking_metadata={
                    "payment_method": gateway_payment.get("method"),
                    "razorpay_payment_id": gateway_payment.get("id"),
                    "booking_created_at": now.isoformat(),
                },
            )
            db.session.add(booking)
            db.session.flush()

            outbox.append(notifications.enqueue(
                "booking_customer", intent.email,
                notifications.booking_customer_email(booking, warehouse),
            ))
            if warehouse.owner and warehouse.owner.email:
                outbox.append(notifications.enqueue(
                    "booking_owner", warehouse.owner.email,
                    notifications.booking_owner_email(booking, warehouse),
                ))
            log_event(
                "PAYMENT_PAID",
                user_id=payment.user_id,
                entity="payment",
                entity_id=payment.id,
                details={"order_id": payment.razorpay_order_id, "booking_number": booking.booking_number},
                commit=False,
            )
    except IntegrityError:
        # a concurrent confirmation won the unique payment_id race
        db.session.refresh(payment)
        existing = _existing_booking(payment)
        if payment.status == "paid" and existing:
            return existing, False
        raise

    logger.info("Payment %s paid, booking %s confirmed", payment.id, booking.booking_number)
    notifications.dispatch(outbox)
    return booking, True


def verify_payment(data: dict) -> dict:
    order_id = clean_str(data.get("razorpay_order_id"))
    payment_id = clean_str(data.get("razorpay_payment_id"))
    signature = clean_str(data.get("razorpay_signature"))
    if not (order_id and payment_id and signature):
        raise ValidationError("Required fields are missing")

    secret = current_app.config.get("RAZORPAY_KEY_SECRET")
    if not verify_payment_signature(order_id, payment_id, signature, secret):
        logger.warning("Signature mismatch for order %s", order_id)
        raise VerificationError("Payment verification failed")

    payment = Payment.query.filter_by(razorpay_order_id=order_id).first()
    if not payment:
        raise NotFoundError("Payment record not found")

    if payment.status == "paid":
        booking = _existing_booking(payment)
    else:
        if payment.status != "created":
            raise ConflictError(f"Payment is already {payment.status}")
        gateway_payment = _gateway().fetch_payment(payment_id)
        booking, _ = confirm_payment(payment, gateway_payment, signature=signature)

    return {
        "payment_id": payment.razorpay_payment_id,
        "order_id": order_id,
        "booking_number": booking.booking_number if booking else None,
        "status": "confirmed",
    }


def _mark_failed(payment: Payment, payment_id, reason, raw):
    payment.razorpay_payment_id = payment_id or payment.razorpay_payment_id
    payment.status = "failed"
    payment.failure_reason = reason
    payment.gateway_response = raw
    log_event(
        "PAYMENT_FAILED",
        user_id=payment.user_id,
        entity="payment",
        entity_id=payment.id,
        details={"order_id": payment.razorpay_order_id, "reason": reason},
        commit=False,
    )
    db.session.commit()
    logger.info("Payment %s marked failed: %s", payment.id, reason)


def record_payment_failure(data: dict) -> bool:
    """Returns True when a pending payment was marked failed."""
    order_id = clean_str(data.get("razorpay_order_id"))
    if not order_id:
        raise ValidationError("razorpay_order_id is required")

    payment = Payment.query.filter_by(razorpay_order_id=order_id).first()
    if not payment or not payment.is_pending:
        return False

    _mark_failed(payment, clean_str(data.get("razorpay_payment_id")), clean_str(data.get("error_description")), data)
    return True


def get_payment_status(payment_id: int) -> dict:
    payment = db.session.get(Payment, payment_id)
    if not payment:
        raise NotFoundError("Payment not found")
    return payment.to_dict()


def handle_webhook(raw_body: bytes) -> str:
    """Apply a signed gateway callback. Returns the event name."""
    try:
        event = json.loads(raw_body or b"{}")
    except ValueError:
        raise ValidationError("Invalid webhook payload")
    if not isinstance(event, dict):
        raise ValidationError("Invalid webhook payload")

    name = event.get("event")
    if name not in ("payment.captured", "payment.failed"):
        logger.info("Ignoring webhook event %s", name)
        return name

    entity = ((event.get("payload") or {}).get("payment") or {}).get("entity") or {}
    order_id = entity.get("order_id")
    payment = Payment.query.filter_by(razorpay_order_id=order_id).first() if order_id else None
    if not payment:
        logger.warning("Webhook %s for unknown order %s", name, order_id)
        return name

    if name == "payment.captured":
        if payment.status in ("created", "paid"):
            confirm_payment(payment, entity)
        else:
            logger.warning("Capture received for %s payment %s", payment.status, payment.id)
    elif payment.is_pending:
        _mark_failed(payment, entity.get("id"), entity.get("error_description"), entity)
    return name


def webhook_signature_valid(raw_body: bytes, signature) -> bool:
    return verify_webhook_signature(raw_body, signature, current_app.config.get("RAZORPAY_WEBHOOK_SECRET"))


def create_booking_inquiry(data: dict) -> BookingInquiry:
    """Keep an abandoned checkout as an inquiry and notify both sides."""
    require_fields(data, "warehouse_id", *CUSTOMER_FIELDS)
    warehouse = _approved_warehouse(data.get("warehouse_id"))
    intent = _intent_from(data, warehouse)

    payment = None
    if data.get("payment_id"):
        try:
            payment = db.session.get(Payment, int(data["payment_id"]))
        except (TypeError, ValueError):
            raise ValidationError("payment_id must be an integer")
        if payment and payment.warehouse_id != warehouse.id:
            raise ValidationError("payment_id does not belong to this warehouse")

    outbox = []
    with atomic():
        inquiry = BookingInquiry(
            reference=generate_inquiry_reference(),
            full_name=intent.full_name,
            email=intent.email,
            phone_number=intent.phone_number,
            company_name=intent.company_name,
            preferred_contact_method=intent.preferred_contact_method,
            preferred_contact_time=intent.preferred_contact_time,
            preferred_start_date=intent.preferred_start_date,
            message=intent.message,
            warehouse_id=warehouse.id,
            owner_id=warehouse.owner_id,
            payment_id=payment.id if payment else None,
        )
        db.session.add(inquiry)
        if payment and payment.is_pending:
            payment.status = "cancelled"
            payment.failure_reason = "Checkout abandoned"
        db.session.flush()

        outbox.append(notifications.enqueue(
            "inquiry_customer", intent.email,
            notifications.inquiry_customer_email(inquiry, warehouse),
        ))
        if warehouse.owner and warehouse.owner.email:
            outbox.append(notifications.enqueue(
                "inquiry_owner", warehouse.owner.email,
                notifications.inquiry_owner_email(inquiry, warehouse),
            ))

    notifications.dispatch(outbox)
    return inquiry
