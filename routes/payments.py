import logging

from flask import Blueprint, request, g, current_app

from models.confirmed_booking import ConfirmedBooking
from security.access import login_required
from services import bookings as booking_service
from utils.audit import log_event
from utils.errors import error_response
from utils.responses import ok
from utils.validation import page_args, paginate

logger = logging.getLogger(__name__)

public_payments_bp = Blueprint("public_payments", __name__, url_prefix="/api/public/payments")
payments_bp = Blueprint("payments", __name__, url_prefix="/api/payments")


@public_payments_bp.post("/create-order")
def create_order():
    data = request.get_json(silent=True) or {}
    result = booking_service.create_booking_order(data, user=g.user)
    log_event(
        "PAYMENT_ORDER_CREATED",
        user_id=getattr(g.user, "id", None),
        entity="payment",
        entity_id=result["payment_id"],
        details={"order_id": result["order_id"]},
    )
    return ok(result)


@public_payments_bp.post("/verify")
def verify():
    data = request.get_json(silent=True) or {}
    result = booking_service.verify_payment(data)
    return ok(result, message="Payment verified and booking confirmed successfully")


@public_payments_bp.post("/failure")
def failure():
    data = request.get_json(silent=True) or {}
    booking_service.record_payment_failure(data)
    return ok(message="Payment failure recorded")


@public_payments_bp.get("/<int:payment_id>/status")
def status(payment_id: int):
    return ok(booking_service.get_payment_status(payment_id))


@payments_bp.post("/webhook")
def webhook():
    if not current_app.config.get("RAZORPAY_WEBHOOK_SECRET"):
        return error_response("Webhook secret not configured", 500)

    payload = request.get_data()
    signature = request.headers.get("X-Razorpay-Signature")
    if not booking_service.webhook_signature_valid(payload, signature):
        logger.warning("Rejected webhook with invalid signature")
        return error_response("Invalid signature", 400)

    event = booking_service.handle_webhook(payload)
    return ok({"event": event}, message="Webhook processed")


@payments_bp.get("/bookings")
@login_required
def confirmed_bookings():
    page, limit = page_args(request.args)
    q = ConfirmedBooking.query.filter_by(owner_id=g.user.id)

    status_filter = (request.args.get("status") or "").strip()
    if status_filter:
        q = q.filter(ConfirmedBooking.status == status_filter)
    warehouse_id = request.args.get("warehouse_id", type=int)
    if warehouse_id:
        q = q.filter(ConfirmedBooking.warehouse_id == warehouse_id)

    rows, pagination = paginate(q.order_by(ConfirmedBooking.created_at.desc()), page, limit)
    return ok([b.to_dict() for b in rows], pagination=pagination)
