from flask import Blueprint, request, g
from sqlalchemy import func

from models import db
from models.booking_inquiry import BookingInquiry, INQUIRY_BOOKING_STATUSES
from models.confirmed_booking import ConfirmedBooking, BOOKING_STATUSES
from security.access import login_required, can_manage
from utils.audit import log_event
from utils.errors import ForbiddenError, NotFoundError
from utils.responses import ok
from utils.validation import clean_str, page_args, paginate, require_choice

booking_bp = Blueprint("bookings", __name__, url_prefix="/api/bookings")


def load_booking(booking_id, kind):
    """Return (row, allowed statuses) for a confirmed booking or a booking inquiry."""
    if kind == "confirmed":
        return db.session.get(ConfirmedBooking, booking_id), BOOKING_STATUSES
    return db.session.get(BookingInquiry, booking_id), INQUIRY_BOOKING_STATUSES


@booking_bp.get("")
@login_required
def my_booking_inquiries():
    page, limit = page_args(request.args)
    q = BookingInquiry.query.filter_by(owner_id=g.user.id)

    status = (request.args.get("status") or "").strip()
    if status:
        q = q.filter(BookingInquiry.status == status)
    warehouse_id = request.args.get("warehouse_id", type=int)
    if warehouse_id:
        q = q.filter(BookingInquiry.warehouse_id == warehouse_id)

    rows, pagination = paginate(q.order_by(BookingInquiry.created_at.desc()), page, limit)
    return ok([b.to_dict() for b in rows], pagination=pagination)


@booking_bp.get("/stats")
@login_required
def my_booking_stats():
    inquiry_counts = dict(
        db.session.query(BookingInquiry.status, func.count(BookingInquiry.id))
        .filter(BookingInquiry.owner_id == g.user.id)
        .group_by(BookingInquiry.status)
        .all()
    )
    confirmed_counts = dict(
        db.session.query(ConfirmedBooking.status, func.count(ConfirmedBooking.id))
        .filter(ConfirmedBooking.owner_id == g.user.id)
        .group_by(ConfirmedBooking.status)
        .all()
    )
    revenue = (
        db.session.query(func.coalesce(func.sum(ConfirmedBooking.amount_paid), 0))
        .filter(ConfirmedBooking.owner_id == g.user.id, ConfirmedBooking.status != "cancelled")
        .scalar()
    )
    return ok({
        "inquiries": {"total": sum(inquiry_counts.values()), **{s: inquiry_counts.get(s, 0) for s in INQUIRY_BOOKING_STATUSES}},
        "confirmed": {"total": sum(confirmed_counts.values()), **{s: confirmed_counts.get(s, 0) for s in BOOKING_STATUSES}},
        "revenue": int(revenue or 0),
    })


@booking_bp.put("/<int:booking_id>/status")
@login_required
def update_booking_status(booking_id: int):
    data = request.get_json(silent=True) or {}
    kind = "confirmed" if request.args.get("type") == "confirmed" else "inquiry"
    row, statuses = load_booking(booking_id, kind)
    if not row:
        raise NotFoundError("Booking not found")
    if not can_manage(g.user, row.owner_id):
        raise ForbiddenError("You can only manage bookings for your own warehouses")

    row.status = require_choice(clean_str(data.get("status")), statuses, "status")
    db.session.commit()

    log_event(
        "BOOKING_STATUS_UPDATE",
        user_id=g.user.id,
        entity=f"{kind}_booking",
        entity_id=row.id,
        details={"status": row.status},
    )
    return ok(row.to_dict(), message="Booking status updated")
