import logging
from collections import OrderedDict
from datetime import datetime

from flask import Blueprint, jsonify, g, request
from sqlalchemy import func

from models import db
from models.activity_log import ActivityLog
from models.booking_inquiry import BookingInquiry, INQUIRY_BOOKING_STATUSES
from models.confirmed_booking import ConfirmedBooking
from models.contact import Contact
from models.inquiry import Inquiry
from models.payment import Payment
from models.user import User
from models.warehouse import Warehouse, APPROVAL_STATUSES
from routes.bookings import load_booking
from security.access import admin_required
from security.credentials import hash_password, password_problems
from services import notifications
from utils.audit import log_event
from utils.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from utils.responses import ok
from utils.validation import clean_str, is_valid_email, page_args, paginate, require_choice

logger = logging.getLogger(__name__)

admin_bp = Blueprint("admin", __name__, url_prefix="/api/admin")


def _count_by(column, *filters):
    q = db.session.query(column, func.count()).group_by(column)
    if filters:
        q = q.filter(*filters)
    return dict(q.all())


@admin_bp.get("/dashboard")
@admin_required
def dashboard():
    warehouses = _count_by(Warehouse.approval_status)
    payments = _count_by(Payment.status)
    revenue = (
        db.session.query(func.coalesce(func.sum(Payment.amount), 0))
        .filter(Payment.status == "paid")
        .scalar()
    )
    return ok({
        "users": User.query.count(),
        "admins": User.query.filter_by(is_admin=True).count(),
        "warehouses": {
            "total": sum(warehouses.values()),
            **{s: warehouses.get(s, 0) for s in APPROVAL_STATUSES},
        },
        "payments": payments,
        "confirmed_bookings": ConfirmedBooking.query.count(),
        "booking_inquiries": BookingInquiry.query.count(),
        "inquiries": _count_by(Inquiry.allocation_status),
        "contacts": _count_by(Contact.status),
        "revenue": int(revenue or 0),
    })


# -------------------------
# warehouses
# -------------------------

@admin_bp.get("/warehouses")
@admin_required
def list_warehouses():
    page, limit = page_args(request.args)
    q = Warehouse.query
    status = (request.args.get("status") or "").strip().lower()
    if status:
        q = q.filter(Warehouse.approval_status == status)
    rows, pagination = paginate(q.order_by(Warehouse.created_at.desc()), page, limit)
    return ok([w.to_dict(include_owner=True) for w in rows], pagination=pagination)


@admin_bp.get("/warehouses/pending")
@admin_required
def pending_warehouses():
    rows = (
        Warehouse.query
        .filter_by(approval_status="pending")
        .order_by(Warehouse.created_at.asc())
        .limit(200)
        .all()
    )
    return ok([w.to_dict(include_owner=True) for w in rows])


def _review(warehouse_id, status, reason=None):
    warehouse = db.session.get(Warehouse, warehouse_id)
    if not warehouse:
        raise NotFoundError("Warehouse not found")

    warehouse.approval_status = status
    warehouse.reviewed_by = g.user.id
    warehouse.reviewed_at = datetime.utcnow()
    warehouse.rejection_reason = reason if status == "rejected" else None

    outbox = []
    if warehouse.owner and warehouse.owner.email:
        outbox.append(notifications.enqueue(
            f"warehouse_{status}", warehouse.owner.email, notifications.warehouse_review_email(warehouse),
        ))
    log_event(
        f"WAREHOUSE_{status.upper()}",
        user_id=g.user.id,
        entity="warehouse",
        entity_id=warehouse.id,
        details={"reason": reason} if reason else None,
        commit=False,
    )
    db.session.commit()
    notifications.dispatch(outbox)
    logger.info("Warehouse %s %s by admin %s", warehouse.id, status, g.user.id)
    return warehouse


@admin_bp.put("/warehouses/<int:warehouse_id>/approve")
@admin_required
def approve_warehouse(warehouse_id: int):
    warehouse = _review(warehouse_id, "approved")
    return ok(warehouse.to_dict(), message="Warehouse approved")


@admin_bp.put("/warehouses/<int:warehouse_id>/reject")
@admin_required
def reject_warehouse(warehouse_id: int):
    data = request.get_json(silent=True) or {}
    reason = clean_str(data.get("reason"))
    if not reason:
        raise ValidationError("Rejection reason is required")
    warehouse = _review(warehouse_id, "rejected", reason)
    return ok(warehouse.to_dict(), message="Warehouse rejected")


# -------------------------
# admin users
# -------------------------

@admin_bp.get("/users")
@admin_required
def list_users():
    page, limit = page_args(request.args, default_limit=20)
    q = User.query
    if request.args.get("admins_only") in ("1", "true"):
        q = q.filter(User.is_admin.is_(True))
    search = (request.args.get("search") or "").strip()
    if search:
        like = f"%{search}%"
        q = q.filter(User.email.ilike(like) | User.first_name.ilike(like) | User.last_name.ilike(like))
    rows, pagination = paginate(q.order_by(User.created_at.desc()), page, limit)
    return ok([u.to_dict() for u in rows], pagination=pagination)


@admin_bp.post("/users")
@admin_required
def create_admin():
    data = request.get_json(silent=True) or {}
    email = (clean_str(data.get("email")) or "").lower()
    first_name = clean_str(data.get("first_name"))
    last_name = clean_str(data.get("last_name"))
    password = data.get("password") or ""

    if not is_valid_email(email):
        raise ValidationError("Invalid email")
    if not first_name or not last_name:
        raise ValidationError("first_name and last_name are required")
    problems = password_problems(password)
    if problems:
        raise ValidationError("Password does not meet policy", errors=problems)
    if User.query.filter_by(email=email).first():
        raise ConflictError("Email already registered")

    user = User(
        email=email,
        first_name=first_name,
        last_name=last_name,
        mobile_number=clean_str(data.get("mobile_number")),
        password_hash=hash_password(password),
        is_admin=True,
    )
    db.session.add(user)
    db.session.commit()

    log_event("ADMIN_CREATE", user_id=g.user.id, entity="user", entity_id=user.id)
    return ok(user.to_dict(), message="Admin created", status=201)


def _last_admin(user) -> bool:
    return user.is_admin and User.query.filter_by(is_admin=True).count() <= 1


@admin_bp.put("/users/<int:user_id>")
@admin_required
def update_user(user_id: int):
    data = request.get_json(silent=True) or {}
    user = db.session.get(User, user_id)
    if not user:
        raise NotFoundError("User not found")

    for field in ("first_name", "last_name", "mobile_number", "country", "state", "city"):
        if field in data:
            value = clean_str(data.get(field))
            if value is None and field in ("first_name", "last_name"):
                raise ValidationError(f"{field} cannot be empty")
            setattr(user, field, value)

    if "is_admin" in data:
        make_admin = bool(data.get("is_admin"))
        if not make_admin and user.id == g.user.id:
            raise ForbiddenError("Cannot remove your own admin access")
        if not make_admin and _last_admin(user):
            raise ForbiddenError("Cannot remove the last admin")
        user.is_admin = make_admin

    db.session.commit()
    log_event("ADMIN_UPDATE_USER", user_id=g.user.id, entity="user", entity_id=user.id,
              details={"is_admin": user.is_admin})
    return ok(user.to_dict(), message="User updated")


@admin_bp.delete("/users/<int:user_id>")
@admin_required
def delete_user(user_id: int):
    user = db.session.get(User, user_id)
    if not user:
        raise NotFoundError("User not found")
    if user.id == g.user.id:
        raise ForbiddenError("Cannot delete yourself")
    if _last_admin(user):
        raise ForbiddenError("Cannot delete the last admin")
    if Warehouse.query.filter_by(owner_id=user.id).first():
        raise ConflictError("User owns warehouses and cannot be deleted")
    if Payment.query.filter_by(user_id=user.id).first():
        raise ConflictError("User has payment records and cannot be deleted")

    db.session.delete(user)
    db.session.commit()
    log_event("ADMIN_DELETE_USER", user_id=g.user.id, entity="user", entity_id=user_id)
    return ok(message="User deleted")


@admin_bp.get("/analytics/users")
@admin_required
def user_analytics():
    registrations = OrderedDict()
    for (created_at,) in db.session.query(User.created_at).order_by(User.created_at.asc()).all():
        key = created_at.strftime("%Y-%m")
        registrations[key] = registrations.get(key, 0) + 1
    return ok({
        "total": sum(registrations.values()),
        "by_month": [{"month": k, "count": v} for k, v in registrations.items()],
    })


# -------------------------
# bookings
# -------------------------

@admin_bp.get("/bookings")
@admin_required
def list_bookings():
    page, limit = page_args(request.args, default_limit=20)
    kind = request.args.get("type") or "confirmed"
    model = ConfirmedBooking if kind == "confirmed" else BookingInquiry

    q = model.query
    status = (request.args.get("status") or "").strip()
    if status:
        q = q.filter(model.status == status)
    warehouse_id = request.args.get("warehouse_id", type=int)
    if warehouse_id:
        q = q.filter(model.warehouse_id == warehouse_id)

    rows, pagination = paginate(q.order_by(model.created_at.desc()), page, limit)
    return ok([r.to_dict() for r in rows], pagination=pagination, type=kind)


@admin_bp.put("/bookings/<int:booking_id>/status")
@admin_required
def update_booking_status(booking_id: int):
    data = request.get_json(silent=True) or {}
    kind = "confirmed" if request.args.get("type", "confirmed") == "confirmed" else "inquiry"
    row, statuses = load_booking(booking_id, kind)
    if not row:
        raise NotFoundError("Booking not found")

    row.status = require_choice(clean_str(data.get("status")), statuses, "status")
    db.session.commit()
    log_event("ADMIN_BOOKING_STATUS", user_id=g.user.id, entity=f"{kind}_booking", entity_id=row.id,
              details={"status": row.status})
    return ok(row.to_dict(), message="Booking status updated")


@admin_bp.put("/bookings/bulk-status")
@admin_required
def bulk_update_inquiries():
    data = request.get_json(silent=True) or {}
    ids = data.get("ids")
    if not isinstance(ids, list) or not ids:
        raise ValidationError("ids must be a non-empty list")
    status = require_choice(clean_str(data.get("status")), INQUIRY_BOOKING_STATUSES, "status")

    updated = (
        BookingInquiry.query
        .filter(BookingInquiry.id.in_(ids))
        .update({BookingInquiry.status: status}, synchronize_session=False)
    )
    db.session.commit()
    log_event("ADMIN_BOOKING_BULK_STATUS", user_id=g.user.id, entity="booking_inquiry",
              details={"ids": ids, "status": status})
    return ok({"updated": updated}, message="Bookings updated")


@admin_bp.delete("/bookings/<int:booking_id>")
@admin_required
def delete_booking_inquiry(booking_id: int):
    row = db.session.get(BookingInquiry, booking_id)
    if not row:
        raise NotFoundError("Booking not found")
    db.session.delete(row)
    db.session.commit()
    log_event("ADMIN_BOOKING_DELETE", user_id=g.user.id, entity="booking_inquiry", entity_id=booking_id)
    return ok(message="Booking deleted")


# -------------------------
# activity logs
# -------------------------

@admin_bp.get("/activity-logs")
@admin_required
def activity_logs():
    page, limit = page_args(request.args, default_limit=50, max_limit=200)
    q = ActivityLog.query
    action = (request.args.get("action") or "").strip().upper()
    if action:
        q = q.filter(ActivityLog.action == action)
    entity = (request.args.get("entity") or "").strip()
    if entity:
        q = q.filter(ActivityLog.entity == entity)
    rows, pagination = paginate(q.order_by(ActivityLog.timestamp.desc(), ActivityLog.id.desc()), page, limit)
    return jsonify(success=True, data=[r.to_dict() for r in rows], pagination=pagination), 200
