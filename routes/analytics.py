from flask import Blueprint, request, g

from models import db
from models.booking_inquiry import BookingInquiry
from models.confirmed_booking import ConfirmedBooking
from models.warehouse import Warehouse
from security.access import login_required, can_manage
from services.warehouses import view_series
from utils.errors import ForbiddenError, NotFoundError
from utils.responses import ok

analytics_bp = Blueprint("analytics", __name__, url_prefix="/api/analytics")


def _days():
    days = request.args.get("days", 30, type=int) or 30
    return min(max(days, 1), 365)


@analytics_bp.get("/warehouses")
@login_required
def owner_overview():
    warehouses = Warehouse.query.filter_by(owner_id=g.user.id).all()
    ids = [w.id for w in warehouses]
    return ok({
        "warehouses": [
            {"id": w.id, "name": w.name, "approval_status": w.approval_status, "views": w.views}
            for w in warehouses
        ],
        "total_views": sum(w.views or 0 for w in warehouses),
        "confirmed_bookings": ConfirmedBooking.query.filter_by(owner_id=g.user.id).count(),
        "booking_inquiries": BookingInquiry.query.filter_by(owner_id=g.user.id).count(),
        "daily": view_series(ids, _days()),
    })


@analytics_bp.get("/warehouses/<int:warehouse_id>")
@login_required
def warehouse_detail(warehouse_id: int):
    warehouse = db.session.get(Warehouse, warehouse_id)
    if not warehouse:
        raise NotFoundError("Warehouse not found")
    if not can_manage(g.user, warehouse.owner_id):
        raise ForbiddenError("You can only view analytics for your own warehouses")

    return ok({
        "warehouse": warehouse.summary(),
        "views": warehouse.views,
        "confirmed_bookings": ConfirmedBooking.query.filter_by(warehouse_id=warehouse.id).count(),
        "booking_inquiries": BookingInquiry.query.filter_by(warehouse_id=warehouse.id).count(),
        "daily": view_series([warehouse.id], _days()),
    })
