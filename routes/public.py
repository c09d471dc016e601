from flask import Blueprint, request, g
from sqlalchemy import or_

from models import db
from models.warehouse import Warehouse
from services import bookings as booking_service
from services import leads
from services import warehouses as warehouse_service
from utils.audit import log_event
from utils.errors import NotFoundError, ValidationError
from utils.responses import ok
from utils.validation import page_args, paginate

public_bp = Blueprint("public", __name__, url_prefix="/api/public")

SORTS = {
    "newest": Warehouse.created_at.desc(),
    "rent_asc": Warehouse.rent.asc(),
    "rent_desc": Warehouse.rent.desc(),
    "area_desc": Warehouse.build_up_area.desc(),
    "popular": Warehouse.views.desc(),
}


def _float_arg(name):
    value = request.args.get(name)
    if value in (None, ""):
        return None
    try:
        return float(value)
    except ValueError:
        raise ValidationError(f"{name} must be a number")


def _approved(warehouse_id) -> Warehouse:
    warehouse = Warehouse.query.filter_by(id=warehouse_id, approval_status="approved").first()
    if not warehouse:
        raise NotFoundError("Warehouse not found")
    return warehouse


@public_bp.get("/warehouses")
def list_warehouses():
    page, limit = page_args(request.args, default_limit=12)
    q = Warehouse.query.filter(Warehouse.approval_status == "approved")

    for field in ("city", "state", "warehouse_type", "listing_for"):
        value = (request.args.get(field) or "").strip()
        if value:
            q = q.filter(getattr(Warehouse, field).ilike(value))

    search = (request.args.get("search") or "").strip()
    if search:
        if len(search) < 3:
            raise ValidationError("Search term must be at least 3 characters")
        like = f"%{search}%"
        q = q.filter(or_(
            Warehouse.name.ilike(like),
            Warehouse.address.ilike(like),
            Warehouse.city.ilike(like),
            Warehouse.state.ilike(like),
            Warehouse.description.ilike(like),
        ))

    bounds = (
        ("min_rent", Warehouse.rent, "ge"), ("max_rent", Warehouse.rent, "le"),
        ("min_area", Warehouse.build_up_area, "ge"), ("max_area", Warehouse.build_up_area, "le"),
    )
    for name, column, op in bounds:
        value = _float_arg(name)
        if value is not None:
            q = q.filter(column >= value if op == "ge" else column <= value)

    order = SORTS.get(request.args.get("sort") or "newest", SORTS["newest"])
    rows, pagination = paginate(q.order_by(order, Warehouse.id.desc()), page, limit)
    return ok([w.to_dict() for w in rows], pagination=pagination)


@public_bp.get("/warehouses/<int:warehouse_id>")
def get_warehouse(warehouse_id: int):
    return ok(_approved(warehouse_id).to_dict(include_owner=True))


@public_bp.post("/warehouses/<int:warehouse_id>/view")
def track_view(warehouse_id: int):
    warehouse = _approved(warehouse_id)
    row = warehouse_service.record_view(warehouse, warehouse_service.visitor_key(request))
    return ok({"views": warehouse.views, "today": {"views": row.views, "unique_visitors": row.unique_visitors}})


@public_bp.post("/bookings")
def create_booking_inquiry():
    data = request.get_json(silent=True) or {}
    inquiry = booking_service.create_booking_inquiry(data)
    log_event("BOOKING_INQUIRY_CREATE", user_id=getattr(g.user, "id", None), entity="booking_inquiry", entity_id=inquiry.id)
    return ok(inquiry.to_dict(), message="Inquiry submitted successfully", status=201)


@public_bp.post("/inquiries")
def create_inquiry():
    data = request.get_json(silent=True) or {}
    inquiry = leads.create_inquiry(data)
    log_event("INQUIRY_CREATE", entity="inquiry", entity_id=inquiry.id)
    return ok(inquiry.to_dict(), message="Inquiry submitted successfully", status=201)


@public_bp.post("/contacts")
def create_contact():
    data = request.get_json(silent=True) or {}
    contact = leads.create_contact(data)
    log_event("CONTACT_CREATE", entity="contact", entity_id=contact.id)
    return ok(
        contact.to_dict(),
        message="Contact request submitted successfully! We will get back to you soon.",
        status=201,
    )
