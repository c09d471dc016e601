import logging

from flask import Blueprint, request, g
from sqlalchemy import func

from models import db
from models.warehouse import Warehouse
from security.access import login_required, can_manage
from services import warehouses as warehouse_service
from utils.audit import log_event
from utils.errors import ForbiddenError, NotFoundError
from utils.responses import ok
from utils.validation import page_args, paginate

logger = logging.getLogger(__name__)

warehouse_bp = Blueprint("warehouses", __name__, url_prefix="/api/warehouses")


def _payload():
    """JSON body, or form fields plus uploaded files for multipart requests."""
    if request.mimetype == "multipart/form-data":
        data = request.form.to_dict()
        if "existing_images" in request.form:
            data["existing_images"] = request.form.getlist("existing_images")
        return data, request.files.getlist("images")
    return request.get_json(silent=True) or {}, []


def _get_managed(warehouse_id) -> Warehouse:
    warehouse = db.session.get(Warehouse, warehouse_id)
    if not warehouse:
        raise NotFoundError("Warehouse not found")
    if not can_manage(g.user, warehouse.owner_id):
        raise ForbiddenError("You can only manage your own warehouses")
    return warehouse


@warehouse_bp.post("")
@login_required
def create_warehouse():
    data, files = _payload()
    warehouse = Warehouse(owner_id=g.user.id, approval_status="pending", views=0)
    warehouse_service.apply_fields(warehouse, data)
    saved = warehouse_service.replace_images(warehouse, data.get("images") or data.get("existing_images"), files)

    db.session.add(warehouse)
    warehouse_service.commit_listing(saved)

    log_event("WAREHOUSE_CREATE", user_id=g.user.id, entity="warehouse", entity_id=warehouse.id)
    logger.info("Warehouse %s submitted by user %s", warehouse.id, g.user.id)
    return ok(warehouse.to_dict(), message="Warehouse submitted for approval", status=201)


@warehouse_bp.get("")
@login_required
def list_my_warehouses():
    page, limit = page_args(request.args)
    q = Warehouse.query.filter_by(owner_id=g.user.id)

    status = (request.args.get("status") or "").strip().lower()
    if status:
        q = q.filter(Warehouse.approval_status == status)

    rows, pagination = paginate(q.order_by(Warehouse.created_at.desc()), page, limit)
    return ok([w.to_dict() for w in rows], pagination=pagination)


@warehouse_bp.get("/stats")
@login_required
def my_warehouse_stats():
    counts = dict(
        db.session.query(Warehouse.approval_status, func.count(Warehouse.id))
        .filter(Warehouse.owner_id == g.user.id)
        .group_by(Warehouse.approval_status)
        .all()
    )
    total_views = (
        db.session.query(func.coalesce(func.sum(Warehouse.views), 0))
        .filter(Warehouse.owner_id == g.user.id)
        .scalar()
    )
    return ok({
        "total": sum(counts.values()),
        "pending": counts.get("pending", 0),
        "approved": counts.get("approved", 0),
        "rejected": counts.get("rejected", 0),
        "total_views": int(total_views or 0),
    })


@warehouse_bp.get("/cities")
def city_suggestions():
    prefix = (request.args.get("q") or "").strip()
    q = db.session.query(Warehouse.city).filter(Warehouse.approval_status == "approved")
    if prefix:
        q = q.filter(Warehouse.city.ilike(f"{prefix}%"))
    cities = sorted({row[0] for row in q.distinct().limit(50).all()})
    return ok(cities)


@warehouse_bp.get("/<int:warehouse_id>")
@login_required
def get_warehouse(warehouse_id: int):
    warehouse = _get_managed(warehouse_id)
    return ok(warehouse.to_dict(include_owner=True))


@warehouse_bp.put("/<int:warehouse_id>")
@login_required
def update_warehouse(warehouse_id: int):
    warehouse = _get_managed(warehouse_id)
    data, files = _payload()
    warehouse_service.apply_fields(warehouse, data, partial=True)
    saved = []
    if files or "images" in data or "existing_images" in data:
        existing = data.get("images") if "images" in data else data.get("existing_images")
        saved = warehouse_service.replace_images(warehouse, existing, files)

    # any owner edit goes back through review
    if not g.user.is_admin and warehouse.approval_status != "pending":
        warehouse.approval_status = "pending"
        warehouse.rejection_reason = None
        warehouse.reviewed_by = None
        warehouse.reviewed_at = None

    warehouse_service.commit_listing(saved)
    log_event("WAREHOUSE_UPDATE", user_id=g.user.id, entity="warehouse", entity_id=warehouse.id)
    return ok(warehouse.to_dict(), message="Warehouse updated")


@warehouse_bp.delete("/<int:warehouse_id>")
@login_required
def delete_warehouse(warehouse_id: int):
    warehouse = _get_managed(warehouse_id)
    warehouse_service.delete_warehouse(warehouse)
    db.session.commit()

    log_event("WAREHOUSE_DELETE", user_id=g.user.id, entity="warehouse", entity_id=warehouse_id)
    return ok(message="Warehouse deleted")
