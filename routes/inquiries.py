from flask import Blueprint, request, g

from models import db
from models.inquiry import Inquiry, ALLOCATION_STATUSES
from security.access import admin_required, login_required
from services import leads
from utils.audit import log_event
from utils.errors import ForbiddenError, ValidationError
from utils.responses import ok
from utils.validation import page_args, paginate

inquiries_bp = Blueprint("inquiries", __name__, url_prefix="/api/inquiries")


@inquiries_bp.get("")
@admin_required
def list_inquiries():
    page, limit = page_args(request.args, default_limit=20)
    q = Inquiry.query

    allocation = (request.args.get("allocation_status") or "").strip()
    if allocation:
        if allocation not in ALLOCATION_STATUSES:
            raise ValidationError("Unknown allocation_status")
        q = q.filter(Inquiry.allocation_status == allocation)
    inquiry_type = (request.args.get("inquiry_type") or "").strip()
    if inquiry_type:
        q = q.filter(Inquiry.inquiry_type == inquiry_type)

    rows, pagination = paginate(q.order_by(Inquiry.created_at.desc()), page, limit)
    return ok([i.to_dict() for i in rows], pagination=pagination)


@inquiries_bp.get("/<int:inquiry_id>")
@admin_required
def get_inquiry(inquiry_id: int):
    return ok(leads.get_inquiry(inquiry_id).to_dict())


@inquiries_bp.put("/<int:inquiry_id>/allocate")
@admin_required
def allocate(inquiry_id: int):
    data = request.get_json(silent=True) or {}
    inquiry = leads.get_inquiry(inquiry_id)
    leads.allocate_inquiry(inquiry, data.get("user_id"), g.user.id)
    db.session.commit()
    log_event("INQUIRY_ALLOCATE", user_id=g.user.id, entity="inquiry", entity_id=inquiry.id,
              details={"allocated_to": inquiry.allocated_to})
    return ok(inquiry.to_dict(), message="Inquiry allocated")


@inquiries_bp.put("/<int:inquiry_id>/invalid")
@admin_required
def mark_invalid(inquiry_id: int):
    data = request.get_json(silent=True) or {}
    inquiry = leads.get_inquiry(inquiry_id)
    leads.invalidate_inquiry(inquiry, data.get("reason"))
    db.session.commit()
    log_event("INQUIRY_INVALID", user_id=g.user.id, entity="inquiry", entity_id=inquiry.id,
              details={"reason": inquiry.invalidation_reason})
    return ok(inquiry.to_dict(), message="Inquiry marked invalid")


@inquiries_bp.put("/<int:inquiry_id>/reactivate")
@admin_required
def reactivate(inquiry_id: int):
    inquiry = leads.get_inquiry(inquiry_id)
    leads.reactivate_inquiry(inquiry)
    db.session.commit()
    log_event("INQUIRY_REACTIVATE", user_id=g.user.id, entity="inquiry", entity_id=inquiry.id)
    return ok(inquiry.to_dict(), message="Inquiry reactivated")


@inquiries_bp.delete("/<int:inquiry_id>")
@admin_required
def delete_inquiry(inquiry_id: int):
    inquiry = leads.get_inquiry(inquiry_id)
    db.session.delete(inquiry)
    db.session.commit()
    log_event("INQUIRY_DELETE", user_id=g.user.id, entity="inquiry", entity_id=inquiry_id)
    return ok(message="Inquiry deleted")


# partner side: inquiries allocated to the current user

@inquiries_bp.get("/mine")
@login_required
def my_inquiries():
    page, limit = page_args(request.args, default_limit=20)
    q = Inquiry.query.filter_by(allocated_to=g.user.id, allocation_status="allocated")
    status = (request.args.get("status") or "").strip()
    if status:
        q = q.filter(Inquiry.status == status)
    rows, pagination = paginate(q.order_by(Inquiry.allocated_at.desc()), page, limit)
    return ok([i.to_dict() for i in rows], pagination=pagination)


@inquiries_bp.put("/mine/<int:inquiry_id>/status")
@login_required
def update_my_inquiry_status(inquiry_id: int):
    data = request.get_json(silent=True) or {}
    inquiry = leads.get_inquiry(inquiry_id)
    if inquiry.allocated_to != g.user.id and not g.user.is_admin:
        raise ForbiddenError("Inquiry is not allocated to you")
    leads.set_work_status(inquiry, data.get("status"))
    db.session.commit()
    log_event("INQUIRY_STATUS_UPDATE", user_id=g.user.id, entity="inquiry", entity_id=inquiry.id,
              details={"status": inquiry.status})
    return ok(inquiry.to_dict(), message="Inquiry status updated")
