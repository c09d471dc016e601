from flask import Blueprint, request, g

from models import db
from models.contact import Contact, CONTACT_STATUSES
from security.access import admin_required
from services import leads
from utils.audit import log_event
from utils.errors import NotFoundError, ValidationError
from utils.responses import ok
from utils.validation import page_args, paginate

contacts_bp = Blueprint("contacts", __name__, url_prefix="/api/contacts")


def _get(contact_id) -> Contact:
    contact = db.session.get(Contact, contact_id)
    if not contact:
        raise NotFoundError("Contact not found")
    return contact


@contacts_bp.get("")
@admin_required
def list_contacts():
    page, limit = page_args(request.args, default_limit=20)
    q = Contact.query
    status = (request.args.get("status") or "").strip()
    if status:
        if status not in CONTACT_STATUSES:
            raise ValidationError("Unknown status")
        q = q.filter(Contact.status == status)
    rows, pagination = paginate(q.order_by(Contact.created_at.desc()), page, limit)
    return ok([c.to_dict() for c in rows], pagination=pagination)


@contacts_bp.put("/<int:contact_id>")
@admin_required
def update_contact(contact_id: int):
    contact = _get(contact_id)
    leads.update_contact(contact, request.get_json(silent=True) or {}, g.user.id)
    db.session.commit()
    log_event("CONTACT_UPDATE", user_id=g.user.id, entity="contact", entity_id=contact.id,
              details={"status": contact.status})
    return ok(contact.to_dict(), message="Contact updated")


@contacts_bp.delete("/<int:contact_id>")
@admin_required
def delete_contact(contact_id: int):
    contact = _get(contact_id)
    db.session.delete(contact)
    db.session.commit()
    log_event("CONTACT_DELETE", user_id=g.user.id, entity="contact", entity_id=contact_id)
    return ok(message="Contact deleted")
