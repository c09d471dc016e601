"""Inquiry and contact-request lifecycles."""
import re
from datetime import datetime, timedelta

from models import db
from models.contact import Contact, CONTACT_STATUSES
from models.inquiry import Inquiry, INQUIRY_TYPES, SPACE_TYPES, WORK_STATUSES
from models.user import User
from utils.errors import ConflictError, NotFoundError, ValidationError
from utils.validation import clean_str, is_valid_email, require_choice, require_fields

PHONE_RE = re.compile(r"^\+?[\d\-()]{10,15}$")
CONTACT_METHODS = ("email", "phone")
DUPLICATE_WINDOW = timedelta(hours=24)


def _string_list(value, field):
    if value in (None, ""):
        return []
    if isinstance(value, str):
        value = [part.strip() for part in value.split(",")]
    if not isinstance(value, (list, tuple)):
        raise ValidationError(f"{field} must be a list")
    return [str(v).strip() for v in value if str(v).strip()]


def _valid_phone(phone) -> bool:
    return bool(phone) and bool(PHONE_RE.match(phone.replace(" ", "")))


def create_inquiry(data: dict) -> Inquiry:
    require_fields(data, "full_name", "email", "phone_number", "inquiry_type")
    email = clean_str(data.get("email")).lower()
    if not is_valid_email(email):
        raise ValidationError("Invalid email")
    phone = clean_str(data.get("phone_number"))
    if not _valid_phone(phone):
        raise ValidationError("Please provide a valid phone number")
    inquiry_type = require_choice(clean_str(data.get("inquiry_type")), INQUIRY_TYPES, "inquiry_type")
    if data.get("consent") not in (True, "true", "1", 1):
        raise ValidationError("Consent is required")

    space_type = clean_str(data.get("space_type"))
    if space_type:
        require_choice(space_type, SPACE_TYPES, "space_type")

    inquiry = Inquiry(
        full_name=clean_str(data.get("full_name")),
        email=email,
        phone_number=phone,
        company_name=clean_str(data.get("company_name")),
        inquiry_type=inquiry_type,
        message=clean_str(data.get("message")),
        preferred_contact_method=clean_str(data.get("preferred_contact_method")),
        preferred_contact_time=clean_str(data.get("preferred_contact_time")),
        consent=True,
        industry_type=clean_str(data.get("industry_type")),
        space_type=space_type,
        location_preference=clean_str(data.get("location_preference")),
        lease_duration=clean_str(data.get("lease_duration")),
        preferred_start_date=clean_str(data.get("preferred_start_date")),
        flexibility_requirements=_string_list(data.get("flexibility_requirements"), "flexibility_requirements"),
        fulfillment_services=_string_list(data.get("fulfillment_services"), "fulfillment_services"),
    )
    db.session.add(inquiry)
    db.session.commit()
    return inquiry


def get_inquiry(inquiry_id) -> Inquiry:
    inquiry = db.session.get(Inquiry, inquiry_id)
    if not inquiry:
        raise NotFoundError("Inquiry not found")
    return inquiry


def allocate_inquiry(inquiry: Inquiry, assignee_id, admin_id):
    if inquiry.allocation_status == "invalid":
        raise ConflictError("Invalid inquiries must be reactivated before allocation")
    try:
        assignee = db.session.get(User, int(assignee_id))
    except (TypeError, ValueError):
        raise ValidationError("user_id is required")
    if not assignee:
        raise NotFoundError("User not found")

    inquiry.allocation_status = "allocated"
    inquiry.allocated_to = assignee.id
    inquiry.allocated_by = admin_id
    inquiry.allocated_at = datetime.utcnow()
    inquiry.invalidation_reason = None


def invalidate_inquiry(inquiry: Inquiry, reason):
    reason = clean_str(reason)
    if not reason:
        raise ValidationError("reason is required")
    inquiry.allocation_status = "invalid"
    inquiry.invalidation_reason = reason[:255]
    inquiry.allocated_to = None
    inquiry.allocated_at = None


def reactivate_inquiry(inquiry: Inquiry):
    if inquiry.allocation_status != "invalid":
        raise ConflictError("Only invalid inquiries can be reactivated")
    inquiry.allocation_status = "unallocated"
    inquiry.invalidation_reason = None


def set_work_status(inquiry: Inquiry, status):
    inquiry.status = require_choice(clean_str(status), WORK_STATUSES, "status")


def create_contact(data: dict) -> Contact:
    require_fields(data, "full_name", "email", "phone", "company_name")
    full_name = clean_str(data.get("full_name"))
    company = clean_str(data.get("company_name"))
    if not 2 <= len(full_name) <= 100:
        raise ValidationError("full_name must be 2 to 100 characters")
    if not 2 <= len(company) <= 100:
        raise ValidationError("company_name must be 2 to 100 characters")

    email = clean_str(data.get("email")).lower()
    if not is_valid_email(email):
        raise ValidationError("Please provide a valid email address")
    phone = clean_str(data.get("phone"))
    if not _valid_phone(phone):
        raise ValidationError("Please provide a valid phone number")

    method = clean_str(data.get("preferred_contact_method")) or "email"
    require_choice(method, CONTACT_METHODS, "preferred_contact_method")

    since = datetime.utcnow() - DUPLICATE_WINDOW
    if Contact.query.filter(Contact.email == email, Contact.created_at >= since).first():
        raise ConflictError("A contact request with this email was already submitted in the last 24 hours")

    contact = Contact(
        full_name=full_name,
        email=email,
        phone=phone,
        company_name=company,
        preferred_contact_method=method,
        preferred_contact_time=clean_str(data.get("preferred_contact_time")),
        status="new",
    )
    db.session.add(contact)
    db.session.commit()
    return contact


def update_contact(contact: Contact, data: dict, user_id):
    if "status" in data:
        status = require_choice(clean_str(data.get("status")), CONTACT_STATUSES, "status")
        # first hand-off to "contacted" is stamped once
        if status == "contacted" and not contact.contacted_at:
            contact.contacted_by = user_id
            contact.contacted_at = datetime.utcnow()
        contact.status = status
    if "notes" in data:
        contact.notes = clean_str(data.get("notes"))
