from datetime import datetime
from models.db import db

INQUIRY_TYPES = (
    "Warehouse Availability Inquiry",
    "AI & Predictive Analytics Solutions",
    "Short-Term Storage & Leasing",
    "Full-Service Warehousing & Fulfillment",
)
WORK_STATUSES = ("pending", "in_progress", "completed", "cancelled")
ALLOCATION_STATUSES = ("unallocated", "allocated", "invalid")
SPACE_TYPES = ("Cold Storage", "Dry Storage", "Hazardous Goods")


class Inquiry(db.Model):
    __tablename__ = "inquiries"

    id = db.Column(db.Integer, primary_key=True)
    full_name = db.Column(db.String(160), nullable=False)
    email = db.Column(db.String(255), nullable=False, index=True)
    phone_number = db.Column(db.String(30), nullable=False)
    company_name = db.Column(db.String(160), nullable=True)
    inquiry_type = db.Column(db.String(80), nullable=False)
    message = db.Column(db.Text, nullable=True)
    preferred_contact_method = db.Column(db.String(20), nullable=True)
    preferred_contact_time = db.Column(db.String(40), nullable=True)
    consent = db.Column(db.Boolean, nullable=False, default=False)

    industry_type = db.Column(db.String(80), nullable=True)
    space_type = db.Column(db.String(40), nullable=True)
    location_preference = db.Column(db.String(160), nullable=True)
    lease_duration = db.Column(db.String(40), nullable=True)
    preferred_start_date = db.Column(db.String(40), nullable=True)
    flexibility_requirements = db.Column(db.JSON, nullable=False, default=list)
    fulfillment_services = db.Column(db.JSON, nullable=False, default=list)

    status = db.Column(db.String(20), nullable=False, default="pending")
    allocation_status = db.Column(db.String(20), nullable=False, default="unallocated", index=True)
    allocated_to = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True, index=True)
    allocated_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    allocated_at = db.Column(db.DateTime, nullable=True)
    invalidation_reason = db.Column(db.String(255), nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def to_dict(self):
        return {
            "id": self.id,
            "full_name": self.full_name,
            "email": self.email,
            "phone_number": self.phone_number,
            "company_name": self.company_name,
            "inquiry_type": self.inquiry_type,
            "message": self.message,
            "preferred_contact_method": self.preferred_contact_method,
            "preferred_contact_time": self.preferred_contact_time,
            "consent": self.consent,
            "industry_type": self.industry_type,
            "space_type": self.space_type,
            "location_preference": self.location_preference,
            "lease_duration": self.lease_duration,
            "preferred_start_date": self.preferred_start_date,
            "flexibility_requirements": self.flexibility_requirements or [],
            "fulfillment_services": self.fulfillment_services or [],
            "status": self.status,
            "allocation_status": self.allocation_status,
            "allocated_to": self.allocated_to,
            "allocated_at": self.allocated_at.isoformat() if self.allocated_at else None,
            "invalidation_reason": self.invalidation_reason,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
