from datetime import datetime
from models.db import db

INQUIRY_BOOKING_STATUSES = ("pending", "contacted", "resolved")


class BookingInquiry(db.Model):
    """A booking request left without payment."""

    __tablename__ = "booking_inquiries"

    id = db.Column(db.Integer, primary_key=True)
    reference = db.Column(db.String(40), unique=True, nullable=False, index=True)

    full_name = db.Column(db.String(160), nullable=False)
    email = db.Column(db.String(255), nullable=False)
    phone_number = db.Column(db.String(30), nullable=False)
    company_name = db.Column(db.String(160), nullable=False)
    preferred_contact_method = db.Column(db.String(20), nullable=True)
    preferred_contact_time = db.Column(db.String(40), nullable=True)
    preferred_start_date = db.Column(db.String(40), nullable=True)
    message = db.Column(db.Text, nullable=True)

    status = db.Column(db.String(20), nullable=False, default="pending")
    warehouse_id = db.Column(db.Integer, db.ForeignKey("warehouses.id"), nullable=False, index=True)
    owner_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    payment_id = db.Column(db.Integer, db.ForeignKey("payments.id"), nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    warehouse = db.relationship("Warehouse")

    def to_dict(self):
        return {
            "id": self.id,
            "reference": self.reference,
            "full_name": self.full_name,
            "email": self.email,
            "phone_number": self.phone_number,
            "company_name": self.company_name,
            "preferred_contact_method": self.preferred_contact_method,
            "preferred_contact_time": self.preferred_contact_time,
            "preferred_start_date": self.preferred_start_date,
            "message": self.message,
            "status": self.status,
            "warehouse": self.warehouse.summary() if self.warehouse else None,
            "payment_id": self.payment_id,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
