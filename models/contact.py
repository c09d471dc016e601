from datetime import datetime
from models.db import db

CONTACT_STATUSES = ("new", "contacted", "in_progress", "completed", "closed")


class Contact(db.Model):
    __tablename__ = "contacts"

    id = db.Column(db.Integer, primary_key=True)
    full_name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(255), nullable=False, index=True)
    phone = db.Column(db.String(20), nullable=False)
    company_name = db.Column(db.String(100), nullable=False)
    preferred_contact_method = db.Column(db.String(10), nullable=False, default="email")
    preferred_contact_time = db.Column(db.String(40), nullable=True)

    status = db.Column(db.String(20), nullable=False, default="new")
    notes = db.Column(db.Text, nullable=True)
    contacted_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    contacted_at = db.Column(db.DateTime, nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def to_dict(self):
        return {
            "id": self.id,
            "full_name": self.full_name,
            "email": self.email,
            "phone": self.phone,
            "company_name": self.company_name,
            "preferred_contact_method": self.preferred_contact_method,
            "preferred_contact_time": self.preferred_contact_time,
            "status": self.status,
            "notes": self.notes,
            "contacted_by": self.contacted_by,
            "contacted_at": self.contacted_at.isoformat() if self.contacted_at else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
