from datetime import datetime, date
from models.db import db
from models.records import normalize_images, normalize_visitors

APPROVAL_STATUSES = ("pending", "approved", "rejected")
OWNERSHIP_TYPES = ("Broker", "Owner")
WAREHOUSE_TYPES = (
    "Standard or General Storage",
    "Hazardous Chemicals Storage",
    "Climate Controlled Storage",
)
PLOT_STATUSES = ("Agricultural", "Commercial", "Industrial", "Residential")
LISTING_FOR = ("Rent", "Sale")
FLOOR_PLANS = ("Ground Floor", "First Floor", "Second Floor")


class Warehouse(db.Model):
    __tablename__ = "warehouses"

    id = db.Column(db.Integer, primary_key=True)
    owner_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    approval_status = db.Column(db.String(20), nullable=False, default="pending", index=True)
    rejection_reason = db.Column(db.Text, nullable=True)
    reviewed_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    reviewed_at = db.Column(db.DateTime, nullable=True)

    name = db.Column(db.String(160), nullable=False)
    mobile_number = db.Column(db.String(20), nullable=False)
    email = db.Column(db.String(255), nullable=False)
    ownership_type = db.Column(db.String(20), nullable=False)

    address = db.Column(db.Text, nullable=False)
    city = db.Column(db.String(80), nullable=False, index=True)
    state = db.Column(db.String(80), nullable=False)
    pin_code = db.Column(db.Integer, nullable=False)

    warehouse_type = db.Column(db.String(60), nullable=False)
    build_up_area = db.Column(db.Float, nullable=False)
    total_plot_area = db.Column(db.Float, nullable=True)
    total_parking_area = db.Column(db.Float, nullable=True)
    plot_status = db.Column(db.String(30), nullable=True)
    listing_for = db.Column(db.String(10), nullable=True)
    plinth_height = db.Column(db.Float, nullable=True)
    dock_doors = db.Column(db.Integer, nullable=True)
    electricity_kva = db.Column(db.Float, nullable=True)
    floor_plans = db.Column(db.String(30), nullable=True)
    additional_details = db.Column(db.JSON, nullable=True)

    rent = db.Column(db.Float, nullable=True)
    deposit = db.Column(db.Integer, nullable=True)
    description = db.Column(db.Text, nullable=True)
    comments = db.Column(db.Text, nullable=True)

    image_paths = db.Column("images", db.JSON, nullable=False, default=list)
    views = db.Column(db.Integer, nullable=False, default=0)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    owner = db.relationship("User", back_populates="warehouses", foreign_keys=[owner_id])

    @property
    def images(self):
        return list(self.image_paths or [])

    @images.setter
    def images(self, value):
        # always assign a new list so the JSON column is marked dirty
        self.image_paths = normalize_images(value)

    @property
    def is_approved(self):
        return self.approval_status == "approved"

    def summary(self):
        return {
            "id": self.id,
            "name": self.name,
            "address": self.address,
            "city": self.city,
        }

    def to_dict(self, include_owner=False):
        data = {
            "id": self.id,
            "owner_id": self.owner_id,
            "approval_status": self.approval_status,
            "rejection_reason": self.rejection_reason,
            "reviewed_at": self.reviewed_at.isoformat() if self.reviewed_at else None,
            "name": self.name,
            "mobile_number": self.mobile_number,
            "email": self.email,
            "ownership_type": self.ownership_type,
            "address": self.address,
            "city": self.city,
            "state": self.state,
            "pin_code": self.pin_code,
            "warehouse_type": self.warehouse_type,
            "build_up_area": self.build_up_area,
            "total_plot_area": self.total_plot_area,
            "total_parking_area": self.total_parking_area,
            "plot_status": self.plot_status,
            "listing_for": self.listing_for,
            "plinth_height": self.plinth_height,
            "dock_doors": self.dock_doors,
            "electricity_kva": self.electricity_kva,
            "floor_plans": self.floor_plans,
            "additional_details": self.additional_details,
            "rent": self.rent,
            "deposit": self.deposit,
            "description": self.description,
            "comments": self.comments,
            "images": self.images,
            "views": self.views,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
        if include_owner and self.owner:
            data["owner"] = {
                "id": self.owner.id,
                "first_name": self.owner.first_name,
                "last_name": self.owner.last_name,
                "email": self.owner.email,
            }
        return data


class WarehouseAnalytics(db.Model):
    __tablename__ = "warehouse_analytics"

    id = db.Column(db.Integer, primary_key=True)
    warehouse_id = db.Column(db.Integer, db.ForeignKey("warehouses.id", ondelete="CASCADE"), nullable=False, index=True)
    date = db.Column(db.Date, nullable=False, default=date.today)
    views = db.Column(db.Integer, nullable=False, default=0)
    unique_visitors = db.Column(db.Integer, nullable=False, default=0)
    visitor_keys = db.Column(db.JSON, nullable=False, default=list)

    __table_args__ = (
        db.UniqueConstraint("warehouse_id", "date", name="uq_warehouse_analytics_day"),
    )

    def record_visit(self, visitor_key):
        seen = normalize_visitors(self.visitor_keys)
        self.views = (self.views or 0) + 1
        if visitor_key and visitor_key not in seen:
            seen.append(visitor_key)
            self.visitor_keys = seen
        self.unique_visitors = len(seen)
