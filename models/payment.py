from datetime import datetime
from models.db import db
from models.records import BookingIntent

PAYMENT_STATUSES = ("created", "paid", "failed", "cancelled")


class Payment(db.Model):
    __tablename__ = "payments"

    id = db.Column(db.Integer, primary_key=True)
    razorpay_order_id = db.Column(db.String(64), unique=True, nullable=False, index=True)
    razorpay_payment_id = db.Column(db.String(64), nullable=True)
    razorpay_signature = db.Column(db.String(128), nullable=True)

    amount = db.Column(db.Integer, nullable=False)   # smallest unit
    currency = db.Column(db.String(10), nullable=False, default="INR")
    status = db.Column(db.String(20), nullable=False, default="created")  # created, paid, failed, cancelled
    payment_method = db.Column(db.String(40), nullable=True)
    gateway_response = db.Column(db.JSON, nullable=True)
    failure_reason = db.Column(db.Text, nullable=True)

    warehouse_id = db.Column(db.Integer, db.ForeignKey("warehouses.id"), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True, index=True)
    guest_name = db.Column(db.String(160), nullable=True)
    guest_email = db.Column(db.String(255), nullable=True)
    guest_phone = db.Column(db.String(30), nullable=True)

    booking_details = db.Column(db.JSON, nullable=False, default=dict)
    receipt = db.Column(db.String(64), unique=True, nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
    paid_at = db.Column(db.DateTime, nullable=True)

    warehouse = db.relationship("Warehouse")

    @property
    def booking_intent(self) -> BookingIntent:
        return BookingIntent.from_dict(self.booking_details)

    @booking_intent.setter
    def booking_intent(self, intent: BookingIntent):
        self.booking_details = intent.to_dict()

    @property
    def is_pending(self):
        return self.status == "created"

    def to_dict(self):
        return {
            "id": self.id,
            "razorpay_order_id": self.razorpay_order_id,
            "razorpay_payment_id": self.razorpay_payment_id,
            "amount": self.amount,
            "currency": self.currency,
            "status": self.status,
            "payment_method": self.payment_method,
            "warehouse": self.warehouse.summary() if self.warehouse else None,
            "booking_details": self.booking_intent.to_dict(),
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
