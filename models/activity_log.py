from datetime import datetime
from models.db import db

class ActivityLog(db.Model):
    __tablename__ = "activity_logs"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, nullable=True)  # nullable for public and gateway events
    action = db.Column(db.String(80), nullable=False)  # e.g. WAREHOUSE_APPROVED, PAYMENT_PAID
    entity = db.Column(db.String(80), nullable=True)   # e.g. warehouse, payment
    entity_id = db.Column(db.String(80), nullable=True)

    ip = db.Column(db.String(64), nullable=True)
    user_agent = db.Column(db.String(255), nullable=True)
    details = db.Column(db.JSON, nullable=True)

    timestamp = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)

    def to_dict(self):
        return {
            "id": self.id,
            "user_id": self.user_id,
            "action": self.action,
            "entity": self.entity,
            "entity_id": self.entity_id,
            "ip": self.ip,
            "details": self.details,
            "timestamp": self.timestamp.isoformat(),
        }
