from .health import health_bp
from .auth import auth_bp
from .warehouses import warehouse_bp
from .public import public_bp
from .payments import public_payments_bp, payments_bp
from .bookings import booking_bp
from .admin import admin_bp
from .inquiries import inquiries_bp
from .contacts import contacts_bp
from .analytics import analytics_bp

ALL_BLUEPRINTS = (
    health_bp,
    auth_bp,
    warehouse_bp,
    public_bp,
    public_payments_bp,
    payments_bp,
    booking_bp,
    admin_bp,
    inquiries_bp,
    contacts_bp,
    analytics_bp,
)
