import re

import pytest

from app import create_app
from models import db
from models.user import User
from models.warehouse import Warehouse
from security.credentials import hash_password, issue_token
from security.signatures import payment_signature
from services.payment_gateway import StubGateway

KEY_SECRET = "test_key_secret"
WEBHOOK_SECRET = "test_webhook_secret"
PASSWORD = "s3cure-pass"


class RecordingMailer:
    """Mail transport that keeps messages in memory."""

    def __init__(self):
        self.sent = []
        self.fail_with = None

    def send(self, to_email, subject, html):
        if self.fail_with:
            raise self.fail_with
        self.sent.append({"to": to_email, "subject": subject, "html": html})
        return True, None

    def last_code(self):
        match = re.search(r"<strong>(\d{6})</strong>", self.sent[-1]["html"])
        return match.group(1) if match else None


@pytest.fixture
def mailer():
    return RecordingMailer()


@pytest.fixture
def gateway():
    return StubGateway("rzp_test_key")


@pytest.fixture
def app(mailer, gateway, tmp_path):
    app = create_app(
        {
            "TESTING": True,
            "SQLALCHEMY_DATABASE_URI": "sqlite://",
            "RAZORPAY_KEY_SECRET": KEY_SECRET,
            "RAZORPAY_WEBHOOK_SECRET": WEBHOOK_SECRET,
            "JWT_SECRET_KEY": "test-jwt-secret",
            "BCRYPT_ROUNDS": 4,
            "UPLOAD_FOLDER": str(tmp_path / "uploads"),
            "LOG_LEVEL": "WARNING",
        },
        gateway=gateway,
        mailer=mailer,
    )
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(app):
    counter = {"n": 0}

    def _make(email=None, is_admin=False, password=PASSWORD):
        counter["n"] += 1
        user = User(
            email=email or f"user{counter['n']}@example.com",
            first_name="Test",
            last_name=f"User{counter['n']}",
            password_hash=hash_password(password),
            is_admin=is_admin,
        )
        db.session.add(user)
        db.session.commit()
        return user

    return _make


@pytest.fixture
def owner(make_user):
    return make_user(email="owner@example.com")


@pytest.fixture
def admin(make_user):
    return make_user(email="admin@example.com", is_admin=True)


def auth_headers(user):
    return {"Authorization": f"Bearer {issue_token(user)}"}


def warehouse_fields(**overrides):
    data = {
        "name": "Bhiwandi Logistics Park",
        "mobile_number": "9876543210",
        "email": "listing@example.com",
        "ownership_type": "Owner",
        "address": "Plot 12, Mumbai Nashik Highway",
        "city": "Bhiwandi",
        "state": "Maharashtra",
        "pin_code": 421302,
        "warehouse_type": "Standard or General Storage",
        "build_up_area": 25000,
        "rent": 18.5,
        "deposit": 300000,
    }
    data.update(overrides)
    return data


@pytest.fixture
def make_warehouse(owner):
    def _make(status="approved", owner_user=None, **overrides):
        warehouse = Warehouse(owner_id=(owner_user or owner).id, approval_status=status, views=0)
        for key, value in warehouse_fields(**overrides).items():
            setattr(warehouse, key, value)
        db.session.add(warehouse)
        db.session.commit()
        return warehouse

    return _make


@pytest.fixture
def warehouse(make_warehouse):
    return make_warehouse()


def customer_fields(warehouse_id, **overrides):
    data = {
        "warehouse_id": warehouse_id,
        "full_name": "Asha Rao",
        "email": "asha@example.com",
        "phone_number": "9123456780",
        "company_name": "Rao Traders",
        "preferred_contact_method": "phone",
        "message": "Need space from next month",
    }
    data.update(overrides)
    return data


def signed(order_id, payment_id="pay_test_001", secret=KEY_SECRET):
    return {
        "razorpay_order_id": order_id,
        "razorpay_payment_id": payment_id,
        "razorpay_signature": payment_signature(order_id, payment_id, secret),
    }
