import pytest

from app import create_app
from models import db
from models.email_outbox import EmailOutbox
from services import notifications
from services.payment_gateway import RazorpayGateway, StubGateway, build_gateway


@pytest.fixture
def boom_route(app):
    @app.get("/api/_boom")
    def boom():
        raise RuntimeError("secret internals")

    return "/api/_boom"


def test_health(client):
    resp = client.get("/api/health")
    assert resp.status_code == 200
    assert resp.get_json()["data"]["status"] == "ok"
    assert resp.headers["X-Content-Type-Options"] == "nosniff"


def test_unknown_route_is_json(client):
    resp = client.get("/api/nope")
    assert resp.status_code == 404
    assert resp.get_json() == {"success": False, "message": "Route not found"}


def test_method_not_allowed(client):
    assert client.delete("/api/health").status_code == 405


def test_payload_too_large(app, client):
    app.config["MAX_CONTENT_LENGTH"] = 10
    resp = client.post("/api/public/contacts", data="x" * 100, content_type="application/json")
    assert resp.status_code == 413
    assert resp.get_json()["success"] is False


def test_unexpected_errors_hide_details(client, boom_route):
    resp = client.get(boom_route)
    assert resp.status_code == 500
    assert resp.get_json()["message"] == "Internal server error"


def test_development_mode_exposes_error(app, client, boom_route):
    app.config["APP_ENV"] = "development"
    resp = client.get(boom_route)
    assert resp.status_code == 500
    assert resp.get_json()["message"] == "secret internals"


def test_build_gateway_falls_back_to_stub():
    gateway = build_gateway({"RAZORPAY_KEY_ID": None, "RAZORPAY_KEY_SECRET": None})
    assert isinstance(gateway, StubGateway)
    gateway = build_gateway({"RAZORPAY_KEY_ID": "rzp_live", "RAZORPAY_KEY_SECRET": "s", "PAYMENTS_USE_STUB": True})
    assert isinstance(gateway, StubGateway)
    assert gateway.key_id == "rzp_live"


def test_build_gateway_uses_razorpay_with_keys():
    gateway = build_gateway({"RAZORPAY_KEY_ID": "rzp_test_abc", "RAZORPAY_KEY_SECRET": "secret"})
    assert isinstance(gateway, RazorpayGateway)
    assert gateway.key_id == "rzp_test_abc"


def test_create_app_without_injected_collaborators(tmp_path):
    app = create_app({"TESTING": True, "SQLALCHEMY_DATABASE_URI": "sqlite://", "UPLOAD_FOLDER": str(tmp_path)})
    assert isinstance(app.extensions["payment_gateway"], StubGateway)
    assert app.extensions["mailer"].configured is False


def test_pending_outbox_is_redelivered(app, mailer):
    mailer.fail_with = OSError("smtp down")
    row = notifications.enqueue("test", "someone@example.com", ("Subject", "<p>hi</p>"))
    notifications.dispatch([row])
    assert row.status == "failed"

    row.status = "pending"
    mailer.fail_with = None
    assert notifications.dispatch_pending() == 1
    stored = EmailOutbox.query.one()
    assert stored.status == "sent"
    assert stored.attempts == 2


def test_send_pending_emails_command(app, mailer):
    notifications.enqueue("test", "someone@example.com", ("Subject", "<p>hi</p>"))
    db.session.commit()

    result = app.test_cli_runner().invoke(args=["send-pending-emails"])
    assert "1 email(s) sent" in result.output
    assert mailer.sent[0]["to"] == "someone@example.com"


def test_admin_bootstrap_commands(app, make_user):
    runner = app.test_cli_runner()
    result = runner.invoke(args=["create-admin", "Boss@Example.com", "--password", "long-enough-pw"])
    assert "Admin boss@example.com created" in result.output

    user = make_user(email="partner@example.com")
    result = runner.invoke(args=["make-admin", "partner@example.com"])
    assert "promoted to admin" in result.output
    db.session.refresh(user)
    assert user.is_admin is True


def test_enqueued_row_can_be_dispatched_before_flush(app, mailer):
    row = notifications.enqueue("test", "someone@example.com", ("Subject", "<p>hi</p>"))
    assert row.status == "pending"
    assert row.attempts == 0
    assert notifications.dispatch([row]) == 1
    assert row.attempts == 1
    assert EmailOutbox.query.one().status == "sent"
