from models import db
from models.booking_inquiry import BookingInquiry
from models.user import User

from conftest import PASSWORD, auth_headers, customer_fields, signed


def _confirmed_booking(client, warehouse):
    order_id = client.post(
        "/api/public/payments/create-order", json=customer_fields(warehouse.id),
    ).get_json()["data"]["order_id"]
    return client.post("/api/public/payments/verify", json=signed(order_id)).get_json()["data"]


def test_dashboard_counts(client, admin, warehouse, make_warehouse):
    make_warehouse(status="pending")
    _confirmed_booking(client, warehouse)

    data = client.get("/api/admin/dashboard", headers=auth_headers(admin)).get_json()["data"]
    assert data["warehouses"]["total"] == 2
    assert data["warehouses"]["pending"] == 1
    assert data["confirmed_bookings"] == 1
    assert data["payments"] == {"paid": 1}
    assert data["revenue"] == 100000


def test_pending_queue(client, admin, make_warehouse):
    pending = make_warehouse(status="pending")
    make_warehouse(status="approved")
    rows = client.get("/api/admin/warehouses/pending", headers=auth_headers(admin)).get_json()["data"]
    assert [w["id"] for w in rows] == [pending.id]
    assert rows[0]["owner"]["email"] == "owner@example.com"


def test_create_admin_user(client, admin):
    resp = client.post("/api/admin/users", json={
        "email": "second@example.com", "first_name": "Second", "last_name": "Admin", "password": PASSWORD,
    }, headers=auth_headers(admin))
    assert resp.status_code == 201
    assert resp.get_json()["data"]["is_admin"] is True

    dup = client.post("/api/admin/users", json={
        "email": "second@example.com", "first_name": "S", "last_name": "A", "password": PASSWORD,
    }, headers=auth_headers(admin))
    assert dup.status_code == 409


def test_cannot_remove_own_admin_access(client, admin):
    resp = client.put(f"/api/admin/users/{admin.id}", json={"is_admin": False}, headers=auth_headers(admin))
    assert resp.status_code == 403
    assert client.delete(f"/api/admin/users/{admin.id}", headers=auth_headers(admin)).status_code == 403


def test_delete_user_with_listings_conflicts(client, admin, owner, warehouse):
    resp = client.delete(f"/api/admin/users/{owner.id}", headers=auth_headers(admin))
    assert resp.status_code == 409
    assert db.session.get(User, owner.id) is not None


def test_delete_plain_user(client, admin, make_user):
    user = make_user()
    user_id = user.id
    assert client.delete(f"/api/admin/users/{user_id}", headers=auth_headers(admin)).status_code == 200
    assert db.session.get(User, user_id) is None


def test_booking_status_updates(client, admin, owner, warehouse):
    booking_number = _confirmed_booking(client, warehouse)["booking_number"]
    listing = client.get("/api/admin/bookings?type=confirmed", headers=auth_headers(admin)).get_json()
    booking = listing["data"][0]
    assert booking["booking_number"] == booking_number

    resp = client.put(
        f"/api/admin/bookings/{booking['id']}/status?type=confirmed",
        json={"status": "active"},
        headers=auth_headers(admin),
    )
    assert resp.get_json()["data"]["status"] == "active"

    resp = client.put(
        f"/api/bookings/{booking['id']}/status?type=confirmed",
        json={"status": "bogus"},
        headers=auth_headers(owner),
    )
    assert resp.status_code == 400


def test_owner_manages_booking_inquiries(client, owner, warehouse, make_user):
    client.post("/api/public/bookings", json=customer_fields(warehouse.id))
    inquiry_id = BookingInquiry.query.one().id

    listing = client.get("/api/bookings", headers=auth_headers(owner)).get_json()
    assert listing["pagination"]["total"] == 1

    resp = client.put(f"/api/bookings/{inquiry_id}/status", json={"status": "contacted"}, headers=auth_headers(owner))
    assert resp.get_json()["data"]["status"] == "contacted"

    stranger = make_user()
    resp = client.put(f"/api/bookings/{inquiry_id}/status", json={"status": "resolved"}, headers=auth_headers(stranger))
    assert resp.status_code == 403

    stats = client.get("/api/bookings/stats", headers=auth_headers(owner)).get_json()["data"]
    assert stats["inquiries"]["total"] == 1
    assert stats["inquiries"]["contacted"] == 1


def test_bulk_status(client, admin, warehouse):
    for _ in range(2):
        client.post("/api/public/bookings", json=customer_fields(warehouse.id))
    ids = [row.id for row in BookingInquiry.query.all()]

    resp = client.put("/api/admin/bookings/bulk-status", json={"ids": ids, "status": "resolved"}, headers=auth_headers(admin))
    assert resp.get_json()["data"]["updated"] == 2
    db.session.expire_all()
    assert {row.status for row in BookingInquiry.query.all()} == {"resolved"}

    bad = client.put("/api/admin/bookings/bulk-status", json={"ids": [], "status": "resolved"}, headers=auth_headers(admin))
    assert bad.status_code == 400


def test_activity_log_filter(client, admin, make_warehouse):
    pending = make_warehouse(status="pending")
    client.put(f"/api/admin/warehouses/{pending.id}/approve", headers=auth_headers(admin))
    logs = client.get("/api/admin/activity-logs?action=warehouse_approved", headers=auth_headers(admin)).get_json()
    assert logs["pagination"]["total"] == 1
    assert logs["data"][0]["entity_id"] == str(pending.id)
