import pytest
from sqlmodel import Session

from app import config
from app.models.user import User


@pytest.fixture
def manual_mode(monkeypatch):
    monkeypatch.setattr(config, "SELLER_APPROVAL_MODE", "manual")


@pytest.fixture
def admin(engine, register, hostels):
    user = register(hostels["H1"], name="Admin")
    with Session(engine) as session:
        record = session.get(User, user["id"])
        record.role = "admin"
        session.add(record)
        session.commit()
    return user


def _apply(client, user):
    return client.post(
        "/seller/apply",
        json={"availability_hours": "6pm - 10pm", "profile_description": "Selling my old books"},
        headers=user["headers"],
    )


def test_apply_then_self_approve_in_auto_mode(client, register, hostels, fetch):
    user = register(hostels["H1"])

    response = _apply(client, user)
    assert response.status_code == 200
    assert response.json()["seller_status"] == "pending"
    assert response.json()["approval_mode"] == "auto"

    response = client.post("/seller/mock-approve", headers=user["headers"])
    assert response.status_code == 200
    assert response.json()["user"]["is_seller"] is True

    record = fetch(User, user["id"])
    assert record.seller_status == "approved"
    assert record.seller_approved_at is not None
    assert record.seller_availability_hours == "6pm - 10pm"


def test_apply_requires_availability_hours(client, register, hostels):
    user = register(hostels["H1"])
    response = client.post("/seller/apply", json={"availability_hours": "  "}, headers=user["headers"])
    assert response.status_code == 422


def test_apply_twice_while_pending_is_invalid_state(client, register, hostels):
    user = register(hostels["H1"])
    _apply(client, user)

    response = _apply(client, user)
    assert response.status_code == 409


def test_apply_as_seller_is_invalid_state(client, make_seller, hostels):
    seller = make_seller(hostels["H1"])
    assert _apply(client, seller).status_code == 409


def test_approve_without_pending_application(client, register, hostels):
    user = register(hostels["H1"])
    assert client.post("/seller/mock-approve", headers=user["headers"]).status_code == 409


def test_self_approve_disabled_in_manual_mode(client, register, hostels, manual_mode):
    user = register(hostels["H1"])
    assert _apply(client, user).json()["approval_mode"] == "manual"
    assert client.post("/seller/mock-approve", headers=user["headers"]).status_code == 403


def test_admin_reviews_applications(client, register, hostels, admin, manual_mode, fetch):
    alice = register(hostels["H1"])
    bob = register(hostels["H2"])
    _apply(client, alice)
    _apply(client, bob)

    pending = client.get("/admin/sellers/pending", headers=admin["headers"])
    assert pending.status_code == 200
    assert {entry["id"] for entry in pending.json()} == {alice["id"], bob["id"]}

    approved = client.post(f"/admin/sellers/{alice['id']}/approve", headers=admin["headers"])
    assert approved.status_code == 200
    assert fetch(User, alice["id"]).is_seller is True

    rejected = client.post(f"/admin/sellers/{bob['id']}/reject", json={"reason": "Incomplete profile"}, headers=admin["headers"])
    assert rejected.status_code == 200
    record = fetch(User, bob["id"])
    assert record.seller_status == "rejected"
    assert record.seller_rejection_reason == "Incomplete profile"
    assert record.is_seller is False

    # decided applications cannot be decided again
    again = client.post(f"/admin/sellers/{bob['id']}/approve", headers=admin["headers"])
    assert again.status_code == 409


def test_rejected_user_can_reapply(client, register, hostels, admin, manual_mode, fetch):
    user = register(hostels["H1"])
    _apply(client, user)
    client.post(f"/admin/sellers/{user['id']}/reject", json={"reason": "Try again"}, headers=admin["headers"])

    response = _apply(client, user)
    assert response.status_code == 200

    record = fetch(User, user["id"])
    assert record.seller_status == "pending"
    assert record.seller_rejection_reason is None


def test_admin_routes_require_admin(client, register, hostels):
    user = register(hostels["H1"])
    assert client.get("/admin/stats", headers=user["headers"]).status_code == 403


def test_admin_stats(client, admin, make_seller, create_item, hostels):
    seller = make_seller(hostels["H1"])
    create_item(seller["headers"])

    stats = client.get("/admin/stats", headers=admin["headers"]).json()
    assert stats["total_users"] == 2
    assert stats["total_sellers"] == 1
    assert stats["available_items"] == 1

    users = client.get("/admin/users", headers=admin["headers"]).json()
    posted = {entry["id"]: entry["items_posted"] for entry in users}
    assert posted[seller["id"]] == 1


def test_seller_status(client, register, hostels):
    user = register(hostels["H1"])
    _apply(client, user)

    body = client.get("/seller/status", headers=user["headers"]).json()
    assert body["seller_status"] == "pending"
    assert body["is_seller"] is False
    assert body["seller_profile"]["availability_hours"] == "6pm - 10pm"
