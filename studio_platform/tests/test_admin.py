"""Admin listing and producer account management."""

from __future__ import annotations

from studio_app.models import Producer, User

from conftest import auth, login


def test_admin_lists_requests_by_status(client, admin_token, make_order):
    paid = make_order("paid")
    make_order("completed")

    resp = client.get("/api/admin/requests?status=paid", headers=auth(admin_token))
    assert resp.status_code == 200
    assert [item["id"] for item in resp.get_json()["items"]] == [paid.id]

    everything = client.get("/api/admin/requests", headers=auth(admin_token)).get_json()["items"]
    assert len(everything) == 2


def test_admin_listing_rejects_unknown_status(client, admin_token):
    resp = client.get("/api/admin/requests?status=lost", headers=auth(admin_token))
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "invalid_status"


def test_listing_is_admin_only(client, customer_token):
    assert client.get("/api/admin/requests", headers=auth(customer_token)).status_code == 403


def test_admin_creates_producer_account(client, admin_token):
    resp = client.post(
        "/api/admin/producers",
        json={
            "email": "New.Producer@example.com",
            "password": "StrongPass123!",
            "name": "Night Owl",
            "genre": "Electronic, House",
            "discord_user_id": "444",
        },
        headers=auth(admin_token),
    )

    assert resp.status_code == 201
    assert resp.get_json()["producer"]["slug"] == "night-owl"
    user = User.query.filter_by(email="new.producer@example.com").one()
    assert user.role == "producer"
    assert Producer.query.filter_by(user_id=user.id).one().discord_user_id == "444"

    token = login(client, "new.producer@example.com")
    me = client.get("/api/producers/me", headers=auth(token))
    assert me.get_json()["producer"]["name"] == "Night Owl"


def test_duplicate_producer_email_conflicts(client, admin_token, producers):
    resp = client.post(
        "/api/admin/producers",
        json={"email": "beatsmith@example.com", "password": "StrongPass123!", "name": "Copy"},
        headers=auth(admin_token),
    )
    assert resp.status_code == 409
