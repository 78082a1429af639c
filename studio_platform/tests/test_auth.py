"""Tests for the auth blueprint."""

from __future__ import annotations

from conftest import PASSWORD, auth


def test_register_creates_customer(client):
    resp = client.post(
        "/api/auth/register",
        json={"email": "Fan@Example.com", "password": PASSWORD, "display_name": "Fan"},
    )
    assert resp.status_code == 201
    data = resp.get_json()
    assert data["user"]["email"] == "fan@example.com"
    assert data["user"]["role"] == "customer"
    assert data["access_token"]


def test_register_duplicate_email_returns_conflict(client):
    payload = {"email": "dup@example.com", "password": PASSWORD}
    client.post("/api/auth/register", json=payload)
    resp = client.post("/api/auth/register", json=payload)
    assert resp.status_code == 409
    assert resp.get_json()["message"] == "Email already registered"


def test_register_validates_payload(client):
    resp = client.post("/api/auth/register", json={"email": "not-an-email", "password": "short"})
    assert resp.status_code == 400
    body = resp.get_json()
    assert body["message"] == "invalid_payload"
    assert "email" in body["errors"]
    assert "password" in body["errors"]


def test_login_and_me(client, customer):
    resp = client.post("/api/auth/login", json={"email": customer.email, "password": PASSWORD})
    assert resp.status_code == 200
    token = resp.get_json()["access_token"]

    me = client.get("/api/auth/me", headers=auth(token))
    assert me.status_code == 200
    assert me.get_json()["user"]["email"] == customer.email


def test_login_rejects_bad_password(client, customer):
    resp = client.post("/api/auth/login", json={"email": customer.email, "password": "WrongPass999"})
    assert resp.status_code == 401
    assert resp.get_json()["message"] == "Invalid credentials"


def test_me_requires_token(client):
    resp = client.get("/api/auth/me")
    assert resp.status_code == 401
    assert resp.get_json()["message"] == "Missing authorization token"
