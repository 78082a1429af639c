"""Checkout session creation and fee split."""

from __future__ import annotations

import json

import pytest
import stripe

from studio_app.extensions import db
from studio_app.models import SongRequest
from studio_app.services.checkout_service import compute_fee_split, to_cents
from studio_app.services.payment_client import PaymentClient, PaymentProviderError

from conftest import auth


def _payload(**overrides):
    payload = {
        "tier": "$125",
        "idea": "A summer anthem about the ocean",
        "file_urls": ["https://files.example.com/reference.mp3"],
        "total_price": "200.00",
        "base_price": "125.00",
        "add_ons": {"mixing": True, "mastering": True, "revisions": 2},
        "genre_category": "hip-hop",
    }
    payload.update(overrides)
    return payload


@pytest.mark.parametrize(
    "total,fee,payout",
    [
        (20000, 3000, 17000),
        (2500, 375, 2125),
        (12345, 1852, 10493),
        (1, 0, 1),
        (10, 2, 8),
    ],
)
def test_fee_split_sums_to_total(app_with_db, total, fee, payout):
    assert compute_fee_split(total, 15) == (fee, payout)
    assert sum(compute_fee_split(total, 15)) == total


def test_to_cents_rounds_half_up():
    assert to_cents("19.995") == 2000
    assert to_cents(125) == 12500


def test_create_checkout_session(client, customer, customer_token, payments):
    resp = client.post("/api/checkout/song", json=_payload(), headers=auth(customer_token))
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["platform_fee_cents"] == 3000
    assert data["producer_payout_cents"] == 17000
    assert data["url"].startswith("https://checkout.test/")

    call = payments.session_calls[0]
    assert call["amount_cents"] == 20000
    assert call["success_url"] == "https://studio.test/purchase-confirmation?session_id={CHECKOUT_SESSION_ID}"
    assert call["cancel_url"] == "https://studio.test/generate-song"
    assert "Mixing Service" in call["description"]
    metadata = call["metadata"]
    assert metadata["request_id"] == str(data["request_id"])
    assert metadata["platform_fee_cents"] == "3000"
    assert json.loads(metadata["add_ons"])["revisions"] == 2

    order = db.session.get(SongRequest, data["request_id"])
    assert order.status == "pending_payment"
    assert order.stripe_session_id == data["session_id"]
    assert order.number_of_revisions == 2
    assert order.wants_mixing is True
    assert order.acceptance_deadline is not None


def test_checkout_requires_tier_and_price(client, customer_token):
    resp = client.post("/api/checkout/song", json={"idea": "x"}, headers=auth(customer_token))
    assert resp.status_code == 400
    assert set(resp.get_json()["errors"]) >= {"tier", "total_price"}


def test_checkout_accepts_unlisted_tier(client, customer_token, payments):
    resp = client.post(
        "/api/checkout/song",
        json=_payload(tier="premium", total_price="200.00"),
        headers=auth(customer_token),
    )
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["platform_fee_cents"] == 3000
    assert data["producer_payout_cents"] == 17000
    assert "premium Tier" in payments.session_calls[0]["description"]

    order = db.session.get(SongRequest, data["request_id"])
    assert order.tier == "premium"
    assert order.complexity_level is None


def test_checkout_rejects_non_positive_total(client, customer_token):
    resp = client.post(
        "/api/checkout/song", json=_payload(total_price="0"), headers=auth(customer_token)
    )
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "invalid_total_price"


def test_checkout_reuses_draft_order(client, customer_token, make_order):
    draft = make_order("pending_payment")
    resp = client.post(
        "/api/checkout/song",
        json=_payload(request_id=draft.id),
        headers=auth(customer_token),
    )
    assert resp.status_code == 200
    assert resp.get_json()["request_id"] == draft.id
    assert SongRequest.query.count() == 1


def test_checkout_refuses_paid_order(client, customer_token, make_order):
    order = make_order("paid")
    resp = client.post(
        "/api/checkout/song",
        json=_payload(request_id=order.id),
        headers=auth(customer_token),
    )
    assert resp.status_code == 409
    assert resp.get_json()["message"] == "order_already_paid"


def test_checkout_provider_failure_returns_502(client, customer_token, payments, monkeypatch):
    def boom(**kwargs):
        raise PaymentProviderError("card network down")

    monkeypatch.setattr(payments, "create_checkout_session", boom)
    resp = client.post("/api/checkout/song", json=_payload(), headers=auth(customer_token))
    assert resp.status_code == 502
    assert resp.get_json()["error"] == "card network down"
    assert SongRequest.query.count() == 0


def test_stripe_errors_surface_as_provider_errors(monkeypatch):
    def declined(*args, **kwargs):
        raise stripe.InvalidRequestError("No such payment_intent: pi_missing", "id")

    monkeypatch.setattr(stripe.PaymentIntent, "retrieve", declined)
    with pytest.raises(PaymentProviderError, match="pi_missing"):
        PaymentClient(api_key="sk_test").retrieve_payment_intent("pi_missing")
