"""Admin producer reassignment with proportional partial payout."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from studio_app.extensions import db
from studio_app.models import SongRequest, SongRevision
from studio_app.services import assignment_service

from conftest import auth


@pytest.fixture()
def half_done_order(make_order, producers):
    order = make_order("in_progress", producer=producers["beatsmith"], revisions=2)
    db.session.add_all(
        [
            SongRevision(song_request_id=order.id, revision_number=1, status="delivered"),
            SongRevision(song_request_id=order.id, revision_number=2, status="pending"),
        ]
    )
    db.session.commit()
    return order


def _change(client, token, order_id):
    return client.post(
        f"/api/admin/requests/{order_id}/change-producer",
        json={"reason": "Missed the brief"},
        headers=auth(token),
    )


def test_change_producer_records_manual_partial_payout(client, admin_token, half_done_order, producers, discord):
    resp = _change(client, admin_token, half_done_order.id)

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["previous_producer_id"] == producers["beatsmith"].id
    assert body["partial_payout"] == {
        "amount_cents": 8500,
        "method": "manual_required",
        "transfer_id": None,
        "progress_ratio": 0.5,
    }

    order = db.session.get(SongRequest, half_done_order.id)
    assert order.status == "paid"
    assert order.assigned_producer_id is None
    assert order.blocked_producer_ids == [producers["beatsmith"].id]
    assert all("<@111>" not in post["content"] for post in discord.posts)


def test_change_producer_transfers_to_onboarded_producer(client, admin_token, half_done_order, producers, payments):
    producer = producers["beatsmith"]
    producer.stripe_connect_account_id = "acct_ready"
    producer.stripe_connect_onboarded_at = datetime.now(timezone.utc)
    db.session.commit()

    body = _change(client, admin_token, half_done_order.id).get_json()

    assert body["partial_payout"]["method"] == "stripe_connect"
    transfer = payments.transfers[0]
    assert transfer["amount"] == 8500
    assert transfer["idempotency_key"] == f"partial-{half_done_order.id}-{producer.id}"
    assert transfer["metadata"]["reason"] == "partial_payout_producer_change"


def test_no_partial_payout_without_delivered_revisions(client, admin_token, make_order, producers, payments):
    order = make_order("in_progress", producer=producers["beatsmith"], revisions=2)
    body = _change(client, admin_token, order.id).get_json()
    assert body["partial_payout"]["amount_cents"] == 0
    assert body["partial_payout"]["method"] == "none"
    assert payments.transfers == []


def test_blocked_producer_cannot_reaccept(client, admin_token, half_done_order, producers):
    _change(client, admin_token, half_done_order.id)

    blocked = assignment_service.accept_request(half_done_order.id, "111")
    assert blocked.outcome == "blocked"

    accepted = assignment_service.accept_request(half_done_order.id, "222")
    assert accepted.outcome == "accepted"
    assert db.session.get(SongRequest, half_done_order.id).assigned_producer_id == producers["soulkeys"].id


def test_blocked_producer_excluded_from_matching(app_with_db, make_order, producers):
    order = make_order("paid", blocked_producer_ids=[producers["beatsmith"].id])
    eligible = assignment_service.eligible_producers(order)
    assert producers["beatsmith"] not in eligible
    assert len(eligible) == 2


def test_change_producer_requires_assignment(client, admin_token, make_order):
    order = make_order("paid")
    resp = _change(client, admin_token, order.id)
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "no_producer_assigned"


def test_change_producer_admin_only(client, producer_token, half_done_order):
    assert _change(client, producer_token, half_done_order.id).status_code == 403
