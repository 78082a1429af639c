"""Expiry sweep: refunds orders nobody accepted before the deadline, exactly once."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from sqlalchemy.exc import OperationalError

from studio_app.extensions import db
from studio_app.models import SongRequest
from studio_app.tasks.expiry_tasks import REFUND_REASON, sweep_expired_requests

from conftest import auth, templates_sent

PAST = datetime.now(timezone.utc) - timedelta(hours=1)
FUTURE = datetime.now(timezone.utc) + timedelta(hours=1)


def test_sweep_refunds_expired_pending_order(app_with_db, make_order, payments, sent_emails):
    order = make_order("pending", deadline=PAST)

    result = sweep_expired_requests()

    assert result == {"processed": 1, "refunded": 1, "errors": []}
    refreshed = db.session.get(SongRequest, order.id)
    assert refreshed.status == "refunded"
    assert refreshed.refunded_at is not None
    refund = payments.refunds[0]
    assert refund["intent_id"] == order.payment_intent_id
    assert refund["reason"] == "requested_by_customer"
    assert refund["metadata"] == {"request_id": str(order.id), "reason": REFUND_REASON}
    assert templates_sent(sent_emails) == ["refund_notice"]


def test_second_sweep_does_nothing(app_with_db, make_order, payments):
    make_order("pending", deadline=PAST)
    sweep_expired_requests()
    second = sweep_expired_requests()
    assert second == {"processed": 0, "refunded": 0, "errors": []}
    assert len(payments.refunds) == 1


def test_sweep_skips_unexpired_and_unpaid(app_with_db, make_order, payments):
    make_order("pending", deadline=FUTURE)
    make_order("pending_payment", deadline=PAST)
    result = sweep_expired_requests()
    assert result["processed"] == 0
    assert payments.refunds == []


def test_paid_orders_not_swept_by_default(app_with_db, make_order, payments):
    order = make_order("paid", deadline=PAST)
    result = sweep_expired_requests()
    assert result["processed"] == 0
    assert db.session.get(SongRequest, order.id).status == "paid"


def test_paid_orders_swept_when_configured(app_with_db, make_order, payments):
    app_with_db.config["EXPIRY_SWEEP_STATUSES"] = ("pending", "paid")
    order = make_order("paid", deadline=PAST)
    result = sweep_expired_requests()
    assert result["refunded"] == 1
    assert db.session.get(SongRequest, order.id).status == "refunded"


def test_uncaptured_payment_is_cancelled(app_with_db, make_order, payments):
    order = make_order("pending", deadline=PAST, intent_status="requires_capture")
    result = sweep_expired_requests()
    assert result["refunded"] == 1
    assert payments.cancelled == [order.payment_intent_id]
    assert payments.refunds == []


def test_unreleasable_intent_leaves_order_untouched(app_with_db, make_order, payments, sent_emails):
    order = make_order("pending", deadline=PAST, intent_status="canceled")

    result = sweep_expired_requests()

    assert result == {"processed": 1, "refunded": 0, "errors": []}
    refreshed = db.session.get(SongRequest, order.id)
    assert refreshed.status == "pending"
    assert refreshed.refunded_at is None
    assert payments.refunds == []
    assert sent_emails == []


def test_failed_commit_is_reported_and_row_stays_sweepable(app_with_db, make_order, payments, monkeypatch):
    order = make_order("pending", deadline=PAST)

    def locked():
        raise OperationalError("UPDATE song_requests", {}, Exception("database is locked"))

    monkeypatch.setattr(db.session, "commit", locked)
    result = sweep_expired_requests()
    monkeypatch.undo()

    assert result["refunded"] == 0
    assert result["errors"][0]["request_id"] == order.id
    refreshed = db.session.get(SongRequest, order.id)
    assert refreshed.refunded_at is None
    assert refreshed.status == "pending"


def test_failed_refund_is_reported_and_sweep_continues(app_with_db, make_order, payments):
    failing = make_order("pending", deadline=PAST)
    healthy = make_order("pending", deadline=PAST)
    payments.fail_refunds_for.add(failing.payment_intent_id)

    result = sweep_expired_requests()

    assert result["processed"] == 2
    assert result["refunded"] == 1
    assert result["errors"] == [{"request_id": failing.id, "error": "refund declined"}]
    assert db.session.get(SongRequest, failing.id).refunded_at is None
    assert db.session.get(SongRequest, healthy.id).status == "refunded"


def test_admin_endpoint_runs_sweep(client, admin_token, make_order):
    make_order("pending", deadline=PAST)
    resp = client.post("/api/admin/sweep-expired", headers=auth(admin_token))
    assert resp.status_code == 200
    assert resp.get_json()["refunded"] == 1


def test_sweep_endpoint_requires_admin(client, customer_token):
    resp = client.post("/api/admin/sweep-expired", headers=auth(customer_token))
    assert resp.status_code == 403


def test_cli_command(app_with_db, make_order):
    make_order("pending", deadline=PAST)
    runner = app_with_db.test_cli_runner()
    result = runner.invoke(args=["sweep-expired"])
    assert result.exit_code == 0
    assert '"refunded": 1' in result.output


def test_cli_help_names_swept_statuses(app_with_db):
    runner = app_with_db.test_cli_runner()
    result = runner.invoke(args=["sweep-expired", "--help"])
    assert result.exit_code == 0
    assert "EXPIRY_SWEEP_STATUSES" in result.output
