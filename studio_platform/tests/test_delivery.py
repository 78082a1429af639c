"""Final delivery and project file re-sends."""

from __future__ import annotations

from datetime import datetime, timezone

from studio_app.extensions import db
from studio_app.models import Purchase, SongRequest

from conftest import auth, login, templates_sent


def test_deliver_completes_order_and_creates_purchase(
    client, producer_token, make_order, producers, sent_emails, discord
):
    order = make_order("review", producer=producers["beatsmith"])

    resp = client.post(
        f"/api/requests/{order.id}/deliver",
        json={"download_url": "https://drive.test/final", "custom_message": "<b>Enjoy</b>"},
        headers=auth(producer_token),
    )

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["status"] == "completed"
    purchase = db.session.get(Purchase, body["purchase_id"])
    assert purchase.status == "ready"
    assert purchase.download_url == "https://drive.test/final"
    assert purchase.product_id == str(order.id)
    assert purchase.product_name == "Song Production - $125"
    assert db.session.get(SongRequest, order.id).status == "completed"

    assert templates_sent(sent_emails) == ["delivery"]
    html = sent_emails[0]["html"]
    assert "&lt;b&gt;Enjoy&lt;/b&gt;" in html
    assert "https://drive.test/final" in html
    assert discord.posts[-1]["content"].endswith("**completed**")


def test_redelivery_updates_existing_purchase(client, producer_token, make_order, producers):
    order = make_order("review", producer=producers["beatsmith"])
    for url in ("https://drive.test/v1", "https://drive.test/v2"):
        client.post(
            f"/api/requests/{order.id}/deliver",
            json={"download_url": url},
            headers=auth(producer_token),
        )
    purchases = Purchase.query.filter_by(product_id=str(order.id)).all()
    assert len(purchases) == 1
    assert purchases[0].download_url == "https://drive.test/v2"


def test_deliver_rejects_invalid_url(client, producer_token, make_order, producers):
    order = make_order("review", producer=producers["beatsmith"])
    resp = client.post(
        f"/api/requests/{order.id}/deliver",
        json={"download_url": "javascript:alert(1)"},
        headers=auth(producer_token),
    )
    assert resp.status_code == 400
    assert resp.get_json() == {"message": "invalid_url", "field": "download_url"}
    assert db.session.get(SongRequest, order.id).status == "review"


def test_deliver_requires_assignee(client, make_order, producers):
    order = make_order("review", producer=producers["beatsmith"])
    token = login(client, "soulkeys@example.com")
    resp = client.post(
        f"/api/requests/{order.id}/deliver",
        json={"download_url": "https://drive.test/final"},
        headers=auth(token),
    )
    assert resp.status_code == 403


def test_deliver_refunded_order_conflicts(client, producer_token, make_order, producers):
    order = make_order(
        "refunded",
        producer=producers["beatsmith"],
        refunded_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
    )
    resp = client.post(
        f"/api/requests/{order.id}/deliver",
        json={"download_url": "https://drive.test/final"},
        headers=auth(producer_token),
    )
    assert resp.status_code == 409


def test_resend_files_goes_to_team_and_producer(client, admin_token, make_order, producers, sent_emails):
    order = make_order(
        "in_progress",
        producer=producers["beatsmith"],
        file_urls=["https://files.test/demo.mp3"],
    )
    resp = client.post(f"/api/requests/{order.id}/resend-files", headers=auth(admin_token))

    assert resp.status_code == 202
    assert templates_sent(sent_emails) == ["project_files"]
    assert sent_emails[0]["to"] == ["files@studio.test", "beatsmith@example.com"]
    assert "https://files.test/demo.mp3" in sent_emails[0]["html"]


def test_resend_files_for_unpaid_order(client, admin_token, make_order):
    order = make_order("pending_payment")
    resp = client.post(f"/api/requests/{order.id}/resend-files", headers=auth(admin_token))
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "invalid_status"


def test_customer_cannot_resend_files(client, customer_token, make_order, producers):
    order = make_order("in_progress", producer=producers["beatsmith"])
    resp = client.post(f"/api/requests/{order.id}/resend-files", headers=auth(customer_token))
    assert resp.status_code == 403
