from __future__ import annotations

import pytest
import requests

from studio_app.services import mail_service


def test_send_email_builds_payload(monkeypatch, app_with_db):
    captured = {}

    def fake_post(payload, config):
        captured["payload"] = payload
        return {"id": "msg_123"}

    monkeypatch.setattr(mail_service, "_post_to_resend", fake_post)
    app_with_db.config.update(
        {
            "MAIL_DEFAULT_SENDER": "orders@studio.test",
            "MAIL_DEFAULT_NAME": "HEA Studio",
            "MAIL_ENABLED": True,
        }
    )

    with app_with_db.app_context():
        message_id = mail_service.send_email(
            to="customer@example.com",
            subject="Welcome",
            html="<p>HTML body</p>",
            cc=["producer@example.com"],
            bcc=["ops@example.com"],
        )

    assert message_id == "msg_123"
    payload = captured["payload"]
    assert payload["to"] == ["customer@example.com"]
    assert payload["cc"] == ["producer@example.com"]
    assert payload["bcc"] == ["ops@example.com"]
    assert payload["from"] == "HEA Studio <orders@studio.test>"
    assert payload["text"] == "HTML body"


def test_send_email_skips_when_disabled(monkeypatch, app_with_db):
    called = {"used": False}

    def fake_post(payload, config):
        called["used"] = True
        return {}

    monkeypatch.setattr(mail_service, "_post_to_resend", fake_post)
    app_with_db.config["MAIL_ENABLED"] = False

    with app_with_db.app_context():
        result = mail_service.send_email(
            to="customer@example.com",
            subject="Disabled",
            text="body",
        )

    assert result is None
    assert called["used"] is False


def test_send_email_requires_body(app_with_db):
    app_with_db.config["MAIL_ENABLED"] = True
    with app_with_db.app_context():
        with pytest.raises(ValueError):
            mail_service.send_email(to="customer@example.com", subject="oops")


def test_send_email_wraps_transport_errors(monkeypatch, app_with_db):
    def failing_post(payload, config):
        raise requests.ConnectionError("boom")

    monkeypatch.setattr(mail_service, "_post_to_resend", failing_post)
    app_with_db.config["MAIL_ENABLED"] = True

    with app_with_db.app_context():
        with pytest.raises(mail_service.MailServiceError):
            mail_service.send_email(to="customer@example.com", subject="x", text="y")
