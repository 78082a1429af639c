"""Outgoing email utilities backed by the Resend HTTP API."""

from __future__ import annotations

import re
from email.utils import formataddr
from typing import Any, Sequence

import requests
from flask import current_app


class MailServiceError(RuntimeError):
    """Raised when the mailer fails to deliver a message."""


def send_email(
    *,
    to: str | Sequence[str],
    subject: str,
    text: str | None = None,
    html: str | None = None,
    cc: str | Sequence[str] | None = None,
    bcc: str | Sequence[str] | None = None,
    reply_to: str | None = None,
    sender: tuple[str, str] | str | None = None,
    headers: dict[str, str] | None = None,
) -> str | None:
    """Send an email through Resend using the settings from Flask config.

    Args:
        to: Recipient email or list of recipients.
        subject: Email subject.
        text: Plain-text body.
        html: HTML body (optional).
        cc: Carbon-copy recipients.
        bcc: Blind carbon-copy recipients.
        reply_to: Optional reply-to address.
        sender: Override default sender. Accepts "email" or (name, email).
        headers: Additional message headers.

    Returns:
        The provider message id, or ``None`` when delivery is skipped
        (e.g., mail disabled).

    Raises:
        MailServiceError: when delivery fails.
        ValueError: when required parameters are missing.
    """

    config = current_app.config
    if not config.get("MAIL_ENABLED", True):
        current_app.logger.info("Mail disabled; skipping send to %s", to)
        return None

    recipients = _normalize_recipients(to)
    if not recipients:
        raise ValueError("At least one recipient is required")
    if text is None and html is None:
        raise ValueError("Either text or html body must be provided")

    from_name, from_email = _resolve_sender(sender, config)
    payload: dict[str, Any] = {
        "from": formataddr((from_name, from_email)) if from_name else from_email,
        "to": recipients,
        "subject": subject,
        "text": text or _html_to_text(html),
    }
    if html:
        payload["html"] = html
    cc_recipients = _normalize_recipients(cc)
    if cc_recipients:
        payload["cc"] = cc_recipients
    bcc_recipients = _normalize_recipients(bcc)
    if bcc_recipients:
        payload["bcc"] = bcc_recipients
    reply_to_header = reply_to or config.get("MAIL_REPLY_TO")
    if reply_to_header:
        payload["reply_to"] = reply_to_header
    if headers:
        payload["headers"] = dict(headers)

    try:
        body = _post_to_resend(payload, config)
    except requests.RequestException as exc:
        current_app.logger.exception("Failed to send email: %s", exc)
        raise MailServiceError(str(exc)) from exc

    message_id = body.get("id")
    current_app.logger.info(
        "Email sent to=%s subject=%s message_id=%s",
        recipients,
        subject,
        message_id,
    )
    return message_id


def _normalize_recipients(addresses: str | Sequence[str] | None) -> list[str]:
    if addresses is None:
        return []
    if isinstance(addresses, str):
        addresses = [addresses]
    normalized = []
    for address in addresses:
        if not address:
            continue
        normalized.append(address.strip())
    return normalized


def _resolve_sender(
    sender_override: tuple[str, str] | str | None,
    config: dict,
) -> tuple[str | None, str]:
    default_email = config.get("MAIL_DEFAULT_SENDER")
    default_name = config.get("MAIL_DEFAULT_NAME")
    if isinstance(sender_override, tuple):
        return sender_override[0], sender_override[1]
    if isinstance(sender_override, str):
        return default_name, sender_override
    return default_name, default_email


def _html_to_text(html: str | None) -> str:
    if not html:
        return ""
    text = re.sub(r"(?is)<(script|style).*?>.*?</\1>", "", html)
    text = re.sub(r"(?s)<br\s*/?>", "\n", text)
    text = re.sub(r"(?s)</p>", "\n\n", text)
    text = re.sub(r"<[^>]+>", "", text)
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


def _post_to_resend(payload: dict[str, Any], config: dict) -> dict[str, Any]:
    api_key = config.get("RESEND_API_KEY")
    if not api_key:
        raise MailServiceError("RESEND_API_KEY is not configured")
    base = (config.get("RESEND_API_BASE") or "https://api.resend.com").rstrip("/")
    response = requests.post(
        f"{base}/emails",
        json=payload,
        headers={"Authorization": f"Bearer {api_key}"},
        timeout=config.get("MAIL_TIMEOUT", 30),
    )
    response.raise_for_status()
    return response.json() if response.content else {}
