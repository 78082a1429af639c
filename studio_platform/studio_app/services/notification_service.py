"""Customer / producer / team notifications over email and Discord.

Every public function takes ids and reloads rows so it can run from
``background.dispatch`` on a fresh session.
"""

from __future__ import annotations

from typing import Any, Dict, List, Sequence

from flask import current_app, render_template

from ..extensions import db
from ..models import Producer, ProducerApplication, SongRequest, SongRevision
from ..utils import coerce_aware, utcnow
from . import catalog, mail_service
from .discord_client import get_discord_client

IDEA_EMBED_LIMIT = 400
EPHEMERAL_FLAG = 64

TEMPLATE_ORDER_CONFIRMATION = "order_confirmation"
TEMPLATE_BUSINESS_NEW_ORDER = "business_new_order"
TEMPLATE_PRODUCER_ASSIGNMENT = "producer_assignment"
TEMPLATE_STATUS_UPDATE = "status_update"
TEMPLATE_PROJECT_FILES = "project_files"
TEMPLATE_DELIVERY = "delivery"
TEMPLATE_REVISION = "revision_notification"
TEMPLATE_REFUND = "refund_notice"
TEMPLATE_PAYOUT = "payout_notice"
TEMPLATE_CANCELLATION = "cancellation_request"
TEMPLATE_APPLICATION = "producer_application"

APPLICATION_SUBJECTS = {
    "pending": "🎛️ We received your producer application",
    "approved": "🎉 Welcome to the producer roster",
    "rejected": "Your producer application",
}

REVISION_SUBJECTS = {
    "revision_requested": "🔄 Revision #{number} requested",
    "revision_delivered": "🎧 Revision #{number} delivered",
    "feedback_submitted": "💬 Feedback on revision #{number}",
}


def _app_url() -> str:
    return current_app.config.get("APP_URL", "").rstrip("/")


def _order(order_id: int) -> SongRequest | None:
    order = db.session.get(SongRequest, order_id)
    if order is None:
        current_app.logger.warning("Notification skipped; order missing", extra={"order_id": order_id})
    return order


def _base_context(order: SongRequest) -> Dict[str, Any]:
    deadline = coerce_aware(order.acceptance_deadline)
    return {
        "app_name": current_app.config.get("APP_NAME", "HEA Studio"),
        "app_url": _app_url(),
        "order": order,
        "order_ref": f"{order.id:06d}",
        "genre_display": catalog.genre_display_name(order.genre_category),
        "price": f"{order.price:.2f}" if order.price is not None else "0.00",
        "deadline": deadline.strftime("%b %d, %Y %H:%M UTC") if deadline else None,
        "year": utcnow().year,
    }


def _send_templated(
    template: str,
    *,
    to: str | Sequence[str],
    subject: str,
    context: Dict[str, Any],
    reply_to: str | None = None,
) -> str | None:
    html_body = render_template(f"emails/{template}.html", **context)
    text_body = render_template(f"emails/{template}.txt", **context)
    return mail_service.send_email(
        to=to,
        subject=subject,
        text=text_body,
        html=html_body,
        reply_to=reply_to,
        headers={"X-Mail-Template": template},
    )


def _recipients(*addresses: str | None) -> List[str]:
    return [address for address in addresses if address]


# ---------------------------------------------------------------------------
# Email notifications
# ---------------------------------------------------------------------------


def send_order_confirmation(order_id: int) -> None:
    order = _order(order_id)
    if order is None:
        return
    context = _base_context(order)
    context["add_ons"] = catalog.describe_add_ons(
        tier=order.tier,
        recorded_stems=order.wants_recorded_stems,
        analog=order.wants_analog,
        mixing=order.wants_mixing,
        mastering=order.wants_mastering,
        revisions=order.number_of_revisions,
    )
    _send_templated(
        TEMPLATE_ORDER_CONFIRMATION,
        to=order.user_email,
        subject=f"Song Production Purchase Confirmed - {order.tier}",
        context=context,
    )


def send_business_new_order(order_id: int) -> None:
    recipient = current_app.config.get("BUSINESS_NOTIFICATION_EMAIL")
    if not recipient:
        return
    order = _order(order_id)
    if order is None:
        return
    _send_templated(
        TEMPLATE_BUSINESS_NEW_ORDER,
        to=recipient,
        subject=f"New Song Request - {order.tier} from {order.user_email}",
        context=_base_context(order),
        reply_to=order.user_email,
    )


def notify_producer_assignment(order_id: int, producer_id: int) -> None:
    order = _order(order_id)
    producer = db.session.get(Producer, producer_id)
    if order is None or producer is None or not producer.email:
        return
    context = _base_context(order)
    context["producer"] = producer
    _send_templated(
        TEMPLATE_PRODUCER_ASSIGNMENT,
        to=producer.email,
        subject=f"🎵 New Project: {order.tier} - {context['genre_display']}",
        context=context,
    )


def notify_customer_status(
    order_id: int,
    new_status: str,
    old_status: str | None = None,
    drive_link: str | None = None,
) -> None:
    if new_status not in catalog.NOTIFIABLE_STATUSES:
        current_app.logger.info(
            "Status not notifiable; skipping customer email",
            extra={"order_id": order_id, "status": new_status},
        )
        return
    order = _order(order_id)
    if order is None:
        return
    display = catalog.status_display(new_status)
    context = _base_context(order)
    context.update(
        {
            "status": display,
            "old_status": old_status,
            "drive_link": drive_link,
            "producer": order.assigned_producer,
        }
    )
    _send_templated(
        TEMPLATE_STATUS_UPDATE,
        to=order.user_email,
        subject=f"{display.emoji} {display.title} - Order #{context['order_ref']}",
        context=context,
    )


def send_project_files(order_id: int) -> None:
    """Send the customer's uploaded references to the team / assigned producer."""

    order = _order(order_id)
    if order is None:
        return
    producer = order.assigned_producer
    recipients = _recipients(
        current_app.config.get("FILES_NOTIFICATION_EMAIL"),
        producer.email if producer else None,
    )
    if not recipients:
        return
    context = _base_context(order)
    context["producer"] = producer
    context["file_urls"] = list(order.file_urls or [])
    _send_templated(
        TEMPLATE_PROJECT_FILES,
        to=recipients,
        subject=f"📥 Project Files Ready - {order.tier} {context['genre_display']}",
        context=context,
    )


def send_delivery_email(
    order_id: int,
    download_url: str,
    custom_message: str | None = None,
) -> None:
    order = _order(order_id)
    if order is None:
        return
    context = _base_context(order)
    # Jinja autoescapes the custom message in the HTML template.
    context.update(
        {
            "download_url": download_url,
            "custom_message": custom_message,
            "producer": order.assigned_producer,
        }
    )
    _send_templated(
        TEMPLATE_DELIVERY,
        to=order.user_email,
        subject=f"🎉 Your song is ready! - Order #{context['order_ref']}",
        context=context,
    )


def send_revision_notification(revision_id: int, kind: str) -> None:
    revision = db.session.get(SongRevision, revision_id)
    if revision is None:
        return
    order = revision.song_request
    producer = order.assigned_producer
    if kind == "revision_delivered":
        recipient = order.user_email
    else:
        recipient = producer.email if producer else None
    if not recipient:
        current_app.logger.info(
            "Revision notification has no recipient",
            extra={"order_id": order.id, "task": kind},
        )
        return
    context = _base_context(order)
    context.update({"revision": revision, "kind": kind, "producer": producer})
    subject = REVISION_SUBJECTS.get(kind, "Revision update #{number}").format(
        number=revision.revision_number
    )
    _send_templated(
        TEMPLATE_REVISION,
        to=recipient,
        subject=f"{subject} - Order #{context['order_ref']}",
        context=context,
    )


def send_refund_notification(order_id: int, amount_cents: int | None, reason: str) -> None:
    order = _order(order_id)
    if order is None:
        return
    context = _base_context(order)
    context.update(
        {
            "amount": f"{(amount_cents or 0) / 100:.2f}" if amount_cents else context["price"],
            "reason": reason,
        }
    )
    _send_templated(
        TEMPLATE_REFUND,
        to=order.user_email,
        subject=f"💸 Refund processed - Order #{context['order_ref']}",
        context=context,
    )


def send_payout_notification(
    order_id: int,
    producer_id: int,
    payout_cents: int,
    method: str,
) -> None:
    order = _order(order_id)
    producer = db.session.get(Producer, producer_id)
    if order is None or producer is None or not producer.email:
        return
    context = _base_context(order)
    context.update(
        {
            "producer": producer,
            "payout": f"{payout_cents / 100:.2f}",
            "method": method,
        }
    )
    _send_templated(
        TEMPLATE_PAYOUT,
        to=producer.email,
        subject=f"💰 Payout for Order #{context['order_ref']}",
        context=context,
    )


def notify_cancellation_request(order_id: int) -> None:
    """Tell the producer and the team, then post to Discord. Each leg is independent."""

    order = _order(order_id)
    if order is None:
        return
    context = _base_context(order)
    producer = order.assigned_producer
    context["producer"] = producer
    recipients = _recipients(
        producer.email if producer else None,
        current_app.config.get("BUSINESS_NOTIFICATION_EMAIL"),
    )
    if recipients:
        try:
            _send_templated(
                TEMPLATE_CANCELLATION,
                to=recipients,
                subject=f"📋 Cancellation requested - Order #{context['order_ref']}",
                context=context,
                reply_to=order.user_email,
            )
        except mail_service.MailServiceError:
            current_app.logger.warning(
                "Cancellation email failed", exc_info=True, extra={"order_id": order_id}
            )
    get_discord_client().post_message(
        f"📋 Cancellation requested for order `{order.id}`",
        embeds=[_cancellation_embed(order)],
    )


def send_application_status(application_id: int) -> None:
    application = db.session.get(ProducerApplication, application_id)
    if application is None:
        current_app.logger.warning(
            "Notification skipped; application missing", extra={"application_id": application_id}
        )
        return
    context = {
        "app_name": current_app.config.get("APP_NAME", "HEA Studio"),
        "app_url": _app_url(),
        "application": application,
        "year": utcnow().year,
    }
    _send_templated(
        TEMPLATE_APPLICATION,
        to=application.email,
        subject=APPLICATION_SUBJECTS[application.status],
        context=context,
    )


# ---------------------------------------------------------------------------
# Discord
# ---------------------------------------------------------------------------


def _truncate(text: str | None, limit: int) -> str:
    text = text or ""
    return text if len(text) <= limit else text[:limit] + "..."


def _order_fields(order: SongRequest) -> List[Dict[str, Any]]:
    return [
        {"name": "📋 Request ID", "value": f"`{order.id}`", "inline": True},
        {
            "name": "🎯 Tier",
            "value": f"{order.tier} ({order.complexity_level or 'Standard'})",
            "inline": True,
        },
        {"name": "📧 Customer", "value": order.user_email, "inline": True},
        {
            "name": "🎸 Genre",
            "value": catalog.genre_display_name(order.genre_category),
            "inline": True,
        },
    ]


def new_request_embed(order: SongRequest, producer: Producer | None = None) -> Dict[str, Any]:
    add_ons = catalog.describe_add_ons(
        tier=order.tier,
        recorded_stems=order.wants_recorded_stems,
        analog=order.wants_analog,
        mixing=order.wants_mixing,
        mastering=order.wants_mastering,
        revisions=order.number_of_revisions,
    )
    breakdown = [f"{label}: +${cost}" for label, cost in add_ons]
    breakdown.append(f"**TOTAL: ${order.price:.2f}**")
    fields = _order_fields(order)
    deadline = coerce_aware(order.acceptance_deadline)
    fields.extend(
        [
            {
                "name": "⏰ Accept by",
                "value": deadline.strftime("%b %d, %Y %H:%M UTC") if deadline else "n/a",
                "inline": True,
            },
            {"name": "💡 Song Idea", "value": _truncate(order.song_idea, IDEA_EMBED_LIMIT) or "-"},
            {"name": "💰 Price Breakdown", "value": "\n".join(breakdown), "inline": False},
        ]
    )
    if order.file_urls:
        fields.append(
            {"name": "📎 Attached Files", "value": f"{len(order.file_urls)} file(s) uploaded", "inline": True}
        )
    if producer is not None:
        mention = f"<@{producer.discord_user_id}>" if producer.discord_user_id else producer.name
        fields.append({"name": "🎧 Suggested Producer", "value": mention, "inline": True})
    return {
        "title": "🎵 New Song Request",
        "color": catalog.DEFAULT_EMBED_COLOR,
        "fields": fields,
        "timestamp": utcnow().isoformat(),
        "footer": {"text": "HechoEnAmerica • LA MUSIC ES MEDICINA"},
    }


def decision_buttons(order_id: int) -> List[Dict[str, Any]]:
    return [
        {
            "type": 1,
            "components": [
                {"type": 2, "style": 3, "label": "Accept", "custom_id": f"accept_{order_id}"},
                {"type": 2, "style": 4, "label": "Decline", "custom_id": f"decline_{order_id}"},
            ],
        }
    ]


def post_new_request(order_id: int, producer_id: int | None = None) -> bool:
    order = _order(order_id)
    if order is None:
        return False
    producer = db.session.get(Producer, producer_id) if producer_id else None
    mention = f" <@{producer.discord_user_id}>" if producer and producer.discord_user_id else ""
    return get_discord_client().post_message(
        f"🚨 New {order.tier.upper()} song request needs a producer!{mention}",
        embeds=[new_request_embed(order, producer)],
        components=decision_buttons(order.id),
        thread_name=f"🎵 {order.tier.upper()} - {order.id}",
    )


def post_status_change(order_id: int, old_status: str | None, new_status: str) -> bool:
    order = _order(order_id)
    if order is None:
        return False
    old_emoji = catalog.STATUS_EMOJI.get(old_status or "", "❓")
    new_emoji = catalog.STATUS_EMOJI.get(new_status, "❓")
    embed = {
        "title": "📊 Project Status Updated",
        "color": catalog.STATUS_EMBED_COLORS.get(new_status, catalog.DEFAULT_EMBED_COLOR),
        "fields": _order_fields(order)
        + [
            {
                "name": "🔄 Status",
                "value": f"{old_emoji} **{old_status}** → {new_emoji} **{new_status}**",
            }
        ],
        "timestamp": utcnow().isoformat(),
    }
    return get_discord_client().post_message(
        f"📊 Project status updated: **{old_status}** → **{new_status}**",
        embeds=[embed],
    )


def _cancellation_embed(order: SongRequest) -> Dict[str, Any]:
    return {
        "title": "📋 Cancellation Requested",
        "color": catalog.STATUS_EMBED_COLORS["cancellation_requested"],
        "fields": _order_fields(order)
        + [{"name": "📝 Reason", "value": _truncate(order.cancellation_reason, IDEA_EMBED_LIMIT) or "-"}],
        "timestamp": utcnow().isoformat(),
    }


def edit_interaction_message(
    interaction_token: str,
    content: str,
    embeds: List[Dict[str, Any]] | None = None,
) -> None:
    get_discord_client().edit_original_response(
        interaction_token,
        content=content,
        embeds=embeds,
        components=[],
    )
