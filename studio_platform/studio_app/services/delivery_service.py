"""Final delivery of a finished song and the files re-send helper."""

from __future__ import annotations

from http import HTTPStatus

from flask import current_app

from ..extensions import db
from ..metrics import record_order_event
from ..models import Purchase, SongRequest, User
from ..utils import is_valid_url
from . import background, notification_service
from .errors import StudioError
from .revision_service import is_assignee

PRODUCT_TYPE = "song_request"
UNPAID_OR_CLOSED = ("pending", "pending_payment", "refunded")


class DeliveryError(StudioError):
    pass


def _upsert_purchase(order: SongRequest, download_url: str) -> Purchase:
    product_id = str(order.id)
    purchase = Purchase.query.filter_by(user_id=order.user_id, product_id=product_id).first()
    if purchase is None:
        purchase = Purchase(
            user_id=order.user_id,
            product_id=product_id,
            product_name=f"Song Production - {order.tier}",
            product_type=PRODUCT_TYPE,
            product_category=order.tier,
            price=order.price or 0,
            song_idea=order.song_idea,
            file_urls=list(order.file_urls or []),
        )
        db.session.add(purchase)
    purchase.status = "ready"
    purchase.download_url = download_url
    return purchase


def deliver_order(
    order: SongRequest,
    user: User,
    *,
    download_url: str,
    custom_message: str | None = None,
    allow_admin: bool = False,
) -> Purchase:
    """Mark the order completed and hand the customer their download link."""

    if not (is_assignee(order, user) or (allow_admin and user.is_admin)):
        raise DeliveryError("forbidden", status=HTTPStatus.FORBIDDEN)
    if not is_valid_url(download_url):
        raise DeliveryError("invalid_url", {"field": "download_url"})
    if order.refunded_at is not None:
        raise DeliveryError("order_refunded", status=HTTPStatus.CONFLICT)

    old_status = order.status
    order.status = "completed"
    purchase = _upsert_purchase(order, download_url)
    db.session.commit()

    record_order_event("completed")
    current_app.logger.info("Order delivered", extra={"order_id": order.id})
    background.dispatch(
        notification_service.send_delivery_email,
        order.id,
        download_url,
        custom_message,
        description="delivery-email",
    )
    background.dispatch(
        notification_service.post_status_change,
        order.id,
        old_status,
        "completed",
        description="discord-status-change",
    )
    return purchase


def resend_files(order: SongRequest, user: User) -> None:
    if not (user.is_admin or is_assignee(order, user)):
        raise DeliveryError("forbidden", status=HTTPStatus.FORBIDDEN)
    if order.status in UNPAID_OR_CLOSED:
        raise DeliveryError("invalid_status", {"status": order.status})
    background.dispatch(
        notification_service.send_project_files,
        order.id,
        description="project-files-email",
    )
