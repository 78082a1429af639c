"""Customer cancellation requests and the admin approve / deny decision."""

from __future__ import annotations

from http import HTTPStatus

from flask import current_app
from sqlalchemy import update

from ..extensions import db
from ..metrics import record_order_event
from ..models import SongRequest, User
from ..utils import utcnow
from . import background, notification_service
from .errors import StudioError
from .payment_client import get_payment_client

CANCELLABLE_STATUSES = ("paid", "accepted", "in_progress", "review", "revision")
DENIED_STATUS = "in_progress"


class CancellationError(StudioError):
    pass


def refund_amount(total_cents: int, percent: int) -> int:
    """Floor of ``total * percent / 100``, integer math only."""

    return (int(total_cents) * int(percent)) // 100


def request_cancellation(order: SongRequest, user: User, reason: str) -> SongRequest:
    if order.user_id != user.id:
        raise CancellationError("forbidden", status=HTTPStatus.FORBIDDEN)
    if not reason or not reason.strip():
        raise CancellationError("reason_required")
    if order.status not in CANCELLABLE_STATUSES:
        raise CancellationError(
            "invalid_status", {"status": order.status}, status=HTTPStatus.CONFLICT
        )
    order.status = "cancellation_requested"
    order.cancellation_reason = reason.strip()
    order.cancellation_requested_at = utcnow()
    db.session.commit()

    record_order_event("cancellation_requested")
    background.dispatch(
        notification_service.notify_cancellation_request,
        order.id,
        description="cancellation-request-notice",
    )
    return order


def decide_cancellation(
    order: SongRequest,
    operator: User,
    *,
    approve: bool,
    refund_percent: int | None = None,
) -> dict:
    if order.status != "cancellation_requested":
        raise CancellationError(
            "no_pending_cancellation", {"status": order.status}, status=HTTPStatus.CONFLICT
        )
    if not approve:
        order.status = DENIED_STATUS
        db.session.commit()
        record_order_event("cancellation_denied")
        background.dispatch(
            notification_service.notify_customer_status,
            order.id,
            DENIED_STATUS,
            "cancellation_requested",
            description="customer-status-cancellation-denied",
        )
        return {"success": True, "request_id": order.id, "status": order.status}

    percent = refund_percent
    if percent is None:
        percent = int(current_app.config.get("DEFAULT_REFUND_PERCENT", 100))
    if not 0 <= percent <= 100:
        raise CancellationError("invalid_refund_percent")
    amount = 0
    refund_id = None
    if order.payment_intent_id:
        client = get_payment_client()
        intent = client.retrieve_payment_intent(order.payment_intent_id)
        # Only captured charges can be refunded.
        if intent.status == "succeeded":
            amount = refund_amount(intent.amount, percent)
        else:
            current_app.logger.warning(
                "Skipping refund for intent %s in status %s",
                intent.id,
                intent.status,
                extra={"order_id": order.id},
            )
    if amount > 0:
        refund = client.create_refund(
            intent.id,
            amount_cents=amount,
            reason="requested_by_customer",
            metadata={"request_id": str(order.id), "refund_percent": str(percent)},
        )
        refund_id = refund.id

    now = utcnow()
    result = db.session.execute(
        update(SongRequest)
        .where(SongRequest.id == order.id, SongRequest.refunded_at.is_(None))
        .values(status="refunded", refunded_at=now, updated_at=now)
        .execution_options(synchronize_session=False)
    )
    db.session.commit()
    if result.rowcount == 0:
        raise CancellationError("order_refunded", status=HTTPStatus.CONFLICT)

    record_order_event("refunded")
    current_app.logger.info(
        "Cancellation approved by %s (%s%%)",
        operator.email,
        percent,
        extra={"order_id": order.id},
    )
    background.dispatch(
        notification_service.send_refund_notification,
        order.id,
        amount,
        order.cancellation_reason or "Cancellation approved",
        description="refund-email",
    )
    return {
        "success": True,
        "request_id": order.id,
        "status": "refunded",
        "refund_id": refund_id,
        "refund_amount_cents": amount,
        "refund_percent": percent,
    }
