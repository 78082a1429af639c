"""Scheduled sweep that refunds orders nobody accepted before the deadline."""

from __future__ import annotations

from datetime import datetime

from flask import current_app
from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..metrics import record_order_event
from ..models import SongRequest
from ..services import background, notification_service
from ..services.payment_client import PaymentProviderError, get_payment_client
from ..utils import utcnow

REFUND_REASON = "No producer accepted within 48 hours"


def find_expired_requests(now: datetime | None = None) -> list[SongRequest]:
    statuses = tuple(current_app.config.get("EXPIRY_SWEEP_STATUSES") or ("pending",))
    return (
        SongRequest.query.filter(
            SongRequest.status.in_(statuses),
            SongRequest.refunded_at.is_(None),
            SongRequest.payment_intent_id.isnot(None),
            SongRequest.acceptance_deadline < (now or utcnow()),
        )
        .order_by(SongRequest.acceptance_deadline.asc())
        .all()
    )


def _release_payment(order: SongRequest) -> tuple[str, int | None]:
    """Refund a captured charge or cancel an uncaptured one."""

    client = get_payment_client()
    intent = client.retrieve_payment_intent(order.payment_intent_id)
    if intent.status == "succeeded":
        refund = client.create_refund(
            intent.id,
            reason="requested_by_customer",
            metadata={"request_id": str(order.id), "reason": REFUND_REASON},
        )
        return "refunded", refund.amount
    if intent.status == "requires_capture":
        client.cancel_payment_intent(intent.id, reason="abandoned")
        return "cancelled", intent.amount
    current_app.logger.warning(
        "Payment intent %s not refundable (status=%s)",
        intent.id,
        intent.status,
        extra={"order_id": order.id},
    )
    return "not_refundable", None


def sweep_expired_requests(now: datetime | None = None) -> dict:
    """Refund every expired order once; per-order failures are collected, not raised."""

    now = now or utcnow()
    expired = find_expired_requests(now)
    results: dict = {"processed": 0, "refunded": 0, "errors": []}

    for order in expired:
        order_id = order.id
        results["processed"] += 1
        try:
            action, amount = _release_payment(order)
            if action == "not_refundable":
                continue
            outcome = db.session.execute(
                update(SongRequest)
                .where(SongRequest.id == order_id, SongRequest.refunded_at.is_(None))
                .values(status="refunded", refunded_at=now, updated_at=now)
                .execution_options(synchronize_session=False)
            )
            db.session.commit()
        except (PaymentProviderError, SQLAlchemyError) as exc:
            db.session.rollback()
            current_app.logger.error(
                "Expiry refund failed: %s", exc, extra={"order_id": order_id}
            )
            results["errors"].append({"request_id": order_id, "error": str(exc)})
            continue

        if outcome.rowcount == 0:
            continue
        results["refunded"] += 1
        record_order_event("refunded")
        current_app.logger.info(
            "Expired order released (%s)", action, extra={"order_id": order_id}
        )
        background.dispatch(
            notification_service.send_refund_notification,
            order_id,
            amount,
            REFUND_REASON,
            description="refund-email",
        )

    return results
