"""Checkout return handling: verify a session once and record the purchase."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from http import HTTPStatus

from flask import current_app
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..metrics import record_order_event
from ..models import Purchase, SongRequest
from ..utils import utcnow
from . import background, notification_service
from .errors import StudioError
from .payment_client import CheckoutSession, get_payment_client

SESSION_ID_MAX_LENGTH = 500


class PaymentError(StudioError):
    pass


def _already_verified() -> dict:
    return {"success": True, "message": "Payment already verified", "already_verified": True}


def verify_song_payment(session_id: str | None) -> dict:
    """Verify a paid checkout session and insert its purchase exactly once.

    A pre-check on ``purchases.stripe_session_id`` short-circuits repeats;
    the unique constraint catches concurrent verifications that both pass
    the pre-check.
    """

    session_id = (session_id or "").strip()
    if not session_id or len(session_id) > SESSION_ID_MAX_LENGTH:
        raise PaymentError("invalid_session_id")

    if Purchase.query.filter_by(stripe_session_id=session_id).first() is not None:
        return _already_verified()

    session = get_payment_client().retrieve_checkout_session(session_id)
    if session.payment_status != "paid":
        raise PaymentError(
            "payment_not_completed",
            {"payment_status": session.payment_status},
            status=HTTPStatus.PAYMENT_REQUIRED,
        )

    order = _order_for_session(session)
    if order is None:
        raise PaymentError("order_not_found", status=HTTPStatus.NOT_FOUND)

    purchase = Purchase(
        user_id=order.user_id,
        product_id=str(order.id),
        product_name=f"Song Production - {order.tier}",
        product_type="song_request",
        product_category=order.tier,
        price=Decimal(session.amount_total) / 100 if session.amount_total else order.price,
        status="processing",
        song_idea=order.song_idea,
        file_urls=list(order.file_urls or []),
        stripe_session_id=session.id,
    )
    db.session.add(purchase)
    try:
        db.session.flush()
    except IntegrityError:
        db.session.rollback()
        current_app.logger.info(
            "Purchase already recorded by a concurrent verification",
            extra={"session_id": session_id},
        )
        return _already_verified()

    newly_paid = _mark_paid(order, session)
    db.session.commit()

    if newly_paid:
        record_order_event("paid")
        _dispatch_paid_followups(order.id)

    return {
        "success": True,
        "message": "Payment verified",
        "already_verified": False,
        "request_id": order.id,
        "purchase_id": purchase.id,
    }


def _order_for_session(session: CheckoutSession) -> SongRequest | None:
    request_id = session.metadata.get("request_id")
    if request_id and request_id.isdigit():
        order = db.session.get(SongRequest, int(request_id))
        if order is not None:
            return order
    return SongRequest.query.filter_by(stripe_session_id=session.id).first()


def _mark_paid(order: SongRequest, session: CheckoutSession) -> bool:
    """Flip ``pending_payment`` to ``paid``; False when another call got there first."""

    values = {
        "status": "paid",
        "payment_intent_id": session.payment_intent_id,
        "stripe_session_id": session.id,
        "updated_at": utcnow(),
    }
    metadata = session.metadata
    if metadata.get("platform_fee_cents", "").isdigit():
        values["platform_fee_cents"] = int(metadata["platform_fee_cents"])
    if metadata.get("producer_payout_cents", "").isdigit():
        values["producer_payout_cents"] = int(metadata["producer_payout_cents"])
    deadline = _parse_deadline(metadata.get("acceptance_deadline"))
    if deadline is not None:
        values["acceptance_deadline"] = deadline

    result = db.session.execute(
        update(SongRequest)
        .where(SongRequest.id == order.id, SongRequest.status == "pending_payment")
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


def _parse_deadline(raw: str | None) -> datetime | None:
    if not raw:
        return None
    try:
        return datetime.fromisoformat(raw)
    except ValueError:
        current_app.logger.warning("Unparseable acceptance deadline in metadata: %s", raw)
        return None


def _dispatch_paid_followups(order_id: int) -> None:
    from . import assignment_service

    background.dispatch(
        notification_service.send_order_confirmation,
        order_id,
        description="order-confirmation-email",
    )
    background.dispatch(
        notification_service.send_business_new_order,
        order_id,
        description="business-new-order-email",
    )
    background.dispatch(
        assignment_service.auto_match,
        order_id,
        description="auto-match-producer",
    )
