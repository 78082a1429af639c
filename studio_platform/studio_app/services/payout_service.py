"""Producer payouts (Connect transfer or manual marker) and Connect onboarding."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from http import HTTPStatus

from flask import abort, current_app
from sqlalchemy import update

from ..extensions import db
from ..metrics import record_payout
from ..models import Producer, SongRequest, User
from ..utils import utcnow
from . import background, notification_service
from .checkout_service import compute_fee_split
from .errors import StudioError
from .payment_client import PaymentProviderError, get_payment_client

METHOD_CONNECT = "stripe_connect"
METHOD_MANUAL = "manual"


class PayoutError(StudioError):
    pass


def _fee_percent() -> int:
    return int(current_app.config.get("PLATFORM_FEE_PERCENT", 15))


def _transfer_or_manual(
    order: SongRequest,
    producer: Producer,
    amount_cents: int,
    *,
    reason: str,
    idempotency_key: str,
) -> tuple[str, str | None]:
    """Send a Connect transfer when the producer is onboarded, else fall back to manual."""

    if not producer.connect_ready or amount_cents <= 0:
        return METHOD_MANUAL, None
    try:
        transfer = get_payment_client().create_transfer(
            amount_cents=amount_cents,
            destination=producer.stripe_connect_account_id,
            transfer_group=str(order.id),
            metadata={
                "request_id": str(order.id),
                "producer_id": str(producer.id),
                "reason": reason,
            },
            idempotency_key=idempotency_key,
        )
    except PaymentProviderError:
        current_app.logger.exception(
            "Connect transfer failed; recording manual payout",
            extra={"order_id": order.id, "producer_id": producer.id},
        )
        return METHOD_MANUAL, None
    return METHOD_CONNECT, transfer.id


def process_payout(order_id: int, operator: User) -> dict:
    order = db.session.get(SongRequest, order_id)
    if order is None:
        abort(404)
    if operator.role == "producer":
        own = operator.producer
        if own is None or order.assigned_producer_id != own.id:
            raise PayoutError("forbidden", status=HTTPStatus.FORBIDDEN)

    if order.status != "completed":
        raise PayoutError("order_not_completed", {"status": order.status})
    if order.producer_paid_at is not None:
        raise PayoutError("producer_already_paid", status=HTTPStatus.CONFLICT)
    if order.refunded_at is not None:
        raise PayoutError("order_refunded", status=HTTPStatus.CONFLICT)
    if not order.payment_intent_id:
        raise PayoutError("missing_payment_intent")
    producer = order.assigned_producer
    if producer is None:
        raise PayoutError("no_producer_assigned")

    intent = get_payment_client().retrieve_payment_intent(order.payment_intent_id)
    if intent.status != "succeeded":
        raise PayoutError("payment_not_succeeded", {"payment_status": intent.status})

    percent = _fee_percent()
    fee_cents, payout_cents = compute_fee_split(intent.amount, percent)
    method, transfer_id = _transfer_or_manual(
        order,
        producer,
        payout_cents,
        reason="producer_payout",
        idempotency_key=f"payout-{order.id}",
    )

    result = db.session.execute(
        update(SongRequest)
        .where(SongRequest.id == order.id, SongRequest.producer_paid_at.is_(None))
        .values(
            platform_fee_cents=fee_cents,
            producer_payout_cents=payout_cents,
            producer_paid_at=utcnow(),
            payout_method=method,
            payout_transfer_id=transfer_id,
            updated_at=utcnow(),
        )
        .execution_options(synchronize_session=False)
    )
    db.session.commit()
    if result.rowcount == 0:
        raise PayoutError("producer_already_paid", status=HTTPStatus.CONFLICT)

    record_payout(method)
    current_app.logger.info(
        "Producer payout recorded via %s",
        method,
        extra={"order_id": order.id, "producer_id": producer.id},
    )
    background.dispatch(
        notification_service.send_payout_notification,
        order.id,
        producer.id,
        payout_cents,
        method,
        description="producer-payout-email",
    )
    return {
        "success": True,
        "payout_method": method,
        "transfer_id": transfer_id,
        "payout": {
            "total_amount_cents": intent.amount,
            "platform_fee_cents": fee_cents,
            "producer_payout_cents": payout_cents,
            "platform_fee_percent": percent,
        },
    }


def pay_partial_for_reassignment(order: SongRequest, producer: Producer) -> dict:
    """Pay an outgoing producer in proportion to delivered revisions.

    Nothing is owed until at least one revision was delivered.
    """

    delivered = sum(1 for revision in order.revisions if revision.status == "delivered")
    total = order.number_of_revisions or 0
    summary = {"amount_cents": 0, "method": "none", "transfer_id": None, "progress_ratio": None}
    if delivered == 0 or not order.payment_intent_id or order.producer_paid_at is not None:
        return summary

    intent = get_payment_client().retrieve_payment_intent(order.payment_intent_id)
    if intent.status != "succeeded":
        return summary

    ratio = Decimal(delivered) / Decimal(total) if total > 0 else Decimal("0.5")
    _fee, producer_share = compute_fee_split(intent.amount, _fee_percent())
    amount = int((Decimal(producer_share) * ratio).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    method, transfer_id = _transfer_or_manual(
        order,
        producer,
        amount,
        reason="partial_payout_producer_change",
        idempotency_key=f"partial-{order.id}-{producer.id}",
    )
    if method == METHOD_MANUAL and amount > 0:
        method = "manual_required"
    record_payout(method)
    summary.update(
        {
            "amount_cents": amount,
            "method": method,
            "transfer_id": transfer_id,
            "progress_ratio": float(ratio),
        }
    )
    return summary


# ---------------------------------------------------------------------------
# Connect onboarding
# ---------------------------------------------------------------------------


def start_connect_onboarding(producer: Producer) -> dict:
    client = get_payment_client()
    if not producer.stripe_connect_account_id:
        account = client.create_connect_account(
            email=producer.email,
            metadata={"producer_id": str(producer.id), "producer_name": producer.name},
        )
        producer.stripe_connect_account_id = account.id
        db.session.commit()
    app_url = current_app.config.get("APP_URL", "").rstrip("/")
    url = client.create_account_link(
        producer.stripe_connect_account_id,
        refresh_url=f"{app_url}/producer-profile?connect_refresh=true",
        return_url=f"{app_url}/producer-profile?connect_success=true",
    )
    return {"url": url, "account_id": producer.stripe_connect_account_id}


def connect_status(producer: Producer) -> dict:
    if not producer.stripe_connect_account_id:
        return {
            "connected": False,
            "onboarded": False,
            "charges_enabled": False,
            "payouts_enabled": False,
            "details_submitted": False,
        }
    account = get_payment_client().retrieve_connect_account(producer.stripe_connect_account_id)
    onboarded = account.details_submitted and account.charges_enabled
    if onboarded and producer.stripe_connect_onboarded_at is None:
        producer.stripe_connect_onboarded_at = utcnow()
        db.session.commit()
    return {
        "connected": True,
        "onboarded": onboarded,
        "charges_enabled": account.charges_enabled,
        "payouts_enabled": account.payouts_enabled,
        "details_submitted": account.details_submitted,
    }
