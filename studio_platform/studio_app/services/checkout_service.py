"""Song checkout: fee split, acceptance deadline and hosted checkout session."""

from __future__ import annotations

import json
from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from http import HTTPStatus

from flask import abort, current_app

from ..extensions import db
from ..metrics import record_order_event
from ..models import SongRequest, User
from ..utils import utcnow
from . import catalog
from .errors import StudioError
from .payment_client import get_payment_client

IDEA_METADATA_LIMIT = 500


class CheckoutError(StudioError):
    pass


def to_cents(amount) -> int:
    """Dollar amount to integer cents, rounding half up."""

    return int((Decimal(str(amount)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def compute_fee_split(total_cents: int, percent: int | None = None) -> tuple[int, int]:
    """Return ``(platform_fee_cents, producer_payout_cents)``; they always sum to the total."""

    if percent is None:
        percent = int(current_app.config.get("PLATFORM_FEE_PERCENT", 15))
    fee = int(
        (Decimal(total_cents) * Decimal(percent) / Decimal(100)).quantize(
            Decimal("1"), rounding=ROUND_HALF_UP
        )
    )
    return fee, total_cents - fee


def acceptance_deadline(now: datetime | None = None) -> datetime:
    hours = int(current_app.config.get("ACCEPTANCE_DEADLINE_HOURS", 48))
    return (now or utcnow()) + timedelta(hours=hours)


def describe_checkout(tier: str, add_ons: dict) -> str:
    description = f"Song Production - {tier} Tier"
    labels = [
        label
        for label, _price in catalog.describe_add_ons(
            tier=tier,
            recorded_stems=add_ons.get("recorded_stems", False),
            analog=add_ons.get("analog", False),
            mixing=add_ons.get("mixing", False),
            mastering=add_ons.get("mastering", False),
            revisions=add_ons.get("revisions", 0),
        )
    ]
    if labels:
        description += " + " + ", ".join(labels)
    return description


def create_song_checkout(user: User, payload: dict) -> dict:
    tier = (payload.get("tier") or "").strip()
    total_price = payload.get("total_price")
    if not tier or total_price is None:
        raise CheckoutError("missing_tier_or_total_price")
    total_cents = to_cents(total_price)
    if total_cents <= 0:
        raise CheckoutError("invalid_total_price")

    fee_cents, payout_cents = compute_fee_split(total_cents)
    deadline = acceptance_deadline()
    add_ons = payload.get("add_ons") or {}
    idea = payload.get("idea") or ""

    order = _load_or_create_order(user, payload.get("request_id"))
    order.tier = tier
    order.song_idea = idea
    order.price = Decimal(str(total_price))
    order.file_urls = list(payload.get("file_urls") or [])
    order.genre_category = payload.get("genre_category") or order.genre_category
    order.wants_recorded_stems = bool(add_ons.get("recorded_stems"))
    order.wants_analog = bool(add_ons.get("analog"))
    order.wants_mixing = bool(add_ons.get("mixing"))
    order.wants_mastering = bool(add_ons.get("mastering"))
    order.number_of_revisions = int(add_ons.get("revisions") or 0)
    order.complexity_level = catalog.COMPLEXITY_LABELS.get(tier)
    order.platform_fee_cents = fee_cents
    order.producer_payout_cents = payout_cents
    order.acceptance_deadline = deadline
    db.session.flush()

    metadata = {
        "tier": tier,
        "idea": idea[:IDEA_METADATA_LIMIT],
        "user_id": str(user.id),
        "request_id": str(order.id),
        "total_price": str(total_price),
        "base_price": str(payload.get("base_price") or ""),
        "add_ons": json.dumps(add_ons, sort_keys=True),
        "platform_fee_cents": str(fee_cents),
        "producer_payout_cents": str(payout_cents),
        "acceptance_deadline": deadline.isoformat(),
    }
    app_url = current_app.config.get("APP_URL", "").rstrip("/")
    try:
        session = get_payment_client().create_checkout_session(
            amount_cents=total_cents,
            product_name=f"Song Production - {tier}",
            description=describe_checkout(tier, add_ons),
            customer_email=user.email,
            success_url=f"{app_url}/purchase-confirmation?session_id={{CHECKOUT_SESSION_ID}}",
            cancel_url=f"{app_url}/generate-song",
            metadata=metadata,
        )
    except Exception:
        db.session.rollback()
        raise

    order.stripe_session_id = session.id
    db.session.commit()
    record_order_event("checkout_created")
    current_app.logger.info(
        "Checkout session created",
        extra={"order_id": order.id, "session_id": session.id},
    )
    return {
        "url": session.url,
        "session_id": session.id,
        "request_id": order.id,
        "total_amount_cents": total_cents,
        "platform_fee_cents": fee_cents,
        "producer_payout_cents": payout_cents,
        "acceptance_deadline": deadline.isoformat(),
    }


def _load_or_create_order(user: User, request_id: int | None) -> SongRequest:
    if request_id is None:
        order = SongRequest(
            user_id=user.id,
            user_email=user.email,
            status="pending_payment",
            tier="",
            price=Decimal("0"),
        )
        db.session.add(order)
        return order
    order = db.session.get(SongRequest, request_id)
    if order is None or order.user_id != user.id:
        abort(404)
    if order.status != "pending_payment":
        raise CheckoutError(
            "order_already_paid",
            {"status": order.status},
            status=HTTPStatus.CONFLICT,
        )
    return order
