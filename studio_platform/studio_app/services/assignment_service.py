"""Producer assignment: auto-match, accept / decline callbacks, admin reassignment."""

from __future__ import annotations

from dataclasses import dataclass
from http import HTTPStatus
from typing import List

from flask import abort, current_app
from sqlalchemy import and_, or_, update

from ..extensions import db
from ..metrics import record_order_event
from ..models import Producer, SongRequest, User
from ..utils import utcnow
from . import background, notification_service
from .checkout_service import acceptance_deadline
from .discord_client import DiscordError
from .errors import StudioError
from .mail_service import MailServiceError
from .matching_service import match_producer

AWAITING_PRODUCER = "paid"
TAKEN_STATUSES = ("accepted", "in_progress")


class AssignmentError(StudioError):
    pass


@dataclass
class Decision:
    """Outcome of an accept / decline click."""

    outcome: str
    order_id: int | None = None
    producer_id: int | None = None
    status: str | None = None

    @property
    def ok(self) -> bool:
        return self.outcome in {"accepted", "declined"}


def eligible_producers(order: SongRequest) -> List[Producer]:
    blocked = set(order.blocked_producer_ids or [])
    producers = Producer.query.order_by(Producer.id.asc()).all()
    return [producer for producer in producers if producer.id not in blocked]


def auto_match(order_id: int) -> int | None:
    """Suggest a producer for a paid order and announce it. Returns the producer id."""

    order = db.session.get(SongRequest, order_id)
    if order is None or order.status != AWAITING_PRODUCER:
        return None
    producer = match_producer(order.genre_category, eligible_producers(order))
    producer_id = producer.id if producer else None
    current_app.logger.info(
        "Auto-match result",
        extra={"order_id": order_id, "producer_id": producer_id},
    )
    try:
        notification_service.post_new_request(order_id, producer_id)
    except DiscordError:
        current_app.logger.warning("Discord new-request post failed", exc_info=True, extra={"order_id": order_id})
    if producer_id is not None:
        try:
            notification_service.notify_producer_assignment(order_id, producer_id)
        except MailServiceError:
            current_app.logger.warning(
                "Producer assignment email failed", exc_info=True, extra={"order_id": order_id}
            )
    return producer_id


def _producer_for_discord(discord_user_id: str | None) -> Producer | None:
    if not discord_user_id:
        return None
    return Producer.query.filter_by(discord_user_id=str(discord_user_id)).first()


def _conflict(order: SongRequest) -> Decision:
    db.session.refresh(order)
    outcome = "already_accepted" if order.status in TAKEN_STATUSES else "not_available"
    return Decision(outcome, order_id=order.id, status=order.status)


def accept_request(order_id: int, discord_user_id: str | None) -> Decision:
    """Assign the order to the clicking producer if it is still awaiting one.

    The ``WHERE status = 'paid'`` guard makes concurrent clicks safe: exactly
    one UPDATE matches, every other caller sees zero rows.
    """

    producer = _producer_for_discord(discord_user_id)
    if producer is None:
        return Decision("not_registered", order_id=order_id)
    order = db.session.get(SongRequest, order_id)
    if order is None:
        return Decision("not_found", order_id=order_id)
    if producer.id in (order.blocked_producer_ids or []):
        return Decision("blocked", order_id=order_id, producer_id=producer.id)

    result = db.session.execute(
        update(SongRequest)
        .where(SongRequest.id == order_id, SongRequest.status == AWAITING_PRODUCER)
        .values(status="accepted", assigned_producer_id=producer.id, updated_at=utcnow())
        .execution_options(synchronize_session=False)
    )
    db.session.commit()
    if result.rowcount == 0:
        return _conflict(order)

    record_order_event("accepted")
    current_app.logger.info(
        "Order accepted",
        extra={"order_id": order_id, "producer_id": producer.id},
    )
    background.dispatch(
        notification_service.notify_customer_status,
        order_id,
        "accepted",
        AWAITING_PRODUCER,
        description="customer-status-accepted",
    )
    background.dispatch(
        notification_service.send_project_files,
        order_id,
        description="project-files-email",
    )
    return Decision("accepted", order_id=order_id, producer_id=producer.id, status="accepted")


def decline_request(order_id: int, discord_user_id: str | None) -> Decision:
    """Reopen the order for another producer.

    Allowed while it is still awaiting a producer, or when the clicking
    producer is the one who accepted it.
    """

    producer = _producer_for_discord(discord_user_id)
    if producer is None:
        return Decision("not_registered", order_id=order_id)
    order = db.session.get(SongRequest, order_id)
    if order is None:
        return Decision("not_found", order_id=order_id)

    result = db.session.execute(
        update(SongRequest)
        .where(
            SongRequest.id == order_id,
            or_(
                SongRequest.status == AWAITING_PRODUCER,
                and_(
                    SongRequest.status == "accepted",
                    SongRequest.assigned_producer_id == producer.id,
                ),
            ),
        )
        .values(status=AWAITING_PRODUCER, assigned_producer_id=None, updated_at=utcnow())
        .execution_options(synchronize_session=False)
    )
    db.session.commit()
    if result.rowcount == 0:
        return _conflict(order)

    record_order_event("declined")
    current_app.logger.info(
        "Order declined",
        extra={"order_id": order_id, "producer_id": producer.id},
    )
    return Decision("declined", order_id=order_id, producer_id=producer.id, status=AWAITING_PRODUCER)


def change_producer(order_id: int, operator: User, reason: str | None = None) -> dict:
    """Pay the outgoing producer for work done, block them and reopen the order."""

    from . import payout_service

    order = db.session.get(SongRequest, order_id)
    if order is None:
        abort(404)
    if order.refunded_at is not None:
        raise AssignmentError("order_refunded", status=HTTPStatus.CONFLICT)
    old_producer = order.assigned_producer
    if old_producer is None:
        raise AssignmentError("no_producer_assigned")

    partial = payout_service.pay_partial_for_reassignment(order, old_producer)

    blocked = list(order.blocked_producer_ids or [])
    if old_producer.id not in blocked:
        blocked.append(old_producer.id)
    old_status = order.status
    order.blocked_producer_ids = blocked
    order.assigned_producer_id = None
    order.status = AWAITING_PRODUCER
    order.acceptance_deadline = acceptance_deadline()
    db.session.commit()

    record_order_event("producer_changed")
    current_app.logger.info(
        "Producer changed by %s (%s)",
        operator.email,
        reason or "no reason given",
        extra={"order_id": order_id, "producer_id": old_producer.id},
    )
    background.dispatch(
        notification_service.post_status_change,
        order_id,
        old_status,
        AWAITING_PRODUCER,
        description="discord-status-change",
    )
    background.dispatch(auto_match, order_id, description="auto-match-producer")
    return {
        "success": True,
        "request_id": order_id,
        "previous_producer_id": old_producer.id,
        "partial_payout": partial,
    }
