"""Producer-side workflow: start work, checklist, status updates, revisions and chat."""

from __future__ import annotations

from http import HTTPStatus
from typing import List

from flask import abort, current_app
from sqlalchemy import update

from ..extensions import db
from ..metrics import record_order_event
from ..models import RevisionMessage, SongRequest, SongRevision, User
from ..utils import is_valid_url, utcnow
from . import background, catalog, notification_service
from .errors import StudioError

MANUAL_STATUSES = ("in_progress", "review", "revision", "completed")


class RevisionError(StudioError):
    pass


# ---------------------------------------------------------------------------
# Access helpers
# ---------------------------------------------------------------------------


def get_order_or_404(order_id: int) -> SongRequest:
    order = db.session.get(SongRequest, order_id)
    if order is None:
        abort(404)
    return order


def is_assignee(order: SongRequest, user: User) -> bool:
    producer = user.producer
    return producer is not None and order.assigned_producer_id == producer.id


def can_view(order: SongRequest, user: User) -> bool:
    return user.is_admin or order.user_id == user.id or is_assignee(order, user)


def require_assignee(order: SongRequest, user: User, *, allow_admin: bool = False) -> None:
    if allow_admin and user.is_admin:
        return
    if not is_assignee(order, user):
        raise RevisionError("forbidden", status=HTTPStatus.FORBIDDEN)


def list_orders_for(user: User) -> List[SongRequest]:
    query = SongRequest.query
    if user.is_admin:
        pass
    elif user.is_producer:
        producer = user.producer
        if producer is None:
            return []
        query = query.filter(SongRequest.assigned_producer_id == producer.id)
    else:
        query = query.filter(SongRequest.user_id == user.id)
    return query.order_by(SongRequest.created_at.desc()).all()


# ---------------------------------------------------------------------------
# Order workflow
# ---------------------------------------------------------------------------


def initialize_revisions(order: SongRequest) -> List[SongRevision]:
    """Create revisions 1..N once; later calls return the existing rows."""

    existing = SongRevision.query.filter_by(song_request_id=order.id).count()
    if existing or (order.number_of_revisions or 0) <= 0:
        return list(order.revisions)
    for number in range(1, order.number_of_revisions + 1):
        db.session.add(
            SongRevision(song_request_id=order.id, revision_number=number, status="pending")
        )
    db.session.flush()
    db.session.refresh(order)
    return list(order.revisions)


def start_working(order: SongRequest, user: User) -> SongRequest:
    require_assignee(order, user)
    result = db.session.execute(
        update(SongRequest)
        .where(SongRequest.id == order.id, SongRequest.status == "accepted")
        .values(status="in_progress", updated_at=utcnow())
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        db.session.rollback()
        db.session.refresh(order)
        raise RevisionError(
            "invalid_status_transition",
            {"status": order.status},
            status=HTTPStatus.CONFLICT,
        )
    initialize_revisions(order)
    db.session.commit()
    record_order_event("in_progress")
    background.dispatch(
        notification_service.notify_customer_status,
        order.id,
        "in_progress",
        "accepted",
        description="customer-status-in-progress",
    )
    return order


def update_checklist(order: SongRequest, user: User, checklist: dict) -> SongRequest:
    require_assignee(order, user)
    order.producer_checklist = checklist
    db.session.commit()
    return order


def set_status(order: SongRequest, user: User, new_status: str) -> SongRequest:
    """Manual status change by the assignee or an admin. No transition table applies."""

    require_assignee(order, user, allow_admin=True)
    if new_status not in MANUAL_STATUSES:
        raise RevisionError("invalid_status", {"allowed": list(MANUAL_STATUSES)})
    if order.refunded_at is not None:
        raise RevisionError("order_refunded", status=HTTPStatus.CONFLICT)
    old_status = order.status
    order.status = new_status
    db.session.commit()
    record_order_event(new_status)
    if new_status in catalog.NOTIFIABLE_STATUSES:
        background.dispatch(
            notification_service.notify_customer_status,
            order.id,
            new_status,
            old_status,
            description="customer-status-update",
        )
    background.dispatch(
        notification_service.post_status_change,
        order.id,
        old_status,
        new_status,
        description="discord-status-change",
    )
    return order


# ---------------------------------------------------------------------------
# Revisions
# ---------------------------------------------------------------------------


def get_revision_or_404(revision_id: int) -> SongRevision:
    revision = db.session.get(SongRevision, revision_id)
    if revision is None:
        abort(404)
    return revision


def request_revision(
    revision: SongRevision,
    user: User,
    *,
    client_notes: str,
    wants_meeting: bool = False,
) -> SongRevision:
    order = revision.song_request
    if order.user_id != user.id:
        raise RevisionError("forbidden", status=HTTPStatus.FORBIDDEN)
    if revision.status == "delivered":
        raise RevisionError("revision_already_delivered", status=HTTPStatus.CONFLICT)
    revision.status = "requested"
    revision.client_notes = client_notes
    revision.wants_meeting = wants_meeting
    revision.requested_at = utcnow()
    old_status = order.status
    if order.status in ("in_progress", "review", "completed"):
        order.status = "revision"
    db.session.commit()
    background.dispatch(
        notification_service.send_revision_notification,
        revision.id,
        "revision_requested",
        description="revision-requested-email",
    )
    if order.status != old_status:
        background.dispatch(
            notification_service.notify_customer_status,
            order.id,
            order.status,
            old_status,
            description="customer-status-revision",
        )
    return revision


def deliver_revision(
    revision: SongRevision,
    user: User,
    *,
    drive_link: str,
    meeting_link: str | None = None,
    drive_folder_id: str | None = None,
) -> SongRevision:
    order = revision.song_request
    require_assignee(order, user)
    if not is_valid_url(drive_link):
        raise RevisionError("invalid_url", {"field": "drive_link"})
    if meeting_link and not is_valid_url(meeting_link):
        raise RevisionError("invalid_url", {"field": "meeting_link"})
    revision.status = "delivered"
    revision.drive_link = drive_link
    revision.meeting_link = meeting_link or revision.meeting_link
    revision.drive_folder_id = drive_folder_id or revision.drive_folder_id
    revision.delivered_at = utcnow()
    db.session.commit()
    current_app.logger.info(
        "Revision %s delivered", revision.revision_number, extra={"order_id": order.id}
    )
    background.dispatch(
        notification_service.send_revision_notification,
        revision.id,
        "revision_delivered",
        description="revision-delivered-email",
    )
    return revision


def submit_feedback(revision: SongRevision, user: User, *, feedback: str) -> SongRevision:
    if revision.song_request.user_id != user.id:
        raise RevisionError("forbidden", status=HTTPStatus.FORBIDDEN)
    revision.client_feedback = feedback
    db.session.commit()
    background.dispatch(
        notification_service.send_revision_notification,
        revision.id,
        "feedback_submitted",
        description="revision-feedback-email",
    )
    return revision


def list_messages(revision: SongRevision, user: User) -> List[RevisionMessage]:
    if not can_view(revision.song_request, user):
        raise RevisionError("forbidden", status=HTTPStatus.FORBIDDEN)
    return list(revision.messages)


def post_message(revision: SongRevision, user: User, text: str) -> RevisionMessage:
    order = revision.song_request
    if not can_view(order, user):
        raise RevisionError("forbidden", status=HTTPStatus.FORBIDDEN)
    if user.is_admin:
        role = "admin"
    elif is_assignee(order, user):
        role = "producer"
    else:
        role = "customer"
    message = RevisionMessage(
        revision_id=revision.id,
        sender_id=user.id,
        sender_role=role,
        message=text.strip(),
    )
    db.session.add(message)
    db.session.commit()
    return message
