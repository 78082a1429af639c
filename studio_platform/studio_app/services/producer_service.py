"""Producer onboarding: applications, admin review and role grants."""

from __future__ import annotations

import re
from http import HTTPStatus
from typing import List

from flask import current_app

from ..extensions import db
from ..metrics import record_application_event
from ..models import Producer, ProducerApplication, User
from ..utils import utcnow
from . import background, notification_service
from .errors import StudioError

APPLICATION_STATUSES = ("pending", "approved", "rejected")
ROLES = ("customer", "producer", "admin")


class ApplicationError(StudioError):
    pass


def slugify(name: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-") or "producer"


def unique_slug(name: str) -> str:
    slug = slugify(name)
    if Producer.query.filter_by(slug=slug).first():
        slug = f"{slug}-{Producer.query.count() + 1}"
    return slug


def submit_application(user: User, payload: dict) -> ProducerApplication:
    if user.role == "producer" or user.producer is not None:
        raise ApplicationError("already_producer", status=HTTPStatus.CONFLICT)
    pending = ProducerApplication.query.filter_by(user_id=user.id, status="pending").first()
    if pending is not None:
        raise ApplicationError(
            "application_pending", {"application_id": pending.id}, status=HTTPStatus.CONFLICT
        )

    application = ProducerApplication(
        user_id=user.id,
        name=payload["name"].strip(),
        email=payload["email"].lower(),
        country=payload.get("country"),
        genres=list(payload["genres"]),
        bio=payload["bio"].strip(),
        image=payload.get("image"),
        spotify_url=payload.get("spotify_url"),
        apple_music_url=payload.get("apple_music_url"),
        instagram_url=payload.get("instagram_url"),
        youtube_url=payload.get("youtube_url"),
        website_url=payload.get("website_url"),
        status="pending",
    )
    db.session.add(application)
    db.session.commit()

    record_application_event("submitted")
    current_app.logger.info(
        "Producer application submitted",
        extra={"application_id": application.id, "user_id": user.id},
    )
    background.dispatch(
        notification_service.send_application_status,
        application.id,
        description="producer-application-received",
    )
    return application


def list_applications(status: str | None = None) -> List[ProducerApplication]:
    query = ProducerApplication.query.order_by(ProducerApplication.created_at.desc())
    if status:
        if status not in APPLICATION_STATUSES:
            raise ApplicationError("invalid_status", {"allowed": list(APPLICATION_STATUSES)})
        query = query.filter(ProducerApplication.status == status)
    return query.all()


def get_application_or_404(application_id: int) -> ProducerApplication:
    application = db.session.get(ProducerApplication, application_id)
    if application is None:
        raise ApplicationError("application_not_found", status=HTTPStatus.NOT_FOUND)
    return application


def ensure_producer_profile(
    user: User,
    application: ProducerApplication | None = None,
    *,
    discord_user_id: str | None = None,
) -> Producer:
    """Create the producer row for ``user`` if missing and grant the producer role."""

    if discord_user_id:
        holder = Producer.query.filter_by(discord_user_id=discord_user_id).first()
        if holder is not None and holder.user_id != user.id:
            raise ApplicationError("discord_user_id_taken", status=HTTPStatus.CONFLICT)

    producer = user.producer
    if producer is None:
        name = application.name if application else (user.display_name or user.email.split("@")[0])
        producer = Producer(user=user, slug=unique_slug(name), name=name, email=user.email)
        if application is not None:
            producer.email = application.email
            producer.bio = application.bio
            producer.genre = ", ".join(application.genres or [])
            producer.country = application.country
            producer.image = application.image
            producer.spotify_url = application.spotify_url
            producer.apple_music_url = application.apple_music_url
            producer.instagram_url = application.instagram_url
            producer.youtube_url = application.youtube_url
        db.session.add(producer)
    if discord_user_id:
        producer.discord_user_id = discord_user_id
    user.role = "producer"
    return producer


def decide_application(
    application: ProducerApplication,
    operator: User,
    *,
    approve: bool,
    notes: str | None = None,
    discord_user_id: str | None = None,
) -> ProducerApplication:
    if application.status != "pending":
        raise ApplicationError(
            "application_closed", {"status": application.status}, status=HTTPStatus.CONFLICT
        )

    if approve:
        producer = ensure_producer_profile(
            application.user, application, discord_user_id=discord_user_id
        )
        db.session.flush()
        application.producer_id = producer.id
        application.status = "approved"
    else:
        application.status = "rejected"
    application.admin_notes = notes
    application.reviewed_by_id = operator.id
    application.reviewed_at = utcnow()
    db.session.commit()

    record_application_event(application.status)
    current_app.logger.info(
        "Producer application %s by %s",
        application.status,
        operator.email,
        extra={"application_id": application.id},
    )
    background.dispatch(
        notification_service.send_application_status,
        application.id,
        description=f"producer-application-{application.status}",
    )
    return application


def grant_role(user_id: int, role: str, operator: User) -> User:
    if role not in ROLES:
        raise ApplicationError("invalid_role", {"allowed": list(ROLES)})
    user = db.session.get(User, user_id)
    if user is None:
        raise ApplicationError("user_not_found", status=HTTPStatus.NOT_FOUND)
    if user.id == operator.id and role != "admin":
        raise ApplicationError("cannot_demote_self", status=HTTPStatus.CONFLICT)

    if role == "producer":
        ensure_producer_profile(user)
    else:
        user.role = role
    db.session.commit()
    current_app.logger.info(
        "Role %s granted by %s",
        role,
        operator.email,
        extra={"user_id": user.id},
    )
    return user
