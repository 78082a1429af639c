"""Google Drive linking for producers and Drive-backed deliveries."""

from __future__ import annotations

import re
from datetime import timedelta
from http import HTTPStatus

from flask import current_app
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from ..extensions import db
from ..models import ProducerGoogleToken, SongRequest, SongRevision, User
from ..utils import coerce_aware, utcnow
from . import delivery_service, revision_service
from .drive_client import DriveError, TokenGrant, folder_link, get_drive_client
from .errors import StudioError

_UNSAFE_NAME = re.compile(r"[^A-Za-z0-9_-]+")


class DriveLinkError(StudioError):
    pass


def _serializer() -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(
        current_app.config["SECRET_KEY"],
        salt=current_app.config.get("DRIVE_STATE_SALT", "drive-oauth"),
    )


def authorization_url(user: User) -> str:
    state = _serializer().dumps({"user_id": user.id})
    return get_drive_client().authorization_url(state)


def _user_id_from_state(state: str) -> int:
    max_age = int(current_app.config.get("DRIVE_STATE_MAX_AGE", 900))
    try:
        data = _serializer().loads(state, max_age=max_age)
    except SignatureExpired as exc:
        raise DriveLinkError("state_expired") from exc
    except BadSignature as exc:
        raise DriveLinkError("invalid_state") from exc
    return int(data["user_id"])


def _store_grant(user_id: int, grant: TokenGrant) -> ProducerGoogleToken:
    token = ProducerGoogleToken.query.filter_by(user_id=user_id).first()
    if token is None:
        token = ProducerGoogleToken(user_id=user_id)
        db.session.add(token)
    token.access_token = grant.access_token
    token.token_expires_at = grant.expires_at
    # Google omits the refresh token on re-consent; keep the one we have.
    if grant.refresh_token:
        token.refresh_token = grant.refresh_token
    return token


def complete_authorization(code: str, state: str) -> ProducerGoogleToken:
    user_id = _user_id_from_state(state)
    if db.session.get(User, user_id) is None:
        raise DriveLinkError("invalid_state")
    grant = get_drive_client().exchange_code(code)
    token = _store_grant(user_id, grant)
    db.session.commit()
    current_app.logger.info("Google Drive linked for user %s", user_id)
    return token


def connection_status(user: User) -> dict:
    token = ProducerGoogleToken.query.filter_by(user_id=user.id).first()
    return {
        "connected": token is not None,
        "expires_at": token.token_expires_at.isoformat() if token else None,
    }


def get_valid_access_token(user_id: int) -> str:
    """Return an access token, refreshing it when it is about to expire."""

    token = ProducerGoogleToken.query.filter_by(user_id=user_id).first()
    if token is None:
        raise DriveError("drive_not_connected")
    margin = timedelta(
        seconds=int(current_app.config.get("GOOGLE_TOKEN_REFRESH_MARGIN_SECONDS", 300))
    )
    if coerce_aware(token.token_expires_at) - margin > utcnow():
        return token.access_token
    if not token.refresh_token:
        raise DriveError("drive_not_connected", "Stored token cannot be refreshed")
    grant = get_drive_client().refresh(token.refresh_token)
    _store_grant(user_id, grant)
    db.session.commit()
    return grant.access_token


def _folder_name(order: SongRequest, revision: SongRevision | None) -> str:
    customer = (order.user_email or "customer").split("@")[0]
    name = f"HEA_Delivery_{order.id}_{customer}"
    if revision is not None:
        name = f"{name}_rev{revision.revision_number}"
    return _UNSAFE_NAME.sub("_", name)


def _revision_for(order: SongRequest, revision_id: int | None) -> SongRevision | None:
    if revision_id is None:
        return None
    revision = db.session.get(SongRevision, revision_id)
    if revision is None or revision.song_request_id != order.id:
        raise DriveLinkError("revision_not_found", status=HTTPStatus.NOT_FOUND)
    return revision


def open_upload_session(
    order: SongRequest,
    user: User,
    *,
    file_name: str,
    mime_type: str,
    revision_id: int | None = None,
) -> dict:
    """Create a shared folder for the delivery and a resumable upload into it."""

    revision_service.require_assignee(order, user)
    revision = _revision_for(order, revision_id)
    access_token = get_valid_access_token(user.id)
    client = get_drive_client()
    folder_id = client.create_folder(access_token, _folder_name(order, revision))
    client.share_folder(access_token, folder_id)
    upload_url = client.start_resumable_upload(
        access_token,
        file_name=file_name,
        mime_type=mime_type,
        folder_id=folder_id,
    )
    current_app.logger.info(
        "Drive upload session opened", extra={"order_id": order.id}
    )
    return {
        "upload_url": upload_url,
        "folder_id": folder_id,
        "folder_link": folder_link(folder_id),
    }


def finalize_delivery(
    order: SongRequest,
    user: User,
    *,
    folder_id: str,
    revision_id: int | None = None,
    meeting_link: str | None = None,
    custom_message: str | None = None,
) -> dict:
    link = folder_link(folder_id)
    revision = _revision_for(order, revision_id)
    if revision is not None:
        revision_service.deliver_revision(
            revision,
            user,
            drive_link=link,
            meeting_link=meeting_link,
            drive_folder_id=folder_id,
        )
        return {"success": True, "revision_id": revision.id, "drive_link": link}
    delivery_service.deliver_order(
        order, user, download_url=link, custom_message=custom_message
    )
    return {"success": True, "request_id": order.id, "drive_link": link}
