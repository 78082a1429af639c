"""Google Drive linking and Drive-backed deliveries."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from urllib.parse import parse_qs, urlparse

import pytest

from studio_app.extensions import db
from studio_app.models import ProducerGoogleToken, SongRequest, SongRevision
from studio_app.services import drive_service

from conftest import auth, login


def _state_from(url: str) -> str:
    return parse_qs(urlparse(url).query)["state"][0]


def _link_drive(client, token: str) -> None:
    url = client.get("/api/producers/me/drive/authorize", headers=auth(token)).get_json()["url"]
    resp = client.post("/api/producers/drive/callback", json={"code": "abc", "state": _state_from(url)})
    assert resp.status_code == 200, resp.get_json()


@pytest.fixture()
def linked_producer(client, producer_token, producers):
    _link_drive(client, producer_token)
    return producers["beatsmith"]


def test_authorize_and_callback_store_token(client, producer_token, producers):
    status = client.get("/api/producers/me/drive/status", headers=auth(producer_token)).get_json()
    assert status == {"connected": False, "expires_at": None}

    _link_drive(client, producer_token)

    token = ProducerGoogleToken.query.filter_by(user_id=producers["beatsmith"].user_id).one()
    assert token.access_token == "access-abc"
    assert token.refresh_token == "refresh-token"
    status = client.get("/api/producers/me/drive/status", headers=auth(producer_token)).get_json()
    assert status["connected"] is True


def test_relinking_keeps_refresh_token(app_with_db, client, producer_token, producers):
    _link_drive(client, producer_token)
    drive_service._store_grant(
        producers["beatsmith"].user_id,
        drive_service.TokenGrant(
            access_token="second",
            expires_at=datetime.now(timezone.utc) + timedelta(hours=1),
        ),
    )
    db.session.commit()
    token = ProducerGoogleToken.query.filter_by(user_id=producers["beatsmith"].user_id).one()
    assert token.access_token == "second"
    assert token.refresh_token == "refresh-token"


def test_callback_rejects_tampered_state(client, producer_token):
    resp = client.post("/api/producers/drive/callback", json={"code": "abc", "state": "forged.state"})
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "invalid_state"
    assert ProducerGoogleToken.query.count() == 0


def test_callback_rejects_expired_state(app_with_db, client, producer_token):
    url = client.get("/api/producers/me/drive/authorize", headers=auth(producer_token)).get_json()["url"]
    app_with_db.config["DRIVE_STATE_MAX_AGE"] = -1
    resp = client.post("/api/producers/drive/callback", json={"code": "abc", "state": _state_from(url)})
    assert resp.get_json()["message"] == "state_expired"


def test_customer_cannot_start_drive_linking(client, customer_token):
    assert client.get("/api/producers/me/drive/authorize", headers=auth(customer_token)).status_code == 403


def test_access_token_refreshes_near_expiry(app_with_db, linked_producer, drive):
    token = ProducerGoogleToken.query.filter_by(user_id=linked_producer.user_id).one()
    assert drive_service.get_valid_access_token(linked_producer.user_id) == "access-abc"
    assert drive.refreshes == 0

    token.token_expires_at = datetime.now(timezone.utc) + timedelta(seconds=60)
    db.session.commit()

    assert drive_service.get_valid_access_token(linked_producer.user_id) == "refreshed-1"
    stored = ProducerGoogleToken.query.filter_by(user_id=linked_producer.user_id).one()
    assert stored.access_token == "refreshed-1"
    assert stored.refresh_token == "refresh-token"


def test_upload_session_requires_linked_drive(client, producer_token, make_order, producers):
    order = make_order("in_progress", producer=producers["beatsmith"])
    resp = client.post(
        f"/api/requests/{order.id}/drive/upload-session",
        json={"file_name": "final.wav"},
        headers=auth(producer_token),
    )
    assert resp.status_code == 409
    assert resp.get_json()["message"] == "drive_not_connected"


def test_upload_session_creates_shared_folder(client, producer_token, linked_producer, make_order, drive):
    order = make_order("in_progress", producer=linked_producer)

    resp = client.post(
        f"/api/requests/{order.id}/drive/upload-session",
        json={"file_name": "final.wav", "mime_type": "audio/wav"},
        headers=auth(producer_token),
    )

    assert resp.status_code == 201
    body = resp.get_json()
    assert body == {
        "upload_url": "https://upload.test/folder-1/session",
        "folder_id": "folder-1",
        "folder_link": "https://drive.google.com/drive/folders/folder-1",
    }
    assert drive.folders == [f"HEA_Delivery_{order.id}_customer"]
    assert drive.shared == ["folder-1"]
    assert drive.uploads[0]["mime_type"] == "audio/wav"


def test_upload_session_for_other_producers_order(client, linked_producer, make_order, producers):
    order = make_order("in_progress", producer=producers["soulkeys"])
    token = login(client, "beatsmith@example.com")
    resp = client.post(
        f"/api/requests/{order.id}/drive/upload-session",
        json={"file_name": "final.wav"},
        headers=auth(token),
    )
    assert resp.status_code == 403


def test_finalize_delivers_order(client, producer_token, linked_producer, make_order):
    order = make_order("review", producer=linked_producer)
    resp = client.post(
        f"/api/requests/{order.id}/drive/finalize",
        json={"folder_id": "folder-9", "custom_message": "Thanks!"},
        headers=auth(producer_token),
    )
    assert resp.status_code == 200
    assert resp.get_json()["drive_link"] == "https://drive.google.com/drive/folders/folder-9"
    assert db.session.get(SongRequest, order.id).status == "completed"


def test_finalize_delivers_revision(client, producer_token, linked_producer, make_order, drive):
    order = make_order("accepted", producer=linked_producer, revisions=1)
    client.post(f"/api/requests/{order.id}/start", headers=auth(producer_token))
    revision = SongRevision.query.filter_by(song_request_id=order.id).one()

    session = client.post(
        f"/api/requests/{order.id}/drive/upload-session",
        json={"file_name": "rev1.wav", "revision_id": revision.id},
        headers=auth(producer_token),
    )
    assert drive.folders[-1].endswith("_rev1")
    folder_id = session.get_json()["folder_id"]

    resp = client.post(
        f"/api/requests/{order.id}/drive/finalize",
        json={"folder_id": folder_id, "revision_id": revision.id},
        headers=auth(producer_token),
    )
    assert resp.status_code == 200
    stored = db.session.get(SongRevision, revision.id)
    assert stored.status == "delivered"
    assert stored.drive_folder_id == folder_id
    assert db.session.get(SongRequest, order.id).status == "in_progress"


def test_finalize_rejects_revision_of_another_order(client, producer_token, linked_producer, make_order):
    first = make_order("accepted", producer=linked_producer, revisions=1)
    second = make_order("in_progress", producer=linked_producer)
    client.post(f"/api/requests/{first.id}/start", headers=auth(producer_token))
    revision = SongRevision.query.filter_by(song_request_id=first.id).one()

    resp = client.post(
        f"/api/requests/{second.id}/drive/finalize",
        json={"folder_id": "folder-1", "revision_id": revision.id},
        headers=auth(producer_token),
    )
    assert resp.status_code == 404
