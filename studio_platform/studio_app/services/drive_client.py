"""Google OAuth + Drive v3 client used for deliverable uploads."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict
from urllib.parse import urlencode

import requests
from flask import current_app

AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
TOKEN_URL = "https://oauth2.googleapis.com/token"
FILES_URL = "https://www.googleapis.com/drive/v3/files"
UPLOAD_URL = "https://www.googleapis.com/upload/drive/v3/files"
DRIVE_SCOPE = "https://www.googleapis.com/auth/drive.file"
FOLDER_MIME_TYPE = "application/vnd.google-apps.folder"


class DriveError(RuntimeError):
    """Raised for Drive / OAuth failures; ``code`` is returned to API callers."""

    def __init__(self, code: str, message: str | None = None):
        super().__init__(message or code)
        self.code = code


@dataclass
class TokenGrant:
    access_token: str
    expires_at: datetime
    refresh_token: str | None = None


def folder_link(folder_id: str) -> str:
    return f"https://drive.google.com/drive/folders/{folder_id}"


@dataclass
class DriveClient:
    client_id: str
    client_secret: str
    redirect_uri: str
    timeout: int = 20

    def authorization_url(self, state: str) -> str:
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "scope": DRIVE_SCOPE,
            "access_type": "offline",
            "prompt": "consent",
            "state": state,
        }
        return f"{AUTH_URL}?{urlencode(params)}"

    def exchange_code(self, code: str) -> TokenGrant:
        data = self._token_request(
            {
                "code": code,
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "redirect_uri": self.redirect_uri,
                "grant_type": "authorization_code",
            }
        )
        return self._grant(data)

    def refresh(self, refresh_token: str) -> TokenGrant:
        data = self._token_request(
            {
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "refresh_token": refresh_token,
                "grant_type": "refresh_token",
            }
        )
        return self._grant(data)

    def create_folder(self, access_token: str, name: str) -> str:
        try:
            response = requests.post(
                FILES_URL,
                json={"name": name, "mimeType": FOLDER_MIME_TYPE},
                headers=self._auth(access_token),
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.RequestException as exc:
            raise DriveError("drive_folder_failed", str(exc)) from exc
        return response.json()["id"]

    def share_folder(self, access_token: str, folder_id: str) -> bool:
        """Make the folder readable by anyone with the link. Best effort."""

        try:
            response = requests.post(
                f"{FILES_URL}/{folder_id}/permissions",
                json={"role": "reader", "type": "anyone"},
                headers=self._auth(access_token),
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.RequestException as exc:
            current_app.logger.warning("Failed to share Drive folder %s: %s", folder_id, exc)
            return False
        return True

    def start_resumable_upload(
        self,
        access_token: str,
        *,
        file_name: str,
        mime_type: str,
        folder_id: str,
    ) -> str:
        """Open a resumable upload session and return its session URI."""

        headers = self._auth(access_token)
        headers["X-Upload-Content-Type"] = mime_type
        try:
            response = requests.post(
                UPLOAD_URL,
                params={"uploadType": "resumable", "fields": "id,webViewLink"},
                json={"name": file_name, "parents": [folder_id]},
                headers=headers,
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.RequestException as exc:
            raise DriveError("drive_upload_session_failed", str(exc)) from exc
        location = response.headers.get("Location")
        if not location:
            raise DriveError("drive_upload_session_failed", "Missing upload session location")
        return location

    def _token_request(self, form: Dict[str, str]) -> Dict[str, Any]:
        try:
            response = requests.post(TOKEN_URL, data=form, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise DriveError("drive_token_failed", str(exc)) from exc
        return response.json()

    @staticmethod
    def _grant(data: Dict[str, Any]) -> TokenGrant:
        expires_in = int(data.get("expires_in", 3600))
        return TokenGrant(
            access_token=data["access_token"],
            refresh_token=data.get("refresh_token"),
            expires_at=datetime.now(timezone.utc) + timedelta(seconds=expires_in),
        )

    @staticmethod
    def _auth(access_token: str) -> Dict[str, str]:
        return {"Authorization": f"Bearer {access_token}"}


def get_drive_client() -> DriveClient:
    app = current_app
    client = app.extensions.get("drive_client")
    if client is None:
        client = DriveClient(
            client_id=app.config.get("GOOGLE_CLIENT_ID", ""),
            client_secret=app.config.get("GOOGLE_CLIENT_SECRET", ""),
            redirect_uri=app.config.get("GOOGLE_REDIRECT_URI", ""),
            timeout=app.config.get("HTTP_TIMEOUT_SECONDS", 20),
        )
        app.extensions["drive_client"] = client
    return client
