"""Discord webhook / interaction client."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List

import requests
from flask import current_app


class DiscordError(RuntimeError):
    """Raised when a Discord API call fails."""


@dataclass
class DiscordClient:
    webhook_url: str
    application_id: str
    api_base: str = "https://discord.com/api/v10"
    timeout: int = 20
    enabled: bool = True

    def post_message(
        self,
        content: str,
        *,
        embeds: List[Dict[str, Any]] | None = None,
        components: List[Dict[str, Any]] | None = None,
        thread_name: str | None = None,
    ) -> bool:
        """Post to the configured channel webhook. Returns False when disabled."""

        if not self.enabled or not self.webhook_url:
            current_app.logger.info("Discord disabled; skipping webhook post")
            return False
        payload: Dict[str, Any] = {"content": content, "embeds": embeds or []}
        if components:
            payload["components"] = components
        if thread_name:
            payload["thread_name"] = thread_name
        self._send("POST", self.webhook_url, payload)
        return True

    def edit_original_response(
        self,
        interaction_token: str,
        *,
        content: str,
        embeds: List[Dict[str, Any]] | None = None,
        components: List[Dict[str, Any]] | None = None,
    ) -> None:
        """PATCH the message an interaction was attached to."""

        url = f"{self.api_base}/webhooks/{self.application_id}/{interaction_token}/messages/@original"
        payload = {
            "content": content,
            "embeds": embeds or [],
            "components": components or [],
        }
        self._send("PATCH", url, payload)

    def _send(self, method: str, url: str, payload: Dict[str, Any]) -> None:
        try:
            response = requests.request(method, url, json=payload, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise DiscordError(f"Discord {method} failed: {exc}") from exc


def get_discord_client() -> DiscordClient:
    app = current_app
    client = app.extensions.get("discord_client")
    if client is None:
        client = DiscordClient(
            webhook_url=app.config.get("DISCORD_WEBHOOK_URL", ""),
            application_id=app.config.get("DISCORD_APPLICATION_ID", ""),
            api_base=app.config.get("DISCORD_API_BASE", "https://discord.com/api/v10"),
            timeout=app.config.get("HTTP_TIMEOUT_SECONDS", 20),
            enabled=app.config.get("DISCORD_ENABLED", True),
        )
        app.extensions["discord_client"] = client
    return client
