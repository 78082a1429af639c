"""Discord interactions endpoint: signed accept / decline button callbacks."""

from __future__ import annotations

import json
from http import HTTPStatus

from flask import Blueprint, current_app, jsonify, request

from ..extensions import limiter
from ..services import assignment_service, background, notification_service
from ..utils import verify_discord_signature

discord_bp = Blueprint("discord_bp", __name__)

PING = 1
MESSAGE_COMPONENT = 3
CHANNEL_MESSAGE = 4
DEFERRED_UPDATE_MESSAGE = 6
UPDATE_MESSAGE = 7

DECISION_MESSAGES = {
    "not_registered": "❌ You are not registered as a producer. Please contact an admin.",
    "not_found": "❌ This request no longer exists.",
    "blocked": "❌ You were removed from this project and cannot accept it again.",
    "already_accepted": "⚠️ This project has already been accepted by another producer.",
    "not_available": "⚠️ This project is no longer available.",
}


def _ephemeral(content: str):
    return jsonify(
        {
            "type": CHANNEL_MESSAGE,
            "data": {"content": content, "flags": notification_service.EPHEMERAL_FLAG},
        }
    )


def _clicking_user_id(interaction: dict) -> str | None:
    member = interaction.get("member") or {}
    user = member.get("user") or interaction.get("user") or {}
    return user.get("id")


def _parse_custom_id(custom_id: str) -> tuple[str | None, int | None]:
    action, _, raw_id = (custom_id or "").partition("_")
    if action not in {"accept", "decline"}:
        return None, None
    try:
        return action, int(raw_id)
    except ValueError:
        return None, None


@discord_bp.post("/interactions")
@limiter.exempt
def interactions():
    body = request.get_data()
    if not verify_discord_signature(
        current_app.config.get("DISCORD_PUBLIC_KEY", ""),
        request.headers.get("X-Signature-Ed25519"),
        request.headers.get("X-Signature-Timestamp"),
        body,
    ):
        return jsonify({"message": "invalid request signature"}), HTTPStatus.UNAUTHORIZED

    try:
        interaction = json.loads(body or b"{}")
    except ValueError:
        return jsonify({"message": "invalid_payload"}), HTTPStatus.BAD_REQUEST

    if interaction.get("type") == PING:
        return jsonify({"type": PING})
    if interaction.get("type") != MESSAGE_COMPONENT:
        return _ephemeral("Unknown interaction")

    action, order_id = _parse_custom_id((interaction.get("data") or {}).get("custom_id"))
    if action is None:
        return _ephemeral("Unknown action")

    user_id = _clicking_user_id(interaction)
    embeds = (interaction.get("message") or {}).get("embeds") or []

    if action == "accept":
        decision = assignment_service.accept_request(order_id, user_id)
        if not decision.ok:
            return _ephemeral(DECISION_MESSAGES.get(decision.outcome, "Unknown action"))
        return jsonify(
            {
                "type": UPDATE_MESSAGE,
                "data": {
                    "content": f"✅ **Project Accepted!** by <@{user_id}>",
                    "embeds": embeds,
                    "components": [],
                },
            }
        )

    decision = assignment_service.decline_request(order_id, user_id)
    if not decision.ok:
        return _ephemeral(DECISION_MESSAGES.get(decision.outcome, "Unknown action"))
    background.dispatch(
        notification_service.edit_interaction_message,
        interaction.get("token"),
        f"⏸️ **Project Declined** by <@{user_id}> — awaiting new producer assignment",
        embeds,
        description="discord-decline-edit",
    )
    return jsonify({"type": DEFERRED_UPDATE_MESSAGE})
