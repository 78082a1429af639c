"""Revision request / delivery / feedback endpoints and the revision chat."""

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, jsonify, request
from flask_jwt_extended import current_user, jwt_required

from ..schemas import (
    MessageCreateSchema,
    RevisionDeliverSchema,
    RevisionFeedbackSchema,
    RevisionMessageSchema,
    RevisionRequestSchema,
    RevisionSchema,
)
from ..services import revision_service
from .common import register_error_handlers

revisions_bp = Blueprint("revisions_bp", __name__)
register_error_handlers(revisions_bp)

revision_schema = RevisionSchema()
revision_request_schema = RevisionRequestSchema()
revision_deliver_schema = RevisionDeliverSchema()
revision_feedback_schema = RevisionFeedbackSchema()
message_create_schema = MessageCreateSchema()
message_schema = RevisionMessageSchema()
messages_schema = RevisionMessageSchema(many=True)


@revisions_bp.post("/<int:revision_id>/request")
@jwt_required()
def request_revision(revision_id: int):
    payload = revision_request_schema.load(request.get_json() or {})
    revision = revision_service.get_revision_or_404(revision_id)
    revision = revision_service.request_revision(
        revision,
        current_user,
        client_notes=payload["client_notes"],
        wants_meeting=payload["wants_meeting"],
    )
    return jsonify({"revision": revision_schema.dump(revision)})


@revisions_bp.post("/<int:revision_id>/deliver")
@jwt_required()
def deliver_revision(revision_id: int):
    payload = revision_deliver_schema.load(request.get_json() or {})
    revision = revision_service.get_revision_or_404(revision_id)
    revision = revision_service.deliver_revision(
        revision,
        current_user,
        drive_link=payload["drive_link"],
        meeting_link=payload.get("meeting_link"),
    )
    return jsonify({"revision": revision_schema.dump(revision)})


@revisions_bp.post("/<int:revision_id>/feedback")
@jwt_required()
def submit_feedback(revision_id: int):
    payload = revision_feedback_schema.load(request.get_json() or {})
    revision = revision_service.get_revision_or_404(revision_id)
    revision = revision_service.submit_feedback(
        revision, current_user, feedback=payload["feedback"]
    )
    return jsonify({"revision": revision_schema.dump(revision)})


@revisions_bp.get("/<int:revision_id>/messages")
@jwt_required()
def list_messages(revision_id: int):
    revision = revision_service.get_revision_or_404(revision_id)
    messages = revision_service.list_messages(revision, current_user)
    return jsonify({"items": messages_schema.dump(messages)})


@revisions_bp.post("/<int:revision_id>/messages")
@jwt_required()
def post_message(revision_id: int):
    payload = message_create_schema.load(request.get_json() or {})
    revision = revision_service.get_revision_or_404(revision_id)
    message = revision_service.post_message(revision, current_user, payload["message"])
    return jsonify({"message": message_schema.dump(message)}), HTTPStatus.CREATED
