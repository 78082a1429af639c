"""Song request endpoints for customers and assigned producers."""

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, jsonify, request
from flask_jwt_extended import current_user, jwt_required

from ..schemas import (
    CancellationRequestSchema,
    ChecklistSchema,
    DeliverySchema,
    DriveFinalizeSchema,
    SongRequestSchema,
    StatusUpdateSchema,
    UploadSessionSchema,
)
from ..services import cancellation_service, delivery_service, drive_service, revision_service
from .common import forbidden, register_error_handlers

requests_bp = Blueprint("requests_bp", __name__)
register_error_handlers(requests_bp)

song_request_schema = SongRequestSchema()
song_requests_schema = SongRequestSchema(many=True)
status_update_schema = StatusUpdateSchema()
checklist_schema = ChecklistSchema()
delivery_schema = DeliverySchema()
cancellation_request_schema = CancellationRequestSchema()
upload_session_schema = UploadSessionSchema()
drive_finalize_schema = DriveFinalizeSchema()


@requests_bp.get("")
@jwt_required()
def list_requests():
    orders = revision_service.list_orders_for(current_user)
    return jsonify({"items": song_requests_schema.dump(orders)})


@requests_bp.get("/<int:order_id>")
@jwt_required()
def get_request(order_id: int):
    order = revision_service.get_order_or_404(order_id)
    if not revision_service.can_view(order, current_user):
        return forbidden()
    return jsonify({"request": song_request_schema.dump(order)})


@requests_bp.post("/<int:order_id>/start")
@jwt_required()
def start_working(order_id: int):
    order = revision_service.get_order_or_404(order_id)
    order = revision_service.start_working(order, current_user)
    return jsonify({"request": song_request_schema.dump(order)})


@requests_bp.patch("/<int:order_id>/checklist")
@jwt_required()
def update_checklist(order_id: int):
    payload = checklist_schema.load(request.get_json() or {})
    order = revision_service.get_order_or_404(order_id)
    order = revision_service.update_checklist(order, current_user, payload["checklist"])
    return jsonify({"producer_checklist": order.producer_checklist})


@requests_bp.post("/<int:order_id>/status")
@jwt_required()
def update_status(order_id: int):
    payload = status_update_schema.load(request.get_json() or {})
    order = revision_service.get_order_or_404(order_id)
    order = revision_service.set_status(order, current_user, payload["status"])
    return jsonify({"request": song_request_schema.dump(order)})


@requests_bp.post("/<int:order_id>/deliver")
@jwt_required()
def deliver(order_id: int):
    payload = delivery_schema.load(request.get_json() or {})
    order = revision_service.get_order_or_404(order_id)
    purchase = delivery_service.deliver_order(
        order,
        current_user,
        download_url=payload["download_url"],
        custom_message=payload.get("custom_message"),
    )
    return jsonify(
        {
            "success": True,
            "request_id": order.id,
            "purchase_id": purchase.id,
            "status": "completed",
        }
    )


@requests_bp.post("/<int:order_id>/resend-files")
@jwt_required()
def resend_files(order_id: int):
    order = revision_service.get_order_or_404(order_id)
    delivery_service.resend_files(order, current_user)
    return jsonify({"success": True}), HTTPStatus.ACCEPTED


@requests_bp.post("/<int:order_id>/cancellation")
@jwt_required()
def request_cancellation(order_id: int):
    payload = cancellation_request_schema.load(request.get_json() or {})
    order = revision_service.get_order_or_404(order_id)
    order = cancellation_service.request_cancellation(order, current_user, payload["reason"])
    return jsonify({"success": True, "request_id": order.id, "status": order.status})


@requests_bp.post("/<int:order_id>/drive/upload-session")
@jwt_required()
def drive_upload_session(order_id: int):
    payload = upload_session_schema.load(request.get_json() or {})
    order = revision_service.get_order_or_404(order_id)
    result = drive_service.open_upload_session(
        order,
        current_user,
        file_name=payload["file_name"],
        mime_type=payload["mime_type"],
        revision_id=payload.get("revision_id"),
    )
    return jsonify(result), HTTPStatus.CREATED


@requests_bp.post("/<int:order_id>/drive/finalize")
@jwt_required()
def drive_finalize(order_id: int):
    payload = drive_finalize_schema.load(request.get_json() or {})
    order = revision_service.get_order_or_404(order_id)
    result = drive_service.finalize_delivery(
        order,
        current_user,
        folder_id=payload["folder_id"],
        revision_id=payload.get("revision_id"),
        meeting_link=payload.get("meeting_link"),
        custom_message=payload.get("custom_message"),
    )
    return jsonify(result)
