"""Producer self-service: applications, profile, Stripe Connect onboarding, Google Drive linking."""

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, abort, jsonify, request
from flask_jwt_extended import current_user, jwt_required

from ..extensions import db
from ..models import Producer, ProducerApplication
from ..schemas import (
    DriveCallbackSchema,
    ProducerApplicationCreateSchema,
    ProducerApplicationSchema,
    ProducerSchema,
    ProducerUpdateSchema,
)
from ..services import drive_service, payout_service, producer_service
from .common import forbidden, register_error_handlers, require_producer

producer_bp = Blueprint("producer_bp", __name__)
register_error_handlers(producer_bp)

producer_schema = ProducerSchema()
producer_update_schema = ProducerUpdateSchema()
drive_callback_schema = DriveCallbackSchema()
application_create_schema = ProducerApplicationCreateSchema()
application_schema = ProducerApplicationSchema()


def _current_producer() -> Producer:
    producer = current_user.producer
    if producer is None:
        abort(404)
    return producer


@producer_bp.get("/me")
@jwt_required()
def get_profile():
    if not require_producer():
        return forbidden()
    return jsonify({"producer": producer_schema.dump(_current_producer())})


@producer_bp.patch("/me")
@jwt_required()
def update_profile():
    if not require_producer():
        return forbidden()
    payload = producer_update_schema.load(request.get_json() or {})
    producer = _current_producer()
    for key, value in payload.items():
        setattr(producer, key, value)
    db.session.commit()
    return jsonify({"producer": producer_schema.dump(producer)})


@producer_bp.post("/me/connect/onboard")
@jwt_required()
def connect_onboard():
    if not require_producer():
        return forbidden()
    return jsonify(payout_service.start_connect_onboarding(_current_producer()))


@producer_bp.get("/me/connect/status")
@jwt_required()
def connect_status():
    if not require_producer():
        return forbidden()
    return jsonify(payout_service.connect_status(_current_producer()))


@producer_bp.get("/me/drive/authorize")
@jwt_required()
def drive_authorize():
    if not require_producer():
        return forbidden()
    return jsonify({"url": drive_service.authorization_url(current_user)})


@producer_bp.get("/me/drive/status")
@jwt_required()
def drive_status():
    if not require_producer():
        return forbidden()
    return jsonify(drive_service.connection_status(current_user))


@producer_bp.post("/drive/callback")
def drive_callback():
    payload = drive_callback_schema.load(request.get_json() or {})
    drive_service.complete_authorization(payload["code"], payload["state"])
    return jsonify({"success": True, "connected": True})


@producer_bp.post("/applications")
@jwt_required()
def submit_application():
    payload = application_create_schema.load(request.get_json() or {})
    application = producer_service.submit_application(current_user, payload)
    return jsonify({"application": application_schema.dump(application)}), HTTPStatus.CREATED


@producer_bp.get("/applications/me")
@jwt_required()
def my_applications():
    applications = (
        ProducerApplication.query.filter_by(user_id=current_user.id)
        .order_by(ProducerApplication.created_at.desc())
        .all()
    )
    return jsonify({"items": application_schema.dump(applications, many=True)})
