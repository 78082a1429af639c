"""Admin blueprint endpoints."""

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, jsonify, request
from flask_jwt_extended import current_user, jwt_required
from marshmallow import EXCLUDE, Schema, fields, validate

from ..extensions import db
from ..models import Producer, SongRequest, User
from ..schemas import (
    ApplicationDecisionSchema,
    CancellationDecisionSchema,
    ChangeProducerSchema,
    ProducerApplicationSchema,
    ProducerSchema,
    RoleGrantSchema,
    SongRequestSchema,
    UserSchema,
)
from ..services import (
    assignment_service,
    cancellation_service,
    catalog,
    payout_service,
    producer_service,
    revision_service,
)
from ..tasks.expiry_tasks import sweep_expired_requests
from ..utils import hash_password
from .common import forbidden, register_error_handlers, require_admin

admin_bp = Blueprint("admin_bp", __name__)
register_error_handlers(admin_bp)

song_requests_schema = SongRequestSchema(many=True)
producer_schema = ProducerSchema()
cancellation_decision_schema = CancellationDecisionSchema()
change_producer_schema = ChangeProducerSchema()
application_schema = ProducerApplicationSchema()
application_decision_schema = ApplicationDecisionSchema()
role_grant_schema = RoleGrantSchema()
user_schema = UserSchema()


class ProducerCreateSchema(Schema):
    email = fields.Email(required=True)
    password = fields.String(required=True, validate=validate.Length(min=8))
    name = fields.String(required=True, validate=validate.Length(min=1, max=120))
    genre = fields.String(allow_none=True, validate=validate.Length(max=255))
    country = fields.String(allow_none=True)
    discord_user_id = fields.String(allow_none=True, validate=validate.Length(max=64))

    class Meta:
        unknown = EXCLUDE


producer_create_schema = ProducerCreateSchema()


@admin_bp.get("/ping")
def ping():
    return jsonify({"module": "admin", "status": "ok"})


@admin_bp.get("/requests")
@jwt_required()
def list_requests_admin():
    if not require_admin():
        return forbidden()
    query = SongRequest.query.order_by(SongRequest.created_at.desc())
    status = request.args.get("status")
    if status:
        if status not in catalog.ORDER_STATUSES:
            return (
                jsonify({"message": "invalid_status", "allowed": list(catalog.ORDER_STATUSES)}),
                HTTPStatus.BAD_REQUEST,
            )
        query = query.filter(SongRequest.status == status)
    return jsonify({"items": song_requests_schema.dump(query.all())})


@admin_bp.post("/producers")
@jwt_required()
def create_producer():
    if not require_admin():
        return forbidden()
    payload = producer_create_schema.load(request.get_json() or {})
    email = payload["email"].lower()
    if User.query.filter_by(email=email).first():
        return jsonify({"message": "Email already registered"}), HTTPStatus.CONFLICT

    user = User(
        email=email,
        display_name=payload["name"],
        password_hash=hash_password(payload["password"]),
        role="producer",
    )
    producer = Producer(
        user=user,
        slug=producer_service.unique_slug(payload["name"]),
        name=payload["name"],
        email=email,
        genre=payload.get("genre"),
        country=payload.get("country"),
        discord_user_id=payload.get("discord_user_id"),
    )
    db.session.add_all([user, producer])
    db.session.commit()
    return jsonify({"producer": producer_schema.dump(producer)}), HTTPStatus.CREATED


@admin_bp.post("/sweep-expired")
@jwt_required()
def sweep_expired():
    if not require_admin():
        return forbidden()
    return jsonify(sweep_expired_requests())


@admin_bp.post("/requests/<int:order_id>/payout")
@jwt_required()
def process_payout(order_id: int):
    if current_user is None or current_user.role not in {"admin", "producer"}:
        return forbidden()
    return jsonify(payout_service.process_payout(order_id, current_user))


@admin_bp.post("/requests/<int:order_id>/cancellation")
@jwt_required()
def decide_cancellation(order_id: int):
    if not require_admin():
        return forbidden()
    payload = cancellation_decision_schema.load(request.get_json() or {})
    order = revision_service.get_order_or_404(order_id)
    result = cancellation_service.decide_cancellation(
        order,
        current_user,
        approve=payload["decision"] == "approve",
        refund_percent=payload.get("refund_percent"),
    )
    return jsonify(result)


@admin_bp.post("/requests/<int:order_id>/change-producer")
@jwt_required()
def change_producer(order_id: int):
    if not require_admin():
        return forbidden()
    payload = change_producer_schema.load(request.get_json() or {})
    return jsonify(
        assignment_service.change_producer(order_id, current_user, payload.get("reason"))
    )


@admin_bp.get("/producer-applications")
@jwt_required()
def list_producer_applications():
    if not require_admin():
        return forbidden()
    applications = producer_service.list_applications(request.args.get("status"))
    return jsonify({"items": application_schema.dump(applications, many=True)})


@admin_bp.post("/producer-applications/<int:application_id>/decision")
@jwt_required()
def decide_producer_application(application_id: int):
    if not require_admin():
        return forbidden()
    payload = application_decision_schema.load(request.get_json() or {})
    application = producer_service.get_application_or_404(application_id)
    application = producer_service.decide_application(
        application,
        current_user,
        approve=payload["decision"] == "approve",
        notes=payload.get("notes"),
        discord_user_id=payload.get("discord_user_id"),
    )
    response = {"application": application_schema.dump(application)}
    if application.producer is not None:
        response["producer"] = producer_schema.dump(application.producer)
    return jsonify(response)


@admin_bp.post("/users/<int:user_id>/role")
@jwt_required()
def assign_user_role(user_id: int):
    if not require_admin():
        return forbidden()
    payload = role_grant_schema.load(request.get_json() or {})
    user = producer_service.grant_role(user_id, payload["role"], current_user)
    return jsonify({"user": user_schema.dump(user)})
