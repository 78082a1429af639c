"""Checkout endpoints: create a hosted session and verify its payment."""

from __future__ import annotations

from flask import Blueprint, jsonify, request
from flask_jwt_extended import current_user, jwt_required

from ..schemas import CheckoutCreateSchema, PaymentVerifySchema
from ..services import checkout_service, payment_service
from .common import register_error_handlers

checkout_bp = Blueprint("checkout_bp", __name__)
register_error_handlers(checkout_bp)

checkout_create_schema = CheckoutCreateSchema()
payment_verify_schema = PaymentVerifySchema()


@checkout_bp.post("/song")
@jwt_required()
def create_song_checkout():
    payload = checkout_create_schema.load(request.get_json() or {})
    result = checkout_service.create_song_checkout(current_user, payload)
    return jsonify(result)


@checkout_bp.post("/verify")
@jwt_required()
def verify_payment():
    payload = payment_verify_schema.load(request.get_json() or {})
    return jsonify(payment_service.verify_song_payment(payload["session_id"]))
