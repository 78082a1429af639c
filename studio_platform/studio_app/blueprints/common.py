"""Helpers shared by the API blueprints: role checks and error handlers."""

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, current_app, jsonify
from flask_jwt_extended import current_user
from marshmallow import ValidationError

from ..services.drive_client import DriveError
from ..services.errors import StudioError
from ..services.payment_client import PaymentProviderError


def require_admin() -> bool:
    return current_user is not None and current_user.role == "admin"


def require_producer() -> bool:
    return current_user is not None and current_user.role == "producer"


def forbidden():
    return jsonify({"message": "Forbidden"}), HTTPStatus.FORBIDDEN


def register_error_handlers(blueprint: Blueprint) -> None:
    @blueprint.errorhandler(ValidationError)
    def handle_validation_error(err: ValidationError):
        return (
            jsonify({"message": "invalid_payload", "errors": err.messages}),
            HTTPStatus.BAD_REQUEST,
        )

    @blueprint.errorhandler(StudioError)
    def handle_domain_error(err: StudioError):
        return jsonify(err.to_dict()), err.status

    @blueprint.errorhandler(PaymentProviderError)
    def handle_payment_provider_error(err: PaymentProviderError):
        current_app.logger.error("Payment provider error: %s", err)
        return jsonify({"message": "payment_provider_error", "error": str(err)}), HTTPStatus.BAD_GATEWAY

    @blueprint.errorhandler(DriveError)
    def handle_drive_error(err: DriveError):
        status = HTTPStatus.CONFLICT if err.code == "drive_not_connected" else HTTPStatus.BAD_GATEWAY
        return jsonify({"message": err.code, "error": str(err)}), status
