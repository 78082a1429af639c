"""Authentication endpoints (register/login/me)."""

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, jsonify, request
from flask_jwt_extended import current_user, jwt_required

from ..extensions import db, limiter
from ..models import User
from ..schemas import LoginSchema, RegisterSchema, UserSchema
from ..utils import generate_access_token, hash_password, verify_password
from .common import register_error_handlers

auth_bp = Blueprint("auth_bp", __name__)
register_error_handlers(auth_bp)

register_schema = RegisterSchema()
login_schema = LoginSchema()
user_schema = UserSchema()


@auth_bp.get("/ping")
def ping():
    return jsonify({"module": "auth", "status": "ok"})


@auth_bp.post("/register")
@limiter.limit("20/hour")
def register():
    payload = register_schema.load(request.get_json() or {})
    email = payload["email"].lower()
    if User.query.filter_by(email=email).first():
        return (
            jsonify({"message": "Email already registered"}),
            HTTPStatus.CONFLICT,
        )

    user = User(
        email=email,
        display_name=payload.get("display_name"),
        password_hash=hash_password(payload["password"]),
        role="customer",
    )
    db.session.add(user)
    db.session.commit()

    return (
        jsonify(
            {
                "access_token": generate_access_token(user),
                "user": user_schema.dump(user),
            }
        ),
        HTTPStatus.CREATED,
    )


@auth_bp.post("/login")
@limiter.limit("30/minute")
def login():
    payload = login_schema.load(request.get_json() or {})
    user = User.query.filter_by(email=payload["email"].lower()).first()
    if not user or not verify_password(payload["password"], user.password_hash):
        return jsonify({"message": "Invalid credentials"}), HTTPStatus.UNAUTHORIZED
    if not user.is_active:
        return jsonify({"message": "Account disabled"}), HTTPStatus.FORBIDDEN
    return jsonify(
        {
            "access_token": generate_access_token(user),
            "user": user_schema.dump(user),
        }
    )


@auth_bp.get("/me")
@jwt_required()
def me():
    return jsonify({"user": user_schema.dump(current_user)})
