"""Schemas for account payloads."""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, fields, validate


class RegisterSchema(Schema):
    email = fields.Email(required=True)
    password = fields.String(required=True, validate=validate.Length(min=8))
    display_name = fields.String(validate=validate.Length(min=1, max=120))

    class Meta:
        unknown = EXCLUDE


class LoginSchema(Schema):
    email = fields.Email(required=True)
    password = fields.String(required=True)


class UserSchema(Schema):
    id = fields.Integer(dump_only=True)
    email = fields.Email(dump_only=True)
    display_name = fields.String(dump_only=True, allow_none=True)
    role = fields.String(dump_only=True)
    is_active = fields.Boolean(dump_only=True)
    created_at = fields.DateTime(dump_only=True)


class RoleGrantSchema(Schema):
    role = fields.String(required=True, validate=validate.OneOf(("customer", "producer", "admin")))
