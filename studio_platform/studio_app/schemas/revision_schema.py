"""Schemas for revision requests, deliveries and chat."""

from __future__ import annotations

from marshmallow import Schema, fields, validate


class RevisionRequestSchema(Schema):
    client_notes = fields.String(required=True, validate=validate.Length(min=1, max=4000))
    wants_meeting = fields.Boolean(load_default=False)


class RevisionDeliverSchema(Schema):
    drive_link = fields.String(required=True, validate=validate.Length(min=1, max=1024))
    meeting_link = fields.String(allow_none=True, validate=validate.Length(max=1024))


class RevisionFeedbackSchema(Schema):
    feedback = fields.String(required=True, validate=validate.Length(min=1, max=4000))


class MessageCreateSchema(Schema):
    message = fields.String(required=True, validate=validate.Length(min=1, max=4000))


class RevisionMessageSchema(Schema):
    id = fields.Integer(dump_only=True)
    revision_id = fields.Integer(dump_only=True)
    sender_id = fields.Integer(dump_only=True)
    sender_role = fields.String(dump_only=True)
    message = fields.String(dump_only=True)
    created_at = fields.DateTime(dump_only=True)
