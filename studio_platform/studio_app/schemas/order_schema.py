"""Schemas for checkout, song requests and the order workflow."""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, fields, validate

from ..services.catalog import GENRE_KEYWORDS


class AddOnsSchema(Schema):
    recorded_stems = fields.Boolean(load_default=False)
    analog = fields.Boolean(load_default=False)
    mixing = fields.Boolean(load_default=False)
    mastering = fields.Boolean(load_default=False)
    revisions = fields.Integer(load_default=0, validate=validate.Range(min=0, max=10))

    class Meta:
        unknown = EXCLUDE


class CheckoutCreateSchema(Schema):
    tier = fields.String(required=True, validate=validate.Length(min=1, max=32))
    idea = fields.String(load_default="", validate=validate.Length(max=5000))
    file_urls = fields.List(fields.Url(), load_default=list)
    total_price = fields.Decimal(required=True, as_string=True, places=2)
    base_price = fields.Decimal(allow_none=True, as_string=True, places=2)
    add_ons = fields.Nested(AddOnsSchema, load_default=dict)
    genre_category = fields.String(
        allow_none=True, validate=validate.OneOf(tuple(GENRE_KEYWORDS))
    )
    request_id = fields.Integer(allow_none=True, load_default=None)

    class Meta:
        unknown = EXCLUDE


class PaymentVerifySchema(Schema):
    session_id = fields.String(required=True, validate=validate.Length(min=1, max=500))


class StatusUpdateSchema(Schema):
    status = fields.String(required=True)


class ChecklistSchema(Schema):
    checklist = fields.Dict(keys=fields.String(), values=fields.Boolean(), required=True)


class DeliverySchema(Schema):
    download_url = fields.String(required=True, validate=validate.Length(min=1, max=1024))
    custom_message = fields.String(allow_none=True, validate=validate.Length(max=4000))


class CancellationRequestSchema(Schema):
    reason = fields.String(required=True, validate=validate.Length(min=1, max=2000))


class CancellationDecisionSchema(Schema):
    decision = fields.String(required=True, validate=validate.OneOf(("approve", "deny")))
    refund_percent = fields.Integer(
        allow_none=True, load_default=None, validate=validate.Range(min=0, max=100)
    )


class ChangeProducerSchema(Schema):
    reason = fields.String(allow_none=True, load_default=None, validate=validate.Length(max=2000))


class RevisionSchema(Schema):
    id = fields.Integer(dump_only=True)
    revision_number = fields.Integer(dump_only=True)
    status = fields.String(dump_only=True)
    client_notes = fields.String(dump_only=True, allow_none=True)
    client_feedback = fields.String(dump_only=True, allow_none=True)
    wants_meeting = fields.Boolean(dump_only=True)
    meeting_link = fields.String(dump_only=True, allow_none=True)
    drive_link = fields.String(dump_only=True, allow_none=True)
    requested_at = fields.DateTime(dump_only=True)
    delivered_at = fields.DateTime(dump_only=True)


class SongRequestSchema(Schema):
    id = fields.Integer(dump_only=True)
    user_id = fields.Integer(dump_only=True)
    user_email = fields.String(dump_only=True)
    song_idea = fields.String(dump_only=True, allow_none=True)
    tier = fields.String(dump_only=True)
    price = fields.Decimal(dump_only=True, as_string=True)
    status = fields.String(dump_only=True)
    genre_category = fields.String(dump_only=True, allow_none=True)
    complexity_level = fields.String(dump_only=True, allow_none=True)
    file_urls = fields.List(fields.String(), dump_only=True)
    wants_recorded_stems = fields.Boolean(dump_only=True)
    wants_analog = fields.Boolean(dump_only=True)
    wants_mixing = fields.Boolean(dump_only=True)
    wants_mastering = fields.Boolean(dump_only=True)
    number_of_revisions = fields.Integer(dump_only=True)
    assigned_producer_id = fields.Integer(dump_only=True, allow_none=True)
    platform_fee_cents = fields.Integer(dump_only=True, allow_none=True)
    producer_payout_cents = fields.Integer(dump_only=True, allow_none=True)
    acceptance_deadline = fields.DateTime(dump_only=True)
    producer_checklist = fields.Dict(dump_only=True)
    refunded_at = fields.DateTime(dump_only=True)
    producer_paid_at = fields.DateTime(dump_only=True)
    payout_method = fields.String(dump_only=True, allow_none=True)
    cancellation_reason = fields.String(dump_only=True, allow_none=True)
    created_at = fields.DateTime(dump_only=True)
    revisions = fields.List(fields.Nested(RevisionSchema), dump_only=True)
