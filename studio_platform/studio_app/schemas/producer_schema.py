"""Schemas for producer profiles and Drive delivery payloads."""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, fields, pre_load, validate


class ProducerSchema(Schema):
    id = fields.Integer(dump_only=True)
    slug = fields.String(dump_only=True)
    name = fields.String(dump_only=True)
    email = fields.String(dump_only=True, allow_none=True)
    bio = fields.String(dump_only=True, allow_none=True)
    genre = fields.String(dump_only=True, allow_none=True)
    country = fields.String(dump_only=True, allow_none=True)
    image = fields.String(dump_only=True, allow_none=True)
    spotify_url = fields.String(dump_only=True, allow_none=True)
    apple_music_url = fields.String(dump_only=True, allow_none=True)
    instagram_url = fields.String(dump_only=True, allow_none=True)
    youtube_url = fields.String(dump_only=True, allow_none=True)
    discord_user_id = fields.String(dump_only=True, allow_none=True)
    connect_ready = fields.Boolean(dump_only=True)


class ProducerUpdateSchema(Schema):
    name = fields.String(validate=validate.Length(min=1, max=120))
    bio = fields.String(allow_none=True, validate=validate.Length(max=4000))
    genre = fields.String(allow_none=True, validate=validate.Length(max=255))
    country = fields.String(allow_none=True, validate=validate.Length(max=64))
    image = fields.Url(allow_none=True)
    spotify_url = fields.Url(allow_none=True)
    apple_music_url = fields.Url(allow_none=True)
    instagram_url = fields.Url(allow_none=True)
    youtube_url = fields.Url(allow_none=True)
    discord_user_id = fields.String(allow_none=True, validate=validate.Length(max=64))

    class Meta:
        unknown = EXCLUDE


class DriveCallbackSchema(Schema):
    code = fields.String(required=True)
    state = fields.String(required=True)


class UploadSessionSchema(Schema):
    file_name = fields.String(required=True, validate=validate.Length(min=1, max=255))
    mime_type = fields.String(load_default="application/octet-stream")
    revision_id = fields.Integer(allow_none=True, load_default=None)


class DriveFinalizeSchema(Schema):
    folder_id = fields.String(required=True, validate=validate.Length(min=1, max=255))
    revision_id = fields.Integer(allow_none=True, load_default=None)
    meeting_link = fields.String(allow_none=True, load_default=None)
    custom_message = fields.String(allow_none=True, load_default=None)


class ProducerApplicationCreateSchema(Schema):
    name = fields.String(required=True, validate=validate.Length(min=2, max=100))
    email = fields.Email(required=True)
    country = fields.String(required=True, validate=validate.Length(min=2, max=100))
    genres = fields.List(
        fields.String(validate=validate.Length(min=1, max=64)),
        required=True,
        validate=validate.Length(min=1, max=3),
    )
    bio = fields.String(required=True, validate=validate.Length(min=50, max=1000))
    image = fields.Url(allow_none=True, load_default=None)
    spotify_url = fields.Url(allow_none=True, load_default=None)
    apple_music_url = fields.Url(allow_none=True, load_default=None)
    instagram_url = fields.Url(allow_none=True, load_default=None)
    youtube_url = fields.Url(allow_none=True, load_default=None)
    website_url = fields.Url(allow_none=True, load_default=None)

    class Meta:
        unknown = EXCLUDE

    @pre_load
    def blank_links_to_none(self, data, **kwargs):
        if not isinstance(data, dict):
            return data
        return {key: (None if value == "" else value) for key, value in data.items()}


class ProducerApplicationSchema(Schema):
    id = fields.Integer(dump_only=True)
    user_id = fields.Integer(dump_only=True)
    name = fields.String(dump_only=True)
    email = fields.String(dump_only=True)
    country = fields.String(dump_only=True, allow_none=True)
    genres = fields.List(fields.String(), dump_only=True)
    bio = fields.String(dump_only=True)
    image = fields.String(dump_only=True, allow_none=True)
    spotify_url = fields.String(dump_only=True, allow_none=True)
    apple_music_url = fields.String(dump_only=True, allow_none=True)
    instagram_url = fields.String(dump_only=True, allow_none=True)
    youtube_url = fields.String(dump_only=True, allow_none=True)
    website_url = fields.String(dump_only=True, allow_none=True)
    status = fields.String(dump_only=True)
    admin_notes = fields.String(dump_only=True, allow_none=True)
    reviewed_at = fields.DateTime(dump_only=True)
    producer_id = fields.Integer(dump_only=True, allow_none=True)
    created_at = fields.DateTime(dump_only=True)


class ApplicationDecisionSchema(Schema):
    decision = fields.String(required=True, validate=validate.OneOf(("approve", "reject")))
    notes = fields.String(allow_none=True, load_default=None, validate=validate.Length(max=2000))
    discord_user_id = fields.String(allow_none=True, load_default=None, validate=validate.Length(max=64))
