"""Producer profiles and their linked cloud-storage credentials."""

from __future__ import annotations

from ..extensions import db
from .user import utcnow


class Producer(db.Model):
    __tablename__ = "producers"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), unique=True, index=True)
    slug = db.Column(db.String(120), unique=True, nullable=False)
    name = db.Column(db.String(120), nullable=False)
    email = db.Column(db.String(255), index=True)
    bio = db.Column(db.Text)
    genre = db.Column(db.String(255))
    country = db.Column(db.String(64))
    image = db.Column(db.String(512))
    spotify_url = db.Column(db.String(512))
    apple_music_url = db.Column(db.String(512))
    instagram_url = db.Column(db.String(512))
    youtube_url = db.Column(db.String(512))
    discord_user_id = db.Column(db.String(64), unique=True, index=True)
    stripe_connect_account_id = db.Column(db.String(128))
    stripe_connect_onboarded_at = db.Column(db.DateTime(timezone=True))
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False)

    user = db.relationship("User", back_populates="producer")

    @property
    def connect_ready(self) -> bool:
        return bool(self.stripe_connect_account_id and self.stripe_connect_onboarded_at)

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<Producer id={self.id} slug={self.slug}>"


class ProducerGoogleToken(db.Model):
    __tablename__ = "producer_google_tokens"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), unique=True, nullable=False)
    access_token = db.Column(db.Text, nullable=False)
    refresh_token = db.Column(db.Text)
    token_expires_at = db.Column(db.DateTime(timezone=True), nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = db.Column(
        db.DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        nullable=False,
    )

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<ProducerGoogleToken user_id={self.user_id}>"


class ProducerApplication(db.Model):
    """A customer's request to join the roster, reviewed by an admin."""

    __tablename__ = "producer_applications"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    name = db.Column(db.String(120), nullable=False)
    email = db.Column(db.String(255), nullable=False)
    country = db.Column(db.String(100))
    genres = db.Column(db.JSON, nullable=False, default=list)
    bio = db.Column(db.Text, nullable=False)
    image = db.Column(db.String(512))
    spotify_url = db.Column(db.String(512))
    apple_music_url = db.Column(db.String(512))
    instagram_url = db.Column(db.String(512))
    youtube_url = db.Column(db.String(512))
    website_url = db.Column(db.String(512))
    status = db.Column(db.String(16), nullable=False, default="pending", index=True)
    admin_notes = db.Column(db.Text)
    reviewed_by_id = db.Column(db.Integer, db.ForeignKey("users.id"))
    reviewed_at = db.Column(db.DateTime(timezone=True))
    producer_id = db.Column(db.Integer, db.ForeignKey("producers.id"))
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False)

    user = db.relationship("User", foreign_keys=[user_id])
    producer = db.relationship("Producer")

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<ProducerApplication id={self.id} status={self.status}>"
