"""Song request (order) lifecycle models."""

from __future__ import annotations

from ..extensions import db
from .user import utcnow


class SongRequest(db.Model):
    """A paid production order. `status` is a free-form string updated per handler."""

    __tablename__ = "song_requests"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    user_email = db.Column(db.String(255), nullable=False)
    song_idea = db.Column(db.Text, nullable=False, default="")
    tier = db.Column(db.String(32), nullable=False)
    price = db.Column(db.Numeric(10, 2), nullable=False)
    status = db.Column(db.String(32), nullable=False, default="pending_payment", index=True)
    stripe_session_id = db.Column(db.String(255), index=True)
    payment_intent_id = db.Column(db.String(255))
    platform_fee_cents = db.Column(db.Integer)
    producer_payout_cents = db.Column(db.Integer)
    acceptance_deadline = db.Column(db.DateTime(timezone=True))
    refunded_at = db.Column(db.DateTime(timezone=True))
    producer_paid_at = db.Column(db.DateTime(timezone=True))
    payout_method = db.Column(db.String(32))
    payout_transfer_id = db.Column(db.String(255))
    wants_recorded_stems = db.Column(db.Boolean, nullable=False, default=False)
    wants_analog = db.Column(db.Boolean, nullable=False, default=False)
    wants_mixing = db.Column(db.Boolean, nullable=False, default=False)
    wants_mastering = db.Column(db.Boolean, nullable=False, default=False)
    number_of_revisions = db.Column(db.Integer, nullable=False, default=0)
    assigned_producer_id = db.Column(db.Integer, db.ForeignKey("producers.id"), index=True)
    blocked_producer_ids = db.Column(db.JSON, nullable=False, default=list)
    genre_category = db.Column(db.String(32))
    complexity_level = db.Column(db.String(32))
    file_urls = db.Column(db.JSON, nullable=False, default=list)
    producer_checklist = db.Column(db.JSON)
    cancellation_reason = db.Column(db.Text)
    cancellation_requested_at = db.Column(db.DateTime(timezone=True))
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = db.Column(
        db.DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        nullable=False,
    )

    user = db.relationship("User", backref="song_requests")
    assigned_producer = db.relationship("Producer", backref="assigned_requests")
    revisions = db.relationship(
        "SongRevision",
        back_populates="song_request",
        order_by="SongRevision.revision_number",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<SongRequest id={self.id} status={self.status}>"


class SongRevision(db.Model):
    __tablename__ = "song_revisions"
    __table_args__ = (
        db.UniqueConstraint("song_request_id", "revision_number", name="uq_revision_number"),
    )

    id = db.Column(db.Integer, primary_key=True)
    song_request_id = db.Column(
        db.Integer, db.ForeignKey("song_requests.id"), nullable=False, index=True
    )
    revision_number = db.Column(db.Integer, nullable=False)
    status = db.Column(db.String(32), nullable=False, default="pending")
    client_notes = db.Column(db.Text)
    client_feedback = db.Column(db.Text)
    wants_meeting = db.Column(db.Boolean, nullable=False, default=False)
    meeting_link = db.Column(db.String(512))
    drive_link = db.Column(db.String(512))
    drive_folder_id = db.Column(db.String(255))
    requested_at = db.Column(db.DateTime(timezone=True))
    delivered_at = db.Column(db.DateTime(timezone=True))
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False)

    song_request = db.relationship("SongRequest", back_populates="revisions")
    messages = db.relationship(
        "RevisionMessage",
        back_populates="revision",
        order_by="RevisionMessage.created_at",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<SongRevision request={self.song_request_id} #{self.revision_number} {self.status}>"


class RevisionMessage(db.Model):
    __tablename__ = "revision_messages"

    id = db.Column(db.Integer, primary_key=True)
    revision_id = db.Column(
        db.Integer, db.ForeignKey("song_revisions.id"), nullable=False, index=True
    )
    sender_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    sender_role = db.Column(db.String(32), nullable=False)
    message = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False)

    revision = db.relationship("SongRevision", back_populates="messages")
