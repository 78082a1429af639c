from __future__ import annotations

from ..extensions import db
from .user import utcnow


class Purchase(db.Model):
    """Denormalized record of a completed transaction."""

    __tablename__ = "purchases"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    product_id = db.Column(db.String(64), nullable=False, index=True)
    product_name = db.Column(db.String(255), nullable=False)
    product_type = db.Column(db.String(32), nullable=False, default="song_request")
    product_category = db.Column(db.String(64))
    price = db.Column(db.Numeric(10, 2), nullable=False)
    status = db.Column(db.String(32), nullable=False, default="processing")
    download_url = db.Column(db.String(1024))
    song_idea = db.Column(db.Text)
    file_urls = db.Column(db.JSON, nullable=False, default=list)
    stripe_session_id = db.Column(db.String(255), unique=True)
    purchase_date = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False)

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<Purchase id={self.id} product={self.product_id} status={self.status}>"
