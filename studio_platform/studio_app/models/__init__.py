"""Database models package."""

from .user import User
from .producer import Producer, ProducerApplication, ProducerGoogleToken
from .song_request import SongRequest, SongRevision, RevisionMessage
from .purchase import Purchase

__all__ = [
    "User",
    "Producer",
    "ProducerApplication",
    "ProducerGoogleToken",
    "SongRequest",
    "SongRevision",
    "RevisionMessage",
    "Purchase",
]
