"""Utility helpers (security, URL validation, dates)."""

from .dates import coerce_aware, utcnow
from .security import (
    generate_access_token,
    hash_password,
    verify_discord_signature,
    verify_password,
)
from .urls import is_valid_url

__all__ = [
    "coerce_aware",
    "generate_access_token",
    "hash_password",
    "is_valid_url",
    "utcnow",
    "verify_discord_signature",
    "verify_password",
]
