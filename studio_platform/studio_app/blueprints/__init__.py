"""REST API blueprints (auth, checkout, requests, admin, etc.)."""

from __future__ import annotations

from .admin_bp import admin_bp
from .auth_bp import auth_bp
from .checkout_bp import checkout_bp
from .discord_bp import discord_bp
from .metrics_bp import metrics_bp
from .producer_bp import producer_bp
from .requests_bp import requests_bp
from .revisions_bp import revisions_bp

BLUEPRINTS = (
    (auth_bp, "/api/auth"),
    (admin_bp, "/api/admin"),
    (checkout_bp, "/api/checkout"),
    (requests_bp, "/api/requests"),
    (revisions_bp, "/api/revisions"),
    (producer_bp, "/api/producers"),
    (discord_bp, "/api/discord"),
    (metrics_bp, ""),
)

__all__ = [
    "BLUEPRINTS",
    "admin_bp",
    "auth_bp",
    "checkout_bp",
    "discord_bp",
    "metrics_bp",
    "producer_bp",
    "requests_bp",
    "revisions_bp",
]
