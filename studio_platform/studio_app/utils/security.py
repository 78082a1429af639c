"""Security helpers (password hashing, JWT token helpers, webhook signatures)."""

from __future__ import annotations

from typing import Any, Dict

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PublicKey
from flask_jwt_extended import create_access_token
from werkzeug.security import check_password_hash, generate_password_hash


def hash_password(plain_password: str) -> str:
    """Hash a plaintext password using Werkzeug's PBKDF2 defaults."""

    return generate_password_hash(plain_password)


def verify_password(plain_password: str, password_hash: str) -> bool:
    """Return True if the plaintext password matches the stored hash."""

    return check_password_hash(password_hash, plain_password)


def generate_access_token(user) -> str:
    """Create a JWT access token embedding the user's ID and role."""

    claims: Dict[str, Any] = {"role": user.role}
    return create_access_token(identity=str(user.id), additional_claims=claims)


def verify_discord_signature(
    public_key_hex: str,
    signature_hex: str | None,
    timestamp: str | None,
    body: bytes,
) -> bool:
    """Check an interaction's Ed25519 signature over ``timestamp + body``.

    Malformed keys or signatures count as invalid rather than raising.
    """

    if not public_key_hex or not signature_hex or not timestamp:
        return False
    try:
        public_key = Ed25519PublicKey.from_public_bytes(bytes.fromhex(public_key_hex))
        public_key.verify(bytes.fromhex(signature_hex), timestamp.encode("utf-8") + body)
    except (ValueError, InvalidSignature):
        return False
    return True
