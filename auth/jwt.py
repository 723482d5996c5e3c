"""
JWT-style token creation and verification.

Tokens are base64-encoded JSON payloads signed with HMAC-SHA256.
The secret and lifetime come from ``Settings.jwt_secret`` /
``Settings.jwt_expiry_seconds`` (env vars: ``JWT_SECRET``,
``JWT_EXPIRY_SECONDS``) and are fixed once the signer is built.
"""

from __future__ import annotations

import binascii
import hashlib
import hmac
import json
import time
from base64 import b64decode, b64encode
from dataclasses import dataclass

from core.errors import AuthError

INVALID_TOKEN = "Invalid or expired token"


@dataclass(frozen=True)
class Identity:
    """Verified caller identity carried by a token."""

    id: int
    username: str


class TokenSigner:
    def __init__(self, secret: str, expiry_seconds: int = 86400) -> None:
        self._secret = secret.encode()
        self._expiry_seconds = expiry_seconds

    def _sign(self, raw: bytes) -> str:
        return hmac.new(self._secret, raw, hashlib.sha256).hexdigest()

    def create_token(self, user_id: int, username: str) -> str:
        """Create a signed token containing the user's id, username and expiry."""
        payload = {
            "id": user_id,
            "username": username,
            "exp": int(time.time()) + self._expiry_seconds,
        }
        raw = json.dumps(payload).encode()
        return b64encode(raw).decode() + "." + self._sign(raw)

    def verify_token(self, token: str) -> Identity:
        """
        Verify token and return the embedded ``Identity``.

        Raises ``AuthError`` on malformed, tampered or expired tokens.
        """
        try:
            encoded, sig = token.split(".", 1)
            raw = b64decode(encoded, validate=True)
            if not hmac.compare_digest(sig, self._sign(raw)):
                raise ValueError("bad signature")
            payload = json.loads(raw)
            if payload.get("exp", 0) < time.time():
                raise ValueError("token expired")
            return Identity(id=int(payload["id"]), username=str(payload["username"]))
        except (ValueError, KeyError, TypeError, AttributeError, binascii.Error) as exc:
            raise AuthError(INVALID_TOKEN) from exc
