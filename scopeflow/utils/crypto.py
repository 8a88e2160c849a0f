"""
Crypto utilities — bcrypt password hashing and client access tokens.

Client access tokens are bearer secrets for the public portal:
  - generated with ``secrets.token_urlsafe`` (256 bits of entropy by default)
  - compared with ``hmac.compare_digest`` to avoid timing side channels
  - never written to logs in full; use ``mask_token`` for log lines
"""

import hmac
import secrets

import bcrypt

ACCESS_TOKEN_BYTES = 32   # -> 43 URL-safe characters


def hash_password(plain_password: str) -> str:
    """Hash a plain-text password with bcrypt (12 rounds)."""
    salt = bcrypt.gensalt(rounds=12)
    return bcrypt.hashpw(plain_password.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain_password: str, password_hash: str) -> bool:
    """Verify a plain-text password against its bcrypt hash."""
    if not password_hash:
        return False
    return bcrypt.checkpw(
        plain_password.encode("utf-8"),
        password_hash.encode("utf-8"),
    )


def generate_access_token(nbytes: int = ACCESS_TOKEN_BYTES) -> str:
    """Generate an unguessable, URL-safe client access token."""
    return secrets.token_urlsafe(nbytes)


def tokens_match(supplied: str | None, expected: str | None) -> bool:
    """Constant-time equality for bearer tokens. Empty values never match."""
    if not supplied or not expected:
        return False
    return hmac.compare_digest(supplied.encode("utf-8"), expected.encode("utf-8"))


def mask_token(token: str | None) -> str:
    """Return a log-safe rendering of a bearer token (4-char prefix only)."""
    if not token:
        return "<none>"
    return f"{token[:4]}…({len(token)})"
