"""
auth/tokens.py -- Password hashing and session token utilities.

Security design decisions:
  Passwords: bcrypt, used directly (no passlib wrapper). bcrypt is the right
       choice for low-entropy secrets because its cost factor makes brute
       force expensive, and checkpw() compares in constant time. The
       dummy_hash() helper lets the directory spend the same bcrypt work on
       an unknown email as on a known one.

  Session tokens: secrets.token_urlsafe(32) gives 256 bits of entropy. The
       SessionStore keys sessions by the SHA-256 digest of the token, so a
       dump of the store does not hand out usable tokens. A plain digest is
       enough here -- the tokens are long and random, bcrypt's slowness buys
       nothing.

  Cost factor: callers pass the rounds from their own Settings. Only a call
       without one falls back to core.config.get_settings(), and only at call
       time -- importing this module never reads the environment, so a CLI
       override can still replace a bad env value.

Layer rule: may import from core/ (the kernel) and auth.models only.
"""

from __future__ import annotations

import base64
import hashlib
import logging
import secrets
from functools import lru_cache

import bcrypt

from core.config import get_settings

logger = logging.getLogger("authdirectory.auth")

# ---------------------------------------------------------------------------
# Password hashing
# ---------------------------------------------------------------------------


def hash_password(plain: str, rounds: int | None = None) -> str:
    """Return a bcrypt hash of the given plaintext password.

    bcrypt only looks at the first 72 bytes of its input and bcrypt 4.x
    rejects longer ones, so every password goes through _prepare() first.
    """
    salt = bcrypt.gensalt(rounds=rounds or get_settings().bcrypt_rounds)
    return bcrypt.hashpw(_prepare(plain), salt).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash."""
    try:
        return bcrypt.checkpw(_prepare(plain), hashed.encode("utf-8"))
    except ValueError:
        # Malformed hash, or a password that cannot be UTF-8 encoded.
        logger.warning("Password verification failed on malformed input; rejecting credential")
        return False


def _prepare(plain: str) -> bytes:
    # base64(sha256(password)) for every length: 44 bytes, under bcrypt's limit,
    # and no raw password ever reaches bcrypt as-is.
    return base64.b64encode(hashlib.sha256(plain.encode("utf-8")).digest())


# Timing equalization dummy hash, one per cost factor.
# AuthDirectory warms it at construction so the first login attempt is not
# measurably slower than subsequent ones.
@lru_cache
def dummy_hash(rounds: int) -> str:
    return hash_password("authdirectory_timing_dummy", rounds=rounds)


def spend_dummy_verification(plain: str, rounds: int) -> None:
    """Run one bcrypt verification whose result is discarded."""
    verify_password(plain, dummy_hash(rounds))


# ---------------------------------------------------------------------------
# Session tokens
# ---------------------------------------------------------------------------


def generate_session_token() -> str:
    """Generate a new opaque session token in the format: ses_<43 url-safe chars>."""
    return f"ses_{secrets.token_urlsafe(32)}"


def digest_token(raw_token: str) -> str:
    """Return the SHA-256 hex digest used as the SessionStore key."""
    return hashlib.sha256(raw_token.encode("utf-8")).hexdigest()
