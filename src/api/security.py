# This file holds the authenticated principal type and the password digest helpers.
# Digests use PBKDF2-SHA256 in the self-describing format `pbkdf2_sha256$iters$salt$hash`,
# so the iteration count can be raised later without invalidating stored credentials.

from __future__ import annotations

import base64
import hashlib
import hmac
import secrets
from dataclasses import dataclass

DIGEST_ALGORITHM = "pbkdf2_sha256"
DEFAULT_PBKDF2_ITERATIONS = 200_000
BEARER_SCHEME = "Bearer"


@dataclass(frozen=True)
class Principal:
    id: int
    username: str

    def as_dict(self) -> dict[str, object]:
        return {"id": self.id, "username": self.username}


def _b64(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode("utf-8").rstrip("=")


def _b64d(value: str) -> bytes:
    pad = "=" * (-len(value) % 4)
    return base64.urlsafe_b64decode((value + pad).encode("utf-8"))


def hash_password(password: str, *, iterations: int = DEFAULT_PBKDF2_ITERATIONS) -> str:
    salt = secrets.token_bytes(16)
    dk = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations, dklen=32)
    return f"{DIGEST_ALGORITHM}${iterations}${_b64(salt)}${_b64(dk)}"


def verify_password(password: str, digest: str) -> bool:
    """Return True when `password` matches `digest`; malformed digests never match."""

    try:
        algo, iters_s, salt_s, hash_s = digest.split("$", 3)
        if algo != DIGEST_ALGORITHM:
            return False
        iterations = int(iters_s)
        salt = _b64d(salt_s)
        expected = _b64d(hash_s)
    except (ValueError, TypeError, AttributeError):
        return False
    if iterations <= 0 or not expected:
        return False
    dk = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations, dklen=len(expected))
    return hmac.compare_digest(dk, expected)


def parse_bearer_header(authorization: str | None) -> str | None:
    """Extract the token from an exact `Bearer <token>` header, else None."""

    if not authorization:
        return None
    scheme, separator, token = authorization.partition(" ")
    if scheme != BEARER_SCHEME or not separator:
        return None
    if not token or token != token.strip() or any(ch.isspace() for ch in token):
        return None
    return token
