from __future__ import annotations

import base64
import hashlib
import hmac
import secrets

from . import config


def _b64(b: bytes) -> str:
    return base64.urlsafe_b64encode(b).decode("utf-8").rstrip("=")


def _b64d(s: str) -> bytes:
    pad = "=" * (-len(s) % 4)
    return base64.urlsafe_b64decode((s + pad).encode("utf-8"))


def hash_password(pw: str) -> str:
    # Format: pbkdf2_sha256$iters$salt$hash
    iters = config.PBKDF2_ITERS
    salt = secrets.token_bytes(16)
    dk = hashlib.pbkdf2_hmac("sha256", pw.encode("utf-8"), salt, iters, dklen=32)
    return f"pbkdf2_sha256${iters}${_b64(salt)}${_b64(dk)}"


def verify_password(pw: str, pw_hash: str) -> bool:
    try:
        algo, iters_s, salt_s, hash_s = pw_hash.split("$", 3)
        if algo != "pbkdf2_sha256":
            return False
        iters = int(iters_s)
        salt = _b64d(salt_s)
        expected = _b64d(hash_s)
        dk = hashlib.pbkdf2_hmac("sha256", pw.encode("utf-8"), salt, iters, dklen=len(expected))
        return hmac.compare_digest(dk, expected)
    except (ValueError, TypeError):
        return False


# built at import so the first unknown-user login costs one hash, like the rest
_DUMMY_HASH = hash_password(secrets.token_hex(16))


def burn_verify(pw: str) -> None:
    """Spend the same work as a real verification against a throwaway hash.

    Used when the username is unknown so login latency looks the same either way.
    """
    verify_password(pw, _DUMMY_HASH)
