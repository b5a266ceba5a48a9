# deskcrm/services/security.py
from __future__ import annotations

import hashlib
import hmac
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt

from deskcrm import config

# ----------------- JWT / security constants -----------------

ALGORITHM = "HS256"
HASH_SCHEME = "pbkdf2_sha256"


# ----------------- Passwords -----------------


def hash_password(password: str, iterations: Optional[int] = None) -> str:
    """Salted PBKDF2-SHA256, stored as ``pbkdf2_sha256$<iterations>$<salt>$<hex digest>``."""
    iterations = iterations or config.settings.PASSWORD_HASH_ITERATIONS
    salt = secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt.encode("utf-8"), iterations)
    return f"{HASH_SCHEME}${iterations}${salt}${digest.hex()}"


def is_hashed(value: str | None) -> bool:
    if not value:
        return False
    parts = value.split("$")
    return len(parts) == 4 and parts[0] == HASH_SCHEME and parts[1].isdigit()


def verify_password(plain_password: str, stored: str | None) -> bool:
    """
    Check a password against a stored hash. Data files written before hashing
    was introduced hold plaintext; those compare directly so the caller can
    upgrade them (see ``needs_rehash``).
    """
    if not stored:
        return False
    if not is_hashed(stored):
        return hmac.compare_digest(plain_password.encode("utf-8"), stored.encode("utf-8"))

    _, iterations, salt, expected = stored.split("$")
    digest = hashlib.pbkdf2_hmac("sha256", plain_password.encode("utf-8"), salt.encode("utf-8"), int(iterations))
    return hmac.compare_digest(digest.hex(), expected)


def needs_rehash(stored: str | None) -> bool:
    return not is_hashed(stored)


# ----------------- Session tokens -----------------


def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=config.settings.SESSION_TTL_MINUTES)
    )
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, config.settings.JWT_SECRET, algorithm=ALGORITHM)


def parse_token(token: str) -> Optional[Dict[str, Any]]:
    """Decode a session token; None when it is invalid or expired."""
    try:
        payload = jwt.decode(token, config.settings.JWT_SECRET, algorithms=[ALGORITHM])
    except JWTError:
        return None
    if not isinstance(payload, dict) or not payload.get("sub"):
        return None
    return payload
