"""
Password hashing and JWT helpers.

New passwords are hashed with bcrypt. Accounts migrated from the previous
platform still carry scrypt hashes in the form ``<hex digest>.<salt>``; those
verify here and are re-hashed with bcrypt on the next successful login.
"""

import hashlib
import hmac
import logging
import secrets
from datetime import UTC, datetime, timedelta

import bcrypt
import jwt

from atsboost.config import settings

logger = logging.getLogger(__name__)

BCRYPT_ROUNDS = 12

# Parameters the legacy scrypt hashes were created with
SCRYPT_N = 16384
SCRYPT_R = 8
SCRYPT_P = 1
SCRYPT_KEY_LEN = 64


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def is_legacy_hash(hashed: str) -> bool:
    return not hashed.startswith("$2") and "." in hashed


def verify_password(password: str, hashed: str | None) -> bool:
    """Check a password against a bcrypt or legacy scrypt hash."""
    if not hashed:
        return False

    if hashed.startswith("$2"):
        try:
            return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
        except ValueError:
            logger.warning("Malformed bcrypt hash")
            return False

    digest_hex, _, salt = hashed.partition(".")
    if not digest_hex or not salt:
        return False
    try:
        stored = bytes.fromhex(digest_hex)
    except ValueError:
        return False

    derived = hashlib.scrypt(
        password.encode("utf-8"),
        salt=salt.encode("utf-8"),
        n=SCRYPT_N,
        r=SCRYPT_R,
        p=SCRYPT_P,
        dklen=SCRYPT_KEY_LEN,
    )
    return len(stored) == len(derived) and hmac.compare_digest(stored, derived)


def create_access_token(user_id: str, email: str, role: str) -> str:
    payload = {
        "sub": user_id,
        "email": email,
        "role": role,
        "exp": datetime.now(UTC) + timedelta(days=settings.jwt_expire_days),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict | None:
    """Return the token payload, or None when it is invalid or expired."""
    try:
        return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError:
        logger.info("Rejected expired token")
        return None
    except jwt.InvalidTokenError:
        return None


def generate_token() -> str:
    """Random URL-safe token for email verification and password reset links."""
    return secrets.token_urlsafe(32)


def generate_code(digits: int = 6) -> str:
    return "".join(secrets.choice("0123456789") for _ in range(digits))


def hash_code(code: str) -> str:
    return hashlib.sha256(code.encode("utf-8")).hexdigest()
