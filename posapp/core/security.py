import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, NamedTuple, Optional

from jose import JWTError, jwt
from passlib.crypto.digest import pbkdf2_hmac
from passlib.utils import consteq

from posapp.config import get_settings

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"

# PBKDF2-SHA256 parameters shared with the existing SQL Server user base
PBKDF2_ITERATIONS = 100_000
SALT_SIZE = 16
HASH_SIZE = 32


class PasswordHash(NamedTuple):
    hash: str
    salt: str


def hash_password(password: str, salt_hex: str) -> str:
    """Derive the upper-case hex PBKDF2-SHA256 key for `password` with a hex salt."""
    if not salt_hex or not salt_hex.strip():
        raise ValueError("Salt cannot be empty.")
    key = pbkdf2_hmac("sha256", password.encode("utf-8"), bytes.fromhex(salt_hex), PBKDF2_ITERATIONS, HASH_SIZE)
    return key.hex().upper()


def create_password_hash(password: str) -> PasswordHash:
    if not password or not password.strip():
        raise ValueError("Password cannot be empty.")
    salt_hex = secrets.token_bytes(SALT_SIZE).hex().upper()
    return PasswordHash(hash_password(password, salt_hex), salt_hex)


def verify_password(password: str, stored_hash: Optional[str], stored_salt: Optional[str]) -> bool:
    if not stored_hash or not stored_salt:
        return False
    try:
        computed = hash_password(password, stored_salt)
    except ValueError:
        logger.warning("Stored password salt is not valid hex")
        return False
    return consteq(computed, stored_hash.strip().upper())


def create_session_token(claims: Dict[str, Any], remember_me: bool = False) -> str:
    """Sign the session claims; lifetime depends on remember-me."""
    settings = get_settings()
    if remember_me:
        lifetime = timedelta(days=settings.remember_me_days)
    else:
        lifetime = timedelta(hours=settings.session_hours)
    to_encode = dict(claims)
    to_encode["exp"] = datetime.now(timezone.utc) + lifetime
    return jwt.encode(to_encode, settings.session_secret, algorithm=ALGORITHM)


def decode_session_token(token: Optional[str]) -> Optional[Dict[str, Any]]:
    if not token:
        return None
    try:
        return jwt.decode(token, get_settings().session_secret, algorithms=[ALGORITHM])
    except JWTError:
        return None
