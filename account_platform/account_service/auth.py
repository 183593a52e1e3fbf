from passlib.context import CryptContext
from datetime import datetime, timedelta, timezone
from typing import Optional
import hashlib
import hmac
import secrets
import jwt

from .config import Settings

# Use pbkdf2_sha256 to avoid external bcrypt backend issues in some environments
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

# Verified against when no user matches a login identifier so both paths cost one hash
DUMMY_PASSWORD_HASH = pwd_context.hash("placeholder-password-never-matches")


def utcnow() -> datetime:
    """Naive UTC timestamp, matching how DateTime columns round-trip through the store."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def dummy_verify_password(plain_password: str) -> bool:
    """Run a full hash verification that never succeeds. Used when no user matched."""
    pwd_context.verify(plain_password, DUMMY_PASSWORD_HASH)
    return False


def create_access_token(user_id: int, settings: Settings, expires_delta: Optional[timedelta] = None) -> str:
    now = datetime.now(timezone.utc)
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)
    payload = {"sub": str(user_id), "iat": now, "exp": now + expires_delta}
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str, settings: Settings) -> int:
    """
    Decode a bearer token and return the user id it was issued for.

    Raises:
        jwt.InvalidTokenError: bad signature, expired, or malformed subject
    """
    data = jwt.decode(
        token,
        settings.JWT_SECRET,
        algorithms=[settings.JWT_ALGORITHM],
        options={"require": ["exp", "sub"]},
    )
    try:
        return int(data["sub"])
    except (TypeError, ValueError) as exc:
        raise jwt.InvalidTokenError("Token subject is not a user id") from exc


def generate_reset_token(settings: Settings) -> str:
    return secrets.token_hex(settings.RESET_TOKEN_BYTES)


def hash_reset_token(token: str, settings: Settings) -> str:
    """Keyed SHA-256 of a reset code. Deterministic so the hash can be looked up."""
    return hmac.new(settings.JWT_SECRET.encode(), token.encode(), hashlib.sha256).hexdigest()
