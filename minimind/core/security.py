"""JWT creation/verification and password hashing."""

from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import uuid4

from jose import JWTError, jwt
from passlib.context import CryptContext

from minimind.config import get_settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

ACCESS = "access"
REFRESH = "refresh"


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


def _encode(sub: str, token_type: str, expires_delta: timedelta) -> str:
    settings = get_settings()
    return jwt.encode(
        {
            "sub": sub,
            "exp": datetime.now(timezone.utc) + expires_delta,
            "type": token_type,
            "jti": str(uuid4()),
        },
        settings.secret_key,
        algorithm=settings.algorithm,
    )


def create_access_token(sub: str) -> str:
    minutes = get_settings().access_token_expire_minutes
    return _encode(sub, ACCESS, timedelta(minutes=minutes))


def create_refresh_token(sub: str) -> str:
    days = get_settings().refresh_token_expire_days
    return _encode(sub, REFRESH, timedelta(days=days))


def decode_token(token: str, expected_type: Optional[str] = None) -> Optional[dict]:
    """Return the claims, or None for a bad, expired or wrong-type token."""
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError:
        return None
    if expected_type and payload.get("type") != expected_type:
        return None
    return payload
