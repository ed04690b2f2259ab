"""JWT access and refresh tokens."""
import logging
from datetime import datetime, timedelta
from typing import Optional

from jose import JWTError, jwt

from app.settings import settings

logger = logging.getLogger(__name__)


def _encode(data: dict, token_type: str, expires_delta: timedelta) -> str:
    to_encode = {k: (str(v) if k == "sub" else v) for k, v in data.items()}
    now = datetime.utcnow()
    to_encode.update({"exp": now + expires_delta, "iat": now, "type": token_type})
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create a short-lived access token. data["sub"] is the user id."""
    return _encode(data, "access", expires_delta or timedelta(minutes=settings.access_token_expire_minutes))


def create_refresh_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create a long-lived refresh token."""
    return _encode(data, "refresh", expires_delta or timedelta(days=settings.refresh_token_expire_days))


def decode_token(token: str) -> Optional[dict]:
    """Decode and verify a token. Returns None if invalid or expired."""
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError as e:
        logger.debug(f"[AUTH] Token rejected: {e}")
        return None


def user_id_from_token(token: str, token_type: str = "access") -> Optional[int]:
    """User id carried by a valid token of the given type, else None."""
    payload = decode_token(token) if token else None
    if payload is None or payload.get("type") != token_type:
        return None
    try:
        return int(payload.get("sub"))
    except (TypeError, ValueError):
        return None
