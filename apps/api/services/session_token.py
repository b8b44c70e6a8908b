"""Access/refresh token helpers for backend-authenticated user scope."""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
import uuid

from jose import JWTError, jwt

from config import settings


ACCESS_TOKEN_TYPE = "vidshare_access"
REFRESH_TOKEN_TYPE = "vidshare_refresh"


def _encode(claims: Dict[str, Any], secret: str, ttl: timedelta) -> Dict[str, Any]:
    now = datetime.now(timezone.utc)
    expires_at = now + ttl
    claims.update(
        {
            "iat": int(now.timestamp()),
            "exp": int(expires_at.timestamp()),
            "jti": uuid.uuid4().hex,
        }
    )
    token = jwt.encode(claims, secret, algorithm=settings.JWT_ALGORITHM)
    return {
        "token": token,
        "expires_at": int(expires_at.timestamp()),
    }


def create_access_token(
    user_id: str,
    email: Optional[str] = None,
    username: Optional[str] = None,
    expires_minutes: Optional[int] = None,
) -> Dict[str, Any]:
    """Create a short-lived signed access token."""
    ttl_minutes = int(expires_minutes or settings.ACCESS_TOKEN_EXPIRE_MINUTES or 60)
    claims: Dict[str, Any] = {"sub": user_id, "type": ACCESS_TOKEN_TYPE}
    if email:
        claims["email"] = email
    if username:
        claims["username"] = username
    return _encode(claims, settings.JWT_SECRET, timedelta(minutes=max(ttl_minutes, 1)))


def create_refresh_token(user_id: str, expires_days: Optional[int] = None) -> Dict[str, Any]:
    """Create a long-lived refresh token; callers persist it on the user row."""
    ttl_days = int(expires_days or settings.REFRESH_TOKEN_EXPIRE_DAYS or 10)
    claims: Dict[str, Any] = {"sub": user_id, "type": REFRESH_TOKEN_TYPE}
    return _encode(claims, settings.REFRESH_TOKEN_SECRET, timedelta(days=max(ttl_days, 1)))


def _decode(token: str, secret: str, expected_type: str) -> Dict[str, Any]:
    try:
        payload = jwt.decode(token, secret, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as exc:
        raise ValueError("Invalid or expired token.") from exc

    token_type = str(payload.get("type", "")).strip()
    if token_type != expected_type:
        raise ValueError("Invalid token type.")

    subject = str(payload.get("sub", "")).strip()
    if not subject:
        raise ValueError("Token missing subject.")

    return payload


def decode_access_token(token: str) -> Dict[str, Any]:
    """Decode and validate a signed access token."""
    return _decode(token, settings.JWT_SECRET, ACCESS_TOKEN_TYPE)


def decode_refresh_token(token: str) -> Dict[str, Any]:
    """Decode and validate a signed refresh token."""
    return _decode(token, settings.REFRESH_TOKEN_SECRET, REFRESH_TOKEN_TYPE)
