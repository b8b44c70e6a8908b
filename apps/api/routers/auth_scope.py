"""Authentication dependencies resolving the calling account from its access token."""

from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from services.errors import AuthError
from services.session_token import decode_access_token


auth_scheme = HTTPBearer(auto_error=False)

ACCESS_TOKEN_COOKIE = "accessToken"
REFRESH_TOKEN_COOKIE = "refreshToken"


@dataclass
class AuthContext:
    """Authenticated principal passed explicitly into every protected handler."""

    user_id: str
    email: Optional[str] = None


async def get_auth_context(
    request: Request,
    credentials: HTTPAuthorizationCredentials = Depends(auth_scheme),
) -> AuthContext:
    """Resolve the caller from a Bearer header or the access-token cookie."""
    token = None
    if credentials and credentials.scheme.lower() == "bearer":
        token = credentials.credentials
    if not token:
        token = request.cookies.get(ACCESS_TOKEN_COOKIE)
    if not token:
        raise AuthError("Missing access token.")

    try:
        payload = decode_access_token(token)
    except ValueError as exc:
        raise AuthError(str(exc)) from exc

    return AuthContext(
        user_id=str(payload.get("sub", "")),
        email=str(payload.get("email", "")) or None,
    )
