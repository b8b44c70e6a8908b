"""HTTP error taxonomy shared by routers and services."""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import HTTPException


class ApiError(HTTPException):
    """Base error; subclasses pin the status code."""

    status_code = 500
    default_detail = "Something went wrong"

    def __init__(self, detail: Optional[str] = None, headers: Optional[Dict[str, Any]] = None):
        super().__init__(status_code=self.status_code, detail=detail or self.default_detail, headers=headers)


class ValidationError(ApiError):
    status_code = 400
    default_detail = "Invalid request"


class AuthError(ApiError):
    status_code = 401
    default_detail = "Unauthorized access"


class AuthorizationError(ApiError):
    status_code = 403
    default_detail = "You are not allowed to perform this action"


class NotFoundError(ApiError):
    status_code = 404
    default_detail = "Resource not found"


class ConflictError(ApiError):
    status_code = 409
    default_detail = "Resource already exists"


class UpstreamError(ApiError):
    status_code = 502
    default_detail = "Upstream provider error"


class UploadError(UpstreamError):
    default_detail = "File upload failed"


class RateLimitError(ApiError):
    status_code = 429
    default_detail = "Too many requests. Try again later."


class InternalError(ApiError):
    status_code = 500
    default_detail = "Internal server error"


def require_text(value: Optional[str], message: str) -> str:
    """Return stripped text or raise ValidationError when blank."""
    text = str(value or "").strip()
    if not text:
        raise ValidationError(message)
    return text


def ensure_owner(owner_id: str, user_id: str, message: str) -> None:
    if owner_id != user_id:
        raise AuthorizationError(message)
