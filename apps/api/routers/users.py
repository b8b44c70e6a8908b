"""
Account router: registration, sessions, profile updates, channel profile,
watch history and password reset.
"""

from typing import Optional

from fastapi import APIRouter, Cookie, Depends, File, Form, Response, UploadFile
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.ext.asyncio import AsyncSession

from config import settings
from database import get_db
from routers.auth_scope import ACCESS_TOKEN_COOKIE, REFRESH_TOKEN_COOKIE, AuthContext, get_auth_context
from routers.rate_limit import rate_limit
from services.responses import envelope
from services.users import (
    AccountDetailsPatch,
    get_channel_profile_service,
    get_current_user_service,
    get_watch_history_service,
    login_user_service,
    logout_user_service,
    refresh_tokens_service,
    register_user_service,
    request_password_reset_service,
    reset_password_service,
    update_account_details_service,
    update_avatar_service,
    update_cover_image_service,
    update_password_service,
)

router = APIRouter()


class LoginRequest(BaseModel):
    email: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None


class RefreshTokenRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    refresh_token: Optional[str] = Field(default=None, alias="refreshToken")


class UpdatePasswordRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    old_password: Optional[str] = Field(default=None, alias="oldPassword")
    new_password: Optional[str] = Field(default=None, alias="newPassword")


class UpdateAccountDetailsRequest(BaseModel):
    fullname: Optional[str] = None
    username: Optional[str] = None
    email: Optional[str] = None


class PasswordResetMailRequest(BaseModel):
    email: Optional[str] = None


class ResetPasswordRequest(BaseModel):
    password: Optional[str] = None


def _set_session_cookies(response: Response, access_token: str, refresh_token: str) -> None:
    options = {"httponly": True, "secure": settings.COOKIE_SECURE, "samesite": "lax"}
    response.set_cookie(
        ACCESS_TOKEN_COOKIE,
        access_token,
        max_age=int(settings.ACCESS_TOKEN_EXPIRE_MINUTES) * 60,
        **options,
    )
    response.set_cookie(
        REFRESH_TOKEN_COOKIE,
        refresh_token,
        max_age=int(settings.REFRESH_TOKEN_EXPIRE_DAYS) * 86400,
        **options,
    )


def _clear_session_cookies(response: Response) -> None:
    for name in (ACCESS_TOKEN_COOKIE, REFRESH_TOKEN_COOKIE):
        response.delete_cookie(name, httponly=True, secure=settings.COOKIE_SECURE, samesite="lax")


@router.post("/register", status_code=201)
async def register_user(
    username: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    fullname: Optional[str] = Form(None),
    password: Optional[str] = Form(None),
    avatar: Optional[UploadFile] = File(None),
    coverimage: Optional[UploadFile] = File(None),
    _rate_limit: None = Depends(rate_limit("users_register", limit=20, window_seconds=3600)),
    db: AsyncSession = Depends(get_db),
):
    """Create an account with an avatar and optional cover image."""
    user = await register_user_service(
        username=username,
        email=email,
        fullname=fullname,
        password=password,
        avatar=avatar,
        cover_image=coverimage,
        db=db,
    )
    return envelope(user, "user created successfully", status=201)


@router.post("/login")
async def login_user(
    request: LoginRequest,
    response: Response,
    _rate_limit: None = Depends(rate_limit("users_login", limit=30, window_seconds=900)),
    db: AsyncSession = Depends(get_db),
):
    """Log in with exactly one of email or username."""
    result = await login_user_service(
        email=request.email,
        username=request.username,
        password=request.password,
        db=db,
    )
    _set_session_cookies(response, result["access_token"], result["refresh_token"])
    return envelope(result, "user logged in successfully")


@router.post("/logout")
async def logout_user(
    response: Response,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    await logout_user_service(user_id=auth.user_id, db=db)
    _clear_session_cookies(response)
    return envelope({}, "user logged out successfully")


@router.post("/refresh-token")
async def refresh_access_token(
    response: Response,
    request: Optional[RefreshTokenRequest] = None,
    refresh_cookie: Optional[str] = Cookie(None, alias=REFRESH_TOKEN_COOKIE),
    _rate_limit: None = Depends(rate_limit("users_refresh", limit=60, window_seconds=900)),
    db: AsyncSession = Depends(get_db),
):
    """Rotate the token pair using the refresh token from cookie or body."""
    tokens = await refresh_tokens_service(
        refresh_token=refresh_cookie or (request.refresh_token if request else None),
        db=db,
    )
    _set_session_cookies(response, tokens["access_token"], tokens["refresh_token"])
    return envelope(tokens, "token refreshed successfully")


@router.post("/update-password")
async def update_password(
    request: UpdatePasswordRequest,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    await update_password_service(
        user_id=auth.user_id,
        old_password=request.old_password,
        new_password=request.new_password,
        db=db,
    )
    return envelope({}, "password updated successfully")


@router.get("/current-user")
async def get_current_user(
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    user = await get_current_user_service(user_id=auth.user_id, db=db)
    return envelope(user, "user fetched successfully")


@router.patch("/update-account-details")
async def update_account_details(
    request: UpdateAccountDetailsRequest,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    user = await update_account_details_service(
        user_id=auth.user_id,
        patch=AccountDetailsPatch(**request.model_dump()),
        db=db,
    )
    return envelope(user, "account details updated successfully")


@router.patch("/update-avatar")
async def update_avatar(
    avatar: Optional[UploadFile] = File(None),
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    user = await update_avatar_service(user_id=auth.user_id, avatar=avatar, db=db)
    return envelope(user, "avatar updated successfully")


@router.patch("/update-cover-photo")
async def update_cover_photo(
    coverimage: Optional[UploadFile] = File(None),
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    user = await update_cover_image_service(user_id=auth.user_id, cover_image=coverimage, db=db)
    return envelope(user, "cover image updated successfully")


@router.get("/channel/{username}")
async def get_channel_profile(
    username: str,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    profile = await get_channel_profile_service(username=username, viewer_id=auth.user_id, db=db)
    return envelope(profile, "channel profile fetched successfully")


@router.get("/get-watch-history")
async def get_watch_history(
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    history = await get_watch_history_service(user_id=auth.user_id, db=db)
    return envelope(history, "watch history fetched successfully")


@router.post("/reset-password")
async def password_reset_mail(
    request: PasswordResetMailRequest,
    _rate_limit: None = Depends(rate_limit("users_reset_mail", limit=5, window_seconds=3600)),
    db: AsyncSession = Depends(get_db),
):
    """Email a single-use password reset link."""
    email = await request_password_reset_service(email=request.email, db=db)
    return envelope({}, f"password reset mail has been sent to {email}")


@router.post("/reset-password/{user_id}/{token}")
async def reset_password(
    user_id: str,
    token: str,
    request: ResetPasswordRequest,
    _rate_limit: None = Depends(rate_limit("users_reset_password", limit=10, window_seconds=3600)),
    db: AsyncSession = Depends(get_db),
):
    await reset_password_service(user_id=user_id, token=token, password=request.password, db=db)
    return envelope({}, "password updated successfully")
