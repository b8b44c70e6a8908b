"""Account, session, channel-profile and password-reset services."""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from fastapi import UploadFile
from sqlalchemy import delete, exists, func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from config import settings
from models.password_reset_token import PasswordResetToken
from models.subscription import Subscription
from models.user import User
from models.video import Video
from models.watch_history import WatchHistoryEntry
from services.errors import (
    AuthError,
    ConflictError,
    NotFoundError,
    ValidationError,
    require_text,
)
from services.identity import normalize_email, normalize_username, validate_email, validate_username
from services.mailer import password_reset_body, send_mail
from services.media_storage import delete_media_url_quietly, upload_media
from services.passwords import hash_password, verify_password
from services.serializers import serialize_user, serialize_video
from services.session_token import create_access_token, create_refresh_token, decode_refresh_token

logger = logging.getLogger(__name__)


@dataclass
class AccountDetailsPatch:
    """Optional account fields; only the ones supplied are written."""

    fullname: Optional[str] = None
    username: Optional[str] = None
    email: Optional[str] = None

    def changes(self) -> Dict[str, str]:
        updates: Dict[str, str] = {}
        if self.fullname is not None and self.fullname.strip():
            updates["fullname"] = self.fullname.strip()
        if self.username is not None and self.username.strip():
            updates["username"] = validate_username(self.username)
        if self.email is not None and self.email.strip():
            updates["email"] = validate_email(self.email)
        return updates


async def get_user_or_404(db: AsyncSession, user_id: str) -> User:
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if not user:
        raise NotFoundError("user not found")
    return user


async def get_authenticated_user(db: AsyncSession, user_id: str) -> User:
    """Resolve the token subject; a vanished account is an auth failure, not a 404."""
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if not user:
        raise AuthError("Invalid access token")
    return user


async def _issue_token_pair(user: User, db: AsyncSession) -> Dict[str, Any]:
    access = create_access_token(user.id, email=user.email, username=user.username)
    refresh = create_refresh_token(user.id)
    user.refresh_token = refresh["token"]
    await db.commit()
    await db.refresh(user)
    return {
        "access_token": access["token"],
        "access_token_expires_at": access["expires_at"],
        "refresh_token": refresh["token"],
        "refresh_token_expires_at": refresh["expires_at"],
    }


async def register_user_service(
    *,
    username: Optional[str],
    email: Optional[str],
    fullname: Optional[str],
    password: Optional[str],
    avatar: Optional[UploadFile],
    cover_image: Optional[UploadFile],
    db: AsyncSession,
) -> Dict[str, Any]:
    if any(not str(field or "").strip() for field in (username, email, fullname, password)):
        raise ValidationError("All fields are required")

    clean_username = validate_username(username)
    clean_email = validate_email(email)

    existing = await db.execute(
        select(User.id).where(or_(User.username == clean_username, User.email == clean_email))
    )
    if existing.first():
        raise ConflictError("User already exists")

    if avatar is None or not avatar.filename:
        raise ValidationError("avatar image is required")

    avatar_asset = await upload_media(avatar, folder="vidshare/avatars")
    cover_url = ""
    if cover_image is not None and cover_image.filename:
        cover_asset = await upload_media(cover_image, folder="vidshare/covers")
        cover_url = cover_asset["url"]

    user = User(
        username=clean_username,
        email=clean_email,
        fullname=str(fullname).strip(),
        avatar=avatar_asset["url"],
        cover_image=cover_url,
        password_hash=hash_password(str(password)),
    )
    db.add(user)
    try:
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        await delete_media_url_quietly(avatar_asset["url"])
        if cover_url:
            await delete_media_url_quietly(cover_url)
        raise ConflictError("User already exists") from exc
    await db.refresh(user)

    logger.info("user_registered user=%s username=%s", user.id, user.username)
    return serialize_user(user)


async def login_user_service(
    *,
    email: Optional[str],
    username: Optional[str],
    password: Optional[str],
    db: AsyncSession,
) -> Dict[str, Any]:
    clean_email = normalize_email(email)
    clean_username = normalize_username(username)
    if clean_email and clean_username:
        raise ValidationError("provide either email or username, not both")
    if not clean_email and not clean_username:
        raise ValidationError("email or username is required")
    if not str(password or ""):
        raise ValidationError("password is required")

    if clean_email:
        query = select(User).where(User.email == clean_email)
    else:
        query = select(User).where(User.username == clean_username)
    result = await db.execute(query)
    user = result.scalar_one_or_none()
    if not user:
        raise NotFoundError("user not found")

    if not verify_password(str(password), user.password_hash):
        raise AuthError("password is incorrect")

    tokens = await _issue_token_pair(user, db)
    logger.info("user_login user=%s", user.id)
    return {"user": serialize_user(user), **tokens}


async def logout_user_service(*, user_id: str, db: AsyncSession) -> None:
    user = await get_authenticated_user(db, user_id)
    user.refresh_token = None
    await db.commit()


async def refresh_tokens_service(*, refresh_token: Optional[str], db: AsyncSession) -> Dict[str, Any]:
    incoming = str(refresh_token or "").strip()
    if not incoming:
        raise AuthError("refresh token is required")

    try:
        payload = decode_refresh_token(incoming)
    except ValueError as exc:
        raise AuthError(str(exc)) from exc

    result = await db.execute(select(User).where(User.id == str(payload["sub"])))
    user = result.scalar_one_or_none()
    if not user:
        raise AuthError("unauthorized access")
    if not user.refresh_token or not secrets.compare_digest(incoming, user.refresh_token):
        raise AuthError("refresh token is expired or already used")

    return await _issue_token_pair(user, db)


async def update_password_service(
    *,
    user_id: str,
    old_password: Optional[str],
    new_password: Optional[str],
    db: AsyncSession,
) -> None:
    require_text(old_password, "old password is required")
    require_text(new_password, "new password is required")

    user = await get_authenticated_user(db, user_id)
    if not verify_password(str(old_password), user.password_hash):
        raise ValidationError("invalid old password")

    user.password_hash = hash_password(str(new_password))
    await db.commit()
    logger.info("password_updated user=%s", user.id)


async def get_current_user_service(*, user_id: str, db: AsyncSession) -> Dict[str, Any]:
    user = await get_authenticated_user(db, user_id)
    return serialize_user(user)


async def update_account_details_service(
    *,
    user_id: str,
    patch: AccountDetailsPatch,
    db: AsyncSession,
) -> Dict[str, Any]:
    updates = patch.changes()
    if not updates:
        raise ValidationError("provide at least one of fullname, username or email")

    user = await get_authenticated_user(db, user_id)

    clashes = []
    if "username" in updates and updates["username"] != user.username:
        clashes.append(User.username == updates["username"])
    if "email" in updates and updates["email"] != user.email:
        clashes.append(User.email == updates["email"])
    if clashes:
        taken = await db.execute(select(User.id).where(User.id != user.id, or_(*clashes)))
        if taken.first():
            raise ConflictError("username or email is already taken")

    for field, value in updates.items():
        setattr(user, field, value)
    try:
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        raise ConflictError("username or email is already taken") from exc
    await db.refresh(user)
    return serialize_user(user)


async def _replace_user_image(
    *,
    user_id: str,
    upload: Optional[UploadFile],
    field: str,
    folder: str,
    missing_message: str,
    db: AsyncSession,
) -> Dict[str, Any]:
    if upload is None or not upload.filename:
        raise ValidationError(missing_message)

    user = await get_authenticated_user(db, user_id)
    asset = await upload_media(upload, folder=folder)

    previous_url = getattr(user, field)
    setattr(user, field, asset["url"])
    await db.commit()
    await db.refresh(user)

    if previous_url:
        await delete_media_url_quietly(previous_url)
    return serialize_user(user)


async def update_avatar_service(*, user_id: str, avatar: Optional[UploadFile], db: AsyncSession) -> Dict[str, Any]:
    return await _replace_user_image(
        user_id=user_id,
        upload=avatar,
        field="avatar",
        folder="vidshare/avatars",
        missing_message="avatar is missing",
        db=db,
    )


async def update_cover_image_service(
    *,
    user_id: str,
    cover_image: Optional[UploadFile],
    db: AsyncSession,
) -> Dict[str, Any]:
    return await _replace_user_image(
        user_id=user_id,
        upload=cover_image,
        field="cover_image",
        folder="vidshare/covers",
        missing_message="cover image is missing",
        db=db,
    )


async def get_channel_profile_service(*, username: str, viewer_id: str, db: AsyncSession) -> Dict[str, Any]:
    clean_username = normalize_username(username)
    if not clean_username:
        raise ValidationError("username is required")

    subscribers_count = (
        select(func.count(Subscription.id))
        .where(Subscription.channel_id == User.id)
        .scalar_subquery()
    )
    subscribed_to_count = (
        select(func.count(Subscription.id))
        .where(Subscription.subscriber_id == User.id)
        .scalar_subquery()
    )
    is_subscribed = exists().where(
        Subscription.channel_id == User.id,
        Subscription.subscriber_id == viewer_id,
    )
    result = await db.execute(
        select(
            User,
            subscribers_count.label("subscribers_count"),
            subscribed_to_count.label("channel_subscribed_to_count"),
            is_subscribed.label("is_subscribed"),
        ).where(User.username == clean_username)
    )
    row = result.first()
    if not row:
        raise NotFoundError("channel not found")

    channel = row[0]
    return {
        "id": channel.id,
        "fullname": channel.fullname,
        "username": channel.username,
        "avatar": channel.avatar,
        "cover_image": channel.cover_image or "",
        "subscribers_count": int(row.subscribers_count or 0),
        "channel_subscribed_to_count": int(row.channel_subscribed_to_count or 0),
        "is_subscribed": bool(row.is_subscribed),
    }


async def get_watch_history_service(*, user_id: str, db: AsyncSession) -> List[Dict[str, Any]]:
    await get_authenticated_user(db, user_id)
    result = await db.execute(
        select(Video, User)
        .join(WatchHistoryEntry, WatchHistoryEntry.video_id == Video.id)
        .join(User, User.id == Video.owner_id)
        .where(WatchHistoryEntry.user_id == user_id)
        .order_by(WatchHistoryEntry.position.asc())
    )
    return [serialize_video(video, owner) for video, owner in result.all()]


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


async def request_password_reset_service(*, email: Optional[str], db: AsyncSession) -> str:
    clean_email = normalize_email(email)
    if not clean_email:
        raise ValidationError("email is required")

    result = await db.execute(select(User).where(User.email == clean_email))
    user = result.scalar_one_or_none()
    if not user:
        raise NotFoundError("user not found")

    now = datetime.now(timezone.utc)
    await db.execute(delete(PasswordResetToken).where(PasswordResetToken.expires_at <= now))

    token = secrets.token_hex(32)
    row = PasswordResetToken(
        user_id=user.id,
        token=token,
        expires_at=now + timedelta(seconds=max(int(settings.PASSWORD_RESET_TTL_SECONDS), 60)),
    )
    db.add(row)
    await db.commit()

    reset_link = f"{settings.BASE_URL.rstrip('/')}/password-reset/{user.id}/{token}"
    try:
        await send_mail(user.email, "Password reset link", password_reset_body(reset_link))
    except Exception:
        await db.execute(delete(PasswordResetToken).where(PasswordResetToken.token == token))
        await db.commit()
        raise

    logger.info("password_reset_requested user=%s", user.id)
    return user.email


async def reset_password_service(
    *,
    user_id: str,
    token: str,
    password: Optional[str],
    db: AsyncSession,
) -> None:
    if not str(user_id or "").strip() or not str(token or "").strip():
        raise ValidationError("userId and token are required")
    new_password = require_text(password, "password is required")

    user = await get_user_or_404(db, user_id)

    result = await db.execute(
        select(PasswordResetToken).where(
            PasswordResetToken.user_id == user.id,
            PasswordResetToken.token == token,
        )
    )
    reset_token = result.scalar_one_or_none()
    if not reset_token:
        raise NotFoundError("token not found or invalid token")

    expires_at = _as_utc(reset_token.expires_at)
    if expires_at is None or expires_at <= datetime.now(timezone.utc):
        await db.delete(reset_token)
        await db.commit()
        raise NotFoundError("token not found or invalid token")

    user.password_hash = hash_password(new_password)
    user.refresh_token = None
    await db.delete(reset_token)
    await db.commit()
    logger.info("password_reset_completed user=%s", user.id)
