"""Video publishing, search and view-tracking services."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import UploadFile
from sqlalchemy import delete, func, or_, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from models.comment import Comment
from models.like import Like
from models.playlist import PlaylistVideo
from models.user import User
from models.video import Video
from models.watch_history import WatchHistoryEntry
from services.errors import NotFoundError, UpstreamError, ValidationError, ensure_owner, require_text
from services.media_storage import (
    delete_media,
    delete_media_url_quietly,
    derive_video_thumbnail,
    parse_media_url,
    upload_media,
)
from services.serializers import serialize_video

logger = logging.getLogger(__name__)

SORT_FIELDS = {
    "created_at": Video.created_at,
    "createdAt": Video.created_at,
    "updated_at": Video.updated_at,
    "updatedAt": Video.updated_at,
    "title": Video.title,
    "views": Video.views,
    "duration": Video.duration,
}
MAX_PAGE_SIZE = 100


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


async def get_video_or_404(db: AsyncSession, video_id: str) -> Video:
    result = await db.execute(select(Video).where(Video.id == video_id))
    video = result.scalar_one_or_none()
    if not video:
        raise NotFoundError("video not found")
    return video


async def list_videos_service(
    *,
    page: int = 1,
    limit: int = 10,
    query: Optional[str] = None,
    sort_by: Optional[str] = None,
    sort_type: Optional[str] = None,
    db: AsyncSession,
) -> Dict[str, Any]:
    page = max(int(page or 1), 1)
    limit = max(1, min(int(limit or 10), MAX_PAGE_SIZE))

    filters = []
    search = str(query or "").strip()
    if search:
        pattern = f"%{_escape_like(search)}%"
        filters.append(
            or_(
                Video.title.ilike(pattern, escape="\\"),
                Video.description.ilike(pattern, escape="\\"),
            )
        )

    if sort_by:
        column = SORT_FIELDS.get(sort_by)
        if column is None:
            raise ValidationError(f"sortBy must be one of {', '.join(sorted(set(SORT_FIELDS)))}")
        direction = str(sort_type or "desc").strip().lower()
        if direction not in {"asc", "desc"}:
            raise ValidationError("sortType must be asc or desc")
        ordering = column.asc() if direction == "asc" else column.desc()
    else:
        ordering = Video.created_at.desc()

    total_count = await db.scalar(select(func.count(Video.id)).where(*filters))

    result = await db.execute(
        select(Video, User)
        .join(User, User.id == Video.owner_id)
        .where(*filters)
        .order_by(ordering, Video.id.asc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    return {
        "videos": [serialize_video(video, owner) for video, owner in result.all()],
        "total_count": int(total_count or 0),
        "page": page,
        "limit": limit,
    }


async def publish_video_service(
    *,
    owner_id: str,
    title: Optional[str],
    description: Optional[str],
    video_file: Optional[UploadFile],
    thumbnail: Optional[UploadFile],
    db: AsyncSession,
) -> Dict[str, Any]:
    if not str(title or "").strip() or not str(description or "").strip():
        raise ValidationError("title and description are required")
    if video_file is None or not video_file.filename:
        raise ValidationError("video file is missing")

    uploaded = await upload_media(video_file, folder="vidshare/videos")
    if thumbnail is not None and thumbnail.filename:
        thumbnail_url = (await upload_media(thumbnail, folder="vidshare/thumbnails"))["url"]
    else:
        thumbnail_url = derive_video_thumbnail(uploaded["url"])

    video = Video(
        owner_id=owner_id,
        video_file=uploaded["url"],
        thumbnail=thumbnail_url,
        title=str(title).strip(),
        description=str(description).strip(),
        duration=uploaded["duration"],
        views=0,
        is_published=True,
    )
    db.add(video)
    await db.commit()
    await db.refresh(video)

    logger.info("video_published video=%s owner=%s", video.id, owner_id)
    return serialize_video(video)


async def _record_first_view(db: AsyncSession, *, user_id: str, video_id: str) -> bool:
    """Append to watch history and bump views together, only on a first view."""
    next_position = await db.scalar(
        select(func.coalesce(func.max(WatchHistoryEntry.position), 0) + 1).where(
            WatchHistoryEntry.user_id == user_id
        )
    )
    db.add(WatchHistoryEntry(user_id=user_id, video_id=video_id, position=int(next_position or 1)))
    try:
        await db.execute(
            update(Video).where(Video.id == video_id).values(views=Video.views + 1)
        )
        await db.commit()
    except IntegrityError:
        await db.rollback()
        return False
    return True


async def get_video_service(*, video_id: str, viewer_id: str, db: AsyncSession) -> Dict[str, Any]:
    video = await get_video_or_404(db, video_id)

    await _record_first_view(db, user_id=viewer_id, video_id=video.id)
    await db.refresh(video)

    owner = await db.get(User, video.owner_id)
    return serialize_video(video, owner)


async def update_video_service(
    *,
    video_id: str,
    user_id: str,
    title: Optional[str],
    description: Optional[str],
    thumbnail: Optional[UploadFile],
    db: AsyncSession,
) -> Dict[str, Any]:
    new_title = str(title or "").strip()
    new_description = str(description or "").strip()
    has_thumbnail = thumbnail is not None and bool(thumbnail.filename)
    if not (new_title or new_description or has_thumbnail):
        raise ValidationError("provide at least one of title, description or thumbnail")

    video = await get_video_or_404(db, video_id)
    ensure_owner(video.owner_id, user_id, "you are not the owner of this video")

    previous_thumbnail = None
    if has_thumbnail:
        asset = await upload_media(thumbnail, folder="vidshare/thumbnails")
        previous_thumbnail = video.thumbnail
        video.thumbnail = asset["url"]
    if new_title:
        video.title = new_title
    if new_description:
        video.description = new_description

    await db.commit()
    await db.refresh(video)

    if previous_thumbnail:
        previous_id, _ = parse_media_url(previous_thumbnail)
        video_public_id, _ = parse_media_url(video.video_file)
        # The derived first-frame thumbnail shares the video's asset.
        if previous_id and previous_id != video_public_id:
            await delete_media_url_quietly(previous_thumbnail)

    return serialize_video(video)


async def delete_video_service(*, video_id: str, user_id: str, db: AsyncSession) -> None:
    require_text(video_id, "videoId is required")
    video = await get_video_or_404(db, video_id)
    ensure_owner(video.owner_id, user_id, "you are not the owner of this video")

    video_public_id, _ = parse_media_url(video.video_file)
    thumbnail_public_id, thumbnail_resource_type = parse_media_url(video.thumbnail)

    outcomes = []
    if video_public_id:
        outcomes.append(await delete_media(video_public_id, "video"))
    if thumbnail_public_id and thumbnail_public_id != video_public_id:
        outcomes.append(await delete_media(thumbnail_public_id, thumbnail_resource_type))
    if any(outcome != "ok" for outcome in outcomes):
        raise UpstreamError("media files not properly deleted")

    comment_ids = select(Comment.id).where(Comment.video_id == video.id)
    await db.execute(
        delete(Like)
        .where(or_(Like.video_id == video.id, Like.comment_id.in_(comment_ids)))
        .execution_options(synchronize_session=False)
    )
    await db.execute(delete(Comment).where(Comment.video_id == video.id))
    await db.execute(delete(WatchHistoryEntry).where(WatchHistoryEntry.video_id == video.id))
    await db.execute(delete(PlaylistVideo).where(PlaylistVideo.video_id == video.id))
    await db.execute(delete(Video).where(Video.id == video.id))
    await db.commit()

    logger.info("video_deleted video=%s owner=%s", video_id, user_id)
