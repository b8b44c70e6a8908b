"""Video comment services."""

from __future__ import annotations

from typing import Any, Dict, Optional

from sqlalchemy import delete, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from models.comment import Comment
from models.like import Like
from models.user import User
from services.errors import NotFoundError, ensure_owner, require_text
from services.serializers import serialize_comment
from services.videos import get_video_or_404


async def _get_comment_or_404(db: AsyncSession, comment_id: str) -> Comment:
    result = await db.execute(select(Comment).where(Comment.id == comment_id))
    comment = result.scalar_one_or_none()
    if not comment:
        raise NotFoundError("comment not found")
    return comment


async def list_video_comments_service(
    *,
    video_id: str,
    page: int = 1,
    limit: int = 10,
    db: AsyncSession,
) -> Dict[str, Any]:
    page = max(int(page or 1), 1)
    limit = max(1, min(int(limit or 10), 100))
    await get_video_or_404(db, video_id)

    total_count = await db.scalar(select(func.count(Comment.id)).where(Comment.video_id == video_id))
    result = await db.execute(
        select(Comment, User)
        .join(User, User.id == Comment.owner_id)
        .where(Comment.video_id == video_id)
        .order_by(Comment.created_at.desc(), Comment.id.asc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    return {
        "comments": [serialize_comment(comment, owner) for comment, owner in result.all()],
        "total_count": int(total_count or 0),
        "page": page,
        "limit": limit,
    }


async def add_comment_service(
    *,
    video_id: str,
    user_id: str,
    content: Optional[str],
    db: AsyncSession,
) -> Dict[str, Any]:
    text = require_text(content, "content is required")
    video = await get_video_or_404(db, video_id)

    comment = Comment(content=text, video_id=video.id, owner_id=user_id)
    db.add(comment)
    await db.commit()
    await db.refresh(comment)
    return serialize_comment(comment)


async def update_comment_service(
    *,
    comment_id: Optional[str],
    user_id: str,
    content: Optional[str],
    db: AsyncSession,
) -> Dict[str, Any]:
    comment_id = require_text(comment_id, "commentId is required")
    text = require_text(content, "content is required")

    comment = await _get_comment_or_404(db, comment_id)
    ensure_owner(comment.owner_id, user_id, "you are not the owner of this comment")

    comment.content = text
    await db.commit()
    await db.refresh(comment)
    return serialize_comment(comment)


async def delete_comment_service(*, comment_id: Optional[str], user_id: str, db: AsyncSession) -> Dict[str, Any]:
    comment_id = require_text(comment_id, "commentId is required")

    comment = await _get_comment_or_404(db, comment_id)
    ensure_owner(comment.owner_id, user_id, "you are not the owner of this comment")

    payload = serialize_comment(comment)
    await db.execute(delete(Like).where(Like.comment_id == comment.id))
    await db.delete(comment)
    await db.commit()
    return payload
