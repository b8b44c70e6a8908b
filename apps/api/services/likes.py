"""Like toggles for videos, comments and tweets."""

from __future__ import annotations

import logging
from typing import Any, Dict, List

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from models.comment import Comment
from models.like import Like
from models.tweet import Tweet
from models.video import Video
from services.errors import NotFoundError, require_text
from services.toggles import toggle_relation

logger = logging.getLogger(__name__)

LIKE_TARGETS = {
    "video": (Video, "video_id"),
    "comment": (Comment, "comment_id"),
    "tweet": (Tweet, "tweet_id"),
}


async def toggle_like_service(*, target: str, target_id: str, user_id: str, db: AsyncSession) -> Dict[str, Any]:
    model, column = LIKE_TARGETS[target]
    target_id = require_text(target_id, f"{target}Id is required")

    exists_result = await db.execute(select(model.id).where(model.id == target_id))
    if exists_result.scalar_one_or_none() is None:
        raise NotFoundError(f"{target} not found")

    liked = await toggle_relation(db, Like, {column: target_id, "liked_by": user_id})
    logger.info("like_toggled user=%s %s=%s liked=%s", user_id, column, target_id, liked)
    return {column: target_id, "liked": liked}


async def get_liked_video_ids_service(*, user_id: str, db: AsyncSession) -> List[str]:
    result = await db.execute(
        select(Like.video_id)
        .where(Like.liked_by == user_id, Like.video_id.is_not(None))
        .order_by(Like.created_at.desc(), Like.id.asc())
    )
    return [video_id for video_id in result.scalars().all()]
