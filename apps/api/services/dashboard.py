"""Creator dashboard aggregates."""

from __future__ import annotations

from typing import Any, Dict, List

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from models.like import Like
from models.subscription import Subscription
from models.video import Video
from services.serializers import serialize_video


async def get_channel_videos_service(*, owner_id: str, db: AsyncSession) -> List[Dict[str, Any]]:
    result = await db.execute(
        select(Video).where(Video.owner_id == owner_id).order_by(Video.created_at.desc(), Video.id.asc())
    )
    return [serialize_video(video) for video in result.scalars().all()]


async def get_channel_stats_service(*, owner_id: str, db: AsyncSession) -> Dict[str, Any]:
    video_totals = await db.execute(
        select(func.count(Video.id), func.coalesce(func.sum(Video.views), 0)).where(Video.owner_id == owner_id)
    )
    total_videos, total_views = video_totals.one()

    total_subscribers = await db.scalar(
        select(func.count(Subscription.id)).where(Subscription.channel_id == owner_id)
    )
    total_likes = await db.scalar(
        select(func.count(Like.id))
        .join(Video, Video.id == Like.video_id)
        .where(Video.owner_id == owner_id)
    )
    return {
        "total_videos": int(total_videos or 0),
        "total_views": int(total_views or 0),
        "total_subscribers": int(total_subscribers or 0),
        "total_likes": int(total_likes or 0),
    }
