"""Channel dashboard: the caller's own videos and aggregate stats."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from routers.auth_scope import AuthContext, get_auth_context
from services.dashboard import get_channel_stats_service, get_channel_videos_service
from services.responses import envelope

router = APIRouter()


@router.get("/videos")
async def get_channel_videos(
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    videos = await get_channel_videos_service(owner_id=auth.user_id, db=db)
    return envelope(videos, "channel videos fetched successfully")


@router.get("/stats")
async def get_channel_stats(
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    stats = await get_channel_stats_service(owner_id=auth.user_id, db=db)
    return envelope(stats, "channel stats fetched successfully")
