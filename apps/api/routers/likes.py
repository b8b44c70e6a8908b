"""Like toggles for videos, comments and tweets."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from routers.auth_scope import AuthContext, get_auth_context
from services.likes import get_liked_video_ids_service, toggle_like_service
from services.responses import envelope

router = APIRouter()


async def _toggle(target: str, target_id: str, auth: AuthContext, db: AsyncSession):
    result = await toggle_like_service(target=target, target_id=target_id, user_id=auth.user_id, db=db)
    message = f"{target} liked successfully" if result["liked"] else f"{target} unliked successfully"
    return envelope(result, message)


@router.post("/toggle/v/{video_id}")
async def toggle_video_like(
    video_id: str,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    return await _toggle("video", video_id, auth, db)


@router.post("/toggle/c/{comment_id}")
async def toggle_comment_like(
    comment_id: str,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    return await _toggle("comment", comment_id, auth, db)


@router.post("/toggle/t/{tweet_id}")
async def toggle_tweet_like(
    tweet_id: str,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    return await _toggle("tweet", tweet_id, auth, db)


@router.get("/videos")
async def get_liked_videos(
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    video_ids = await get_liked_video_ids_service(user_id=auth.user_id, db=db)
    return envelope(video_ids, "liked videos fetched successfully")
