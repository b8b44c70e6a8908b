"""Video router: listing, publishing, viewing, editing and deleting videos."""

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from routers.auth_scope import AuthContext, get_auth_context
from routers.rate_limit import rate_limit
from services.responses import envelope
from services.videos import (
    delete_video_service,
    get_video_service,
    list_videos_service,
    publish_video_service,
    update_video_service,
)

router = APIRouter()


@router.get("/")
async def list_videos(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    query: Optional[str] = Query(default=None),
    sort_by: Optional[str] = Query(default=None, alias="sortBy"),
    sort_type: Optional[str] = Query(default=None, alias="sortType"),
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    """Paginated video search, newest first unless a sort is given."""
    result = await list_videos_service(
        page=page,
        limit=limit,
        query=query,
        sort_by=sort_by,
        sort_type=sort_type,
        db=db,
    )
    return envelope(result, "videos fetched successfully")


@router.post("/", status_code=201)
async def publish_video(
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    videofile: Optional[UploadFile] = File(None),
    thumbnail: Optional[UploadFile] = File(None),
    auth: AuthContext = Depends(get_auth_context),
    _rate_limit: None = Depends(rate_limit("video_publish", limit=30, window_seconds=3600)),
    db: AsyncSession = Depends(get_db),
):
    video = await publish_video_service(
        owner_id=auth.user_id,
        title=title,
        description=description,
        video_file=videofile,
        thumbnail=thumbnail,
        db=db,
    )
    return envelope(video, "video published successfully", status=201)


@router.get("/{video_id}")
async def get_video(
    video_id: str,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    """Fetch a video; a viewer's first fetch counts as a view."""
    video = await get_video_service(video_id=video_id, viewer_id=auth.user_id, db=db)
    return envelope(video, "video fetched successfully")


@router.patch("/{video_id}")
async def update_video(
    video_id: str,
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    thumbnail: Optional[UploadFile] = File(None),
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    video = await update_video_service(
        video_id=video_id,
        user_id=auth.user_id,
        title=title,
        description=description,
        thumbnail=thumbnail,
        db=db,
    )
    return envelope(video, "video updated successfully")


@router.delete("/{video_id}")
async def delete_video(
    video_id: str,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    await delete_video_service(video_id=video_id, user_id=auth.user_id, db=db)
    return envelope({}, "video deleted successfully")
