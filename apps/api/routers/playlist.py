"""Playlist router."""

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from routers.auth_scope import AuthContext, get_auth_context
from services.playlists import (
    PlaylistPatch,
    add_video_to_playlist_service,
    create_playlist_service,
    delete_playlist_service,
    get_playlist_service,
    list_user_playlists_service,
    remove_video_from_playlist_service,
    update_playlist_service,
)
from services.responses import envelope

router = APIRouter()


class PlaylistRequest(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None


@router.post("/", status_code=201)
async def create_playlist(
    request: PlaylistRequest,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    playlist = await create_playlist_service(
        owner_id=auth.user_id,
        name=request.name,
        description=request.description,
        db=db,
    )
    return envelope(playlist, "playlist created successfully", status=201)


@router.get("/user/{user_id}")
async def list_user_playlists(
    user_id: str,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    playlists = await list_user_playlists_service(user_id=user_id, db=db)
    return envelope(playlists, "playlists fetched successfully")


@router.patch("/add/{video_id}/{playlist_id}")
async def add_video_to_playlist(
    video_id: str,
    playlist_id: str,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    playlist = await add_video_to_playlist_service(
        playlist_id=playlist_id,
        video_id=video_id,
        user_id=auth.user_id,
        db=db,
    )
    return envelope(playlist, "video added to playlist successfully")


@router.patch("/remove/{video_id}/{playlist_id}")
async def remove_video_from_playlist(
    video_id: str,
    playlist_id: str,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    playlist = await remove_video_from_playlist_service(
        playlist_id=playlist_id,
        video_id=video_id,
        user_id=auth.user_id,
        db=db,
    )
    return envelope(playlist, "video removed from playlist successfully")


@router.get("/{playlist_id}")
async def get_playlist(
    playlist_id: str,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    playlist = await get_playlist_service(playlist_id=playlist_id, db=db)
    return envelope(playlist, "playlist fetched successfully")


@router.patch("/{playlist_id}")
async def update_playlist(
    playlist_id: str,
    request: PlaylistRequest,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    playlist = await update_playlist_service(
        playlist_id=playlist_id,
        user_id=auth.user_id,
        patch=PlaylistPatch(name=request.name, description=request.description),
        db=db,
    )
    return envelope(playlist, "playlist updated successfully")


@router.delete("/{playlist_id}")
async def delete_playlist(
    playlist_id: str,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    await delete_playlist_service(playlist_id=playlist_id, user_id=auth.user_id, db=db)
    return envelope({}, "playlist deleted successfully")
