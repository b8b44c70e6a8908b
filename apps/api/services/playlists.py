"""Playlist services with ordered, duplicate-free video membership."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from models.playlist import Playlist, PlaylistVideo
from services.errors import ConflictError, NotFoundError, ValidationError, ensure_owner, require_text
from services.serializers import serialize_playlist
from services.toggles import insert_if_absent
from services.users import get_user_or_404
from services.videos import get_video_or_404

logger = logging.getLogger(__name__)


@dataclass
class PlaylistPatch:
    """Optional playlist fields; unset or blank fields keep their stored value."""

    name: Optional[str] = None
    description: Optional[str] = None

    def changes(self) -> Dict[str, str]:
        updates: Dict[str, str] = {}
        if self.name is not None and self.name.strip():
            updates["name"] = self.name.strip()
        if self.description is not None and self.description.strip():
            updates["description"] = self.description.strip()
        return updates


async def _get_playlist_or_404(db: AsyncSession, playlist_id: str) -> Playlist:
    result = await db.execute(select(Playlist).where(Playlist.id == playlist_id))
    playlist = result.scalar_one_or_none()
    if not playlist:
        raise NotFoundError("playlist not found")
    return playlist


async def _video_ids(db: AsyncSession, playlist_id: str) -> List[str]:
    result = await db.execute(
        select(PlaylistVideo.video_id)
        .where(PlaylistVideo.playlist_id == playlist_id)
        .order_by(PlaylistVideo.position.asc())
    )
    return list(result.scalars().all())


async def _serialize(db: AsyncSession, playlist: Playlist) -> Dict[str, Any]:
    return serialize_playlist(playlist, await _video_ids(db, playlist.id))


async def create_playlist_service(
    *,
    owner_id: str,
    name: Optional[str],
    description: Optional[str],
    db: AsyncSession,
) -> Dict[str, Any]:
    if not str(name or "").strip() or not str(description or "").strip():
        raise ValidationError("name and description are required")

    playlist = Playlist(name=str(name).strip(), description=str(description).strip(), owner_id=owner_id)
    db.add(playlist)
    await db.commit()
    await db.refresh(playlist)
    return serialize_playlist(playlist, [])


async def list_user_playlists_service(*, user_id: str, db: AsyncSession) -> List[Dict[str, Any]]:
    await get_user_or_404(db, user_id)
    result = await db.execute(
        select(Playlist).where(Playlist.owner_id == user_id).order_by(Playlist.created_at.desc(), Playlist.id.asc())
    )
    playlists = result.scalars().all()
    return [await _serialize(db, playlist) for playlist in playlists]


async def get_playlist_service(*, playlist_id: str, db: AsyncSession) -> Dict[str, Any]:
    playlist = await _get_playlist_or_404(db, playlist_id)
    return await _serialize(db, playlist)


async def add_video_to_playlist_service(
    *,
    playlist_id: str,
    video_id: str,
    user_id: str,
    db: AsyncSession,
) -> Dict[str, Any]:
    video = await get_video_or_404(db, video_id)
    playlist = await _get_playlist_or_404(db, playlist_id)
    ensure_owner(playlist.owner_id, user_id, "you are not the owner of this playlist")

    next_position = await db.scalar(
        select(func.coalesce(func.max(PlaylistVideo.position), 0) + 1).where(
            PlaylistVideo.playlist_id == playlist.id
        )
    )
    added = await insert_if_absent(
        db,
        PlaylistVideo(playlist_id=playlist.id, video_id=video.id, position=int(next_position or 1)),
    )
    if not added:
        raise ConflictError("video already in playlist")

    await db.refresh(playlist)
    return await _serialize(db, playlist)


async def remove_video_from_playlist_service(
    *,
    playlist_id: str,
    video_id: str,
    user_id: str,
    db: AsyncSession,
) -> Dict[str, Any]:
    video = await get_video_or_404(db, video_id)
    playlist = await _get_playlist_or_404(db, playlist_id)
    ensure_owner(playlist.owner_id, user_id, "you are not the owner of this playlist")

    result = await db.execute(
        delete(PlaylistVideo).where(
            PlaylistVideo.playlist_id == playlist.id,
            PlaylistVideo.video_id == video.id,
        )
    )
    if not result.rowcount:
        raise NotFoundError("video not in playlist")
    await db.commit()
    await db.refresh(playlist)
    return await _serialize(db, playlist)


async def update_playlist_service(
    *,
    playlist_id: str,
    user_id: str,
    patch: PlaylistPatch,
    db: AsyncSession,
) -> Dict[str, Any]:
    updates = patch.changes()
    if not updates:
        raise ValidationError("provide at least one of name or description")

    playlist = await _get_playlist_or_404(db, playlist_id)
    ensure_owner(playlist.owner_id, user_id, "you are not the owner of this playlist")

    for field, value in updates.items():
        setattr(playlist, field, value)
    await db.commit()
    await db.refresh(playlist)
    return await _serialize(db, playlist)


async def delete_playlist_service(*, playlist_id: str, user_id: str, db: AsyncSession) -> None:
    playlist_id = require_text(playlist_id, "playlistId is required")
    playlist = await _get_playlist_or_404(db, playlist_id)
    ensure_owner(playlist.owner_id, user_id, "you are not the owner of this playlist")

    await db.execute(delete(PlaylistVideo).where(PlaylistVideo.playlist_id == playlist.id))
    await db.execute(delete(Playlist).where(Playlist.id == playlist.id))
    await db.commit()
    logger.info("playlist_deleted playlist=%s owner=%s", playlist_id, user_id)
