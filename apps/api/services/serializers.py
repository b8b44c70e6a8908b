"""Row-to-payload serializers shared by the service modules."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from models.comment import Comment
from models.playlist import Playlist
from models.tweet import Tweet
from models.user import User
from models.video import Video
from services.responses import iso


def serialize_user(user: User) -> Dict[str, Any]:
    """Public account fields; the password hash and refresh token never leave here."""
    return {
        "id": user.id,
        "username": user.username,
        "email": user.email,
        "fullname": user.fullname,
        "avatar": user.avatar,
        "cover_image": user.cover_image or "",
        "created_at": iso(user.created_at),
        "updated_at": iso(user.updated_at),
    }


def user_summary(user: Optional[User]) -> Optional[Dict[str, Any]]:
    if user is None:
        return None
    return {
        "id": user.id,
        "username": user.username,
        "fullname": user.fullname,
        "avatar": user.avatar,
    }


def serialize_video(video: Video, owner: Optional[User] = None) -> Dict[str, Any]:
    payload = {
        "id": video.id,
        "video_file": video.video_file,
        "thumbnail": video.thumbnail,
        "owner_id": video.owner_id,
        "title": video.title,
        "description": video.description,
        "duration": float(video.duration or 0),
        "views": int(video.views or 0),
        "is_published": bool(video.is_published),
        "created_at": iso(video.created_at),
        "updated_at": iso(video.updated_at),
    }
    if owner is not None:
        payload["owner"] = user_summary(owner)
    return payload


def serialize_comment(comment: Comment, owner: Optional[User] = None) -> Dict[str, Any]:
    payload = {
        "id": comment.id,
        "content": comment.content,
        "video_id": comment.video_id,
        "owner_id": comment.owner_id,
        "created_at": iso(comment.created_at),
        "updated_at": iso(comment.updated_at),
    }
    if owner is not None:
        payload["owner"] = user_summary(owner)
    return payload


def serialize_tweet(tweet: Tweet, owner: Optional[User] = None) -> Dict[str, Any]:
    payload = {
        "id": tweet.id,
        "content": tweet.content,
        "owner_id": tweet.owner_id,
        "created_at": iso(tweet.created_at),
        "updated_at": iso(tweet.updated_at),
    }
    if owner is not None:
        payload["owner"] = {"id": owner.id, "username": owner.username}
    return payload


def serialize_playlist(playlist: Playlist, video_ids: List[str]) -> Dict[str, Any]:
    return {
        "id": playlist.id,
        "name": playlist.name,
        "description": playlist.description,
        "owner_id": playlist.owner_id,
        "videos": list(video_ids),
        "created_at": iso(playlist.created_at),
        "updated_at": iso(playlist.updated_at),
    }
