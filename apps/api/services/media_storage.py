"""
Cloudinary media storage client for avatars, covers, thumbnails and videos.
"""

from __future__ import annotations

import asyncio
import logging
import re
from typing import Any, Dict, Optional, Tuple
from urllib.parse import urlparse

import cloudinary
import cloudinary.uploader
from fastapi import UploadFile

from config import media_storage_configured, settings
from services.errors import UploadError, UpstreamError

logger = logging.getLogger(__name__)

RESOURCE_TYPES = {"image", "video", "raw"}

_VERSION_SEGMENT = re.compile(r"^v\d+$")
_TRANSFORMATION_SEGMENT = re.compile(r"^[a-z]{1,3}_[^/,]+(,[a-z]{1,3}_[^/,]+)*$")
# Parameters whose values are named keywords rather than numbers.
_KEYWORD_PARAMETERS = {"c", "e", "f", "fl", "g", "q", "t"}


def _configure() -> None:
    if not media_storage_configured():
        raise UpstreamError("Media storage is not configured")
    cloudinary.config(
        cloud_name=settings.CLOUDINARY_CLOUD_NAME,
        api_key=settings.CLOUDINARY_API_KEY,
        api_secret=settings.CLOUDINARY_API_SECRET,
        secure=True,
    )


def _is_transformation(segment: str) -> bool:
    """Only unversioned URLs need this; folder names like ``a_folder`` must survive."""
    if not _TRANSFORMATION_SEGMENT.match(segment):
        return False
    if "," in segment:
        return True
    key, _, value = segment.partition("_")
    return value[:1].isdigit() or key in _KEYWORD_PARAMETERS


def parse_media_url(file_url: Optional[str]) -> Tuple[Optional[str], str]:
    """
    Resolve the public id and resource type from a stored delivery URL.

    Cloudinary URLs look like
    ``https://res.cloudinary.com/<cloud>/<type>/upload/[<transforms>/][v<n>/]<public_id>.<ext>``.
    Non-Cloudinary URLs fall back to the last path segment.
    """
    path = urlparse(str(file_url or "")).path.strip("/")
    if not path:
        return None, "image"

    segments = path.split("/")
    resource_type = "image"
    if "upload" in segments:
        upload_index = segments.index("upload")
        if upload_index > 0 and segments[upload_index - 1] in RESOURCE_TYPES:
            resource_type = segments[upload_index - 1]
        remainder = segments[upload_index + 1:]
        version_index = next(
            (index for index, segment in enumerate(remainder[:-1]) if _VERSION_SEGMENT.match(segment)),
            None,
        )
        if version_index is not None:
            remainder = remainder[version_index + 1:]
        else:
            while len(remainder) > 1 and _is_transformation(remainder[0]):
                remainder = remainder[1:]
    else:
        remainder = segments[-1:]

    if not remainder:
        return None, resource_type
    public_path = "/".join(remainder)
    public_id = public_path.rsplit(".", 1)[0] if "." in remainder[-1] else public_path
    return public_id or None, resource_type


def derive_video_thumbnail(video_url: str) -> str:
    """Return the first-frame still Cloudinary serves for a video URL."""
    base, dot, _ext = video_url.rpartition(".")
    if not dot or "/" in _ext:
        return f"{video_url}.jpg"
    return f"{base}.jpg"


async def upload_media(upload: UploadFile, *, folder: str = "vidshare") -> Dict[str, Any]:
    """Upload a file and return its delivery URL, public id and duration."""
    _configure()
    await upload.seek(0)
    try:
        result = await asyncio.to_thread(
            cloudinary.uploader.upload,
            upload.file,
            resource_type="auto",
            folder=folder,
        )
    except Exception as exc:
        logger.warning("Media upload failed for %s: %s", upload.filename, exc)
        raise UploadError(f"{upload.filename or 'file'} could not be uploaded") from exc

    url = result.get("secure_url") or result.get("url")
    if not url:
        raise UploadError(f"{upload.filename or 'file'} could not be uploaded")
    return {
        "url": url,
        "public_id": result.get("public_id"),
        "resource_type": result.get("resource_type", "image"),
        "duration": float(result.get("duration") or 0),
    }


async def delete_media(public_id: str, resource_type: str = "image") -> str:
    """Destroy an asset and return the provider result string."""
    _configure()
    try:
        result = await asyncio.to_thread(
            cloudinary.uploader.destroy,
            public_id,
            resource_type=resource_type,
        )
    except Exception as exc:
        raise UpstreamError(f"Media asset {public_id} could not be deleted") from exc
    return str((result or {}).get("result", ""))


async def delete_media_url_quietly(file_url: Optional[str]) -> bool:
    """Best-effort delete of a replaced asset; failures are logged, not raised."""
    public_id, resource_type = parse_media_url(file_url)
    if not public_id:
        return False
    try:
        outcome = await delete_media(public_id, resource_type)
    except UpstreamError as exc:
        logger.warning("Leaked media asset %s (%s): %s", public_id, resource_type, exc.detail)
        return False
    if outcome != "ok":
        logger.warning("Leaked media asset %s (%s): provider returned %s", public_id, resource_type, outcome)
        return False
    return True
