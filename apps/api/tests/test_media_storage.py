from unittest.mock import patch

import pytest

from services.errors import UpstreamError
from services.media_storage import (
    delete_media_url_quietly,
    derive_video_thumbnail,
    parse_media_url,
)


@pytest.mark.parametrize(
    "url, expected",
    [
        (
            "https://res.cloudinary.com/demo/image/upload/v1712345678/vidshare/avatars/alice.png",
            ("vidshare/avatars/alice", "image"),
        ),
        (
            "https://res.cloudinary.com/demo/video/upload/v99/vidshare/videos/intro.mp4",
            ("vidshare/videos/intro", "video"),
        ),
        (
            "https://res.cloudinary.com/demo/image/upload/c_fill,w_300/v3/thumbs/cover.jpg",
            ("thumbs/cover", "image"),
        ),
        (
            "https://res.cloudinary.com/demo/image/upload/a_folder/still.jpg",
            ("a_folder/still", "image"),
        ),
        (
            "https://res.cloudinary.com/demo/image/upload/v5/a_folder/still.jpg",
            ("a_folder/still", "image"),
        ),
        (
            "https://res.cloudinary.com/demo/image/upload/c_fill,w_300/thumbs/cover.jpg",
            ("thumbs/cover", "image"),
        ),
        (
            "https://res.cloudinary.com/demo/video/upload/q_auto/w_640/clips/teaser.mp4",
            ("clips/teaser", "video"),
        ),
        ("https://res.cloudinary.com/demo/image/upload/sample.jpg", ("sample", "image")),
        ("https://cdn.example.com/media/poster.webp", ("poster", "image")),
    ],
)
def test_parse_media_url_extracts_public_id(url, expected):
    assert parse_media_url(url) == expected


def test_parse_media_url_handles_blank_values():
    assert parse_media_url("") == (None, "image")
    assert parse_media_url(None) == (None, "image")


def test_derive_video_thumbnail_swaps_extension():
    assert (
        derive_video_thumbnail("https://res.cloudinary.com/demo/video/upload/v1/clips/intro.mp4")
        == "https://res.cloudinary.com/demo/video/upload/v1/clips/intro.jpg"
    )


@pytest.mark.asyncio
async def test_delete_media_url_quietly_logs_instead_of_raising(caplog):
    async def _failing_delete(public_id, resource_type="image"):
        raise UpstreamError(f"Media asset {public_id} could not be deleted")

    with patch("services.media_storage.delete_media", new=_failing_delete):
        removed = await delete_media_url_quietly(
            "https://res.cloudinary.com/demo/image/upload/v1/vidshare/avatars/old.png"
        )

    assert removed is False
    assert "Leaked media asset vidshare/avatars/old" in caplog.text


@pytest.mark.asyncio
async def test_delete_media_url_quietly_skips_blank_urls():
    assert await delete_media_url_quietly("") is False
