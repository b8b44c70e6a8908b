from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import select

from models.comment import Comment
from models.like import Like
from models.subscription import Subscription


@pytest.mark.asyncio
async def test_self_subscription_is_rejected(api_client, make_user):
    client, _ = api_client
    alice, headers = await make_user("alice")

    response = await client.post(f"/subscriptions/channel/{alice.id}", headers=headers)
    assert response.status_code == 400
    assert response.json()["message"] == "you cannot subscribe to yourself"


@pytest.mark.asyncio
async def test_subscription_toggle_parity(api_client, make_user):
    client, session_maker = api_client
    channel, _ = await make_user("channel")
    _, fan_headers = await make_user("fan")

    states = []
    for _ in range(3):
        response = await client.post(f"/subscriptions/channel/{channel.id}", headers=fan_headers)
        assert response.status_code == 200
        states.append(response.json()["data"]["subscribed"])
    assert states == [True, False, True]

    async with session_maker() as session:
        rows = (await session.execute(select(Subscription))).scalars().all()
    assert len(rows) == 1

    await client.post(f"/subscriptions/channel/{channel.id}", headers=fan_headers)
    async with session_maker() as session:
        assert (await session.execute(select(Subscription))).scalars().all() == []


@pytest.mark.asyncio
async def test_subscribe_to_unknown_channel_is_not_found(api_client, make_user):
    client, _ = api_client
    _, headers = await make_user("fan")

    response = await client.post("/subscriptions/channel/missing-channel", headers=headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_subscriber_and_subscription_listings(api_client, make_user):
    client, _ = api_client
    alice, alice_headers = await make_user("alice")
    bob, bob_headers = await make_user("bob")
    _, carol_headers = await make_user("carol")

    await client.post(f"/subscriptions/channel/{alice.id}", headers=bob_headers)
    await client.post(f"/subscriptions/channel/{alice.id}", headers=carol_headers)
    await client.post(f"/subscriptions/channel/{bob.id}", headers=carol_headers)

    subscribers = await client.get(f"/subscriptions/channel/{alice.id}", headers=alice_headers)
    usernames = sorted(entry["subscriber"]["username"] for entry in subscribers.json()["data"])
    assert usernames == ["bob", "carol"]
    assert all("email" not in entry["subscriber"] for entry in subscribers.json()["data"])

    channels = await client.get("/subscriptions/user", headers=carol_headers)
    counts = {entry["channel"]["username"]: entry["subscriber_count"] for entry in channels.json()["data"]}
    assert counts == {"alice": 2, "bob": 1}


@pytest.mark.asyncio
async def test_like_toggles_for_each_target(api_client, make_user, make_video):
    client, session_maker = api_client
    owner, owner_headers = await make_user("creator")
    _, fan_headers = await make_user("fan")
    video = await make_video(owner, "likeable")
    comment = await client.post(f"/comment/{video.id}", json={"content": "first!"}, headers=owner_headers)
    tweet = await client.post("/tweet/", json={"content": "new upload"}, headers=owner_headers)

    liked_video = await client.post(f"/likes/toggle/v/{video.id}", headers=fan_headers)
    liked_comment = await client.post(f"/likes/toggle/c/{comment.json()['data']['id']}", headers=fan_headers)
    liked_tweet = await client.post(f"/likes/toggle/t/{tweet.json()['data']['id']}", headers=fan_headers)

    assert liked_video.json()["data"] == {"video_id": video.id, "liked": True}
    assert liked_comment.json()["data"]["liked"] is True
    assert liked_tweet.json()["data"]["liked"] is True

    unliked = await client.post(f"/likes/toggle/v/{video.id}", headers=fan_headers)
    assert unliked.json()["data"]["liked"] is False
    assert unliked.json()["message"] == "video unliked successfully"

    async with session_maker() as session:
        rows = (await session.execute(select(Like))).scalars().all()
    assert len(rows) == 2


@pytest.mark.asyncio
async def test_like_unknown_target_is_not_found(api_client, make_user):
    client, _ = api_client
    _, headers = await make_user("fan")

    response = await client.post("/likes/toggle/t/missing-tweet", headers=headers)
    assert response.status_code == 404
    assert response.json()["message"] == "tweet not found"


@pytest.mark.asyncio
async def test_liked_videos_lists_video_ids(api_client, make_user, make_video):
    client, _ = api_client
    owner, _ = await make_user("creator")
    _, fan_headers = await make_user("fan")
    first = await make_video(owner, "one")
    second = await make_video(owner, "two")

    await client.post(f"/likes/toggle/v/{first.id}", headers=fan_headers)
    await client.post(f"/likes/toggle/v/{second.id}", headers=fan_headers)

    response = await client.get("/likes/videos", headers=fan_headers)
    assert response.status_code == 200
    assert sorted(response.json()["data"]) == sorted([first.id, second.id])


@pytest.mark.asyncio
async def test_comment_lifecycle_and_ownership(api_client, make_user, make_video):
    client, session_maker = api_client
    owner, owner_headers = await make_user("creator")
    _, fan_headers = await make_user("fan")
    video = await make_video(owner, "discussed")

    empty = await client.post(f"/comment/{video.id}", json={"content": "  "}, headers=fan_headers)
    assert empty.status_code == 400

    created = await client.post(f"/comment/{video.id}", json={"content": "great video"}, headers=fan_headers)
    assert created.status_code == 201
    comment_id = created.json()["data"]["id"]

    not_owner = await client.patch(
        "/comment/c/",
        json={"commentId": comment_id, "content": "edited by someone else"},
        headers=owner_headers,
    )
    assert not_owner.status_code == 403

    edited = await client.patch(
        "/comment/c/",
        json={"commentId": comment_id, "content": "really great video"},
        headers=fan_headers,
    )
    assert edited.status_code == 200
    assert edited.json()["data"]["content"] == "really great video"

    missing = await client.request("DELETE", "/comment/c/", json={"commentId": "nope"}, headers=fan_headers)
    assert missing.status_code == 404

    forbidden = await client.request("DELETE", "/comment/c/", json={"commentId": comment_id}, headers=owner_headers)
    assert forbidden.status_code == 403
    assert forbidden.json()["message"] == "you are not the owner of this comment"

    deleted = await client.request("DELETE", "/comment/c/", json={"commentId": comment_id}, headers=fan_headers)
    assert deleted.status_code == 200
    assert deleted.json()["data"]["id"] == comment_id

    async with session_maker() as session:
        assert (await session.execute(select(Comment))).scalars().all() == []


@pytest.mark.asyncio
async def test_video_comments_are_paginated_newest_first(api_client, make_user, make_video):
    client, session_maker = api_client
    owner, headers = await make_user("creator")
    video = await make_video(owner, "popular")

    base = datetime(2026, 4, 1, tzinfo=timezone.utc)
    async with session_maker() as session:
        for index in range(12):
            session.add(
                Comment(
                    content=f"comment {index:02d}",
                    video_id=video.id,
                    owner_id=owner.id,
                    created_at=base + timedelta(seconds=index),
                )
            )
        await session.commit()

    first = await client.get(f"/comment/{video.id}", params={"page": 1, "limit": 5}, headers=headers)
    last = await client.get(f"/comment/{video.id}", params={"page": 3, "limit": 5}, headers=headers)

    data = first.json()["data"]
    assert data["total_count"] == 12
    assert [item["content"] for item in data["comments"]][:2] == ["comment 11", "comment 10"]
    assert data["comments"][0]["owner"]["username"] == "creator"
    assert len(last.json()["data"]["comments"]) == 2

    unknown = await client.get("/comment/missing-video", headers=headers)
    assert unknown.status_code == 404
