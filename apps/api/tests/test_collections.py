import pytest


@pytest.mark.asyncio
async def test_playlist_membership_scenario(api_client, make_user, make_video):
    client, _ = api_client
    owner, headers = await make_user("curator")
    video = await make_video(owner, "v1")

    created = await client.post("/playlist/", json={"name": "Favs", "description": "keepers"}, headers=headers)
    assert created.status_code == 201
    playlist_id = created.json()["data"]["id"]
    assert created.json()["data"]["videos"] == []

    added = await client.patch(f"/playlist/add/{video.id}/{playlist_id}", headers=headers)
    assert added.status_code == 200
    assert added.json()["data"]["videos"] == [video.id]

    duplicate = await client.patch(f"/playlist/add/{video.id}/{playlist_id}", headers=headers)
    assert duplicate.status_code == 409
    assert duplicate.json()["message"] == "video already in playlist"

    removed = await client.patch(f"/playlist/remove/{video.id}/{playlist_id}", headers=headers)
    assert removed.status_code == 200
    assert removed.json()["data"]["videos"] == []

    absent = await client.patch(f"/playlist/remove/{video.id}/{playlist_id}", headers=headers)
    assert absent.status_code == 404
    assert absent.json()["message"] == "video not in playlist"


@pytest.mark.asyncio
async def test_playlist_keeps_insertion_order(api_client, make_user, make_video):
    client, _ = api_client
    owner, headers = await make_user("curator")
    first = await make_video(owner, "first")
    second = await make_video(owner, "second")
    third = await make_video(owner, "third")

    created = await client.post("/playlist/", json={"name": "Mix", "description": "ordered"}, headers=headers)
    playlist_id = created.json()["data"]["id"]
    for video in (second, third, first):
        await client.patch(f"/playlist/add/{video.id}/{playlist_id}", headers=headers)

    fetched = await client.get(f"/playlist/{playlist_id}", headers=headers)
    assert fetched.json()["data"]["videos"] == [second.id, third.id, first.id]


@pytest.mark.asyncio
async def test_playlist_mutations_require_ownership(api_client, make_user, make_video):
    client, _ = api_client
    owner, owner_headers = await make_user("curator")
    _, other_headers = await make_user("stranger")
    video = await make_video(owner, "v1")

    created = await client.post("/playlist/", json={"name": "Favs", "description": "mine"}, headers=owner_headers)
    playlist_id = created.json()["data"]["id"]

    add = await client.patch(f"/playlist/add/{video.id}/{playlist_id}", headers=other_headers)
    rename = await client.patch(f"/playlist/{playlist_id}", json={"name": "Theirs"}, headers=other_headers)
    delete = await client.delete(f"/playlist/{playlist_id}", headers=other_headers)
    assert add.status_code == 403
    assert rename.status_code == 403
    assert delete.status_code == 403
    assert delete.json()["message"] == "you are not the owner of this playlist"

    deleted = await client.delete(f"/playlist/{playlist_id}", headers=owner_headers)
    assert deleted.status_code == 200
    gone = await client.get(f"/playlist/{playlist_id}", headers=owner_headers)
    assert gone.status_code == 404


@pytest.mark.asyncio
async def test_playlist_update_merges_supplied_fields(api_client, make_user):
    client, _ = api_client
    owner, headers = await make_user("curator")

    missing = await client.post("/playlist/", json={"name": "No description"}, headers=headers)
    assert missing.status_code == 400
    assert missing.json()["message"] == "name and description are required"

    created = await client.post("/playlist/", json={"name": "Favs", "description": "keepers"}, headers=headers)
    playlist_id = created.json()["data"]["id"]

    empty = await client.patch(f"/playlist/{playlist_id}", json={}, headers=headers)
    assert empty.status_code == 400

    renamed = await client.patch(f"/playlist/{playlist_id}", json={"name": "Best"}, headers=headers)
    assert renamed.json()["data"]["name"] == "Best"
    assert renamed.json()["data"]["description"] == "keepers"

    listed = await client.get(f"/playlist/user/{owner.id}", headers=headers)
    assert [playlist["name"] for playlist in listed.json()["data"]] == ["Best"]

    unknown_user = await client.get("/playlist/user/missing-user", headers=headers)
    assert unknown_user.status_code == 404


@pytest.mark.asyncio
async def test_tweet_crud_with_ownership(api_client, make_user):
    client, _ = api_client
    _, author_headers = await make_user("author")
    _, other_headers = await make_user("other")

    empty = await client.post("/tweet/", json={"content": ""}, headers=author_headers)
    assert empty.status_code == 400
    assert empty.json()["message"] == "tweet content is required"

    created = await client.post("/tweet/", json={"content": "hello world"}, headers=author_headers)
    assert created.status_code == 201
    tweet_id = created.json()["data"]["id"]

    listed = await client.get("/tweet/", headers=author_headers)
    tweets = listed.json()["data"]
    assert len(tweets) == 1
    assert tweets[0]["owner"] == {"id": tweets[0]["owner_id"], "username": "author"}

    forbidden = await client.patch(f"/tweet/{tweet_id}", json={"content": "mine now"}, headers=other_headers)
    assert forbidden.status_code == 403

    edited = await client.patch(f"/tweet/{tweet_id}", json={"content": "hello again"}, headers=author_headers)
    assert edited.json()["data"]["content"] == "hello again"

    await client.post(f"/likes/toggle/t/{tweet_id}", headers=other_headers)
    not_allowed = await client.delete(f"/tweet/{tweet_id}", headers=other_headers)
    assert not_allowed.status_code == 403

    deleted = await client.delete(f"/tweet/{tweet_id}", headers=author_headers)
    assert deleted.status_code == 200
    assert (await client.get("/tweet/", headers=author_headers)).json()["data"] == []

    missing = await client.delete(f"/tweet/{tweet_id}", headers=author_headers)
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_dashboard_reports_channel_totals(api_client, make_user, make_video):
    client, _ = api_client
    owner, owner_headers = await make_user("creator")
    fan, fan_headers = await make_user("fan")
    _, empty_headers = await make_user("newcomer")
    first = await make_video(owner, "one", views=10)
    await make_video(owner, "two", views=5)

    await client.post(f"/subscriptions/channel/{owner.id}", headers=fan_headers)
    await client.post(f"/likes/toggle/v/{first.id}", headers=fan_headers)

    stats = await client.get("/dashboard/stats", headers=owner_headers)
    assert stats.json()["data"] == {
        "total_videos": 2,
        "total_views": 15,
        "total_subscribers": 1,
        "total_likes": 1,
    }

    videos = await client.get("/dashboard/videos", headers=owner_headers)
    assert sorted(video["title"] for video in videos.json()["data"]) == ["one", "two"]

    empty = await client.get("/dashboard/videos", headers=empty_headers)
    assert empty.status_code == 200
    assert empty.json()["data"] == []
