from unittest.mock import AsyncMock, patch

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from main import app
from routers import rate_limit


@pytest.mark.asyncio
async def test_login_rate_limit_falls_back_to_local_counters(api_client):
    client, _ = api_client
    app.state.disable_rate_limits = False

    unreachable = AsyncMock(side_effect=RedisConnectionError("redis is down"))
    with patch("routers.rate_limit._consume_redis_quota", new=unreachable):
        statuses = []
        for _ in range(31):
            response = await client.post("/users/login", json={"username": "nobody", "password": "whatever-pass"})
            statuses.append(response.status_code)

    assert statuses[:30] == [404] * 30
    assert statuses[30] == 429
    assert response.json()["status"] == 429
    assert any(key.startswith("vidshare:rate:users_login:") for key in rate_limit._local_counters)


@pytest.mark.asyncio
async def test_rate_limit_uses_redis_count_when_available(api_client):
    client, _ = api_client
    app.state.disable_rate_limits = False

    with patch("routers.rate_limit._consume_redis_quota", new=AsyncMock(return_value=6)):
        response = await client.post("/users/reset-password", json={"email": "alice@example.com"})

    assert response.status_code == 429
    assert "users_reset_mail" in response.json()["message"]


@pytest.mark.asyncio
async def test_rate_limit_keys_on_peer_address_not_forwarded_header(api_client):
    client, _ = api_client
    app.state.disable_rate_limits = False

    unreachable = AsyncMock(side_effect=RedisConnectionError("redis is down"))
    with patch("routers.rate_limit._consume_redis_quota", new=unreachable):
        statuses = []
        for index in range(31):
            response = await client.post(
                "/users/login",
                json={"username": "nobody", "password": "whatever-pass"},
                headers={"X-Forwarded-For": f"10.0.0.{index}"},
            )
            statuses.append(response.status_code)

    assert statuses[:30] == [404] * 30
    assert statuses[30] == 429
    assert not any("10.0.0." in key for key in rate_limit._local_counters)
