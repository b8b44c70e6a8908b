from unittest.mock import AsyncMock, patch

import pytest
from httpx import ASGITransport, AsyncClient

from main import app


@pytest.mark.asyncio
async def test_unexpected_failure_renders_internal_error_envelope(api_client, make_user):
    _, headers = await make_user("creator")

    broken = AsyncMock(side_effect=RuntimeError("stats query exploded"))
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        with patch("routers.dashboard.get_channel_stats_service", new=broken):
            response = await client.get("/dashboard/stats", headers=headers)

    assert response.status_code == 500
    assert response.json() == {"status": 500, "data": None, "message": "Internal server error"}
    assert "exploded" not in response.text
