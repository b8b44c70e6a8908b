import pytest

from config import settings


@pytest.mark.asyncio
async def test_root_and_liveness_use_envelope(api_client):
    client, _ = api_client

    root = await client.get("/")
    live = await client.get("/health/live")

    assert root.json()["data"]["name"] == "VidShare API"
    assert live.json() == {"status": 200, "data": {"alive": True}, "message": "alive"}


@pytest.mark.asyncio
async def test_readiness_reports_missing_media_storage(api_client, monkeypatch):
    client, _ = api_client
    monkeypatch.setattr(settings, "CLOUDINARY_CLOUD_NAME", "")

    response = await client.get("/health/ready")
    assert response.status_code == 503
    assert response.json()["data"]["ready"] is False
    assert "CLOUDINARY_CLOUD_NAME" in response.json()["data"]["missing"]


@pytest.mark.asyncio
async def test_readiness_when_media_storage_configured(api_client, monkeypatch):
    client, _ = api_client
    monkeypatch.setattr(settings, "CLOUDINARY_CLOUD_NAME", "demo")
    monkeypatch.setattr(settings, "CLOUDINARY_API_KEY", "key")
    monkeypatch.setattr(settings, "CLOUDINARY_API_SECRET", "secret")

    response = await client.get("/health/ready")
    assert response.status_code == 200
    assert response.json()["data"] == {"ready": True}
