"""Subscription router."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from routers.auth_scope import AuthContext, get_auth_context
from services.responses import envelope
from services.subscriptions import (
    get_channel_subscribers_service,
    get_subscribed_channels_service,
    toggle_subscription_service,
)

router = APIRouter()


@router.post("/channel/{channel_id}")
async def toggle_subscription(
    channel_id: str,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    result = await toggle_subscription_service(channel_id=channel_id, subscriber_id=auth.user_id, db=db)
    message = "subscribed successfully" if result["subscribed"] else "unsubscribed successfully"
    return envelope(result, message)


@router.get("/channel/{channel_id}")
async def get_channel_subscribers(
    channel_id: str,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    subscribers = await get_channel_subscribers_service(channel_id=channel_id, db=db)
    return envelope(subscribers, "subscribers fetched successfully")


@router.get("/user")
async def get_subscribed_channels(
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    """Channels the caller subscribes to, each with its subscriber count."""
    channels = await get_subscribed_channels_service(subscriber_id=auth.user_id, db=db)
    return envelope(channels, "subscribed channels fetched successfully")
