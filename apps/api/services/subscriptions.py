"""Channel subscription services."""

from __future__ import annotations

import logging
from typing import Any, Dict, List

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import aliased

from models.subscription import Subscription
from models.user import User
from services.errors import ValidationError, require_text
from services.serializers import user_summary
from services.toggles import toggle_relation
from services.users import get_user_or_404

logger = logging.getLogger(__name__)


async def toggle_subscription_service(*, channel_id: str, subscriber_id: str, db: AsyncSession) -> Dict[str, Any]:
    channel_id = require_text(channel_id, "channelId is required")
    if channel_id == subscriber_id:
        raise ValidationError("you cannot subscribe to yourself")

    await get_user_or_404(db, channel_id)
    subscribed = await toggle_relation(
        db,
        Subscription,
        {"subscriber_id": subscriber_id, "channel_id": channel_id},
    )
    logger.info("subscription_toggled subscriber=%s channel=%s subscribed=%s", subscriber_id, channel_id, subscribed)
    return {"channel_id": channel_id, "subscribed": subscribed}


async def get_channel_subscribers_service(*, channel_id: str, db: AsyncSession) -> List[Dict[str, Any]]:
    channel_id = require_text(channel_id, "channelId is required")
    await get_user_or_404(db, channel_id)

    result = await db.execute(
        select(Subscription, User)
        .join(User, User.id == Subscription.subscriber_id)
        .where(Subscription.channel_id == channel_id)
        .order_by(Subscription.created_at.desc(), Subscription.id.asc())
    )
    return [
        {"id": subscription.id, "subscriber": user_summary(subscriber)}
        for subscription, subscriber in result.all()
    ]


async def get_subscribed_channels_service(*, subscriber_id: str, db: AsyncSession) -> List[Dict[str, Any]]:
    channel_subscriptions = aliased(Subscription)
    subscriber_count = (
        select(func.count(channel_subscriptions.id))
        .where(channel_subscriptions.channel_id == Subscription.channel_id)
        .scalar_subquery()
    )
    result = await db.execute(
        select(User, subscriber_count.label("subscriber_count"))
        .join(Subscription, Subscription.channel_id == User.id)
        .where(Subscription.subscriber_id == subscriber_id)
        .order_by(Subscription.created_at.desc(), Subscription.id.asc())
    )
    return [
        {"channel": user_summary(channel), "subscriber_count": int(count or 0)}
        for channel, count in result.all()
    ]
