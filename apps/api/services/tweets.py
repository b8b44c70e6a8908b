"""Tweet services."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from models.like import Like
from models.tweet import Tweet
from models.user import User
from services.errors import NotFoundError, ensure_owner, require_text
from services.serializers import serialize_tweet


async def _get_tweet_or_404(db: AsyncSession, tweet_id: str) -> Tweet:
    result = await db.execute(select(Tweet).where(Tweet.id == tweet_id))
    tweet = result.scalar_one_or_none()
    if not tweet:
        raise NotFoundError("tweet not found")
    return tweet


async def create_tweet_service(*, owner_id: str, content: Optional[str], db: AsyncSession) -> Dict[str, Any]:
    text = require_text(content, "tweet content is required")
    tweet = Tweet(owner_id=owner_id, content=text)
    db.add(tweet)
    await db.commit()
    await db.refresh(tweet)
    return serialize_tweet(tweet)


async def list_user_tweets_service(*, owner_id: str, db: AsyncSession) -> List[Dict[str, Any]]:
    result = await db.execute(
        select(Tweet, User)
        .join(User, User.id == Tweet.owner_id)
        .where(Tweet.owner_id == owner_id)
        .order_by(Tweet.created_at.desc(), Tweet.id.asc())
    )
    return [serialize_tweet(tweet, owner) for tweet, owner in result.all()]


async def update_tweet_service(
    *,
    tweet_id: str,
    user_id: str,
    content: Optional[str],
    db: AsyncSession,
) -> Dict[str, Any]:
    text = require_text(content, "tweet content is required")
    tweet = await _get_tweet_or_404(db, tweet_id)
    ensure_owner(tweet.owner_id, user_id, "you are not the owner of this tweet")

    tweet.content = text
    await db.commit()
    await db.refresh(tweet)
    return serialize_tweet(tweet)


async def delete_tweet_service(*, tweet_id: str, user_id: str, db: AsyncSession) -> None:
    tweet = await _get_tweet_or_404(db, tweet_id)
    ensure_owner(tweet.owner_id, user_id, "you are not the owner of this tweet")

    await db.execute(delete(Like).where(Like.tweet_id == tweet.id))
    await db.delete(tweet)
    await db.commit()
