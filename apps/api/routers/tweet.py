"""Tweet router: short text posts owned by a channel."""

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from routers.auth_scope import AuthContext, get_auth_context
from services.responses import envelope
from services.tweets import (
    create_tweet_service,
    delete_tweet_service,
    list_user_tweets_service,
    update_tweet_service,
)

router = APIRouter()


class TweetContentRequest(BaseModel):
    content: Optional[str] = None


@router.post("/", status_code=201)
async def create_tweet(
    request: TweetContentRequest,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    tweet = await create_tweet_service(owner_id=auth.user_id, content=request.content, db=db)
    return envelope(tweet, "tweet created successfully", status=201)


@router.get("/")
async def list_my_tweets(
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    tweets = await list_user_tweets_service(owner_id=auth.user_id, db=db)
    return envelope(tweets, "tweets fetched successfully")


@router.patch("/{tweet_id}")
async def update_tweet(
    tweet_id: str,
    request: TweetContentRequest,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    tweet = await update_tweet_service(
        tweet_id=tweet_id,
        user_id=auth.user_id,
        content=request.content,
        db=db,
    )
    return envelope(tweet, "tweet updated successfully")


@router.delete("/{tweet_id}")
async def delete_tweet(
    tweet_id: str,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    await delete_tweet_service(tweet_id=tweet_id, user_id=auth.user_id, db=db)
    return envelope({}, "tweet deleted successfully")
