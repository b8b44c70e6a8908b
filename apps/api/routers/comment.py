"""Comment router."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from routers.auth_scope import AuthContext, get_auth_context
from services.comments import (
    add_comment_service,
    delete_comment_service,
    list_video_comments_service,
    update_comment_service,
)
from services.responses import envelope

router = APIRouter()


class CommentContentRequest(BaseModel):
    content: Optional[str] = None


class CommentUpdateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    comment_id: Optional[str] = Field(default=None, alias="commentId")
    content: Optional[str] = None


class CommentDeleteRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    comment_id: Optional[str] = Field(default=None, alias="commentId")


# The /c/ routes are declared before /{video_id} so the literal segment wins.
@router.patch("/c/")
async def update_comment(
    request: CommentUpdateRequest,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    comment = await update_comment_service(
        comment_id=request.comment_id,
        user_id=auth.user_id,
        content=request.content,
        db=db,
    )
    return envelope(comment, "comment updated successfully")


@router.delete("/c/")
async def delete_comment(
    request: CommentDeleteRequest,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    comment = await delete_comment_service(comment_id=request.comment_id, user_id=auth.user_id, db=db)
    return envelope(comment, "comment deleted successfully")


@router.post("/{video_id}", status_code=201)
async def add_comment(
    video_id: str,
    request: CommentContentRequest,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    comment = await add_comment_service(
        video_id=video_id,
        user_id=auth.user_id,
        content=request.content,
        db=db,
    )
    return envelope(comment, "comment added successfully", status=201)


@router.get("/{video_id}")
async def list_video_comments(
    video_id: str,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    result = await list_video_comments_service(video_id=video_id, page=page, limit=limit, db=db)
    return envelope(result, "comments fetched successfully")
