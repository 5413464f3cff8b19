"""
Forum Endpoints

Category-tagged posts with nested comments. Authors (and administrators)
edit and remove their own content.
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.modules.auth.dependencies import get_current_actor, ensure_author
from app.modules.auth.roles import Actor
from app.schemas.common import MessageResponse
from app.schemas.forum import (
    ForumPostCreate,
    ForumPostUpdate,
    ForumPostResponse,
    ForumPostDetailResponse,
    ForumCommentCreate,
)
from app.services.forum_service import get_forum_service

router = APIRouter()


@router.get("", response_model=List[ForumPostResponse])
async def list_posts(
    category: Optional[str] = Query(None, description="A category, 'All' or 'YourPosts'"),
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db)
):
    return await get_forum_service(db).list_posts(actor.user.id, category)


@router.get("/{post_id}", response_model=ForumPostDetailResponse)
async def get_post(
    post_id: int,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db)
):
    return await get_forum_service(db).get_detail(post_id)


@router.post("", response_model=ForumPostDetailResponse, status_code=status.HTTP_201_CREATED)
async def create_post(
    body: ForumPostCreate,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db)
):
    return await get_forum_service(db).create_post(actor.user.id, body)


@router.put("/{post_id}", response_model=ForumPostDetailResponse)
async def update_post(
    post_id: int,
    body: ForumPostUpdate,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db)
):
    service = get_forum_service(db)
    post = await service.get_post(post_id)
    ensure_author(actor, post.user_id)
    return await service.update_post(post, body)


@router.delete("/{post_id}", response_model=ForumPostResponse)
async def delete_post(
    post_id: int,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db)
):
    service = get_forum_service(db)
    post = await service.get_post(post_id)
    ensure_author(actor, post.user_id)
    return await service.delete_post(post)


# ==================== Comments ====================

@router.post(
    "/{post_id}/comments",
    response_model=ForumPostDetailResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_comment(
    post_id: int,
    body: ForumCommentCreate,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db)
):
    """Returns the post with its refreshed comment tree"""
    return await get_forum_service(db).add_comment(post_id, actor.user.id, body)


@router.delete("/{post_id}/comments/{comment_id}", response_model=MessageResponse)
async def delete_comment(
    post_id: int,
    comment_id: int,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db)
):
    service = get_forum_service(db)
    comment = await service.get_comment(post_id, comment_id)
    ensure_author(actor, comment.user_id)
    await service.delete_comment(comment)
    return MessageResponse(message="Comment deleted")
