"""
Forum Service Layer
"""

from typing import List, Optional, Dict
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.exceptions import BadRequestError, ResourceNotFoundError
from app.core.logging_config import logger
from app.models.forum import ForumPost, ForumComment, ForumCategory
from app.schemas.forum import (
    ForumPostCreate,
    ForumPostUpdate,
    ForumPostResponse,
    ForumPostDetailResponse,
    ForumCommentCreate,
    ForumCommentNode,
    ForumAuthor,
)

ALL_POSTS = "All"
YOUR_POSTS = "YourPosts"


def post_response(post: ForumPost) -> ForumPostResponse:
    response = ForumPostResponse.model_validate(post)
    response.author = ForumAuthor.model_validate(post.user)
    return response


def comment_tree(comments: List[ForumComment]) -> List[ForumCommentNode]:
    """Nest replies under their parents, oldest first at every level"""
    nodes: Dict[int, ForumCommentNode] = {}
    for comment in sorted(comments, key=lambda c: (c.created_at, c.id)):
        node = ForumCommentNode.model_validate(comment)
        node.author = ForumAuthor.model_validate(comment.user)
        nodes[comment.id] = node

    roots = []
    for node in nodes.values():
        parent = nodes.get(node.parent_comment_id) if node.parent_comment_id else None
        if parent is None:
            roots.append(node)
        else:
            parent.replies.append(node)
    return roots


class ForumService:
    """Service for forum posts and comments"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_post(self, post_id: int) -> ForumPost:
        post = await self.db.get(ForumPost, post_id)
        if not post:
            raise ResourceNotFoundError("Post", post_id)
        return post

    async def list_posts(self, user_id: int, category: Optional[str] = None) -> List[ForumPostResponse]:
        """`All` (or nothing) lists every post; `YourPosts` only the caller's"""
        query = (
            select(ForumPost)
            .options(selectinload(ForumPost.user))
            .order_by(ForumPost.created_at.desc(), ForumPost.id.desc())
        )
        if category == YOUR_POSTS:
            query = query.where(ForumPost.user_id == user_id)
        elif category and category != ALL_POSTS:
            try:
                query = query.where(ForumPost.category == ForumCategory(category))
            except ValueError:
                raise BadRequestError(f"Unknown forum category '{category}'")

        result = await self.db.execute(query)
        return [post_response(post) for post in result.scalars().all()]

    async def get_detail(self, post_id: int) -> ForumPostDetailResponse:
        result = await self.db.execute(
            select(ForumPost)
            .options(
                selectinload(ForumPost.user),
                selectinload(ForumPost.comments).selectinload(ForumComment.user),
            )
            .where(ForumPost.id == post_id)
            .execution_options(populate_existing=True)
        )
        post = result.scalar_one_or_none()
        if not post:
            raise ResourceNotFoundError("Post", post_id)

        return ForumPostDetailResponse(
            **post_response(post).model_dump(),
            comments=comment_tree(list(post.comments)),
        )

    async def create_post(self, user_id: int, data: ForumPostCreate) -> ForumPostDetailResponse:
        post = ForumPost(user_id=user_id, title=data.title, body=data.body, category=data.category)
        self.db.add(post)
        await self.db.commit()
        logger.info(f"[Forum] User {user_id} created post {post.id}")
        return await self.get_detail(post.id)

    async def update_post(self, post: ForumPost, data: ForumPostUpdate) -> ForumPostDetailResponse:
        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(post, field, value)
        await self.db.commit()
        return await self.get_detail(post.id)

    async def delete_post(self, post: ForumPost) -> ForumPostResponse:
        response = post_response(await self._with_user(post.id))
        await self.db.delete(post)
        await self.db.commit()
        logger.info(f"[Forum] Deleted post {post.id}")
        return response

    async def _with_user(self, post_id: int) -> ForumPost:
        result = await self.db.execute(
            select(ForumPost).options(selectinload(ForumPost.user)).where(ForumPost.id == post_id)
        )
        return result.scalar_one()

    # =====================================================
    # COMMENTS
    # =====================================================

    async def get_comment(self, post_id: int, comment_id: int) -> ForumComment:
        comment = await self.db.get(ForumComment, comment_id)
        if not comment or comment.post_id != post_id:
            raise ResourceNotFoundError("Comment", comment_id)
        return comment

    async def add_comment(self, post_id: int, user_id: int, data: ForumCommentCreate) -> ForumPostDetailResponse:
        await self.get_post(post_id)
        if data.parent_comment_id is not None:
            parent = await self.db.get(ForumComment, data.parent_comment_id)
            if not parent or parent.post_id != post_id:
                raise BadRequestError("Parent comment does not belong to this post")

        self.db.add(ForumComment(
            post_id=post_id,
            user_id=user_id,
            parent_comment_id=data.parent_comment_id,
            content=data.content,
        ))
        await self.db.commit()
        return await self.get_detail(post_id)

    async def delete_comment(self, comment: ForumComment) -> None:
        """Replies go with the comment"""
        await self.db.delete(comment)
        await self.db.commit()


def get_forum_service(db: AsyncSession) -> ForumService:
    return ForumService(db)
