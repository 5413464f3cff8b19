from pydantic import Field
from typing import Optional, List
from datetime import datetime

from app.models.forum import ForumCategory
from app.schemas.common import CamelModel, StrictCamelModel


class ForumPostCreate(StrictCamelModel):
    title: str = Field(..., min_length=1, max_length=255)
    body: str = Field(..., min_length=1)
    category: ForumCategory = ForumCategory.GENERAL


class ForumPostUpdate(StrictCamelModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    body: Optional[str] = Field(None, min_length=1)
    category: Optional[ForumCategory] = None


class ForumAuthor(CamelModel):
    id: int
    name: str
    profile_pic_url: Optional[str] = None


class ForumCommentCreate(StrictCamelModel):
    content: str = Field(..., min_length=1)
    parent_comment_id: Optional[int] = None


class ForumCommentNode(CamelModel):
    id: int
    user_id: int
    parent_comment_id: Optional[int] = None
    content: str
    created_at: datetime
    author: Optional[ForumAuthor] = None
    replies: List["ForumCommentNode"] = []


class ForumPostResponse(CamelModel):
    id: int
    user_id: int
    title: str
    body: str
    category: ForumCategory
    created_at: datetime
    updated_at: Optional[datetime] = None
    author: Optional[ForumAuthor] = None


class ForumPostDetailResponse(ForumPostResponse):
    comments: List[ForumCommentNode] = []


ForumCommentNode.model_rebuild()
