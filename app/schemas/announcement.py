from pydantic import Field
from typing import Optional, List
from datetime import datetime

from app.models.announcement import TargetAudienceRole
from app.schemas.common import CamelModel, StrictCamelModel
from app.schemas.user import UserResponse


class AnnouncementCreate(StrictCamelModel):
    cohort_year: int
    title: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1)
    target_audience_role: TargetAudienceRole = TargetAudienceRole.ALL
    should_send_email: bool = False


class AnnouncementUpdate(StrictCamelModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    content: Optional[str] = Field(None, min_length=1)
    target_audience_role: Optional[TargetAudienceRole] = None


class AnnouncementResponse(CamelModel):
    id: int
    cohort_year: int
    author_id: int
    title: str
    content: str
    target_audience_role: TargetAudienceRole
    created_at: datetime
    updated_at: Optional[datetime] = None


class AnnouncementListItem(AnnouncementResponse):
    author: Optional[UserResponse] = None
    comment_count: int = 0
    is_read: bool = False


class CommentCreate(StrictCamelModel):
    content: str = Field(..., min_length=1)
    parent_comment_id: Optional[int] = None


class CommentUpdate(StrictCamelModel):
    content: str = Field(..., min_length=1)


class CommentResponse(CamelModel):
    id: int
    announcement_id: int
    author_id: int
    parent_comment_id: Optional[int] = None
    content: str
    deleted_at: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class CommentThread(CamelModel):
    """Root comment followed by every reply under it, oldest first"""
    root_id: int
    comments: List[CommentResponse]


class AnnouncementDetailResponse(AnnouncementResponse):
    author: Optional[UserResponse] = None
    threads: List[CommentThread] = []


class ReadPercentageResponse(CamelModel):
    total_read_count: int
    total_user_count: int
    read_percentage: float
