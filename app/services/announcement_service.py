"""
Announcement Service Layer
Cohort announcements, their comment threads and read tracking
"""

from typing import List, Optional, Dict, Tuple
from datetime import datetime
from sqlalchemy import select, func, or_, exists
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.exceptions import BadRequestError, ResourceNotFoundError
from app.core.logging_config import logger
from app.models.announcement import Announcement, AnnouncementComment, AnnouncementReadLog, TargetAudienceRole
from app.models.cohort import Cohort
from app.models.roles import Student, Adviser, Mentor
from app.models.user import User
from app.modules.auth.roles import Actor
from app.schemas.announcement import (
    AnnouncementCreate,
    AnnouncementUpdate,
    AnnouncementResponse,
    AnnouncementListItem,
    AnnouncementDetailResponse,
    CommentCreate,
    CommentResponse,
    CommentThread,
    ReadPercentageResponse,
)
from app.schemas.user import UserResponse


AUDIENCE_MODELS = {
    TargetAudienceRole.STUDENT: Student,
    TargetAudienceRole.ADVISER: Adviser,
    TargetAudienceRole.MENTOR: Mentor,
}


def audience_models(audience: TargetAudienceRole) -> list:
    if audience == TargetAudienceRole.ALL:
        return list(AUDIENCE_MODELS.values())
    return [AUDIENCE_MODELS[audience]]


def comment_threads(comments: List[AnnouncementComment]) -> List[CommentThread]:
    """
    Group comments under their root comment. Replies are oldest first inside
    a thread; threads are ordered by their root, newest first.
    """
    by_id = {comment.id: comment for comment in comments}

    def root_of(comment: AnnouncementComment) -> int:
        seen = set()
        while comment.parent_comment_id is not None and comment.parent_comment_id in by_id:
            if comment.id in seen:
                break
            seen.add(comment.id)
            comment = by_id[comment.parent_comment_id]
        return comment.id

    grouped: Dict[int, List[AnnouncementComment]] = {}
    for comment in comments:
        grouped.setdefault(root_of(comment), []).append(comment)

    threads = [
        CommentThread(
            root_id=root_id,
            comments=[
                CommentResponse.model_validate(c)
                for c in sorted(members, key=lambda c: (c.created_at, c.id))
            ],
        )
        for root_id, members in grouped.items()
    ]
    threads.sort(key=lambda t: (t.comments[0].created_at, t.comments[0].id), reverse=True)
    return threads


class AnnouncementService:
    """Service for announcement operations"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_announcement(self, announcement_id: int) -> Announcement:
        announcement = await self.db.get(Announcement, announcement_id)
        if not announcement:
            raise ResourceNotFoundError("Announcement", announcement_id)
        return announcement

    # =====================================================
    # QUERIES
    # =====================================================

    async def list_announcements(
        self,
        actor: Actor,
        cohort_year: Optional[int] = None,
        search: Optional[str] = None,
        target_audience_role: Optional[TargetAudienceRole] = None,
    ) -> List[AnnouncementListItem]:
        comment_count = (
            select(func.count(AnnouncementComment.id))
            .where(AnnouncementComment.announcement_id == Announcement.id)
            .scalar_subquery()
        )
        is_read = exists().where(
            AnnouncementReadLog.announcement_id == Announcement.id,
            AnnouncementReadLog.user_id == actor.user.id,
        )
        query = (
            select(Announcement, comment_count, is_read)
            .options(selectinload(Announcement.author))
            .order_by(Announcement.created_at.desc(), Announcement.id.desc())
        )

        if cohort_year is not None:
            query = query.where(Announcement.cohort_year == cohort_year)
        if search:
            pattern = f"%{search}%"
            query = query.where(or_(Announcement.title.ilike(pattern), Announcement.content.ilike(pattern)))
        if target_audience_role is not None:
            query = query.where(Announcement.target_audience_role == target_audience_role)
        if not actor.is_admin:
            audiences = [TargetAudienceRole.ALL]
            if actor.role.name in {audience.value for audience in AUDIENCE_MODELS}:
                audiences.append(TargetAudienceRole(actor.role.name))
            query = query.where(Announcement.target_audience_role.in_(audiences))

        result = await self.db.execute(query)
        return [
            AnnouncementListItem(
                **AnnouncementResponse.model_validate(announcement).model_dump(),
                author=UserResponse.model_validate(announcement.author),
                comment_count=count or 0,
                is_read=bool(read),
            )
            for announcement, count, read in result.all()
        ]

    async def get_detail(self, announcement_id: int) -> AnnouncementDetailResponse:
        result = await self.db.execute(
            select(Announcement)
            .options(selectinload(Announcement.author), selectinload(Announcement.comments))
            .where(Announcement.id == announcement_id)
            .execution_options(populate_existing=True)
        )
        announcement = result.scalar_one_or_none()
        if not announcement:
            raise ResourceNotFoundError("Announcement", announcement_id)

        return AnnouncementDetailResponse(
            **AnnouncementResponse.model_validate(announcement).model_dump(),
            author=UserResponse.model_validate(announcement.author),
            threads=comment_threads(list(announcement.comments)),
        )

    async def audience_emails(self, announcement: Announcement) -> List[str]:
        """Addresses of everyone in the cohort the announcement is aimed at"""
        emails = set()
        for model in audience_models(announcement.target_audience_role):
            result = await self.db.execute(
                select(User.email)
                .join(model, model.user_id == User.id)
                .where(model.cohort_year == announcement.cohort_year)
            )
            emails.update(result.scalars().all())
        return sorted(emails)

    # =====================================================
    # WRITES
    # =====================================================

    async def create_announcement(self, author_id: int, data: AnnouncementCreate) -> Tuple[Announcement, List[str]]:
        """Returns the announcement and, when email was requested, the recipients"""
        if not await self.db.get(Cohort, data.cohort_year):
            raise BadRequestError(f"Cohort {data.cohort_year} does not exist")

        announcement = Announcement(
            cohort_year=data.cohort_year,
            author_id=author_id,
            title=data.title,
            content=data.content,
            target_audience_role=data.target_audience_role,
        )
        self.db.add(announcement)
        await self.db.commit()
        await self.db.refresh(announcement)

        recipients = await self.audience_emails(announcement) if data.should_send_email else []
        logger.info(
            f"[Announcements] Created announcement {announcement.id} for "
            f"{announcement.target_audience_role.value} ({len(recipients)} emails)"
        )
        return announcement, recipients

    async def update_announcement(self, announcement_id: int, data: AnnouncementUpdate) -> Announcement:
        announcement = await self.get_announcement(announcement_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(announcement, field, value)
        await self.db.commit()
        await self.db.refresh(announcement)
        return announcement

    async def delete_announcement(self, announcement_id: int) -> Announcement:
        announcement = await self.get_announcement(announcement_id)
        await self.db.delete(announcement)
        await self.db.commit()
        logger.info(f"[Announcements] Deleted announcement {announcement_id}")
        return announcement

    # =====================================================
    # COMMENTS
    # =====================================================

    async def get_comment(self, announcement_id: int, comment_id: int) -> AnnouncementComment:
        comment = await self.db.get(AnnouncementComment, comment_id)
        if not comment or comment.announcement_id != announcement_id:
            raise ResourceNotFoundError("Comment", comment_id)
        return comment

    async def add_comment(self, announcement_id: int, author_id: int, data: CommentCreate) -> AnnouncementComment:
        await self.get_announcement(announcement_id)
        if data.parent_comment_id is not None:
            parent = await self.db.get(AnnouncementComment, data.parent_comment_id)
            if not parent or parent.announcement_id != announcement_id:
                raise BadRequestError("Parent comment does not belong to this announcement")

        comment = AnnouncementComment(
            announcement_id=announcement_id,
            author_id=author_id,
            parent_comment_id=data.parent_comment_id,
            content=data.content,
        )
        self.db.add(comment)
        await self.db.commit()
        await self.db.refresh(comment)
        return comment

    async def edit_comment(self, comment: AnnouncementComment, content: str) -> AnnouncementComment:
        """Editing restores a soft-deleted comment"""
        comment.content = content
        comment.deleted_at = None
        await self.db.commit()
        await self.db.refresh(comment)
        return comment

    async def delete_comment(self, comment: AnnouncementComment) -> AnnouncementComment:
        """Soft delete when replies hang off the comment, hard delete otherwise"""
        replies = await self.db.execute(
            select(func.count(AnnouncementComment.id))
            .where(AnnouncementComment.parent_comment_id == comment.id)
        )
        if replies.scalar():
            comment.deleted_at = datetime.utcnow()
            await self.db.commit()
            await self.db.refresh(comment)
            return comment

        await self.db.delete(comment)
        await self.db.commit()
        return comment

    # =====================================================
    # READ TRACKING
    # =====================================================

    async def mark_read(self, announcement_id: int, user_id: int) -> AnnouncementReadLog:
        await self.get_announcement(announcement_id)
        result = await self.db.execute(
            select(AnnouncementReadLog).where(
                AnnouncementReadLog.announcement_id == announcement_id,
                AnnouncementReadLog.user_id == user_id,
            )
        )
        read_log = result.scalar_one_or_none()
        if read_log is None:
            read_log = AnnouncementReadLog(announcement_id=announcement_id, user_id=user_id)
            self.db.add(read_log)
        else:
            read_log.updated_at = datetime.utcnow()
        await self.db.commit()
        await self.db.refresh(read_log)
        return read_log

    async def read_percentage(self, announcement_id: int) -> ReadPercentageResponse:
        announcement = await self.get_announcement(announcement_id)

        read_count = (await self.db.execute(
            select(func.count(AnnouncementReadLog.id))
            .where(AnnouncementReadLog.announcement_id == announcement_id)
        )).scalar() or 0

        user_count = 0
        for model in audience_models(announcement.target_audience_role):
            user_count += (await self.db.execute(
                select(func.count(model.id)).where(model.cohort_year == announcement.cohort_year)
            )).scalar() or 0

        return ReadPercentageResponse(
            total_read_count=read_count,
            total_user_count=user_count,
            read_percentage=read_count / user_count if user_count else 0.0,
        )


def get_announcement_service(db: AsyncSession) -> AnnouncementService:
    return AnnouncementService(db)
