"""
Announcement Endpoints

Cohort announcements aimed at a role audience, their comment threads and
read tracking. Emails to the audience go out after the response is sent.
"""

from typing import List, Optional
from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.models.announcement import TargetAudienceRole
from app.modules.auth.dependencies import get_current_actor, require_admin, ensure_author, ensure_in_audience
from app.modules.auth.roles import Actor
from app.schemas.announcement import (
    AnnouncementCreate,
    AnnouncementUpdate,
    AnnouncementResponse,
    AnnouncementListItem,
    AnnouncementDetailResponse,
    CommentCreate,
    CommentUpdate,
    CommentResponse,
    ReadPercentageResponse,
)
from app.schemas.common import MessageResponse
from app.services.announcement_service import get_announcement_service
from app.services.email_service import EmailNotifier, get_email_notifier, deliver_many, announcement_email

router = APIRouter()


@router.get("", response_model=List[AnnouncementListItem])
async def list_announcements(
    cohort_year: Optional[int] = Query(None, alias="cohortYear"),
    search: Optional[str] = Query(None, description="Title or content"),
    target_audience_role: Optional[TargetAudienceRole] = Query(None, alias="targetAudienceRole"),
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db)
):
    """Newest first; non-administrators only see what is addressed to them"""
    return await get_announcement_service(db).list_announcements(
        actor, cohort_year, search, target_audience_role
    )


@router.get("/{announcement_id}", response_model=AnnouncementDetailResponse)
async def get_announcement(
    announcement_id: int,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db)
):
    service = get_announcement_service(db)
    ensure_in_audience(actor, await service.get_announcement(announcement_id))
    return await service.get_detail(announcement_id)


@router.post("", response_model=AnnouncementResponse, status_code=status.HTTP_201_CREATED)
async def create_announcement(
    body: AnnouncementCreate,
    background_tasks: BackgroundTasks,
    admin: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    notifier: EmailNotifier = Depends(get_email_notifier)
):
    announcement, recipients = await get_announcement_service(db).create_announcement(admin.user.id, body)
    if recipients:
        subject, html_content, text_content = announcement_email(
            announcement.title, announcement.content, admin.user.name
        )
        background_tasks.add_task(deliver_many, notifier, recipients, subject, html_content, text_content)
    return announcement


@router.put("/{announcement_id}", response_model=AnnouncementResponse)
async def update_announcement(
    announcement_id: int,
    body: AnnouncementUpdate,
    admin: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return await get_announcement_service(db).update_announcement(announcement_id, body)


@router.delete("/{announcement_id}", response_model=AnnouncementResponse)
async def delete_announcement(
    announcement_id: int,
    admin: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return await get_announcement_service(db).delete_announcement(announcement_id)


# ==================== Comments ====================

@router.post(
    "/{announcement_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_comment(
    announcement_id: int,
    body: CommentCreate,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db)
):
    service = get_announcement_service(db)
    ensure_in_audience(actor, await service.get_announcement(announcement_id))
    return await service.add_comment(announcement_id, actor.user.id, body)


@router.put("/{announcement_id}/comments/{comment_id}", response_model=CommentResponse)
async def edit_comment(
    announcement_id: int,
    comment_id: int,
    body: CommentUpdate,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db)
):
    """Authors only"""
    service = get_announcement_service(db)
    comment = await service.get_comment(announcement_id, comment_id)
    ensure_author(actor, comment.author_id, allow_admin=False)
    return await service.edit_comment(comment, body.content)


@router.delete("/{announcement_id}/comments/{comment_id}", response_model=CommentResponse)
async def delete_comment(
    announcement_id: int,
    comment_id: int,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db)
):
    """Comments with replies are soft-deleted so the thread survives"""
    service = get_announcement_service(db)
    comment = await service.get_comment(announcement_id, comment_id)
    ensure_author(actor, comment.author_id)
    return await service.delete_comment(comment)


# ==================== Read tracking ====================

@router.post("/{announcement_id}/read", response_model=MessageResponse)
async def mark_announcement_read(
    announcement_id: int,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db)
):
    service = get_announcement_service(db)
    ensure_in_audience(actor, await service.get_announcement(announcement_id))
    await service.mark_read(announcement_id, actor.user.id)
    return MessageResponse(message="Announcement marked as read")


@router.get("/{announcement_id}/read-percentage", response_model=ReadPercentageResponse)
async def get_read_percentage(
    announcement_id: int,
    admin: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Readers over audience size, as a fraction"""
    return await get_announcement_service(db).read_percentage(announcement_id)
