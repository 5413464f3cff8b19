"""
Application Endpoints

Prospective teams apply without an account; administrators review the
applications and approval turns the team into students of a new project.
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.models.application import ApplicationStatus
from app.models.project import AchievementLevel
from app.modules.auth.dependencies import require_admin
from app.modules.auth.roles import Actor
from app.schemas.application import ApplicationSubmit, ApplicationResponse
from app.schemas.deadline import DeadlineQuestionsResponse
from app.services.application_service import get_application_service
from app.utils.pagination import PaginationParams, get_pagination

router = APIRouter()


@router.get("", response_model=DeadlineQuestionsResponse)
async def get_ongoing_application(db: AsyncSession = Depends(get_db)):
    """The open application form of the running cohort"""
    return await get_application_service(db).latest_application()


@router.post("", response_model=ApplicationResponse, status_code=status.HTTP_201_CREATED)
async def submit_application(body: ApplicationSubmit, db: AsyncSession = Depends(get_db)):
    return await get_application_service(db).submit(body)


@router.get("/all", response_model=List[ApplicationResponse])
async def list_applications(
    search: Optional[str] = Query(None, description="Team name"),
    achievement: Optional[AchievementLevel] = Query(None),
    application_status: Optional[ApplicationStatus] = Query(None, alias="status"),
    pagination: PaginationParams = Depends(get_pagination),
    admin: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return await get_application_service(db).list_applications(
        pagination, search, achievement, application_status
    )


@router.put("/approve/{submission_id}", response_model=ApplicationResponse)
async def approve_application(
    submission_id: int,
    admin: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Creates the users, students and project of the team"""
    return await get_application_service(db).approve(submission_id)


@router.put("/reject/{submission_id}", response_model=ApplicationResponse)
async def reject_application(
    submission_id: int,
    admin: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return await get_application_service(db).reject(submission_id)


@router.delete("/{submission_id}", response_model=ApplicationResponse)
async def withdraw_application(
    submission_id: int,
    admin: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return await get_application_service(db).withdraw(submission_id)
