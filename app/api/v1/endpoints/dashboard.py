"""
Dashboard Endpoints

Per-role deadline lists with submission status. The read models fan out
concurrently, so they take the session factory rather than a single session.
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.database import get_db, get_session_factory
from app.models.deadline import DeadlineType
from app.models.roles import Student, Adviser, Mentor
from app.models.submission import SubmissionStatus
from app.modules.auth.dependencies import get_current_actor, require_admin, ensure_owns_role_record
from app.modules.auth.roles import Actor
from app.schemas.dashboard import (
    StudentDeadlineEntry,
    ReceivedEvaluationsEntry,
    AdviserDeadlineEntry,
    DeadlineSubmissionsEntry,
    TeamSubmissionsResponse,
)
from app.services.dashboard_service import get_dashboard_service
from app.utils.pagination import PaginationParams, get_pagination

router = APIRouter()


# ==================== Student ====================

@router.get(
    "/student/{student_id}/deadlines",
    response_model=List[StudentDeadlineEntry],
    response_model_exclude_unset=True,
)
async def get_student_deadlines(
    student_id: int,
    deadline_type: Optional[DeadlineType] = Query(None, alias="type"),
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory)
):
    """Milestones, peer evaluations and adviser feedback with the project's submissions"""
    await ensure_owns_role_record(db, actor, Student, student_id)
    return await get_dashboard_service(session_factory).student_deadlines(student_id, deadline_type)


@router.get(
    "/student/{student_id}/evaluations-feedbacks",
    response_model=List[ReceivedEvaluationsEntry],
    response_model_exclude_unset=True,
)
async def get_student_evaluations_feedbacks(
    student_id: int,
    deadline_type: Optional[DeadlineType] = Query(None, alias="type"),
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory)
):
    """Evaluations and feedback received by the student's project"""
    await ensure_owns_role_record(db, actor, Student, student_id)
    return await get_dashboard_service(session_factory).student_evaluations_feedbacks(student_id, deadline_type)


# ==================== Adviser ====================

@router.get(
    "/adviser/{adviser_id}/deadlines",
    response_model=List[AdviserDeadlineEntry],
    response_model_exclude_unset=True,
)
async def get_adviser_deadlines(
    adviser_id: int,
    deadline_type: Optional[DeadlineType] = Query(None, alias="type"),
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory)
):
    await ensure_owns_role_record(db, actor, Adviser, adviser_id)
    return await get_dashboard_service(session_factory).adviser_deadlines(adviser_id, deadline_type)


@router.get(
    "/adviser/{adviser_id}/submissions",
    response_model=List[DeadlineSubmissionsEntry],
    response_model_exclude_unset=True,
)
async def get_adviser_submissions(
    adviser_id: int,
    deadline_type: Optional[DeadlineType] = Query(None, alias="type"),
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory)
):
    """Final submissions from the adviser's projects, grouped per deadline"""
    await ensure_owns_role_record(db, actor, Adviser, adviser_id)
    return await get_dashboard_service(session_factory).adviser_submissions(adviser_id, deadline_type)


# ==================== Mentor ====================

@router.get(
    "/mentor/{mentor_id}/submissions",
    response_model=List[DeadlineSubmissionsEntry],
    response_model_exclude_unset=True,
)
async def get_mentor_submissions(
    mentor_id: int,
    deadline_type: Optional[DeadlineType] = Query(None, alias="type"),
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory)
):
    await ensure_owns_role_record(db, actor, Mentor, mentor_id)
    return await get_dashboard_service(session_factory).mentor_submissions(mentor_id, deadline_type)


# ==================== Administrator ====================

@router.get(
    "/admin/team-submissions",
    response_model=TeamSubmissionsResponse,
    response_model_exclude_unset=True,
)
async def get_team_submissions(
    cohort_year: int = Query(..., alias="cohortYear"),
    deadline_id: int = Query(..., alias="deadlineId"),
    submission_status: Optional[SubmissionStatus] = Query(None, alias="submissionStatus"),
    search: Optional[str] = Query(None, description="Project name"),
    pagination: PaginationParams = Depends(get_pagination),
    admin: Actor = Depends(require_admin),
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory)
):
    return await get_dashboard_service(session_factory).team_submissions(
        cohort_year, deadline_id, pagination, submission_status, search
    )
