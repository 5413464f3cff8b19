"""
Submission Endpoints

Answer-sets against deadlines. Submitters edit their own submissions;
students act on behalf of their project.
"""

from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.models.roles import Student, Adviser
from app.modules.auth.dependencies import (
    get_current_actor,
    ensure_may_submit_as,
    ensure_submitter,
    ensure_owns_role_record,
)
from app.modules.auth.roles import Actor
from app.schemas.submission import (
    SubmissionCreate,
    SubmissionUpdate,
    SubmissionDetailResponse,
    SubmissionFormResponse,
    AnonymousAnswerResponse,
)
from app.services.submission_service import get_submission_service

router = APIRouter()


@router.post("", response_model=SubmissionDetailResponse, status_code=status.HTTP_201_CREATED)
async def create_submission(
    body: SubmissionCreate,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db)
):
    """The submitter/target shape must match the deadline type"""
    await ensure_may_submit_as(db, actor, body.from_project_id, body.from_user_id)
    return await get_submission_service(db).create_submission(body)


@router.get("/student/{student_id}/anonymous-questions", response_model=List[AnonymousAnswerResponse])
async def get_student_anonymous_answers(
    student_id: int,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db)
):
    await ensure_owns_role_record(db, actor, Student, student_id)
    return await get_submission_service(db).anonymous_answers_for_student(student_id)


@router.get("/adviser/{adviser_id}/anonymous-questions", response_model=List[AnonymousAnswerResponse])
async def get_adviser_anonymous_answers(
    adviser_id: int,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db)
):
    await ensure_owns_role_record(db, actor, Adviser, adviser_id)
    return await get_submission_service(db).anonymous_answers_for_adviser(adviser_id)


@router.get("/{submission_id}", response_model=SubmissionFormResponse)
async def get_submission(
    submission_id: int,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db)
):
    """The submission with its answers and the form they belong to"""
    service = get_submission_service(db)
    await ensure_submitter(db, actor, await service.get_submission(submission_id))
    return await service.get_with_form(submission_id)


@router.put("/{submission_id}", response_model=SubmissionDetailResponse)
async def update_submission(
    submission_id: int,
    body: SubmissionUpdate,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db)
):
    service = get_submission_service(db)
    await ensure_submitter(db, actor, await service.get_submission(submission_id))
    return await service.update_submission(submission_id, body)
