"""
Deadline Endpoints

Deadlines of a cohort and the sectioned question forms attached to them.
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.modules.auth.dependencies import get_current_actor, require_admin
from app.modules.auth.roles import Actor
from app.schemas.deadline import (
    DeadlineCreate,
    DeadlineUpdate,
    DeadlineResponse,
    DeadlineDuplicateRequest,
    DeadlineQuestionsResponse,
    ReplaceSectionsRequest,
)
from app.services.deadline_service import get_deadline_service

router = APIRouter()


@router.get("", response_model=List[DeadlineResponse])
async def list_deadlines(
    cohort_year: Optional[int] = Query(None, alias="cohortYear"),
    name: Optional[str] = Query(None, description="Case-insensitive name match"),
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db)
):
    return await get_deadline_service(db).list_deadlines(cohort_year, name)


@router.get("/{deadline_id}", response_model=DeadlineResponse)
async def get_deadline(
    deadline_id: int,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db)
):
    return await get_deadline_service(db).get_deadline(deadline_id)


@router.post("", response_model=DeadlineResponse, status_code=status.HTTP_201_CREATED)
async def create_deadline(
    body: DeadlineCreate,
    admin: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Application deadlines come with the Team Particulars section"""
    return await get_deadline_service(db).create_deadline(body)


@router.put("/{deadline_id}", response_model=DeadlineResponse)
async def update_deadline(
    deadline_id: int,
    body: DeadlineUpdate,
    admin: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return await get_deadline_service(db).update_deadline(deadline_id, body)


@router.delete("/{deadline_id}", response_model=DeadlineResponse)
async def delete_deadline(
    deadline_id: int,
    admin: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return await get_deadline_service(db).delete_deadline(deadline_id)


# ==================== Question forms ====================

@router.get("/{deadline_id}/questions", response_model=DeadlineQuestionsResponse)
async def get_deadline_questions(
    deadline_id: int,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db)
):
    return await get_deadline_service(db).get_questions(deadline_id)


@router.put("/{deadline_id}/questions", response_model=DeadlineQuestionsResponse)
async def replace_deadline_questions(
    deadline_id: int,
    body: ReplaceSectionsRequest,
    admin: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Replaces every section; answers to the old questions are dropped with them"""
    return await get_deadline_service(db).replace_sections(deadline_id, body.sections)


@router.post("/{deadline_id}/duplicate", response_model=DeadlineResponse, status_code=status.HTTP_201_CREATED)
async def duplicate_deadline(
    deadline_id: int,
    body: DeadlineDuplicateRequest,
    admin: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return await get_deadline_service(db).duplicate_deadline(deadline_id, body.cohort_year)
