from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.modules.auth.dependencies import require_admin
from app.modules.auth.roles import Actor
from app.schemas.cohort import CohortCreate, CohortUpdate, CohortResponse
from app.schemas.common import MessageResponse
from app.services.cohort_service import get_cohort_service

router = APIRouter()


@router.get("", response_model=List[CohortResponse])
async def list_cohorts(db: AsyncSession = Depends(get_db)):
    """All cohorts, latest academic year first"""
    return await get_cohort_service(db).list_cohorts()


@router.get("/current", response_model=CohortResponse)
async def get_current_cohort(db: AsyncSession = Depends(get_db)):
    """Running cohort, else the next upcoming one, else the latest past one"""
    return await get_cohort_service(db).get_current()


@router.post("", response_model=CohortResponse, status_code=status.HTTP_201_CREATED)
async def create_cohort(
    body: CohortCreate,
    admin: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return await get_cohort_service(db).create_cohort(body)


@router.put("/{cohort_year}", response_model=CohortResponse)
async def update_cohort(
    cohort_year: int,
    body: CohortUpdate,
    admin: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return await get_cohort_service(db).update_cohort(cohort_year, body)


@router.delete("/{cohort_year}", response_model=MessageResponse)
async def delete_cohort(
    cohort_year: int,
    admin: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    await get_cohort_service(db).delete_cohort(cohort_year)
    return MessageResponse(message=f"Cohort {cohort_year} deleted")
