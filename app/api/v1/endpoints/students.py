from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.models.roles import UserRolesEnum
from app.modules.auth.dependencies import get_current_actor
from app.modules.auth.roles import Actor
from app.schemas.user import StudentAccountResponse
from app.services.user_service import get_user_service
from app.utils.pagination import PaginationParams, get_pagination

router = APIRouter()


@router.get("", response_model=List[StudentAccountResponse])
async def list_students(
    cohort_year: Optional[int] = Query(None, alias="cohortYear"),
    pagination: PaginationParams = Depends(get_pagination),
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db)
):
    return await get_user_service(db).list_accounts(UserRolesEnum.STUDENT, cohort_year, pagination)


@router.get("/email/{email}", response_model=StudentAccountResponse)
async def get_student_by_email(
    email: str,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db)
):
    """Student record of the latest cohort the user belongs to"""
    return await get_user_service(db).get_student_by_email(email)


@router.get("/{student_id}", response_model=StudentAccountResponse)
async def get_student(
    student_id: int,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db)
):
    return await get_user_service(db).get_account(UserRolesEnum.STUDENT, student_id)
