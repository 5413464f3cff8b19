from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.models.roles import UserRolesEnum
from app.modules.auth.dependencies import get_current_actor, require_admin
from app.modules.auth.roles import Actor
from app.schemas.user import MentorAccountResponse, MentorUpdate
from app.services.user_service import get_user_service
from app.utils.pagination import PaginationParams, get_pagination

router = APIRouter()


@router.get("", response_model=List[MentorAccountResponse])
async def list_mentors(
    cohort_year: Optional[int] = Query(None, alias="cohortYear"),
    pagination: PaginationParams = Depends(get_pagination),
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db)
):
    return await get_user_service(db).list_accounts(UserRolesEnum.MENTOR, cohort_year, pagination)


@router.get("/{mentor_id}", response_model=MentorAccountResponse)
async def get_mentor(
    mentor_id: int,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db)
):
    return await get_user_service(db).get_account(UserRolesEnum.MENTOR, mentor_id)


@router.put("/{mentor_id}", response_model=MentorAccountResponse)
async def update_mentor(
    mentor_id: int,
    body: MentorUpdate,
    admin: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return await get_user_service(db).update_mentor(mentor_id, body)


@router.delete("/{mentor_id}", response_model=MentorAccountResponse)
async def delete_mentor(
    mentor_id: int,
    admin: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return await get_user_service(db).delete_account(UserRolesEnum.MENTOR, mentor_id)
