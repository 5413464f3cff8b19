from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.models.roles import UserRolesEnum
from app.modules.auth.dependencies import get_current_actor, require_admin
from app.modules.auth.roles import Actor
from app.schemas.user import AdviserAccountResponse
from app.services.relation_service import get_relation_service
from app.services.user_service import get_user_service
from app.utils.pagination import PaginationParams, get_pagination

router = APIRouter()


@router.get("", response_model=List[AdviserAccountResponse])
async def list_advisers(
    cohort_year: Optional[int] = Query(None, alias="cohortYear"),
    pagination: PaginationParams = Depends(get_pagination),
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db)
):
    return await get_user_service(db).list_accounts(UserRolesEnum.ADVISER, cohort_year, pagination)


@router.get("/{adviser_id}", response_model=AdviserAccountResponse)
async def get_adviser(
    adviser_id: int,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db)
):
    return await get_user_service(db).get_account(UserRolesEnum.ADVISER, adviser_id)


@router.delete("/{adviser_id}", response_model=AdviserAccountResponse)
async def delete_adviser(
    adviser_id: int,
    admin: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Relations touching the adviser's projects go first, in the same transaction"""
    service = get_user_service(db)
    await service.get_account_record(UserRolesEnum.ADVISER, adviser_id)
    await get_relation_service(db).delete_by_adviser(adviser_id, commit=False)
    return await service.delete_account(UserRolesEnum.ADVISER, adviser_id)
