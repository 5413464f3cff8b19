from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.models.roles import UserRolesEnum
from app.modules.auth.dependencies import require_admin
from app.modules.auth.roles import Actor
from app.schemas.user import AdministratorAccountResponse
from app.services.user_service import get_user_service
from app.utils.pagination import PaginationParams, get_pagination

router = APIRouter()


@router.get("", response_model=List[AdministratorAccountResponse])
async def list_administrators(
    pagination: PaginationParams = Depends(get_pagination),
    admin: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Administrator records are not tied to a cohort"""
    return await get_user_service(db).list_accounts(UserRolesEnum.ADMINISTRATOR, None, pagination)


@router.get("/{administrator_id}", response_model=AdministratorAccountResponse)
async def get_administrator(
    administrator_id: int,
    admin: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return await get_user_service(db).get_account(UserRolesEnum.ADMINISTRATOR, administrator_id)
