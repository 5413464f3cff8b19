"""
Evaluation Group Endpoints

Adviser-scoped sets of projects; relations among them are created through
`POST /relations/group`.
"""

from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.models.roles import Adviser
from app.modules.auth.dependencies import (
    get_current_actor,
    require_roles,
    ensure_adviser_of_projects,
    ensure_adviser_of_group,
    ensure_owns_role_record,
)
from app.modules.auth.roles import Actor, AdviserRole, AdministratorRole
from app.schemas.relation import GroupCreate, GroupUpdate, GroupResponse
from app.services.group_service import get_group_service

router = APIRouter(dependencies=[Depends(require_roles(AdviserRole, AdministratorRole))])


@router.post("", response_model=GroupResponse, status_code=status.HTTP_201_CREATED)
async def create_group(
    body: GroupCreate,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db)
):
    await ensure_owns_role_record(db, actor, Adviser, body.adviser_id)
    if body.project_ids:
        await ensure_adviser_of_projects(db, actor, body.project_ids)
    return await get_group_service(db).create_group(body)


@router.get("/adviser/{adviser_id}", response_model=List[GroupResponse])
async def list_groups_by_adviser(
    adviser_id: int,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db)
):
    await ensure_owns_role_record(db, actor, Adviser, adviser_id)
    return await get_group_service(db).list_by_adviser(adviser_id)


@router.put("/{group_id}", response_model=GroupResponse)
async def update_group(
    group_id: int,
    body: GroupUpdate,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db)
):
    """Rename the group and/or add projects to it"""
    service = get_group_service(db)
    await ensure_adviser_of_group(db, actor, await service.get_group(group_id))
    if body.project_ids:
        await ensure_adviser_of_projects(db, actor, body.project_ids)
    return await service.update_group(group_id, body)


@router.delete("/{group_id}", response_model=GroupResponse)
async def delete_group(
    group_id: int,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db)
):
    service = get_group_service(db)
    await ensure_adviser_of_group(db, actor, await service.get_group(group_id))
    return await service.delete_group(group_id)
