"""
Evaluation Relation Endpoints

Directed "who evaluates whom" edges between projects of one cohort.
Advisers manage the edges of the projects they advise.
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.models.roles import Adviser
from app.modules.auth.dependencies import (
    get_current_actor,
    ensure_adviser_of_projects,
    ensure_owns_role_record,
)
from app.modules.auth.roles import Actor
from app.schemas.common import CountResponse
from app.schemas.relation import RelationCreate, GroupRelationsCreate, RelationResponse, RelationQueryResponse
from app.services.relation_service import get_relation_service

router = APIRouter()


@router.post(
    "",
    response_model=RelationResponse,
    response_model_exclude_unset=True,
    status_code=status.HTTP_201_CREATED,
)
async def create_relation(
    body: RelationCreate,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db)
):
    await ensure_adviser_of_projects(db, actor, [body.from_project_id, body.to_project_id])
    return await get_relation_service(db).create_relation(body.from_project_id, body.to_project_id)


@router.get("", response_model=RelationQueryResponse, response_model_exclude_unset=True)
async def query_relations(
    from_project_id: Optional[int] = Query(None, alias="from"),
    to_project_id: Optional[int] = Query(None, alias="to"),
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db)
):
    """The endpoint used as a filter is returned once, not inside every relation"""
    return await get_relation_service(db).query_relations(from_project_id, to_project_id)


@router.post("/group", response_model=CountResponse, status_code=status.HTTP_201_CREATED)
async def create_group_relations(
    body: GroupRelationsCreate,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db)
):
    """Every ordered pair among the projects; existing pairs are skipped"""
    await ensure_adviser_of_projects(db, actor, body.project_ids)
    created = await get_relation_service(db).create_group_relations(body.project_ids, body.group_id)
    return CountResponse(count=created)


@router.get("/adviser/{adviser_id}", response_model=List[RelationResponse], response_model_exclude_unset=True)
async def list_relations_by_adviser(
    adviser_id: int,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db)
):
    await ensure_owns_role_record(db, actor, Adviser, adviser_id)
    return await get_relation_service(db).list_by_adviser(adviser_id)


@router.delete("/adviser/{adviser_id}", response_model=CountResponse)
async def delete_relations_by_adviser(
    adviser_id: int,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db)
):
    await ensure_owns_role_record(db, actor, Adviser, adviser_id)
    return CountResponse(count=await get_relation_service(db).delete_by_adviser(adviser_id))


@router.delete("/project/{project_id}", response_model=CountResponse)
async def delete_relations_by_project(
    project_id: int,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db)
):
    await ensure_adviser_of_projects(db, actor, [project_id])
    return CountResponse(count=await get_relation_service(db).delete_by_project(project_id))


@router.delete("/{relation_id}", response_model=RelationResponse, response_model_exclude_unset=True)
async def delete_relation(
    relation_id: int,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db)
):
    """Only the adviser of the evaluating project (or an administrator)"""
    service = get_relation_service(db)
    relation = await service.get_relation(relation_id)
    await ensure_adviser_of_projects(db, actor, [relation.from_project_id])
    return await service.delete_relation(relation_id)
