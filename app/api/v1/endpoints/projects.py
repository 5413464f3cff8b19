"""
Project Endpoints

Project teams of a cohort, with their students, adviser and mentor.
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.models.project import AchievementLevel
from app.modules.auth.dependencies import get_current_actor, require_admin
from app.modules.auth.roles import Actor
from app.schemas.project import ProjectCreate, ProjectUpdate, ProjectDetailResponse, LeanProjectResponse
from app.services.project_service import get_project_service
from app.utils.pagination import PaginationParams, get_pagination

router = APIRouter()


@router.get("", response_model=List[ProjectDetailResponse])
async def list_projects(
    cohort_year: Optional[int] = Query(None, alias="cohortYear"),
    achievement: Optional[AchievementLevel] = Query(None),
    search: Optional[str] = Query(None, description="Project name or member, adviser, mentor name"),
    dropped: Optional[bool] = Query(None),
    pagination: PaginationParams = Depends(get_pagination),
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db)
):
    return await get_project_service(db).list_projects(pagination, cohort_year, achievement, search, dropped)


@router.get("/lean", response_model=List[LeanProjectResponse])
async def list_projects_lean(
    cohort_year: Optional[int] = Query(None, alias="cohortYear"),
    dropped: Optional[bool] = Query(None),
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db)
):
    """Id and name only, for pickers"""
    return await get_project_service(db).list_lean(cohort_year, dropped)


@router.get("/student/{student_id}", response_model=ProjectDetailResponse)
async def get_project_by_student(
    student_id: int,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db)
):
    return await get_project_service(db).get_by_student(student_id)


@router.get("/adviser/{adviser_id}", response_model=List[ProjectDetailResponse])
async def list_projects_by_adviser(
    adviser_id: int,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db)
):
    return await get_project_service(db).list_by_adviser(adviser_id)


@router.get("/mentor/{mentor_id}", response_model=List[ProjectDetailResponse])
async def list_projects_by_mentor(
    mentor_id: int,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db)
):
    return await get_project_service(db).list_by_mentor(mentor_id)


@router.get("/{project_id}", response_model=ProjectDetailResponse)
async def get_project(
    project_id: int,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db)
):
    return await get_project_service(db).get_project(project_id)


@router.post("", response_model=ProjectDetailResponse, status_code=status.HTTP_201_CREATED)
async def create_project(
    body: ProjectCreate,
    admin: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return await get_project_service(db).create_project(body)


@router.put("/{project_id}", response_model=ProjectDetailResponse)
async def update_project(
    project_id: int,
    body: ProjectUpdate,
    admin: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return await get_project_service(db).update_project(project_id, body)


@router.delete("/{project_id}", response_model=ProjectDetailResponse)
async def delete_project(
    project_id: int,
    admin: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Relations touching the project are removed with it"""
    return await get_project_service(db).delete_project(project_id)
