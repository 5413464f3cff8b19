"""Pydantic schemas for evaluation relations and groups"""
from pydantic import Field
from typing import Optional, List

from app.schemas.common import CamelModel, StrictCamelModel
from app.schemas.project import ProjectResponse
from app.schemas.user import AdviserAccountResponse


class RelationCreate(StrictCamelModel):
    from_project_id: int
    to_project_id: int


class GroupRelationsCreate(StrictCamelModel):
    project_ids: List[int] = Field(..., min_length=2)
    group_id: Optional[int] = None


class RelationResponse(CamelModel):
    """Endpoint projects and the evaluating adviser appear only when resolved"""
    id: int
    from_project_id: int
    to_project_id: int
    group_id: Optional[int] = None
    from_project: Optional[ProjectResponse] = None
    to_project: Optional[ProjectResponse] = None
    adviser: Optional[AdviserAccountResponse] = None


class RelationQueryResponse(CamelModel):
    from_project: Optional[ProjectResponse] = None
    to_project: Optional[ProjectResponse] = None
    relations: List[RelationResponse]


# ==================== Groups ====================

class GroupCreate(StrictCamelModel):
    adviser_id: int
    name: Optional[str] = Field(None, max_length=255)
    project_ids: List[int] = Field(default_factory=list)


class GroupUpdate(StrictCamelModel):
    name: Optional[str] = Field(None, max_length=255)
    project_ids: List[int] = Field(default_factory=list, description="Projects to add")


class GroupResponse(CamelModel):
    id: int
    adviser_id: int
    name: Optional[str] = None
    projects: List[ProjectResponse] = []
