"""Pydantic schemas for projects"""
from pydantic import Field
from typing import Optional, List
from datetime import datetime

from app.models.project import AchievementLevel
from app.schemas.common import CamelModel, StrictCamelModel
from app.schemas.user import StudentAccountResponse, AdviserAccountResponse, MentorAccountResponse


class ProjectCreate(StrictCamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    team_name: Optional[str] = Field(None, max_length=255)
    achievement: AchievementLevel = AchievementLevel.VOSTOK
    cohort_year: int
    students: List[int] = Field(default_factory=list, description="Student ids")
    adviser: Optional[int] = Field(None, description="Adviser id")
    mentor: Optional[int] = Field(None, description="Mentor id")
    proposal_pdf: Optional[str] = Field(None, max_length=500)


class ProjectUpdate(StrictCamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    team_name: Optional[str] = Field(None, max_length=255)
    achievement: Optional[AchievementLevel] = None
    has_dropped: Optional[bool] = None
    proposal_pdf: Optional[str] = Field(None, max_length=500)
    students: Optional[List[int]] = None
    adviser: Optional[int] = None
    mentor: Optional[int] = None


class ProjectResponse(CamelModel):
    id: int
    name: str
    team_name: Optional[str] = None
    achievement: AchievementLevel
    cohort_year: int
    adviser_id: Optional[int] = None
    mentor_id: Optional[int] = None
    has_dropped: bool = False
    proposal_pdf: Optional[str] = None
    created_at: Optional[datetime] = None


class LeanProjectResponse(CamelModel):
    id: int
    name: str


class ProjectDetailResponse(ProjectResponse):
    students: List[StudentAccountResponse] = []
    adviser: Optional[AdviserAccountResponse] = None
    mentor: Optional[MentorAccountResponse] = None
