"""Pydantic schemas for the application pipeline"""
from pydantic import Field
from typing import List
from datetime import datetime

from app.models.application import ApplicationStatus
from app.models.project import AchievementLevel
from app.schemas.common import CamelModel, StrictCamelModel
from app.schemas.submission import AnswerInput


class ApplicationSubmit(StrictCamelModel):
    deadline_id: int
    answers: List[AnswerInput] = Field(default_factory=list)


class ApplicantResponse(CamelModel):
    id: int
    name: str
    email: str
    matric_no: str
    nusnet_id: str
    deadline_id: int


class ApplicationResponse(CamelModel):
    submission_id: int
    team_name: str
    achievement: AchievementLevel
    status: ApplicationStatus
    created_at: datetime
    applicants: List[ApplicantResponse] = []

