"""Pydantic schemas for submissions and answers"""
from pydantic import Field
from typing import Optional, List
from datetime import datetime

from app.schemas.common import CamelModel, StrictCamelModel
from app.schemas.deadline import DeadlineResponse, SectionResponse


class AnswerInput(StrictCamelModel):
    question_id: int
    answer: str = ""


class SubmissionCreate(StrictCamelModel):
    deadline_id: int
    from_project_id: Optional[int] = None
    from_user_id: Optional[int] = None
    to_project_id: Optional[int] = None
    to_user_id: Optional[int] = None
    is_draft: bool = True
    answers: List[AnswerInput] = Field(default_factory=list)


class SubmissionUpdate(StrictCamelModel):
    answers: Optional[List[AnswerInput]] = None
    is_draft: Optional[bool] = None


class AnswerResponse(CamelModel):
    question_id: int
    answer: str


class SubmissionResponse(CamelModel):
    id: int
    deadline_id: int
    from_project_id: Optional[int] = None
    from_user_id: Optional[int] = None
    to_project_id: Optional[int] = None
    to_user_id: Optional[int] = None
    is_draft: bool
    created_at: datetime
    updated_at: datetime


class SubmissionDetailResponse(SubmissionResponse):
    answers: List[AnswerResponse] = []


class AnonymousAnswerResponse(CamelModel):
    """An answer to an anonymous question, stripped of who wrote it"""
    deadline_id: int
    deadline_name: str
    question_id: int
    question: str
    answer: str


class SubmissionFormResponse(SubmissionDetailResponse):
    """A submission together with the form it answers"""
    deadline: DeadlineResponse
    sections: List[SectionResponse] = []
