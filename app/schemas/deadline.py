"""Pydantic schemas for deadlines and their question forms"""
from pydantic import Field, model_validator
from typing import Optional, List
from datetime import datetime

from app.models.deadline import DeadlineType, QuestionType
from app.schemas.common import CamelModel, StrictCamelModel, UTCDateTime


class DeadlineCreate(StrictCamelModel):
    cohort_year: int
    name: str = Field(..., min_length=1, max_length=255)
    desc: Optional[str] = None
    due_by: UTCDateTime
    type: DeadlineType
    evaluating_milestone_id: Optional[int] = None

    @model_validator(mode="after")
    def check_evaluation_target(self):
        if self.type == DeadlineType.EVALUATION and self.evaluating_milestone_id is None:
            raise ValueError("Evaluation deadlines must reference the milestone they evaluate")
        if self.type != DeadlineType.EVALUATION and self.evaluating_milestone_id is not None:
            raise ValueError("Only evaluation deadlines may reference a milestone")
        return self


class DeadlineUpdate(StrictCamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    desc: Optional[str] = None
    due_by: Optional[UTCDateTime] = None
    evaluating_milestone_id: Optional[int] = None


class DeadlineDuplicateRequest(StrictCamelModel):
    cohort_year: int


class DeadlineResponse(CamelModel):
    id: int
    cohort_year: int
    name: str
    desc: Optional[str] = None
    due_by: datetime
    type: DeadlineType
    evaluating_milestone_id: Optional[int] = None
    created_on: datetime
    updated_at: Optional[datetime] = None


# ==================== Sections & Questions ====================

class QuestionInput(StrictCamelModel):
    question: str = Field(..., min_length=1)
    desc: Optional[str] = None
    type: QuestionType = QuestionType.SHORT_ANSWER
    is_anonymous: bool = False
    options: List[str] = Field(default_factory=list)


class SectionInput(StrictCamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    desc: Optional[str] = None
    questions: List[QuestionInput] = Field(default_factory=list)


class ReplaceSectionsRequest(StrictCamelModel):
    sections: List[SectionInput]


class QuestionResponse(CamelModel):
    id: int
    question_number: int
    question: str
    desc: Optional[str] = None
    type: QuestionType
    is_anonymous: bool
    options: List[str] = []


class SectionResponse(CamelModel):
    id: int
    section_number: int
    name: str
    desc: Optional[str] = None
    questions: List[QuestionResponse] = []


class DeadlineQuestionsResponse(CamelModel):
    deadline: DeadlineResponse
    sections: List[SectionResponse]
