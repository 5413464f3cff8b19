"""Pydantic schemas for users and role accounts"""
from pydantic import EmailStr, Field
from typing import Optional, List
from datetime import datetime

from app.schemas.common import CamelModel, StrictCamelModel, UTCDateTime


# ==================== User Schemas ====================

class UserBase(StrictCamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr


class UserCreate(UserBase):
    """Password is generated when omitted (outside development)"""
    password: Optional[str] = Field(None, min_length=8, max_length=72)


class UserUpdate(StrictCamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    profile_pic_url: Optional[str] = Field(None, max_length=500)
    github_url: Optional[str] = Field(None, max_length=500)
    linkedin_url: Optional[str] = Field(None, max_length=500)
    personal_site_url: Optional[str] = Field(None, max_length=500)
    self_intro: Optional[str] = None


class UserResponse(CamelModel):
    """Never carries the password hash"""
    id: int
    name: str
    email: str
    profile_pic_url: Optional[str] = None
    github_url: Optional[str] = None
    linkedin_url: Optional[str] = None
    personal_site_url: Optional[str] = None
    self_intro: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


# ==================== Role record payloads ====================

class StudentData(StrictCamelModel):
    cohort_year: int
    matric_no: Optional[str] = Field(None, max_length=20)
    nusnet_id: Optional[str] = Field(None, max_length=20)
    project_id: Optional[int] = None


class AdviserData(StrictCamelModel):
    cohort_year: int
    matric_no: Optional[str] = Field(None, max_length=20)
    nusnet_id: Optional[str] = Field(None, max_length=20)


class MentorData(StrictCamelModel):
    cohort_year: int


class AdministratorData(StrictCamelModel):
    start_date: Optional[UTCDateTime] = None
    end_date: UTCDateTime


class CreateStudentRequest(StrictCamelModel):
    user: UserCreate
    student: StudentData


class CreateAdviserRequest(StrictCamelModel):
    user: UserCreate
    adviser: AdviserData


class CreateMentorRequest(StrictCamelModel):
    user: UserCreate
    mentor: MentorData


class CreateAdministratorRequest(StrictCamelModel):
    user: UserCreate
    administrator: AdministratorData


class BatchCreateStudentsRequest(StrictCamelModel):
    count: int = Field(..., ge=0)
    accounts: List[CreateStudentRequest]


class BatchCreateAdvisersRequest(StrictCamelModel):
    count: int = Field(..., ge=0)
    accounts: List[CreateAdviserRequest]


class BatchCreateMentorsRequest(StrictCamelModel):
    count: int = Field(..., ge=0)
    accounts: List[CreateMentorRequest]


class BatchCreateAdministratorsRequest(StrictCamelModel):
    count: int = Field(..., ge=0)
    accounts: List[CreateAdministratorRequest]


class MentorUpdate(StrictCamelModel):
    cohort_year: Optional[int] = None
    user: Optional[UserUpdate] = None


class BatchResult(CamelModel):
    """Rows that failed; successful rows are already committed"""
    message: str
    errors: List[str]


# ==================== Flattened user + role responses ====================

class StudentAccountResponse(UserResponse):
    student_id: int
    cohort_year: int
    matric_no: Optional[str] = None
    nusnet_id: Optional[str] = None
    project_id: Optional[int] = None


class AdviserAccountResponse(UserResponse):
    adviser_id: int
    cohort_year: int
    matric_no: Optional[str] = None
    nusnet_id: Optional[str] = None
    project_ids: List[int] = []


class MentorAccountResponse(UserResponse):
    mentor_id: int
    cohort_year: int
    project_ids: List[int] = []


class AdministratorAccountResponse(UserResponse):
    administrator_id: int
    start_date: datetime
    end_date: datetime
