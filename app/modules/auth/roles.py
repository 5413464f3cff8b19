"""
Role resolution.

A user holds roles through separate Student / Adviser / Mentor /
Administrator records. For each request the records are collapsed into
exactly one `Role` for the current cohort, resolved once and passed down
to authorization checks and services.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Union
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.roles import Student, Adviser, Mentor, Administrator
from app.models.user import User
from app.services.cohort_service import get_current_cohort


@dataclass(frozen=True)
class StudentRole:
    student_id: int
    cohort_year: int
    project_id: Optional[int] = None
    name: str = "Student"


@dataclass(frozen=True)
class AdviserRole:
    adviser_id: int
    cohort_year: int
    name: str = "Adviser"


@dataclass(frozen=True)
class MentorRole:
    mentor_id: int
    cohort_year: int
    name: str = "Mentor"


@dataclass(frozen=True)
class AdministratorRole:
    administrator_id: int
    end_date: datetime
    name: str = "Administrator"


@dataclass(frozen=True)
class NoRole:
    name: str = "None"


Role = Union[StudentRole, AdviserRole, MentorRole, AdministratorRole, NoRole]


@dataclass(frozen=True)
class Actor:
    """The signed-in user together with their resolved role"""
    user: User
    role: Role

    @property
    def is_admin(self) -> bool:
        return isinstance(self.role, AdministratorRole)


async def resolve_role(db: AsyncSession, user: User) -> Role:
    """An active administrator record wins; then adviser, mentor, student of the current cohort"""
    now = datetime.utcnow()

    result = await db.execute(
        select(Administrator)
        .where(Administrator.user_id == user.id, Administrator.end_date >= now)
        .order_by(Administrator.end_date.desc())
        .limit(1)
    )
    administrator = result.scalar_one_or_none()
    if administrator:
        return AdministratorRole(administrator_id=administrator.id, end_date=administrator.end_date)

    cohort = await get_current_cohort(db)
    if not cohort:
        return NoRole()
    cohort_year = cohort.academic_year

    adviser = (await db.execute(
        select(Adviser).where(Adviser.user_id == user.id, Adviser.cohort_year == cohort_year)
    )).scalar_one_or_none()
    if adviser:
        return AdviserRole(adviser_id=adviser.id, cohort_year=cohort_year)

    mentor = (await db.execute(
        select(Mentor).where(Mentor.user_id == user.id, Mentor.cohort_year == cohort_year)
    )).scalar_one_or_none()
    if mentor:
        return MentorRole(mentor_id=mentor.id, cohort_year=cohort_year)

    student = (await db.execute(
        select(Student).where(Student.user_id == user.id, Student.cohort_year == cohort_year)
    )).scalar_one_or_none()
    if student:
        return StudentRole(student_id=student.id, cohort_year=cohort_year, project_id=student.project_id)

    return NoRole()
