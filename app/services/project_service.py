"""
Project Service Layer
Project teams with their students, adviser and mentor
"""

from typing import List, Optional, Dict, Iterable
from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.exceptions import BadRequestError, ResourceNotFoundError
from app.core.logging_config import logger
from app.models.cohort import Cohort
from app.models.project import Project, AchievementLevel
from app.models.roles import Student, Adviser, Mentor
from app.models.user import User
from app.schemas.project import ProjectCreate, ProjectUpdate, ProjectResponse, ProjectDetailResponse
from app.services.relation_service import RelationService
from app.services.user_service import student_account, adviser_account, mentor_account
from app.utils.pagination import PaginationParams


def _with_members():
    """
    Members only. The adviser's and mentor's other projects are fetched as ids;
    loading them as objects would re-enter the project being loaded.
    """
    return (
        selectinload(Project.students).selectinload(Student.user),
        selectinload(Project.adviser).selectinload(Adviser.user),
        selectinload(Project.mentor).selectinload(Mentor.user),
    )


def project_detail(
    project: Project,
    adviser_project_ids: Optional[List[int]] = None,
    mentor_project_ids: Optional[List[int]] = None,
) -> ProjectDetailResponse:
    """Project with its members flattened (no password hashes)"""
    return ProjectDetailResponse(
        **ProjectResponse.model_validate(project).model_dump(),
        students=[student_account(student) for student in project.students],
        adviser=adviser_account(project.adviser, adviser_project_ids or []) if project.adviser else None,
        mentor=mentor_account(project.mentor, mentor_project_ids or []) if project.mentor else None,
    )


class ProjectService:
    """Service for project operations"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _load(self, project_id: int) -> Project:
        result = await self.db.execute(
            select(Project)
            .options(*_with_members())
            .where(Project.id == project_id)
            .execution_options(populate_existing=True)
        )
        project = result.scalar_one_or_none()
        if not project:
            raise ResourceNotFoundError("Project", project_id)
        return project

    async def _project_ids_by(self, owner_column, owner_ids: Iterable[int]) -> Dict[int, List[int]]:
        """Project ids per adviser (or mentor) id"""
        owner_ids = {owner_id for owner_id in owner_ids if owner_id is not None}
        if not owner_ids:
            return {}
        result = await self.db.execute(
            select(owner_column, Project.id).where(owner_column.in_(owner_ids)).order_by(Project.id)
        )
        grouped: Dict[int, List[int]] = {}
        for owner_id, project_id in result.all():
            grouped.setdefault(owner_id, []).append(project_id)
        return grouped

    async def _details(self, projects: List[Project]) -> List[ProjectDetailResponse]:
        advised = await self._project_ids_by(Project.adviser_id, [p.adviser_id for p in projects])
        mentored = await self._project_ids_by(Project.mentor_id, [p.mentor_id for p in projects])
        return [
            project_detail(project, advised.get(project.adviser_id), mentored.get(project.mentor_id))
            for project in projects
        ]

    # =====================================================
    # QUERIES
    # =====================================================

    async def list_projects(
        self,
        pagination: PaginationParams,
        cohort_year: Optional[int] = None,
        achievement: Optional[AchievementLevel] = None,
        search: Optional[str] = None,
        dropped: Optional[bool] = None,
    ) -> List[ProjectDetailResponse]:
        query = select(Project).options(*_with_members()).order_by(Project.id)

        if cohort_year is not None:
            query = query.where(Project.cohort_year == cohort_year)
        if achievement is not None:
            query = query.where(Project.achievement == achievement)
        if dropped is not None:
            query = query.where(Project.has_dropped == dropped)
        if search:
            pattern = f"%{search}%"
            query = query.where(or_(
                Project.name.ilike(pattern),
                Project.students.any(Student.user.has(User.name.ilike(pattern))),
                Project.adviser.has(Adviser.user.has(User.name.ilike(pattern))),
                Project.mentor.has(Mentor.user.has(User.name.ilike(pattern))),
            ))

        result = await self.db.execute(pagination.apply(query))
        return await self._details(list(result.scalars().all()))

    async def list_lean(self, cohort_year: Optional[int] = None, dropped: Optional[bool] = None) -> List[Project]:
        query = select(Project).order_by(Project.id)
        if cohort_year is not None:
            query = query.where(Project.cohort_year == cohort_year)
        if dropped is not None:
            query = query.where(Project.has_dropped == dropped)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_project(self, project_id: int) -> ProjectDetailResponse:
        return (await self._details([await self._load(project_id)]))[0]

    async def get_by_student(self, student_id: int) -> ProjectDetailResponse:
        student = await self.db.get(Student, student_id)
        if not student:
            raise ResourceNotFoundError("Student", student_id)
        if student.project_id is None:
            raise BadRequestError("This student is not part of a project")
        return await self.get_project(student.project_id)

    async def list_by_adviser(self, adviser_id: int) -> List[ProjectDetailResponse]:
        if not await self.db.get(Adviser, adviser_id):
            raise ResourceNotFoundError("Adviser", adviser_id)
        result = await self.db.execute(
            select(Project).options(*_with_members())
            .where(Project.adviser_id == adviser_id)
            .order_by(Project.id)
        )
        return await self._details(list(result.scalars().all()))

    async def list_by_mentor(self, mentor_id: int) -> List[ProjectDetailResponse]:
        if not await self.db.get(Mentor, mentor_id):
            raise ResourceNotFoundError("Mentor", mentor_id)
        result = await self.db.execute(
            select(Project).options(*_with_members())
            .where(Project.mentor_id == mentor_id)
            .order_by(Project.id)
        )
        return await self._details(list(result.scalars().all()))

    # =====================================================
    # MEMBERSHIP CHECKS
    # =====================================================

    async def _check_role_record(self, model, record_id: Optional[int], cohort_year: int, label: str) -> None:
        if record_id is None:
            return
        record = await self.db.get(model, record_id)
        if not record:
            raise BadRequestError(f"{label} {record_id} does not exist")
        if record.cohort_year != cohort_year:
            raise BadRequestError(f"{label} {record_id} is not part of cohort {cohort_year}")

    async def _assign_students(self, project: Project, student_ids: List[int]) -> None:
        """A student joins at most one project per cohort"""
        if not student_ids:
            return
        result = await self.db.execute(select(Student).where(Student.id.in_(student_ids)))
        students = list(result.scalars().all())
        if len(students) != len(set(student_ids)):
            raise BadRequestError("Some of the students do not exist")

        for student in students:
            if student.cohort_year != project.cohort_year:
                raise BadRequestError(f"Student {student.id} is not part of cohort {project.cohort_year}")
            if student.project_id is not None and student.project_id != project.id:
                raise BadRequestError(f"Student {student.id} is already in a project")
            student.project_id = project.id

    # =====================================================
    # WRITES
    # =====================================================

    async def create_project(self, data: ProjectCreate) -> ProjectDetailResponse:
        if not await self.db.get(Cohort, data.cohort_year):
            raise BadRequestError(f"Cohort {data.cohort_year} does not exist")
        await self._check_role_record(Adviser, data.adviser, data.cohort_year, "Adviser")
        await self._check_role_record(Mentor, data.mentor, data.cohort_year, "Mentor")

        project = Project(
            name=data.name,
            team_name=data.team_name,
            achievement=data.achievement,
            cohort_year=data.cohort_year,
            adviser_id=data.adviser,
            mentor_id=data.mentor,
            proposal_pdf=data.proposal_pdf,
        )
        self.db.add(project)
        await self.db.flush()

        await self._assign_students(project, data.students)
        await self.db.commit()

        logger.info(f"[Projects] Created project {project.id} '{project.name}' in {project.cohort_year}")
        return await self.get_project(project.id)

    async def update_project(self, project_id: int, data: ProjectUpdate) -> ProjectDetailResponse:
        project = await self._load(project_id)
        changes = data.model_dump(exclude_unset=True)

        student_ids = changes.pop("students", None)
        if "adviser" in changes:
            await self._check_role_record(Adviser, changes["adviser"], project.cohort_year, "Adviser")
            project.adviser_id = changes.pop("adviser")
        if "mentor" in changes:
            await self._check_role_record(Mentor, changes["mentor"], project.cohort_year, "Mentor")
            project.mentor_id = changes.pop("mentor")

        for field, value in changes.items():
            setattr(project, field, value)

        if student_ids is not None:
            for student in project.students:
                if student.id not in student_ids:
                    student.project_id = None
            await self._assign_students(project, student_ids)

        await self.db.commit()
        return await self.get_project(project_id)

    async def delete_project(self, project_id: int) -> ProjectDetailResponse:
        """Relations touching the project go first"""
        project = await self._load(project_id)
        detail = (await self._details([project]))[0]

        await RelationService(self.db).delete_by_project(project_id, commit=False)
        await self.db.delete(project)
        await self.db.commit()

        logger.info(f"[Projects] Deleted project {project_id}")
        return detail


def get_project_service(db: AsyncSession) -> ProjectService:
    return ProjectService(db)
