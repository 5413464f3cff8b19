"""
User Service Layer
Users and the Student / Adviser / Mentor / Administrator records attached to them
"""

from typing import List, Optional, Dict, Any, Union
from datetime import datetime
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.config import settings
from app.core.exceptions import (
    BadRequestError,
    CapstoneHubError,
    ConflictError,
    ResourceNotFoundError,
    conflicting_fields,
)
from app.core.logging_config import logger
from app.core.security import get_password_hash, generate_random_password
from app.models.project import Project, AchievementLevel
from app.models.roles import Student, Adviser, Mentor, Administrator, UserRolesEnum
from app.models.user import User
from app.schemas.user import (
    UserCreate,
    UserUpdate,
    UserResponse,
    StudentData,
    AdviserData,
    MentorData,
    AdministratorData,
    MentorUpdate,
    BatchResult,
    StudentAccountResponse,
    AdviserAccountResponse,
    MentorAccountResponse,
    AdministratorAccountResponse,
)
from app.utils.pagination import PaginationParams

ROLE_MODELS = {
    UserRolesEnum.STUDENT: Student,
    UserRolesEnum.ADVISER: Adviser,
    UserRolesEnum.MENTOR: Mentor,
    UserRolesEnum.ADMINISTRATOR: Administrator,
}

RoleData = Union[StudentData, AdviserData, MentorData, AdministratorData]


# =====================================================
# FLATTENING (user + role record -> one object, no password)
# =====================================================

def _user_fields(user: User) -> Dict[str, Any]:
    return UserResponse.model_validate(user).model_dump()


def student_account(student: Student) -> StudentAccountResponse:
    return StudentAccountResponse(
        **_user_fields(student.user),
        student_id=student.id,
        cohort_year=student.cohort_year,
        matric_no=student.matric_no,
        nusnet_id=student.nusnet_id,
        project_id=student.project_id,
    )


def adviser_account(adviser: Adviser, project_ids: Optional[List[int]] = None) -> AdviserAccountResponse:
    if project_ids is None:
        project_ids = [project.id for project in adviser.projects]
    return AdviserAccountResponse(
        **_user_fields(adviser.user),
        adviser_id=adviser.id,
        cohort_year=adviser.cohort_year,
        matric_no=adviser.matric_no,
        nusnet_id=adviser.nusnet_id,
        project_ids=project_ids,
    )


def mentor_account(mentor: Mentor, project_ids: Optional[List[int]] = None) -> MentorAccountResponse:
    if project_ids is None:
        project_ids = [project.id for project in mentor.projects]
    return MentorAccountResponse(
        **_user_fields(mentor.user),
        mentor_id=mentor.id,
        cohort_year=mentor.cohort_year,
        project_ids=project_ids,
    )


def administrator_account(administrator: Administrator) -> AdministratorAccountResponse:
    return AdministratorAccountResponse(
        **_user_fields(administrator.user),
        administrator_id=administrator.id,
        start_date=administrator.start_date,
        end_date=administrator.end_date,
    )


FLATTENERS = {
    UserRolesEnum.STUDENT: student_account,
    UserRolesEnum.ADVISER: adviser_account,
    UserRolesEnum.MENTOR: mentor_account,
    UserRolesEnum.ADMINISTRATOR: administrator_account,
}


def _account_query(kind: UserRolesEnum):
    model = ROLE_MODELS[kind]
    query = select(model).options(selectinload(model.user))
    if kind in (UserRolesEnum.ADVISER, UserRolesEnum.MENTOR):
        query = query.options(selectinload(model.projects))
    return query


class UserService:
    """Service for user and role account operations"""

    def __init__(self, db: AsyncSession):
        self.db = db

    # =====================================================
    # ACCOUNT CREATION
    # =====================================================

    def _new_user(self, data: UserCreate) -> User:
        if settings.is_dev_mode() and not data.password:
            raise BadRequestError("Parameters missing from request")

        password = data.password or generate_random_password()
        return User(
            name=data.name,
            email=data.email.lower(),
            password=get_password_hash(password),
        )

    def _new_role_record(self, kind: UserRolesEnum, user_id: int, data: RoleData):
        if kind == UserRolesEnum.ADMINISTRATOR:
            return Administrator(
                user_id=user_id,
                start_date=data.start_date or datetime.utcnow(),
                end_date=data.end_date,
            )
        fields = data.model_dump()
        for key in ("matric_no", "nusnet_id"):
            if fields.get(key):
                fields[key] = fields[key].upper()
        return ROLE_MODELS[kind](user_id=user_id, **fields)

    async def create_account(self, kind: UserRolesEnum, user_data: UserCreate, role_data: RoleData):
        """Create a User and its role record together"""
        user = self._new_user(user_data)
        self.db.add(user)
        await self.db.flush()

        record = self._new_role_record(kind, user.id, role_data)
        self.db.add(record)
        await self.db.commit()

        logger.info(f"[Users] Created {kind.value} account for {user.email}")
        return await self.get_account(kind, record.id)

    async def create_accounts_batch(self, kind: UserRolesEnum, count: int, accounts: List[Any]) -> BatchResult:
        """
        Best-effort batch creation: each row commits on its own and failed rows
        are reported back without undoing the rows that succeeded.
        """
        if count != len(accounts):
            raise BadRequestError("Count and Accounts Data do not match")

        errors: List[str] = []
        role_key = kind.value.lower()

        for account in accounts:
            try:
                await self.create_account(kind, account.user, getattr(account, role_key))
            except IntegrityError as e:
                await self.db.rollback()
                errors.append(f"{account.user.email}: {ConflictError(conflicting_fields(e)).message}")
            except CapstoneHubError as e:
                await self.db.rollback()
                errors.append(f"{account.user.email}: {e.message}")

        logger.log_batch_result(f"create_{role_key}_accounts", total=len(accounts), failed=len(errors))
        return BatchResult(
            message=f"Created {len(accounts) - len(errors)} of {len(accounts)} accounts",
            errors=errors,
        )

    async def create_team(
        self,
        name: str,
        team_name: str,
        achievement: AchievementLevel,
        cohort_year: int,
        members: List[Dict[str, Any]],
    ) -> List[str]:
        """
        Create a project and a Student record for every member, all or nothing.

        Members are `{name, email, matric_no, nusnet_id}`; an existing user with
        the same email is reused. Returns the list of failure messages, empty
        on success.
        """
        try:
            project = Project(
                name=name,
                team_name=team_name,
                achievement=achievement,
                cohort_year=cohort_year,
            )
            self.db.add(project)
            await self.db.flush()

            for member in members:
                email = member["email"].lower()
                user = (await self.db.execute(
                    select(User).where(User.email == email)
                )).scalar_one_or_none()
                if not user:
                    user = User(
                        name=member["name"],
                        email=email,
                        password=get_password_hash(generate_random_password()),
                    )
                    self.db.add(user)
                    await self.db.flush()

                self.db.add(self._new_role_record(UserRolesEnum.STUDENT, user.id, StudentData(
                    cohort_year=cohort_year,
                    project_id=project.id,
                    matric_no=member["matric_no"],
                    nusnet_id=member["nusnet_id"],
                )))
            await self.db.flush()
        except IntegrityError as e:
            await self.db.rollback()
            errors = [ConflictError(conflicting_fields(e)).message]
            logger.log_batch_result("create_team", total=len(members), failed=len(members), team=team_name)
            return errors

        await self.db.commit()
        logger.log_batch_result("create_team", total=len(members), failed=0, team=team_name)
        return []

    async def add_role(self, user_id: int, kind: UserRolesEnum, role_data: RoleData):
        """Attach a role record to an existing user"""
        user = await self.get_user(user_id)
        record = self._new_role_record(kind, user.id, role_data)
        self.db.add(record)
        await self.db.commit()
        return await self.get_account(kind, record.id)

    # =====================================================
    # USERS
    # =====================================================

    async def list_users(
        self,
        cohort_year: Optional[int],
        role: Optional[UserRolesEnum],
        pagination: PaginationParams,
    ) -> List[User]:
        query = select(User).order_by(User.id)

        if role == UserRolesEnum.ADMINISTRATOR:
            query = query.where(User.administrators.any(Administrator.end_date >= datetime.utcnow()))
        elif role is not None:
            model = ROLE_MODELS[role]
            relation = getattr(User, f"{role.value.lower()}s")
            criteria = model.cohort_year == cohort_year if cohort_year is not None else None
            query = query.where(relation.any(criteria) if criteria is not None else relation.any())
        elif cohort_year is not None:
            query = query.where(
                User.students.any(Student.cohort_year == cohort_year)
                | User.advisers.any(Adviser.cohort_year == cohort_year)
                | User.mentors.any(Mentor.cohort_year == cohort_year)
            )

        result = await self.db.execute(pagination.apply(query))
        return list(result.scalars().all())

    async def get_user(self, user_id: int) -> User:
        user = await self.db.get(User, user_id)
        if not user:
            raise ResourceNotFoundError("User", user_id)
        return user

    async def get_user_by_email(self, email: str) -> User:
        result = await self.db.execute(select(User).where(User.email == email.lower()))
        user = result.scalar_one_or_none()
        if not user:
            raise ResourceNotFoundError("User", email)
        return user

    async def update_user(self, user_id: int, data: UserUpdate) -> User:
        user = await self.get_user(user_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(user, field, value)
        await self.db.commit()
        await self.db.refresh(user)
        return user

    async def delete_user(self, user_id: int) -> User:
        user = await self.get_user(user_id)
        await self.db.delete(user)
        await self.db.commit()
        logger.info(f"[Users] Deleted user {user_id}")
        return user

    # =====================================================
    # ROLE ACCOUNTS
    # =====================================================

    async def list_accounts(
        self,
        kind: UserRolesEnum,
        cohort_year: Optional[int],
        pagination: PaginationParams,
    ) -> list:
        model = ROLE_MODELS[kind]
        query = _account_query(kind).order_by(model.id)
        if cohort_year is not None and kind != UserRolesEnum.ADMINISTRATOR:
            query = query.where(model.cohort_year == cohort_year)

        result = await self.db.execute(pagination.apply(query))
        return [FLATTENERS[kind](record) for record in result.scalars().all()]

    async def get_account_record(self, kind: UserRolesEnum, record_id: int):
        model = ROLE_MODELS[kind]
        result = await self.db.execute(_account_query(kind).where(model.id == record_id))
        record = result.scalar_one_or_none()
        if not record:
            raise ResourceNotFoundError(kind.value, record_id)
        return record

    async def get_account(self, kind: UserRolesEnum, record_id: int):
        return FLATTENERS[kind](await self.get_account_record(kind, record_id))

    async def get_student_by_email(self, email: str) -> StudentAccountResponse:
        """Student record of the most recent cohort the user studied in"""
        result = await self.db.execute(
            _account_query(UserRolesEnum.STUDENT)
            .join(User, Student.user_id == User.id)
            .where(User.email == email.lower())
            .order_by(Student.cohort_year.desc())
            .limit(1)
        )
        student = result.scalar_one_or_none()
        if not student:
            raise ResourceNotFoundError("Student", email)
        return student_account(student)

    async def update_mentor(self, mentor_id: int, data: MentorUpdate) -> MentorAccountResponse:
        mentor = await self.get_account_record(UserRolesEnum.MENTOR, mentor_id)
        if data.cohort_year is not None:
            mentor.cohort_year = data.cohort_year
        if data.user is not None:
            for field, value in data.user.model_dump(exclude_unset=True).items():
                setattr(mentor.user, field, value)
        await self.db.commit()
        return await self.get_account(UserRolesEnum.MENTOR, mentor_id)

    async def delete_account(self, kind: UserRolesEnum, record_id: int):
        """Delete the role record only; the user stays"""
        record = await self.get_account_record(kind, record_id)
        account = FLATTENERS[kind](record)
        await self.db.delete(record)
        await self.db.commit()
        logger.info(f"[Users] Deleted {kind.value} record {record_id}")
        return account


def get_user_service(db: AsyncSession) -> UserService:
    return UserService(db)
