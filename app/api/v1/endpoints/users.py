"""
User & Role Account Endpoints

Account creation (single and batch) for every role, attaching roles to an
existing user, and plain user profile management.
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.exceptions import BadRequestError
from app.models.roles import UserRolesEnum
from app.modules.auth.dependencies import get_current_actor, require_admin, ensure_self_or_admin
from app.modules.auth.roles import Actor
from app.schemas.user import (
    UserResponse,
    UserUpdate,
    StudentData,
    AdviserData,
    MentorData,
    AdministratorData,
    CreateStudentRequest,
    CreateAdviserRequest,
    CreateMentorRequest,
    CreateAdministratorRequest,
    BatchCreateStudentsRequest,
    BatchCreateAdvisersRequest,
    BatchCreateMentorsRequest,
    BatchCreateAdministratorsRequest,
    BatchResult,
    StudentAccountResponse,
    AdviserAccountResponse,
    MentorAccountResponse,
    AdministratorAccountResponse,
)
from app.services.user_service import get_user_service
from app.utils.pagination import PaginationParams, get_pagination

router = APIRouter()


# ==================== Single account creation ====================

@router.post("/create-student", response_model=StudentAccountResponse, status_code=status.HTTP_201_CREATED)
async def create_student(
    body: CreateStudentRequest,
    admin: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return await get_user_service(db).create_account(UserRolesEnum.STUDENT, body.user, body.student)


@router.post("/create-adviser", response_model=AdviserAccountResponse, status_code=status.HTTP_201_CREATED)
async def create_adviser(
    body: CreateAdviserRequest,
    admin: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return await get_user_service(db).create_account(UserRolesEnum.ADVISER, body.user, body.adviser)


@router.post("/create-mentor", response_model=MentorAccountResponse, status_code=status.HTTP_201_CREATED)
async def create_mentor(
    body: CreateMentorRequest,
    admin: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return await get_user_service(db).create_account(UserRolesEnum.MENTOR, body.user, body.mentor)


@router.post(
    "/create-administrator", response_model=AdministratorAccountResponse, status_code=status.HTTP_201_CREATED
)
async def create_administrator(
    body: CreateAdministratorRequest,
    admin: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return await get_user_service(db).create_account(UserRolesEnum.ADMINISTRATOR, body.user, body.administrator)


# ==================== Batch creation ====================
# Best effort: rows that fail are reported, the rest stay committed

@router.post("/create-student/batch", response_model=BatchResult)
async def create_students(
    body: BatchCreateStudentsRequest,
    admin: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return await get_user_service(db).create_accounts_batch(UserRolesEnum.STUDENT, body.count, body.accounts)


@router.post("/create-adviser/batch", response_model=BatchResult)
async def create_advisers(
    body: BatchCreateAdvisersRequest,
    admin: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return await get_user_service(db).create_accounts_batch(UserRolesEnum.ADVISER, body.count, body.accounts)


@router.post("/create-mentor/batch", response_model=BatchResult)
async def create_mentors(
    body: BatchCreateMentorsRequest,
    admin: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return await get_user_service(db).create_accounts_batch(UserRolesEnum.MENTOR, body.count, body.accounts)


@router.post("/create-administrator/batch", response_model=BatchResult)
async def create_administrators(
    body: BatchCreateAdministratorsRequest,
    admin: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return await get_user_service(db).create_accounts_batch(
        UserRolesEnum.ADMINISTRATOR, body.count, body.accounts
    )


# ==================== Roles on existing users ====================

@router.post("/{user_id}/student", response_model=StudentAccountResponse, status_code=status.HTTP_201_CREATED)
async def add_student_role(
    user_id: int,
    body: StudentData,
    admin: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return await get_user_service(db).add_role(user_id, UserRolesEnum.STUDENT, body)


@router.post("/{user_id}/adviser", response_model=AdviserAccountResponse, status_code=status.HTTP_201_CREATED)
async def add_adviser_role(
    user_id: int,
    body: AdviserData,
    admin: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return await get_user_service(db).add_role(user_id, UserRolesEnum.ADVISER, body)


@router.post("/{user_id}/mentor", response_model=MentorAccountResponse, status_code=status.HTTP_201_CREATED)
async def add_mentor_role(
    user_id: int,
    body: MentorData,
    admin: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return await get_user_service(db).add_role(user_id, UserRolesEnum.MENTOR, body)


@router.post(
    "/{user_id}/administrator", response_model=AdministratorAccountResponse, status_code=status.HTTP_201_CREATED
)
async def add_administrator_role(
    user_id: int,
    body: AdministratorData,
    admin: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return await get_user_service(db).add_role(user_id, UserRolesEnum.ADMINISTRATOR, body)


# ==================== Users ====================

@router.get("", response_model=List[UserResponse])
async def list_users(
    cohort_year: Optional[int] = Query(None, alias="cohortYear"),
    role: Optional[str] = Query(None),
    pagination: PaginationParams = Depends(get_pagination),
    admin: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    role_kind = None
    if role is not None:
        try:
            role_kind = UserRolesEnum(role)
        except ValueError:
            raise BadRequestError("Invalid Input for Role in Request")
    return await get_user_service(db).list_users(cohort_year, role_kind, pagination)


@router.get("/{email}", response_model=UserResponse)
async def get_user_by_email(
    email: str,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db)
):
    return await get_user_service(db).get_user_by_email(email)


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: int,
    body: UserUpdate,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db)
):
    """Profile fields only; users edit themselves, administrators anyone"""
    ensure_self_or_admin(actor, user_id)
    return await get_user_service(db).update_user(user_id, body)


@router.delete("/{user_id}", response_model=UserResponse)
async def delete_user(
    user_id: int,
    admin: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return await get_user_service(db).delete_user(user_id)
