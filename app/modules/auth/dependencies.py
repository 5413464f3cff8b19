from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import Optional, Iterable, Type

from app.core.config import settings
from app.core.database import get_db
from app.core.exceptions import AuthenticationError, AuthorizationError
from app.core.logging_config import set_user_id, set_role
from app.core.security import decode_token
from app.models.announcement import Announcement, TargetAudienceRole
from app.models.evaluation import EvaluationGroup
from app.models.project import Project
from app.models.roles import Student, Adviser
from app.models.submission import Submission
from app.models.user import User
from app.modules.auth.roles import (
    Actor,
    AdviserRole,
    MentorRole,
    Role,
    StudentRole,
    resolve_role,
)

# Browsers send the cookie; API clients may send a bearer header instead
security = HTTPBearer(auto_error=False)


def _extract_token(request: Request, credentials: Optional[HTTPAuthorizationCredentials]) -> Optional[str]:
    token = request.cookies.get(settings.AUTH_COOKIE_NAME)
    if token:
        return token
    if credentials:
        return credentials.credentials
    return None


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> User:
    """Get current authenticated user"""
    token = _extract_token(request, credentials)
    if not token:
        raise AuthenticationError("You must be signed in to access this resource")

    payload = decode_token(token)

    if payload.get("type") != "access":
        raise AuthenticationError("Invalid token type")

    user_id = payload.get("sub")
    if not user_id or not str(user_id).isdigit():
        raise AuthenticationError("Invalid token payload")

    user = await db.get(User, int(user_id))
    if not user:
        raise AuthenticationError("User not found")

    set_user_id(str(user.id))
    return user


async def get_current_actor(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
) -> Actor:
    """Signed-in user with the role resolved for the current cohort"""
    role = await resolve_role(db, current_user)
    set_role(role.name)
    return Actor(user=current_user, role=role)


async def require_admin(actor: Actor = Depends(get_current_actor)) -> Actor:
    """Get current administrator"""
    if not actor.is_admin:
        raise AuthorizationError("Administrator access required")
    return actor


def require_roles(*kinds: Type[Role]):
    """
    Dependency factory admitting only the listed role kinds.

    Usage:
        router = APIRouter(dependencies=[Depends(require_roles(AdviserRole, AdministratorRole))])
    """
    async def role_checker(actor: Actor = Depends(get_current_actor)) -> Actor:
        if not isinstance(actor.role, kinds):
            raise AuthorizationError()
        return actor

    return role_checker


# ==================== Ownership checks ====================
# Each check lets administrators through and raises AuthorizationError otherwise.

def ensure_self_or_admin(actor: Actor, user_id: int) -> None:
    if actor.is_admin or actor.user.id == user_id:
        return
    raise AuthorizationError()


async def ensure_owns_role_record(db: AsyncSession, actor: Actor, model, record_id: int) -> None:
    """The Student / Adviser / Mentor record `record_id` must belong to the caller"""
    if actor.is_admin:
        return
    record = await db.get(model, record_id)
    if not record or record.user_id != actor.user.id:
        raise AuthorizationError()


async def _adviser_ids_of(db: AsyncSession, user_id: int) -> set:
    result = await db.execute(select(Adviser.id).where(Adviser.user_id == user_id))
    return set(result.scalars().all())


async def ensure_adviser_of_projects(db: AsyncSession, actor: Actor, project_ids: Iterable[int]) -> None:
    """Every listed project must be advised by the caller"""
    if actor.is_admin:
        return
    if not isinstance(actor.role, AdviserRole):
        raise AuthorizationError()

    project_ids = set(project_ids)
    adviser_ids = await _adviser_ids_of(db, actor.user.id)
    result = await db.execute(select(Project.adviser_id).where(Project.id.in_(project_ids)))
    owners = result.scalars().all()
    if len(owners) != len(project_ids) or any(owner not in adviser_ids for owner in owners):
        raise AuthorizationError("You are not the adviser of these projects")


async def ensure_adviser_of_group(db: AsyncSession, actor: Actor, group: EvaluationGroup) -> None:
    if actor.is_admin:
        return
    if group.adviser_id not in await _adviser_ids_of(db, actor.user.id):
        raise AuthorizationError("You are not the adviser of this group")


async def ensure_student_of_project(db: AsyncSession, actor: Actor, project_id: Optional[int]) -> None:
    if actor.is_admin:
        return
    if project_id is None:
        raise AuthorizationError()
    result = await db.execute(
        select(Student.id).where(Student.user_id == actor.user.id, Student.project_id == project_id)
    )
    if result.first() is None:
        raise AuthorizationError("You are not a member of this project")


async def ensure_submitter(db: AsyncSession, actor: Actor, submission: Submission) -> None:
    """Submitting user, a student of the submitting project, or an administrator"""
    if actor.is_admin:
        return
    if submission.from_user_id is not None and submission.from_user_id == actor.user.id:
        return
    if submission.from_project_id is not None:
        await ensure_student_of_project(db, actor, submission.from_project_id)
        return
    raise AuthorizationError("You did not make this submission")


async def ensure_may_submit_as(db: AsyncSession, actor: Actor, from_project_id: Optional[int],
                               from_user_id: Optional[int]) -> None:
    """Submitting on behalf of a project requires membership; on behalf of a user requires being them"""
    if actor.is_admin:
        return
    if from_user_id is not None:
        ensure_self_or_admin(actor, from_user_id)
    if from_project_id is not None:
        await ensure_student_of_project(db, actor, from_project_id)


def ensure_author(actor: Actor, author_id: int, allow_admin: bool = True) -> None:
    if actor.user.id == author_id or (allow_admin and actor.is_admin):
        return
    raise AuthorizationError("You are not the author")


def ensure_in_audience(actor: Actor, announcement: Announcement) -> None:
    if actor.is_admin or announcement.target_audience_role == TargetAudienceRole.ALL:
        return
    if actor.role.name != announcement.target_audience_role.value:
        raise AuthorizationError("This announcement is not addressed to you")
    if isinstance(actor.role, (StudentRole, AdviserRole, MentorRole)) and \
            actor.role.cohort_year != announcement.cohort_year:
        raise AuthorizationError("This announcement is not addressed to you")


__all__ = [
    "get_current_user",
    "get_current_actor",
    "require_admin",
    "require_roles",
    "ensure_self_or_admin",
    "ensure_owns_role_record",
    "ensure_adviser_of_projects",
    "ensure_adviser_of_group",
    "ensure_student_of_project",
    "ensure_submitter",
    "ensure_may_submit_as",
    "ensure_author",
    "ensure_in_audience",
]
