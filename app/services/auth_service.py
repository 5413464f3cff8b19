"""
Auth Service Layer
Sign-in, the signed-in user's role data, and password resets
"""

from typing import Dict, Any, Optional, Tuple
from datetime import datetime
from pydantic.alias_generators import to_camel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import AuthenticationError, ResourceNotFoundError
from app.core.logging_config import logger
from app.core.security import (
    verify_password,
    get_password_hash,
    create_access_token,
    create_password_reset_token,
    verify_password_reset_token,
)
from app.models.roles import Student, Adviser, Mentor, Administrator
from app.models.user import User
from app.schemas.auth import UserWithRolesResponse
from app.schemas.user import UserResponse
from app.services.cohort_service import get_current_cohort
from app.services.email_service import password_reset_email


def _record_dict(record, exclude=("user_id", "created_at", "updated_at")) -> Dict[str, Any]:
    return {
        to_camel(column.key): getattr(record, column.key)
        for column in record.__table__.columns
        if column.key not in exclude
    }


class AuthService:
    """Service for authentication operations"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _get_by_email(self, email: str) -> User:
        result = await self.db.execute(select(User).where(User.email == email.lower()))
        user = result.scalar_one_or_none()
        if not user:
            raise ResourceNotFoundError("User", email)
        return user

    async def user_with_roles(self, user: User) -> UserWithRolesResponse:
        """User plus the student/adviser/mentor records of the current cohort and any active admin record"""
        roles: Dict[str, Optional[Dict[str, Any]]] = {}

        cohort = await get_current_cohort(self.db)
        if cohort:
            for key, model in (("student", Student), ("adviser", Adviser), ("mentor", Mentor)):
                record = (await self.db.execute(
                    select(model).where(model.user_id == user.id, model.cohort_year == cohort.academic_year)
                )).scalar_one_or_none()
                roles[key] = _record_dict(record) if record else None

        administrator = (await self.db.execute(
            select(Administrator)
            .where(Administrator.user_id == user.id, Administrator.end_date >= datetime.utcnow())
            .order_by(Administrator.end_date.desc())
            .limit(1)
        )).scalar_one_or_none()
        roles["administrator"] = _record_dict(administrator) if administrator else None

        return UserWithRolesResponse(
            **UserResponse.model_validate(user).model_dump(),
            **roles,
        )

    async def sign_in(self, email: str, password: str) -> Tuple[str, UserWithRolesResponse]:
        """Returns (access token, user with roles)"""
        user = await self._get_by_email(email)

        if not verify_password(password, user.password):
            logger.log_auth_event("sign_in", success=False, user_email=user.email, reason="bad password")
            raise AuthenticationError("Password is incorrect")

        token = create_access_token({"sub": str(user.id)})
        logger.log_auth_event("sign_in", success=True, user_email=user.email)
        return token, await self.user_with_roles(user)

    async def request_password_reset(self, email: str) -> Tuple[str, str, str, str]:
        """
        Issue a reset token for the user and build the email carrying it.

        Returns (recipient, subject, html, text); sending is left to the caller.
        """
        user = await self._get_by_email(email)
        token = create_password_reset_token(user.id, user.password)
        link = settings.get_reset_password_url(user.id, token)

        logger.log_auth_event("reset_password_requested", success=True, user_email=user.email)
        subject, html_content, text_content = password_reset_email(user.name, link)
        return user.email, subject, html_content, text_content

    async def change_password(self, user_id: int, token: str, new_password: str) -> None:
        user = await self.db.get(User, user_id)
        if not user:
            raise ResourceNotFoundError("User", user_id)

        verify_password_reset_token(token, user.id, user.password)

        user.password = get_password_hash(new_password)
        await self.db.commit()
        logger.log_auth_event("password_changed", success=True, user_email=user.email)


def get_auth_service(db: AsyncSession) -> AuthService:
    return AuthService(db)
