"""Pydantic schemas for authentication"""
from pydantic import EmailStr, Field
from typing import Optional, Dict, Any

from app.schemas.common import CamelModel, StrictCamelModel
from app.schemas.user import UserResponse


class SignInRequest(StrictCamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class ResetPasswordRequest(StrictCamelModel):
    email: EmailStr


class ChangePasswordRequest(StrictCamelModel):
    id: int
    token: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=8, max_length=72)


class UserWithRolesResponse(UserResponse):
    """Signed-in user plus the role records active for the current cohort"""
    student: Optional[Dict[str, Any]] = None
    adviser: Optional[Dict[str, Any]] = None
    mentor: Optional[Dict[str, Any]] = None
    administrator: Optional[Dict[str, Any]] = None


class SignInResponse(CamelModel):
    message: str
    user: UserWithRolesResponse
