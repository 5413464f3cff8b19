from fastapi import APIRouter, BackgroundTasks, Depends, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.database import get_db
from app.core.logging_config import logger
from app.core.rate_limiter import limiter
from app.models.user import User
from app.modules.auth.dependencies import get_current_user
from app.schemas.auth import (
    SignInRequest,
    SignInResponse,
    ResetPasswordRequest,
    ChangePasswordRequest,
    UserWithRolesResponse,
)
from app.schemas.common import MessageResponse
from app.services.auth_service import get_auth_service
from app.services.email_service import EmailNotifier, get_email_notifier, deliver

router = APIRouter()

COOKIE_MAX_AGE = 10 * 24 * 60 * 60  # 10 days


def _set_auth_cookie(response: Response, token: str) -> None:
    """SameSite=None needs Secure, so it is only used in production (cross-site frontend)"""
    production = settings.is_production()
    response.set_cookie(
        key=settings.AUTH_COOKIE_NAME,
        value=token,
        max_age=COOKIE_MAX_AGE,
        httponly=True,
        secure=production,
        samesite="none" if production else "lax",
    )


@router.post("/sign-in", response_model=SignInResponse)
@limiter.limit(settings.SIGN_IN_RATE_LIMIT)
async def sign_in(
    request: Request,
    response: Response,
    credentials: SignInRequest,
    db: AsyncSession = Depends(get_db)
):
    """Sign in with email and password; the session token is set as an httpOnly cookie"""
    service = get_auth_service(db)
    token, user = await service.sign_in(credentials.email, credentials.password)
    _set_auth_cookie(response, token)
    return SignInResponse(message="Signed in successfully", user=user)


@router.get("/sign-out", response_model=MessageResponse)
async def sign_out(response: Response):
    response.delete_cookie(settings.AUTH_COOKIE_NAME)
    return MessageResponse(message="Signed out successfully")


@router.get("/info", response_model=UserWithRolesResponse)
async def get_user_info(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Signed-in user with the role records of the current cohort"""
    return await get_auth_service(db).user_with_roles(current_user)


@router.post("/reset-password", response_model=MessageResponse)
@limiter.limit("3/minute")
async def reset_password(
    request: Request,
    body: ResetPasswordRequest,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
    notifier: EmailNotifier = Depends(get_email_notifier)
):
    """Email a password reset link (rate limited: 3/min)"""
    recipient, subject, html_content, text_content = await get_auth_service(db).request_password_reset(body.email)
    background_tasks.add_task(deliver, notifier, recipient, subject, html_content, text_content)
    logger.info(f"[Auth] Password reset requested for {recipient}")
    return MessageResponse(message="A password reset link has been sent to your email")


@router.post("/change-password", response_model=MessageResponse)
async def change_password(
    body: ChangePasswordRequest,
    db: AsyncSession = Depends(get_db)
):
    await get_auth_service(db).change_password(body.id, body.token, body.new_password)
    return MessageResponse(message="Password changed successfully")
