"""
Rate Limiting for Capstone Hub API
==================================
slowapi limiter keyed by client address.

Only credential-handling endpoints carry explicit limits:
- /auth/sign-in: SIGN_IN_RATE_LIMIT (brute force protection)
- /auth/reset-password: 3 req/min (email flooding)
"""

from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from fastapi import Request
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.core.logging_config import logger


limiter = Limiter(
    key_func=get_remote_address,
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    enabled=settings.RATE_LIMIT_ENABLED,
    strategy="fixed-window",
)


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    """Render 429 in the standard `{message, meta}` envelope"""
    logger.warning(
        f"[RateLimit] Exceeded for {get_remote_address(request)}: {exc.detail}"
    )

    return JSONResponse(
        status_code=429,
        content={
            "message": "Too many requests. Please slow down.",
            "meta": {"limit": str(exc.detail)},
        },
    )
