"""
Circuit Challenge - Security Middleware

Rate limiting, request validation, security headers.
"""

from fastapi import Request, HTTPException, status
from slowapi import Limiter
from slowapi.util import get_remote_address
from typing import Callable

from ..config import settings


MAX_JSON_SIZE = 1024 * 100


# ============================================
# RATE LIMITER
# ============================================

limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)

generate_rate_limit = f"{settings.RATE_LIMIT_GENERATE}/minute"


# ============================================
# REQUEST VALIDATORS
# ============================================

async def validate_json_size(request: Request):
    """
    Проверка размера JSON (пазл в теле запроса может быть большим).
    Max 100KB.
    """
    content_length = request.headers.get("content-length")

    try:
        size = int(content_length) if content_length else 0
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid Content-Length header"
        )

    if size > MAX_JSON_SIZE:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail="Request too large"
        )


# ============================================
# SECURITY HEADERS MIDDLEWARE
# ============================================

async def add_security_headers(request: Request, call_next: Callable):
    """Добавляет security headers ко всем ответам."""
    response = await call_next(request)

    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

    # Swagger UI в debug режиме тянет скрипты с CDN
    if not settings.DEBUG:
        response.headers["Content-Security-Policy"] = "default-src 'self'"

    return response

