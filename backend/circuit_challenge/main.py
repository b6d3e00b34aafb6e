"""
Circuit Challenge - FastAPI Application

Главная точка входа: HTTP-обёртка над генератором пазлов.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

from .config import settings
from .api import puzzles
from .middleware.security import limiter, add_security_headers
from .services.difficulty import PRESETS


VERSION = "1.0.0"

logger = logging.getLogger(__name__)


# ============================================
# LOGGING
# ============================================

def configure_logging(level: Optional[str] = None) -> None:
    """Настройка логов один раз на процесс."""
    logging.basicConfig(
        level=level or settings.LOG_LEVEL,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


# ============================================
# LIFESPAN
# ============================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifecycle events."""
    configure_logging()

    print(f"🚀 Starting {settings.APP_NAME}...")
    print(f"🌍 Environment: {settings.ENVIRONMENT}")
    print(f"🐛 Debug mode: {settings.DEBUG}")
    print(f"🧩 Presets loaded: {len(PRESETS)}")

    yield

    print("🛑 Shutting down...")


# ============================================
# APP
# ============================================

app = FastAPI(
    title=settings.APP_NAME,
    description="Circuit Challenge API - arithmetic path puzzle generator",
    version=VERSION,
    lifespan=lifespan,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
)

# Rate limiter state
app.state.limiter = limiter


# ============================================
# MIDDLEWARE
# ============================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.middleware("http")(add_security_headers)


# ============================================
# ERROR HANDLERS
# ============================================

@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    """Handler для rate limit ошибок."""
    return JSONResponse(
        status_code=429,
        content={"detail": "Too many requests. Please try again later."}
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Глобальный обработчик ошибок."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)

    # В production не показываем детали ошибок
    detail = str(exc) if settings.DEBUG else "Internal server error"
    return JSONResponse(
        status_code=500,
        content={"detail": detail}
    )


# ============================================
# ROUTES
# ============================================

api_prefix = settings.API_PREFIX

app.include_router(puzzles.router, prefix=api_prefix)


# ============================================
# HEALTH CHECK
# ============================================

@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "ok",
        "app": settings.APP_NAME,
        "environment": settings.ENVIRONMENT,
        "version": VERSION
    }


@app.get(f"{api_prefix}/health")
async def api_health_check():
    """API health check."""
    return {
        "status": "ok",
        "version": VERSION,
        "debug": settings.DEBUG,
        "rate_limit": settings.RATE_LIMIT_ENABLED,
        "max_attempts": settings.GENERATION_MAX_ATTEMPTS,
    }


# ============================================
# ROOT
# ============================================

@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": settings.APP_NAME,
        "version": VERSION,
        "docs": "/docs" if settings.DEBUG else None,
        "health": "/health",
    }


# ============================================
# RUN
# ============================================

if __name__ == "__main__":
    import uvicorn
    print(f"🚀 Starting {settings.APP_NAME}...")
    print("📍 http://localhost:8000")
    print("📖 Docs: http://localhost:8000/docs" if settings.DEBUG else "")
    uvicorn.run(
        "circuit_challenge.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
    )
