"""FastAPI application entry-point for the Portfolio CMS API.

Configures CORS, rate limiting, error envelopes, request logging, lifespan
startup/shutdown, and mounts all route modules.
Run with:  uvicorn portfolio_cms.api.main:app --reload --host 0.0.0.0 --port 8000
"""

import logging
import time
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from sqlalchemy import text

from portfolio_cms.api.errors import register_exception_handlers
from portfolio_cms.api.limiter import limiter
from portfolio_cms.api.routes import (
    analytics,
    auth_api,
    blogs,
    contact,
    education,
    experience,
    health,
    images,
    portfolio,
    pricing,
    projects,
    skills,
    social,
    users,
)
from portfolio_cms.core.config import settings
from portfolio_cms.core.database import async_engine
from portfolio_cms.core.redis import close_redis
from portfolio_cms.core.utils.logging_config import configure_logging, get_logger

logger = logging.getLogger(__name__)
request_log = get_logger("http")


# ---------------------------------------------------------------------------
# Lifespan -- run once at startup / shutdown
# ---------------------------------------------------------------------------
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Test the database connection on startup; dispose engine on shutdown."""
    configure_logging()
    try:
        async with async_engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        logger.info("Database connection verified")
    except Exception as exc:
        logger.error("Database connection failed: %s", exc)

    Path(settings.upload_dir, "images").mkdir(parents=True, exist_ok=True)

    yield
    # Shutdown
    await close_redis()
    await async_engine.dispose()
    logger.info("Database engine disposed")


# ---------------------------------------------------------------------------
# Application factory
# ---------------------------------------------------------------------------
openapi_tags = [
    {"name": "Health", "description": "Health check endpoints"},
    {"name": "Auth", "description": "Signup, login, token refresh and profile"},
    {"name": "Users", "description": "User administration and public profiles"},
    {"name": "Portfolio", "description": "Portfolio settings and public portfolio data"},
    {"name": "Projects", "description": "Portfolio projects"},
    {"name": "Skills", "description": "Skills and skill categories"},
    {"name": "Experience", "description": "Work experience"},
    {"name": "Education", "description": "Education history"},
    {"name": "Blogs", "description": "Blog posts and categories"},
    {"name": "Images", "description": "Image upload and serving"},
    {"name": "Social", "description": "Social profile links"},
    {"name": "Contact", "description": "Contact-form messages"},
    {"name": "Pricing", "description": "Plans, subscriptions and payments"},
    {"name": "Analytics", "description": "Page-view tracking and summaries"},
]

app = FastAPI(
    title="Portfolio CMS API",
    version="0.1.0",
    description=(
        "REST API for the Portfolio CMS. Serves the admin dashboard and the "
        "public portfolio site."
    ),
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=openapi_tags,
)

# Rate limiting; the middleware applies the default limits to undecorated routes
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)

register_exception_handlers(app)


# ---------------------------------------------------------------------------
# Middleware
# ---------------------------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    request_id = request.headers.get("x-request-id") or uuid.uuid4().hex
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(request_id=request_id)
    started = time.perf_counter()
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    request_log.info(
        "request_completed",
        method=request.method,
        path=request.url.path,
        status=response.status_code,
        duration_ms=round((time.perf_counter() - started) * 1000, 2),
    )
    return response


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
# Health endpoints live at the root (no prefix)
app.include_router(health.router)

# All data endpoints sit under /api/v1
for module in (
    auth_api,
    users,
    portfolio,
    projects,
    skills,
    experience,
    education,
    blogs,
    images,
    social,
    contact,
    pricing,
    analytics,
):
    app.include_router(module.router, prefix="/api/v1")
