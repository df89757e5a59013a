"""Health-check and table-status endpoints."""

from datetime import datetime, timezone

from fastapi import APIRouter
from sqlalchemy import func, select, text

from portfolio_cms.api.deps import DbSession
from portfolio_cms.core.models import Blog, Portfolio, Project, User

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check(session: DbSession) -> dict:
    """Basic liveness check -- verifies the database connection."""
    db_status = "disconnected"
    try:
        await session.execute(text("SELECT 1"))
        db_status = "connected"
    except Exception as exc:
        db_status = f"disconnected: {exc}"

    return {
        "status": "ok" if db_status == "connected" else "degraded",
        "database": db_status,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/health/data-status")
async def data_status(session: DbSession) -> dict:
    """Return row counts for the core content tables."""
    table_counts: dict[str, int] = {}
    for model in (User, Portfolio, Project, Blog):
        result = await session.execute(select(func.count()).select_from(model))
        table_counts[model.__tablename__] = result.scalar_one()

    return {
        "table_counts": table_counts,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
