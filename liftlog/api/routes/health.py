"""Liveness, database and Prometheus endpoints mounted on both apps."""
from fastapi import APIRouter, Request
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST

from liftlog.core.logging import get_logger
from liftlog.core.metrics import get_metrics
from liftlog.db.database import check_database

logger = get_logger(__name__)
router = APIRouter()


@router.get("/metrics", include_in_schema=False)
async def prometheus_metrics():
    return Response(content=get_metrics(), media_type=CONTENT_TYPE_LATEST)


@router.get("/health", include_in_schema=False)
async def health_check(request: Request):
    return {"status": "healthy", "app": request.app.title}


@router.get("/health/db", include_in_schema=False)
async def database_health_check(request: Request):
    if await check_database(request.app.state.engine):
        return {"status": "healthy", "database": "connected"}
    logger.error("database_health_check_failed")
    return {"status": "unhealthy", "database": "disconnected"}
