"""Liveness and readiness endpoints.

/health reports dependency status but always answers 200; /ready answers
503 when a configured database is unreachable so the load balancer can
take the instance out of rotation without restarting it.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Response, status
from sqlalchemy.exc import SQLAlchemyError

from app.db import engine as db

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


async def _database_status() -> str:
    if db.engine is None:
        return "not_configured"
    try:
        await db.ping()
    except (SQLAlchemyError, OSError) as e:
        logger.warning("Database ping failed: %s", type(e).__name__)
        return "degraded"
    return "ok"


@router.get("/health")
async def health() -> dict:
    checks = {"database": await _database_status()}
    overall = "degraded" if "degraded" in checks.values() else "ok"
    return {"status": overall, "checks": checks}


@router.get("/ready")
async def ready() -> Response:
    if await _database_status() == "degraded":
        return Response(status_code=status.HTTP_503_SERVICE_UNAVAILABLE)
    return Response(status_code=status.HTTP_200_OK)
