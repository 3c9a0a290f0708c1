"""Health, readiness, and liveness endpoints (no auth, no rate limit)."""

import time
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from todo_api.cache import CacheService, get_cache
from todo_api.config import get_settings
from todo_api.database import check_database, get_db
from todo_api.rate_limit import limiter

router = APIRouter(tags=["Health"])

_started_at = time.monotonic()


def _uptime() -> float:
    return round(time.monotonic() - _started_at, 3)


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def _cache_status(cache: CacheService) -> dict:
    if not cache.enabled:
        return {"status": "disabled"}
    if cache.ping():
        return {"status": "healthy"}
    return {"status": "unhealthy", "error": "Cache not reachable"}


@router.get("/health")
@router.get("/", include_in_schema=False)
@limiter.exempt
def health_check(
    request: Request,
    db: Session = Depends(get_db),
    cache: CacheService = Depends(get_cache),
) -> JSONResponse:
    """Report uptime and backing service status. 503 if the database is down."""
    settings = get_settings()
    database_ok = check_database(db)
    services = {
        "database": {"status": "healthy"} if database_ok else {"status": "unhealthy", "error": "Database not reachable"},
        "cache": _cache_status(cache),
    }
    body = {
        "success": database_ok,
        "data": {
            "uptime": _uptime(),
            "message": "OK" if database_ok else "Degraded",
            "timestamp": _timestamp(),
            "env": settings.APP_ENV,
            "version": settings.APP_VERSION,
            "services": services,
        },
    }
    return JSONResponse(status_code=200 if database_ok else 503, content=body)


@router.get("/health/ready")
@limiter.exempt
def readiness_check(request: Request, db: Session = Depends(get_db)) -> JSONResponse:
    """Ready once the database answers."""
    if check_database(db):
        return JSONResponse(
            status_code=200,
            content={"success": True, "message": "Service is ready", "timestamp": _timestamp()},
        )
    return JSONResponse(
        status_code=503,
        content={
            "success": False,
            "message": "Service is not ready",
            "timestamp": _timestamp(),
            "reason": "Database connection not ready",
        },
    )


@router.get("/health/live")
@limiter.exempt
def liveness_check(request: Request) -> dict:
    """Alive if this handler runs at all."""
    return {"success": True, "message": "Service is alive", "timestamp": _timestamp(), "uptime": _uptime()}
