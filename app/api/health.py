"""
Health, readiness and flag inspection endpoints
"""

import time
from datetime import datetime, timezone

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from app.core.config import config
from app.db import postgres
from app.flags.store import flag_store

router = APIRouter()

# Track service start time
start_time = time.time()


@router.get("/health")
def health_check():
    """Liveness check - the process is up"""
    return {
        "status": "ok",
        "service": config.service_name,
        "version": config.service_version,
        "uptime_seconds": round(time.time() - start_time, 2),
    }


@router.get("/ready")
async def readiness_check():
    """Readiness check - the database answers"""
    if not await postgres.ping():
        return JSONResponse(
            status_code=503,
            content={"status": "not ready", "service": config.service_name, "checks": {"database": "unavailable"}},
        )
    return {
        "status": "ready",
        "service": config.service_name,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "checks": {"database": "ok"},
    }


@router.get("/_flags")
def current_flags():
    """Current feature flag values as seen by request handlers"""
    snapshot = flag_store.current()
    return {"offline": snapshot.offline, "logLevel": snapshot.log_level}
