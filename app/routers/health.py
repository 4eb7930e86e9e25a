# app/routers/health.py
"""
System health check endpoint.
Returns status of backend + DB + scan log sink.
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session
from sqlalchemy import text
from app.database import get_db
from app.utils.logger import get_logger
from datetime import datetime

router = APIRouter()
logger = get_logger(__name__)


@router.get("/health", summary="System health check")
async def health_check(request: Request, db: Session = Depends(get_db)):
    """
    Returns:
    - Backend status
    - Database connectivity
    - Scan log sink reachability and recorder counters
    """
    result = {
        "status": "ok",
        "timestamp": datetime.utcnow().isoformat(),
        "backend": "ok",
        "database": "unknown",
        "scan_log": {},
    }

    try:
        db.execute(text("SELECT 1"))
        result["database"] = "ok"
    except Exception as e:
        logger.warning(f"[HEALTH] Database check failed: {e}")
        result["database"] = f"error: {str(e)}"
        result["status"] = "degraded"

    sink = getattr(request.app.state, "scan_log_sink", None)
    recorder = getattr(request.app.state, "scan_recorder", None)
    if sink is None:
        result["scan_log"]["sink"] = "not configured"
        result["status"] = "degraded"
    else:
        reachable = await sink.ping()
        result["scan_log"]["sink"] = f"{sink.name}: {'ok' if reachable else 'unreachable'}"
        if not reachable:
            result["status"] = "degraded"
    if recorder is not None:
        result["scan_log"].update(recorder.stats)

    return result
