# app/routers/scans.py
"""Scan history from the rfid_scans table (database scan log sink)."""

from datetime import datetime
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy import func
from sqlalchemy.orm import Session
from app.database import get_db
from app.models.scan_log import ScanLog
from app.schemas.scan_log import ScanLogOut, ScanStatsOut

router = APIRouter()


@router.get("/rfid/scans", response_model=list[ScanLogOut], summary="Recent RFID scans")
def list_scans(tag_id: Optional[str] = None, limit: int = Query(10, ge=1, le=500),
               db: Session = Depends(get_db)):
    """Newest first, optionally for one tag."""
    q = db.query(ScanLog)
    if tag_id:
        q = q.filter(ScanLog.tag_id == tag_id)
    return q.order_by(ScanLog.scan_timestamp.desc()).limit(limit).all()


@router.get("/rfid/scans/stats", response_model=ScanStatsOut, summary="Scan counts per result")
def scan_stats(start: Optional[datetime] = None, end: Optional[datetime] = None,
               db: Session = Depends(get_db)):
    """Count and average response time per scan result, optionally within [start, end]."""
    q = db.query(
        ScanLog.scan_result,
        func.count(ScanLog.id),
        func.avg(ScanLog.response_time),
    )
    if start:
        q = q.filter(ScanLog.scan_timestamp >= start)
    if end:
        q = q.filter(ScanLog.scan_timestamp <= end)
    rows = q.group_by(ScanLog.scan_result).all()

    results = [
        {"scan_result": result, "count": count,
         "avg_response_time": round(float(avg), 2) if avg is not None else None}
        for result, count, avg in rows
    ]
    return {"total_scans": sum(r["count"] for r in results), "results": results}
