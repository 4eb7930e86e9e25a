# app/schemas/scan_log.py
from pydantic import BaseModel
from datetime import datetime
from typing import Optional


class ScanLogOut(BaseModel):
    scan_id: str
    tag_id: Optional[str]
    application_id: Optional[int]
    user_id: Optional[int]
    scan_type: str
    direction: str
    scan_result: str
    scan_message: Optional[str]
    error_code: Optional[str]
    error_message: Optional[str]
    response_time: Optional[int]      # ms
    vehicle: Optional[dict]
    rfid_validity: Optional[dict]
    scan_timestamp: datetime
    logged_at: Optional[datetime]

    class Config:
        from_attributes = True


class ScanResultStatsOut(BaseModel):
    scan_result: str
    count: int
    avg_response_time: Optional[float]   # ms


class ScanStatsOut(BaseModel):
    total_scans: int
    results: list[ScanResultStatsOut]
