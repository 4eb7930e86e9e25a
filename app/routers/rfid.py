# app/routers/rfid.py
"""
Scanner endpoint.
GET /rfid/scanId?tagId=... validates a tag and answers with a bare status code:
200 granted | 400 no tag | 404 unknown | 423 inactive | 409 not completed | 410 expired | 500 fault.
Details go to the scan log sink, never to the scanner.
"""

from datetime import datetime
from typing import Optional
from fastapi import APIRouter, Depends, Query, Request, Response
from sqlalchemy.orm import Session
from app.database import get_db
from app.services.scan_recorder import ScanRecorder
from app.services.tag_validator import validate_tag, system_error_outcome
from app.services.vehicle_pass_service import make_tag_lookup
from app.utils.logger import get_logger

router = APIRouter()
logger = get_logger(__name__)


def get_scan_recorder(request: Request) -> ScanRecorder:
    """FastAPI dependency: the recorder built at startup."""
    return request.app.state.scan_recorder


@router.get("/rfid/scanId", summary="Scanner: validate an RFID tag", response_class=Response)
async def scan_tag(
    tag_id: Optional[str] = Query(None, alias="tagId"),
    db: Session = Depends(get_db),
    recorder: ScanRecorder = Depends(get_scan_recorder),
):
    if not tag_id:
        return Response(status_code=400)

    started_at = datetime.utcnow()
    try:
        outcome = await validate_tag(tag_id, started_at, make_tag_lookup(db))
    except Exception as e:
        logger.error(f"[SCAN] tag={tag_id} lookup failed: {e}", exc_info=True)
        await recorder.record(system_error_outcome(e), tag_id, started_at, datetime.utcnow())
        return Response(status_code=500)

    plate = outcome.vehicle.plate_number if outcome.vehicle else "N/A"
    logger.info(f"[SCAN] tag={tag_id} plate={plate} → {outcome.status_code} "
                f"{outcome.error_code or outcome.scan_message}")

    await recorder.record(outcome, tag_id, started_at, datetime.utcnow())
    return Response(status_code=outcome.status_code)
