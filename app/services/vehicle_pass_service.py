# app/services/vehicle_pass_service.py
"""
Vehicle pass lookup by RFID tag.
Used by the scanner endpoint to feed the tag validator.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Awaitable, Callable, Optional
from sqlalchemy.orm import Session
from app.models.vehicle_pass import VehiclePassApplication
from app.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class VehiclePassRecord:
    application_id: int
    tag_id: str
    application_status: str          # pending | approved | completed | rejected
    rfid_active: Optional[bool]      # None = no RFID info on the application
    rfid_valid_until: Optional[datetime]
    rfid_assigned_at: Optional[datetime]
    plate_number: str
    vehicle_type: str
    driver_name: Optional[str] = None
    linked_user_id: Optional[int] = None


TagLookupFn = Callable[[str], Awaitable[Optional[VehiclePassRecord]]]


def to_record(application: VehiclePassApplication) -> VehiclePassRecord:
    return VehiclePassRecord(
        application_id=application.id,
        tag_id=application.rfid_tag_id,
        application_status=application.status,
        rfid_active=application.rfid_is_active,
        rfid_valid_until=application.rfid_valid_until,
        rfid_assigned_at=application.rfid_assigned_at,
        plate_number=application.plate_number,
        vehicle_type=application.vehicle_type,
        driver_name=application.driver_name,
        linked_user_id=application.linked_user_id,
    )


def find_pass_by_tag(db: Session, tag_id: str) -> Optional[VehiclePassRecord]:
    """
    Exact match on the assigned tag. Tag ids are not unique at the DB level,
    so the oldest matching application wins. Returns None if nothing matches.
    """
    application = (
        db.query(VehiclePassApplication)
        .filter(VehiclePassApplication.rfid_tag_id == tag_id)
        .order_by(VehiclePassApplication.id.asc())
        .first()
    )
    return to_record(application) if application else None


def make_tag_lookup(db: Session) -> TagLookupFn:
    """Bind a DB session into the async lookup the validator expects."""
    async def lookup(tag_id: str) -> Optional[VehiclePassRecord]:
        return find_pass_by_tag(db, tag_id)
    return lookup
